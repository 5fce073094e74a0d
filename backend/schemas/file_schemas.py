from typing import Optional

from pydantic import BaseModel, field_validator

from schemas.base import CamelModel
from utils.file_utils import ALLOWED_CONTENT_TYPES, MAX_UPLOAD_BYTES


class FileUpload(BaseModel):
    """Upload metadata checked before anything is sent to object storage."""
    size: int
    content_type: Optional[str] = None

    @field_validator("size")
    def validate_size(cls, v):
        if v > MAX_UPLOAD_BYTES:
            raise ValueError("File size should be less than 5MB")
        return v

    @field_validator("content_type")
    def validate_content_type(cls, v):
        if v not in ALLOWED_CONTENT_TYPES:
            raise ValueError("File type should be JPEG or PNG")
        return v


class UploadResponse(CamelModel):
    url: str
    download_url: str
    pathname: str
    content_type: Optional[str] = None
    content_disposition: str


class PresignRequest(CamelModel):
    key: str
    content_type: str


class PresignResponse(BaseModel):
    url: str

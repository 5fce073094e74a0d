from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from pydantic import ValidationError

from core.config import settings
from core.security import Subject, get_current_subject, get_optional_subject
from core.storage import generate_presigned_get_url, generate_presigned_put_url, upload_file_to_s3
from schemas.file_schemas import FileUpload, PresignRequest, PresignResponse, UploadResponse
from utils.file_utils import validation_messages
from utils.logger import get_logger

logger = get_logger("backend.api.files")

router = APIRouter(prefix="/api/files", tags=["files"])

# ------ Upload File -----
@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    """Validate an image upload (JPEG/PNG, at most 5MB) and store it in the bucket."""
    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # Starlette records the size while spooling; only read the body when it did not
    contents = None
    size = file.size
    if size is None:
        contents = await file.read()
        size = len(contents)

    try:
        FileUpload(size=size, content_type=file.content_type)
    except ValidationError as e:
        message = ", ".join(validation_messages(e))
        logger.warning("Upload rejected", extra={"file_name": file.filename, "reason": message})
        raise HTTPException(status_code=400, detail=message)

    if contents is None:
        contents = await file.read()

    logger.info("Uploading to S3", extra={
        "bucket": settings.BUCKET_NAME,
        "key": file.filename,
        "user_id": subject.properties.id,
    })

    try:
        data = await upload_file_to_s3(
            bucket=settings.BUCKET_NAME,
            key=file.filename,
            file=contents,
            content_type=file.content_type,
        )
    except (BotoCoreError, ClientError):
        raise HTTPException(status_code=500, detail="Upload failed")

    return data

# ------ Presigned URLs -----
@router.post("/presign", response_model=PresignResponse)
async def presign_upload(body: PresignRequest, subject: Subject = Depends(get_current_subject)):
    url = generate_presigned_put_url(settings.BUCKET_NAME, body.key, body.content_type)
    logger.info("Presigned PUT URL issued", extra={"key": body.key, "user_id": subject.properties.id})
    return PresignResponse(url=url)


@router.get("/presign", response_model=PresignResponse)
async def presign_download(
    key: Optional[str] = Query(None),
    subject: Subject = Depends(get_current_subject),
):
    if not key:
        raise HTTPException(status_code=400, detail="Missing key")
    url = generate_presigned_get_url(settings.BUCKET_NAME, key)
    return PresignResponse(url=url)

from typing import Literal, Optional

from schemas.base import CamelModel, UTCDateTime

BlockKind = Literal["text", "code", "image"]


class DocumentCreate(CamelModel):
    title: str
    content: Optional[str] = None
    kind: BlockKind = "text"


class DocumentResponse(CamelModel):
    id: str
    created_at: UTCDateTime
    title: str
    content: Optional[str] = None
    kind: BlockKind
    user_id: str


class DocumentRevertRequest(CamelModel):
    timestamp: UTCDateTime


class BlockCreateRequest(CamelModel):
    title: str
    kind: BlockKind = "text"


class BlockUpdateRequest(CamelModel):
    description: str


class SuggestionResponse(CamelModel):
    id: str
    document_id: str
    document_created_at: UTCDateTime
    original_text: str
    suggested_text: str
    description: Optional[str] = None
    is_resolved: bool
    user_id: str
    created_at: UTCDateTime

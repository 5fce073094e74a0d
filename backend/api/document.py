from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import Subject, get_optional_subject
from schemas.document_schemas import DocumentCreate, DocumentResponse, DocumentRevertRequest
from utils.logger import get_logger
from utils.permissions import check_ownership
from utils.queries import delete_documents_by_id_after_timestamp, get_documents_by_id, save_document

logger = get_logger("backend.api.document")

router = APIRouter(prefix="/api/document", tags=["documents"])


def _require(id: Optional[str], subject: Optional[Subject]) -> Subject:
    """Parameter check first, then authentication."""
    if not id:
        raise HTTPException(status_code=400, detail="Missing id")
    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return subject

# ------ Get Document Versions -----
@router.get("", response_model=List[DocumentResponse])
async def get_document(
    id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    subject = _require(id, subject)

    documents = await get_documents_by_id(db, id)
    if not documents:
        raise HTTPException(status_code=404, detail="Not Found")

    check_ownership(documents[0], subject)

    logger.info("Document versions retrieved", extra={"document_id": id, "count": len(documents)})
    return documents

# ------ Save Document Version -----
@router.post("", response_model=DocumentResponse)
async def create_document(
    body: DocumentCreate,
    id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    subject = _require(id, subject)

    document = await save_document(
        db,
        id=id,
        title=body.title,
        kind=body.kind,
        content=body.content,
        user_id=subject.properties.id,
    )
    logger.info("Document version saved", extra={"document_id": id, "kind": body.kind})
    return document

# ------ Revert Document -----
@router.patch("")
async def revert_document(
    body: DocumentRevertRequest,
    id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    """Delete every version (and its suggestions) newer than the given timestamp."""
    subject = _require(id, subject)

    documents = await get_documents_by_id(db, id)
    if not documents:
        raise HTTPException(status_code=404, detail="Not Found")

    check_ownership(documents[0], subject)

    deleted = await delete_documents_by_id_after_timestamp(db, id=id, timestamp=body.timestamp)
    logger.info("Document versions deleted", extra={"document_id": id, "deleted": deleted})

    return PlainTextResponse("Deleted", status_code=200)

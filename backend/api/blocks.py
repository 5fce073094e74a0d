import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import Subject, get_current_subject, get_optional_subject
from llm.llm import generate_block_content, generate_suggestions, update_block_content
from models.document import Document
from schemas.document_schemas import (
    BlockCreateRequest,
    BlockUpdateRequest,
    DocumentResponse,
    SuggestionResponse,
)
from utils.logger import get_logger
from utils.permissions import check_ownership
from utils.queries import (
    build_suggestion,
    get_documents_by_id,
    get_suggestions_by_document_id,
    save_document,
    save_suggestions,
)

logger = get_logger("backend.api.blocks")

router = APIRouter(prefix="/api", tags=["blocks"])


async def _latest_owned_version(db: AsyncSession, id: str, subject: Subject) -> Document:
    documents = await get_documents_by_id(db, id)
    if not documents:
        raise HTTPException(status_code=404, detail="Document not found")
    check_ownership(documents[0], subject)
    return documents[-1]

# ------ Create Block -----
@router.post("/blocks", response_model=DocumentResponse)
async def create_block(
    body: BlockCreateRequest,
    model_id: Optional[str] = Query(None, alias="modelId"),
    db: AsyncSession = Depends(get_db),
    subject: Subject = Depends(get_current_subject),
):
    """Draft a new document with the model and save it as its first version."""
    document_id = str(uuid.uuid4())
    logger.info("Creating block", extra={"document_id": document_id, "kind": body.kind})

    content = await generate_block_content(body.title, body.kind, model_id)

    return await save_document(
        db,
        id=document_id,
        title=body.title,
        kind=body.kind,
        content=content,
        user_id=subject.properties.id,
    )

# ------ Update Block -----
@router.post("/blocks/{document_id}/update", response_model=DocumentResponse)
async def update_block(
    document_id: str,
    body: BlockUpdateRequest,
    model_id: Optional[str] = Query(None, alias="modelId"),
    db: AsyncSession = Depends(get_db),
    subject: Subject = Depends(get_current_subject),
):
    """Rewrite the latest version following the description; saved as a new version."""
    latest = await _latest_owned_version(db, document_id, subject)

    content = await update_block_content(latest.kind, latest.content, body.description, model_id)

    document = await save_document(
        db,
        id=document_id,
        title=latest.title,
        kind=latest.kind,
        content=content,
        user_id=subject.properties.id,
    )
    logger.info("Block updated", extra={"document_id": document_id})
    return document

# ------ Request Suggestions -----
@router.post("/blocks/{document_id}/suggestions", response_model=List[SuggestionResponse])
async def request_suggestions(
    document_id: str,
    model_id: Optional[str] = Query(None, alias="modelId"),
    db: AsyncSession = Depends(get_db),
    subject: Subject = Depends(get_current_subject),
):
    latest = await _latest_owned_version(db, document_id, subject)
    if latest.kind != "text":
        raise HTTPException(status_code=400, detail="Suggestions are only available for text documents")
    if not latest.content:
        return []

    items = await generate_suggestions(latest.content, model_id)
    suggestions = [build_suggestion(latest, item, subject.properties.id) for item in items]

    if suggestions:
        await save_suggestions(db, suggestions)
    logger.info("Suggestions saved", extra={"document_id": document_id, "count": len(suggestions)})
    return suggestions

# ------ Get Suggestions -----
@router.get("/suggestions", response_model=List[SuggestionResponse])
async def get_suggestions(
    document_id: Optional[str] = Query(None, alias="documentId"),
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    if not document_id:
        raise HTTPException(status_code=400, detail="Missing documentId")
    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    suggestions = await get_suggestions_by_document_id(db, document_id, user_id=subject.properties.id)
    return suggestions or []

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import Subject, get_optional_subject
from schemas.chat_schema import VoteRequest, VoteResponse
from utils.logger import get_logger
from utils.queries import get_votes_by_chat_id, vote_message

logger = get_logger("backend.api.vote")

router = APIRouter(prefix="/api", tags=["vote"])


@router.get("/vote", response_model=List[VoteResponse])
async def get_votes(
    chat_id: Optional[str] = Query(None, alias="chatId"),
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    if not chat_id:
        raise HTTPException(status_code=400, detail="chatId is required")

    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    return await get_votes_by_chat_id(db, chat_id)


@router.patch("/vote")
async def vote(
    body: VoteRequest,
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    if not body.chat_id or not body.message_id or not body.type:
        raise HTTPException(status_code=400, detail="messageId and type are required")

    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    await vote_message(db, chat_id=body.chat_id, message_id=body.message_id, type=body.type)
    logger.info("Message voted", extra={
        "chat_id": body.chat_id,
        "message_id": body.message_id,
        "type": body.type,
    })

    return PlainTextResponse("Message voted", status_code=200)

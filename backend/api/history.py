from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import Subject, get_current_subject
from schemas.chat_schema import ChatResponse
from utils.logger import get_logger
from utils.queries import get_chats_by_user_id

logger = get_logger("backend.api.history")

router = APIRouter(prefix="/api", tags=["history"])


@router.get("/history", response_model=List[ChatResponse])
async def get_history(
    db: AsyncSession = Depends(get_db),
    subject: Subject = Depends(get_current_subject),
):
    logger.info("Fetching chat history", extra={"user_id": subject.properties.id})
    chats = await get_chats_by_user_id(db, subject.properties.id)
    logger.info("Chat history retrieved", extra={"user_id": subject.properties.id, "count": len(chats)})
    return chats

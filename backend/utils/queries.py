"""
Query layer: one function per store operation.

Every function catches at the store boundary, logs a static message and
re-raises, so route handlers decide how a failure maps to HTTP.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import hash_password
from models.chat import Chat, Message, Vote, VISIBILITY_TYPES, utcnow
from models.document import Document, Suggestion
from models.user import User
from schemas.base import as_utc
from utils.logger import get_logger

logger = get_logger("backend.utils.queries")


class RecordNotFound(LookupError):
    """A record looked up by identifier does not exist."""


# ------ Users -----
async def get_user(db: AsyncSession, email: str) -> List[User]:
    try:
        result = await db.execute(select(User).filter(User.email == email))
        return list(result.scalars().all())
    except Exception:
        logger.error("Failed to get user from database")
        raise


async def create_user(db: AsyncSession, email: str, password: str) -> User:
    user = User(id=str(uuid.uuid4()), email=email, password=hash_password(password))
    try:
        db.add(user)
        await db.commit()
        return user
    except Exception:
        await db.rollback()
        logger.error("Failed to create user in database")
        raise


# ------ Chats -----
async def save_chat(db: AsyncSession, id: str, user_id: str, title: str) -> Chat:
    chat = Chat(id=id, created_at=utcnow(), user_id=user_id, title=title, visibility="private")
    try:
        db.add(chat)
        await db.commit()
        return chat
    except Exception:
        await db.rollback()
        logger.error("Failed to save chat in database")
        raise


async def delete_chat_by_id(db: AsyncSession, id: str) -> int:
    """Delete a chat with its votes and messages. Returns the number of chats deleted."""
    try:
        await db.execute(delete(Vote).where(Vote.chat_id == id))
        await db.execute(delete(Message).where(Message.chat_id == id))
        result = await db.execute(delete(Chat).where(Chat.id == id))
        await db.commit()
        return result.rowcount
    except Exception:
        await db.rollback()
        logger.error("Failed to delete chat by id from database")
        raise


async def get_chats_by_user_id(db: AsyncSession, id: str) -> List[Chat]:
    try:
        result = await db.execute(
            select(Chat).filter(Chat.user_id == id).order_by(Chat.created_at.desc())
        )
        return list(result.scalars().all())
    except Exception:
        logger.error("Failed to get chats by user from database")
        raise


async def get_chat_by_id(db: AsyncSession, id: str, throw_if_not_found: bool = True) -> Optional[Chat]:
    try:
        result = await db.execute(select(Chat).filter(Chat.id == id))
        chat = result.scalar_one_or_none()
        if chat is None and throw_if_not_found:
            raise RecordNotFound("Chat not found")
        return chat
    except Exception:
        logger.error("Failed to get chat by id from database")
        raise


async def update_chat_visibility_by_id(db: AsyncSession, chat_id: str, visibility: str) -> int:
    if visibility not in VISIBILITY_TYPES:
        raise ValueError(f"Invalid visibility: {visibility}")
    try:
        result = await db.execute(
            update(Chat).where(Chat.id == chat_id).values(visibility=visibility)
        )
        await db.commit()
        return result.rowcount
    except Exception:
        await db.rollback()
        logger.error("Failed to update chat visibility in database")
        raise


# ------ Messages -----
async def save_messages(db: AsyncSession, messages: Sequence[Message]) -> List[Message]:
    try:
        db.add_all(messages)
        await db.commit()
        return list(messages)
    except Exception as e:
        await db.rollback()
        logger.error("Failed to save messages in database", extra={"error": str(e)})
        raise


async def get_messages_by_chat_id(db: AsyncSession, id: str) -> List[Message]:
    try:
        result = await db.execute(
            select(Message).filter(Message.chat_id == id).order_by(Message.created_at.asc())
        )
        return list(result.scalars().all())
    except Exception as e:
        logger.error("Failed to get messages by chat id from database", extra={"error": str(e)})
        raise


async def get_message_by_id(db: AsyncSession, id: str) -> Message:
    try:
        result = await db.execute(select(Message).filter(Message.id == id))
        message = result.scalar_one_or_none()
        if message is None:
            raise RecordNotFound("Message not found")
        return message
    except Exception:
        logger.error("Failed to get message by id from database")
        raise


async def delete_messages_by_chat_id_after_timestamp(
    db: AsyncSession, chat_id: str, timestamp: datetime
) -> int:
    """Delete messages created at or after timestamp. Votes on them are left in place."""
    timestamp = as_utc(timestamp)
    try:
        result = await db.execute(
            delete(Message)
            .where(Message.chat_id == chat_id, Message.created_at >= timestamp)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount
    except Exception:
        await db.rollback()
        logger.error("Failed to delete messages by id after timestamp from database")
        raise


# ------ Votes -----
async def vote_message(db: AsyncSession, chat_id: str, message_id: str, type: str) -> Vote:
    if type not in ("up", "down"):
        raise ValueError(f"Invalid vote type: {type}")
    is_upvoted = type == "up"
    try:
        result = await db.execute(select(Vote).filter(Vote.message_id == message_id))
        existing_vote = result.scalars().first()

        if existing_vote:
            await db.execute(
                update(Vote)
                .where(Vote.message_id == message_id, Vote.chat_id == chat_id)
                .values(is_upvoted=is_upvoted)
            )
            await db.commit()
            await db.refresh(existing_vote)
            return existing_vote

        vote = Vote(chat_id=chat_id, message_id=message_id, is_upvoted=is_upvoted)
        db.add(vote)
        await db.commit()
        return vote
    except Exception as e:
        await db.rollback()
        logger.error("Failed to upvote message in database", extra={"error": str(e)})
        raise


async def get_votes_by_chat_id(db: AsyncSession, id: str) -> List[Vote]:
    try:
        result = await db.execute(select(Vote).filter(Vote.chat_id == id))
        return list(result.scalars().all())
    except Exception as e:
        logger.error("Failed to get votes by chat id from database", extra={"error": str(e)})
        raise


# ------ Documents -----
async def save_document(
    db: AsyncSession,
    id: str,
    title: str,
    kind: str,
    content: Optional[str],
    user_id: str,
) -> Document:
    document = Document(
        id=id,
        title=title,
        kind=kind,
        content=content,
        user_id=user_id,
        created_at=utcnow(),
    )
    try:
        db.add(document)
        await db.commit()
        return document
    except Exception:
        await db.rollback()
        logger.error("Failed to save document in database")
        raise


async def get_documents_by_id(db: AsyncSession, id: str) -> List[Document]:
    try:
        result = await db.execute(
            select(Document).filter(Document.id == id).order_by(Document.created_at.asc())
        )
        return list(result.scalars().all())
    except Exception:
        logger.error("Failed to get document by id from database")
        raise


async def get_document_by_id(db: AsyncSession, id: str) -> Document:
    """First saved version of a document."""
    try:
        result = await db.execute(
            select(Document).filter(Document.id == id).order_by(Document.created_at.asc()).limit(1)
        )
        document = result.scalar_one_or_none()
        if document is None:
            raise RecordNotFound("Document not found")
        return document
    except Exception:
        logger.error("Failed to get document by id from database")
        raise


async def delete_documents_by_id_after_timestamp(db: AsyncSession, id: str, timestamp: datetime) -> int:
    """Drop every version newer than timestamp, with the suggestions made on them."""
    timestamp = as_utc(timestamp)
    try:
        await db.execute(
            delete(Suggestion)
            .where(
                Suggestion.document_id == id,
                Suggestion.document_created_at > timestamp,
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(
            delete(Document)
            .where(Document.id == id, Document.created_at > timestamp)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount
    except Exception:
        await db.rollback()
        logger.error("Failed to delete documents by id after timestamp from database")
        raise


# ------ Suggestions -----
async def save_suggestions(db: AsyncSession, suggestions: Sequence[Suggestion]) -> List[Suggestion]:
    try:
        db.add_all(suggestions)
        await db.commit()
        return list(suggestions)
    except Exception:
        await db.rollback()
        logger.error("Failed to save suggestions in database")
        raise


async def get_suggestions_by_document_id(
    db: AsyncSession, document_id: str, user_id: Optional[str] = None
) -> List[Suggestion]:
    try:
        query = select(Suggestion).filter(Suggestion.document_id == document_id)
        if user_id is not None:
            query = query.filter(Suggestion.user_id == user_id)
        result = await db.execute(query.order_by(Suggestion.created_at.asc()))
        return list(result.scalars().all())
    except Exception:
        logger.error("Failed to get suggestions by document version from database")
        raise


def build_message(chat_id: str, role: str, content, id: Optional[str] = None,
                  created_at: Optional[datetime] = None) -> Message:
    return Message(
        id=id or str(uuid.uuid4()),
        chat_id=chat_id,
        role=role,
        content=content,
        created_at=created_at or utcnow(),
    )


def build_suggestion(document: Document, item: Dict, user_id: str) -> Suggestion:
    return Suggestion(
        id=str(uuid.uuid4()),
        document_id=document.id,
        document_created_at=document.created_at,
        original_text=item["originalSentence"],
        suggested_text=item["suggestedSentence"],
        description=item.get("description"),
        is_resolved=False,
        user_id=user_id,
        created_at=utcnow(),
    )

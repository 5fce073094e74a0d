from typing import Optional

from fastapi import HTTPException

from core.security import Subject
from models.chat import Chat


def check_ownership(record, subject: Subject, detail: str = "Unauthorized") -> None:
    """Raise 401 unless the subject owns the record (compares record.user_id)."""
    if record.user_id != subject.properties.id:
        raise HTTPException(status_code=401, detail=detail)


def is_chat_owner(chat: Chat, subject: Optional[Subject]) -> bool:
    return subject is not None and subject.properties.id == chat.user_id


def check_chat_read_access(chat: Chat, subject: Optional[Subject]) -> bool:
    """
    Public chats are readable by anyone, private chats by their owner only.
    Returns whether the reader is limited to read-only access. Unreadable
    chats answer 404 so their existence is not disclosed.
    """
    if chat.visibility == "private" and not is_chat_owner(chat, subject):
        raise HTTPException(status_code=404, detail="Not Found")
    return not is_chat_owner(chat, subject)

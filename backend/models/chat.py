from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, JSON, String
from core.database import Base

VISIBILITY_TYPES = ("private", "public")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Chat(Base):
    __tablename__ = "chats"

    id = Column(String, primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    title = Column(String, nullable=False)
    user_id = Column(String, nullable=False, index=True)
    visibility = Column(String(10), nullable=False, default="private")

    __table_args__ = (
        CheckConstraint("visibility IN ('private', 'public')", name="ck_chats_visibility"),
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True)
    chat_id = Column(String, nullable=False, index=True)
    role = Column(String(20), nullable=False)  # user | assistant | system | tool
    content = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Vote(Base):
    __tablename__ = "votes"

    chat_id = Column(String, primary_key=True)
    message_id = Column(String, primary_key=True)
    is_upvoted = Column(Boolean, nullable=False)

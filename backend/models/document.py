import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, String, Text
from core.database import Base
from models.chat import utcnow

BLOCK_KINDS = ("text", "code", "image")


class Document(Base):
    """One version of a block. Rows sharing an id form its version history."""
    __tablename__ = "documents"

    id = Column(String, primary_key=True)
    created_at = Column(DateTime(timezone=True), primary_key=True, default=utcnow)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=True)
    kind = Column(String(10), nullable=False, default="text")
    user_id = Column(String, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("kind IN ('text', 'code', 'image')", name="ck_documents_kind"),
    )


class Suggestion(Base):
    __tablename__ = "suggestions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    document_id = Column(String, nullable=False)
    document_created_at = Column(DateTime(timezone=True), nullable=False)
    original_text = Column(Text, nullable=False)
    suggested_text = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    is_resolved = Column(Boolean, nullable=False, default=False)
    user_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_suggestion_document_version", "document_id", "document_created_at"),
    )

from typing import Any, List, Literal, Optional

from pydantic import Field

from schemas.base import CamelModel, UTCDateTime

Visibility = Literal["private", "public"]


class ChatResponse(CamelModel):
    id: str
    created_at: UTCDateTime
    title: str
    user_id: str
    visibility: Visibility


class MessageIn(CamelModel):
    id: str
    role: str
    content: Any
    created_at: Optional[UTCDateTime] = None


class MessageResponse(CamelModel):
    id: str
    chat_id: str
    role: str
    content: Any
    created_at: UTCDateTime


class ChatRequest(CamelModel):
    id: str
    messages: List[MessageIn] = Field(default_factory=list)
    model_id: Optional[str] = None


class VisibilityUpdate(CamelModel):
    visibility: Visibility


class ModelSelection(CamelModel):
    model_id: str


class VoteRequest(CamelModel):
    chat_id: Optional[str] = None
    message_id: Optional[str] = None
    type: Optional[Literal["up", "down"]] = None


class VoteResponse(CamelModel):
    chat_id: str
    message_id: str
    is_upvoted: bool


class ChatPageResponse(CamelModel):
    chat: ChatResponse
    messages: List[MessageResponse]
    votes: List[VoteResponse]
    selected_model_id: str
    selected_visibility_type: Visibility
    is_readonly: bool

import json
import time
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import AsyncSessionLocal, get_db
from core.security import Subject, get_current_subject, get_optional_subject
from llm.llm import generate_title_from_user_message, stream_chat_answer
from llm.models import DEFAULT_MODEL_NAME, get_model
from schemas.chat_schema import (
    ChatPageResponse,
    ChatRequest,
    ChatResponse,
    MessageResponse,
    ModelSelection,
    VisibilityUpdate,
    VoteResponse,
)
from utils.logger import get_logger
from utils.permissions import check_chat_read_access, check_ownership
from utils.queries import (
    build_message,
    delete_chat_by_id,
    delete_messages_by_chat_id_after_timestamp,
    get_chat_by_id,
    get_message_by_id,
    get_messages_by_chat_id,
    get_votes_by_chat_id,
    save_chat,
    save_messages,
    update_chat_visibility_by_id,
)

logger = get_logger("backend.api.chat")

router = APIRouter(prefix="/api", tags=["chat"])

MODEL_COOKIE = "model-id"


def _sse(event: dict) -> str:
    return f"data: {json.dumps(event)}\n\n"

# ------ Chat (streaming) -----
@router.post("/chat")
async def chat_stream(
    body: ChatRequest,
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    """
    Answer the latest user message of a conversation.
    1. Create the chat (titled by the model) on its first message
    2. Persist the user message
    3. Stream the model answer as Server-Sent Events
    4. Persist the assistant message once the stream completes
    """
    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    model = get_model(body.model_id or DEFAULT_MODEL_NAME)
    if model is None:
        raise HTTPException(status_code=404, detail="Model not found")

    user_message = next((m for m in reversed(body.messages) if m.role == "user"), None)
    if user_message is None:
        raise HTTPException(status_code=400, detail="No user message found")

    start_time = time.time()
    user_id = subject.properties.id

    chat = await get_chat_by_id(db, body.id, throw_if_not_found=False)
    if chat is None:
        title = await generate_title_from_user_message(user_message.model_dump(), model.id)
        await save_chat(db, id=body.id, user_id=user_id, title=title)
        logger.info("Chat created", extra={"chat_id": body.id, "user_id": user_id})
    else:
        check_ownership(chat, subject)

    # A retried turn re-sends a user message that is already stored
    saved_ids = {m.id for m in await get_messages_by_chat_id(db, body.id)}
    if user_message.id not in saved_ids:
        await save_messages(db, [
            build_message(body.id, "user", user_message.content, id=user_message.id),
        ])

    history = [{"role": m.role, "content": m.content} for m in body.messages]
    chat_id = body.id

    logger.info("Chat request received", extra={
        "user_id": user_id,
        "chat_id": chat_id,
        "model_id": model.id,
        "history_length": len(history),
    })

    async def event_generator():
        tokens = []
        try:
            async for chunk in stream_chat_answer(history, model.id):
                tokens.append(chunk)
                yield _sse({"type": "token", "content": chunk})

            assistant_message = build_message(chat_id, "assistant", "".join(tokens))
            async with AsyncSessionLocal() as session:
                await save_messages(session, [assistant_message])

            yield _sse({"type": "finish", "messageId": assistant_message.id})
        except Exception as e:
            logger.error(f"Stream error: {e}", exc_info=True)
            yield _sse({"type": "error", "message": "An error occurred while processing your request"})

        logger.info("Chat stream completed", extra={
            "chat_id": chat_id,
            "token_count": len(tokens),
            "latency": round(time.time() - start_time, 3),
        })
        yield _sse({"type": "end"})

    return StreamingResponse(event_generator(), media_type="text/event-stream")

# ------ Delete Chat -----
@router.delete("/chat")
async def delete_chat(
    id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
):
    if not id:
        raise HTTPException(status_code=404, detail="Not Found")

    if subject is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    chat = await get_chat_by_id(db, id)
    check_ownership(chat, subject)

    await delete_chat_by_id(db, id)
    logger.info("Chat deleted", extra={"chat_id": id, "user_id": subject.properties.id})

    return PlainTextResponse("Chat deleted", status_code=200)

# ------ Select Model -----
@router.post("/model")
async def select_model(body: ModelSelection, response: Response):
    if get_model(body.model_id) is None:
        raise HTTPException(status_code=404, detail="Model not found")
    response.set_cookie(key=MODEL_COOKIE, value=body.model_id, samesite="lax")
    return {"modelId": body.model_id}

# ------ Chat Page -----
@router.get("/chat/{chat_id}", response_model=ChatPageResponse)
async def get_chat(
    chat_id: str,
    db: AsyncSession = Depends(get_db),
    subject: Optional[Subject] = Depends(get_optional_subject),
    model_id: Optional[str] = Cookie(None, alias=MODEL_COOKIE),
):
    chat = await get_chat_by_id(db, chat_id)

    # Raises 404 for private chats of other users
    is_readonly = check_chat_read_access(chat, subject)

    messages = await get_messages_by_chat_id(db, chat_id)
    votes = await get_votes_by_chat_id(db, chat_id)

    selected_model = get_model(model_id) or get_model(DEFAULT_MODEL_NAME)

    return ChatPageResponse(
        chat=ChatResponse.model_validate(chat),
        messages=[MessageResponse.model_validate(m) for m in messages],
        votes=[VoteResponse.model_validate(v) for v in votes],
        selected_model_id=selected_model.id if selected_model else DEFAULT_MODEL_NAME,
        selected_visibility_type=chat.visibility,
        is_readonly=is_readonly,
    )

# ------ Update Visibility -----
@router.patch("/chat/{chat_id}/visibility", response_model=ChatResponse)
async def update_visibility(
    chat_id: str,
    body: VisibilityUpdate,
    db: AsyncSession = Depends(get_db),
    subject: Subject = Depends(get_current_subject),
):
    chat = await get_chat_by_id(db, chat_id)
    check_ownership(chat, subject)

    await update_chat_visibility_by_id(db, chat_id, body.visibility)
    await db.refresh(chat)

    logger.info("Chat visibility updated", extra={"chat_id": chat_id, "visibility": body.visibility})
    return chat

# ------ Delete Trailing Messages -----
@router.delete("/chat/messages/{message_id}/trailing")
async def delete_trailing_messages(
    message_id: str,
    db: AsyncSession = Depends(get_db),
    subject: Subject = Depends(get_current_subject),
):
    """Drop a message and everything after it, e.g. before regenerating an answer."""
    message = await get_message_by_id(db, message_id)
    chat = await get_chat_by_id(db, message.chat_id)
    check_ownership(chat, subject)

    deleted = await delete_messages_by_chat_id_after_timestamp(db, message.chat_id, message.created_at)
    logger.info("Trailing messages deleted", extra={"chat_id": message.chat_id, "deleted": deleted})

    return {"deleted": deleted}

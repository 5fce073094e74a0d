import json
import re
from typing import Any, AsyncIterator, Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser
from langchain_openai import ChatOpenAI
from openai import AsyncOpenAI

from core.config import settings
from llm.models import DEFAULT_MODEL_NAME, get_model
from llm.prompt_template import (
    code_block_prompt,
    suggestions_prompt,
    system_prompt,
    text_block_prompt,
    title_prompt,
    update_block_prompt,
)
from utils.logger import get_logger

logger = get_logger("backend.llm")

MAX_SUGGESTIONS = 5
MAX_TITLE_LENGTH = 80

_CODE_FENCE = re.compile(r"^```[\w+-]*\n(.*?)\n?```$", re.DOTALL)


def custom_model(api_identifier: str):
    return ChatOpenAI(
        model=api_identifier,
        api_key=settings.OPENAI_API_KEY,
        temperature=0.7,
    )


def _api_identifier(model_id: Optional[str]) -> str:
    model = get_model(model_id) or get_model(DEFAULT_MODEL_NAME)
    return model.api_identifier if model else DEFAULT_MODEL_NAME


def content_to_text(content: Any) -> str:
    """Flatten free-form message content (string, parts list, dict) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(content_to_text(part) for part in content if part is not None)
    if isinstance(content, dict):
        if "text" in content:
            return str(content["text"])
        return json.dumps(content)
    return str(content)


def to_langchain_messages(messages: List[Dict[str, Any]], system: str = system_prompt) -> List[BaseMessage]:
    converted: List[BaseMessage] = [SystemMessage(content=system)]
    for message in messages:
        text = content_to_text(message.get("content"))
        role = message.get("role")
        if role == "user":
            converted.append(HumanMessage(content=text))
        elif role == "assistant":
            converted.append(AIMessage(content=text))
        elif role == "system":
            converted.append(SystemMessage(content=text))
        # tool results are not replayed to the model
    return converted


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE.match(text.strip())
    return match.group(1) if match else text.strip()


async def generate_title_from_user_message(message: Dict[str, Any], model_id: Optional[str] = None) -> str:
    chain = title_prompt | custom_model(_api_identifier(model_id)) | StrOutputParser()
    title = await chain.ainvoke({"message": content_to_text(message.get("content"))})
    title = title.strip().strip('"').replace(":", "")
    logger.info("Chat title generated", extra={"title_length": len(title)})
    return title[:MAX_TITLE_LENGTH] or "New Chat"


async def stream_chat_answer(
    messages: List[Dict[str, Any]],
    model_id: Optional[str] = None,
    system: str = system_prompt,
) -> AsyncIterator[str]:
    """Yield the assistant's answer to the conversation chunk by chunk."""
    model = custom_model(_api_identifier(model_id))
    logger.info("Starting LLM stream", extra={"model_id": model_id, "history_length": len(messages)})

    chunk_count = 0
    async for chunk in model.astream(to_langchain_messages(messages, system)):
        content = getattr(chunk, "content", None)
        if content:
            chunk_count += 1
            yield content

    logger.info("LLM stream completed", extra={"chunk_count": chunk_count})


async def generate_image(prompt: str) -> str:
    """Generate an image and return it base64 encoded."""
    client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    response = await client.images.generate(
        model=settings.IMAGE_MODEL_NAME,
        prompt=prompt,
        n=1,
        size="1024x1024",
        response_format="b64_json",
    )
    return response.data[0].b64_json


async def generate_block_content(title: str, kind: str, model_id: Optional[str] = None) -> str:
    logger.info("Generating block content", extra={"kind": kind, "title": title[:100]})

    if kind == "image":
        return await generate_image(title)

    prompt = code_block_prompt if kind == "code" else text_block_prompt
    chain = prompt | custom_model(_api_identifier(model_id)) | StrOutputParser()
    content = await chain.ainvoke({"title": title})
    return _strip_code_fence(content) if kind == "code" else content


async def update_block_content(
    kind: str,
    content: Optional[str],
    description: str,
    model_id: Optional[str] = None,
) -> str:
    logger.info("Updating block content", extra={"kind": kind, "description": description[:100]})

    if kind == "image":
        return await generate_image(description)

    chain = update_block_prompt | custom_model(_api_identifier(model_id)) | StrOutputParser()
    updated = await chain.ainvoke({"kind": kind, "content": content or "", "description": description})
    return _strip_code_fence(updated) if kind == "code" else updated


async def generate_suggestions(content: str, model_id: Optional[str] = None) -> List[Dict[str, str]]:
    """Ask the model for sentence-level edits. Malformed items are dropped."""
    chain = suggestions_prompt | custom_model(_api_identifier(model_id)) | JsonOutputParser()
    result = await chain.ainvoke({"content": content, "limit": MAX_SUGGESTIONS})

    if isinstance(result, dict):
        result = result.get("suggestions", [])
    if not isinstance(result, list):
        result = []

    suggestions = [
        item for item in result
        if isinstance(item, dict) and item.get("originalSentence") and item.get("suggestedSentence")
    ][:MAX_SUGGESTIONS]

    logger.info("Suggestions generated", extra={"count": len(suggestions)})
    return suggestions

from typing import List, Optional

from pydantic import BaseModel

from core.config import settings
from utils.logger import get_logger

logger = get_logger("backend.llm.models")


class ChatModel(BaseModel):
    id: str
    label: str
    api_identifier: str
    description: str


models: List[ChatModel] = [
    ChatModel(
        id="gpt-4o-mini",
        label="GPT 4o mini",
        api_identifier="gpt-4o-mini",
        description="Small model for fast, lightweight tasks",
    ),
    ChatModel(
        id="gpt-4o",
        label="GPT 4o",
        api_identifier="gpt-4o",
        description="For complex, multi-step tasks",
    ),
]


def get_model(model_id: Optional[str]) -> Optional[ChatModel]:
    return next((m for m in models if m.id == model_id), None)


def resolve_default_model(model_id: Optional[str]) -> str:
    """The configured default when it is registered, otherwise the first model."""
    if get_model(model_id) is not None:
        return model_id
    logger.warning("Configured default model is not registered", extra={
        "model_id": model_id,
        "fallback": models[0].id,
    })
    return models[0].id


DEFAULT_MODEL_NAME = resolve_default_model(settings.DEFAULT_MODEL_NAME)

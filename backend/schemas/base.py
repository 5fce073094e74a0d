from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Naive values are UTC (SQLite drops the offset on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Serializes as camelCase (createdAt, userId, ...) and accepts either spelling."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

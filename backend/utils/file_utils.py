from typing import List

from pydantic import ValidationError

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png")


def validation_messages(error: ValidationError) -> List[str]:
    """Plain messages of a ValidationError, without pydantic's 'Value error, ' prefix."""
    return [e["msg"].removeprefix("Value error, ") for e in error.errors()]


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'

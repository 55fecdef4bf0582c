"""Common response schemas and shared field validators."""

import re
from typing import Any, Optional

from pydantic import BaseModel

_PHONE_PATTERN = re.compile(r"^\d{10}$")


def validate_phone_number(value: Optional[str]) -> Optional[str]:
    """Accept exactly ten digits; ``None`` passes through for partial updates."""

    if value is None:
        return value
    value = value.strip()
    if not _PHONE_PATTERN.fullmatch(value):
        raise ValueError("Phone number must be exactly 10 digits")
    return value


class ErrorResponse(BaseModel):
    detail: Any


class SuccessResponse(BaseModel):
    message: str
    data: Optional[dict] = None

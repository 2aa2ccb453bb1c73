"""Shared schema pieces: response envelope and field validators"""

import re
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, model_serializer

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def blank_to_none(v):
    """Treat empty / whitespace-only strings as missing"""
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
    return v


def check_email(v: Optional[str], required: bool = False) -> Optional[str]:
    v = blank_to_none(v)
    if v is None:
        if required:
            raise ValueError("Email is required")
        return None
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v


class Envelope(BaseModel, Generic[T]):
    """Success envelope: {success, data, count?, message?}"""

    success: bool = True
    data: T
    count: Optional[int] = None
    message: Optional[str] = None

    @model_serializer(mode="wrap")
    def _drop_empty_meta(self, handler):
        body = handler(self)
        for key in ("count", "message"):
            if body.get(key) is None:
                body.pop(key, None)
        return body


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def ok(data, count: Optional[int] = None, message: Optional[str] = None) -> dict:
    return {"success": True, "data": data, "count": count, "message": message}

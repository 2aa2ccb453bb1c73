"""UTC timestamp helpers.

Timestamps are stored in ``DateTime`` columns without time zone. The stored
wall-clock value is always UTC, written by the application rather than the
database server. Everything that reads a timestamp back goes through
``as_utc`` so the value is never interpreted in the process's local zone.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BeforeValidator, PlainSerializer


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, ready to be stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value):
    """Reinterpret a naive datetime as UTC; convert aware ones to UTC."""
    if value is None or not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an incoming datetime to the naive-UTC storage form."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Format as ``2024-01-15T10:00:00.000Z``."""
    if value is None:
        return None
    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


UTCDateTime = Annotated[
    datetime,
    BeforeValidator(as_utc),
    PlainSerializer(isoformat_utc, return_type=str),
]

"""Timestamp helpers shared by the models and services."""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC now, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"

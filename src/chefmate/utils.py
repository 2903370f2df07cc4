"""Small helpers shared across ChefMate modules."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4


def generate_id() -> str:
    """Return a new opaque entity identifier."""

    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

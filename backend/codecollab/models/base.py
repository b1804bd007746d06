"""
Shared column helpers for the ORM models.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String


def utcnow() -> datetime:
    """Naive UTC now, matching the naive DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id() -> str:
    return str(uuid.uuid4())


def id_column():
    return Column(String(36), primary_key=True, default=generate_id, index=True)


class TimestampMixin:
    """Mixin class to add created_at and updated_at timestamps."""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

"""
db/base.py

Declarative base and shared column helpers for the curation models.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All models must inherit from this class.
    """


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreatedAtMixin:
    """
    Adds a server-stamped created_at column.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

"""
db/models/raw_email.py

Inbox queue of captured emails awaiting review.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class RawEmailStatus:
    PENDING = "pending"
    APPROVED = "approved"
    DISCARDED = "discarded"
    ERROR = "error"

    ALL = (PENDING, APPROVED, DISCARDED, ERROR)


class RawEmail(Base):
    """
    A newsletter email captured by the Gmail ingest or the webhook.

    ``gmail_message_id`` is only set for search-based ingestion and is the
    dedup key between runs; a partial unique index backs the pre-insert check.
    """

    __tablename__ = "raw_emails"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject: Mapped[str | None] = mapped_column(Text, nullable=True)
    from_address: Mapped[str | None] = mapped_column(String(320), nullable=True)
    from_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    raw_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    gmail_message_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    gmail_thread_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=RawEmailStatus.PENDING,
        comment="pending, approved, discarded, error",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    article_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("articles.id", ondelete="SET NULL"),
        nullable=True,
    )
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_raw_emails_status_received_at", "status", "received_at"),
        Index("ix_raw_emails_article_id", "article_id"),
        Index(
            "uq_raw_emails_gmail_message_id",
            "gmail_message_id",
            unique=True,
            postgresql_where=text("gmail_message_id IS NOT NULL"),
        ),
    )

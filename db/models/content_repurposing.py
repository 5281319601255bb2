"""
db/models/content_repurposing.py

Explicit per-article, per-format repurposing status.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, utcnow


class RepurposingStatus:
    UNTOUCHED = "untouched"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    ALL = (UNTOUCHED, IN_PROGRESS, DONE)


class ContentRepurposing(Base):
    __tablename__ = "content_repurposing"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
    )
    format: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=RepurposingStatus.UNTOUCHED,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    draft_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("generated_drafts.id", ondelete="SET NULL"),
        nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=utcnow,
    )

    __table_args__ = (
        UniqueConstraint("article_id", "format", name="uq_content_repurposing_article_format"),
        Index("ix_content_repurposing_article_status", "article_id", "status"),
        Index("ix_content_repurposing_article_updated_at", "article_id", "updated_at"),
    )

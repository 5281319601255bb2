"""
db/models/newsletter_source.py

Monitored newsletter sender addresses.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class NewsletterSource(Base, CreatedAtMixin):
    """
    One sender address the Gmail ingest searches for.

    ``total_ingested`` and ``last_ingested_at`` are maintained by the ingest
    run; rows are only removed by an operator.
    """

    __tablename__ = "newsletter_sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email_address: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_ingested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    total_ingested: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_newsletter_sources_is_active", "is_active"),)

    def __repr__(self) -> str:
        return f"<NewsletterSource id={self.id} email_address={self.email_address!r}>"

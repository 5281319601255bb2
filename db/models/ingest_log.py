"""
db/models/ingest_log.py

Append-only audit trail of Gmail ingest runs.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class IngestRunStatus:
    SUCCESS = "success"
    PARTIAL = "partial"
    ERROR = "error"


class IngestLog(Base):
    __tablename__ = "ingest_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    emails_found: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    emails_new: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    emails_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (Index("ix_ingest_log_run_at", "run_at"),)

"""
Repository for the append-only ingest run log.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.ingest_log import IngestLog


class IngestLogRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        *,
        status: str,
        emails_found: int,
        emails_new: int,
        emails_skipped: int,
        error_message: str | None,
        duration_ms: int,
    ) -> IngestLog:
        entry = IngestLog(
            status=status,
            emails_found=emails_found,
            emails_new=emails_new,
            emails_skipped=emails_skipped,
            error_message=error_message,
            duration_ms=duration_ms,
        )
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_recent(self, *, limit: int = 20) -> list[IngestLog]:
        stmt = (
            select(IngestLog)
            .order_by(IngestLog.run_at.desc(), IngestLog.id.desc())
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def get_last(self) -> IngestLog | None:
        runs = self.list_recent(limit=1)
        return runs[0] if runs else None

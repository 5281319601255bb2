"""
app/repositories/ingest_store.py

Persistence operations used by a Gmail ingest run.

Unlike the plain repositories, every write here commits on its own:
each inbox row stands alone so that one failed insert never rolls back
messages already saved in the same run.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from app.domain.mail import MonitoredSource
from db.repositories.errors import StoreUnavailableError
from db.repositories.ingest_log_repository import IngestLogRepository
from db.repositories.raw_email_repository import RawEmailRepository
from db.repositories.source_repository import NewsletterSourceRepository


class SQLAlchemyIngestStore:
    def __init__(self, session: Session) -> None:
        self._session = session
        self._sources = NewsletterSourceRepository(session)
        self._emails = RawEmailRepository(session)
        self._logs = IngestLogRepository(session)

    def list_active_sources(self) -> list[MonitoredSource]:
        try:
            rows = self._sources.list_active()
        except (OperationalError, InterfaceError) as exc:
            self._session.rollback()
            raise StoreUnavailableError("Database not available") from exc
        return [MonitoredSource(id=row.id, email_address=row.email_address) for row in rows]

    def find_existing_message_ids(self, message_ids: Sequence[str]) -> set[str]:
        return self._emails.find_existing_gmail_ids(message_ids)

    def insert_raw_email(
        self,
        *,
        subject: str,
        from_address: str,
        from_name: str,
        raw_text: str,
        gmail_message_id: str,
        gmail_thread_id: str,
        received_at: datetime,
    ) -> int:
        with self._commit_or_rollback():
            email = self._emails.create(
                subject=subject,
                from_address=from_address,
                from_name=from_name,
                raw_text=raw_text,
                gmail_message_id=gmail_message_id,
                gmail_thread_id=gmail_thread_id,
                received_at=received_at,
            )
        return email.id

    def record_source_ingest(self, *, source_id: int, ingested_at: datetime) -> None:
        with self._commit_or_rollback():
            self._sources.record_ingest(source_id=source_id, ingested_at=ingested_at)

    def insert_ingest_log(
        self,
        *,
        status: str,
        emails_found: int,
        emails_new: int,
        emails_skipped: int,
        error_message: str | None,
        duration_ms: int,
    ) -> None:
        with self._commit_or_rollback():
            self._logs.create(
                status=status,
                emails_found=emails_found,
                emails_new=emails_new,
                emails_skipped=emails_skipped,
                error_message=error_message,
                duration_ms=duration_ms,
            )

    @contextmanager
    def _commit_or_rollback(self) -> Iterator[None]:
        try:
            yield
        except Exception:
            self._session.rollback()
            raise
        self._session.commit()

"""
Repository for the raw email inbox queue.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from db.models.raw_email import RawEmail, RawEmailStatus
from db.repositories.errors import RecordNotFoundError


class RawEmailRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        *,
        subject: str | None,
        from_address: str | None,
        from_name: str | None,
        raw_text: str | None,
        raw_html: str | None = None,
        gmail_message_id: str | None = None,
        gmail_thread_id: str | None = None,
        received_at: datetime | None = None,
    ) -> RawEmail:
        email = RawEmail(
            subject=subject,
            from_address=from_address,
            from_name=from_name,
            raw_text=raw_text,
            raw_html=raw_html,
            gmail_message_id=gmail_message_id,
            gmail_thread_id=gmail_thread_id,
            status=RawEmailStatus.PENDING,
        )
        if received_at is not None:
            email.received_at = received_at
        self._session.add(email)
        self._session.flush()
        return email

    def find_existing_gmail_ids(self, gmail_ids: Sequence[str]) -> set[str]:
        if not gmail_ids:
            return set()
        stmt = select(RawEmail.gmail_message_id).where(
            RawEmail.gmail_message_id.in_(list(gmail_ids))
        )
        return {value for value in self._session.scalars(stmt).all() if value}

    def get(self, email_id: int) -> RawEmail | None:
        return self._session.get(RawEmail, email_id)

    def list_emails(
        self,
        *,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[RawEmail], int]:
        stmt: Select[tuple[RawEmail]] = select(RawEmail)
        count_stmt = select(func.count()).select_from(RawEmail)
        if status:
            stmt = stmt.where(RawEmail.status == status)
            count_stmt = count_stmt.where(RawEmail.status == status)

        stmt = (
            stmt.order_by(RawEmail.received_at.desc(), RawEmail.id.desc())
            .limit(max(1, limit))
            .offset(max(0, offset))
        )
        items = list(self._session.scalars(stmt).all())
        total = int(self._session.scalar(count_stmt) or 0)
        return items, total

    def update_status(
        self,
        email_id: int,
        status: str,
        *,
        error_message: str | None = None,
        article_id: int | None = None,
    ) -> RawEmail:
        if status not in RawEmailStatus.ALL:
            raise ValueError(f"Unsupported inbox status '{status}'.")

        email = self.get(email_id)
        if email is None:
            raise RecordNotFoundError(f"Raw email not found: {email_id}")

        email.status = status
        email.error_message = error_message
        if article_id is not None:
            email.article_id = article_id
        email.processed_at = (
            None if status == RawEmailStatus.PENDING else datetime.now(timezone.utc)
        )
        return email

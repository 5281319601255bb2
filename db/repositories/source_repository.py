"""
Repository for monitored newsletter sources.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.models.newsletter_source import NewsletterSource
from db.repositories.errors import RecordNotFoundError


class NewsletterSourceRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_sources(self) -> list[NewsletterSource]:
        stmt = select(NewsletterSource).order_by(NewsletterSource.name)
        return list(self._session.scalars(stmt).all())

    def list_active(self) -> list[NewsletterSource]:
        stmt = (
            select(NewsletterSource)
            .where(NewsletterSource.is_active.is_(True))
            .order_by(NewsletterSource.id)
        )
        return list(self._session.scalars(stmt).all())

    def upsert_source(self, *, name: str, email_address: str) -> NewsletterSource:
        """
        Insert a source, or rename and reactivate the one with this address.
        """

        stmt = (
            insert(NewsletterSource)
            .values(name=name, email_address=email_address, is_active=True, total_ingested=0)
            .on_conflict_do_update(
                index_elements=[NewsletterSource.email_address],
                set_={"name": name, "is_active": True},
            )
            .returning(NewsletterSource)
        )
        return self._session.scalars(stmt).one()

    def toggle_active(self, source_id: int) -> NewsletterSource:
        source = self._session.get(NewsletterSource, source_id)
        if source is None:
            raise RecordNotFoundError(f"Newsletter source not found: {source_id}")
        source.is_active = not source.is_active
        return source

    def delete_source(self, source_id: int) -> None:
        source = self._session.get(NewsletterSource, source_id)
        if source is None:
            raise RecordNotFoundError(f"Newsletter source not found: {source_id}")
        self._session.delete(source)

    def record_ingest(self, *, source_id: int, ingested_at: datetime) -> None:
        """
        Bump the ingest counter in SQL so concurrent or repeated bumps are not lost.
        """

        self._session.execute(
            update(NewsletterSource)
            .where(NewsletterSource.id == source_id)
            .values(
                total_ingested=NewsletterSource.total_ingested + 1,
                last_ingested_at=ingested_at,
            )
        )

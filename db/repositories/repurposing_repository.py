"""
Repository for explicit content repurposing status rows.

The caller controls commit/rollback; this repository never commits on its own.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.base import utcnow
from db.models.content_repurposing import ContentRepurposing

_UPSERT_CONSTRAINT = "uq_content_repurposing_article_format"


class RepurposingRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert_status(
        self,
        *,
        article_id: int,
        format: str,
        status: str,
        notes: str | None = None,
    ) -> ContentRepurposing:
        """
        Insert or overwrite the status row for ``(article_id, format)``.
        """

        now = utcnow()
        stmt = (
            insert(ContentRepurposing)
            .values(
                article_id=article_id,
                format=format,
                status=status,
                notes=notes,
                updated_at=now,
            )
            .on_conflict_do_update(
                constraint=_UPSERT_CONSTRAINT,
                set_={"status": status, "notes": notes, "updated_at": now},
            )
            .returning(ContentRepurposing)
        )
        return self._session.scalars(stmt).one()

    def list_all(self) -> list[ContentRepurposing]:
        return list(self._session.scalars(select(ContentRepurposing)).all())

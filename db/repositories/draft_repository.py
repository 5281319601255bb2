"""
Repository for generated drafts.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.generated_draft import GeneratedDraft
from db.repositories.errors import RecordNotFoundError


class DraftRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        *,
        article_id: int,
        format: str,
        title: str | None,
        content: str,
        angle: str | None,
    ) -> GeneratedDraft:
        draft = GeneratedDraft(
            article_id=article_id,
            format=format,
            title=title,
            content=content,
            angle=angle,
        )
        self._session.add(draft)
        self._session.flush()
        return draft

    def list_by_article(self, article_id: int) -> list[GeneratedDraft]:
        stmt = (
            select(GeneratedDraft)
            .where(GeneratedDraft.article_id == article_id)
            .order_by(GeneratedDraft.created_at.desc(), GeneratedDraft.id.desc())
        )
        return list(self._session.scalars(stmt).all())

    def list_format_records(self) -> list[tuple[int, str]]:
        """
        Return ``(article_id, format)`` for every draft, for calendar counting.
        """

        stmt = select(GeneratedDraft.article_id, GeneratedDraft.format)
        return [(row.article_id, row.format) for row in self._session.execute(stmt)]

    def delete(self, draft_id: int) -> None:
        draft = self._session.get(GeneratedDraft, draft_id)
        if draft is None:
            raise RecordNotFoundError(f"Draft not found: {draft_id}")
        self._session.delete(draft)

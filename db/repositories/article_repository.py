"""
Repository for the article library.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.orm import Session

from db.models.article import Article
from db.models.generated_draft import GeneratedDraft
from db.repositories.errors import RecordNotFoundError

UPDATABLE_FIELDS = frozenset(
    {"title", "url", "source", "author", "full_text", "summary", "key_insights", "publication_date"}
)


def count_words(text: str | None) -> int:
    if not text:
        return 0
    return len(text.split())


class ArticleRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        *,
        title: str,
        url: str | None = None,
        source: str | None = None,
        author: str | None = None,
        full_text: str | None = None,
        summary: str | None = None,
        key_insights: list[str] | None = None,
        publication_date: datetime | None = None,
    ) -> Article:
        article = Article(
            title=title,
            url=url,
            source=source,
            author=author,
            full_text=full_text,
            summary=summary,
            key_insights=key_insights or [],
            publication_date=publication_date,
            word_count=count_words(full_text),
            is_favourite=False,
        )
        self._session.add(article)
        self._session.flush()
        return article

    def get(self, article_id: int) -> Article | None:
        return self._session.get(Article, article_id)

    def update(self, article_id: int, **fields: Any) -> Article:
        """
        Apply a partial update. ``word_count`` follows ``full_text`` when it changes.
        """

        article = self.get(article_id)
        if article is None:
            raise RecordNotFoundError(f"Article not found: {article_id}")
        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                raise ValueError(f"Field '{name}' cannot be updated.")
            setattr(article, name, value)
        if "full_text" in fields:
            article.word_count = count_words(fields["full_text"])
        self._session.flush()
        return article

    def list_articles(
        self,
        *,
        search: str | None = None,
        source: str | None = None,
        favourites_only: bool = False,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = 24,
        offset: int = 0,
    ) -> tuple[list[Article], int]:
        conditions: list[Any] = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    Article.title.ilike(pattern),
                    Article.full_text.ilike(pattern),
                    Article.summary.ilike(pattern),
                )
            )
        if source:
            conditions.append(Article.source.ilike(f"%{source}%"))
        if favourites_only:
            conditions.append(Article.is_favourite.is_(True))
        if date_from is not None:
            conditions.append(Article.imported_at >= date_from)
        if date_to is not None:
            conditions.append(Article.imported_at <= date_to)

        stmt: Select[tuple[Article]] = select(Article).where(*conditions)
        stmt = (
            stmt.order_by(Article.imported_at.desc(), Article.id.desc())
            .limit(max(1, limit))
            .offset(max(0, offset))
        )
        count_stmt = select(func.count()).select_from(Article).where(*conditions)

        items = list(self._session.scalars(stmt).all())
        total = int(self._session.scalar(count_stmt) or 0)
        return items, total

    def list_all(self) -> list[Article]:
        stmt = select(Article).order_by(Article.imported_at.desc(), Article.id.desc())
        return list(self._session.scalars(stmt).all())

    def delete(self, article_id: int) -> None:
        article = self.get(article_id)
        if article is None:
            raise RecordNotFoundError(f"Article not found: {article_id}")
        self._session.execute(delete(GeneratedDraft).where(GeneratedDraft.article_id == article_id))
        self._session.delete(article)

    def toggle_favourite(self, article_id: int) -> bool:
        article = self.get(article_id)
        if article is None:
            raise RecordNotFoundError(f"Article not found: {article_id}")
        article.is_favourite = not article.is_favourite
        return article.is_favourite

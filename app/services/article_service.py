"""
app/services/article_service.py

Article library operations that go beyond a single repository call:
filtered listing, partial updates and bulk import of pasted newsletter text.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from app.config import get_llm_settings
from app.services.inbox_service import parse_publication_date
from db.models.article import Article
from db.repositories.article_repository import ArticleRepository
from llm.adapter import BaseLLMAdapter
from llm.factory import build_llm_adapter
from llm.prompt_builder import BULK_EXTRACTION_SYSTEM, build_bulk_extraction_prompt
from llm.retry import generate_with_retry
from llm.schema import BulkExtraction

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


class ArticleService:
    def __init__(self, *, llm_adapter: BaseLLMAdapter, max_retries: int = 2) -> None:
        self._llm_adapter = llm_adapter
        self._max_retries = max_retries

    def list_articles(
        self,
        *,
        db: Session,
        search: str | None = None,
        source: str | None = None,
        favourites_only: bool = False,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = 24,
        offset: int = 0,
    ) -> tuple[list[Article], int]:
        if date_from is not None and date_to is not None and date_from > date_to:
            raise ValueError("date_from must not be after date_to.")
        return ArticleRepository(db).list_articles(
            search=search,
            source=source,
            favourites_only=favourites_only,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )

    def update(self, *, db: Session, article_id: int, fields: dict[str, Any]) -> Article:
        """
        Apply the given fields and commit. Unknown ids raise RecordNotFoundError.
        """

        if "title" in fields and not fields["title"]:
            raise ValueError("title cannot be empty.")

        try:
            article = ArticleRepository(db).update(article_id, **fields)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Article updated id=%s fields=%s", article_id, ",".join(sorted(fields)))
        return article

    def import_from_text(self, *, db: Session, raw_text: str) -> list[Article]:
        """
        Extract every article mentioned in pasted newsletter text and store them.

        LLM failures propagate before anything is written; all extracted
        articles are committed together.
        """

        extracted = generate_with_retry(
            self._llm_adapter,
            build_bulk_extraction_prompt(raw_text),
            BulkExtraction,
            system=BULK_EXTRACTION_SYSTEM,
            max_retries=self._max_retries,
        )

        repository = ArticleRepository(db)
        created: list[Article] = []
        try:
            for item in extracted.articles:
                created.append(
                    repository.create(
                        title=(item.title or UNTITLED)[:512],
                        url=item.url or None,
                        source=item.source or None,
                        author=item.author or None,
                        full_text=item.full_text or None,
                        summary=item.summary or None,
                        key_insights=list(item.key_insights),
                        publication_date=parse_publication_date(item.publication_date),
                    )
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Imported %d article(s) from pasted text", len(created))
        return created


@lru_cache(maxsize=1)
def get_article_service() -> ArticleService:
    settings = get_llm_settings()
    return ArticleService(
        llm_adapter=build_llm_adapter(
            settings.adapter,
            settings.model,
            settings.max_tokens,
            api_key=settings.api_key,
            base_url=settings.base_url,
        ),
        max_retries=settings.max_retries,
    )

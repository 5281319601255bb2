"""
app/services/draft_service.py

LLM generation of derivative drafts for library articles.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import get_llm_settings
from db.models.generated_draft import ContentFormat, GeneratedDraft
from db.repositories.article_repository import ArticleRepository
from db.repositories.draft_repository import DraftRepository
from db.repositories.errors import RecordNotFoundError
from llm.adapter import BaseLLMAdapter
from llm.factory import build_llm_adapter
from llm.prompt_builder import GENERATION_SYSTEM, build_draft_prompt
from llm.retry import generate_with_retry
from llm.schema import GeneratedContent

logger = logging.getLogger(__name__)


class DraftService:
    def __init__(self, *, llm_adapter: BaseLLMAdapter, max_retries: int = 2) -> None:
        self._llm_adapter = llm_adapter
        self._max_retries = max_retries

    def generate(
        self,
        *,
        db: Session,
        article_id: int,
        format: str,
        custom_angle: str | None = None,
    ) -> GeneratedDraft:
        """
        Generate and store one draft. LLM errors propagate to the caller.
        """

        if format not in ContentFormat.ALL:
            raise ValueError(f"Unsupported format '{format}'. Allowed: {', '.join(ContentFormat.ALL)}.")

        article = ArticleRepository(db).get(article_id)
        if article is None:
            raise RecordNotFoundError(f"Article not found: {article_id}")

        prompt = build_draft_prompt(
            format=format,
            title=article.title,
            source=article.source,
            summary=article.summary,
            key_insights=[str(item) for item in article.key_insights or []],
            full_text=article.full_text,
            custom_angle=custom_angle,
        )
        generated = generate_with_retry(
            self._llm_adapter,
            prompt,
            GeneratedContent,
            system=GENERATION_SYSTEM,
            max_retries=self._max_retries,
        )

        try:
            draft = DraftRepository(db).create(
                article_id=article_id,
                format=format,
                title=generated.title,
                content=generated.content,
                angle=generated.angle or None,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Draft generated article_id=%s format=%s draft_id=%s", article_id, format, draft.id)
        return draft


@lru_cache(maxsize=1)
def get_draft_service() -> DraftService:
    settings = get_llm_settings()
    return DraftService(
        llm_adapter=build_llm_adapter(
            settings.adapter,
            settings.model,
            settings.max_tokens,
            api_key=settings.api_key,
            base_url=settings.base_url,
        ),
        max_retries=settings.max_retries,
    )

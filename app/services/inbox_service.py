"""
app/services/inbox_service.py

Inbox review: webhook capture, listing, status changes and approval of an
email into the article library through LLM extraction.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import get_llm_settings
from app.domain.inbox import InboundEmail
from db.models.article import Article
from db.models.raw_email import RawEmail, RawEmailStatus
from db.repositories.article_repository import ArticleRepository
from db.repositories.errors import RecordNotFoundError
from db.repositories.raw_email_repository import RawEmailRepository
from llm.adapter import BaseLLMAdapter
from llm.factory import build_llm_adapter
from llm.prompt_builder import EXTRACTION_SYSTEM, build_email_extraction_prompt
from llm.retry import generate_with_retry
from llm.schema import EmailExtraction

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = "LLM extraction failed"


class ExtractionFailedError(RuntimeError):
    """
    Raised when an email could not be turned into article content.
    """


def parse_publication_date(value: str) -> datetime | None:
    if not value:
        return None
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


class InboxService:
    def __init__(self, *, llm_adapter: BaseLLMAdapter, max_retries: int = 2) -> None:
        self._llm_adapter = llm_adapter
        self._max_retries = max_retries

    def receive_email(self, *, db: Session, email: InboundEmail) -> RawEmail:
        """
        Queue one webhook-delivered email as pending and commit.
        """

        try:
            row = RawEmailRepository(db).create(
                subject=email.subject,
                from_address=email.from_address,
                from_name=email.from_name,
                raw_text=email.raw_text,
                raw_html=email.raw_html,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Webhook email queued id=%s from=%r", row.id, email.from_address)
        return row

    def list_emails(
        self,
        *,
        db: Session,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[RawEmail], int]:
        return RawEmailRepository(db).list_emails(status=status, limit=limit, offset=offset)

    def get_email(self, *, db: Session, email_id: int) -> RawEmail:
        email = RawEmailRepository(db).get(email_id)
        if email is None:
            raise RecordNotFoundError(f"Raw email not found: {email_id}")
        return email

    def update_status(
        self,
        *,
        db: Session,
        email_id: int,
        status: str,
        error_message: str | None = None,
        article_id: int | None = None,
    ) -> RawEmail:
        try:
            email = RawEmailRepository(db).update_status(
                email_id,
                status,
                error_message=error_message,
                article_id=article_id,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        return email

    def approve(self, *, db: Session, email_id: int) -> tuple[Article, EmailExtraction]:
        """
        Extract article content from an inbox email and add it to the library.

        On extraction failure the email is marked ``error`` and
        ExtractionFailedError is raised; a later approve may retry it.
        """

        email = self.get_email(db=db, email_id=email_id)
        prompt = build_email_extraction_prompt(
            subject=email.subject,
            from_name=email.from_name,
            from_address=email.from_address,
            raw_text=email.raw_text,
        )
        try:
            extracted = generate_with_retry(
                self._llm_adapter,
                prompt,
                EmailExtraction,
                system=EXTRACTION_SYSTEM,
                max_retries=self._max_retries,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Email extraction failed id=%s error=%s", email_id, exc)
            self.update_status(
                db=db,
                email_id=email_id,
                status=RawEmailStatus.ERROR,
                error_message=EXTRACTION_FAILED_MESSAGE,
            )
            raise ExtractionFailedError("Failed to extract content from email") from exc

        try:
            article = ArticleRepository(db).create(
                title=(extracted.title or email.subject or "Untitled")[:512],
                source=extracted.source or email.from_name or email.from_address or "",
                author=extracted.author or None,
                full_text=extracted.full_text,
                summary=extracted.summary,
                key_insights=list(extracted.key_insights),
                publication_date=parse_publication_date(extracted.publication_date),
            )
            RawEmailRepository(db).update_status(
                email_id,
                RawEmailStatus.APPROVED,
                article_id=article.id,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Inbox email approved id=%s article_id=%s is_article=%s",
            email_id,
            article.id,
            extracted.is_article,
        )
        return article, extracted


@lru_cache(maxsize=1)
def get_inbox_service() -> InboxService:
    settings = get_llm_settings()
    return InboxService(
        llm_adapter=build_llm_adapter(
            settings.adapter,
            settings.model,
            settings.max_tokens,
            api_key=settings.api_key,
            base_url=settings.base_url,
        ),
        max_retries=settings.max_retries,
    )

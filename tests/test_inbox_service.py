"""
tests/test_inbox_service.py

Pytest unit tests for InboxService and DraftService against an in-memory
session double.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from app.domain.inbox import InboundEmail
from app.services.draft_service import DraftService
from app.services.inbox_service import (
    EXTRACTION_FAILED_MESSAGE,
    ExtractionFailedError,
    InboxService,
    parse_publication_date,
)
from db.models.article import Article
from db.models.generated_draft import GeneratedDraft
from db.models.raw_email import RawEmail
from db.repositories.errors import RecordNotFoundError
from llm.adapter import BaseLLMAdapter, MockLLMAdapter


class FixedAdapter(BaseLLMAdapter):
    def __init__(self, response: str) -> None:
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str, system: str | None = None) -> str:
        self.prompts.append(prompt)
        return self.response


class BrokenAdapter(BaseLLMAdapter):
    def generate(self, prompt: str, system: str | None = None) -> str:
        raise ConnectionError("upstream unavailable")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def pending_email(fake_session) -> RawEmail:
    email = RawEmail(
        subject="This week in AI",
        from_address="news@batch.ai",
        from_name="The Batch",
        raw_text="Long newsletter body",
        status="pending",
    )
    fake_session.add(email)
    return email


@pytest.fixture()
def stored_article(fake_session) -> Article:
    article = Article(
        title="Agents in production",
        source="The Batch",
        summary="Summary",
        key_insights=["One", "Two"],
        full_text="Body",
        word_count=1,
        is_favourite=False,
    )
    fake_session.add(article)
    return article


# ---------------------------------------------------------------------------
# Webhook capture
# ---------------------------------------------------------------------------


class TestReceiveEmail:
    def test_queues_pending_email_and_commits(self, fake_session) -> None:
        service = InboxService(llm_adapter=MockLLMAdapter())
        row = service.receive_email(
            db=fake_session,
            email=InboundEmail(subject="Hi", from_address="a@b.com", from_name="A", raw_text="text"),
        )
        assert row.id is not None
        assert row.status == "pending"
        assert row.raw_text == "text"
        assert fake_session.commits == 1


# ---------------------------------------------------------------------------
# Approval
# ---------------------------------------------------------------------------


class TestApprove:
    def test_creates_article_and_links_email(self, fake_session, pending_email: RawEmail) -> None:
        service = InboxService(llm_adapter=MockLLMAdapter(), max_retries=0)

        article, extracted = service.approve(db=fake_session, email_id=pending_email.id)

        assert article.title == "Mock article"
        assert article.key_insights == ["First takeaway", "Second takeaway", "Third takeaway"]
        assert article.word_count == 3
        assert extracted.is_article is True
        assert pending_email.status == "approved"
        assert pending_email.article_id == article.id
        assert pending_email.processed_at is not None
        assert fake_session.commits == 1

    def test_empty_title_falls_back_to_subject(self, fake_session, pending_email: RawEmail) -> None:
        adapter = FixedAdapter(json.dumps({"title": "", "summary": "s", "fullText": "body"}))
        article, _ = InboxService(llm_adapter=adapter).approve(db=fake_session, email_id=pending_email.id)
        assert article.title == "This week in AI"
        assert article.source == "The Batch"
        assert "Long newsletter body" in adapter.prompts[0]

    def test_unusable_output_marks_email_error(self, fake_session, pending_email: RawEmail) -> None:
        service = InboxService(llm_adapter=FixedAdapter("no json at all"), max_retries=1)

        with pytest.raises(ExtractionFailedError):
            service.approve(db=fake_session, email_id=pending_email.id)

        assert pending_email.status == "error"
        assert pending_email.error_message == EXTRACTION_FAILED_MESSAGE
        assert pending_email.article_id is None
        assert fake_session.commits == 1

    def test_transport_failure_marks_email_error(self, fake_session, pending_email: RawEmail) -> None:
        with pytest.raises(ExtractionFailedError):
            InboxService(llm_adapter=BrokenAdapter()).approve(db=fake_session, email_id=pending_email.id)
        assert pending_email.status == "error"

    def test_missing_email(self, fake_session) -> None:
        with pytest.raises(RecordNotFoundError):
            InboxService(llm_adapter=MockLLMAdapter()).approve(db=fake_session, email_id=999)


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


class TestUpdateStatus:
    def test_discard_sets_processed_at(self, fake_session, pending_email: RawEmail) -> None:
        service = InboxService(llm_adapter=MockLLMAdapter())
        email = service.update_status(db=fake_session, email_id=pending_email.id, status="discarded")
        assert email.status == "discarded"
        assert email.processed_at is not None

    def test_back_to_pending_clears_processed_at(self, fake_session, pending_email: RawEmail) -> None:
        service = InboxService(llm_adapter=MockLLMAdapter())
        service.update_status(db=fake_session, email_id=pending_email.id, status="discarded")
        email = service.update_status(db=fake_session, email_id=pending_email.id, status="pending")
        assert email.processed_at is None

    def test_unknown_status_rolls_back(self, fake_session, pending_email: RawEmail) -> None:
        service = InboxService(llm_adapter=MockLLMAdapter())
        with pytest.raises(ValueError):
            service.update_status(db=fake_session, email_id=pending_email.id, status="archived")
        assert fake_session.rollbacks == 1
        assert pending_email.status == "pending"


# ---------------------------------------------------------------------------
# Publication date parsing
# ---------------------------------------------------------------------------


class TestPublicationDate:
    def test_date_only(self) -> None:
        assert parse_publication_date("2026-03-02") == datetime(2026, 3, 2, tzinfo=timezone.utc)

    def test_zulu_suffix(self) -> None:
        assert parse_publication_date("2026-03-02T10:00:00Z") == datetime(2026, 3, 2, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", "last Tuesday"])
    def test_unparseable_is_none(self, value: str) -> None:
        assert parse_publication_date(value) is None


# ---------------------------------------------------------------------------
# Draft generation
# ---------------------------------------------------------------------------


class TestDraftService:
    def test_generates_and_stores_draft(self, fake_session, stored_article: Article) -> None:
        adapter = FixedAdapter(json.dumps({"title": "Hook", "angle": "Contrarian", "content": "Script"}))
        draft = DraftService(llm_adapter=adapter).generate(
            db=fake_session,
            article_id=stored_article.id,
            format="video_script",
            custom_angle="founders",
        )
        assert isinstance(draft, GeneratedDraft)
        assert (draft.title, draft.angle, draft.content) == ("Hook", "Contrarian", "Script")
        assert draft.article_id == stored_article.id
        assert "founders" in adapter.prompts[0]
        assert fake_session.commits == 1

    def test_unknown_format_is_rejected(self, fake_session, stored_article: Article) -> None:
        with pytest.raises(ValueError):
            DraftService(llm_adapter=MockLLMAdapter()).generate(
                db=fake_session, article_id=stored_article.id, format="podcast"
            )

    def test_missing_article(self, fake_session) -> None:
        with pytest.raises(RecordNotFoundError):
            DraftService(llm_adapter=MockLLMAdapter()).generate(
                db=fake_session, article_id=42, format="blog_post"
            )

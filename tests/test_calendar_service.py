from __future__ import annotations

import pytest

from app.services.calendar_service import CalendarService
from db.repositories.errors import RecordNotFoundError


def test_update_rejects_unknown_format(fake_session) -> None:
    with pytest.raises(ValueError, match="Unsupported format"):
        CalendarService().update_status(db=fake_session, article_id=1, format="podcast", status="done")


def test_update_rejects_unknown_status(fake_session) -> None:
    with pytest.raises(ValueError, match="Unsupported status"):
        CalendarService().update_status(db=fake_session, article_id=1, format="blog_post", status="later")


def test_update_requires_existing_article(fake_session) -> None:
    with pytest.raises(RecordNotFoundError):
        CalendarService().update_status(db=fake_session, article_id=1, format="blog_outline", status="done")
    assert fake_session.commits == 0

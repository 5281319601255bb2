"""
app/services/calendar_service.py

Repurposing calendar.

``derive_calendar_rows`` is a pure function: given articles, explicit
status rows and draft rows it returns one row per article with a status
and draft count for every content format. ``CalendarService`` loads those
inputs from the database and writes explicit status changes.

Status rules
------------
explicit      latest status row for (article, format) by ``updated_at``
in_progress   no explicit row, at least one draft
untouched     no explicit row, no drafts
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.calendar import CalendarArticle, CalendarRow, DraftRecord, StatusRecord
from db.models.content_repurposing import ContentRepurposing, RepurposingStatus
from db.models.generated_draft import ContentFormat
from db.repositories.article_repository import ArticleRepository
from db.repositories.draft_repository import DraftRepository
from db.repositories.errors import RecordNotFoundError
from db.repositories.repurposing_repository import RepurposingRepository

logger = logging.getLogger(__name__)

CALENDAR_FORMATS: tuple[str, ...] = ContentFormat.ALL

_LEGACY_FORMATS = {ContentFormat.LEGACY_BLOG_OUTLINE: ContentFormat.BLOG_POST}
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_format(value: str) -> str:
    return _LEGACY_FORMATS.get(value, value)


def _sort_timestamp(value: datetime | None) -> float:
    if value is None:
        return _EPOCH.timestamp()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def derive_calendar_rows(
    articles: Sequence[CalendarArticle],
    status_records: Iterable[StatusRecord],
    draft_records: Iterable[DraftRecord],
) -> list[CalendarRow]:
    """
    Build calendar rows, preserving the order of ``articles``.

    Among status rows sharing a key the newest ``updated_at`` wins; rows
    without a timestamp count as oldest, and equal timestamps keep input
    order. Formats outside ``CALENDAR_FORMATS`` are ignored.
    """

    draft_counts: dict[tuple[int, str], int] = {}
    for draft in draft_records:
        key = (draft.article_id, normalize_format(draft.format))
        draft_counts[key] = draft_counts.get(key, 0) + 1

    latest_status: dict[tuple[int, str], str] = {}
    newest_first = sorted(
        status_records,
        key=lambda record: _sort_timestamp(record.updated_at),
        reverse=True,
    )
    for record in newest_first:
        key = (record.article_id, normalize_format(record.format))
        latest_status.setdefault(key, record.status)

    rows: list[CalendarRow] = []
    for article in articles:
        statuses: dict[str, str] = {}
        counts: dict[str, int] = {}
        for fmt in CALENDAR_FORMATS:
            key = (article.id, fmt)
            count = draft_counts.get(key, 0)
            explicit = latest_status.get(key)
            if explicit is not None:
                statuses[fmt] = explicit
            elif count > 0:
                statuses[fmt] = RepurposingStatus.IN_PROGRESS
            else:
                statuses[fmt] = RepurposingStatus.UNTOUCHED
            counts[fmt] = count

        rows.append(
            CalendarRow(
                id=article.id,
                title=article.title,
                source=article.source,
                imported_at=article.imported_at,
                statuses=statuses,
                draft_counts=counts,
            )
        )
    return rows


class CalendarService:
    """
    Loads calendar inputs and persists explicit status changes.
    """

    def get_calendar_data(self, *, db: Session) -> list[CalendarRow]:
        articles = [
            CalendarArticle(
                id=row.id,
                title=row.title,
                source=row.source,
                imported_at=row.imported_at,
            )
            for row in ArticleRepository(db).list_all()
        ]
        statuses = [
            StatusRecord(
                article_id=row.article_id,
                format=row.format,
                status=row.status,
                updated_at=row.updated_at,
            )
            for row in RepurposingRepository(db).list_all()
        ]
        drafts = [
            DraftRecord(article_id=article_id, format=fmt)
            for article_id, fmt in DraftRepository(db).list_format_records()
        ]
        return derive_calendar_rows(articles, statuses, drafts)

    def update_status(
        self,
        *,
        db: Session,
        article_id: int,
        format: str,
        status: str,
        notes: str | None = None,
    ) -> ContentRepurposing:
        """
        Upsert the explicit status for one article and format, then commit.

        Raises ValueError for an unknown format or status and
        RecordNotFoundError when the article does not exist.
        """

        fmt = normalize_format(format)
        if fmt not in CALENDAR_FORMATS:
            raise ValueError(f"Unsupported format '{format}'. Allowed: {', '.join(CALENDAR_FORMATS)}.")
        if status not in RepurposingStatus.ALL:
            raise ValueError(
                f"Unsupported status '{status}'. Allowed: {', '.join(RepurposingStatus.ALL)}."
            )
        if ArticleRepository(db).get(article_id) is None:
            raise RecordNotFoundError(f"Article not found: {article_id}")

        try:
            row = RepurposingRepository(db).upsert_status(
                article_id=article_id,
                format=fmt,
                status=status,
                notes=notes,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Calendar status updated article_id=%s format=%s status=%s", article_id, fmt, status)
        return row


@lru_cache(maxsize=1)
def get_calendar_service() -> CalendarService:
    return CalendarService()

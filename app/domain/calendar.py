"""
app/domain/calendar.py

Inputs and output rows of the repurposing calendar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CalendarArticle:
    id: int
    title: str
    source: str | None
    imported_at: datetime | None


@dataclass(frozen=True)
class StatusRecord:
    article_id: int
    format: str
    status: str
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DraftRecord:
    article_id: int
    format: str


@dataclass
class CalendarRow:
    """
    One calendar line: the article plus a status and draft count per format.
    """

    id: int
    title: str
    source: str | None
    imported_at: datetime | None
    statuses: dict[str, str] = field(default_factory=dict)
    draft_counts: dict[str, int] = field(default_factory=dict)

"""
app/schemas/calendar.py

Schemas for the repurposing calendar.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CalendarRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    source: str | None = None
    imported_at: datetime | None = None
    statuses: dict[str, str]
    draft_counts: dict[str, int]


class CalendarResponse(BaseModel):
    rows: list[CalendarRowResponse] = Field(default_factory=list)


class CalendarStatusUpdateRequest(BaseModel):
    article_id: int
    format: str
    status: str
    notes: str | None = None


class CalendarStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    article_id: int
    format: str
    status: str
    notes: str | None = None
    updated_at: datetime | None = None

"""
app/schemas/inbox.py

Schemas for the inbox review queue.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RawEmailSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str | None = None
    from_address: str | None = None
    from_name: str | None = None
    status: str
    error_message: str | None = None
    article_id: int | None = None
    gmail_message_id: str | None = None
    received_at: datetime
    processed_at: datetime | None = None


class RawEmailResponse(RawEmailSummaryResponse):
    raw_text: str | None = None
    raw_html: str | None = None
    gmail_thread_id: str | None = None


class RawEmailListResponse(BaseModel):
    items: list[RawEmailSummaryResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class RawEmailStatusUpdateRequest(BaseModel):
    status: str
    error_message: str | None = None


class ApproveEmailResponse(BaseModel):
    email_id: int
    article_id: int
    title: str
    is_article: bool
    non_article_reason: str | None = None

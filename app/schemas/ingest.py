"""
app/schemas/ingest.py

Schemas for Gmail ingest runs, the ingest log and the email webhook.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IngestRunRequest(BaseModel):
    max_per_source: int = Field(default=50, ge=1, le=200)
    after_date: datetime | None = None


class IngestRunResponse(BaseModel):
    status: str
    emails_found: int = Field(..., ge=0)
    emails_new: int = Field(..., ge=0)
    emails_skipped: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)
    duration_ms: int = Field(..., ge=0)


class IngestLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    run_at: datetime
    status: str
    emails_found: int
    emails_new: int
    emails_skipped: int
    error_message: str | None = None
    duration_ms: int | None = None


class IngestLogListResponse(BaseModel):
    logs: list[IngestLogResponse] = Field(default_factory=list)


class WebhookAcceptedResponse(BaseModel):
    success: bool = True
    id: int


class WebhookErrorResponse(BaseModel):
    success: bool = False
    error: str

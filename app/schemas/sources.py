"""
app/schemas/sources.py

Request and response schemas for newsletter source management.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NewsletterSourceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    email_address: str = Field(..., min_length=3, max_length=320)


class NewsletterSourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email_address: str
    is_active: bool
    last_ingested_at: datetime | None = None
    total_ingested: int = 0
    created_at: datetime | None = None


class NewsletterSourceToggleResponse(BaseModel):
    id: int
    is_active: bool

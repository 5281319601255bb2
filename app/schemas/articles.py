"""
app/schemas/articles.py

Schemas for the article library and generated drafts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArticleCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=512)
    url: str | None = None
    source: str | None = None
    author: str | None = None
    full_text: str | None = None
    summary: str | None = None
    key_insights: list[str] = Field(default_factory=list)
    publication_date: datetime | None = None


class ArticleSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str | None = None
    source: str | None = None
    author: str | None = None
    summary: str | None = None
    publication_date: datetime | None = None
    imported_at: datetime
    is_favourite: bool
    word_count: int


class ArticleResponse(ArticleSummaryResponse):
    full_text: str | None = None
    key_insights: list[Any] | None = None
    updated_at: datetime | None = None


class ArticleListResponse(BaseModel):
    items: list[ArticleSummaryResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class FavouriteToggleResponse(BaseModel):
    id: int
    is_favourite: bool


class DraftGenerateRequest(BaseModel):
    format: str
    custom_angle: str | None = Field(default=None, max_length=512)


class DraftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    article_id: int
    format: str
    title: str | None = None
    content: str
    angle: str | None = None
    created_at: datetime


class DraftListResponse(BaseModel):
    drafts: list[DraftResponse] = Field(default_factory=list)


class ArticleUpdateRequest(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=512)
    url: str | None = Field(default=None, max_length=2048)
    source: str | None = Field(default=None, max_length=256)
    author: str | None = Field(default=None, max_length=256)
    full_text: str | None = None
    summary: str | None = None
    key_insights: list[str] | None = None
    publication_date: datetime | None = None


class ArticleImportRequest(BaseModel):
    raw_text: str = Field(..., min_length=10)


class ArticleImportResponse(BaseModel):
    count: int = Field(..., ge=0)
    articles: list[ArticleSummaryResponse] = Field(default_factory=list)

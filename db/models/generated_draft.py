"""
db/models/generated_draft.py

LLM-generated derivative content for an article.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class ContentFormat:
    VIDEO_SCRIPT = "video_script"
    LINKEDIN_POST = "linkedin_post"
    INSTAGRAM_CAPTION = "instagram_caption"
    BLOG_POST = "blog_post"

    # Stored by older releases before blog outlines became full posts.
    LEGACY_BLOG_OUTLINE = "blog_outline"

    ALL = (VIDEO_SCRIPT, LINKEDIN_POST, INSTAGRAM_CAPTION, BLOG_POST)


class GeneratedDraft(Base, CreatedAtMixin):
    __tablename__ = "generated_drafts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
    )
    format: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    angle: Mapped[str | None] = mapped_column(String(512), nullable=True)

    __table_args__ = (
        Index("ix_generated_drafts_article_created_at", "article_id", "created_at"),
        Index("ix_generated_drafts_article_format", "article_id", "format"),
    )

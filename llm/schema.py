"""Structured output schemas for LLM extraction and generation."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class EmailExtraction(BaseModel):
    """Article content extracted from a newsletter email."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = ""
    source: str = ""
    author: str = ""
    summary: str = ""
    key_insights: List[str] = Field(default_factory=list, alias="keyInsights")
    full_text: str = Field(default="", alias="fullText")
    publication_date: str = Field(default="", alias="publicationDate")
    is_article: bool = Field(default=True, alias="isArticle")
    non_article_reason: str = Field(default="", alias="nonArticleReason")


class GeneratedContent(BaseModel):
    """One generated draft for a content format."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    angle: str = ""
    content: str = Field(min_length=1)


class ExtractedArticle(BaseModel):
    """One article found in pasted newsletter text."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = ""
    url: str = ""
    source: str = ""
    author: str = ""
    summary: str = ""
    key_insights: List[str] = Field(default_factory=list, alias="keyInsights")
    full_text: str = Field(default="", alias="fullText")
    publication_date: str = Field(default="", alias="publicationDate")


class BulkExtraction(BaseModel):
    """All articles extracted from one block of newsletter text."""

    articles: List[ExtractedArticle] = Field(default_factory=list)

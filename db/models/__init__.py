"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.article import Article
from db.models.content_repurposing import ContentRepurposing, RepurposingStatus
from db.models.generated_draft import ContentFormat, GeneratedDraft
from db.models.ingest_log import IngestLog, IngestRunStatus
from db.models.newsletter_source import NewsletterSource
from db.models.raw_email import RawEmail, RawEmailStatus

__all__ = [
    "Article",
    "ContentFormat",
    "ContentRepurposing",
    "GeneratedDraft",
    "IngestLog",
    "IngestRunStatus",
    "NewsletterSource",
    "RawEmail",
    "RawEmailStatus",
    "RepurposingStatus",
]

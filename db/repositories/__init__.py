"""
Repository layer exports.
"""

from db.repositories.article_repository import ArticleRepository
from db.repositories.draft_repository import DraftRepository
from db.repositories.errors import RecordNotFoundError, RepositoryError, StoreUnavailableError
from db.repositories.ingest_log_repository import IngestLogRepository
from db.repositories.raw_email_repository import RawEmailRepository
from db.repositories.repurposing_repository import RepurposingRepository
from db.repositories.source_repository import NewsletterSourceRepository

__all__ = [
    "ArticleRepository",
    "DraftRepository",
    "IngestLogRepository",
    "NewsletterSourceRepository",
    "RawEmailRepository",
    "RecordNotFoundError",
    "RepositoryError",
    "RepurposingRepository",
    "StoreUnavailableError",
]

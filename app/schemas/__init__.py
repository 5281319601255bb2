"""
app/schemas package marker.
"""

from app.schemas.articles import ArticleListResponse, ArticleResponse, DraftResponse
from app.schemas.calendar import CalendarResponse, CalendarRowResponse
from app.schemas.inbox import RawEmailListResponse, RawEmailResponse
from app.schemas.ingest import IngestLogResponse, IngestRunResponse
from app.schemas.sources import NewsletterSourceResponse

__all__ = [
    "ArticleListResponse",
    "ArticleResponse",
    "CalendarResponse",
    "CalendarRowResponse",
    "DraftResponse",
    "IngestLogResponse",
    "IngestRunResponse",
    "NewsletterSourceResponse",
    "RawEmailListResponse",
    "RawEmailResponse",
]

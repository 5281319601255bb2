"""
app/services package marker.
"""

from app.services.article_service import ArticleService, get_article_service
from app.services.calendar_service import CalendarService, derive_calendar_rows, get_calendar_service
from app.services.draft_service import DraftService, get_draft_service
from app.services.gmail_ingest_service import GmailIngestService, get_gmail_ingest_service
from app.services.inbox_service import ExtractionFailedError, InboxService, get_inbox_service

__all__ = [
    "ArticleService",
    "get_article_service",
    "CalendarService",
    "derive_calendar_rows",
    "get_calendar_service",
    "DraftService",
    "get_draft_service",
    "GmailIngestService",
    "get_gmail_ingest_service",
    "ExtractionFailedError",
    "InboxService",
    "get_inbox_service",
]

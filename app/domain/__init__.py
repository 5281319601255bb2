"""
app/domain package marker.
"""

from app.domain.calendar import CalendarArticle, CalendarRow, DraftRecord, StatusRecord
from app.domain.inbox import InboundEmail
from app.domain.ingestion import IngestRunResult
from app.domain.mail import MailMessage, MonitoredSource

__all__ = [
    "CalendarArticle",
    "CalendarRow",
    "DraftRecord",
    "InboundEmail",
    "IngestRunResult",
    "MailMessage",
    "MonitoredSource",
    "StatusRecord",
]

"""
app/api/routers package marker.
"""

from app.api.routers.articles import router as articles_router
from app.api.routers.calendar import router as calendar_router
from app.api.routers.email_webhook import router as email_webhook_router
from app.api.routers.inbox import router as inbox_router
from app.api.routers.ingest import router as ingest_router
from app.api.routers.sources import router as sources_router

__all__ = [
    "articles_router",
    "calendar_router",
    "email_webhook_router",
    "inbox_router",
    "ingest_router",
    "sources_router",
]

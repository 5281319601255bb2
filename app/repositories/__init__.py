"""
app/repositories package marker.
"""

from app.repositories.ingest_store import SQLAlchemyIngestStore

__all__ = ["SQLAlchemyIngestStore"]

"""
app/domain/ingestion.py

Result of one Gmail ingest run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from db.models.ingest_log import IngestRunStatus


@dataclass
class IngestRunResult:
    """
    Aggregate outcome returned to the caller of an ingest run.

    A run that found nothing and a run whose messages were all known
    both report ``emails_new == 0``; ``emails_found`` tells them apart.
    """

    emails_found: int = 0
    emails_new: int = 0
    emails_skipped: int = 0
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def status(self) -> str:
        if not self.errors:
            return IngestRunStatus.SUCCESS
        if self.emails_new > 0:
            return IngestRunStatus.PARTIAL
        return IngestRunStatus.ERROR

    @property
    def error_message(self) -> str | None:
        return "; ".join(self.errors) or None

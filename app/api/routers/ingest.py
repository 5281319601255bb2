"""
app/api/routers/ingest.py

Gmail ingest trigger and ingest log endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.repositories.ingest_store import SQLAlchemyIngestStore
from app.schemas.ingest import (
    IngestLogListResponse,
    IngestLogResponse,
    IngestRunRequest,
    IngestRunResponse,
)
from app.services.gmail_ingest_service import GmailIngestService, get_gmail_ingest_service
from db.repositories.ingest_log_repository import IngestLogRepository
from db.session import get_db

router = APIRouter(prefix="/ingest", tags=["ingest"])


@router.get("/logs", response_model=IngestLogListResponse)
def list_ingest_logs(
    limit: int = Query(default=20, ge=1, le=100, description="Max log entries returned"),
    db: Session = Depends(get_db),
) -> IngestLogListResponse:
    rows = IngestLogRepository(db).list_recent(limit=limit)
    return IngestLogListResponse(logs=[IngestLogResponse.model_validate(row) for row in rows])


@router.get("/last-run", response_model=IngestLogResponse | None)
def get_last_run(db: Session = Depends(get_db)) -> IngestLogResponse | None:
    row = IngestLogRepository(db).get_last()
    return IngestLogResponse.model_validate(row) if row is not None else None


@router.post("/run", response_model=IngestRunResponse)
def run_ingest(
    body: IngestRunRequest | None = None,
    db: Session = Depends(get_db),
    ingest_service: GmailIngestService = Depends(get_gmail_ingest_service),
) -> IngestRunResponse:
    """
    Run one Gmail ingest synchronously. Failures are reported in the body.
    """

    request = body or IngestRunRequest()
    result = ingest_service.run(
        store=SQLAlchemyIngestStore(db),
        max_per_source=request.max_per_source,
        after_date=request.after_date,
    )
    return IngestRunResponse(
        status=result.status,
        emails_found=result.emails_found,
        emails_new=result.emails_new,
        emails_skipped=result.emails_skipped,
        errors=list(result.errors),
        duration_ms=result.duration_ms,
    )

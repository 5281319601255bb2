"""
app/api/routers/inbox.py

Inbox review endpoints: list, inspect, change status and approve emails.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.schemas.inbox import (
    ApproveEmailResponse,
    RawEmailListResponse,
    RawEmailResponse,
    RawEmailStatusUpdateRequest,
    RawEmailSummaryResponse,
)
from app.services.inbox_service import ExtractionFailedError, InboxService, get_inbox_service
from db.repositories.errors import RecordNotFoundError
from db.session import get_db

router = APIRouter(prefix="/inbox", tags=["inbox"])


@router.get("", response_model=RawEmailListResponse)
def list_emails(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    inbox_service: InboxService = Depends(get_inbox_service),
) -> RawEmailListResponse:
    items, total = inbox_service.list_emails(db=db, status=status_filter, limit=limit, offset=offset)
    return RawEmailListResponse(
        items=[RawEmailSummaryResponse.model_validate(item) for item in items],
        total=total,
    )


@router.get("/{email_id}", response_model=RawEmailResponse)
def get_email(
    email_id: int,
    db: Session = Depends(get_db),
    inbox_service: InboxService = Depends(get_inbox_service),
) -> RawEmailResponse:
    try:
        email = inbox_service.get_email(db=db, email_id=email_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return RawEmailResponse.model_validate(email)


@router.patch("/{email_id}/status", response_model=RawEmailSummaryResponse)
def update_email_status(
    email_id: int,
    body: RawEmailStatusUpdateRequest,
    db: Session = Depends(get_db),
    inbox_service: InboxService = Depends(get_inbox_service),
) -> RawEmailSummaryResponse:
    try:
        email = inbox_service.update_status(
            db=db,
            email_id=email_id,
            status=body.status,
            error_message=body.error_message,
        )
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return RawEmailSummaryResponse.model_validate(email)


@router.post("/{email_id}/approve", response_model=ApproveEmailResponse)
def approve_email(
    email_id: int,
    db: Session = Depends(get_db),
    inbox_service: InboxService = Depends(get_inbox_service),
) -> ApproveEmailResponse:
    """
    Extract the email into a library article. Extraction failures return 502.
    """

    try:
        article, extracted = inbox_service.approve(db=db, email_id=email_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ExtractionFailedError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return ApproveEmailResponse(
        email_id=email_id,
        article_id=article.id,
        title=article.title,
        is_article=extracted.is_article,
        non_article_reason=extracted.non_article_reason or None,
    )

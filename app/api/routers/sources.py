"""
app/api/routers/sources.py

Newsletter source management endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.sources import (
    NewsletterSourceCreateRequest,
    NewsletterSourceResponse,
    NewsletterSourceToggleResponse,
)
from db.repositories.errors import RecordNotFoundError
from db.repositories.source_repository import NewsletterSourceRepository
from db.session import get_db

router = APIRouter(prefix="/sources", tags=["sources"])


@router.get("", response_model=list[NewsletterSourceResponse])
def list_sources(db: Session = Depends(get_db)) -> list[NewsletterSourceResponse]:
    rows = NewsletterSourceRepository(db).list_sources()
    return [NewsletterSourceResponse.model_validate(row) for row in rows]


@router.post("", response_model=NewsletterSourceResponse, status_code=status.HTTP_201_CREATED)
def add_source(
    body: NewsletterSourceCreateRequest,
    db: Session = Depends(get_db),
) -> NewsletterSourceResponse:
    """
    Add a source, or reactivate and rename an existing one with the same address.
    """

    try:
        source = NewsletterSourceRepository(db).upsert_source(
            name=body.name.strip(),
            email_address=body.email_address.strip().lower(),
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return NewsletterSourceResponse.model_validate(source)


@router.post("/{source_id}/toggle", response_model=NewsletterSourceToggleResponse)
def toggle_source(source_id: int, db: Session = Depends(get_db)) -> NewsletterSourceToggleResponse:
    try:
        source = NewsletterSourceRepository(db).toggle_active(source_id)
        db.commit()
    except RecordNotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NewsletterSourceToggleResponse(id=source.id, is_active=source.is_active)


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_source(source_id: int, db: Session = Depends(get_db)) -> None:
    try:
        NewsletterSourceRepository(db).delete_source(source_id)
        db.commit()
    except RecordNotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

"""
app/api/routers/calendar.py

Repurposing calendar endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.calendar import (
    CalendarResponse,
    CalendarRowResponse,
    CalendarStatusResponse,
    CalendarStatusUpdateRequest,
)
from app.services.calendar_service import CalendarService, get_calendar_service
from db.repositories.errors import RecordNotFoundError
from db.session import get_db

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("", response_model=CalendarResponse)
def get_calendar(
    db: Session = Depends(get_db),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> CalendarResponse:
    rows = calendar_service.get_calendar_data(db=db)
    return CalendarResponse(rows=[CalendarRowResponse.model_validate(row) for row in rows])


@router.put("/status", response_model=CalendarStatusResponse)
def update_calendar_status(
    body: CalendarStatusUpdateRequest,
    db: Session = Depends(get_db),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> CalendarStatusResponse:
    try:
        row = calendar_service.update_status(
            db=db,
            article_id=body.article_id,
            format=body.format,
            status=body.status,
            notes=body.notes,
        )
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CalendarStatusResponse.model_validate(row)

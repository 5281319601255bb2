"""
app/api/routers/email_webhook.py

Inbound email webhook used by forwarding services.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import (
    WebhookPayloadError,
    enforce_webhook_rate_limit,
    parse_webhook_payload,
    read_webhook_body,
    read_webhook_form,
)
from app.schemas.ingest import WebhookAcceptedResponse, WebhookErrorResponse
from app.services.inbox_service import InboxService, get_inbox_service
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])


@router.post(
    "/api/ingest/email",
    response_model=WebhookAcceptedResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": WebhookErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": WebhookErrorResponse},
    },
    dependencies=[Depends(enforce_webhook_rate_limit)],
)
def receive_email(
    request: Request,
    body: bytes = Depends(read_webhook_body),
    form_fields: dict[str, Any] | None = Depends(read_webhook_form),
    db: Session = Depends(get_db),
    inbox_service: InboxService = Depends(get_inbox_service),
) -> WebhookAcceptedResponse | JSONResponse:
    """
    Queue one forwarded email as a pending inbox item.
    """

    try:
        email = parse_webhook_payload(request.headers.get("content-type"), body, form_fields)
    except WebhookPayloadError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=WebhookErrorResponse(error=str(exc)).model_dump(),
        )

    try:
        row = inbox_service.receive_email(db=db, email=email)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Email webhook insert failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=WebhookErrorResponse(error=str(exc)).model_dump(),
        )
    return WebhookAcceptedResponse(id=row.id)

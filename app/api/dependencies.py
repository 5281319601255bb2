"""
app/api/dependencies.py

Shared FastAPI dependencies for the email webhook.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import Depends, HTTPException, Request, status

from app.api.rate_limit import SlidingWindowRateLimiter, get_webhook_rate_limiter
from app.config import WebhookSettings, get_webhook_settings
from app.domain.inbox import InboundEmail

TEXT_CONTENT_TYPES = {"text/plain", "text/html"}
FORM_CONTENT_TYPES = {"application/x-www-form-urlencoded", "multipart/form-data"}


class WebhookPayloadError(ValueError):
    """
    Raised when a webhook body cannot be decoded for its content type.
    """


def media_type_of(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def parse_webhook_payload(
    content_type: str | None,
    body: bytes,
    form_fields: dict[str, Any] | None = None,
) -> InboundEmail:
    """
    Decode a webhook body according to its content type.

    JSON and form bodies map through the field aliases; text bodies become
    the email text; any other type is treated as an empty mapping. Form
    fields arrive already parsed by ``read_webhook_form``.
    """

    media_type = media_type_of(content_type)

    if media_type == "application/json" or media_type.endswith("+json"):
        if not body.strip():
            return InboundEmail.from_body({})
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise WebhookPayloadError(f"Invalid JSON body: {exc}") from exc
        if isinstance(payload, str):
            return InboundEmail.from_body(payload)
        if not isinstance(payload, dict):
            raise WebhookPayloadError("JSON body must be an object.")
        return InboundEmail.from_body(payload)

    if media_type in FORM_CONTENT_TYPES:
        return InboundEmail.from_body(form_fields or {})

    if media_type in TEXT_CONTENT_TYPES:
        return InboundEmail.from_body(body.decode("utf-8", errors="replace"))

    return InboundEmail.from_body({})


async def read_webhook_body(
    request: Request,
    settings: WebhookSettings = Depends(get_webhook_settings),
) -> bytes:
    """
    Read the raw request body, rejecting anything over the configured cap.

    The body is read through ``request.body()`` so Starlette keeps it for a
    later ``request.form()`` call.
    """

    max_bytes = settings.max_body_bytes
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Request body exceeds {max_bytes} bytes.",
        )

    body = await request.body()
    if len(body) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Request body exceeds {max_bytes} bytes.",
        )
    return body


async def read_webhook_form(
    request: Request,
    body: bytes = Depends(read_webhook_body),
) -> dict[str, Any] | None:
    """
    Parse form-encoded and multipart webhook bodies; ``None`` for other types.

    Multipart file parts (attachments) are dropped; only text fields are kept.
    """

    if media_type_of(request.headers.get("content-type")) not in FORM_CONTENT_TYPES:
        return None

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def enforce_webhook_rate_limit(
    request: Request,
    limiter: SlidingWindowRateLimiter = Depends(get_webhook_rate_limiter),
) -> None:
    client_key = request.client.host if request.client else "unknown"
    if not limiter.allow(client_key):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Try again later.",
        )

"""
Structured log lines for background runs.

Run summaries go out as one JSON object per line; fields that are None
are dropped so absent values never show up as ``null`` noise.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any


def elapsed_ms(started: float) -> int:
    """
    Milliseconds since ``started``, a ``time.monotonic()`` reading.
    """

    return int((time.monotonic() - started) * 1000)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    payload: dict[str, Any] = {
        "event": event,
        "logged_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
    }
    payload.update({key: value for key, value in fields.items() if value is not None})
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))

"""
app/domain/mail.py

Mail-search values exchanged between the Gmail client and the ingest run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MailMessage:
    """
    One message as returned by the mail search or thread read.

    Search results usually carry only ``snippet``; thread reads with full
    messages carry ``body``. Absent fields are ``None``, not empty strings.
    """

    id: str
    thread_id: str
    subject: str | None = None
    sender: str | None = None
    date: str | None = None
    snippet: str | None = None
    body: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "MailMessage":
        return cls(
            id=str(payload.get("id") or ""),
            thread_id=str(payload.get("threadId") or payload.get("thread_id") or ""),
            subject=payload.get("subject"),
            sender=payload.get("from"),
            date=payload.get("date"),
            snippet=payload.get("snippet"),
            body=payload.get("body"),
        )


@dataclass(frozen=True)
class MonitoredSource:
    """
    Snapshot of an active newsletter source taken at the start of a run.
    """

    id: int
    email_address: str

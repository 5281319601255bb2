"""
app/domain/inbox.py

Normalized payload of an email posted to the ingest webhook.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

NO_SUBJECT = "(no subject)"


def _pick(body: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = body.get(key)
        if value is not None:
            return value
    return None


def _optional_str(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, default=str) if isinstance(value, (dict, list)) else str(value)


@dataclass(frozen=True)
class InboundEmail:
    subject: str
    from_address: str
    from_name: str
    raw_text: str
    raw_html: str | None = None

    @classmethod
    def from_body(cls, body: dict[str, Any] | str | None) -> "InboundEmail":
        """
        Accept a plain-text body or a JSON/form mapping using any of the
        common field aliases forwarding services send.
        """

        if isinstance(body, str):
            return cls(subject=NO_SUBJECT, from_address="", from_name="", raw_text=body)

        payload = body or {}
        raw_text = _pick(payload, "text", "body", "rawText", "content")
        if raw_text is None:
            raw_text = json.dumps(payload, default=str)
        return cls(
            subject=str(_pick(payload, "subject", "Subject") or NO_SUBJECT),
            from_address=str(_pick(payload, "from", "From", "sender") or ""),
            from_name=str(_pick(payload, "fromName", "from_name") or ""),
            raw_text=str(raw_text),
            raw_html=_optional_str(_pick(payload, "html", "rawHtml")),
        )

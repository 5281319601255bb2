"""
app/connectors/base.py

Mail search capability used by the Gmail ingest run.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from app.domain.mail import MailMessage

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}|\[[\s\S]*\]")


class MailSearchError(RuntimeError):
    """
    Raised when a mail search or thread read cannot be completed.
    """


class MailSearchClient(ABC):
    """
    Search a mailbox and read full threads.

    Implementations make exactly one attempt per call; retrying is the
    caller's decision.
    """

    @abstractmethod
    def search(self, query: str, max_results: int) -> list[MailMessage]:
        """
        Return messages matching a Gmail-style query expression.
        """

    @abstractmethod
    def fetch_threads(
        self,
        thread_ids: Sequence[str],
        *,
        include_full: bool = True,
    ) -> dict[str, list[MailMessage]]:
        """
        Return the messages of each requested thread, keyed by thread id.
        """


def extract_json_payload(text: str) -> Any:
    """
    Parse the first JSON object or array embedded in tool output.
    """

    stripped = text.strip()
    match = _JSON_BLOCK.search(stripped)
    if match is None:
        raise MailSearchError(f"Could not parse tool output: {stripped[:200]}")
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MailSearchError(f"Tool output was not valid JSON: {exc}") from exc


def parse_search_payload(payload: Any) -> list[MailMessage]:
    messages = payload.get("messages") if isinstance(payload, dict) else None
    if not messages:
        return []
    return [MailMessage.from_payload(item) for item in messages if isinstance(item, dict)]


def parse_threads_payload(payload: Any) -> dict[str, list[MailMessage]]:
    threads = payload.get("threads") if isinstance(payload, dict) else None
    result: dict[str, list[MailMessage]] = {}
    for thread in threads or []:
        if not isinstance(thread, dict) or not thread.get("id"):
            continue
        result[str(thread["id"])] = [
            MailMessage.from_payload(item)
            for item in thread.get("messages") or []
            if isinstance(item, dict)
        ]
    return result

"""
app/connectors/gmail_cli.py

Gmail access through the MCP command-line tool, run as a subprocess.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence
from typing import Any

from app.config import GmailCLISettings
from app.connectors.base import (
    MailSearchClient,
    MailSearchError,
    extract_json_payload,
    parse_search_payload,
    parse_threads_payload,
)
from app.domain.mail import MailMessage

logger = logging.getLogger(__name__)

SEARCH_TOOL = "gmail_search_messages"
READ_THREADS_TOOL = "gmail_read_threads"


class GmailCLIClient(MailSearchClient):
    """
    Invokes ``<binary> tool call <tool> --server <server> --input <json>``.

    Each call is bounded by the configured timeout and stdout size cap.
    """

    def __init__(self, *, settings: GmailCLISettings) -> None:
        self._settings = settings

    def search(self, query: str, max_results: int) -> list[MailMessage]:
        payload = self._call_tool(SEARCH_TOOL, {"q": query, "max_results": max_results})
        return parse_search_payload(payload)

    def fetch_threads(
        self,
        thread_ids: Sequence[str],
        *,
        include_full: bool = True,
    ) -> dict[str, list[MailMessage]]:
        if not thread_ids:
            return {}
        payload = self._call_tool(
            READ_THREADS_TOOL,
            {"thread_ids": list(thread_ids), "include_full_messages": include_full},
        )
        return parse_threads_payload(payload)

    def _call_tool(self, tool_name: str, tool_input: dict[str, Any]) -> Any:
        args = [
            self._settings.binary,
            "tool",
            "call",
            tool_name,
            "--server",
            self._settings.server,
            "--input",
            json.dumps(tool_input),
        ]
        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self._settings.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise MailSearchError(
                f"{tool_name} timed out after {self._settings.timeout_seconds:.0f}s"
            ) from exc
        except OSError as exc:
            raise MailSearchError(f"{tool_name} could not be started: {exc}") from exc

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""

        if len(stdout.encode("utf-8")) > self._settings.max_output_bytes:
            raise MailSearchError(
                f"{tool_name} output exceeded {self._settings.max_output_bytes} bytes"
            )
        if completed.returncode != 0:
            raise MailSearchError(
                f"{tool_name} exited with code {completed.returncode}: {stderr.strip()[:500]}"
            )
        if "Error" in stderr:
            raise MailSearchError(f"MCP error: {stderr.strip()[:500]}")

        logger.debug("Gmail tool call completed tool=%s bytes=%d", tool_name, len(stdout))
        return extract_json_payload(stdout)

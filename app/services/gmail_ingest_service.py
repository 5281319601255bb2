"""
app/services/gmail_ingest_service.py

Gmail newsletter ingest run.

Searches the mailbox for mail from every active newsletter source, skips
messages whose Gmail id is already stored, reads full bodies for the rest
and queues each one as a pending inbox email. Every path after the source
lookup writes one ingest log entry, and no exception escapes ``run``.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from functools import lru_cache
from typing import Protocol

from app.config import IngestSettings, get_gmail_cli_settings, get_ingest_settings
from app.connectors import GmailCLIClient, MailSearchClient
from app.domain.ingestion import IngestRunResult
from app.domain.mail import MailMessage, MonitoredSource
from app.logging_utils import elapsed_ms, log_event
from db.models.ingest_log import IngestRunStatus
from db.repositories.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

NO_SUBJECT = "(no subject)"

_FROM_WITH_NAME = re.compile(r"^(.+?)\s*<([^>]+)>$")
_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")


class IngestStore(Protocol):
    def list_active_sources(self) -> list[MonitoredSource]:
        ...

    def find_existing_message_ids(self, message_ids: Sequence[str]) -> set[str]:
        ...

    def insert_raw_email(
        self,
        *,
        subject: str,
        from_address: str,
        from_name: str,
        raw_text: str,
        gmail_message_id: str,
        gmail_thread_id: str,
        received_at: datetime,
    ) -> int:
        ...

    def record_source_ingest(self, *, source_id: int, ingested_at: datetime) -> None:
        ...

    def insert_ingest_log(
        self,
        *,
        status: str,
        emails_found: int,
        emails_new: int,
        emails_skipped: int,
        error_message: str | None,
        duration_ms: int,
    ) -> None:
        ...


def parse_from_header(value: str) -> tuple[str, str]:
    """
    Split ``Name <addr>`` or a bare ``addr`` into (name, lower-cased address).
    """

    match = _FROM_WITH_NAME.match(value)
    if match:
        name = _SURROUNDING_QUOTES.sub("", match.group(1).strip())
        return name, match.group(2).strip().lower()
    return "", value.strip().lower()


def parse_message_date(value: str | None, *, fallback: datetime) -> datetime:
    """
    Parse an RFC 2822 or ISO 8601 date header; unparseable values use ``fallback``.
    """

    if not value:
        return fallback
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return fallback
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_search_query(sources: Sequence[MonitoredSource], after_date: datetime | None = None) -> str:
    from_clause = " OR ".join(f"from:{source.email_address}" for source in sources)
    query = f"({from_clause})"
    if after_date is not None:
        query += f" after:{int(after_date.timestamp())}"
    return query


def match_source(sources: Sequence[MonitoredSource], from_address: str) -> MonitoredSource | None:
    # Substring containment can attribute mail to a source whose address is
    # part of another's; kept for compatibility with existing counters.
    for source in sources:
        if source.email_address == from_address or source.email_address in from_address:
            return source
    return None


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if value is not None:
            return value
    return None


class GmailIngestService:
    """
    Coordinates one ingest run between the mail client and the store.
    """

    def __init__(
        self,
        *,
        mail_client: MailSearchClient,
        settings: IngestSettings,
    ) -> None:
        self._mail_client = mail_client
        self._settings = settings

    def run(
        self,
        *,
        store: IngestStore,
        max_per_source: int | None = None,
        after_date: datetime | None = None,
    ) -> IngestRunResult:
        started = time.monotonic()
        result = IngestRunResult()
        per_source = max(1, max_per_source or self._settings.default_max_per_source)

        try:
            sources = store.list_active_sources()
        except StoreUnavailableError as exc:
            logger.error("Gmail ingest aborted, store unavailable: %s", exc)
            result.errors.append("Database not available")
            result.duration_ms = elapsed_ms(started)
            return result
        except Exception as exc:  # noqa: BLE001
            logger.exception("Gmail ingest aborted, could not load newsletter sources")
            result.errors.append(f"Failed to load newsletter sources: {exc}")
            result.duration_ms = elapsed_ms(started)
            return result

        if not sources:
            logger.info("Gmail ingest skipped: no active newsletter sources")
            result.duration_ms = elapsed_ms(started)
            return result

        query = build_search_query(sources, after_date)
        try:
            messages = self._mail_client.search(query, per_source * len(sources))
        except Exception as exc:  # noqa: BLE001
            logger.error("Gmail search failed query=%r error=%s", query, exc)
            result.errors.append(f"Gmail search failed: {exc}")
            return self._finish(store, result, started)

        result.emails_found = len(messages)
        if not messages:
            return self._finish(store, result, started)

        try:
            new_messages = self._select_new(store, messages)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Gmail ingest dedup lookup failed")
            result.errors.append(f"Dedup lookup failed: {exc}")
            return self._finish(store, result, started)

        result.emails_skipped = len(messages) - len(new_messages)
        if not new_messages:
            return self._finish(store, result, started)

        threads = self._read_threads(new_messages)
        now = datetime.now(timezone.utc)

        for message in new_messages:
            try:
                from_address = self._save_message(store, message, threads, now)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to insert Gmail message id=%s: %s", message.id, exc)
                result.errors.append(f"Failed to insert message {message.id}: {exc}")
                continue
            result.emails_new += 1
            self._record_source(store, sources, message, from_address)

        return self._finish(store, result, started)

    def _select_new(self, store: IngestStore, messages: Sequence[MailMessage]) -> list[MailMessage]:
        # First occurrence wins when a search lists the same id twice.
        unique: dict[str, MailMessage] = {}
        for message in messages:
            if message.id and message.id not in unique:
                unique[message.id] = message
        existing = store.find_existing_message_ids(list(unique))
        return [message for message_id, message in unique.items() if message_id not in existing]

    def _read_threads(self, messages: Sequence[MailMessage]) -> dict[str, list[MailMessage]]:
        thread_ids = list(dict.fromkeys(message.thread_id for message in messages if message.thread_id))
        batch_size = self._settings.thread_batch_size
        threads: dict[str, list[MailMessage]] = {}

        for start in range(0, len(thread_ids), batch_size):
            batch = thread_ids[start : start + batch_size]
            try:
                threads.update(self._mail_client.fetch_threads(batch, include_full=True))
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Failed to read full thread content batch_start=%d size=%d error=%s; "
                    "falling back to search snippets",
                    start,
                    len(batch),
                    exc,
                )
        return threads

    def _save_message(
        self,
        store: IngestStore,
        message: MailMessage,
        threads: dict[str, list[MailMessage]],
        now: datetime,
    ) -> str:
        full = next(
            (candidate for candidate in threads.get(message.thread_id, []) if candidate.id == message.id),
            message,
        )

        from_name, from_address = parse_from_header(_first_present(full.sender, message.sender) or "")
        raw_text = _first_present(full.body, full.snippet, message.snippet) or ""
        subject = _first_present(full.subject, message.subject) or NO_SUBJECT
        received_at = parse_message_date(_first_present(full.date, message.date), fallback=now)

        store.insert_raw_email(
            subject=subject,
            from_address=from_address,
            from_name=from_name,
            raw_text=raw_text,
            gmail_message_id=message.id,
            gmail_thread_id=message.thread_id,
            received_at=received_at,
        )
        return from_address

    def _record_source(
        self,
        store: IngestStore,
        sources: Sequence[MonitoredSource],
        message: MailMessage,
        from_address: str,
    ) -> None:
        """
        Bump the matching source's counter; the email row is already stored.
        """

        source = match_source(sources, from_address)
        if source is None:
            return
        try:
            store.record_source_ingest(source_id=source.id, ingested_at=datetime.now(timezone.utc))
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Failed to update source counter source_id=%d message_id=%s: %s",
                source.id,
                message.id,
                exc,
            )

    def _finish(self, store: IngestStore, result: IngestRunResult, started: float) -> IngestRunResult:
        status = result.status
        try:
            store.insert_ingest_log(
                status=status,
                emails_found=result.emails_found,
                emails_new=result.emails_new,
                emails_skipped=result.emails_skipped,
                error_message=result.error_message,
                duration_ms=elapsed_ms(started),
            )
        except Exception:  # noqa: BLE001
            logger.exception("Failed to write ingest log entry")

        result.duration_ms = elapsed_ms(started)
        log_event(
            logger,
            logging.INFO if status == IngestRunStatus.SUCCESS else logging.WARNING,
            "gmail_ingest_run",
            status=status,
            emails_found=result.emails_found,
            emails_new=result.emails_new,
            emails_skipped=result.emails_skipped,
            error_count=len(result.errors),
            duration_ms=result.duration_ms,
        )
        return result


@lru_cache(maxsize=1)
def get_gmail_ingest_service() -> GmailIngestService:
    """
    Build and cache the Gmail ingest service.
    """

    return GmailIngestService(
        mail_client=GmailCLIClient(settings=get_gmail_cli_settings()),
        settings=get_ingest_settings(),
    )

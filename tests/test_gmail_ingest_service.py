"""
tests/test_gmail_ingest_service.py

Pytest unit tests for GmailIngestService.

Uses in-memory doubles for the mail client and the ingest store; no
database and no subprocess.

Coverage
--------
- Query construction and per-source result budget
- Deduplication against stored Gmail ids and repeated ids in one search,
  idempotent reruns
- Full-thread content preferred over search snippets
- Thread batch failures fall back to search data
- Per-message insert failures: partial and error statuses
- Source counter bumps, including several messages from one source, and
  counter failures that leave the saved message counted
- Early exits: store unavailable, source lookup failure, no sources
- Search and dedup failures recorded in the ingest log
- Ingest log write failures never escape
- From-header and date parsing helpers
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import pytest

from app.config import IngestSettings
from app.connectors.base import MailSearchClient, MailSearchError
from app.domain.mail import MailMessage, MonitoredSource
from app.services.gmail_ingest_service import (
    GmailIngestService,
    build_search_query,
    match_source,
    parse_from_header,
    parse_message_date,
)
from db.repositories.errors import StoreUnavailableError

FALLBACK = datetime(2026, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Doubles
# ---------------------------------------------------------------------------


class FakeMailClient(MailSearchClient):
    def __init__(
        self,
        messages: list[MailMessage] | None = None,
        threads: dict[str, list[MailMessage]] | None = None,
        *,
        search_error: Exception | None = None,
        failing_thread_ids: set[str] | None = None,
    ) -> None:
        self.messages = messages or []
        self.threads = threads or {}
        self.search_error = search_error
        self.failing_thread_ids = failing_thread_ids or set()
        self.search_calls: list[tuple[str, int]] = []
        self.thread_calls: list[list[str]] = []

    def search(self, query: str, max_results: int) -> list[MailMessage]:
        self.search_calls.append((query, max_results))
        if self.search_error is not None:
            raise self.search_error
        return list(self.messages)

    def fetch_threads(
        self,
        thread_ids: Sequence[str],
        *,
        include_full: bool = True,
    ) -> dict[str, list[MailMessage]]:
        batch = list(thread_ids)
        self.thread_calls.append(batch)
        if self.failing_thread_ids.intersection(batch):
            raise MailSearchError("thread read failed")
        return {tid: self.threads[tid] for tid in batch if tid in self.threads}


class FakeStore:
    def __init__(
        self,
        sources: list[MonitoredSource] | None = None,
        *,
        existing_ids: set[str] | None = None,
        sources_error: Exception | None = None,
        dedup_error: Exception | None = None,
        failing_insert_ids: set[str] | None = None,
        log_error: Exception | None = None,
        counter_error: Exception | None = None,
    ) -> None:
        self.sources = sources if sources is not None else []
        self.stored_ids: set[str] = set(existing_ids or set())
        self.sources_error = sources_error
        self.dedup_error = dedup_error
        self.failing_insert_ids = failing_insert_ids or set()
        self.log_error = log_error
        self.counter_error = counter_error
        self.emails: list[dict[str, Any]] = []
        self.source_bumps: list[int] = []
        self.logs: list[dict[str, Any]] = []

    def list_active_sources(self) -> list[MonitoredSource]:
        if self.sources_error is not None:
            raise self.sources_error
        return list(self.sources)

    def find_existing_message_ids(self, message_ids: Sequence[str]) -> set[str]:
        if self.dedup_error is not None:
            raise self.dedup_error
        return {mid for mid in message_ids if mid in self.stored_ids}

    def insert_raw_email(self, **fields: Any) -> int:
        if fields["gmail_message_id"] in self.failing_insert_ids:
            raise RuntimeError("constraint violated")
        self.emails.append(fields)
        self.stored_ids.add(fields["gmail_message_id"])
        return len(self.emails)

    def record_source_ingest(self, *, source_id: int, ingested_at: datetime) -> None:
        if self.counter_error is not None:
            raise self.counter_error
        self.source_bumps.append(source_id)

    def insert_ingest_log(self, **fields: Any) -> None:
        if self.log_error is not None:
            raise self.log_error
        self.logs.append(fields)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sources() -> list[MonitoredSource]:
    return [
        MonitoredSource(id=1, email_address="news@batch.ai"),
        MonitoredSource(id=2, email_address="hello@tldr.tech"),
    ]


@pytest.fixture()
def settings() -> IngestSettings:
    return IngestSettings(default_max_per_source=50, thread_batch_size=100)


def _message(mid: str, thread: str, sender: str = "The Batch <news@batch.ai>", **extra: Any) -> MailMessage:
    return MailMessage(id=mid, thread_id=thread, sender=sender, subject=f"Subject {mid}", **extra)


def _service(client: MailSearchClient, settings: IngestSettings) -> GmailIngestService:
    return GmailIngestService(mail_client=client, settings=settings)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestSuccessfulRun:
    def test_inserts_new_messages_and_logs_success(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([_message("m1", "t1"), _message("m2", "t2", sender="hello@tldr.tech")])
        store = FakeStore(sources)

        result = _service(client, settings).run(store=store)

        assert result.status == "success"
        assert (result.emails_found, result.emails_new, result.emails_skipped) == (2, 2, 0)
        assert result.errors == []
        assert [email["gmail_message_id"] for email in store.emails] == ["m1", "m2"]
        assert store.logs[0]["status"] == "success"
        assert store.logs[0]["emails_new"] == 2
        assert store.logs[0]["error_message"] is None

    def test_search_budget_is_per_source_times_sources(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([])
        _service(client, settings).run(store=FakeStore(sources), max_per_source=10)
        assert client.search_calls == [("(from:news@batch.ai OR from:hello@tldr.tech)", 20)]

    def test_after_date_is_added_to_query(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([])
        after = datetime(2026, 2, 1, tzinfo=timezone.utc)
        _service(client, settings).run(store=FakeStore(sources), after_date=after)
        query, _ = client.search_calls[0]
        assert query.endswith(f" after:{int(after.timestamp())}")

    def test_zero_found_writes_success_log(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        store = FakeStore(sources)
        result = _service(FakeMailClient([]), settings).run(store=store)
        assert result.emails_found == 0
        assert result.status == "success"
        assert len(store.logs) == 1
        assert store.logs[0]["emails_found"] == 0

    def test_full_thread_message_preferred_over_snippet(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        search_hit = _message("m1", "t1", snippet="short snippet")
        full = MailMessage(
            id="m1",
            thread_id="t1",
            subject="Full subject",
            sender='"The Batch" <News@Batch.ai>',
            date="Tue, 03 Mar 2026 08:30:00 +0000",
            body="the complete newsletter body",
        )
        other_in_thread = MailMessage(id="m0", thread_id="t1", body="older message")
        client = FakeMailClient([search_hit], {"t1": [other_in_thread, full]})
        store = FakeStore(sources)

        _service(client, settings).run(store=store)

        (email,) = store.emails
        assert email["raw_text"] == "the complete newsletter body"
        assert email["subject"] == "Full subject"
        assert email["from_name"] == "The Batch"
        assert email["from_address"] == "news@batch.ai"
        assert email["received_at"] == datetime(2026, 3, 3, 8, 30, tzinfo=timezone.utc)
        assert email["gmail_thread_id"] == "t1"

    def test_missing_subject_and_body_defaults(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        bare = MailMessage(id="m1", thread_id="t1", sender="news@batch.ai")
        store = FakeStore(sources)
        _service(FakeMailClient([bare]), settings).run(store=store)
        (email,) = store.emails
        assert email["subject"] == "(no subject)"
        assert email["raw_text"] == ""
        assert email["from_name"] == ""

    def test_thread_ids_deduplicated_and_batched(self, sources: list[MonitoredSource]) -> None:
        settings = IngestSettings(default_max_per_source=50, thread_batch_size=2)
        messages = [
            _message("m1", "t1"),
            _message("m2", "t1"),
            _message("m3", "t2"),
            _message("m4", "t3"),
            _message("m5", ""),
        ]
        client = FakeMailClient(messages)
        _service(client, settings).run(store=FakeStore(sources))
        assert client.thread_calls == [["t1", "t2"], ["t3"]]


# ---------------------------------------------------------------------------
# Deduplication
# ---------------------------------------------------------------------------


class TestDeduplication:
    def test_known_ids_are_skipped(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1"), _message("m2", "t2")])
        store = FakeStore(sources, existing_ids={"m1"})

        result = _service(client, settings).run(store=store)

        assert (result.emails_found, result.emails_new, result.emails_skipped) == (2, 1, 1)
        assert [email["gmail_message_id"] for email in store.emails] == ["m2"]

    def test_second_run_inserts_nothing(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1"), _message("m2", "t2")])
        store = FakeStore(sources)
        service = _service(client, settings)

        service.run(store=store)
        second = service.run(store=store)

        assert second.emails_new == 0
        assert second.emails_skipped == 2
        assert second.status == "success"
        assert len(store.emails) == 2
        assert len(store.logs) == 2

    def test_messages_without_id_count_as_skipped(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([_message("", "t1"), _message("m2", "t2")])
        store = FakeStore(sources)
        result = _service(client, settings).run(store=store)
        assert result.emails_new == 1
        assert result.emails_skipped == 1

    def test_all_known_skips_thread_reads(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1")])
        store = FakeStore(sources, existing_ids={"m1"})
        _service(client, settings).run(store=store)
        assert client.thread_calls == []
        assert store.logs[0]["status"] == "success"

    def test_dedup_failure_is_logged_as_error(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        store = FakeStore(sources, dedup_error=RuntimeError("lookup exploded"))
        result = _service(FakeMailClient([_message("m1", "t1")]), settings).run(store=store)
        assert result.status == "error"
        assert result.errors == ["Dedup lookup failed: lookup exploded"]
        assert store.emails == []
        assert store.logs[0]["status"] == "error"

    def test_repeated_id_in_search_results_is_inserted_once(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([_message("m1", "t1"), _message("m1", "t1"), _message("m2", "t2")])
        store = FakeStore(sources)

        result = _service(client, settings).run(store=store)

        ids = [email["gmail_message_id"] for email in store.emails]
        assert ids == ["m1", "m2"]
        assert (result.emails_found, result.emails_new, result.emails_skipped) == (3, 2, 1)
        assert store.source_bumps == [1]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_store_unavailable_returns_without_log(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([_message("m1", "t1")])
        store = FakeStore(sources, sources_error=StoreUnavailableError("down"))

        result = _service(client, settings).run(store=store)

        assert result.errors == ["Database not available"]
        assert result.status == "error"
        assert store.logs == []
        assert client.search_calls == []

    def test_source_lookup_failure_returns_without_log(self, settings: IngestSettings) -> None:
        store = FakeStore(sources_error=RuntimeError("bad query"))
        result = _service(FakeMailClient(), settings).run(store=store)
        assert result.errors == ["Failed to load newsletter sources: bad query"]
        assert store.logs == []

    def test_no_active_sources_returns_zero_result_without_log(self, settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1")])
        store = FakeStore([])
        result = _service(client, settings).run(store=store)
        assert (result.emails_found, result.emails_new, result.emails_skipped) == (0, 0, 0)
        assert result.errors == []
        assert store.logs == []
        assert client.search_calls == []

    def test_search_failure_is_logged(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient(search_error=MailSearchError("MCP error: quota"))
        store = FakeStore(sources)

        result = _service(client, settings).run(store=store)

        assert result.status == "error"
        assert result.errors == ["Gmail search failed: MCP error: quota"]
        assert store.logs[0]["status"] == "error"
        assert store.logs[0]["error_message"] == "Gmail search failed: MCP error: quota"

    def test_insert_failure_gives_partial(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1"), _message("m2", "t2"), _message("m3", "t3")])
        store = FakeStore(sources, failing_insert_ids={"m2"})

        result = _service(client, settings).run(store=store)

        assert result.status == "partial"
        assert result.emails_new == 2
        assert result.errors == ["Failed to insert message m2: constraint violated"]
        assert [email["gmail_message_id"] for email in store.emails] == ["m1", "m3"]
        assert store.logs[0]["status"] == "partial"

    def test_all_inserts_failing_gives_error(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([_message("m1", "t1"), _message("m2", "t2")])
        store = FakeStore(sources, failing_insert_ids={"m1", "m2"})

        result = _service(client, settings).run(store=store)

        assert result.status == "error"
        assert result.emails_new == 0
        assert len(result.errors) == 2
        assert store.logs[0]["error_message"] == "; ".join(result.errors)

    def test_failed_thread_batch_falls_back_to_search_data(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient(
            [_message("m1", "t1", snippet="search snippet")],
            {"t1": [MailMessage(id="m1", thread_id="t1", body="full body")]},
            failing_thread_ids={"t1"},
        )
        store = FakeStore(sources)

        result = _service(client, settings).run(store=store)

        assert result.status == "success"
        assert store.emails[0]["raw_text"] == "search snippet"

    def test_log_write_failure_is_swallowed(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        store = FakeStore(sources, log_error=RuntimeError("log table missing"))
        result = _service(FakeMailClient([_message("m1", "t1")]), settings).run(store=store)
        assert result.emails_new == 1
        assert result.status == "success"
        assert result.duration_ms >= 0


# ---------------------------------------------------------------------------
# Source counters
# ---------------------------------------------------------------------------


class TestSourceCounters:
    def test_each_insert_bumps_matching_source(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient(
            [
                _message("m1", "t1"),
                _message("m2", "t2"),
                _message("m3", "t3", sender="TLDR <hello@tldr.tech>"),
            ]
        )
        store = FakeStore(sources)
        _service(client, settings).run(store=store)
        assert store.source_bumps == [1, 1, 2]

    def test_unmatched_sender_is_silent(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1", sender="someone@else.org")])
        store = FakeStore(sources)
        result = _service(client, settings).run(store=store)
        assert result.emails_new == 1
        assert store.source_bumps == []

    def test_failed_insert_does_not_bump(self, sources: list[MonitoredSource], settings: IngestSettings) -> None:
        client = FakeMailClient([_message("m1", "t1")])
        store = FakeStore(sources, failing_insert_ids={"m1"})
        _service(client, settings).run(store=store)
        assert store.source_bumps == []

    def test_counter_failure_keeps_saved_message_counted(
        self, sources: list[MonitoredSource], settings: IngestSettings
    ) -> None:
        client = FakeMailClient([_message("m1", "t1")])
        store = FakeStore(sources, counter_error=RuntimeError("counter update failed"))

        result = _service(client, settings).run(store=store)

        assert [email["gmail_message_id"] for email in store.emails] == ["m1"]
        assert result.emails_new == 1
        assert result.errors == []
        assert result.status == "success"
        assert store.logs[0]["emails_new"] == 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("The Batch <News@Batch.AI>", ("The Batch", "news@batch.ai")),
            ('"Quoted Name" <a@b.com>', ("Quoted Name", "a@b.com")),
            ("  Plain@Example.com ", ("", "plain@example.com")),
            ("", ("", "")),
        ],
    )
    def test_parse_from_header(self, header: str, expected: tuple[str, str]) -> None:
        assert parse_from_header(header) == expected

    def test_parse_rfc2822_date(self) -> None:
        parsed = parse_message_date("Mon, 02 Mar 2026 09:15:00 +0100", fallback=FALLBACK)
        assert parsed == datetime(2026, 3, 2, 8, 15, tzinfo=timezone.utc)

    def test_parse_iso_date(self) -> None:
        parsed = parse_message_date("2026-03-02T09:15:00Z", fallback=FALLBACK)
        assert parsed == datetime(2026, 3, 2, 9, 15, tzinfo=timezone.utc)

    def test_naive_iso_date_is_utc(self) -> None:
        parsed = parse_message_date("2026-03-02T09:15:00", fallback=FALLBACK)
        assert parsed.tzinfo is not None

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_unparseable_date_uses_fallback(self, value: str | None) -> None:
        assert parse_message_date(value, fallback=FALLBACK) == FALLBACK

    def test_build_query_without_date(self, sources: list[MonitoredSource]) -> None:
        assert build_search_query(sources) == "(from:news@batch.ai OR from:hello@tldr.tech)"

    def test_match_source_accepts_containment(self, sources: list[MonitoredSource]) -> None:
        assert match_source(sources, "news@batch.ai") is sources[0]
        assert match_source(sources, "bounce+news@batch.ai") is sources[0]
        assert match_source(sources, "other@example.com") is None

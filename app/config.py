"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class GmailCLISettings:
    """
    How to invoke the Gmail command-line tool.
    """

    binary: str = "manus-mcp-cli"
    server: str = "gmail"
    timeout_seconds: float = 60.0
    max_output_bytes: int = 10 * 1024 * 1024


@dataclass(frozen=True)
class IngestSettings:
    """
    Runtime settings for Gmail ingest runs.
    """

    default_max_per_source: int = 50
    thread_batch_size: int = 100


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Periodic ingest schedule.
    """

    ingest_enabled: bool = True
    ingest_interval_hours: int = 6
    ingest_lookback_days: int = 7


@dataclass(frozen=True)
class WebhookSettings:
    """
    Limits for the inbound email webhook.
    """

    rate_limit_requests: int = 60
    rate_limit_window_seconds: float = 60.0
    max_body_bytes: int = 10 * 1024 * 1024


@dataclass(frozen=True)
class LLMSettings:
    """
    LLM adapter selection and request settings.
    """

    adapter: str = "openai"
    model: str = "gpt-4o"
    max_tokens: int = 4096
    api_key: str | None = None
    base_url: str | None = None
    max_retries: int = 2


@lru_cache(maxsize=1)
def get_gmail_cli_settings() -> GmailCLISettings:
    return GmailCLISettings(
        binary=_get_str_env("GMAIL_CLI_BINARY", "manus-mcp-cli"),
        server=_get_str_env("GMAIL_CLI_SERVER", "gmail"),
        timeout_seconds=max(1.0, _get_float_env("GMAIL_CLI_TIMEOUT_SECONDS", 60.0)),
        max_output_bytes=max(1024, _get_int_env("GMAIL_CLI_MAX_OUTPUT_BYTES", 10 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_ingest_settings() -> IngestSettings:
    return IngestSettings(
        default_max_per_source=min(200, max(1, _get_int_env("INGEST_MAX_PER_SOURCE", 50))),
        thread_batch_size=max(1, _get_int_env("INGEST_THREAD_BATCH_SIZE", 100)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    return SchedulerSettings(
        ingest_enabled=_get_bool_env("INGEST_SCHEDULE_ENABLED", True),
        ingest_interval_hours=max(1, _get_int_env("INGEST_INTERVAL_HOURS", 6)),
        ingest_lookback_days=max(1, _get_int_env("INGEST_LOOKBACK_DAYS", 7)),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    return WebhookSettings(
        rate_limit_requests=max(1, _get_int_env("WEBHOOK_RATE_LIMIT_REQUESTS", 60)),
        rate_limit_window_seconds=max(1.0, _get_float_env("WEBHOOK_RATE_LIMIT_WINDOW_SECONDS", 60.0)),
        max_body_bytes=max(1024, _get_int_env("WEBHOOK_MAX_BODY_BYTES", 10 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return LLM settings. LLM_API_KEY takes precedence over OPENAI_API_KEY.
    """

    return LLMSettings(
        adapter=_get_str_env("LLM_ADAPTER", "openai").lower(),
        model=_get_str_env("LLM_MODEL", "gpt-4o"),
        max_tokens=max(256, _get_int_env("LLM_MAX_TOKENS", 4096)),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        max_retries=max(0, _get_int_env("LLM_MAX_RETRIES", 2)),
    )

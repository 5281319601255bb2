"""
app/scheduler/jobs.py

APScheduler-based scheduler for periodic Gmail newsletter ingestion.

Schedule
--------
  gmail_ingest  every ``INGEST_INTERVAL_HOURS`` hours (default 6), looking
                back ``INGEST_LOOKBACK_DAYS`` days (default 7)

Set ``INGEST_SCHEDULE_ENABLED=false`` to register no jobs.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_scheduler_settings
from app.repositories.ingest_store import SQLAlchemyIngestStore
from app.services.gmail_ingest_service import get_gmail_ingest_service
from db.session import session_scope

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Job: Gmail ingest
# ---------------------------------------------------------------------------


def run_gmail_ingest() -> None:
    """
    Pull new newsletter mail into the inbox. The ingest store commits per row.
    """
    settings = get_scheduler_settings()
    after_date = datetime.now(tz=timezone.utc) - timedelta(days=settings.ingest_lookback_days)
    logger.info("Scheduler: gmail_ingest starting after=%s", after_date.isoformat())

    try:
        with session_scope() as db:
            result = get_gmail_ingest_service().run(
                store=SQLAlchemyIngestStore(db),
                after_date=after_date,
            )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Scheduler: gmail_ingest failed: %s", exc)
        return

    logger.info(
        "Scheduler: gmail_ingest complete status=%s found=%d new=%d skipped=%d",
        result.status,
        result.emails_found,
        result.emails_new,
        result.emails_skipped,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.ingest_enabled:
        logger.info("Scheduler: gmail_ingest disabled by INGEST_SCHEDULE_ENABLED")
        return scheduler

    scheduler.add_job(
        run_gmail_ingest,
        trigger="interval",
        hours=max(1, settings.ingest_interval_hours),
        id="gmail_ingest",
        name="Gmail newsletter ingest",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )

    return scheduler

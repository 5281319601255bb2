"""
Run one Gmail newsletter ingest from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import datetime, timedelta, timezone

from app.repositories.ingest_store import SQLAlchemyIngestStore
from app.services.gmail_ingest_service import get_gmail_ingest_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest newsletter mail from Gmail into the inbox.")
    parser.add_argument(
        "--max-per-source",
        dest="max_per_source",
        type=int,
        default=50,
        help="Search budget per active source.",
    )
    parser.add_argument(
        "--days",
        dest="days",
        type=int,
        default=None,
        help="Only fetch mail newer than this many days.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    after_date = None
    if args.days is not None:
        after_date = datetime.now(tz=timezone.utc) - timedelta(days=args.days)

    with SessionLocal() as db:
        result = get_gmail_ingest_service().run(
            store=SQLAlchemyIngestStore(db),
            max_per_source=args.max_per_source,
            after_date=after_date,
        )

    payload = {
        "status": result.status,
        "emails_found": result.emails_found,
        "emails_new": result.emails_new,
        "emails_skipped": result.emails_skipped,
        "errors": result.errors,
        "duration_ms": result.duration_ms,
    }
    print(json.dumps(payload, indent=2))
    return 0 if result.status != "error" else 1


if __name__ == "__main__":
    raise SystemExit(main())

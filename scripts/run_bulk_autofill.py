#!/usr/bin/env python3
"""
Auto-fill empty company fields on contacts from matching records.

Usage:
    python scripts/run_bulk_autofill.py
    python scripts/run_bulk_autofill.py --dry-run
    python scripts/run_bulk_autofill.py --batch-size 25
"""

import argparse
import sys
from collections import Counter
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from prospects.database import SessionLocal, init_db
from prospects.models import Contact
from prospects.resolution import BulkResolutionService
from prospects.resolution.progress import ProgressStatus, format_progress_message
from prospects.resolution.quality import quality_level, quality_score
from prospects.store import SqlJobTracker, SqlRecordStore


def print_progress(event):
    if event.status is ProgressStatus.PENDING or event.current is None:
        return
    current = event.current
    if current.fields_filled:
        print(f"  {current.name}: filled {', '.join(current.fields_filled)}")
    if event.totals.processed % 25 == 0:
        print(f"  {format_progress_message(event)}")


def quality_breakdown(db) -> Counter:
    contacts = db.query(Contact).filter(Contact.is_deleted.is_(False)).all()
    return Counter(quality_level(quality_score(c)) for c in contacts)


def main():
    parser = argparse.ArgumentParser(
        description="Fill empty company fields from the best matching records"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which fields would be filled without writing them",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Contacts per chunk (default: BATCH_SIZE setting)",
    )

    args = parser.parse_args()

    init_db()
    db = SessionLocal()

    try:
        before = quality_breakdown(db)

        print("=" * 60)
        print("BULK AUTO-FILL")
        print("=" * 60)
        print(f"Mode: {'DRY RUN' if args.dry_run else 'LIVE'}")
        print("Data quality before: " + ", ".join(f"{k}={v}" for k, v in sorted(before.items())))
        print("=" * 60)

        service = BulkResolutionService(
            SqlRecordStore(db),
            tracker=SqlJobTracker(db),
            on_progress=print_progress,
            batch_size=args.batch_size,
        )
        result = service.bulk_auto_fill(dry_run=args.dry_run)

        totals = result.totals
        filled = sum(len(o.fields_filled or []) for o in result.outcomes)
        cache = result.stats.get("cache", {})

        print(f"\nStatus: {result.status.value}")
        print(f"Processed: {totals.processed}/{totals.total}")
        print(f"Contacts filled: {totals.success} ({filled} fields)")
        print(f"Template found: {totals.matched}")
        print(f"Skipped: {totals.skipped}")
        print(f"Failed: {totals.failed}")
        print(f"Resolutions: {cache.get('misses', 0)} (cache hits: {cache.get('hits', 0)})")

        if not args.dry_run:
            after = quality_breakdown(db)
            print("Data quality after: " + ", ".join(f"{k}={v}" for k, v in sorted(after.items())))

    finally:
        db.close()


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Link unmatched contacts to canonical companies.

Usage:
    python scripts/run_bulk_match.py
    python scripts/run_bulk_match.py --batch-size 100
    python scripts/run_bulk_match.py --quiet
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from prospects.database import SessionLocal, init_db
from prospects.models import Company, Contact, MatchStatus
from prospects.resolution import BulkResolutionService
from prospects.resolution.progress import ProgressStatus, format_progress_message
from prospects.store import SqlJobTracker, SqlRecordStore


def print_progress(event):
    """Print every tenth item plus the start and end events."""
    if event.status is ProgressStatus.PENDING:
        return
    if event.current is None or event.totals.processed % 10 == 0:
        print(f"  {format_progress_message(event)}")


def main():
    parser = argparse.ArgumentParser(
        description="Match unmatched contacts to canonical companies"
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Contacts per chunk (default: BATCH_SIZE setting)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print the final summary",
    )

    args = parser.parse_args()

    init_db()
    db = SessionLocal()

    try:
        company_count = db.query(Company).filter(Company.is_deleted.is_(False)).count()
        matched_before = db.query(Contact).filter(
            Contact.company_match_status == MatchStatus.MATCHED.value
        ).count()

        print("=" * 60)
        print("BULK MATCH TO COMPANIES")
        print("=" * 60)
        print(f"Canonical companies: {company_count}")
        print(f"Already matched contacts: {matched_before}")
        print("=" * 60)

        service = BulkResolutionService(
            SqlRecordStore(db),
            tracker=SqlJobTracker(db),
            on_progress=None if args.quiet else print_progress,
            batch_size=args.batch_size,
        )
        result = service.bulk_match_to_companies()

        totals = result.totals
        print(f"\nStatus: {result.status.value}")
        print(f"Processed: {totals.processed}/{totals.total}")
        print(f"Matched: {totals.matched}")
        print(f"Skipped (no company found): {totals.skipped}")
        print(f"Failed: {totals.failed}")
        print(f"Elapsed: {result.elapsed_seconds:.1f}s")

        if result.errors:
            print("\nErrors:")
            for error in result.errors[:20]:
                print(f"  {error['item_name']} ({error['item_id']}): {error['error']}")

    finally:
        db.close()


if __name__ == "__main__":
    main()

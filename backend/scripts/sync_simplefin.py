#!/usr/bin/env python
"""Scheduled SimpleFIN sync.

Imports every active SimpleFIN item (or a single item) and exits non-zero
if any item failed. Items flagged ``requires_update`` are reported but do
not count as failures.

Usage:
    python -m scripts.sync_simplefin
    python -m scripts.sync_simplefin --item <item-id>
    python -m scripts.sync_simplefin --verbose
"""

import argparse
import logging
import sys

from sqlalchemy.orm import Session

from logging_config import setup_logging
from models import SimplefinItem
from services.simplefin_sync_service import SimplefinSyncService, SyncSummary

logger = logging.getLogger(__name__)


def run_sync(
    db: Session,
    item_id: str | None = None,
    service: SimplefinSyncService | None = None,
) -> SyncSummary:
    """Sync one item (by ID) or all active items.

    Args:
        db: Database session
        item_id: Optional item ID; when given, only that item is synced
            regardless of its status.
        service: Sync service (defaults to one using the real client)

    Raises:
        LookupError: ``item_id`` does not exist.
    """
    service = service or SimplefinSyncService()

    if item_id is None:
        return service.sync_all(db)

    item = db.query(SimplefinItem).filter(SimplefinItem.id == item_id).first()
    if item is None:
        raise LookupError(f"SimpleFIN item not found: {item_id}")

    summary = SyncSummary()
    try:
        service.sync_item(db, item)
    except Exception as e:
        summary.failed[item.id] = str(e)
        return summary
    if item.requires_update:
        summary.requires_update.append(item.id)
    else:
        summary.synced.append(item.id)
    return summary


def print_summary(summary: SyncSummary) -> None:
    print(f"Synced: {len(summary.synced)}")
    for item_id in summary.requires_update:
        print(f"Requires reauthentication: {item_id}")
    for item_id, message in summary.failed.items():
        print(f"Failed: {item_id}: {message}")


def main(argv: list[str] | None = None) -> None:
    """Entry point: parse args and run the sync."""
    parser = argparse.ArgumentParser(
        description="Import SimpleFIN accounts and transactions.",
    )
    parser.add_argument(
        "--item",
        help="Only sync the SimpleFIN item with this ID",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    from database import get_session_local, init_db

    init_db()
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        summary = run_sync(db, item_id=args.item)
    except LookupError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()

    print_summary(summary)
    if not summary.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()

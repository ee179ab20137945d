#!/usr/bin/env python3
"""One-time migration: rewrite legacy reminder fields into their canonical shape.

Older task documents may hold ``reminderDaysBefore`` as a bare integer and
``reminderConfig`` as a JSON-encoded string or a single object.  This script
rewrites them as a descending list of offsets and a list of objects (or
null), leaving every other field alone.

Usage:
    python scripts/migrate_reminder_config.py
    python scripts/migrate_reminder_config.py --dry-run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running from the repo root without installing.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from reminder_codec import coerce_days_before, parse_reminder_config  # noqa: E402


def canonical_fields(data: dict) -> dict:
    """Return the canonical reminder fields for a stored task document."""
    days = sorted(set(coerce_days_before(data.get("reminderDaysBefore"))), reverse=True)
    config = parse_reminder_config(data.get("reminderConfig"))
    return {
        "reminderDaysBefore": days,
        "reminderConfig": config or None,
    }


def pending_updates(data: dict) -> dict:
    """Fields of *data* that differ from their canonical form.

    Absent fields whose canonical form is empty are left absent.
    """
    canonical = canonical_fields(data)
    return {
        k: v for k, v in canonical.items()
        if data.get(k) != v and (k in data or v)
    }


def migrate(*, dry_run: bool = False) -> list[str]:
    """Rewrite every task document whose reminder fields are not canonical.

    Returns the IDs of documents that were (or would be) updated.
    """
    # Import lazily so the script can still be imported in tests with mocks.
    from firestore_storage import COLLECTION, _get_client

    db = _get_client()
    updated: list[str] = []
    for doc in db.collection(COLLECTION).stream():
        updates = pending_updates(doc.to_dict() or {})
        if not updates:
            continue
        if dry_run:
            print(f"[dry-run] Would update task {doc.id}: {sorted(updates)}")
        else:
            doc.reference.update(updates)
            print(f"Updated task {doc.id}: {sorted(updates)}")
        updated.append(doc.id)

    if not updated:
        print("All task reminder fields are canonical, nothing to do.")
    return updated


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Normalize legacy reminder fields on task documents",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print what would be updated without writing to Firestore",
    )
    args = parser.parse_args()

    updated = migrate(dry_run=args.dry_run)
    print(f"\nTotal: {len(updated)} tasks {'would be ' if args.dry_run else ''}updated.")


if __name__ == "__main__":
    main()

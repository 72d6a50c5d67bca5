#!/usr/bin/env python
"""
Net-Worth Snapshot Job

Computes every user's net worth from current balances and fund holdings and
appends one snapshot row per user.

Usage:
    python scripts/snapshot_job.py [--date YYYY-MM-DD] [--user-id ID]

Options:
    --date: Snapshot date to record (default: today)
    --user-id: Process only specific user (default: all users)
"""
import sys
from pathlib import Path
from datetime import date, datetime
from argparse import ArgumentParser

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.crud.crud_user import read_db_user, read_db_users
from wealth_manager.crud.crud_net_worth import create_net_worth_snapshot
from wealth_manager.logging_config import setup_logging
from wealth_manager.services.errors import StoreUnavailableError


def run_snapshots(snapshot_date: date, user_id: int = None):
    """
    Create net worth snapshots for all users (or a specific user).
    """
    print("=" * 60)
    print(f"Running Net Worth Snapshot Job - {snapshot_date}")
    print("=" * 60)

    db = next(get_db())

    try:
        if user_id:
            user = read_db_user(db, user_id)
            if not user:
                print(f"User {user_id} not found")
                return
            users = [user]
        else:
            users = read_db_users(db)

        print(f"Processing {len(users)} user(s)...")

        total_snapshots = 0
        total_errors = 0

        for user in users:
            try:
                snapshot = create_net_worth_snapshot(db=db, user_id=user.db_id, snapshot_date=snapshot_date)
                print(f"User {user.email}: net worth {snapshot.net_worth}")
                total_snapshots += 1
            except (NotFoundError, ValueError, StoreUnavailableError) as e:
                print(f"ERROR processing user {user.email}: {str(e)}")
                total_errors += 1
                continue

        print("\n" + "=" * 60)
        print("Job Complete!")
        print(f"  Total snapshots created: {total_snapshots}")
        print(f"  Errors: {total_errors}")
        print("=" * 60)
    finally:
        db.close()


def main():
    parser = ArgumentParser(description="Record net worth snapshots")

    parser.add_argument(
        '--date',
        type=str,
        help='Snapshot date (YYYY-MM-DD), defaults to today'
    )

    parser.add_argument(
        '--user-id',
        type=int,
        help='Process only specific user ID'
    )

    args = parser.parse_args()

    if args.date:
        try:
            snapshot_date = datetime.strptime(args.date, '%Y-%m-%d').date()
        except ValueError:
            print(f"Invalid date format: {args.date}. Use YYYY-MM-DD")
            sys.exit(1)
    else:
        snapshot_date = date.today()

    setup_logging()
    run_snapshots(snapshot_date=snapshot_date, user_id=args.user_id)


if __name__ == "__main__":
    main()

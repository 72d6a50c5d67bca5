#!/usr/bin/env python
"""
Investment Plan Job

Finds active investment plans due today or earlier, records an investment
reminder for each and moves the plan to its next run date. Executing the
purchase itself is left to the user.

Usage:
    python scripts/run_investment_plans.py [--date YYYY-MM-DD] [--user-id ID]
"""
import sys
from pathlib import Path
from datetime import date, datetime
from argparse import ArgumentParser

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wealth_manager.db.core import get_db
from wealth_manager.crud.crud_investment_plan import process_due_investment_plans
from wealth_manager.logging_config import setup_logging


def run_investment_plans(run_date: date, user_id: int = None):
    print("=" * 60)
    print(f"Running Investment Plan Job - {run_date}")
    print("=" * 60)

    db = next(get_db())
    try:
        processed = process_due_investment_plans(db=db, today=run_date, user_id=user_id)
        for plan in processed:
            print(f"Plan {plan.id}: {plan.amount} into fund {plan.fund_id}, next run {plan.next_date}")
        print(f"\nProcessed {len(processed)} plan(s)")
    finally:
        db.close()


def main():
    parser = ArgumentParser(description="Advance due investment plans")
    parser.add_argument('--date', type=str, help='Run date (YYYY-MM-DD), defaults to today')
    parser.add_argument('--user-id', type=int, help='Process only specific user ID')
    args = parser.parse_args()

    if args.date:
        try:
            run_date = datetime.strptime(args.date, '%Y-%m-%d').date()
        except ValueError:
            print(f"Invalid date format: {args.date}. Use YYYY-MM-DD")
            sys.exit(1)
    else:
        run_date = date.today()

    setup_logging()
    run_investment_plans(run_date=run_date, user_id=args.user_id)


if __name__ == "__main__":
    main()

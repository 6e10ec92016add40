"""
Wipe SM-2 scheduling progress, for one learner or for everyone.

With --learner only that learner's item progress and review events are
deleted; other learners keep their schedules. Without it every table is
dropped and recreated.

Usage:
    python -m scripts.maintenance.reset_progress_db --learner ben
    python -m scripts.maintenance.reset_progress_db --all
"""

import argparse

from sqlalchemy.engine import make_url

from core import sm2
from core.sm2.database import get_database_url


def main():
    parser = argparse.ArgumentParser(description="Reset scheduling progress.")
    scope = parser.add_mutually_exclusive_group(required=True)
    scope.add_argument("--learner", help="Only clear this learner's items")
    scope.add_argument("--all", action="store_true", help="Drop and recreate every table")
    args = parser.parse_args()

    store = sm2.SqlProgressStore()
    print(f"Database: {make_url(get_database_url()).render_as_string(hide_password=True)}")

    if args.learner:
        progress = store.list_progress(args.learner)
        leeches = sum(1 for _, item in progress if item.is_leech)
        print(f"Learner {args.learner}: {len(progress)} scheduled item(s), {leeches} leech(es)")
        prompt = f"Clear every item schedule and rating for {args.learner}? (type the learner id): "
        if input(prompt).strip() != args.learner:
            print("Cancelled. No changes made.")
            return
        progress_count, event_count = store.clear_learner(args.learner)
        print(f"Cleared {progress_count} item(s) and {event_count} review event(s).")
        print(f"{args.learner}'s items will be offered as new at the next session.")
        return

    print("Every learner's item progress and review history will be dropped.")
    if input("Reset all learners? (type 'yes' to confirm): ").lower() != "yes":
        print("Cancelled. No changes made.")
        return
    sm2.reset_db()
    print("Progress tables recreated empty.")


if __name__ == "__main__":
    main()

"""
List a learner's leech items.

Leeches are items that lapsed repeatedly and need the learner's attention
(rewording, splitting, or suspending).

Usage:
    python -m scripts.maintenance.list_leeches --learner ben
"""

import argparse

from core import sm2


def main():
    parser = argparse.ArgumentParser(description="List leech items for a learner.")
    parser.add_argument(
        "--learner",
        default=sm2.get_default_learner_id(),
        help="Learner id (default: DEFAULT_LEARNER_ID)"
    )
    args = parser.parse_args()

    store = sm2.SqlProgressStore()
    leeches = store.list_leeches(args.learner)

    if not leeches:
        print(f"No leeches for {args.learner}.")
        return

    print(f"{len(leeches)} leech(es) for {args.learner}:")
    print("-" * 60)
    for item_id, progress in leeches:
        due = progress.next_review_date.date().isoformat() if progress.next_review_date else "-"
        print(
            f"{item_id:<30} lapses={progress.lapses:<3} "
            f"ease={progress.easiness_factor:.2f} due={due}"
        )


if __name__ == "__main__":
    main()

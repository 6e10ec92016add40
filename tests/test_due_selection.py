"""Tests for core/due_selection.py -- picking the items due now."""

from datetime import datetime, timedelta, timezone

from core.due_selection import count_due, is_due, next_due_at, partition_due, select_due
from core.sm2 import CardState, ItemProgress


TODAY = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def progress_due(when):
    return ItemProgress(state=CardState.REVIEW, interval_days=3, next_review_date=when)


def sample_items():
    return [
        ("A", None),
        ("B", progress_due(TODAY - timedelta(days=1))),
        ("C", progress_due(TODAY + timedelta(days=1))),
    ]


def test_select_due_returns_new_and_overdue_in_order():
    assert list(select_due(sample_items(), TODAY)) == ["A", "B"]


def test_select_due_is_lazy():
    due = select_due(iter(sample_items()), TODAY)
    assert next(due) == "A"
    assert next(due) == "B"


def test_select_due_is_repeatable():
    items = sample_items()
    first = list(select_due(items, TODAY))
    second = list(select_due(items, TODAY))

    assert first == second
    assert items == sample_items()


def test_due_exactly_at_now():
    assert is_due(progress_due(TODAY), TODAY) is True
    assert is_due(progress_due(TODAY + timedelta(seconds=1)), TODAY) is False


def test_progress_without_next_review_is_due():
    assert is_due(ItemProgress(state=CardState.LEARNING), TODAY) is True


def test_naive_timestamps_are_treated_as_utc():
    naive = datetime(2024, 3, 1, 11, 0)
    assert is_due(progress_due(naive), TODAY) is True
    assert is_due(progress_due(TODAY - timedelta(hours=2)), datetime(2024, 3, 1, 11, 0)) is True


def test_partition_due():
    partition = partition_due(sample_items(), TODAY)

    assert partition.due == ["A", "B"]
    assert partition.not_due == ["C"]


def test_count_due():
    assert count_due(sample_items(), TODAY) == 2
    assert count_due([], TODAY) == 0


def test_next_due_at():
    items = sample_items() + [("D", progress_due(TODAY + timedelta(hours=3)))]

    assert next_due_at(items, TODAY) == TODAY + timedelta(hours=3)
    assert next_due_at([("A", None)], TODAY) is None

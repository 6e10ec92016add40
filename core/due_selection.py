"""
Due-set selection for building study queues.

Items are given as (item_id, progress) pairs, where progress is None for an
item the learner has never rated. Selection is a pure filter: nothing is
mutated and repeated calls with the same arguments agree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Hashable, Iterable, Iterator, Optional, Tuple, TypeVar

from core.sm2.progress import ItemProgress


ItemId = TypeVar("ItemId", bound=Hashable)
ItemWithProgress = Tuple[ItemId, Optional[ItemProgress]]


@dataclass
class DuePartition:
    """Items split into due now vs. not yet due, input order kept."""
    due: list = field(default_factory=list)
    not_due: list = field(default_factory=list)


def is_due(progress: Optional[ItemProgress], now: datetime) -> bool:
    """
    An item is due when it has never been rated, or its next review time
    has been reached. A progress record without a next review time is due.
    """
    if progress is None or progress.next_review_date is None:
        return True
    return _as_utc(progress.next_review_date) <= _as_utc(now)


def select_due(items: Iterable[ItemWithProgress], now: datetime) -> Iterator[ItemId]:
    """
    Lazily yield the ids of due items, preserving input order.
    """
    for item_id, progress in items:
        if is_due(progress, now):
            yield item_id


def partition_due(items: Iterable[ItemWithProgress], now: datetime) -> DuePartition:
    """Split items into due and not-due id lists."""
    partition = DuePartition()
    for item_id, progress in items:
        if is_due(progress, now):
            partition.due.append(item_id)
        else:
            partition.not_due.append(item_id)
    return partition


def count_due(items: Iterable[ItemWithProgress], now: datetime) -> int:
    return sum(1 for _ in select_due(items, now))


def next_due_at(items: Iterable[ItemWithProgress], now: datetime) -> Optional[datetime]:
    """
    Earliest future review time among items that are not yet due.

    Returns None when nothing is scheduled after now.
    """
    upcoming = [
        _as_utc(progress.next_review_date)
        for _, progress in items
        if not is_due(progress, now)
    ]
    return min(upcoming) if upcoming else None


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

"""
Item Progress - SM-2 Learner/Item State

Defines the one mutable record the scheduler works on (ItemProgress) and the
pure value it returns (SchedulerResult).

Key concepts:
- Ease factor: multiplier for review interval growth (floor 1.3)
- Interval: whole days; ladder steps report their minutes rounded to days (min 1)
- Learning step: index into the Learning or Lapse ladder, depending on state
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from core.sm2.config import SchedulerConfig
from core.sm2.constants import CardState


@dataclass
class ItemProgress:
    """
    Scheduling state for a single (learner, item) pair.

    Created on the first rating and replaced on every later one.
    """
    state: CardState = CardState.NEW
    easiness_factor: float = 2.5
    interval_days: int = 1
    repetitions: int = 0
    lapses: int = 0
    learning_step: int = 0
    is_leech: bool = False
    next_review_date: Optional[datetime] = None
    last_reviewed_date: Optional[datetime] = None


@dataclass(frozen=True)
class SchedulerResult:
    """
    Outcome of one rating: the replacement progress plus derived values.
    """
    state: CardState
    easiness_factor: float
    interval_days: int
    interval_minutes: int
    repetitions: int
    lapses: int
    learning_step: int
    next_review_date: datetime
    is_leech: bool
    graduated_from_learning: bool
    stays_in_session: bool
    reviewed_at: datetime

    def to_progress(self) -> ItemProgress:
        """Return the ItemProgress to persist for this result."""
        return ItemProgress(
            state=self.state,
            easiness_factor=self.easiness_factor,
            interval_days=self.interval_days,
            repetitions=self.repetitions,
            lapses=self.lapses,
            learning_step=self.learning_step,
            is_leech=self.is_leech,
            next_review_date=self.next_review_date,
            last_reviewed_date=self.reviewed_at,
        )


def initialize_new_progress(config: SchedulerConfig) -> ItemProgress:
    """Progress for an item that has never been rated."""
    return ItemProgress(
        state=CardState.NEW,
        easiness_factor=config.initial_ease,
        interval_days=1,
    )


def normalize_progress(
    progress: Optional[ItemProgress],
    config: SchedulerConfig
) -> ItemProgress:
    """
    Clamp persisted progress into the valid domain.

    Historical rows may carry out-of-range values from earlier bugs. The
    scheduler cannot reject them, so each field is pulled to its nearest
    valid bound instead:
    - easiness_factor >= min_ease (missing/zero ease falls back to initial)
    - interval_days >= 1
    - repetitions, lapses >= 0
    - learning_step within the ladder of the current state
    - unknown state -> New

    Args:
        progress: Persisted progress, or None for a never-rated item
        config: Active scheduler profile

    Returns:
        A new, valid ItemProgress (the input is not modified)
    """
    if progress is None:
        return initialize_new_progress(config)

    state = _coerce_state(progress.state)

    ease = progress.easiness_factor
    if not ease:
        ease = config.initial_ease
    ease = max(config.min_ease, float(ease))

    if state == CardState.LAPSED:
        ladder_length = len(config.lapse_steps)
    else:
        ladder_length = len(config.learning_steps)
    if state != progress.state:
        step = 0
    else:
        step = max(0, min(int(progress.learning_step or 0), ladder_length - 1))

    return replace(
        progress,
        state=state,
        easiness_factor=ease,
        interval_days=max(1, int(progress.interval_days or 1)),
        repetitions=max(0, int(progress.repetitions or 0)),
        lapses=max(0, int(progress.lapses or 0)),
        learning_step=step,
        is_leech=bool(progress.is_leech),
    )


def _coerce_state(value) -> CardState:
    if isinstance(value, CardState):
        return value
    try:
        return CardState(value)
    except ValueError:
        return CardState.NEW

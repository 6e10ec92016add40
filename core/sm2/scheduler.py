"""
Scheduler - SM-2 State Machine

Pure Anki-style SM-2 transition function (no database calls).

States: New -> Learning -> Review <-> Lapsed

Main workflow:
1. Clamp the current progress into its valid domain
2. Dispatch on the current state to one transition handler
3. Derive interval in minutes, stays-in-session flag and next review date
4. Return a SchedulerResult (the input is never modified)

Loading and saving progress is the caller's responsibility.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from core.sm2.config import DEFAULT_CONFIG, SchedulerConfig
from core.sm2.constants import CardState, Rating
from core.sm2.intervals import (
    RandomSource,
    days_to_minutes,
    default_random_source,
    fuzz_interval,
    minutes_to_days,
    next_review_timestamp,
    round_half_up,
    stays_in_session,
)
from core.sm2.progress import ItemProgress, SchedulerResult, normalize_progress


@dataclass
class _Transition:
    """Working values produced by one state handler."""
    state: CardState
    easiness_factor: float
    interval_days: int
    interval_minutes: int
    repetitions: int
    lapses: int
    learning_step: int
    is_leech: bool
    graduated_from_learning: bool = False


TransitionHandler = Callable[[ItemProgress, Rating, SchedulerConfig, RandomSource], _Transition]


def schedule(
    rating: Rating,
    current: Optional[ItemProgress] = None,
    *,
    now: Optional[datetime] = None,
    config: SchedulerConfig = DEFAULT_CONFIG,
    rng: Optional[RandomSource] = None
) -> SchedulerResult:
    """
    Compute the next progress for one rated item.

    Total over its inputs: every (state, rating) pair has a transition and
    out-of-range persisted values are clamped rather than rejected.

    Args:
        rating: Learner's rating (AGAIN, HARD, GOOD, EASY)
        current: Persisted progress, or None for an item never rated
        now: Review timestamp (defaults to now, UTC)
        config: Scheduler profile (ladders, ease deltas, leech threshold)
        rng: Random source for interval fuzzing

    Returns:
        SchedulerResult with the replacement progress and derived values
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if rng is None:
        rng = default_random_source()
    rating = Rating(rating)

    progress = normalize_progress(current, config)
    handler = _TRANSITIONS[progress.state]
    outcome = handler(progress, rating, config, rng)

    return SchedulerResult(
        state=outcome.state,
        easiness_factor=max(config.min_ease, round(outcome.easiness_factor, 2)),
        interval_days=outcome.interval_days,
        interval_minutes=outcome.interval_minutes,
        repetitions=outcome.repetitions,
        lapses=outcome.lapses,
        learning_step=outcome.learning_step,
        next_review_date=next_review_timestamp(
            now, outcome.interval_minutes, minutes_to_days(outcome.interval_minutes)
        ),
        is_leech=outcome.is_leech,
        graduated_from_learning=outcome.graduated_from_learning,
        stays_in_session=stays_in_session(outcome.interval_minutes),
        reviewed_at=now,
    )


def calculate_sm2(
    rating: Rating,
    current: Optional[ItemProgress] = None,
    **kwargs
) -> SchedulerResult:
    """Legacy name for schedule()."""
    return schedule(rating, current, **kwargs)


# ---- Transition handlers ----

def _from_learning(
    progress: ItemProgress,
    rating: Rating,
    config: SchedulerConfig,
    rng: RandomSource
) -> _Transition:
    """New and Learning items walk the learning ladder."""
    steps = config.learning_steps

    if rating == Rating.AGAIN:
        return _ladder_step(progress, CardState.LEARNING, steps, 0)

    next_step = progress.learning_step + 1
    if next_step >= len(steps):
        # Graduate to review
        if rating == Rating.EASY:
            interval = config.easy_graduating_interval_days
        else:
            interval = config.graduating_interval_days
        return _Transition(
            state=CardState.REVIEW,
            easiness_factor=progress.easiness_factor,
            interval_days=interval,
            interval_minutes=days_to_minutes(interval),
            repetitions=1,
            lapses=progress.lapses,
            learning_step=0,
            is_leech=progress.is_leech,
            graduated_from_learning=True,
        )

    return _ladder_step(progress, CardState.LEARNING, steps, next_step)


def _from_review(
    progress: ItemProgress,
    rating: Rating,
    config: SchedulerConfig,
    rng: RandomSource
) -> _Transition:
    """Review items adjust ease first, then lapse, relearn or grow."""
    ease = max(config.min_ease, progress.easiness_factor + config.ease_deltas[rating])

    if rating == Rating.AGAIN:
        lapses = progress.lapses + 1
        outcome = _ladder_step(progress, CardState.LAPSED, config.lapse_steps, 0)
        outcome.easiness_factor = ease
        outcome.lapses = lapses
        outcome.is_leech = progress.is_leech or lapses >= config.leech_threshold
        return outcome

    if rating == Rating.HARD:
        # Fixed "few hours" step, regardless of earlier learning progress
        outcome = _ladder_step(
            progress, CardState.LEARNING, config.learning_steps, config.hard_relearn_step
        )
        outcome.easiness_factor = ease
        return outcome

    multiplier = config.easy_interval_multiplier if rating == Rating.EASY else 1.0
    interval = max(1, round_half_up(progress.interval_days * ease * multiplier))
    interval = fuzz_interval(interval, config.fuzz_range, rng)

    return _Transition(
        state=CardState.REVIEW,
        easiness_factor=ease,
        interval_days=interval,
        interval_minutes=days_to_minutes(interval),
        repetitions=progress.repetitions + 1,
        lapses=progress.lapses,
        learning_step=progress.learning_step,
        is_leech=progress.is_leech,
    )


def _from_lapsed(
    progress: ItemProgress,
    rating: Rating,
    config: SchedulerConfig,
    rng: RandomSource
) -> _Transition:
    """Lapsed items walk the lapse ladder, then return to review."""
    steps = config.lapse_steps

    if rating == Rating.AGAIN:
        return _ladder_step(progress, CardState.LAPSED, steps, 0)

    next_step = progress.learning_step + 1
    if next_step >= len(steps):
        interval = max(1, round_half_up(progress.interval_days * config.lapse_interval_factor))
        return _Transition(
            state=CardState.REVIEW,
            easiness_factor=progress.easiness_factor,
            interval_days=interval,
            interval_minutes=days_to_minutes(interval),
            repetitions=progress.repetitions,
            lapses=progress.lapses,
            learning_step=0,
            is_leech=progress.is_leech,
        )

    return _ladder_step(progress, CardState.LAPSED, steps, next_step)


def _ladder_step(
    progress: ItemProgress,
    state: CardState,
    steps: tuple[int, ...],
    step: int
) -> _Transition:
    """Place the item on a ladder step; other counters carry over."""
    minutes = steps[step]
    return _Transition(
        state=state,
        easiness_factor=progress.easiness_factor,
        interval_days=minutes_to_days(minutes),
        interval_minutes=minutes,
        repetitions=progress.repetitions,
        lapses=progress.lapses,
        learning_step=step,
        is_leech=progress.is_leech,
    )


_TRANSITIONS: dict[CardState, TransitionHandler] = {
    CardState.NEW: _from_learning,
    CardState.LEARNING: _from_learning,
    CardState.REVIEW: _from_review,
    CardState.LAPSED: _from_lapsed,
}

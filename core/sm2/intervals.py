"""
Intervals - Unit Conversion, Fuzzing and Next-Review Timestamps

Ladder steps are authored in minutes, review intervals in days. Every
scheduler output carries both; this module holds the conversions between
them and the random jitter applied to review intervals.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta
from typing import Protocol

from core.sm2.constants import MINUTES_PER_DAY

# Absorbs float error in d * (1 +/- fuzz_range) before ceil/floor
_EPSILON = 1e-9


class RandomSource(Protocol):
    """Anything with a random() -> float in [0, 1), e.g. random.Random."""

    def random(self) -> float:
        ...


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives."""
    return int(math.floor(value + 0.5))


def minutes_to_days(minutes: float) -> int:
    """
    Convert a ladder duration to whole days.

    Formula: max(1, round(minutes / 1440)); never truncates to zero.
    """
    return max(1, round_half_up(minutes / MINUTES_PER_DAY))


def days_to_minutes(days: int) -> int:
    return days * MINUTES_PER_DAY


def stays_in_session(interval_minutes: int) -> bool:
    """True when the item should be re-offered within the current sitting."""
    return interval_minutes < MINUTES_PER_DAY


def fuzz_interval(interval_days: int, fuzz_range: float, rng: RandomSource) -> int:
    """
    Apply symmetric random jitter to a review interval.

    The result is drawn uniformly from
    [max(1, d * (1 - fuzz_range)), d * (1 + fuzz_range)], rounded to the
    nearest day and clamped to the whole days inside that window, so the
    result never strays further below d than above it. Intervals under
    2 days are returned unchanged.

    Args:
        interval_days: Unfuzzed interval
        fuzz_range: Fraction of the interval, e.g. 0.05 for +/-5%
        rng: Random source; one draw per call

    Returns:
        Fuzzed interval in days
    """
    if interval_days < 2:
        return interval_days

    low = max(1.0, interval_days * (1.0 - fuzz_range))
    high = interval_days * (1.0 + fuzz_range)
    fuzzed = round_half_up(low + rng.random() * (high - low))
    # Same whole-day window on both sides of the interval
    return min(max(fuzzed, math.ceil(low - _EPSILON)), math.floor(high + _EPSILON))


def next_review_timestamp(
    now: datetime,
    interval_minutes: int,
    interval_days: int
) -> datetime:
    """
    Compute when an item is next eligible to be shown.

    In-session intervals add exact minutes; longer ones add whole calendar
    days so sub-day jitter never drifts the due date.
    """
    if stays_in_session(interval_minutes):
        return now + timedelta(minutes=interval_minutes)
    return now + timedelta(days=interval_days)


def default_random_source() -> RandomSource:
    """A fresh, independently seeded generator."""
    return random.Random()

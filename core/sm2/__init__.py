"""
SM-2 - Anki-style Spaced Repetition Scheduler

Main API for scheduling study items.

This package implements the Anki flavor of SM-2:
- Learning and lapse ladders with minute-granularity steps
- Day-granularity review intervals grown by the ease factor
- Ease factor floor of 1.3, interval fuzzing of +/-5%
- Leech detection after repeated lapses

Quick start:
    from core import sm2

    # Initialize database
    sm2.init_db()

    # Process a rating (algorithm only, no DB calls)
    result = sm2.schedule(sm2.Rating.GOOD, progress)

    # Persist the new progress
    store = sm2.SqlProgressStore()
    store.put(learner_id, item_id, result.to_progress())
"""

# Core scheduler API (algorithm logic)
from core.sm2.scheduler import schedule, calculate_sm2

# Constants and configuration
from core.sm2.constants import (
    Rating,
    CardState,
    ANKI_DEFAULTS,
    RATING_BUTTONS,
    MINUTES_PER_DAY,
)
from core.sm2.config import SchedulerConfig, DEFAULT_CONFIG

# Progress values
from core.sm2.progress import (
    ItemProgress,
    SchedulerResult,
    initialize_new_progress,
    normalize_progress,
)

# Interval helpers
from core.sm2.intervals import (
    RandomSource,
    fuzz_interval,
    minutes_to_days,
    next_review_timestamp,
    stays_in_session,
)

# Database API
from core.sm2.database import (
    ProgressStore,
    SqlProgressStore,
    build_review_event,
    get_engine,
    get_default_learner_id,
    init_db,
    reset_db,
    is_test_mode,
)


__all__ = [
    # Core algorithm
    "schedule",
    "calculate_sm2",

    # Enums and constants
    "Rating",
    "CardState",
    "ANKI_DEFAULTS",
    "RATING_BUTTONS",
    "MINUTES_PER_DAY",

    # Configuration
    "SchedulerConfig",
    "DEFAULT_CONFIG",

    # Progress values
    "ItemProgress",
    "SchedulerResult",
    "initialize_new_progress",
    "normalize_progress",

    # Intervals
    "RandomSource",
    "fuzz_interval",
    "minutes_to_days",
    "next_review_timestamp",
    "stays_in_session",

    # Database operations
    "ProgressStore",
    "SqlProgressStore",
    "build_review_event",
    "get_engine",
    "get_default_learner_id",
    "init_db",
    "reset_db",
    "is_test_mode",
]

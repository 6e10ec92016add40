"""
Scheduler configuration.

SchedulerConfig is an immutable tuning profile passed into the scheduler.
Alternate profiles can be built in code or read from SRS_* environment
variables (a local .env file is honored).
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.sm2.constants import ANKI_DEFAULTS


class SchedulerConfig(BaseModel):
    """
    Ladder constants, ease math and leech/fuzz settings for one profile.

    Steps are authored in minutes; graduating intervals in days.
    ease_deltas is indexed by Rating (AGAIN, HARD, GOOD, EASY).
    """
    model_config = ConfigDict(frozen=True)

    learning_steps: tuple[int, ...] = Field(default=ANKI_DEFAULTS["learning_steps"], min_length=1)
    lapse_steps: tuple[int, ...] = Field(default=ANKI_DEFAULTS["lapse_steps"], min_length=1)
    initial_ease: float = Field(default=ANKI_DEFAULTS["initial_ease"], gt=0)
    min_ease: float = Field(default=ANKI_DEFAULTS["min_ease"], gt=0)
    ease_deltas: tuple[float, float, float, float] = ANKI_DEFAULTS["ease_deltas"]
    easy_interval_multiplier: float = Field(default=ANKI_DEFAULTS["easy_interval_multiplier"], gt=0)
    hard_relearn_step: int = Field(default=ANKI_DEFAULTS["hard_relearn_step"], ge=0)
    graduating_interval_days: int = Field(default=ANKI_DEFAULTS["graduating_interval_days"], ge=1)
    easy_graduating_interval_days: int = Field(default=ANKI_DEFAULTS["easy_graduating_interval_days"], ge=1)
    lapse_interval_factor: float = Field(default=ANKI_DEFAULTS["lapse_interval_factor"], gt=0)
    leech_threshold: int = Field(default=ANKI_DEFAULTS["leech_threshold"], ge=1)
    fuzz_range: float = Field(default=ANKI_DEFAULTS["fuzz_range"], ge=0, lt=1)

    @field_validator("learning_steps", "lapse_steps")
    @classmethod
    def _positive_steps(cls, steps: tuple[int, ...]) -> tuple[int, ...]:
        if any(step <= 0 for step in steps):
            raise ValueError("ladder steps must be positive minutes")
        return steps

    @model_validator(mode="after")
    def _hard_step_in_ladder(self) -> "SchedulerConfig":
        if self.hard_relearn_step >= len(self.learning_steps):
            raise ValueError(
                f"hard_relearn_step {self.hard_relearn_step} is outside "
                f"learning_steps of length {len(self.learning_steps)}"
            )
        if self.initial_ease < self.min_ease:
            raise ValueError("initial_ease must not be below min_ease")
        return self

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        """
        Build a profile from SRS_* environment variables.

        Recognized variables:
            SRS_LEARNING_STEPS     comma-separated minutes, e.g. "1,10,300"
            SRS_LAPSE_STEPS        comma-separated minutes, e.g. "10"
            SRS_HARD_RELEARN_STEP  learning-ladder index used by Review + Hard
            SRS_LEECH_THRESHOLD    integer
            SRS_FUZZ_RANGE         float fraction, e.g. "0.05"

        Unset variables keep the Anki defaults. When the learning ladder is
        overridden with fewer steps than the default Hard step needs and
        SRS_HARD_RELEARN_STEP is unset, Hard relearns at the last step.
        """
        load_dotenv()
        overrides: dict = {}

        learning = _parse_steps(os.getenv("SRS_LEARNING_STEPS"))
        if learning is not None:
            overrides["learning_steps"] = learning
        lapse = _parse_steps(os.getenv("SRS_LAPSE_STEPS"))
        if lapse is not None:
            overrides["lapse_steps"] = lapse

        if os.getenv("SRS_HARD_RELEARN_STEP"):
            overrides["hard_relearn_step"] = int(os.getenv("SRS_HARD_RELEARN_STEP"))
        elif learning:
            overrides["hard_relearn_step"] = min(ANKI_DEFAULTS["hard_relearn_step"], len(learning) - 1)

        if os.getenv("SRS_LEECH_THRESHOLD"):
            overrides["leech_threshold"] = int(os.getenv("SRS_LEECH_THRESHOLD"))
        if os.getenv("SRS_FUZZ_RANGE"):
            overrides["fuzz_range"] = float(os.getenv("SRS_FUZZ_RANGE"))

        return cls(**overrides)


def _parse_steps(raw: Optional[str]) -> Optional[tuple[int, ...]]:
    if not raw:
        return None
    return tuple(int(part) for part in raw.split(",") if part.strip())


DEFAULT_CONFIG = SchedulerConfig()

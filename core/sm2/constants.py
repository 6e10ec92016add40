"""
SM-2 Constants and Parameters

Ratings, card states and the default Anki-style tuning values in one place.
Tunable values are copied into SchedulerConfig; the scheduler never reads
ANKI_DEFAULTS directly.
"""

from __future__ import annotations

from enum import Enum, IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """Learner's rating of recall, ordered by increasing quality."""
    AGAIN = 0   # Complete blackout
    HARD = 1    # Incorrect, but remembered on seeing the answer
    GOOD = 2    # Correct with some hesitation
    EASY = 3    # Perfect response

    @classmethod
    def from_label(cls, label: str) -> "Rating":
        """Parse a rating from its name ("good") or numeric value ("2")."""
        text = label.strip()
        if text.isdigit():
            return cls(int(text))
        return cls[text.upper()]


# ---- Card States ----

class CardState(str, Enum):
    """Scheduling state of one learner/item pair."""
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    LAPSED = "lapsed"


# ---- Unit Conversion ----

MINUTES_PER_DAY = 24 * 60


# ---- Anki Defaults ----

ANKI_DEFAULTS = {
    "learning_steps": (1, 10, 5 * 60),  # 1 min, 10 min, 5 hours
    "lapse_steps": (10,),
    "initial_ease": 2.5,
    "min_ease": 1.3,
    # Indexed by Rating: AGAIN, HARD, GOOD, EASY
    "ease_deltas": (-0.2, -0.15, 0.0, 0.15),
    "easy_interval_multiplier": 1.3,
    "hard_relearn_step": 2,  # index of the 5-hour learning step
    "graduating_interval_days": 1,
    "easy_graduating_interval_days": 4,
    "lapse_interval_factor": 0.5,
    "leech_threshold": 8,
    "fuzz_range": 0.05,
}


# ---- Rating Buttons ----
# Labels and explanations shown next to each rating choice

RATING_BUTTONS = (
    {
        "rating": Rating.AGAIN,
        "label": "Again",
        "description": "Complete blackout - I had no idea",
    },
    {
        "rating": Rating.HARD,
        "label": "Hard",
        "description": "Incorrect, but I remembered when I saw the answer",
    },
    {
        "rating": Rating.GOOD,
        "label": "Good",
        "description": "Correct response with some hesitation",
    },
    {
        "rating": Rating.EASY,
        "label": "Easy",
        "description": "Perfect response - I knew it instantly",
    },
)

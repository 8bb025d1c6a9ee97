"""
SRS Constants and Parameters

All configurable parameters for the SM-2 scheduler in one place.
"""

from enum import IntEnum


# ---- Quality Grades ----

class Quality(IntEnum):
    """Self-assessed recall quality on the SM-2 0-5 scale."""
    BLACKOUT = 0        # Total failure to recall
    INCORRECT = 1       # Wrong, but recognised the answer
    INCORRECT_EASY = 2  # Wrong, but the answer felt familiar
    HARD = 3            # Correct with serious difficulty
    GOOD = 4            # Correct after some hesitation
    PERFECT = 5         # Correct and fluent


MIN_QUALITY = 0
MAX_QUALITY = 5

# Grades at or above this value count as a successful recall
PASS_THRESHOLD = 3


# ---- Ease Factor ----

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5


# ---- Intervals (days) ----

INITIAL_INTERVAL = 1
MAX_INTERVAL = 36500  # 100 years

# Fixed steps of the promotion ladder before the ease factor takes over
FIRST_PASS_INTERVAL = 1
SECOND_PASS_INTERVAL = 6


# ---- Queries ----

# Horizon used for the "due tomorrow" statistic
DUE_TOMORROW_HORIZON_DAYS = 1

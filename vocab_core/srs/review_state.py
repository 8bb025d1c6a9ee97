"""
Review State - SM-2 per-item state and derived views

Defines the scheduler-owned state of a single vocabulary item and the
read-only views built from it.

Key concepts:
- Level: consecutive successful reviews since the last failure
- Ease factor: multiplier for interval growth, clamped to [min, max]
- Interval: days between the last review and the next one
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Optional

from vocab_core.srs.settings import DEFAULT_SETTINGS, SRSSettings


@dataclass
class ReviewState:
    """
    Scheduling state for a single vocabulary item.

    Joined to catalogue content only by `item_id`.
    """
    item_id: str

    # SM-2 parameters
    level: int
    ease_factor: float
    interval: int  # days

    # Scheduling
    next_review_at: datetime
    last_reviewed_at: datetime

    # Review tracking (review_count == correct_count + incorrect_count)
    review_count: int = 0
    correct_count: int = 0
    incorrect_count: int = 0

    def __post_init__(self):
        """Normalize timestamps to aware UTC."""
        self.next_review_at = ensure_utc(self.next_review_at)
        self.last_reviewed_at = ensure_utc(self.last_reviewed_at)

    def is_due(self, now: datetime) -> bool:
        return self.next_review_at <= ensure_utc(now)

    def copy(self) -> "ReviewState":
        return replace(self)


@dataclass(frozen=True)
class NextState:
    """Result of one SM-2 transition (before counters are applied)."""
    new_level: int
    new_interval: int
    new_ease_factor: float
    next_review_at: datetime


@dataclass(frozen=True)
class ReviewHistory:
    """Per-item review summary; all zero/None for untracked items."""
    review_count: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    accuracy: float = 0.0
    last_reviewed_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReviewStatistics:
    """Aggregate counters across every tracked item."""
    total_items: int
    due_today: int
    due_tomorrow: int
    total_reviews: int
    average_accuracy: float


@dataclass(frozen=True)
class ReviewEvent:
    """
    Log entry for a single recorded review.

    Captures the state before and after the transition.
    """
    item_id: str
    reviewed_at: datetime
    quality: int
    level_before: int
    level_after: int
    ease_before: float
    ease_after: float
    interval_before: int
    interval_after: int
    is_new_item: bool = False


def ensure_utc(value: datetime) -> datetime:
    """
    Return `value` as an aware UTC datetime.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def initialize_new_state(
    item_id: str,
    now: datetime,
    settings: SRSSettings = DEFAULT_SETTINGS
) -> ReviewState:
    """
    Initialize state for an item entering the scheduler.

    The item is due immediately.

    Args:
        item_id: Vocabulary item identifier
        now: Registration timestamp
        settings: Scheduler settings supplying the initial ease and interval

    Returns:
        New ReviewState at level 0 with zeroed counters
    """
    now = ensure_utc(now)
    return ReviewState(
        item_id=item_id,
        level=0,
        ease_factor=settings.initial_ease_factor,
        interval=settings.initial_interval,
        next_review_at=now,
        last_reviewed_at=now,
        review_count=0,
        correct_count=0,
        incorrect_count=0
    )


# ---- Persisted layout ----

def to_record(state: ReviewState) -> dict[str, Any]:
    """
    Convert state to its persisted layout (ISO-8601 timestamps).

    The ease factor is kept as a float so it round-trips exactly.
    """
    return {
        "item_id": state.item_id,
        "level": int(state.level),
        "ease_factor": float(state.ease_factor),
        "interval": int(state.interval),
        "next_review_at": state.next_review_at.isoformat(),
        "review_count": int(state.review_count),
        "correct_count": int(state.correct_count),
        "incorrect_count": int(state.incorrect_count),
        "last_reviewed_at": state.last_reviewed_at.isoformat(),
    }


def from_record(record: dict[str, Any]) -> ReviewState:
    """
    Rebuild state from its persisted layout.

    Args:
        record: Mapping produced by `to_record` (or a database row dict)

    Returns:
        ReviewState
    """
    return ReviewState(
        item_id=str(record["item_id"]),
        level=int(record["level"]),
        ease_factor=float(record["ease_factor"]),
        interval=int(record["interval"]),
        next_review_at=parse_timestamp(record["next_review_at"]),
        last_reviewed_at=parse_timestamp(record["last_reviewed_at"]),
        review_count=int(record["review_count"]),
        correct_count=int(record["correct_count"]),
        incorrect_count=int(record["incorrect_count"])
    )


def parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value))

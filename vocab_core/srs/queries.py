"""
Queries - due-ness, ordering and aggregate statistics

Pure functions over a sequence of ReviewState values given in insertion
order. Nothing here is cached: every call recomputes from the states it
is handed.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from vocab_core.srs.constants import DUE_TOMORROW_HORIZON_DAYS
from vocab_core.srs.review_state import (
    ReviewHistory,
    ReviewState,
    ReviewStatistics,
    ensure_utc,
)


def _ordered(states: Iterable[ReviewState]) -> list[ReviewState]:
    # sorted() is stable, so ties keep insertion order
    return sorted(states, key=lambda s: s.next_review_at)


def get_due_items(states: Iterable[ReviewState], now: datetime) -> list[str]:
    """
    Get ids of items due for review (next_review_at <= now).

    Args:
        states: Tracked states in insertion order
        now: Reference timestamp

    Returns:
        Item ids, earliest-due first
    """
    now = ensure_utc(now)
    due = [s for s in states if s.next_review_at <= now]
    return [s.item_id for s in _ordered(due)]


def get_upcoming(
    states: Iterable[ReviewState],
    now: datetime,
    horizon_days: float
) -> list[str]:
    """
    Get ids of items falling due in the window (now, now + horizon_days].

    Args:
        states: Tracked states in insertion order
        now: Reference timestamp
        horizon_days: Window length in days

    Returns:
        Item ids, earliest-due first
    """
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be non-negative, got {horizon_days}")

    now = ensure_utc(now)
    horizon = now + timedelta(days=horizon_days)
    upcoming = [s for s in states if now < s.next_review_at <= horizon]
    return [s.item_id for s in _ordered(upcoming)]


def accuracy(correct: int, total: int) -> float:
    """Percentage of correct reviews; 0 when nothing was reviewed."""
    if total <= 0:
        return 0.0
    return 100.0 * correct / total


def compute_statistics(states: Iterable[ReviewState], now: datetime) -> ReviewStatistics:
    """
    Aggregate counters across all tracked states.

    Args:
        states: Tracked states
        now: Reference timestamp

    Returns:
        ReviewStatistics
    """
    now = ensure_utc(now)
    tomorrow = now + timedelta(days=DUE_TOMORROW_HORIZON_DAYS)

    total_items = 0
    due_today = 0
    due_tomorrow = 0
    total_reviews = 0
    total_correct = 0

    for state in states:
        total_items += 1
        if state.next_review_at <= now:
            due_today += 1
        elif state.next_review_at <= tomorrow:
            due_tomorrow += 1
        total_reviews += state.review_count
        total_correct += state.correct_count

    return ReviewStatistics(
        total_items=total_items,
        due_today=due_today,
        due_tomorrow=due_tomorrow,
        total_reviews=total_reviews,
        average_accuracy=accuracy(total_correct, total_reviews)
    )


def build_history(state: Optional[ReviewState]) -> ReviewHistory:
    """
    Summarize one item's review history.

    An untracked item (None) yields the empty history rather than an error.
    """
    if state is None:
        return ReviewHistory()

    return ReviewHistory(
        review_count=state.review_count,
        correct_count=state.correct_count,
        incorrect_count=state.incorrect_count,
        accuracy=accuracy(state.correct_count, state.review_count),
        last_reviewed_at=state.last_reviewed_at,
        next_review_at=state.next_review_at
    )

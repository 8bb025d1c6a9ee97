"""
Scheduler - SM-2 Algorithm Logic

Pure SM-2 scheduling and state updates (no database calls).

Main workflow:
1. Validate the quality grade
2. Update the ease factor (every review, pass or fail)
3. Pick the new level and interval from the promotion ladder
4. Return a new ReviewState with counters applied

This module handles ONLY the algorithm logic.
Persistence is handled by the store modules.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from vocab_core.srs.constants import (
    FIRST_PASS_INTERVAL,
    MAX_QUALITY,
    MIN_QUALITY,
    PASS_THRESHOLD,
    SECOND_PASS_INTERVAL,
)
from vocab_core.srs.errors import InvalidQuality
from vocab_core.srs.review_state import (
    NextState,
    ReviewEvent,
    ReviewState,
    ensure_utc,
    initialize_new_state,
)
from vocab_core.srs.settings import DEFAULT_SETTINGS, SRSSettings


def validate_quality(quality) -> int:
    """
    Check that `quality` is an integer grade in [0, 5].

    Booleans and floats are rejected even when numerically in range.

    Returns:
        The grade as a plain int

    Raises:
        InvalidQuality: if the grade is out of range or not an integer
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQuality(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQuality(quality)
    return int(quality)


def is_passing(quality: int) -> bool:
    return quality >= PASS_THRESHOLD


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (values are positive)."""
    return int(math.floor(value + 0.5))


def update_ease_factor(
    ease_factor: float,
    quality: int,
    settings: SRSSettings = DEFAULT_SETTINGS
) -> float:
    """
    Apply the SM-2 ease update and clamp to the configured bounds.

    Formula:
        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

    q=5 adds 0.1, q=4 leaves EF unchanged, q=3 subtracts 0.14,
    q=0 subtracts 0.8.

    Args:
        ease_factor: Current ease factor
        quality: Validated grade 0-5
        settings: Scheduler settings supplying the clamp bounds

    Returns:
        New ease factor in [min_ease_factor, max_ease_factor]
    """
    miss = MAX_QUALITY - quality
    new_ease = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(settings.min_ease_factor, min(settings.max_ease_factor, new_ease))


def compute_next_state(
    current: ReviewState,
    quality: int,
    now: datetime,
    settings: SRSSettings = DEFAULT_SETTINGS
) -> NextState:
    """
    Compute the SM-2 transition for one review.

    Pure and deterministic: the same (current, quality, now) always yields
    the same result. `current` is not modified.

    Ladder on a pass (q >= 3):
    - level 0 -> level 1, interval 1
    - level 1 -> level 2, interval 6
    - level n -> level n+1, interval round(interval * new_ease)

    A failure (q < 3) restarts at level 0 with the initial interval but
    keeps the updated ease factor.

    Args:
        current: State before the review
        quality: Grade 0-5
        now: Review timestamp
        settings: Scheduler settings

    Returns:
        NextState with the new level, interval, ease and due timestamp

    Raises:
        InvalidQuality: if quality is not an integer in [0, 5]
    """
    quality = validate_quality(quality)
    new_ease = update_ease_factor(current.ease_factor, quality, settings)

    if not is_passing(quality):
        new_level = 0
        new_interval = settings.initial_interval
    elif current.level == 0:
        new_level = 1
        new_interval = FIRST_PASS_INTERVAL
    elif current.level == 1:
        new_level = 2
        new_interval = SECOND_PASS_INTERVAL
    else:
        new_level = current.level + 1
        new_interval = round_half_up(current.interval * new_ease)

    new_interval = max(1, min(new_interval, settings.max_interval))

    return NextState(
        new_level=new_level,
        new_interval=new_interval,
        new_ease_factor=new_ease,
        next_review_at=ensure_utc(now) + timedelta(days=new_interval)
    )


def apply_review(
    current: ReviewState,
    quality: int,
    now: datetime,
    settings: SRSSettings = DEFAULT_SETTINGS
) -> ReviewState:
    """
    Return the state after recording one review.

    Applies the SM-2 transition, bumps the review counters and stamps
    `last_reviewed_at`. Builds a new object; `current` is left untouched
    so a failed write can never leave a half-updated record behind.

    Args:
        current: State before the review
        quality: Grade 0-5
        now: Review timestamp
        settings: Scheduler settings

    Returns:
        Updated ReviewState
    """
    result = compute_next_state(current, quality, now, settings)
    passed = is_passing(quality)

    return replace(
        current,
        level=result.new_level,
        ease_factor=result.new_ease_factor,
        interval=result.new_interval,
        next_review_at=result.next_review_at,
        last_reviewed_at=ensure_utc(now),
        review_count=current.review_count + 1,
        correct_count=current.correct_count + (1 if passed else 0),
        incorrect_count=current.incorrect_count + (0 if passed else 1)
    )


process_review = apply_review


def review_item(
    item_id: str,
    current: Optional[ReviewState],
    quality: int,
    now: datetime,
    settings: SRSSettings = DEFAULT_SETTINGS
) -> tuple[ReviewState, ReviewEvent]:
    """
    Review one item, bootstrapping it first if it is untracked.

    Returns the updated state together with the event describing the
    transition. Pure, so a store may call it again after a write conflict.
    """
    is_new = current is None
    if is_new:
        current = initialize_new_state(item_id, now, settings)

    updated = apply_review(current, quality, now, settings)
    event = ReviewEvent(
        item_id=item_id,
        reviewed_at=ensure_utc(now),
        quality=quality,
        level_before=current.level,
        level_after=updated.level,
        ease_before=current.ease_factor,
        ease_after=updated.ease_factor,
        interval_before=current.interval,
        interval_after=updated.interval,
        is_new_item=is_new
    )
    return updated, event

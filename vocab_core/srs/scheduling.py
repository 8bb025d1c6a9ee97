"""
Scheduling - Main SRS API for Review Management

This module ties together the SM-2 algorithm, the due queries and a record
store, and provides the API the session controller and UI layer call.

Main workflow:
1. User reviews an item
2. Load its state (or bootstrap a new one)
3. Apply the SM-2 transition
4. Persist state and review event together
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from vocab_core.srs import queries, scheduler
from vocab_core.srs.errors import WriteConflict
from vocab_core.srs.review_state import (
    ReviewEvent,
    ReviewHistory,
    ReviewState,
    ReviewStatistics,
    ensure_utc,
    initialize_new_state,
    utc_now,
)
from vocab_core.srs.settings import DEFAULT_SETTINGS, SRSSettings
from vocab_core.srs.store import RecordStore

if TYPE_CHECKING:
    from vocab_core.catalogue import WordCatalogue
    from vocab_core.schemas import VocabularyEntry

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_LIMIT = 20


@dataclass(frozen=True)
class DueReview:
    """A due item joined with its catalogue entry (None if the catalogue lacks it)."""
    item_id: str
    state: ReviewState
    entry: Optional["VocabularyEntry"] = None


@dataclass(frozen=True)
class LearningQueue:
    """Items to study next: due reviews first, then never-seen words."""
    due_reviews: list[DueReview] = field(default_factory=list)
    new_items: list["VocabularyEntry"] = field(default_factory=list)


@dataclass
class _ItemLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class SRSService:
    """
    Spaced repetition scheduler bound to one record store.

    The store is passed in explicitly so independent instances (per user,
    per test) never share state. Writes to the same item are serialized
    with a per-item lock, and reset_all waits for every in-flight write.
    Item locks exist only while some thread uses them.
    """

    def __init__(
        self,
        store: RecordStore,
        settings: Optional[SRSSettings] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.settings = settings or DEFAULT_SETTINGS
        self._clock = clock or utc_now
        self._locks: dict[str, _ItemLock] = {}
        self._locks_guard = threading.Lock()

    # ---- Helpers ----

    def now(self) -> datetime:
        """Current time from the service clock, in UTC."""
        return ensure_utc(self._clock())

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_utc(now) if now is not None else self.now()

    @contextmanager
    def _item_lock(self, item_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(item_id)
            if entry is None:
                entry = self._locks[item_id] = _ItemLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[item_id]

    # ---- Registration ----

    def register_item(self, item_id: str, now: Optional[datetime] = None) -> ReviewState:
        """
        Start tracking an item; it is due immediately.

        Idempotent: an already tracked item is returned unchanged, also when
        another client sharing the store registers it at the same moment.

        Args:
            item_id: Vocabulary item identifier
            now: Registration timestamp (defaults to the service clock)

        Returns:
            The tracked ReviewState
        """
        now = self._now(now)
        with self._item_lock(item_id):
            existing = self.store.get(item_id)
            if existing is not None:
                return existing

            state = initialize_new_state(item_id, now, self.settings)
            try:
                self.store.insert(state)
            except WriteConflict:
                existing = self.store.get(item_id)
                if existing is None:
                    raise
                logger.debug("Item %s was registered concurrently", item_id)
                return existing
            logger.info("Registered item %s (due %s)", item_id, state.next_review_at.isoformat())
            return state

    # ---- Reviews ----

    def record_review(
        self,
        item_id: str,
        quality: int,
        now: Optional[datetime] = None
    ) -> ReviewState:
        """
        Record one review and reschedule the item.

        Untracked items are bootstrapped first. The store reads, updates and
        writes the state and its event as one unit; if the write fails the
        stored state is unchanged and StorageFailure propagates.

        Args:
            item_id: Vocabulary item identifier
            quality: Recall grade 0-5
            now: Review timestamp (defaults to the service clock)

        Returns:
            The updated ReviewState

        Raises:
            InvalidQuality: if quality is not an integer in [0, 5]
            StorageFailure: if the store cannot be read or written
        """
        try:
            quality = scheduler.validate_quality(quality)
        except ValueError:
            logger.warning("Rejected review of %s with quality %r", item_id, quality)
            raise

        now = self._now(now)
        settings = self.settings
        with self._item_lock(item_id):
            updated, event = self.store.update_with_event(
                item_id,
                lambda current: scheduler.review_item(item_id, current, quality, now, settings)
            )

        logger.debug(
            "Reviewed %s q=%d: level %d->%d, ease %.2f->%.2f, interval %d->%d",
            item_id, quality,
            event.level_before, event.level_after,
            event.ease_before, event.ease_after,
            event.interval_before, event.interval_after
        )
        return updated

    # ---- Queries ----

    def get_state(self, item_id: str) -> Optional[ReviewState]:
        return self.store.get(item_id)

    def get_due_items(self, now: Optional[datetime] = None) -> list[str]:
        """Ids of items due now, earliest-due first."""
        return queries.get_due_items(self.store.all_states(), self._now(now))

    def get_upcoming(self, now: Optional[datetime] = None, horizon_days: float = 1) -> list[str]:
        """Ids of items falling due within `horizon_days` after now."""
        return queries.get_upcoming(self.store.all_states(), self._now(now), horizon_days)

    def get_statistics(self, now: Optional[datetime] = None) -> ReviewStatistics:
        return queries.compute_statistics(self.store.all_states(), self._now(now))

    def get_history(self, item_id: str) -> ReviewHistory:
        """Review summary for one item; empty for untracked items."""
        return queries.build_history(self.store.get(item_id))

    def recent_events(self, limit: int = 10) -> list[ReviewEvent]:
        return self.store.recent_events(limit)

    def get_learning_queue(
        self,
        catalogue: "WordCatalogue",
        limit: int = DEFAULT_QUEUE_LIMIT,
        now: Optional[datetime] = None
    ) -> LearningQueue:
        """
        Build the next study queue: due reviews, topped up with new words.

        Due reviews are capped at `limit`; new words fill whatever room is
        left and come from the catalogue in its own order.

        Args:
            catalogue: Word catalogue supplying entry content and new words
            limit: Maximum queue length
            now: Reference timestamp

        Returns:
            LearningQueue
        """
        states = self.store.all_states()
        by_id = {state.item_id: state for state in states}
        due_ids = queries.get_due_items(states, self._now(now))[:limit]

        due_reviews = [
            DueReview(item_id=item_id, state=by_id[item_id], entry=catalogue.get(item_id))
            for item_id in due_ids
        ]

        room = max(0, limit - len(due_reviews))
        new_items = []
        if room:
            for entry in catalogue.all_entries():
                if entry.id in by_id:
                    continue
                new_items.append(entry)
                if len(new_items) >= room:
                    break

        return LearningQueue(due_reviews=due_reviews, new_items=new_items)

    # ---- Reset ----

    def reset_item(self, item_id: str) -> None:
        """Stop tracking an item. No-op if it is untracked."""
        with self._item_lock(item_id):
            self.store.delete(item_id)
        logger.info("Reset item %s", item_id)

    def reset_all(self) -> None:
        """
        Stop tracking every item.

        Waits for writes already in progress; writes that start meanwhile
        block until the store is cleared and then see an empty store.
        """
        with self._locks_guard:
            held = [entry.lock for entry in self._locks.values()]
            for lock in held:
                lock.acquire()
            try:
                self.store.clear()
            finally:
                for lock in held:
                    lock.release()
        logger.info("Reset all review states")

"""
Record Store - interface and in-memory implementation

A record store owns every ReviewState of one user, keyed by item id.
Mutations are whole-record replacements so a reader never observes a
half-updated state.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from vocab_core.srs.review_state import ReviewEvent, ReviewState

logger = logging.getLogger(__name__)

ReviewTransition = Callable[[Optional[ReviewState]], tuple[ReviewState, ReviewEvent]]


class RecordStore(ABC):
    """Persistence boundary for review states and review events."""

    @abstractmethod
    def get(self, item_id: str) -> Optional[ReviewState]:
        """Return the stored state, or None if the item is untracked."""

    @abstractmethod
    def all_states(self) -> list[ReviewState]:
        """Return every stored state in insertion order."""

    @abstractmethod
    def insert(self, state: ReviewState) -> None:
        """Create a record for an untracked item."""

    @abstractmethod
    def replace(self, state: ReviewState) -> None:
        """Atomically replace the record of a tracked item."""

    @abstractmethod
    def update_with_event(
        self,
        item_id: str,
        transition: ReviewTransition
    ) -> tuple[ReviewState, ReviewEvent]:
        """
        Read-modify-write one record and append its review event as one unit.

        `transition` receives the stored state (None if untracked) and returns
        the state to store plus the event to log. It must be pure: a store
        that detects a concurrent writer re-reads and calls it again.
        """

    @abstractmethod
    def delete(self, item_id: str) -> None:
        """Remove an item's record and events; no-op if untracked."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every record and event."""

    @abstractmethod
    def recent_events(self, limit: int = 10) -> list[ReviewEvent]:
        """Return the most recent review events, newest first."""


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed store for tests and single-process use.

    States are copied on the way in and out, so callers holding a
    ReviewState cannot change what is stored.
    """

    def __init__(self):
        self._states: dict[str, ReviewState] = {}
        self._events: list[ReviewEvent] = []
        self._lock = threading.RLock()

    def get(self, item_id: str) -> Optional[ReviewState]:
        with self._lock:
            state = self._states.get(item_id)
            return state.copy() if state is not None else None

    def all_states(self) -> list[ReviewState]:
        with self._lock:
            return [state.copy() for state in self._states.values()]

    def insert(self, state: ReviewState) -> None:
        with self._lock:
            if state.item_id in self._states:
                raise KeyError(f"item already tracked: {state.item_id}")
            self._states[state.item_id] = state.copy()

    def replace(self, state: ReviewState) -> None:
        with self._lock:
            if state.item_id not in self._states:
                raise KeyError(f"item not tracked: {state.item_id}")
            self._states[state.item_id] = state.copy()

    def update_with_event(
        self,
        item_id: str,
        transition: ReviewTransition
    ) -> tuple[ReviewState, ReviewEvent]:
        with self._lock:
            current = self._states.get(item_id)
            state, event = transition(current.copy() if current is not None else None)
            # Assignment keeps the original insertion position of existing keys
            self._states[item_id] = state.copy()
            self._events.append(event)
            return state.copy(), event

    def delete(self, item_id: str) -> None:
        with self._lock:
            self._states.pop(item_id, None)
            self._events = [e for e in self._events if e.item_id != item_id]

    def clear(self) -> None:
        with self._lock:
            self._states.clear()
            self._events.clear()

    def recent_events(self, limit: int = 10) -> list[ReviewEvent]:
        with self._lock:
            return list(reversed(self._events))[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

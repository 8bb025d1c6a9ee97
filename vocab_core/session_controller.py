"""
Review session lifecycle.

Drives a batch of due items through the scheduler one at a time. Retry
policy for storage failures belongs to the caller: a failed answer leaves
the session on the same item.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from vocab_core.srs.queries import accuracy
from vocab_core.srs.review_state import ReviewState
from vocab_core.srs.scheduler import is_passing
from vocab_core.srs.scheduling import SRSService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSummary:
    reviewed: int
    correct: int
    skipped: int
    accuracy: float


class ReviewSession:
    """
    One pass over a fixed snapshot of due items.

    The batch is taken when the session starts; items that fall due later
    wait for the next session.
    """

    def __init__(self, service: SRSService, item_ids: list[str]):
        self.service = service
        self.session_id = str(uuid.uuid4())
        self.item_ids = list(item_ids)
        self.position = 0
        self.reviewed = 0
        self.correct = 0
        self.skipped = 0

    @classmethod
    def start(
        cls,
        service: SRSService,
        now: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> "ReviewSession":
        """
        Start a session over the items due at `now`.

        Args:
            service: Scheduler to read from and record into
            now: Reference timestamp (defaults to the service clock)
            limit: Maximum number of items in the batch

        Returns:
            ReviewSession positioned on the earliest-due item
        """
        due = service.get_due_items(now)
        if limit is not None:
            due = due[:limit]
        session = cls(service, due)
        logger.info("Started review session %s with %d items", session.session_id, len(due))
        return session

    @property
    def current_item(self) -> Optional[str]:
        if self.is_finished:
            return None
        return self.item_ids[self.position]

    @property
    def remaining(self) -> int:
        return max(0, len(self.item_ids) - self.position)

    @property
    def is_finished(self) -> bool:
        return self.position >= len(self.item_ids)

    def answer(self, quality: int, now: Optional[datetime] = None) -> ReviewState:
        """
        Record a review of the current item and move on.

        Raises:
            RuntimeError: if the session is already finished
            InvalidQuality: bad grade; the session stays on this item
            StorageFailure: write failed; the session stays on this item
        """
        item_id = self.current_item
        if item_id is None:
            raise RuntimeError("review session is finished")

        state = self.service.record_review(item_id, quality, now)

        self.reviewed += 1
        if is_passing(quality):
            self.correct += 1
        self.position += 1
        if self.is_finished:
            logger.info("Finished review session %s", self.session_id)
        return state

    def skip(self) -> None:
        """Advance past the current item without recording a review."""
        if self.is_finished:
            raise RuntimeError("review session is finished")
        self.skipped += 1
        self.position += 1

    def summary(self) -> SessionSummary:
        return SessionSummary(
            reviewed=self.reviewed,
            correct=self.correct,
            skipped=self.skipped,
            accuracy=accuracy(self.correct, self.reviewed)
        )

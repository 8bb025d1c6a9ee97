"""
Database - SRS Record Store on SQLAlchemy

Handles all database operations for review state and review events.
Works with any SQLAlchemy backend (SQLite file by default, Postgres via
DATABASE_URL).

This module handles ONLY database I/O.
Algorithm logic is handled by the scheduler module.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from vocab_core import config
from vocab_core.srs.errors import StorageFailure, WriteConflict
from vocab_core.srs.models import Base, ReviewEventRow, ReviewStateRow
from vocab_core.srs.review_state import (
    ReviewEvent,
    ReviewState,
    from_record,
    parse_timestamp,
)
from vocab_core.srs.store import RecordStore, ReviewTransition

logger = logging.getLogger(__name__)

# Read-modify-write attempts before a contended review gives up
MAX_WRITE_ATTEMPTS = 5


# ---- Engine / schema ----

def get_engine(db_url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for the record store.

    Server databases get a connection pool; SQLite files get their parent
    directory created.

    Args:
        db_url: Connection string (defaults to config.get_database_url())

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = db_url or config.get_database_url()
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(db_url, echo=False)

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def init_db(engine: Engine) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates missing tables.
    """
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        logger.error("Failed to initialize SRS schema: %s", exc)
        raise StorageFailure("could not initialize SRS schema") from exc


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Delete all data and recreate tables.

    Only use this for testing or when you want to start fresh.
    All review history for every user will be lost!
    """
    try:
        Base.metadata.drop_all(engine)
    except SQLAlchemyError as exc:
        logger.error("Failed to drop SRS tables: %s", exc)
        raise StorageFailure("could not drop SRS tables") from exc
    logger.warning("All SRS tables dropped")
    init_db(engine)


# ---- Row conversion ----

def _row_to_state(row: ReviewStateRow) -> ReviewState:
    return from_record({
        "item_id": row.item_id,
        "level": row.level,
        "ease_factor": row.ease_factor,
        "interval": row.interval,
        "next_review_at": row.next_review_at,
        "last_reviewed_at": row.last_reviewed_at,
        "review_count": row.review_count,
        "correct_count": row.correct_count,
        "incorrect_count": row.incorrect_count,
    })


def _copy_state_to_row(state: ReviewState, row: ReviewStateRow) -> None:
    row.level = state.level
    row.ease_factor = state.ease_factor
    row.interval = state.interval
    row.next_review_at = state.next_review_at.isoformat()
    row.last_reviewed_at = state.last_reviewed_at.isoformat()
    row.review_count = state.review_count
    row.correct_count = state.correct_count
    row.incorrect_count = state.incorrect_count


def _event_to_row(user_id: str, event: ReviewEvent) -> ReviewEventRow:
    return ReviewEventRow(
        user_id=user_id,
        item_id=event.item_id,
        reviewed_at=event.reviewed_at.isoformat(),
        quality=int(event.quality),
        level_before=event.level_before,
        ease_before=event.ease_before,
        interval_before=event.interval_before,
        level_after=event.level_after,
        ease_after=event.ease_after,
        interval_after=event.interval_after,
        is_new_item=1 if event.is_new_item else 0
    )


def _row_to_event(row: ReviewEventRow) -> ReviewEvent:
    return ReviewEvent(
        item_id=row.item_id,
        reviewed_at=parse_timestamp(row.reviewed_at),
        quality=row.quality,
        level_before=row.level_before,
        level_after=row.level_after,
        ease_before=row.ease_before,
        ease_after=row.ease_after,
        interval_before=row.interval_before,
        interval_after=row.interval_after,
        is_new_item=bool(row.is_new_item)
    )


# ---- Store ----

class SqlRecordStore(RecordStore):
    """
    Record store persisted through SQLAlchemy, scoped to one user.

    Every call runs in its own transaction; any SQLAlchemy error is rolled
    back and surfaced as StorageFailure. Several processes may share one
    database: state rows carry a version counter, so a write based on a
    stale read fails with WriteConflict instead of overwriting.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        user_id: Optional[str] = None,
        create_tables: bool = True
    ):
        self.engine = engine if engine is not None else get_engine()
        self.user_id = user_id or config.get_default_user_id()
        self._sessionmaker = sessionmaker(bind=self.engine, expire_on_commit=False)
        if create_tables:
            init_db(self.engine)

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        session = self._sessionmaker()
        try:
            with session.begin():
                yield session
        except (IntegrityError, StaleDataError) as exc:
            logger.info("SRS store write conflict while trying to %s for user %s: %s", action, self.user_id, exc)
            raise WriteConflict(f"could not {action}: record changed concurrently") from exc
        except SQLAlchemyError as exc:
            logger.error("SRS store failed to %s for user %s: %s", action, self.user_id, exc)
            raise StorageFailure(f"could not {action}") from exc
        finally:
            session.close()

    def _find_row(
        self,
        session: Session,
        item_id: str,
        for_update: bool = False
    ) -> Optional[ReviewStateRow]:
        query = session.query(ReviewStateRow).filter(
            ReviewStateRow.user_id == self.user_id,
            ReviewStateRow.item_id == item_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get(self, item_id: str) -> Optional[ReviewState]:
        with self._transaction("load review state") as session:
            row = self._find_row(session, item_id)
            return _row_to_state(row) if row is not None else None

    def all_states(self) -> list[ReviewState]:
        with self._transaction("load review states") as session:
            rows = session.query(ReviewStateRow).filter(
                ReviewStateRow.user_id == self.user_id
            ).order_by(ReviewStateRow.seq.asc()).all()
            return [_row_to_state(row) for row in rows]

    def insert(self, state: ReviewState) -> None:
        with self._transaction("insert review state") as session:
            row = ReviewStateRow(user_id=self.user_id, item_id=state.item_id)
            _copy_state_to_row(state, row)
            session.add(row)

    def replace(self, state: ReviewState) -> None:
        with self._transaction("replace review state") as session:
            row = self._find_row(session, state.item_id)
            if row is None:
                raise KeyError(f"item not tracked: {state.item_id}")
            _copy_state_to_row(state, row)

    def update_with_event(
        self,
        item_id: str,
        transition: ReviewTransition
    ) -> tuple[ReviewState, ReviewEvent]:
        """
        Load, transform and write one state row plus its event row.

        The row is locked where the backend supports SELECT ... FOR UPDATE.
        Elsewhere the version counter catches a concurrent writer; the whole
        read-modify-write is then retried from a fresh read.

        Raises:
            StorageFailure: on database errors
            WriteConflict: if every attempt lost the race
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                with self._transaction("record review") as session:
                    row = self._find_row(session, item_id, for_update=True)
                    current = _row_to_state(row) if row is not None else None
                    state, event = transition(current)

                    if row is None:
                        row = ReviewStateRow(user_id=self.user_id, item_id=item_id)
                        session.add(row)
                    _copy_state_to_row(state, row)
                    session.add(_event_to_row(self.user_id, event))
                return state, event
            except WriteConflict:
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise
                logger.debug("Retrying review of %s (attempt %d failed)", item_id, attempt)

    def delete(self, item_id: str) -> None:
        with self._transaction("delete review state") as session:
            session.query(ReviewEventRow).filter(
                ReviewEventRow.user_id == self.user_id,
                ReviewEventRow.item_id == item_id
            ).delete(synchronize_session=False)
            session.query(ReviewStateRow).filter(
                ReviewStateRow.user_id == self.user_id,
                ReviewStateRow.item_id == item_id
            ).delete(synchronize_session=False)

    def clear(self) -> None:
        with self._transaction("clear review states") as session:
            session.query(ReviewEventRow).filter(
                ReviewEventRow.user_id == self.user_id
            ).delete(synchronize_session=False)
            session.query(ReviewStateRow).filter(
                ReviewStateRow.user_id == self.user_id
            ).delete(synchronize_session=False)

    def recent_events(self, limit: int = 10) -> list[ReviewEvent]:
        with self._transaction("load review events") as session:
            rows = session.query(ReviewEventRow).filter(
                ReviewEventRow.user_id == self.user_id
            ).order_by(ReviewEventRow.id.desc()).limit(limit).all()
            return [_row_to_event(row) for row in rows]

"""
SRS - SM-2 Spaced Repetition Scheduler

Main API for the vocabulary review system.

This package implements the SM-2 variant used to schedule vocabulary:
- Ease factor updated on every review, clamped to [1.3, 2.5]
- Promotion ladder 1 day -> 6 days -> interval * ease
- Failures restart the ladder but keep the adjusted ease
- Due-ness by exact timestamp comparison

Quick start:
    from vocab_core import srs

    store = srs.SqlRecordStore(user_id="alice")
    service = srs.SRSService(store)

    service.register_item("word-1")
    service.record_review("word-1", srs.Quality.GOOD)
    due_ids = service.get_due_items()
"""

# Core algorithm (pure)
from vocab_core.srs.scheduler import (
    apply_review,
    compute_next_state,
    process_review,
    review_item,
    update_ease_factor,
    validate_quality,
)

# Queries (pure)
from vocab_core.srs.queries import (
    build_history,
    compute_statistics,
    get_due_items,
    get_upcoming,
)

# Stores
from vocab_core.srs.store import InMemoryRecordStore, RecordStore
from vocab_core.srs.database import SqlRecordStore, get_engine, init_db, reset_db

# Service API
from vocab_core.srs.scheduling import DueReview, LearningQueue, SRSService

# State and result types
from vocab_core.srs.review_state import (
    NextState,
    ReviewEvent,
    ReviewHistory,
    ReviewState,
    ReviewStatistics,
    from_record,
    initialize_new_state,
    to_record,
)

# Constants, settings and errors
from vocab_core.srs.constants import (
    INITIAL_EASE_FACTOR,
    INITIAL_INTERVAL,
    MAX_EASE_FACTOR,
    MAX_INTERVAL,
    MIN_EASE_FACTOR,
    PASS_THRESHOLD,
    Quality,
)
from vocab_core.srs.settings import DEFAULT_SETTINGS, SRSSettings
from vocab_core.srs.errors import (
    ConfigurationError,
    InvalidQuality,
    SRSError,
    StorageFailure,
    WriteConflict,
)


__all__ = [
    # Core algorithm
    "apply_review",
    "compute_next_state",
    "process_review",
    "review_item",
    "update_ease_factor",
    "validate_quality",

    # Queries
    "build_history",
    "compute_statistics",
    "get_due_items",
    "get_upcoming",

    # Stores
    "RecordStore",
    "InMemoryRecordStore",
    "SqlRecordStore",
    "get_engine",
    "init_db",
    "reset_db",

    # Service
    "SRSService",
    "DueReview",
    "LearningQueue",

    # Types
    "NextState",
    "ReviewEvent",
    "ReviewHistory",
    "ReviewState",
    "ReviewStatistics",
    "from_record",
    "initialize_new_state",
    "to_record",

    # Parameters
    "Quality",
    "PASS_THRESHOLD",
    "INITIAL_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "MAX_EASE_FACTOR",
    "INITIAL_INTERVAL",
    "MAX_INTERVAL",
    "SRSSettings",
    "DEFAULT_SETTINGS",

    # Errors
    "SRSError",
    "InvalidQuality",
    "StorageFailure",
    "WriteConflict",
    "ConfigurationError",
]

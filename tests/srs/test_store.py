from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from vocab_core.srs import (
    InMemoryRecordStore,
    ReviewEvent,
    SqlRecordStore,
    SRSService,
    StorageFailure,
    WriteConflict,
    apply_review,
    from_record,
    initialize_new_state,
    reset_db,
    review_item,
    to_record,
)
from vocab_core.srs.database import MAX_WRITE_ATTEMPTS


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_engine):
    if request.param == "memory":
        return InMemoryRecordStore()
    return SqlRecordStore(sql_engine, user_id="alice")


def write(store, state, quality=4):
    """Store `state` through the read-modify-write path."""
    return store.update_with_event(state.item_id, lambda current: (state, make_event(state, quality)))


def make_event(state, quality=4):
    return ReviewEvent(
        item_id=state.item_id,
        reviewed_at=state.last_reviewed_at,
        quality=quality,
        level_before=0,
        level_after=state.level,
        ease_before=2.5,
        ease_after=state.ease_factor,
        interval_before=1,
        interval_after=state.interval,
    )


def test_insert_and_get(store, t0):
    state = initialize_new_state("w1", t0)
    store.insert(state)
    assert store.get("w1") == state
    assert store.get("missing") is None


def test_all_states_in_insertion_order(store, t0):
    for item_id in ("c", "a", "b"):
        store.insert(initialize_new_state(item_id, t0))
    assert [s.item_id for s in store.all_states()] == ["c", "a", "b"]


def test_replace_keeps_insertion_position(store, t0):
    for item_id in ("a", "b"):
        store.insert(initialize_new_state(item_id, t0))
    updated = apply_review(store.get("a"), 5, t0)
    write(store, updated)
    assert [s.item_id for s in store.all_states()] == ["a", "b"]
    assert store.get("a") == updated


def test_update_with_event_creates_missing_record(store, t0):
    state = apply_review(initialize_new_state("w1", t0), 3, t0)
    write(store, state, quality=3)
    assert store.get("w1") == state
    assert store.recent_events()[0].quality == 3


def test_replace_requires_tracked_item(store, t0):
    with pytest.raises(KeyError):
        store.replace(initialize_new_state("w1", t0))


def test_ease_factor_round_trips_exactly(store, t0):
    state = initialize_new_state("w1", t0)
    state.ease_factor = 1.8599999999999999
    store.insert(state)
    assert store.get("w1").ease_factor == 1.8599999999999999


def test_delete_removes_state_and_events(store, t0):
    for item_id in ("a", "b"):
        state = apply_review(initialize_new_state(item_id, t0), 4, t0)
        write(store, state)

    store.delete("a")
    store.delete("a")
    assert store.get("a") is None
    assert [e.item_id for e in store.recent_events()] == ["b"]


def test_clear(store, t0):
    store.insert(initialize_new_state("a", t0))
    store.clear()
    assert store.all_states() == []
    assert store.recent_events() == []


def test_returned_states_are_copies(store, t0):
    store.insert(initialize_new_state("w1", t0))
    loaded = store.get("w1")
    loaded.level = 9
    assert store.get("w1").level == 0


def test_recent_events_limit(store, t0):
    state = initialize_new_state("w1", t0)
    for minute in range(5):
        state = apply_review(state, 4, t0 + timedelta(minutes=minute))
        write(store, state)
    events = store.recent_events(limit=2)
    assert len(events) == 2
    assert events[0].reviewed_at == t0 + timedelta(minutes=4)


def test_record_round_trip(t0):
    state = apply_review(initialize_new_state("w1", t0), 2, t0 + timedelta(hours=1))
    record = to_record(state)
    assert record["next_review_at"] == "2024-03-02T10:30:00+00:00"
    assert from_record(record) == state


# ---- SQL specific ----

def test_sql_store_scoped_per_user(sql_engine, t0):
    alice = SqlRecordStore(sql_engine, user_id="alice")
    bob = SqlRecordStore(sql_engine, user_id="bob")
    alice.insert(initialize_new_state("w1", t0))
    bob.insert(initialize_new_state("w1", t0 + timedelta(days=1)))

    assert alice.get("w1").next_review_at == t0
    assert bob.get("w1").next_review_at == t0 + timedelta(days=1)

    bob.clear()
    assert bob.all_states() == []
    assert len(alice.all_states()) == 1


def test_sql_store_persists_across_instances(sql_engine, t0):
    SRSService(SqlRecordStore(sql_engine, user_id="alice")).record_review("w1", 5, t0)
    reopened = SRSService(SqlRecordStore(sql_engine, user_id="alice"))
    state = reopened.get_state("w1")
    assert state.level == 1
    assert state.next_review_at == t0 + timedelta(days=1)


def test_sql_duplicate_insert_is_storage_failure(sql_store, t0):
    sql_store.insert(initialize_new_state("w1", t0))
    with pytest.raises(StorageFailure):
        sql_store.insert(initialize_new_state("w1", t0))


def test_sql_failed_write_rolls_back_state_and_event(sql_store, t0):
    original = initialize_new_state("w1", t0)
    sql_store.insert(original)
    updated = apply_review(original, 5, t0)

    with patch("vocab_core.srs.database.ReviewEventRow", side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))):
        with pytest.raises(StorageFailure):
            write(sql_store, updated)

    assert sql_store.get("w1") == original
    assert sql_store.recent_events() == []


def test_reset_db_drops_every_user(sql_engine, t0):
    SqlRecordStore(sql_engine, user_id="alice").insert(initialize_new_state("w1", t0))
    SqlRecordStore(sql_engine, user_id="bob").insert(initialize_new_state("w1", t0))
    reset_db(sql_engine)
    assert SqlRecordStore(sql_engine, user_id="alice").all_states() == []
    assert SqlRecordStore(sql_engine, user_id="bob").all_states() == []


def test_sql_stale_write_is_retried_from_fresh_read(sql_engine, t0):
    first = SqlRecordStore(sql_engine, user_id="alice")
    second = SqlRecordStore(sql_engine, user_id="alice")
    first.insert(initialize_new_state("w1", t0))
    seen = []

    def review(current):
        seen.append(current.review_count)
        if len(seen) == 1:
            # The other client reviews w1 between our read and our write
            second.update_with_event("w1", lambda other: review_item("w1", other, 5, t0))
        return review_item("w1", current, 5, t0)

    state, event = first.update_with_event("w1", review)

    assert seen == [0, 1]
    assert state.review_count == 2
    assert (state.level, state.interval) == (2, 6)
    assert event.level_before == 1
    assert first.get("w1") == state
    assert len(first.recent_events()) == 2


def test_sql_gives_up_after_repeated_conflicts(sql_engine, t0):
    first = SqlRecordStore(sql_engine, user_id="alice")
    second = SqlRecordStore(sql_engine, user_id="alice")
    first.insert(initialize_new_state("w1", t0))

    def always_interrupted(current):
        second.update_with_event("w1", lambda other: review_item("w1", other, 3, t0))
        return review_item("w1", current, 5, t0)

    with pytest.raises(WriteConflict):
        first.update_with_event("w1", always_interrupted)

    assert first.get("w1").review_count == MAX_WRITE_ATTEMPTS
    assert all(e.quality == 3 for e in first.recent_events(limit=20))


def test_sql_concurrent_registration_is_idempotent(sql_engine, t0):
    first = SRSService(SqlRecordStore(sql_engine, user_id="alice"))
    second = SRSService(SqlRecordStore(sql_engine, user_id="alice"))
    registered = second.register_item("w1", t0)

    # first looked before second's insert landed
    real_get = first.store.get
    with patch.object(first.store, "get", side_effect=[None, real_get("w1")]):
        state = first.register_item("w1", t0 + timedelta(hours=1))

    assert state == registered
    assert len(first.store.all_states()) == 1


def test_sql_two_clients_do_not_lose_reviews(sql_engine, t0):
    first = SRSService(SqlRecordStore(sql_engine, user_id="alice"))
    second = SRSService(SqlRecordStore(sql_engine, user_id="alice"))
    first.register_item("w1", t0)
    interleaved = []

    def review_and_interleave(item_id, current, quality, now, settings):
        if not interleaved:
            interleaved.append(item_id)
            second.record_review(item_id, 5, now)
        return review_item(item_id, current, quality, now, settings)

    with patch("vocab_core.srs.scheduler.review_item", side_effect=review_and_interleave):
        first.record_review("w1", 5, t0)

    state = second.get_state("w1")
    assert state.review_count == 2
    assert state.level == 2
    assert len(second.recent_events()) == 2

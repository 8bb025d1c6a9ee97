from datetime import timedelta
from unittest.mock import patch

import pytest

from vocab_core.session_controller import ReviewSession
from vocab_core.srs import InvalidQuality, StorageFailure


@pytest.fixture
def due_service(service, t0):
    service.register_item("late", t0 - timedelta(days=2))
    service.register_item("early", t0 - timedelta(days=3))
    service.register_item("future", t0 + timedelta(days=1))
    return service


def test_session_walks_due_items_in_order(due_service, t0):
    session = ReviewSession.start(due_service, t0)
    assert session.item_ids == ["early", "late"]
    assert session.current_item == "early"

    state = session.answer(5, t0)
    assert state.item_id == "early"
    assert session.current_item == "late"
    assert session.remaining == 1

    session.answer(1, t0)
    assert session.is_finished
    assert session.current_item is None

    summary = session.summary()
    assert summary.reviewed == 2
    assert summary.correct == 1
    assert summary.accuracy == pytest.approx(50.0)
    assert due_service.get_due_items(t0) == []


def test_session_limit(due_service, t0):
    session = ReviewSession.start(due_service, t0, limit=1)
    assert session.item_ids == ["early"]


def test_invalid_quality_keeps_position(due_service, t0):
    session = ReviewSession.start(due_service, t0)
    with pytest.raises(InvalidQuality):
        session.answer(9, t0)
    assert session.current_item == "early"
    assert session.summary().reviewed == 0


def test_storage_failure_keeps_position(due_service, t0):
    session = ReviewSession.start(due_service, t0)
    with patch.object(due_service.store, "update_with_event", side_effect=StorageFailure("locked")):
        with pytest.raises(StorageFailure):
            session.answer(4, t0)
    assert session.current_item == "early"

    # Retry succeeds once storage recovers
    session.answer(4, t0)
    assert session.current_item == "late"


def test_skip_and_finished_session(due_service, t0):
    session = ReviewSession.start(due_service, t0)
    session.skip()
    session.skip()
    assert session.summary().skipped == 2
    assert session.summary().accuracy == 0
    with pytest.raises(RuntimeError):
        session.answer(5, t0)
    with pytest.raises(RuntimeError):
        session.skip()

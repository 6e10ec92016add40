"""Tests for core/study_session.py -- the study-session driver."""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import PendingWriteError, SessionStateError, StoreError, StoreErrorKind
from core.sm2 import CardState, ItemProgress, Rating
from core.study_session import StudySession


NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class MemoryStore:
    """Dict-backed store; can be told to fail the next N writes."""

    def __init__(self, rows=None, failures=0, kind=StoreErrorKind.UNAVAILABLE):
        self.rows = dict(rows or {})
        self.events = []
        self.failures = failures
        self.kind = kind
        self.put_calls = 0

    def get(self, learner_id, item_id):
        return self.rows.get((learner_id, item_id))

    def put(self, learner_id, item_id, progress):
        self.put_calls += 1
        if self.failures:
            self.failures -= 1
            raise StoreError(self.kind, "store down", learner_id=learner_id, item_id=item_id)
        self.rows[(learner_id, item_id)] = progress

    def log_review(self, event):
        self.events.append(event)


def tomorrow_progress():
    return ItemProgress(
        state=CardState.REVIEW,
        interval_days=5,
        next_review_date=NOW + timedelta(days=1),
    )


def test_session_queues_only_due_items():
    store = MemoryStore({("ben", "c"): tomorrow_progress()})
    session = StudySession("ben", ["a", "b", "c"], store, now=NOW)

    assert session.remaining == 2
    assert session.next_item(NOW) == "a"


def test_next_item_repeats_until_answered():
    session = StudySession("ben", ["a", "b"], MemoryStore(), now=NOW)

    assert session.next_item(NOW) == "a"
    assert session.next_item(NOW) == "a"
    assert session.current_item == "a"


def test_answer_without_current_item_is_rejected():
    session = StudySession("ben", ["a"], MemoryStore(), now=NOW)

    with pytest.raises(SessionStateError):
        session.answer(Rating.GOOD, NOW)


def test_in_session_items_are_requeued_by_due_time():
    store = MemoryStore()
    session = StudySession("ben", ["a", "b"], store, now=NOW, learn_ahead=False)

    session.next_item(NOW)
    result_a = session.answer(Rating.GOOD, NOW)           # a back in 10 min
    assert result_a.stays_in_session is True

    assert session.next_item(NOW) == "b"
    session.answer(Rating.AGAIN, NOW)                     # b back in 1 min

    assert session.next_item(NOW) is None
    assert session.next_relearn_at() == NOW + timedelta(minutes=1)
    assert session.next_item(NOW + timedelta(minutes=2)) == "b"
    session.answer(Rating.GOOD, NOW + timedelta(minutes=2))
    assert session.next_item(NOW + timedelta(minutes=11)) == "a"


def test_learn_ahead_offers_earliest_waiting_item():
    session = StudySession("ben", ["a", "b"], MemoryStore(), now=NOW)

    session.next_item(NOW)
    session.answer(Rating.GOOD, NOW)                      # a in 10 min
    session.next_item(NOW)
    session.answer(Rating.AGAIN, NOW)                     # b in 1 min

    assert session.next_item(NOW) == "b"


def test_graduated_item_leaves_session():
    store = MemoryStore()
    session = StudySession("ben", ["a"], store, now=NOW)

    clock = NOW
    result = None
    for _ in range(3):
        assert session.next_item(clock) == "a"
        result = session.answer(Rating.GOOD, clock)
        clock = result.next_review_date

    assert result.state == CardState.REVIEW
    assert result.stays_in_session is False
    assert session.is_finished
    assert session.next_item(clock) is None
    assert session.stats.graduated == 1
    assert store.rows[("ben", "a")].state == CardState.REVIEW
    assert len(store.events) == 3
    assert all(event["session_id"] == session.session_id for event in store.events)


def test_failed_write_blocks_further_ratings_until_retried():
    store = MemoryStore(failures=1)
    session = StudySession("ben", ["a", "b"], store, now=NOW)

    session.next_item(NOW)
    with pytest.raises(StoreError):
        session.answer(Rating.EASY, NOW)

    assert session.pending is True
    assert ("ben", "a") not in store.rows
    with pytest.raises(PendingWriteError):
        session.answer(Rating.AGAIN, NOW)
    with pytest.raises(PendingWriteError):
        session.next_item(NOW)

    result = session.retry_pending()

    assert session.pending is False
    assert store.rows[("ben", "a")] == result.to_progress()
    assert result.learning_step == 1
    assert session.stats.easy == 1
    assert session.stats.reviewed == 1
    assert session.next_item(NOW) == "b"


def test_retry_pending_without_pending_write():
    session = StudySession("ben", ["a"], MemoryStore(), now=NOW)

    with pytest.raises(SessionStateError):
        session.retry_pending()


def test_retry_can_fail_again_and_keep_the_same_rating():
    store = MemoryStore(failures=2)
    session = StudySession("ben", ["a"], store, now=NOW)

    session.next_item(NOW)
    with pytest.raises(StoreError):
        session.answer(Rating.GOOD, NOW)
    with pytest.raises(StoreError):
        session.retry_pending()

    result = session.retry_pending()
    assert result.learning_step == 1
    assert store.put_calls == 3


def test_session_stats_and_new_leeches():
    lapsing = ItemProgress(
        state=CardState.REVIEW, interval_days=20, lapses=7, next_review_date=NOW
    )
    store = MemoryStore({("ben", "leech"): lapsing})
    session = StudySession("ben", ["leech", "x", "y"], store, now=NOW, learn_ahead=False)

    session.next_item(NOW)
    session.answer(Rating.AGAIN, NOW)
    session.next_item(NOW)
    session.answer(Rating.HARD, NOW)
    session.next_item(NOW)
    session.answer(Rating.GOOD, NOW)

    stats = session.stats
    assert stats.reviewed == 3
    assert stats.incorrect == 1
    assert stats.difficult == 1
    assert stats.correct == 1
    assert stats.new_leeches == 1
    assert store.rows[("ben", "leech")].is_leech is True
    assert session.progress_for("leech").lapses == 8

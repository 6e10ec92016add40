"""
Study session driver.

Holds the queue of due items for one learner, hands out one item at a time,
schedules the learner's rating, persists the new progress and either
re-queues the item for later in the same sitting or lets it leave the
session until its next review day.

Only one rating may be in flight: if persisting it fails, the session keeps
it as a pending write and refuses further ratings until retry_pending()
succeeds.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from core.due_selection import select_due
from core.exceptions import PendingWriteError, SessionStateError, StoreError
from core.sm2.config import DEFAULT_CONFIG, SchedulerConfig
from core.sm2.constants import CardState, Rating
from core.sm2.database import ProgressStore, build_review_event
from core.sm2.intervals import RandomSource, default_random_source
from core.sm2.progress import ItemProgress, SchedulerResult
from core.sm2.scheduler import schedule

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    """Running counts for one study session."""
    reviewed: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0
    graduated: int = 0
    new_leeches: int = 0

    @property
    def correct(self) -> int:
        return self.good + self.easy

    @property
    def difficult(self) -> int:
        return self.hard

    @property
    def incorrect(self) -> int:
        return self.again

    def record(self, rating: Rating, result: SchedulerResult, was_leech: bool) -> None:
        self.reviewed += 1
        if rating == Rating.AGAIN:
            self.again += 1
        elif rating == Rating.HARD:
            self.hard += 1
        elif rating == Rating.GOOD:
            self.good += 1
        else:
            self.easy += 1
        if result.graduated_from_learning:
            self.graduated += 1
        if result.is_leech and not was_leech:
            self.new_leeches += 1


@dataclass(frozen=True)
class _PendingWrite:
    item_id: str
    rating: Rating
    state_before: CardState
    was_leech: bool
    result: SchedulerResult


class StudySession:
    """
    One sitting of study for a single learner.

    Args:
        learner_id: Learner whose progress is read and written
        item_ids: Candidate items, in presentation order
        store: Progress store (get/put/log_review)
        config: Scheduler profile
        rng: Random source for interval fuzzing
        now: Session start time (defaults to now, UTC)
        learn_ahead: Offer in-session items early once nothing else is left
    """

    def __init__(
        self,
        learner_id: str,
        item_ids: Iterable[str],
        store: ProgressStore,
        *,
        config: SchedulerConfig = DEFAULT_CONFIG,
        rng: Optional[RandomSource] = None,
        now: Optional[datetime] = None,
        learn_ahead: bool = True
    ):
        now = now or _utcnow()
        self.learner_id = learner_id
        self.session_id = str(uuid.uuid4())
        self.store = store
        self.config = config
        self.rng = rng or default_random_source()
        self.learn_ahead = learn_ahead
        self.stats = SessionStats()

        self._progress: dict[str, Optional[ItemProgress]] = {
            item_id: store.get(learner_id, item_id) for item_id in item_ids
        }
        self._queue: deque[str] = deque(select_due(self._progress.items(), now))
        self._relearning: list[tuple[datetime, int, str]] = []
        self._sequence = itertools.count()
        self._current: Optional[str] = None
        self._pending: Optional[_PendingWrite] = None

        logger.info(
            "Started session %s for learner %s: %d due of %d items",
            self.session_id, learner_id, len(self._queue), len(self._progress)
        )

    # ---- Queue ----

    @property
    def current_item(self) -> Optional[str]:
        return self._current

    @property
    def pending(self) -> bool:
        """True while a rating is waiting to be persisted."""
        return self._pending is not None

    @property
    def remaining(self) -> int:
        """Items still to be shown, including in-session re-study."""
        waiting = len(self._queue) + len(self._relearning)
        return waiting + (1 if self._current is not None else 0)

    @property
    def is_finished(self) -> bool:
        return self.remaining == 0 and self._pending is None

    def progress_for(self, item_id: str) -> Optional[ItemProgress]:
        return self._progress.get(item_id)

    def next_item(self, now: Optional[datetime] = None) -> Optional[str]:
        """
        Pick the item to show next.

        Priority order:
        1. In-session items whose re-study time has come (earliest first)
        2. Due items, in queue order
        3. With learn_ahead, the earliest waiting in-session item

        Returns the same item until it has been answered, and None when
        nothing can be shown right now.
        """
        if self._pending is not None:
            raise PendingWriteError(
                f"Rating for {self._pending.item_id} has not been saved yet"
            )
        if self._current is not None:
            return self._current

        now = now or _utcnow()
        if self._relearning and self._relearning[0][0] <= now:
            self._current = heapq.heappop(self._relearning)[2]
        elif self._queue:
            self._current = self._queue.popleft()
        elif self._relearning and self.learn_ahead:
            self._current = heapq.heappop(self._relearning)[2]

        return self._current

    def next_relearn_at(self) -> Optional[datetime]:
        """When the earliest in-session item becomes available again."""
        return self._relearning[0][0] if self._relearning else None

    # ---- Ratings ----

    def answer(self, rating: Rating, now: Optional[datetime] = None) -> SchedulerResult:
        """
        Rate the current item, persist the result and update the queue.

        Raises:
            SessionStateError: No item is being shown
            PendingWriteError: An earlier rating has not been saved yet
            StoreError: Saving failed; the rating is kept for retry_pending()
        """
        if self._pending is not None:
            raise PendingWriteError(
                f"Rating for {self._pending.item_id} has not been saved yet"
            )
        if self._current is None:
            raise SessionStateError("No item is being shown; call next_item() first")

        rating = Rating(rating)
        item_id = self._current
        progress = self._progress.get(item_id)
        result = schedule(
            rating, progress, now=now or _utcnow(), config=self.config, rng=self.rng
        )

        self._pending = _PendingWrite(
            item_id=item_id,
            rating=rating,
            state_before=progress.state if progress is not None else CardState.NEW,
            was_leech=bool(progress and progress.is_leech),
            result=result,
        )
        return self._flush_pending()

    def retry_pending(self) -> SchedulerResult:
        """Try again to save the rating that failed to persist."""
        if self._pending is None:
            raise SessionStateError("No rating is waiting to be saved")
        return self._flush_pending()

    def _flush_pending(self) -> SchedulerResult:
        pending = self._pending
        result = pending.result
        try:
            self.store.put(self.learner_id, pending.item_id, result.to_progress())
            self.store.log_review(build_review_event(
                self.learner_id,
                pending.item_id,
                pending.rating,
                pending.state_before,
                result,
                session_id=self.session_id,
            ))
        except StoreError as exc:
            logger.warning(
                "Could not save rating for %s/%s (%s); keeping it pending",
                self.learner_id, pending.item_id, exc.kind.value
            )
            raise

        self._pending = None
        self._current = None
        self._progress[pending.item_id] = result.to_progress()
        self.stats.record(pending.rating, result, pending.was_leech)

        if result.stays_in_session:
            heapq.heappush(
                self._relearning,
                (result.next_review_date, next(self._sequence), pending.item_id)
            )
        logger.debug(
            "Rated %s as %s: %s, next review %s",
            pending.item_id, pending.rating.name, result.state.value,
            result.next_review_date.isoformat()
        )
        return result


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

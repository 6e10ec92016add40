"""Custom exceptions for the study scheduler."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class SchedulerException(Exception):
    """Base exception for all scheduler-side errors."""
    pass


# Persistence

class StoreErrorKind(str, Enum):
    """Why a progress write or read failed."""
    UNAVAILABLE = "unavailable"  # backend down, timeout, connection lost
    CONFLICT = "conflict"        # concurrent writer for the same learner/item


class StoreError(SchedulerException):
    """A progress store operation failed."""

    def __init__(
        self,
        kind: StoreErrorKind,
        message: str,
        learner_id: Optional[str] = None,
        item_id: Optional[str] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.learner_id = learner_id
        self.item_id = item_id

    @property
    def retryable(self) -> bool:
        return self.kind == StoreErrorKind.UNAVAILABLE


# Study sessions

class SessionStateError(SchedulerException):
    """A study session call was made out of order."""
    pass


class PendingWriteError(SessionStateError):
    """A rating is still waiting to be persisted."""
    pass

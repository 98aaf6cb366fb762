"""Errors surfaced to the log-consumption driver.

Every failure aborts the event's transaction. ``retryable`` tells the driver
whether replaying the same event later can succeed.
"""

from __future__ import annotations


class EventProcessingError(Exception):
    """Base class for failures while handling one contract event."""

    retryable: bool = True

    def __init__(self, *args: object, retryable: bool | None = None) -> None:
        super().__init__(*args)
        if retryable is not None:
            self.retryable = retryable


class DecodeError(EventProcessingError):
    """Log topics or data do not match the expected event ABI."""

    retryable = False


class InvalidRecordError(EventProcessingError, ValueError):
    """A ledger record was built with values the ledger cannot hold."""

    retryable = False


class ActivityNotFoundError(EventProcessingError, LookupError):
    """An event references an activity that has not been stored yet."""

    def __init__(self, activity_id: int) -> None:
        super().__init__(f"activity {activity_id} not found")
        self.activity_id = activity_id


class StorageError(EventProcessingError):
    """A storage operation or the transaction itself failed.

    Constraint violations and values the database cannot bind are permanent
    and carry ``retryable=False``.
    """

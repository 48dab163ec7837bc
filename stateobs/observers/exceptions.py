"""
Exceptions raised by the observers when the caller breaks the time contract.

All of them derive from ObserverError (a RuntimeError), so callers can catch
the whole family at once. They signal call-sequence mistakes: the observer
never retries or corrects them.
"""

from typing import Optional


class ObserverError(RuntimeError):
    """Base class for observer contract violations."""


class UninitializedStateError(ObserverError):
    """An estimate was requested before any state was set."""


class NonCausalRequestError(ObserverError):
    """An estimate was requested at or before the current time."""

    def __init__(self, requested_time: int, current_time: int):
        self.requested_time = requested_time
        self.current_time = current_time
        super().__init__(
            f"Cannot estimate the state at time {requested_time}: the current "
            f"time is {current_time} and past states are not recorded"
        )


class MissingDataError(ObserverError):
    """
    A measurement or input needed for the next step is not buffered.

    Attributes:
        stream: 'measurement' or 'input'.
        time: Index of the missing entry.
        reached_time: Current time of the observer when the step was attempted;
                      all steps up to it are committed.
    """

    def __init__(self, stream: str, time: int, reached_time: Optional[int] = None):
        self.stream = stream
        self.time = time
        self.reached_time = reached_time
        message = f"No {stream} available at time {time}"
        if reached_time is not None:
            message += f" (estimation stopped at time {reached_time})"
        super().__init__(message)


class InsertionOrderError(ObserverError, ValueError):
    """A time-indexed value was inserted out of order, twice, or after a gap."""

    def __init__(self, time: int, expected_time: int, stream: str = "value"):
        self.time = time
        self.expected_time = expected_time
        self.stream = stream
        super().__init__(
            f"Cannot insert {stream} at time {time}: values must be inserted in "
            f"chronological order without gaps, expected time {expected_time}"
        )

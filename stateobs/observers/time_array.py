"""
Gap-free arrays of vectors indexed by discrete time.

A DiscreteTimeArray stores (k, value) pairs with consecutive integer time
indices k0, k0+1, k0+2, ... Values are appended at the back and consumed from
the front, both in O(1), and are looked up by time index from their position
relative to the first index.
"""

from collections import deque
from numbers import Integral
from typing import Deque, Iterator, Optional, Tuple

import numpy as np

from stateobs.observers.exceptions import InsertionOrderError


def check_time_index(k: int) -> int:
    """
    Validate a discrete time index.

    Raises:
        TypeError: If k is not an integer.
        ValueError: If k is negative.
    """
    if isinstance(k, bool) or not isinstance(k, Integral):
        raise TypeError(f"Time index must be an integer, got {type(k).__name__}")
    if k < 0:
        raise ValueError(f"Time index must be non-negative, got {k}")
    return int(k)


class DiscreteTimeArray:
    """
    Chronological, gap-free sequence of time-indexed vectors.

    Attributes:
        vector_size: Expected length of every stored vector, or None to accept
                     any 1D vector.
        name: Stream name used in error messages (e.g. 'measurement').

    Example:
        >>> y = DiscreteTimeArray(vector_size=2, name='measurement')
        >>> y.push_back([0.1, 0.2], 5)
        >>> y.push_back([0.3, 0.4], 6)
        >>> y.first_time, y.last_time
        (5, 6)
        >>> y.push_back([0.5, 0.6], 8)  # gap: raises InsertionOrderError
    """

    def __init__(self, vector_size: Optional[int] = None, name: str = "value"):
        self.vector_size = vector_size
        self.name = name
        self._values: Deque[np.ndarray] = deque()
        self._first_time: Optional[int] = None

    @property
    def first_time(self) -> Optional[int]:
        """Index of the oldest stored value, None when empty."""
        return self._first_time

    @property
    def last_time(self) -> Optional[int]:
        """Index of the most recent stored value, None when empty."""
        if self._first_time is None:
            return None
        return self._first_time + len(self._values) - 1

    def push_back(self, value: np.ndarray, k: int) -> None:
        """
        Append a value at time k.

        For an empty array any index starts the sequence; otherwise k must be
        exactly last_time + 1. The array is left unchanged on error.

        Raises:
            InsertionOrderError: If k is not the next index.
            ValueError: If the value is not a 1D vector of vector_size.
        """
        k = check_time_index(k)
        value = self._as_vector(value)

        if self._first_time is None:
            self._first_time = k
        elif k != self.last_time + 1:
            raise InsertionOrderError(k, self.last_time + 1, self.name)

        self._values.append(value)

    def pop_front(self) -> Tuple[int, np.ndarray]:
        """
        Remove and return the oldest (k, value) pair.

        Raises:
            IndexError: If the array is empty.
        """
        if self._first_time is None:
            raise IndexError(f"pop_front from an empty {self.name} array")

        k = self._first_time
        value = self._values.popleft()
        self._first_time = k + 1 if self._values else None
        return k, value

    def evict_until(self, k: int) -> int:
        """
        Drop every value with index <= k.

        Returns:
            Number of values removed.
        """
        removed = 0
        while self._first_time is not None and self._first_time <= k:
            self.pop_front()
            removed += 1
        return removed

    def clear(self) -> None:
        self._values.clear()
        self._first_time = None

    def is_empty(self) -> bool:
        return self._first_time is None

    def get_range(self, first: int, last: int) -> "DiscreteTimeArray":
        """
        Copy the values with indices in [first, last] into a new array.

        Raises:
            KeyError: If an index in the range is not stored.
        """
        sub = DiscreteTimeArray(self.vector_size, self.name)
        for k in range(first, last + 1):
            sub.push_back(self[k], k)
        return sub

    def to_array(self) -> np.ndarray:
        """Stack the stored values into a (len, vector_size) array."""
        if not self._values:
            width = self.vector_size if self.vector_size is not None else 0
            return np.zeros((0, width))
        return np.vstack(list(self._values))

    def __getitem__(self, k: int) -> np.ndarray:
        if k not in self:
            raise KeyError(f"No {self.name} at time {k}")
        return self._values[k - self._first_time]

    def __contains__(self, k: object) -> bool:
        if self._first_time is None or not isinstance(k, Integral):
            return False
        return self._first_time <= k <= self.last_time

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        for offset, value in enumerate(self._values):
            yield self._first_time + offset, value

    def __repr__(self) -> str:
        if self._first_time is None:
            return f"DiscreteTimeArray(name={self.name!r}, empty)"
        return (
            f"DiscreteTimeArray(name={self.name!r}, "
            f"times=[{self._first_time}, {self.last_time}])"
        )

    def _as_vector(self, value: np.ndarray) -> np.ndarray:
        value = np.array(value, dtype=float)
        if value.ndim != 1:
            raise ValueError(f"{self.name} must be a 1D vector, got shape {value.shape}")
        if self.vector_size is not None and value.shape != (self.vector_size,):
            raise ValueError(
                f"{self.name} must have shape ({self.vector_size},), got {value.shape}"
            )
        return value

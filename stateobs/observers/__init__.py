"""
Online observers for discrete-time systems.

This module provides the zero-delay observation framework: time-indexed
buffering of measurements and inputs with strict chronological order, and the
loop that drives a one-step estimation strategy from the current time to a
requested time.

Available observers:
    - ZeroDelayObserver (abstract base, implement _one_step_estimation)
    - ExtendedKalmanFilter
"""

from stateobs.observers.base import ObserverBase
from stateobs.observers.exceptions import (
    InsertionOrderError,
    MissingDataError,
    NonCausalRequestError,
    ObserverError,
    UninitializedStateError,
)
from stateobs.observers.extended_kalman_filter import ExtendedKalmanFilter
from stateobs.observers.time_array import DiscreteTimeArray
from stateobs.observers.zero_delay import ZeroDelayObserver

__all__ = [
    # Containers
    "DiscreteTimeArray",
    # Observers
    "ObserverBase",
    "ZeroDelayObserver",
    "ExtendedKalmanFilter",
    # Errors
    "ObserverError",
    "UninitializedStateError",
    "NonCausalRequestError",
    "MissingDataError",
    "InsertionOrderError",
]

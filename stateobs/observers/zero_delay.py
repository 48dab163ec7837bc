"""
Zero-delay observers.

Zero-delay observers are the classical state observers where the state and
input at instant k and the measurement at instant k+1 are enough to provide
the estimate of the state at instant k+1:

    x̂_{k+1} = g(x̂_k, u_k, y_{k+1})

The ZeroDelayObserver base class owns the data bookkeeping: only the most
recent state estimate is retained (its time index is the current time k0),
while measurements and inputs are buffered in gap-free, time-indexed queues.
Requesting the estimate at time k > k0 runs the observation loop, calling the
one-step hook of the concrete strategy once per time step and consuming the
buffered values as it goes.

To go from k0 to k the default strategy needs y_{k0+1} ... y_k and
u_{k0} ... u_{k-1}. Subclasses may change this pairing by overriding
measurement_time_for_step / input_time_for_step.
"""

import logging
from abc import abstractmethod
from typing import Optional

import numpy as np

from stateobs.observers.base import ObserverBase
from stateobs.observers.exceptions import (
    MissingDataError,
    NonCausalRequestError,
    UninitializedStateError,
)
from stateobs.observers.time_array import DiscreteTimeArray, check_time_index

_LOG: logging.Logger = logging.getLogger(__name__)


class ZeroDelayObserver(ObserverBase):
    """
    Base class of zero-delay observers.

    Defines the storage of the state, measurement and input vectors, the set
    routines and the observation loop. Concrete strategies implement
    _one_step_estimation(), which computes the state at current_time + 1.

    Attributes:
        state_size: Dimension n of the state.
        measurement_size: Dimension m of the measurements.
        input_size: Dimension p of the inputs (0 for no input).

    Example:
        >>> class Integrator(ZeroDelayObserver):
        ...     def _one_step_estimation(self):
        ...         return self._state + self._step_input()
        >>> obs = Integrator(state_size=1, measurement_size=1, input_size=1)
        >>> obs.set_state([0.0], 0)
        >>> obs.set_input([1.0], 0); obs.set_measurement([1.0], 1)
        >>> obs.get_estimate_state(1)
        array([1.])
    """

    def __init__(self, state_size: int, measurement_size: int, input_size: int = 0):
        super().__init__(state_size, measurement_size, input_size)

        # Only one state is recorded; measurements and inputs are queued
        self._state: Optional[np.ndarray] = None
        self._current_time: Optional[int] = None
        self._measurements = DiscreteTimeArray(self.measurement_size, "measurement")
        self._inputs = DiscreteTimeArray(self.input_size, "input")

    # ------------------------------------------------------------------ state

    def set_state(self, x_k: np.ndarray, k: int) -> None:
        """
        Set the state vector at time index k.

        Only the most recent state is kept: any previous state is discarded
        and k becomes the current time. Buffered measurements and inputs are
        not checked against k until the next estimation.

        Raises:
            ValueError: If x_k does not have shape (state_size,).
            TypeError: If k is not an integer.
        """
        k = check_time_index(k)
        self._state = self.check_state_vector(x_k)
        self._current_time = k
        _LOG.debug("State set at time %d", k)

    def clear_state(self) -> None:
        """Remove the recorded state; estimation fails until a new one is set."""
        self._state = None
        self._current_time = None

    @property
    def state(self) -> Optional[np.ndarray]:
        """Copy of the retained state estimate, None if no state is set."""
        return None if self._state is None else self._state.copy()

    @property
    def current_time(self) -> Optional[int]:
        """Time index of the retained state, None if no state is set."""
        return self._current_time

    def get_current_time(self) -> int:
        """
        Get the value of the current time index.

        Raises:
            UninitializedStateError: If no state has been set.
        """
        if self._current_time is None:
            raise UninitializedStateError("No state has been set: the current time is undefined")
        return self._current_time

    # ------------------------------------------------------ measurements/inputs

    def set_measurement(self, y_k: np.ndarray, k: int) -> None:
        """
        Set the measurement vector at time index k.

        Measurements have to be inserted in chronological order without gaps.

        Raises:
            InsertionOrderError: If k is not one past the last buffered index.
            ValueError: If y_k does not have shape (measurement_size,).
        """
        self._measurements.push_back(self.check_measurement_vector(y_k), k)

    def clear_measurements(self) -> None:
        """Remove all the buffered measurements."""
        self._measurements.clear()
        _LOG.debug("Measurements cleared")

    def set_input(self, u_k: np.ndarray, k: int) -> None:
        """
        Set the input vector at time index k.

        Inputs have to be inserted in chronological order without gaps.

        Raises:
            InsertionOrderError: If k is not one past the last buffered index.
            ValueError: If the observer has no input or u_k has the wrong shape.
        """
        if self.input_size == 0:
            raise ValueError("This observer has no input (input_size is 0)")
        self._inputs.push_back(self.check_input_vector(u_k), k)

    def clear_inputs(self) -> None:
        """Remove all the buffered inputs."""
        self._inputs.clear()
        _LOG.debug("Inputs cleared")

    def get_measurement(self, k: int) -> np.ndarray:
        """
        Return a copy of the buffered measurement at time k.

        Raises:
            MissingDataError: If no measurement is buffered at k.
        """
        if k not in self._measurements:
            raise MissingDataError("measurement", k)
        return self._measurements[k].copy()

    def get_input(self, k: int) -> np.ndarray:
        """
        Return a copy of the buffered input at time k.

        Raises:
            MissingDataError: If no input is buffered at k.
        """
        if k not in self._inputs:
            raise MissingDataError("input", k)
        return self._inputs[k].copy()

    def measurement_times(self) -> range:
        """Time indices of the buffered measurements, in order."""
        return _time_range(self._measurements)

    def input_times(self) -> range:
        """Time indices of the buffered inputs, in order."""
        return _time_range(self._inputs)

    # ------------------------------------------------------- observation loop

    def get_estimate_state(self, k: int) -> np.ndarray:
        """
        Run the observer loop and get the estimate of the state at time k.

        Two conditions have to be met:
            - k must be greater than the current time k0: past states are
              not recorded and cannot be observed again.
            - every measurement and input needed to reconstruct the states
              from k0 to k must have been provided beforehand.

        Steps are committed one at a time: if data is missing for a step, the
        steps already completed are kept and the current time stays at the
        last reached index.

        Args:
            k: Requested time index.

        Returns:
            Copy of the state estimate at time k. The current time becomes k.

        Raises:
            UninitializedStateError: If no state has been set.
            NonCausalRequestError: If k <= current time (nothing is changed).
            MissingDataError: If a measurement or input is not buffered.
        """
        k = check_time_index(k)
        if self._state is None:
            raise UninitializedStateError(
                "The state must be set with set_state() before requesting an estimate"
            )
        if k <= self._current_time:
            raise NonCausalRequestError(k, self._current_time)

        while self._current_time < k:
            self._advance()

        return self._state.copy()

    def measurement_time_for_step(self, k_next: int) -> int:
        """Time index of the measurement consumed to estimate the state at k_next."""
        return k_next

    def input_time_for_step(self, k_next: int) -> int:
        """Time index of the input consumed to estimate the state at k_next."""
        return k_next - 1

    @abstractmethod
    def _one_step_estimation(self) -> np.ndarray:
        """
        Compute the state estimate at current_time + 1.

        Implementations read the retained state (self._state, at
        self._current_time), the measurement of the step (_step_measurement())
        and, when input_size > 0, the input of the step (_step_input()).
        Other per-step results must wait for _accept_step() before being
        stored, since the returned state may still be rejected.

        Returns:
            State vector of shape (state_size,).
        """

    def _accept_step(self) -> None:
        """Called once the step result is validated and committed as the new state."""

    def _step_measurement(self) -> np.ndarray:
        """Measurement consumed by the step in progress."""
        return self._measurements[self.measurement_time_for_step(self._current_time + 1)]

    def _step_input(self) -> Optional[np.ndarray]:
        """Input consumed by the step in progress, None if the observer has no input."""
        if self.input_size == 0:
            return None
        return self._inputs[self.input_time_for_step(self._current_time + 1)]

    def _advance(self) -> None:
        k_next = self._current_time + 1

        y_time = self.measurement_time_for_step(k_next)
        if y_time not in self._measurements:
            raise MissingDataError("measurement", y_time, self._current_time)

        u_time = None
        if self.input_size > 0:
            u_time = self.input_time_for_step(k_next)
            if u_time not in self._inputs:
                raise MissingDataError("input", u_time, self._current_time)

        x_next = np.asarray(self._one_step_estimation(), dtype=float)
        if x_next.shape != (self.state_size,):
            raise ValueError(
                f"One-step estimation must return shape ({self.state_size},), "
                f"got {x_next.shape}"
            )

        self._state = x_next.copy()
        self._current_time = k_next
        self._accept_step()

        self._measurements.evict_until(y_time)
        if u_time is not None:
            self._inputs.evict_until(u_time)

        _LOG.debug("State estimated at time %d", k_next)


def _time_range(array: DiscreteTimeArray) -> range:
    if array.is_empty():
        return range(0)
    return range(array.first_time, array.last_time + 1)

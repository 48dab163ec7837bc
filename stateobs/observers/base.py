"""
Base class for online observers.

This module defines the abstract interface shared by all observers: fixed
state, measurement and input dimensions, and the set/clear routines that feed
time-indexed data to the observer.
"""

from abc import ABC, abstractmethod

import numpy as np


class ObserverBase(ABC):
    """Abstract base class for online state observers."""

    def __init__(self, state_size: int, measurement_size: int, input_size: int = 0):
        """
        Initialize observer dimensions.

        Args:
            state_size: Dimension n of the state vector.
            measurement_size: Dimension m of the measurement vector.
            input_size: Dimension p of the input vector. Zero when the
                        system has no exogenous input.

        Raises:
            ValueError: If a dimension is out of range.
        """
        if state_size <= 0:
            raise ValueError(f"state_size must be positive, got {state_size}")
        if measurement_size <= 0:
            raise ValueError(f"measurement_size must be positive, got {measurement_size}")
        if input_size < 0:
            raise ValueError(f"input_size must be non-negative, got {input_size}")

        self.state_size = int(state_size)
        self.measurement_size = int(measurement_size)
        self.input_size = int(input_size)

    @abstractmethod
    def set_state(self, x_k: np.ndarray, k: int) -> None:
        """Set the state vector at time k."""

    @abstractmethod
    def clear_state(self) -> None:
        """Remove the recorded state."""

    @abstractmethod
    def set_measurement(self, y_k: np.ndarray, k: int) -> None:
        """Set the measurement vector at time k."""

    @abstractmethod
    def clear_measurements(self) -> None:
        """Remove all the recorded measurements."""

    @abstractmethod
    def set_input(self, u_k: np.ndarray, k: int) -> None:
        """Set the input vector at time k."""

    @abstractmethod
    def clear_inputs(self) -> None:
        """Remove all the recorded inputs."""

    @abstractmethod
    def get_estimate_state(self, k: int) -> np.ndarray:
        """Return the estimate of the state at time k."""

    def check_state_vector(self, x: np.ndarray) -> np.ndarray:
        """Return x as a float copy, checking it has shape (state_size,)."""
        return self._check_vector(x, self.state_size, "state")

    def check_measurement_vector(self, y: np.ndarray) -> np.ndarray:
        """Return y as a float copy, checking it has shape (measurement_size,)."""
        return self._check_vector(y, self.measurement_size, "measurement")

    def check_input_vector(self, u: np.ndarray) -> np.ndarray:
        """Return u as a float copy, checking it has shape (input_size,)."""
        return self._check_vector(u, self.input_size, "input")

    @staticmethod
    def _check_vector(v: np.ndarray, size: int, name: str) -> np.ndarray:
        v = np.array(v, dtype=float)
        if v.shape != (size,):
            raise ValueError(f"{name} vector must have shape ({size},), got {v.shape}")
        return v

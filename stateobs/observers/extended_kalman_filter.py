"""
Extended Kalman Filter as a zero-delay observer.

Nonlinear discrete-time system:
    x_{k+1} = f(x_k, u_k) + w_k,    w_k ~ N(0, Q)
    y_{k+1} = h(x_{k+1}) + v_{k+1}, v_{k+1} ~ N(0, R)

One observer step (from k to k+1) consumes u_k and y_{k+1}:
    Prediction:
        x̂_{k+1}^- = f(x̂_k, u_k)
        P_{k+1}^- = F_k P_k F_k^T + Q,        F_k = ∂f/∂x|_{x̂_k}
    Correction:
        ν = y_{k+1} - h(x̂_{k+1}^-),           H = ∂h/∂x|_{x̂_{k+1}^-}
        S = H P_{k+1}^- H^T + R
        K = P_{k+1}^- H^T S^{-1}
        x̂_{k+1} = x̂_{k+1}^- + K ν
        P_{k+1} = (I - K H) P_{k+1}^- (I - K H)^T + K R K^T   (Joseph form)

Jacobians not supplied by the caller are computed by central differences.
"""

import logging
from typing import Callable, Optional, Tuple, Union

import numpy as np

from stateobs.observers.zero_delay import ZeroDelayObserver
from stateobs.utils.jacobians import numerical_jacobian

_LOG: logging.Logger = logging.getLogger(__name__)

ProcessModel = Callable[[np.ndarray, Optional[np.ndarray], float], np.ndarray]
MeasurementModel = Callable[[np.ndarray], np.ndarray]


class ExtendedKalmanFilter(ZeroDelayObserver):
    """
    Extended Kalman Filter driven by the zero-delay observation loop.

    Attributes:
        process_model: Function f(x, u, dt) -> x_next for state propagation.
        measurement_model: Function h(x) -> y_pred for measurement prediction.
        process_jacobian: Function F(x, u, dt) -> (n×n), or None for
                          finite differences.
        measurement_jacobian: Function H(x) -> (m×n), or None for finite
                              differences.
        Q: Process noise covariance (n×n) or callable Q(dt) -> np.ndarray.
        R: Measurement noise covariance (m×m) or callable R() -> np.ndarray.
        dt: Sampling period passed to the process model.

    Example:
        >>> ekf = ExtendedKalmanFilter(
        ...     state_size=2, measurement_size=1, input_size=0,
        ...     process_model=lambda x, u, dt: np.array([x[0] + x[1] * dt, x[1]]),
        ...     measurement_model=lambda x: x[:1],
        ...     Q=0.01 * np.eye(2), R=np.array([[0.1]]), dt=0.1)
        >>> ekf.set_state(np.zeros(2), 0)
        >>> ekf.set_state_covariance(np.eye(2))
        >>> ekf.set_measurement([0.1], 1)
        >>> x1 = ekf.get_estimate_state(1)
    """

    def __init__(
        self,
        state_size: int,
        measurement_size: int,
        input_size: int,
        process_model: ProcessModel,
        measurement_model: MeasurementModel,
        Q: Union[np.ndarray, Callable[[float], np.ndarray]],
        R: Union[np.ndarray, Callable[[], np.ndarray]],
        dt: float = 1.0,
        process_jacobian: Optional[Callable[[np.ndarray, Optional[np.ndarray], float], np.ndarray]] = None,
        measurement_jacobian: Optional[Callable[[np.ndarray], np.ndarray]] = None,
        P0: Optional[np.ndarray] = None,
        innovation_func: Optional[Callable[[np.ndarray, np.ndarray], np.ndarray]] = None,
        jacobian_epsilon: float = 1e-7,
    ):
        """
        Initialize Extended Kalman Filter.

        Args:
            state_size: Dimension n of the state.
            measurement_size: Dimension m of the measurements.
            input_size: Dimension p of the inputs (0 for no input; the
                        process model then receives u=None).
            process_model: Nonlinear state transition f(x, u, dt) -> x_next.
            measurement_model: Nonlinear measurement function h(x) -> y_pred.
            Q: Process noise covariance (n×n), or callable Q(dt).
            R: Measurement noise covariance (m×m), or callable R().
            dt: Sampling period. Units: seconds. Must be positive.
            process_jacobian: Optional analytical ∂f/∂x.
            measurement_jacobian: Optional analytical ∂h/∂x.
            P0: Optional initial state covariance (n×n). Can also be given
                later with set_state_covariance().
            innovation_func: Optional function computing ν = g(y, y_pred).
                Default is simple subtraction (y - y_pred).
            jacobian_epsilon: Step of the finite-difference Jacobians.

        Raises:
            ValueError: If dimensions or dt are inconsistent.
        """
        super().__init__(state_size, measurement_size, input_size)

        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")

        self.process_model = process_model
        self.measurement_model = measurement_model
        self.process_jacobian = process_jacobian
        self.measurement_jacobian = measurement_jacobian
        self.Q = Q
        self.R = R
        self.dt = float(dt)
        self.innovation_func = innovation_func
        self.jacobian_epsilon = jacobian_epsilon

        self._covariance: Optional[np.ndarray] = None
        self._last_innovation: Optional[np.ndarray] = None
        self._pending_step: Optional[Tuple[np.ndarray, np.ndarray]] = None

        if P0 is not None:
            self.set_state_covariance(P0)

    def set_state_covariance(self, P: np.ndarray) -> None:
        """
        Set the covariance of the current state estimate.

        Raises:
            ValueError: If P is not (n×n).
        """
        P = np.array(P, dtype=float)
        n = self.state_size
        if P.shape != (n, n):
            raise ValueError(f"P shape {P.shape} inconsistent with state_size {n}")
        self._covariance = P

    def get_state_covariance(self) -> np.ndarray:
        """
        Get the covariance of the current state estimate.

        Raises:
            RuntimeError: If no covariance has been set.
        """
        if self._covariance is None:
            raise RuntimeError("State covariance not initialized. Call set_state_covariance() first.")
        return self._covariance.copy()

    def clear_state_covariance(self) -> None:
        self._covariance = None

    def get_last_innovation(self) -> Optional[np.ndarray]:
        """Innovation ν of the most recent correction, None before the first step."""
        return None if self._last_innovation is None else self._last_innovation.copy()

    def get_process_noise(self) -> np.ndarray:
        Q = self.Q(self.dt) if callable(self.Q) else self.Q
        return self._check_square(Q, self.state_size, "Q")

    def get_measurement_noise(self) -> np.ndarray:
        R = self.R() if callable(self.R) else self.R
        return self._check_square(R, self.measurement_size, "R")

    def _one_step_estimation(self) -> np.ndarray:
        if self._covariance is None:
            raise RuntimeError("State and covariance must be initialized")
        self._pending_step = None

        x = self._state
        u = self._step_input()
        y = self._step_measurement()
        dt = self.dt

        # Jacobian F_k evaluated at the pre-prediction state x̂_k
        F = self._evaluate_process_jacobian(x, u, dt)

        x_pred = np.asarray(self.process_model(x, u, dt), dtype=float)
        P_pred = F @ self._covariance @ F.T + self.get_process_noise()

        y_pred = np.asarray(self.measurement_model(x_pred), dtype=float)
        H = self._evaluate_measurement_jacobian(x_pred)
        R = self.get_measurement_noise()

        if self.innovation_func is not None:
            innovation = self.innovation_func(y, y_pred)
        else:
            innovation = y - y_pred

        S = H @ P_pred @ H.T + R
        K = P_pred @ H.T @ np.linalg.inv(S)

        x_new = x_pred + K @ innovation

        I_KH = np.eye(self.state_size) - K @ H
        P_new = I_KH @ P_pred @ I_KH.T + K @ R @ K.T

        # Committed in _accept_step() once the state is accepted
        self._pending_step = (P_new, np.asarray(innovation, dtype=float))

        _LOG.debug(
            "EKF step to time %d, innovation norm %.3e",
            self._current_time + 1,
            np.linalg.norm(innovation),
        )
        return x_new

    def _accept_step(self) -> None:
        self._covariance, self._last_innovation = self._pending_step
        self._pending_step = None

    def _evaluate_process_jacobian(
        self, x: np.ndarray, u: Optional[np.ndarray], dt: float
    ) -> np.ndarray:
        if self.process_jacobian is not None:
            return np.asarray(self.process_jacobian(x, u, dt), dtype=float)
        return numerical_jacobian(
            lambda x_: self.process_model(x_, u, dt), x, self.jacobian_epsilon
        )

    def _evaluate_measurement_jacobian(self, x: np.ndarray) -> np.ndarray:
        if self.measurement_jacobian is not None:
            return np.asarray(self.measurement_jacobian(x), dtype=float)
        return numerical_jacobian(self.measurement_model, x, self.jacobian_epsilon)

    @staticmethod
    def _check_square(M: np.ndarray, size: int, name: str) -> np.ndarray:
        M = np.asarray(M, dtype=float)
        if M.shape != (size, size):
            raise ValueError(f"{name} must have shape ({size}, {size}), got {M.shape}")
        return M

"""
Unit tests for the Extended Kalman Filter zero-delay observer.

Tests cover:
    - One step matches the prediction/correction equations
    - Finite-difference Jacobians when none are supplied
    - Noise given as arrays or callables
    - Covariance bookkeeping and errors
    - Tracking a noisy constant-velocity target
    - Observing a rigid body from IMU readings (RigidBodyImuModel)
"""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from stateobs.models import RigidBodyImuModel
from stateobs.observers import ExtendedKalmanFilter


def _constant_velocity_system(dt):
    F = np.array([[1.0, dt], [0.0, 1.0]])
    B = np.array([[0.5 * dt**2], [dt]])

    def process_model(x, u, dt_):
        return F @ x + B @ u

    def process_jacobian(x, u, dt_):
        return F

    def measurement_model(x):
        return x[:1]

    def measurement_jacobian(x):
        return np.array([[1.0, 0.0]])

    return F, B, process_model, process_jacobian, measurement_model, measurement_jacobian


class TestEKFStep(unittest.TestCase):
    """Test one observer step against the EKF equations."""

    def setUp(self) -> None:
        self.dt = 0.1
        (self.F, self.B, self.f, self.F_func,
         self.h, self.H_func) = _constant_velocity_system(self.dt)
        self.Q = 0.01 * np.eye(2)
        self.R = np.array([[0.1]])
        self.x0 = np.array([1.0, 0.5])
        self.P0 = np.diag([1.0, 0.5])
        self.u0 = np.array([0.2])
        self.y1 = np.array([1.2])

    def _make_filter(self, **kwargs) -> ExtendedKalmanFilter:
        params = dict(
            state_size=2, measurement_size=1, input_size=1,
            process_model=self.f, measurement_model=self.h,
            Q=self.Q, R=self.R, dt=self.dt,
            process_jacobian=self.F_func, measurement_jacobian=self.H_func,
            P0=self.P0,
        )
        params.update(kwargs)
        ekf = ExtendedKalmanFilter(**params)
        ekf.set_state(self.x0, 0)
        ekf.set_input(self.u0, 0)
        ekf.set_measurement(self.y1, 1)
        return ekf

    def _expected(self):
        x_pred = self.F @ self.x0 + self.B @ self.u0
        P_pred = self.F @ self.P0 @ self.F.T + self.Q
        H = np.array([[1.0, 0.0]])
        S = H @ P_pred @ H.T + self.R
        K = P_pred @ H.T @ np.linalg.inv(S)
        x = x_pred + K @ (self.y1 - H @ x_pred)
        I_KH = np.eye(2) - K @ H
        P = I_KH @ P_pred @ I_KH.T + K @ self.R @ K.T
        return x_pred, x, P

    def test_step_matches_equations(self) -> None:
        ekf = self._make_filter()
        x_pred, x_expected, P_expected = self._expected()

        x1 = ekf.get_estimate_state(1)

        assert_allclose(x1, x_expected, atol=1e-12)
        assert_allclose(ekf.get_state_covariance(), P_expected, atol=1e-12)
        assert_allclose(ekf.get_last_innovation(), self.y1 - x_pred[:1], atol=1e-12)
        self.assertEqual(ekf.get_current_time(), 1)

    def test_numerical_jacobians(self) -> None:
        ekf = self._make_filter(process_jacobian=None, measurement_jacobian=None)
        _, x_expected, P_expected = self._expected()

        x1 = ekf.get_estimate_state(1)

        assert_allclose(x1, x_expected, atol=1e-6)
        assert_allclose(ekf.get_state_covariance(), P_expected, atol=1e-6)

    def test_callable_noise(self) -> None:
        ekf = self._make_filter(Q=lambda dt: 0.1 * dt * np.eye(2), R=lambda: np.array([[0.1]]))
        _, x_expected, _ = self._expected()

        assert_allclose(ekf.get_process_noise(), self.Q, atol=1e-15)
        assert_allclose(ekf.get_estimate_state(1), x_expected, atol=1e-12)

    def test_missing_covariance(self) -> None:
        ekf = self._make_filter(P0=None)

        with pytest.raises(RuntimeError, match="covariance must be initialized"):
            ekf.get_estimate_state(1)

        self.assertEqual(ekf.get_current_time(), 0)
        self.assertEqual(list(ekf.measurement_times()), [1])

    def test_covariance_after_clear(self) -> None:
        ekf = self._make_filter()
        ekf.clear_state_covariance()

        with pytest.raises(RuntimeError, match="not initialized"):
            ekf.get_state_covariance()

    def test_innovation_before_first_step(self) -> None:
        self.assertIsNone(self._make_filter().get_last_innovation())

    def test_custom_innovation(self) -> None:
        ekf = self._make_filter(innovation_func=lambda y, y_pred: np.zeros(1))

        x1 = ekf.get_estimate_state(1)

        assert_allclose(x1, self.F @ self.x0 + self.B @ self.u0, atol=1e-12)

    def test_invalid_arguments(self) -> None:
        with pytest.raises(ValueError, match="P shape"):
            self._make_filter(P0=np.eye(3))
        with pytest.raises(ValueError, match="dt must be positive"):
            self._make_filter(dt=0.0)

    def test_rejected_step_keeps_covariance(self) -> None:
        """A process model returning a column vector fails the step as a whole."""
        ekf = self._make_filter(
            process_model=lambda x, u, dt: (self.F @ x + self.B @ u).reshape(2, 1)
        )

        with pytest.raises(ValueError, match="must return shape \\(2,\\)"):
            ekf.get_estimate_state(1)

        assert_allclose(ekf.get_state_covariance(), self.P0)
        self.assertIsNone(ekf.get_last_innovation())
        assert_allclose(ekf.state, self.x0)
        self.assertEqual(ekf.get_current_time(), 0)

    def test_invalid_noise_shape(self) -> None:
        ekf = self._make_filter(R=np.eye(2))

        with pytest.raises(ValueError, match="R must have shape \\(1, 1\\)"):
            ekf.get_estimate_state(1)


class TestEKFTracking(unittest.TestCase):
    """Test the observation loop over many steps."""

    def test_constant_velocity_tracking(self) -> None:
        dt = 0.1
        n_steps = 200
        _, _, f, F_func, h, H_func = _constant_velocity_system(dt)

        ekf = ExtendedKalmanFilter(
            state_size=2, measurement_size=1, input_size=1,
            process_model=f, measurement_model=h,
            Q=1e-4 * np.eye(2), R=np.array([[0.09]]), dt=dt,
            process_jacobian=F_func, measurement_jacobian=H_func,
            P0=np.diag([1.0, 1.0]),
        )
        ekf.set_state(np.zeros(2), 0)

        rng = np.random.default_rng(42)
        true_state = np.array([0.0, 1.0])
        u = np.zeros(1)
        for k in range(n_steps):
            true_state = f(true_state, u, dt)
            ekf.set_input(u, k)
            ekf.set_measurement(h(true_state) + rng.normal(0.0, 0.3, size=1), k + 1)

        x_est = ekf.get_estimate_state(n_steps)

        self.assertLess(abs(x_est[0] - true_state[0]), 0.5)
        self.assertLess(abs(x_est[1] - true_state[1]), 0.5)
        self.assertEqual(list(ekf.measurement_times()), [])


class TestEKFRigidBodyImu(unittest.TestCase):
    """Test the EKF on the 18-state rigid body observed by an IMU."""

    def setUp(self) -> None:
        self.dt = 0.01
        self.n_steps = 40
        self.model = RigidBodyImuModel()

        x0 = np.zeros(RigidBodyImuModel.STATE_SIZE)
        x0[3:6] = [0.5, 0.0, 0.1]      # velocity
        x0[6:9] = [0.2, -0.1, 0.0]     # acceleration
        x0[9:12] = [0.1, -0.05, 0.3]   # orientation
        x0[12:15] = [0.2, 0.1, -0.3]   # angular velocity
        self.x0 = x0

        self.inputs = [
            np.array([0.1 * np.sin(0.1 * k), 0.0, 0.05, 0.0, 0.02, -0.01])
            for k in range(self.n_steps)
        ]
        self.states = [x0]
        for u in self.inputs:
            self.states.append(self.model.f(self.states[-1], u, self.dt))

    def _make_filter(self) -> ExtendedKalmanFilter:
        ekf = ExtendedKalmanFilter(
            state_size=RigidBodyImuModel.STATE_SIZE,
            measurement_size=RigidBodyImuModel.MEASUREMENT_SIZE,
            input_size=RigidBodyImuModel.INPUT_SIZE,
            process_model=self.model.f, measurement_model=self.model.h,
            Q=1e-6 * np.eye(RigidBodyImuModel.STATE_SIZE),
            R=1e-4 * np.eye(RigidBodyImuModel.MEASUREMENT_SIZE),
            dt=self.dt,
            P0=1e-2 * np.eye(RigidBodyImuModel.STATE_SIZE),
        )
        for k, u in enumerate(self.inputs):
            ekf.set_input(u, k)
            ekf.set_measurement(self.model.h(self.states[k + 1]), k + 1)
        return ekf

    def test_exact_initial_state_is_kept(self) -> None:
        ekf = self._make_filter()
        ekf.set_state(self.x0, 0)

        x_est = ekf.get_estimate_state(self.n_steps)

        assert_allclose(x_est, self.states[-1], atol=1e-12)
        assert_allclose(ekf.get_last_innovation(), np.zeros(6), atol=1e-12)

    def test_angular_velocity_error_corrected(self) -> None:
        """The gyrometer observes the body angular velocity directly."""
        ekf = self._make_filter()
        x0_wrong = self.x0.copy()
        x0_wrong[14] += 0.5
        ekf.set_state(x0_wrong, 0)

        x_est = ekf.get_estimate_state(self.n_steps)

        initial_error = 0.5
        final_error = np.linalg.norm(x_est[12:15] - self.states[-1][12:15])
        self.assertLess(final_error, 0.1 * initial_error)


if __name__ == "__main__":
    unittest.main()

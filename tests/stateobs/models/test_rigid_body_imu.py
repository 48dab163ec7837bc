"""
Unit tests for stateobs/models/rigid_body_imu.py.

Tests cover:
    - Accelerometer/gyrometer prediction (specific force convention)
    - Process model: rest, jerk input, constant rotation
    - World-frame angular velocity
    - Continuity of the orientation across ‖θ‖ = π
    - Input validation
"""

import unittest

import numpy as np
import pytest

from stateobs.coords.rotations import rotation_vector_to_rotation_matrix
from stateobs.kinematics import KinematicsConfig
from stateobs.models import RigidBodyImuModel
from stateobs.utils import numerical_jacobian


class TestMeasurementModel(unittest.TestCase):
    """Test suite for h(x)."""

    def setUp(self) -> None:
        self.model = RigidBodyImuModel()

    def test_at_rest_level(self) -> None:
        """A level IMU at rest reads +g on its z axis."""
        y = self.model.h(np.zeros(18))

        np.testing.assert_allclose(y, [0.0, 0.0, 9.81, 0.0, 0.0, 0.0])

    def test_at_rest_rolled(self) -> None:
        """Rolled by 90°, gravity appears on the body y axis."""
        x = np.zeros(18)
        x[9:12] = [np.pi / 2.0, 0.0, 0.0]

        np.testing.assert_allclose(self.model.h(x)[:3], [0.0, 9.81, 0.0], atol=1e-12)

    def test_free_fall(self) -> None:
        x = np.zeros(18)
        x[6:9] = [0.0, 0.0, -9.81]

        np.testing.assert_allclose(self.model.h(x)[:3], np.zeros(3), atol=1e-12)

    def test_gyro_reads_body_rate(self) -> None:
        x = np.zeros(18)
        x[9:12] = [0.3, 0.2, 0.1]
        x[12:15] = [0.1, -0.2, 0.4]

        np.testing.assert_allclose(self.model.h(x)[3:], [0.1, -0.2, 0.4])

    def test_gyro_world_frame(self) -> None:
        model = RigidBodyImuModel(config=KinematicsConfig(angular_velocity_frame='world'))
        x = np.zeros(18)
        x[9:12] = [np.pi / 2.0, 0.0, 0.0]
        x[12:15] = [0.0, 0.0, 0.3]

        np.testing.assert_allclose(model.h(x)[3:], [0.0, 0.3, 0.0], atol=1e-12)

    def test_jacobian_blocks(self) -> None:
        x = np.zeros(18)
        x[9:12] = [0.2, -0.4, 0.7]
        R = rotation_vector_to_rotation_matrix(x[9:12])

        J = numerical_jacobian(self.model.h, x)

        np.testing.assert_allclose(J[0:3, 6:9], R.T, atol=1e-6)
        np.testing.assert_allclose(J[3:6, 12:15], np.eye(3), atol=1e-6)
        np.testing.assert_allclose(J[:, 0:6], np.zeros((6, 6)), atol=1e-6)

    def test_custom_gravity(self) -> None:
        model = RigidBodyImuModel(gravity=9.80665)

        np.testing.assert_allclose(model.gravity_vector, [0.0, 0.0, -9.80665])

    def test_invalid_gravity(self) -> None:
        with pytest.raises(ValueError, match="gravity must be positive"):
            RigidBodyImuModel(gravity=0.0)

    def test_invalid_state_shape(self) -> None:
        with pytest.raises(ValueError, match="State must have shape \\(18,\\)"):
            self.model.h(np.zeros(12))


class TestProcessModel(unittest.TestCase):
    """Test suite for f(x, u, dt)."""

    def setUp(self) -> None:
        self.model = RigidBodyImuModel()

    def test_rest_is_fixed_point(self) -> None:
        np.testing.assert_array_equal(self.model.f(np.zeros(18), None, 0.1), np.zeros(18))

    def test_input_not_mutated(self) -> None:
        x = np.arange(18, dtype=float) * 0.01
        x_before = x.copy()

        self.model.f(x, np.ones(6), 0.1)

        np.testing.assert_array_equal(x, x_before)

    def test_jerk_input(self) -> None:
        u = np.array([1.0, 0.0, 0.0, 0.0, 0.0, 2.0])

        x1 = self.model.f(np.zeros(18), u, 0.1)

        np.testing.assert_allclose(x1[6:9], [0.1, 0.0, 0.0])
        np.testing.assert_allclose(x1[3:6], [0.01, 0.0, 0.0])
        np.testing.assert_allclose(x1[0:3], [0.001, 0.0, 0.0])
        np.testing.assert_allclose(x1[15:18], [0.0, 0.0, 0.2])
        np.testing.assert_allclose(x1[12:15], [0.0, 0.0, 0.02])
        np.testing.assert_allclose(x1[9:12], [0.0, 0.0, 0.002], atol=1e-15)

    def test_constant_rotation(self) -> None:
        x = np.zeros(18)
        x[12:15] = [0.0, 0.0, 1.0]
        for _ in range(10):
            x = self.model.f(x, None, 0.1)

        np.testing.assert_allclose(x[9:12], [0.0, 0.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(x[12:15], [0.0, 0.0, 1.0])

    def test_orientation_beyond_pi_keeps_branch(self) -> None:
        x = np.zeros(18)
        x[9:12] = [np.pi + 0.1, 0.0, 0.0]

        np.testing.assert_allclose(self.model.f(x, None, 0.1)[9:12], x[9:12], atol=1e-10)

    def test_jacobian_bounded_near_pi(self) -> None:
        """f stays continuous in θ where the logarithm map flips the axis."""
        x = np.zeros(18)
        x[9] = np.pi - 5e-8

        F = numerical_jacobian(lambda x_: self.model.f(x_, None, 1e-3), x)

        self.assertLess(np.max(np.abs(F)), 10.0)
        self.assertAlmostEqual(F[9, 9], 1.0, delta=1e-3)

    def test_invalid_input_shape(self) -> None:
        with pytest.raises(ValueError, match="Input must have shape \\(6,\\)"):
            self.model.f(np.zeros(18), np.zeros(3), 0.1)


if __name__ == "__main__":
    unittest.main()

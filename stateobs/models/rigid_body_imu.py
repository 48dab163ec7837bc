"""
Rigid body observed by an inertial measurement unit (IMU).

State (18):
    x = [p(3), v(3), a(3), θ(3), ω(3), α(3)]
        p, v, a: position, velocity, acceleration of the body in world frame W
        θ: orientation as a rotation vector, body frame B to world frame W
        ω, α: angular velocity and angular acceleration (frame set by the
              KinematicsConfig, body frame by default)

Input (6, optional):
    u = [j(3), β(3)]: linear jerk and angular jerk over the step

Measurement (6):
    y = [f_B(3), ω_B(3)]
        f_B = R(θ)^T (a - g_W): accelerometer specific force in body frame
        ω_B: gyrometer angular rate in body frame

Gravity follows the ENU convention: g_W = [0, 0, -g].
"""

from typing import Optional

import numpy as np

from stateobs.coords.rotations import (
    rotation_matrix_to_rotation_vector,
    rotation_vector_to_rotation_matrix,
    unwrap_rotation_vector,
)
from stateobs.kinematics.rigid_body import RigidBodyKinematics
from stateobs.kinematics.types import KinematicsConfig


class RigidBodyImuModel:
    """
    Process and measurement model of a rigid body carrying an IMU.

    The process step propagates the body with RigidBodyKinematics; the
    measurement predicts accelerometer and gyrometer readings.

    Example:
        >>> model = RigidBodyImuModel()
        >>> x = np.zeros(model.STATE_SIZE)
        >>> model.h(x)[:3]  # at rest: accelerometer reads +g upward
        array([0.  , 0.  , 9.81])
    """

    STATE_SIZE = 18
    MEASUREMENT_SIZE = 6
    INPUT_SIZE = 6

    def __init__(self, gravity: float = 9.81, config: Optional[KinematicsConfig] = None):
        """
        Args:
            gravity: Gravitational acceleration magnitude. Units: m/s².
            config: Kinematics settings (angular velocity frame, thresholds).

        Raises:
            ValueError: If gravity is not positive.
        """
        if gravity <= 0:
            raise ValueError(f"gravity must be positive, got {gravity}")

        self.gravity = float(gravity)
        self.kinematics = RigidBodyKinematics(config)

    @property
    def gravity_vector(self) -> np.ndarray:
        return np.array([0.0, 0.0, -self.gravity])

    def f(self, x: np.ndarray, u: Optional[np.ndarray] = None, dt: float = 1.0) -> np.ndarray:
        """
        Process model: x_{k+1} = f(x_k, u_k, dt).

        Args:
            x: State (18,).
            u: Jerk input [j, β] (6,), or None for zero jerk.
            dt: Time step in seconds.

        Returns:
            Next state (18,).

        The orientation is returned on the same branch as x[9:12], so f is
        continuous in θ across ‖θ‖ = π.
        """
        x = self._check_state(x)

        position = x[0:3].copy()
        velocity = x[3:6].copy()
        acceleration = x[6:9].copy()
        orientation = rotation_vector_to_rotation_matrix(
            x[9:12], self.kinematics.config.epsilon_angle
        )
        angular_velocity = x[12:15].copy()
        angular_acceleration = x[15:18].copy()

        if u is not None:
            u = np.asarray(u, dtype=float)
            if u.shape != (self.INPUT_SIZE,):
                raise ValueError(f"Input must have shape ({self.INPUT_SIZE},), got {u.shape}")
            acceleration += u[0:3] * dt
            angular_acceleration += u[3:6] * dt

        self.kinematics.integrate_kinematics(
            position, velocity, acceleration,
            orientation, angular_velocity, angular_acceleration, dt,
        )

        return np.concatenate(
            [
                position,
                velocity,
                acceleration,
                unwrap_rotation_vector(
                    rotation_matrix_to_rotation_vector(orientation), x[9:12]
                ),
                angular_velocity,
                angular_acceleration,
            ]
        )

    def h(self, x: np.ndarray) -> np.ndarray:
        """
        Measurement model: y = h(x) = [R^T (a - g), ω_B].

        Args:
            x: State (18,).

        Returns:
            Predicted IMU reading (6,).
        """
        x = self._check_state(x)

        R = rotation_vector_to_rotation_matrix(x[9:12], self.kinematics.config.epsilon_angle)
        specific_force = R.T @ (x[6:9] - self.gravity_vector)

        angular_velocity = x[12:15]
        if self.kinematics.config.angular_velocity_frame == 'world':
            angular_velocity = R.T @ angular_velocity

        return np.concatenate([specific_force, angular_velocity])

    def _check_state(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.STATE_SIZE,):
            raise ValueError(f"State must have shape ({self.STATE_SIZE},), got {x.shape}")
        return x

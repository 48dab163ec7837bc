"""
Rigid-body kinematics integration: translation and rotation propagation.

This module advances the configuration of a rigid body over one time step:
    - integrate_kinematics: acceleration-driven, semi-implicit (symplectic)
      Euler for both the translational and the rotational part
    - integrate_configuration: velocity-driven, first order

Translational update (semi-implicit Euler):
    v_{k+1} = v_k + a_k Δt
    p_{k+1} = p_k + v_{k+1} Δt

Rotational update:
    ω_{k+1} = ω_k + α_k Δt
    R_{k+1} = R_k exp(ω_{k+1} Δt)            (body-frame ω)
    R_{k+1} = exp(ω_{k+1} Δt) R_k            (world-frame ω)

The orientation may be a 3x3 rotation matrix or a unit quaternion
[qw, qx, qy, qz]; see stateobs.kinematics.orientation. Matrices are
re-orthonormalized (polar decomposition) and quaternions re-normalized after
every composition.

All state arrays are mutated in place. They must be writable float numpy
arrays; read-only inputs (accelerations) may be any array-like.

Preconditions (documented, not checked):
    - dt > 0
    - the orientation is a valid rotation on entry
"""

from typing import Optional, Union

import numpy as np

from stateobs.kinematics.orientation import Orientation, as_orientation
from stateobs.kinematics.types import KinematicsConfig

OrientationLike = Union[np.ndarray, Orientation]


def integrate_kinematics(
    position: np.ndarray,
    velocity: np.ndarray,
    acceleration: np.ndarray,
    orientation: OrientationLike,
    angular_velocity: np.ndarray,
    angular_acceleration: np.ndarray,
    dt: float,
    config: Optional[KinematicsConfig] = None,
) -> None:
    """
    Integrate position/orientation and their derivatives given accelerations.

    Args:
        position: Position p_k. Shape: (3,). Updated in place to p_{k+1}.
        velocity: Linear velocity v_k. Shape: (3,). Updated in place.
        acceleration: Linear acceleration a_k, same frame as velocity.
                      Shape: (3,).
        orientation: Rotation matrix (3, 3) or quaternion (4,) from body to
                     world. Updated in place.
        angular_velocity: Angular velocity ω_k in the frame selected by
                          config.angular_velocity_frame. Shape: (3,).
                          Updated in place.
        angular_acceleration: Angular acceleration α_k, same frame as ω.
                              Shape: (3,).
        dt: Time step. Units: seconds. Must be strictly positive.
        config: Numerical settings. Default: KinematicsConfig().

    Raises:
        ValueError: If an array has the wrong shape.
        TypeError: If a state array is not a float numpy array.

    Example:
        >>> p, v = np.zeros(3), np.array([1.0, 0.0, 0.0])
        >>> R, w = np.eye(3), np.array([0.0, 0.0, 0.5])
        >>> integrate_kinematics(p, v, np.zeros(3), R, w, np.zeros(3), 0.01)
        >>> p
        array([0.01, 0.  , 0.  ])
    """
    if config is None:
        config = KinematicsConfig()

    _check_state_vector(position, "position")
    _check_state_vector(velocity, "velocity")
    _check_state_vector(angular_velocity, "angular_velocity")
    acceleration = _as_vector(acceleration, "acceleration")
    angular_acceleration = _as_vector(angular_acceleration, "angular_acceleration")
    orientation = as_orientation(orientation)

    velocity += acceleration * dt
    position += velocity * dt

    angular_velocity += angular_acceleration * dt
    _advance_orientation(orientation, angular_velocity * dt, config)


def integrate_configuration(
    position: np.ndarray,
    velocity: np.ndarray,
    orientation: np.ndarray,
    angular_velocity: np.ndarray,
    dt: float,
    config: Optional[KinematicsConfig] = None,
) -> None:
    """
    Integrate position/orientation given constant velocities over the step.

    Args:
        position: Position p_k. Shape: (3,). Updated in place.
        velocity: Linear velocity, constant over the step. Shape: (3,).
        orientation: Rotation matrix from body to world. Shape: (3, 3).
                     Updated in place.
        angular_velocity: Angular velocity, constant over the step.
                          Shape: (3,).
        dt: Time step. Units: seconds. Must be strictly positive.
        config: Numerical settings. Default: KinematicsConfig().

    Raises:
        ValueError: If an array has the wrong shape, including a quaternion
                    orientation.
    """
    if config is None:
        config = KinematicsConfig()

    _check_state_vector(position, "position")
    velocity = _as_vector(velocity, "velocity")
    angular_velocity = _as_vector(angular_velocity, "angular_velocity")
    if np.shape(orientation) != (3, 3):
        raise ValueError(
            f"integrate_configuration expects a (3, 3) rotation matrix, "
            f"got shape {np.shape(orientation)}"
        )
    orientation = as_orientation(orientation)

    position += velocity * dt
    _advance_orientation(orientation, angular_velocity * dt, config)


class RigidBodyKinematics:
    """
    Integrator of the linear and rotational motion of a rigid body.

    Stateless apart from its configuration; holds no trajectory data. Meant to
    be used as a member of process models that propagate a rigid body.

    Example:
        >>> integrator = RigidBodyKinematics(KinematicsConfig(angular_velocity_frame='world'))
        >>> q = np.array([1.0, 0.0, 0.0, 0.0])
        >>> integrator.integrate_kinematics(
        ...     np.zeros(3), np.zeros(3), np.zeros(3),
        ...     q, np.array([0.0, 0.0, 1.0]), np.zeros(3), 0.1)
    """

    def __init__(self, config: Optional[KinematicsConfig] = None):
        self.config = config if config is not None else KinematicsConfig()

    def integrate_kinematics(
        self,
        position: np.ndarray,
        velocity: np.ndarray,
        acceleration: np.ndarray,
        orientation: OrientationLike,
        angular_velocity: np.ndarray,
        angular_acceleration: np.ndarray,
        dt: float,
    ) -> None:
        """Acceleration-driven step; see integrate_kinematics."""
        integrate_kinematics(
            position, velocity, acceleration,
            orientation, angular_velocity, angular_acceleration,
            dt, self.config,
        )

    def integrate_configuration(
        self,
        position: np.ndarray,
        velocity: np.ndarray,
        orientation: np.ndarray,
        angular_velocity: np.ndarray,
        dt: float,
    ) -> None:
        """Velocity-driven step; see integrate_configuration."""
        integrate_configuration(
            position, velocity, orientation, angular_velocity, dt, self.config
        )


def _advance_orientation(
    orientation: Orientation,
    rotation_vector: np.ndarray,
    config: KinematicsConfig,
) -> None:
    # Identity increment: leave the orientation bit-for-bit untouched
    if np.linalg.norm(rotation_vector) <= config.epsilon_angle:
        return

    orientation.compose_rotation_vector(
        rotation_vector, config.angular_velocity_frame, config.epsilon_angle
    )
    if config.orthonormalize or orientation.shape == (4,):
        orientation.normalize()


def _check_state_vector(v: np.ndarray, name: str) -> None:
    if not isinstance(v, np.ndarray):
        raise TypeError(f"{name} must be a numpy array updated in place, got {type(v)}")
    if not np.issubdtype(v.dtype, np.floating):
        raise TypeError(f"{name} must have a floating dtype, got {v.dtype}")
    if v.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {v.shape}")


def _as_vector(v: np.ndarray, name: str) -> np.ndarray:
    v = np.asarray(v, dtype=float)
    if v.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {v.shape}")
    return v

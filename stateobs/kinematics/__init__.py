"""Rigid-body kinematics integration.

This module provides the integrators that advance the position, velocity,
orientation and angular velocity of a rigid body over one time step, for
orientations stored either as rotation matrices or as unit quaternions.
"""

from stateobs.kinematics.orientation import (
    Orientation,
    QuaternionOrientation,
    RotationMatrixOrientation,
    as_orientation,
)
from stateobs.kinematics.rigid_body import (
    RigidBodyKinematics,
    integrate_configuration,
    integrate_kinematics,
)
from stateobs.kinematics.types import DEFAULT_EPSILON_ANGLE, KinematicsConfig

__all__ = [
    # Configuration
    "KinematicsConfig",
    "DEFAULT_EPSILON_ANGLE",
    # Orientation representations
    "Orientation",
    "RotationMatrixOrientation",
    "QuaternionOrientation",
    "as_orientation",
    # Integrators
    "integrate_kinematics",
    "integrate_configuration",
    "RigidBodyKinematics",
]

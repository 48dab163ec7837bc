"""Rotation representations and conversions.

This module provides functions for working with the rotation
representations used by the kinematics integrator and the observers:
- Rotation matrices (SO(3))
- Unit quaternions (scalar first)
- Rotation vectors (exponential and logarithm maps)
"""

from stateobs.coords.rotations import (
    IDENTITY_QUAT,
    orthonormalize,
    quat_multiply,
    quat_normalize,
    quat_to_rotation_matrix,
    rotation_matrix_to_quat,
    rotation_matrix_to_rotation_vector,
    rotation_vector_to_quat,
    rotation_vector_to_rotation_matrix,
    skew,
    unwrap_rotation_vector,
)

__all__ = [
    "IDENTITY_QUAT",
    "skew",
    # Quaternions
    "quat_multiply",
    "quat_normalize",
    "quat_to_rotation_matrix",
    "rotation_matrix_to_quat",
    # Exponential coordinates
    "rotation_vector_to_quat",
    "rotation_vector_to_rotation_matrix",
    "rotation_matrix_to_rotation_vector",
    "unwrap_rotation_vector",
    # Matrix hygiene
    "orthonormalize",
]

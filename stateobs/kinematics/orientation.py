"""
Orientation abstraction over rotation matrices and unit quaternions.

The kinematics integrator works on caller-owned numpy arrays. An Orientation
wraps such an array (without copying it) and exposes the few operations the
integrator needs, so that the integration logic is written once for both
representations:

    - compose_rotation_vector: apply exp(v) on the body or world side
    - normalize: restore orthonormality / unit norm
    - to_rotation_matrix / from_rotation_matrix: interoperability

All mutating operations write into the wrapped array in place.
"""

from abc import ABC, abstractmethod

import numpy as np

from stateobs.coords.rotations import (
    orthonormalize,
    quat_multiply,
    quat_normalize,
    quat_to_rotation_matrix,
    rotation_matrix_to_quat,
    rotation_vector_to_quat,
    rotation_vector_to_rotation_matrix,
)
from stateobs.kinematics.types import DEFAULT_EPSILON_ANGLE


class Orientation(ABC):
    """Abstract base class for an orientation stored in a caller-owned array."""

    shape: tuple = ()

    def __init__(self, array: np.ndarray):
        """
        Wrap an orientation array.

        Args:
            array: Writable float array holding the orientation. It is
                   mutated in place by compose_rotation_vector, normalize
                   and from_rotation_matrix.

        Raises:
            ValueError: If the array shape does not match the representation.
        """
        if not isinstance(array, np.ndarray):
            raise TypeError(f"Orientation must be a numpy array, got {type(array)}")
        if not np.issubdtype(array.dtype, np.floating):
            raise TypeError(f"Orientation must have a floating dtype, got {array.dtype}")
        if array.shape != self.shape:
            raise ValueError(
                f"{type(self).__name__} expects shape {self.shape}, got {array.shape}"
            )
        self.array = array

    @abstractmethod
    def compose_rotation_vector(
        self,
        rotation_vector: np.ndarray,
        frame: str = 'body',
        epsilon: float = DEFAULT_EPSILON_ANGLE,
    ) -> None:
        """
        Compose the orientation with exp(rotation_vector).

        Args:
            rotation_vector: Incremental rotation (axis * angle), radians.
            frame: 'body' composes on the right, 'world' on the left.
            epsilon: Angles at or below this value leave the orientation as is.
        """

    @abstractmethod
    def normalize(self) -> None:
        """Restore the representation constraint after numerical drift."""

    @abstractmethod
    def to_rotation_matrix(self) -> np.ndarray:
        """Return the orientation as a new 3x3 rotation matrix."""

    @abstractmethod
    def from_rotation_matrix(self, R: np.ndarray) -> None:
        """Overwrite the wrapped array with the orientation of R."""


class RotationMatrixOrientation(Orientation):
    """Orientation stored as a 3x3 orthonormal matrix."""

    shape = (3, 3)

    def compose_rotation_vector(
        self,
        rotation_vector: np.ndarray,
        frame: str = 'body',
        epsilon: float = DEFAULT_EPSILON_ANGLE,
    ) -> None:
        if np.linalg.norm(rotation_vector) <= epsilon:
            return

        increment = rotation_vector_to_rotation_matrix(rotation_vector, epsilon)
        if frame == 'body':
            self.array[...] = self.array @ increment
        else:
            self.array[...] = increment @ self.array

    def normalize(self) -> None:
        self.array[...] = orthonormalize(self.array)

    def to_rotation_matrix(self) -> np.ndarray:
        return self.array.copy()

    def from_rotation_matrix(self, R: np.ndarray) -> None:
        self.array[...] = R


class QuaternionOrientation(Orientation):
    """Orientation stored as a unit quaternion [qw, qx, qy, qz]."""

    shape = (4,)

    def compose_rotation_vector(
        self,
        rotation_vector: np.ndarray,
        frame: str = 'body',
        epsilon: float = DEFAULT_EPSILON_ANGLE,
    ) -> None:
        if np.linalg.norm(rotation_vector) <= epsilon:
            return

        increment = rotation_vector_to_quat(rotation_vector, epsilon)
        if frame == 'body':
            self.array[...] = quat_multiply(self.array, increment)
        else:
            self.array[...] = quat_multiply(increment, self.array)

    def normalize(self) -> None:
        self.array[...] = quat_normalize(self.array)

    def to_rotation_matrix(self) -> np.ndarray:
        return quat_to_rotation_matrix(self.array)

    def from_rotation_matrix(self, R: np.ndarray) -> None:
        self.array[...] = rotation_matrix_to_quat(R)


def as_orientation(array: np.ndarray) -> Orientation:
    """
    Wrap an orientation array in the matching Orientation variant.

    Args:
        array: (3, 3) rotation matrix or (4,) quaternion.

    Returns:
        RotationMatrixOrientation or QuaternionOrientation sharing the array.

    Raises:
        ValueError: If the shape matches neither representation.

    Example:
        >>> R = np.eye(3)
        >>> orientation = as_orientation(R)
        >>> orientation.compose_rotation_vector(np.array([0.0, 0.0, 0.1]))
        >>> R[0, 1] < 0  # R was updated in place
        True
    """
    if isinstance(array, Orientation):
        return array
    if not isinstance(array, np.ndarray):
        raise TypeError(f"Orientation must be a numpy array, got {type(array)}")

    if array.shape == RotationMatrixOrientation.shape:
        return RotationMatrixOrientation(array)
    if array.shape == QuaternionOrientation.shape:
        return QuaternionOrientation(array)
    raise ValueError(
        f"Orientation must be a (3, 3) matrix or a (4,) quaternion, got shape {array.shape}"
    )

"""Rotation representations and conversions.

This module provides functions to convert between the rotation
representations used by the kinematics integrator and the observers:
- Rotation matrices (3x3 orthogonal matrices, SO(3))
- Quaternions (unit quaternions, q = [qw, qx, qy, qz])
- Rotation vectors (axis * angle, the exponential coordinates of SO(3))

Conventions:
- Quaternions: [qw, qx, qy, qz] where qw is the scalar part, Hamilton product
- Rotation matrices: 3x3 numpy arrays, R such that v_world = R @ v_body
- Rotation vectors: 3-element arrays whose norm is the rotation angle in
  radians and whose direction is the rotation axis
"""

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import polar

IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0])


def skew(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Build the cross-product (skew-symmetric) matrix of a 3-vector.

    Args:
        v: Vector [vx, vy, vz].

    Returns:
        3x3 matrix S such that S @ w = np.cross(v, w).

    Raises:
        ValueError: If v is not a 3-element array.
    """
    v = np.asarray(v, dtype=float)
    if v.shape != (3,):
        raise ValueError(f"Expected 3-element vector, got shape {v.shape}")

    vx, vy, vz = v
    return np.array(
        [
            [0.0, -vz, vy],
            [vz, 0.0, -vx],
            [-vy, vx, 0.0],
        ],
        dtype=np.float64,
    )


def quat_multiply(p: NDArray[np.float64], q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Hamilton product of two quaternions.

    The product p ⊗ q applies q first, then p, when both are used as
    body-to-world rotations: C(p ⊗ q) = C(p) @ C(q).

    Args:
        p: Left quaternion [pw, px, py, pz].
        q: Right quaternion [qw, qx, qy, qz].

    Returns:
        Quaternion p ⊗ q (not normalized).

    Raises:
        ValueError: If p or q is not a 4-element array.

    Example:
        >>> q = np.array([0.0, 1.0, 0.0, 0.0])  # 180° about x
        >>> quat_multiply(q, q)  # 360° about x
        array([-1.,  0.,  0.,  0.])
    """
    if p.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {p.shape}")
    if q.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {q.shape}")

    pw, px, py, pz = p
    qw, qx, qy, qz = q

    return np.array(
        [
            pw * qw - px * qx - py * qy - pz * qz,
            pw * qx + px * qw + py * qz - pz * qy,
            pw * qy - px * qz + py * qw + pz * qx,
            pw * qz + px * qy - py * qx + pz * qw,
        ],
        dtype=np.float64,
    )


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return the unit quaternion pointing along q.

    Raises:
        ValueError: If q is not a 4-element array or has zero norm.
    """
    if q.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {q.shape}")

    norm = np.linalg.norm(q)
    if norm == 0.0:
        raise ValueError("Cannot normalize a zero quaternion")
    return q / norm


def quat_to_rotation_matrix(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert quaternion to rotation matrix.

    Args:
        q: Unit quaternion as numpy array [qw, qx, qy, qz].

    Returns:
        3x3 rotation matrix R such that v_world = R @ v_body.

    Raises:
        ValueError: If q is not a 4-element array.

    Example:
        >>> q = np.array([1.0, 0.0, 0.0, 0.0])  # Identity rotation
        >>> R = quat_to_rotation_matrix(q)
        >>> print(f"Rotation matrix:\\n{R}")  # Should be identity
    """
    if q.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {q.shape}")

    qw, qx, qy, qz = q

    R = np.array(
        [
            [
                1.0 - 2.0 * (qy * qy + qz * qz),
                2.0 * (qx * qy - qw * qz),
                2.0 * (qx * qz + qw * qy),
            ],
            [
                2.0 * (qx * qy + qw * qz),
                1.0 - 2.0 * (qx * qx + qz * qz),
                2.0 * (qy * qz - qw * qx),
            ],
            [
                2.0 * (qx * qz - qw * qy),
                2.0 * (qy * qz + qw * qx),
                1.0 - 2.0 * (qx * qx + qy * qy),
            ],
        ],
        dtype=np.float64,
    )

    return R


def rotation_matrix_to_quat(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert rotation matrix to quaternion.

    Extracts a unit quaternion from a 3x3 rotation matrix using
    Shepperd's method for numerical stability.

    Args:
        R: 3x3 rotation matrix (orthogonal matrix in SO(3)).

    Returns:
        Unit quaternion as numpy array [qw, qx, qy, qz].

    Raises:
        ValueError: If R is not a 3x3 matrix.
    """
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    # Shepperd's method: choose largest diagonal element for stability
    trace = np.trace(R)

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        qw = 0.25 / s
        qx = (R[2, 1] - R[1, 2]) * s
        qy = (R[0, 2] - R[2, 0]) * s
        qz = (R[1, 0] - R[0, 1]) * s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
        qw = (R[2, 1] - R[1, 2]) / s
        qx = 0.25 * s
        qy = (R[0, 1] + R[1, 0]) / s
        qz = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
        qw = (R[0, 2] - R[2, 0]) / s
        qx = (R[0, 1] + R[1, 0]) / s
        qy = 0.25 * s
        qz = (R[1, 2] + R[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
        qw = (R[1, 0] - R[0, 1]) / s
        qx = (R[0, 2] + R[2, 0]) / s
        qy = (R[1, 2] + R[2, 1]) / s
        qz = 0.25 * s

    q = np.array([qw, qx, qy, qz], dtype=np.float64)

    return q / np.linalg.norm(q)


def rotation_vector_to_rotation_matrix(
    v: NDArray[np.float64],
    epsilon: float = 1e-16,
) -> NDArray[np.float64]:
    """Exponential map from a rotation vector to a rotation matrix.

    Uses the Rodrigues formula

        R = I + sin(θ) K + (1 - cos(θ)) K²

    where θ = ||v|| and K = skew(v / θ).

    Args:
        v: Rotation vector (axis * angle), radians.
        epsilon: Angles at or below this value give the identity.

    Returns:
        3x3 rotation matrix.

    Raises:
        ValueError: If v is not a 3-element array.
    """
    v = np.asarray(v, dtype=float)
    if v.shape != (3,):
        raise ValueError(f"Expected 3-element rotation vector, got shape {v.shape}")

    angle = np.linalg.norm(v)
    if angle <= epsilon:
        return np.eye(3)

    K = skew(v / angle)
    return np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * (K @ K)


def rotation_vector_to_quat(
    v: NDArray[np.float64],
    epsilon: float = 1e-16,
) -> NDArray[np.float64]:
    """Exponential map from a rotation vector to a unit quaternion.

    Args:
        v: Rotation vector (axis * angle), radians.
        epsilon: Angles at or below this value give the identity.

    Returns:
        Unit quaternion [cos(θ/2), sin(θ/2) * axis].

    Raises:
        ValueError: If v is not a 3-element array.
    """
    v = np.asarray(v, dtype=float)
    if v.shape != (3,):
        raise ValueError(f"Expected 3-element rotation vector, got shape {v.shape}")

    angle = np.linalg.norm(v)
    if angle <= epsilon:
        return IDENTITY_QUAT.copy()

    half = 0.5 * angle
    return np.concatenate(([np.cos(half)], np.sin(half) * v / angle))


def rotation_matrix_to_rotation_vector(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Logarithm map from a rotation matrix to a rotation vector.

    Goes through the quaternion so that angles close to π stay well
    conditioned. The returned angle lies in [0, π].

    Args:
        R: 3x3 rotation matrix.

    Returns:
        Rotation vector (axis * angle).

    Raises:
        ValueError: If R is not a 3x3 matrix.
    """
    q = rotation_matrix_to_quat(R)
    if q[0] < 0.0:
        q = -q

    sin_half = np.linalg.norm(q[1:])
    if sin_half < 1e-12:
        # First-order expansion: q ≈ [1, v/2]
        return 2.0 * q[1:]

    angle = 2.0 * np.arctan2(sin_half, q[0])
    return angle * q[1:] / sin_half


def unwrap_rotation_vector(
    v: NDArray[np.float64],
    reference: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Pick the rotation vector equivalent to v that is closest to reference.

    The rotation vectors (θ + 2πn) * axis all describe the same rotation.
    Choosing the one nearest to a reference keeps a sequence of rotation
    vectors continuous across θ = π, where the logarithm map flips the axis.

    Args:
        v: Rotation vector (axis * angle), radians.
        reference: Rotation vector to stay close to, radians.

    Returns:
        Rotation vector describing the same rotation as v.

    Raises:
        ValueError: If v or reference is not a 3-element array.

    Example:
        >>> unwrap_rotation_vector(np.array([-3.0, 0.0, 0.0]), np.array([3.2, 0.0, 0.0]))
        array([3.28318531, 0.        , 0.        ])
    """
    v = np.asarray(v, dtype=float)
    reference = np.asarray(reference, dtype=float)
    if v.shape != (3,) or reference.shape != (3,):
        raise ValueError(
            f"Expected 3-element rotation vectors, got shapes {v.shape} and {reference.shape}"
        )

    angle = np.linalg.norm(v)
    if angle > 0.0:
        axis = v / angle
    else:
        # Identity: any axis works, use the reference direction
        reference_norm = np.linalg.norm(reference)
        if reference_norm == 0.0:
            return v
        axis = reference / reference_norm

    n = np.round((axis @ reference - angle) / (2.0 * np.pi))
    return (angle + 2.0 * np.pi * n) * axis


def orthonormalize(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Project a near-rotation matrix back onto SO(3).

    The closest orthogonal matrix in Frobenius norm is the unitary factor of
    the polar decomposition R = U P.

    Args:
        R: 3x3 matrix close to a rotation.

    Returns:
        Orthonormal 3x3 matrix.

    Raises:
        ValueError: If R is not a 3x3 matrix.
    """
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    U, _ = polar(R)
    return U

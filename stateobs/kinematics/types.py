"""
Configuration for rigid-body kinematics integration.

Frame Conventions:
    - B: Body frame (attached to the rigid body)
    - W: World frame (fixed reference frame)
    - Orientation represents the rotation from B to W: v_W = R @ v_B

The angular velocity can be expressed either in the body frame (as measured
by a gyrometer) or in the world frame. The two choices differ only in the side
on which the incremental rotation is composed with the current orientation:

    body:  R_{k+1} = R_k @ exp(ω_B Δt)        q_{k+1} = q_k ⊗ δq
    world: R_{k+1} = exp(ω_W Δt) @ R_k        q_{k+1} = δq ⊗ q_k
"""

from dataclasses import dataclass
from typing import Literal
import warnings

DEFAULT_EPSILON_ANGLE = 1e-16


@dataclass(frozen=True)
class KinematicsConfig:
    """
    Numerical settings shared by the kinematics integration routines.

    Attributes:
        epsilon_angle: Rotation increments whose angle ||ω Δt|| is at or below
                       this threshold are treated as the identity rotation.
                       Units: radians. Default: 1e-16.
        angular_velocity_frame: Frame in which angular velocity and angular
                                acceleration are expressed.
                                Default: 'body'. Options: 'body', 'world'.
        orthonormalize: Project the rotation matrix back onto SO(3) after each
                        composition. Quaternions are always re-normalized.
                        Default: True.

    Example:
        >>> config = KinematicsConfig(angular_velocity_frame='world')
        >>> config.epsilon_angle
        1e-16
    """

    epsilon_angle: float = DEFAULT_EPSILON_ANGLE
    angular_velocity_frame: Literal['body', 'world'] = 'body'
    orthonormalize: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.epsilon_angle, (float, int)):
            raise TypeError(
                f"epsilon_angle must be numeric, got {type(self.epsilon_angle)}"
            )
        if self.epsilon_angle < 0:
            raise ValueError(
                f"epsilon_angle must be non-negative, got {self.epsilon_angle}"
            )
        if self.angular_velocity_frame not in ('body', 'world'):
            raise ValueError(
                "angular_velocity_frame must be 'body' or 'world', "
                f"got '{self.angular_velocity_frame}'"
            )

        # Warn about thresholds coarser than a microradian
        if self.epsilon_angle > 1e-6:
            warnings.warn(
                f"epsilon_angle of {self.epsilon_angle} rad is unusually large; "
                f"rotations smaller than this are discarded at every step.",
                UserWarning,
            )

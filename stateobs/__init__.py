"""Online state observation for rigid bodies.

This package contains the reusable components for estimating the state of a
moving rigid body from time-indexed measurements and inputs:
- coords: Rotation representations and conversions
- kinematics: Rigid-body kinematics integration (matrix and quaternion)
- observers: Zero-delay observer framework and Extended Kalman Filter
- models: Process and measurement models (rigid body with IMU)
- utils: Numerical helpers (finite-difference Jacobians)
"""

__version__ = "0.1.0"

"""
Process and measurement models for rigid-body state observation.

Provides models that plug into the observers in stateobs.observers:
- RigidBodyImuModel: rigid body with accelerometer and gyrometer
"""

from stateobs.models.rigid_body_imu import RigidBodyImuModel

__all__ = [
    "RigidBodyImuModel",
]

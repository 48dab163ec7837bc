"""Numerical utilities shared across the package."""

from stateobs.utils.jacobians import numerical_jacobian

__all__ = [
    "numerical_jacobian",
]

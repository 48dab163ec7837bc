"""
Finite-difference Jacobians.

Used by the Extended Kalman Filter when no analytical Jacobian is supplied,
and by the tests to check analytical Jacobians.
"""

from typing import Callable

import numpy as np


def numerical_jacobian(
    f: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    epsilon: float = 1e-7,
) -> np.ndarray:
    """
    Compute Jacobian numerically using central differences.

    Args:
        f: Function that takes x and returns y
        x: Point at which to compute Jacobian
        epsilon: Step size for finite differences

    Returns:
        Numerical Jacobian, shape (len(y), len(x))

    Raises:
        ValueError: If epsilon is not positive.
    """
    if epsilon <= 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")

    x = np.asarray(x, dtype=float)
    y0 = np.asarray(f(x), dtype=float)

    n_out = len(y0)
    n_in = len(x)

    J = np.zeros((n_out, n_in))

    for i in range(n_in):
        x_plus = x.copy()
        x_minus = x.copy()

        x_plus[i] += epsilon
        x_minus[i] -= epsilon

        y_plus = np.asarray(f(x_plus), dtype=float)
        y_minus = np.asarray(f(x_minus), dtype=float)

        # Central difference
        J[:, i] = (y_plus - y_minus) / (2 * epsilon)

    return J

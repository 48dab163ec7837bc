"""Unit tests for the central-difference Jacobian."""

import unittest

import numpy as np
import pytest

from stateobs.utils import numerical_jacobian


class TestNumericalJacobian(unittest.TestCase):
    """Test numerical Jacobians against analytical ones."""

    def test_linear_map(self) -> None:
        A = np.array([[1.0, 2.0, 0.0], [-1.0, 0.5, 3.0]])

        J = numerical_jacobian(lambda x: A @ x, np.array([0.3, -0.2, 1.0]))

        np.testing.assert_allclose(J, A, atol=1e-7)

    def test_nonlinear_map(self) -> None:
        def f(x):
            return np.array([np.sin(x[0]) * x[1], x[1] ** 2])

        x = np.array([0.4, 1.5])
        expected = np.array([
            [np.cos(x[0]) * x[1], np.sin(x[0])],
            [0.0, 2.0 * x[1]],
        ])

        np.testing.assert_allclose(numerical_jacobian(f, x), expected, atol=1e-6)

    def test_shape(self) -> None:
        J = numerical_jacobian(lambda x: np.array([x.sum()]), np.zeros(4))

        self.assertEqual(J.shape, (1, 4))

    def test_invalid_epsilon(self) -> None:
        with pytest.raises(ValueError, match="epsilon must be positive"):
            numerical_jacobian(lambda x: x, np.zeros(2), epsilon=0.0)


if __name__ == "__main__":
    unittest.main()

"""
Unit tests for range least squares refinement.

Tests cover:
    - Gauss-Newton and Levenberg-Marquardt on 3D ranges
    - Coplanar anchors (height unobservable)
    - Noisy ranges and covariance
    - Input validation
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose

from magbeacon.estimators.range_least_squares import (
    RangeProblem,
    RangeSolution,
    gauss_newton,
    levenberg_marquardt,
    solve_ranges,
)


class TestRangeProblem(unittest.TestCase):

    def setUp(self):
        self.anchors = np.array([[0, 0, 0], [3, 0, 0], [0, 4, 0]], dtype=float)
        self.problem = RangeProblem(self.anchors, np.array([5.0, 4.0, 3.0]))

    def test_predict_and_residuals(self):
        x = np.array([3.0, 4.0, 0.0])
        assert_allclose(self.problem.predict(x), [5.0, 4.0, 3.0])
        assert_allclose(self.problem.residuals(x), np.zeros(3), atol=1e-15)
        self.assertEqual(self.problem.cost(x), 0.0)

    def test_jacobian_rows_are_unit_vectors(self):
        J = self.problem.jacobian(np.array([1.0, 1.0, 2.0]))
        self.assertEqual(J.shape, (3, 3))
        assert_allclose(np.linalg.norm(J, axis=1), np.ones(3))

    def test_jacobian_at_anchor_is_finite(self):
        self.assertTrue(np.all(np.isfinite(self.problem.jacobian(np.zeros(3)))))

    def test_shape_validation(self):
        with self.assertRaises(ValueError):
            RangeProblem(np.zeros((3, 2)), np.ones(3))
        with self.assertRaises(ValueError):
            RangeProblem(np.zeros((3, 3)), np.ones(4))


class TestRangeRefinement3D(unittest.TestCase):
    """Ranges from a point to four non-coplanar anchors."""

    def setUp(self):
        self.anchors = np.array(
            [[0, 0, 0], [5, 0, 0], [0, 5, 0], [0, 0, 5]], dtype=float
        )
        self.true_pos = np.array([1.5, 2.0, 1.0])
        self.ranges = np.linalg.norm(self.anchors - self.true_pos, axis=1)
        self.problem = RangeProblem(self.anchors, self.ranges)

    def test_gauss_newton_converges(self):
        result = gauss_newton(self.problem, np.array([2.0, 2.0, 2.0]))
        self.assertIsInstance(result, RangeSolution)
        assert_allclose(result.x, self.true_pos, atol=1e-8)
        self.assertTrue(result.converged)
        self.assertLess(result.iterations, 15)
        self.assertLess(result.cost, 1e-18)

    def test_levenberg_marquardt_converges(self):
        result = levenberg_marquardt(self.problem, np.array([2.0, 2.0, 2.0]))
        assert_allclose(result.x, self.true_pos, atol=1e-8)
        self.assertTrue(result.converged)

    def test_dispatch(self):
        for method in ("gn", "lm"):
            result = solve_ranges(self.anchors, self.ranges, np.ones(3), method=method)
            assert_allclose(result.x, self.true_pos, atol=1e-8)

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            solve_ranges(self.anchors, self.ranges, np.ones(3), method="bfgs")

    def test_initial_guess_must_be_a_point(self):
        with self.assertRaises(ValueError):
            gauss_newton(self.problem, np.ones(2))

    def test_noisy_ranges_covariance(self):
        noisy = self.ranges + np.array([0.01, -0.02, 0.015, -0.005])
        result = levenberg_marquardt(RangeProblem(self.anchors, noisy),
                                     np.array([2.0, 2.0, 2.0]))

        self.assertLess(np.linalg.norm(result.x - self.true_pos), 0.1)
        self.assertEqual(result.covariance.shape, (3, 3))
        assert_allclose(result.covariance, result.covariance.T, atol=1e-15)
        self.assertTrue(np.all(np.linalg.eigvalsh(result.covariance) >= -1e-15))
        assert_allclose(result.residuals, noisy - self.problem.predict(result.x))


class TestCoplanarAnchors(unittest.TestCase):
    """Sensors and beacons in one plane: height cannot be observed."""

    def setUp(self):
        self.anchors = np.array(
            [[-0.5, -0.29, 0.0], [0.0, 0.58, 0.0], [0.5, -0.29, 0.0], [1.0, 1.0, 0.0]]
        )
        self.true_pos = np.array([2.0, -1.0, 0.0])
        self.problem = RangeProblem(
            self.anchors, np.linalg.norm(self.anchors - self.true_pos, axis=1)
        )

    def test_levenberg_marquardt_keeps_height(self):
        result = levenberg_marquardt(self.problem, np.array([1.5, -0.5, 0.0]))
        assert_allclose(result.x, self.true_pos, atol=1e-8)
        self.assertEqual(result.x[2], 0.0)

    def test_gauss_newton_keeps_height(self):
        result = gauss_newton(self.problem, np.array([1.5, -0.5, 0.0]))
        assert_allclose(result.x, self.true_pos, atol=1e-8)


if __name__ == "__main__":
    unittest.main()

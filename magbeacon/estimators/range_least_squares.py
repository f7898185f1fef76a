"""
Least squares refinement of a point from ranges to known anchors.

Every intensity measured for a beacon is turned into a range r_i to an
anchor a_i (a sensor in beacon survey, a beacon seen from a sensor offset in
device tracking). The point x is refined by minimizing

    F(x) = ½ Σ_i (r_i - ‖x - a_i‖)²

with the range model and its Jacobian

    h_i(x) = ‖x - a_i‖,   J_i(x) = (x - a_i)ᵀ / ‖x - a_i‖

Two iterations are available:

    Gauss-Newton:         Δx = argmin ‖J Δx - r‖   (least squares on J itself)
    Levenberg-Marquardt:  (JᵀJ + μI) Δx = Jᵀr      (damped, adaptive μ)

Directions the anchors cannot observe (height when every anchor lies in one
plane) have a zero Jacobian column. Both iterations then take a zero step
along them, so such coordinates keep the value of the initial guess.
"""

from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np

from magbeacon.models.dipole import MIN_DISTANCE

# Damping beyond this leaves no usable descent direction.
MAX_DAMPING = 1e10


class RangeProblem:
    """
    Ranges from an unknown point to a fixed set of anchors.

    Attributes:
        anchors: Anchor positions, shape (M, 3).
        ranges: Measured ranges, shape (M,).
    """

    def __init__(self, anchors: np.ndarray, ranges: np.ndarray):
        anchors = np.asarray(anchors, dtype=float)
        ranges = np.asarray(ranges, dtype=float)

        if anchors.ndim != 2 or anchors.shape[1] != 3:
            raise ValueError(f"anchors must have shape (M, 3), got {anchors.shape}")
        if ranges.shape != (anchors.shape[0],):
            raise ValueError(
                f"Expected {anchors.shape[0]} ranges, got shape {ranges.shape}"
            )

        self.anchors = anchors
        self.ranges = ranges

    def predict(self, x: np.ndarray) -> np.ndarray:
        return np.linalg.norm(self.anchors - x, axis=1)

    def residuals(self, x: np.ndarray) -> np.ndarray:
        """Measured minus predicted ranges."""
        return self.ranges - self.predict(x)

    def jacobian(self, x: np.ndarray) -> np.ndarray:
        diff = x - self.anchors
        distances = np.linalg.norm(diff, axis=1, keepdims=True)
        return diff / np.maximum(distances, MIN_DISTANCE)

    def cost(self, x: np.ndarray) -> float:
        r = self.residuals(x)
        return 0.5 * float(r @ r)


@dataclass
class RangeSolution:
    """Refined point and solver diagnostics.

    Attributes:
        x: Refined point, shape (3,).
        covariance: σ² (JᵀJ)⁺ at the solution, with σ² from the residuals
            when there are more ranges than unknowns.
        iterations: Iterations performed.
        residuals: Final range residuals (m).
        cost: Final cost ½‖r‖².
        converged: The last step was shorter than the tolerance.
    """

    x: np.ndarray
    covariance: np.ndarray
    iterations: int
    residuals: np.ndarray
    cost: float
    converged: bool


def _finish(problem: RangeProblem, x: np.ndarray, iterations: int,
            converged: bool) -> RangeSolution:
    r = problem.residuals(x)
    J = problem.jacobian(x)
    m, n = J.shape
    sigma2 = float(r @ r) / (m - n) if m > n else 1.0

    return RangeSolution(
        x=x,
        covariance=sigma2 * np.linalg.pinv(J.T @ J),
        iterations=iterations,
        residuals=r,
        cost=0.5 * float(r @ r),
        converged=converged,
    )


def gauss_newton(
    problem: RangeProblem,
    x0: np.ndarray,
    max_iter: int = 20,
    tol: float = 1e-10,
) -> RangeSolution:
    """
    Gauss-Newton refinement.

    Each step is the minimum-norm least squares solution of J Δx = r, so a
    rank-deficient Jacobian never produces a step along an unobservable
    direction.

    Args:
        problem: Anchors and measured ranges.
        x0: Initial point, shape (3,).
        max_iter: Iteration limit.
        tol: Convergence threshold on ‖Δx‖ (m).

    Example:
        >>> anchors = np.array([[0, 0, 0], [4, 0, 0], [0, 4, 0], [0, 0, 4]], dtype=float)
        >>> target = np.array([1.0, 2.0, 1.0])
        >>> problem = RangeProblem(anchors, np.linalg.norm(anchors - target, axis=1))
        >>> np.round(gauss_newton(problem, np.ones(3)).x, 6)
        array([1., 2., 1.])
    """
    x = _as_point(x0)
    converged = False
    iterations = 0

    while iterations < max_iter:
        iterations += 1
        step = np.linalg.lstsq(problem.jacobian(x), problem.residuals(x), rcond=None)[0]
        x = x + step
        if np.linalg.norm(step) < tol:
            converged = True
            break

    return _finish(problem, x, iterations, converged)


def levenberg_marquardt(
    problem: RangeProblem,
    x0: np.ndarray,
    max_iter: int = 50,
    tol: float = 1e-10,
    mu0: float = 1e-3,
) -> RangeSolution:
    """
    Levenberg-Marquardt refinement.

    A trial step is accepted when it lowers the cost; the damping μ then
    shrinks with the ratio of actual to predicted decrease. A rejected step
    raises μ geometrically. Once μ exceeds MAX_DAMPING no descent is left at
    working precision and the current point is returned as converged.

    Args:
        problem: Anchors and measured ranges.
        x0: Initial point, shape (3,).
        max_iter: Iteration limit (accepted steps).
        tol: Convergence threshold on ‖Δx‖ (m).
        mu0: Initial damping.
    """
    x = _as_point(x0)
    mu = mu0
    growth = 2.0
    converged = False
    iterations = 0

    while iterations < max_iter:
        iterations += 1
        J = problem.jacobian(x)
        r = problem.residuals(x)
        JtJ = J.T @ J
        gradient = J.T @ r
        cost = 0.5 * float(r @ r)

        step = None
        while mu <= MAX_DAMPING:
            trial = np.linalg.solve(JtJ + mu * np.eye(3), gradient)
            predicted = 0.5 * float(trial @ (mu * trial + gradient))
            actual = cost - problem.cost(x + trial)

            if predicted > 0 and actual > 0:
                rho = actual / predicted
                mu *= max(1.0 / 3.0, 1.0 - (2.0 * rho - 1.0) ** 3)
                growth = 2.0
                step = trial
                break

            mu *= growth
            growth *= 2.0

        if step is None:
            converged = True
            break

        x = x + step
        if np.linalg.norm(step) < tol:
            converged = True
            break

    return _finish(problem, x, iterations, converged)


def solve_ranges(
    anchors: np.ndarray,
    ranges: np.ndarray,
    x0: np.ndarray,
    method: Literal["gn", "lm"] = "lm",
    max_iter: int = 50,
    tol: float = 1e-10,
    mu0: Optional[float] = None,
) -> RangeSolution:
    """
    Refine a point from ranges with Gauss-Newton ("gn") or
    Levenberg-Marquardt ("lm").

    Raises:
        ValueError: For an unknown method or inconsistent shapes.
    """
    problem = RangeProblem(anchors, ranges)
    if method == "gn":
        return gauss_newton(problem, x0, max_iter=max_iter, tol=tol)
    if method == "lm":
        return levenberg_marquardt(problem, x0, max_iter=max_iter, tol=tol,
                                   mu0=1e-3 if mu0 is None else mu0)
    raise ValueError(f"Unknown method: {method}. Use 'gn' or 'lm'.")


def _as_point(x0: np.ndarray) -> np.ndarray:
    x = np.asarray(x0, dtype=float)
    if x.shape != (3,):
        raise ValueError(f"x0 must have shape (3,), got {x.shape}")
    return x.copy()

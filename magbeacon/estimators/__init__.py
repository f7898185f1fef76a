"""
Least squares refinement of a point from anchor ranges.

Available estimators:
    - Gauss-Newton
    - Levenberg-Marquardt
"""

from magbeacon.estimators.range_least_squares import (
    MAX_DAMPING,
    RangeProblem,
    RangeSolution,
    gauss_newton,
    levenberg_marquardt,
    solve_ranges,
)

__all__ = [
    "MAX_DAMPING",
    "RangeProblem",
    "RangeSolution",
    "gauss_newton",
    "levenberg_marquardt",
    "solve_ranges",
]

"""
Intensity-based multilateration.

Each spectral intensity measured by a sensor for one beacon frequency is
turned into a distance with the inverse dipole law (magbeacon.models.dipole)
and the unknown point is found by nonlinear least squares over the ranges

    h_i(x) = ‖x - a_i‖,   ∂h_i/∂x = (x - a_i)ᵀ / ‖x - a_i‖

where the anchors a_i are the known-side points. The same core serves both
operating modes:

    Beacon survey   (unknown: beacon)  a_i = p_device + o_i
    Device tracking (unknown: device)  a_{b,i} = p_beacon_b - o_i

with o_i the mounting offset of sensor i. The initial guess comes from the
closed-form linear solution of the squared-range differences, so the
iteration starts inside the basin of the true solution.

Zero intensities carry no range information (the beacon was not detected in
that window) and are dropped. With fewer than three usable measurements the
estimate is reported as unlocalized instead of returning a coordinate, and
so is a set of anchors that lies on one line (see magbeacon.utils.geometry):
its mirror ambiguity would otherwise converge to a confident wrong point.
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from magbeacon.estimators.range_least_squares import solve_ranges
from magbeacon.models.dipole import (
    MIN_DISTANCE,
    intensity_to_distance,
    predict_intensities,
)
from magbeacon.utils.geometry import check_anchor_geometry
from magbeacon.utils.space import Vector3

MIN_MEASUREMENTS = 3


@dataclass
class PositionEstimate:
    """
    Result of one position estimation.

    Attributes:
        position: Estimated point, or None when unlocalized.
        localized: False when the estimate must not be used.
        converged: Solver met its step tolerance.
        iterations: Solver iterations.
        n_measurements: Usable (non-zero) intensities.
        range_residuals: Measured minus predicted ranges (m).
        intensity_residuals: Measured minus predicted intensities (T).
        covariance: Solver covariance of the position (3 × 3).
        reason: Why the estimate is unlocalized, empty otherwise.
    """

    position: Optional[Vector3]
    localized: bool
    converged: bool = False
    iterations: int = 0
    n_measurements: int = 0
    range_residuals: Optional[np.ndarray] = None
    intensity_residuals: Optional[np.ndarray] = None
    covariance: Optional[np.ndarray] = None
    reason: str = ""

    @classmethod
    def unlocalized(cls, reason: str, n_measurements: int = 0) -> "PositionEstimate":
        return cls(position=None, localized=False, n_measurements=n_measurements,
                   reason=reason)


def linear_multilateration(anchors: np.ndarray, ranges: np.ndarray) -> np.ndarray:
    """
    Closed-form position from squared-range differences.

    Subtracting the first range equation ‖x - a_0‖² = r_0² from the others
    gives the linear system

        2 (a_i - a_0)ᵀ x' = r_0² - r_i² + ‖a_i'‖² - ‖a_0'‖²

    in coordinates x' = x - c centered on the anchor centroid c. It is solved
    by minimum-norm least squares, so directions the anchors cannot observe
    (height for coplanar anchors) stay at the centroid.

    Args:
        anchors: Anchor positions, shape (M, 3), M >= 2.
        ranges: Ranges to each anchor, shape (M,).

    Returns:
        Position estimate, shape (3,).

    Example:
        >>> anchors = np.array([[0, 0, 0], [4, 0, 0], [0, 4, 0]], dtype=float)
        >>> ranges = np.linalg.norm(anchors - np.array([1.0, 1.0, 0.0]), axis=1)
        >>> np.round(linear_multilateration(anchors, ranges), 9)
        array([1., 1., 0.])
    """
    anchors = np.asarray(anchors, dtype=float)
    ranges = np.asarray(ranges, dtype=float)

    if anchors.ndim != 2 or anchors.shape[1] != 3:
        raise ValueError(f"anchors must have shape (M, 3), got {anchors.shape}")
    if ranges.shape != (anchors.shape[0],):
        raise ValueError(
            f"Expected {anchors.shape[0]} ranges, got shape {ranges.shape}"
        )
    if anchors.shape[0] < 2:
        raise ValueError("linear multilateration needs at least 2 anchors")

    centroid = anchors.mean(axis=0)
    centered = anchors - centroid
    sq_norms = np.sum(centered**2, axis=1)

    H = 2.0 * (centered[1:] - centered[0])
    y = ranges[0] ** 2 - ranges[1:] ** 2 + sq_norms[1:] - sq_norms[0]

    offset = np.linalg.lstsq(H, y, rcond=None)[0]
    return centroid + offset


def estimate_position(
    intensities: np.ndarray,
    known_positions: np.ndarray,
    magnetic_moments: Union[float, np.ndarray],
    sensor_offsets: Optional[np.ndarray] = None,
    offset_sign: float = 1.0,
    initial_guess: Optional[np.ndarray] = None,
    method: str = "lm",
    max_iter: int = 50,
    tol: float = 1e-12,
    min_measurements: int = MIN_MEASUREMENTS,
) -> PositionEstimate:
    """
    Estimate a 3D position from per-sensor dipole intensities.

    Args:
        intensities: Spectral magnitudes, shape (M,). Zero or non-finite
            entries are treated as missing.
        known_positions: Known-side points, shape (M, 3) or (3,) for a single
            point shared by all measurements (the device in survey mode).
        magnetic_moments: Beacon moment magnitude per measurement, scalar or
            shape (M,).
        sensor_offsets: Mounting offset per measurement, shape (M, 3). None
            means the known positions already are the anchors.
        offset_sign: +1 adds the offsets (survey: device + offset), -1
            subtracts them (tracking: beacon - offset).
        initial_guess: Optional start point, shape (3,). Defaults to the
            linear multilateration solution.
        method: "lm" (default) or "gn".
        max_iter: Solver iteration limit.
        tol: Solver step tolerance (m).
        min_measurements: Fewest usable intensities accepted.

    Returns:
        PositionEstimate. ``position`` is None when unlocalized.

    Example:
        >>> offsets = np.array([[-0.5, -0.29, 0], [0, 0.58, 0], [0.5, -0.29, 0]])
        >>> beacon = np.array([2.0, 1.0, 0.0])
        >>> I = predict_intensities(beacon, offsets, 7e-8)
        >>> est = estimate_position(I, np.zeros(3), 7e-8, sensor_offsets=offsets)
        >>> np.round(est.position.as_array(), 6)
        array([2., 1., 0.])
    """
    intensities = np.asarray(intensities, dtype=float).reshape(-1)
    m = len(intensities)

    known_positions = np.asarray(known_positions, dtype=float)
    if known_positions.shape == (3,):
        known_positions = np.tile(known_positions, (m, 1))
    if known_positions.shape != (m, 3):
        raise ValueError(
            f"known_positions must have shape (3,) or ({m}, 3), "
            f"got {known_positions.shape}"
        )

    anchors = known_positions.copy()
    if sensor_offsets is not None:
        sensor_offsets = np.asarray(sensor_offsets, dtype=float)
        if sensor_offsets.shape != (m, 3):
            raise ValueError(
                f"sensor_offsets must have shape ({m}, 3), got {sensor_offsets.shape}"
            )
        anchors = anchors + offset_sign * sensor_offsets

    moments = np.broadcast_to(np.asarray(magnetic_moments, dtype=float), (m,))
    if np.any(moments <= 0):
        raise ValueError("magnetic moments must be positive")

    valid = np.isfinite(intensities) & (intensities > 0)
    n_valid = int(np.count_nonzero(valid))
    if n_valid < min_measurements:
        return PositionEstimate.unlocalized(
            f"{n_valid} usable intensities, need at least {min_measurements}",
            n_measurements=n_valid,
        )

    anchors = anchors[valid]
    moments = moments[valid]
    observed = intensities[valid]
    ranges = intensity_to_distance(observed, moments)

    geometry_ok, geometry_issue = check_anchor_geometry(anchors)
    if not geometry_ok:
        return PositionEstimate.unlocalized(geometry_issue, n_measurements=n_valid)

    if initial_guess is None:
        x0 = linear_multilateration(anchors, ranges)
    else:
        x0 = np.asarray(initial_guess, dtype=float).reshape(3)

    result = solve_ranges(anchors, ranges, x0, method=method, max_iter=max_iter, tol=tol)

    if not np.all(np.isfinite(result.x)):
        return PositionEstimate.unlocalized("solver diverged", n_measurements=n_valid)
    if np.min(np.linalg.norm(anchors - result.x, axis=1)) < MIN_DISTANCE:
        return PositionEstimate.unlocalized(
            "estimate coincides with a sensor", n_measurements=n_valid
        )

    return PositionEstimate(
        position=Vector3.from_array(result.x),
        localized=True,
        converged=result.converged,
        iterations=result.iterations,
        n_measurements=n_valid,
        range_residuals=result.residuals,
        intensity_residuals=observed - predict_intensities(result.x, anchors, moments),
        covariance=result.covariance,
    )

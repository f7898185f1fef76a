"""
Magnetic dipole field model.

Beacons are modelled as point magnetic dipoles. The field at displacement r
from a dipole with moment vector m is

    B(r) = (μ₀/4π) · [3(m·r̂)r̂ - m] / r³

Beacon dipoles are mounted with their axis perpendicular to the plane the
device moves in. In that (equatorial) plane m·r̂ = 0 and the field magnitude
reduces to the isotropic inverse-cube law

    I(r) = (μ₀/4π) · m / r³

which is the intensity model inverted for positioning:

    r = (μ₀ m / (4π I))^(1/3)

Units: moment in A·m², distance in m, field in T.
"""

from typing import Union

import numpy as np

MU_0 = 4 * np.pi * 1e-7  # Permeability of free space (H/m)
MU_0_OVER_4PI = MU_0 / (4 * np.pi)

# Below this distance the point-dipole model is singular
MIN_DISTANCE = 1e-9


def dipole_field(
    observation: np.ndarray,
    dipole_position: np.ndarray,
    dipole_moment: np.ndarray,
    min_distance: float = MIN_DISTANCE,
) -> np.ndarray:
    """
    Magnetic field vector of a point dipole.

    Args:
        observation: Point where the field is evaluated, shape (3,).
        dipole_position: Dipole location, shape (3,).
        dipole_moment: Moment vector m (A·m²), shape (3,).
        min_distance: Inside this radius the field is reported as zero.

    Returns:
        Field vector B (T), shape (3,).

    Example:
        >>> B = dipole_field(np.array([1.0, 0, 0]), np.zeros(3), np.array([0, 0, 1.0]))
        >>> B  # equatorial field points against the moment
        array([ 0.e+00,  0.e+00, -1.e-07])
    """
    r_vec = np.asarray(observation, dtype=float) - np.asarray(dipole_position, dtype=float)
    m = np.asarray(dipole_moment, dtype=float)
    r = np.linalg.norm(r_vec)

    if r < min_distance:
        return np.zeros(3)

    r_hat = r_vec / r
    return MU_0_OVER_4PI * (3.0 * np.dot(m, r_hat) * r_hat - m) / r**3


def dipole_intensity(
    distance: Union[float, np.ndarray],
    magnetic_moment: Union[float, np.ndarray],
) -> Union[float, np.ndarray]:
    """
    Equatorial field magnitude at a given distance from a dipole.

    Args:
        distance: Distance(s) to the dipole (m). Must be positive.
        magnetic_moment: Moment magnitude(s) m (A·m²).

    Returns:
        I = (μ₀/4π) · m / r³ in tesla.
    """
    distance = np.asarray(distance, dtype=float)
    if np.any(distance <= 0):
        raise ValueError("distance must be positive")
    intensity = MU_0_OVER_4PI * np.asarray(magnetic_moment, dtype=float) / distance**3
    return float(intensity) if intensity.ndim == 0 else intensity


def intensity_to_distance(
    intensity: Union[float, np.ndarray],
    magnetic_moment: Union[float, np.ndarray],
) -> Union[float, np.ndarray]:
    """
    Invert the equatorial intensity model.

    Args:
        intensity: Measured field magnitude(s) (T). Must be positive; a zero
            intensity carries no range information.
        magnetic_moment: Moment magnitude(s) m (A·m²).

    Returns:
        Distance(s) r = (μ₀ m / (4π I))^(1/3) in meters.

    Example:
        >>> r = intensity_to_distance(dipole_intensity(2.0, 7e-8), 7e-8)
        >>> round(r, 12)
        2.0
    """
    intensity = np.asarray(intensity, dtype=float)
    if np.any(intensity <= 0) or not np.all(np.isfinite(intensity)):
        raise ValueError("intensity must be positive and finite")
    distance = np.cbrt(MU_0_OVER_4PI * np.asarray(magnetic_moment, dtype=float) / intensity)
    return float(distance) if distance.ndim == 0 else distance


def predict_intensities(
    position: np.ndarray,
    anchors: np.ndarray,
    magnetic_moments: Union[float, np.ndarray],
) -> np.ndarray:
    """
    Intensities observed between a position and a set of anchor points.

    Args:
        position: Unknown-side point, shape (3,).
        anchors: Known-side points, shape (M, 3).
        magnetic_moments: Moment per anchor, scalar or shape (M,).

    Returns:
        Predicted intensities, shape (M,).
    """
    anchors = np.atleast_2d(np.asarray(anchors, dtype=float))
    distances = np.linalg.norm(anchors - np.asarray(position, dtype=float), axis=1)
    return np.asarray(dipole_intensity(distances, magnetic_moments), dtype=float).reshape(-1)

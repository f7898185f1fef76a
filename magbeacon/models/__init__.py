"""
Physical models for magnetic beacons.

Modules:
    dipole: Point-dipole field, equatorial intensity law and its inverse
"""

from magbeacon.models.dipole import (
    MIN_DISTANCE,
    MU_0,
    MU_0_OVER_4PI,
    dipole_field,
    dipole_intensity,
    intensity_to_distance,
    predict_intensities,
)

__all__ = [
    "MIN_DISTANCE",
    "MU_0",
    "MU_0_OVER_4PI",
    "dipole_field",
    "dipole_intensity",
    "intensity_to_distance",
    "predict_intensities",
]

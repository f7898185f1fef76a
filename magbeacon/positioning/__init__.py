"""
Position estimation from dipole intensities.

Submodules:
    multilateration: Intensity-to-range inversion, linear initialization and
        nonlinear least squares refinement (beacon survey and device tracking)
"""

from magbeacon.positioning.multilateration import (
    MIN_MEASUREMENTS,
    PositionEstimate,
    estimate_position,
    linear_multilateration,
)

__all__ = [
    "MIN_MEASUREMENTS",
    "PositionEstimate",
    "estimate_position",
    "linear_multilateration",
]

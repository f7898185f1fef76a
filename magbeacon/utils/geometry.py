"""
Anchor geometry checks.

Ranges to anchors that all lie on one line only fix the distance of the
unknown point from that line, not its direction around it: every point on
the circle of that radius fits the ranges equally well. Intensities measured
by collinear sensors (or against collinear anchors) therefore cannot be
turned into a position. Anchors spanning a plane are sufficient for points in
that plane; the out-of-plane coordinate is left to the initial guess.
"""

from typing import Tuple

import numpy as np

EPSILON_COLLINEAR = 1e-6  # Relative singular value threshold
MIN_ANCHOR_RANK = 2


def anchor_rank(anchors: np.ndarray, epsilon: float = EPSILON_COLLINEAR) -> int:
    """
    Affine rank of a point set: 0 for coincident points, 1 for collinear,
    2 for coplanar, 3 otherwise.

    Singular values of the centered points below ``epsilon`` times the
    largest one count as zero.

    Example:
        >>> anchor_rank(np.array([[-0.5, 0, 0], [0, 0, 0], [0.5, 0, 0]]))
        1
    """
    anchors = np.asarray(anchors, dtype=float)
    if anchors.ndim != 2 or anchors.shape[1] != 3:
        raise ValueError(f"anchors must have shape (M, 3), got {anchors.shape}")
    if anchors.shape[0] < 2:
        return 0

    singular_values = np.linalg.svd(anchors - anchors.mean(axis=0), compute_uv=False)
    if singular_values[0] == 0.0:
        return 0
    return int(np.sum(singular_values > epsilon * singular_values[0]))


def check_anchor_geometry(
    anchors: np.ndarray,
    min_rank: int = MIN_ANCHOR_RANK,
) -> Tuple[bool, str]:
    """
    Check whether anchors can localize a point in their plane.

    Args:
        anchors: Anchor positions, shape (M, 3).
        min_rank: Required affine rank (2: not collinear).

    Returns:
        Tuple of (is_valid, message); the message is empty when valid.

    Example:
        >>> triangle = np.array([[-0.5, -0.29, 0], [0, 0.58, 0], [0.5, -0.29, 0]])
        >>> check_anchor_geometry(triangle)
        (True, '')
    """
    anchors = np.asarray(anchors, dtype=float)
    if anchors.ndim != 2 or anchors.shape[0] < min_rank + 1:
        return False, (
            f"degenerate sensor geometry: need at least {min_rank + 1} anchors, "
            f"got {0 if anchors.ndim != 2 else anchors.shape[0]}"
        )

    rank = anchor_rank(anchors)
    if rank < min_rank:
        shape = "coincident" if rank == 0 else "collinear"
        return False, f"degenerate sensor geometry: anchors are {shape} (rank {rank})"

    return True, ""

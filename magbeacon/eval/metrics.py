"""
Evaluation metrics for beacon and device localization.

Functions:
    calculate_position_error: Euclidean error of one estimate
    compute_position_errors: Error vectors for a batch
    compute_rmse: Root mean square error
    compute_error_stats: Summary statistics of error magnitudes
"""

from typing import Dict, Optional, Union

import numpy as np

from magbeacon.utils.space import VectorLike, distance


def calculate_position_error(expected: VectorLike, estimated: VectorLike) -> float:
    """
    Euclidean distance between ground truth and an estimate.

    Example:
        >>> calculate_position_error((0, 0, 0), (3, 4, 0))
        5.0
    """
    return distance(expected, estimated)


def compute_position_errors(truth: np.ndarray, estimated: np.ndarray) -> np.ndarray:
    """
    Error vectors estimated - truth.

    Args:
        truth: True positions, shape (N, 3).
        estimated: Estimated positions, shape (N, 3).

    Raises:
        ValueError: If the shapes differ.
    """
    truth = np.asarray(truth, dtype=float)
    estimated = np.asarray(estimated, dtype=float)

    if truth.shape != estimated.shape:
        raise ValueError(
            f"Shape mismatch: truth {truth.shape} vs estimated {estimated.shape}"
        )

    return estimated - truth


def compute_rmse(errors: np.ndarray, axis: Optional[int] = None) -> Union[float, np.ndarray]:
    """RMSE over all entries (axis=None) or along one axis."""
    errors = np.asarray(errors, dtype=float)
    if axis is None:
        return float(np.sqrt(np.mean(errors**2)))
    return np.sqrt(np.mean(errors**2, axis=axis))


def compute_error_stats(errors: np.ndarray) -> Dict[str, float]:
    """
    Statistics of error magnitudes.

    Args:
        errors: Error vectors (N, 3) or magnitudes (N,).

    Returns:
        Dictionary with 'mean', 'median', 'rmse', 'p95' and 'max'.
    """
    errors = np.asarray(errors, dtype=float)
    magnitudes = np.linalg.norm(errors, axis=1) if errors.ndim > 1 else np.abs(errors)

    return {
        "mean": float(np.mean(magnitudes)),
        "median": float(np.median(magnitudes)),
        "rmse": float(np.sqrt(np.mean(magnitudes**2))),
        "p95": float(np.percentile(magnitudes, 95)),
        "max": float(np.max(magnitudes)),
    }

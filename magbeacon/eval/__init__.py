"""
Evaluation and Visualization Module.

Modules:
    metrics: Position error metrics (Euclidean error, RMSE, summary stats)
    plots: Localization scene and window spectrum figures
"""

from .metrics import (
    calculate_position_error,
    compute_error_stats,
    compute_position_errors,
    compute_rmse,
)
from .plots import plot_localization_scene, plot_window_spectrum, save_figure

__all__ = [
    # Metrics
    "calculate_position_error",
    "compute_position_errors",
    "compute_rmse",
    "compute_error_stats",
    # Plots
    "plot_localization_scene",
    "plot_window_spectrum",
    "save_figure",
]

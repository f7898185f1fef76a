"""
Visualization of beacon localization scenes.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np


def plot_localization_scene(
    beacons_true: np.ndarray,
    beacons_est: Optional[np.ndarray] = None,
    device_true: Optional[np.ndarray] = None,
    device_est: Optional[np.ndarray] = None,
    sensor_offsets: Optional[np.ndarray] = None,
    title: str = "Magnetic Beacon Localization",
) -> plt.Figure:
    """
    Plot beacons and device positions in the horizontal plane.

    Args:
        beacons_true: True beacon positions, shape (B, 2+).
        beacons_est: Surveyed beacon positions, shape (B, 2+) (optional).
        device_true: True device positions, shape (K, 2+) (optional).
        device_est: Estimated device positions, shape (K, 2+) (optional).
        sensor_offsets: Sensor mounting offsets, drawn around the first true
            device position, shape (S, 2+) (optional).
        title: Plot title.

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(9, 8))
    beacons_true = np.atleast_2d(beacons_true)

    ax.plot(beacons_true[:, 0], beacons_true[:, 1], "s", color="blue",
            markersize=12, label="Beacons (true)")
    for i, beacon in enumerate(beacons_true):
        ax.text(beacon[0], beacon[1] + 0.2, f"B{i}", fontsize=10,
                ha="center", color="blue")

    if beacons_est is not None:
        beacons_est = np.atleast_2d(beacons_est)
        ax.plot(beacons_est[:, 0], beacons_est[:, 1], "x", color="orange",
                markersize=12, markeredgewidth=2, label="Beacons (surveyed)")

    if device_true is not None:
        device_true = np.atleast_2d(device_true)
        ax.plot(device_true[:, 0], device_true[:, 1], "g-o", linewidth=1.5,
                markersize=8, alpha=0.7, label="Device (true)")

        if sensor_offsets is not None:
            sensors = device_true[0, :2] + np.atleast_2d(sensor_offsets)[:, :2]
            ax.plot(sensors[:, 0], sensors[:, 1], "^", color="gray",
                    markersize=7, label="Sensors")

    if device_est is not None:
        device_est = np.atleast_2d(device_est)
        ax.plot(device_est[:, 0], device_est[:, 1], "r+", markersize=14,
                markeredgewidth=2, label="Device (estimated)")

    ax.set_xlabel("X (m)", fontsize=12)
    ax.set_ylabel("Y (m)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis("equal")

    plt.tight_layout()
    return fig


def plot_window_spectrum(
    magnitudes: np.ndarray,
    sample_rate: float,
    beacon_bins: Optional[List[int]] = None,
    title: str = "Window Spectrum",
) -> plt.Figure:
    """
    Stem plot of one window's single-sided magnitude spectrum.

    Args:
        magnitudes: Magnitude per bin for bins 0..N-1.
        sample_rate: Sampling rate in Hz, to label the frequency axis.
        beacon_bins: Bins to highlight (optional).
        title: Plot title.
    """
    magnitudes = np.asarray(magnitudes, dtype=float)
    n = len(magnitudes)
    half = n // 2
    freqs = np.arange(half) * sample_rate / n

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.stem(freqs[1:], magnitudes[1:half])

    if beacon_bins:
        for k in beacon_bins:
            ax.axvline(k * sample_rate / n, color="red", alpha=0.3, linestyle="--")

    ax.set_xlabel("Frequency (Hz)", fontsize=12)
    ax.set_ylabel("Intensity (T)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("png",),
) -> List[Path]:
    """Save a figure in each format under ``out_dir``; returns the paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        filepath = out_dir / f"{name}.{fmt}"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        paths.append(filepath)

    return paths

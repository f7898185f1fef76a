"""
Per-sensor spectral intensity extraction.

A Spectrum holds complex DFT values indexed by (buffer slot, frequency bin),
one row per sample slot of the sensor it belongs to. Only the handful of bins
that correspond to beacon frequencies are ever queried, so each bin is
evaluated on demand as a single DFT output rather than as a full transform:

    X[k] = (2 / N) · Σ_j x[j] · W[k, j]

where W is the shared twiddle table. With the 2/N normalization a sinusoid
of amplitude A that completes an integer number of cycles k in the window
yields |X[k]| = A.

A magnitude of exactly 0 means no detectable signal in that bin for that
window; the position estimator treats it as a missing measurement.
"""

import warnings
from typing import Iterable

import numpy as np

from magbeacon.config import MIN_BINS
from magbeacon.spectral.twiddle import build_twiddle_table

# Bin offsets smaller than this are treated as exact bin centres.
BIN_ALIGNMENT_TOL = 1e-6


def frequency_to_bin(frequency: float, sample_rate: float, sample_size: int) -> int:
    """
    Map an emission frequency onto the nearest DFT bin.

    Implements k = round(f · N / f_s). The bin spacing is f_s / N; a beacon
    frequency that is not a multiple of it leaks into neighbouring bins and
    its intensity is underestimated, so a UserWarning is emitted.

    Args:
        frequency: Emission frequency in Hz.
        sample_rate: Acquisition rate f_s in Hz.
        sample_size: Window length N.

    Returns:
        Bin index in [0, N/2).

    Raises:
        ValueError: If the frequency is negative or not below Nyquist.

    Example:
        >>> frequency_to_bin(36.0, sample_rate=220.0, sample_size=110)
        18
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    if frequency < 0:
        raise ValueError(f"frequency must be non-negative, got {frequency}")
    if frequency >= sample_rate / 2.0:
        raise ValueError(
            f"frequency {frequency} Hz is not below Nyquist ({sample_rate / 2.0} Hz)"
        )

    exact = frequency * sample_size / sample_rate
    k = int(round(exact))
    if abs(exact - k) > BIN_ALIGNMENT_TOL:
        warnings.warn(
            f"Frequency {frequency} Hz falls between bins (k={exact:.3f}); "
            f"using bin {k}. Choose frequencies that are multiples of "
            f"{sample_rate / sample_size:.4g} Hz to avoid leakage.",
            UserWarning,
        )
    return k


class Spectrum:
    """
    Complex intensity store for one sensor.

    Attributes:
        sample_size: Window length N.
        amount_of_buffers: Number of slots, matching the sensor buffer.
        normalization: 2 / N.
    """

    def __init__(self, sample_size: int, amount_of_buffers: int = 2):
        """
        Allocate the (slot, bin_index) array and request the shared twiddle table.

        Raises:
            ValueError: If sample_size <= 10 or amount_of_buffers < 1.
        """
        if sample_size <= MIN_BINS or amount_of_buffers < 1:
            raise ValueError(
                f"Invalid spectrum configuration: sample_size={sample_size} "
                f"(must be > {MIN_BINS}), amount_of_buffers={amount_of_buffers} "
                f"(must be >= 1)"
            )

        self.sample_size = int(sample_size)
        self.amount_of_buffers = int(amount_of_buffers)
        self.normalization = 2.0 / self.sample_size
        self._values = np.zeros((self.amount_of_buffers, self.sample_size), dtype=complex)
        self._table = build_twiddle_table(self.sample_size)

    @property
    def is_initialized(self) -> bool:
        """True when the shared table matches N and the store is allocated."""
        return (
            self._table is not None
            and self._table.sample_size == self.sample_size
            and self._values is not None
            and self.sample_size > MIN_BINS
        )

    def _check_initialized(self) -> None:
        if not self.is_initialized:
            raise RuntimeError(
                f"Spectrum(sample_size={self.sample_size}) is not initialized: "
                f"shared twiddle table was built for "
                f"sample_size={self._table.sample_size}"
            )

    def _check_bin(self, bin_index: int) -> None:
        if not 0 <= bin_index < self.sample_size:
            raise IndexError(f"bin must be in [0, {self.sample_size - 1}], got {bin_index}")

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < self.amount_of_buffers:
            raise IndexError(
                f"slot must be in [0, {self.amount_of_buffers - 1}], got {slot}"
            )

    def compute_intensity(self, samples: np.ndarray, bin_index: int) -> complex:
        """
        Evaluate one normalized DFT bin of a sample window.

        Args:
            samples: Window of N real samples.
            bin_index: Frequency bin k.

        Returns:
            Complex value (2/N) · Σ_j samples[j] · exp(-2πi·k·j/N).
        """
        self._check_initialized()
        samples = np.asarray(samples, dtype=float)
        if samples.shape != (self.sample_size,):
            raise ValueError(
                f"samples must have shape ({self.sample_size},), got {samples.shape}"
            )
        self._check_bin(bin_index)

        return complex(self.normalization * np.dot(self._table.row(bin_index), samples))

    def update(self, samples: np.ndarray, slot: int, bins: Iterable[int]) -> None:
        """Compute the requested bins of one window and store them in ``slot``."""
        self._check_slot(slot)
        for bin_index in bins:
            self._values[slot, bin_index] = self.compute_intensity(samples, bin_index)

    def value(self, slot: int, bin_index: int) -> complex:
        self._check_slot(slot)
        self._check_bin(bin_index)
        return complex(self._values[slot, bin_index])

    def get_window_intensity(self, bin_index: int, buffer) -> float:
        """
        Magnitude of a bin for the last completed window of a sensor.

        The slot read is the one behind the buffer's active slot, i.e. the
        window the producer finished most recently.

        Args:
            bin_index: Frequency bin.
            buffer: The sensor's CircularSampleBuffer.

        Returns:
            |X[slot, bin_index]| >= 0.
        """
        if buffer.amount_of_buffers != self.amount_of_buffers:
            raise ValueError(
                f"Buffer has {buffer.amount_of_buffers} slots, "
                f"spectrum has {self.amount_of_buffers}"
            )
        slot = (buffer.active_slot - 1) % self.amount_of_buffers
        return float(abs(self.value(slot, bin_index)))

    def clear(self) -> None:
        self._values[:, :] = 0.0

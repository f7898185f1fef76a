"""
Process-wide DFT twiddle table.

The discrete Fourier transform of a window of N samples is evaluated against
the basis

    W[i, j] = exp(-2πi · i · j / N),   i, j ∈ [0, N)

which depends only on N. Every sensor of a deployment uses the same sample
size, so one table is built on first use and shared read-only afterwards.

Lifecycle:
    - The first call to build_twiddle_table(N) computes and caches the table.
    - Later calls with the same N return the cached table.
    - A call with a different N while a table is cached does not rebuild: it
      returns the cached table and emits a UserWarning. Spectra already
      computed against the cached table stay valid. Callers must pick one
      sample size for the lifetime of the process, or call
      reset_twiddle_table() before switching.

First-time construction is serialized with a lock, so concurrent first
requests from several sensors produce exactly one table.
"""

import threading
import warnings
from typing import Optional

import numpy as np


class TwiddleTable:
    """
    Immutable N × N complex exponential basis.

    Attributes:
        sample_size: N.
        values: Read-only complex array of shape (N, N).
    """

    def __init__(self, sample_size: int):
        self.sample_size = int(sample_size)
        index = np.arange(self.sample_size)
        exponent = np.outer(index, index)
        values = np.exp(-2j * np.pi * exponent / self.sample_size)
        values.flags.writeable = False
        self.values = values

    def row(self, bin_index: int) -> np.ndarray:
        """Basis row for one frequency bin."""
        if not 0 <= bin_index < self.sample_size:
            raise IndexError(f"bin must be in [0, {self.sample_size - 1}], got {bin_index}")
        return self.values[bin_index]

    def __repr__(self) -> str:
        return f"TwiddleTable(sample_size={self.sample_size})"


_table: Optional[TwiddleTable] = None
_lock = threading.Lock()


def build_twiddle_table(sample_size: int) -> TwiddleTable:
    """
    Build the shared twiddle table, or return the one already cached.

    Args:
        sample_size: Window length N the caller needs.

    Returns:
        The cached TwiddleTable. Its sample_size differs from the request when
        another size was cached first; compare before use.
    """
    global _table

    with _lock:
        if _table is None:
            _table = TwiddleTable(sample_size)
        elif _table.sample_size != sample_size:
            warnings.warn(
                f"Twiddle table already built for sample_size={_table.sample_size}; "
                f"ignoring request for sample_size={sample_size}.",
                UserWarning,
            )
        return _table


def get_twiddle_table() -> Optional[TwiddleTable]:
    """Return the cached table, or None if none has been built."""
    return _table


def reset_twiddle_table() -> None:
    """Drop the cached table so the next build uses a new sample size."""
    global _table

    with _lock:
        _table = None

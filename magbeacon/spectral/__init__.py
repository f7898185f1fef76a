"""
Frequency-domain intensity extraction.

Submodules:
    twiddle: Process-wide DFT basis shared by all sensors
    spectrum: Per-sensor (slot, bin) spectra and bin mapping
"""

from magbeacon.spectral.spectrum import (
    BIN_ALIGNMENT_TOL,
    Spectrum,
    frequency_to_bin,
)
from magbeacon.spectral.twiddle import (
    TwiddleTable,
    build_twiddle_table,
    get_twiddle_table,
    reset_twiddle_table,
)

__all__ = [
    "BIN_ALIGNMENT_TOL",
    "Spectrum",
    "frequency_to_bin",
    "TwiddleTable",
    "build_twiddle_table",
    "get_twiddle_table",
    "reset_twiddle_table",
]

"""
Acquisition configuration.

All buffers and spectra are allocated once at startup for a fixed sample
size, so the configuration is an immutable value validated on construction.

Parameters:
    sample_size: Samples per window (N). Must exceed MIN_BINS (10) so the
        spectrum has enough bins to separate beacon frequencies.
    amount_of_buffers: Number of alternating sample slots (2 for double
        buffering, at least 1).
    sample_rate: Acquisition ticks per second. Only used to derive the tick
        period and to map beacon frequencies onto DFT bins.

Example:
    >>> config = AcquisitionConfig(sample_size=110, sample_rate=220.0)
    >>> config.delta_time
    0.004545454545454545
    >>> config.bin_for(36.0)
    18
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np

MIN_BINS = 10


@dataclass(frozen=True)
class AcquisitionConfig:
    """Sampling parameters shared by every sensor of a deployment."""

    sample_size: int = 110
    amount_of_buffers: int = 2
    sample_rate: float = 220.0

    def __post_init__(self) -> None:
        """Validate sampling parameters."""
        for name in ("sample_size", "amount_of_buffers"):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int, got {type(value)}")
            object.__setattr__(self, name, int(value))

        if self.sample_size <= MIN_BINS:
            raise ValueError(
                f"sample_size must be greater than {MIN_BINS}, got {self.sample_size}"
            )
        if self.amount_of_buffers < 1:
            raise ValueError(
                f"amount_of_buffers must be >= 1, got {self.amount_of_buffers}"
            )
        if not self.sample_rate > 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")

    @property
    def delta_time(self) -> float:
        """Tick period in seconds."""
        return 1.0 / self.sample_rate

    @property
    def frequency_resolution(self) -> float:
        """Width of one DFT bin in Hz."""
        return self.sample_rate / self.sample_size

    @property
    def window_duration(self) -> float:
        """Duration of one completed sample window in seconds."""
        return self.sample_size / self.sample_rate

    def bin_for(self, frequency: float) -> int:
        """Map an emission frequency (Hz) onto its DFT bin."""
        from magbeacon.spectral.spectrum import frequency_to_bin

        return frequency_to_bin(frequency, self.sample_rate, self.sample_size)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AcquisitionConfig":
        """
        Build a configuration from a plain mapping.

        Raises:
            ValueError: If the mapping contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(
                f"Unknown configuration keys: {sorted(unknown)}. "
                f"Expected a subset of {sorted(known)}"
            )
        return cls(**data)


def load_config(path: Union[str, Path]) -> AcquisitionConfig:
    """
    Load an AcquisitionConfig from a JSON file.

    The file holds a single object, e.g.
    ``{"sample_size": 110, "amount_of_buffers": 2, "sample_rate": 220}``.
    Missing keys take their defaults.
    """
    path = Path(path)
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object, got {type(data).__name__}")
    return AcquisitionConfig.from_dict(data)

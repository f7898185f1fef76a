"""
Magnetic sensor mounted on the device.

A MagneticSensor couples a fixed mounting offset (device frame) with the
acquisition state it owns exclusively: one CircularSampleBuffer for raw
samples and one Spectrum for the extracted intensities. Each acquisition
tick appends the norm of the measured field vector; the superposition of all
beacons then shows up as separate lines in the spectrum of the window.

Bus I/O lives outside this package. Anything with an ``acquire_field_vector()`` method
(a hardware driver, or the simulator in magbeacon.sim) can feed a sensor.
"""

from typing import Any, Iterable, Optional, Protocol

from magbeacon.sensors.buffer import CircularSampleBuffer
from magbeacon.spectral.spectrum import Spectrum
from magbeacon.utils.space import Vector3, VectorLike, as_vector3, norm


class FieldSource(Protocol):
    """Source of magnetic field vectors, one per acquisition tick."""

    def acquire_field_vector(self) -> VectorLike:
        ...


class MagneticSensor:
    """
    One magnetometer of the device's sensor array.

    Attributes:
        device_position: Mounting offset relative to the device origin.
        buffer: Sample arena (producer side written by add_sample).
        spectrum: Complex intensities of completed windows.
        address: Opaque bus address, for bookkeeping only.
    """

    def __init__(
        self,
        device_position: VectorLike,
        sample_size: int,
        amount_of_buffers: int = 2,
        address: Optional[Any] = None,
    ):
        self.device_position: Vector3 = as_vector3(device_position)
        self.address = address
        self.buffer = CircularSampleBuffer(sample_size, amount_of_buffers)
        self.spectrum = Spectrum(sample_size, amount_of_buffers)
        self._producer = self.buffer.producer()
        self._consumer = self.buffer.consumer()

    @property
    def sample_size(self) -> int:
        return self.buffer.sample_size

    @property
    def is_initialized(self) -> bool:
        return self.spectrum.is_initialized

    def add_sample(self, vector: VectorLike) -> bool:
        """
        Append the norm of one field vector.

        Returns:
            True when this sample completed a window.
        """
        return self._producer.append(norm(vector))

    def acquire(self, source: FieldSource) -> bool:
        """Run one acquisition tick against a field source."""
        return self.add_sample(source.acquire_field_vector())

    def process_completed_window(self, bins: Iterable[int]) -> None:
        """
        Consumer step for a completed window.

        Evaluates the requested bins of the completed window, stores them in
        the spectrum slot of that window, then zero-fills the sample slot.
        """
        window = self._consumer.window()
        self.spectrum.update(window, self._consumer.completed_slot, bins)
        self._consumer.reset()

    def get_intensity(self, bin_index: int) -> float:
        """Magnitude at ``bin_index`` for the last completed window."""
        return self.spectrum.get_window_intensity(bin_index, self.buffer)

    def reset_sample_cache(self) -> None:
        self._consumer.reset()

    def __repr__(self) -> str:
        return (
            f"MagneticSensor(device_position={self.device_position}, "
            f"sample_size={self.sample_size}, address={self.address!r})"
        )

"""
Simulated beacon fields for tests and examples.

Beacons are vertical point dipoles whose moment oscillates at the beacon
frequency:

    m_b(t) = m_b · sin(2π f_b t) · ẑ

and the field seen by a sensor is a static background plus the sum of all
beacon dipole fields (magbeacon.models.dipole.dipole_field). A sensor samples
the norm of that vector. With a vertical background B₀ much stronger than
the beacon fields and sensors in the beacons' equatorial plane,

    ‖B(t)‖ = B₀ - Σ_b I_b sin(2π f_b t)

so every beacon appears as a line of amplitude I_b (its equatorial
intensity) at its own bin, and the static background lands in bin 0.

Sampling runs mirror the deployed producer/consumer loop: one acquisition per
sensor per tick, and the consumer step on every sensor whose window just
completed.
"""

from typing import Iterable, Optional

import numpy as np

from magbeacon.config import AcquisitionConfig
from magbeacon.models.dipole import dipole_field
from magbeacon.navigation.types import Device, Environment
from magbeacon.utils.space import VectorLike

# Vertical geomagnetic-scale background (T)
VERTICAL_BACKGROUND_FIELD = np.array([0.0, 0.0, 50e-6])


class BeaconFieldSimulator:
    """
    Field generator for a set of beacons at known (true) positions.

    Attributes:
        environment: Beacons with true positions set.
        background_field: Static field vector added everywhere (T).
        noise_std: Standard deviation of white noise per axis (T).
    """

    def __init__(
        self,
        environment: Environment,
        background_field: np.ndarray = VERTICAL_BACKGROUND_FIELD,
        noise_std: float = 0.0,
        rng: Optional[np.random.Generator] = None,
    ):
        missing = [i for i, b in enumerate(environment.beacons) if b.position is None]
        if missing:
            raise ValueError(f"Simulated beacons need positions, missing for {missing}")
        if noise_std < 0:
            raise ValueError(f"noise_std must be non-negative, got {noise_std}")

        self.environment = environment
        self.background_field = np.asarray(background_field, dtype=float).reshape(3)
        self.noise_std = noise_std
        self.rng = rng if rng is not None else np.random.default_rng()

    def field_at(self, point: VectorLike, t: float) -> np.ndarray:
        """Field vector at ``point`` and time ``t`` (s)."""
        point = np.asarray(point, dtype=float)
        field = self.background_field.copy()

        for beacon in self.environment.beacons:
            moment = beacon.magnetic_moment * np.sin(2.0 * np.pi * beacon.frequency * t)
            field += dipole_field(point, beacon.position.as_array(),
                                  np.array([0.0, 0.0, moment]))

        if self.noise_std > 0:
            field += self.rng.normal(0.0, self.noise_std, size=3)

        return field


class SimulatedFieldSource:
    """
    FieldSource for one sensor held at a fixed world position.

    Each acquisition returns the field at the current tick and advances time
    by one sample period.
    """

    def __init__(
        self,
        simulator: BeaconFieldSimulator,
        point: VectorLike,
        sample_rate: float,
        start_time: float = 0.0,
    ):
        self.simulator = simulator
        self.point = np.asarray(point, dtype=float)
        self.sample_rate = sample_rate
        self.start_time = start_time
        self.tick = 0

    @property
    def time(self) -> float:
        return self.start_time + self.tick / self.sample_rate

    def acquire_field_vector(self) -> np.ndarray:
        field = self.simulator.field_at(self.point, self.time)
        self.tick += 1
        return field


def run_sampling(
    device: Device,
    simulator: BeaconFieldSimulator,
    device_position: VectorLike,
    config: AcquisitionConfig,
    bins: Iterable[int],
    n_samples: Optional[int] = None,
    start_time: float = 0.0,
) -> float:
    """
    Sample the simulated field with every sensor of a device.

    Args:
        device: Device whose sensors acquire the samples.
        simulator: Field generator.
        device_position: True device position during the run.
        config: Sampling configuration.
        bins: Bins evaluated by the consumer step of each completed window.
        n_samples: Ticks to run. Defaults to one full window.
        start_time: Time of the first tick (s).

    Returns:
        Time of the tick following the run, to chain runs.
    """
    n_samples = config.sample_size if n_samples is None else n_samples
    bins = list(bins)

    sources = [
        SimulatedFieldSource(simulator, point, config.sample_rate, start_time)
        for point in device.sensor_positions(device_position)
    ]

    for _ in range(n_samples):
        for sensor, source in zip(device.sensors, sources):
            if sensor.acquire(source):
                sensor.process_completed_window(bins)

    return start_time + n_samples * config.delta_time

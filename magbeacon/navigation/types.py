"""
Beacons, device and environment.

These containers aggregate the pieces the localization functions work on.
Beacon and device positions are mutable: they are written by
survey_beacons() and update_device_position() and nowhere else.

Frame Conventions:
    - One Cartesian frame shared by the environment and the device.
    - Sensor offsets are expressed in that frame relative to the device
      origin (the device does not rotate).
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from magbeacon.config import AcquisitionConfig
from magbeacon.sensors.magnetic_sensor import MagneticSensor
from magbeacon.utils.geometry import check_anchor_geometry
from magbeacon.utils.space import Vector3, VectorLike, as_vector3

MIN_SENSORS = 3


@dataclass
class Beacon:
    """
    Magnetic dipole beacon.

    Attributes:
        magnetic_moment: Dipole moment magnitude (A·m²).
        frequency: Emission frequency (Hz).
        bin_index: DFT bin of the emission frequency for the deployment's
            sampling configuration.
        position: Surveyed position, or None while unknown.
    """

    magnetic_moment: float
    frequency: float
    bin_index: int
    position: Optional[Vector3] = None

    def __post_init__(self) -> None:
        if self.magnetic_moment <= 0:
            raise ValueError(
                f"magnetic_moment must be positive, got {self.magnetic_moment}"
            )
        if self.bin_index < 1:
            raise ValueError(
                f"bin_index must be >= 1 (bin 0 is the static field), got {self.bin_index}"
            )
        if self.position is not None:
            self.position = as_vector3(self.position)

    @classmethod
    def create(
        cls,
        magnetic_moment: float,
        frequency: float,
        config: AcquisitionConfig,
        position: Optional[VectorLike] = None,
    ) -> "Beacon":
        """Create a beacon whose bin is derived from the sampling configuration."""
        return cls(
            magnetic_moment=magnetic_moment,
            frequency=frequency,
            bin_index=config.bin_for(frequency),
            position=None if position is None else as_vector3(position),
        )

    @property
    def is_surveyed(self) -> bool:
        return self.position is not None


@dataclass
class Device:
    """
    Mobile platform carrying the magnetometer array.

    Attributes:
        sensors: Mounted sensors. Their offsets never change.
        position: Current position estimate of the device origin.
    """

    sensors: List[MagneticSensor]
    position: Vector3 = field(default_factory=Vector3)

    def __post_init__(self) -> None:
        self.position = as_vector3(self.position)

    @classmethod
    def create(
        cls,
        sensor_offsets: List[VectorLike],
        config: AcquisitionConfig,
        position: VectorLike = (0.0, 0.0, 0.0),
    ) -> "Device":
        """Build a device with one sensor per mounting offset."""
        sensors = [
            MagneticSensor(offset, config.sample_size, config.amount_of_buffers, address=index)
            for index, offset in enumerate(sensor_offsets)
        ]
        return cls(sensors=sensors, position=as_vector3(position))

    @property
    def is_initialized(self) -> bool:
        """At least three non-collinear sensors, all initialized, with one sample size."""
        if len(self.sensors) < MIN_SENSORS:
            return False
        if not check_anchor_geometry(self.sensor_offsets())[0]:
            return False
        if len({sensor.sample_size for sensor in self.sensors}) != 1:
            return False
        return all(sensor.is_initialized for sensor in self.sensors)

    def sensor_offsets(self) -> np.ndarray:
        """Mounting offsets, shape (n_sensors, 3)."""
        return np.array([sensor.device_position.as_array() for sensor in self.sensors])

    def sensor_positions(self, device_position: Optional[VectorLike] = None) -> np.ndarray:
        """World positions of the sensors for a device position (default: current)."""
        origin = np.asarray(self.position if device_position is None else device_position,
                            dtype=float)
        return origin + self.sensor_offsets()

    def intensities(self, bin_index: int) -> np.ndarray:
        """Last completed-window magnitude at ``bin_index`` for every sensor."""
        return np.array([sensor.get_intensity(bin_index) for sensor in self.sensors])


@dataclass
class Environment:
    """
    Set of beacons sharing the device's coordinate frame.

    Beacons must be distinguishable: two beacons on the same DFT bin would be
    indistinguishable in the spectrum.
    """

    beacons: List[Beacon]

    def __post_init__(self) -> None:
        bins = self.bins()
        if len(set(bins)) != len(bins):
            raise ValueError(f"Beacon frequencies must map to distinct bins, got {bins}")

    @property
    def is_initialized(self) -> bool:
        return len(self.beacons) > 0

    def bins(self) -> List[int]:
        return [beacon.bin_index for beacon in self.beacons]

    def surveyed_beacons(self) -> List[Beacon]:
        return [beacon for beacon in self.beacons if beacon.is_surveyed]

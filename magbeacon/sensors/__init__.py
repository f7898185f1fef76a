"""
Sample acquisition for the device's magnetometers.

Modules:
    buffer: Double-buffered circular sample arena with producer/consumer handles
    magnetic_sensor: Magnetometer with mounting offset, buffer and spectrum
"""

from magbeacon.sensors.buffer import (
    CircularSampleBuffer,
    SampleConsumer,
    SampleProducer,
)
from magbeacon.sensors.magnetic_sensor import FieldSource, MagneticSensor

__all__ = [
    "CircularSampleBuffer",
    "SampleConsumer",
    "SampleProducer",
    "FieldSource",
    "MagneticSensor",
]

"""
Beacon survey and device tracking.

Modules:
    types: Beacon, Device and Environment containers
    localization: survey_beacons() and update_device_position()
"""

from magbeacon.navigation.localization import survey_beacons, update_device_position
from magbeacon.navigation.types import MIN_SENSORS, Beacon, Device, Environment

__all__ = [
    "MIN_SENSORS",
    "Beacon",
    "Device",
    "Environment",
    "survey_beacons",
    "update_device_position",
]

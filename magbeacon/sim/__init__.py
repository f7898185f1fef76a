"""
Simulation utilities for generating synthetic magnetometer samples.

Modules:
    beacon_field: Oscillating dipole beacons, per-sensor field sources and
        sampling runs over a device
"""

from magbeacon.sim.beacon_field import (
    VERTICAL_BACKGROUND_FIELD,
    BeaconFieldSimulator,
    SimulatedFieldSource,
    run_sampling,
)

__all__ = [
    "VERTICAL_BACKGROUND_FIELD",
    "BeaconFieldSimulator",
    "SimulatedFieldSource",
    "run_sampling",
]

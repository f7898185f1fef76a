"""
Beacon survey and device tracking.

Both functions read the intensities of the last completed window of every
sensor, hand them to estimate_position() and write the result back into the
Beacon or Device state.

Survey:
    The device position is known. For each beacon, the sensors' intensities
    at the beacon's bin constrain the beacon position with anchors
    p_device + o_i.

Tracking:
    Beacon positions are known. Every (surveyed beacon, sensor) pair
    contributes one intensity with anchor p_beacon - o_i; all pairs are
    solved jointly for the device origin.

An unlocalized estimate never overwrites a position. It is returned to the
caller (who decides whether to wait for the next window) and reported with
a UserWarning.
"""

import warnings
from typing import Dict

import numpy as np

from magbeacon.navigation.types import Device, Environment
from magbeacon.positioning.multilateration import PositionEstimate, estimate_position


def _require_initialized(device: Device, environment: Environment) -> None:
    if not device.is_initialized:
        raise RuntimeError(
            "Device is not initialized: it needs at least 3 non-collinear initialized "
            "sensors sharing one sample size"
        )
    if not environment.is_initialized:
        raise RuntimeError("Environment has no beacons")


def survey_beacons(
    device: Device,
    environment: Environment,
    **solver_options,
) -> Dict[int, PositionEstimate]:
    """
    Estimate every beacon position from the device's current window.

    Args:
        device: Device with a known position and completed spectra.
        environment: Beacons to survey.
        **solver_options: Forwarded to estimate_position (method, max_iter,
            tol, ...).

    Returns:
        Mapping beacon index -> PositionEstimate.

    Raises:
        RuntimeError: If the device or environment is not initialized.
    """
    _require_initialized(device, environment)

    offsets = device.sensor_offsets()
    device_position = device.position.as_array()
    estimates = {}

    for index, beacon in enumerate(environment.beacons):
        estimate = estimate_position(
            device.intensities(beacon.bin_index),
            device_position,
            beacon.magnetic_moment,
            sensor_offsets=offsets,
            offset_sign=1.0,
            **solver_options,
        )
        if estimate.localized:
            beacon.position = estimate.position
        else:
            warnings.warn(
                f"Beacon {index} ({beacon.frequency} Hz) unlocalized: {estimate.reason}",
                UserWarning,
            )
        estimates[index] = estimate

    return estimates


def update_device_position(
    device: Device,
    environment: Environment,
    **solver_options,
) -> PositionEstimate:
    """
    Estimate the device position from the surveyed beacons.

    Args:
        device: Device with completed spectra.
        environment: Beacons; only surveyed ones are used.
        **solver_options: Forwarded to estimate_position.

    Returns:
        PositionEstimate of the device origin. ``device.position`` is updated
        only when it is localized.

    Raises:
        RuntimeError: If the device or environment is not initialized.
    """
    _require_initialized(device, environment)

    beacons = environment.surveyed_beacons()
    if not beacons:
        estimate = PositionEstimate.unlocalized("no surveyed beacons")
        warnings.warn(f"Device unlocalized: {estimate.reason}", UserWarning)
        return estimate

    offsets = device.sensor_offsets()
    n_sensors = len(offsets)

    intensities = np.concatenate([device.intensities(beacon.bin_index) for beacon in beacons])
    beacon_positions = np.repeat(
        np.array([beacon.position.as_array() for beacon in beacons]), n_sensors, axis=0
    )
    moments = np.repeat([beacon.magnetic_moment for beacon in beacons], n_sensors)
    pair_offsets = np.tile(offsets, (len(beacons), 1))

    estimate = estimate_position(
        intensities,
        beacon_positions,
        moments,
        sensor_offsets=pair_offsets,
        offset_sign=-1.0,
        **solver_options,
    )

    if estimate.localized:
        device.position = estimate.position
    else:
        warnings.warn(f"Device unlocalized: {estimate.reason}", UserWarning)

    return estimate

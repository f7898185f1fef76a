"""
End-to-end tests for beacon survey and device tracking.

Reference scenario:
    - 3 sensors in an equilateral triangle of unit side around the device
    - 4 beacons of equal moment at 36, 40, 80 and 52 Hz
    - 110 samples per window at 220 Hz (bins 18, 20, 40 and 26)
    - Simulated field: vertical background plus oscillating vertical dipoles
"""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from magbeacon.config import AcquisitionConfig
from magbeacon.eval.metrics import calculate_position_error
from magbeacon.navigation import (
    Beacon,
    Device,
    Environment,
    survey_beacons,
    update_device_position,
)
from magbeacon.sim import BeaconFieldSimulator, run_sampling
from magbeacon.utils.space import Vector3

SENSOR_OFFSETS = [
    (-0.5, -0.2886751345948, 0.0),
    (+0.0, +0.5773502691869, 0.0),
    (+0.5, -0.2886751345948, 0.0),
]
MOMENT = 6.999e-8
FREQUENCIES = [36.0, 40.0, 80.0, 52.0]
BEACON_POSITIONS = [
    (-2.0, -1.0, 0.0),
    (-1.5, +1.5, 0.0),
    (+2.5, +0.5, 0.0),
    (+1.5, -1.5, 0.0),
]
TOLERANCE = 0.001


class TestReferenceScenario(unittest.TestCase):

    def setUp(self):
        self.config = AcquisitionConfig(sample_size=110, amount_of_buffers=2,
                                        sample_rate=220.0)
        self.device = Device.create(SENSOR_OFFSETS, self.config)
        self.environment = Environment(
            [Beacon.create(MOMENT, f, self.config) for f in FREQUENCIES]
        )
        truth = Environment([
            Beacon.create(MOMENT, f, self.config, position=p)
            for f, p in zip(FREQUENCIES, BEACON_POSITIONS)
        ])
        self.simulator = BeaconFieldSimulator(truth)

    def survey(self):
        t = run_sampling(self.device, self.simulator, self.device.position,
                         self.config, self.environment.bins())
        return t, survey_beacons(self.device, self.environment)

    def test_bins(self):
        self.assertEqual(self.environment.bins(), [18, 20, 40, 26])

    def test_survey_recovers_beacons(self):
        _, estimates = self.survey()

        self.assertEqual(sorted(estimates), [0, 1, 2, 3])
        for index, truth in enumerate(BEACON_POSITIONS):
            self.assertTrue(estimates[index].localized)
            beacon = self.environment.beacons[index]
            self.assertIs(beacon.position, estimates[index].position)
            self.assertLess(calculate_position_error(truth, beacon.position), TOLERANCE)

    def test_intensities_follow_dipole_law(self):
        self.survey()
        beacon = self.environment.beacons[0]
        measured = self.device.intensities(beacon.bin_index)

        distances = np.linalg.norm(
            np.array(SENSOR_OFFSETS) - np.array(BEACON_POSITIONS[0]), axis=1
        )
        expected = 1e-7 * MOMENT / distances**3
        assert_allclose(measured, expected, rtol=1e-4)

    def test_track_device_after_survey(self):
        t, _ = self.survey()

        for waypoint in [(2.4, 1.8, 0.0), (0.2, 1.2, 0.0)]:
            t = run_sampling(self.device, self.simulator, waypoint, self.config,
                             self.environment.bins(), start_time=t)
            estimate = update_device_position(self.device, self.environment)

            self.assertTrue(estimate.localized)
            self.assertEqual(estimate.n_measurements, 12)
            self.assertIs(self.device.position, estimate.position)
            self.assertLess(calculate_position_error(waypoint, self.device.position),
                            TOLERANCE)

    def test_tracking_with_known_beacons_only(self):
        for beacon, position in zip(self.environment.beacons, BEACON_POSITIONS):
            beacon.position = Vector3(*position)

        run_sampling(self.device, self.simulator, (-1.0, -0.4, 0.0), self.config,
                     self.environment.bins())
        estimate = update_device_position(self.device, self.environment, method="gn")

        self.assertTrue(estimate.localized)
        self.assertLess(calculate_position_error((-1.0, -0.4, 0.0), estimate.position),
                        TOLERANCE)

    def test_partial_window_keeps_previous_intensities(self):
        self.survey()
        before = self.device.intensities(18)

        run_sampling(self.device, self.simulator, (2.4, 1.8, 0.0), self.config,
                     self.environment.bins(), n_samples=50)

        assert_allclose(self.device.intensities(18), before)


class TestUnlocalized(unittest.TestCase):

    def setUp(self):
        self.config = AcquisitionConfig()
        self.device = Device.create(SENSOR_OFFSETS, self.config, position=(0.5, 0.5, 0.0))
        self.environment = Environment([Beacon.create(MOMENT, 36.0, self.config)])

    def test_survey_without_signal_leaves_beacon_unknown(self):
        with pytest.warns(UserWarning, match="unlocalized"):
            estimates = survey_beacons(self.device, self.environment)

        self.assertFalse(estimates[0].localized)
        self.assertIsNone(self.environment.beacons[0].position)

    def test_tracking_without_surveyed_beacons(self):
        with pytest.warns(UserWarning, match="no surveyed beacons"):
            estimate = update_device_position(self.device, self.environment)

        self.assertFalse(estimate.localized)
        self.assertEqual(self.device.position, Vector3(0.5, 0.5, 0.0))

    def test_tracking_without_signal_keeps_position(self):
        self.environment.beacons[0].position = Vector3(1.0, 2.0, 0.0)
        with pytest.warns(UserWarning):
            estimate = update_device_position(self.device, self.environment)

        self.assertFalse(estimate.localized)
        self.assertEqual(self.device.position, Vector3(0.5, 0.5, 0.0))


class TestNotInitialized(unittest.TestCase):

    def test_device_with_two_sensors(self):
        config = AcquisitionConfig()
        device = Device.create(SENSOR_OFFSETS[:2], config)
        environment = Environment([Beacon.create(MOMENT, 36.0, config)])

        with self.assertRaises(RuntimeError):
            survey_beacons(device, environment)
        with self.assertRaises(RuntimeError):
            update_device_position(device, environment)

    def test_device_with_collinear_sensors(self):
        config = AcquisitionConfig()
        device = Device.create([(-0.5, 0.0, 0.0), (0.0, 0.0, 0.0), (0.5, 0.0, 0.0)], config)
        environment = Environment([Beacon.create(MOMENT, 36.0, config)])

        with self.assertRaises(RuntimeError):
            survey_beacons(device, environment)

    def test_empty_environment(self):
        device = Device.create(SENSOR_OFFSETS, AcquisitionConfig())
        with self.assertRaises(RuntimeError):
            survey_beacons(device, Environment([]))


if __name__ == "__main__":
    unittest.main()

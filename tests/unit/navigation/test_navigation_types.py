"""Unit tests for magbeacon.navigation.types."""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from magbeacon.config import AcquisitionConfig
from magbeacon.navigation import Beacon, Device, Environment
from magbeacon.utils.space import Vector3

OFFSETS = [(-0.5, -0.29, 0.0), (0.0, 0.58, 0.0), (0.5, -0.29, 0.0)]


class TestBeacon(unittest.TestCase):

    def test_create_derives_bin(self):
        beacon = Beacon.create(6.999e-8, 36.0, AcquisitionConfig())
        self.assertEqual(beacon.bin_index, 18)
        self.assertFalse(beacon.is_surveyed)

    def test_bin_index_keyword(self):
        beacon = Beacon(magnetic_moment=7e-8, frequency=40.0, bin_index=20)
        self.assertEqual(beacon.bin_index, 20)
        self.assertFalse(hasattr(beacon, "bin"))

    def test_position_coerced_to_vector(self):
        beacon = Beacon(7e-8, 40.0, 20, position=(1.0, 2.0, 0.0))
        self.assertEqual(beacon.position, Vector3(1.0, 2.0, 0.0))
        self.assertTrue(beacon.is_surveyed)

    def test_invalid_moment(self):
        with self.assertRaises(ValueError):
            Beacon(0.0, 40.0, 20)

    def test_static_bin_rejected(self):
        with self.assertRaises(ValueError):
            Beacon(7e-8, 0.0, 0)


class TestDevice(unittest.TestCase):

    def setUp(self):
        self.config = AcquisitionConfig()
        self.device = Device.create(OFFSETS, self.config, position=(1.0, 1.0, 0.0))

    def test_create(self):
        self.assertEqual(len(self.device.sensors), 3)
        self.assertEqual([s.address for s in self.device.sensors], [0, 1, 2])
        self.assertEqual(self.device.position, Vector3(1.0, 1.0, 0.0))
        self.assertTrue(self.device.is_initialized)

    def test_default_position_is_origin(self):
        device = Device.create(OFFSETS, self.config)
        self.assertEqual(device.position, Vector3())

    def test_sensor_offsets_and_positions(self):
        assert_allclose(self.device.sensor_offsets(), np.array(OFFSETS))
        assert_allclose(self.device.sensor_positions(), np.array(OFFSETS) + [1.0, 1.0, 0.0])
        assert_allclose(self.device.sensor_positions((0.0, 0.0, 0.0)), np.array(OFFSETS))

    def test_too_few_sensors(self):
        device = Device.create(OFFSETS[:2], self.config)
        self.assertFalse(device.is_initialized)

    def test_collinear_sensors_not_initialized(self):
        device = Device.create([(-0.5, 0.0, 0.0), (0.0, 0.0, 0.0), (0.5, 0.0, 0.0)],
                               self.config)
        self.assertFalse(device.is_initialized)

    def test_intensities_before_any_window(self):
        assert_allclose(self.device.intensities(18), np.zeros(3))


def test_device_with_mismatched_table_not_initialized():
    Device.create(OFFSETS, AcquisitionConfig(sample_size=110))
    with pytest.warns(UserWarning):
        device = Device.create(OFFSETS, AcquisitionConfig(sample_size=64, sample_rate=128.0))
    assert not device.is_initialized


class TestEnvironment(unittest.TestCase):

    def test_bins_and_survey_state(self):
        config = AcquisitionConfig()
        env = Environment([
            Beacon.create(7e-8, 36.0, config, position=(1.0, 0.0, 0.0)),
            Beacon.create(7e-8, 40.0, config),
        ])
        self.assertTrue(env.is_initialized)
        self.assertEqual(env.bins(), [18, 20])
        self.assertEqual(len(env.surveyed_beacons()), 1)

    def test_empty_environment(self):
        self.assertFalse(Environment([]).is_initialized)

    def test_duplicate_bins_rejected(self):
        with self.assertRaises(ValueError):
            Environment([Beacon(7e-8, 36.0, 18), Beacon(5e-8, 36.5, 18)])


if __name__ == "__main__":
    unittest.main()

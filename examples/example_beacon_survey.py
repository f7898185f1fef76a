"""
Magnetic Beacon Survey and Device Tracking Example.

This script runs the static reference scenario end to end on simulated data:

    1. A device with three magnetometers in a triangular mount sits at the
       origin and samples one window of the field of four beacons.
    2. The beacons are surveyed from the per-sensor spectral intensities.
    3. The device moves to a sequence of waypoints; at each one it samples a
       new window and tracks its own position from the surveyed beacons.

Usage:
    python examples/example_beacon_survey.py
    python examples/example_beacon_survey.py --config acquisition.json --plot
    python examples/example_beacon_survey.py --noise-std 1e-18 --save-dir figs
"""

import argparse

import numpy as np
from tqdm import tqdm

from magbeacon.config import AcquisitionConfig, load_config
from magbeacon.eval import (
    calculate_position_error,
    compute_error_stats,
    plot_localization_scene,
    plot_window_spectrum,
    save_figure,
)
from magbeacon.navigation import (
    Beacon,
    Device,
    Environment,
    survey_beacons,
    update_device_position,
)
from magbeacon.sensors import CircularSampleBuffer
from magbeacon.sim import BeaconFieldSimulator, SimulatedFieldSource, run_sampling
from magbeacon.spectral import Spectrum

SENSOR_OFFSETS = [
    (-0.5, -0.2886751345948, 0.0),
    (+0.0, +0.5773502691869, 0.0),
    (+0.5, -0.2886751345948, 0.0),
]

BEACON_MOMENT = 6.999e-8  # A·m²
BEACON_FREQUENCIES = [36.0, 40.0, 80.0, 52.0]  # Hz
BEACON_POSITIONS = [
    (-2.0, -1.0, 0.0),
    (-1.5, +1.5, 0.0),
    (+2.5, +0.5, 0.0),
    (+1.5, -1.5, 0.0),
]

WAYPOINTS = [
    (2.4, 1.8, 0.0),
    (0.2, 1.2, 0.0),
    (-1.0, -0.4, 0.0),
]


def build_scenario(config: AcquisitionConfig, noise_std: float, seed: int):
    """Create the device, the environment to survey and the simulator."""
    device = Device.create(SENSOR_OFFSETS, config)

    environment = Environment([
        Beacon.create(BEACON_MOMENT, f, config) for f in BEACON_FREQUENCIES
    ])
    true_environment = Environment([
        Beacon.create(BEACON_MOMENT, f, config, position=p)
        for f, p in zip(BEACON_FREQUENCIES, BEACON_POSITIONS)
    ])
    simulator = BeaconFieldSimulator(
        true_environment, noise_std=noise_std, rng=np.random.default_rng(seed)
    )
    return device, environment, simulator


def example_survey(config, device, environment, simulator):
    """Example 1: survey the beacons from a known device position."""
    print("=" * 70)
    print("Example 1: Beacon Survey")
    print("=" * 70)
    print(f"\nSample size: {config.sample_size}, sample rate: {config.sample_rate} Hz")
    print(f"Bin width: {config.frequency_resolution:.3f} Hz, bins: {environment.bins()}")

    t = run_sampling(device, simulator, device.position, config, environment.bins())
    estimates = survey_beacons(device, environment)

    errors = []
    for index, estimate in estimates.items():
        truth = BEACON_POSITIONS[index]
        if not estimate.localized:
            print(f"  Beacon {index}: unlocalized ({estimate.reason})")
            continue
        error = calculate_position_error(truth, estimate.position)
        errors.append(error)
        print(f"  Beacon {index}: true {truth}, estimated "
              f"{np.round(estimate.position.as_array(), 4)}, error {error:.2e} m")

    return t, np.array(errors)


def example_tracking(config, device, environment, simulator, t):
    """Example 2: track the device along the waypoints."""
    print("\n" + "=" * 70)
    print("Example 2: Device Tracking")
    print("=" * 70)

    estimates = []
    errors = []
    for waypoint in tqdm(WAYPOINTS, desc="Tracking", unit="waypoint"):
        t = run_sampling(device, simulator, waypoint, config, environment.bins(),
                         start_time=t)
        estimate = update_device_position(device, environment)
        if estimate.localized:
            estimates.append(estimate.position.as_array())
            errors.append(calculate_position_error(waypoint, estimate.position))
        else:
            estimates.append(np.full(3, np.nan))
            errors.append(np.nan)

    for waypoint, est, err in zip(WAYPOINTS, estimates, errors):
        print(f"  True {waypoint} -> estimated {np.round(est, 4)}, error {err:.2e} m")

    return np.array(estimates), np.array(errors)


def window_magnitudes(config, simulator):
    """Full single-window spectrum at the first sensor, for plotting."""
    buffer = CircularSampleBuffer(config.sample_size, config.amount_of_buffers)
    spectrum = Spectrum(config.sample_size, config.amount_of_buffers)
    source = SimulatedFieldSource(simulator, SENSOR_OFFSETS[0], config.sample_rate)

    while not buffer.append(np.linalg.norm(source.acquire_field_vector())):
        pass

    window = buffer.completed_window()
    return np.array([abs(spectrum.compute_intensity(window, k))
                     for k in range(config.sample_size)])


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--config", type=str, default=None,
                        help="JSON file with sample_size, amount_of_buffers, sample_rate")
    parser.add_argument("--noise-std", type=float, default=0.0,
                        help="White field noise per axis (T)")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--plot", action="store_true", help="Show figures")
    parser.add_argument("--save-dir", type=str, default=None,
                        help="Directory to save figures")
    args = parser.parse_args()

    config = load_config(args.config) if args.config else AcquisitionConfig()
    device, environment, simulator = build_scenario(config, args.noise_std, args.seed)

    t, survey_errors = example_survey(config, device, environment, simulator)
    device_estimates, tracking_errors = example_tracking(
        config, device, environment, simulator, t
    )

    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    if len(survey_errors):
        stats = compute_error_stats(survey_errors)
        print(f"Survey:   RMSE {stats['rmse']:.2e} m, max {stats['max']:.2e} m")
    tracking_errors = tracking_errors[np.isfinite(tracking_errors)]
    if len(tracking_errors):
        stats = compute_error_stats(tracking_errors)
        print(f"Tracking: RMSE {stats['rmse']:.2e} m, max {stats['max']:.2e} m")

    if args.plot or args.save_dir:
        import matplotlib.pyplot as plt

        surveyed = np.array([
            b.position.as_array() if b.is_surveyed else np.full(3, np.nan)
            for b in environment.beacons
        ])
        scene = plot_localization_scene(
            np.array(BEACON_POSITIONS), surveyed,
            device_true=np.array([(0.0, 0.0, 0.0)] + WAYPOINTS),
            device_est=device_estimates,
            sensor_offsets=np.array(SENSOR_OFFSETS),
        )
        spectrum = plot_window_spectrum(
            window_magnitudes(config, simulator), config.sample_rate,
            beacon_bins=environment.bins(),
        )
        if args.save_dir:
            save_figure(scene, args.save_dir, "beacon_survey_scene")
            save_figure(spectrum, args.save_dir, "beacon_window_spectrum")
            print(f"\nFigures saved to {args.save_dir}")
        if args.plot:
            plt.show()


if __name__ == "__main__":
    main()

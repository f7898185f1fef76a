"""Magnetic beacon localization.

This package estimates the positions of magnetic dipole beacons and of a
moving sensing device from magnetic field intensities measured by several
magnetometers mounted on the device.

Subpackages:
- utils: Vector3 value type and vector helpers
- sensors: Double-buffered sample acquisition and the magnetic sensor
- spectral: Shared twiddle table and per-sensor spectra
- models: Forward magnetic dipole model
- estimators: Nonlinear least squares (Gauss-Newton, Levenberg-Marquardt)
- positioning: Intensity-based multilateration
- navigation: Beacons, device, environment, survey and tracking
- sim: Simulated beacon fields for testing and examples
- eval: Position error metrics and figures
"""

__version__ = "0.1.0"

"""Shared fixtures for the magbeacon test suite."""

import pytest

from magbeacon.spectral.twiddle import reset_twiddle_table


@pytest.fixture(autouse=True)
def fresh_twiddle_table():
    """Every test starts without a cached twiddle table."""
    reset_twiddle_table()
    yield
    reset_twiddle_table()

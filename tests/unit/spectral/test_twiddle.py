"""
Unit tests for the process-wide twiddle table.

Tests cover:
    - Table values and immutability
    - Idempotent construction for one sample size
    - Mismatched size requests leave the table unchanged and warn
    - Concurrent first construction
"""

import threading

import numpy as np
import pytest
from numpy.testing import assert_allclose

from magbeacon.spectral import Spectrum
from magbeacon.spectral.twiddle import (
    TwiddleTable,
    build_twiddle_table,
    get_twiddle_table,
    reset_twiddle_table,
)


def test_table_values():
    table = TwiddleTable(16)
    assert table.values.shape == (16, 16)
    assert_allclose(table.values[0], np.ones(16))
    assert_allclose(table.values[1, 1], np.exp(-2j * np.pi / 16))
    assert_allclose(table.values[3, 5], np.exp(-2j * np.pi * 15 / 16))
    assert_allclose(table.values, table.values.T)


def test_table_is_read_only():
    table = TwiddleTable(16)
    with pytest.raises(ValueError):
        table.values[0, 0] = 0.0


def test_row_out_of_range():
    with pytest.raises(IndexError):
        TwiddleTable(16).row(16)


def test_build_is_idempotent():
    assert get_twiddle_table() is None
    first = build_twiddle_table(110)
    second = build_twiddle_table(110)
    assert first is second
    assert get_twiddle_table() is first


def test_mismatched_size_is_ignored_with_warning():
    table = build_twiddle_table(110)
    with pytest.warns(UserWarning, match="already built"):
        other = build_twiddle_table(64)
    assert other is table
    assert other.sample_size == 110


def test_mismatch_leaves_existing_spectra_valid():
    spectrum = Spectrum(110)
    x = np.sin(2 * np.pi * 18 * np.arange(110) / 110)
    before = spectrum.compute_intensity(x, 18)

    with pytest.warns(UserWarning):
        mismatched = Spectrum(64)

    assert spectrum.is_initialized
    assert not mismatched.is_initialized
    assert spectrum.compute_intensity(x, 18) == before
    with pytest.raises(RuntimeError):
        mismatched.compute_intensity(np.zeros(64), 1)


def test_reset_allows_new_size():
    build_twiddle_table(110)
    reset_twiddle_table()
    assert build_twiddle_table(64).sample_size == 64


def test_concurrent_first_build_creates_one_table():
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(build_twiddle_table(128))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8
    assert all(table is results[0] for table in results)

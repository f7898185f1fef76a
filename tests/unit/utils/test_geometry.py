"""Unit tests for magbeacon.utils.geometry."""

import numpy as np
import pytest

from magbeacon.utils.geometry import anchor_rank, check_anchor_geometry

TRIANGLE = np.array([[-0.5, -0.29, 0.0], [0.0, 0.58, 0.0], [0.5, -0.29, 0.0]])
LINE = np.array([[-0.5, 0.0, 0.0], [0.0, 0.0, 0.0], [0.5, 0.0, 0.0]])


def test_anchor_rank():
    assert anchor_rank(np.zeros((3, 3))) == 0
    assert anchor_rank(LINE) == 1
    assert anchor_rank(TRIANGLE) == 2
    assert anchor_rank(np.vstack([TRIANGLE, [[0.0, 0.0, 1.0]]])) == 3


def test_nearly_collinear_counts_as_collinear():
    bent = LINE.copy()
    bent[1, 1] = 1e-9
    assert anchor_rank(bent) == 1


def test_triangle_is_valid():
    assert check_anchor_geometry(TRIANGLE) == (True, "")


def test_collinear_is_rejected():
    ok, message = check_anchor_geometry(LINE)
    assert not ok
    assert "collinear" in message


def test_coincident_is_rejected():
    ok, message = check_anchor_geometry(np.ones((4, 3)))
    assert not ok
    assert "coincident" in message


def test_too_few_anchors():
    ok, message = check_anchor_geometry(TRIANGLE[:2])
    assert not ok
    assert "at least 3" in message


def test_wrong_dimension():
    with pytest.raises(ValueError):
        anchor_rank(np.zeros((3, 2)))

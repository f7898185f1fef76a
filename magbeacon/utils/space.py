"""
3D vector utilities.

Positions (beacons, device, sensor mounting offsets) and measured magnetic
field vectors all live in one right-handed Cartesian frame. Stored positions
use the immutable ``Vector3`` value type; computations work on NumPy arrays
of shape (3,). Every helper accepts either form.
"""

from dataclasses import dataclass
from typing import Iterator, Union

import numpy as np


@dataclass(frozen=True)
class Vector3:
    """
    Immutable 3D vector.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.

    Example:
        >>> v = Vector3(3.0, 4.0, 0.0)
        >>> norm(v)
        5.0
        >>> np.asarray(v)
        array([3., 4., 0.])
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=dtype or float)

    def as_array(self) -> np.ndarray:
        """Return the components as a new float array of shape (3,)."""
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, values) -> "Vector3":
        """Build a vector from any 3-element array-like."""
        arr = _as_array3(values)
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))


VectorLike = Union[Vector3, np.ndarray, tuple, list]


def _as_array3(value) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-element vector, got shape {arr.shape}")
    return arr


def as_vector3(value: VectorLike) -> Vector3:
    """Coerce a Vector3 or 3-element array-like to Vector3."""
    if isinstance(value, Vector3):
        return value
    return Vector3.from_array(value)


def norm(vector: VectorLike) -> float:
    """Euclidean norm of a 3D vector."""
    return float(np.linalg.norm(_as_array3(vector)))


def difference(a: VectorLike, b: VectorLike) -> np.ndarray:
    """Component-wise difference a - b."""
    return _as_array3(a) - _as_array3(b)


def distance(a: VectorLike, b: VectorLike) -> float:
    """
    Euclidean distance between two points.

    Args:
        a: First point.
        b: Second point.

    Returns:
        ‖a - b‖ in the units of the inputs.
    """
    return float(np.linalg.norm(difference(a, b)))

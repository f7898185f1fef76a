"""
Vector and space helpers shared by every stage of the pipeline.
"""

from .geometry import anchor_rank, check_anchor_geometry
from .space import Vector3, as_vector3, difference, distance, norm

__all__ = [
    'Vector3',
    'as_vector3',
    'difference',
    'distance',
    'norm',
    'anchor_rank',
    'check_anchor_geometry',
]

"""Spatial indexes over fixed receptor atoms."""

from .base import SpatialIndex
from .brick import BrickIndex, brick_distance_sqr

__all__ = ["SpatialIndex", "BrickIndex", "brick_distance_sqr"]

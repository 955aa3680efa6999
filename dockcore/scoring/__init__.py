"""Ligand/receptor interaction evaluators."""

from .base import InteractionEvaluator
from .cache import GridCache
from .direct import DirectEvaluator
from .geometry import DEFAULT_ANGLE, GeometryCorrector, bond_angle

__all__ = [
    "DEFAULT_ANGLE",
    "DirectEvaluator",
    "GeometryCorrector",
    "GridCache",
    "InteractionEvaluator",
    "bond_angle",
]

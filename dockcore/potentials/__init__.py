"""Pairwise potential tables."""

from .base import PotentialTable
from .tabulated import PairEnergy, TabulatedPotential

__all__ = ["PairEnergy", "PotentialTable", "TabulatedPotential"]

"""
dockcore - Ligand/receptor interaction energies for docking.

Two evaluators score the same quantity:
- GridCache: per-atom-type grids precomputed once, then interpolated
- DirectEvaluator: pair sums over a spatial index on every call

Both apply a directional correction for halogen and sulfur contacts.

Quick Start:
    >>> from dockcore import GridCache, GridDims
    >>> cache = GridCache("1.0", GridDims.from_box(center, size))
    >>> cache.populate(model, table, atom_types_needed=[0, 4, 8])
    >>> energy = cache.eval(model)
"""

__version__ = "0.1.0"

from . import log  # noqa: F401
from .config import ScoringConfig
from .errors import (
    AtomTypingMismatchError,
    CacheMismatchError,
    EnergyMismatchError,
    GridDimsMismatchError,
)
from .grids import Grid, GridDim, GridDims
from .potentials import PotentialTable, TabulatedPotential
from .scoring import DirectEvaluator, GeometryCorrector, GridCache
from .system import Atom, AtomIndex, AtomTyping, Model

__all__ = [
    "Atom",
    "AtomIndex",
    "AtomTyping",
    "AtomTypingMismatchError",
    "CacheMismatchError",
    "DirectEvaluator",
    "EnergyMismatchError",
    "GeometryCorrector",
    "Grid",
    "GridCache",
    "GridDim",
    "GridDims",
    "GridDimsMismatchError",
    "Model",
    "PotentialTable",
    "ScoringConfig",
    "TabulatedPotential",
]

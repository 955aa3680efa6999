"""Regular 3D lattices."""

from .dims import GridDim, GridDims
from .grid import Grid

__all__ = ["Grid", "GridDim", "GridDims"]

"""Brick (coarse cell) spatial index over receptor atoms."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .base import SpatialIndex

if TYPE_CHECKING:
    from ..grids import GridDims
    from ..system import Atom


def brick_distance_sqr(
    begin: NDArray[np.floating], end: NDArray[np.floating], points: ArrayLike
) -> NDArray[np.floating] | float:
    """
    Squared distance from point(s) to an axis-aligned box.

    Args:
        begin: Lower box corner, shape (3,).
        end: Upper box corner, shape (3,).
        points: Position(s), shape (3,) or (N, 3).

    Returns:
        Squared distance(s); zero for points inside the box.
    """
    points = np.asarray(points, dtype=np.float64)
    closest = np.clip(points, begin, end)
    return np.sum((points - closest) ** 2, axis=-1)


class BrickIndex(SpatialIndex):
    """
    Spatial index dividing a box into coarse bricks.

    Each brick stores every non-hydrogen atom whose distance to the brick is
    below the cutoff, so a query returns the list of the brick containing the
    (clamped) query point without any per-query distance work.

    Attributes:
        dims: Brick layout (one brick per interval on each axis).
        _cutoff_sqr: Squared cutoff distance.
        _cells: Candidate indices per brick, shape dims.n.
    """

    def __init__(self, dims: GridDims, cutoff_sqr: float) -> None:
        """
        Initialize brick index.

        Args:
            dims: Brick layout; every axis needs n >= 1.
            cutoff_sqr: Squared cutoff distance.
        """
        for i, axis in enumerate(dims):
            if axis.n < 1:
                raise ValueError(f"brick axis {i} needs n >= 1, got {axis.n}")
        if cutoff_sqr < 0:
            raise ValueError(f"cutoff_sqr must be non-negative, got {cutoff_sqr}")

        self.dims = dims
        self._cutoff_sqr = float(cutoff_sqr)
        self._init = dims.begin
        self._end = dims.end
        self._range = self._end - self._init
        self._n = np.array(dims.n, dtype=np.int64)
        self._cells: NDArray[np.object_] | None = None

    @property
    def cutoff_sqr(self) -> float:
        return self._cutoff_sqr

    @property
    def n_cells(self) -> tuple[int, int, int]:
        return tuple(int(k) for k in self._n)

    @classmethod
    def from_atoms(
        cls, atoms: Sequence[Atom], dims: GridDims, cutoff_sqr: float
    ) -> BrickIndex:
        """Create and build an index in one step."""
        index = cls(dims, cutoff_sqr)
        index.build(atoms)
        return index

    def _index_to_coord(self, idx: NDArray[np.integer]) -> NDArray[np.floating]:
        return self._init + self._range * idx / self._n

    def build(self, atoms: Sequence[Atom]) -> None:
        """
        Assign atoms to every brick they could interact with.

        Hydrogens and atoms farther than the cutoff from the whole box are
        never stored.

        Args:
            atoms: Receptor atoms.
        """
        cells = np.empty(tuple(self._n), dtype=object)

        relevant = np.array(
            [
                i
                for i, a in enumerate(atoms)
                if not a.is_hydrogen()
                and brick_distance_sqr(self._init, self._end, a.coords) < self._cutoff_sqr
            ],
            dtype=np.int64,
        )
        positions = (
            np.array([atoms[i].coords for i in relevant], dtype=np.float64)
            if len(relevant)
            else np.empty((0, 3), dtype=np.float64)
        )

        for x in range(self._n[0]):
            for y in range(self._n[1]):
                for z in range(self._n[2]):
                    lo = self._index_to_coord(np.array([x, y, z]))
                    hi = self._index_to_coord(np.array([x + 1, y + 1, z + 1]))
                    d2 = brick_distance_sqr(lo, hi, positions)
                    cells[x, y, z] = relevant[d2 < self._cutoff_sqr]

        self._cells = cells

    def local_index(self, point: ArrayLike) -> tuple[int, int, int]:
        """Return the brick containing ``point``, clamped into the layout."""
        point = np.asarray(point, dtype=np.float64)
        safe_range = np.where(self._range > 0, self._range, 1.0)
        t = np.floor((point - self._init) / safe_range * self._n)
        t = np.clip(t, 0, self._n - 1).astype(np.int64)
        return int(t[0]), int(t[1]), int(t[2])

    def possibilities(self, point: ArrayLike) -> NDArray[np.integer]:
        """Get candidate atoms for a query point."""
        if self._cells is None:
            raise RuntimeError("Spatial index has not been built yet")
        return self._cells[self.local_index(point)]

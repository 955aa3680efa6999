"""Lattice extents shared by grids and spatial indexes."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Preferred cell edge of the reduced lattice used by spatial indexes
REDUCED_CELL_SIZE = 3.0


@dataclass(frozen=True)
class GridDim:
    """
    One lattice axis.

    Attributes:
        begin: Lower bound.
        end: Upper bound.
        n: Number of intervals (the axis has n + 1 lattice points).
    """

    begin: float
    end: float
    n: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "begin", float(self.begin))
        object.__setattr__(self, "end", float(self.end))
        object.__setattr__(self, "n", int(self.n))
        if self.n < 0:
            raise ValueError(f"GridDim n must be non-negative, got {self.n}")
        if self.end < self.begin:
            raise ValueError(f"GridDim end {self.end} < begin {self.begin}")

    @property
    def span(self) -> float:
        return self.end - self.begin

    @property
    def enabled(self) -> bool:
        """Return True if the axis has positive resolution."""
        return self.n > 0

    def matches(self, other: GridDim) -> bool:
        """Equality within machine epsilon on the bounds."""
        return (
            self.n == other.n
            and abs(self.begin - other.begin) < sys.float_info.epsilon
            and abs(self.end - other.end) < sys.float_info.epsilon
        )


@dataclass(frozen=True)
class GridDims:
    """
    Extents and resolution of a 3D lattice.

    Attributes:
        axes: (x, y, z) GridDim.
    """

    axes: tuple[GridDim, GridDim, GridDim]

    def __post_init__(self) -> None:
        axes = tuple(
            a if isinstance(a, GridDim) else GridDim(*a) for a in self.axes
        )
        if len(axes) != 3:
            raise ValueError(f"GridDims needs 3 axes, got {len(axes)}")
        object.__setattr__(self, "axes", axes)

    @classmethod
    def from_box(
        cls, center: ArrayLike, size: ArrayLike, granularity: float = 0.375
    ) -> GridDims:
        """
        Build lattice dims for a search box.

        The number of intervals is ``ceil(size / granularity)`` and the box is
        widened symmetrically around ``center`` to a whole number of intervals.

        Args:
            center: Box center, shape (3,).
            size: Box edge lengths, shape (3,).
            granularity: Lattice spacing.

        Returns:
            New GridDims instance.
        """
        if granularity <= 0:
            raise ValueError(f"granularity must be positive, got {granularity}")
        center = np.asarray(center, dtype=np.float64)
        size = np.asarray(size, dtype=np.float64)
        if center.shape != (3,) or size.shape != (3,):
            raise ValueError("center and size must have shape (3,)")
        if np.any(size < 0):
            raise ValueError(f"box size must be non-negative, got {size}")

        axes = []
        for i in range(3):
            n = int(math.ceil(size[i] / granularity))
            real_span = granularity * n
            begin = center[i] - real_span / 2
            axes.append(GridDim(begin, begin + real_span, n))
        return cls(tuple(axes))

    @classmethod
    def from_bounds(cls, begin: ArrayLike, end: ArrayLike, n: ArrayLike) -> GridDims:
        """Build from per-axis lower bounds, upper bounds and interval counts."""
        return cls(tuple(GridDim(b, e, k) for b, e, k in zip(begin, end, n)))

    def __iter__(self) -> Iterator[GridDim]:
        return iter(self.axes)

    def __getitem__(self, i: int) -> GridDim:
        return self.axes[i]

    def __len__(self) -> int:
        return 3

    @property
    def begin(self) -> NDArray[np.floating]:
        return np.array([a.begin for a in self.axes])

    @property
    def end(self) -> NDArray[np.floating]:
        return np.array([a.end for a in self.axes])

    @property
    def n(self) -> tuple[int, int, int]:
        return tuple(a.n for a in self.axes)

    @property
    def shape(self) -> tuple[int, int, int]:
        """Return number of lattice points per axis."""
        return tuple(a.n + 1 for a in self.axes)

    @property
    def n_points(self) -> int:
        return int(np.prod(self.shape))

    def matches(self, other: GridDims) -> bool:
        """Axis-wise tolerant equality."""
        return all(a.matches(b) for a, b in zip(self.axes, other.axes))

    def reduced(self, cell_size: float = REDUCED_CELL_SIZE) -> GridDims:
        """
        Return coarse dims with cells of roughly ``cell_size`` per axis.

        Used to size spatial indexes; each axis keeps at least one cell.
        """
        axes = []
        for a in self.axes:
            n = int(a.span / cell_size)
            axes.append(GridDim(a.begin, a.end, max(n, 1)))
        return GridDims(tuple(axes))

    def to_tuple(self) -> tuple[tuple[float, float, int], ...]:
        """Plain (begin, end, n) triples."""
        return tuple((a.begin, a.end, a.n) for a in self.axes)

    def __str__(self) -> str:
        return " x ".join(f"[{a.begin:g}, {a.end:g}]/{a.n}" for a in self.axes)

"""Dense per-atom-type potential lattice."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..curl import curl, curl_deriv
from .dims import GridDims


class Grid:
    """
    Scalar potential sampled on a regular 3D lattice.

    Values are stored in a C-ordered array of shape (nx+1, ny+1, nz+1).
    Outside the lattice the value is clamped to the nearest face and a
    linear penalty of ``slope`` per unit distance is added.

    Attributes:
        data: Lattice values, or an empty array before ``init``.
    """

    def __init__(self) -> None:
        self.data: NDArray[np.floating] = np.empty((0, 0, 0), dtype=np.float64)
        self._init = np.zeros(3, dtype=np.float64)
        self._range = np.zeros(3, dtype=np.float64)
        self._factor = np.zeros(3, dtype=np.float64)
        self._factor_inv = np.zeros(3, dtype=np.float64)
        self._dim_minus_1 = np.zeros(3, dtype=np.float64)

    @property
    def initialized(self) -> bool:
        """Return True once ``init`` has allocated the lattice."""
        return self.data.size > 0

    @property
    def shape(self) -> tuple[int, ...]:
        return self.data.shape

    def init(self, dims: GridDims) -> None:
        """
        Allocate a zero-filled lattice over ``dims``.

        Args:
            dims: Lattice extents; every axis needs at least one interval.
        """
        for i, axis in enumerate(dims):
            if axis.n < 1:
                raise ValueError(f"grid axis {i} needs n >= 1, got {axis.n}")
            if axis.span <= 0:
                raise ValueError(f"grid axis {i} has non-positive span {axis.span}")

        self.data = np.zeros(dims.shape, dtype=np.float64)
        self._init = dims.begin
        self._range = dims.end - dims.begin
        self._dim_minus_1 = np.array(dims.shape, dtype=np.float64) - 1.0
        self._factor = self._dim_minus_1 / self._range
        self._factor_inv = 1.0 / self._factor

    @classmethod
    def from_array(cls, dims: GridDims, data: ArrayLike) -> Grid:
        """
        Create an initialized grid over ``dims`` holding ``data``.

        Args:
            dims: Lattice extents.
            data: Values, shape ``dims.shape``.

        Returns:
            New Grid instance.
        """
        grid = cls()
        grid.init(dims)
        data = np.asarray(data, dtype=np.float64)
        if data.shape != grid.data.shape:
            raise ValueError(
                f"grid data shape {data.shape} != lattice shape {grid.data.shape}"
            )
        grid.data = np.ascontiguousarray(data).copy()
        return grid

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise RuntimeError("Grid has not been initialized")

    def index_to_argument(self, x: int, y: int, z: int) -> NDArray[np.floating]:
        """Return the Cartesian position of lattice point (x, y, z)."""
        return self._init + self._factor_inv * np.array([x, y, z], dtype=np.float64)

    def lattice_points(self, axis: int) -> NDArray[np.floating]:
        """Return the coordinates of all lattice planes along ``axis``."""
        self._require_initialized()
        n = self.data.shape[axis]
        return self._init[axis] + self._factor_inv[axis] * np.arange(n, dtype=np.float64)

    def _locate(
        self, location: ArrayLike
    ) -> tuple[NDArray[np.floating], NDArray[np.integer], NDArray[np.integer], float]:
        """
        Find the lattice cell containing ``location``.

        Returns:
            Tuple of (fractional offsets in the cell, lower cell corner,
            region per axis (-1 below, 0 inside, 1 above), out-of-bounds
            distance).
        """
        s = (np.asarray(location, dtype=np.float64) - self._init) * self._factor
        miss = np.zeros(3, dtype=np.float64)
        region = np.zeros(3, dtype=np.int64)
        a = np.zeros(3, dtype=np.int64)

        for i in range(3):
            if s[i] < 0:
                miss[i] = -s[i]
                region[i] = -1
                a[i] = 0
                s[i] = 0.0
            elif s[i] >= self._dim_minus_1[i]:
                miss[i] = s[i] - self._dim_minus_1[i]
                region[i] = 1
                a[i] = self.data.shape[i] - 2
                s[i] = 1.0
            else:
                a[i] = int(s[i])
                s[i] -= a[i]

        return s, a, region, float(np.dot(miss, self._factor_inv))

    def evaluate(self, location: ArrayLike, slope: float, v: float) -> float:
        """
        Interpolate the lattice at ``location``.

        Args:
            location: Cartesian position, shape (3,).
            slope: Penalty per unit distance outside the lattice.
            v: Curl cap applied to the interpolated value.

        Returns:
            Capped interpolated value plus out-of-bounds penalty.
        """
        self._require_initialized()
        s, a, _, distance = self._locate(location)
        x, y, z = s
        cube = self.data[a[0] : a[0] + 2, a[1] : a[1] + 2, a[2] : a[2] + 2]

        wx = np.array([1.0 - x, x])
        wy = np.array([1.0 - y, y])
        wz = np.array([1.0 - z, z])
        f = float(np.einsum("ijk,i,j,k->", cube, wx, wy, wz))

        return curl(f, v) + slope * distance

    def evaluate_deriv(
        self, location: ArrayLike, slope: float, v: float
    ) -> tuple[float, NDArray[np.floating]]:
        """
        Interpolate the lattice and its gradient at ``location``.

        The gradient of the interpolated part is zero along axes where the
        location lies outside the lattice; those axes get ``slope * region``.

        Args:
            location: Cartesian position, shape (3,).
            slope: Penalty per unit distance outside the lattice.
            v: Curl cap.

        Returns:
            Tuple of (value, gradient of shape (3,)).
        """
        self._require_initialized()
        s, a, region, distance = self._locate(location)
        x, y, z = s
        cube = self.data[a[0] : a[0] + 2, a[1] : a[1] + 2, a[2] : a[2] + 2]

        wx = np.array([1.0 - x, x])
        wy = np.array([1.0 - y, y])
        wz = np.array([1.0 - z, z])
        dw = np.array([-1.0, 1.0])

        f = float(np.einsum("ijk,i,j,k->", cube, wx, wy, wz))
        gradient = np.array(
            [
                np.einsum("ijk,i,j,k->", cube, dw, wy, wz),
                np.einsum("ijk,i,j,k->", cube, wx, dw, wz),
                np.einsum("ijk,i,j,k->", cube, wx, wy, dw),
            ]
        )

        f, gradient = curl_deriv(f, gradient, v)

        inside = region == 0
        deriv = np.where(inside, self._factor * gradient, 0.0) + slope * region
        return f + slope * distance, deriv

"""Potential table sampled from a user-supplied pair energy function."""

from __future__ import annotations

import math
from collections.abc import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.atoms import AtomTyping, triangular_matrix_index
from .base import PotentialTable

# energy(t1, t2, r, theta) -> energies, vectorized over r and theta (degrees)
PairEnergy = Callable[[int, int, NDArray[np.floating], NDArray[np.floating]], ArrayLike]


class TabulatedPotential(PotentialTable):
    """
    Pair energies sampled on a squared-distance (and optionally angle) lattice.

    For every unordered type pair ``t1 <= t2`` the energy function is sampled
    at ``r2 = k / factor`` for ``k = 0 .. factor * cutoff**2 + 2`` and, when
    ``angle_step`` is given, at angles ``0, step, ..., 180``. Radial
    derivatives are taken by finite differences of the samples.

    Attributes:
        factor: Samples per unit of squared distance.
        n_samples: Number of squared-distance samples.
        angles: Sampled angles in degrees.
    """

    def __init__(
        self,
        energy: PairEnergy,
        atom_typing: AtomTyping = AtomTyping.XS,
        cutoff: float = 8.0,
        factor: float = 32.0,
        angle_step: float | None = None,
    ) -> None:
        """
        Initialize and fill the table.

        Args:
            energy: Pair energy function ``energy(t1, t2, r, theta)``; called
                once per type pair with 2D arrays of distances and angles.
            atom_typing: Typing scheme of ``t1`` and ``t2``.
            cutoff: Interaction cutoff distance.
            factor: Samples per unit of squared distance.
            angle_step: Angle resolution in degrees. None for energies that
                do not depend on the angle.
        """
        if cutoff <= 0:
            raise ValueError(f"cutoff must be positive, got {cutoff}")
        if factor <= 0:
            raise ValueError(f"factor must be positive, got {factor}")
        if angle_step is not None and not 0 < angle_step <= 180:
            raise ValueError(f"angle_step must be in (0, 180], got {angle_step}")

        self._cutoff = float(cutoff)
        self._typing = atom_typing
        self.factor = float(factor)
        self.n_samples = int(self.factor * self._cutoff**2) + 3

        if angle_step is None:
            self.angles = np.array([180.0])
        else:
            n_angles = int(math.ceil(180.0 / angle_step)) + 1
            self.angles = np.linspace(0.0, 180.0, n_angles)
        self._angle_step = 180.0 / (len(self.angles) - 1) if len(self.angles) > 1 else None

        r2 = np.arange(self.n_samples, dtype=np.float64) / self.factor
        r = np.sqrt(r2)
        r_grid, theta_grid = np.meshgrid(r, self.angles, indexing="ij")

        n = atom_typing.n_types
        n_pairs = n * (n + 1) // 2
        self._energy = np.zeros((n_pairs, self.n_samples, len(self.angles)))
        self._dor = np.zeros_like(self._energy)

        for t2 in range(n):
            for t1 in range(t2 + 1):
                tpi = triangular_matrix_index(n, t1, t2)
                e = np.broadcast_to(
                    np.asarray(energy(t1, t2, r_grid, theta_grid), dtype=np.float64),
                    r_grid.shape,
                )
                self._energy[tpi] = e
                dedr = np.gradient(e, r, axis=0)
                self._dor[tpi, 1:] = dedr[1:] / r[1:, np.newaxis]

    @property
    def cutoff(self) -> float:
        return self._cutoff

    @property
    def atom_typing_used(self) -> AtomTyping:
        return self._typing

    def _nearest_angle(self, theta: NDArray[np.floating]) -> NDArray[np.integer]:
        if self._angle_step is None:
            return np.zeros(np.shape(theta), dtype=np.int64)
        k = np.rint(np.clip(theta, 0.0, 180.0) / self._angle_step).astype(np.int64)
        return np.minimum(k, len(self.angles) - 1)

    def _angle_weights(
        self, theta: NDArray[np.floating]
    ) -> tuple[NDArray[np.integer], NDArray[np.integer], NDArray[np.floating]]:
        if self._angle_step is None:
            zero = np.zeros(np.shape(theta), dtype=np.int64)
            return zero, zero, np.zeros(np.shape(theta))
        t = np.clip(theta, 0.0, 180.0) / self._angle_step
        k1 = np.minimum(np.floor(t).astype(np.int64), len(self.angles) - 1)
        k2 = np.minimum(k1 + 1, len(self.angles) - 1)
        return k1, k2, t - k1

    def _sample_index(self, r2: NDArray[np.floating]) -> NDArray[np.integer]:
        i = (self.factor * r2).astype(np.int64)
        if np.any(i >= self.n_samples - 1) or np.any(i < 0):
            raise ValueError("squared distance outside the tabulated range")
        return i

    def eval_fast(self, type_pair_index: int, r2: float, theta: float) -> float:
        return float(self.eval_fast_many([type_pair_index], [r2], [theta])[0])

    def eval_deriv(
        self, type_pair_index: int, r2: float, theta: float
    ) -> tuple[float, float]:
        e, dor = self.eval_deriv_many([type_pair_index], [r2], [theta])
        return float(e[0]), float(dor[0])

    def eval_fast_many(
        self, type_pair_index: ArrayLike, r2: ArrayLike, theta: ArrayLike
    ) -> NDArray[np.floating]:
        """Sample at ``int(factor * r2)`` and the nearest angle, no interpolation."""
        tpi = np.asarray(type_pair_index, dtype=np.int64)
        r2 = np.asarray(r2, dtype=np.float64)
        i = self._sample_index(r2)
        k = self._nearest_angle(np.asarray(theta, dtype=np.float64))
        return self._energy[tpi, i, k]

    def eval_deriv_many(
        self, type_pair_index: ArrayLike, r2: ArrayLike, theta: ArrayLike
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Interpolate linearly in squared distance and angle."""
        tpi = np.asarray(type_pair_index, dtype=np.int64)
        r2 = np.asarray(r2, dtype=np.float64)
        i1 = self._sample_index(r2)
        i2 = i1 + 1
        rem = self.factor * r2 - i1
        k1, k2, w = self._angle_weights(np.asarray(theta, dtype=np.float64))

        def bilinear(table: NDArray[np.floating]) -> NDArray[np.floating]:
            low = table[tpi, i1, k1] * (1 - w) + table[tpi, i1, k2] * w
            high = table[tpi, i2, k1] * (1 - w) + table[tpi, i2, k2] * w
            return low + rem * (high - low)

        return bilinear(self._energy), bilinear(self._dor)

"""Base interface for pairwise potential tables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from ..system import AtomTyping


class PotentialTable(ABC):
    """
    Abstract base class for pairwise potential tables.

    A potential table maps (type-pair index, squared distance, angle) to an
    energy. It is the only place the functional form of the interaction
    lives; evaluators only look values up.

    Subclasses implement the scalar ``eval_fast`` and ``eval_deriv``. The
    ``*_many`` variants loop over the scalar forms by default and should be
    overridden where a vectorized lookup is available.
    """

    @property
    @abstractmethod
    def cutoff(self) -> float:
        """Return the interaction cutoff distance."""
        ...

    @property
    def cutoff_sqr(self) -> float:
        """Return the squared cutoff distance."""
        return self.cutoff**2

    @property
    @abstractmethod
    def atom_typing_used(self) -> AtomTyping:
        """Return the typing scheme type-pair indices refer to."""
        ...

    @abstractmethod
    def eval_fast(self, type_pair_index: int, r2: float, theta: float) -> float:
        """
        Look up the pair energy.

        Args:
            type_pair_index: Triangular index of the two atom types.
            r2: Squared distance, ``0 <= r2 <= cutoff_sqr``.
            theta: Directional correction angle in degrees.

        Returns:
            Pair energy.
        """
        ...

    @abstractmethod
    def eval_deriv(
        self, type_pair_index: int, r2: float, theta: float
    ) -> tuple[float, float]:
        """
        Look up the pair energy and its radial derivative.

        Args:
            type_pair_index: Triangular index of the two atom types.
            r2: Squared distance.
            theta: Directional correction angle in degrees.

        Returns:
            Tuple of (energy, dE/dr divided by r). Multiplying the second
            value by a displacement vector gives the energy gradient.
        """
        ...

    def eval_fast_many(
        self, type_pair_index: ArrayLike, r2: ArrayLike, theta: ArrayLike
    ) -> NDArray[np.floating]:
        """Vectorized ``eval_fast`` over equal-length arrays."""
        tpi, r2, theta = np.broadcast_arrays(
            np.atleast_1d(type_pair_index), np.atleast_1d(r2), np.atleast_1d(theta)
        )
        return np.array(
            [self.eval_fast(int(t), float(r), float(a)) for t, r, a in zip(tpi, r2, theta)],
            dtype=np.float64,
        )

    def eval_deriv_many(
        self, type_pair_index: ArrayLike, r2: ArrayLike, theta: ArrayLike
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Vectorized ``eval_deriv`` over equal-length arrays."""
        tpi, r2, theta = np.broadcast_arrays(
            np.atleast_1d(type_pair_index), np.atleast_1d(r2), np.atleast_1d(theta)
        )
        e = np.zeros(len(tpi), dtype=np.float64)
        dor = np.zeros(len(tpi), dtype=np.float64)
        for k, (t, r, a) in enumerate(zip(tpi, r2, theta)):
            e[k], dor[k] = self.eval_deriv(int(t), float(r), float(a))
        return e, dor

"""Base interface for spatial indexes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from ..system import Atom


class SpatialIndex(ABC):
    """
    Abstract base class for receptor spatial indexes.

    A spatial index is built once over the fixed atoms and then answers
    "which atoms could be within the cutoff of this point". Answers may be a
    superset; callers always re-check the true squared distance.
    """

    @abstractmethod
    def build(self, atoms: Sequence[Atom]) -> None:
        """
        Build the index over a fixed atom set.

        Args:
            atoms: Receptor atoms; positions in the returned candidate
                arrays refer to this sequence.
        """
        ...

    @abstractmethod
    def possibilities(self, point: ArrayLike) -> NDArray[np.integer]:
        """
        Get candidate atoms near a point.

        Args:
            point: Query position, shape (3,).

        Returns:
            Array of atom indices, possibly including atoms beyond the cutoff.
        """
        ...

    @property
    @abstractmethod
    def cutoff_sqr(self) -> float:
        """Return the squared cutoff distance the index was built for."""
        ...

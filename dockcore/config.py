"""Scoring configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from .grids import GridDims
from .parallel import BACKEND_NAMES, create_backend
from .scoring import DirectEvaluator, GridCache
from .system import AtomTyping

if TYPE_CHECKING:
    from .potentials import PotentialTable
    from .system import Model

SCORING_FUNCTION_VERSION = "dockcore-1.0"


@dataclass(frozen=True)
class ScoringConfig:
    """
    Search box and evaluator settings.

    Attributes:
        center: Box center, shape (3,).
        size: Box edge lengths, shape (3,).
        granularity: Lattice spacing of grid caches.
        slope: Penalty per unit distance outside the box.
        atom_typing: Typing scheme of grids and type pairs.
        scoring_function_version: Version tag written into cache files.
        backend: Parallel backend for grid population.
        n_workers: Worker count for the multiprocessing backend.
    """

    center: NDArray[np.floating]
    size: NDArray[np.floating]
    granularity: float = 0.375
    slope: float = 1e6
    atom_typing: AtomTyping = AtomTyping.XS
    scoring_function_version: str = SCORING_FUNCTION_VERSION
    backend: str = "serial"
    n_workers: int | None = None

    def __post_init__(self) -> None:
        """Validate and convert fields."""
        center = np.asarray(self.center, dtype=np.float64)
        size = np.asarray(self.size, dtype=np.float64)
        if center.shape != (3,):
            raise ValueError(f"center must have shape (3,), got {center.shape}")
        if size.shape != (3,):
            raise ValueError(f"size must have shape (3,), got {size.shape}")
        if np.any(size < 0):
            raise ValueError(f"size must be non-negative, got {size}")
        if self.granularity <= 0:
            raise ValueError(f"granularity must be positive, got {self.granularity}")
        if self.slope < 0:
            raise ValueError(f"slope must be non-negative, got {self.slope}")
        if self.backend not in BACKEND_NAMES:
            raise ValueError(f"Unknown backend: {self.backend}")

        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "atom_typing", AtomTyping(self.atom_typing))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScoringConfig:
        """
        Create a config from a plain mapping (e.g. parsed JSON).

        Unknown keys are rejected.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping."""
        return {
            "center": self.center.tolist(),
            "size": self.size.tolist(),
            "granularity": self.granularity,
            "slope": self.slope,
            "atom_typing": self.atom_typing.value,
            "scoring_function_version": self.scoring_function_version,
            "backend": self.backend,
            "n_workers": self.n_workers,
        }

    def grid_dims(self) -> GridDims:
        """Return lattice dims for the box."""
        return GridDims.from_box(self.center, self.size, self.granularity)

    def build_cache(self) -> GridCache:
        """Create an empty grid cache for this configuration."""
        return GridCache(
            self.scoring_function_version,
            self.grid_dims(),
            slope=self.slope,
            atom_typing=self.atom_typing,
            backend=create_backend(self.backend, self.n_workers),
        )

    def build_direct(self, model: Model, table: PotentialTable) -> DirectEvaluator:
        """Create a direct evaluator for this configuration."""
        return DirectEvaluator(model, self.grid_dims(), table, slope=self.slope)

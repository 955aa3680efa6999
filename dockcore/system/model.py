"""Ligand/receptor model scored by the evaluators."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .atoms import Atom, AtomIndex


@dataclass
class Model:
    """
    Ligand atoms being posed against a fixed receptor.

    The evaluators read ``coords`` and write ``minus_forces``; nothing else
    is mutated during scoring.

    Attributes:
        atoms: Ligand atoms. The first ``n_movable`` are movable.
        grid_atoms: Receptor (fixed) atoms.
        coords: Current ligand coordinates, shape (len(atoms), 3).
        minus_forces: Energy gradient per movable atom, shape (n_movable, 3).
        n_movable: Number of movable atoms.
    """

    atoms: list[Atom]
    grid_atoms: list[Atom]
    coords: NDArray[np.floating]
    minus_forces: NDArray[np.floating]
    n_movable: int

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.coords = np.asarray(self.coords, dtype=np.float64)
        self.minus_forces = np.asarray(self.minus_forces, dtype=np.float64)

        n_atoms = len(self.atoms)
        if self.coords.shape != (n_atoms, 3):
            raise ValueError(
                f"coords shape {self.coords.shape} incompatible with {n_atoms} atoms"
            )
        if not 0 <= self.n_movable <= n_atoms:
            raise ValueError(
                f"n_movable {self.n_movable} out of range for {n_atoms} atoms"
            )
        if self.minus_forces.shape != (self.n_movable, 3):
            raise ValueError(
                f"minus_forces shape {self.minus_forces.shape} incompatible with "
                f"{self.n_movable} movable atoms"
            )
        self._grid_coords: NDArray[np.floating] | None = None

    @classmethod
    def create(
        cls,
        atoms: Sequence[Atom],
        grid_atoms: Sequence[Atom],
        coords: ArrayLike | None = None,
        n_movable: int | None = None,
    ) -> Model:
        """
        Create a Model, taking the pose from the atoms' own coordinates by default.

        Args:
            atoms: Ligand atoms, movable ones first.
            grid_atoms: Receptor atoms.
            coords: Ligand pose, shape (N, 3). Defaults to ``atom.coords``.
            n_movable: Number of movable atoms. Defaults to all ligand atoms.

        Returns:
            New Model instance.
        """
        atoms = list(atoms)
        if coords is None:
            coords = (
                np.array([a.coords for a in atoms], dtype=np.float64)
                if atoms
                else np.empty((0, 3), dtype=np.float64)
            )
        if n_movable is None:
            n_movable = len(atoms)
        return cls(
            atoms=atoms,
            grid_atoms=list(grid_atoms),
            coords=coords,
            minus_forces=np.zeros((n_movable, 3), dtype=np.float64),
            n_movable=n_movable,
        )

    @property
    def n_atoms(self) -> int:
        """Return number of ligand atoms."""
        return len(self.atoms)

    def num_movable_atoms(self) -> int:
        return self.n_movable

    @property
    def grid_coords(self) -> NDArray[np.floating]:
        """Return receptor coordinates, shape (len(grid_atoms), 3)."""
        if self._grid_coords is None or len(self._grid_coords) != len(self.grid_atoms):
            self._grid_coords = (
                np.array([a.coords for a in self.grid_atoms], dtype=np.float64)
                if self.grid_atoms
                else np.empty((0, 3), dtype=np.float64)
            )
        return self._grid_coords

    def get_atom(self, index: AtomIndex) -> Atom:
        """Return the ligand or receptor atom named by ``index``."""
        if index.in_grid:
            return self.grid_atoms[index.i]
        return self.atoms[index.i]

    def atom_coords(self, index: AtomIndex) -> NDArray[np.floating]:
        """Return current coordinates of the atom named by ``index``."""
        if index.in_grid:
            return self.grid_atoms[index.i].coords
        return self.coords[index.i]

    def set_coords(self, coords: ArrayLike) -> None:
        """Replace the ligand pose."""
        coords = np.asarray(coords, dtype=np.float64)
        if coords.shape != self.coords.shape:
            raise ValueError(
                f"coords shape {coords.shape} != expected {self.coords.shape}"
            )
        self.coords = coords

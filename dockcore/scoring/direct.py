"""Pairwise evaluation of the receptor potential without precomputed grids."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..curl import curl, curl_deriv
from ..neighborlists import BrickIndex
from ..system.atoms import type_pair_matrix
from .base import InteractionEvaluator
from .geometry import GeometryCorrector

if TYPE_CHECKING:
    from ..grids import GridDims
    from ..potentials import PotentialTable
    from ..system import Model


class DirectEvaluator(InteractionEvaluator):
    """
    Sums pair potentials over nearby receptor atoms on every call.

    Atoms outside the box are scored at their clamped position plus a
    penalty of ``slope`` per unit distance, which matches what an
    interpolating grid over the same box would return. Only the spatial
    index is built up front; no energies are cached between calls.

    Attributes:
        dims: Box; axes with n == 0 are unbounded.
        table: Pair potential table.
        slope: Out-of-bounds penalty slope.
        index: Spatial index over the receptor atoms.
    """

    def __init__(
        self,
        model: Model,
        dims: GridDims,
        table: PotentialTable,
        slope: float = 1e6,
    ) -> None:
        """
        Initialize direct evaluator.

        Args:
            model: Model providing the receptor atoms.
            dims: Box the ligand should stay in.
            table: Pair potential table.
            slope: Out-of-bounds penalty slope.
        """
        self.dims = dims
        self.table = table
        self.slope = float(slope)
        self.index = BrickIndex.from_atoms(model.grid_atoms, dims.reduced(), table.cutoff_sqr)

        self._begin = dims.begin
        self._end = dims.end
        self._enabled = np.array([axis.enabled for axis in dims], dtype=bool)
        self._pair_index = type_pair_matrix(table.atom_typing_used)
        self._corrector = GeometryCorrector(model)
        self._receptor_types = self._types_of(model)

    def _types_of(self, model: Model) -> NDArray[np.integer]:
        typing = self.table.atom_typing_used
        return np.array([a.get(typing) for a in model.grid_atoms], dtype=np.int64)

    def _bind(self, model: Model) -> tuple[GeometryCorrector, NDArray[np.integer]]:
        if self._corrector.model is not model:
            self._corrector = GeometryCorrector(model)
            self._receptor_types = self._types_of(model)
        return self._corrector, self._receptor_types

    def _clamp(
        self, coords: NDArray[np.floating]
    ) -> tuple[NDArray[np.floating], float, NDArray[np.floating]]:
        """
        Clamp a position into the box along enabled axes.

        Returns:
            Tuple of (clamped position, summed clamping distance,
            per-axis direction of the violation: -1, 0 or 1).
        """
        below = self._enabled & (coords < self._begin)
        above = self._enabled & (coords > self._end)
        adjusted = np.where(below, self._begin, np.where(above, self._end, coords))
        direction = above.astype(np.float64) - below.astype(np.float64)
        return adjusted, float(np.sum(np.abs(coords - adjusted))), direction

    def _neighbors(
        self,
        adjusted: NDArray[np.floating],
        t1: int,
        receptor_types: NDArray[np.integer],
        grid_coords: NDArray[np.floating],
    ) -> tuple[NDArray[np.integer], NDArray[np.integer], NDArray[np.floating], NDArray[np.floating]]:
        """In-scheme receptor atoms strictly inside the cutoff of ``adjusted``."""
        n = self.table.atom_typing_used.n_types
        candidates = self.index.possibilities(adjusted)
        t2 = receptor_types[candidates]
        candidates = candidates[t2 < n]

        r_ba = adjusted - grid_coords[candidates]
        r2 = np.sum(r_ba**2, axis=1)
        close = r2 < self.table.cutoff_sqr
        candidates = candidates[close]
        return candidates, self._pair_index[t1, receptor_types[candidates]], r2[close], r_ba[close]

    def eval(self, model: Model, v: float = math.inf) -> float:
        """Sum pair energies for movable atoms in scheme, plus box penalties."""
        corrector, receptor_types = self._bind(model)
        typing = self.table.atom_typing_used
        n = typing.n_types
        grid_coords = model.grid_coords
        e = 0.0

        for i in range(model.n_movable):
            a = model.atoms[i]
            t1 = a.get(typing)
            if t1 >= n:
                continue

            a_coords = model.coords[i]
            adjusted, distance, _ = self._clamp(a_coords)
            out_of_bounds_penalty = self.slope * distance

            candidates, tpi, r2, _ = self._neighbors(adjusted, t1, receptor_types, grid_coords)
            this_e = 0.0
            if len(candidates):
                theta = corrector.pair_angles(a, a_coords, candidates)
                this_e = float(np.sum(self.table.eval_fast_many(tpi, r2, theta)))

            e += curl(this_e, v) + out_of_bounds_penalty
        return e

    def eval_deriv(self, model: Model, v: float = math.inf) -> float:
        """Sum pair energies and write per-atom gradients to ``minus_forces``."""
        corrector, receptor_types = self._bind(model)
        typing = self.table.atom_typing_used
        n = typing.n_types
        grid_coords = model.grid_coords
        e = 0.0

        for i in range(model.n_movable):
            a = model.atoms[i]
            t1 = a.get(typing)
            if t1 >= n:
                model.minus_forces[i] = 0.0
                continue

            a_coords = model.coords[i]
            adjusted, distance, direction = self._clamp(a_coords)
            out_of_bounds_penalty = self.slope * distance
            out_of_bounds_deriv = self.slope * direction

            candidates, tpi, r2, r_ba = self._neighbors(adjusted, t1, receptor_types, grid_coords)
            this_e = 0.0
            deriv = np.zeros(3, dtype=np.float64)
            if len(candidates):
                theta = corrector.pair_angles(a, a_coords, candidates)
                energies, dor = self.table.eval_deriv_many(tpi, r2, theta)
                this_e = float(np.sum(energies))
                deriv = dor @ r_ba

            this_e, deriv = curl_deriv(this_e, deriv, v)
            model.minus_forces[i] = deriv + out_of_bounds_deriv
            e += this_e + out_of_bounds_penalty
        return e

    def within(self, model: Model, margin: float = 0.0001) -> bool:
        """
        Check that every heavy movable atom lies inside the expanded box.

        Args:
            model: Model holding the pose.
            margin: Expansion of the box on each enabled axis.

        Returns:
            True if no non-hydrogen movable atom is outside.
        """
        for i in range(model.n_movable):
            if model.atoms[i].is_hydrogen():
                continue
            coords = model.coords[i]
            outside = self._enabled & (
                (coords < self._begin - margin) | (coords > self._end + margin)
            )
            if np.any(outside):
                return False
        return True

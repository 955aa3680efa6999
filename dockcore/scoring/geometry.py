"""Directional correction angle for halogen and sulfur contacts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.atoms import (
    ElementType,
    ad_is_aromatic,
    xs_hal_any_bond_possible,
    xs_is_halogen,
    xs_is_S,
    xs_sul_bond_possible,
)

if TYPE_CHECKING:
    from ..system import Atom, Model

# Angle meaning "no directional correction"
DEFAULT_ANGLE = 180.0


def bond_angle(v1: ArrayLike, v2: ArrayLike) -> float:
    """
    Angle between two vectors in degrees.

    Args:
        v1: First vector, shape (3,).
        v2: Second vector, shape (3,).

    Returns:
        Angle in [0, 180]. ``DEFAULT_ANGLE`` if either vector has zero length.
    """
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)
    norm = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norm == 0.0:
        return DEFAULT_ANGLE
    cos_theta = np.clip(np.dot(v1, v2) / norm, -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_theta)))


def _halogen_bond_possible(ligand_xs: int | None, receptor_xs: int) -> bool:
    # A lattice probe stands in for an acceptor ligand type
    if ligand_xs is None:
        return xs_is_halogen(receptor_xs)
    return xs_hal_any_bond_possible(ligand_xs, receptor_xs)


def _sulfur_bond_possible(ligand_xs: int | None, receptor_xs: int) -> bool:
    if ligand_xs is None:
        return xs_is_S(receptor_xs)
    return xs_sul_bond_possible(ligand_xs, receptor_xs)


class GeometryCorrector:
    """
    Computes the correction angle theta for a ligand/receptor pair.

    The angle is measured at the halogen or sulfur ("subject") between one of
    its bonded neighbors and the other participant, so it depends on atoms
    beyond the interacting pair. Halogen contacts take precedence over sulfur
    contacts; pairs with neither get ``DEFAULT_ANGLE``.

    Neighbor coordinates come from the model: the current pose for ligand
    atoms, static coordinates for receptor atoms.

    Attributes:
        model: Model whose bonds and coordinates are used.
    """

    def __init__(self, model: Model) -> None:
        self.model = model
        self._directional = np.array(
            [xs_is_halogen(a.xs) or xs_is_S(a.xs) for a in model.grid_atoms],
            dtype=bool,
        )

    def halogen_angle(
        self, halogen: Atom, halogen_coords: ArrayLike, other_coords: ArrayLike
    ) -> float:
        """
        Angle carbon-halogen-other for a halogen bonded to a carbon.

        Args:
            halogen: Halogen atom.
            halogen_coords: Current halogen position.
            other_coords: Position of the other participant.

        Returns:
            Angle in degrees, ``DEFAULT_ANGLE`` if no carbon is bonded.
        """
        halogen_coords = np.asarray(halogen_coords, dtype=np.float64)
        for bond in halogen.bonds:
            neighbor = self.model.get_atom(bond.connected_atom_index)
            if neighbor.el == ElementType.C:
                carbon_coords = self.model.atom_coords(bond.connected_atom_index)
                return bond_angle(
                    halogen_coords - carbon_coords,
                    halogen_coords - np.asarray(other_coords, dtype=np.float64),
                )
        return DEFAULT_ANGLE

    def sulfur_angle(
        self, sulfur: Atom, sulfur_coords: ArrayLike, other_coords: ArrayLike
    ) -> float:
        """
        Larger of the two neighbor-sulfur-other angles.

        Only aromatic neighbors contribute an angle; a non-aromatic neighbor
        contributes 0. A sulfur without exactly two bonds gives 0.

        Args:
            sulfur: Sulfur atom.
            sulfur_coords: Current sulfur position.
            other_coords: Position of the other participant.

        Returns:
            Angle in degrees.
        """
        if len(sulfur.bonds) != 2:
            return 0.0

        sulfur_coords = np.asarray(sulfur_coords, dtype=np.float64)
        to_other = sulfur_coords - np.asarray(other_coords, dtype=np.float64)
        angles = []
        for bond in sulfur.bonds:
            neighbor = self.model.get_atom(bond.connected_atom_index)
            if ad_is_aromatic(neighbor.ad):
                neighbor_coords = self.model.atom_coords(bond.connected_atom_index)
                angles.append(bond_angle(sulfur_coords - neighbor_coords, to_other))
            else:
                angles.append(0.0)
        return max(angles)

    def pair_angle(
        self,
        ligand: Atom | None,
        ligand_coords: ArrayLike,
        receptor: Atom,
        receptor_coords: ArrayLike,
    ) -> float:
        """
        Correction angle for one pair.

        Args:
            ligand: Ligand-side atom, or None for a lattice probe of an acceptor type.
            ligand_coords: Ligand-side position.
            receptor: Receptor atom.
            receptor_coords: Receptor atom position.

        Returns:
            Theta in degrees.
        """
        ligand_xs = None if ligand is None else ligand.xs

        if _halogen_bond_possible(ligand_xs, receptor.xs):
            if ligand is not None and xs_is_halogen(ligand.xs):
                return self.halogen_angle(ligand, ligand_coords, receptor_coords)
            return self.halogen_angle(receptor, receptor_coords, ligand_coords)

        if _sulfur_bond_possible(ligand_xs, receptor.xs):
            if ligand is not None and xs_is_S(ligand.xs):
                return self.sulfur_angle(ligand, ligand_coords, receptor_coords)
            return self.sulfur_angle(receptor, receptor_coords, ligand_coords)

        return DEFAULT_ANGLE

    def pair_angles(
        self,
        ligand: Atom | None,
        ligand_coords: ArrayLike,
        candidates: NDArray[np.integer],
    ) -> NDArray[np.floating]:
        """
        Correction angles between one ligand-side atom and many receptor atoms.

        Args:
            ligand: Ligand-side atom, or None for a lattice probe of an acceptor type.
            ligand_coords: Ligand-side position.
            candidates: Receptor atom indices.

        Returns:
            Angles in degrees, shape (len(candidates),).
        """
        thetas = np.full(len(candidates), DEFAULT_ANGLE, dtype=np.float64)
        if len(candidates) == 0:
            return thetas

        if ligand is not None and (xs_is_halogen(ligand.xs) or xs_is_S(ligand.xs)):
            positions = np.arange(len(candidates))
        else:
            positions = np.flatnonzero(self._directional[candidates])

        grid_atoms = self.model.grid_atoms
        for k in positions:
            receptor = grid_atoms[candidates[k]]
            thetas[k] = self.pair_angle(ligand, ligand_coords, receptor, receptor.coords)
        return thetas

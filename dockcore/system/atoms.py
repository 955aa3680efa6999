"""Atom typing schemes, atoms and bonds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import NamedTuple

import numpy as np
from numpy.typing import ArrayLike, NDArray


class ElementType(IntEnum):
    """Element types."""

    H = 0
    C = 1
    N = 2
    O = 3  # noqa: E741
    S = 4
    P = 5
    F = 6
    Cl = 7
    Br = 8
    I = 9  # noqa: E741
    Met = 10


class ADType(IntEnum):
    """AutoDock atom types."""

    C = 0
    A = 1
    N = 2
    O = 3  # noqa: E741
    P = 4
    S = 5
    H = 6
    F = 7
    I = 8  # noqa: E741
    NA = 9
    OA = 10
    SA = 11
    HD = 12
    Mg = 13
    Mn = 14
    Zn = 15
    Ca = 16
    Fe = 17
    Cl = 18
    Br = 19


class XSType(IntEnum):
    """X-Score atom types (hydrophobic, polar, donor, acceptor, ...)."""

    C_H = 0
    C_P = 1
    N_P = 2
    N_D = 3
    N_A = 4
    N_DA = 5
    O_P = 6
    O_D = 7
    O_A = 8
    O_DA = 9
    S_P = 10
    P_P = 11
    F_H = 12
    Cl_H = 13
    Br_H = 14
    I_H = 15
    Met_D = 16


N_EL_TYPES = len(ElementType)
N_AD_TYPES = len(ADType)
N_XS_TYPES = len(XSType)


class AtomTyping(Enum):
    """Atom-typing scheme used to index grids and type pairs."""

    EL = "el"
    AD = "ad"
    XS = "xs"

    @property
    def n_types(self) -> int:
        """Return number of type ids in this scheme."""
        return _N_TYPES[self]


_N_TYPES = {
    AtomTyping.EL: N_EL_TYPES,
    AtomTyping.AD: N_AD_TYPES,
    AtomTyping.XS: N_XS_TYPES,
}


def num_atom_types(typing: AtomTyping) -> int:
    """Return number of type ids in a typing scheme."""
    return typing.n_types


_XS_HALOGENS = frozenset({XSType.F_H, XSType.Cl_H, XSType.Br_H, XSType.I_H})
_XS_ACCEPTORS = frozenset({XSType.N_A, XSType.N_DA, XSType.O_A, XSType.O_DA})


def xs_is_halogen(xs: int) -> bool:
    return xs in _XS_HALOGENS


def xs_is_S(xs: int) -> bool:  # noqa: N802
    return xs == XSType.S_P


def xs_is_acceptor(xs: int) -> bool:
    return xs in _XS_ACCEPTORS


def xs_hal_any_bond_possible(xs1: int, xs2: int) -> bool:
    """Check whether either atom could act as halogen-bond donor to the other."""
    return (xs_is_halogen(xs1) and xs_is_acceptor(xs2)) or (
        xs_is_halogen(xs2) and xs_is_acceptor(xs1)
    )


def xs_sul_bond_possible(xs1: int, xs2: int) -> bool:
    """Check whether a directional sulfur contact is possible between two atoms."""
    return (xs_is_S(xs1) and xs_is_acceptor(xs2)) or (
        xs_is_S(xs2) and xs_is_acceptor(xs1)
    )


_AD_ACCEPTORS = frozenset({ADType.NA, ADType.OA})


def type_is_acceptor(typing: AtomTyping, t: int) -> bool:
    """
    Check whether type id ``t`` of a scheme always denotes an XS acceptor.

    Element types never qualify: an N or O element may or may not accept.
    """
    if typing is AtomTyping.XS:
        return xs_is_acceptor(t)
    if typing is AtomTyping.AD:
        return t in _AD_ACCEPTORS
    return False


def ad_is_aromatic(ad: int) -> bool:
    return ad == ADType.A


def ad_is_hydrogen(ad: int) -> bool:
    return ad in (ADType.H, ADType.HD)


class AtomIndex(NamedTuple):
    """
    Reference to an atom of a Model.

    Attributes:
        i: Position in either the ligand atoms or the receptor atoms.
        in_grid: True for receptor (fixed) atoms.
    """

    i: int
    in_grid: bool = False


@dataclass(frozen=True)
class Bond:
    """Bond to the atom named by ``connected_atom_index``."""

    connected_atom_index: AtomIndex


@dataclass
class Atom:
    """
    Typed atom with its bond list.

    For ligand atoms ``coords`` holds the reference coordinates only; the
    pose being scored lives in ``Model.coords``.

    Attributes:
        coords: Cartesian coordinates, shape (3,).
        el: Element type id.
        ad: AutoDock type id.
        xs: X-Score type id, ``N_XS_TYPES`` for atoms without one (hydrogens).
        bonds: Bonds owned by this atom.
    """

    coords: NDArray[np.floating]
    el: int
    ad: int
    xs: int = N_XS_TYPES
    bonds: list[Bond] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.coords = np.asarray(self.coords, dtype=np.float64)
        if self.coords.shape != (3,):
            raise ValueError(f"Atom coords must have shape (3,), got {self.coords.shape}")

    def get(self, typing: AtomTyping) -> int:
        """Return this atom's type id under ``typing``."""
        if typing is AtomTyping.EL:
            return self.el
        if typing is AtomTyping.AD:
            return self.ad
        return self.xs

    def is_hydrogen(self) -> bool:
        return ad_is_hydrogen(self.ad)

    def add_bond(self, index: AtomIndex) -> None:
        self.bonds.append(Bond(index))

    @classmethod
    def create(
        cls,
        coords: ArrayLike,
        el: int,
        ad: int,
        xs: int = N_XS_TYPES,
        bonded_to: list[AtomIndex] | None = None,
    ) -> Atom:
        """
        Create an atom with optional bonds.

        Args:
            coords: Coordinates, shape (3,).
            el: Element type id.
            ad: AutoDock type id.
            xs: X-Score type id.
            bonded_to: Atoms this atom is bonded to.

        Returns:
            New Atom instance.
        """
        bonds = [Bond(index) for index in (bonded_to or [])]
        return cls(coords=np.asarray(coords, dtype=np.float64), el=el, ad=ad, xs=xs, bonds=bonds)


def triangular_matrix_index(n: int, i: int, j: int) -> int:
    """Index of (i, j), i <= j < n, in a packed upper-triangular matrix."""
    if not 0 <= i <= j:
        raise ValueError(f"expected 0 <= i <= j, got i={i}, j={j}")
    if j >= n:
        raise ValueError(f"index {j} out of range for {n} types")
    return i + j * (j + 1) // 2


def triangular_matrix_index_permissive(n: int, i: int, j: int) -> int:
    """Symmetric triangular index; argument order does not matter."""
    if i <= j:
        return triangular_matrix_index(n, i, j)
    return triangular_matrix_index(n, j, i)


def n_type_pairs(typing: AtomTyping) -> int:
    """Return number of unordered type pairs in a typing scheme."""
    n = typing.n_types
    return n * (n + 1) // 2


def get_type_pair_index(typing: AtomTyping, a: Atom, b: Atom) -> int:
    """Type-pair index of two atoms, both of which must be in scheme."""
    return triangular_matrix_index_permissive(typing.n_types, a.get(typing), b.get(typing))


def type_pair_matrix(typing: AtomTyping) -> NDArray[np.integer]:
    """
    Return the full (n, n) matrix of type-pair indices.

    Args:
        typing: Typing scheme.

    Returns:
        Symmetric integer array ``m`` with ``m[i, j]`` the type-pair index.
    """
    n = typing.n_types
    i, j = np.meshgrid(np.arange(n), np.arange(n), indexing="ij")
    lo = np.minimum(i, j)
    hi = np.maximum(i, j)
    return (lo + hi * (hi + 1) // 2).astype(np.int64)

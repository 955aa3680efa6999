"""Shared fixtures: stand-in potential tables and small model builders."""

import numpy as np
import pytest

from dockcore.grids import GridDims
from dockcore.potentials import PotentialTable
from dockcore.system import ADType, Atom, AtomIndex, AtomTyping, ElementType, Model, XSType
from dockcore.system.atoms import N_XS_TYPES

# =============================================================================
# Stand-in potential tables
# =============================================================================


class LinearPotential(PotentialTable):
    """
    E = k * s * (cutoff^2 - r2) * (1 + w * theta / 180), s = 1 + 0.1 * type_pair_index.

    Vanishes at the cutoff, so pair sums are continuous in position.
    """

    def __init__(self, k=1.0, cutoff=4.0, angle_weight=0.0, typing=AtomTyping.XS):
        self.k = k
        self._cutoff = cutoff
        self.angle_weight = angle_weight
        self._typing = typing

    @property
    def cutoff(self):
        return self._cutoff

    @property
    def atom_typing_used(self):
        return self._typing

    def _scale(self, type_pair_index, theta):
        return self.k * (1.0 + 0.1 * type_pair_index) * (
            1.0 + self.angle_weight * theta / 180.0
        )

    def eval_fast(self, type_pair_index, r2, theta):
        return self._scale(type_pair_index, theta) * (self.cutoff_sqr - r2)

    def eval_deriv(self, type_pair_index, r2, theta):
        scale = self._scale(type_pair_index, theta)
        return scale * (self.cutoff_sqr - r2), -2.0 * scale


class RecordingPotential(PotentialTable):
    """Constant energy; remembers every (type_pair_index, r2, theta) it is asked for."""

    def __init__(self, value=1.0, cutoff=4.0, typing=AtomTyping.XS):
        self.value = value
        self._cutoff = cutoff
        self._typing = typing
        self.calls = []

    @property
    def cutoff(self):
        return self._cutoff

    @property
    def atom_typing_used(self):
        return self._typing

    def eval_fast(self, type_pair_index, r2, theta):
        self.calls.append((type_pair_index, r2, theta))
        return self.value

    def eval_deriv(self, type_pair_index, r2, theta):
        self.calls.append((type_pair_index, r2, theta))
        return self.value, 0.0


class ExplodingPotential(RecordingPotential):
    """Fails on any lookup."""

    def eval_fast(self, type_pair_index, r2, theta):
        raise AssertionError("potential table should not be consulted")

    eval_deriv = eval_fast


# =============================================================================
# Atom builders
# =============================================================================


def carbon(coords, bonded_to=None, aromatic=False):
    return Atom.create(
        coords,
        el=ElementType.C,
        ad=ADType.A if aromatic else ADType.C,
        xs=XSType.C_H,
        bonded_to=bonded_to,
    )


def oxygen_acceptor(coords, bonded_to=None):
    return Atom.create(coords, el=ElementType.O, ad=ADType.OA, xs=XSType.O_A, bonded_to=bonded_to)


def chlorine(coords, bonded_to=None):
    return Atom.create(coords, el=ElementType.Cl, ad=ADType.Cl, xs=XSType.Cl_H, bonded_to=bonded_to)


def sulfur(coords, bonded_to=None):
    return Atom.create(coords, el=ElementType.S, ad=ADType.SA, xs=XSType.S_P, bonded_to=bonded_to)


def hydrogen(coords, bonded_to=None):
    return Atom.create(coords, el=ElementType.H, ad=ADType.HD, xs=N_XS_TYPES, bonded_to=bonded_to)


class AtomBuilders:
    """Namespace handed to tests through the ``atoms`` fixture."""

    carbon = staticmethod(carbon)
    oxygen_acceptor = staticmethod(oxygen_acceptor)
    chlorine = staticmethod(chlorine)
    sulfur = staticmethod(sulfur)
    hydrogen = staticmethod(hydrogen)
    ligand = staticmethod(lambda i: AtomIndex(i, in_grid=False))
    receptor = staticmethod(lambda i: AtomIndex(i, in_grid=True))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def atoms():
    """Atom builders."""
    return AtomBuilders


@pytest.fixture
def linear_potential():
    """Factory for LinearPotential tables."""
    return LinearPotential


@pytest.fixture
def recording_potential():
    """Factory for RecordingPotential tables."""
    return RecordingPotential


@pytest.fixture
def exploding_potential():
    """Factory for ExplodingPotential tables."""
    return ExplodingPotential


@pytest.fixture
def unit_dims():
    """4 x 4 x 4 box from the origin with unit lattice spacing."""
    return GridDims.from_bounds([0.0, 0.0, 0.0], [4.0, 4.0, 4.0], [4, 4, 4])


@pytest.fixture
def receptor_atoms():
    """
    Small receptor: a carbon, a chlorine bonded to it, and a hydrogen.

    Positions avoid lattice points of ``unit_dims``.
    """
    return [
        carbon([1.3, 2.1, 1.7], bonded_to=[AtomIndex(1, in_grid=True)]),
        chlorine([2.9, 2.3, 1.9], bonded_to=[AtomIndex(0, in_grid=True)]),
        hydrogen([0.7, 2.4, 1.1], bonded_to=[AtomIndex(0, in_grid=True)]),
    ]


@pytest.fixture
def make_model():
    """Build a Model from ligand atoms (all movable) and receptor atoms."""

    def factory(ligand, receptor, coords=None, n_movable=None):
        return Model.create(ligand, receptor, coords=coords, n_movable=n_movable)

    return factory


@pytest.fixture
def rng():
    """Deterministic random generator."""
    return np.random.default_rng(42)

"""Precomputed per-atom-type grids of the receptor potential."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..errors import (
    AtomTypingMismatchError,
    CacheFileError,
    EnergyMismatchError,
    GridDimsMismatchError,
)
from ..grids import Grid, GridDims
from ..io.cache_file import CacheArchive, CacheSnapshot
from ..neighborlists import BrickIndex
from ..parallel import ParallelBackend, get_backend
from ..system.atoms import AtomTyping, type_is_acceptor, type_pair_matrix
from .base import InteractionEvaluator
from .geometry import DEFAULT_ANGLE, GeometryCorrector

if TYPE_CHECKING:
    from ..parallel.dispatcher import BackendType
    from ..potentials import PotentialTable
    from ..system import Model

logger = logging.getLogger(__name__)


@dataclass
class _SlabContext:
    """Everything a worker needs to fill a range of lattice x-planes."""

    model: Model
    table: PotentialTable
    index: BrickIndex
    typing: AtomTyping
    needed: list[int]
    axes: tuple[NDArray[np.floating], NDArray[np.floating], NDArray[np.floating]]
    progress: bool = False


def _populate_slab(context: _SlabContext, bounds: tuple[int, int]) -> NDArray[np.floating]:
    """
    Sum the receptor potential at every lattice point of x-planes [start, stop).

    Returns:
        Array of shape (stop - start, ny, nz, len(needed)).
    """
    start, stop = bounds
    xs, ys, zs = context.axes
    model = context.model
    table = context.table
    nat = context.typing.n_types
    cutoff_sqr = table.cutoff_sqr

    grid_coords = model.grid_coords
    receptor_types = np.array(
        [a.get(context.typing) for a in model.grid_atoms], dtype=np.int64
    )
    pair_index = type_pair_matrix(context.typing)
    corrector = GeometryCorrector(model)
    needed = context.needed
    # Only an acceptor probe sees the receptor halogen/sulfur angle
    directional = [type_is_acceptor(context.typing, t2) for t2 in needed]

    affinities = np.zeros((stop - start, len(ys), len(zs), len(needed)), dtype=np.float64)

    for x in range(start, stop):
        for y in range(len(ys)):
            for z in range(len(zs)):
                probe = np.array([xs[x], ys[y], zs[z]])
                candidates = context.index.possibilities(probe)
                if len(candidates) == 0:
                    continue

                t1 = receptor_types[candidates]
                candidates = candidates[t1 < nat]
                t1 = t1[t1 < nat]

                r2 = np.sum((grid_coords[candidates] - probe) ** 2, axis=1)
                close = r2 <= cutoff_sqr
                if not np.any(close):
                    continue
                candidates, t1, r2 = candidates[close], t1[close], r2[close]

                isotropic = np.full(len(candidates), DEFAULT_ANGLE)
                theta = isotropic
                if any(directional):
                    theta = corrector.pair_angles(None, probe, candidates)
                for j, t2 in enumerate(needed):
                    angles = theta if directional[j] else isotropic
                    affinities[x - start, y, z, j] = np.sum(
                        table.eval_fast_many(pair_index[t1, t2], r2, angles)
                    )

    log = logger.info if context.progress else logger.debug
    log("Filled lattice planes x=%d..%d of %d", start, stop - 1, len(xs) - 1)
    return affinities


class GridCache(InteractionEvaluator):
    """
    Receptor potential precomputed on one lattice per ligand atom type.

    Grids are filled lazily: ``populate`` computes only the requested types
    that are not yet present, and never touches a grid once filled. All
    grids share the cache's dims and typing scheme.

    ``populate`` must finish before any ``eval`` call touching the same
    atom types; the cache does no locking of its own.

    Attributes:
        scoring_function_version: Version tag stored with persisted grids.
        dims: Lattice dims shared by every grid.
        slope: Penalty per unit distance outside the lattice.
        atom_typing: Typing scheme indexing ``grids``.
        grids: One Grid per type id.
        backend: Parallel backend used by ``populate``.
    """

    def __init__(
        self,
        scoring_function_version: str,
        dims: GridDims,
        slope: float = 1e6,
        atom_typing: AtomTyping = AtomTyping.XS,
        backend: BackendType | ParallelBackend | None = None,
    ) -> None:
        """
        Initialize an empty cache.

        Args:
            scoring_function_version: Version tag of the scoring function.
            dims: Lattice dims.
            slope: Out-of-bounds penalty slope.
            atom_typing: Typing scheme.
            backend: Backend name or instance for grid population.
        """
        self.scoring_function_version = scoring_function_version
        self.dims = dims
        self.slope = float(slope)
        self.atom_typing = atom_typing
        self.grids: list[Grid] = [Grid() for _ in range(atom_typing.n_types)]
        self.backend = get_backend(backend)

    @property
    def populated_types(self) -> list[int]:
        """Return type ids whose grids have been computed."""
        return [t for t, g in enumerate(self.grids) if g.initialized]

    def is_populated(self, atom_type: int) -> bool:
        return 0 <= atom_type < len(self.grids) and self.grids[atom_type].initialized

    def populate(
        self,
        model: Model,
        table: PotentialTable,
        atom_types_needed: Iterable[int],
        display_progress: bool = False,
    ) -> None:
        """
        Compute grids for requested atom types that are not yet present.

        Args:
            model: Model providing the receptor atoms.
            table: Pair potential table.
            atom_types_needed: Ligand type ids to make available. Ids outside
                the typing scheme are ignored.
            display_progress: Log progress at INFO level.
        """
        if table.atom_typing_used is not self.atom_typing:
            raise AtomTypingMismatchError(
                self.atom_typing.value, table.atom_typing_used.value
            )

        nat = self.atom_typing.n_types
        needed: list[int] = []
        for t in atom_types_needed:
            t = int(t)
            if not 0 <= t < nat:
                logger.debug("Skipping atom type %d outside %s typing", t, self.atom_typing.name)
                continue
            if not self.grids[t].initialized and t not in needed:
                needed.append(t)
        if not needed:
            return

        for t in needed:
            self.grids[t].init(self.dims)

        try:
            self._fill(model, table, needed, display_progress)
        except BaseException:
            for t in needed:
                self.grids[t] = Grid()
            raise

    def _fill(
        self,
        model: Model,
        table: PotentialTable,
        needed: list[int],
        display_progress: bool,
    ) -> None:
        g = self.grids[needed[0]]
        axes = (g.lattice_points(0), g.lattice_points(1), g.lattice_points(2))

        index = BrickIndex.from_atoms(model.grid_atoms, self.dims.reduced(), table.cutoff_sqr)
        context = _SlabContext(
            model=model,
            table=table,
            index=index,
            typing=self.atom_typing,
            needed=needed,
            axes=axes,
            progress=display_progress,
        )

        n_chunks = len(axes[0]) if display_progress else self.backend.n_workers
        chunks = self.backend.partition(len(axes[0]), n_chunks)

        log = logger.info if display_progress else logger.debug
        log(
            "Computing %d grid(s) over %s (%d points, %s backend)",
            len(needed),
            self.dims,
            self.dims.n_points,
            self.backend.name,
        )

        slabs = self.backend.parallel_map(partial(_populate_slab, context), chunks)
        for (start, stop), affinities in zip(chunks, slabs):
            for j, t in enumerate(needed):
                self.grids[t].data[start:stop] = affinities[..., j]

        log("Grids ready for atom types %s", needed)

    def eval(self, model: Model, v: float = math.inf) -> float:
        """Sum interpolated grid values over movable atoms in scheme."""
        e = 0.0
        nat = self.atom_typing.n_types

        for i in range(model.n_movable):
            t = model.atoms[i].get(self.atom_typing)
            if t >= nat:
                continue
            e += self.grids[t].evaluate(model.coords[i], self.slope, v)
        return e

    def eval_deriv(self, model: Model, v: float = math.inf) -> float:
        """Sum interpolated grid values and write per-atom gradients."""
        e = 0.0
        nat = self.atom_typing.n_types

        for i in range(model.n_movable):
            t = model.atoms[i].get(self.atom_typing)
            if t >= nat:
                model.minus_forces[i] = 0.0
                continue
            this_e, deriv = self.grids[t].evaluate_deriv(model.coords[i], self.slope, v)
            e += this_e
            model.minus_forces[i] = deriv
        return e

    def write(self, path: str | Path, compress: bool = True) -> Path:
        """
        Persist populated grids together with the cache configuration.

        Args:
            path: Output file.
            compress: Whether to gzip the file.

        Returns:
            Path written.
        """
        path = CacheArchive(compress=compress).save(CacheSnapshot.from_cache(self), path)
        logger.info("Saved %d grid(s) to %s", len(self.populated_types), path)
        return path

    def read(self, path: str | Path) -> None:
        """
        Load grids written by ``write``.

        Raises:
            EnergyMismatchError: Scoring-function version differs.
            GridDimsMismatchError: Lattice dims differ.
            AtomTypingMismatchError: Typing scheme differs.
            CacheFileError: File is corrupted or holds invalid grids.
        """
        self.restore(CacheArchive().load(path))
        logger.info("Loaded %d grid(s) from %s", len(self.populated_types), path)

    def restore(self, snapshot: CacheSnapshot) -> None:
        """
        Replace all grids with those of ``snapshot`` after validating it.

        Fields are checked in order version, dims, typing; the first
        mismatch raises its own error and leaves the cache unchanged.
        """
        if snapshot.scoring_function_version != self.scoring_function_version:
            raise EnergyMismatchError(
                self.scoring_function_version, snapshot.scoring_function_version
            )

        stored_dims = GridDims(snapshot.dims)
        if not stored_dims.matches(self.dims):
            raise GridDimsMismatchError(self.dims, stored_dims)

        if snapshot.atom_typing != self.atom_typing.value:
            raise AtomTypingMismatchError(self.atom_typing.value, snapshot.atom_typing)

        grids = [Grid() for _ in range(self.atom_typing.n_types)]
        for t, data in snapshot.grids.items():
            if not 0 <= t < len(grids):
                raise CacheFileError(f"cache holds grid for invalid atom type {t}")
            try:
                grids[t] = Grid.from_array(self.dims, data)
            except ValueError as exc:
                raise CacheFileError(f"invalid grid for atom type {t}: {exc}") from exc
        self.grids = grids

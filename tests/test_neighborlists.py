"""Tests for the brick spatial index."""

import numpy as np
import pytest

from dockcore.grids import GridDims
from dockcore.neighborlists import BrickIndex, brick_distance_sqr


class TestBrickDistance:
    """Test point-to-box distance."""

    def test_inside_is_zero(self):
        assert brick_distance_sqr(np.zeros(3), np.ones(3), [0.5, 0.2, 0.9]) == 0.0

    def test_face_edge_corner(self):
        begin, end = np.zeros(3), np.ones(3)
        assert brick_distance_sqr(begin, end, [2.0, 0.5, 0.5]) == pytest.approx(1.0)
        assert brick_distance_sqr(begin, end, [2.0, -1.0, 0.5]) == pytest.approx(2.0)
        assert brick_distance_sqr(begin, end, [-1.0, -1.0, 3.0]) == pytest.approx(6.0)

    def test_vectorized(self):
        d2 = brick_distance_sqr(np.zeros(3), np.ones(3), [[0.5, 0.5, 0.5], [0.5, 0.5, 3.0]])
        np.testing.assert_allclose(d2, [0.0, 4.0])


class TestBrickIndex:
    """Test BrickIndex."""

    @pytest.fixture
    def dims(self):
        return GridDims.from_bounds([0.0, 0.0, 0.0], [12.0, 9.0, 6.0], [32, 24, 16]).reduced()

    def test_layout(self, dims):
        index = BrickIndex(dims, 16.0)
        assert index.n_cells == (4, 3, 2)
        assert index.cutoff_sqr == 16.0

    def test_query_before_build(self, dims):
        with pytest.raises(RuntimeError):
            BrickIndex(dims, 16.0).possibilities([1.0, 1.0, 1.0])

    def test_rejects_disabled_axis(self):
        with pytest.raises(ValueError):
            BrickIndex(GridDims.from_bounds([0, 0, 0], [1, 1, 1], [1, 1, 0]), 1.0)

    def test_superset_of_true_neighbors(self, dims, atoms, rng):
        """Every heavy atom within the cutoff of an in-box point is a candidate."""
        cutoff_sqr = 4.0**2
        positions = rng.uniform([-5, -5, -5], [17, 14, 11], size=(200, 3))
        receptor = [atoms.carbon(p) for p in positions]
        index = BrickIndex.from_atoms(receptor, dims, cutoff_sqr)

        for point in rng.uniform([0, 0, 0], [12, 9, 6], size=(100, 3)):
            d2 = np.sum((positions - point) ** 2, axis=1)
            expected = set(np.flatnonzero(d2 < cutoff_sqr))
            assert expected <= set(index.possibilities(point).tolist())

    def test_excludes_hydrogens_and_far_atoms(self, dims, atoms):
        receptor = [
            atoms.carbon([1.0, 1.0, 1.0]),
            atoms.hydrogen([1.2, 1.0, 1.0]),
            atoms.carbon([40.0, 1.0, 1.0]),
        ]
        index = BrickIndex.from_atoms(receptor, dims, 16.0)
        stored = set()
        for cell in np.ndindex(*index.n_cells):
            stored.update(index._cells[cell].tolist())
        assert stored == {0}

    def test_points_outside_use_edge_brick(self, dims, atoms):
        receptor = [atoms.carbon([0.5, 0.5, 0.5]), atoms.carbon([11.5, 8.5, 5.5])]
        index = BrickIndex.from_atoms(receptor, dims, 4.0)
        assert index.local_index([-10.0, -10.0, -10.0]) == (0, 0, 0)
        assert index.local_index([100.0, 100.0, 100.0]) == (3, 2, 1)
        assert 0 in index.possibilities([-10.0, -10.0, -10.0])
        assert 1 in index.possibilities([100.0, 100.0, 100.0])

    def test_empty_receptor(self, dims):
        index = BrickIndex.from_atoms([], dims, 16.0)
        assert len(index.possibilities([1.0, 1.0, 1.0])) == 0

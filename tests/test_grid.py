"""Tests for lattice dims and grid interpolation."""

import numpy as np
import pytest

from dockcore.grids import Grid, GridDim, GridDims

# =============================================================================
# Fixtures
# =============================================================================


COEFFS = np.array([0.5, -1.25, 2.0])
OFFSET = 3.0


@pytest.fixture
def dims():
    """Non-cubic lattice: 2 x 3 x 4 intervals over a box offset from the origin."""
    return GridDims.from_bounds([-1.0, 0.0, 2.0], [1.0, 1.5, 4.0], [2, 3, 4])


@pytest.fixture
def linear_grid(dims):
    """Grid sampling f(p) = COEFFS . p + OFFSET."""
    g = Grid()
    g.init(dims)
    xs, ys, zs = (g.lattice_points(axis) for axis in range(3))
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing="ij")
    return Grid.from_array(dims, COEFFS[0] * X + COEFFS[1] * Y + COEFFS[2] * Z + OFFSET)


def linear(p):
    return float(np.dot(COEFFS, p) + OFFSET)


# =============================================================================
# GridDims
# =============================================================================


class TestGridDims:
    """Test lattice dims."""

    def test_from_box(self):
        dims = GridDims.from_box([0.0, 0.0, 0.0], [3.0, 3.1, 0.0], granularity=0.375)
        assert dims.n == (8, 9, 0)
        # Widened symmetrically to a whole number of intervals
        assert dims[1].span == pytest.approx(9 * 0.375)
        assert dims[1].begin == pytest.approx(-dims[1].end)
        assert not dims[2].enabled

    def test_shape_and_points(self, dims):
        assert dims.shape == (3, 4, 5)
        assert dims.n_points == 60

    def test_matches_tolerates_rounding(self, dims):
        other = GridDims.from_bounds(
            dims.begin + 1e-17, dims.end, dims.n
        )
        assert dims.matches(other)
        assert not dims.matches(GridDims.from_bounds(dims.begin, dims.end, [2, 3, 5]))
        assert not dims.matches(GridDims.from_bounds(dims.begin + 0.01, dims.end, dims.n))

    def test_reduced(self):
        dims = GridDims.from_bounds([0, 0, 0], [10.0, 2.0, 6.5], [40, 8, 26])
        assert dims.reduced().n == (3, 1, 2)
        np.testing.assert_array_equal(dims.reduced().end, dims.end)

    def test_invalid_axis(self):
        with pytest.raises(ValueError):
            GridDim(1.0, 0.0, 2)
        with pytest.raises(ValueError):
            GridDim(0.0, 1.0, -1)

    def test_accepts_tuples(self, dims):
        assert GridDims(dims.to_tuple()) == dims


# =============================================================================
# Grid
# =============================================================================


class TestGrid:
    """Test grid allocation and interpolation."""

    def test_uninitialized(self):
        g = Grid()
        assert not g.initialized
        with pytest.raises(RuntimeError):
            g.evaluate([0, 0, 0], 1.0, np.inf)
        with pytest.raises(RuntimeError):
            g.evaluate_deriv([0, 0, 0], 1.0, np.inf)

    def test_init_zero_filled(self, dims):
        g = Grid()
        g.init(dims)
        assert g.initialized
        assert g.shape == dims.shape
        assert np.all(g.data == 0.0)

    def test_init_rejects_disabled_axis(self):
        g = Grid()
        with pytest.raises(ValueError):
            g.init(GridDims.from_bounds([0, 0, 0], [1, 1, 1], [1, 0, 1]))

    def test_from_array_checks_shape(self, dims):
        with pytest.raises(ValueError):
            Grid.from_array(dims, np.zeros((3, 4, 4)))

    def test_index_to_argument(self, linear_grid):
        np.testing.assert_allclose(linear_grid.index_to_argument(0, 0, 0), [-1.0, 0.0, 2.0])
        np.testing.assert_allclose(linear_grid.index_to_argument(2, 3, 4), [1.0, 1.5, 4.0])
        np.testing.assert_allclose(linear_grid.index_to_argument(1, 1, 1), [0.0, 0.5, 2.5])

    def test_linear_field_reproduced(self, linear_grid, rng):
        """Trilinear interpolation is exact for a linear field."""
        for p in rng.uniform([-1.0, 0.0, 2.0], [1.0, 1.5, 4.0], size=(20, 3)):
            assert linear_grid.evaluate(p, 10.0, np.inf) == pytest.approx(linear(p))

    def test_linear_field_gradient(self, linear_grid, rng):
        for p in rng.uniform([-0.9, 0.1, 2.1], [0.9, 1.4, 3.9], size=(20, 3)):
            e, deriv = linear_grid.evaluate_deriv(p, 10.0, np.inf)
            assert e == pytest.approx(linear(p))
            np.testing.assert_allclose(deriv, COEFFS, atol=1e-12)

    def test_lattice_point_value(self, linear_grid):
        linear_grid.data[1, 2, 3] = 42.0
        p = linear_grid.index_to_argument(1, 2, 3)
        assert linear_grid.evaluate(p, 0.0, np.inf) == pytest.approx(42.0)

    def test_out_of_bounds_penalty(self, linear_grid):
        inside = np.array([0.3, 0.7, 3.1])
        below = inside - np.array([0.4 + 1.0 + 0.3, 0.0, 0.0])  # 0.4 beyond begin
        slope = 100.0
        e = linear_grid.evaluate(below, slope, np.inf)
        clamped = np.array([-1.0, 0.7, 3.1])
        assert e == pytest.approx(linear(clamped) + slope * 0.4)

    def test_out_of_bounds_gradient(self, linear_grid):
        slope = 100.0
        above = np.array([0.3, 2.0, 3.1])  # 0.5 beyond end on y
        e, deriv = linear_grid.evaluate_deriv(above, slope, np.inf)
        assert e == pytest.approx(linear([0.3, 1.5, 3.1]) + slope * 0.5)
        # Outside axes lose the interpolated slope and get the penalty sign
        np.testing.assert_allclose(deriv, [COEFFS[0], slope, COEFFS[2]])

    def test_below_and_above_multiple_axes(self, linear_grid):
        slope = 7.0
        p = np.array([-2.0, 0.75, 5.0])
        e, deriv = linear_grid.evaluate_deriv(p, slope, np.inf)
        assert e == pytest.approx(linear([-1.0, 0.75, 4.0]) + slope * 2.0)
        np.testing.assert_allclose(deriv, [-slope, COEFFS[1], slope])

    def test_curl_applied_to_interpolated_value_only(self, dims):
        g = Grid.from_array(dims, np.full(dims.shape, 3.0))
        v = 1.0
        assert g.evaluate([0.0, 0.5, 3.0], 5.0, v) == pytest.approx(3.0 * v / (v + 3.0))
        outside = g.evaluate([0.0, 0.5, 4.5], 5.0, v)
        assert outside == pytest.approx(3.0 * v / (v + 3.0) + 5.0 * 0.5)

"""Tests for field grids and grid conversions."""

import pytest
import numpy as np

from py_isogen.core.errors import InvalidDimensions, OutOfBoundsSample
from py_isogen.core.field_grid import FieldGrid, heightmap_to_volume, validate_dimensions


class TestFieldGrid:
    """Test grid construction and access."""

    def test_shape_properties(self):
        """Test dimension accessors for 2D and 3D grids."""
        grid = FieldGrid(np.zeros((4, 3, 2)))
        assert (grid.width, grid.height, grid.depth) == (4, 3, 2)
        assert grid.sample_count == 24
        assert grid.cell_shape == (3, 2, 1)
        assert FieldGrid(np.zeros((4, 3))).depth is None

    def test_immutable(self):
        """Test that sample arrays are read-only copies."""
        source = np.zeros((3, 3))
        grid = FieldGrid(source)
        source[0, 0] = 1.0
        assert grid.values[0, 0] == 0.0
        with pytest.raises(ValueError):
            grid.values[0, 0] = 2.0

    def test_float32_storage(self):
        """Test that samples are stored as float32."""
        assert FieldGrid(np.ones((2, 2), dtype=np.float64)).values.dtype == np.float32

    def test_sample_bounds(self):
        """Test single-sample access and its bounds check."""
        grid = FieldGrid(np.arange(12, dtype=float).reshape(4, 3))
        assert grid.sample(2, 1) == 7.0
        with pytest.raises(OutOfBoundsSample):
            grid.sample(4, 0)
        with pytest.raises(OutOfBoundsSample):
            grid.sample(0, -1)
        with pytest.raises(OutOfBoundsSample):
            grid.sample(0)

    def test_world_position(self):
        """Test the index-to-world mapping."""
        grid = FieldGrid(np.zeros((3, 3)), cell_size=0.5, origin=(1.0, 2.0, 3.0))
        np.testing.assert_allclose(grid.world_position(2, 1), [2.0, 2.5, 3.0])
        np.testing.assert_allclose(grid.world_positions(np.array([[0.0, 0.0], [1.0, 2.0]])),
                                   [[1.0, 2.0, 3.0], [1.5, 3.0, 3.0]])

    @pytest.mark.parametrize("dims", [(0, 3), (3, -2), (2, 2, 0), (2.5, 2)])
    def test_invalid_dimensions(self, dims):
        """Test that non-positive or non-integer extents are rejected."""
        with pytest.raises(InvalidDimensions):
            validate_dimensions(*dims)

    def test_invalid_grids(self):
        """Test that 1D arrays and bad cell sizes are rejected."""
        with pytest.raises(InvalidDimensions):
            FieldGrid(np.zeros(5))
        with pytest.raises(InvalidDimensions):
            FieldGrid(np.zeros((2, 2)), cell_size=0.0)


class TestResample:
    """Test bilinear/trilinear resampling."""

    def test_shape_and_first_sample(self):
        """Test the resampled shape and that sample 0 is preserved."""
        values = np.random.default_rng(1).random((5, 7))
        grid = FieldGrid(values)
        resampled = grid.resample(9, 13)
        assert resampled.shape == (9, 13)
        assert resampled.values[0, 0] == pytest.approx(grid.values[0, 0])

    def test_linear_field_stays_linear(self):
        """Test that a linear ramp is reproduced exactly by linear interpolation."""
        xs = np.arange(5, dtype=float)
        grid = FieldGrid(np.repeat(xs[:, None], 3, axis=1))
        resampled = grid.resample(8, 3)
        expected = np.arange(8) * (4 / 8)
        np.testing.assert_allclose(resampled.values[:, 0], expected, rtol=1e-6)

    def test_3d(self):
        """Test trilinear resampling of a constant volume."""
        grid = FieldGrid(np.full((3, 4, 5), 0.25))
        resampled = grid.resample(6, 6, 6)
        np.testing.assert_allclose(resampled.values, 0.25)

    def test_axis_mismatch(self):
        """Test that the target must match the grid's dimensionality."""
        with pytest.raises(InvalidDimensions):
            FieldGrid(np.zeros((3, 3))).resample(4, 4, 4)


class TestHeightmapToVolume:
    """Test heightmap to density volume conversion."""

    def test_columns(self):
        """Test that columns are solid below the scaled height."""
        heightmap = FieldGrid(np.array([[0.0, 0.5], [1.0, 0.25]]))
        volume = heightmap_to_volume(heightmap, 4)
        assert volume.shape == (2, 4, 2)
        # h = 0.5 -> surface at y = 2
        np.testing.assert_allclose(volume.values[0, :, 1], [1.0, 1.0, 0.0, 0.0])
        np.testing.assert_allclose(volume.values[0, :, 0], 0.0)
        np.testing.assert_allclose(volume.values[1, :, 0], 1.0)

    def test_y_offset(self):
        """Test volumes that are upper slices of a taller column."""
        heightmap = FieldGrid(np.full((2, 2), 0.5))
        volume = heightmap_to_volume(heightmap, 3, surface_height=8.0, y_offset=3)
        # surface at 4: layers y = 3, 4, 5
        np.testing.assert_allclose(volume.values[0, :, 0], [1.0, 0.0, 0.0])

    def test_rejects_volume_input(self):
        """Test that only 2D heightmaps are accepted."""
        with pytest.raises(InvalidDimensions):
            heightmap_to_volume(FieldGrid(np.zeros((2, 2, 2))), 4)

"""Tests for parallel synthesis and extraction."""

import pytest
import numpy as np

from py_isogen.core.errors import InvalidParameter
from py_isogen.core.marching import extract
from py_isogen.core.noise_generator import generate
from py_isogen.core.noise_parameters import (
    BlueNoiseParameters, CellularNoiseParameters, NormalizeMode, PerlinNoiseParameters,
    PinkNoiseParameters, RandomNoiseParameters, SimplexNoiseParameters,
    TurbulenceNoiseParameters, WaveletNoiseParameters,
)
from py_isogen.core.parallel import ParallelExecutionCoordinator, slab_bounds


@pytest.fixture
def volume():
    return generate(PerlinNoiseParameters(seed=21, octaves=4, scale=7.0), 18, 14, 11)


def assert_meshes_identical(a, b):
    np.testing.assert_array_equal(a.vertices, b.vertices)
    np.testing.assert_array_equal(a.indices, b.indices)
    np.testing.assert_array_equal(a.uvs, b.uvs)


class TestParallelExtraction:
    """Test deterministic merging of slice meshes."""

    def test_matches_sequential(self, volume):
        """Test that x-slice extraction is byte-identical to sequential extraction."""
        sequential = extract(volume, 0.5)
        parallel = ParallelExecutionCoordinator(max_workers=4).extract_parallel(volume, 0.5)
        assert_meshes_identical(parallel, sequential)

    @pytest.mark.parametrize("axis", [0, 1, 2])
    def test_worker_count_independent(self, volume, axis):
        """Test that output does not depend on the number of workers."""
        one = ParallelExecutionCoordinator(max_workers=1).extract_parallel(volume, 0.5, axis)
        many = ParallelExecutionCoordinator(max_workers=8).extract_parallel(volume, 0.5, axis)
        assert_meshes_identical(one, many)

    @pytest.mark.parametrize("axis", [1, 2])
    def test_other_axes_same_counts(self, volume, axis):
        """Test that slicing on other axes keeps vertex and triangle counts."""
        sequential = extract(volume, 0.5)
        parallel = ParallelExecutionCoordinator(max_workers=3).extract_parallel(volume, 0.5, axis)
        assert parallel.vertex_count == sequential.vertex_count
        assert parallel.triangle_count == sequential.triangle_count
        parallel.validate()

    def test_2d_grid(self):
        """Test parallel marching squares."""
        grid = generate(PerlinNoiseParameters(seed=3), 30, 20)
        sequential = extract(grid, 0.5)
        parallel = ParallelExecutionCoordinator(max_workers=2).extract_parallel(grid, 0.5)
        assert_meshes_identical(parallel, sequential)

    def test_invalid_axis(self, volume):
        """Test that an out-of-range slice axis is rejected."""
        with pytest.raises(InvalidParameter):
            ParallelExecutionCoordinator(max_workers=2).extract_parallel(volume, 0.5, 3)

    def test_invalid_worker_count(self):
        """Test that max_workers must be positive."""
        with pytest.raises(InvalidParameter):
            ParallelExecutionCoordinator(max_workers=0)


class TestParallelSynthesis:
    """Test slab-parallel field synthesis."""

    @pytest.mark.parametrize(
        "params",
        [
            RandomNoiseParameters(seed=8),
            PerlinNoiseParameters(seed=8, octaves=3),
            PerlinNoiseParameters(seed=8, normalize_mode=NormalizeMode.GLOBAL),
            TurbulenceNoiseParameters(seed=8),
            SimplexNoiseParameters(seed=8, octaves=3),
            SimplexNoiseParameters(seed=8, normalize_mode=NormalizeMode.GLOBAL),
            PinkNoiseParameters(seed=8),
            CellularNoiseParameters(seed=8, cell_count_x=3, cell_count_y=4, cell_count_z=2),
            BlueNoiseParameters(seed=8, min_distance=2.5),
            WaveletNoiseParameters(seed=8),
        ],
        ids=lambda p: p.kind,
    )
    @pytest.mark.parametrize("depth", [None, 9])
    def test_matches_sequential(self, params, depth):
        """Test that parallel synthesis is bit-identical to sequential synthesis."""
        sequential = generate(params, 23, 17, depth)
        parallel = ParallelExecutionCoordinator(max_workers=4).generate_parallel(
            params, 23, 17, depth
        )
        np.testing.assert_array_equal(parallel.values, sequential.values)

    def test_slab_bounds(self):
        """Test slab partitioning covers the axis without gaps."""
        bounds = slab_bounds(10, 4)
        assert bounds[0][0] == 0
        assert bounds[-1][1] == 10
        for (_, stop), (start, _) in zip(bounds, bounds[1:]):
            assert stop == start
        assert slab_bounds(2, 8) == [(0, 1), (1, 2)]

"""Tests for explicit surface regeneration."""

import pytest
import numpy as np

from py_isogen.core.noise_parameters import CellularNoiseParameters, PerlinNoiseParameters
from py_isogen.core.pipeline import SurfacePipeline


@pytest.fixture
def params():
    return PerlinNoiseParameters(seed=31, octaves=3, scale=8.0)


class TestSurfacePipeline:
    """Test the update/regenerate cycle."""

    def test_no_result_before_regenerate(self, params):
        """Test that construction does not compute anything."""
        pipeline = SurfacePipeline(params, (16, 16, 8))
        assert pipeline.result is None
        assert pipeline.is_stale

    def test_regenerate(self, params):
        """Test that regenerate builds and caches a field and mesh."""
        pipeline = SurfacePipeline(params, (16, 16, 8), threshold=0.5)
        result = pipeline.regenerate()
        assert pipeline.result is result
        assert not pipeline.is_stale
        assert result.grid.shape == (16, 16, 8)
        assert result.mesh.triangle_count > 0
        result.mesh.validate()

    def test_update_does_not_recompute(self, params):
        """Test that update only marks the pipeline stale."""
        pipeline = SurfacePipeline(params, (12, 12))
        first = pipeline.regenerate()
        pipeline.update(params=CellularNoiseParameters(cell_count_x=3, cell_count_y=3), threshold=0.3)
        assert pipeline.result is first
        assert pipeline.is_stale

        second = pipeline.regenerate()
        assert second is not first
        assert second.params.kind == "cellular"
        assert second.threshold == 0.3

    def test_parallel_matches_sequential(self, params):
        """Test that parallel regeneration reproduces sequential output."""
        sequential = SurfacePipeline(params, (14, 10, 9)).regenerate()
        parallel = SurfacePipeline(params, (14, 10, 9), parallel=True, max_workers=3).regenerate()
        np.testing.assert_array_equal(parallel.grid.values, sequential.grid.values)
        np.testing.assert_array_equal(parallel.mesh.vertices, sequential.mesh.vertices)
        np.testing.assert_array_equal(parallel.mesh.indices, sequential.mesh.indices)

    def test_fill_interior(self, params):
        """Test that 2D pipelines can fill above-threshold regions."""
        outline = SurfacePipeline(params, (20, 20)).regenerate()
        filled = SurfacePipeline(params, (20, 20), fill_interior=True).regenerate()
        assert filled.mesh.triangle_count > outline.mesh.triangle_count

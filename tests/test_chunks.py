"""Tests for chunk partitioning and chunk generation."""

import pytest
import numpy as np

from py_isogen.core.chunks import Chunk, ChunkGenerator, partition
from py_isogen.core.errors import InvalidDimensions, InvalidParameter
from py_isogen.core.noise_parameters import (
    NormalizeMode, PerlinNoiseParameters, PinkNoiseParameters, SimplexNoiseParameters,
)


@pytest.fixture
def global_perlin():
    return PerlinNoiseParameters(seed=12, octaves=3, scale=9.0, normalize_mode=NormalizeMode.GLOBAL)


class TestPartition:
    """Test chunk layout construction."""

    def test_count_and_order(self):
        """Test that chunks are produced x-major with the expected count."""
        layout = partition((0.0, 0.0, 0.0), (8, 4, 8), (2, 1, 3))
        descriptors = list(layout)
        assert len(layout) == 6
        assert len(descriptors) == 6
        assert [d.index for d in descriptors[:3]] == [(0, 0, 0), (0, 0, 1), (0, 0, 2)]

    def test_restartable(self):
        """Test that iterating twice yields the same descriptors."""
        layout = partition((1.0, 2.0, 3.0), (4, 4, 4), (2, 2, 2))
        assert list(layout) == list(layout)

    def test_border_overlap(self):
        """Test that each chunk samples one extra layer per axis."""
        layout = partition((0.0, 0.0), (16, 8), (1, 1))
        descriptor = next(iter(layout))
        assert descriptor.sample_shape == (17, 9)

    def test_world_origins(self):
        """Test chunk world origins for a shifted, scaled layout."""
        layout = partition((10.0, 0.0, -5.0), (4, 4, 4), (2, 1, 2), cell_size=0.5)
        origins = {d.index: d.world_origin for d in layout}
        assert origins[(1, 0, 1)] == (12.0, 0.0, -3.0)
        assert origins[(0, 0, 0)] == (10.0, 0.0, -5.0)

    @pytest.mark.parametrize(
        "dims,counts",
        [((0, 4, 4), (1, 1, 1)), ((4, 4, 4), (1, -1, 1)), ((4, 4), (1, 1, 1)), ((4,), (1,))],
    )
    def test_invalid(self, dims, counts):
        """Test that non-positive or mismatched extents are rejected."""
        with pytest.raises(InvalidDimensions):
            partition((0.0, 0.0, 0.0), dims, counts)


class TestChunkGenerator:
    """Test per-chunk field and mesh generation."""

    def test_density_chunks_are_continuous(self, global_perlin):
        """Test that neighbouring density chunks agree on their shared layer."""
        layout = partition((0.0, 0.0, 0.0), (8, 8, 8), (2, 1, 1))
        generator = ChunkGenerator(global_perlin, threshold=0.5, volume_mode="density")
        left, right = list(generator.generate_all(layout))
        np.testing.assert_array_equal(left.grid.values[-1], right.grid.values[0])

    @pytest.mark.parametrize(
        "params",
        [
            SimplexNoiseParameters(seed=12, octaves=3, scale=9.0, normalize_mode=NormalizeMode.GLOBAL),
            PinkNoiseParameters(seed=12, octaves=3, scale=9.0),
        ],
        ids=lambda p: p.kind,
    )
    def test_fractal_kinds_are_continuous(self, params):
        """Test that simplex and pink density chunks agree on their shared layer."""
        layout = partition((0.0, 0.0, 0.0), (6, 6, 6), (1, 1, 2))
        generator = ChunkGenerator(params, threshold=0.5, volume_mode="density")
        front, back = list(generator.generate_all(layout))
        np.testing.assert_array_equal(front.grid.values[:, :, -1], back.grid.values[:, :, 0])

    def test_chunk_record(self, global_perlin):
        """Test that a generated chunk carries its descriptor, field and mesh."""
        descriptor = next(iter(partition((0.0, 0.0, 0.0), (4, 4, 4), (1, 1, 1))))
        chunk = ChunkGenerator(global_perlin).generate(descriptor)
        assert isinstance(chunk, Chunk)
        assert chunk.descriptor == descriptor
        assert chunk.grid.shape == descriptor.sample_shape
        assert not Chunk.__doc__.startswith("Chunk(")

    def test_heightmap_mode(self, global_perlin):
        """Test that heightmap chunks are solid below and empty above the surface."""
        layout = partition((0.0, 0.0, 0.0), (8, 8, 8), (1, 1, 1))
        generator = ChunkGenerator(global_perlin, threshold=0.5, volume_mode="heightmap",
                                   surface_height=4.0)
        chunk = generator.generate(next(iter(layout)))

        assert chunk.grid.shape == (9, 9, 9)
        assert np.all(chunk.grid.values[:, 0, :] >= 0.0)
        # surface_height * h <= 4 * 2, so layers from y = 8 up are empty
        assert np.all(chunk.grid.values[:, 8, :] == 0.0)
        chunk.mesh.validate()

    def test_chunk_grid_origin(self, global_perlin):
        """Test that chunk grids carry their world origin and cell size."""
        layout = partition((100.0, 0.0, 0.0), (4, 4, 4), (2, 1, 1), cell_size=2.0)
        generator = ChunkGenerator(global_perlin, volume_mode="density")
        chunks = list(generator.generate_all(layout))
        assert chunks[1].grid.origin == (108.0, 0.0, 0.0)
        assert chunks[1].grid.cell_size == 2.0
        if chunks[1].mesh.vertex_count:
            assert chunks[1].mesh.vertices[:, 0].min() >= 108.0

    def test_2d_chunks(self, global_perlin):
        """Test that 2D layouts produce marching squares meshes."""
        layout = partition((0.0, 0.0), (12, 12), (2, 2))
        generator = ChunkGenerator(global_perlin, threshold=0.5)
        chunks = list(generator.generate_all(layout))
        assert len(chunks) == 4
        for chunk in chunks:
            assert chunk.grid.ndim == 2
            chunk.mesh.validate()

    def test_invalid_volume_mode(self, global_perlin):
        """Test that unknown volume modes are rejected."""
        with pytest.raises(InvalidParameter):
            ChunkGenerator(global_perlin, volume_mode="voxels")

"""Tests for mesh buffers."""

import pytest
import numpy as np

from py_isogen.core.errors import InvalidParameter
from py_isogen.core.mesh import Mesh


@pytest.fixture
def triangle():
    return Mesh(
        vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]],
        indices=[0, 1, 2],
        uvs=[[0, 0], [1, 0], [0, 1]],
    )


class TestMesh:
    """Test mesh construction and merging."""

    def test_empty(self):
        """Test the empty mesh."""
        mesh = Mesh.empty()
        assert mesh.vertex_count == 0
        assert mesh.triangle_count == 0
        assert mesh.is_empty()
        mesh.validate()

    def test_dtypes(self, triangle):
        """Test buffer dtypes and shapes."""
        assert triangle.vertices.dtype == np.float32
        assert triangle.indices.dtype == np.uint32
        assert triangle.triangles.shape == (1, 3)

    def test_append_rebases_indices(self, triangle):
        """Test that appended indices are offset by the existing vertex count."""
        mesh = Mesh.empty()
        mesh.append(triangle)
        mesh.append(triangle)
        np.testing.assert_array_equal(mesh.indices, [0, 1, 2, 3, 4, 5])
        assert mesh.uvs.shape == (6, 2)
        mesh.validate()

    def test_concatenate_preserves_order(self, triangle):
        """Test that concatenation keeps input order and rebases indices."""
        other = Mesh(vertices=[[5, 5, 5], [6, 5, 5], [5, 6, 5]], indices=[2, 1, 0],
                     uvs=[[0, 0], [0, 0], [0, 0]])
        merged = Mesh.concatenate([triangle, Mesh.empty(), other])
        assert merged.vertex_count == 6
        np.testing.assert_array_equal(merged.indices, [0, 1, 2, 5, 4, 3])
        np.testing.assert_array_equal(merged.vertices[3], [5, 5, 5])

    def test_concatenate_drops_partial_uvs(self, triangle):
        """Test that UVs are dropped when some inputs lack them."""
        bare = Mesh(vertices=triangle.vertices, indices=triangle.indices)
        assert Mesh.concatenate([triangle, bare]).uvs is None

    def test_validate_rejects_bad_indices(self):
        """Test that out-of-range and partial triangles are rejected."""
        with pytest.raises(InvalidParameter):
            Mesh(vertices=[[0, 0, 0]], indices=[0, 0, 1]).validate()
        with pytest.raises(InvalidParameter):
            Mesh(vertices=[[0, 0, 0]], indices=[0, 0]).validate()

    def test_recalculate_normals(self, triangle):
        """Test that a counter-clockwise XY triangle gets +z normals."""
        normals = triangle.recalculate_normals()
        np.testing.assert_allclose(normals, [[0, 0, 1]] * 3)
        assert triangle.normals is normals

    def test_unreferenced_vertex_normal_is_zero(self):
        """Test that vertices without triangles get zero normals."""
        mesh = Mesh(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0], [9, 9, 9]], indices=[0, 1, 2])
        normals = mesh.recalculate_normals()
        np.testing.assert_array_equal(normals[3], [0, 0, 0])

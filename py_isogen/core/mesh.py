"""
Triangle mesh buffers produced by isosurface extraction.

Vertices are world-space float32 triples, indices a flat uint32 array of
consecutive triangle triples. UVs and normals are optional per-vertex arrays.
Meshes are merged by appending, with the incoming indices rebased onto the
current vertex count.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from .errors import InvalidParameter


def _empty_vertices():
    return np.zeros((0, 3), dtype=np.float32)


def _empty_indices():
    return np.zeros(0, dtype=np.uint32)


@dataclass(eq=False)
class Mesh:
    """Vertex, index and optional UV/normal buffers."""

    vertices: np.ndarray = field(default_factory=_empty_vertices)
    indices: np.ndarray = field(default_factory=_empty_indices)
    uvs: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        self.indices = np.asarray(self.indices, dtype=np.uint32).reshape(-1)
        if self.uvs is not None:
            self.uvs = np.asarray(self.uvs, dtype=np.float32).reshape(-1, 2)
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float32).reshape(-1, 3)

    @classmethod
    def empty(cls, with_uvs: bool = True) -> "Mesh":
        return cls(uvs=np.zeros((0, 2), dtype=np.float32) if with_uvs else None)

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    @property
    def triangles(self) -> np.ndarray:
        """Indices viewed as an ``(T, 3)`` array."""
        return self.indices.reshape(-1, 3)

    def is_empty(self) -> bool:
        return self.vertex_count == 0

    def append(self, other: "Mesh") -> None:
        """
        Append ``other`` in place, rebasing its indices by the current vertex count.

        UVs (and normals) are kept only when both meshes carry them.
        """
        base = self.vertex_count
        self.indices = np.concatenate([self.indices, other.indices + np.uint32(base)])
        self.vertices = np.concatenate([self.vertices, other.vertices])
        self.uvs = (
            np.concatenate([self.uvs, other.uvs])
            if self.uvs is not None and other.uvs is not None
            else None
        )
        self.normals = (
            np.concatenate([self.normals, other.normals])
            if self.normals is not None and other.normals is not None
            else None
        )

    @classmethod
    def concatenate(cls, meshes: Iterable["Mesh"]) -> "Mesh":
        """Merge meshes in iteration order."""
        meshes = list(meshes)
        if not meshes:
            return cls.empty()

        offsets = np.cumsum([0] + [m.vertex_count for m in meshes[:-1]])
        vertices = np.concatenate([m.vertices for m in meshes])
        indices = np.concatenate(
            [m.indices + np.uint32(base) for m, base in zip(meshes, offsets)]
        )
        uvs = None
        if all(m.uvs is not None for m in meshes):
            uvs = np.concatenate([m.uvs for m in meshes])
        normals = None
        if all(m.normals is not None for m in meshes):
            normals = np.concatenate([m.normals for m in meshes])
        return cls(vertices=vertices, indices=indices, uvs=uvs, normals=normals)

    def validate(self) -> None:
        """
        Check buffer consistency.

        Raises:
            InvalidParameter: If the index count is not a multiple of 3, an index
                points past the vertex buffer, or a per-vertex array has the
                wrong length
        """
        if self.indices.size % 3 != 0:
            raise InvalidParameter(f"index count {self.indices.size} is not a multiple of 3")
        if self.indices.size and int(self.indices.max()) >= self.vertex_count:
            raise InvalidParameter("triangle index out of range of the vertex buffer")
        for name, array in (("uvs", self.uvs), ("normals", self.normals)):
            if array is not None and array.shape[0] != self.vertex_count:
                raise InvalidParameter(
                    f"{name} has {array.shape[0]} entries for {self.vertex_count} vertices"
                )

    def face_normals(self) -> np.ndarray:
        """Unnormalised face normals, ``(T, 3)`` float64 (length = 2 * area)."""
        tri = self.vertices.astype(np.float64)[self.triangles]
        return np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])

    def recalculate_normals(self) -> np.ndarray:
        """
        Compute area-weighted vertex normals and store them on the mesh.

        Vertices not referenced by any non-degenerate triangle get a zero normal.
        """
        normals = np.zeros((self.vertex_count, 3), dtype=np.float64)
        if self.triangle_count:
            face = self.face_normals()
            for corner in range(3):
                np.add.at(normals, self.triangles[:, corner], face)
        length = np.linalg.norm(normals, axis=1, keepdims=True)
        np.divide(normals, length, out=normals, where=length > 0)
        self.normals = normals.astype(np.float32)
        return self.normals

"""
Chunked world generation.

``partition`` tiles a region into fixed-size chunks and ``ChunkGenerator``
turns each descriptor into a field and a mesh. Every chunk samples one extra
layer per axis (``chunk_dims + 1``) so that its cells reach the shared
boundary; seams between chunks are not stitched.
"""

import itertools
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..config.config import settings
from .errors import InvalidDimensions, InvalidParameter
from .field_grid import FieldGrid, heightmap_to_volume
from .marching import IsosurfaceExtractor
from .mesh import Mesh
from .noise_generator import generate
from .noise_parameters import NoiseParameters

logger = structlog.get_logger()

VOLUME_MODES = ("density", "heightmap")


def _positive_ints(name: str, values: Sequence[int]) -> Tuple[int, ...]:
    values = tuple(values)
    if len(values) not in (2, 3):
        raise InvalidDimensions(f"{name} must have 2 or 3 components, got {len(values)}")
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, np.integer)) or v <= 0:
            raise InvalidDimensions(f"{name} components must be positive integers, got {values}")
    return tuple(int(v) for v in values)


@dataclass(frozen=True)
class ChunkDescriptor:
    """Where a chunk sits and how many samples it covers."""

    index: Tuple[int, ...]
    sample_origin: Tuple[int, ...]
    sample_shape: Tuple[int, ...]
    world_origin: Tuple[float, float, float]

    @property
    def ndim(self) -> int:
        return len(self.index)


class ChunkLayout:
    """
    Finite, restartable sequence of chunk descriptors.

    Descriptors are built on demand in x-major order; iterating again starts
    over from the first chunk.
    """

    def __init__(
        self,
        world_origin: Sequence[float],
        chunk_dims: Sequence[int],
        chunk_counts: Sequence[int],
        cell_size: float = 1.0,
    ):
        self.chunk_dims = _positive_ints("chunk_dims", chunk_dims)
        self.chunk_counts = _positive_ints("chunk_counts", chunk_counts)
        if len(self.chunk_dims) != len(self.chunk_counts):
            raise InvalidDimensions("chunk_dims and chunk_counts must have the same length")
        origin = tuple(float(v) for v in world_origin)
        if len(origin) > 3:
            raise InvalidDimensions(f"world_origin must have at most 3 components, got {len(origin)}")
        self.world_origin = origin + (0.0,) * (3 - len(origin))
        if cell_size <= 0:
            raise InvalidDimensions(f"cell_size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)

    @property
    def ndim(self) -> int:
        return len(self.chunk_dims)

    def __len__(self) -> int:
        return int(np.prod(self.chunk_counts))

    def descriptor(self, index: Sequence[int]) -> ChunkDescriptor:
        index = tuple(int(i) for i in index)
        sample_origin = tuple(i * d for i, d in zip(index, self.chunk_dims))
        world = list(self.world_origin)
        for axis, s in enumerate(sample_origin):
            world[axis] += s * self.cell_size
        return ChunkDescriptor(
            index=index,
            sample_origin=sample_origin,
            sample_shape=tuple(d + 1 for d in self.chunk_dims),
            world_origin=tuple(world),
        )

    def __iter__(self) -> Iterator[ChunkDescriptor]:
        for index in itertools.product(*(range(c) for c in self.chunk_counts)):
            yield self.descriptor(index)


def partition(
    world_origin: Sequence[float],
    chunk_dims: Sequence[int],
    chunk_counts: Sequence[int],
    cell_size: float = 1.0,
) -> ChunkLayout:
    """
    Tile ``chunk_counts`` chunks of ``chunk_dims`` cells starting at ``world_origin``.

    Raises:
        InvalidDimensions: If a dimension or count is not a positive integer
    """
    return ChunkLayout(world_origin, chunk_dims, chunk_counts, cell_size)


@dataclass
class Chunk:
    """Generated field and mesh of one chunk."""

    descriptor: ChunkDescriptor
    grid: FieldGrid
    mesh: Mesh


class ChunkGenerator:
    """
    Generate the field and mesh of individual chunks.

    In ``density`` mode the noise itself is the density field (3D noise for 3D
    chunks). In ``heightmap`` mode a 2D noise heightmap over x/z is turned into
    a solid-below-surface volume whose surface reaches ``surface_height``
    samples above the layout origin. Noise offsets are shifted by each chunk's
    sample origin, so kinds whose offset translates the pattern (all but
    cellular and blue noise) stay continuous across chunk borders.
    Local Perlin normalisation rescales each chunk on its own, so continuous
    chunk fields need global normalisation.
    """

    def __init__(
        self,
        params: NoiseParameters,
        threshold: Optional[float] = None,
        volume_mode: Optional[str] = None,
        surface_height: Optional[float] = None,
    ):
        self.params = params
        self.threshold = settings.default_threshold if threshold is None else threshold
        self.volume_mode = volume_mode or settings.chunk_volume_mode
        if self.volume_mode not in VOLUME_MODES:
            raise InvalidParameter(
                f"volume_mode must be one of {VOLUME_MODES}, got {self.volume_mode!r}"
            )
        self.surface_height = surface_height
        self.extractor = IsosurfaceExtractor()

    def _shifted_params(self, shift: Sequence[int]) -> NoiseParameters:
        base = tuple(self.params.offset) + (0.0,) * (3 - len(self.params.offset))
        offset = tuple(o + s for o, s in zip(base, tuple(shift) + (0,) * (3 - len(shift))))
        return self.params.model_copy(update={"offset": offset})

    def build_field(self, descriptor: ChunkDescriptor, cell_size: float = 1.0) -> FieldGrid:
        shape = descriptor.sample_shape
        origin = descriptor.sample_origin

        if self.volume_mode == "heightmap" and descriptor.ndim == 3:
            heightmap = generate(
                self._shifted_params((origin[0], origin[2])), shape[0], shape[2]
            )
            surface = shape[1] if self.surface_height is None else self.surface_height
            values = heightmap_to_volume(
                heightmap, shape[1], surface_height=surface, y_offset=origin[1]
            ).values
        else:
            values = generate(self._shifted_params(origin), *shape).values

        return FieldGrid(values, cell_size=cell_size, origin=descriptor.world_origin)

    def generate(self, descriptor: ChunkDescriptor, cell_size: float = 1.0) -> Chunk:
        """Build one chunk; reads nothing from any other chunk."""
        grid = self.build_field(descriptor, cell_size)
        mesh = self.extractor.extract(grid, self.threshold)
        logger.debug(
            "Generated chunk",
            index=descriptor.index,
            vertices=mesh.vertex_count,
            triangles=mesh.triangle_count,
        )
        return Chunk(descriptor=descriptor, grid=grid, mesh=mesh)

    def generate_all(self, layout: ChunkLayout) -> Iterator[Chunk]:
        """Lazily generate every chunk of ``layout`` in layout order."""
        count = 0
        for descriptor in layout:
            yield self.generate(descriptor, layout.cell_size)
            count += 1
        logger.info("Generated chunks", count=count, volume_mode=self.volume_mode)

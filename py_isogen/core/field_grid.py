"""
Dense scalar field grids.

A ``FieldGrid`` owns a W x H (2D) or W x H x D (3D) array of float32 samples
indexed ``values[x, y]`` / ``values[x, y, z]`` together with the mapping from
sample index to world space (``origin + index * cell_size``). 2D grids live in
the XY plane at ``z = origin[2]``.

Grids are immutable once built: the sample array is flagged read-only so that
concurrent extraction tasks can share it without copying.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy.ndimage import map_coordinates

from .errors import InvalidDimensions, OutOfBoundsSample


def validate_dimensions(
    width: int, height: int, depth: Optional[int] = None
) -> Tuple[int, ...]:
    """
    Validate grid extents and return them as a shape tuple.

    Args:
        width: Samples along x
        height: Samples along y
        depth: Samples along z, or None for a 2D grid

    Returns:
        ``(width, height)`` or ``(width, height, depth)``

    Raises:
        InvalidDimensions: If any extent is not a positive integer
    """
    dims = (width, height) if depth is None else (width, height, depth)
    for name, value in zip(("width", "height", "depth"), dims):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidDimensions(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise InvalidDimensions(f"{name} must be greater than zero, got {value}")
    return tuple(int(v) for v in dims)


@dataclass(frozen=True, eq=False)
class FieldGrid:
    """Sampled scalar field plus its grid-to-world mapping."""

    values: np.ndarray
    cell_size: float = 1.0
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float32, copy=True)
        if values.ndim not in (2, 3):
            raise InvalidDimensions(f"FieldGrid must be 2D or 3D, got {values.ndim}D")
        validate_dimensions(*values.shape)
        if self.cell_size <= 0:
            raise InvalidDimensions(f"cell_size must be positive, got {self.cell_size}")
        origin = tuple(float(v) for v in self.origin)
        if len(origin) != 3:
            raise InvalidDimensions(f"origin must have 3 components, got {len(origin)}")

        values.flags.writeable = False
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "cell_size", float(self.cell_size))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.values.shape

    @property
    def ndim(self) -> int:
        return self.values.ndim

    @property
    def width(self) -> int:
        return self.values.shape[0]

    @property
    def height(self) -> int:
        return self.values.shape[1]

    @property
    def depth(self) -> Optional[int]:
        return self.values.shape[2] if self.ndim == 3 else None

    @property
    def sample_count(self) -> int:
        return int(self.values.size)

    @property
    def cell_shape(self) -> Tuple[int, ...]:
        """Number of cells per axis (one less than samples)."""
        return tuple(n - 1 for n in self.shape)

    def sample(self, *index: int) -> float:
        """
        Read one sample.

        Raises:
            OutOfBoundsSample: If the index is outside the grid
        """
        if len(index) != self.ndim:
            raise OutOfBoundsSample(f"expected {self.ndim} indices, got {len(index)}")
        for axis, (i, n) in enumerate(zip(index, self.shape)):
            if not 0 <= i < n:
                raise OutOfBoundsSample(f"index {i} out of range [0, {n}) on axis {axis}")
        return float(self.values[tuple(index)])

    def world_position(self, *index: float) -> np.ndarray:
        """Map a (possibly fractional) grid index to a world-space point."""
        coords = np.zeros(3, dtype=np.float64)
        coords[: len(index)] = index
        return np.asarray(self.origin) + coords * self.cell_size

    def world_positions(self, grid_coords: np.ndarray) -> np.ndarray:
        """
        Vectorised ``world_position`` for an ``(N, ndim)`` array of grid coordinates.

        Returns:
            ``(N, 3)`` float64 array of world positions
        """
        grid_coords = np.asarray(grid_coords, dtype=np.float64)
        out = np.zeros((grid_coords.shape[0], 3), dtype=np.float64)
        out[:, : grid_coords.shape[1]] = grid_coords * self.cell_size
        out += np.asarray(self.origin)
        return out

    def resample(self, width: int, height: int, depth: Optional[int] = None) -> "FieldGrid":
        """
        Bilinear (2D) or trilinear (3D) resampling to a new resolution.

        Source coordinates follow ``src = i * (n_src - 1) / n_dst`` on every
        axis, so every destination sample interpolates between existing
        samples and never reads past the last one.

        Args:
            width: Target samples along x
            height: Target samples along y
            depth: Target samples along z (required for 3D grids)

        Returns:
            New FieldGrid with the same origin and a rescaled cell size
        """
        target = validate_dimensions(width, height, depth)
        if len(target) != self.ndim:
            raise InvalidDimensions(
                f"resample target has {len(target)} axes but grid is {self.ndim}D"
            )

        axes = [
            np.arange(n_dst, dtype=np.float64) * ((n_src - 1) / n_dst)
            for n_src, n_dst in zip(self.shape, target)
        ]
        coords = np.meshgrid(*axes, indexing="ij")
        resampled = map_coordinates(
            self.values.astype(np.float64), coords, order=1, mode="nearest"
        )

        step = (self.shape[0] - 1) / target[0]
        cell_size = self.cell_size * step if step > 0 else self.cell_size
        return FieldGrid(resampled.astype(np.float32), cell_size=cell_size, origin=self.origin)


def heightmap_to_volume(
    heightmap: FieldGrid,
    height: int,
    surface_height: Optional[float] = None,
    y_offset: int = 0,
) -> FieldGrid:
    """
    Convert a W x D heightmap into a W x height x D density volume.

    Each column is solid (1) below ``surface_height * h[x, z]`` and empty (0)
    above, with a one-sample linear ramp across the surface.

    Args:
        heightmap: 2D grid indexed ``[x, z]`` with values in [0, 1]
        height: Number of samples along the vertical (y) axis
        surface_height: Height reached by ``h = 1``, defaults to ``height``
        y_offset: Vertical sample index of the volume's first layer, for
            volumes that are one slice of a taller column

    Returns:
        3D FieldGrid indexed ``[x, y, z]``
    """
    if heightmap.ndim != 2:
        raise InvalidDimensions("heightmap_to_volume expects a 2D heightmap")
    validate_dimensions(heightmap.width, height)

    h = heightmap.values.astype(np.float64)
    y = np.arange(height, dtype=np.float64)
    if surface_height is None:
        surface_height = height
    y = y + y_offset
    volume = np.clip(surface_height * h[:, None, :] - y[None, :, None], 0.0, 1.0)
    return FieldGrid(volume.astype(np.float32), cell_size=heightmap.cell_size, origin=heightmap.origin)

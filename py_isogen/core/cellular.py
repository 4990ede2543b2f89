"""
Cellular (Worley) noise.

The grid is split into ``cell_count_x * cell_count_y (* cell_count_z)``
feature cells. Each cell, plus a one-cell border ring around the grid, holds
one jittered feature point. A sample's value is the ratio of the two smallest
squared distances to the feature points of its own cell and the surrounding
cells (8 in 2D, 26 in 3D), which gives the polygonal Worley pattern.
"""

import itertools
from typing import Tuple

import numpy as np
import structlog

from ..utils.random import create_rng
from .errors import InvalidParameter
from .noise_parameters import CellularNoiseParameters
from .synthesizer import NoiseSynthesizer, require_positive, sample_indices

logger = structlog.get_logger()


def cell_counts(params: CellularNoiseParameters, ndim: int) -> Tuple[int, ...]:
    counts = (params.cell_count_x, params.cell_count_y, params.cell_count_z)
    return counts[:ndim]


def feature_points(
    params: CellularNoiseParameters, shape: Tuple[int, ...], offset: Tuple[float, ...]
) -> np.ndarray:
    """
    Place one feature point per cell, including the border ring.

    Lattice index ``i`` (from -1 to count inclusive) is stored at position
    ``i + 1``. Jitter is drawn x-major, one component per axis, and the point
    sits at ``cell * i + round(cell * (jitter + offset))`` on each axis.

    Returns:
        ``(count_x + 2, count_y + 2[, count_z + 2], ndim)`` float64 array of
        integer-valued sample positions
    """
    ndim = len(shape)
    counts = cell_counts(params, ndim)
    cell = np.array([n // c for n, c in zip(shape, counts)], dtype=np.float64)

    rng = create_rng(params.seed, params.stream)
    jitter = rng.random(tuple(c + 2 for c in counts) + (ndim,))
    jitter += np.asarray(offset[:ndim], dtype=np.float64)

    lattice = np.meshgrid(*[np.arange(-1, c + 1, dtype=np.float64) for c in counts], indexing="ij")
    lattice = np.stack(lattice, axis=-1)
    return cell * lattice + np.round(cell * jitter)


class CellularSynthesizer(NoiseSynthesizer):
    """Worley noise in 2D or 3D."""

    def validate(self, shape):
        super().validate(shape)
        for axis, (count, extent) in enumerate(zip(cell_counts(self.params, len(shape)), shape)):
            require_positive(f"cell count on axis {axis}", count)
            if count > extent:
                raise InvalidParameter(
                    f"cell count {count} on axis {axis} exceeds grid extent {extent}"
                )

    def prepare(self, shape):
        points = feature_points(self.params, shape, self.offset())
        logger.debug("Placed feature points", count=int(np.prod(points.shape[:-1])))
        return points

    def evaluate(self, state, shape, x_start, x_stop):
        points = state
        ndim = len(shape)
        counts = cell_counts(self.params, ndim)
        coords = sample_indices(shape, x_start, x_stop)

        # Padded index of the cell owning each sample; trailing samples past the
        # last full cell belong to the last cell.
        owner = [
            np.minimum((c // (n // count)).astype(np.int64), count - 1) + 1
            for c, n, count in zip(coords, shape, counts)
        ]

        distances = []
        for delta in itertools.product((-1, 0, 1), repeat=ndim):
            neighbour = points[tuple(o + d for o, d in zip(owner, delta))]
            d2 = np.zeros(coords[0].shape, dtype=np.float64)
            for axis in range(ndim):
                diff = neighbour[..., axis] - coords[axis]
                d2 += diff * diff
            distances.append(d2)

        nearest = np.partition(np.stack(distances, axis=-1), 1, axis=-1)
        d0 = nearest[..., 0]
        d1 = nearest[..., 1]
        safe = np.where(d1 > 0, d1, 1.0)
        return np.where(d1 > 0, d0 / safe, 0.0)

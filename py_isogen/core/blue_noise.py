"""
Blue noise by dart throwing.

Points are accepted one at a time from a FIFO frontier, so every accepted
point is visible to all later distance checks and no two points can end up
closer than ``min_distance``. The resulting field is binary: 1.0 in the sample
cell containing an accepted point, 0.0 elsewhere.
"""

import math
from collections import defaultdict, deque
from typing import Dict, List, Tuple

import numpy as np
import structlog

from ..utils.random import create_rng
from .synthesizer import NoiseSynthesizer, require_positive

logger = structlog.get_logger()

# Cells of size r / sqrt(ndim) put any point closer than r within two cells
_SEARCH_RADIUS = 2


def _random_direction(rng: np.random.Generator, ndim: int) -> np.ndarray:
    if ndim == 2:
        angle = rng.uniform(0.0, 2.0 * math.pi)
        return np.array([math.cos(angle), math.sin(angle)])
    direction = rng.normal(size=ndim)
    norm = np.linalg.norm(direction)
    if norm == 0.0:
        direction = np.zeros(ndim)
        direction[0] = 1.0
        return direction
    return direction / norm


def throw_darts(
    shape: Tuple[int, ...], min_distance: float, max_attempts: int, seed: int, stream: int = 0
) -> np.ndarray:
    """
    Generate a Poisson-disk point set inside ``[0, shape)``.

    Starting from one uniform random point, the oldest frontier point proposes
    candidates in the annulus ``[min_distance, 2 * min_distance]``. Accepted
    candidates join the frontier and reset the proposer's attempt counter; a
    point retires after ``max_attempts`` consecutive rejections.

    Returns:
        ``(N, ndim)`` float64 array of accepted points in acceptance order
    """
    ndim = len(shape)
    bounds = np.asarray(shape, dtype=np.float64)
    cell = min_distance / math.sqrt(ndim)
    min_d2 = min_distance * min_distance
    rng = create_rng(seed, stream)

    grid: Dict[Tuple[int, ...], List[int]] = defaultdict(list)
    points: List[np.ndarray] = []

    def cell_of(p):
        return tuple(int(math.floor(c / cell)) for c in p)

    def accept(p):
        grid[cell_of(p)].append(len(points))
        points.append(p)
        frontier.append(p)

    def far_enough(p):
        home = cell_of(p)
        for delta in np.ndindex(*(2 * _SEARCH_RADIUS + 1,) * ndim):
            key = tuple(h + d - _SEARCH_RADIUS for h, d in zip(home, delta))
            for idx in grid.get(key, ()):
                diff = points[idx] - p
                if float(diff @ diff) < min_d2:
                    return False
        return True

    frontier: deque = deque()
    accept(rng.random(ndim) * bounds)

    while frontier:
        active = frontier[0]
        attempts = 0
        while attempts < max_attempts:
            radius = rng.uniform(min_distance, 2.0 * min_distance)
            candidate = active + radius * _random_direction(rng, ndim)
            if np.all(candidate >= 0.0) and np.all(candidate < bounds) and far_enough(candidate):
                accept(candidate)
                attempts = 0
            else:
                attempts += 1
        frontier.popleft()

    return np.array(points, dtype=np.float64).reshape(-1, ndim)


class BlueNoiseSynthesizer(NoiseSynthesizer):
    """Binary Poisson-disk field; the caller offset does not affect it."""

    def validate(self, shape):
        super().validate(shape)
        require_positive("min_distance", self.params.min_distance)
        require_positive("max_attempts", self.params.max_attempts)

    def prepare(self, shape):
        points = throw_darts(
            shape,
            self.params.min_distance,
            self.params.max_attempts,
            self.params.seed,
            self.params.stream,
        )
        cells = np.floor(points).astype(np.int64)
        cells = np.minimum(cells, np.asarray(shape, dtype=np.int64) - 1)
        logger.debug("Dart throwing finished", points=len(points))
        return cells

    def evaluate(self, state, shape, x_start, x_stop):
        out = np.zeros((x_stop - x_start,) + tuple(shape[1:]), dtype=np.float64)
        cells = state[(state[:, 0] >= x_start) & (state[:, 0] < x_stop)]
        cells = cells.copy()
        cells[:, 0] -= x_start
        out[tuple(cells.T)] = 1.0
        return out

"""
Wavelet noise.

Every integer lattice point carries a pseudo-random weight in (-1, 1] from an
integer hash of its coordinates. A sample blends the weights of the 2 (per
axis) surrounding lattice points with a tent kernel, summed over octaves and
rescaled to [0, 1] by the observed range.
"""

import itertools

import numpy as np

from ..utils.random import create_rng
from .synthesizer import (
    SCALE_EPSILON,
    NoiseSynthesizer,
    normalize_local,
    require_persistence,
    require_positive,
    sample_indices,
)

_MASK32 = np.uint64(0xFFFFFFFF)
_MASK31 = np.uint64(0x7FFFFFFF)
_AXIS_PRIMES = (1, 57, 131)
OFFSET_SPAN = 1000.0


def lattice_hash(*lattice: np.ndarray) -> np.ndarray:
    """
    Hash integer lattice coordinates to a weight in (-1, 1].

    Uses the classic ``n = (n << 13) ^ n`` integer noise with 32-bit
    wrap-around semantics, so negative coordinates hash consistently.
    """
    n = np.zeros(np.shape(lattice[0]), dtype=np.int64)
    for coord, prime in zip(lattice, _AXIS_PRIMES):
        n = n + np.asarray(coord, dtype=np.int64) * prime
    n = (n & 0xFFFFFFFF).astype(np.uint64)
    n = ((n << np.uint64(13)) ^ n) & _MASK32
    m = (n * (n * n * np.uint64(15731) + np.uint64(789221)) + np.uint64(1376312589)) & _MASK31
    return 1.0 - m.astype(np.float64) / 1073741824.0


def tent(d: np.ndarray) -> np.ndarray:
    return np.maximum(0.0, 1.0 - np.abs(d))


class WaveletSynthesizer(NoiseSynthesizer):
    """Octave-summed hashed-lattice noise with tent blending."""

    def validate(self, shape):
        super().validate(shape)
        require_positive("octaves", self.params.octaves)
        require_positive("lacunarity", self.params.lacunarity)
        require_persistence(self.params.persistence)

    def prepare(self, shape):
        ndim = len(shape)
        rng = create_rng(self.params.seed, self.params.stream)
        offsets = rng.random((self.params.octaves, ndim)) * OFFSET_SPAN
        return offsets + np.asarray(self.offset()[:ndim], dtype=np.float64)

    def evaluate(self, state, shape, x_start, x_stop):
        params = self.params
        scale = params.scale if params.scale > 0 else SCALE_EPSILON
        coords = sample_indices(shape, x_start, x_stop)

        total = np.zeros(coords[0].shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        for octave_offset in state:
            p = [(c + o) / scale * frequency for c, o in zip(coords, octave_offset)]
            base = [np.floor(axis) for axis in p]
            value = np.zeros_like(total)
            for corner in itertools.product((0, 1), repeat=len(p)):
                lattice = [b + k for b, k in zip(base, corner)]
                weight = np.ones_like(total)
                for axis, point in zip(lattice, p):
                    weight *= tent(point - axis)
                value += weight * lattice_hash(*lattice)
            total += value * amplitude
            amplitude *= params.persistence
            frequency *= params.lacunarity
        return total

    def finalize(self, state, raw):
        return normalize_local(raw)

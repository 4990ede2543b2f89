"""
Noise field generation entry point.

``generate`` validates the request, picks the synthesizer for the parameter
kind and runs its prepare/evaluate/finalize phases over the whole grid. The
gradient-noise kinds (random, perlin, turbulence, simplex, pink) live here;
cellular, wavelet and blue noise have their own modules.
"""

from typing import Dict, Optional, Type

import numpy as np
import structlog

from .blue_noise import BlueNoiseSynthesizer
from .cellular import CellularSynthesizer
from .field_grid import FieldGrid, validate_dimensions
from .noise_parameters import NoiseParameters, NormalizeMode
from .perlin import octave_offsets, perlin, perlin_unit, simplex
from .synthesizer import (
    SCALE_EPSILON,
    NoiseSynthesizer,
    normalize_local,
    require_persistence,
    require_positive,
    sample_indices,
)
from .wavelet import WaveletSynthesizer

logger = structlog.get_logger()

# Non-integer divisor keeps random samples off the integer lattice, where
# gradient noise is always zero
RANDOM_SAMPLE_DIVISOR = 0.539


class RandomSynthesizer(NoiseSynthesizer):
    """One gradient-noise sample per grid point, shifted by a seeded offset."""

    def prepare(self, shape):
        return octave_offsets(
            self.params.seed, 1, len(shape), self.offset(), self.params.stream
        )[0]

    def evaluate(self, state, shape, x_start, x_stop):
        coords = sample_indices(shape, x_start, x_stop)
        return perlin_unit([(c + o) / RANDOM_SAMPLE_DIVISOR for c, o in zip(coords, state)])


class FractalSynthesizer(NoiseSynthesizer):
    """
    Octave sum of a signed gradient noise.

    Octave ``i`` samples ``(index - extent / 2 + offset_i) / scale * lacunarity**i``
    and contributes ``persistence**i`` of ``noise`` at that point.
    """

    def noise(self, coords):
        return perlin(coords)

    def validate(self, shape):
        super().validate(shape)
        require_positive("octaves", self.params.octaves)
        require_positive("lacunarity", self.params.lacunarity)
        require_persistence(self.params.persistence)

    def prepare(self, shape):
        return octave_offsets(
            self.params.seed, self.params.octaves, len(shape), self.offset(), self.params.stream
        )

    def evaluate(self, state, shape, x_start, x_stop):
        params = self.params
        scale = params.scale if params.scale > 0 else SCALE_EPSILON
        coords = sample_indices(shape, x_start, x_stop)
        centred = [c - n / 2.0 for c, n in zip(coords, shape)]

        total = np.zeros(coords[0].shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        for octave_offset in state:
            value = self.noise([(c + o) / scale * frequency for c, o in zip(centred, octave_offset)])
            total += value * amplitude
            amplitude *= params.persistence
            frequency *= params.lacunarity
        return total

    def max_amplitude(self) -> float:
        amplitude = 1.0
        total = 0.0
        for _ in range(self.params.octaves):
            total += amplitude
            amplitude *= self.params.persistence
        return total


class PerlinSynthesizer(FractalSynthesizer):
    """Fractal Perlin noise with local or global normalisation."""

    def finalize(self, state, raw):
        if self.params.normalize_mode == NormalizeMode.GLOBAL:
            return np.maximum((raw + 1.0) / self.max_amplitude(), 0.0)
        return normalize_local(raw)


class TurbulenceSynthesizer(FractalSynthesizer):
    """Sum of absolute Perlin octaves divided by the total amplitude."""

    def noise(self, coords):
        return np.abs(perlin(coords))

    def finalize(self, state, raw):
        return np.clip(raw / self.max_amplitude(), 0.0, 1.0)


class SimplexSynthesizer(FractalSynthesizer):
    """
    Fractal simplex noise.

    Global normalisation maps ``h`` to ``(h + 1) / (2 * max_amplitude)``
    clamped to [0, 1].
    """

    def noise(self, coords):
        return simplex(coords)

    def finalize(self, state, raw):
        if self.params.normalize_mode == NormalizeMode.GLOBAL:
            return np.clip((raw + 1.0) / (2.0 * self.max_amplitude()), 0.0, 1.0)
        return normalize_local(raw)


class PinkSynthesizer(NoiseSynthesizer):
    """Octaves of [0, 1] Perlin noise at doubling frequency, averaged by amplitude."""

    def validate(self, shape):
        super().validate(shape)
        require_positive("octaves", self.params.octaves)
        require_persistence(self.params.persistence)

    def prepare(self, shape):
        return octave_offsets(
            self.params.seed, self.params.octaves, len(shape), self.offset(), self.params.stream
        )

    def evaluate(self, state, shape, x_start, x_stop):
        params = self.params
        scale = params.scale if params.scale > 0 else SCALE_EPSILON
        coords = sample_indices(shape, x_start, x_stop)

        total = np.zeros(coords[0].shape, dtype=np.float64)
        amplitude = 1.0
        for octave, octave_offset in enumerate(state):
            frequency = 2.0 ** octave
            total += amplitude * perlin_unit(
                [(c + o) / scale * frequency for c, o in zip(coords, octave_offset)]
            )
            amplitude *= params.persistence
        return total

    def finalize(self, state, raw):
        amplitude_sum = sum(self.params.persistence ** i for i in range(self.params.octaves))
        return np.clip(raw / amplitude_sum, 0.0, 1.0)


SYNTHESIZERS: Dict[str, Type[NoiseSynthesizer]] = {
    "random": RandomSynthesizer,
    "perlin": PerlinSynthesizer,
    "turbulence": TurbulenceSynthesizer,
    "simplex": SimplexSynthesizer,
    "pink": PinkSynthesizer,
    "cellular": CellularSynthesizer,
    "blue_noise": BlueNoiseSynthesizer,
    "wavelet": WaveletSynthesizer,
}


def create_synthesizer(params: NoiseParameters) -> NoiseSynthesizer:
    """Look up and instantiate the synthesizer for ``params.kind``."""
    return SYNTHESIZERS[params.kind](params)


def generate(
    params: NoiseParameters, width: int, height: int, depth: Optional[int] = None
) -> FieldGrid:
    """
    Synthesize a noise field.

    Output depends only on ``params`` and the grid extents, so identical
    calls return bit-identical grids.

    Args:
        params: Noise parameters of any supported kind
        width: Samples along x
        height: Samples along y
        depth: Samples along z, or None for a 2D field

    Returns:
        FieldGrid with values indexed ``[x, y(, z)]``

    Raises:
        InvalidDimensions: If an extent is not positive
        InvalidParameter: If a noise parameter is out of range
    """
    shape = validate_dimensions(width, height, depth)
    synthesizer = create_synthesizer(params)
    synthesizer.validate(shape)

    state = synthesizer.prepare(shape)
    raw = synthesizer.evaluate(state, shape, 0, shape[0])
    values = synthesizer.finalize(state, raw)

    logger.info(
        "Generated noise field",
        kind=params.kind,
        shape=shape,
        min_value=float(values.min()),
        max_value=float(values.max()),
    )
    return FieldGrid(values)

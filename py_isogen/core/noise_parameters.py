"""
Noise parameter models.

One frozen pydantic model per noise kind, combined into the ``NoiseParameters``
discriminated union on the ``kind`` field. The models only describe data;
range checks (octaves, lacunarity, cell counts, ...) happen at the generation
entry point so that callers always get ``InvalidParameter`` rather than a
pydantic validation error.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class NoiseKind(str, Enum):
    """Supported noise algorithms."""

    RANDOM = "random"
    PERLIN = "perlin"
    CELLULAR = "cellular"
    BLUE_NOISE = "blue_noise"
    WAVELET = "wavelet"
    TURBULENCE = "turbulence"
    SIMPLEX = "simplex"
    PINK = "pink"


class NormalizeMode(str, Enum):
    """How fractal Perlin and simplex heights are mapped into [0, 1]."""

    LOCAL = "local"  # rescale by the observed min/max of this grid
    GLOBAL = "global"  # divide by the theoretical amplitude sum


class _NoiseModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    seed: int = Field(default=0, description="Seed for the per-call random generator")
    offset: Tuple[float, ...] = Field(
        default=(0.0, 0.0, 0.0), description="Sample-space offset (2 or 3 components)"
    )

    @property
    def stream(self) -> int:
        """RNG sub-stream of this kind, so kinds sharing a seed stay uncorrelated."""
        return list(NoiseKind).index(NoiseKind(self.kind))


class RandomNoiseParameters(_NoiseModel):
    """Single Perlin sample per grid point, jittered by a seed-derived offset."""

    kind: Literal["random"] = "random"


class PerlinNoiseParameters(_NoiseModel):
    """Fractal (multi-octave) Perlin noise."""

    kind: Literal["perlin"] = "perlin"
    octaves: int = Field(default=3, description="Number of noise layers")
    persistence: float = Field(default=0.5, description="Amplitude multiplier per octave")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    scale: float = Field(default=25.0, description="Sample-space divisor (<= 0 is clamped)")
    normalize_mode: NormalizeMode = Field(default=NormalizeMode.LOCAL)


class TurbulenceNoiseParameters(_NoiseModel):
    """Sum of absolute Perlin octaves."""

    kind: Literal["turbulence"] = "turbulence"
    octaves: int = Field(default=4)
    persistence: float = Field(default=0.5)
    lacunarity: float = Field(default=2.0)
    scale: float = Field(default=25.0)


class SimplexNoiseParameters(_NoiseModel):
    """Fractal simplex noise."""

    kind: Literal["simplex"] = "simplex"
    octaves: int = Field(default=4)
    persistence: float = Field(default=0.5)
    lacunarity: float = Field(default=2.0)
    scale: float = Field(default=25.0)
    normalize_mode: NormalizeMode = Field(default=NormalizeMode.LOCAL)


class PinkNoiseParameters(_NoiseModel):
    """
    Pink (1/f) noise: fractional Brownian motion over octaves of doubling
    frequency, averaged by amplitude.
    """

    kind: Literal["pink"] = "pink"
    octaves: int = Field(default=4)
    persistence: float = Field(default=0.5)
    scale: float = Field(default=25.0)


class CellularNoiseParameters(_NoiseModel):
    """Worley noise over a jittered lattice of feature points."""

    kind: Literal["cellular"] = "cellular"
    cell_count_x: int = Field(default=5, description="Feature cells along x")
    cell_count_y: int = Field(default=5, description="Feature cells along y")
    cell_count_z: int = Field(default=1, description="Feature cells along z (3D grids only)")


class BlueNoiseParameters(_NoiseModel):
    """Dart-throwing Poisson-disk point set rendered as a binary field."""

    kind: Literal["blue_noise"] = "blue_noise"
    min_distance: float = Field(default=4.0, description="Minimum spacing between points")
    max_attempts: int = Field(default=30, description="Consecutive rejections before a point retires")


class WaveletNoiseParameters(_NoiseModel):
    """Fractal noise over a hashed lattice blended with a tent wavelet."""

    kind: Literal["wavelet"] = "wavelet"
    octaves: int = Field(default=3)
    persistence: float = Field(default=0.5)
    lacunarity: float = Field(default=2.0)
    scale: float = Field(default=10.0)


NoiseParameters = Annotated[
    Union[
        RandomNoiseParameters,
        PerlinNoiseParameters,
        TurbulenceNoiseParameters,
        CellularNoiseParameters,
        BlueNoiseParameters,
        WaveletNoiseParameters,
        SimplexNoiseParameters,
        PinkNoiseParameters,
    ],
    Field(discriminator="kind"),
]

_ADAPTER = TypeAdapter(NoiseParameters)


def parse_noise_parameters(data: Dict[str, Any]) -> NoiseParameters:
    """Build the parameter model selected by ``data["kind"]``."""
    return _ADAPTER.validate_python(data)

"""
Common machinery for noise synthesizers.

Every noise kind is split into three phases so that the sequential and the
parallel generators share one code path:

- ``prepare(shape)`` derives all seed-dependent state (octave offsets, feature
  points, accepted darts) once, in the calling thread.
- ``evaluate(state, shape, x_start, x_stop)`` computes raw values for the slab
  ``values[x_start:x_stop]``. It reads only ``state`` and writes nothing shared,
  so slabs can be evaluated concurrently.
- ``finalize(state, raw)`` applies whole-field normalisation once the full raw
  array has been assembled.
"""

from typing import Any, List, Tuple

import numpy as np

from .errors import InvalidParameter

MAX_OFFSET_COMPONENTS = 3
# Non-positive scales are clamped to this to avoid dividing by zero
SCALE_EPSILON = 1e-4


class NoiseSynthesizer:
    """Base synthesizer; subclasses override the three phases."""

    def __init__(self, params):
        self.params = params

    @property
    def kind(self) -> str:
        return self.params.kind

    def offset(self) -> Tuple[float, float, float]:
        """Caller offset zero-padded to three components."""
        offset = tuple(float(v) for v in self.params.offset)
        if len(offset) > MAX_OFFSET_COMPONENTS:
            raise InvalidParameter(
                f"offset may have at most {MAX_OFFSET_COMPONENTS} components, got {len(offset)}"
            )
        return offset + (0.0,) * (MAX_OFFSET_COMPONENTS - len(offset))

    def validate(self, shape: Tuple[int, ...]) -> None:
        """Raise ``InvalidParameter`` if the parameters cannot be used for ``shape``."""
        self.offset()

    def prepare(self, shape: Tuple[int, ...]) -> Any:
        return None

    def evaluate(self, state: Any, shape: Tuple[int, ...], x_start: int, x_stop: int) -> np.ndarray:
        raise NotImplementedError

    def finalize(self, state: Any, raw: np.ndarray) -> np.ndarray:
        return raw


def sample_indices(shape: Tuple[int, ...], x_start: int, x_stop: int) -> List[np.ndarray]:
    """
    Global sample index arrays for the slab ``[x_start:x_stop]``.

    Returns:
        One float64 array per axis, each shaped ``(x_stop - x_start, *shape[1:])``
    """
    axes = [np.arange(x_start, x_stop, dtype=np.float64)]
    axes += [np.arange(n, dtype=np.float64) for n in shape[1:]]
    return np.meshgrid(*axes, indexing="ij")


def require_positive(name: str, value) -> None:
    if value <= 0:
        raise InvalidParameter(f"{name} must be greater than zero, got {value}")


def require_persistence(value) -> None:
    """Octave amplitude decay must lie in (0, 1]."""
    if not 0 < value <= 1:
        raise InvalidParameter(f"persistence must be in (0, 1], got {value}")


def normalize_local(raw: np.ndarray) -> np.ndarray:
    """Rescale ``raw`` so its observed min/max map to 0/1 (flat fields map to 0)."""
    lo = raw.min()
    hi = raw.max()
    if hi == lo:
        return np.zeros_like(raw)
    return (raw - lo) / (hi - lo)

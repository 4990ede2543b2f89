"""
Explicit field-to-mesh regeneration.

``SurfacePipeline`` holds the current noise parameters, grid extents and
threshold. Changing them with ``update`` never recomputes anything; the caller
asks for new output with ``regenerate``.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from ..config.config import settings
from .field_grid import FieldGrid, validate_dimensions
from .marching import IsosurfaceExtractor
from .mesh import Mesh
from .noise_generator import generate
from .noise_parameters import NoiseParameters
from .parallel import ParallelExecutionCoordinator

logger = structlog.get_logger()


@dataclass(frozen=True)
class SurfaceResult:
    """Field and mesh produced by one ``regenerate`` call."""

    params: NoiseParameters
    threshold: float
    grid: FieldGrid
    mesh: Mesh


class SurfacePipeline:
    """Noise generation followed by isosurface extraction, run on request."""

    def __init__(
        self,
        params: NoiseParameters,
        dims: Tuple[int, ...],
        threshold: Optional[float] = None,
        parallel: bool = False,
        max_workers: Optional[int] = None,
        fill_interior: bool = False,
    ):
        self.params = params
        self.dims = validate_dimensions(*dims)
        self.threshold = settings.default_threshold if threshold is None else threshold
        self.parallel = parallel
        self.fill_interior = fill_interior
        self._coordinator = (
            ParallelExecutionCoordinator(max_workers, fill_interior) if parallel else None
        )
        self._extractor = IsosurfaceExtractor(fill_interior)
        self._result: Optional[SurfaceResult] = None
        self._stale = True

    @property
    def result(self) -> Optional[SurfaceResult]:
        """Output of the last ``regenerate`` call, or None before the first one."""
        return self._result

    @property
    def is_stale(self) -> bool:
        """True when parameters changed since the last ``regenerate``."""
        return self._stale

    def update(
        self,
        params: Optional[NoiseParameters] = None,
        dims: Optional[Tuple[int, ...]] = None,
        threshold: Optional[float] = None,
    ) -> None:
        """Replace any of the inputs. The cached result is kept until ``regenerate``."""
        if params is not None:
            self.params = params
        if dims is not None:
            self.dims = validate_dimensions(*dims)
        if threshold is not None:
            self.threshold = threshold
        self._stale = True

    def regenerate(self) -> SurfaceResult:
        """
        Synthesize the field and extract its mesh from the current inputs.

        Returns:
            The new SurfaceResult, which also replaces the cached one
        """
        if self._coordinator is not None:
            grid = self._coordinator.generate_parallel(self.params, *self.dims)
            mesh = self._coordinator.extract_parallel(grid, self.threshold)
        else:
            grid = generate(self.params, *self.dims)
            mesh = self._extractor.extract(grid, self.threshold)

        self._result = SurfaceResult(
            params=self.params, threshold=self.threshold, grid=grid, mesh=mesh
        )
        self._stale = False
        logger.info(
            "Regenerated surface",
            kind=self.params.kind,
            dims=self.dims,
            parallel=self.parallel,
            triangles=mesh.triangle_count,
        )
        return self._result

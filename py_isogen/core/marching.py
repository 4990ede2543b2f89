"""
Isosurface extraction (marching squares / marching cubes).

Extraction is vectorised over cells: case indices are computed for the whole
region at once, active cells are visited in C order (x slowest), and every
active cell emits its own vertices, so adjacent cells never share vertices.
Because each cell's output depends only on its own samples and global cell
position, extracting consecutive x-slabs and concatenating them reproduces the
full-grid result exactly.
"""

from typing import Optional

import numpy as np
import structlog

from .case_tables import CompiledCaseTable, table_for
from .errors import InvalidDimensions, OutOfBoundsSample
from .field_grid import FieldGrid
from .mesh import Mesh

logger = structlog.get_logger()


def _check_extractable(grid: FieldGrid) -> None:
    for axis, n in enumerate(grid.shape):
        if n < 2:
            raise InvalidDimensions(
                f"extraction needs at least 2 samples on every axis, axis {axis} has {n}"
            )


def compute_case_indices(
    values: np.ndarray, threshold: float, table: CompiledCaseTable
) -> np.ndarray:
    """
    Case index of every cell of ``values``.

    Returns:
        Integer array with one entry per cell (one less than samples per axis)
    """
    cell_shape = tuple(n - 1 for n in values.shape)
    cases = np.zeros(cell_shape, dtype=np.int64)
    for bit, offset in enumerate(table.corner_offsets):
        window = tuple(slice(o, o + n) for o, n in zip(offset, cell_shape))
        cases |= (values[window] > threshold).astype(np.int64) << bit
    return cases


def extract_region(
    grid: FieldGrid,
    threshold: float,
    axis: int = 0,
    start: int = 0,
    stop: Optional[int] = None,
    fill_interior: bool = False,
) -> Mesh:
    """
    Extract the cells whose index along ``axis`` lies in ``[start, stop)``.

    Triangle indices are relative to the returned mesh; vertex positions and
    UVs use global grid coordinates.

    Raises:
        InvalidDimensions: If an axis has fewer than 2 samples
        OutOfBoundsSample: If the cell range falls outside the grid
    """
    _check_extractable(grid)
    table = table_for(grid.ndim, fill_interior)
    cell_shape = grid.cell_shape
    stop = cell_shape[axis] if stop is None else stop
    if not 0 <= start <= stop <= cell_shape[axis]:
        raise OutOfBoundsSample(
            f"cell range [{start}, {stop}) outside [0, {cell_shape[axis]}) on axis {axis}"
        )

    if stop == start:
        return Mesh.empty()

    window = [slice(None)] * grid.ndim
    window[axis] = slice(start, stop + 1)
    values = grid.values[tuple(window)]

    region_origin = np.zeros(grid.ndim, dtype=np.int64)
    region_origin[axis] = start
    return _extract_cells(grid, values, region_origin, threshold, table)


def _extract_cells(
    grid: FieldGrid,
    values: np.ndarray,
    region_origin: np.ndarray,
    threshold: float,
    table: CompiledCaseTable,
) -> Mesh:
    values = values.astype(np.float64)
    region_cells = tuple(n - 1 for n in values.shape)
    cases = compute_case_indices(values, threshold, table).reshape(-1)

    node_counts = table.node_counts[cases]
    active = np.flatnonzero(node_counts)
    if active.size == 0:
        return Mesh.empty()

    active_cases = cases[active]
    counts = node_counts[active]
    vertex_base = np.concatenate([[0], np.cumsum(counts)[:-1]])
    total = int(counts.sum())

    # One row per emitted vertex: owning cell, and node slot within the cell
    owner = np.repeat(np.arange(active.size), counts)
    slot = np.arange(total) - vertex_base[owner]
    nodes = table.case_nodes[active_cases[owner], slot]
    corner_a = table.node_corners[nodes, 0]
    corner_b = table.node_corners[nodes, 1]

    cell_index = np.stack(np.unravel_index(active[owner], region_cells), axis=-1)
    sample_a = cell_index + table.corner_offsets[corner_a]
    sample_b = cell_index + table.corner_offsets[corner_b]
    v0 = values[tuple(sample_a.T)]
    v1 = values[tuple(sample_b.T)]

    delta = v1 - v0
    flat = delta == 0
    t = np.where(flat, 0.0, (threshold - v0) / np.where(flat, 1.0, delta))
    t = np.clip(t, 0.0, 1.0)

    global_a = (sample_a + region_origin).astype(np.float64)
    global_b = (sample_b + region_origin).astype(np.float64)
    grid_pos = global_a + t[:, None] * (global_b - global_a)
    vertices = grid.world_positions(grid_pos).astype(np.float32)
    uvs = _uvs(grid, grid_pos)

    tri_counts = table.triangle_counts[active_cases]
    tri_owner = np.repeat(np.arange(active.size), tri_counts)
    tri_base = np.concatenate([[0], np.cumsum(tri_counts)[:-1]])
    tri_slot = np.arange(int(tri_counts.sum())) - tri_base[tri_owner]
    local = table.case_triangles[active_cases[tri_owner], tri_slot]
    indices = (local + vertex_base[tri_owner][:, None]).reshape(-1)

    return Mesh(vertices=vertices, indices=indices.astype(np.uint32), uvs=uvs)


def _uvs(grid: FieldGrid, grid_pos: np.ndarray) -> np.ndarray:
    # x/y for 2D grids, x/z for 3D grids
    axes = (0, 1) if grid.ndim == 2 else (0, 2)
    spans = np.array([grid.shape[a] - 1 for a in axes], dtype=np.float64)
    return (grid_pos[:, axes] / spans).astype(np.float32)


class IsosurfaceExtractor:
    """
    Marching squares (2D grids) and marching cubes (3D grids).

    A corner counts as inside when its sample is strictly greater than the
    threshold. Edge crossings use ``t = clamp01((threshold - v0) / (v1 - v0))``
    with ``t = 0`` when both samples are equal.
    """

    def __init__(self, fill_interior: bool = False):
        self.fill_interior = fill_interior

    def extract(
        self, grid: FieldGrid, threshold: float, fill_interior: Optional[bool] = None
    ) -> Mesh:
        """
        Extract the isosurface (3D) or the above-threshold region (2D) of ``grid``.

        Args:
            grid: Field to extract from, at least 2 samples per axis
            threshold: Iso value
            fill_interior: 2D only; also fill cells entirely above the threshold

        Returns:
            Mesh with world-space vertices, triangle indices and UVs
        """
        fill = self.fill_interior if fill_interior is None else fill_interior
        mesh = extract_region(grid, threshold, fill_interior=fill)
        logger.info(
            "Extracted isosurface",
            shape=grid.shape,
            threshold=threshold,
            vertices=mesh.vertex_count,
            triangles=mesh.triangle_count,
        )
        return mesh

    def extract_region(
        self, grid: FieldGrid, threshold: float, axis: int, start: int, stop: int
    ) -> Mesh:
        return extract_region(grid, threshold, axis, start, stop, self.fill_interior)


def extract(grid: FieldGrid, threshold: float, fill_interior: bool = False) -> Mesh:
    """Module-level shortcut for ``IsosurfaceExtractor().extract``."""
    return IsosurfaceExtractor(fill_interior).extract(grid, threshold)


"""
Marching cubes / marching squares case tables.

Corner numbering (both tables): corner ``i`` sits at offset
``(i & 1, (i >> 1) & 1[, (i >> 2) & 1])`` from the cell's minimum corner, and
bit ``i`` of a case index is set when that corner's sample is above the
threshold.

Cube edges::

    0: 0-1   1: 2-3   2: 4-5   3: 6-7     (along x)
    4: 0-2   5: 1-3   6: 4-6   7: 5-7     (along y)
    8: 0-4   9: 1-5  10: 2-6  11: 3-7     (along z)

The 256 cube cases are generated rather than typed in. On every cube face the
contour segments are traced so that each run of above-threshold corners is cut
off on its own (ambiguous faces separate the above corners). Chaining the
segments across faces yields closed polygons. These are triangulated without
any triangle side lying in a cube face other than the contour segments
themselves, and wound so that triangle normals point toward lower field
values.

Square nodes 0-3 are edge crossings (0: c0-c1, 1: c1-c3, 2: c2-c3, 3: c0-c2)
and nodes 4-7 are the cell corners c0-c3 themselves. A square case lists the
counter-clockwise triangles covering the above-threshold part of the cell.
Both the empty case and the full case emit nothing; the full-cell quad is kept
separately for callers that want filled regions.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .errors import InvalidCaseTable

Triangle = Tuple[int, int, int]

CUBE_CORNER_OFFSETS = np.array(
    [(i & 1, (i >> 1) & 1, (i >> 2) & 1) for i in range(8)], dtype=np.int64
)
SQUARE_CORNER_OFFSETS = np.array([(i & 1, (i >> 1) & 1) for i in range(4)], dtype=np.int64)

CUBE_EDGES: Tuple[Tuple[int, int], ...] = (
    (0, 1), (2, 3), (4, 5), (6, 7),
    (0, 2), (1, 3), (4, 6), (5, 7),
    (0, 4), (1, 5), (2, 6), (3, 7),
)

# Corner loops, counter-clockwise seen from outside the cube
CUBE_FACES: Tuple[Tuple[int, int, int, int], ...] = (
    (0, 4, 6, 2),  # x = 0
    (1, 3, 7, 5),  # x = 1
    (0, 1, 5, 4),  # y = 0
    (2, 6, 7, 3),  # y = 1
    (0, 2, 3, 1),  # z = 0
    (4, 5, 7, 6),  # z = 1
)

# Edge crossings followed by degenerate "edges" for the four corners
SQUARE_NODES: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 3), (2, 3), (0, 2),
    (0, 0), (1, 1), (2, 2), (3, 3),
)

SQUARE_TRIANGLES: Tuple[Tuple[Triangle, ...], ...] = (
    (),
    ((4, 0, 3),),
    ((0, 5, 1),),
    ((4, 5, 1), (4, 1, 3)),
    ((2, 6, 3),),
    ((4, 0, 2), (4, 2, 6)),
    ((0, 5, 1), (2, 6, 3)),
    ((4, 5, 1), (4, 1, 2), (4, 2, 6)),
    ((1, 7, 2),),
    ((4, 0, 3), (1, 7, 2)),
    ((0, 5, 7), (0, 7, 2)),
    ((4, 5, 7), (4, 7, 2), (4, 2, 3)),
    ((1, 7, 6), (1, 6, 3)),
    ((4, 0, 1), (4, 1, 7), (4, 7, 6)),
    ((0, 5, 7), (0, 7, 6), (0, 6, 3)),
    (),
)

SQUARE_FILL: Tuple[Triangle, ...] = ((4, 5, 7), (4, 7, 6))


def _cube_case_loops(case: int) -> List[List[int]]:
    """Closed edge loops of the isosurface for one cube case."""
    edge_of = {frozenset(pair): index for index, pair in enumerate(CUBE_EDGES)}
    above = [(case >> corner) & 1 == 1 for corner in range(8)]

    successor: Dict[int, int] = {}
    for face in CUBE_FACES:
        for k in range(4):
            here, there = face[k], face[(k + 1) % 4]
            if not (above[here] and not above[there]):
                continue
            j = k
            while above[face[(j - 1) % 4]]:
                j -= 1
            exit_edge = edge_of[frozenset((here, there))]
            entry_edge = edge_of[frozenset((face[(j - 1) % 4], face[j % 4]))]
            successor[exit_edge] = entry_edge

    loops = []
    remaining = dict(successor)
    while remaining:
        start = min(remaining)
        loop = [start]
        edge = remaining.pop(start)
        while edge != start:
            loop.append(edge)
            edge = remaining.pop(edge)
        # Traced loops face the above-threshold corners; flip them
        loops.append(loop[::-1])
    return loops


def _edge_faces() -> Tuple[frozenset, ...]:
    faces = []
    for a, b in CUBE_EDGES:
        faces.append(frozenset(f for f, face in enumerate(CUBE_FACES) if a in face and b in face))
    return tuple(faces)


# The two cube faces each edge lies on
CUBE_EDGE_FACES = _edge_faces()


def _triangulate_loop(loop: Sequence[int]) -> List[Triangle]:
    """
    Triangulate one closed loop of edge crossings, keeping its winding.

    Consecutive crossings are joined by the contour segment on their shared
    face, which the neighbouring cell reproduces. Every other triangle side
    must cross the cube interior: joining two crossings on one face would put
    an edge (or a whole triangle) into that face, where the neighbouring cell
    emits its own copy.

    Raises:
        InvalidCaseTable: If no such triangulation exists
    """
    n = len(loop)
    faces = [CUBE_EDGE_FACES[e] for e in loop]

    def joinable(i, j):
        if j - i == 1 or (i == 0 and j == n - 1):
            return True
        return not faces[i] & faces[j]

    memo: Dict[Tuple[int, int], object] = {}

    def solve(i, j):
        # Triangulate loop[i..j] closed by the side (i, j); None if impossible
        if j - i < 2:
            return []
        if (i, j) not in memo:
            memo[(i, j)] = None
            for k in range(i + 1, j):
                if not (joinable(i, k) and joinable(k, j)):
                    continue
                left = solve(i, k)
                right = solve(k, j)
                if left is not None and right is not None:
                    memo[(i, j)] = left + [(loop[i], loop[k], loop[j])] + right
                    break
        return memo[(i, j)]

    triangles = solve(0, n - 1)
    if triangles is None:
        raise InvalidCaseTable(f"cannot triangulate crossing loop {tuple(loop)} off the cube faces")
    return triangles


def build_cube_triangles() -> Tuple[Tuple[Triangle, ...], ...]:
    """Triangulate all 256 cube cases as tuples of edge-index triangles."""
    table = []
    for case in range(256):
        triangles: List[Triangle] = []
        for loop in _cube_case_loops(case):
            triangles.extend(_triangulate_loop(loop))
        table.append(tuple(triangles))
    return tuple(table)


def validate_table(
    triangles: Sequence[Sequence[Triangle]], case_count: int, node_count: int, name: str
) -> None:
    """
    Check a triangle table for completeness and well-formed entries.

    Raises:
        InvalidCaseTable: On a missing case, a non-empty empty/full case, a
            missing triangulation, a malformed triangle or an out-of-range node
    """
    if len(triangles) != case_count:
        raise InvalidCaseTable(f"{name} table has {len(triangles)} cases, expected {case_count}")
    for case, entry in enumerate(triangles):
        if case in (0, case_count - 1):
            if entry:
                raise InvalidCaseTable(f"{name} case {case} must be empty")
        elif not entry:
            raise InvalidCaseTable(f"{name} case {case} has no triangles")
        for triangle in entry:
            if len(triangle) != 3:
                raise InvalidCaseTable(f"{name} case {case} has a non-triangle {triangle}")
            for node in triangle:
                if not 0 <= node < node_count:
                    raise InvalidCaseTable(f"{name} case {case} references node {node}")


@dataclass(frozen=True)
class CompiledCaseTable:
    """
    Padded array form of a case table for vectorised extraction.

    Attributes:
        corner_offsets: ``(corners, ndim)`` integer offsets of cell corners
        node_corners: ``(nodes, 2)`` corner pair interpolated for each node
        case_nodes: ``(cases, max_nodes)`` nodes used per case in first-use
            order, padded with -1
        node_counts: ``(cases,)`` number of valid entries in ``case_nodes``
        case_triangles: ``(cases, max_triangles, 3)`` triangles as indices into
            the case's node list, padded with -1
        triangle_counts: ``(cases,)`` number of valid triangles per case
    """

    corner_offsets: np.ndarray
    node_corners: np.ndarray
    case_nodes: np.ndarray
    node_counts: np.ndarray
    case_triangles: np.ndarray
    triangle_counts: np.ndarray

    @property
    def ndim(self) -> int:
        return self.corner_offsets.shape[1]


def compile_table(
    triangles: Sequence[Sequence[Triangle]],
    corner_offsets: np.ndarray,
    node_corners: Sequence[Tuple[int, int]],
) -> CompiledCaseTable:
    case_count = len(triangles)
    per_case_nodes = []
    per_case_local = []
    for entry in triangles:
        nodes: List[int] = []
        local = []
        for triangle in entry:
            row = []
            for node in triangle:
                if node not in nodes:
                    nodes.append(node)
                row.append(nodes.index(node))
            local.append(row)
        per_case_nodes.append(nodes)
        per_case_local.append(local)

    max_nodes = max(1, max(len(n) for n in per_case_nodes))
    max_triangles = max(1, max(len(t) for t in per_case_local))
    case_nodes = np.full((case_count, max_nodes), -1, dtype=np.int64)
    case_triangles = np.full((case_count, max_triangles, 3), -1, dtype=np.int64)
    for case, (nodes, local) in enumerate(zip(per_case_nodes, per_case_local)):
        case_nodes[case, : len(nodes)] = nodes
        if local:
            case_triangles[case, : len(local)] = local

    return CompiledCaseTable(
        corner_offsets=np.asarray(corner_offsets, dtype=np.int64),
        node_corners=np.asarray(node_corners, dtype=np.int64),
        case_nodes=case_nodes,
        node_counts=np.array([len(n) for n in per_case_nodes], dtype=np.int64),
        case_triangles=case_triangles,
        triangle_counts=np.array([len(t) for t in per_case_local], dtype=np.int64),
    )


CUBE_TRIANGLES = build_cube_triangles()

validate_table(CUBE_TRIANGLES, 256, len(CUBE_EDGES), "cube")
validate_table(SQUARE_TRIANGLES, 16, len(SQUARE_NODES), "square")

CUBE_TABLE = compile_table(CUBE_TRIANGLES, CUBE_CORNER_OFFSETS, CUBE_EDGES)
SQUARE_TABLE = compile_table(SQUARE_TRIANGLES, SQUARE_CORNER_OFFSETS, SQUARE_NODES)
SQUARE_TABLE_FILLED = compile_table(
    SQUARE_TRIANGLES[:15] + (SQUARE_FILL,), SQUARE_CORNER_OFFSETS, SQUARE_NODES
)


def case_index(corner_values: Sequence[float], threshold: float) -> int:
    """Bitmask of corners strictly above ``threshold``."""
    index = 0
    for bit, value in enumerate(corner_values):
        if value > threshold:
            index |= 1 << bit
    return index


def table_for(ndim: int, fill_interior: bool = False) -> CompiledCaseTable:
    """Compiled table for 2D (squares) or 3D (cubes) grids."""
    if ndim == 3:
        return CUBE_TABLE
    return SQUARE_TABLE_FILLED if fill_interior else SQUARE_TABLE

# meshview/mesh/triangulation.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Sequence

import numpy as np

from meshview.mesh.errors import CellBufferMismatch, InvalidFormat
from meshview.mesh.geometry import QuadraticEdge, QuadraticTriangle
from meshview.vtk.model import CellType, VertexNumbers

logger = logging.getLogger(__name__)


class CellKind(Enum):
    """How a cell contributes to the rendered surface."""

    TRIANGLE = auto()
    QUAD = auto()
    TETRA = auto()
    POLYGON = auto()
    QUADRATIC_EDGE = auto()
    QUADRATIC_TRIANGLE = auto()
    NO_SURFACE = auto()


_FIXED_SIZES = {
    CellKind.TRIANGLE: 3,
    CellKind.QUAD: 4,
    CellKind.TETRA: 4,
    CellKind.QUADRATIC_EDGE: 3,
    CellKind.QUADRATIC_TRIANGLE: 6,
}

_KIND_BY_TYPE = {
    CellType.TRIANGLE: CellKind.TRIANGLE,
    CellType.QUAD: CellKind.QUAD,
    CellType.TETRA: CellKind.TETRA,
    CellType.POLYGON: CellKind.POLYGON,
    CellType.QUADRATIC_EDGE: CellKind.QUADRATIC_EDGE,
    CellType.QUADRATIC_TRIANGLE: CellKind.QUADRATIC_TRIANGLE,
    CellType.VERTEX: CellKind.NO_SURFACE,
    CellType.POLY_VERTEX: CellKind.NO_SURFACE,
    CellType.LINE: CellKind.NO_SURFACE,
    CellType.POLY_LINE: CellKind.NO_SURFACE,
}


def cell_kind(code: int) -> CellKind:
    """Classify a VTK cell type code; unknown codes fall back to POLYGON."""
    try:
        return _KIND_BY_TYPE.get(CellType(code), CellKind.POLYGON)
    except ValueError:
        return CellKind.POLYGON


@dataclass(slots=True)
class TriangulationResult:
    indices: List[int] = field(default_factory=list)
    triangle_to_cell_mapping: List[int] = field(default_factory=list)
    quadratic_triangles: List[QuadraticTriangle] = field(default_factory=list)
    quadratic_edges: List[QuadraticEdge] = field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def add_triangles(self, triangles: Sequence[int], cell: int) -> None:
        self.indices.extend(triangles)
        self.triangle_to_cell_mapping.extend([cell] * (len(triangles) // 3))


def triangulate_fan(vertices: Sequence[int]) -> List[int]:
    """Fan from the first vertex: n - 2 triangles, empty below 3 vertices."""
    if len(vertices) < 3:
        return []
    v0 = vertices[0]
    out: List[int] = []
    for i in range(1, len(vertices) - 1):
        out.extend((v0, vertices[i], vertices[i + 1]))
    return out


def triangulate_strip(vertices: Sequence[int]) -> List[int]:
    """Triangle strip with alternating winding."""
    out: List[int] = []
    for i in range(len(vertices) - 2):
        a, b, c = vertices[i], vertices[i + 1], vertices[i + 2]
        if i % 2 == 0:
            out.extend((a, b, c))
        else:
            out.extend((b, a, c))
    return out


def _iter_cells(num_cells: int, cell_verts: VertexNumbers | np.ndarray):
    """
    Walk a count-prefixed flat buffer, yielding (cell_index, vertices).

    Raises:
        CellBufferMismatch: the buffer runs out early or has trailing data.
    """
    data = cell_verts.data if isinstance(cell_verts, VertexNumbers) else cell_verts
    flat = np.asarray(data, dtype=np.int64).tolist()

    pos = 0
    for cell in range(num_cells):
        if pos >= len(flat):
            raise CellBufferMismatch(
                f"cell buffer ended after {cell} of {num_cells} cells"
            )
        count = flat[pos]
        end = pos + 1 + count
        if count < 0 or end > len(flat):
            raise CellBufferMismatch(
                f"cell {cell} declares {count} vertices, "
                f"only {len(flat) - pos - 1} remain"
            )
        yield cell, flat[pos + 1 : end]
        pos = end

    if pos != len(flat):
        raise CellBufferMismatch(
            f"{len(flat) - pos} values left after {num_cells} cells"
        )


def _check_size(kind: CellKind, cell: int, verts: List[int]) -> None:
    expected = _FIXED_SIZES.get(kind)
    if expected is not None and len(verts) != expected:
        raise InvalidFormat(
            f"{kind.name.lower()} cell {cell} has {len(verts)} vertices, "
            f"expected {expected}"
        )


def triangulate_cells(
    cell_types: Sequence[int], cell_verts: VertexNumbers | np.ndarray
) -> TriangulationResult:
    """Triangulate an unstructured grid's cells."""
    result = TriangulationResult()
    skipped = 0

    for cell, verts in _iter_cells(len(cell_types), cell_verts):
        kind = cell_kind(int(cell_types[cell]))
        _check_size(kind, cell, verts)

        if kind == CellKind.TRIANGLE:
            result.add_triangles(verts, cell)
        elif kind == CellKind.QUAD:
            v0, v1, v2, v3 = verts
            result.add_triangles((v0, v1, v2, v0, v2, v3), cell)
        elif kind == CellKind.TETRA:
            v0, v1, v2, v3 = verts
            result.add_triangles(
                (v0, v1, v2, v0, v2, v3, v0, v3, v1, v1, v3, v2), cell
            )
        elif kind == CellKind.QUADRATIC_TRIANGLE:
            result.add_triangles(verts[:3], cell)
            result.quadratic_triangles.append(QuadraticTriangle(tuple(verts)))
        elif kind == CellKind.QUADRATIC_EDGE:
            result.quadratic_edges.append(QuadraticEdge(tuple(verts)))
        elif kind == CellKind.NO_SURFACE:
            skipped += 1
        elif len(verts) < 3:
            logger.warning(
                "Skipping cell %d (type %d): only %d vertices",
                cell,
                int(cell_types[cell]),
                len(verts),
            )
        else:
            result.add_triangles(triangulate_fan(verts), cell)

    if skipped:
        logger.info("Skipped %d vertex/line cells without surface", skipped)

    return result


def triangulate_polygons(
    num_cells: int, poly_verts: VertexNumbers | np.ndarray
) -> TriangulationResult:
    """Fan-triangulate a poly-data polygon list."""
    result = TriangulationResult()

    for cell, verts in _iter_cells(num_cells, poly_verts):
        if len(verts) < 3:
            logger.warning(
                "Skipping polygon %d: only %d vertices", cell, len(verts)
            )
            continue
        result.add_triangles(triangulate_fan(verts), cell)

    return result


def triangulate_strips(
    num_cells: int, strip_verts: VertexNumbers | np.ndarray, first_cell: int = 0
) -> TriangulationResult:
    """Triangulate triangle strips; cell ids continue from ``first_cell``."""
    result = TriangulationResult()

    for cell, verts in _iter_cells(num_cells, strip_verts):
        if len(verts) < 3:
            logger.warning("Skipping strip %d: only %d vertices", cell, len(verts))
            continue
        result.add_triangles(triangulate_strip(verts), first_cell + cell)

    return result

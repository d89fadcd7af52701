import numpy as np
import pytest

from meshview.mesh.errors import CellBufferMismatch, InvalidFormat
from meshview.mesh.triangulation import (
    CellKind,
    cell_kind,
    triangulate_cells,
    triangulate_fan,
    triangulate_polygons,
    triangulate_strip,
)
from meshview.vtk.model import CellType, VertexNumbers


def test_fan_triangulation():
    assert triangulate_fan([0, 1, 2, 3, 4]) == [0, 1, 2, 0, 2, 3, 0, 3, 4]
    assert triangulate_fan([7, 8]) == []


def test_strip_alternates_winding():
    assert triangulate_strip([0, 1, 2, 3]) == [0, 1, 2, 2, 1, 3]


def test_cell_kind_unknown_code_falls_back_to_polygon():
    assert cell_kind(CellType.QUAD) == CellKind.QUAD
    assert cell_kind(CellType.HEXAHEDRON) == CellKind.POLYGON
    assert cell_kind(99) == CellKind.POLYGON


def test_mixed_cells():
    cells = VertexNumbers.from_cells([[0, 1, 2], [0, 1, 2, 3], [0, 1, 2, 3]])
    types = [CellType.TRIANGLE, CellType.QUAD, CellType.TETRA]

    result = triangulate_cells(types, cells)

    assert result.indices == [
        0, 1, 2,
        0, 1, 2, 0, 2, 3,
        0, 1, 2, 0, 2, 3, 0, 3, 1, 1, 3, 2,
    ]  # fmt: skip
    assert result.triangle_to_cell_mapping == [0, 1, 1, 2, 2, 2, 2]


def test_polygon_cell_is_fanned():
    cells = VertexNumbers.from_cells([[4, 5, 6, 7, 8]])
    result = triangulate_cells([CellType.POLYGON], cells)

    assert result.triangle_count == 3
    assert result.triangle_to_cell_mapping == [0, 0, 0]


def test_wrong_vertex_count_for_fixed_type():
    cells = VertexNumbers.from_cells([[0, 1, 2, 3]])
    with pytest.raises(InvalidFormat, match="triangle cell 0 has 4 vertices"):
        triangulate_cells([CellType.TRIANGLE], cells)


def test_short_buffer_is_fatal():
    # five triangles declared, only four present
    data = np.array([3, 0, 1, 2] * 4, dtype=np.int64)
    with pytest.raises(CellBufferMismatch):
        triangulate_cells([CellType.TRIANGLE] * 5, VertexNumbers(5, data))


def test_trailing_data_is_fatal():
    data = np.array([3, 0, 1, 2, 9, 9], dtype=np.int64)
    with pytest.raises(CellBufferMismatch, match="left after"):
        triangulate_cells([CellType.TRIANGLE], VertexNumbers(1, data))


def test_quadratic_cells_keep_records():
    cells = VertexNumbers.from_cells([[0, 1, 2, 3, 4, 5], [0, 1, 3]])
    result = triangulate_cells(
        [CellType.QUADRATIC_TRIANGLE, CellType.QUADRATIC_EDGE], cells
    )

    assert result.indices == [0, 1, 2]
    assert result.triangle_to_cell_mapping == [0]
    assert result.quadratic_triangles[0].edge_midpoints() == (3, 4, 5)
    assert result.quadratic_edges[0].midpoint() == 3


def test_vertex_and_line_cells_have_no_surface():
    cells = VertexNumbers.from_cells([[0], [0, 1], [0, 1, 2]])
    result = triangulate_cells(
        [CellType.VERTEX, CellType.LINE, CellType.TRIANGLE], cells
    )

    assert result.indices == [0, 1, 2]
    assert result.triangle_to_cell_mapping == [2]


def test_polygon_with_too_few_vertices_is_skipped():
    polys = VertexNumbers.from_cells([[0, 1], [0, 1, 2, 3]])
    result = triangulate_polygons(2, polys)

    assert result.indices == [0, 1, 2, 0, 2, 3]
    assert result.triangle_to_cell_mapping == [1, 1]


def test_triangulation_is_deterministic():
    cells = VertexNumbers.from_cells([[0, 1, 2, 3, 4], [1, 2, 3, 4]])
    types = [CellType.POLYGON, CellType.QUAD]

    first = triangulate_cells(types, cells)
    second = triangulate_cells(types, cells)

    assert first.indices == second.indices
    assert first.triangle_to_cell_mapping == second.triangle_to_cell_mapping

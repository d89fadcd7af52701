import numpy as np
import pytest

from meshview.mesh.attributes import AttributeLocation
from meshview.mesh.errors import InvalidFormat
from meshview.mesh.higher_order import convert_to_second_order
from meshview.mesh.subdivision import subdivide_mesh, tessellate_quadratic


def test_subdivide_single_triangle(single_triangle):
    result = subdivide_mesh(single_triangle)

    assert result.triangle_count == 4
    assert result.vertex_count == 6
    assert result.triangle_to_cell_mapping.tolist() == [0, 0, 0, 0]

    temperature = result.get_attribute("temperature", AttributeLocation.POINT)
    np.testing.assert_allclose(temperature.data[3:], [5, 15, 10])
    pressure = result.get_attribute("pressure", AttributeLocation.CELL)
    np.testing.assert_array_equal(pressure.data, [5.0])
    result.validate()


def test_subdivision_preserves_area(grid_factory):
    grid = grid_factory(2, 2)
    result = subdivide_mesh(grid)

    def area(geometry):
        tris = geometry.vertices[geometry.triangles()]
        cross = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
        return 0.5 * np.linalg.norm(cross, axis=1).sum()

    assert result.triangle_count == 4 * grid.triangle_count
    assert area(result) == pytest.approx(area(grid))
    # every new triangle keeps the original orientation
    tris = result.vertices[result.triangles()]
    normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    assert (normals[:, 2] > 0).all()


def test_tessellate_quadratic(single_triangle):
    quadratic = convert_to_second_order(single_triangle)
    linear = tessellate_quadratic(quadratic)

    assert linear.element_order == 1
    assert linear.triangle_count == 4
    assert linear.triangle_to_cell_mapping.tolist() == [0, 0, 0, 0]
    linear.validate()


def test_tessellate_rejects_linear_mesh(single_triangle):
    with pytest.raises(InvalidFormat):
        tessellate_quadratic(single_triangle)

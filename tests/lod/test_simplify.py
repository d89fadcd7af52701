import numpy as np
import pytest

from meshview.lod.simplify import simplify_mesh
from meshview.mesh.attributes import AttributeLocation
from meshview.mesh.errors import InvalidFormat
from meshview.mesh.higher_order import convert_to_second_order
from meshview.settings import SimplifySettings


def test_qem_halves_the_grid(quad_grid):
    result = simplify_mesh(quad_grid, 0.5)

    assert 45 <= result.triangle_count <= 55
    result.validate()
    np.testing.assert_array_equal(
        result.triangle_to_cell_mapping, np.arange(result.triangle_count)
    )


def test_attributes_follow_the_new_topology(quad_grid):
    result = simplify_mesh(quad_grid, 0.5)

    height = result.get_attribute("height", AttributeLocation.POINT)
    velocity = result.get_attribute("velocity", AttributeLocation.POINT)
    cell_id = result.get_attribute("cell_id", AttributeLocation.CELL)

    assert len(height) == result.vertex_count
    assert len(velocity) == result.vertex_count
    assert len(cell_id) == result.triangle_count
    # averaging ones keeps ones
    np.testing.assert_allclose(velocity.data, 1.0)
    # every cell value comes from an original cell
    assert set(cell_id.data.tolist()) <= set(range(50))


def test_clustering_for_small_ratios(quad_grid):
    result = simplify_mesh(quad_grid, 0.1)

    assert 0 < result.triangle_count <= 10
    result.validate()
    cell_id = result.get_attribute("cell_id", AttributeLocation.CELL)
    assert len(cell_id) == result.triangle_count
    # the coarse mesh still reaches across the whole grid
    y = result.vertices[:, 1]
    assert y.max() - y.min() >= 7.0


@pytest.mark.parametrize("n", [8, 10])
def test_clustering_covers_the_whole_grid(grid_factory, n):
    grid = grid_factory(n, n)

    result = simplify_mesh(grid, 0.15)

    assert 0 < result.triangle_count <= round(2 * n * n * 0.15)
    lo = result.vertices.min(axis=0)
    hi = result.vertices.max(axis=0)
    assert hi[0] - lo[0] >= 0.7 * n
    assert hi[1] - lo[1] >= 0.7 * n


def test_ratio_is_clamped(quad_grid):
    clamped = simplify_mesh(quad_grid, 0.01)
    at_minimum = simplify_mesh(quad_grid, 0.1)

    np.testing.assert_array_equal(clamped.indices, at_minimum.indices)


def test_full_ratio_returns_a_copy(quad_grid):
    result = simplify_mesh(quad_grid, 1.0)

    assert result is not quad_grid
    np.testing.assert_array_equal(result.indices, quad_grid.indices)
    result.vertices[0, 0] = 99.0
    assert quad_grid.vertices[0, 0] == 0.0


def test_tiny_meshes_are_left_alone(single_triangle):
    result = simplify_mesh(single_triangle, 0.25)

    assert result.triangle_count == 1
    np.testing.assert_array_equal(result.vertices, single_triangle.vertices)


def test_min_triangles_setting(quad_grid):
    settings = SimplifySettings(min_triangles=200)

    result = simplify_mesh(quad_grid, 0.5, settings)

    assert result.triangle_count == quad_grid.triangle_count


def test_rejects_quadratic_meshes(single_triangle):
    quadratic = convert_to_second_order(single_triangle)

    with pytest.raises(InvalidFormat):
        simplify_mesh(quadratic, 0.5)


def test_is_deterministic(quad_grid):
    first = simplify_mesh(quad_grid, 0.5)
    second = simplify_mesh(quad_grid, 0.5)

    np.testing.assert_array_equal(first.indices, second.indices)
    np.testing.assert_array_equal(first.vertices, second.vertices)


def test_input_is_not_modified(quad_grid):
    vertices = quad_grid.vertices.copy()
    indices = quad_grid.indices.copy()
    height = quad_grid.get_attribute("height", AttributeLocation.POINT).data.copy()

    simplify_mesh(quad_grid, 0.5)
    simplify_mesh(quad_grid, 0.1)

    np.testing.assert_array_equal(quad_grid.vertices, vertices)
    np.testing.assert_array_equal(quad_grid.indices, indices)
    np.testing.assert_array_equal(
        quad_grid.get_attribute("height", AttributeLocation.POINT).data, height
    )


def test_lookup_tables_are_kept(quad_grid):
    quad_grid.add_lookup_table("ramp", [[0, 0, 0, 1], [1, 1, 1, 1]])

    result = simplify_mesh(quad_grid, 0.5)

    np.testing.assert_array_equal(
        result.get_lookup_table("ramp"), quad_grid.get_lookup_table("ramp")
    )

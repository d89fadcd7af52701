import numpy as np
import pytest

from meshview.mesh.attributes import (
    AttributeLocation,
    AttributeStore,
    ColorScalarAttribute,
    ScalarAttribute,
    VectorAttribute,
)
from meshview.mesh.errors import AttributeMismatch, IndexOutOfBounds, InvalidFormat
from meshview.mesh.geometry import GeometryData, QuadraticEdge, QuadraticTriangle


def test_create_normalises_dtypes(single_triangle):
    assert single_triangle.vertices.dtype == np.float32
    assert single_triangle.vertices.shape == (3, 3)
    assert single_triangle.indices.dtype == np.uint32
    assert single_triangle.triangle_to_cell_mapping.dtype == np.int64
    assert single_triangle.triangle_count == 1


def test_bounding_box():
    geometry = GeometryData.create([(0, 0, 0), (3, 4, 0)], [])
    center, size = geometry.bounding_box()

    np.testing.assert_allclose(center, [1.5, 2.0, 0.0])
    assert size == pytest.approx(5.0)


def test_bounding_box_of_empty_mesh():
    center, size = GeometryData.create([], []).bounding_box()

    np.testing.assert_array_equal(center, [0, 0, 0])
    assert size == 1.0


def test_validate_accepts_consistent_mesh(quad_grid):
    quad_grid.validate()


def test_validate_index_out_of_range():
    geometry = GeometryData.create([(0, 0, 0)] * 3, [0, 1, 3])
    with pytest.raises(IndexOutOfBounds):
        geometry.validate()


def test_validate_partial_triangle():
    geometry = GeometryData.create([(0, 0, 0)] * 3, [0, 1])
    with pytest.raises(InvalidFormat):
        geometry.validate()


def test_validate_point_attribute_length(single_triangle):
    single_triangle.attributes.insert(
        "short", AttributeLocation.POINT, ScalarAttribute.create([1.0])
    )
    with pytest.raises(AttributeMismatch):
        single_triangle.validate()


def test_validate_mapping_length(single_triangle):
    single_triangle.triangle_to_cell_mapping = np.array([0, 0], dtype=np.int64)
    with pytest.raises(AttributeMismatch):
        single_triangle.validate()


def test_copy_is_independent(single_triangle):
    clone = single_triangle.copy()
    clone.vertices[0, 0] = 42.0
    clone.attributes["temperature", AttributeLocation.POINT].data[0] = -1.0

    assert single_triangle.vertices[0, 0] == 0.0
    assert single_triangle.attributes["temperature", AttributeLocation.POINT].data[0] == 0.0


def test_triangles_requires_linear_mesh():
    geometry = GeometryData.create([(0, 0, 0)] * 6, range(6), element_order=2)
    with pytest.raises(InvalidFormat):
        geometry.triangles()
    assert geometry.triangle_count == 4


def test_extract_lookup_tables():
    table = [[1, 0, 0, 1], [0, 0, 1, 1]]
    attributes = AttributeStore()
    attributes.insert(
        "__lut_heat",
        AttributeLocation.POINT,
        ScalarAttribute.create(
            np.ravel(table), num_comp=4, table_name="heat", lookup_table=table
        ),
    )
    geometry = GeometryData.create([(0, 0, 0)] * 3, [0, 1, 2], attributes)

    geometry.extract_lookup_tables()

    assert geometry.lookup_table_names() == ["heat"]
    np.testing.assert_array_equal(geometry.get_lookup_table("heat"), table)
    # lookup-table entries are not per-point data
    geometry.validate()


def test_describe_lists_attributes(single_triangle):
    single_triangle.attributes.insert(
        "rgb",
        AttributeLocation.CELL,
        ColorScalarAttribute.create([[1, 0, 0]], nvalues=3),
    )
    text = single_triangle.describe()

    assert "Vertex number: 3" in text
    assert "Scalar attribute: temperature (location: point)" in text
    assert "Color scalar attribute: rgb (location: cell)" in text


def test_quadratic_records():
    edge = QuadraticEdge((0, 1, 2))
    assert edge.endpoints() == (0, 1)
    assert edge.to_linear_segments() == ((0, 2), (2, 1))

    tri = QuadraticTriangle((0, 1, 2, 3, 4, 5))
    assert tri.to_linear_triangle() == (0, 1, 2)


def test_attribute_store_replaces_same_key():
    store = AttributeStore()
    store.insert("v", AttributeLocation.POINT, VectorAttribute.create([[1, 2, 3]]))
    store.insert("v", AttributeLocation.POINT, VectorAttribute.create([[4, 5, 6]]))
    store.insert("v", AttributeLocation.CELL, VectorAttribute.create([[7, 8, 9]]))

    assert len(store) == 2
    np.testing.assert_array_equal(store["v", AttributeLocation.POINT].data, [[4, 5, 6]])
    assert [name for name, _ in store.at(AttributeLocation.CELL)] == ["v"]

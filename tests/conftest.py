import textwrap

import numpy as np
import pytest

from meshview.mesh.attributes import (
    AttributeLocation,
    AttributeStore,
    ScalarAttribute,
    VectorAttribute,
)
from meshview.mesh.geometry import GeometryData


def make_grid(nx: int, ny: int, with_attributes: bool = False) -> GeometryData:
    """Flat (nx x ny)-quad grid in the z=0 plane, two triangles per quad."""
    vertices = [(float(i), float(j), 0.0) for j in range(ny + 1) for i in range(nx + 1)]

    indices = []
    mapping = []
    for j in range(ny):
        for i in range(nx):
            v0 = j * (nx + 1) + i
            v1 = v0 + 1
            v2 = v1 + nx + 1
            v3 = v0 + nx + 1
            indices += [v0, v1, v2, v0, v2, v3]
            mapping += [j * nx + i] * 2

    attributes = AttributeStore()
    if with_attributes:
        n = len(vertices)
        attributes.insert(
            "height",
            AttributeLocation.POINT,
            ScalarAttribute.create(np.arange(n, dtype=np.float32)),
        )
        attributes.insert(
            "velocity",
            AttributeLocation.POINT,
            VectorAttribute.create(np.ones((n, 3), dtype=np.float32)),
        )
        attributes.insert(
            "cell_id",
            AttributeLocation.CELL,
            ScalarAttribute.create(np.arange(nx * ny, dtype=np.float32)),
        )

    return GeometryData.create(
        vertices, indices, attributes, triangle_to_cell_mapping=mapping
    )


@pytest.fixture
def grid_factory():
    return make_grid


@pytest.fixture
def quad_grid():
    """5 x 10 quads = 100 triangles."""
    return make_grid(5, 10, with_attributes=True)


@pytest.fixture
def single_triangle():
    attributes = AttributeStore()
    attributes.insert(
        "temperature",
        AttributeLocation.POINT,
        ScalarAttribute.create([0.0, 10.0, 20.0]),
    )
    attributes.insert(
        "pressure", AttributeLocation.CELL, ScalarAttribute.create([5.0])
    )
    return GeometryData.create(
        [(0, 0, 0), (2, 0, 0), (0, 2, 0)],
        [0, 1, 2],
        attributes,
        triangle_to_cell_mapping=[0],
    )


@pytest.fixture
def write_vtk(tmp_path):
    """Write dedented legacy VTK text to a file and return its path."""

    def _write(text: str, name: str = "model.vtk"):
        path = tmp_path / name
        path.write_text(textwrap.dedent(text).lstrip())
        return path

    return _write

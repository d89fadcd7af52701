import numpy as np
import pytest

from meshview.assets.importers import ObjImporter, VtkImporter
from meshview.mesh.attributes import AttributeLocation
from meshview.mesh.errors import IndexOutOfBounds, InvalidFormat, MissingData
from meshview.mesh.geometry import GeometryData


def test_obj_importer_quad(tmp_path):
    f = tmp_path / "quad.obj"
    f.write_text(
        "# one quad\n"
        "v 0.0 0.0 0.0\n"
        "v 1.0 0.0 0.0\n"
        "v 1.0 1.0 0.0\n"
        "v 0.0 1.0 0.0\n"
        "f 1 2 3 4\n"
    )

    geometry = ObjImporter().import_file(f)

    assert isinstance(geometry, GeometryData)
    assert geometry.vertex_count == 4
    assert geometry.indices.tolist() == [0, 1, 2, 0, 2, 3]
    # both triangles come from face 0
    assert geometry.triangle_to_cell_mapping.tolist() == [0, 0]


def test_obj_importer_normals(tmp_path):
    f = tmp_path / "triangle.obj"
    f.write_text(
        "v 0.0 0.0 0.0\n"
        "v 1.0 0.0 0.0\n"
        "v 0.0 1.0 0.0\n"
        "vn 0.0 0.0 1.0\n"
        "vt 0.0 0.0\n"
        "f 1/1/1 2/1/1 -1/1/1\n"
    )

    geometry = ObjImporter().import_file(f)

    normals = geometry.get_attribute("Normals", AttributeLocation.POINT)
    assert normals is not None
    np.testing.assert_array_equal(normals.data, [[0, 0, 1]] * 3)
    assert geometry.indices.tolist() == [0, 1, 2]


def test_obj_importer_empty_file(tmp_path):
    f = tmp_path / "empty.obj"
    f.write_text("")

    with pytest.raises(MissingData, match="no faces"):
        ObjImporter().import_file(f)


def test_obj_importer_bad_index(tmp_path):
    f = tmp_path / "bad.obj"
    f.write_text("v 0 0 0\nv 1 0 0\nf 1 2 3\n")

    with pytest.raises(IndexOutOfBounds):
        ObjImporter().import_file(f)


def test_obj_importer_bad_number(tmp_path):
    f = tmp_path / "bad.obj"
    f.write_text("v 0 zero 0\n")

    with pytest.raises(InvalidFormat, match="bad.obj:1"):
        ObjImporter().import_file(f)


def test_vtk_importer(write_vtk):
    path = write_vtk(
        """
        # vtk DataFile Version 3.0
        triangle
        ASCII
        DATASET POLYDATA
        POINTS 3 float
        0 0 0 1 0 0 0 1 0
        POLYGONS 1 4
        3 0 1 2
        """
    )

    importer = VtkImporter()
    geometry = importer.import_file(path)

    assert ".vtk" in importer.extensions
    assert geometry.triangle_count == 1
    assert geometry.triangle_to_cell_mapping.tolist() == [0]

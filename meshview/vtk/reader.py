# meshview/vtk/reader.py
"""
Legacy ``.vtk`` reading through VTK's own readers.

The vtk output object is turned into the plain ``VtkDataset`` model so the
extractors never touch vtk types. Attribute kinds come from the active
attributes of each data block and from the per-kind array names the reader
reports for the file; arrays that fit neither are FIELD data.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pyvista as pv
from vtkmodules.vtkCommonCore import VTK_STRING
from vtkmodules.vtkCommonDataModel import vtkDataSetAttributes
from vtkmodules.vtkIOLegacy import (
    vtkDataReader,
    vtkDataSetReader,
    vtkPolyDataReader,
    vtkRectilinearGridReader,
    vtkStructuredGridReader,
    vtkStructuredPointsReader,
    vtkUnstructuredGridReader,
)

from meshview.mesh.errors import VtkIOError, VtkParseError
from meshview.vtk.model import (
    Attributes,
    Cells,
    DataArray,
    DataSetKind,
    ElementKind,
    ElementType,
    FieldArray,
    FieldAttribute,
    PolyDataPiece,
    UnstructuredGridPiece,
    VertexNumbers,
    VtkDataset,
)

logger = logging.getLogger(__name__)

VTK_BINARY = 2

_READERS = {
    DataSetKind.UNSTRUCTURED_GRID: vtkUnstructuredGridReader,
    DataSetKind.POLYDATA: vtkPolyDataReader,
    DataSetKind.STRUCTURED_POINTS: vtkStructuredPointsReader,
    DataSetKind.STRUCTURED_GRID: vtkStructuredGridReader,
    DataSetKind.RECTILINEAR_GRID: vtkRectilinearGridReader,
}

_KIND_BY_ATTRIBUTE = {
    vtkDataSetAttributes.SCALARS: ElementKind.SCALARS,
    vtkDataSetAttributes.VECTORS: ElementKind.VECTORS,
    vtkDataSetAttributes.NORMALS: ElementKind.NORMALS,
    vtkDataSetAttributes.TCOORDS: ElementKind.TCOORDS,
    vtkDataSetAttributes.TENSORS: ElementKind.TENSORS,
}

# TENSORS6 component order: XX, YY, ZZ, XY, YZ, XZ
_SYMMETRIC_TO_FULL = [0, 3, 5, 3, 1, 4, 5, 4, 2]


class _MessageCollector:
    """Receives the text of ErrorEvent / WarningEvent from a vtk object."""

    def __init__(self) -> None:
        self.messages: List[str] = []
        self.CallDataType = VTK_STRING

    def __call__(self, obj, event, message) -> None:
        self.messages.append(str(message).strip())


def read_vtk(path: str | Path) -> VtkDataset:
    """
    Read a legacy VTK file.

    Raises:
        VtkIOError: the file cannot be opened.
        VtkParseError: the contents are not valid legacy VTK.
    """
    path = Path(path)
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise VtkIOError(e) from e

    def configure(reader: vtkDataReader) -> None:
        reader.SetFileName(str(path))

    return _read(configure, path.name)


def parse_vtk(raw: bytes) -> VtkDataset:
    """Parse legacy VTK content held in memory."""
    if isinstance(raw, str):
        raw = raw.encode()

    def configure(reader: vtkDataReader) -> None:
        reader.ReadFromInputStringOn()
        reader.SetBinaryInputString(raw, len(raw))

    return _read(configure, "<memory>")


def _watch(reader: vtkDataReader) -> tuple[_MessageCollector, _MessageCollector]:
    errors, warnings = _MessageCollector(), _MessageCollector()
    reader.AddObserver("ErrorEvent", errors)
    reader.AddObserver("WarningEvent", warnings)
    return errors, warnings


def _dataset_kind(configure, source: str) -> DataSetKind:
    probe = vtkDataSetReader()
    configure(probe)
    errors, _ = _watch(probe)

    if probe.IsFileUnstructuredGrid():
        return DataSetKind.UNSTRUCTURED_GRID
    if probe.IsFilePolyData():
        return DataSetKind.POLYDATA
    if probe.IsFileStructuredPoints():
        return DataSetKind.STRUCTURED_POINTS
    if probe.IsFileStructuredGrid():
        return DataSetKind.STRUCTURED_GRID
    if probe.IsFileRectilinearGrid():
        return DataSetKind.RECTILINEAR_GRID

    detail = "; ".join(errors.messages) or "unknown dataset type"
    raise VtkParseError(f"{source} is not a legacy VTK dataset: {detail}")


def _read(configure, source: str) -> VtkDataset:
    kind = _dataset_kind(configure, source)

    reader = _READERS[kind]()
    configure(reader)
    reader.ReadAllScalarsOn()
    reader.ReadAllColorScalarsOn()
    reader.ReadAllVectorsOn()
    reader.ReadAllNormalsOn()
    reader.ReadAllTCoordsOn()
    reader.ReadAllTensorsOn()
    reader.ReadAllFieldsOn()

    errors, warnings = _watch(reader)
    reader.Update()

    for message in warnings.messages:
        logger.warning("%s: %s", source, message)
    if errors.messages:
        raise VtkParseError(f"{source}: {'; '.join(errors.messages)}")

    output = reader.GetOutput()
    dataset = VtkDataset(
        version=(reader.GetFileMajorVersion(), reader.GetFileMinorVersion()),
        title=(reader.GetHeader() or "").strip(),
        kind=kind,
        binary=reader.GetFileType() == VTK_BINARY,
    )
    dataset.field_data.extend(_field_attributes(output.GetFieldData()))

    if kind == DataSetKind.UNSTRUCTURED_GRID:
        dataset.pieces.append(_unstructured_grid(output, _kinds_by_name(reader)))
    elif kind == DataSetKind.POLYDATA:
        dataset.pieces.append(_polydata(output, _kinds_by_name(reader)))
    else:
        logger.info("Dataset type %s is not extracted", kind.value)
    return dataset


def _kinds_by_name(reader: vtkDataReader) -> Dict[str, ElementKind]:
    """Array names the reader saw in the file, by attribute section keyword."""
    kinds: Dict[str, ElementKind] = {}
    listings = (
        ("Tensors", ElementKind.TENSORS),
        ("TCoords", ElementKind.TCOORDS),
        ("Normals", ElementKind.NORMALS),
        ("Vectors", ElementKind.VECTORS),
        ("Scalars", ElementKind.SCALARS),
    )
    for section, kind in listings:
        count = getattr(reader, f"GetNumberOf{section}InFile")()
        name_at = getattr(reader, f"Get{section}NameInFile")
        for i in range(count):
            name = name_at(i)
            if name:
                kinds[name] = kind
    return kinds


def _points(output) -> np.ndarray:
    if output.GetPoints() is None:
        return np.zeros(0, dtype=np.float32)
    return np.asarray(pv.wrap(output).points, dtype=np.float32).ravel()


def _vertex_numbers(cell_array) -> Optional[VertexNumbers]:
    if cell_array is None or cell_array.GetNumberOfCells() == 0:
        return None
    return VertexNumbers.from_offsets(
        pv.convert_array(cell_array.GetOffsetsArray()),
        pv.convert_array(cell_array.GetConnectivityArray()),
    )


def _unstructured_grid(output, kinds: Dict[str, ElementKind]) -> UnstructuredGridPiece:
    cell_verts = _vertex_numbers(output.GetCells())
    if cell_verts is None:
        cell_verts = VertexNumbers(0, np.zeros(0, dtype=np.int64))

    type_array = output.GetCellTypesArray()
    if type_array is None:
        types = np.zeros(0, dtype=np.int64)
    else:
        types = np.asarray(pv.convert_array(type_array), dtype=np.int64)

    return UnstructuredGridPiece(
        _points(output),
        Cells(cell_verts, types),
        _attributes(output, kinds),
    )


def _polydata(output, kinds: Dict[str, ElementKind]) -> PolyDataPiece:
    return PolyDataPiece(
        _points(output),
        verts=_vertex_numbers(output.GetVerts()),
        lines=_vertex_numbers(output.GetLines()),
        polys=_vertex_numbers(output.GetPolys()),
        strips=_vertex_numbers(output.GetStrips()),
        data=_attributes(output, kinds),
    )


def _attributes(output, kinds: Dict[str, ElementKind]) -> Attributes:
    return Attributes(
        point=_data_arrays(output.GetPointData(), kinds),
        cell=_data_arrays(output.GetCellData(), kinds),
    )


def _element_kind(
    data: vtkDataSetAttributes, index: int, array, kinds: Dict[str, ElementKind]
) -> Optional[ElementKind]:
    name = array.GetName()
    num_comp = array.GetNumberOfComponents()

    # COLOR_SCALARS are stored as unsigned char and never listed as scalars.
    is_uchar = pv.convert_array(array).dtype == np.uint8
    if is_uchar and num_comp in (3, 4) and kinds.get(name) != ElementKind.SCALARS:
        return ElementKind.COLOR_SCALARS

    active = _KIND_BY_ATTRIBUTE.get(data.IsArrayAnAttribute(index))
    if active is not None:
        return active
    return kinds.get(name)


def _data_arrays(data: vtkDataSetAttributes, kinds: Dict[str, ElementKind]) -> list:
    arrays: list = []
    fields: List[FieldArray] = []

    for i in range(data.GetNumberOfArrays()):
        array = data.GetArray(i)
        if array is None:
            logger.debug("Skipping non-numeric array %d", i)
            continue

        name = array.GetName() or f"array_{i}"
        num_comp = array.GetNumberOfComponents()
        values = np.asarray(pv.convert_array(array))
        kind = _element_kind(data, i, array, kinds)

        if kind is None:
            fields.append(FieldArray(name, num_comp, values.ravel()))
            continue

        if kind == ElementKind.COLOR_SCALARS:
            values = values.astype(np.float32) / 255.0
        elif kind == ElementKind.TENSORS and num_comp == 6:
            values = values.reshape(-1, 6)[:, _SYMMETRIC_TO_FULL]
            num_comp = 9

        lut = array.GetLookupTable() if kind == ElementKind.SCALARS else None
        table_name = None
        if kind == ElementKind.SCALARS:
            # vtk drops the LOOKUP_TABLE name; the table is keyed by its scalar.
            table_name = name if lut is not None else "default"

        arrays.append(
            DataArray(name, ElementType(kind, num_comp, table_name), values.ravel())
        )
        if lut is not None:
            table = pv.convert_array(lut.GetTable()).astype(np.float32) / 255.0
            arrays.append(
                DataArray(name, ElementType(ElementKind.LOOKUP_TABLE, 4), table.ravel())
            )

    if fields:
        arrays.append(FieldAttribute("FieldData", fields))
    return arrays


def _field_attributes(field_data) -> List[FieldAttribute]:
    if field_data is None or field_data.GetNumberOfArrays() == 0:
        return []
    arrays = []
    for i in range(field_data.GetNumberOfArrays()):
        array = field_data.GetArray(i)
        if array is None:
            continue
        arrays.append(
            FieldArray(
                array.GetName() or f"array_{i}",
                array.GetNumberOfComponents(),
                np.asarray(pv.convert_array(array)).ravel(),
            )
        )
    return [FieldAttribute("FieldData", arrays)] if arrays else []

# meshview/vtk/extract.py
"""
Conversion of parsed VTK pieces into GeometryData.

Structural problems (no piece, bad point buffer, malformed cells) abort the
extraction. Problems with a single data array are logged and that array is
left out.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

import numpy as np

from meshview.mesh.attributes import (
    Attribute,
    AttributeLocation,
    AttributeStore,
    ColorScalarAttribute,
    ScalarAttribute,
    VectorAttribute,
)
from meshview.mesh.errors import (
    AttributeMismatch,
    CellBufferMismatch,
    ConversionError,
    DataTypeMismatch,
    IndexOutOfBounds,
    InvalidFormat,
    MissingData,
    UnsupportedDataType,
)
from meshview.mesh.geometry import GeometryData
from meshview.mesh.triangulation import (
    TriangulationResult,
    triangulate_cells,
    triangulate_polygons,
    triangulate_strips,
)
from meshview.settings import DEFAULT_SETTINGS, ExtractorSettings
from meshview.types import FloatArray
from meshview.vtk.model import (
    Attributes,
    DataArray,
    DataSetKind,
    ElementKind,
    FieldAttribute,
    Piece,
    PieceReference,
    PolyDataPiece,
    UnstructuredGridPiece,
    VtkDataset,
)
from meshview.vtk.reader import read_vtk

logger = logging.getLogger(__name__)


def convert_points(points) -> FloatArray:
    """Flat coordinate buffer -> (N, 3) float32."""
    try:
        flat = np.asarray(points, dtype=np.float32).ravel()
    except (TypeError, ValueError) as e:
        raise ConversionError(f"points are not numeric: {e}") from e

    if len(flat) % 3 != 0:
        raise ConversionError(
            f"point buffer length {len(flat)} is not a multiple of 3"
        )
    return flat.reshape(-1, 3)


def _as_float(data, what: str) -> FloatArray:
    try:
        return np.asarray(data, dtype=np.float32).ravel()
    except (TypeError, ValueError) as e:
        raise ConversionError(f"{what}: {e}") from e


def _rows(flat: FloatArray, width: int, what: str) -> FloatArray:
    if width <= 0 or len(flat) % width != 0:
        raise ConversionError(
            f"{what}: {len(flat)} values do not form rows of {width}"
        )
    return flat.reshape(-1, width)


def convert_data_array(
    array: DataArray | FieldAttribute,
    settings: ExtractorSettings = DEFAULT_SETTINGS.extractor,
) -> tuple[str, Attribute]:
    """
    Classify one data array by its element type.

    Returns the name to store the attribute under and the attribute.

    Raises:
        UnsupportedDataType: FIELD arrays and generic element types.
        InvalidFormat: texture coordinates that are not 2D or 3D.
        ConversionError: the buffer does not split into whole elements.
    """
    if isinstance(array, FieldAttribute):
        raise UnsupportedDataType(f"field data '{array.name}'")

    elem = array.elem
    data = _as_float(array.data, array.name)

    if elem.kind == ElementKind.SCALARS:
        num_comp = max(elem.num_comp, 1)
        _rows(data, num_comp, array.name)
        return array.name, ScalarAttribute.create(
            data,
            num_comp=num_comp,
            table_name=elem.lookup_table or settings.default_table_name,
        )

    if elem.kind == ElementKind.COLOR_SCALARS:
        return array.name, ColorScalarAttribute(
            elem.num_comp, _rows(data, elem.num_comp, array.name)
        )

    if elem.kind in (ElementKind.VECTORS, ElementKind.NORMALS):
        return array.name, VectorAttribute(_rows(data, 3, array.name))

    if elem.kind == ElementKind.TCOORDS:
        if elem.num_comp == 2:
            uv = _rows(data, 2, array.name)
            padded = np.zeros((len(uv), 3), dtype=np.float32)
            padded[:, :2] = uv
            return array.name, VectorAttribute(padded)
        if elem.num_comp == 3:
            return array.name, VectorAttribute(_rows(data, 3, array.name))
        raise InvalidFormat(
            f"texture coordinates '{array.name}' have {elem.num_comp} "
            "dimensions, expected 2 or 3"
        )

    if elem.kind == ElementKind.TENSORS:
        # Only the diagonal survives; the renderer has no tensor support.
        tensors = _rows(data, 9, array.name)
        return array.name, VectorAttribute(
            np.ascontiguousarray(tensors[:, [0, 4, 8]])
        )

    if elem.kind == ElementKind.LOOKUP_TABLE:
        table = _rows(data, 4, array.name)
        return f"{settings.lookup_table_prefix}{array.name}", ScalarAttribute(
            num_comp=4,
            table_name=array.name,
            data=table.ravel().copy(),
            lookup_table=table.copy(),
        )

    raise UnsupportedDataType(f"{elem.kind.value} array '{array.name}'")


class VtkMeshExtractor(ABC):
    """Turns the first piece of a dataset into GeometryData."""

    def __init__(self, settings: ExtractorSettings = DEFAULT_SETTINGS.extractor):
        self.settings = settings

    def process(self, pieces: Sequence[Piece]) -> GeometryData:
        if not pieces:
            raise MissingData("dataset has no pieces")
        if len(pieces) > 1:
            logger.info("Dataset has %d pieces, only the first is used", len(pieces))

        piece = pieces[0]
        if isinstance(piece, PieceReference):
            raise InvalidFormat(f"piece stored externally in '{piece.source}'")

        geometry = self.extract_piece(piece)
        geometry.extract_lookup_tables(self.settings.lookup_table_prefix)
        geometry.validate()

        logger.debug(
            "Extracted %d vertices, %d triangles, %d attributes",
            geometry.vertex_count,
            geometry.triangle_count,
            len(geometry.attributes),
        )
        return geometry

    @abstractmethod
    def extract_piece(self, piece: Piece) -> GeometryData:
        raise NotImplementedError

    def process_attributes(
        self, data: Attributes, num_points: int, num_cells: int
    ) -> AttributeStore:
        store = AttributeStore()
        self._add_attributes(store, data.point, AttributeLocation.POINT, num_points)
        self._add_attributes(store, data.cell, AttributeLocation.CELL, num_cells)
        return store

    def _add_attributes(
        self,
        store: AttributeStore,
        arrays: List[DataArray | FieldAttribute],
        location: AttributeLocation,
        expected: int,
    ) -> None:
        for array in arrays:
            try:
                name, attr = convert_data_array(array, self.settings)
                is_table = isinstance(attr, ScalarAttribute) and attr.is_lookup_table
                if not is_table and len(attr) != expected:
                    raise AttributeMismatch(len(attr), expected)
            except (
                UnsupportedDataType,
                InvalidFormat,
                ConversionError,
                AttributeMismatch,
            ) as e:
                logger.warning(
                    "Skipping %s attribute '%s': %s", location.value, array.name, e
                )
                continue
            store.insert(name, location, attr)

    @staticmethod
    def _check_indices(indices: List[int], num_points: int) -> None:
        if indices:
            lowest = min(indices)
            if lowest < 0:
                raise IndexOutOfBounds(lowest, num_points - 1)
            highest = max(indices)
            if highest >= num_points:
                raise IndexOutOfBounds(highest, num_points - 1)


class UnstructuredGridExtractor(VtkMeshExtractor):
    def extract_piece(self, piece: Piece) -> GeometryData:
        if not isinstance(piece, UnstructuredGridPiece):
            raise DataTypeMismatch("UnstructuredGridPiece", type(piece).__name__)

        vertices = convert_points(piece.points)
        cells = piece.cells
        if cells.cell_verts.num_cells != cells.num_cells():
            raise CellBufferMismatch(
                f"{cells.cell_verts.num_cells} cells declared, "
                f"{cells.num_cells()} cell types given"
            )

        tri = triangulate_cells(cells.types, cells.cell_verts)
        self._check_indices(tri.indices, len(vertices))
        for record in tri.quadratic_edges:
            self._check_indices(list(record.vertices), len(vertices))
        for element in tri.quadratic_triangles:
            self._check_indices(list(element.vertices), len(vertices))

        attributes = self.process_attributes(
            piece.data, len(vertices), cells.num_cells()
        )
        return _build(vertices, tri, attributes)


class PolyDataExtractor(VtkMeshExtractor):
    """
    Surface extraction for POLYDATA. Cell ids follow VTK's ordering
    (vertices, lines, polygons, strips) so CELL_DATA lines up.
    """

    def extract_piece(self, piece: Piece) -> GeometryData:
        if not isinstance(piece, PolyDataPiece):
            raise DataTypeMismatch("PolyDataPiece", type(piece).__name__)

        vertices = convert_points(piece.points)

        n_verts = piece.verts.num_cells if piece.verts is not None else 0
        n_lines = piece.lines.num_cells if piece.lines is not None else 0
        n_polys = piece.polys.num_cells if piece.polys is not None else 0
        n_strips = piece.strips.num_cells if piece.strips is not None else 0

        if n_verts:
            logger.info("Skipping %d vertex cells (no surface)", n_verts)
        if n_lines:
            logger.info("Skipping %d line cells (no surface)", n_lines)

        offset = n_verts + n_lines
        tri = TriangulationResult()
        if piece.polys is not None:
            polys = triangulate_polygons(n_polys, piece.polys)
            tri.indices.extend(polys.indices)
            tri.triangle_to_cell_mapping.extend(
                offset + c for c in polys.triangle_to_cell_mapping
            )
        if piece.strips is not None:
            strips = triangulate_strips(n_strips, piece.strips, offset + n_polys)
            tri.indices.extend(strips.indices)
            tri.triangle_to_cell_mapping.extend(strips.triangle_to_cell_mapping)

        if tri.triangle_count == 0:
            raise MissingData("polydata has no polygons or triangle strips")
        self._check_indices(tri.indices, len(vertices))

        attributes = self.process_attributes(
            piece.data, len(vertices), n_verts + n_lines + n_polys + n_strips
        )
        return _build(vertices, tri, attributes)


def _build(
    vertices: FloatArray, tri: TriangulationResult, attributes: AttributeStore
) -> GeometryData:
    return GeometryData.create(
        vertices,
        tri.indices,
        attributes,
        triangle_to_cell_mapping=tri.triangle_to_cell_mapping,
        quadratic_triangles=tri.quadratic_triangles or None,
        quadratic_edges=tri.quadratic_edges or None,
    )


_EXTRACTORS = {
    DataSetKind.UNSTRUCTURED_GRID: UnstructuredGridExtractor,
    DataSetKind.POLYDATA: PolyDataExtractor,
}


def extract_geometry(
    dataset: VtkDataset,
    settings: ExtractorSettings = DEFAULT_SETTINGS.extractor,
) -> GeometryData:
    """Pick the extractor for the dataset kind and run it."""
    extractor_cls = _EXTRACTORS.get(dataset.kind)
    if extractor_cls is None:
        raise UnsupportedDataType(f"dataset type {dataset.kind.value}")
    return extractor_cls(settings).process(dataset.pieces)


def load_geometry(
    path: str | Path,
    settings: ExtractorSettings = DEFAULT_SETTINGS.extractor,
) -> GeometryData:
    """
    Read a legacy VTK file and extract its surface.

    Raises:
        VtkIOError: the file could not be read.
        LoadError: the file is not valid legacy VTK.
        UnsupportedDataType: the dataset is neither an unstructured grid
            nor poly data.
    """
    dataset = read_vtk(path)
    geometry = extract_geometry(dataset, settings)
    logger.info(
        "Loaded %s: %d vertices, %d triangles",
        Path(path).name,
        geometry.vertex_count,
        geometry.triangle_count,
    )
    return geometry

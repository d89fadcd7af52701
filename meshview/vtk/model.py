# meshview/vtk/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple, Union

import numpy as np


class CellType(IntEnum):
    """VTK cell type codes (the subset the viewer knows by name)."""

    VERTEX = 1
    POLY_VERTEX = 2
    LINE = 3
    POLY_LINE = 4
    TRIANGLE = 5
    TRIANGLE_STRIP = 6
    POLYGON = 7
    PIXEL = 8
    QUAD = 9
    TETRA = 10
    VOXEL = 11
    HEXAHEDRON = 12
    WEDGE = 13
    PYRAMID = 14
    QUADRATIC_EDGE = 21
    QUADRATIC_TRIANGLE = 22
    QUADRATIC_QUAD = 23
    QUADRATIC_TETRA = 24
    QUADRATIC_HEXAHEDRON = 25


class DataSetKind(str, Enum):
    STRUCTURED_POINTS = "STRUCTURED_POINTS"
    STRUCTURED_GRID = "STRUCTURED_GRID"
    RECTILINEAR_GRID = "RECTILINEAR_GRID"
    UNSTRUCTURED_GRID = "UNSTRUCTURED_GRID"
    POLYDATA = "POLYDATA"
    FIELD = "FIELD"


class ElementKind(str, Enum):
    """Semantic tag of a point/cell data array."""

    SCALARS = "SCALARS"
    COLOR_SCALARS = "COLOR_SCALARS"
    LOOKUP_TABLE = "LOOKUP_TABLE"
    VECTORS = "VECTORS"
    NORMALS = "NORMALS"
    TCOORDS = "TEXTURE_COORDINATES"
    TENSORS = "TENSORS"
    GENERIC = "GENERIC"


@dataclass(frozen=True, slots=True)
class ElementType:
    kind: ElementKind
    num_comp: int = 1
    lookup_table: Optional[str] = None


@dataclass(slots=True, eq=False)
class DataArray:
    """Named raw buffer attached to points or cells."""

    name: str
    elem: ElementType
    data: np.ndarray


@dataclass(slots=True, eq=False)
class FieldArray:
    name: str
    num_comp: int
    data: np.ndarray


@dataclass(slots=True, eq=False)
class FieldAttribute:
    """A FIELD block: several loosely typed arrays under one name."""

    name: str
    arrays: List[FieldArray] = field(default_factory=list)


Attribute = Union[DataArray, FieldAttribute]


@dataclass(slots=True)
class Attributes:
    point: List[Attribute] = field(default_factory=list)
    cell: List[Attribute] = field(default_factory=list)


@dataclass(slots=True, eq=False)
class VertexNumbers:
    """
    Legacy cell connectivity: ``num_cells`` records, each a vertex count
    followed by that many point indices, flattened into ``data``.
    """

    num_cells: int
    data: np.ndarray

    @classmethod
    def from_cells(cls, cells: List[List[int]]) -> VertexNumbers:
        flat: List[int] = []
        for verts in cells:
            flat.append(len(verts))
            flat.extend(verts)
        return cls(len(cells), np.array(flat, dtype=np.int64))

    @classmethod
    def from_offsets(
        cls, offsets: np.ndarray, connectivity: np.ndarray
    ) -> VertexNumbers:
        """Build the legacy layout from VTK 5 OFFSETS/CONNECTIVITY arrays."""
        offsets = np.asarray(offsets, dtype=np.int64)
        connectivity = np.asarray(connectivity, dtype=np.int64)
        num_cells = max(len(offsets) - 1, 0)

        flat: List[int] = []
        for i in range(num_cells):
            start, end = int(offsets[i]), int(offsets[i + 1])
            flat.append(end - start)
            flat.extend(connectivity[start:end].tolist())
        return cls(num_cells, np.array(flat, dtype=np.int64))


@dataclass(slots=True, eq=False)
class Cells:
    cell_verts: VertexNumbers
    types: np.ndarray

    def num_cells(self) -> int:
        return len(self.types)


@dataclass(slots=True, eq=False)
class UnstructuredGridPiece:
    points: np.ndarray
    cells: Cells
    data: Attributes = field(default_factory=Attributes)


@dataclass(slots=True, eq=False)
class PolyDataPiece:
    points: np.ndarray
    verts: Optional[VertexNumbers] = None
    lines: Optional[VertexNumbers] = None
    polys: Optional[VertexNumbers] = None
    strips: Optional[VertexNumbers] = None
    data: Attributes = field(default_factory=Attributes)


@dataclass(frozen=True, slots=True)
class PieceReference:
    """A piece stored in another file; never loaded by the extractors."""

    source: str


Piece = Union[UnstructuredGridPiece, PolyDataPiece, PieceReference]


@dataclass(slots=True, eq=False)
class VtkDataset:
    version: Tuple[int, int]
    title: str
    kind: DataSetKind
    pieces: List[Piece] = field(default_factory=list)
    binary: bool = False
    field_data: List[FieldAttribute] = field(default_factory=list)


def describe_dataset(dataset: VtkDataset) -> str:
    """Short human-readable summary of a parsed file."""
    major, minor = dataset.version
    return "\n".join(
        [
            "VTK file information:",
            f"  Version: {major}.{minor}",
            f"  Title: {dataset.title}",
            f"  Data type: {dataset.kind.value}",
            f"  Encoding: {'BINARY' if dataset.binary else 'ASCII'}",
            f"  Pieces number: {len(dataset.pieces)}",
        ]
    )

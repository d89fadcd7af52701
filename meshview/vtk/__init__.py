# meshview/vtk/__init__.py
from meshview.vtk.model import (
    CellType,
    DataSetKind,
    VtkDataset,
    describe_dataset,
)
from meshview.vtk.reader import parse_vtk, read_vtk

__all__ = [
    "CellType",
    "DataSetKind",
    "VtkDataset",
    "describe_dataset",
    "parse_vtk",
    "read_vtk",
]

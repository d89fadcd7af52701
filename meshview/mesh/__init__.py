# meshview/mesh/__init__.py
from meshview.mesh.attributes import (
    AttributeLocation,
    AttributeStore,
    ColorScalarAttribute,
    ScalarAttribute,
    TensorAttribute,
    VectorAttribute,
)
from meshview.mesh.geometry import GeometryData, QuadraticEdge, QuadraticTriangle

__all__ = [
    "AttributeLocation",
    "AttributeStore",
    "ColorScalarAttribute",
    "ScalarAttribute",
    "TensorAttribute",
    "VectorAttribute",
    "GeometryData",
    "QuadraticEdge",
    "QuadraticTriangle",
]

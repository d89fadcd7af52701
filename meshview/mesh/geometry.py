# meshview/mesh/geometry.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from meshview.mesh.attributes import (
    Attribute,
    AttributeLocation,
    AttributeStore,
    ColorScalarAttribute,
    ScalarAttribute,
    TensorAttribute,
    VectorAttribute,
)
from meshview.mesh.errors import (
    AttributeMismatch,
    IndexOutOfBounds,
    InvalidFormat,
)
from meshview.settings import DEFAULT_SETTINGS
from meshview.types import FloatArray, IndexArray, MappingArray


@dataclass(frozen=True, slots=True)
class QuadraticEdge:
    """
    Three control points: [p0, p1, p2], p2 being the midpoint (r=0.5).
    """

    vertices: Tuple[int, int, int]

    def endpoints(self) -> Tuple[int, int]:
        return (self.vertices[0], self.vertices[1])

    def midpoint(self) -> int:
        return self.vertices[2]

    def to_linear_segments(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        p0, p1, p2 = self.vertices
        return ((p0, p2), (p2, p1))


@dataclass(frozen=True, slots=True)
class QuadraticTriangle:
    """
    Six control points: [v0, v1, v2, m01, m12, m20].
    Only the corners are used for rendering; midpoints feed subdivision.
    """

    vertices: Tuple[int, int, int, int, int, int]

    def corner_vertices(self) -> Tuple[int, int, int]:
        return (self.vertices[0], self.vertices[1], self.vertices[2])

    def edge_midpoints(self) -> Tuple[int, int, int]:
        return (self.vertices[3], self.vertices[4], self.vertices[5])

    def to_linear_triangle(self) -> Tuple[int, int, int]:
        return self.corner_vertices()


def _as_vertices(vertices) -> FloatArray:
    arr = np.array(vertices, dtype=np.float32)
    if arr.size == 0:
        return np.zeros((0, 3), dtype=np.float32)
    return arr.reshape(-1, 3)


def _as_indices(indices) -> IndexArray:
    return np.array(indices, dtype=np.uint32).ravel()


@dataclass(slots=True, eq=False)
class GeometryData:
    """
    Canonical CPU mesh produced by the extractors.

    ``element_order`` is 1 for linear triangle lists (3 indices per
    triangle) and 2 for quadratic triangles (6 indices per element, as
    produced by order elevation).
    """

    vertices: FloatArray
    indices: IndexArray
    attributes: AttributeStore = field(default_factory=AttributeStore)
    triangle_to_cell_mapping: Optional[MappingArray] = None
    lookup_tables: Dict[str, FloatArray] = field(default_factory=dict)
    quadratic_triangles: Optional[List[QuadraticTriangle]] = None
    quadratic_edges: Optional[List[QuadraticEdge]] = None
    element_order: int = 1

    @classmethod
    def create(
        cls,
        vertices,
        indices,
        attributes: Optional[AttributeStore] = None,
        *,
        triangle_to_cell_mapping: Optional[Sequence[int]] = None,
        quadratic_triangles: Optional[List[QuadraticTriangle]] = None,
        quadratic_edges: Optional[List[QuadraticEdge]] = None,
        element_order: int = 1,
    ) -> GeometryData:
        mapping = None
        if triangle_to_cell_mapping is not None:
            mapping = np.array(triangle_to_cell_mapping, dtype=np.int64).ravel()
        return cls(
            vertices=_as_vertices(vertices),
            indices=_as_indices(indices),
            attributes=attributes if attributes is not None else AttributeStore(),
            triangle_to_cell_mapping=mapping,
            quadratic_triangles=quadratic_triangles,
            quadratic_edges=quadratic_edges,
            element_order=element_order,
        )

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def nodes_per_element(self) -> int:
        return 3 if self.element_order == 1 else 6

    @property
    def element_count(self) -> int:
        return len(self.indices) // self.nodes_per_element

    @property
    def triangle_count(self) -> int:
        """Number of linear triangles this mesh renders as."""
        if self.element_order == 1:
            return len(self.indices) // 3
        return self.element_count * 4

    @property
    def is_triangular(self) -> bool:
        return self.element_order == 1 and len(self.indices) % 3 == 0

    def triangles(self) -> np.ndarray:
        """(T, 3) view of a linear triangle list."""
        if not self.is_triangular:
            raise InvalidFormat("Mesh must be triangular")
        return self.indices.reshape(-1, 3)

    # ------------------------------------------------------------------
    # Attribute / lookup table access
    # ------------------------------------------------------------------

    def get_attribute(
        self, name: str, location: AttributeLocation
    ) -> Optional[Attribute]:
        return self.attributes.get(name, location)

    def add_lookup_table(self, name: str, colors) -> None:
        self.lookup_tables[name] = np.array(colors, dtype=np.float32).reshape(-1, 4)

    def get_lookup_table(self, name: str) -> Optional[FloatArray]:
        return self.lookup_tables.get(name)

    def has_lookup_table(self, name: str) -> bool:
        return name in self.lookup_tables

    def lookup_table_names(self) -> List[str]:
        return list(self.lookup_tables)

    def extract_lookup_tables(
        self, prefix: str = DEFAULT_SETTINGS.extractor.lookup_table_prefix
    ) -> None:
        """Collect inline tables stored under ``prefix``-named attributes."""
        for (name, _), attr in self.attributes.items():
            if not name.startswith(prefix):
                continue
            if isinstance(attr, ScalarAttribute) and attr.lookup_table is not None:
                self.lookup_tables[attr.table_name] = attr.lookup_table.copy()

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def bounding_box(self) -> Tuple[FloatArray, float]:
        """Center and diagonal length of the axis-aligned bounds."""
        if self.vertex_count == 0:
            return np.zeros(3, dtype=np.float32), 1.0

        lo = self.vertices.min(axis=0)
        hi = self.vertices.max(axis=0)
        center = ((lo + hi) * 0.5).astype(np.float32)
        size = float(np.linalg.norm(hi - lo))
        return center, size

    def cell_index_of(self, triangle: int) -> int:
        """Source cell of a rendered triangle (the triangle itself if unmapped)."""
        if self.triangle_to_cell_mapping is None:
            return triangle
        return int(self.triangle_to_cell_mapping[triangle])

    def copy(self) -> GeometryData:
        mapping = None
        if self.triangle_to_cell_mapping is not None:
            mapping = self.triangle_to_cell_mapping.copy()
        return GeometryData(
            vertices=self.vertices.copy(),
            indices=self.indices.copy(),
            attributes=self.attributes.copy(),
            triangle_to_cell_mapping=mapping,
            lookup_tables={k: v.copy() for k, v in self.lookup_tables.items()},
            quadratic_triangles=(
                list(self.quadratic_triangles)
                if self.quadratic_triangles is not None
                else None
            ),
            quadratic_edges=(
                list(self.quadratic_edges)
                if self.quadratic_edges is not None
                else None
            ),
            element_order=self.element_order,
        )

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Check index, mapping and attribute consistency.

        Raises:
            InvalidFormat: index count is not a whole number of elements.
            IndexOutOfBounds: an index or mapped cell exceeds its array.
            AttributeMismatch: a per-point attribute or the mapping has
                the wrong length.
        """
        if len(self.indices) % self.nodes_per_element != 0:
            raise InvalidFormat(
                f"index count {len(self.indices)} is not a multiple of "
                f"{self.nodes_per_element}"
            )

        n_verts = self.vertex_count
        if len(self.indices) and int(self.indices.max()) >= n_verts:
            raise IndexOutOfBounds(int(self.indices.max()), n_verts - 1)

        mapping = self.triangle_to_cell_mapping
        if mapping is not None and len(mapping) != self.triangle_count:
            raise AttributeMismatch(len(mapping), self.triangle_count)

        for (name, location), attr in self.attributes.items():
            if isinstance(attr, ScalarAttribute) and attr.is_lookup_table:
                continue

            if location == AttributeLocation.POINT:
                if len(attr) != n_verts:
                    raise AttributeMismatch(len(attr), n_verts)
            elif mapping is not None and len(mapping):
                highest = int(mapping.max())
                if highest >= len(attr):
                    raise IndexOutOfBounds(highest, len(attr) - 1)
            elif mapping is None and len(attr) < self.triangle_count:
                raise AttributeMismatch(len(attr), self.triangle_count)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def describe(self) -> str:
        lines = [
            "Geometry data information:",
            f"  Vertex number: {self.vertex_count}",
            f"  Index number: {len(self.indices)}",
            f"  Triangle number: {self.triangle_count}",
            f"  Attribute number: {len(self.attributes)}",
        ]

        for (name, location), attr in self.attributes.items():
            where = location.value
            if isinstance(attr, ScalarAttribute):
                lines.append(f"  Scalar attribute: {name} (location: {where})")
                lines.append(f"    Component number: {attr.num_comp}")
                lines.append(f"    Lookup table name: {attr.table_name}")
                lines.append(f"    Data length: {len(attr.data)}")
                if attr.lookup_table is not None:
                    lines.append(
                        f"    Lookup table color number: {len(attr.lookup_table)}"
                    )
            elif isinstance(attr, ColorScalarAttribute):
                lines.append(
                    f"  Color scalar attribute: {name} (location: {where})"
                )
                lines.append(f"    Value number: {attr.nvalues}")
                lines.append(f"    Data length: {len(attr)}")
            elif isinstance(attr, VectorAttribute):
                lines.append(f"  Vector attribute: {name} (location: {where})")
                lines.append(f"    Data length: {len(attr)}")
            elif isinstance(attr, TensorAttribute):
                lines.append(f"  Tensor attribute: {name} (location: {where})")
                lines.append(f"    Data length: {len(attr)}")

        lines.append(f"  Lookup table number: {len(self.lookup_tables)}")
        for name, colors in self.lookup_tables.items():
            lines.append(f"  Lookup table: {name} (color number: {len(colors)})")
            if len(colors):
                first, last = colors[0], colors[-1]
                lines.append(
                    "    First color: [" + ", ".join(f"{c:.2f}" for c in first) + "]"
                )
                lines.append(
                    "    Last color: [" + ", ".join(f"{c:.2f}" for c in last) + "]"
                )

        return "\n".join(lines)

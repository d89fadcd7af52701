# meshview/mesh/subdivision.py
from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np

from meshview.mesh.errors import InvalidFormat
from meshview.mesh.geometry import GeometryData
from meshview.mesh.higher_order import (
    check_point_attributes,
    interpolate_point_attributes,
)
from meshview.types import Edge, edge_key

logger = logging.getLogger(__name__)


def _split(v0, v1, v2, m01, m12, m20) -> List[int]:
    # Three corner triangles then the centre one, all keeping the winding.
    return [
        v0, m01, m20,
        v1, m12, m01,
        v2, m20, m12,
        m01, m12, m20,
    ]  # fmt: skip


def subdivide_mesh(geometry: GeometryData) -> GeometryData:
    """
    Split every triangle into four through its edge midpoints.

    Midpoints are shared between neighbouring triangles. Point attributes
    are interpolated at the new vertices; cell attributes are left as they
    are and stay reachable through the mapping.
    """
    if not geometry.is_triangular:
        raise InvalidFormat("subdivision needs a linear triangle mesh")
    check_point_attributes(geometry)

    triangles = geometry.triangles()
    n_verts = geometry.vertex_count
    midpoint_of: Dict[Edge, int] = {}
    edges: List[Edge] = []

    def midpoint(i: int, j: int) -> int:
        key = edge_key(i, j)
        if key not in midpoint_of:
            midpoint_of[key] = n_verts + len(edges)
            edges.append(key)
        return midpoint_of[key]

    indices: List[int] = []
    for v0, v1, v2 in triangles.tolist():
        indices.extend(
            _split(v0, v1, v2, midpoint(v0, v1), midpoint(v1, v2), midpoint(v2, v0))
        )

    verts = geometry.vertices
    if edges:
        pairs = np.array(edges, dtype=np.int64)
        mids = ((verts[pairs[:, 0]] + verts[pairs[:, 1]]) * 0.5).astype(np.float32)
        vertices = np.concatenate([verts, mids])
    else:
        vertices = verts.copy()

    if geometry.triangle_to_cell_mapping is not None:
        cells = geometry.triangle_to_cell_mapping
    else:
        cells = np.arange(len(triangles), dtype=np.int64)

    logger.debug("Subdivided %d triangles into %d", len(triangles), 4 * len(triangles))

    result = GeometryData.create(
        vertices,
        indices,
        interpolate_point_attributes(geometry.attributes, edges),
        triangle_to_cell_mapping=np.repeat(cells, 4),
    )
    result.lookup_tables = {k: v.copy() for k, v in geometry.lookup_tables.items()}
    return result


def tessellate_quadratic(geometry: GeometryData) -> GeometryData:
    """Render form of a second-order mesh: four linear triangles per element."""
    if geometry.element_order != 2:
        raise InvalidFormat(
            f"expected a second-order mesh, got order {geometry.element_order}"
        )

    elements = geometry.indices.reshape(-1, 6).tolist()
    indices: List[int] = []
    for element in elements:
        indices.extend(_split(*element))

    if geometry.triangle_to_cell_mapping is not None:
        mapping = geometry.triangle_to_cell_mapping.copy()
    else:
        mapping = np.repeat(np.arange(len(elements), dtype=np.int64), 4)

    result = GeometryData.create(
        geometry.vertices.copy(),
        indices,
        geometry.attributes.copy(),
        triangle_to_cell_mapping=mapping,
    )
    result.lookup_tables = {k: v.copy() for k, v in geometry.lookup_tables.items()}
    return result

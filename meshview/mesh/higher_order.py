# meshview/mesh/higher_order.py
from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np

from meshview.mesh.attributes import AttributeLocation, AttributeStore, ScalarAttribute
from meshview.mesh.errors import AttributeMismatch, InvalidFormat, UnsupportedDataType
from meshview.mesh.geometry import GeometryData, QuadraticTriangle
from meshview.types import Edge, edge_key

logger = logging.getLogger(__name__)


def convert_to_higher_order(geometry: GeometryData, order: int) -> GeometryData:
    """
    Elevate a linear triangle mesh to the given element order.

    Raises:
        InvalidFormat: ``order`` < 2, or the mesh is not a linear triangle list.
        UnsupportedDataType: ``order`` > 2.
    """
    if order < 2:
        raise InvalidFormat(f"target order must be at least 2, got {order}")
    if order > 2:
        raise UnsupportedDataType(f"element order {order}")
    return convert_to_second_order(geometry)


def check_point_attributes(geometry: GeometryData) -> None:
    for name, attr in geometry.attributes.at(AttributeLocation.POINT):
        if isinstance(attr, ScalarAttribute) and attr.is_lookup_table:
            continue
        if len(attr) != geometry.vertex_count:
            raise AttributeMismatch(len(attr), geometry.vertex_count)


def interpolate_point_attributes(
    attributes: AttributeStore, edges: List[Edge]
) -> AttributeStore:
    """
    Append one row per edge to every point attribute: the componentwise mean
    of the edge's two endpoint rows. Cell attributes and lookup tables are
    copied unchanged.
    """
    if edges:
        a = np.fromiter((e[0] for e in edges), dtype=np.int64, count=len(edges))
        b = np.fromiter((e[1] for e in edges), dtype=np.int64, count=len(edges))
    else:
        a = b = np.zeros(0, dtype=np.int64)

    out = AttributeStore()
    for (name, location), attr in attributes.items():
        if location == AttributeLocation.CELL or (
            isinstance(attr, ScalarAttribute) and attr.is_lookup_table
        ):
            out.insert(name, location, attr.with_rows(attr.rows().copy()))
            continue

        rows = attr.rows()
        mids = (rows[a] + rows[b]) * 0.5
        out.insert(name, location, attr.with_rows(np.concatenate([rows, mids])))
    return out


def convert_to_second_order(geometry: GeometryData) -> GeometryData:
    """
    Insert a shared midpoint on every edge. Each triangle becomes a six-node
    element ``[v0, v1, v2, m01, m12, m20]``.
    """
    if not geometry.is_triangular:
        raise InvalidFormat("order elevation needs a linear triangle mesh")
    check_point_attributes(geometry)

    triangles = geometry.triangles()
    n_verts = geometry.vertex_count

    midpoint_of: Dict[Edge, int] = {}
    edges: List[Edge] = []

    def midpoint(i: int, j: int) -> int:
        key = edge_key(i, j)
        index = midpoint_of.get(key)
        if index is None:
            index = n_verts + len(edges)
            midpoint_of[key] = index
            edges.append(key)
        return index

    indices: List[int] = []
    records: List[QuadraticTriangle] = []
    for v0, v1, v2 in triangles.tolist():
        m01 = midpoint(v0, v1)
        m12 = midpoint(v1, v2)
        m20 = midpoint(v2, v0)
        element = (v0, v1, v2, m01, m12, m20)
        indices.extend(element)
        records.append(QuadraticTriangle(element))

    verts = geometry.vertices
    if edges:
        pairs = np.array(edges, dtype=np.int64)
        mids = (verts[pairs[:, 0]] + verts[pairs[:, 1]]) * 0.5
        vertices = np.concatenate([verts, mids.astype(np.float32)])
    else:
        vertices = verts.copy()

    if geometry.triangle_to_cell_mapping is not None:
        cells = geometry.triangle_to_cell_mapping
    else:
        cells = np.arange(len(triangles), dtype=np.int64)
    mapping = np.repeat(cells, 4)

    logger.debug(
        "Elevated %d triangles to order 2 (%d midpoints)", len(triangles), len(edges)
    )

    result = GeometryData.create(
        vertices,
        indices,
        interpolate_point_attributes(geometry.attributes, edges),
        triangle_to_cell_mapping=mapping,
        quadratic_triangles=records,
        element_order=2,
    )
    result.lookup_tables = {k: v.copy() for k, v in geometry.lookup_tables.items()}
    return result

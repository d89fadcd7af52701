# meshview/lod/simplify.py
"""
Triangle-count reduction for LOD meshes.

Two strategies, picked by ratio:

* quadric error metric edge collapse through ``fast_simplification``
  (ratio >= ``clustering_ratio``)
* uniform-grid vertex clustering for aggressive reductions
"""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence, Set, Tuple

import fast_simplification
import numpy as np

from meshview.mesh.attributes import (
    AttributeKey,
    AttributeLocation,
    AttributeStore,
    ScalarAttribute,
)
from meshview.mesh.errors import InvalidFormat
from meshview.mesh.geometry import GeometryData
from meshview.mesh.higher_order import check_point_attributes
from meshview.settings import DEFAULT_SETTINGS, SimplifySettings

logger = logging.getLogger(__name__)


def simplify_mesh(
    geometry: GeometryData,
    ratio: float,
    settings: SimplifySettings = DEFAULT_SETTINGS.simplify,
) -> GeometryData:
    """
    Reduce ``geometry`` to roughly ``ratio`` of its triangles.

    The ratio is clamped to ``[settings.min_ratio, 1.0]``. Small meshes and
    a ratio of 1 give back an unchanged copy.

    Raises:
        InvalidFormat: the mesh is not a linear triangle list.
    """
    if not geometry.is_triangular:
        raise InvalidFormat("simplification needs a linear triangle mesh")
    check_point_attributes(geometry)

    ratio = min(max(ratio, settings.min_ratio), 1.0)
    count = geometry.triangle_count
    if count <= settings.min_triangles or ratio >= 1.0:
        return geometry.copy()

    target = max(int(round(count * ratio)), 1)
    if ratio < settings.clustering_ratio:
        result = _simplify_clustering(geometry, ratio, target, settings)
        method = "clustering"
    else:
        result = _simplify_qem(geometry, target, settings)
        method = "QEM"

    logger.info(
        "Simplified %d -> %d triangles (%s, ratio %.2f, target %d)",
        count,
        result.triangle_count,
        method,
        ratio,
        target,
    )
    return result


# ----------------------------------------------------------------------
# Shared output assembly
# ----------------------------------------------------------------------


def _point_rows(geometry: GeometryData) -> Dict[AttributeKey, np.ndarray]:
    rows = {}
    for (name, location), attr in geometry.attributes.items():
        if location != AttributeLocation.POINT:
            continue
        if isinstance(attr, ScalarAttribute) and attr.is_lookup_table:
            continue
        rows[(name, location)] = attr.rows().astype(np.float64)
    return rows


def _assemble(
    source: GeometryData,
    positions: np.ndarray,
    point_rows: Dict[AttributeKey, np.ndarray],
    triangles: Sequence[Sequence[int]],
    source_triangles: Sequence[int],
    area_epsilon: float,
) -> GeometryData:
    """
    Drop degenerate and near-zero-area triangles, compact the vertex list
    and rebuild every attribute for the surviving triangles.
    """
    tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    src = np.asarray(source_triangles, dtype=np.int64)

    if len(tris):
        keep = (
            (tris[:, 0] != tris[:, 1])
            & (tris[:, 1] != tris[:, 2])
            & (tris[:, 2] != tris[:, 0])
        )
        p0, p1, p2 = positions[tris[:, 0]], positions[tris[:, 1]], positions[tris[:, 2]]
        area = 0.5 * np.linalg.norm(np.cross(p1 - p0, p2 - p0), axis=1)
        _, diagonal = source.bounding_box()
        keep &= area >= area_epsilon * diagonal * diagonal
        tris, src = tris[keep], src[keep]

    used = np.unique(tris)
    remap = np.full(len(positions), -1, dtype=np.int64)
    remap[used] = np.arange(len(used))
    new_tris = remap[tris]

    if source.triangle_to_cell_mapping is not None:
        cells = source.triangle_to_cell_mapping[src]
    else:
        cells = src

    attributes = AttributeStore()
    for (name, location), attr in source.attributes.items():
        if isinstance(attr, ScalarAttribute) and attr.is_lookup_table:
            attributes.insert(name, location, attr.with_rows(attr.rows().copy()))
        elif location == AttributeLocation.POINT:
            rows = point_rows[(name, location)][used]
            attributes.insert(name, location, attr.with_rows(rows.astype(np.float32)))
        else:
            # One value per output triangle, taken from its source cell.
            attributes.insert(name, location, attr.with_rows(attr.rows()[cells]))

    result = GeometryData.create(
        positions[used].astype(np.float32),
        new_tris.ravel(),
        attributes,
        triangle_to_cell_mapping=np.arange(len(new_tris), dtype=np.int64),
    )
    result.lookup_tables = {k: v.copy() for k, v in source.lookup_tables.items()}
    return result


# ----------------------------------------------------------------------
# Quadric error metric edge collapse
# ----------------------------------------------------------------------


def _source_triangles(
    triangles: np.ndarray, mapping: np.ndarray, faces: np.ndarray
) -> List[int]:
    """
    Index of an input triangle behind every output face: the one whose
    corners collapse onto the same three output vertices, otherwise any
    input triangle touching the face's first corner.
    """
    remapped = mapping[triangles]
    by_corners: Dict[Tuple[int, ...], int] = {}
    by_vertex: Dict[int, int] = {}
    for t, corners in enumerate(remapped.tolist()):
        by_corners.setdefault(tuple(sorted(corners)), t)
        for v in corners:
            by_vertex.setdefault(v, t)

    sources = []
    for face in faces.tolist():
        t = by_corners.get(tuple(sorted(face)))
        if t is None:
            t = by_vertex.get(face[0], 0)
        sources.append(t)
    return sources


def _simplify_qem(
    geometry: GeometryData, target: int, settings: SimplifySettings
) -> GeometryData:
    count = geometry.triangle_count
    target = max(target, settings.min_triangles)
    verts = geometry.vertices.astype(np.float64)
    triangles = geometry.triangles().astype(np.int64)

    _, _, collapses = fast_simplification.simplify(
        verts,
        triangles,
        target_reduction=1.0 - target / count,
        agg=settings.aggressiveness,
        verbose=False,
        return_collapses=True,
    )
    # Replaying the collapses also yields which output vertex each input
    # vertex was merged into.
    points, faces, mapping = fast_simplification.replay_simplification(
        verts, triangles, collapses
    )
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    mapping = np.asarray(mapping, dtype=np.int64)
    logger.debug("Collapsed %d edges", len(collapses))

    merged = mapping >= 0
    counts = np.bincount(mapping[merged], minlength=len(points)).astype(np.float64)
    counts[counts == 0] = 1.0
    point_rows = {}
    for key, rows in _point_rows(geometry).items():
        sums = np.zeros((len(points), rows.shape[1]), dtype=np.float64)
        np.add.at(sums, mapping[merged], rows[merged])
        point_rows[key] = sums / counts[:, None]

    return _assemble(
        geometry,
        points,
        point_rows,
        faces,
        _source_triangles(triangles, mapping, faces),
        settings.area_epsilon,
    )


# ----------------------------------------------------------------------
# Vertex clustering
# ----------------------------------------------------------------------


_Clustered = Tuple[
    np.ndarray, Dict[AttributeKey, np.ndarray], List[Tuple[int, int, int]], List[int]
]


def _cluster(
    geometry: GeometryData, resolution: int, settings: SimplifySettings
) -> _Clustered:
    """
    Snap every vertex to one representative per grid cell and keep each
    distinct non-degenerate triangle that survives.
    """
    center, size = geometry.bounding_box()
    if size <= 0.0:
        size = 1.0

    cell_size = size / resolution
    origin = center.astype(np.float64) - size * 0.5

    verts = geometry.vertices.astype(np.float64)
    keys = np.floor((verts - origin) / cell_size).astype(np.int64)

    clusters: Dict[Tuple[int, int, int], List[int]] = {}
    for i, key in enumerate(map(tuple, keys.tolist())):
        clusters.setdefault(key, []).append(i)

    cluster_of = np.empty(len(verts), dtype=np.int64)
    representatives: List[int] = []
    for cid, (key, members) in enumerate(clusters.items()):
        members_arr = np.asarray(members, dtype=np.int64)
        centre = origin + (np.asarray(key, dtype=np.float64) + 0.5) * cell_size
        dist = np.linalg.norm(verts[members_arr] - centre, axis=1)
        representatives.append(int(members_arr[int(np.argmin(dist))]))
        cluster_of[members_arr] = cid

    positions = verts[representatives]
    counts = np.bincount(cluster_of, minlength=len(representatives)).astype(np.float64)

    point_rows = {}
    for key, rows in _point_rows(geometry).items():
        sums = np.zeros((len(representatives), rows.shape[1]), dtype=np.float64)
        np.add.at(sums, cluster_of, rows)
        point_rows[key] = sums / counts[:, None]

    min_area = settings.area_epsilon * size * size
    seen: Set[Tuple[int, ...]] = set()
    triangles: List[Tuple[int, int, int]] = []
    sources: List[int] = []

    for t, (a, b, c) in enumerate(geometry.triangles().tolist()):
        v0, v1, v2 = int(cluster_of[a]), int(cluster_of[b]), int(cluster_of[c])
        if v0 == v1 or v1 == v2 or v2 == v0:
            continue
        p0, p1, p2 = positions[v0], positions[v1], positions[v2]
        if 0.5 * np.linalg.norm(np.cross(p1 - p0, p2 - p0)) < min_area:
            continue
        key = tuple(sorted((v0, v1, v2)))
        if key in seen:
            continue
        seen.add(key)
        triangles.append((v0, v1, v2))
        sources.append(t)

    return positions, point_rows, triangles, sources


def _simplify_clustering(
    geometry: GeometryData, ratio: float, target: int, settings: SimplifySettings
) -> GeometryData:
    """
    Coarsen the clustering grid one step at a time until the surviving
    triangles fit ``target``. Every pass covers the whole mesh, so the
    result keeps the full extent of the input.
    """
    resolution = max(
        int(settings.clustering_base_resolution * math.sqrt(ratio)),
        settings.clustering_min_resolution,
    )

    best: Optional[_Clustered] = None
    while True:
        clustered = _cluster(geometry, resolution, settings)
        if clustered[2] or best is None:
            best = clustered
        if (
            len(clustered[2]) <= target
            or resolution <= settings.clustering_lowest_resolution
        ):
            break
        resolution -= 1

    logger.debug("Clustering grid resolution %d", resolution)
    positions, point_rows, triangles, sources = best
    return _assemble(
        geometry, positions, point_rows, triangles, sources, settings.area_epsilon
    )

# meshview/assets/importers/obj.py
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from meshview.assets.importers.base import AssetImporter
from meshview.mesh.attributes import AttributeLocation, AttributeStore, VectorAttribute
from meshview.mesh.errors import IndexOutOfBounds, InvalidFormat, MissingData
from meshview.mesh.geometry import GeometryData
from meshview.mesh.triangulation import triangulate_fan

logger = logging.getLogger(__name__)


class ObjImporter(AssetImporter):
    """
    Wavefront OBJ positions and faces. Each face becomes one cell, so
    polygons are fan-triangulated and map back to their face index.
    Per-corner normals are folded into a point ``Normals`` attribute.
    """

    extensions = (".obj",)

    def import_file(self, path: Path) -> GeometryData:
        positions: List[Tuple[float, float, float]] = []
        normals: List[Tuple[float, float, float]] = []
        faces: List[List[Tuple[int, Optional[int]]]] = []

        with open(path, "r") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                parts = line.split()
                tag = parts[0]

                try:
                    if tag == "v":
                        px, py, pz = map(float, parts[1:4])
                        positions.append((px, py, pz))
                    elif tag == "vn":
                        nx, ny, nz = map(float, parts[1:4])
                        normals.append((nx, ny, nz))
                    elif tag == "f":
                        faces.append(
                            [
                                self._parse_face_vertex(token, len(positions), len(normals))
                                for token in parts[1:]
                            ]
                        )
                except ValueError as e:
                    raise InvalidFormat(f"{path}:{lineno}: {e}") from e

        if not faces:
            raise MissingData(f"no faces in OBJ file {path}")

        indices: List[int] = []
        mapping: List[int] = []
        point_normals = np.zeros((len(positions), 3), dtype=np.float32)
        has_normals = False

        for face_index, face in enumerate(faces):
            if len(face) < 3:
                logger.warning("Skipping face %d in %s: only %d vertices", face_index, path, len(face))
                continue

            for v, vn in face:
                if vn is not None:
                    point_normals[v] = normals[vn]
                    has_normals = True

            tris = triangulate_fan([v for v, _ in face])
            indices.extend(tris)
            mapping.extend([face_index] * (len(tris) // 3))

        attributes = AttributeStore()
        if has_normals:
            attributes.insert("Normals", AttributeLocation.POINT, VectorAttribute(point_normals))

        geometry = GeometryData.create(
            positions, indices, attributes, triangle_to_cell_mapping=mapping
        )
        geometry.validate()
        return geometry

    def _parse_index(self, val: str, count: int) -> int:
        idx = int(val)
        # OBJ indices are 1-based; negative values count back from the end
        resolved = idx - 1 if idx > 0 else count + idx
        if not 0 <= resolved < count:
            raise IndexOutOfBounds(idx, count)
        return resolved

    def _parse_face_vertex(
        self, token: str, n_positions: int, n_normals: int
    ) -> Tuple[int, Optional[int]]:
        parts = token.split("/")
        if not parts[0]:
            raise ValueError(f"Invalid vertex index in token: {token}")

        v = self._parse_index(parts[0], n_positions)
        vn = (
            self._parse_index(parts[2], n_normals)
            if len(parts) > 2 and parts[2]
            else None
        )
        return v, vn

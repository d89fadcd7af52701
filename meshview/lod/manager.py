# meshview/lod/manager.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, Optional

import numpy as np

from meshview.lod.simplify import simplify_mesh
from meshview.mesh.errors import MissingData, VtkError
from meshview.mesh.geometry import GeometryData
from meshview.settings import DEFAULT_SETTINGS, LODSettings, SimplifySettings
from meshview.types import FloatArray

logger = logging.getLogger(__name__)

# Turns a GeometryData into whatever the renderer draws (GPU mesh, handle...).
MeshFactory = Callable[[GeometryData], Any]


class LODLevel(IntEnum):
    LOD0 = 0  # original mesh
    LOD1 = 1
    LOD2 = 2  # coarsest


@dataclass(frozen=True, slots=True)
class LODMeshData:
    geometry: GeometryData
    mesh_handle: Any
    triangle_count: int


def size_factor(model_size: float, settings: LODSettings = DEFAULT_SETTINGS.lod) -> float:
    """Scale applied to the base distance thresholds for a model this big."""
    if model_size < settings.small_model_size:
        return max(model_size / settings.small_model_divisor, settings.small_model_min_factor)
    return max(model_size / settings.large_model_divisor, settings.large_model_min_factor)


class LODManager:
    """
    Holds every level of detail of one model and tracks which one is shown.

    Levels whose simplification failed are simply absent; selection only
    ever returns a level that exists.
    """

    def __init__(
        self,
        levels: Dict[LODLevel, LODMeshData],
        model_center: FloatArray,
        model_size: float,
        settings: LODSettings = DEFAULT_SETTINGS.lod,
    ) -> None:
        if LODLevel.LOD0 not in levels:
            raise MissingData("LOD0 level")

        self.settings = settings
        self._levels: Dict[LODLevel, LODMeshData] = dict(sorted(levels.items()))
        self.current_lod = LODLevel.LOD0
        self.model_center = model_center
        self.model_size = model_size
        self.needs_update = False

    @classmethod
    def from_geometry(
        cls,
        geometry: GeometryData,
        mesh_factory: Optional[MeshFactory] = None,
        settings: LODSettings = DEFAULT_SETTINGS.lod,
        simplify_settings: SimplifySettings = DEFAULT_SETTINGS.simplify,
    ) -> LODManager:
        """Build every level eagerly from the full-detail geometry."""
        center, model_size = geometry.bounding_box()
        logger.info(
            "Creating LOD levels for %d triangles (model size %.2f)",
            geometry.triangle_count,
            model_size,
        )

        levels: Dict[LODLevel, LODMeshData] = {}
        for level in LODLevel:
            ratio = settings.ratios[level]
            try:
                if level == LODLevel.LOD0:
                    lod_geometry = geometry.copy()
                else:
                    lod_geometry = simplify_mesh(geometry, ratio, simplify_settings)
            except VtkError:
                if level == LODLevel.LOD0:
                    raise
                logger.exception("Building %s (ratio %.2f) failed", level.name, ratio)
                continue

            handle = mesh_factory(lod_geometry) if mesh_factory is not None else None
            levels[level] = LODMeshData(
                lod_geometry, handle, lod_geometry.triangle_count
            )
            logger.debug("%s ready: %d triangles", level.name, lod_geometry.triangle_count)

        return cls(levels, center, model_size, settings)

    # ------------------------------------------------------------------
    # Level access
    # ------------------------------------------------------------------

    @property
    def levels(self) -> Dict[LODLevel, LODMeshData]:
        return dict(self._levels)

    def has_level(self, level: LODLevel) -> bool:
        return level in self._levels

    def get(self, level: LODLevel) -> Optional[LODMeshData]:
        return self._levels.get(level)

    def current(self) -> LODMeshData:
        return self._levels[self.current_lod]

    def current_mesh_handle(self) -> Any:
        return self.current().mesh_handle

    def current_geometry(self) -> GeometryData:
        return self.current().geometry

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def threshold(self, level: LODLevel) -> float:
        return self.settings.thresholds[level] * size_factor(self.model_size, self.settings)

    def select_lod_by_distance(self, distance: float) -> LODLevel:
        """Most detailed level whose scaled threshold covers ``distance``."""
        for level in self._levels:
            if distance <= self.threshold(level):
                return level
        return max(self._levels)

    def update_lod(self, distance: float) -> bool:
        """Switch to the level for ``distance``; True if the level changed."""
        new_lod = self.select_lod_by_distance(distance)
        if new_lod == self.current_lod:
            return False

        logger.info(
            "LOD switched %s -> %s at distance %.2f (LOD0 <= %.2f, LOD1 <= %.2f)",
            self.current_lod.name,
            new_lod.name,
            distance,
            self.threshold(LODLevel.LOD0),
            self.threshold(LODLevel.LOD1),
        )
        self.current_lod = new_lod
        self.needs_update = True
        return True

    def update_from_camera(self, camera_position, model_offset=None) -> bool:
        """``update_lod`` using the distance from a camera to the model centre."""
        center = np.asarray(self.model_center, dtype=np.float64)
        if model_offset is not None:
            center = center + np.asarray(model_offset, dtype=np.float64)
        distance = float(np.linalg.norm(np.asarray(camera_position, dtype=np.float64) - center))
        return self.update_lod(distance)

    def mark_updated(self) -> None:
        self.needs_update = False

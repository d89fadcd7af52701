# meshview/settings.py
from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LODSettings:
    """Distance thresholds and simplification ratios for each LOD level."""

    # Base camera distance per level; the last level never hands over.
    thresholds: tuple[float, ...] = (15.0, 30.0, math.inf)
    # Target triangle ratio per level (level 0 is the original mesh).
    ratios: tuple[float, ...] = (1.0, 0.5, 0.25)

    small_model_size: float = 5.0
    small_model_divisor: float = 5.0
    small_model_min_factor: float = 0.3
    large_model_divisor: float = 10.0
    large_model_min_factor: float = 1.0


@dataclass(frozen=True, slots=True)
class SimplifySettings:
    """Mesh decimation policy."""

    min_ratio: float = 0.1
    # Below this ratio vertex clustering is used instead of edge collapse.
    clustering_ratio: float = 0.2
    # Meshes this small are returned unchanged.
    min_triangles: int = 4
    # fast_simplification collapse aggressiveness (0-10).
    aggressiveness: int = 7
    clustering_base_resolution: float = 20.0
    clustering_min_resolution: int = 8
    # The grid is coarsened down to this many cells per axis to meet a target.
    clustering_lowest_resolution: int = 2
    # Relative to the squared bounding-box diagonal.
    area_epsilon: float = 1e-6


@dataclass(frozen=True, slots=True)
class ExtractorSettings:
    """Naming conventions used while converting VTK data arrays."""

    lookup_table_prefix: str = "__lut_"
    default_table_name: str = "default"


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    lod: LODSettings = field(default_factory=LODSettings)
    simplify: SimplifySettings = field(default_factory=SimplifySettings)
    extractor: ExtractorSettings = field(default_factory=ExtractorSettings)


DEFAULT_SETTINGS = PipelineSettings()

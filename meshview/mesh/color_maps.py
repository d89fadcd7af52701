# meshview/mesh/color_maps.py
"""
Scalar -> colour mapping for point and cell attributes.

Built-in maps: ``default`` (rainbow), ``viridis``, ``hot``, ``cool`` and
``warm``. Unknown names fall back to ``default``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from meshview.mesh.attributes import (
    AttributeLocation,
    ColorScalarAttribute,
    ScalarAttribute,
)
from meshview.mesh.errors import DataTypeMismatch, MissingData
from meshview.mesh.geometry import GeometryData
from meshview.types import RGBA, FloatArray

logger = logging.getLogger(__name__)

WHITE: RGBA = (1.0, 1.0, 1.0, 1.0)


@dataclass(frozen=True, slots=True, eq=False)
class ColorMap:
    name: str
    colors: FloatArray  # (K, 4)

    @classmethod
    def from_rgb(cls, name: str, rgb) -> ColorMap:
        rgb = np.asarray(rgb, dtype=np.float32).reshape(-1, 3)
        alpha = np.ones((len(rgb), 1), dtype=np.float32)
        return cls(name, np.hstack([rgb, alpha]))

    def interpolate(self, values) -> FloatArray:
        """Colours for normalised values; inputs are clamped to [0, 1]."""
        t = np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
        n = len(self.colors)
        if n == 0:
            return np.tile(np.array(WHITE, dtype=np.float32), (t.size, 1))
        if n == 1:
            return np.tile(self.colors[0], (t.size, 1))

        pos = t.ravel() * (n - 1)
        lower = np.floor(pos).astype(np.int64)
        upper = np.minimum(lower + 1, n - 1)
        weight = (pos - lower)[:, None]
        return (
            self.colors[lower] * (1.0 - weight) + self.colors[upper] * weight
        ).astype(np.float32)

    def color_at(self, value: float) -> RGBA:
        return tuple(float(c) for c in self.interpolate([value])[0])


def _ramp(*stops: Tuple[float, float, float], steps: int) -> np.ndarray:
    """Piecewise-linear RGB ramp sampled at ``steps`` points per segment."""
    out = []
    for a, b in zip(stops, stops[1:]):
        seg = np.linspace(a, b, steps, endpoint=False)
        out.append(seg)
    out.append(np.array([stops[-1]]))
    return np.vstack(out)


_VIRIDIS = [
    (0.267004, 0.004874, 0.329415),
    (0.275191, 0.060826, 0.390374),
    (0.282623, 0.140926, 0.457517),
    (0.285109, 0.195242, 0.495702),
    (0.253935, 0.265254, 0.529983),
    (0.230341, 0.318626, 0.545695),
    (0.206756, 0.371758, 0.553117),
    (0.184586, 0.423943, 0.556295),
    (0.163625, 0.471133, 0.558148),
    (0.144544, 0.516775, 0.557885),
    (0.127568, 0.566949, 0.550556),
    (0.131109, 0.616355, 0.533488),
    (0.134692, 0.658636, 0.517649),
    (0.177423, 0.699873, 0.490448),
    (0.266941, 0.748751, 0.440573),
    (0.369214, 0.788888, 0.382914),
    (0.477504, 0.821444, 0.318195),
    (0.590330, 0.851556, 0.248701),
    (0.706680, 0.877588, 0.175630),
    (0.741388, 0.873449, 0.149561),
    (0.865006, 0.897915, 0.145833),
    (0.993248, 0.906157, 0.143936),
]

# Dark blue -> blue -> cyan -> green -> yellow -> red
_RAINBOW = np.vstack(
    [
        _ramp((0, 0, 0.6), (0, 0, 1.0), steps=4),
        _ramp((0, 0.2, 1.0), (0, 1.0, 1.0), steps=4),
        _ramp((0, 1.0, 0.8), (0, 1.0, 0.0), steps=4),
        _ramp((0.2, 1.0, 0), (1.0, 1.0, 0), steps=4),
        [(1.0, 0.6, 0.0), (1.0, 0.0, 0.0)],
    ]
)

_BUILTIN: Dict[str, np.ndarray] = {
    "default": _RAINBOW,
    "viridis": np.array(_VIRIDIS),
    "hot": np.vstack(
        [_ramp((0, 0, 0), (1, 0, 0), (1, 1, 0), steps=10), [(1.0, 1.0, 1.0)]]
    ),
    "cool": np.vstack(
        [_ramp((0, 0, 0.3), (0, 0, 1.0), steps=7),
         _ramp((0, 0.1, 1.0), (0, 1.0, 1.0), steps=9),
         _ramp((0.2, 1.0, 1.0), (0.8, 1.0, 1.0), steps=3)]
    ),
    "warm": np.vstack(
        [_ramp((0.4, 0, 0), (1.0, 0, 0), steps=6),
         _ramp((1.0, 0.1, 0), (1.0, 1.0, 0), steps=9),
         _ramp((1.0, 1.0, 0.2), (1.0, 1.0, 1.0), steps=4)]
    ),
}

COLOR_MAP_NAMES = tuple(_BUILTIN)


def get_color_map(name: str) -> ColorMap:
    """Built-in map by name; unknown names give the default rainbow."""
    rgb = _BUILTIN.get(name)
    if rgb is None:
        logger.debug("Unknown color map '%s', using default", name)
        name, rgb = "default", _BUILTIN["default"]
    return ColorMap.from_rgb(name, rgb)


def normalize(values: np.ndarray, value_range: Optional[Tuple[float, float]] = None):
    """Map values onto [0, 1]; a zero-width range maps everything to 0.5."""
    values = np.asarray(values, dtype=np.float32)
    if value_range is None:
        if values.size == 0:
            return values
        lo, hi = float(values.min()), float(values.max())
    else:
        lo, hi = value_range
    span = hi - lo
    if span <= 0.0:
        return np.full(values.shape, 0.5, dtype=np.float32)
    return np.clip((values - lo) / span, 0.0, 1.0)


def _scalar_values(attr: ScalarAttribute) -> np.ndarray:
    rows = attr.rows()
    if rows.shape[1] == 1:
        return rows[:, 0]
    # Multi-component scalars are coloured by magnitude.
    return np.linalg.norm(rows, axis=1)


def _map_for(
    geometry: GeometryData, attr: ScalarAttribute, color_map: Optional[ColorMap]
) -> ColorMap:
    if color_map is not None:
        return color_map
    table = geometry.get_lookup_table(attr.table_name)
    if table is not None and len(table):
        return ColorMap(attr.table_name, table)
    return get_color_map(attr.table_name)


def scalar_to_vertex_colors(
    geometry: GeometryData,
    name: str,
    location: AttributeLocation = AttributeLocation.POINT,
    value_range: Optional[Tuple[float, float]] = None,
    color_map: Optional[ColorMap] = None,
) -> FloatArray:
    """
    Per-vertex RGBA colours for a scalar attribute.

    The colour map is, in order of preference: ``color_map``, the inline
    lookup table named by the attribute, the built-in map of that name.
    Cell scalars colour every vertex of the cell's triangles.

    Raises:
        MissingData: no such attribute.
        DataTypeMismatch: the attribute is not a scalar.
    """
    attr = geometry.get_attribute(name, location)
    if attr is None:
        raise MissingData(f"{location.value} attribute '{name}'")
    if not isinstance(attr, ScalarAttribute) or attr.is_lookup_table:
        raise DataTypeMismatch("scalar", attr.kind.value)

    cmap = _map_for(geometry, attr, color_map)
    colors = cmap.interpolate(normalize(_scalar_values(attr), value_range))

    if location == AttributeLocation.POINT:
        out = np.tile(np.array(WHITE, dtype=np.float32), (geometry.vertex_count, 1))
        n = min(len(colors), geometry.vertex_count)
        out[:n] = colors[:n]
        return out
    return _spread_cell_colors(geometry, colors)


def cell_colors_to_vertex_colors(geometry: GeometryData, name: str) -> FloatArray:
    """
    Per-vertex RGBA from a cell colour-scalar attribute, through the
    triangle-to-cell mapping. Three-channel colours get alpha 1.

    Raises:
        MissingData: no such cell attribute.
        DataTypeMismatch: the attribute is not a colour scalar.
    """
    attr = geometry.get_attribute(name, AttributeLocation.CELL)
    if attr is None:
        raise MissingData(f"cell attribute '{name}'")
    if not isinstance(attr, ColorScalarAttribute):
        raise DataTypeMismatch("color_scalar", attr.kind.value)

    rows = attr.rows()
    if attr.nvalues == 4:
        colors = rows.astype(np.float32)
    elif attr.nvalues == 3:
        colors = np.hstack([rows, np.ones((len(rows), 1), dtype=np.float32)])
    else:
        colors = np.tile(np.array(WHITE, dtype=np.float32), (len(rows), 1))
    return _spread_cell_colors(geometry, colors)


def _spread_cell_colors(geometry: GeometryData, cell_colors: FloatArray) -> FloatArray:
    out = np.tile(np.array(WHITE, dtype=np.float32), (geometry.vertex_count, 1))
    triangles = geometry.triangles()

    skipped = 0
    for tri, corners in enumerate(triangles):
        cell = geometry.cell_index_of(tri)
        if cell >= len(cell_colors):
            skipped += 1
            continue
        out[corners] = cell_colors[cell]

    if skipped:
        logger.warning(
            "%d triangles reference cells beyond %d colours", skipped, len(cell_colors)
        )
    return out

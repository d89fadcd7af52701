# meshview/types.py
from __future__ import annotations

from typing import Tuple, TypeAlias

import numpy as np
from numpy.typing import NDArray

RGBA = Tuple[float, float, float, float]

# Unordered vertex pair, always stored as (min, max).
Edge = Tuple[int, int]

FloatArray: TypeAlias = NDArray[np.float32]
IndexArray: TypeAlias = NDArray[np.uint32]
MappingArray: TypeAlias = NDArray[np.int64]


def edge_key(a: int, b: int) -> Edge:
    """Canonical key for the undirected edge (a, b)."""
    return (a, b) if a < b else (b, a)

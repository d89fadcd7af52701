# meshview/assets/handle.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Generic, NewType, TypeVar

AssetId = NewType("AssetId", int)  # 64-bit hash of the asset path
T = TypeVar("T")  # GeometryData for every importer so far


def asset_id_for(path: str) -> AssetId:
    """Stable id for a path relative to the asset root."""
    return AssetId(int(hashlib.sha256(path.encode()).hexdigest(), 16) % (10**16))


@dataclass(frozen=True, slots=True)
class AssetHandle(Generic[T]):
    """
    Reference to a model file queued on the AssetServer.
    Holding one says nothing about whether the model has finished loading.
    """

    id: AssetId
    path: str

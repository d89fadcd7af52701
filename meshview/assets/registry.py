# meshview/assets/registry.py
from __future__ import annotations

import threading
from typing import Dict, Iterator, Optional

from meshview.assets.handle import AssetId
from meshview.mesh.geometry import GeometryData


class AssetRegistry:
    """Loaded geometry keyed by AssetId."""

    def __init__(self) -> None:
        self._storage: Dict[AssetId, GeometryData] = {}
        self._lock = threading.Lock()

    def store(self, asset_id: AssetId, data: GeometryData) -> None:
        with self._lock:
            self._storage[asset_id] = data

    def get(self, asset_id: AssetId) -> Optional[GeometryData]:
        with self._lock:
            return self._storage.get(asset_id)

    def remove(self, asset_id: AssetId) -> Optional[GeometryData]:
        with self._lock:
            return self._storage.pop(asset_id, None)

    def __contains__(self, asset_id: object) -> bool:
        with self._lock:
            return asset_id in self._storage

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def __iter__(self) -> Iterator[AssetId]:
        with self._lock:
            return iter(list(self._storage))

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()

# meshview/assets/server.py
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from queue import Empty, Queue
from typing import Dict, List, Optional, Tuple

from meshview.assets.handle import AssetHandle, AssetId, asset_id_for
from meshview.assets.importers.base import AssetImporter
from meshview.assets.importers.obj import ObjImporter
from meshview.assets.importers.vtk import VtkImporter
from meshview.assets.registry import AssetRegistry
from meshview.mesh.errors import UnsupportedDataType
from meshview.mesh.geometry import GeometryData

logger = logging.getLogger(__name__)


class AssetServer:
    """
    Loads model files on a worker pool.

    ``load`` returns a handle immediately; finished geometry is handed over
    on the caller's thread by ``update``.
    """

    def __init__(self, asset_root: Path, max_workers: int = 2) -> None:
        self.root = Path(asset_root)
        self.registry = AssetRegistry()

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="AssetWorker"
        )
        self._loaded_queue: Queue[Tuple[AssetId, GeometryData]] = Queue()

        self._handles: Dict[str, AssetHandle] = {}  # Path -> Handle
        self._pending: Dict[AssetId, Future] = {}
        self.failures: Dict[AssetId, Exception] = {}

        self._importers: Dict[str, AssetImporter] = {}
        for importer in (VtkImporter(), ObjImporter()):
            self.register_importer(importer)

    def register_importer(self, importer: AssetImporter) -> None:
        for ext in importer.extensions:
            self._importers[ext.lower()] = importer

    def importer_for(self, path: Path) -> AssetImporter:
        ext = path.suffix.lower()
        importer = self._importers.get(ext)
        if importer is None:
            raise UnsupportedDataType(f"no importer for '{ext}' files")
        return importer

    def load(self, path: str) -> AssetHandle[GeometryData]:
        """
        Non-blocking load request. Returns the handle instantly; asking for
        the same path again returns the same handle.
        """
        if path in self._handles:
            return self._handles[path]

        handle: AssetHandle[GeometryData] = AssetHandle(asset_id_for(path), path)
        self._handles[path] = handle

        full_path = self.root / path
        self._pending[handle.id] = self._executor.submit(
            self._worker_load, handle.id, full_path
        )
        return handle

    def _worker_load(self, asset_id: AssetId, full_path: Path) -> None:
        """Runs on a worker thread."""
        try:
            data = self.importer_for(full_path).import_file(full_path)
        except Exception as e:
            logger.exception("Failed to load %s", full_path)
            self.failures[asset_id] = e
            return
        self._loaded_queue.put((asset_id, data))

    def update(self) -> List[AssetId]:
        """
        Called on the main thread once per frame.
        Returns the AssetIds that finished loading since the last call.
        """
        loaded_ids = []
        while True:
            try:
                asset_id, data = self._loaded_queue.get_nowait()
            except Empty:
                break
            self.registry.store(asset_id, data)
            self._pending.pop(asset_id, None)
            loaded_ids.append(asset_id)

        for asset_id in list(self._pending):
            if asset_id in self.failures:
                self._pending.pop(asset_id)

        return loaded_ids

    def get(self, handle: AssetHandle[GeometryData]) -> Optional[GeometryData]:
        return self.registry.get(handle.id)

    def error(self, handle: AssetHandle) -> Optional[Exception]:
        return self.failures.get(handle.id)

    def wait(self, timeout: Optional[float] = None) -> List[AssetId]:
        """Block until every queued load has finished, then ``update``."""
        for future in list(self._pending.values()):
            future.result(timeout=timeout)
        return self.update()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

# meshview/assets/importers/base.py
from abc import ABC, abstractmethod
from pathlib import Path

from meshview.mesh.geometry import GeometryData


class AssetImporter(ABC):
    #: Lower-case suffixes (with the dot) this importer understands.
    extensions: tuple[str, ...] = ()

    @abstractmethod
    def import_file(self, path: Path) -> GeometryData:
        """
        Read a model file into GeometryData.
        Runs on worker threads, so must not touch shared state.
        """
        raise NotImplementedError

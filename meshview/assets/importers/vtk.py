# meshview/assets/importers/vtk.py
from pathlib import Path

from meshview.assets.importers.base import AssetImporter
from meshview.mesh.geometry import GeometryData
from meshview.settings import DEFAULT_SETTINGS, ExtractorSettings
from meshview.vtk.extract import load_geometry


class VtkImporter(AssetImporter):
    extensions = (".vtk",)

    def __init__(self, settings: ExtractorSettings = DEFAULT_SETTINGS.extractor):
        self.settings = settings

    def import_file(self, path: Path) -> GeometryData:
        return load_geometry(path, self.settings)

# meshview/assets/importers/__init__.py
from meshview.assets.importers.base import AssetImporter
from meshview.assets.importers.obj import ObjImporter
from meshview.assets.importers.vtk import VtkImporter

__all__ = ["AssetImporter", "ObjImporter", "VtkImporter"]

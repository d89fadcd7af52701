# meshview/assets/__init__.py
from meshview.assets.handle import AssetHandle, AssetId
from meshview.assets.importers import AssetImporter, ObjImporter, VtkImporter
from meshview.assets.registry import AssetRegistry
from meshview.assets.server import AssetServer

__all__ = [
    "AssetServer",
    "AssetRegistry",
    "AssetHandle",
    "AssetId",
    "AssetImporter",
    "ObjImporter",
    "VtkImporter",
]

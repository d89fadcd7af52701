# meshview/lod/__init__.py
from meshview.lod.manager import LODLevel, LODManager, LODMeshData, size_factor
from meshview.lod.simplify import simplify_mesh

__all__ = [
    "LODLevel",
    "LODManager",
    "LODMeshData",
    "size_factor",
    "simplify_mesh",
]

"""Mesh loading for PoissonMesh."""

from poissonmesh.processing.mesh_loader import MeshLoader, load_mesh

__all__ = [
    "MeshLoader",
    "load_mesh",
]

"""Spatial indexing for point sampling."""

from poissonmesh.spatial.hash_grid import SpatialHashGrid, build_candidate_grid

__all__ = [
    "SpatialHashGrid",
    "build_candidate_grid",
]

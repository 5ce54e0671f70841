"""Base classes and utilities for point cloud sampling."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

import numpy as np
import trimesh
from scipy.spatial import cKDTree

from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.core.random import RandomSource
from poissonmesh.utils.logging import SamplingRun, get_logger

logger = get_logger(__name__)

MeshLike = Union[SurfaceMesh, trimesh.Trimesh]


def as_surface_mesh(mesh: MeshLike) -> SurfaceMesh:
    """Wrap a trimesh object, or pass a SurfaceMesh through."""
    if isinstance(mesh, SurfaceMesh):
        return mesh
    if isinstance(mesh, trimesh.Trimesh):
        return SurfaceMesh.from_trimesh(mesh)
    raise TypeError(f"Expected SurfaceMesh or trimesh.Trimesh, got {type(mesh).__name__}")


class SamplingStrategy(ABC):
    """Abstract base class for point cloud sampling strategies."""

    def __init__(
        self,
        num_points: int = 4096,
        seed: Optional[int] = None,
        source: Optional[RandomSource] = None,
    ):
        """Initialize sampling strategy.

        Args:
            num_points: Number of points to sample
            seed: Random seed for reproducibility, used when no source is given
            source: Random draw source shared with other pipeline stages
        """
        self.num_points = num_points
        self.seed = seed
        self.source = source if source is not None else RandomSource(seed)

    def sample(self, mesh: MeshLike) -> np.ndarray:
        """Sample points from mesh.

        Args:
            mesh: Input mesh

        Returns:
            Array of sampled points (N, 3)
        """
        surface = as_surface_mesh(mesh)
        with SamplingRun(
            logger,
            self.__class__.__name__,
            num_points=self.num_points,
            faces=surface.face_count,
        ) as run:
            surface.validate_for_sampling()
            points = self._sample_impl(surface)
            run.record(sampled=len(points))
        return points

    @abstractmethod
    def _sample_impl(self, mesh: SurfaceMesh) -> np.ndarray:
        """Implementation of the sampling strategy.

        Args:
            mesh: Validated input mesh

        Returns:
            Array of sampled points (N, 3)
        """
        pass

    def get_params(self) -> Dict[str, Any]:
        """Parameters describing this strategy, for reports and logs."""
        return {
            "strategy": self.__class__.__name__,
            "num_points": self.num_points,
            "seed": self.seed,
        }


def minimum_separation(points: np.ndarray) -> float:
    """Smallest distance between two distinct entries of ``points``.

    Returns ``inf`` for fewer than two points.
    """
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 2:
        return float("inf")
    distances, _ = cKDTree(points).query(points, k=2)
    return float(np.min(distances[:, 1]))

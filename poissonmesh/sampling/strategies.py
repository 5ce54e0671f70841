"""Concrete sampling strategies."""

from typing import Any, Dict, Optional

import numpy as np

from poissonmesh.core.config import SamplingConfig
from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.core.pointcloud import PointCloud
from poissonmesh.core.random import RandomSource
from poissonmesh.sampling.base import SamplingStrategy
from poissonmesh.sampling.calibration import CalibrationResult, calibrate_to_count
from poissonmesh.sampling.montecarlo import face_centers, sample_by_area


class MonteCarloSampler(SamplingStrategy):
    """Dense area-weighted random sampling."""

    def _sample_impl(self, mesh: SurfaceMesh) -> np.ndarray:
        out = PointCloud(capacity=self.num_points)
        sample_by_area(mesh, out, self.num_points, self.source)
        return out.to_array()


class FaceCenterSampler(SamplingStrategy):
    """One point at the centroid of every face; ``num_points`` is ignored."""

    def _sample_impl(self, mesh: SurfaceMesh) -> np.ndarray:
        out = PointCloud(capacity=mesh.face_count)
        face_centers(mesh, out)
        return out.to_array()


class PoissonDiskSampler(SamplingStrategy):
    """Blue-noise sampling with a calibrated separation radius.

    The mesh vertices are always part of the result, so the returned count
    is only within ``tolerance`` of ``num_points`` and never below the
    vertex count.
    """

    def __init__(
        self,
        num_points: int = 4096,
        seed: Optional[int] = None,
        source: Optional[RandomSource] = None,
        tolerance: float = 0.005,
        candidate_pool_size: int = 10,
        montecarlo_rate: int = 20,
        max_iter: int = 20,
        max_bracket_iter: int = 64,
        max_cell_occupancy: float = 100.0,
        max_grid_rebuilds: int = 32,
        radius_scale_divisor: float = 50.0,
    ):
        """Initialize Poisson disk sampler.

        Args:
            num_points: Target number of points
            seed: Random seed for reproducibility
            source: Random draw source shared with other pipeline stages
            tolerance: Accepted relative deviation from num_points
            candidate_pool_size: Candidates compared per grid cell
            montecarlo_rate: Dense candidates drawn per target point
            max_iter: Bisection step budget
            max_bracket_iter: Trials allowed for each bracket search
            max_cell_occupancy: Grid refinement threshold
            max_grid_rebuilds: Grid refinement guard
            radius_scale_divisor: Initial radius is the bbox diagonal over this
        """
        super().__init__(num_points, seed, source)
        self.tolerance = tolerance
        self.candidate_pool_size = candidate_pool_size
        self.montecarlo_rate = montecarlo_rate
        self.max_iter = max_iter
        self.max_bracket_iter = max_bracket_iter
        self.max_cell_occupancy = max_cell_occupancy
        self.max_grid_rebuilds = max_grid_rebuilds
        self.radius_scale_divisor = radius_scale_divisor
        self.last_result: Optional[CalibrationResult] = None

    @classmethod
    def from_config(
        cls,
        config: SamplingConfig,
        source: Optional[RandomSource] = None,
    ) -> "PoissonDiskSampler":
        return cls(
            num_points=config.num_points,
            seed=config.seed,
            source=source,
            tolerance=config.tolerance,
            candidate_pool_size=config.candidate_pool_size,
            montecarlo_rate=config.montecarlo_rate,
            max_iter=config.max_iter,
            max_bracket_iter=config.max_bracket_iter,
            max_cell_occupancy=config.max_cell_occupancy,
            max_grid_rebuilds=config.max_grid_rebuilds,
            radius_scale_divisor=config.radius_scale_divisor,
        )

    def get_params(self) -> Dict[str, Any]:
        return {
            **super().get_params(),
            "tolerance": self.tolerance,
            "candidate_pool_size": self.candidate_pool_size,
            "montecarlo_rate": self.montecarlo_rate,
            "max_iter": self.max_iter,
        }

    def _sample_impl(self, mesh: SurfaceMesh) -> np.ndarray:
        out = PointCloud(capacity=self.num_points)
        self.last_result = calibrate_to_count(
            out,
            mesh,
            self.num_points,
            self.tolerance,
            self.candidate_pool_size,
            self.max_iter,
            source=self.source,
            montecarlo_rate=self.montecarlo_rate,
            radius_scale_divisor=self.radius_scale_divisor,
            max_bracket_iter=self.max_bracket_iter,
            max_cell_occupancy=self.max_cell_occupancy,
            max_grid_rebuilds=self.max_grid_rebuilds,
        )
        return self.last_result.points

"""Point cloud sampling for PoissonMesh."""

from poissonmesh.sampling.base import (
    SamplingStrategy,
    as_surface_mesh,
    minimum_separation,
)
from poissonmesh.sampling.calibration import (
    CalibrationResult,
    calibrate_to_count,
    count_bounds,
    sample_with_config,
    sample_with_density,
    sample_with_fixed_number,
)
from poissonmesh.sampling.factory import SamplingFactory
from poissonmesh.sampling.montecarlo import (
    face_centers,
    sample_by_area,
    sample_face,
    sample_faces,
)
from poissonmesh.sampling.poisson import (
    best_candidate,
    check_poisson_disk,
    estimate_poisson_disk_radius,
    prune_to_poisson_disk,
)
from poissonmesh.sampling.strategies import (
    FaceCenterSampler,
    MonteCarloSampler,
    PoissonDiskSampler,
)

__all__ = [
    "SamplingStrategy",
    "SamplingFactory",
    "MonteCarloSampler",
    "PoissonDiskSampler",
    "FaceCenterSampler",
    "CalibrationResult",
    "as_surface_mesh",
    "minimum_separation",
    "sample_by_area",
    "sample_face",
    "sample_faces",
    "face_centers",
    "prune_to_poisson_disk",
    "best_candidate",
    "check_poisson_disk",
    "estimate_poisson_disk_radius",
    "calibrate_to_count",
    "count_bounds",
    "sample_with_fixed_number",
    "sample_with_density",
    "sample_with_config",
]

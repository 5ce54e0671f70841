"""Core functionality for PoissonMesh."""

from poissonmesh.core.config import (
    Config,
    LoggingConfig,
    SamplingConfig,
    get_default_config,
    load_config,
)
from poissonmesh.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    EmptyCellError,
    InvalidMeshError,
    InvalidSampleCountError,
    MeshLoadError,
    MeshValidationError,
    PointCloudError,
    PoissonMeshError,
)
from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.core.pointcloud import PointCloud
from poissonmesh.core.random import RandomSource, shuffle_in_place

__all__ = [
    # Config classes
    "Config",
    "SamplingConfig",
    "LoggingConfig",
    # Config functions
    "get_default_config",
    "load_config",
    # Data model
    "SurfaceMesh",
    "PointCloud",
    "RandomSource",
    "shuffle_in_place",
    # Exceptions
    "PoissonMeshError",
    "ConfigurationError",
    "MeshLoadError",
    "MeshValidationError",
    "PointCloudError",
    "InvalidMeshError",
    "InvalidSampleCountError",
    "EmptyCellError",
    "ConvergenceError",
]

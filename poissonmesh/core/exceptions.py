"""Custom exceptions for PoissonMesh."""

from pathlib import Path
from typing import Any, Optional


class PoissonMeshError(Exception):
    """Base exception for PoissonMesh."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(PoissonMeshError):
    """Raised when configuration is invalid."""

    pass


class MeshLoadError(PoissonMeshError):
    """Raised when a mesh file cannot be loaded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to load mesh file '{path}': {reason}")
        self.path = path
        self.reason = reason


class MeshValidationError(PoissonMeshError):
    """Raised when mesh validation fails."""

    def __init__(self, path: Path, errors: list[str]):
        message = f"Mesh validation failed for '{path}': {', '.join(errors)}"
        super().__init__(message)
        self.path = path
        self.errors = errors


class PointCloudError(PoissonMeshError):
    """Raised when point cloud generation fails."""

    pass


class InvalidMeshError(PointCloudError, ValueError):
    """Raised when a mesh cannot be sampled (no faces, zero area...)."""

    pass


class InvalidSampleCountError(PointCloudError, ValueError):
    """Raised when a sampling parameter is out of range."""

    def __init__(self, name: str, value: Any, requirement: str):
        super().__init__(
            f"Invalid {name}={value!r}: must be {requirement}",
            details={"name": name, "value": value},
        )
        self.name = name
        self.value = value


class EmptyCellError(PointCloudError):
    """Raised when a best candidate is requested from an empty grid cell."""

    def __init__(self, cell: tuple[int, int, int]):
        super().__init__(f"Grid cell {cell} holds no candidates")
        self.cell = cell


class ConvergenceError(PointCloudError):
    """Raised when a bounded search loop reaches its iteration guard."""

    def __init__(self, phase: str, iterations: int, **details: Any):
        super().__init__(
            f"{phase} did not terminate after {iterations} iterations",
            details={"phase": phase, "iterations": iterations, **details},
        )
        self.phase = phase
        self.iterations = iterations

"""Utility functions for PoissonMesh."""

from poissonmesh.utils.logging import (
    setup_logging,
    get_logger,
    log_performance,
    log_calibration_result,
    SamplingRun,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_performance",
    "log_calibration_result",
    "SamplingRun",
]

"""Radius calibration: match the Poisson-disk sample count to a target."""

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from poissonmesh.core.config import SamplingConfig
from poissonmesh.core.exceptions import ConvergenceError, InvalidSampleCountError
from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.core.pointcloud import PointCloud
from poissonmesh.core.random import RandomSource
from poissonmesh.sampling.montecarlo import sample_by_area
from poissonmesh.sampling.poisson import prune_to_poisson_disk
from poissonmesh.utils.logging import get_logger, log_calibration_result

logger = get_logger(__name__)


@dataclass
class CalibrationResult:
    """Outcome of a radius calibration run.

    ``lower_radius`` is the small-radius end of the final bracket (more
    points), ``upper_radius`` the large-radius end (fewer points).
    """

    radius: float
    count: int
    target: int
    tolerance: float
    iterations: int
    trials: int
    converged: bool
    lower_radius: float
    upper_radius: float
    points: np.ndarray = field(repr=False)

    @property
    def count_range(self) -> tuple[float, float]:
        return count_bounds(self.target, self.tolerance)


def count_bounds(target: int, tolerance: float) -> tuple[float, float]:
    """Accepted sample count interval ``[N(1 - tol), N(1 + tol)]``."""
    return target * (1.0 - tolerance), target * (1.0 + tolerance)


def _validate(target: int, tolerance: float, candidate_pool_size: int, max_iter: int) -> None:
    if isinstance(target, bool) or int(target) != target or target <= 0:
        raise InvalidSampleCountError("target", target, "a positive integer")
    if not 0 <= tolerance < 1:
        raise InvalidSampleCountError("tolerance", tolerance, "in [0, 1)")
    if isinstance(candidate_pool_size, bool) or candidate_pool_size < 1:
        raise InvalidSampleCountError(
            "candidate_pool_size", candidate_pool_size, "a positive integer"
        )
    if max_iter < 0:
        raise InvalidSampleCountError("max_iter", max_iter, "non-negative")


def calibrate_to_count(
    out: PointCloud,
    mesh: SurfaceMesh,
    target: int,
    tolerance: float = 0.005,
    candidate_pool_size: int = 10,
    max_iter: int = 20,
    *,
    source: RandomSource,
    montecarlo_rate: int = 20,
    radius_scale_divisor: float = 50.0,
    max_bracket_iter: int = 64,
    max_cell_occupancy: float = 100.0,
    max_grid_rebuilds: int = 32,
) -> CalibrationResult:
    """Search the separation radius whose pruned sample count matches ``target``.

    Each trial clears ``out``, draws a fresh dense candidate cloud of
    ``montecarlo_rate * target`` points and prunes it. The radius is first
    bracketed by halving and doubling ``diagonal / radius_scale_divisor``,
    then bisected until the count lies in ``[N(1 - tol), N(1 + tol)]`` or
    ``max_iter`` bisection steps have run. ``out`` keeps the points of the
    last trial.

    Args:
        out: Point cloud receiving the final samples
        mesh: Mesh to sample
        target: Desired number of samples
        tolerance: Accepted relative deviation from target
        candidate_pool_size: Candidates compared per cell while pruning
        max_iter: Bisection step budget
        source: Random draw source shared by every trial
        montecarlo_rate: Dense candidates drawn per target point
        radius_scale_divisor: Reference radius is the bbox diagonal over this
        max_bracket_iter: Trials allowed for each bracket search
        max_cell_occupancy: Grid refinement threshold
        max_grid_rebuilds: Grid refinement guard

    Returns:
        Calibration result; ``converged`` is False when the budget ran out

    Raises:
        InvalidMeshError: If the mesh cannot be sampled
        InvalidSampleCountError: If a parameter is out of range
        ConvergenceError: If a bracket search exceeds max_bracket_iter
    """
    _validate(target, tolerance, candidate_pool_size, max_iter)
    if montecarlo_rate < 1:
        raise InvalidSampleCountError("montecarlo_rate", montecarlo_rate, "at least 1")
    if max_bracket_iter < 1:
        raise InvalidSampleCountError("max_bracket_iter", max_bracket_iter, "at least 1")
    mesh.validate_for_sampling()

    target = int(target)
    count_min, count_max = count_bounds(target, tolerance)
    candidate_count = montecarlo_rate * target
    candidates = PointCloud(capacity=candidate_count)
    trials = 0

    def run_trial(radius: float, phase: str) -> int:
        nonlocal trials
        trials += 1
        out.clear()
        candidates.clear()
        sample_by_area(mesh, candidates, candidate_count, source)
        count = prune_to_poisson_disk(
            out,
            candidates,
            mesh,
            radius,
            candidate_pool_size,
            source,
            max_cell_occupancy=max_cell_occupancy,
            max_grid_rebuilds=max_grid_rebuilds,
        )
        logger.debug("calibration_trial", phase=phase, radius=radius, sample_count=count)
        return count

    reference_radius = mesh.diagonal / radius_scale_divisor
    if not reference_radius > 0 or not math.isfinite(reference_radius):
        raise InvalidSampleCountError(
            "radius_scale_divisor", radius_scale_divisor, "giving a positive radius"
        )

    # Smaller radius packs more points: halve until the count reaches the target
    min_radius = reference_radius
    for _ in range(max_bracket_iter):
        min_radius /= 2.0
        min_radius_count = run_trial(min_radius, "lower_bracket")
        if min_radius_count >= target:
            break
    else:
        raise ConvergenceError(
            "lower_bracket",
            max_bracket_iter,
            radius=min_radius,
            count=min_radius_count,
            target=target,
        )

    max_radius = reference_radius
    for _ in range(max_bracket_iter):
        max_radius *= 2.0
        max_radius_count = run_trial(max_radius, "upper_bracket")
        if max_radius_count <= target:
            break
    else:
        raise ConvergenceError(
            "upper_bracket",
            max_bracket_iter,
            radius=max_radius,
            count=max_radius_count,
            target=target,
        )

    radius = max_radius
    count = max_radius_count
    iterations = 0
    while iterations < max_iter and not count_min <= count <= count_max:
        iterations += 1
        radius = (max_radius + min_radius) / 2.0
        count = run_trial(radius, "bisection")
        if count > target:
            min_radius = radius
        if count < target:
            max_radius = radius

    converged = count_min <= count <= count_max
    # Either the count is in range or the whole budget was spent
    assert converged or iterations == max_iter

    result = CalibrationResult(
        radius=radius,
        count=count,
        target=target,
        tolerance=tolerance,
        iterations=iterations,
        trials=trials,
        converged=converged,
        lower_radius=min_radius,
        upper_radius=max_radius,
        points=out.to_array(),
    )
    log_calibration_result(logger, result)
    return result


def sample_with_fixed_number(
    mesh: SurfaceMesh,
    target: int,
    tolerance: float = 0.005,
    candidate_pool_size: int = 10,
    montecarlo_rate: int = 20,
    max_iter: int = 20,
    source: Optional[RandomSource] = None,
    out: Optional[PointCloud] = None,
    **kwargs,
) -> CalibrationResult:
    """Blue-noise sample ``mesh`` with about ``target`` points.

    Convenience wrapper around :func:`calibrate_to_count` that creates the
    output cloud and random source when they are not supplied.
    """
    if source is None:
        source = RandomSource()
    if out is None:
        out = PointCloud(capacity=max(int(target), 1))
    return calibrate_to_count(
        out,
        mesh,
        target,
        tolerance,
        candidate_pool_size,
        max_iter,
        source=source,
        montecarlo_rate=montecarlo_rate,
        **kwargs,
    )


def sample_with_density(
    mesh: SurfaceMesh,
    density: float,
    **kwargs,
) -> CalibrationResult:
    """Blue-noise sample ``mesh`` with ``density`` points per unit area."""
    if not density > 0:
        raise InvalidSampleCountError("density", density, "positive")
    mesh.validate_for_sampling()
    target = max(1, round(mesh.total_area * density))
    return sample_with_fixed_number(mesh, target, **kwargs)


def sample_with_config(
    mesh: SurfaceMesh,
    config: SamplingConfig,
    source: Optional[RandomSource] = None,
) -> CalibrationResult:
    """Run :func:`sample_with_fixed_number` with settings from ``config``."""
    if source is None:
        source = RandomSource(config.seed)
    return sample_with_fixed_number(
        mesh,
        config.num_points,
        tolerance=config.tolerance,
        candidate_pool_size=config.candidate_pool_size,
        montecarlo_rate=config.montecarlo_rate,
        max_iter=config.max_iter,
        source=source,
        radius_scale_divisor=config.radius_scale_divisor,
        max_bracket_iter=config.max_bracket_iter,
        max_cell_occupancy=config.max_cell_occupancy,
        max_grid_rebuilds=config.max_grid_rebuilds,
    )

"""Poisson-disk pruning of a dense candidate set."""

import math
from typing import Sequence, Union

import numpy as np

from poissonmesh.core.exceptions import EmptyCellError, InvalidSampleCountError
from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.core.pointcloud import PointCloud
from poissonmesh.core.random import RandomSource, shuffle_in_place
from poissonmesh.spatial.hash_grid import Cell, SpatialHashGrid, build_candidate_grid

# Fraction of the plane covered by a greedy Poisson-disk packing
POISSON_DISK_DENSITY = 0.7


def estimate_poisson_disk_radius(area: float, num_points: int) -> float:
    """Radius expected to yield about ``num_points`` Poisson-disk samples."""
    if num_points <= 0:
        raise InvalidSampleCountError("num_points", num_points, "a positive integer")
    return math.sqrt(area / (POISSON_DISK_DENSITY * math.pi * num_points))


def check_poisson_disk(grid: SpatialHashGrid, point: Sequence[float], radius: float) -> bool:
    """True if no point stored in ``grid`` lies closer than ``radius`` to ``point``."""
    point = np.asarray(point, dtype=np.float64)
    nearby = grid.get_in_box(point - radius, point + radius)
    if not nearby:
        return True
    distances = np.linalg.norm(grid.arena[nearby] - point, axis=1)
    return bool(np.all(distances >= radius))


def best_candidate(
    grid: SpatialHashGrid,
    cell: Cell,
    radius: float,
    pool_size: int,
) -> int:
    """Handle of the candidate in ``cell`` whose acceptance removes the fewest others.

    Scans at most ``pool_size`` candidates in storage order; ties keep the
    first one scanned.

    Raises:
        EmptyCellError: If the cell holds no candidates
    """
    handles = grid.cell_handles(cell)
    if not handles:
        raise EmptyCellError(cell)

    best = handles[0]
    min_removed = None
    for handle in handles[:pool_size]:
        removed = grid.count_in_sphere(grid.arena[handle], radius)
        if min_removed is None or removed < min_removed:
            best = handle
            min_removed = removed
    return best


def prune_to_poisson_disk(
    out: PointCloud,
    candidates: Union[PointCloud, np.ndarray],
    mesh: SurfaceMesh,
    radius: float,
    candidate_pool_size: int,
    source: RandomSource,
    max_cell_occupancy: float = 100.0,
    max_grid_rebuilds: int = 32,
) -> int:
    """Select a blue-noise subset of ``candidates`` with separation ``radius``.

    Every mesh vertex is appended to ``out`` first as a seed and clears the
    candidates around it. Seeds are not tested against each other. The
    remaining candidates are then visited cell by cell in shuffled order;
    each non-empty cell contributes the candidate that eliminates the fewest
    neighbours, until no candidate is left.

    Args:
        out: Point cloud receiving the seeds and accepted samples
        candidates: Dense candidate points
        mesh: Mesh whose vertices seed the result
        radius: Minimum separation between accepted samples
        candidate_pool_size: Candidates compared per cell
        source: Random draw source used to shuffle cells
        max_cell_occupancy: Average cell occupancy that triggers a finer grid
        max_grid_rebuilds: Grid refinement guard

    Returns:
        Number of points appended (seeds plus accepted samples)
    """
    if isinstance(candidate_pool_size, bool) or candidate_pool_size < 1:
        raise InvalidSampleCountError(
            "candidate_pool_size", candidate_pool_size, "a positive integer"
        )
    arena = candidates.to_array() if isinstance(candidates, PointCloud) else candidates
    grid = build_candidate_grid(
        np.asarray(arena, dtype=np.float64).reshape(-1, 3),
        mesh.bounds,
        radius,
        max_occupancy=max_cell_occupancy,
        max_rebuilds=max_grid_rebuilds,
    )

    sample_num = 0
    for vertex in mesh.vertices:
        out.append(vertex)
        sample_num += 1
        grid.remove_in_sphere(vertex, radius)
    grid.update_allocated_cells()
    shuffle_in_place(grid.allocated_cells, source)

    while grid.allocated_cells:
        for cell in grid.allocated_cells:
            if grid.empty_cell(cell):
                continue
            handle = best_candidate(grid, cell, radius, candidate_pool_size)
            point = grid.arena[handle]
            out.append(point)
            sample_num += 1
            grid.remove_in_sphere(point, radius)
        grid.update_allocated_cells()

    return sample_num

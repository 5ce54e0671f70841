"""Uniform spatial hash grid over an arena of points.

The grid never owns coordinates. It stores integer handles (row indices)
into a fixed (N, 3) arena, so removing a handle from the grid leaves the
arena untouched.
"""

import math
from typing import Iterator, Optional, Sequence

import numpy as np

from poissonmesh.core.exceptions import ConvergenceError, InvalidSampleCountError
from poissonmesh.utils.logging import get_logger

logger = get_logger(__name__)

Cell = tuple[int, int, int]


class SpatialHashGrid:
    """Hash grid mapping cell coordinates to lists of point handles."""

    def __init__(self, arena: np.ndarray):
        """Initialize grid over an arena of points.

        Args:
            arena: Point coordinates (N, 3) addressed by handle
        """
        arena = np.asarray(arena, dtype=np.float64)
        if arena.ndim != 2 or arena.shape[1] != 3:
            raise ValueError(f"Arena must have shape (N, 3), got {arena.shape}")
        self.arena = arena
        self.origin = np.zeros(3)
        self.extent = np.zeros(3)
        self.dims = np.ones(3, dtype=np.int64)
        self.voxel = np.ones(3)
        self.allocated_cells: list[Cell] = []
        self._cells: dict[Cell, list[int]] = {}
        self._pending: list[Cell] = []
        self._size = 0

    def init_empty(
        self,
        lower: Sequence[float],
        upper: Sequence[float],
        dims: Sequence[int],
    ) -> None:
        """Reset to an empty grid covering ``[lower, upper]`` with ``dims`` cells.

        Args:
            lower: Minimum corner of the covered box
            upper: Maximum corner of the covered box
            dims: Number of cells along each axis
        """
        lower = np.asarray(lower, dtype=np.float64)
        upper = np.asarray(upper, dtype=np.float64)
        dims = np.maximum(np.asarray(dims, dtype=np.int64), 1)
        extent = upper - lower
        if np.any(extent <= 0):
            raise ValueError(f"Grid box must have positive extent, got {extent}")

        self.origin = lower
        self.extent = extent
        self.dims = dims
        self.voxel = extent / dims
        self.allocated_cells = []
        self._cells = {}
        self._pending = []
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def cell_of(self, point: Sequence[float]) -> Cell:
        """Integer cell coordinate containing ``point``, clamped to the grid."""
        idx = np.floor((np.asarray(point, dtype=np.float64) - self.origin) / self.voxel)
        idx = np.clip(idx, 0, self.dims - 1).astype(np.int64)
        return (int(idx[0]), int(idx[1]), int(idx[2]))

    def _cell_range(self, lower: np.ndarray, upper: np.ndarray) -> Optional[tuple[np.ndarray, np.ndarray]]:
        """Integer cell range overlapping a box, or None if outside the grid."""
        lo = np.floor((lower - self.origin) / self.voxel).astype(np.int64)
        hi = np.floor((upper - self.origin) / self.voxel).astype(np.int64)
        lo = np.maximum(lo, 0)
        hi = np.minimum(hi, self.dims - 1)
        if np.any(lo > hi):
            return None
        return lo, hi

    def _iter_cells(self, lower: np.ndarray, upper: np.ndarray) -> Iterator[list[int]]:
        cell_range = self._cell_range(lower, upper)
        if cell_range is None:
            return
        lo, hi = cell_range
        for ix in range(lo[0], hi[0] + 1):
            for iy in range(lo[1], hi[1] + 1):
                for iz in range(lo[2], hi[2] + 1):
                    bucket = self._cells.get((ix, iy, iz))
                    if bucket:
                        yield bucket

    def add(self, handle: int) -> None:
        """Insert a handle into the cell containing its arena point."""
        cell = self.cell_of(self.arena[handle])
        bucket = self._cells.get(cell)
        if bucket is None:
            bucket = self._cells[cell] = []
            self._pending.append(cell)
        bucket.append(int(handle))
        self._size += 1

    def add_all(self) -> None:
        """Insert every arena point, in handle order."""
        if len(self.arena) == 0:
            return
        idx = np.floor((self.arena - self.origin) / self.voxel)
        idx = np.clip(idx, 0, self.dims - 1).astype(np.int64)
        for handle, (ix, iy, iz) in enumerate(idx.tolist()):
            cell = (ix, iy, iz)
            bucket = self._cells.get(cell)
            if bucket is None:
                bucket = self._cells[cell] = []
                self._pending.append(cell)
            bucket.append(handle)
        self._size += len(idx)

    def update_allocated_cells(self) -> None:
        """Refresh the list of non-empty cells.

        Cells already listed keep their relative order; emptied cells are
        dropped and newly filled cells are appended.
        """
        allocated = [cell for cell in self.allocated_cells if self._cells.get(cell)]
        listed = set(allocated)
        for cell in self._pending:
            if cell not in listed and self._cells.get(cell):
                allocated.append(cell)
                listed.add(cell)
        for cell in [c for c, bucket in self._cells.items() if not bucket]:
            del self._cells[cell]
        self._pending = []
        self.allocated_cells = allocated

    def empty_cell(self, cell: Cell) -> bool:
        return not self._cells.get(cell)

    def cell_handles(self, cell: Cell) -> list[int]:
        """Handles currently stored in ``cell`` (a copy)."""
        return list(self._cells.get(cell, ()))

    def _gather_sphere(self, center: np.ndarray, radius: float) -> list[list[int]]:
        offset = np.full(3, radius)
        return list(self._iter_cells(center - offset, center + offset))

    def count_in_sphere(self, center: Sequence[float], radius: float) -> int:
        """Number of stored points within ``radius`` of ``center`` (inclusive)."""
        center = np.asarray(center, dtype=np.float64)
        buckets = self._gather_sphere(center, radius)
        if not buckets:
            return 0
        handles = [h for bucket in buckets for h in bucket]
        diff = self.arena[handles] - center
        return int(np.count_nonzero(np.einsum("ij,ij->i", diff, diff) <= radius * radius))

    def remove_in_sphere(self, center: Sequence[float], radius: float) -> int:
        """Remove stored points within ``radius`` of ``center``.

        Only handles are removed; the arena is left unchanged.

        Returns:
            Number of removed handles
        """
        center = np.asarray(center, dtype=np.float64)
        r2 = radius * radius
        removed = 0
        for bucket in self._gather_sphere(center, radius):
            diff = self.arena[bucket] - center
            keep = np.einsum("ij,ij->i", diff, diff) > r2
            n_removed = len(bucket) - int(np.count_nonzero(keep))
            if n_removed:
                bucket[:] = [h for h, k in zip(bucket, keep.tolist()) if k]
                removed += n_removed
        self._size -= removed
        return removed

    def get_in_box(self, lower: Sequence[float], upper: Sequence[float]) -> list[int]:
        """Handles of stored points lying inside the axis-aligned box.

        Returns an empty list if the box lies outside the grid.
        """
        lower = np.asarray(lower, dtype=np.float64)
        upper = np.asarray(upper, dtype=np.float64)
        found: list[int] = []
        for bucket in self._iter_cells(lower, upper):
            pts = self.arena[bucket]
            inside = np.all((pts >= lower) & (pts <= upper), axis=1)
            found.extend(h for h, ok in zip(bucket, inside.tolist()) if ok)
        return found


def build_candidate_grid(
    points: np.ndarray,
    bounds: np.ndarray,
    radius: float,
    max_occupancy: float = 100.0,
    max_rebuilds: int = 32,
) -> SpatialHashGrid:
    """Build a grid over ``points`` sized for sphere queries of ``radius``.

    Cells start with edge ``2 * radius / sqrt(3)``; the grid is rebuilt with
    half the cell size while the average number of points per allocated
    cell exceeds ``max_occupancy``.

    Args:
        points: Candidate points (N, 3)
        bounds: Box to cover, as a (2, 3) array; inflated by one cell
        radius: Separation radius the grid is queried with
        max_occupancy: Highest accepted average cell occupancy
        max_rebuilds: Number of grid builds attempted before giving up

    Returns:
        Grid holding one handle per point

    Raises:
        InvalidSampleCountError: If radius is not positive
        ConvergenceError: If occupancy is still too high after max_rebuilds
    """
    if not radius > 0 or not math.isfinite(radius):
        raise InvalidSampleCountError("radius", radius, "a positive finite number")

    bounds = np.asarray(bounds, dtype=np.float64)
    cell_size = 2.0 * radius / math.sqrt(3.0)
    grid = SpatialHashGrid(points)
    occupancy = 0.0

    for attempt in range(max_rebuilds):
        lower = bounds[0] - cell_size
        upper = bounds[1] + cell_size
        dims = np.maximum(np.floor((upper - lower) / cell_size), 1).astype(np.int64)

        grid.init_empty(lower, upper, dims)
        grid.add_all()
        grid.update_allocated_cells()

        n_cells = len(grid.allocated_cells)
        occupancy = len(points) / n_cells if n_cells else 0.0
        if occupancy <= max_occupancy:
            return grid

        logger.debug(
            "grid_refined",
            attempt=attempt,
            cell_size=cell_size,
            occupancy=round(occupancy, 2),
        )
        cell_size /= 2.0

    raise ConvergenceError(
        "grid_occupancy",
        max_rebuilds,
        radius=radius,
        occupancy=occupancy,
    )

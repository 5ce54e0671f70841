"""Append-only point container."""

from typing import Iterable, Iterator, Optional

import numpy as np


class PointCloud:
    """Ordered, append-only sequence of 3-D points.

    Points are stored in a growable numpy buffer; ``clear`` resets the
    cloud so it can be rebuilt wholesale.
    """

    def __init__(self, points: Optional[np.ndarray] = None, capacity: int = 1024):
        self._buffer = np.empty((max(capacity, 1), 3), dtype=np.float64)
        self._size = 0
        if points is not None:
            self.extend(points)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[np.ndarray]:
        for i in range(self._size):
            yield self._buffer[i].copy()

    def __getitem__(self, index: int) -> np.ndarray:
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError("point index out of range")
        return self._buffer[index].copy()

    def __repr__(self) -> str:
        return f"PointCloud(n_points={self._size})"

    def _reserve(self, extra: int) -> None:
        needed = self._size + extra
        if needed <= len(self._buffer):
            return
        capacity = len(self._buffer)
        while capacity < needed:
            capacity *= 2
        grown = np.empty((capacity, 3), dtype=np.float64)
        grown[: self._size] = self._buffer[: self._size]
        self._buffer = grown

    def append(self, point: Iterable[float]) -> None:
        point = np.asarray(point, dtype=np.float64)
        if point.shape != (3,):
            raise ValueError(f"Expected a 3-D point, got shape {point.shape}")
        self._reserve(1)
        self._buffer[self._size] = point
        self._size += 1

    def extend(self, points: np.ndarray) -> None:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        self._reserve(len(points))
        self._buffer[self._size : self._size + len(points)] = points
        self._size += len(points)

    def clear(self) -> None:
        self._size = 0

    def to_array(self) -> np.ndarray:
        """Copy of the stored points as an (N, 3) float64 array."""
        return self._buffer[: self._size].copy()

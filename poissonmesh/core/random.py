"""Seedable random draw source shared by the sampling pipeline."""

from typing import MutableSequence, Optional, Protocol, TypeVar, Union

import numpy as np

T = TypeVar("T")


class UniformIntSource(Protocol):
    """Anything that can draw a uniform integer in ``[0, n)``."""

    def uniform_int(self, n: int) -> int: ...


class RandomSource:
    """Single-owner random generator for one sampling pipeline.

    Create one instance per pipeline and pass it to every sampling call so
    that a fixed seed reproduces the same point clouds. Instances are not
    safe to share between concurrent callers.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng: Optional[np.random.Generator] = None

    @property
    def rng(self) -> np.random.Generator:
        if self._rng is None:
            self._rng = np.random.default_rng(self.seed)
        return self._rng

    def reseed(self, seed: Optional[int]) -> None:
        self.seed = seed
        self._rng = None

    def uniform_int(self, n: int) -> int:
        """Uniform integer in ``[0, n)``."""
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}")
        return int(self.rng.integers(0, n))

    def uniform_real01(self, size: Optional[int] = None) -> Union[float, np.ndarray]:
        """Uniform real in ``[0, 1)``; an array of draws when ``size`` is given."""
        if size is None:
            return float(self.rng.random())
        return self.rng.random(size)

    def uniform_barycentric(self, size: Optional[int] = None) -> np.ndarray:
        """Barycentric weights uniformly distributed over a triangle.

        Uses the square-root transform, so the weights are non-negative,
        sum to one, and do not cluster towards a corner.

        Returns:
            Array of shape (3,), or (size, 3) when ``size`` is given
        """
        n = 1 if size is None else size
        u, v = self.rng.random((2, n))
        root = np.sqrt(u)
        weights = np.column_stack([1.0 - root, root * (1.0 - v), root * v])
        return weights[0] if size is None else weights


def shuffle_in_place(items: MutableSequence[T], source: UniformIntSource) -> None:
    """Fisher-Yates shuffle driven by ``source.uniform_int``."""
    for i in range(len(items) - 1, 0, -1):
        j = source.uniform_int(i + 1)
        items[i], items[j] = items[j], items[i]

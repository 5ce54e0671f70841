"""Factory for creating sampling strategies."""

from typing import Any, Dict, Optional, Type

from poissonmesh.core.config import SamplingConfig
from poissonmesh.core.random import RandomSource
from poissonmesh.sampling.base import SamplingStrategy
from poissonmesh.sampling.strategies import (
    FaceCenterSampler,
    MonteCarloSampler,
    PoissonDiskSampler,
)


class SamplingFactory:
    """Factory for creating sampling strategies."""

    _strategies: Dict[str, Type[SamplingStrategy]] = {
        "poisson": PoissonDiskSampler,
        "montecarlo": MonteCarloSampler,
        "face_center": FaceCenterSampler,
    }

    @classmethod
    def create(
        cls,
        method: str,
        num_points: int = 4096,
        **kwargs: Any,
    ) -> SamplingStrategy:
        """Create a sampling strategy.

        Args:
            method: Sampling method name
            num_points: Number of points to sample
            **kwargs: Additional arguments for the strategy

        Returns:
            Sampling strategy instance

        Raises:
            ValueError: If method is unknown
        """
        if method not in cls._strategies:
            available = ", ".join(cls._strategies.keys())
            raise ValueError(
                f"Unknown sampling method: {method}. Available: {available}"
            )

        strategy_class = cls._strategies[method]
        return strategy_class(num_points=num_points, **kwargs)

    @classmethod
    def from_config(
        cls,
        config: SamplingConfig,
        source: Optional[RandomSource] = None,
    ) -> SamplingStrategy:
        """Create the strategy selected by ``config.method``."""
        if config.method == "poisson":
            return PoissonDiskSampler.from_config(config, source=source)
        return cls.create(
            config.method,
            num_points=config.num_points,
            seed=config.seed,
            source=source,
        )

    @classmethod
    def register(cls, name: str, strategy_class: Type[SamplingStrategy]) -> None:
        """Register a new sampling strategy.

        Args:
            name: Name for the strategy
            strategy_class: Strategy class
        """
        cls._strategies[name] = strategy_class

    @classmethod
    def available_methods(cls) -> list[str]:
        """Get list of available sampling methods."""
        return list(cls._strategies.keys())

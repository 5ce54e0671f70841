"""Configuration management for PoissonMesh using Pydantic."""

from pathlib import Path
from typing import Literal, Optional

import tomli
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from poissonmesh.core.exceptions import ConfigurationError


class SamplingConfig(BaseModel):
    """Configuration for point cloud sampling."""

    model_config = ConfigDict(frozen=True)

    num_points: int = Field(4096, ge=1, description="Target number of points")
    method: Literal["poisson", "montecarlo", "face_center"] = Field(
        "poisson", description="Sampling method to use"
    )
    tolerance: float = Field(
        0.005, ge=0, lt=1, description="Accepted relative deviation from num_points"
    )
    candidate_pool_size: int = Field(
        10, ge=1, description="Candidates compared per cell when picking a sample"
    )
    montecarlo_rate: int = Field(
        20, ge=1, description="Dense candidates generated per requested point"
    )
    max_iter: int = Field(20, ge=0, description="Bisection iteration budget")
    max_bracket_iter: int = Field(
        64, ge=1, description="Iteration guard for each radius bracket search"
    )
    max_grid_rebuilds: int = Field(
        32, ge=1, description="Iteration guard for grid occupancy rebuilds"
    )
    max_cell_occupancy: float = Field(
        100.0, gt=0, description="Average points per allocated cell before refining"
    )
    radius_scale_divisor: float = Field(
        50.0, gt=0, description="Initial radius is the bbox diagonal over this value"
    )
    seed: Optional[int] = Field(None, ge=0, description="Random seed for reproducibility")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Logging level"
    )
    format: Literal["json", "console", "plain"] = Field(
        "console", description="Log format"
    )
    colorize: bool = Field(True, description="Colorize console output when on a TTY")
    add_caller_info: bool = Field(False, description="Add file/line/function to events")
    timestamp_format: str = Field("iso", description="structlog TimeStamper format")
    log_dir: Optional[Path] = Field(None, description="Directory for log files")
    log_to_file: bool = Field(False, description="Enable file logging")


class Config(BaseModel):
    """Main configuration for PoissonMesh."""

    model_config = ConfigDict(frozen=True)

    sampling: SamplingConfig = Field(
        default_factory=SamplingConfig, description="Sampling configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> "Config":
        """Load configuration from TOML file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the TOML is malformed or holds invalid values
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(
                f"Invalid TOML in {path}: {e}", details={"path": str(path)}
            ) from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create configuration from dictionary.

        Raises:
            ConfigurationError: If a value fails validation
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False)},
            ) from e

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json", exclude_none=True)

    def save_toml(self, path: Path | str) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save TOML file
        """
        import tomli_w

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            tomli_w.dump(self.to_dict(), f)


def get_default_config() -> Config:
    """Get default configuration."""
    return Config()


def load_config(path: Optional[Path | str] = None) -> Config:
    """Load configuration from file or return defaults.

    Args:
        path: Optional path to configuration file

    Returns:
        Config instance
    """
    if path:
        return Config.from_toml(path)
    return get_default_config()

"""Unit tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from poissonmesh.core import (
    Config,
    ConfigurationError,
    PoissonMeshError,
    SamplingConfig,
    get_default_config,
    load_config,
)


class TestSamplingConfig:
    """Test sampling configuration defaults and validation."""

    def test_defaults(self):
        config = SamplingConfig()

        assert config.method == "poisson"
        assert config.tolerance == 0.005
        assert config.candidate_pool_size == 10
        assert config.montecarlo_rate == 20
        assert config.max_iter == 20
        assert config.max_cell_occupancy == 100.0
        assert config.radius_scale_divisor == 50.0
        assert config.seed is None

    def test_frozen(self):
        config = SamplingConfig()
        with pytest.raises(ValidationError):
            config.num_points = 10

    @pytest.mark.parametrize(
        "field, value",
        [
            ("num_points", 0),
            ("tolerance", 1.0),
            ("tolerance", -0.01),
            ("candidate_pool_size", 0),
            ("method", "fps"),
            ("max_bracket_iter", 0),
        ],
    )
    def test_invalid_values(self, field: str, value):
        with pytest.raises(ValidationError):
            SamplingConfig(**{field: value})


class TestConfig:
    """Test the aggregate configuration."""

    def test_nested_dicts(self, test_config: Config):
        assert test_config.sampling.num_points == 64
        assert test_config.logging.format == "plain"

    def test_toml_round_trip(self, temp_dir: Path, test_config: Config):
        path = temp_dir / "nested" / "config.toml"
        test_config.save_toml(path)

        loaded = Config.from_toml(path)

        assert loaded == test_config

    def test_from_toml_missing(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            Config.from_toml(temp_dir / "missing.toml")

    def test_partial_toml(self, temp_dir: Path):
        path = temp_dir / "partial.toml"
        path.write_text('[sampling]\nnum_points = 500\nmethod = "montecarlo"\n')

        config = load_config(path)

        assert config.sampling.num_points == 500
        assert config.sampling.method == "montecarlo"
        assert config.sampling.tolerance == 0.005

    def test_load_default(self):
        assert load_config() == get_default_config()

    def test_from_dict(self):
        config = Config.from_dict({"sampling": {"seed": 3}})
        assert config.to_dict()["sampling"]["seed"] == 3

    def test_from_dict_invalid(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_dict({"sampling": {"tolerance": 2.0, "num_points": 0}})

        assert isinstance(exc_info.value, PoissonMeshError)
        assert len(exc_info.value.details["errors"]) == 2

    def test_toml_invalid_value(self, temp_dir: Path):
        path = temp_dir / "bad_value.toml"
        path.write_text('[sampling]\nmethod = "fps"\n')

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            Config.from_toml(path)

    def test_toml_malformed(self, temp_dir: Path):
        path = temp_dir / "malformed.toml"
        path.write_text("[sampling\nnum_points = \n")

        with pytest.raises(ConfigurationError, match="Invalid TOML") as exc_info:
            load_config(path)
        assert exc_info.value.details["path"] == str(path)

"""Unit tests for the radius calibration loop."""

import numpy as np
import pytest

from poissonmesh.core import (
    ConvergenceError,
    InvalidSampleCountError,
    PointCloud,
    RandomSource,
    SamplingConfig,
    SurfaceMesh,
)
from poissonmesh.sampling import (
    calibrate_to_count,
    count_bounds,
    sample_with_config,
    sample_with_density,
    sample_with_fixed_number,
)
from poissonmesh.sampling import calibration


@pytest.fixture
def inverse_radius_pruner(monkeypatch):
    """Replace pruning with a deterministic count of round(10 / radius)."""
    calls = []

    def fake_prune(out, candidates, mesh, radius, pool_size, source, **kwargs):
        n = int(round(10.0 / radius))
        out.extend(np.zeros((n, 3)))
        calls.append({"radius": radius, "candidates": candidates.to_array()})
        return n

    monkeypatch.setattr(calibration, "prune_to_poisson_disk", fake_prune)
    return calls


class TestCalibrationSearch:
    """Test the bracket and bisection logic with a predictable pruner."""

    def test_converges_to_target(self, unit_square_mesh: SurfaceMesh, inverse_radius_pruner):
        out = PointCloud()
        result = calibrate_to_count(
            out, unit_square_mesh, 100, 0.005, 10, 20, source=RandomSource(0)
        )

        assert result.converged
        assert result.count == 100
        assert len(out) == 100
        assert result.radius == pytest.approx(0.1, abs=1e-3)
        assert result.iterations <= 20
        assert result.lower_radius < result.upper_radius

    def test_bracket_start(self, unit_square_mesh: SurfaceMesh, inverse_radius_pruner):
        """Both brackets start from diagonal / 50."""
        calibrate_to_count(
            PointCloud(), unit_square_mesh, 100, 0.005, 10, 20, source=RandomSource(0)
        )
        reference = np.sqrt(2.0) / 50.0
        radii = [call["radius"] for call in inverse_radius_pruner]

        # One halving reaches 707 >= 100; two doublings reach 88 <= 100
        assert radii[0] == pytest.approx(reference / 2)
        assert radii[1] == pytest.approx(reference * 2)
        assert radii[2] == pytest.approx(reference * 4)

    def test_fresh_candidates_each_trial(self, unit_square_mesh: SurfaceMesh, inverse_radius_pruner):
        """Every trial draws a new dense cloud of rate * target points."""
        calibrate_to_count(
            PointCloud(),
            unit_square_mesh,
            100,
            source=RandomSource(0),
            montecarlo_rate=5,
        )
        candidate_sets = [call["candidates"] for call in inverse_radius_pruner]

        assert all(len(c) == 500 for c in candidate_sets)
        assert not np.array_equal(candidate_sets[0], candidate_sets[1])

    def test_budget_exhausted(self, unit_square_mesh: SurfaceMesh, inverse_radius_pruner):
        """Running out of bisection steps is reported, not raised."""
        result = calibrate_to_count(
            PointCloud(), unit_square_mesh, 100, 0.0, 10, 3, source=RandomSource(0)
        )

        assert not result.converged
        assert result.iterations == 3

    def test_zero_budget_returns_upper_bracket(self, unit_square_mesh: SurfaceMesh, inverse_radius_pruner):
        result = calibrate_to_count(
            PointCloud(), unit_square_mesh, 100, 0.005, 10, 0, source=RandomSource(0)
        )

        assert result.iterations == 0
        assert result.radius == pytest.approx(np.sqrt(2.0) / 50.0 * 4)
        assert result.count == 88

    def test_lower_bracket_guard(self, unit_square_mesh: SurfaceMesh, monkeypatch):
        """A count that never reaches the target stops at the guard."""
        monkeypatch.setattr(calibration, "prune_to_poisson_disk", lambda *args, **kwargs: 0)

        with pytest.raises(ConvergenceError) as exc_info:
            calibrate_to_count(
                PointCloud(), unit_square_mesh, 10, source=RandomSource(0), max_bracket_iter=4
            )
        assert exc_info.value.phase == "lower_bracket"
        assert exc_info.value.details["iterations"] == 4


class TestCalibrateToCount:
    """Test calibration with the real sampler and pruner."""

    @pytest.mark.slow
    def test_unit_square_fifty(self, unit_square_mesh: SurfaceMesh):
        """Unit square, 50 points, 0.5% tolerance, 20 bisection steps."""
        out = PointCloud()
        result = calibrate_to_count(
            out, unit_square_mesh, 50, 0.005, 10, 20, source=RandomSource(42)
        )

        assert result.converged
        assert 49.75 <= result.count <= 50.25
        assert result.iterations <= 20
        assert len(out) == result.count

    def test_outcome_in_range_or_budget_spent(self, box_mesh: SurfaceMesh):
        result = calibrate_to_count(
            PointCloud(), box_mesh, 100, 0.01, 10, 6, source=RandomSource(8)
        )
        low, high = result.count_range
        assert (low <= result.count <= high) or result.iterations == 6

    def test_deterministic(self, unit_square_mesh: SurfaceMesh):
        """A fixed seed reproduces the same final cloud."""
        a = calibrate_to_count(
            PointCloud(), unit_square_mesh, 40, 0.05, 10, 10, source=RandomSource(5)
        )
        b = calibrate_to_count(
            PointCloud(), unit_square_mesh, 40, 0.05, 10, 10, source=RandomSource(5)
        )
        assert a.radius == b.radius
        assert np.array_equal(a.points, b.points)

    def test_target_below_vertex_count(self, box_mesh: SurfaceMesh):
        """Seeds alone exceed the target, so the upper bracket cannot close."""
        with pytest.raises(ConvergenceError) as exc_info:
            calibrate_to_count(
                PointCloud(), box_mesh, 5, source=RandomSource(0), max_bracket_iter=5
            )
        assert exc_info.value.phase == "upper_bracket"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"target": 0},
            {"target": -3},
            {"tolerance": 1.0},
            {"tolerance": -0.1},
            {"candidate_pool_size": 0},
            {"max_iter": -1},
        ],
    )
    def test_invalid_parameters(self, unit_square_mesh: SurfaceMesh, kwargs):
        params = {"target": 10, **kwargs}
        with pytest.raises(InvalidSampleCountError):
            calibrate_to_count(PointCloud(), unit_square_mesh, source=RandomSource(0), **params)

    def test_count_bounds(self):
        assert count_bounds(50, 0.005) == pytest.approx((49.75, 50.25))


class TestPipelines:
    """Test the convenience pipelines."""

    def test_fixed_number(self, unit_square_mesh: SurfaceMesh):
        result = sample_with_fixed_number(
            unit_square_mesh, 40, tolerance=0.05, source=RandomSource(1)
        )
        assert result.target == 40
        assert result.points.shape == (result.count, 3)

    def test_density(self, unit_square_mesh: SurfaceMesh):
        """Density is points per unit area."""
        result = sample_with_density(
            unit_square_mesh, 30.0, tolerance=0.05, source=RandomSource(1)
        )
        assert result.target == 30

        with pytest.raises(InvalidSampleCountError):
            sample_with_density(unit_square_mesh, 0.0)

    def test_config(self, unit_square_mesh: SurfaceMesh):
        config = SamplingConfig(num_points=40, tolerance=0.05, max_iter=10, seed=1)
        a = sample_with_config(unit_square_mesh, config)
        b = sample_with_config(unit_square_mesh, config)

        assert a.target == 40
        assert np.array_equal(a.points, b.points)

"""Shared test fixtures and configuration."""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import numpy as np
import pytest
import structlog
import trimesh

from poissonmesh.core import Config, RandomSource, SurfaceMesh


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers installed by setup_logging after each test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler).__module__.startswith("_pytest"):
            continue
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration."""
    return Config(
        sampling={"num_points": 64, "seed": 7},  # Smaller for speed
        logging={"level": "WARNING", "format": "plain", "colorize": False},
    )


@pytest.fixture
def random_source() -> RandomSource:
    """Seeded random source."""
    return RandomSource(seed=42)


@pytest.fixture
def unit_square_mesh() -> SurfaceMesh:
    """Unit square in the z=0 plane made of two triangles."""
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    return SurfaceMesh(vertices, faces)


@pytest.fixture
def single_triangle_mesh() -> SurfaceMesh:
    """A single triangle with area 1."""
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [2.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
    ])
    return SurfaceMesh(vertices, np.array([[0, 1, 2]]))


@pytest.fixture
def simple_box_mesh() -> trimesh.Trimesh:
    """Create a simple box mesh for testing."""
    return trimesh.creation.box(extents=[1, 1, 1])


@pytest.fixture
def box_mesh(simple_box_mesh: trimesh.Trimesh) -> SurfaceMesh:
    """Unit box centered at the origin as a SurfaceMesh."""
    return SurfaceMesh.from_trimesh(simple_box_mesh)


@pytest.fixture
def simple_cylinder_mesh() -> trimesh.Trimesh:
    """Create a simple cylinder mesh for testing."""
    return trimesh.creation.cylinder(radius=0.5, height=2.0, sections=32)


@pytest.fixture
def sample_stl_path(temp_dir: Path, simple_box_mesh: trimesh.Trimesh) -> Path:
    """Create a sample STL file."""
    stl_path = temp_dir / "test_box.stl"
    simple_box_mesh.export(stl_path)
    return stl_path


# Markers for different test categories
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 1 second"
    )

"""Unit tests for the mesh, point cloud and random source types."""

import numpy as np
import pytest
import trimesh

from poissonmesh.core import (
    InvalidMeshError,
    PointCloud,
    RandomSource,
    SurfaceMesh,
    shuffle_in_place,
)


class TestSurfaceMesh:
    """Test the read-only mesh container."""

    def test_areas_computed(self, unit_square_mesh: SurfaceMesh):
        """Face areas are derived from vertices when not given."""
        assert unit_square_mesh.face_count == 2
        assert np.allclose(unit_square_mesh.face_areas, [0.5, 0.5])
        assert unit_square_mesh.total_area == pytest.approx(1.0)

    def test_bounds_and_diagonal(self, unit_square_mesh: SurfaceMesh):
        """Bounding box and diagonal of the unit square."""
        assert np.allclose(unit_square_mesh.bounds, [[0, 0, 0], [1, 1, 0]])
        assert unit_square_mesh.diagonal == pytest.approx(np.sqrt(2.0))

    def test_from_trimesh(self, simple_box_mesh: trimesh.Trimesh):
        """Conversion keeps geometry and precomputed areas."""
        mesh = SurfaceMesh.from_trimesh(simple_box_mesh)

        assert mesh.vertex_count == 8
        assert mesh.face_count == 12
        assert mesh.total_area == pytest.approx(6.0)
        assert np.allclose(mesh.face_areas, simple_box_mesh.area_faces)

    def test_arrays_are_read_only(self, unit_square_mesh: SurfaceMesh):
        """Mesh arrays cannot be modified in place."""
        with pytest.raises(ValueError):
            unit_square_mesh.vertices[0, 0] = 5.0

    def test_invalid_shapes(self):
        """Malformed arrays are rejected."""
        with pytest.raises(InvalidMeshError):
            SurfaceMesh(np.zeros((3, 2)), np.array([[0, 1, 2]]))
        with pytest.raises(InvalidMeshError):
            SurfaceMesh(np.zeros((3, 3)), np.array([[0, 1, 5]]))
        with pytest.raises(InvalidMeshError):
            SurfaceMesh(np.zeros((3, 3)), np.array([[0, 1, 2]]), face_areas=[-1.0])

    def test_validate_for_sampling(self):
        """Meshes without faces or area cannot be sampled."""
        no_faces = SurfaceMesh(np.zeros((3, 3)), np.zeros((0, 3)))
        with pytest.raises(InvalidMeshError, match="no faces"):
            no_faces.validate_for_sampling()

        flat = SurfaceMesh(
            np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0]]),
            np.array([[0, 1, 2]]),
        )
        with pytest.raises(InvalidMeshError, match="zero surface area"):
            flat.validate_for_sampling()

    def test_precondition_error_is_value_error(self):
        """Precondition failures can be caught as ValueError."""
        with pytest.raises(ValueError):
            SurfaceMesh(np.zeros((0, 3)), np.zeros((0, 3))).validate_for_sampling()


class TestPointCloud:
    """Test the append-only point container."""

    def test_append_and_grow(self):
        """Appending past the initial capacity keeps every point in order."""
        cloud = PointCloud(capacity=2)
        for i in range(5):
            cloud.append([i, 0, 0])

        assert len(cloud) == 5
        assert np.allclose(cloud.to_array()[:, 0], np.arange(5))
        assert np.allclose(cloud[-1], [4, 0, 0])

    def test_extend_and_clear(self):
        """Clearing empties the cloud for reuse."""
        cloud = PointCloud(np.ones((10, 3)))
        assert len(cloud) == 10

        cloud.clear()
        assert len(cloud) == 0
        assert cloud.to_array().shape == (0, 3)

        cloud.extend(np.zeros((3, 3)))
        assert len(list(cloud)) == 3

    def test_rejects_bad_point(self):
        """Only 3-D points can be appended."""
        cloud = PointCloud()
        with pytest.raises(ValueError):
            cloud.append([1.0, 2.0])

    def test_to_array_is_a_copy(self):
        """Mutating the exported array leaves the cloud unchanged."""
        cloud = PointCloud(np.zeros((2, 3)))
        exported = cloud.to_array()
        exported[:] = 9.0
        assert np.allclose(cloud.to_array(), 0.0)


class TestRandomSource:
    """Test the random draw source."""

    def test_reproducible(self):
        """The same seed gives the same draws."""
        a, b = RandomSource(5), RandomSource(5)
        assert [a.uniform_int(100) for _ in range(10)] == [b.uniform_int(100) for _ in range(10)]
        assert np.array_equal(a.uniform_real01(20), b.uniform_real01(20))

    def test_uniform_int_range(self, random_source: RandomSource):
        """Integers fall in [0, n)."""
        draws = [random_source.uniform_int(3) for _ in range(200)]
        assert set(draws) == {0, 1, 2}

        with pytest.raises(ValueError):
            random_source.uniform_int(0)

    def test_uniform_real01_range(self, random_source: RandomSource):
        """Reals fall in [0, 1)."""
        values = random_source.uniform_real01(1000)
        assert values.min() >= 0.0
        assert values.max() < 1.0
        assert isinstance(random_source.uniform_real01(), float)

    def test_barycentric_weights(self, random_source: RandomSource):
        """Weights are non-negative, sum to one and are unbiased."""
        weights = random_source.uniform_barycentric(20000)

        assert weights.shape == (20000, 3)
        assert np.all(weights >= 0)
        assert np.allclose(weights.sum(axis=1), 1.0)
        # Uniform over the triangle means each weight averages 1/3
        assert np.allclose(weights.mean(axis=0), 1.0 / 3.0, atol=0.01)

        single = random_source.uniform_barycentric()
        assert single.shape == (3,)

    def test_reseed(self):
        """Reseeding restarts the sequence."""
        source = RandomSource(1)
        first = source.uniform_real01(5)
        source.reseed(1)
        assert np.array_equal(first, source.uniform_real01(5))


class TestShuffle:
    """Test the injectable shuffle."""

    def test_permutation(self, random_source: RandomSource):
        """Shuffling keeps every element exactly once."""
        items = list(range(50))
        shuffle_in_place(items, random_source)
        assert sorted(items) == list(range(50))
        assert items != list(range(50))

    def test_uses_uniform_int_contract(self):
        """Any object with uniform_int can drive the shuffle."""

        class AlwaysZero:
            def uniform_int(self, n: int) -> int:
                return 0

        items = [0, 1, 2, 3]
        shuffle_in_place(items, AlwaysZero())
        assert items == [1, 2, 3, 0]

    def test_deterministic(self):
        """Equal seeds give equal permutations."""
        a, b = list(range(20)), list(range(20))
        shuffle_in_place(a, RandomSource(3))
        shuffle_in_place(b, RandomSource(3))
        assert a == b

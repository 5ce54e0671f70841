"""Area-weighted random sampling over mesh faces."""

from typing import Sequence

import numpy as np

from poissonmesh.core.exceptions import InvalidMeshError, InvalidSampleCountError
from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.core.pointcloud import PointCloud
from poissonmesh.core.random import RandomSource


def _check_count(name: str, count: int) -> int:
    if isinstance(count, bool) or int(count) != count or count < 0:
        raise InvalidSampleCountError(name, count, "a non-negative integer")
    return int(count)


def cumulative_face_areas(mesh: SurfaceMesh) -> np.ndarray:
    """Cumulative area table of length ``face_count + 1`` starting at zero."""
    cumulative = np.empty(mesh.face_count + 1, dtype=np.float64)
    cumulative[0] = 0.0
    np.cumsum(mesh.face_areas, out=cumulative[1:])
    return cumulative


def pick_faces(cumulative: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Faces whose cumulative upper bound is the first not less than each value.

    A value of exactly zero maps to the first face with positive area.
    """
    idx = np.searchsorted(cumulative, values, side="left")
    idx[idx == 0] = np.searchsorted(cumulative, 0.0, side="right")
    return idx - 1


def sample_by_area(
    mesh: SurfaceMesh,
    out: PointCloud,
    count: int,
    source: RandomSource,
) -> None:
    """Append ``count`` points drawn uniformly over the mesh surface.

    Faces are picked with probability proportional to their area, then a
    uniform barycentric point is placed inside the chosen face.

    Args:
        mesh: Mesh with positive total area
        out: Point cloud to append the samples to
        count: Number of points to draw
        source: Random draw source

    Raises:
        InvalidMeshError: If the mesh has no faces or zero area
        InvalidSampleCountError: If count is negative
    """
    count = _check_count("count", count)
    mesh.validate_for_sampling()
    if count == 0:
        return

    cumulative = cumulative_face_areas(mesh)
    values = cumulative[-1] * source.uniform_real01(count)
    faces = pick_faces(cumulative, values)
    weights = source.uniform_barycentric(count)

    corners = mesh.face_vertices(faces)
    out.extend(np.einsum("ij,ijk->ik", weights, corners))


def sample_face(
    mesh: SurfaceMesh,
    face_index: int,
    count: int,
    out: PointCloud,
    source: RandomSource,
) -> None:
    """Append ``count`` uniform random points inside a single face."""
    count = _check_count("count", count)
    if not 0 <= face_index < mesh.face_count:
        raise InvalidMeshError(f"Face index {face_index} out of range")
    if count == 0:
        return
    weights = source.uniform_barycentric(count)
    out.extend(weights @ mesh.face_vertices(face_index))


def sample_faces(
    mesh: SurfaceMesh,
    face_indices: Sequence[int],
    count_per_face: int,
    out: PointCloud,
    source: RandomSource,
) -> None:
    """Append ``count_per_face`` random points inside each listed face."""
    for face_index in face_indices:
        sample_face(mesh, int(face_index), count_per_face, out, source)


def face_centers(mesh: SurfaceMesh, out: PointCloud) -> None:
    """Append the centroid of every face, in face order."""
    if mesh.face_count == 0:
        return
    out.extend(mesh.face_vertices(np.arange(mesh.face_count)).mean(axis=1))

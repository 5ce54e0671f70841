"""Read-only triangle mesh used as sampling input."""

from dataclasses import dataclass, field
from typing import Union

import numpy as np
import trimesh

from poissonmesh.core.exceptions import InvalidMeshError


@dataclass(frozen=True, eq=False)
class SurfaceMesh:
    """Triangle mesh with per-face areas fixed at construction time.

    Attributes:
        vertices: Vertex coordinates (V, 3)
        faces: Vertex indices of each face (F, 3), in stored order
        face_areas: Non-negative area of each face (F,)
    """

    vertices: np.ndarray
    faces: np.ndarray
    face_areas: np.ndarray = field(default=None)

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=np.float64)
        faces = np.array(self.faces, dtype=np.int64)

        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise InvalidMeshError(f"Vertices must have shape (V, 3), got {vertices.shape}")
        if faces.size == 0:
            faces = faces.reshape((0, 3))
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise InvalidMeshError(f"Faces must have shape (F, 3), got {faces.shape}")
        if len(faces) and (faces.min() < 0 or faces.max() >= len(vertices)):
            raise InvalidMeshError("Faces reference vertices out of range")

        if self.face_areas is None:
            face_areas = triangle_areas(vertices[faces]) if len(faces) else np.zeros(0)
        else:
            face_areas = np.array(self.face_areas, dtype=np.float64)
            if face_areas.shape != (len(faces),):
                raise InvalidMeshError(
                    f"Expected {len(faces)} face areas, got shape {face_areas.shape}"
                )
            if np.any(face_areas < 0) or not np.all(np.isfinite(face_areas)):
                raise InvalidMeshError("Face areas must be finite and non-negative")

        for name, value in (("vertices", vertices), ("faces", faces), ("face_areas", face_areas)):
            value.setflags(write=False)
            object.__setattr__(self, name, value)

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> "SurfaceMesh":
        """Create from a trimesh object, reusing its cached face areas."""
        return cls(
            vertices=np.asarray(mesh.vertices),
            faces=np.asarray(mesh.faces),
            face_areas=np.asarray(mesh.area_faces),
        )

    def to_trimesh(self) -> trimesh.Trimesh:
        """Convert to a trimesh object without merging or reordering."""
        return trimesh.Trimesh(
            vertices=np.array(self.vertices),
            faces=np.array(self.faces),
            process=False,
        )

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def total_area(self) -> float:
        return float(self.face_areas.sum())

    @property
    def bounds(self) -> np.ndarray:
        """Axis-aligned bounding box as a (2, 3) array of min and max corners."""
        if self.vertex_count == 0:
            return np.zeros((2, 3))
        return np.vstack([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    @property
    def diagonal(self) -> float:
        """Length of the bounding box diagonal."""
        lower, upper = self.bounds
        return float(np.linalg.norm(upper - lower))

    def face_vertices(self, face_indices: Union[int, np.ndarray]) -> np.ndarray:
        """Corner coordinates of the given faces, shape (..., 3, 3)."""
        return self.vertices[self.faces[face_indices]]

    def validate_for_sampling(self) -> None:
        """Check the sampling preconditions.

        Raises:
            InvalidMeshError: If the mesh has no faces, no vertices or zero area
        """
        if self.vertex_count == 0:
            raise InvalidMeshError("Mesh has no vertices")
        if self.face_count == 0:
            raise InvalidMeshError("Mesh has no faces")
        if not self.total_area > 0:
            raise InvalidMeshError("Mesh has zero surface area")


def triangle_areas(triangles: np.ndarray) -> np.ndarray:
    """Areas of triangles given as an (F, 3, 3) array of corners."""
    edges_a = triangles[:, 1] - triangles[:, 0]
    edges_b = triangles[:, 2] - triangles[:, 0]
    return 0.5 * np.linalg.norm(np.cross(edges_a, edges_b), axis=1)

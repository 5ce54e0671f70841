"""Mesh file loading and validation."""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import trimesh

from poissonmesh.core.exceptions import MeshLoadError, MeshValidationError
from poissonmesh.core.mesh import SurfaceMesh
from poissonmesh.utils.logging import get_logger

logger = get_logger(__name__)


class MeshLoader:
    """Loads triangle meshes from disk into SurfaceMesh objects."""

    # Maximum file size in bytes (1GB)
    MAX_FILE_SIZE = 1_000_000_000

    SUPPORTED_EXTENSIONS = {".stl", ".obj", ".ply", ".off", ".glb", ".gltf"}

    def __init__(self, process: bool = True):
        """Initialize mesh loader.

        Args:
            process: Whether trimesh should merge duplicate vertices
        """
        self.process = process

    def load(
        self,
        file_path: Union[str, Path],
        validate: bool = True,
    ) -> SurfaceMesh:
        """Load a mesh file.

        Args:
            file_path: Path to mesh file
            validate: Whether to validate mesh after loading

        Returns:
            Loaded mesh

        Raises:
            MeshLoadError: If file cannot be loaded
            MeshValidationError: If validation fails
        """
        file_path = Path(file_path)
        self._validate_file(file_path)

        try:
            loaded = trimesh.load(
                file_path,
                process=self.process,
                force="mesh",
            )
        except Exception as e:
            raise MeshLoadError(file_path, str(e)) from e

        if isinstance(loaded, trimesh.Scene):
            if len(loaded.geometry) == 0:
                raise MeshLoadError(file_path, "No geometry found in file")
            loaded = trimesh.util.concatenate(list(loaded.geometry.values()))

        if not isinstance(loaded, trimesh.Trimesh):
            raise MeshLoadError(
                file_path,
                f"Expected Trimesh object, got {type(loaded).__name__}",
            )

        if validate:
            self.validate_mesh(loaded, file_path)

        logger.debug(
            "mesh_loaded",
            path=str(file_path),
            vertices=len(loaded.vertices),
            faces=len(loaded.faces),
        )
        return SurfaceMesh.from_trimesh(loaded)

    def _validate_file(self, file_path: Path) -> None:
        """Validate file before loading.

        Raises:
            MeshLoadError: If file validation fails
        """
        if not file_path.exists():
            raise MeshLoadError(file_path, "File does not exist")

        if not file_path.is_file():
            raise MeshLoadError(file_path, "Path is not a file")

        file_size = file_path.stat().st_size

        if file_size == 0:
            raise MeshLoadError(file_path, "File is empty")

        if file_size > self.MAX_FILE_SIZE:
            raise MeshLoadError(
                file_path,
                f"File too large ({file_size / 1e9:.1f}GB > 1GB limit)",
            )

        if file_path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
            raise MeshLoadError(
                file_path,
                f"Unsupported file extension: {file_path.suffix}",
            )

    def validate_mesh(
        self,
        mesh: trimesh.Trimesh,
        file_path: Optional[Path] = None,
    ) -> None:
        """Check that a mesh can be sampled.

        Raises:
            MeshValidationError: If validation fails
        """
        errors = []
        path = file_path or Path("mesh")

        if len(mesh.vertices) == 0:
            errors.append("Mesh has no vertices")

        if len(mesh.faces) == 0:
            errors.append("Mesh has no faces")
        elif not mesh.area > 0:
            errors.append("Mesh has zero surface area")
        else:
            degenerate_count = int(np.sum(mesh.area_faces < 1e-12))
            if degenerate_count:
                logger.warning("degenerate_faces", path=str(path), count=degenerate_count)

        if errors:
            raise MeshValidationError(path, errors)


def load_mesh(
    file_path: Union[str, Path],
    process: bool = True,
    validate: bool = True,
) -> SurfaceMesh:
    """Convenience function to load a mesh file.

    Raises:
        MeshLoadError: If file cannot be loaded
        MeshValidationError: If validation fails
    """
    loader = MeshLoader(process=process)
    return loader.load(file_path, validate=validate)

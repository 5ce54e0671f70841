"""PoissonMesh - blue-noise point clouds from triangle meshes."""

__version__ = "0.1.0"

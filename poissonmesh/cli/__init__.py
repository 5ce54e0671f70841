"""Command-line interface for PoissonMesh."""

"""Command-line interface for PoissonMesh."""

import time
from pathlib import Path
from typing import Optional

import numpy as np
import trimesh
import typer
from rich.console import Console
from rich.table import Table

from poissonmesh import __version__
from poissonmesh.core import Config, PoissonMeshError, RandomSource, SamplingConfig
from poissonmesh.processing import load_mesh
from poissonmesh.sampling import (
    PoissonDiskSampler,
    SamplingFactory,
    estimate_poisson_disk_radius,
    minimum_separation,
)
from poissonmesh.utils import get_logger, log_performance, setup_logging

app = typer.Typer(
    name="poissonmesh",
    help="Sample blue-noise point clouds from triangle meshes",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)


def save_points(points: np.ndarray, output: Path) -> None:
    """Write points as .npy, or through trimesh for point cloud formats."""
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".npy":
        np.save(output, points)
    else:
        trimesh.PointCloud(points).export(output)


@app.command()
def analyze(
    mesh_file: Path = typer.Argument(
        ...,
        exists=True,
        help="Path to mesh file to analyze",
    ),
    num_points: int = typer.Option(
        4096,
        "--points",
        "-n",
        min=1,
        help="Point count used for the radius estimate",
    ),
) -> None:
    """Analyze a mesh and estimate the Poisson-disk radius for a point count."""
    try:
        mesh = load_mesh(mesh_file)
    except PoissonMeshError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    lower, upper = mesh.bounds
    table = Table(title="Mesh Information", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("File", str(mesh_file))
    table.add_row("Vertices", f"{mesh.vertex_count:,}")
    table.add_row("Faces", f"{mesh.face_count:,}")
    table.add_row("Surface Area", f"{mesh.total_area:.6f}")
    table.add_row(
        "Bounding Box",
        f"[{lower[0]:.3f}, {lower[1]:.3f}, {lower[2]:.3f}] to "
        f"[{upper[0]:.3f}, {upper[1]:.3f}, {upper[2]:.3f}]",
    )
    table.add_row("Diagonal", f"{mesh.diagonal:.6f}")
    table.add_row(
        f"Estimated Radius ({num_points:,} points)",
        f"{estimate_poisson_disk_radius(mesh.total_area, num_points):.6f}",
    )
    console.print(table)


@app.command()
def sample(
    mesh_file: Path = typer.Argument(
        ...,
        exists=True,
        help="Path to mesh file",
    ),
    num_points: Optional[int] = typer.Option(
        None,
        "--points",
        "-n",
        min=1,
        help="Target number of points",
    ),
    method: Optional[str] = typer.Option(
        None,
        "--method",
        "-m",
        help="Sampling method (poisson, montecarlo, face_center)",
    ),
    tolerance: Optional[float] = typer.Option(
        None,
        "--tolerance",
        "-t",
        help="Accepted relative deviation from the target count",
    ),
    pool: Optional[int] = typer.Option(
        None,
        "--pool",
        help="Candidates compared per grid cell",
    ),
    rate: Optional[int] = typer.Option(
        None,
        "--rate",
        help="Dense candidates drawn per target point",
    ),
    max_iter: Optional[int] = typer.Option(
        None,
        "--max-iter",
        help="Bisection iteration budget",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        "-s",
        help="Random seed",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (.npy, or any trimesh point cloud format such as .ply)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file",
    ),
    preview: bool = typer.Option(
        False,
        "--preview",
        "-p",
        help="Show statistics of the sampled points",
    ),
) -> None:
    """Sample a point cloud from a mesh file."""
    try:
        cfg = Config.from_toml(config) if config else Config()
        setup_logging(cfg.logging)

        overrides = {
            "num_points": num_points,
            "method": method,
            "tolerance": tolerance,
            "candidate_pool_size": pool,
            "montecarlo_rate": rate,
            "max_iter": max_iter,
            "seed": seed,
        }
        sampling_cfg = SamplingConfig(
            **{**cfg.sampling.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
        )

        mesh = load_mesh(mesh_file)
        sampler = SamplingFactory.from_config(sampling_cfg, source=RandomSource(sampling_cfg.seed))

        start = time.time()
        with console.status(
            f"Sampling {sampling_cfg.num_points} points using {sampling_cfg.method} method..."
        ):
            points = sampler.sample(mesh)
        log_performance(logger, "sample", time.time() - start, points=len(points))
    except (PoissonMeshError, ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Sampling Result", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Method", sampling_cfg.method)
    table.add_row("Points", f"{len(points):,}")

    if isinstance(sampler, PoissonDiskSampler) and sampler.last_result is not None:
        result = sampler.last_result
        table.add_row("Target", f"{result.target:,}")
        table.add_row("Radius", f"{result.radius:.6f}")
        table.add_row("Bisection Steps", str(result.iterations))
        table.add_row("Trials", str(result.trials))
        table.add_row("Converged", "yes" if result.converged else "no")
    console.print(table)

    if output:
        save_points(points, output)
        console.print(f"Saved point cloud to [cyan]{output}[/cyan]")

    if preview and len(points):
        console.print("\nPoint Cloud Statistics:")
        console.print(f"  • Shape: {points.shape}")
        console.print(f"  • Min: {np.round(points.min(axis=0), 3).tolist()}")
        console.print(f"  • Max: {np.round(points.max(axis=0), 3).tolist()}")
        console.print(f"  • Min separation: {minimum_separation(points):.6f}")


@app.command()
def info() -> None:
    """Display information about PoissonMesh."""
    console.print("\n[cyan]PoissonMesh[/cyan] - blue-noise point clouds from triangle meshes")
    console.print(f"Version: {__version__}")
    methods = SamplingFactory.available_methods()
    console.print(f"\nAvailable sampling methods: {', '.join(methods)}")


def main() -> None:
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()

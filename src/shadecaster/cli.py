"""CLI entry point for the Shadecaster pipeline.

Usage:
    shadecaster run                         # Run full pipeline
    shadecaster run-step s02_polar_mask -i '{"field_path": "..."}'
    shadecaster info                        # Show pipeline info
    shadecaster generate silhouette.png     # One-shot image -> STL
    shadecaster inspect shadow-lamp.stl     # Edge report for a binary STL
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from shadecaster.core.logging import setup_logging

app = typer.Typer(name="shadecaster", help="Silhouette image to shadow-lamp STL pipeline")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Run the full pipeline."""
    setup_logging()
    from shadecaster.core.pipeline_runner import run_pipeline

    run_pipeline(config)


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. s02_polar_mask)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging()
    from shadecaster.core.pipeline_runner import (
        import_step_class,
        load_pipeline_config,
        load_step_config,
        resolve_config_file,
    )

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    step_config = load_step_config(
        resolve_config_file(entry.config_file, config), step_cls.config_type
    )
    step_instance = step_cls(config=step_config, data_root=pipeline_cfg.data_root)

    input_data = dict(entry.inputs)
    if input_json:
        input_data.update(json.loads(input_json))
    else:
        schema = step_cls.input_type.model_json_schema()
        missing = [f for f in schema.get("required", []) if f not in input_data]
        if missing:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {missing}[/yellow]")
            console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
            console.print(f'  shadecaster run-step {step_name} -i \'{{"field": "value"}}\'')
            raise typer.Exit(1)

    console.print(f"[green]Running step: {step_name}[/green]")
    step_input = step_cls.input_type(**input_data)
    output = step_instance.execute(step_input)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from shadecaster.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


@app.command()
def generate(
    image: Path = typer.Argument(..., help="Silhouette image (PNG, JPEG, ...)"),
    output: Path = typer.Option(Path("shadow-lamp.stl"), "--output", "-o", help="STL file to write"),
    ascii_stl: bool = typer.Option(False, "--ascii", help="Write ASCII instead of binary STL"),
    resolution: int = typer.Option(64, help="Angular resolution (>= 3)"),
    threshold: float = typer.Option(128, help="Luminance threshold 0-255"),
    invert: bool = typer.Option(False, help="Dark areas become windows instead of wall"),
    closed_base: bool = typer.Option(False, help="Solid base disc instead of a mount bore"),
    dome_diameter: float = typer.Option(60.0, help="Outer diameter (mm)"),
    dome_height: float = typer.Option(20.0, help="Dome height (mm)"),
    wall_thickness: float = typer.Option(1.6, help="Shell thickness (mm)"),
    wall_height: float = typer.Option(25.0, help="Patterned wall height (mm)"),
    mount_diameter: float = typer.Option(38.0, help="Tea light mount diameter (mm)"),
    mount_height: float = typer.Option(16.0, help="Mount pocket depth (mm)"),
    pillars: int = typer.Option(8, help="Support pillar count (>= 3)"),
) -> None:
    """Generate an STL from one image without writing intermediate artifacts."""
    setup_logging()
    from shadecaster.core.contracts import GeometryParams, ProcessingParams
    from shadecaster.core.errors import ShadecasterError
    from shadecaster.core.generation import LampGenerator
    from shadecaster.utils.image import load_rgba

    geometry = GeometryParams(
        dome_diameter=dome_diameter,
        dome_height=dome_height,
        wall_thickness=wall_thickness,
        wall_height=wall_height,
        led_mount_diameter=mount_diameter,
        led_mount_height=mount_height,
        pillar_count=pillars,
    )
    processing = ProcessingParams(angular_resolution=resolution, threshold=threshold)
    generator = LampGenerator(cache_size=0, invert=invert, open_base=not closed_base)

    try:
        artifact = generator.generate(
            load_rgba(image), processing, geometry, fmt="ascii" if ascii_stl else "binary"
        )
    except ShadecasterError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)

    artifact.save(output)
    console.print(
        f"[green]Wrote {output} ({artifact.size / 1024:.1f} KB, {artifact.media_type})[/green]"
    )


@app.command()
def inspect(
    stl: Path = typer.Argument(..., help="Binary STL file"),
    epsilon: float = typer.Option(1e-5, help="Vertex quantization step (model units)"),
) -> None:
    """Report edge usage of a binary STL (manifold check)."""
    from shadecaster.core.errors import SerializationFailure
    from shadecaster.utils.mesh_check import inspect_stl

    try:
        report = inspect_stl(stl, epsilon=epsilon)
    except SerializationFailure as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Edge report: {stl.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Triangles", str(report.triangles))
    table.add_row("Vertices", str(report.vertices))
    table.add_row("Edges", str(report.edges))
    for uses, count in sorted(report.histogram.items()):
        table.add_row(f"Edges used {uses}x", str(count))
    table.add_row("Open edges", str(report.open_edges))
    table.add_row("Non-manifold edges", str(report.non_manifold_edges))
    table.add_row("Repeated directed edges", str(report.reversed_edges))
    table.add_row("Manifold", "Y" if report.is_manifold else "N")
    console.print(table)

    if not report.is_manifold:
        raise typer.Exit(2)


if __name__ == "__main__":
    app()

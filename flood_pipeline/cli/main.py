"""Main CLI application entry point for the flood-control project pipeline.

Usage:
    flood-pipeline --input data/projects.csv --outdir outputs
"""

from __future__ import annotations

from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from ..config.loader import get_config
from ..exceptions import FloodPipelineError
from ..pipeline import PipelineResult, run_pipeline
from ..utils.logging_config import configure_logging_from_config, setup_logging, stage_logger
from .display.errors import handle_error

app = typer.Typer(
    name="flood-pipeline",
    help="Flood-control project analytics pipeline",
    add_completion=False,
)

# Global console instance for Rich output
console = Console()


def _artifact_table(result: PipelineResult) -> Table:
    table = Table(title="Artifacts written")
    table.add_column("Artifact", style="cyan")
    table.add_column("Path")
    table.add_column("Rows", justify="right")

    rows = {
        "regional_efficiency": len(result.regional_efficiency),
        "contractor_reliability": len(result.contractor_reliability),
        "overrun_trends": len(result.overrun_trends),
    }
    for name, path in result.artifacts.items():
        table.add_row(name, str(path), str(rows[name]) if name in rows else "-")
    return table


@app.command()
def main(
    input_path: Path = typer.Option(
        ..., "--input", "-i", help="Project CSV to process", show_default=False
    ),
    outdir: Path | None = typer.Option(
        None, "--outdir", "-o", help="Output directory (defaults to output.outdir)"
    ),
    config_dir: Path | None = typer.Option(
        None, "--config-dir", help="Directory holding base.yaml and environment overlays"
    ),
    env: str | None = typer.Option(None, "--env", help="Environment overlay to merge"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Validate, clean and report on a flood-control project CSV."""
    level = "DEBUG" if verbose else None

    try:
        config = get_config(environment=env, config_dir=config_dir)
    except FloodPipelineError as e:
        setup_logging(level=level or "INFO")
        logger.error(f"configuration failed: {e.message}")
        handle_error(e)
        return

    configure_logging_from_config(config, level=level)

    try:
        result = run_pipeline(input_path, outdir=outdir, config=config, log=stage_logger())
    except FloodPipelineError as e:
        handle_error(e)
        return

    console.print(_artifact_table(result))
    console.print(
        f"[green]✓[/green] {result.summary.total_projects} projects, "
        f"{result.summary.total_contractors} contractors, "
        f"{result.summary.total_provinces} provinces"
    )


if __name__ == "__main__":
    app()

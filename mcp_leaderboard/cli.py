"""
CLI entry point for the leaderboard aggregator.

This module provides a Click-based CLI for aggregating MCP server
evaluation runs into a leaderboard report.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from . import __version__
from .core.config import OUTPUT_FORMATS, LeaderboardConfig, load_config
from .core.errors import ConfigError, ReportWriteError
from .core.loader import ArtifactLoader
from .core.types import Report
from .metrics.aggregator import AggregatedMetrics, RunSetAggregator
from .report.builder import LeaderboardBuilder
from .report.writer import write_report

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
        force=True,
    )


def _make_loader(config: LeaderboardConfig) -> ArtifactLoader:
    return ArtifactLoader(
        config.runs_dir,
        summary_filename=config.summary_filename,
        meta_filename=config.meta_filename,
        task_dir_marker=config.task_dir_marker,
    )


def _load_config_or_exit(config_path: Path | None, **overrides: object) -> LeaderboardConfig:
    try:
        return load_config(config_path, **overrides)
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/]")
        sys.exit(2)


@click.group()
@click.version_option(version=__version__, prog_name="mcp-leaderboard")
def cli() -> None:
    """MCP Leaderboard - Aggregate evaluation runs into a leaderboard."""
    pass


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to YAML configuration file",
)
@click.option(
    "--runs-dir",
    "-r",
    type=click.Path(path_type=Path),
    default=None,
    help="Root directory of server groups (default: ./mcp_servers)",
)
@click.option(
    "--k",
    "k",
    type=int,
    default=None,
    help="Number of runs to read per implementation (default: 4)",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file (default: mcp_servers.json)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default: json)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def aggregate(
    config: Path | None,
    runs_dir: Path | None,
    k: int | None,
    output_path: Path | None,
    output_format: str | None,
    verbose: bool,
) -> None:
    """Aggregate run artifacts and write the leaderboard report."""
    setup_logging(verbose)

    run_config = _load_config_or_exit(
        config,
        runs_dir=runs_dir,
        k=k,
        output_path=output_path,
        output_format=output_format,
    )

    console.print(f"[bold blue]Starting MCP data aggregation with k={run_config.k}[/]")

    loader = _make_loader(run_config)
    aggregator = RunSetAggregator(
        pricing=run_config.build_pricing(),
        precision=run_config.precision,
    )
    builder = LeaderboardBuilder(loader, aggregator, k=run_config.k)

    total = sum(len(impls) for impls in loader.discover_servers().values())

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task_progress = progress.add_task("[cyan]Aggregating...", total=total)

        def on_result(server: str, impl: str, metrics: AggregatedMetrics | None) -> None:
            progress.update(task_progress, description=f"[cyan]{server}/{impl}")
            progress.advance(task_progress)

        report = builder.build(on_result=on_result)

    try:
        written = write_report(report, run_config.output_path, run_config.output_format)
    except ReportWriteError as e:
        console.print(f"[red]Error during aggregation: {e}[/]")
        sys.exit(1)

    console.print("\n[bold green]Successfully aggregated data![/]")
    console.print(f"[bold green]Output written to {written}[/]")

    _display_summary(report)


def _display_summary(report: Report) -> None:
    """Display the leaderboard in a formatted table."""
    table = Table(title="Summary", show_header=True, header_style="bold magenta")
    table.add_column("Server", style="cyan")
    table.add_column("Implementation")
    table.add_column("Model")
    table.add_column("Tasks/Run", justify="right")
    table.add_column("Pass@1", justify="right")
    table.add_column("Pass@k", justify="right")
    table.add_column("Cost/Run", justify="right")

    for server_name, implementations in report.leaderboard.items():
        for impl_name, metrics in implementations.items():
            pass_at_k = (
                f"{metrics.pass_at_k:.1%} ({metrics.pass_at_k_key})"
                if metrics.pass_at_k is not None else "-"
            )
            cost = f"${metrics.per_run_cost:.4f}" if metrics.per_run_cost is not None else "-"
            table.add_row(
                server_name,
                impl_name,
                metrics.actual_model_name or "-",
                str(metrics.total_tasks),
                f"{metrics.pass_at_1_avg:.1%}",
                pass_at_k,
                cost,
            )

    console.print(table)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to YAML configuration file",
)
@click.option(
    "--runs-dir",
    "-r",
    type=click.Path(path_type=Path),
    default=None,
    help="Root directory of server groups",
)
def list_servers(config: Path | None, runs_dir: Path | None) -> None:
    """List discovered server groups and implementations."""
    run_config = _load_config_or_exit(config, runs_dir=runs_dir)
    servers = _make_loader(run_config).discover_servers()

    console.print(f"\n[bold]Found {len(servers)} MCP servers in {run_config.runs_dir}:[/]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Server", style="cyan")
    table.add_column("Implementations")

    for server_name, implementations in servers.items():
        table.add_row(server_name, ", ".join(implementations) or "-")

    console.print(table)


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to YAML configuration file",
)
def show_pricing(config: Path | None) -> None:
    """Show the effective token pricing (USD per 1K tokens)."""
    run_config = _load_config_or_exit(config)
    pricing = run_config.build_pricing()

    table = Table(title="Token Pricing", show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan")
    table.add_column("Input / 1K", justify="right")
    table.add_column("Output / 1K", justify="right")

    for model_id, entry in sorted(pricing.table.items()):
        table.add_row(model_id, f"{entry.input_rate:g}", f"{entry.output_rate:g}")

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

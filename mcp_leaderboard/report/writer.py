"""
Report serialization.

Writes a Report as JSON or as a Markdown summary.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..core.errors import ReportWriteError
from ..core.types import Report
from ..metrics.aggregator import AggregatedMetrics

logger = logging.getLogger(__name__)


def _pct(value: float | None) -> str:
    return "-" if value is None else f"{value:.2%}"


def _cost(value: float | None) -> str:
    return "-" if value is None else f"${value:.4f}"


def _markdown_row(name: str, metrics: AggregatedMetrics) -> str:
    pass_1 = f"{metrics.pass_at_1_avg:.2%} ± {metrics.pass_at_1_std:.2%}"
    return (
        f"| {name} | {metrics.actual_model_name or '-'} | {metrics.actual_k} | "
        f"{metrics.total_tasks} | {pass_1} | {_pct(metrics.pass_at_k)} | "
        f"{_pct(metrics.pass_power_k)} | {metrics.avg_turns:.2f} | "
        f"{_cost(metrics.per_run_cost)} |"
    )


def render_markdown(report: Report) -> str:
    """Generate a markdown leaderboard from a report."""
    lines = [
        "# MCP Server Leaderboard",
        "",
        f"Generated: {report.generated_at}",
        "",
        f"Requested runs per implementation (k): {report.k}",
        "",
    ]

    for server_name, implementations in report.leaderboard.items():
        lines.extend([f"## {server_name}", ""])

        if not implementations:
            lines.extend(["_No valid data._", ""])
            continue

        lines.extend([
            "| Implementation | Model | Runs | Tasks/Run | Pass@1 | Pass@k | Pass^k | Avg Turns | Cost/Run |",
            "|----------------|-------|------|-----------|--------|--------|--------|-----------|----------|",
        ])
        for impl_name, metrics in implementations.items():
            lines.append(_markdown_row(impl_name, metrics))
        lines.append("")

    return "\n".join(lines)


def write_report(report: Report, output_path: Path | str, format: str = "json") -> Path:
    """
    Write a report to disk.

    Args:
        report: Report to write
        output_path: Destination file
        format: Output format ("json" or "markdown")

    Returns:
        Resolved path of the written file

    Raises:
        ValueError: If the format is unknown or a value is NaN or infinite
        ReportWriteError: If the file cannot be written
    """
    output_path = Path(output_path).resolve()

    if format == "json":
        content = json.dumps(report.to_dict(), indent=2, allow_nan=False)
    elif format == "markdown":
        content = render_markdown(report)
    else:
        raise ValueError(f"Unknown format: {format}")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content)
    except OSError as e:
        raise ReportWriteError(str(e), output_path) from e

    logger.info(f"Exported {format} report to {output_path}")
    return output_path

"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from conftest import make_summary, write_run
from mcp_leaderboard.cli import cli


def test_aggregate_writes_report(runs_dir, tmp_path):
    output = tmp_path / "leaderboard.json"

    result = CliRunner().invoke(
        cli, ["aggregate", "--runs-dir", str(runs_dir), "--k", "2", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text())
    assert data["k"] == 2
    assert data["leaderboard"]["github"]["official"]["pass@2"] == 1.0
    assert "empty_impl" not in data["leaderboard"]["github"]


def test_aggregate_markdown(runs_dir, tmp_path):
    output = tmp_path / "leaderboard.md"

    result = CliRunner().invoke(
        cli,
        ["aggregate", "-r", str(runs_dir), "-o", str(output), "--format", "markdown"],
    )

    assert result.exit_code == 0, result.output
    assert output.read_text().startswith("# MCP Server Leaderboard")


def test_aggregate_write_failure_exits_nonzero(runs_dir, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    result = CliRunner().invoke(
        cli, ["aggregate", "-r", str(runs_dir), "-o", str(blocker / "out.json")]
    )

    assert result.exit_code == 1


def test_aggregate_invalid_k(runs_dir):
    result = CliRunner().invoke(cli, ["aggregate", "-r", str(runs_dir), "--k", "0"])
    assert result.exit_code == 2
    assert "k must be a positive integer" in result.output


def test_list_servers(runs_dir):
    result = CliRunner().invoke(cli, ["list-servers", "--runs-dir", str(runs_dir)])

    assert result.exit_code == 0
    assert "github" in result.output
    assert "official" in result.output


def test_show_pricing():
    result = CliRunner().invoke(cli, ["show-pricing"])

    assert result.exit_code == 0
    assert "gpt-4o" in result.output


def test_aggregate_skips_non_finite_summary(tmp_path):
    impl = tmp_path / "runs" / "github" / "official"
    write_run(impl, 1, summary=make_summary(total_tasks=4, successful_tasks=2))
    bad_run = write_run(impl, 2)
    (bad_run / "summary.json").write_text('{"total_tasks": 4, "total_agent_execution_time": NaN}')
    output = tmp_path / "leaderboard.json"

    result = CliRunner().invoke(
        cli, ["aggregate", "-r", str(tmp_path / "runs"), "--k", "2", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    text = output.read_text()
    assert "NaN" not in text
    metrics = json.loads(text)["leaderboard"]["github"]["official"]
    assert metrics["total_agent_execution_time"] == 100.0
    assert metrics["pass@1"]["avg"] == 0.25

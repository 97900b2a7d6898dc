"""Tests for leaderboard assembly and report writing."""

import json

import pytest

from conftest import make_summary, write_run
from mcp_leaderboard.core.errors import ReportWriteError
from mcp_leaderboard.core.loader import ArtifactLoader
from mcp_leaderboard.core.types import Report, RunRecord
from mcp_leaderboard.metrics.aggregator import RunSetAggregator
from mcp_leaderboard.report import LeaderboardBuilder, render_markdown, write_report


def build(runs_dir, k=4):
    return LeaderboardBuilder(ArtifactLoader(runs_dir), RunSetAggregator(), k=k).build()


def test_build_report(runs_dir):
    report = build(runs_dir)

    assert report.k == 4
    assert list(report.leaderboard) == ["github"]
    assert list(report.leaderboard["github"]) == ["official"]

    data = report.to_dict()["leaderboard"]["github"]["official"]
    assert data["total_tasks"] == 2
    assert data["pass@1"] == {"avg": 0.75, "std": 0.25}
    assert data["pass@2"] == 1.0
    assert data["pass^2"] == 0.5
    assert data["actual_model_name"] == "gpt-4o"


def test_build_reports_each_implementation(runs_dir):
    seen = []
    builder = LeaderboardBuilder(ArtifactLoader(runs_dir), RunSetAggregator(), k=2)
    builder.build(on_result=lambda server, impl, metrics: seen.append((server, impl, metrics is None)))

    assert seen == [("github", "empty_impl", True), ("github", "official", False)]


def test_server_without_valid_implementations_is_kept(tmp_path):
    (tmp_path / "slack" / "impl_a").mkdir(parents=True)

    report = build(tmp_path)

    assert report.leaderboard == {"slack": {}}
    assert report.implementation_count == 0


def test_write_json_report(runs_dir, tmp_path):
    output = tmp_path / "out" / "mcp_servers.json"

    written = write_report(build(runs_dir), output)

    data = json.loads(written.read_text())
    assert written == output.resolve()
    assert set(data) == {"generated_at", "k", "leaderboard"}
    assert data["k"] == 4
    assert "official" in data["leaderboard"]["github"]


def test_write_markdown_report(tmp_path):
    impl = tmp_path / "runs" / "notion" / "community"
    write_run(impl, 1, summary=make_summary(total_tasks=4, successful_tasks=3, model="unknown"))
    report = build(tmp_path / "runs")

    text = render_markdown(report)

    assert "## notion" in text
    assert "| community | unknown | 1 | 4 | 75.00% ± 0.00% | - | - |" in text


def test_markdown_empty_group(tmp_path):
    report = Report(k=2, leaderboard={"empty": {}})
    assert "_No valid data._" in render_markdown(report)


def test_write_report_failure_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")

    with pytest.raises(ReportWriteError):
        write_report(Report(k=1), blocker / "report.json")


def test_write_report_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        write_report(Report(k=1), tmp_path / "report.csv", format="csv")


def test_write_json_rejects_non_finite_values(tmp_path):
    metrics = RunSetAggregator().aggregate([RunRecord(run_index=1, tasks={})])
    metrics.avg_turns = float("nan")
    report = Report(k=1, leaderboard={"github": {"official": metrics}})

    with pytest.raises(ValueError):
        write_report(report, tmp_path / "report.json")

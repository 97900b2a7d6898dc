"""Shared fixtures for building run artifact trees."""

import json
from pathlib import Path

import pytest


def make_summary(
    total_tasks=10,
    successful_tasks=5,
    execution_time=100.0,
    input_tokens=1000,
    output_tokens=500,
    total_turns=20,
    model="gpt-4o",
):
    return {
        "total_tasks": total_tasks,
        "successful_tasks": successful_tasks,
        "total_agent_execution_time": execution_time,
        "token_usage": {
            "total_input_tokens": input_tokens,
            "total_output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        },
        "turn_usage": {"total_turns": total_turns},
        "model_config": {"litellm_run_model_name": model},
    }


def write_run(impl_dir: Path, index: int, summary=None, tasks=None) -> Path:
    """Write ``run-<index>`` with an optional summary and task -> success map."""
    run_dir = impl_dir / f"run-{index}"
    run_dir.mkdir(parents=True, exist_ok=True)
    if summary is not None:
        (run_dir / "summary.json").write_text(json.dumps(summary))
    for task_id, success in (tasks or {}).items():
        task_dir = run_dir / task_id
        task_dir.mkdir()
        (task_dir / "meta.json").write_text(
            json.dumps({"execution_result": {"success": success}})
        )
    return run_dir


@pytest.fixture
def runs_dir(tmp_path):
    """A results tree with one server group and two implementations."""
    root = tmp_path / "mcp_servers"

    github = root / "github"
    write_run(
        github / "official", 1,
        summary=make_summary(total_tasks=2, successful_tasks=1),
        tasks={"repo__issue_1": True, "repo__issue_2": False},
    )
    write_run(
        github / "official", 2,
        summary=make_summary(total_tasks=2, successful_tasks=2),
        tasks={"repo__issue_1": True, "repo__issue_2": True},
    )
    (github / "empty_impl").mkdir(parents=True)

    return root

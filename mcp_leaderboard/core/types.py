"""
Core type definitions for the MCP leaderboard aggregator.

This module defines the records read from run artifacts (run summaries and
per-task metadata), the per-run container handed to the aggregator, and the
top-level report document.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..metrics.aggregator import AggregatedMetrics


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    # json.load accepts NaN and Infinity
    if not math.isfinite(value):
        raise ValueError(f"Non-finite number: {value}")
    return float(value)


def _as_int(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return int(_as_float(value))


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


class TaskOutcome(Enum):
    """Outcome of one task in one run."""

    SUCCESS = "success"
    FAILURE = "failure"
    NOT_OBSERVED = "not_observed"

    @property
    def observed(self) -> bool:
        """Whether the task appeared in the run at all."""
        return self is not TaskOutcome.NOT_OBSERVED


@dataclass(frozen=True)
class RunSummary:
    """
    Run-level summary written by one benchmark execution.

    Attributes:
        total_tasks: Number of tasks attempted in the run
        total_agent_execution_time: Agent wall time in seconds
        total_input_tokens: Prompt tokens consumed
        total_output_tokens: Completion tokens produced
        total_tokens: Total tokens as reported by the run
        total_turns: Conversation turns across all tasks
        successful_tasks: Number of tasks that succeeded
        model_name: Model identifier used for the run (may be empty)
    """

    total_tasks: int = 0
    total_agent_execution_time: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_tokens: int = 0
    total_turns: int = 0
    successful_tasks: int = 0
    model_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunSummary":
        """
        Build a summary from a parsed ``summary.json`` document.

        Missing or non-numeric fields default to zero.

        Raises:
            TypeError: If the document is not a JSON object
            ValueError: If a numeric field is NaN or infinite
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

        token_usage = _section(data, "token_usage")
        turn_usage = _section(data, "turn_usage")
        model_config = _section(data, "model_config")
        model_name = model_config.get("litellm_run_model_name")

        return cls(
            total_tasks=_as_int(data.get("total_tasks")),
            total_agent_execution_time=_as_float(data.get("total_agent_execution_time")),
            total_input_tokens=_as_int(token_usage.get("total_input_tokens")),
            total_output_tokens=_as_int(token_usage.get("total_output_tokens")),
            total_tokens=_as_int(token_usage.get("total_tokens")),
            total_turns=_as_int(turn_usage.get("total_turns")),
            successful_tasks=_as_int(data.get("successful_tasks")),
            model_name=model_name if isinstance(model_name, str) else "",
        )

    @property
    def pass_at_1(self) -> float:
        """Fraction of this run's tasks that succeeded (0 for an empty run)."""
        if self.total_tasks > 0:
            return self.successful_tasks / self.total_tasks
        return 0.0


@dataclass(frozen=True)
class TaskResult:
    """
    Task-level metadata from a run's ``meta.json``.

    Attributes:
        task_id: Task directory name, stable across runs
        success: Whether the task succeeded (absent flag reads as False)
    """

    task_id: str
    success: bool = False

    @classmethod
    def from_dict(cls, task_id: str, data: dict[str, Any]) -> "TaskResult":
        """
        Build a task result from a parsed ``meta.json`` document.

        Raises:
            TypeError: If the document is not a JSON object
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

        execution_result = _section(data, "execution_result")
        return cls(task_id=task_id, success=bool(execution_result.get("success", False)))

    @property
    def outcome(self) -> TaskOutcome:
        """Observed outcome of the task."""
        return TaskOutcome.SUCCESS if self.success else TaskOutcome.FAILURE


@dataclass
class RunRecord:
    """
    Everything known about one run of an implementation.

    Attributes:
        run_index: 1-based run index (``run-<index>`` on disk)
        summary: Run summary, or None when missing or unreadable
        tasks: Task results keyed by task id, or None when not collected
    """

    run_index: int
    summary: RunSummary | None = None
    tasks: dict[str, TaskResult] | None = None

    @property
    def is_present(self) -> bool:
        """A run counts once either its summary or its task map is supplied."""
        return self.summary is not None or self.tasks is not None

    def outcome_for(self, task_id: str) -> TaskOutcome:
        """Outcome of ``task_id`` in this run."""
        task = (self.tasks or {}).get(task_id)
        if task is None:
            return TaskOutcome.NOT_OBSERVED
        return task.outcome


@dataclass
class Report:
    """
    Consolidated leaderboard document.

    Attributes:
        k: Requested number of runs per implementation
        leaderboard: Server group -> implementation -> metrics
        generated_at: ISO-8601 UTC timestamp of generation
    """

    k: int
    leaderboard: dict[str, dict[str, "AggregatedMetrics"]] = field(default_factory=dict)
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def implementation_count(self) -> int:
        """Number of implementations with metrics."""
        return sum(len(impls) for impls in self.leaderboard.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "generated_at": self.generated_at,
            "k": self.k,
            "leaderboard": {
                server: {name: metrics.to_dict() for name, metrics in impls.items()}
                for server, impls in self.leaderboard.items()
            },
        }

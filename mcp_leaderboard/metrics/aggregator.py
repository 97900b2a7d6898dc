"""
Metrics aggregation across repeated runs of one implementation.

This module folds the run summaries and task results of up to K runs into
a single AggregatedMetrics record: pass@1 mean and spread, pass@k and
pass^k over the observed runs, token and turn averages, and per-run cost.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..core.types import RunRecord, TaskOutcome
from .pricing import PricingResolver

logger = logging.getLogger(__name__)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """
    Population standard deviation (divides by N, not N-1).

    Returns 0 for sequences shorter than two values.
    """
    if len(values) <= 1:
        return 0.0
    avg = mean(values)
    return math.sqrt(sum((v - avg) ** 2 for v in values) / len(values))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def build_outcome_matrix(runs: Sequence[RunRecord]) -> dict[str, list[TaskOutcome]]:
    """
    Build task id -> outcome per run, in run order.

    Every task id seen in any run gets one slot per run; runs in which the
    task did not appear hold NOT_OBSERVED.
    """
    task_ids: dict[str, None] = {}
    for run in runs:
        for task_id in run.tasks or {}:
            task_ids.setdefault(task_id)

    return {
        task_id: [run.outcome_for(task_id) for run in runs]
        for task_id in task_ids
    }


def compute_pass_at_k_sets(
    outcomes: dict[str, list[TaskOutcome]],
) -> tuple[float, float] | None:
    """
    Compute pass@k and pass^k from a task outcome matrix.

    A task counts toward pass@k if any observed outcome is a success, and
    toward pass^k if it was observed at least once and every observed
    outcome is a success. NOT_OBSERVED slots are ignored.

    Args:
        outcomes: Task id -> outcomes per run

    Returns:
        (pass@k, pass^k), or None when no task was observed
    """
    unique_tasks = 0
    pass_at_k_count = 0
    pass_power_k_count = 0

    for task_outcomes in outcomes.values():
        successes = [o is TaskOutcome.SUCCESS for o in task_outcomes if o.observed]
        if not successes:
            continue
        unique_tasks += 1
        if any(successes):
            pass_at_k_count += 1
        if all(successes):
            pass_power_k_count += 1

    if unique_tasks == 0:
        return None

    return pass_at_k_count / unique_tasks, pass_power_k_count / unique_tasks


@dataclass
class AggregatedMetrics:
    """
    Container for the metrics of one implementation across its runs.

    ``total_tasks`` is the mean number of tasks per run; the other
    ``total_*`` fields are sums over all observed runs.
    """

    actual_k: int

    # Totals
    total_tasks: int = 0
    total_agent_execution_time: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_tokens: int = 0
    total_turns: int = 0

    # Per-task averages
    avg_agent_execution_time: float = 0.0
    avg_input_tokens: float = 0.0
    avg_output_tokens: float = 0.0
    avg_total_tokens: float = 0.0
    avg_turns: float = 0.0

    # Per-run projection
    per_run_input_tokens: float = 0.0
    per_run_output_tokens: float = 0.0
    per_run_cost: float | None = None
    actual_model_name: str = ""

    # Success metrics
    pass_at_1_avg: float = 0.0
    pass_at_1_std: float = 0.0
    pass_at_k: float | None = None
    pass_power_k: float | None = None

    @property
    def pass_at_k_key(self) -> str:
        return f"pass@{self.actual_k}"

    @property
    def pass_power_k_key(self) -> str:
        return f"pass^{self.actual_k}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "total_tasks": self.total_tasks,
            "total_agent_execution_time": self.total_agent_execution_time,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "total_tokens": self.total_tokens,
            "total_turns": self.total_turns,
            "avg_agent_execution_time": self.avg_agent_execution_time,
            "avg_input_tokens": self.avg_input_tokens,
            "avg_output_tokens": self.avg_output_tokens,
            "avg_total_tokens": self.avg_total_tokens,
            "avg_turns": self.avg_turns,
            "per_run_input_tokens": self.per_run_input_tokens,
            "per_run_output_tokens": self.per_run_output_tokens,
            "per_run_cost": self.per_run_cost,
            "actual_model_name": self.actual_model_name,
            "pass@1": {
                "avg": self.pass_at_1_avg,
                "std": self.pass_at_1_std,
            },
        }

        # Only present for multi-run sets with task-level data
        if self.pass_at_k is not None:
            result[self.pass_at_k_key] = self.pass_at_k
        if self.pass_power_k is not None:
            result[self.pass_power_k_key] = self.pass_power_k

        return result


class RunSetAggregator:
    """
    Aggregates the runs of a single implementation.

    Example:
        ```python
        aggregator = RunSetAggregator(PricingResolver())
        metrics = aggregator.aggregate(loader.collect_runs(impl_dir, k=4), requested_k=4)
        if metrics is not None:
            print(metrics.to_dict()["pass@1"])
        ```
    """

    def __init__(
        self,
        pricing: PricingResolver | None = None,
        precision: int = 4,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            pricing: Resolver used for per-run cost (defaults to built-in rates)
            precision: Decimal places for ratio and average fields
        """
        self.pricing = pricing or PricingResolver()
        self.precision = precision

    def _round(self, value: float) -> float:
        return round(value, self.precision)

    def aggregate(
        self,
        runs: Sequence[RunRecord | None],
        requested_k: int | None = None,
    ) -> AggregatedMetrics | None:
        """
        Compute metrics over the present runs.

        Args:
            runs: Run records in ascending run-index order (None = run absent)
            requested_k: Number of runs that were asked for, for logging only

        Returns:
            AggregatedMetrics, or None when no run is present
        """
        present = [run for run in runs if run is not None and run.is_present]
        actual_k = len(present)
        if actual_k == 0:
            return None

        if requested_k is not None and actual_k < requested_k:
            logger.debug(f"Only {actual_k} of {requested_k} runs present")

        total_tasks = 0
        total_agent_execution_time = 0.0
        total_input_tokens = 0
        total_output_tokens = 0
        total_tokens = 0
        total_turns = 0
        total_successful_tasks = 0
        actual_model_name = ""
        pass_1_rates: list[float] = []

        for run in present:
            summary = run.summary
            if summary is None:
                pass_1_rates.append(0.0)
                continue

            total_tasks += summary.total_tasks
            total_agent_execution_time += summary.total_agent_execution_time
            total_input_tokens += summary.total_input_tokens
            total_output_tokens += summary.total_output_tokens
            total_tokens += summary.total_tokens
            total_turns += summary.total_turns
            total_successful_tasks += summary.successful_tasks

            # First non-empty model name in run order wins
            if not actual_model_name and summary.model_name:
                actual_model_name = summary.model_name

            pass_1_rates.append(summary.pass_at_1)

        def per_task(total: float) -> float:
            return total / total_tasks if total_tasks > 0 else 0.0

        per_run_input_tokens = total_input_tokens / actual_k
        per_run_output_tokens = total_output_tokens / actual_k

        metrics = AggregatedMetrics(
            actual_k=actual_k,
            total_tasks=round_half_up(total_tasks / actual_k),
            total_agent_execution_time=self._round(total_agent_execution_time),
            total_input_tokens=total_input_tokens,
            total_output_tokens=total_output_tokens,
            total_tokens=total_tokens,
            total_turns=total_turns,
            avg_agent_execution_time=self._round(per_task(total_agent_execution_time)),
            avg_input_tokens=self._round(per_task(total_input_tokens)),
            avg_output_tokens=self._round(per_task(total_output_tokens)),
            avg_total_tokens=self._round(per_task(total_tokens)),
            avg_turns=self._round(per_task(total_turns)),
            per_run_input_tokens=per_run_input_tokens,
            per_run_output_tokens=per_run_output_tokens,
            per_run_cost=self.pricing.cost(
                actual_model_name, per_run_input_tokens, per_run_output_tokens
            ),
            actual_model_name=actual_model_name,
            pass_at_1_avg=self._round(mean(pass_1_rates)),
            pass_at_1_std=self._round(population_std(pass_1_rates)),
        )

        if actual_k > 1:
            pass_sets = compute_pass_at_k_sets(build_outcome_matrix(present))
            if pass_sets is not None:
                pass_at_k, pass_power_k = pass_sets
                metrics.pass_at_k = self._round(pass_at_k)
                metrics.pass_power_k = self._round(pass_power_k)

        logger.debug(
            f"Aggregated {actual_k} runs: {total_successful_tasks}/{total_tasks} "
            f"successful, pass@1={metrics.pass_at_1_avg}"
        )
        return metrics

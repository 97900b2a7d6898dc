"""
Leaderboard assembly.

Walks every discovered server group and implementation, aggregates the
runs of each one and collects the results into a Report.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..core.loader import ArtifactLoader
from ..core.types import Report
from ..metrics.aggregator import AggregatedMetrics, RunSetAggregator

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str, str, "AggregatedMetrics | None"], None]


class LeaderboardBuilder:
    """
    Builds a Report from a results tree.

    Example:
        ```python
        builder = LeaderboardBuilder(ArtifactLoader("./mcp_servers"), RunSetAggregator(), k=4)
        report = builder.build()
        ```
    """

    def __init__(
        self,
        loader: ArtifactLoader,
        aggregator: RunSetAggregator,
        k: int = 4,
    ) -> None:
        """
        Initialize the builder.

        Args:
            loader: Artifact loader for the results tree
            aggregator: Aggregator applied to each implementation
            k: Number of runs to read per implementation
        """
        self.loader = loader
        self.aggregator = aggregator
        self.k = k

    def build(self, on_result: ResultCallback | None = None) -> Report:
        """
        Aggregate every implementation into a report.

        Args:
            on_result: Called with (server, implementation, metrics or None)
                after each implementation is processed

        Returns:
            Report with one entry per implementation that had data
        """
        report = Report(k=self.k)
        servers = self.loader.discover_servers()
        logger.info(f"Found {len(servers)} MCP servers")

        for server_name, implementations in servers.items():
            logger.info(f"Processing {server_name}: {', '.join(implementations) or '(none)'}")
            report.leaderboard[server_name] = {}

            for impl_name, impl_dir in implementations.items():
                runs = self.loader.collect_runs(impl_dir, self.k)
                metrics = self.aggregator.aggregate(runs, requested_k=self.k)

                if metrics is not None:
                    report.leaderboard[server_name][impl_name] = metrics
                    logger.info(
                        f"{server_name}/{impl_name}: {metrics.total_tasks} tasks, "
                        f"{metrics.pass_at_1_avg:.1%} pass@1"
                    )
                else:
                    logger.warning(f"{server_name}/{impl_name}: No valid data found")

                if on_result is not None:
                    on_result(server_name, impl_name, metrics)

        return report

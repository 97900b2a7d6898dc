"""
Run artifact discovery and loading.

This module walks the results tree (server group / implementation / run)
and reads run summaries and task metadata into typed records. Unreadable
files are skipped with a warning so one bad artifact never stops the
aggregation of its siblings.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .errors import ArtifactReadError
from .types import RunRecord, RunSummary, TaskResult

logger = logging.getLogger(__name__)


def _visible_subdirs(path: Path) -> list[Path]:
    return sorted(
        child for child in path.iterdir()
        if child.is_dir() and not child.name.startswith(".")
    )


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactReadError(f"invalid JSON ({e})", path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ArtifactReadError(str(e), path) from e


def read_summary(path: Path) -> RunSummary:
    """
    Read a run summary file.

    Raises:
        ArtifactReadError: If the file is unreadable, not a JSON object, or
            holds a non-finite number
    """
    data = _read_json(path)
    try:
        return RunSummary.from_dict(data)
    except (TypeError, ValueError, OverflowError) as e:
        raise ArtifactReadError(str(e), path) from e


def read_task_result(path: Path, task_id: str) -> TaskResult:
    """
    Read a task metadata file.

    Raises:
        ArtifactReadError: If the file is unreadable or not a JSON object
    """
    data = _read_json(path)
    try:
        return TaskResult.from_dict(task_id, data)
    except TypeError as e:
        raise ArtifactReadError(str(e), path) from e


class ArtifactLoader:
    """
    Loader for evaluation run artifacts.

    Expected layout::

        <runs_dir>/<server>/<implementation>/run-<i>/summary.json
        <runs_dir>/<server>/<implementation>/run-<i>/<task__dir>/meta.json
    """

    def __init__(
        self,
        runs_dir: Path | str,
        summary_filename: str = "summary.json",
        meta_filename: str = "meta.json",
        task_dir_marker: str = "__",
    ) -> None:
        """
        Initialize the loader.

        Args:
            runs_dir: Root directory holding one directory per server group
            summary_filename: Name of the run summary file inside a run dir
            meta_filename: Name of the task metadata file inside a task dir
            task_dir_marker: Substring that identifies task directories
        """
        self.runs_dir = Path(runs_dir)
        self.summary_filename = summary_filename
        self.meta_filename = meta_filename
        self.task_dir_marker = task_dir_marker

    def discover_servers(self) -> dict[str, dict[str, Path]]:
        """
        Discover server groups and their implementations.

        Returns:
            Server group name -> implementation name -> implementation dir
        """
        if not self.runs_dir.is_dir():
            logger.error(f"Runs directory not found: {self.runs_dir}")
            return {}

        try:
            server_dirs = _visible_subdirs(self.runs_dir)
        except OSError as e:
            logger.error(f"Failed to list runs directory {self.runs_dir}: {e}")
            return {}

        servers: dict[str, dict[str, Path]] = {}
        for server_dir in server_dirs:
            try:
                impl_dirs = _visible_subdirs(server_dir)
            except OSError as e:
                logger.warning(f"Skipping server group {server_dir.name}: {e}")
                continue
            servers[server_dir.name] = {impl_dir.name: impl_dir for impl_dir in impl_dirs}

        logger.debug(f"Discovered {len(servers)} server groups in {self.runs_dir}")
        return servers

    def collect_runs(self, impl_dir: Path, k: int) -> list[RunRecord | None]:
        """
        Collect the records of runs 1..k of an implementation.

        Args:
            impl_dir: Implementation directory
            k: Number of runs to look for

        Returns:
            One entry per run index; None where the run directory is missing
        """
        return [self.load_run(Path(impl_dir) / f"run-{i}", i) for i in range(1, k + 1)]

    def load_run(self, run_dir: Path, run_index: int) -> RunRecord | None:
        """
        Load one run directory.

        Returns None if the directory does not exist. An existing directory
        always yields a record, with a missing summary and/or an empty task
        map when its contents are unreadable.
        """
        try:
            if not run_dir.is_dir():
                return None
        except OSError as e:
            logger.warning(f"Skipping unreadable run {run_dir}: {e}")
            return None

        return RunRecord(
            run_index=run_index,
            summary=self._load_summary(run_dir),
            tasks=self._load_tasks(run_dir),
        )

    def _load_summary(self, run_dir: Path) -> RunSummary | None:
        summary_path = run_dir / self.summary_filename
        try:
            if not summary_path.exists():
                logger.warning(f"No {self.summary_filename} in {run_dir}")
                return None
            return read_summary(summary_path)
        except (ArtifactReadError, OSError) as e:
            logger.warning(f"Failed to read summary for {run_dir}: {e}")
            return None

    def _load_tasks(self, run_dir: Path) -> dict[str, TaskResult]:
        tasks: dict[str, TaskResult] = {}
        try:
            task_dirs = [
                d for d in _visible_subdirs(run_dir) if self.task_dir_marker in d.name
            ]
        except OSError as e:
            logger.warning(f"Failed to list tasks in {run_dir}: {e}")
            return tasks

        for task_dir in task_dirs:
            meta_path = task_dir / self.meta_filename
            try:
                if not meta_path.exists():
                    continue
                tasks[task_dir.name] = read_task_result(meta_path, task_dir.name)
            except (ArtifactReadError, OSError) as e:
                logger.warning(f"Failed to read meta for {task_dir.name}: {e}")

        return tasks

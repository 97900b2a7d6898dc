"""Exception hierarchy for the leaderboard aggregator."""

from __future__ import annotations

from pathlib import Path


class LeaderboardError(Exception):
    """Base exception for leaderboard errors."""

    pass


class ConfigError(LeaderboardError):
    """Raised when the configuration is invalid."""

    pass


class ArtifactReadError(LeaderboardError):
    """Raised when a single run artifact cannot be read or parsed."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class ReportWriteError(LeaderboardError):
    """Raised when the final report cannot be written."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"Failed to write report to {path}: {message}")
        self.path = path

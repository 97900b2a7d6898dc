"""
Configuration management for the leaderboard aggregator.

This module provides YAML-based configuration with environment variable
substitution and validation.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..metrics.pricing import PricingResolver
from .errors import ConfigError

OUTPUT_FORMATS = ("json", "markdown")


@dataclass
class LeaderboardConfig:
    """
    Complete configuration for an aggregation run.

    Attributes:
        runs_dir: Root directory with one subdirectory per server group
        k: Number of runs to read per implementation (run-1 .. run-k)
        output_path: Where to write the report
        output_format: Report format ("json" or "markdown")
        precision: Decimal places for ratio and average fields
        summary_filename: Run summary file name
        meta_filename: Task metadata file name
        task_dir_marker: Substring identifying task directories inside a run
        pricing: Model pricing overrides, model -> {"input": rate, "output": rate}
    """

    runs_dir: Path = field(default_factory=lambda: Path("./mcp_servers"))
    k: int = 4
    output_path: Path = field(default_factory=lambda: Path("mcp_servers.json"))
    output_format: str = "json"
    precision: int = 4

    summary_filename: str = "summary.json"
    meta_filename: str = "meta.json"
    task_dir_marker: str = "__"

    pricing: dict[str, dict[str, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Convert paths."""
        if isinstance(self.runs_dir, str):
            self.runs_dir = Path(self.runs_dir)
        if isinstance(self.output_path, str):
            self.output_path = Path(self.output_path)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "LeaderboardConfig":
        """
        Load configuration from a YAML file.

        Supports environment variable substitution using ${VAR} syntax.

        Args:
            path: Path to the YAML configuration file

        Returns:
            LeaderboardConfig instance
        """
        path = Path(path)
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration in {path} must be a mapping")

        # Substitute environment variables
        data = cls._substitute_env_vars(data)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeaderboardConfig":
        """
        Create configuration from a dictionary.

        Raises:
            ConfigError: If the dictionary has unknown keys
        """
        data = dict(data)
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        # YAML substitution leaves numbers as strings
        for key in ("k", "precision"):
            if isinstance(data.get(key), str):
                try:
                    data[key] = int(data[key])
                except ValueError as e:
                    raise ConfigError(f"{key} must be an integer, got {data[key]!r}") from e

        return cls(**data)

    @staticmethod
    def _substitute_env_vars(data: Any) -> Any:
        """
        Recursively substitute ${VAR} patterns with environment variables.

        Args:
            data: Data to process (dict, list, or scalar)

        Returns:
            Data with environment variables substituted
        """
        if isinstance(data, str):
            # Match ${VAR} or ${VAR:default}
            pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

            def replace(match: re.Match[str]) -> str:
                value = os.environ.get(match.group(1))
                if value is None:
                    default = match.group(2)
                    return default if default is not None else match.group(0)
                return value

            return re.sub(pattern, replace, data)

        elif isinstance(data, dict):
            return {k: LeaderboardConfig._substitute_env_vars(v) for k, v in data.items()}

        elif isinstance(data, list):
            return [LeaderboardConfig._substitute_env_vars(v) for v in data]

        return data

    def validate(self) -> None:
        """
        Check the configuration for invalid values.

        Raises:
            ConfigError: On the first invalid value found
        """
        if not isinstance(self.k, int) or self.k < 1:
            raise ConfigError(f"k must be a positive integer, got {self.k!r}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Unknown output format: {self.output_format}. "
                f"Available: {', '.join(OUTPUT_FORMATS)}"
            )
        if not isinstance(self.precision, int) or self.precision < 0:
            raise ConfigError(f"precision must be a non-negative integer, got {self.precision!r}")
        if not isinstance(self.pricing, dict):
            raise ConfigError("pricing must be a mapping of model -> rates")
        self.build_pricing()

    def build_pricing(self) -> PricingResolver:
        """
        Create the pricing resolver: built-in rates plus configured overrides.

        Raises:
            ConfigError: If an override is malformed
        """
        try:
            return PricingResolver.with_overrides(self.pricing)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid pricing override: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "runs_dir": str(self.runs_dir),
            "k": self.k,
            "output_path": str(self.output_path),
            "output_format": self.output_format,
            "precision": self.precision,
            "summary_filename": self.summary_filename,
            "meta_filename": self.meta_filename,
            "task_dir_marker": self.task_dir_marker,
            "pricing": self.pricing,
        }

    def to_yaml(self, path: Path | str) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to save the configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)


def load_config(path: Path | str | None = None, **overrides: Any) -> LeaderboardConfig:
    """
    Load configuration from file or create default, with optional overrides.

    Overrides set to None are ignored so CLI options can be passed through
    unconditionally.

    Args:
        path: Optional path to YAML configuration file
        **overrides: Values to override in the configuration

    Returns:
        Validated LeaderboardConfig instance
    """
    if path:
        config = LeaderboardConfig.from_yaml(path)
    else:
        config = LeaderboardConfig()

    for key, value in overrides.items():
        if value is None:
            continue
        if not hasattr(config, key):
            raise ConfigError(f"Unknown configuration key: {key}")
        setattr(config, key, value)

    config.__post_init__()
    config.validate()
    return config

"""Leaderboard aggregation for MCP server evaluation runs."""

__version__ = "0.1.0"

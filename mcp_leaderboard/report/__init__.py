"""Leaderboard assembly and report output."""

from .builder import LeaderboardBuilder
from .writer import render_markdown, write_report

__all__ = ["LeaderboardBuilder", "render_markdown", "write_report"]

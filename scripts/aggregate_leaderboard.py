#!/usr/bin/env python3
"""
Aggregate MCP server evaluation runs into a leaderboard report.

Usage:
    python scripts/aggregate_leaderboard.py aggregate --k 4 --output mcp_servers.json
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mcp_leaderboard.cli import main

if __name__ == "__main__":
    main()

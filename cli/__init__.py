"""
CLI module for Modgraph.

The command-line interface providing analyze, dot, graph, and inspect commands.
"""

from cli.main import app

__all__ = ["app"]

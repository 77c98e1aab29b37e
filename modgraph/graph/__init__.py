"""
Graph module for Modgraph.

This module provides Graphviz rendering of dependency edges, export to
images through the ``dot`` tool, and a NetworkX-based module graph for
structural queries.
"""

from modgraph.graph.builder import ModuleGraph
from modgraph.graph.export import (
    ExportSettings,
    GraphExporter,
    default_viewer_command,
    run,
)
from modgraph.graph.render import format_edge, render_dot

__all__ = [
    "ModuleGraph",
    "ExportSettings",
    "GraphExporter",
    "default_viewer_command",
    "run",
    "format_edge",
    "render_dot",
]

"""
Modgraph Engine

Core engine for parsing Elixir code, extracting module dependencies with
alias resolution, and rendering them as a Graphviz graph.
"""

from modgraph.models import DependencyEdge, ModulePath, AnalysisResult

__all__ = ["DependencyEdge", "ModulePath", "AnalysisResult"]
__version__ = "0.1.0"

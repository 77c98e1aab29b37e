"""
Graphviz Description Renderer

Formats dependency edges as a Graphviz ``digraph`` description:

    digraph G {
      "Tester.One" -> "String";
      "Tester.Two" -> "Tester.One";
    }

The output is deterministic and order preserving: no sorting, no
deduplication. Module names are assumed to be safe identifier sequences
and are not escaped.
"""

from typing import Iterable

from modgraph.models import DependencyEdge

GRAPH_NAME = "G"
INDENT = "  "


def format_edge(edge: DependencyEdge) -> str:
    """Format one edge as an indented DOT edge statement."""
    source, target = edge.pair
    return f'{INDENT}"{source}" -> "{target}";'


def render_dot(edges: Iterable[DependencyEdge]) -> str:
    """
    Render edges as a Graphviz description.

    Args:
        edges: Dependency edges, rendered in the given order

    Returns:
        The description text, ending with a single newline

    Example:
        >>> from modgraph.models import ModulePath
        >>> edge = DependencyEdge(ModulePath.of("A"), ModulePath.of("lists"))
        >>> print(render_dot([edge]), end="")
        digraph G {
          "A" -> "lists";
        }
    """
    lines = [f"digraph {GRAPH_NAME} {{"]
    lines.extend(format_edge(edge) for edge in edges)
    lines.append("}")
    return "\n".join(lines) + "\n"

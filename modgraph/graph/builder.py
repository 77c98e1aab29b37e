"""
Module Graph for Modgraph

This module wraps the extracted edge list in a NetworkX multigraph so the
CLI can answer questions about a codebase's module structure.

Design Decisions:
    - Uses NetworkX MultiDiGraph: repeated edges from different
      definitions or files are kept, matching the edge list
    - Node IDs are dotted module names
    - The edge list stays authoritative for rendering; graph iteration
      order is not used for output

Graph Properties:
    - Directed: edges point from the depending module to its dependency
    - May have cycles (mutually dependent modules are legal Elixir)
    - Contains external modules (String, lists) as plain nodes
"""

from typing import Iterable, Iterator

import networkx as nx

from modgraph.models import DependencyEdge


class ModuleGraph:
    """
    A graph representation of module dependencies.

    Attributes:
        graph: The underlying NetworkX MultiDiGraph
        defined_modules: Modules that appear as the source of an edge or
            were registered as defined

    Usage:
        graph = ModuleGraph.from_edges(edges)
        for module in graph.dependencies_of("Tester.One"):
            print(module)
    """

    def __init__(self) -> None:
        """Initialize an empty module graph."""
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._defined: set[str] = set()

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[DependencyEdge],
        modules: Iterable[str] = (),
    ) -> "ModuleGraph":
        """
        Build a graph from edges and, optionally, defined module names.

        Modules without any dependency only appear if listed in ``modules``.
        """
        graph = cls()
        for module in modules:
            graph.add_module(module)
        for edge in edges:
            graph.add_edge(edge)
        return graph

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Access the underlying NetworkX graph."""
        return self._graph

    @property
    def module_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def defined_modules(self) -> set[str]:
        return set(self._defined)

    def add_module(self, name: str) -> None:
        """Register a module defined in the analyzed sources."""
        self._graph.add_node(name, defined=True)
        self._defined.add(name)

    def add_edge(self, edge: DependencyEdge) -> None:
        source, target = edge.pair
        if source not in self._defined:
            self.add_module(source)
        self._graph.add_edge(source, target)

    def __contains__(self, name: object) -> bool:
        return name in self._graph

    def modules(self) -> list[str]:
        """All module names, sorted."""
        return sorted(self._graph.nodes)

    def external_modules(self) -> list[str]:
        """Referenced modules not defined in the analyzed sources, sorted."""
        return sorted(name for name in self._graph.nodes if name not in self._defined)

    def dependencies_of(self, name: str) -> Iterator[str]:
        """
        Get the distinct modules a module depends on directly.

        Yields:
            Successor module names, without repeats
        """
        if name in self._graph:
            yield from self._graph.successors(name)

    def dependents_of(self, name: str) -> Iterator[str]:
        """
        Get the distinct modules that depend on a module directly.

        Yields:
            Predecessor module names, without repeats
        """
        if name in self._graph:
            yield from self._graph.predecessors(name)

    def transitive_dependents(self, name: str) -> set[str]:
        """
        Get every module affected by a change to the given module.

        Returns:
            All modules with a dependency path to ``name``
        """
        if name not in self._graph:
            return set()
        return nx.ancestors(self._graph, name)

    def cycles(self) -> list[list[str]]:
        """
        Find dependency cycles, ignoring repeated edges.

        Returns:
            Each elementary cycle in dependency order, starting from its
            alphabetically first module
        """
        simple = nx.DiGraph(self._graph)
        return sorted(_rotate(cycle) for cycle in nx.simple_cycles(simple))

    def cycles_through(self, name: str) -> list[list[str]]:
        """Cycles that include the given module."""
        return [cycle for cycle in self.cycles() if name in cycle]


def _rotate(cycle: list[str]) -> list[str]:
    start = cycle.index(min(cycle))
    return cycle[start:] + cycle[:start]

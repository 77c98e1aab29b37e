"""
Module Dependency Extractor

This module provides the core analysis of Modgraph: given the lowered
syntax tree of one source unit, it finds every module definition and
the modules each one depends on.

Key Components:
    - DefinitionCollector: Visitor that finds every module definition
    - ScopeCollector: Visitor that gathers references and alias directives
      from one definition's body
    - resolve_references: Rewrites aliased references to their real paths
    - extract: Main entry point for a parsed tree
    - extract_from_source: Entry point for a source string

Design Decisions:
    - Every definition is its own scope: a nested definition is walked
      separately and never sees, or leaks, its parent's aliases
    - A module never depends on itself; self-mentions are dropped by
      structural comparison with the defining path, not by position
    - Alias declarations are not references. ``alias Foo.Bar`` alone adds
      no edge; ``require Foo.Bar, as: B`` does, since require is a
      compile-time dependency
    - Raw references are deduplicated per module before resolution;
      resolved targets, and edges from different modules or units, are
      never merged

Limitations:
    - Purely syntactic: macros are not expanded and aliases do not cross
      definitions or files
    - Aliases apply to the whole definition body regardless of where in
      the body they are declared
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable

from modgraph.models import (
    AliasDirective,
    BareAlias,
    DependencyEdge,
    GroupedAlias,
    ModulePath,
    RenamedAlias,
)
from modgraph.parser.elixir import MODULE_SELF, parse_source
from modgraph.parser.nodes import (
    AliasAs,
    AliasBare,
    AliasGroup,
    Definition,
    NamespacedPath,
    NodeVisitor,
    QualifiedAccess,
    RequireAs,
    SyntaxNode,
)

logger = logging.getLogger(__name__)


@dataclass
class ModuleScope:
    """
    Raw dependency evidence gathered from one definition's body.

    Attributes:
        path: The defining module's path
        references: Distinct referenced paths, in encounter order, before
            alias resolution (the module's own path is never included)
        aliases: Alias directives declared in the body, in encounter order
    """

    path: ModulePath
    references: list[ModulePath] = field(default_factory=list)
    aliases: list[AliasDirective] = field(default_factory=list)


class DefinitionCollector(NodeVisitor):
    """
    Visitor that collects module definitions in preorder.

    Nested definitions are collected as well. A nested definition spelled
    ``defmodule __MODULE__.Child`` is given its enclosing module's path as
    prefix.

    Usage:
        collector = DefinitionCollector()
        collector.walk(tree)
        definitions = collector.definitions
    """

    def __init__(self) -> None:
        self.definitions: list[Definition] = []
        self._stack: list[ModulePath] = []

    def visit_Definition(self, node: Definition) -> bool:
        path = node.path
        if path.first == MODULE_SELF and self._stack:
            path = self._stack[-1] + path.rest
            node = replace(node, path=path)
        self._stack.append(path)
        self.definitions.append(node)
        return True

    def leave_Definition(self, node: Definition) -> None:
        self._stack.pop()


class ScopeCollector(NodeVisitor):
    """
    Visitor that gathers references and aliases from one definition body.

    Handles:
        - Qualified access: ``String.length(x)`` references ``String``
        - Atom qualifiers: ``:lists.sort(x)`` references ``lists``
        - Standalone paths: ``use GenServer``, ``%User{}``, ``@behaviour Foo``
        - Alias directives in all three shapes, plus ``require ... as:``

    Nested definitions are skipped; they are separate scopes.

    Usage:
        scope = ScopeCollector(definition.path).collect(definition)
    """

    def __init__(self, module_path: ModulePath) -> None:
        self.module_path = module_path
        self.references: list[ModulePath] = []
        self.aliases: list[AliasDirective] = []
        self._seen: set[ModulePath] = set()

    def collect(self, definition: Definition) -> ModuleScope:
        """Walk the definition body and return what was gathered."""
        for node in definition.body:
            self.walk(node)
        return ModuleScope(
            path=self.module_path,
            references=list(self.references),
            aliases=list(self.aliases),
        )

    def visit_Definition(self, node: Definition) -> bool:
        return False

    def visit_QualifiedAccess(self, node: QualifiedAccess) -> None:
        self._add_reference(node.qualifier)

    def visit_NamespacedPath(self, node: NamespacedPath) -> None:
        self._add_reference(node.path)

    def visit_AliasBare(self, node: AliasBare) -> None:
        self.aliases.append(BareAlias(self._expand_self(node.target)))

    def visit_AliasAs(self, node: AliasAs) -> None:
        self.aliases.append(RenamedAlias(self._expand_self(node.target), node.alias))

    def visit_AliasGroup(self, node: AliasGroup) -> None:
        self.aliases.append(GroupedAlias(self._expand_self(node.prefix), node.suffixes))

    def visit_RequireAs(self, node: RequireAs) -> None:
        target = self._expand_self(node.target)
        self._add_reference(target)
        self.aliases.append(RenamedAlias(target, node.alias))

    def _expand_self(self, path: ModulePath) -> ModulePath:
        if path.first == MODULE_SELF:
            return self.module_path + path.rest
        return path

    def _add_reference(self, path: ModulePath) -> None:
        path = self._expand_self(path)
        if path == self.module_path or path in self._seen:
            return
        self._seen.add(path)
        self.references.append(path)


class AliasTable:
    """
    Lookup table built from one scope's alias directives.

    Shapes are consulted in a fixed order: bare, renamed, grouped. Within
    one shape a later declaration replaces an earlier one with the same
    local name.
    """

    def __init__(self, aliases: Iterable[AliasDirective]) -> None:
        self._bare: dict[str, ModulePath] = {}
        self._renamed: dict[str, ModulePath] = {}
        self._renamed_paths: dict[ModulePath, ModulePath] = {}
        self._grouped: dict[str, ModulePath] = {}

        for directive in aliases:
            if isinstance(directive, BareAlias):
                self._bare[directive.local_name] = directive.target
            elif isinstance(directive, RenamedAlias):
                if len(directive.alias) == 1:
                    self._renamed[directive.alias.first] = directive.target
                else:
                    self._renamed_paths[directive.alias] = directive.target
            elif isinstance(directive, GroupedAlias):
                for expanded in directive.expand():
                    self._grouped[expanded.local_name] = expanded.target

    def resolve(self, reference: ModulePath) -> ModulePath:
        """
        Return the real path of a reference.

        A reference whose leading segment is not an alias is returned
        unchanged.
        """
        head = reference.first
        if head in self._bare:
            return self._bare[head] + reference.rest
        if reference in self._renamed_paths:
            return self._renamed_paths[reference]
        if head in self._renamed:
            return self._renamed[head] + reference.rest
        if head in self._grouped:
            return self._grouped[head] + reference.rest
        return reference


def resolve_references(
    module_path: ModulePath,
    references: Iterable[ModulePath],
    aliases: Iterable[AliasDirective],
) -> list[ModulePath]:
    """
    Resolve raw references of one module through its alias directives.

    Args:
        module_path: The defining module, excluded from the result
        references: Raw referenced paths in encounter order
        aliases: Alias directives declared in the same definition

    Returns:
        Resolved paths in encounter order, one per reference; two
        references resolving to the same path both appear

    Example:
        >>> resolve_references(
        ...     ModulePath.of("M"),
        ...     [ModulePath.of("C")],
        ...     [BareAlias(ModulePath.of("A", "B", "C"))],
        ... )
        [ModulePath(segments=('A', 'B', 'C'))]
    """
    table = AliasTable(aliases)
    resolved: list[ModulePath] = []
    for reference in references:
        target = table.resolve(reference)
        if target == module_path:
            continue
        resolved.append(target)
    return resolved


def find_definitions(tree: SyntaxNode) -> list[Definition]:
    """Return every module definition in the tree, in preorder."""
    collector = DefinitionCollector()
    collector.walk(tree)
    return collector.definitions


def collect_scope(definition: Definition) -> ModuleScope:
    """Gather the raw references and aliases of one definition."""
    return ScopeCollector(definition.path).collect(definition)


def extract_definitions(definitions: Iterable[Definition]) -> list[DependencyEdge]:
    """
    Produce dependency edges for already-located definitions.

    Each definition is analyzed independently of the others.
    """
    edges: list[DependencyEdge] = []
    for definition in definitions:
        scope = collect_scope(definition)
        targets = resolve_references(scope.path, scope.references, scope.aliases)
        logger.debug(
            "%s (line %d): %d reference(s), %d alias(es), %d dependenc%s",
            scope.path,
            definition.line,
            len(scope.references),
            len(scope.aliases),
            len(targets),
            "y" if len(targets) == 1 else "ies",
        )
        edges.extend(DependencyEdge(scope.path, target) for target in targets)
    return edges


def extract(tree: SyntaxNode) -> list[DependencyEdge]:
    """
    Extract module dependency edges from one parsed source unit.

    This is the main entry point for lowered trees, whether produced by
    the Elixir parser or built directly.

    Args:
        tree: Root of the lowered syntax tree

    Returns:
        Edges grouped by definition, in definition order
    """
    return extract_definitions(find_definitions(tree))


def extract_from_source(
    source: str,
    source_name: str = "<source>",
) -> list[DependencyEdge]:
    """
    Extract module dependency edges from Elixir source code.

    Args:
        source: Elixir source code as a string
        source_name: Identifier used in error messages

    Returns:
        List of DependencyEdge objects

    Raises:
        ParseFailure: If the source code has syntax errors

    Example:
        >>> source = '''
        ... defmodule Greeter do
        ...   def hello(name), do: String.upcase(name)
        ... end
        ... '''
        >>> [edge.pair for edge in extract_from_source(source)]
        [('Greeter', 'String')]
    """
    return extract(parse_source(source, source_name=source_name))

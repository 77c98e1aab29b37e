"""
Syntax Node Model for Modgraph

The extractor never sees tree-sitter nodes directly. The parser adapter
lowers the concrete syntax tree into this small, closed set of node kinds,
keeping only the shapes that matter for module dependencies:

    Definition       defmodule Foo.Bar do ... end
    QualifiedAccess  Foo.Bar.fun(...) or :lists.fun(...)
    NamespacedPath   a standalone Foo.Bar anywhere in a body
    AliasBare        alias Foo.Bar
    AliasAs          alias Foo.Bar, as: Baz
    AliasGroup       alias Foo.{Bar, Baz}
    RequireAs        require Foo.Bar, as: Baz
    Other            every other construct, kept only for its children

Directive nodes hold their argument paths as plain ModulePath values, not
as child nodes, so walking a tree never reports an alias declaration as a
standalone reference.
"""

from dataclasses import dataclass
from typing import Optional

from modgraph.models import ModulePath


class SyntaxNode:
    """Base class of every lowered node."""

    @property
    def children(self) -> tuple["SyntaxNode", ...]:
        return ()


@dataclass(frozen=True)
class Definition(SyntaxNode):
    """
    A module definition.

    Attributes:
        path: The module path as written after ``defmodule``
        body: Nodes lexically inside the definition's ``do`` block
        line: 1-indexed line of the definition, 0 when unknown
    """

    path: ModulePath
    body: tuple[SyntaxNode, ...] = ()
    line: int = 0

    @property
    def children(self) -> tuple[SyntaxNode, ...]:
        return self.body


@dataclass(frozen=True)
class QualifiedAccess(SyntaxNode):
    """
    A remote call or access through a module qualifier.

    Attributes:
        qualifier: The receiving module (``String`` in ``String.length(x)``)
        name: The function or field being accessed
        arguments: Lowered argument nodes
    """

    qualifier: ModulePath
    name: str
    arguments: tuple[SyntaxNode, ...] = ()

    @property
    def children(self) -> tuple[SyntaxNode, ...]:
        return self.arguments


@dataclass(frozen=True)
class NamespacedPath(SyntaxNode):
    path: ModulePath


@dataclass(frozen=True)
class AliasBare(SyntaxNode):
    target: ModulePath


@dataclass(frozen=True)
class AliasAs(SyntaxNode):
    target: ModulePath
    alias: ModulePath


@dataclass(frozen=True)
class AliasGroup(SyntaxNode):
    prefix: ModulePath
    suffixes: tuple[ModulePath, ...]


@dataclass(frozen=True)
class RequireAs(SyntaxNode):
    target: ModulePath
    alias: ModulePath


@dataclass(frozen=True)
class Other(SyntaxNode):
    """Any construct without dependency meaning of its own."""

    kind: str
    nodes: tuple[SyntaxNode, ...] = ()

    @property
    def children(self) -> tuple[SyntaxNode, ...]:
        return self.nodes


class NodeVisitor:
    """
    Depth-first, preorder walker over lowered nodes.

    Subclasses define ``visit_<Kind>`` and ``leave_<Kind>`` methods, where
    ``<Kind>`` is the node class name. Returning ``False`` from a visit
    method skips that node's children; any other return value descends.

    Usage:
        class PathCounter(NodeVisitor):
            def __init__(self):
                self.count = 0

            def visit_NamespacedPath(self, node):
                self.count += 1

        counter = PathCounter()
        counter.walk(tree)
    """

    def walk(self, node: SyntaxNode) -> None:
        # Iterative, so nesting depth is not bounded by the recursion limit
        stack: list[tuple[SyntaxNode, bool]] = [(node, False)]
        while stack:
            current, leaving = stack.pop()
            kind = type(current).__name__
            if leaving:
                leave = getattr(self, f"leave_{kind}", None)
                if leave is not None:
                    leave(current)
                continue

            visit = getattr(self, f"visit_{kind}", None)
            descend: Optional[bool] = visit(current) if visit is not None else None
            stack.append((current, True))
            if descend is not False:
                stack.extend((child, False) for child in reversed(current.children))

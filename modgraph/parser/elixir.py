"""
Tree-sitter Elixir Parser Adapter

This module is the parse boundary of Modgraph. It parses Elixir source with
the tree-sitter Elixir grammar and lowers the concrete syntax tree into the
closed node model of ``modgraph.parser.nodes``.

Key Components:
    - parse_source: Parse a source string into a lowered tree
    - parse_file: Read a UTF-8 file and parse it
    - get_parser: Cached tree-sitter parser for the Elixir grammar

Design Decisions:
    - Uses tree-sitter (through tree-sitter-language-pack) rather than a
      hand-written parser; tree-sitter recovers from errors, so any tree
      containing an ERROR or missing node is rejected as a ParseFailure
    - Dotted aliases (``Foo.Bar``) are single tokens in this grammar; the
      segments are split here and whitespace around dots is ignored
    - Only syntactic evidence is used: no macro expansion, no evaluation

Lowering Rules:
    defmodule/defprotocol <alias> do ... end   -> Definition
    <alias>.fun(...) / :atom.fun(...)          -> QualifiedAccess
    alias <path>                               -> AliasBare
    alias <path>, as: <alias>                  -> AliasAs
    alias <prefix>.{<alias>, ...}              -> AliasGroup
    require <path>, as: <alias>                -> RequireAs
    <alias> / __MODULE__.<alias>               -> NamespacedPath
    anything else                              -> Other
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from modgraph.errors import InputUnreadable, ParseFailure
from modgraph.models import ModulePath
from modgraph.parser.nodes import (
    AliasAs,
    AliasBare,
    AliasGroup,
    Definition,
    NamespacedPath,
    Other,
    QualifiedAccess,
    RequireAs,
    SyntaxNode,
)

logger = logging.getLogger(__name__)

LANGUAGE_NAME = "elixir"

# Macros whose first argument names the module being defined
DEFINITION_MACROS = frozenset({"defmodule", "defprotocol"})

# Placeholder segment for the enclosing module, substituted by the extractor
MODULE_SELF = "__MODULE__"


@lru_cache(maxsize=None)
def get_parser() -> Parser:
    """Return a tree-sitter parser for Elixir, created once per process."""
    logger.debug("Loading tree-sitter grammar: %s", LANGUAGE_NAME)
    return Parser(get_language(LANGUAGE_NAME))


def parse_source(source: str, source_name: str = "<source>") -> SyntaxNode:
    """
    Parse Elixir source code into a lowered syntax tree.

    Args:
        source: Elixir source code as a string
        source_name: Identifier used in error messages

    Returns:
        The lowered root node (an ``Other`` of kind "source")

    Raises:
        ParseFailure: If the source contains syntax errors

    Example:
        >>> tree = parse_source("defmodule Foo do\\n  Bar.baz()\\nend\\n")
        >>> tree.children[0].path
        ModulePath(segments=('Foo',))
    """
    tree = get_parser().parse(source.encode("utf-8"))
    root = tree.root_node

    if root.has_error:
        line, column = _first_error_position(root)
        raise ParseFailure(source_name, line, column)

    return _lower(root)


def parse_file(file_path: Path | str) -> SyntaxNode:
    """
    Read and parse an Elixir source file.

    Raises:
        InputUnreadable: If the file is missing, unreadable or not UTF-8
        ParseFailure: If the file has syntax errors
    """
    file_path = Path(file_path)

    try:
        source = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputUnreadable(str(file_path), str(e)) from e

    return parse_source(source, source_name=str(file_path))


def _first_error_position(root: Node) -> tuple[Optional[int], Optional[int]]:
    """Locate the first ERROR or missing node, as 1-indexed (line, column)."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            return row + 1, column + 1
        # Reverse so the leftmost child is examined first
        stack.extend(reversed(node.children))
    return None, None


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _child_of_type(node: Node, node_type: str) -> Optional[Node]:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


Lowered = dict[int, SyntaxNode]


def _lower(root: Node) -> SyntaxNode:
    """
    Lower a tree-sitter tree bottom-up without recursion.

    Every named node is lowered after its named children, so each shape
    only looks up already-lowered nodes. Deeply nested input such as a
    long pipeline cannot exhaust the interpreter stack.
    """
    lowered: Lowered = {}
    stack = [(root, False)]
    while stack:
        node, children_done = stack.pop()
        if children_done:
            lowered[node.id] = _lower_node(node, lowered)
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.named_children))
    return lowered[root.id]


def _lower_node(node: Node, lowered: Lowered) -> SyntaxNode:
    if node.type == "call":
        return _lower_call(node, lowered)

    if node.type in ("alias", "dot"):
        path = _module_path(node)
        if path is not None:
            return NamespacedPath(path)

    return _lower_generic(node, lowered)


def _lower_generic(node: Node, lowered: Lowered) -> Other:
    return Other(
        kind=node.type,
        nodes=tuple(lowered[child.id] for child in node.named_children),
    )


def _lower_call(node: Node, lowered: Lowered) -> SyntaxNode:
    target = node.child_by_field_name("target")
    arguments = _child_of_type(node, "arguments")
    args = list(arguments.named_children) if arguments is not None else []
    do_block = _child_of_type(node, "do_block")

    result: Optional[SyntaxNode] = None
    if target is not None and target.type == "identifier":
        name = _text(target)
        if name in DEFINITION_MACROS:
            result = _lower_definition(node, args, do_block, lowered)
        elif name == "alias":
            result = _lower_alias(args)
        elif name == "require":
            result = _lower_require(args)
    elif target is not None and target.type == "dot":
        result = _lower_qualified_access(target, args, do_block, lowered)

    if result is None:
        # Unrecognized or malformed shapes keep their children only
        result = _lower_generic(node, lowered)
    return result


def _lower_definition(
    node: Node,
    args: list[Node],
    do_block: Optional[Node],
    lowered: Lowered,
) -> Optional[Definition]:
    if not args:
        return None
    path = _module_path(args[0])
    if path is None:
        return None

    body: list[SyntaxNode] = []
    if do_block is not None:
        body.extend(lowered[child.id] for child in do_block.named_children)
    # Keyword form: defmodule Foo, do: ...
    body.extend(lowered[extra.id] for extra in args[1:])

    row, _ = node.start_point
    return Definition(path=path, body=tuple(body), line=row + 1)


def _lower_alias(args: list[Node]) -> Optional[SyntaxNode]:
    if not args:
        return None
    first = args[0]

    if first.type == "dot":
        right = first.child_by_field_name("right")
        if right is not None and right.type == "tuple":
            return _lower_alias_group(first.child_by_field_name("left"), right)

    target = _module_path(first)
    if target is None:
        return None

    as_value = _keyword_value(args[1:], "as")
    if as_value is None:
        return AliasBare(target)

    alias = _module_path(as_value)
    if alias is None:
        return None
    return AliasAs(target, alias)


def _lower_alias_group(left: Optional[Node], group: Node) -> Optional[AliasGroup]:
    if left is None:
        return None
    prefix = _module_path(left)
    suffixes = [_module_path(child) for child in group.named_children]
    if prefix is None or not suffixes or any(s is None for s in suffixes):
        return None
    return AliasGroup(prefix, tuple(suffixes))


def _lower_require(args: list[Node]) -> Optional[RequireAs]:
    # A plain `require Foo` is lowered generically; Foo stays a reference
    if not args:
        return None
    target = _module_path(args[0])
    as_value = _keyword_value(args[1:], "as")
    if target is None or as_value is None:
        return None
    alias = _module_path(as_value)
    if alias is None:
        return None
    return RequireAs(target, alias)


def _lower_qualified_access(
    target: Node,
    args: list[Node],
    do_block: Optional[Node],
    lowered: Lowered,
) -> Optional[QualifiedAccess]:
    left = target.child_by_field_name("left")
    right = target.child_by_field_name("right")
    if left is None or right is None:
        return None

    if left.type == "atom":
        # :lists.sort/1 -> the Erlang module "lists"
        name = _text(left).lstrip(":")
        if not name:
            return None
        qualifier = ModulePath.of(name)
    else:
        qualifier = _module_path(left)
        if qualifier is None:
            return None

    arguments = [lowered[arg.id] for arg in args]
    if do_block is not None:
        arguments.append(lowered[do_block.id])

    return QualifiedAccess(
        qualifier=qualifier,
        name=_text(right),
        arguments=tuple(arguments),
    )


def _module_path(node: Node) -> Optional[ModulePath]:
    """
    Return the module path a node spells, or None.

    Recognizes aliases (``Foo.Bar``), ``__MODULE__`` and ``__MODULE__.Foo``.
    """
    if node.type == "alias":
        return ModulePath.parse(_text(node))

    if node.type == "dot":
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None or right.type != "alias":
            return None
        prefix = _module_path(left)
        if prefix is None:
            return None
        return prefix + ModulePath.parse(_text(right))

    if node.named_child_count == 0 and _text(node) == MODULE_SELF:
        return ModulePath.of(MODULE_SELF)

    return None


def _keyword_value(args: list[Node], key: str) -> Optional[Node]:
    """Find the value of ``key:`` in trailing keyword arguments."""
    for arg in args:
        if arg.type != "keywords":
            continue
        for pair in arg.named_children:
            if pair.type != "pair":
                continue
            pair_key = pair.child_by_field_name("key")
            pair_value = pair.child_by_field_name("value")
            if pair_key is None or pair_value is None:
                continue
            if _text(pair_key).strip().rstrip(":") == key:
                return pair_value
    return None

"""
Parser module for Modgraph.

This module provides tree-sitter based parsing of Elixir source and the
lowered node model the extractor walks.
"""

from modgraph.parser.elixir import parse_file, parse_source, get_parser
from modgraph.parser.nodes import (
    AliasAs,
    AliasBare,
    AliasGroup,
    Definition,
    NamespacedPath,
    NodeVisitor,
    Other,
    QualifiedAccess,
    RequireAs,
    SyntaxNode,
)

__all__ = [
    "parse_file",
    "parse_source",
    "get_parser",
    "AliasAs",
    "AliasBare",
    "AliasGroup",
    "Definition",
    "NamespacedPath",
    "NodeVisitor",
    "Other",
    "QualifiedAccess",
    "RequireAs",
    "SyntaxNode",
]

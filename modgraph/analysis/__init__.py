"""
Analysis module for Modgraph.

This module provides dependency extraction for single parsed units and
aggregation across many source files.
"""

from modgraph.analysis.extractor import (
    extract,
    extract_from_source,
    extract_definitions,
    find_definitions,
    collect_scope,
    resolve_references,
    AliasTable,
    ModuleScope,
)
from modgraph.analysis.aggregator import (
    analyze_paths,
    extract_all,
    expand_paths,
    find_source_files,
)

__all__ = [
    "extract",
    "extract_from_source",
    "extract_definitions",
    "find_definitions",
    "collect_scope",
    "resolve_references",
    "AliasTable",
    "ModuleScope",
    "analyze_paths",
    "extract_all",
    "expand_paths",
    "find_source_files",
]

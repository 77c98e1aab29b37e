"""
Source Aggregation for Modgraph

Runs the extractor over a collection of Elixir source files and
concatenates the results.

Design Decisions:
    - Fail fast: the first unreadable or unparseable file aborts the whole
      run; there is no partial or best-effort mode
    - Order preserving: edges appear in file order, then definition order
    - Directory expansion is a separate step (find_source_files) so the
      aggregation itself only ever sees explicit file identifiers
"""

import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from modgraph.analysis.extractor import extract_definitions, find_definitions
from modgraph.models import AnalysisResult, DependencyEdge
from modgraph.parser.elixir import parse_file

logger = logging.getLogger(__name__)

# File patterns treated as Elixir sources
SOURCE_PATTERNS = ("*.ex", "*.exs")

# Default exclusions, relative to the scanned directory
DEFAULT_EXCLUDE_PATTERNS = [
    "deps/**",
    "_build/**",
    ".*/**",
]


def analyze_paths(file_paths: Iterable[Path | str]) -> AnalysisResult:
    """
    Analyze source files and collect every dependency edge.

    Args:
        file_paths: Source files, analyzed in the given order

    Returns:
        AnalysisResult with edges, analyzed files and defined modules

    Raises:
        InputUnreadable: If any file cannot be read
        ParseFailure: If any file has syntax errors

    Example:
        >>> result = analyze_paths(["lib/app.ex", "lib/app/worker.ex"])
        >>> print(f"{result.edge_count} edges in {result.file_count} files")
    """
    start_time = time.time()
    result = AnalysisResult()

    for file_path in file_paths:
        tree = parse_file(file_path)
        definitions = find_definitions(tree)
        edges = extract_definitions(definitions)

        logger.debug(
            "Analyzed %s: %d module(s), %d edge(s)",
            file_path,
            len(definitions),
            len(edges),
        )
        result.modules.extend(str(definition.path) for definition in definitions)
        result.edges.extend(edges)
        result.files_analyzed.append(str(file_path))

    result.analysis_time_seconds = time.time() - start_time
    logger.info(
        "Found %d edge(s) across %d file(s)",
        result.edge_count,
        result.file_count,
    )
    return result


def extract_all(file_paths: Iterable[Path | str]) -> list[DependencyEdge]:
    """
    Read, parse and extract every file, concatenating the edges.

    Raises:
        InputUnreadable: If any file cannot be read
        ParseFailure: If any file has syntax errors
    """
    return analyze_paths(file_paths).edges


def find_source_files(
    directory: Path | str,
    exclude_patterns: Optional[list[str]] = None,
) -> list[Path]:
    """
    Recursively find Elixir source files in a directory.

    Args:
        directory: Path to the directory to scan
        exclude_patterns: Glob patterns (relative to the directory) to skip;
            defaults to dependencies, build output and hidden directories

    Returns:
        Matching files, sorted by path

    Raises:
        FileNotFoundError: If the directory doesn't exist
        ValueError: If the path is not a directory
    """
    directory = Path(directory)

    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ValueError(f"Not a directory: {directory}")

    if exclude_patterns is None:
        exclude_patterns = DEFAULT_EXCLUDE_PATTERNS

    found: set[Path] = set()
    for pattern in SOURCE_PATTERNS:
        for file_path in directory.rglob(pattern):
            relative_path = file_path.relative_to(directory)
            if any(_matches(relative_path, excluded) for excluded in exclude_patterns):
                continue
            found.add(file_path)

    return sorted(found)


def expand_paths(paths: Iterable[Path | str]) -> list[Path]:
    """
    Expand directories into their source files; files pass through.

    Paths that do not exist are kept so that reading them reports the
    failure.
    """
    expanded: list[Path] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            expanded.extend(find_source_files(path))
        else:
            expanded.append(path)
    return expanded


def _matches(relative_path: Path, pattern: str) -> bool:
    # "deps/**" should exclude anything below a top-level deps directory
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        parts = relative_path.parts
        return len(parts) > 1 and Path(parts[0]).match(prefix)
    return relative_path.match(pattern)

"""
Error types for Modgraph.

All fatal conditions derive from ModgraphError so callers (the CLI in
particular) can report them uniformly. An alias that cannot be resolved
is not an error: the reference is emitted as written.
"""

from typing import Optional


class ModgraphError(Exception):
    """Base class for every fatal analysis or export failure."""


class InputUnreadable(ModgraphError):
    """A source identifier could not be resolved to text."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot read {source}: {reason}")


class ParseFailure(ModgraphError):
    """
    A source unit does not form a valid syntax tree.

    Attributes:
        source: Identifier of the unit (file path or "<source>")
        line: 1-indexed line of the first syntax error, if known
        column: 1-indexed column of the first syntax error, if known
    """

    def __init__(
        self,
        source: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.source = source
        self.line = line
        self.column = column
        location = f" at line {line}, column {column}" if line is not None else ""
        super().__init__(f"Syntax error in {source}{location}")


class ExternalToolMissing(ModgraphError):
    """A renderer or viewer executable could not be started."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Executable not found: {command}")

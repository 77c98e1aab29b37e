"""
Core Data Models for Modgraph

This module defines the canonical data structures used throughout the system:
- ModulePath: A dotted module identity as an ordered sequence of segments
- DependencyEdge: A directed dependency between two modules
- BareAlias / RenamedAlias / GroupedAlias: Alias directives scoped to one module
- AnalysisResult: Aggregate output of analyzing a set of source files

These models are designed to be:
- Immutable (frozen dataclasses)
- Compared structurally, never by their rendered string
- Clear in their semantic meaning
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Union


@dataclass(frozen=True)
class ModulePath:
    """
    A fully- or partially-qualified module identity.

    Examples:
        ModulePath(("Tester", "One"))  renders as "Tester.One"
        ModulePath(("lists",))         renders as "lists" (an Erlang module)

    Invariants:
        - segments is non-empty
        - no segment is an empty string
        - equality is tuple equality of the segments
    """

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        if not self.segments:
            raise ValueError("ModulePath requires at least one segment")
        if any(not segment for segment in self.segments):
            raise ValueError(f"ModulePath segments must be non-empty: {self.segments!r}")

    @classmethod
    def of(cls, *segments: str) -> "ModulePath":
        """Build a path from positional segments."""
        return cls(tuple(segments))

    @classmethod
    def parse(cls, dotted: str) -> "ModulePath":
        """
        Build a path from its dotted form.

        Whitespace around segments is ignored, so ``"Foo . Bar"`` and
        ``"Foo.Bar"`` are the same path.
        """
        return cls(tuple(part.strip() for part in dotted.split(".")))

    @property
    def first(self) -> str:
        return self.segments[0]

    @property
    def last(self) -> str:
        return self.segments[-1]

    @property
    def rest(self) -> tuple[str, ...]:
        """All segments after the first."""
        return self.segments[1:]

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __add__(self, other: Union["ModulePath", Iterable[str]]) -> "ModulePath":
        if isinstance(other, ModulePath):
            return ModulePath(self.segments + other.segments)
        return ModulePath(self.segments + tuple(other))

    def __str__(self) -> str:
        return ".".join(self.segments)


@dataclass(frozen=True)
class DependencyEdge:
    """
    A directed dependency from a defining module to a referenced module.

    Attributes:
        source: Path of the module whose body contains the reference
        target: Fully resolved path of the referenced module

    Note:
        Edges are not unique. The same pair may appear more than once when
        it is produced by different definitions or different source units.
    """

    source: ModulePath
    target: ModulePath

    @property
    def pair(self) -> tuple[str, str]:
        """Return the edge as a pair of dotted strings."""
        return (str(self.source), str(self.target))

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


@dataclass(frozen=True)
class BareAlias:
    """
    ``alias A.B.C``: the local name ``C`` stands for ``A.B.C``.

    Attributes:
        target: The full path being aliased
    """

    target: ModulePath

    @property
    def local_name(self) -> str:
        return self.target.last


@dataclass(frozen=True)
class RenamedAlias:
    """
    ``alias A.B, as: X`` (or ``require A.B, as: X``): ``X`` stands for ``A.B``.

    Attributes:
        target: The full path being aliased
        alias: The local path introduced by ``as:``
    """

    target: ModulePath
    alias: ModulePath


@dataclass(frozen=True)
class GroupedAlias:
    """
    ``alias P.{X, Y.Z}``: every suffix is aliased under the shared prefix.

    Attributes:
        prefix: The shared prefix (``P``)
        suffixes: The suffix paths inside the braces (``X``, ``Y.Z``)
    """

    prefix: ModulePath
    suffixes: tuple[ModulePath, ...]

    def expand(self) -> list[BareAlias]:
        """Return the equivalent bare aliases, one per suffix."""
        return [BareAlias(self.prefix + suffix) for suffix in self.suffixes]


AliasDirective = Union[BareAlias, RenamedAlias, GroupedAlias]


@dataclass
class AnalysisResult:
    """
    Result of analyzing a collection of source units.

    Attributes:
        edges: All dependency edges, in per-unit order
        files_analyzed: Source units that were read and parsed
        modules: Dotted names of every module definition found
        analysis_time_seconds: Total time taken for the analysis
    """

    edges: list[DependencyEdge] = field(default_factory=list)
    files_analyzed: list[str] = field(default_factory=list)
    modules: list[str] = field(default_factory=list)
    analysis_time_seconds: float = 0.0

    @property
    def edge_count(self) -> int:
        """Total number of edges discovered."""
        return len(self.edges)

    @property
    def file_count(self) -> int:
        """Number of source units processed."""
        return len(self.files_analyzed)

    @property
    def module_count(self) -> int:
        """Number of module definitions found."""
        return len(self.modules)

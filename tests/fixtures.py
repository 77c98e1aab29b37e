"""
Test fixtures for Modgraph.

This module provides sample Elixir code and helpers for building lowered
syntax trees by hand, so extractor tests do not depend on the parser.
"""

from pathlib import Path
from typing import Optional

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
)

SAMPLE_PROJECT = Path(__file__).parent / "fixtures" / "sample_project"

# The end-to-end sample: five remote calls, no aliases
NO_ALIASES = '''
defmodule Tester.One do
  def first(input) do
    String.length(input)
    List.first(input)
  end

  def second(input) do
    :lists.sort(input)
  end

  def third(input) do
    Tester.Other.first(input)
  end

  def fourth(input) do
    My.Long.Module.Chain.first(input)
  end
end
'''

TWO_MODULES_WITH_ALIASES = '''
defmodule Tester.One do
  alias Tester.MyOther, as: Other

  def first(input) do
    String.length(input)
    List.first(input)
  end

  def second(input) do
    :lists.sort(input)
  end

  def third(input) do
    Other.first(input)
  end

  def fourth(input) do
    My.Long.Module.Chain.first(input)
  end
end

defmodule Tester.Two do
  alias Tester.One

  def first(input) do
    One.third(input)
  end
end
'''

GROUPED_ALIAS = '''
defmodule MyApp.Reports do
  alias MyApp.Accounts.{User, Team}

  def owners(team) do
    Team.members(team) |> Enum.map(&User.name/1)
  end
end
'''

DIRECTIVES = '''
defmodule MyApp.Server do
  use GenServer
  import Ecto.Query, only: [from: 2]
  require Logger
  require MyApp.Macros, as: M

  @behaviour MyApp.Handler

  def init(state) do
    M.trace(state)
    {:ok, %MyApp.State{value: state}}
  end
end
'''

NESTED_MODULES = '''
defmodule Outer do
  alias Outer.Helpers.Format

  defmodule Inner do
    def run(x), do: Format.pretty(x)
  end

  def call(x), do: Format.pretty(x)
end
'''

MODULE_SELF_REFERENCES = '''
defmodule MyApp.Worker do
  alias __MODULE__.State

  def start(opts) do
    __MODULE__.Supervisor.start_child(opts)
    State.new(opts)
    MyApp.Worker.helper(opts)
  end

  def helper(opts), do: opts
end
'''

SYNTAX_ERROR = '''
defmodule Broken do
  def oops(x) do
    String.length(x
  end
end
'''


def path(dotted: str) -> ModulePath:
    """Shorthand for building a ModulePath from dotted text."""
    return ModulePath.parse(dotted)


def call(qualifier: str, name: str = "f", *arguments) -> QualifiedAccess:
    """A lowered remote call, e.g. ``call("String", "length")``."""
    return QualifiedAccess(path(qualifier), name, tuple(arguments))


def ref(dotted: str) -> NamespacedPath:
    return NamespacedPath(path(dotted))


def defmodule(name: str, *body) -> Definition:
    return Definition(path(name), tuple(body))


def block(*nodes) -> Other:
    """A generic construct (function body, pipe, list, ...)."""
    return Other("block", tuple(nodes))


def source(*nodes) -> Other:
    return Other("source", tuple(nodes))


def alias(target: str, as_: Optional[str] = None):
    if as_ is None:
        return AliasBare(path(target))
    return AliasAs(path(target), path(as_))


def alias_group(prefix: str, *suffixes: str) -> AliasGroup:
    return AliasGroup(path(prefix), tuple(path(s) for s in suffixes))


def require_as(target: str, as_: str) -> RequireAs:
    return RequireAs(path(target), path(as_))

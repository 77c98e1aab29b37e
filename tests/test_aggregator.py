"""
Tests for aggregation across source files.
"""

import pytest

from modgraph.analysis import analyze_paths, expand_paths, extract_all, find_source_files
from modgraph.errors import InputUnreadable, ParseFailure
from tests.fixtures import SAMPLE_PROJECT, SYNTAX_ERROR


@pytest.fixture
def two_files(tmp_path):
    """Two small source files with one module each."""
    first = tmp_path / "first.ex"
    first.write_text("defmodule First do\n  def a, do: Enum.count([])\nend\n")
    second = tmp_path / "second.ex"
    second.write_text("defmodule Second do\n  def b, do: First.a()\nend\n")
    return first, second


class TestExtractAll:
    """Tests for extract_all and analyze_paths."""

    def test_concatenates_in_file_order(self, two_files):
        """Test that edges from each file follow the input order."""
        first, second = two_files

        forward = [edge.pair for edge in extract_all([first, second])]
        backward = [edge.pair for edge in extract_all([second, first])]

        assert forward == [("First", "Enum"), ("Second", "First")]
        assert backward == [("Second", "First"), ("First", "Enum")]

    def test_same_edge_in_two_files_is_kept_twice(self, tmp_path):
        """Test that aggregation does not deduplicate across units."""
        for name in ("a.ex", "b.ex"):
            (tmp_path / name).write_text("defmodule Dup do\n  def f, do: Enum.count([])\nend\n")

        edges = extract_all([tmp_path / "a.ex", tmp_path / "b.ex"])

        assert [edge.pair for edge in edges] == [("Dup", "Enum"), ("Dup", "Enum")]

    def test_analysis_result(self, two_files):
        """Test the aggregate statistics."""
        result = analyze_paths(two_files)

        assert result.file_count == 2
        assert result.modules == ["First", "Second"]
        assert result.edge_count == 2
        assert result.analysis_time_seconds >= 0

    def test_unreadable_file_aborts(self, two_files, tmp_path):
        """Test that a missing file fails the whole batch."""
        first, _ = two_files

        with pytest.raises(InputUnreadable):
            extract_all([first, tmp_path / "missing.ex"])

    def test_parse_failure_aborts(self, two_files, tmp_path):
        """Test that a syntax error in any file fails the whole batch."""
        first, second = two_files
        broken = tmp_path / "broken.ex"
        broken.write_text(SYNTAX_ERROR)

        with pytest.raises(ParseFailure) as excinfo:
            extract_all([first, broken, second])

        assert excinfo.value.source == str(broken)

    def test_empty_input(self):
        """Test that no files means no edges."""
        assert extract_all([]) == []


class TestSourceDiscovery:
    """Tests for finding Elixir files in directories."""

    def test_finds_ex_and_exs_sorted(self, tmp_path):
        """Test recursive discovery of both extensions."""
        (tmp_path / "lib" / "app").mkdir(parents=True)
        (tmp_path / "lib" / "app" / "worker.ex").write_text("")
        (tmp_path / "lib" / "app.ex").write_text("")
        (tmp_path / "mix.exs").write_text("")
        (tmp_path / "README.md").write_text("")

        found = [p.relative_to(tmp_path).as_posix() for p in find_source_files(tmp_path)]

        assert found == ["lib/app/worker.ex", "lib/app.ex", "mix.exs"]

    def test_default_exclusions(self, tmp_path):
        """Test that dependencies, build output and hidden dirs are skipped."""
        for directory in ("deps/jason/lib", "_build/dev", ".elixir_ls", "lib"):
            (tmp_path / directory).mkdir(parents=True)
        (tmp_path / "deps" / "jason" / "lib" / "jason.ex").write_text("")
        (tmp_path / "_build" / "dev" / "gen.ex").write_text("")
        (tmp_path / ".elixir_ls" / "cache.ex").write_text("")
        (tmp_path / "lib" / "app.ex").write_text("")
        (tmp_path / ".formatter.exs").write_text("")

        found = [p.relative_to(tmp_path).as_posix() for p in find_source_files(tmp_path)]

        assert found == [".formatter.exs", "lib/app.ex"]

    def test_custom_exclusions(self, tmp_path):
        """Test overriding the exclusion patterns."""
        (tmp_path / "test").mkdir()
        (tmp_path / "test" / "app_test.exs").write_text("")
        (tmp_path / "app.ex").write_text("")

        found = find_source_files(tmp_path, exclude_patterns=["test/**"])

        assert [p.name for p in found] == ["app.ex"]

    def test_missing_directory(self, tmp_path):
        """Test that scanning a missing directory raises."""
        with pytest.raises(FileNotFoundError):
            find_source_files(tmp_path / "nope")

    def test_not_a_directory(self, tmp_path):
        """Test that scanning a file raises."""
        file_path = tmp_path / "app.ex"
        file_path.write_text("")

        with pytest.raises(ValueError):
            find_source_files(file_path)

    def test_expand_paths_mixes_files_and_directories(self, tmp_path):
        """Test that files pass through and directories expand."""
        single = tmp_path / "single.ex"
        single.write_text("")

        expanded = expand_paths([single, SAMPLE_PROJECT])

        assert expanded[0] == single
        assert [p.name for p in expanded[1:]] == ["cycle.ex", "one.ex", "two.ex"]

    def test_sample_project(self):
        """Test analysis of the bundled sample project."""
        result = analyze_paths(expand_paths([SAMPLE_PROJECT]))

        assert result.modules == ["Tester.Ping", "Tester.Pong", "Tester.One", "Tester.Two"]
        assert ("Tester.Two", "Tester.One") in {edge.pair for edge in result.edges}
        assert ("Tester.Ping", "Tester.Pong") in {edge.pair for edge in result.edges}

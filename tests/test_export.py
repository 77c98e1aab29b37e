"""
Tests for exporting the graph to disk and external tools.

A recording runner stands in for subprocess.run so no process is spawned.
"""

import subprocess

import pytest

from modgraph.errors import ExternalToolMissing
from modgraph.graph import ExportSettings, GraphExporter, default_viewer_command, run
from modgraph.graph import export
from modgraph.graph.export import LAYOUT_COMMAND_ENV, VIEWER_COMMAND_ENV
from modgraph.models import DependencyEdge, ModulePath
from tests.fixtures import NO_ALIASES


class RecordingRunner:
    """Records every command and returns a fixed exit status."""

    def __init__(self, returncode: int = 0, missing: tuple = ()) -> None:
        self.returncode = returncode
        self.missing = missing
        self.commands = []

    def __call__(self, command, check=False):
        self.commands.append(list(command))
        if command[0] in self.missing:
            raise FileNotFoundError(command[0])
        return subprocess.CompletedProcess(command, self.returncode)


@pytest.fixture
def settings(tmp_path):
    return ExportSettings(
        description_path=tmp_path / "out" / "deps.gv",
        image_path=tmp_path / "out" / "deps.svg",
        image_format="svg",
        layout_command="dot",
        viewer_command="viewer",
    )


@pytest.fixture
def edges():
    return [DependencyEdge(ModulePath.parse("App.One"), ModulePath.parse("Enum"))]


class TestGraphExporter:
    """Tests for GraphExporter."""

    def test_export_runs_layout_then_viewer(self, settings, edges):
        """Test the description file and the exact commands issued."""
        runner = RecordingRunner()

        image = GraphExporter(settings, runner=runner).export(edges)

        assert image == settings.image_path
        assert settings.description_path.read_text() == (
            'digraph G {\n  "App.One" -> "Enum";\n}\n'
        )
        assert runner.commands == [
            [
                "dot",
                "-Tsvg",
                str(settings.description_path),
                "-o",
                str(settings.image_path),
            ],
            ["viewer", str(settings.image_path)],
        ]

    def test_export_without_opening(self, settings, edges):
        """Test that the viewer can be skipped."""
        runner = RecordingRunner()

        GraphExporter(settings, runner=runner).export(edges, open_image=False)

        assert [command[0] for command in runner.commands] == ["dot"]

    def test_empty_graph_is_still_written(self, settings):
        """Test that no edges still produces a valid description."""
        GraphExporter(settings, runner=RecordingRunner()).export([], open_image=False)

        assert settings.description_path.read_text() == "digraph G {\n}\n"

    def test_nonzero_exit_is_not_fatal(self, settings, edges, caplog):
        """Test that a failing tool is logged and otherwise ignored."""
        runner = RecordingRunner(returncode=2)

        with caplog.at_level("WARNING", logger="modgraph.graph.export"):
            GraphExporter(settings, runner=runner).export(edges)

        assert len(runner.commands) == 2
        assert "exited with status 2" in caplog.text

    def test_missing_layout_tool(self, settings, edges):
        """Test that a missing dot executable is fatal."""
        runner = RecordingRunner(missing=("dot",))

        with pytest.raises(ExternalToolMissing) as excinfo:
            GraphExporter(settings, runner=runner).export(edges)

        assert excinfo.value.command == "dot"
        assert len(runner.commands) == 1

    def test_missing_viewer(self, settings, edges):
        """Test that a missing viewer is fatal after the image is made."""
        runner = RecordingRunner(missing=("viewer",))

        with pytest.raises(ExternalToolMissing):
            GraphExporter(settings, runner=runner).export(edges)

        assert settings.description_path.exists()

    def test_defaults_to_subprocess_run(self, settings, edges, monkeypatch):
        """Test that subprocess.run is used when no runner is given."""
        runner = RecordingRunner()
        monkeypatch.setattr(subprocess, "run", runner)

        GraphExporter(settings).export(edges, open_image=False)

        assert runner.commands[0][0] == "dot"


class TestSettings:
    """Tests for export configuration."""

    @pytest.mark.parametrize(
        "platform,expected",
        [("darwin", "open"), ("win32", "explorer"), ("linux", "xdg-open")],
    )
    def test_default_viewer_command(self, platform, expected):
        assert default_viewer_command(platform) == expected

    def test_environment_overrides(self, monkeypatch):
        """Test that commands can be overridden from the environment."""
        monkeypatch.setenv(LAYOUT_COMMAND_ENV, "/opt/graphviz/bin/dot")
        monkeypatch.setenv(VIEWER_COMMAND_ENV, "feh")

        settings = ExportSettings()

        assert settings.layout_command == "/opt/graphviz/bin/dot"
        assert settings.viewer_command == "feh"

    def test_defaults(self, monkeypatch):
        """Test the default file names and format."""
        monkeypatch.delenv(LAYOUT_COMMAND_ENV, raising=False)

        settings = ExportSettings()

        assert str(settings.description_path) == "output.gv"
        assert str(settings.image_path) == "graph.png"
        assert settings.image_format == "png"
        assert settings.layout_command == "dot"


class TestRun:
    """Tests for the analyze-render-open pipeline."""

    def test_run_analyzes_and_exports(self, tmp_path, settings, monkeypatch):
        """Test the full pipeline from source files to commands."""
        runner = RecordingRunner()
        monkeypatch.setattr(subprocess, "run", runner)
        source_file = tmp_path / "one.ex"
        source_file.write_text(NO_ALIASES)

        image = run([source_file], settings)

        assert image == settings.image_path
        description = settings.description_path.read_text()
        assert '"Tester.One" -> "String";' in description
        assert [command[0] for command in runner.commands] == ["dot", "viewer"]

    def test_run_renders_aggregated_edges(self, settings, monkeypatch):
        """Test that run draws exactly the edges the aggregator returns."""
        runner = RecordingRunner()
        monkeypatch.setattr(subprocess, "run", runner)
        aggregated = [
            DependencyEdge(ModulePath.parse("App.Web"), ModulePath.parse("App.Repo")),
            DependencyEdge(ModulePath.parse("App.Web"), ModulePath.parse("App.Repo")),
        ]
        monkeypatch.setattr(export, "extract_all", lambda file_paths: aggregated)

        run(["lib/app/web.ex"], settings, open_image=False)

        assert settings.description_path.read_text() == (
            "digraph G {\n"
            '  "App.Web" -> "App.Repo";\n'
            '  "App.Web" -> "App.Repo";\n'
            "}\n"
        )

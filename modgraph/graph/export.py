"""
Graph Export for Modgraph

Writes the Graphviz description to disk, hands it to the ``dot`` layout
tool to produce an image, and opens the image in the platform viewer.

Design Decisions:
    - Every path and command is a parameter (ExportSettings); nothing is
      hardcoded in the analysis engine
    - External tools are fire-and-forget: exit codes are logged, never
      interpreted, but a missing executable is a fatal error
    - The process runner is injectable so tests never spawn processes
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from modgraph.analysis.aggregator import extract_all
from modgraph.errors import ExternalToolMissing
from modgraph.graph.render import render_dot
from modgraph.models import DependencyEdge

logger = logging.getLogger(__name__)


# Default locations and commands
DEFAULT_DESCRIPTION_PATH = Path("output.gv")
DEFAULT_IMAGE_PATH = Path("graph.png")
DEFAULT_IMAGE_FORMAT = "png"
DEFAULT_LAYOUT_COMMAND = "dot"

# Environment overrides for the external commands
LAYOUT_COMMAND_ENV = "MODGRAPH_DOT"
VIEWER_COMMAND_ENV = "MODGRAPH_VIEWER"

Runner = Callable[..., subprocess.CompletedProcess]


def default_viewer_command(platform: Optional[str] = None) -> str:
    """
    Return the command that opens a file in the desktop's default viewer.

    Args:
        platform: A ``sys.platform`` value; defaults to the running platform
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return "open"
    if platform.startswith("win"):
        return "explorer"
    return "xdg-open"


@dataclass
class ExportSettings:
    """
    Where the graph is written and which tools process it.

    Attributes:
        description_path: Destination of the Graphviz description
        image_path: Destination of the rendered image
        image_format: Output format passed to the layout tool (``-T``)
        layout_command: Graphviz executable
        viewer_command: Executable that opens the image
    """

    description_path: Path = DEFAULT_DESCRIPTION_PATH
    image_path: Path = DEFAULT_IMAGE_PATH
    image_format: str = DEFAULT_IMAGE_FORMAT
    layout_command: str = field(
        default_factory=lambda: os.environ.get(LAYOUT_COMMAND_ENV, DEFAULT_LAYOUT_COMMAND)
    )
    viewer_command: str = field(
        default_factory=lambda: os.environ.get(VIEWER_COMMAND_ENV) or default_viewer_command()
    )


class GraphExporter:
    """
    Renders dependency edges to an image and opens it.

    Usage:
        exporter = GraphExporter(ExportSettings(image_path=Path("deps.svg"),
                                                image_format="svg"))
        exporter.export(edges, open_image=False)
    """

    def __init__(
        self,
        settings: Optional[ExportSettings] = None,
        runner: Optional[Runner] = None,
    ) -> None:
        self.settings = settings or ExportSettings()
        self._runner = runner or subprocess.run

    def write_description(self, description: str) -> Path:
        """Write the Graphviz description and return its path."""
        path = Path(self.settings.description_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(description, encoding="utf-8")
        logger.debug("Wrote graph description to %s", path)
        return path

    def rasterize(self) -> subprocess.CompletedProcess:
        """Run the layout tool on the written description."""
        settings = self.settings
        return self._run(
            [
                settings.layout_command,
                f"-T{settings.image_format}",
                str(settings.description_path),
                "-o",
                str(settings.image_path),
            ]
        )

    def open_image(self) -> subprocess.CompletedProcess:
        """Open the rendered image in the viewer."""
        return self._run([self.settings.viewer_command, str(self.settings.image_path)])

    def export(
        self,
        edges: Iterable[DependencyEdge],
        open_image: bool = True,
    ) -> Path:
        """
        Render edges all the way to an image.

        Args:
            edges: Dependency edges to draw
            open_image: Whether to launch the viewer afterwards

        Returns:
            Path of the rendered image

        Raises:
            ExternalToolMissing: If the layout tool or viewer is not installed
        """
        self.write_description(render_dot(edges))
        self.rasterize()
        if open_image:
            self.open_image()
        return Path(self.settings.image_path)

    def _run(self, command: list[str]) -> subprocess.CompletedProcess:
        logger.debug("Running: %s", " ".join(command))
        try:
            completed = self._runner(command, check=False)
        except FileNotFoundError as e:
            raise ExternalToolMissing(command[0]) from e
        if completed.returncode != 0:
            logger.warning("%s exited with status %d", command[0], completed.returncode)
        return completed


def run(
    file_paths: Iterable[Path | str],
    settings: Optional[ExportSettings] = None,
    open_image: bool = True,
) -> Path:
    """
    Analyze source files, render their dependency graph and open it.

    Raises:
        InputUnreadable: If any file cannot be read
        ParseFailure: If any file has syntax errors
        ExternalToolMissing: If Graphviz or the viewer is missing
    """
    edges = extract_all(file_paths)
    return GraphExporter(settings).export(edges, open_image=open_image)

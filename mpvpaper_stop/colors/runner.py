"""
Color-scheme regeneration from a paused wallpaper frame.

Regeneration is part of the pause transition rather than a best-effort side
effect: every failure here raises `ColorSchemeError`, which stops the daemon.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from mpvpaper_stop.common.errors import ColorSchemeError
from mpvpaper_stop.common.settings import settings
from mpvpaper_stop.common.types import ColorBackend

logger = logging.getLogger(__name__)

__all__ = ["ColorBackendTool", "ColorSchemeRunner", "backendTool_get"]


@dataclass(frozen=True)
class ColorBackendTool:
    """Command lines and log file for one color backend"""
    backend: ColorBackend
    probe_command: tuple[str, ...]
    log_name: str

    @property
    def executable(self) -> str:
        return self.probe_command[0]

    def generateCommand_build(self, image: Path) -> list[str]:
        """Command that regenerates the color scheme from an image"""
        if self.backend is ColorBackend.PYWAL:
            return [self.executable, "-i", str(image)]
        return [self.executable, "image", str(image), "-m", "dark"]


_TOOLS: dict[ColorBackend, ColorBackendTool] = {
    ColorBackend.PYWAL: ColorBackendTool(
        backend=ColorBackend.PYWAL,
        probe_command=settings.PYWAL_PROBE_COMMAND,
        log_name=settings.PYWAL_LOG_NAME,
    ),
    ColorBackend.MATUGEN: ColorBackendTool(
        backend=ColorBackend.MATUGEN,
        probe_command=settings.MATUGEN_PROBE_COMMAND,
        log_name=settings.MATUGEN_LOG_NAME,
    ),
}


def backendTool_get(backend: ColorBackend) -> ColorBackendTool:
    return _TOOLS[backend]


class ColorSchemeRunner:
    """Runs the selected color backends against a screenshot, then deletes it."""

    def __init__(self, backends: Sequence[ColorBackend], temp_dir: str) -> None:
        """
        Args:
            backends: Backends to run, in order.
            temp_dir: Directory for tool logs and screenshots.
        """
        self.tools: list[ColorBackendTool] = [backendTool_get(b) for b in backends]
        self.temp_dir: Path = Path(temp_dir)

    def tools_validate(self) -> None:
        """
        Probe each backend tool once and prepare the temp directory.

        Raises:
            ColorSchemeError: Raised when a tool is missing or its version
                probe fails, or the temp directory cannot be created.
        """
        for tool in self.tools:
            if shutil.which(tool.executable) is None:
                raise ColorSchemeError(f"Cannot run {tool.backend.value}: {tool.executable} not found")
            try:
                result = subprocess.run(
                    list(tool.probe_command),
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    check=False,
                )
            except OSError as exc:
                raise ColorSchemeError(f"Cannot run {tool.backend.value}: {exc}") from exc
            if result.returncode != 0:
                raise ColorSchemeError(
                    f"Cannot run {tool.backend.value}: "
                    f"{' '.join(tool.probe_command)} exited with {result.returncode}"
                )
            logger.info("%s is available", tool.backend.value)
        self.tempDirectory_create()

    def tempDirectory_create(self) -> None:
        """
        Raises:
            ColorSchemeError: Raised when the directory cannot be created.
        """
        try:
            os.makedirs(self.temp_dir, mode=settings.TEMP_DIR_MODE, exist_ok=True)
        except OSError as exc:
            raise ColorSchemeError(f"Failed to create {self.temp_dir}: {exc}") from exc

    def backend_run(self, tool: ColorBackendTool, image: Path) -> None:
        """
        Run one backend, appending its output to `<temp_dir>/<log_name>`.

        Raises:
            ColorSchemeError: Raised when the tool cannot start or exits non-zero.
        """
        command = tool.generateCommand_build(image)
        log_path = self.temp_dir / tool.log_name
        logger.info("Running %s command: %s", tool.backend.value, " ".join(command))
        try:
            with open(log_path, "ab") as log_file:
                result = subprocess.run(
                    command,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
        except OSError as exc:
            raise ColorSchemeError(f"Failed to run {tool.backend.value}: {exc}") from exc
        if result.returncode != 0:
            raise ColorSchemeError(
                f"Failed to run {tool.backend.value}: exit status {result.returncode} "
                f"(see {log_path})"
            )
        logger.info("%s ran successfully", tool.backend.value)

    def run(self, screenshot: Path) -> None:
        """
        Regenerate colors from a screenshot and delete it.

        Raises:
            ColorSchemeError: Raised when a backend fails or the screenshot
                cannot be removed.
        """
        for tool in self.tools:
            self.backend_run(tool, screenshot)

        logger.info("Removing screenshot %s", screenshot)
        try:
            os.remove(screenshot)
        except OSError as exc:
            raise ColorSchemeError(f"Cannot remove screenshot {screenshot}: {exc}") from exc

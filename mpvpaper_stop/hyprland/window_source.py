"""
Active workspace window count sources.

Both sources answer one question per poll: how many windows are on the
currently focused Hyprland workspace. Any failure to answer surfaces as
`WindowManagerUnavailable`, which the monitor treats as "skip this tick".
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol, Sequence

from mpvpaper_stop.common.errors import (
    ChannelUnavailable,
    ResponseDecodeError,
    WindowManagerUnavailable,
)
from mpvpaper_stop.common.settings import settings
from mpvpaper_stop.ipc.channel import ResponseFraming, UnixSocketChannel
from mpvpaper_stop.protocol.message import hyprlandResponse_decode

logger = logging.getLogger(__name__)

__all__ = [
    "WindowCountSource",
    "SocketWindowCountSource",
    "CommandWindowCountSource",
]


class WindowCountSource(Protocol):
    """Contract consumed by the state monitor."""

    def activeWorkspaceWindows_count(self) -> int:
        """
        Return the active workspace window count.

        Raises:
            WindowManagerUnavailable: Raised when no count could be obtained.
        """
        ...


class SocketWindowCountSource:
    """Queries Hyprland over its request socket, reconnecting per query."""

    def __init__(self, channel: UnixSocketChannel) -> None:
        self.channel: UnixSocketChannel = channel

    @classmethod
    def fromPath_create(
        cls,
        socket_path: str,
        buffer_size: int = settings.DEFAULT_BUFFER_SIZE,
        timeout_seconds: float | None = None,
    ) -> "SocketWindowCountSource":
        """Build a source over a reconnect-per-request Hyprland channel."""
        channel = UnixSocketChannel(
            path=socket_path,
            name="hyprland",
            framing=ResponseFraming.EOF,
            reconnect_each_request=True,
            buffer_size=buffer_size,
            timeout_seconds=timeout_seconds,
        )
        return cls(channel)

    def activeWorkspaceWindows_count(self) -> int:
        try:
            raw = self.channel.request(settings.HYPRLAND_ACTIVE_WORKSPACE_QUERY)
        except ChannelUnavailable as exc:
            logger.error("Failed to query active workspace: %s", exc)
            raise WindowManagerUnavailable(str(exc)) from exc
        try:
            return hyprlandResponse_decode(raw).windows
        except ResponseDecodeError as exc:
            logger.error("Failed to parse active workspace: %s", exc)
            raise WindowManagerUnavailable(str(exc)) from exc


class CommandWindowCountSource:
    """Queries Hyprland by running `hyprctl activeworkspace -j` per poll."""

    def __init__(
        self,
        command: Sequence[str] = settings.HYPRCTL_ACTIVE_WORKSPACE_COMMAND,
        timeout_seconds: float | None = None,
    ) -> None:
        self.command: list[str] = list(command)
        self.timeout_seconds: float | None = timeout_seconds

    def commandOutput_capture(self) -> bytes:
        """
        Run the query command and return its combined stdout/stderr.

        Raises:
            WindowManagerUnavailable: Raised when the command cannot run,
                times out, or exits non-zero.
        """
        try:
            result = subprocess.run(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as exc:
            logger.error("%s not found in PATH", self.command[0])
            raise WindowManagerUnavailable(f"{self.command[0]} not found") from exc
        except (OSError, subprocess.SubprocessError) as exc:
            logger.error("Failed to run %s: %s", " ".join(self.command), exc)
            raise WindowManagerUnavailable(str(exc)) from exc

        if result.returncode != 0:
            output = result.stdout.decode("utf-8", errors="replace").strip()
            logger.error(
                "%s returned %s: %s", " ".join(self.command), result.returncode, output
            )
            raise WindowManagerUnavailable(f"{self.command[0]} exited with {result.returncode}")
        return result.stdout

    def activeWorkspaceWindows_count(self) -> int:
        raw = self.commandOutput_capture()
        try:
            return hyprlandResponse_decode(raw).windows
        except ResponseDecodeError as exc:
            logger.error("Failed to parse %s output: %s", self.command[0], exc)
            raise WindowManagerUnavailable(str(exc)) from exc

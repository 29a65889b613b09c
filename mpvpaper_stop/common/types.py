"""Common types and data structures for mpvpaper-stop"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ColorBackend(Enum):
    """External color-scheme generators"""
    PYWAL = "pywal"
    MATUGEN = "matugen"


class WindowManagerBackend(Enum):
    """How the active workspace window count is obtained"""
    SOCKET = "socket"    # Hyprland request socket, reconnected per query
    COMMAND = "command"  # hyprctl subprocess per query


class PlayerAction(Enum):
    """Outcome of one monitor tick"""
    NONE = "none"
    PAUSE = "pause"
    RESUME = "resume"
    SKIPPED = "skipped"  # window manager unavailable, tick ignored


@dataclass(frozen=True)
class ObservedState:
    """Last observed (window_count, is_paused) pair"""
    window_count: int
    is_paused: bool

    UNKNOWN: ClassVar["ObservedState"]

    def isKnown(self) -> bool:
        """Check whether a successful poll has produced this state"""
        return self.window_count >= 0

    def __str__(self) -> str:
        return f"{{windows: {self.window_count}, paused: {int(self.is_paused)}}}"


ObservedState.UNKNOWN = ObservedState(window_count=-1, is_paused=False)


@dataclass(frozen=True)
class TickResult:
    """State and action produced by one monitor tick"""
    state: ObservedState
    action: PlayerAction

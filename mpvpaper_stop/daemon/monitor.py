"""
State monitor: the polling loop that keeps mpv in step with Hyprland.

Each tick samples the active workspace window count and the player's pause
property, then decides:

1. window count unavailable -> skip the tick, state unchanged, no player I/O
2. (window_count, is_paused) unchanged since last tick -> nothing to do
3. empty workspace and paused -> resume
4. windows present and playing -> pause, then regenerate colors if enabled
5. anything else -> nothing to do

The decision depends on the *current* pause reading, so a manual pause on an
empty workspace is undone on the next change, and a manual unpause while
windows are open is re-paused as soon as the pair changes.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from mpvpaper_stop.common.errors import WindowManagerUnavailable
from mpvpaper_stop.common.settings import settings
from mpvpaper_stop.common.types import ObservedState, PlayerAction, TickResult
from mpvpaper_stop.hyprland.window_source import WindowCountSource

logger = logging.getLogger(__name__)

__all__ = ["StateMonitor", "action_decide"]


class PlayerProtocol(Protocol):
    """Player operations the monitor depends on."""

    def paused_query(self) -> bool:
        ...

    def paused_set(self, paused: bool) -> None:
        ...

    def screenshot_take(self) -> Optional[Path]:
        ...


class ColorRunnerProtocol(Protocol):
    """Color-scheme regeneration contract."""

    def run(self, screenshot: Path) -> None:
        ...


def action_decide(previous: ObservedState, current: ObservedState) -> PlayerAction:
    """
    Pure pause/resume decision for one tick.

    Args:
        previous: State observed on the last successful tick.
        current: State observed now.

    Returns:
        Action the monitor must take.
    """
    if current == previous:
        return PlayerAction.NONE
    if current.window_count == 0 and current.is_paused:
        return PlayerAction.RESUME
    if current.window_count > 0 and not current.is_paused:
        return PlayerAction.PAUSE
    return PlayerAction.NONE


class StateMonitor:
    """Owns the ObservedState and drives the player from window counts."""

    def __init__(
        self,
        window_source: WindowCountSource,
        player: PlayerProtocol,
        color_runner: Optional[ColorRunnerProtocol] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.window_source: WindowCountSource = window_source
        self.player: PlayerProtocol = player
        self.color_runner: Optional[ColorRunnerProtocol] = color_runner
        self._sleep: Callable[[float], None] = sleep

    def tick(self, previous: ObservedState) -> TickResult:
        """
        Run one sample-decide-act step.

        Args:
            previous: State from the last successful tick (or UNKNOWN).

        Returns:
            New state and the action taken.

        Raises:
            ColorSchemeError: Propagated from color regeneration.
        """
        try:
            window_count = self.window_source.activeWorkspaceWindows_count()
        except WindowManagerUnavailable:
            return TickResult(state=previous, action=PlayerAction.SKIPPED)

        is_paused = self.player.paused_query()
        current = ObservedState(window_count=window_count, is_paused=is_paused)
        action = action_decide(previous, current)
        if not previous.isKnown():
            logger.info("Initial state %s", current)
        elif current != previous:
            logger.debug("%s", current)

        if action is PlayerAction.RESUME:
            self.player.paused_set(False)
        elif action is PlayerAction.PAUSE:
            self.player.paused_set(True)
            self.colors_regenerate()

        return TickResult(state=current, action=action)

    def colors_regenerate(self) -> None:
        """Screenshot the paused frame and hand it to the color runner."""
        if self.color_runner is None:
            return
        screenshot = self.player.screenshot_take()
        if screenshot is None:
            return
        self.color_runner.run(screenshot)

    def loop_run(
        self,
        period_ms: int,
        max_ticks: Optional[int] = None,
        state: ObservedState = ObservedState.UNKNOWN,
    ) -> ObservedState:
        """
        Tick, sleep for `period_ms`, repeat.

        Args:
            period_ms: Sleep between ticks in milliseconds.
            max_ticks: Stop after this many ticks; None runs forever.
            state: Initial observed state.

        Returns:
            Final observed state (only reached when max_ticks is set).
        """
        logger.info("Starting monitoring loop")
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            state = self.tick(state).state
            ticks += 1
            self._sleep(period_ms / settings.MS_PER_SECOND)
        return state

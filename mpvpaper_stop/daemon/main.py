"""mpvpaper-stop daemon runtime"""

from __future__ import annotations

import logging
from typing import Optional

from mpvpaper_stop import __version__
from mpvpaper_stop.common.config import RuntimeConfig
from mpvpaper_stop.common.types import ObservedState
from mpvpaper_stop.daemon.bootstrap import (
    colorRunner_create,
    playerControl_create,
    process_detach,
    socketFile_wait,
    windowManagerEnvironment_resolve,
    windowSource_create,
)
from mpvpaper_stop.daemon.monitor import StateMonitor

logger = logging.getLogger(__name__)


def configSummary_log(config: RuntimeConfig) -> None:
    """Log the effective configuration at startup"""
    logger.info(f"mpvpaper-stop v{__version__}")
    logger.info(f"Player socket: {config.player.socket_path}")
    logger.info(f"Socket wait time: {config.player.socket_wait_ms} ms")
    logger.info(f"Polling period: {config.monitor.period_ms} ms")
    logger.info(f"Window manager backend: {config.window_manager.backend.value}")
    if config.colors.enabled:
        names = ", ".join(b.value for b in config.colors.backends)
        logger.info(f"Color backends: {names} (temp dir {config.colors.temp_dir})")


def daemon_run(config: RuntimeConfig, max_ticks: Optional[int] = None) -> ObservedState:
    """
    Start up and run the monitoring loop.

    Startup order: resolve the Hyprland socket, wait for the player socket,
    detach, connect both channels, validate color tools, then loop.

    Args:
        config: Loaded config.
        max_ticks: Stop after this many ticks; None runs forever.

    Returns:
        Final observed state (only when max_ticks is set).

    Raises:
        MpvpaperStopError: Any startup failure or color-scheme failure.
    """
    config = windowManagerEnvironment_resolve(config)
    configSummary_log(config)

    socketFile_wait(config.player.socket_path, config.player.socket_wait_ms)
    if config.detach:
        process_detach()

    player = playerControl_create(config)
    window_source = windowSource_create(config)
    color_runner = colorRunner_create(config, player)

    monitor = StateMonitor(window_source, player, color_runner)
    return monitor.loop_run(config.monitor.period_ms, max_ticks=max_ticks)

"""Daemon bootstrap helpers for config, environment, detaching, and wiring."""

from __future__ import annotations

import argparse
import logging
import os
import time
from dataclasses import replace
from pathlib import Path
from typing import Callable, Mapping, Optional

from mpvpaper_stop.colors.runner import ColorSchemeRunner
from mpvpaper_stop.common.config import ConfigLoader, RuntimeConfig
from mpvpaper_stop.common.errors import DetachError, SocketWaitTimeout
from mpvpaper_stop.common.settings import settings
from mpvpaper_stop.common.types import WindowManagerBackend
from mpvpaper_stop.hyprland.socket_path import hyprlandSocketPath_resolve
from mpvpaper_stop.hyprland.window_source import (
    CommandWindowCountSource,
    SocketWindowCountSource,
    WindowCountSource,
)
from mpvpaper_stop.player.control import PlayerControl

logger = logging.getLogger(__name__)


def configFromArgs_load(args: argparse.Namespace) -> RuntimeConfig:
    """
    Load configuration file and apply CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Loaded config.

    Raises:
        FileNotFoundError: If an explicit --config file does not exist.
        ConfigurationError: If the file or an override is invalid.
    """
    config_path: Path | None = Path(args.config) if getattr(args, "config", None) else None
    return ConfigLoader.configWithOverrides_load(
        file_path=config_path,
        verbose=getattr(args, "verbose", False),
        detach=getattr(args, "fork", False),
        socket_path=getattr(args, "socket_path", None),
        socket_wait_ms=getattr(args, "socket_wait_time", None),
        period_ms=getattr(args, "period", None),
        color_backends=getattr(args, "color_backends", None),
        wm_backend=getattr(args, "wm_backend", None),
        log_file=getattr(args, "log_file", None),
        log_level=getattr(args, "log_level", None),
    )


def windowManagerEnvironment_resolve(
    config: RuntimeConfig, environ: Optional[Mapping[str, str]] = None
) -> RuntimeConfig:
    """
    Resolve the Hyprland socket path for the socket backend.

    Args:
        config: Loaded config.
        environ: Environment mapping; defaults to `os.environ`.

    Returns:
        Config with `window_manager.socket_path` filled in (unchanged for the
        command backend).

    Raises:
        EnvironmentConfigError: If the environment does not identify a socket.
    """
    if config.window_manager.backend is not WindowManagerBackend.SOCKET:
        return config
    socket_path = hyprlandSocketPath_resolve(environ)
    logger.debug("Hyprland socket: %s", socket_path)
    return replace(config, window_manager=replace(config.window_manager, socket_path=socket_path))


def socketFile_wait(
    socket_path: str,
    wait_ms: int,
    sleep: Callable[[float], None] = time.sleep,
    exists: Callable[[str], bool] = os.path.exists,
) -> None:
    """
    Poll for the player socket file in fixed steps.

    Args:
        socket_path: Path expected to appear.
        wait_ms: Total time budget in milliseconds.
        sleep: Sleep function (injectable for tests).
        exists: Existence check (injectable for tests).

    Raises:
        SocketWaitTimeout: If the file does not appear within `wait_ms`.
    """
    step_ms: int = settings.SOCKET_WAIT_STEP_MS
    elapsed_ms: int = 0
    while elapsed_ms < wait_ms:
        if exists(socket_path):
            logger.debug("Socket %s is available", socket_path)
            return
        logger.debug("Socket %s not available, sleeping...", socket_path)
        sleep(step_ms / settings.MS_PER_SECOND)
        elapsed_ms += step_ms
    if exists(socket_path):
        return
    raise SocketWaitTimeout(f"Socket {socket_path} not available after waiting {wait_ms} ms")


def process_detach() -> None:
    """
    Fork into the background: the parent exits 0, the child starts a session.

    Raises:
        DetachError: If fork() or setsid() fails.
    """
    try:
        pid = os.fork()
    except OSError as exc:
        raise DetachError(f"fork failed: {exc}") from exc
    if pid > 0:
        os._exit(0)
    try:
        os.setsid()
    except OSError as exc:
        raise DetachError(f"setsid failed: {exc}") from exc
    logger.info("Detached as pid %s", os.getpid())


def windowSource_create(config: RuntimeConfig) -> WindowCountSource:
    """
    Build the configured window count source.

    The socket backend connects once here so an unreachable compositor is
    reported at startup rather than on the first tick.

    Raises:
        ChannelUnavailable: If the Hyprland socket cannot be connected.
    """
    if config.window_manager.backend is WindowManagerBackend.COMMAND:
        logger.info("Window manager backend: %s", " ".join(config.window_manager.command))
        return CommandWindowCountSource(
            command=config.window_manager.command,
            timeout_seconds=config.ipc.timeout_seconds,
        )

    assert config.window_manager.socket_path is not None
    source = SocketWindowCountSource.fromPath_create(
        config.window_manager.socket_path,
        buffer_size=config.ipc.buffer_size,
        timeout_seconds=config.ipc.timeout_seconds,
    )
    source.channel.connection_establish()
    source.channel.connection_close()
    logger.info("Window manager backend: %s", config.window_manager.socket_path)
    return source


def playerControl_create(config: RuntimeConfig) -> PlayerControl:
    """
    Connect to the player socket.

    Raises:
        ChannelUnavailable: If the player socket cannot be connected.
    """
    player = PlayerControl.fromPath_create(
        config.player.socket_path,
        buffer_size=config.ipc.buffer_size,
        timeout_seconds=config.ipc.timeout_seconds,
    )
    player.connection_establish()
    return player


def colorRunner_create(
    config: RuntimeConfig, player: PlayerControl
) -> Optional[ColorSchemeRunner]:
    """
    Validate color tools and point mpv screenshots at the temp directory.

    Returns:
        Runner, or None when no color backend is selected.

    Raises:
        ColorSchemeError: If a tool is unusable.
        PlayerConfigurationError: If mpv rejects the screenshot directory.
    """
    if not config.colors.enabled:
        return None
    runner = ColorSchemeRunner(config.colors.backends, config.colors.temp_dir)
    runner.tools_validate()
    player.screenshotDirectory_set(config.colors.temp_dir)
    return runner

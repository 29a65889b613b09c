"""Hyprland request socket discovery from the session environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from mpvpaper_stop.common.errors import EnvironmentConfigError
from mpvpaper_stop.common.settings import settings

logger = logging.getLogger(__name__)

__all__ = ["hyprlandSocketPath_resolve"]


def _environment_require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if not value:
        raise EnvironmentConfigError(f"{name} is not set")
    return value


def hyprlandSocketPath_resolve(
    environ: Optional[Mapping[str, str]] = None,
    legacy_root: str = settings.HYPRLAND_LEGACY_ROOT,
) -> str:
    """
    Locate the Hyprland request socket.

    `$XDG_RUNTIME_DIR/hypr/$HYPRLAND_INSTANCE_SIGNATURE/.socket.sock` is tried
    first; older Hyprland releases used `/tmp/hypr/<signature>/.socket.sock`.

    Args:
        environ:
            Environment mapping; defaults to `os.environ`.
        legacy_root:
            Directory holding pre-0.40 Hyprland instance sockets.

    Returns:
        Path of an existing socket file.

    Raises:
        EnvironmentConfigError:
            Raised when either variable is unset or neither path exists.
    """
    if environ is None:
        environ = os.environ
    runtime_dir = _environment_require(environ, settings.HYPRLAND_RUNTIME_ENV)
    signature = _environment_require(environ, settings.HYPRLAND_SIGNATURE_ENV)

    primary = Path(runtime_dir) / "hypr" / signature / settings.HYPRLAND_SOCKET_NAME
    if primary.exists():
        return str(primary)
    logger.warning("Hyprland socket at %s not found, falling back to %s", primary, legacy_root)

    legacy = Path(legacy_root) / signature / settings.HYPRLAND_SOCKET_NAME
    if legacy.exists():
        return str(legacy)
    raise EnvironmentConfigError(f"Hyprland socket path {legacy} does not exist")

"""
Error taxonomy for mpvpaper-stop.

Low-level I/O helpers raise these typed errors rather than exiting. The
daemon entry point decides which of them are fatal and which merely skip one
polling tick.
"""

from __future__ import annotations

__all__ = [
    "MpvpaperStopError",
    "ConfigurationError",
    "EnvironmentConfigError",
    "SocketWaitTimeout",
    "ChannelUnavailable",
    "WindowManagerUnavailable",
    "PlayerConfigurationError",
    "ColorSchemeError",
    "DetachError",
    "ResponseDecodeError",
]


class MpvpaperStopError(Exception):
    """Base class for all daemon errors"""


class ConfigurationError(MpvpaperStopError):
    """Invalid configuration value or config file"""


class EnvironmentConfigError(MpvpaperStopError):
    """Required environment variable missing or Hyprland socket unresolvable"""


class SocketWaitTimeout(MpvpaperStopError):
    """Player socket file did not appear within the configured wait time"""


class ChannelUnavailable(MpvpaperStopError):
    """Transport failure on an IPC channel (connect, write, or empty read)"""


class WindowManagerUnavailable(MpvpaperStopError):
    """Active workspace window count could not be obtained this tick"""


class PlayerConfigurationError(MpvpaperStopError):
    """Player rejected a one-time configuration command"""


class ColorSchemeError(MpvpaperStopError):
    """Color backend missing, failing, or its screenshot could not be handled"""


class DetachError(MpvpaperStopError):
    """fork() or setsid() failed while detaching"""


class ResponseDecodeError(MpvpaperStopError):
    """IPC response was not the JSON object the protocol expects"""

"""Application constants - single source of truth for protocol and defaults

This module provides a singleton Settings class that consolidates:
1. Wire-level constants for the Hyprland and mpv IPC protocols
2. Default values for every runtime configuration knob
3. External tool command lines for the color backends

Runtime configuration itself lives in RuntimeConfig objects built by
ConfigLoader and passed explicitly; Settings never holds mutable state.

Usage:
    from mpvpaper_stop.common.settings import settings

    time.sleep(config.monitor.period_ms / settings.MS_PER_SECOND)
"""

from typing import Optional


class Settings:
    """Singleton holder for protocol constants and defaults"""

    _instance: Optional["Settings"] = None

    def __new__(cls) -> "Settings":
        """Ensure only one Settings instance exists"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    # =========================================================================
    # Defaults
    # =========================================================================

    DEFAULT_PERIOD_MS: int = 1000
    """Polling period between monitor ticks (milliseconds)"""

    DEFAULT_PLAYER_SOCKET_PATH: str = "/tmp/mpvsocket"
    """mpv IPC socket created by `mpvpaper -o "input-ipc-server=..."`"""

    DEFAULT_SOCKET_WAIT_MS: int = 5000
    """Total time to wait for the player socket file at startup (milliseconds)"""

    SOCKET_WAIT_STEP_MS: int = 100
    """Sleep between socket existence checks during the startup wait"""

    DEFAULT_TEMP_DIR: str = "/tmp/mpvpaper-stop"
    """Holds color tool logs and transient screenshots"""

    TEMP_DIR_MODE: int = 0o755

    MS_PER_SECOND: float = 1000.0
    """Convert millisecond settings to seconds for time.sleep()"""

    DEFAULT_BUFFER_SIZE: int = 4096
    """Maximum bytes read for one IPC response"""

    DEFAULT_LOG_LEVEL: str = "WARNING"
    DEFAULT_LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # =========================================================================
    # Hyprland
    # =========================================================================

    HYPRLAND_RUNTIME_ENV: str = "XDG_RUNTIME_DIR"
    HYPRLAND_SIGNATURE_ENV: str = "HYPRLAND_INSTANCE_SIGNATURE"
    HYPRLAND_SOCKET_NAME: str = ".socket.sock"
    HYPRLAND_LEGACY_ROOT: str = "/tmp/hypr"

    HYPRLAND_ACTIVE_WORKSPACE_QUERY: bytes = b"j/activeworkspace"
    """Request payload on the Hyprland request socket (no trailing newline)"""

    HYPRCTL_ACTIVE_WORKSPACE_COMMAND: tuple[str, ...] = ("hyprctl", "activeworkspace", "-j")
    """Command-backend equivalent of HYPRLAND_ACTIVE_WORKSPACE_QUERY"""

    # =========================================================================
    # Color backends
    # =========================================================================

    PYWAL_PROBE_COMMAND: tuple[str, ...] = ("wal", "-v")
    MATUGEN_PROBE_COMMAND: tuple[str, ...] = ("matugen", "--version")

    PYWAL_LOG_NAME: str = "last_wal.log"
    MATUGEN_LOG_NAME: str = "last_matugen.log"

    MPV_SUCCESS: str = "success"
    """Value of the `error` field in a successful mpv IPC reply"""

    MPV_EVENT_READ_LIMIT: int = 8
    """Reads tolerated while only asynchronous event lines arrive before a reply"""


# Global singleton instance
settings = Settings()
"""Global settings singleton instance

Import this anywhere in the application:
    from mpvpaper_stop.common.settings import settings
"""

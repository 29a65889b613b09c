"""Unix socket transport shared by the Hyprland and mpv channels."""

from mpvpaper_stop.ipc.channel import ResponseFraming, UnixSocketChannel

__all__ = [
    "ResponseFraming",
    "UnixSocketChannel",
]

"""
mpvpaper-stop: pause an mpvpaper wallpaper while Hyprland windows are open
Optional pywal/matugen color regeneration from the paused frame
"""

__version__ = "1.2.0"

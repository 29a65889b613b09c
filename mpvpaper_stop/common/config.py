"""Configuration file loading and management"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml

from mpvpaper_stop.common.errors import ConfigurationError
from mpvpaper_stop.common.settings import settings
from mpvpaper_stop.common.types import ColorBackend, WindowManagerBackend


@dataclass(frozen=True)
class PlayerConfig:
    """mpv (mpvpaper) IPC settings"""
    socket_path: str = settings.DEFAULT_PLAYER_SOCKET_PATH
    socket_wait_ms: int = settings.DEFAULT_SOCKET_WAIT_MS


@dataclass(frozen=True)
class WindowManagerConfig:
    """Hyprland query settings"""
    backend: WindowManagerBackend = WindowManagerBackend.SOCKET
    socket_path: Optional[str] = None  # Resolved from the environment at startup
    command: tuple[str, ...] = settings.HYPRCTL_ACTIVE_WORKSPACE_COMMAND


@dataclass(frozen=True)
class MonitorConfig:
    """Polling loop settings"""
    period_ms: int = settings.DEFAULT_PERIOD_MS


@dataclass(frozen=True)
class ColorsConfig:
    """Color-scheme regeneration settings"""
    backends: tuple[ColorBackend, ...] = ()
    temp_dir: str = settings.DEFAULT_TEMP_DIR

    @property
    def enabled(self) -> bool:
        """True when at least one color backend is selected"""
        return bool(self.backends)


@dataclass(frozen=True)
class IpcConfig:
    """Low-level socket settings shared by both channels"""
    buffer_size: int = settings.DEFAULT_BUFFER_SIZE
    timeout_seconds: Optional[float] = None  # None blocks like the OS default


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration settings"""
    level: str = settings.DEFAULT_LOG_LEVEL
    file: Optional[str] = None
    format: str = settings.DEFAULT_LOG_FORMAT


@dataclass(frozen=True)
class RuntimeConfig:
    """Complete, immutable daemon configuration"""
    verbose: bool = False
    detach: bool = False
    player: PlayerConfig = field(default_factory=PlayerConfig)
    window_manager: WindowManagerConfig = field(default_factory=WindowManagerConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    colors: ColorsConfig = field(default_factory=ColorsConfig)
    ipc: IpcConfig = field(default_factory=IpcConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def colorBackends_parse(names: Iterable[str]) -> tuple[ColorBackend, ...]:
    """
    Convert backend names to ColorBackend values, dropping duplicates

    Args:
        names: Backend names such as "pywal" or "matugen"

    Returns:
        Backends in first-seen order

    Raises:
        ConfigurationError: If a name is not a known backend
    """
    backends: list[ColorBackend] = []
    for name in names:
        try:
            backend = ColorBackend(str(name).lower())
        except ValueError:
            known = ", ".join(b.value for b in ColorBackend)
            raise ConfigurationError(f"Unknown color backend '{name}' (known: {known})") from None
        if backend not in backends:
            backends.append(backend)
    return tuple(backends)


def millisecondsValue_parse(name: str, value: Any) -> int:
    """
    Convert a command-line millisecond value such as "250" to an int

    Raises:
        ConfigurationError: If the value is not a whole number
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {name} '{value}': expected milliseconds") from None


def windowManagerBackend_parse(name: str) -> WindowManagerBackend:
    """
    Convert a window-manager backend name to its enum value

    Raises:
        ConfigurationError: If the name is not a known backend
    """
    try:
        return WindowManagerBackend(str(name).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown window manager backend '{name}' (known: socket, command)"
        ) from None


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/mpvpaper-stop/config.yml",
        "/etc/mpvpaper-stop/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary (empty for an empty file)

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
            ValueError: If the document is not a mapping
        """
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def section_get(data: Dict[str, Any], name: str) -> Dict[str, Any]:
        """Return a config section, treating a missing one as empty"""
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Config section '{name}' must be a dictionary")
        return section

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> RuntimeConfig:
        """
        Parse configuration dictionary into RuntimeConfig object

        Every key is optional; absent keys take the documented defaults.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed and validated RuntimeConfig

        Raises:
            ConfigurationError: If a value has the wrong type or range
        """
        player_data = ConfigLoader.section_get(data, "player")
        wm_data = ConfigLoader.section_get(data, "window_manager")
        monitor_data = ConfigLoader.section_get(data, "monitor")
        colors_data = ConfigLoader.section_get(data, "colors")
        ipc_data = ConfigLoader.section_get(data, "ipc")
        logging_data = ConfigLoader.section_get(data, "logging")

        try:
            player = PlayerConfig(
                socket_path=str(player_data.get("socket_path", settings.DEFAULT_PLAYER_SOCKET_PATH)),
                socket_wait_ms=int(player_data.get("socket_wait_ms", settings.DEFAULT_SOCKET_WAIT_MS)),
            )

            command = wm_data.get("command", list(settings.HYPRCTL_ACTIVE_WORKSPACE_COMMAND))
            if isinstance(command, str):
                command = command.split()
            window_manager = WindowManagerConfig(
                backend=windowManagerBackend_parse(wm_data.get("backend", "socket")),
                command=tuple(str(part) for part in command),
            )

            monitor = MonitorConfig(
                period_ms=int(monitor_data.get("period_ms", settings.DEFAULT_PERIOD_MS)),
            )

            backend_names = colors_data.get("backends") or []
            if isinstance(backend_names, str):
                backend_names = [backend_names]
            colors = ColorsConfig(
                backends=colorBackends_parse(backend_names),
                temp_dir=str(colors_data.get("temp_dir", settings.DEFAULT_TEMP_DIR)),
            )

            timeout = ipc_data.get("timeout_seconds")
            ipc = IpcConfig(
                buffer_size=int(ipc_data.get("buffer_size", settings.DEFAULT_BUFFER_SIZE)),
                timeout_seconds=float(timeout) if timeout is not None else None,
            )

            logging = LoggingConfig(
                level=str(logging_data.get("level", settings.DEFAULT_LOG_LEVEL)).upper(),
                file=logging_data.get("file"),
                format=str(logging_data.get("format", settings.DEFAULT_LOG_FORMAT)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid config value: {e}") from e

        config = RuntimeConfig(
            verbose=bool(data.get("verbose", False)),
            detach=bool(data.get("detach", False)),
            player=player,
            window_manager=window_manager,
            monitor=monitor,
            colors=colors,
            ipc=ipc,
            logging=logging,
        )
        ConfigLoader.config_validate(config)
        return config

    @staticmethod
    def config_validate(config: RuntimeConfig) -> None:
        """
        Check value ranges that the daemon cannot run without

        Raises:
            ConfigurationError: If any value is out of range
        """
        if config.monitor.period_ms <= 0:
            raise ConfigurationError("period must be greater than 0")
        if config.player.socket_wait_ms < 0:
            raise ConfigurationError("socket wait time must not be negative")
        if config.ipc.buffer_size <= 0:
            raise ConfigurationError("ipc buffer_size must be greater than 0")
        if config.ipc.timeout_seconds is not None and config.ipc.timeout_seconds <= 0:
            raise ConfigurationError("ipc timeout_seconds must be greater than 0")
        if not config.window_manager.command:
            raise ConfigurationError("window_manager command must not be empty")
        if config.logging.level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigurationError(f"Unknown log level '{config.logging.level}'")

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> RuntimeConfig:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to built-in defaults.

        Returns:
            Parsed RuntimeConfig object

        Raises:
            ConfigurationError: If the config file is missing, unreadable or invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return ConfigLoader.config_parse({})

        try:
            data = ConfigLoader.yaml_load(file_path)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {file_path}: {e}") from e
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigurationError(f"Error loading config {file_path}: {e}") from e
        return ConfigLoader.config_parse(data)

    @staticmethod
    def configWithOverrides_load(
        file_path: Optional[Path] = None,
        **overrides: Any
    ) -> RuntimeConfig:
        """
        Load configuration and apply command-line overrides

        Overrides whose value is None (or an empty backend list) leave the
        file value untouched.

        Args:
            file_path: Optional path to config file
            **overrides: Key-value pairs to override config values

        Returns:
            RuntimeConfig with overrides applied

        Example:
            config = ConfigLoader.configWithOverrides_load(
                socket_path="/tmp/mpv-wall",
                period_ms=500,
            )
        """
        config = ConfigLoader.config_load(file_path)
        return ConfigLoader.overrides_apply(config, **overrides)

    @staticmethod
    def overrides_apply(config: RuntimeConfig, **overrides: Any) -> RuntimeConfig:
        """Return a copy of config with non-None overrides applied and validated"""

        def given(key: str) -> bool:
            return overrides.get(key) is not None

        if overrides.get("verbose"):
            config = replace(config, verbose=True)
        if overrides.get("detach"):
            config = replace(config, detach=True)

        player = config.player
        if given("socket_path"):
            player = replace(player, socket_path=overrides["socket_path"])
        if given("socket_wait_ms"):
            wait_ms = millisecondsValue_parse("socket wait time", overrides["socket_wait_ms"])
            player = replace(player, socket_wait_ms=wait_ms)

        monitor = config.monitor
        if given("period_ms"):
            period_ms = millisecondsValue_parse("period", overrides["period_ms"])
            monitor = replace(monitor, period_ms=period_ms)

        window_manager = config.window_manager
        if given("wm_backend"):
            window_manager = replace(
                window_manager, backend=windowManagerBackend_parse(overrides["wm_backend"])
            )

        colors = config.colors
        if overrides.get("color_backends"):
            colors = replace(colors, backends=colorBackends_parse(overrides["color_backends"]))

        logging = config.logging
        if given("log_file"):
            logging = replace(logging, file=overrides["log_file"])
        if given("log_level"):
            logging = replace(logging, level=str(overrides["log_level"]).upper())

        config = replace(
            config,
            player=player,
            monitor=monitor,
            window_manager=window_manager,
            colors=colors,
            logging=logging,
        )
        ConfigLoader.config_validate(config)
        return config

"""Unit tests for configuration loading, parsing, and overrides"""

from pathlib import Path

import pytest

from mpvpaper_stop.common.config import (
    ConfigLoader,
    RuntimeConfig,
    colorBackends_parse,
)
from mpvpaper_stop.common.errors import ConfigurationError
from mpvpaper_stop.common.types import ColorBackend, WindowManagerBackend


class TestConfigLoaderYAMLLoading:
    """Test YAML file loading"""

    def test_yaml_load_valid_file(self, tmp_path):
        """Test loading valid YAML file"""
        config_file = tmp_path / "test.yml"
        config_file.write_text(
            """
player:
  socket_path: "/tmp/mpv-wall"
"""
        )

        data = ConfigLoader.yaml_load(config_file)
        assert data["player"]["socket_path"] == "/tmp/mpv-wall"

    def test_yaml_load_empty_file_is_empty_dict(self, tmp_path):
        """Test an empty file loads as no settings"""
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert ConfigLoader.yaml_load(config_file) == {}

    def test_yaml_load_missing_file_raises(self):
        """Test loading non-existent file raises FileNotFoundError"""
        with pytest.raises(FileNotFoundError):
            ConfigLoader.yaml_load(Path("/nonexistent/config.yml"))

    def test_yaml_load_non_dict_raises(self, tmp_path):
        """Test loading YAML that isn't a dict raises ValueError"""
        config_file = tmp_path / "list.yml"
        config_file.write_text("- item1\n- item2")

        with pytest.raises(ValueError, match="must contain a YAML dictionary"):
            ConfigLoader.yaml_load(config_file)

    def test_config_load_invalid_yaml_raises_configuration_error(self, tmp_path):
        """Test invalid YAML surfaces as ConfigurationError"""
        config_file = tmp_path / "invalid.yml"
        config_file.write_text("invalid: yaml: content: [unclosed")

        with pytest.raises(ConfigurationError):
            ConfigLoader.config_load(config_file)

    def test_config_load_directory_raises_configuration_error(self, tmp_path):
        """Test a directory given as the config file surfaces as ConfigurationError"""
        with pytest.raises(ConfigurationError, match="Cannot read config file"):
            ConfigLoader.config_load(tmp_path)

    def test_config_load_missing_explicit_file_raises_configuration_error(self, tmp_path):
        """Test an explicit config path that does not exist is a configuration error"""
        with pytest.raises(ConfigurationError, match="Cannot read config file"):
            ConfigLoader.config_load(tmp_path / "absent.yml")

    def test_config_load_without_file_uses_defaults(self, tmp_path, monkeypatch):
        """Test no config file anywhere falls back to defaults"""
        monkeypatch.setattr(
            ConfigLoader, "DEFAULT_CONFIG_PATHS", [str(tmp_path / "absent.yml")]
        )
        assert ConfigLoader.config_load() == RuntimeConfig()

    def test_example_config_parses(self):
        """Test the example config.yml shipped with the repository"""
        example = Path(__file__).parent.parent.parent / "config.yml"
        if not example.exists():
            pytest.skip("config.yml not found")
        config = ConfigLoader.config_load(example)
        assert config.player.socket_path == "/tmp/mpvsocket"
        assert config.colors.backends == ()


class TestConfigLoaderParsing:
    """Test configuration dictionary parsing"""

    def test_defaults(self):
        """Test an empty dictionary yields documented defaults"""
        config = ConfigLoader.config_parse({})

        assert config.verbose is False
        assert config.detach is False
        assert config.player.socket_path == "/tmp/mpvsocket"
        assert config.player.socket_wait_ms == 5000
        assert config.monitor.period_ms == 1000
        assert config.window_manager.backend is WindowManagerBackend.SOCKET
        assert config.window_manager.socket_path is None
        assert config.window_manager.command == ("hyprctl", "activeworkspace", "-j")
        assert config.colors.enabled is False
        assert config.colors.temp_dir == "/tmp/mpvpaper-stop"
        assert config.ipc.timeout_seconds is None
        assert config.logging.level == "WARNING"

    def test_full(self):
        """Test every section is read"""
        data = {
            "verbose": True,
            "player": {"socket_path": "/run/mpv.sock", "socket_wait_ms": 250},
            "window_manager": {"backend": "command", "command": "hyprctl -j activeworkspace"},
            "monitor": {"period_ms": 400},
            "colors": {"backends": ["matugen", "pywal"], "temp_dir": "/tmp/colors"},
            "ipc": {"buffer_size": 8192, "timeout_seconds": 2},
            "logging": {"level": "info", "file": "/tmp/mps.log"},
        }

        config = ConfigLoader.config_parse(data)

        assert config.verbose is True
        assert config.player.socket_path == "/run/mpv.sock"
        assert config.player.socket_wait_ms == 250
        assert config.window_manager.backend is WindowManagerBackend.COMMAND
        assert config.window_manager.command == ("hyprctl", "-j", "activeworkspace")
        assert config.monitor.period_ms == 400
        assert config.colors.backends == (ColorBackend.MATUGEN, ColorBackend.PYWAL)
        assert config.ipc.timeout_seconds == 2.0
        assert config.logging.level == "INFO"
        assert config.logging.file == "/tmp/mps.log"

    def test_single_backend_string(self):
        """Test a single backend may be given as a string"""
        config = ConfigLoader.config_parse({"colors": {"backends": "pywal"}})
        assert config.colors.backends == (ColorBackend.PYWAL,)

    @pytest.mark.parametrize("period", [0, -5])
    def test_non_positive_period_raises(self, period):
        """Test period must be positive"""
        with pytest.raises(ConfigurationError, match="period must be greater than 0"):
            ConfigLoader.config_parse({"monitor": {"period_ms": period}})

    def test_non_numeric_value_raises(self):
        """Test wrongly typed values raise ConfigurationError"""
        with pytest.raises(ConfigurationError):
            ConfigLoader.config_parse({"monitor": {"period_ms": "fast"}})

    def test_unknown_backend_raises(self):
        """Test unknown window manager backend raises"""
        with pytest.raises(ConfigurationError, match="Unknown window manager backend"):
            ConfigLoader.config_parse({"window_manager": {"backend": "sway"}})

    def test_section_must_be_mapping(self):
        """Test a scalar section raises"""
        with pytest.raises(ConfigurationError, match="must be a dictionary"):
            ConfigLoader.config_parse({"player": "oops"})

    def test_unknown_log_level_raises(self):
        """Test log level validation"""
        with pytest.raises(ConfigurationError, match="Unknown log level"):
            ConfigLoader.config_parse({"logging": {"level": "loud"}})


class TestColorBackendsParse:
    """Test color backend name parsing"""

    def test_duplicates_dropped_in_order(self):
        """Test first-seen order is kept and duplicates dropped"""
        assert colorBackends_parse(["matugen", "pywal", "matugen"]) == (
            ColorBackend.MATUGEN,
            ColorBackend.PYWAL,
        )

    def test_unknown_raises(self):
        """Test unknown names raise ConfigurationError"""
        with pytest.raises(ConfigurationError, match="Unknown color backend"):
            colorBackends_parse(["wallust"])


class TestConfigOverrides:
    """Test command-line overrides"""

    def test_overrides_applied(self, tmp_path):
        """Test CLI values replace file values"""
        config_file = tmp_path / "config.yml"
        config_file.write_text("monitor:\n  period_ms: 1500\nplayer:\n  socket_wait_ms: 100\n")

        config = ConfigLoader.configWithOverrides_load(
            file_path=config_file,
            verbose=True,
            detach=True,
            socket_path="/tmp/other",
            period_ms=200,
            color_backends=["pywal"],
            wm_backend="command",
        )

        assert config.verbose is True
        assert config.detach is True
        assert config.player.socket_path == "/tmp/other"
        assert config.player.socket_wait_ms == 100
        assert config.monitor.period_ms == 200
        assert config.colors.backends == (ColorBackend.PYWAL,)
        assert config.window_manager.backend is WindowManagerBackend.COMMAND

    def test_wait_time_and_period_are_independent(self):
        """Test -w and -t set separate values"""
        config = ConfigLoader.overrides_apply(RuntimeConfig(), socket_wait_ms=7000)
        assert config.player.socket_wait_ms == 7000
        assert config.monitor.period_ms == 1000

        config = ConfigLoader.overrides_apply(RuntimeConfig(), period_ms=250)
        assert config.player.socket_wait_ms == 5000
        assert config.monitor.period_ms == 250

    def test_none_overrides_keep_values(self):
        """Test None overrides leave the config untouched"""
        base = RuntimeConfig()
        assert ConfigLoader.overrides_apply(
            base, socket_path=None, period_ms=None, color_backends=None, log_level=None
        ) == base

    def test_invalid_override_raises(self):
        """Test overrides are validated"""
        with pytest.raises(ConfigurationError):
            ConfigLoader.overrides_apply(RuntimeConfig(), period_ms=0)

    def test_verbose_override_keeps_configured_level(self):
        """Test verbose is recorded without rewriting the configured level"""
        config = ConfigLoader.overrides_apply(RuntimeConfig(), verbose=True)
        assert config.verbose is True
        assert config.logging.level == "WARNING"

    def test_millisecond_strings_are_converted(self):
        """Test command-line strings for -w and -t become integers"""
        config = ConfigLoader.overrides_apply(RuntimeConfig(), socket_wait_ms="300", period_ms="40")
        assert config.player.socket_wait_ms == 300
        assert config.monitor.period_ms == 40

    @pytest.mark.parametrize("key", ["period_ms", "socket_wait_ms"])
    @pytest.mark.parametrize("value", ["abc", "1.5", ""])
    def test_non_integer_milliseconds_raise(self, key, value):
        """Test non-integer millisecond values are configuration errors"""
        with pytest.raises(ConfigurationError, match="expected milliseconds"):
            ConfigLoader.overrides_apply(RuntimeConfig(), **{key: value})

    def test_config_is_immutable(self):
        """Test RuntimeConfig cannot be mutated after construction"""
        config = RuntimeConfig()
        with pytest.raises(AttributeError):
            config.verbose = True  # type: ignore[misc]

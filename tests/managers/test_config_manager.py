import pytest

from timezone_service.managers.config_manager import (
    ConfigError,
    ConfigManager,
    ServerSettings,
)
from timezone_service.models.enums import LogLevel


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_packaged_config_matches_defaults():
    settings = ConfigManager(environ={}).load()

    assert settings == ServerSettings()
    assert settings.port == 8080
    assert settings.base_path == "/api"
    assert settings.write_timeout == 10.0
    assert settings.idle_timeout == 5.0
    assert settings.shutdown_timeout == 30.0


def test_loads_values_from_file(tmp_path):
    config = _write(tmp_path / "config.yaml", """
server:
  host: 127.0.0.1
  port: 9090
  base_path: /v1/
  timeouts:
    shutdown: 12
logging:
  level: debug
""")

    settings = ConfigManager(config, environ={}).load()

    assert settings.host == "127.0.0.1"
    assert settings.port == 9090
    assert settings.base_path == "/v1"
    assert settings.shutdown_timeout == 12.0
    assert settings.write_timeout == 10.0
    assert settings.log_level is LogLevel.DEBUG


def test_environment_overrides_file(tmp_path):
    config = _write(tmp_path / "config.yaml", "server:\n  port: 9090\n")
    environ = {"TIMEZONE_SERVICE_PORT": "7000", "TIMEZONE_SERVICE_HOST": "::1"}

    settings = ConfigManager(config, environ=environ).load()

    assert settings.port == 7000
    assert settings.host == "::1"


def test_config_path_from_environment(tmp_path):
    config = _write(tmp_path / "alt.yaml", "server:\n  port: 8181\n")

    settings = ConfigManager(environ={"TIMEZONE_SERVICE_CONFIG": str(config)}).load()

    assert settings.port == 8181


@pytest.mark.parametrize("text", ["server: [unclosed", "- just\n- a list\n"])
def test_broken_file_falls_back_to_factory_defaults(tmp_path, text):
    config = _write(tmp_path / "config.yaml", text)

    settings = ConfigManager(config, environ={}).load()

    assert settings == ServerSettings()


def test_missing_file_falls_back_to_factory_defaults(tmp_path):
    settings = ConfigManager(tmp_path / "nope.yaml", environ={}).load()
    assert settings.port == 8080


def test_unreadable_defaults_raise_config_error(tmp_path):
    manager = ConfigManager(tmp_path / "nope.yaml", defaults_path=tmp_path / "gone.yaml", environ={})

    with pytest.raises(ConfigError):
        manager.load()


@pytest.mark.parametrize(
    "data",
    [
        {"server": {"port": 70000}},
        {"server": {"port": "eighty"}},
        {"server": {"timeouts": {"shutdown": 0}}},
        {"server": {"base_path": "api"}},
        {"logging": {"level": "verbose"}},
        {"server": 5},
        {"server": "abc"},
        {"server": ["host", "port"]},
        {"server": {"timeouts": 5}},
        {"logging": "debug"},
    ],
)
def test_invalid_values_raise_config_error(data):
    with pytest.raises(ConfigError):
        ServerSettings.from_dict(data)


def test_settings_before_load_raises():
    with pytest.raises(ConfigError):
        ConfigManager(environ={}).settings


@pytest.mark.parametrize(
    "text",
    [
        "server: 5\n",
        "server: abc\n",
        "server:\n  timeouts: 5\n",
        "logging: debug\n",
    ],
)
def test_section_of_wrong_type_raises_config_error(tmp_path, text):
    config = _write(tmp_path / "config.yaml", text)

    with pytest.raises(ConfigError, match="must be a mapping"):
        ConfigManager(config, environ={}).load()


def test_section_of_wrong_type_raises_with_env_overrides(tmp_path):
    config = _write(tmp_path / "config.yaml", "server: abc\n")

    with pytest.raises(ConfigError):
        ConfigManager(config, environ={"TIMEZONE_SERVICE_PORT": "9000"}).load()

"""
Config Manager

Loads the service configuration from YAML, applies environment overrides
and validates the result into ServerSettings.
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from timezone_service.utils.logger import get_logger
from timezone_service.models.enums import LogCategory, LogLevel

log = get_logger().for_category(LogCategory.CONFIG)

PACKAGE_DIR = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PACKAGE_DIR / "config" / "config.yaml"
FACTORY_DEFAULTS_PATH = PACKAGE_DIR / "config" / "factory_defaults.yaml"

ENV_CONFIG_PATH = "TIMEZONE_SERVICE_CONFIG"
ENV_HOST = "TIMEZONE_SERVICE_HOST"
ENV_PORT = "TIMEZONE_SERVICE_PORT"


class ConfigError(Exception):
    """Configuration value is missing or invalid"""
    pass


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return a nested config section, {} when absent; anything but a mapping is an error."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ServerSettings:
    """Listener and request-handling settings"""
    host: str = "0.0.0.0"
    port: int = 8080
    base_path: str = "/api"
    write_timeout: float = 10.0
    idle_timeout: float = 5.0
    shutdown_timeout: float = 30.0
    log_level: LogLevel = LogLevel.INFO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerSettings":
        """
        Build settings from the ``server`` / ``logging`` sections of a config dict.

        Raises:
            ConfigError: if a value has the wrong type or range
        """
        server = _section(data, "server")
        timeouts = _section(server, "timeouts")
        logging_cfg = _section(data, "logging")

        try:
            port = int(server.get("port", cls.port))
            write_timeout = float(timeouts.get("write", cls.write_timeout))
            idle_timeout = float(timeouts.get("idle", cls.idle_timeout))
            shutdown_timeout = float(timeouts.get("shutdown", cls.shutdown_timeout))
        except (TypeError, ValueError) as ex:
            raise ConfigError(f"Invalid server setting: {ex}") from ex

        if not 0 <= port <= 65535:
            raise ConfigError(f"Port out of range: {port}")
        for name, value in (
            ("write", write_timeout),
            ("idle", idle_timeout),
            ("shutdown", shutdown_timeout),
        ):
            if value <= 0:
                raise ConfigError(f"Timeout '{name}' must be positive, got {value}")

        base_path = str(server.get("base_path", cls.base_path)).rstrip("/")
        if base_path and not base_path.startswith("/"):
            raise ConfigError(f"base_path must start with '/': {base_path}")

        level_name = str(logging_cfg.get("level", cls.log_level.name)).upper()
        try:
            log_level = LogLevel[level_name]
        except KeyError:
            valid = [lvl.name for lvl in LogLevel]
            raise ConfigError(f"Unknown log level '{level_name}' (valid: {valid})")

        return cls(
            host=str(server.get("host", cls.host)),
            port=port,
            base_path=base_path,
            write_timeout=write_timeout,
            idle_timeout=idle_timeout,
            shutdown_timeout=shutdown_timeout,
            log_level=log_level,
        )


class ConfigManager:
    """
    Configuration manager

    Loads config.yaml (or the file named by TIMEZONE_SERVICE_CONFIG), falls
    back to factory_defaults.yaml when it can't be read, then applies
    TIMEZONE_SERVICE_HOST / TIMEZONE_SERVICE_PORT overrides.

    Example:
        config = ConfigManager()
        config.load()
        settings = config.settings
        settings.port  # 8080
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults_path: Union[str, Path] = FACTORY_DEFAULTS_PATH,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to config.yaml (default: env override, then packaged file)
            defaults_path: Path to factory defaults fallback
            environ: Environment mapping (default: os.environ)
        """
        self.environ = os.environ if environ is None else environ
        if config_path is None:
            config_path = self.environ.get(ENV_CONFIG_PATH) or DEFAULT_CONFIG_PATH
        self.config_path = Path(config_path)
        self.factory_defaults_path = Path(defaults_path)
        self.data: Dict[str, Any] = {}
        self._settings: Optional[ServerSettings] = None

    def load(self) -> ServerSettings:
        """
        Load YAML configuration

        Process:
        1. Load config.yaml
        2. Fallback to factory defaults on failure
        3. Apply environment overrides
        4. Validate into ServerSettings

        Returns:
            Validated ServerSettings

        Raises:
            ConfigError: if the merged values are invalid
        """
        try:
            self.data = self._read_yaml(self.config_path)
            log.info("Loaded configuration", path=str(self.config_path))
        except (OSError, yaml.YAMLError, ConfigError) as ex:
            log.error("Failed to load config file", path=str(self.config_path),
                      error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")
            try:
                self.data = self._read_yaml(self.factory_defaults_path)
            except (OSError, yaml.YAMLError) as defaults_ex:
                raise ConfigError(
                    f"Factory defaults unreadable: {defaults_ex}"
                ) from defaults_ex

        self._apply_env_overrides()
        self._settings = ServerSettings.from_dict(self.data)

        log.info(
            "Server settings ready",
            host=self._settings.host,
            port=self._settings.port,
            base_path=self._settings.base_path or "/",
        )
        return self._settings

    @property
    def settings(self) -> ServerSettings:
        if self._settings is None:
            raise ConfigError("ConfigManager.load() has not been called")
        return self._settings

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path.name}: top-level YAML must be a mapping")
        return data

    def _apply_env_overrides(self) -> None:
        server = dict(_section(self.data, "server"))

        host = self.environ.get(ENV_HOST)
        if host:
            server["host"] = host
            log.debug(f"{ENV_HOST} override", host=host)

        port = self.environ.get(ENV_PORT)
        if port:
            server["port"] = port
            log.debug(f"{ENV_PORT} override", port=port)

        self.data["server"] = server

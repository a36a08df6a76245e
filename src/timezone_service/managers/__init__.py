"""Configuration managers"""

from .config_manager import ConfigManager, ConfigError, ServerSettings

__all__ = ["ConfigManager", "ConfigError", "ServerSettings"]

"""Kiosk Server Configuration Module."""

from .manager import ConfigManager, ConfigurationError
from .schema import Config, SystemConfig, ServerConfig, StorageConfig, ThemesConfig

__all__ = [
    "ConfigManager", "ConfigurationError",
    "Config", "SystemConfig", "ServerConfig", "StorageConfig", "ThemesConfig",
]

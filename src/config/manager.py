"""Configuration manager for server settings."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as SchemaError

from .schema import Config


DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.json"


class ConfigurationError(Exception):
    """Raised when server configuration cannot be loaded."""
    pass


class ConfigManager:
    """Loads and validates server configuration."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager."""
        self.config_path = Path(config_path or os.environ.get("KIOSK_CONFIG") or DEFAULT_CONFIG_PATH)
        self.logger = logging.getLogger(__name__)

        # Current configuration
        self.current_config: Optional[Config] = None

    async def load_config(self) -> Config:
        """Load configuration from file."""
        config_data: Dict[str, Any] = {}

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    config_data = json.load(f)
            except json.JSONDecodeError as e:
                self.logger.error(f"Invalid JSON in configuration file: {e}")
                raise ConfigurationError(f"Invalid JSON in {self.config_path}: {e}") from e
            except OSError as e:
                self.logger.error(f"Failed to read configuration: {e}")
                raise ConfigurationError(f"Cannot read {self.config_path}: {e}") from e
        else:
            self.logger.info(f"Configuration file {self.config_path} not found, using defaults")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration in {self.config_path} must be a JSON object")

        self._apply_env_overrides(config_data)

        try:
            self.current_config = Config(**config_data)
        except SchemaError as e:
            self.logger.error(f"Invalid configuration: {e}")
            raise ConfigurationError(f"Invalid configuration in {self.config_path}: {e}") from e

        self.logger.info("Configuration loaded successfully")
        return self.current_config

    async def get_config(self) -> Config:
        """Get current configuration."""
        if not self.current_config:
            await self.load_config()
        return self.current_config

    def _apply_env_overrides(self, data: Dict[str, Any]) -> None:
        """Apply environment overrides to configuration data."""
        port = os.environ.get("PORT")
        if port:
            try:
                data.setdefault("server", {})["bind_port"] = int(port)
            except ValueError:
                raise ConfigurationError(f"PORT must be an integer, got {port!r}")

        data_file = os.environ.get("KIOSK_DATA_FILE")
        if data_file:
            data.setdefault("storage", {})["data_file"] = data_file

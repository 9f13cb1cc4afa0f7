"""
Configuration Manager
---------------------
Loads configuration from YAML with environment variable overrides.

Lookup order for a key such as 'server.port':
1. AIDA_SERVER_PORT environment variable
2. config.yaml value
3. Caller default
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os

import yaml

ENV_PREFIX = "AIDA_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when the configuration file cannot be used."""
    pass


class ConfigManager:
    """
    Centralized configuration management.
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(self, config_path: str = "config.yaml"):
        self._config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._logger = logging.getLogger("aida.infra.config")

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        if not self._config_path.exists():
            self._logger.warning(f"Config file not found: {self._config_path}")
            self._config = {}
            return

        with open(self._config_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self._config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {self._config_path}")

        self._config = data
        self._logger.info(f"Loaded config from {self._config_path}")

    @staticmethod
    def env_key(key: str) -> str:
        return f"{ENV_PREFIX}{key.upper().replace('.', '_')}"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_value = os.getenv(self.env_key(key))
        if env_value is not None:
            return env_value

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{key} must be an integer, got {value!r}") from None

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigError(f"{key} must be a boolean, got {value!r}")

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only, not persisted)."""
        parts = key.split(".")
        config = self._config

        for part in parts[:-1]:
            if not isinstance(config.get(part), dict):
                config[part] = {}
            config = config[part]

        config[parts[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section."""
        value = self._config.get(section, {})
        return value if isinstance(value, dict) else {}


@dataclass
class AppConfig:
    """Typed view over the settings the application uses."""
    registry_path: Optional[str] = None
    dialogue: str = "mock"
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_console: bool = True
    log_file: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "AppConfig":
        """Build settings from config.yaml plus AIDA_* overrides."""
        manager = ConfigManager(config_path)
        defaults = cls()

        level = str(manager.get("logging.level", defaults.log_level)).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"logging.level must be a log level name, got {level!r}")

        return cls(
            registry_path=manager.get("commands.registry_path", defaults.registry_path) or None,
            dialogue=str(manager.get("dialogue.handler", defaults.dialogue)),
            log_level=level,
            log_dir=str(manager.get("logging.log_dir", defaults.log_dir)),
            log_console=manager.get_bool("logging.console", defaults.log_console),
            log_file=manager.get_bool("logging.file", defaults.log_file),
            host=str(manager.get("server.host", defaults.host)),
            port=manager.get_int("server.port", defaults.port),
        )

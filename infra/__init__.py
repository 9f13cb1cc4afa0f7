# Infrastructure module - Internal service bus, configuration and logging
# FastAPI for internal communication, YAML + env for configuration

from .config import AppConfig, ConfigManager, ConfigError
from .logging import (
    get_logger, configure_logging, TurnContext,
    log_turn_end, get_turn_id, generate_turn_id
)
from .service_bus import ServiceBus, create_app

__all__ = [
    # Config
    "AppConfig",
    "ConfigManager",
    "ConfigError",
    # Logging
    "get_logger",
    "configure_logging",
    "TurnContext",
    "log_turn_end",
    "get_turn_id",
    "generate_turn_id",
    # Service Bus
    "ServiceBus",
    "create_app",
]

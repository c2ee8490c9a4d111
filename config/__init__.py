"""Configuration module for the waitlist service.

Provides centralized configuration management using:
- Environment variables (and a .env file)
- An optional YAML file for deployment overrides
- Pydantic for validation
"""

from config.settings import (
    Settings,
    get_settings,
    StorageConfig,
    CorsConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    "Settings",
    "get_settings",
    "StorageConfig",
    "CorsConfig",
    "LoggingConfig",
    "ServerConfig",
]

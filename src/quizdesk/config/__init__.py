"""Configuration package for quizdesk."""

from quizdesk.config.app_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    ServerConfig,
    StorageConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "ServerConfig",
    "StorageConfig",
    "clear_config_cache",
    "load_app_config",
]

"""Application configuration loader.

Loads centralized configuration from data/config/quizdesk.yaml, falling back
to built-in defaults when the file is absent. A handful of environment
variables override the file so deployments and tests can redirect storage.

Usage:
    from quizdesk.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.path
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to working directory)
CONFIG_FILE = Path("data/config/quizdesk.yaml")

ENV_DB_PATH = "QUIZDESK_DB_PATH"
ENV_STORAGE_DIR = "QUIZDESK_STORAGE_DIR"
ENV_SESSION_TTL = "QUIZDESK_SESSION_TTL_HOURS"
ENV_PUBLIC_BASE_URL = "QUIZDESK_PUBLIC_BASE_URL"


@dataclass
class DatabaseConfig:
    """SQLite database settings."""

    path: Path = Path("data/quizdesk.db")


@dataclass
class StorageConfig:
    """Uploaded assignment file storage."""

    directory: Path = Path("data/files")
    public_base_url: str = ""
    max_file_bytes: int = 10 * 1024 * 1024


@dataclass
class AuthConfig:
    """Session and password settings."""

    session_ttl_hours: int = 24 * 7
    password_hash_method: str = "pbkdf2:sha256"


@dataclass
class ServerConfig:
    """HTTP server defaults for `quizdesk serve`."""

    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "info"
    json_logs: bool = False


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "data/quizdesk.db"},
        "storage": {
            "directory": "data/files",
            "public_base_url": "",
            "max_file_bytes": 10 * 1024 * 1024,
        },
        "auth": {
            "session_ttl_hours": 24 * 7,
            "password_hash_method": "pbkdf2:sha256",
        },
        "server": {
            "host": "127.0.0.1",
            "port": 8000,
            "cors_origins": ["*"],
            "log_level": "info",
            "json_logs": False,
        },
    }


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge file values over defaults, one section deep."""
    result = {key: dict(value) for key, value in base.items()}
    for section, values in (override or {}).items():
        if isinstance(values, dict) and section in result:
            result[section].update(values)
    return result


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply QUIZDESK_* environment variables on top of file values."""
    if db_path := os.environ.get(ENV_DB_PATH):
        data["database"]["path"] = db_path
    if storage_dir := os.environ.get(ENV_STORAGE_DIR):
        data["storage"]["directory"] = storage_dir
    if base_url := os.environ.get(ENV_PUBLIC_BASE_URL):
        data["storage"]["public_base_url"] = base_url
    if ttl := os.environ.get(ENV_SESSION_TTL):
        data["auth"]["session_ttl_hours"] = int(ttl)
    return data


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    db = data["database"]
    storage = data["storage"]
    auth = data["auth"]
    server = data["server"]

    return AppConfig(
        database=DatabaseConfig(path=Path(db["path"])),
        storage=StorageConfig(
            directory=Path(storage["directory"]),
            public_base_url=storage.get("public_base_url", "").rstrip("/"),
            max_file_bytes=int(storage.get("max_file_bytes", 10 * 1024 * 1024)),
        ),
        auth=AuthConfig(
            session_ttl_hours=int(auth.get("session_ttl_hours", 24 * 7)),
            password_hash_method=auth.get("password_hash_method", "pbkdf2:sha256"),
        ),
        server=ServerConfig(
            host=server.get("host", "127.0.0.1"),
            port=int(server.get("port", 8000)),
            cors_origins=list(server.get("cors_origins", ["*"])),
            log_level=server.get("log_level", "info"),
            json_logs=bool(server.get("json_logs", False)),
        ),
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data = _get_defaults()

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        file_data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
        data = _merge(data, file_data)
    else:
        logger.debug("using_default_config")

    _cached_config = _parse_config(_apply_env_overrides(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None

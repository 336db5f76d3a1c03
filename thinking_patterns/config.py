"""Thinking Patterns MCP Configuration.

Centralized configuration management with environment variable support.

Usage:
    from thinking_patterns.config import get_config
    print(get_config().server.name)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from loguru import logger


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable, treating empty string as unset."""
    value = os.getenv(key, default)
    return value if value else default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer for {key}: {value}, using default {default}")
    return default


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = _get_env(key, "").lower()
    if not value:
        return default
    return value in ("true", "1", "yes")


@dataclass(frozen=True)
class ServerConfig:
    """Server runtime configuration."""

    name: str = field(default_factory=lambda: _get_env("SERVER_NAME", "Thinking-Patterns-MCP"))
    transport: str = field(default_factory=lambda: _get_env("SERVER_TRANSPORT", "stdio"))
    host: str = field(default_factory=lambda: _get_env("SERVER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_env_int("SERVER_PORT", 8000))


@dataclass(frozen=True)
class SessionConfig:
    """Session store configuration."""

    timeout_minutes: int = field(
        default_factory=lambda: _get_env_int("SESSION_TIMEOUT_MINUTES", 60)
    )
    cleanup_interval_minutes: int = field(
        default_factory=lambda: _get_env_int("SESSION_CLEANUP_INTERVAL_MINUTES", 15)
    )
    cleanup_enabled: bool = field(
        default_factory=lambda: _get_env_bool("SESSION_CLEANUP_ENABLED", True)
    )

    @property
    def timeout(self) -> timedelta:
        return timedelta(minutes=self.timeout_minutes)

    @property
    def cleanup_interval(self) -> timedelta:
        return timedelta(minutes=self.cleanup_interval_minutes)


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO").upper())
    format: str = field(default_factory=lambda: _get_env("LOG_FORMAT", "text").lower())
    file: str | None = field(default_factory=lambda: _get_env("LOG_FILE") or None)


@dataclass(frozen=True)
class Config:
    """Root configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (for logging/debugging)."""
        return {
            "server": {
                "name": self.server.name,
                "transport": self.server.transport,
                "host": self.server.host,
                "port": self.server.port,
            },
            "session": {
                "timeout_minutes": self.session.timeout_minutes,
                "cleanup_interval_minutes": self.session.cleanup_interval_minutes,
                "cleanup_enabled": self.session.cleanup_enabled,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file": self.logging.file,
            },
        }


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration (for testing)."""
    global _config
    _config = Config()
    return _config

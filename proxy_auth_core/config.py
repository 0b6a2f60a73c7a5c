"""
Centralized configuration management for the proxy auth core.

This module provides a unified configuration system with support for:
- Environment variables
- Proxy container and artifact locations
- Validation using Pydantic
"""

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel, Timeouts

DEFAULT_CONF_ROOT = "/opt/easyengine/services"


def _conf_root() -> str:
    return os.getenv(EnvironmentVariable.CONF_ROOT.value, DEFAULT_CONF_ROOT)


class DatabaseConfig(BaseModel):
    """Credential store connection configuration."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./proxy_auth.db"
        ),
        description="Database connection string",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")


class ProxyConfig(BaseModel):
    """Location of the reverse proxy and of the artifacts it consumes."""

    container_name: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.PROXY_CONTAINER.value, "services_global-nginx-proxy_1"
        ),
        description="Name of the reverse proxy container",
    )
    docker_binary: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DOCKER_BINARY.value, "docker"),
        description="Docker executable used to reach the proxy container",
    )
    container_htpasswd_dir: str = Field(
        default="/etc/nginx/htpasswd",
        description="Directory of the credential artifacts inside the proxy container",
    )
    vhost_dir: Path = Field(
        default_factory=lambda: Path(_conf_root()) / "nginx-proxy" / "vhost.d",
        description="Host-side directory holding allow-list artifacts",
    )
    reload_command: List[str] = Field(
        default_factory=lambda: ["sh", "-c", "nginx -t && nginx -s reload"],
        description="Command run inside the proxy container to reload configuration",
    )
    command_timeout: int = Field(
        default=Timeouts.EXTERNAL_COMMAND, gt=0, description="Timeout for docker exec calls"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEBUG.value, "false").lower() == "true",
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    proxy: ProxyConfig = Field(default_factory=ProxyConfig, description="Proxy configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None

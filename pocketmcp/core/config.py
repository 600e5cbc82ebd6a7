"""Unified configuration management for pocketmcp."""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PocketMcpConfig(BaseSettings):
    """pocketmcp configuration with environment variable support."""

    # Application settings
    debug: bool = Field(default=False)

    # Server identity advertised during the initialize handshake
    server_name: str = Field(default="pocketmcp BTC Price Server")
    server_version: str = Field(default="1.0.0")

    # HTTP binding
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8787, ge=1024, le=65535)

    # Server factory served by the CLI, as "module:attribute"
    app: str = Field(default="pocketmcp.apps.price_server:build_server")

    # Example price server settings
    price_api_url: str = Field(
        default="https://api.coingecko.com/api/v3/simple/price"
    )
    price_cache_seconds: int = Field(default=300, ge=0)
    http_timeout: float = Field(default=10.0, gt=0)

    # Logging configuration
    log_level: str = Field(default="WARNING")
    log_file: Path | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="POCKETMCP_",
        extra="ignore",
        validate_assignment=True
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate Python logging level name."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("app")
    @classmethod
    def validate_app_spec(cls, v: str) -> str:
        """Validate the module:attribute server factory reference."""
        module, _, attribute = v.partition(":")
        if not module or not attribute:
            raise ValueError("app must be given as 'module:attribute'")
        return v

    @property
    def url(self) -> str:
        """Get the base URL the server listens on."""
        return f"http://{self.host}:{self.port}"


# Global configuration instance
config = PocketMcpConfig()


def get_config() -> PocketMcpConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> PocketMcpConfig:
    """Reload configuration from environment and files."""
    global config
    config = PocketMcpConfig()
    return config

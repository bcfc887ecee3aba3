"""Configuration management for the SQLite driver."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database location and expected schema state."""

    name: str = Field(default=":memory:", description="Logical database name or path")
    schema_version: int = Field(default=1, ge=1, description="Expected schema version")
    extension: str = Field(
        default=".db", pattern=r"^\.\w+$", description="Canonical database file extension"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="sqlite_driver", description="Service name for tracing")
    metrics_enabled: bool = Field(
        default=False, description="Serve Prometheus metrics over HTTP"
    )
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class Config(BaseSettings):
    """Main configuration for the SQLite driver."""

    model_config = SettingsConfigDict(
        env_prefix="SQLITE_DRIVER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()

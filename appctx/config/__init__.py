"""
Configuration loading for appctx.

Configuration values are resolved using the following precedence:

1. Explicit arguments passed to `load_config`
2. Environment variables (e.g., APPCTX_SERVER_PORT)
3. `appctx.toml` if present in the working directory
4. Built-in defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from appctx.reporter import DEFAULT_HEADER

__all__ = [
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "ServerConfig",
    "load_config",
]


DEFAULT_CONFIG_FILE = Path("appctx.toml")


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded or validated."""


class ServerConfig(BaseModel):
    """Embedded web server settings."""

    enabled: bool = Field(True, description="Start the embedded web server")
    host: str = Field("127.0.0.1", description="Bind address", min_length=1)
    port: int = Field(8080, description="Listen port", ge=0, le=65535)


class LoggingConfig(BaseModel):
    """Logging settings passed to configure_logging."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("console", description="'console' or 'json'")
    file: Optional[Path] = Field(None, description="Optional rotating log file")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @field_validator("format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"console", "json"}:
            raise ValueError(f"Unknown log format: {value}")
        return normalized

    @field_validator("file", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Optional[Path]:
        if value is None or value == "":
            return None
        return Path(value) if not isinstance(value, Path) else value


class AppConfig(BaseModel):
    """Top-level configuration object."""

    name: str = Field("application", description="Application name", min_length=1)
    report_header: str = Field(
        DEFAULT_HEADER, description="First line printed by the registry reporter"
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[Path | str] = None) -> AppConfig:
    """
    Load configuration from file/environment/defaults.

    Args:
        config_path: Optional explicit path to an `appctx.toml` file.

    Returns:
        AppConfig populated with the resolved values.

    Raises:
        ConfigError: if the provided config path does not exist, parsing
            fails, or a value is invalid.
    """

    raw_data = _load_toml_data(config_path)
    server_data = raw_data.get("server", {})
    logging_data = raw_data.get("logging", {})

    server_defaults = ServerConfig()
    logging_defaults = LoggingConfig()

    try:
        return AppConfig(
            name=_env_or_value("APPCTX_NAME", raw_data.get("name"), "application"),
            report_header=_env_or_value(
                "APPCTX_REPORT_HEADER", raw_data.get("report_header"), DEFAULT_HEADER
            ),
            server=ServerConfig(
                enabled=_env_bool(
                    "APPCTX_SERVER_ENABLED",
                    server_data.get("enabled", server_defaults.enabled),
                ),
                host=_env_or_value(
                    "APPCTX_SERVER_HOST", server_data.get("host"), server_defaults.host
                ),
                port=_env_int(
                    "APPCTX_SERVER_PORT", server_data.get("port"), server_defaults.port
                ),
            ),
            logging=LoggingConfig(
                level=_env_or_value(
                    "APPCTX_LOG_LEVEL", logging_data.get("level"), logging_defaults.level
                ),
                format=_env_or_value(
                    "APPCTX_LOG_FORMAT",
                    logging_data.get("format"),
                    logging_defaults.format,
                ),
                file=os.getenv("APPCTX_LOG_FILE") or logging_data.get("file"),
            ),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _load_toml_data(config_path: Optional[Path | str]) -> Dict[str, Any]:
    """Load data from a TOML file if one can be resolved."""

    resolved = _resolve_config_path(config_path)
    if resolved is None:
        return {}

    if not resolved.exists():
        raise ConfigError(f"Configuration file not found: {resolved}")

    try:
        with resolved.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Cannot parse {resolved}: {exc}") from exc


def _resolve_config_path(config_path: Optional[Path | str]) -> Optional[Path]:
    """Resolve configuration path with environment fallback."""

    if config_path:
        return Path(config_path)

    env_path = os.getenv("APPCTX_CONFIG_FILE")
    if env_path:
        return Path(env_path)

    return DEFAULT_CONFIG_FILE if DEFAULT_CONFIG_FILE.exists() else None


def _env_bool(env_var: str, default: Any) -> Any:
    """Return the raw environment or file value; pydantic parses it as a bool."""

    value = os.getenv(env_var)
    if value is None:
        return default
    return value.strip()


def _env_int(env_var: str, value: Any, default: int) -> int:
    """Resolve an integer from environment, file value or default."""

    raw = _env_or_value(env_var, value, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"Invalid integer for {env_var}: {raw}") from None


def _env_or_value(env_var: str, value: Any, default: Any) -> str:
    """Return environment variable value if set, otherwise fallback to provided/default values."""

    env_value = os.getenv(env_var)
    if env_value is not None:
        return env_value
    if value is not None:
        return str(value)
    return str(default)

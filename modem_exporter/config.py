"""Exporter configuration.

Sources, later ones winning:

    1. YAML file (``--config``)
    2. MODEM_EXPORTER_* environment variables (e.g. MODEM_EXPORTER_BASE_URL)
    3. Command line overrides

Example file:

    base_url: http://192.168.8.1
    family: huawei_hilink
    username: admin
    password: secret
    poll_interval: 30
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator, model_validator

from .core.exceptions import InvalidConfigError
from .core.types import DeviceFamily

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "MODEM_EXPORTER_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ExporterConfig(BaseModel):
    """Complete exporter configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = Field(description="Modem base URL, e.g. http://192.168.8.1")
    family: DeviceFamily = Field(description="Device family of the modem")
    username: str | None = Field(default=None, description="Login username, omit for anonymous access")
    password: SecretStr | None = Field(default=None, description="Login password")
    poll_interval: float = Field(default=30.0, gt=0, description="Seconds between successful polls")
    max_backoff: float = Field(default=600.0, gt=0, description="Upper bound on the delay after failures")
    request_timeout: float = Field(default=10.0, gt=0, description="Per-request timeout in seconds")
    session_max_age: float = Field(
        default=300.0,
        gt=0,
        description="Renew the modem session after this many seconds",
    )
    verify_ssl: bool = Field(default=False, description="Verify the modem's TLS certificate")
    listen_address: str = Field(default="0.0.0.0", description="Metrics server listen address")
    listen_port: int = Field(default=9091, ge=0, le=65535, description="Metrics server listen port")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an http(s) URL with a host; strip the trailing slash."""
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url must be an http:// or https:// URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize the level name."""
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def validate_timing(self) -> ExporterConfig:
        """Keep request timeout and backoff consistent with the poll interval."""
        if self.request_timeout >= self.poll_interval:
            raise ValueError("request_timeout must be shorter than poll_interval")
        if self.max_backoff < self.poll_interval:
            raise ValueError("max_backoff must not be shorter than poll_interval")
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be set together")
        return self

    def password_value(self) -> str | None:
        """Return the plain-text password, if any."""
        return self.password.get_secret_value() if self.password is not None else None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise InvalidConfigError(f"Config file not found: {path}")

    _LOGGER.debug("Loading config from %s", path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as err:
        raise InvalidConfigError(f"Cannot read config file {path}: {err}") from err

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidConfigError(f"Config file {path} must contain a mapping")
    return raw


def _read_environ(environ: Mapping[str, str]) -> dict[str, str]:
    values = {}
    for name in ExporterConfig.model_fields:
        env_name = f"{ENV_PREFIX}{name.upper()}"
        if env_name in environ:
            values[name] = environ[env_name]
    return values


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ExporterConfig:
    """Load and validate the exporter configuration.

    Args:
        path: Optional YAML config file
        environ: Environment mapping (default: os.environ)
        overrides: Values from the command line; None values are ignored

    Raises:
        InvalidConfigError: A source cannot be read or validation failed
    """
    raw: dict[str, Any] = {}
    if path is not None:
        raw.update(_read_yaml(Path(path)))
    raw.update(_read_environ(os.environ if environ is None else environ))
    if overrides:
        raw.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ExporterConfig.model_validate(raw)
    except ValidationError as err:
        raise InvalidConfigError(f"Invalid configuration: {err}") from err

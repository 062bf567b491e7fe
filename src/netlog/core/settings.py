"""
Configuration models for netlog using Pydantic v2 Settings.

``WriterConfig`` is the immutable per-writer configuration. ``Settings``
reads the same fields from the environment (``NETLOG_WRITER__URL`` and so
on) together with process-wide ``core`` switches.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from .errors import ConfigurationError
from .formatter import DEFAULT_FORMAT

DEFAULT_SEND_INTERVAL_SECONDS = 3.0
DEFAULT_MAX_CACHE_LINES = 300


def _validate_app_name(value: str) -> str:
    if not value.strip():
        raise ValueError("app_name must not be empty")
    return value


def _validate_url(value: str) -> str:
    value = value.strip()
    scheme, sep, rest = value.partition("://")
    if not sep or scheme.lower() not in {"http", "https"} or not rest:
        raise ValueError("url must be an absolute http(s) URL")
    return value


class WriterConfig(BaseModel):
    """Immutable configuration for a single network log writer."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    app_name: str = Field(description="Application name sent in the 'app' field")
    url: str = Field(description="Collection endpoint receiving the POSTed batches")
    format: str = Field(
        default=DEFAULT_FORMAT,
        description="Line template applied to each record",
    )
    send_interval_seconds: float = Field(
        default=DEFAULT_SEND_INTERVAL_SECONDS,
        gt=0.0,
        description="Seconds between scheduled flushes",
    )
    max_cache_lines: int = Field(
        default=DEFAULT_MAX_CACHE_LINES,
        ge=1,
        description=(
            "Cache size at which an early flush is requested; advisory "
            "unless flush_on_max_cache_lines is enabled"
        ),
    )
    flush_on_max_cache_lines: bool = Field(
        default=False,
        description="Request an immediate flush when the cache reaches max_cache_lines",
    )
    timeout_seconds: float | None = Field(
        default=10.0,
        gt=0.0,
        description="HTTP timeout per batch; None waits indefinitely",
    )
    flush_on_close: bool = Field(
        default=False,
        description="Make close() stop the scheduler and send pending lines",
    )
    fallback_on_failure: bool = Field(
        default=False,
        description="Copy dropped batches to stderr",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible metrics",
    )

    @field_validator("app_name")
    @classmethod
    def _ensure_app_name_non_empty(cls, value: str) -> str:
        return _validate_app_name(value)

    @field_validator("url")
    @classmethod
    def _ensure_http_url(cls, value: str) -> str:
        return _validate_url(value)


class CoreSettings(BaseModel):
    """Process-wide switches shared by every writer."""

    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit DEBUG/WARN diagnostics for internal errors",
    )
    atexit_drain_enabled: bool = Field(
        default=False,
        description="Flush registered writers at interpreter exit",
    )
    atexit_drain_timeout_seconds: float = Field(
        default=2.0,
        gt=0.0,
        description="Upper bound for each writer's drain at exit",
    )


class WriterSettings(BaseModel):
    """Writer fields as read from the environment; all optional."""

    app_name: str | None = None
    url: str | None = None
    format: str | None = None
    send_interval_seconds: float | None = Field(default=None, gt=0.0)
    max_cache_lines: int | None = Field(default=None, ge=1)
    flush_on_max_cache_lines: bool | None = None
    timeout_seconds: float | None = Field(default=None, gt=0.0)
    flush_on_close: bool | None = None
    fallback_on_failure: bool | None = None
    enable_metrics: bool | None = None


class Settings(BaseSettings):
    """Top-level configuration read from ``NETLOG_*`` environment variables."""

    core: CoreSettings = Field(default_factory=CoreSettings)
    writer: WriterSettings = Field(default_factory=WriterSettings)

    model_config = SettingsConfigDict(
        env_prefix="NETLOG_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_writer_config(self, **overrides: Any) -> WriterConfig:
        """Build a ``WriterConfig`` from environment values plus overrides.

        Raises:
            ConfigurationError: if required fields are missing or invalid.
        """
        values = self.writer.model_dump(exclude_none=True)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return build_writer_config(**values)


def build_writer_config(**values: Any) -> WriterConfig:
    """Validate ``values`` into a ``WriterConfig``.

    Raises:
        ConfigurationError: wrapping the pydantic ``ValidationError``.
    """
    from pydantic import ValidationError

    try:
        return WriterConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid writer configuration",
            cause=e,
            errors=[err["loc"] for err in e.errors()],
        ) from e


__all__ = [
    "CoreSettings",
    "Settings",
    "WriterConfig",
    "WriterSettings",
    "build_writer_config",
]

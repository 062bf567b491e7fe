"""
Public entrypoints for netlog.

Provides ``NetLogWriter`` and a zero-config ``get_writer()`` that reads
``NETLOG_*`` environment variables.
"""

from __future__ import annotations

from typing import Any

from ._version import __version__
from .core.errors import ConfigurationError, NetlogError
from .core.formatter import DEFAULT_FORMAT, Formatter, format_record
from .core.levels import register_level
from .core.records import LogRecord
from .core.settings import Settings, WriterConfig
from .core.stdlib_bridge import NetLogHandler, enable_stdlib_bridge
from .core.writer import NetLogWriter

__all__ = [
    "ConfigurationError",
    "DEFAULT_FORMAT",
    "Formatter",
    "LogRecord",
    "NetLogHandler",
    "NetLogWriter",
    "NetlogError",
    "Settings",
    "VERSION",
    "WriterConfig",
    "__version__",
    "enable_stdlib_bridge",
    "format_record",
    "get_writer",
    "register_level",
]


def get_writer(
    app_name: str | None = None,
    url: str | None = None,
    *,
    settings: Settings | None = None,
    **overrides: Any,
) -> NetLogWriter:
    """Return a running writer configured from the environment.

    Explicit arguments take precedence over ``NETLOG_WRITER__*`` variables.

    Example:
        # NETLOG_WRITER__URL=http://logs.internal/collect
        writer = get_writer("billing")
        writer.write(LogRecord(level="INFO", message="ready"))

    Raises:
        ConfigurationError: if the app name or URL is missing or invalid.
    """
    cfg = (settings or Settings()).to_writer_config(
        app_name=app_name, url=url, **overrides
    )
    return NetLogWriter(config=cfg)


VERSION = __version__

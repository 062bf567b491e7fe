"""Forward stdlib ``logging`` records to a netlog writer."""

from __future__ import annotations

import logging

from .records import LogRecord
from .writer import NetLogWriter

_OWN_LOGGER_PREFIX = "netlog"


class NetLogHandler(logging.Handler):
    """``logging.Handler`` that converts records and calls ``writer.write``."""

    def __init__(self, writer: NetLogWriter, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._writer = writer

    @property
    def writer(self) -> NetLogWriter:
        return self._writer

    def emit(self, record: logging.LogRecord) -> None:
        # Loop prevention: never ship netlog's own records
        if record.name == _OWN_LOGGER_PREFIX or record.name.startswith(
            _OWN_LOGGER_PREFIX + "."
        ):
            return
        try:
            self._writer.write(LogRecord.from_stdlib(record))
        except Exception:
            self.handleError(record)


def enable_stdlib_bridge(
    writer: NetLogWriter,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
    remove_existing_handlers: bool = False,
) -> NetLogHandler:
    """Attach a :class:`NetLogHandler` to ``logger`` (root by default)."""
    target = logger or logging.getLogger()
    if remove_existing_handlers:
        for h in list(target.handlers):
            target.removeHandler(h)
    handler = NetLogHandler(writer, level=level)
    target.addHandler(handler)
    target.setLevel(level)
    return handler


__all__ = ["NetLogHandler", "enable_stdlib_bridge"]

"""
Network log writer facade.

Records are formatted and appended to an in-memory cache; a background
scheduler POSTs the cache contents to the log server every
``send_interval_seconds``. ``write`` never blocks on the network and never
raises because of transport problems.
"""

from __future__ import annotations

import asyncio
import threading
import types
from typing import Any, Callable

import httpx

from ..metrics.metrics import MetricsCollector
from ..sinks.http_form import HttpFormSender
from . import diagnostics
from .cache import LineCache
from .formatter import format_record
from .records import LogRecord
from .scheduler import FlushScheduler
from .settings import WriterConfig, build_writer_config
from .shutdown import register_writer, unregister_writer

RecordFormatter = Callable[[LogRecord], str]


class NetLogWriter:
    """Buffered writer that ships formatted lines to a log server.

    The scheduler starts at construction and runs for the life of the
    process. ``close()`` does nothing unless ``flush_on_close`` is set;
    ``stop_and_drain()`` always stops the scheduler and sends what is left.

    Example:
        writer = NetLogWriter("billing", "http://logs.internal/collect")
        writer.write(LogRecord(level="INFO", message="started", source="main"))
    """

    def __init__(
        self,
        app_name: str | None = None,
        url: str | None = None,
        *,
        config: WriterConfig | None = None,
        formatter: RecordFormatter | None = None,
        metrics: MetricsCollector | None = None,
        client: httpx.AsyncClient | None = None,
        **options: Any,
    ) -> None:
        values: dict[str, Any] = config.model_dump() if config is not None else {}
        if app_name is not None:
            values["app_name"] = app_name
        if url is not None:
            values["url"] = url
        values.update(options)
        self._config = build_writer_config(**values)
        self._formatter = formatter
        self._metrics = metrics or MetricsCollector(
            enabled=self._config.enable_metrics
        )
        self._cache = LineCache()
        self._sender = HttpFormSender(
            self._config.url,
            client=client,
            timeout_seconds=self._config.timeout_seconds,
            metrics=self._metrics,
            fallback_on_failure=self._config.fallback_on_failure,
        )
        self._scheduler = FlushScheduler(
            cache=self._cache,
            sender=self._sender,
            config_provider=lambda: self._config,
        )
        self._stop_lock = threading.Lock()
        self._stopped = False
        register_writer(self)
        self._scheduler.start()

    # Properties -------------------------------------------------------

    @property
    def config(self) -> WriterConfig:
        return self._config

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def scheduler(self) -> FlushScheduler:
        return self._scheduler

    @property
    def pending_lines(self) -> int:
        return len(self._cache)

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    # Writing ----------------------------------------------------------

    def _format(self, record: LogRecord) -> str:
        if self._formatter is not None:
            return self._formatter(record)
        return format_record(self._config.format, record)

    def write(self, record: LogRecord) -> None:
        """Format ``record`` and append it to the cache."""
        try:
            line = self._format(record)
        except Exception as exc:  # noqa: BLE001
            diagnostics.warn(
                "writer",
                "record formatting failed",
                error=f"{type(exc).__name__}: {exc}",
                _rate_limit_key="writer-format",
            )
            line = str(getattr(record, "message", record))
        self.write_line(line)

    def write_line(self, line: str) -> None:
        """Append an already formatted line to the cache."""
        size = self._cache.append(line)
        self._metrics.record_line_written()
        cfg = self._config
        if cfg.flush_on_max_cache_lines and size >= cfg.max_cache_lines:
            self._scheduler.request_flush()

    def flush(self) -> None:
        """Ask the scheduler to send the cache now; does not wait."""
        self._scheduler.request_flush()

    # Configuration ----------------------------------------------------

    def _replace_config(self, **update: Any) -> NetLogWriter:
        self._config = build_writer_config(**{**self._config.model_dump(), **update})
        return self

    def set_format(self, template: str) -> NetLogWriter:
        """Set the line template (chainable). Call before the first write."""
        return self._replace_config(format=template)

    def set_send_interval(self, seconds: float) -> NetLogWriter:
        """Set the send interval (chainable). Takes effect after the current wait."""
        return self._replace_config(send_interval_seconds=seconds)

    def set_max_cache_lines(self, lines: int) -> NetLogWriter:
        """Set the cache size that triggers an early flush when enabled (chainable)."""
        return self._replace_config(max_cache_lines=lines)

    def set_app_name(self, app_name: str) -> NetLogWriter:
        """Set the application name sent with each batch (chainable)."""
        return self._replace_config(app_name=app_name)

    # Lifecycle --------------------------------------------------------

    def close(self) -> None:
        """No-op unless ``flush_on_close`` is enabled.

        Lines still cached when the process exits are lost.
        """
        if self._config.flush_on_close:
            self.stop_and_drain()

    def stop_and_drain(self, timeout: float | None = None) -> bool:
        """Stop the scheduler after a final flush.

        Idempotent. Returns True when the scheduler thread has exited
        within ``timeout``.
        """
        with self._stop_lock:
            if not self._stopped:
                self._stopped = True
                self._scheduler.request_stop()
                unregister_writer(self)
        return self._scheduler.join(timeout)

    def drain_at_exit(self, timeout: float | None = None) -> bool:
        """Stop the scheduler and send pending lines from the calling thread.

        Called by the exit handler. By then the scheduler loop can no longer
        resolve hostnames, so the cache is drained here and posted with a
        blocking client. Returns True when the scheduler thread has exited
        within ``timeout``.
        """
        with self._stop_lock:
            if self._stopped:
                return self._scheduler.join(timeout)
            self._stopped = True
            unregister_writer(self)
        self._scheduler.request_stop(final_flush=False)
        batch = self._cache.drain_and_clear()
        self._sender.transmit_blocking(self._config.app_name, batch)
        return self._scheduler.join(timeout)

    async def stop_and_drain_async(self, timeout: float | None = None) -> bool:
        """Async variant of :meth:`stop_and_drain` for use inside event loops."""
        return await asyncio.to_thread(self.stop_and_drain, timeout)

    def __enter__(self) -> NetLogWriter:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        self.stop_and_drain()


__all__ = ["NetLogWriter", "RecordFormatter"]

"""
Metrics collection for netlog writers.

Implements minimal Prometheus-compatible counters and histograms for the
write and flush paths.

Design goals:
- Zero global state; instances are writer-scoped
- In-memory counters are always kept so dropped batches stay observable
- Safe no-op exporter behavior when metrics are disabled by settings
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class WriterMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    lines_written: int = 0
    batches_sent: int = 0
    lines_sent: int = 0
    batches_dropped: int = 0
    lines_dropped: int = 0


class MetricsCollector:
    """Writer-scoped metrics collector.

    ``record_line_written`` is called from arbitrary writer threads; the
    flush-side methods are awaited on the scheduler loop. A thread lock
    guards the in-memory state for both.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = WriterMetrics()

        # Lazily-initialized exporters to avoid global registration noise
        self._c_lines_written: Any | None = None
        self._c_batches: Any | None = None
        self._c_lines: Any | None = None
        self._h_batch_size: Any | None = None
        self._h_transmit_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Use isolated registry to avoid global duplication in tests
            self._registry = CollectorRegistry()
            self._c_lines_written = Counter(
                "netlog_lines_written_total",
                "Total number of lines appended to the cache",
                registry=self._registry,
            )
            self._c_batches = Counter(
                "netlog_batches_total",
                "Total number of batches handed to the sender",
                ["outcome"],
                registry=self._registry,
            )
            self._c_lines = Counter(
                "netlog_lines_total",
                "Total number of lines handed to the sender",
                ["outcome"],
                registry=self._registry,
            )
            self._h_batch_size = Histogram(
                "netlog_batch_size",
                "Number of lines per transmitted batch",
                buckets=(1, 5, 10, 25, 50, 100, 300, 1000, 5000),
                registry=self._registry,
            )
            self._h_transmit_latency = Histogram(
                "netlog_transmit_seconds",
                "Latency of a single batch POST",
                buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_line_written(self) -> None:
        with self._lock:
            self._state.lines_written += 1
        if self._c_lines_written is not None:
            self._c_lines_written.inc()

    def record_batch(
        self, outcome: str, lines: int, *, latency_seconds: float | None = None
    ) -> None:
        """Record a batch with outcome ``"sent"`` or ``"dropped"``.

        Blocking callers (the exit drain) use this directly; the scheduler
        awaits the async wrappers below.
        """
        with self._lock:
            if outcome == "sent":
                self._state.batches_sent += 1
                self._state.lines_sent += lines
            else:
                self._state.batches_dropped += 1
                self._state.lines_dropped += lines
        if not self._enabled:
            return
        self._observe(outcome, lines, latency_seconds)

    async def record_batch_sent(
        self, lines: int, *, latency_seconds: float | None = None
    ) -> None:
        self.record_batch("sent", lines, latency_seconds=latency_seconds)

    async def record_batch_dropped(
        self, lines: int, *, latency_seconds: float | None = None
    ) -> None:
        self.record_batch("dropped", lines, latency_seconds=latency_seconds)

    def _observe(self, outcome: str, lines: int, latency_seconds: float | None) -> None:
        if self._c_batches is not None:
            self._c_batches.labels(outcome=outcome).inc()
        if self._c_lines is not None:
            self._c_lines.labels(outcome=outcome).inc(lines)
        if self._h_batch_size is not None:
            self._h_batch_size.observe(lines)
        if latency_seconds is not None and self._h_transmit_latency is not None:
            self._h_transmit_latency.observe(latency_seconds)

    def snapshot(self) -> WriterMetrics:
        # Lightweight copy without exposing internals
        with self._lock:
            return WriterMetrics(
                lines_written=self._state.lines_written,
                batches_sent=self._state.batches_sent,
                lines_sent=self._state.lines_sent,
                batches_dropped=self._state.batches_dropped,
                lines_dropped=self._state.lines_dropped,
            )

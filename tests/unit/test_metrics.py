from __future__ import annotations

import pytest

from netlog.metrics.metrics import MetricsCollector


@pytest.mark.asyncio
async def test_disabled_metrics_keep_in_memory_state() -> None:
    mc = MetricsCollector(enabled=False)
    mc.record_line_written()
    await mc.record_batch_sent(3, latency_seconds=0.01)
    await mc.record_batch_dropped(2)

    snap = mc.snapshot()
    assert snap.lines_written == 1
    assert snap.batches_sent == 1 and snap.lines_sent == 3
    assert snap.batches_dropped == 1 and snap.lines_dropped == 2
    assert mc.registry is None
    assert mc.is_enabled is False


@pytest.mark.asyncio
async def test_enabled_exports_prometheus_samples() -> None:
    mc = MetricsCollector(enabled=True)
    mc.record_line_written()
    await mc.record_batch_sent(4, latency_seconds=0.002)
    await mc.record_batch_dropped(1, latency_seconds=0.5)

    reg = mc.registry
    assert reg is not None
    assert reg.get_sample_value("netlog_lines_written_total") == 1.0
    assert reg.get_sample_value("netlog_batches_total", {"outcome": "sent"}) == 1.0
    assert reg.get_sample_value("netlog_batches_total", {"outcome": "dropped"}) == 1.0
    assert reg.get_sample_value("netlog_lines_total", {"outcome": "sent"}) == 4.0
    assert reg.get_sample_value("netlog_batch_size_count") == 2.0
    assert reg.get_sample_value("netlog_transmit_seconds_count") == 2.0


def test_registries_are_isolated() -> None:
    a = MetricsCollector(enabled=True)
    b = MetricsCollector(enabled=True)
    a.record_line_written()

    assert b.registry is not None
    assert b.registry.get_sample_value("netlog_lines_written_total") == 0.0


def test_blocking_record_batch_counts_outcomes() -> None:
    mc = MetricsCollector(enabled=True)
    mc.record_batch("sent", 2)
    mc.record_batch("dropped", 5, latency_seconds=0.1)

    snap = mc.snapshot()
    assert snap.batches_sent == 1 and snap.lines_sent == 2
    assert snap.batches_dropped == 1 and snap.lines_dropped == 5
    assert mc.registry is not None
    assert mc.registry.get_sample_value("netlog_lines_total", {"outcome": "dropped"}) == 5.0

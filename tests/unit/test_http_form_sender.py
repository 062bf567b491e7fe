from __future__ import annotations

import io
import json
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from netlog.core.errors import BatchSerializationError, TransportError
from netlog.metrics.metrics import MetricsCollector
from netlog.sinks.http_form import HttpFormSender
from netlog.testing import RecordingTransport

URL = "http://logs.test/collect"


def _sender(transport: RecordingTransport, **kwargs: Any) -> HttpFormSender:
    return HttpFormSender(URL, client=transport.client(), **kwargs)


@pytest.mark.asyncio
async def test_empty_batch_issues_no_request() -> None:
    transport = RecordingTransport()
    sender = _sender(transport)

    result = await sender.transmit("svc", [])

    assert result.attempted is False
    assert result.dropped is False
    assert transport.attempts == 0


@pytest.mark.asyncio
@pytest.mark.critical
async def test_success_posts_form_body() -> None:
    transport = RecordingTransport()
    metrics = MetricsCollector(enabled=False)
    sender = _sender(transport, metrics=metrics)

    result = await sender.transmit("svc", ["a", "b"])

    assert result.delivered is True
    assert result.status_code == 200
    req = transport.requests[0]
    assert req.method == "POST"
    assert str(req.url) == URL
    assert req.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert req.content == b"app=svc&logs=%5B%22a%22%2C%22b%22%5D"
    snap = metrics.snapshot()
    assert snap.batches_sent == 1 and snap.lines_sent == 2
    assert await sender.health_check() is True


@pytest.mark.asyncio
@pytest.mark.critical
async def test_connection_refused_drops_batch_without_raising() -> None:
    transport = RecordingTransport(error=httpx.ConnectError("Connection refused"))
    metrics = MetricsCollector(enabled=False)
    sender = _sender(transport, metrics=metrics)

    result = await sender.transmit("svc", ["a"])

    assert result.attempted is True
    assert result.dropped is True
    assert isinstance(result.error, TransportError)
    assert isinstance(result.error.cause, httpx.ConnectError)
    assert metrics.snapshot().batches_dropped == 1
    assert metrics.snapshot().lines_dropped == 1
    assert await sender.health_check() is False


@pytest.mark.asyncio
async def test_non_success_status_is_not_retried() -> None:
    transport = RecordingTransport(status_code=500)
    sender = _sender(transport)

    result = await sender.transmit("svc", ["a"])

    assert transport.attempts == 1
    assert result.status_code == 500
    assert result.dropped is True


@pytest.mark.asyncio
async def test_serialization_failure_drops_batch() -> None:
    transport = RecordingTransport()
    sender = _sender(transport)

    result = await sender.transmit("svc", ["\ud800"])

    assert isinstance(result.error, BatchSerializationError)
    assert transport.attempts == 0


@pytest.mark.asyncio
async def test_invalid_url_is_contained() -> None:
    async with httpx.AsyncClient() as client:
        sender = HttpFormSender("http://", client=client)
        result = await sender.transmit("svc", ["a"])

    assert result.dropped is True
    assert isinstance(result.error, TransportError)


@pytest.mark.asyncio
async def test_failure_warns_only_through_diagnostics() -> None:
    warnings: list[dict[str, Any]] = []

    def _warn(component: str, message: str, **fields: Any) -> None:
        warnings.append({"component": component, "message": message, **fields})

    transport = RecordingTransport(error=httpx.ConnectTimeout("timeout"))
    sender = _sender(transport)
    with patch("netlog.core.diagnostics.warn", side_effect=_warn):
        await sender.transmit("svc", ["a", "b"])

    assert warnings
    assert warnings[0]["component"] == "http-form-sender"
    assert warnings[0]["lines"] == 2
    assert warnings[0]["error"]["category"] == "transport"


@pytest.mark.asyncio
async def test_fallback_copies_dropped_lines_to_stream() -> None:
    stream = io.StringIO()
    transport = RecordingTransport(status_code=503)
    sender = _sender(transport, fallback_on_failure=True, fallback_stream=stream)

    await sender.transmit("svc", ["one", "two"])

    rows = [json.loads(r) for r in stream.getvalue().splitlines()]
    assert [r["line"] for r in rows] == ["one", "two"]
    assert rows[0]["app"] == "svc"
    assert rows[0]["fallback_reason"] == "http_status_503"


@pytest.mark.asyncio
async def test_no_fallback_output_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    transport = RecordingTransport(error=httpx.ConnectError("refused"))
    sender = _sender(transport)

    await sender.transmit("svc", ["a"])

    assert capsys.readouterr().err == ""


@pytest.mark.asyncio
async def test_owned_client_lifecycle() -> None:
    sender = HttpFormSender(URL, timeout_seconds=1.0)
    await sender.start()
    assert sender._client is not None
    await sender.stop()
    assert sender._client is None


@pytest.mark.asyncio
async def test_post_creates_client_when_not_started() -> None:
    sender = HttpFormSender("http://", timeout_seconds=1.0)

    result = await sender.transmit("svc", ["a"])

    assert result.dropped is True
    assert sender._client is not None
    await sender.stop()


def test_blocking_transmit_posts_same_body() -> None:
    transport = RecordingTransport()
    metrics = MetricsCollector(enabled=False)
    sender = HttpFormSender(URL, metrics=metrics)

    with transport.sync_client() as client:
        result = sender.transmit_blocking("svc", ["a", "b"], client=client)

    assert result.delivered is True
    assert transport.requests[0].content == b"app=svc&logs=%5B%22a%22%2C%22b%22%5D"
    assert transport.requests[0].headers["Content-Type"] == (
        "application/x-www-form-urlencoded"
    )
    assert metrics.snapshot().batches_sent == 1


def test_blocking_transmit_drops_on_refused_connection() -> None:
    transport = RecordingTransport(error=httpx.ConnectError("Connection refused"))
    metrics = MetricsCollector(enabled=False)
    stream = io.StringIO()
    sender = HttpFormSender(
        URL, metrics=metrics, fallback_on_failure=True, fallback_stream=stream
    )

    with transport.sync_client() as client:
        result = sender.transmit_blocking("svc", ["a"], client=client)

    assert result.dropped is True
    assert isinstance(result.error, TransportError)
    assert metrics.snapshot().lines_dropped == 1
    assert json.loads(stream.getvalue())["fallback_reason"] == "transport"


def test_blocking_transmit_skips_empty_batch() -> None:
    transport = RecordingTransport()
    sender = HttpFormSender(URL)

    with transport.sync_client() as client:
        result = sender.transmit_blocking("svc", [], client=client)

    assert result.attempted is False
    assert transport.attempts == 0

"""Pytest fixtures for netlog writers."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

from ..core.writer import NetLogWriter
from .transport import RecordingTransport

TEST_URL = "http://logs.test/collect"


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_writer(
    recording_transport: RecordingTransport,
) -> Generator[Callable[..., NetLogWriter], None, None]:
    """Factory for writers wired to ``recording_transport``; stopped on teardown."""
    created: list[NetLogWriter] = []

    def _make(
        app_name: str = "svc",
        *,
        transport: RecordingTransport | None = None,
        **options: Any,
    ) -> NetLogWriter:
        options.setdefault("url", TEST_URL)
        options.setdefault("send_interval_seconds", 0.05)
        source = transport or recording_transport
        writer = NetLogWriter(app_name, client=source.client(), **options)
        created.append(writer)
        return writer

    yield _make
    for writer in created:
        writer.stop_and_drain(timeout=2.0)

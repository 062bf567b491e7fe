"""
Testing utilities for code that ships logs with netlog.

``RecordingTransport`` plugs into ``httpx`` and records every batch a
writer sends, so tests can assert on the wire payload without a server.

Pytest fixtures require the test extra: ``pip install netlog[test]``

Example:
    from netlog import NetLogWriter
    from netlog.testing import RecordingTransport

    def test_ships_lines():
        transport = RecordingTransport()
        writer = NetLogWriter(
            "svc", "http://logs.test/collect", client=transport.client()
        )
        writer.write_line("hello")
        writer.stop_and_drain()
        assert transport.batches == [("svc", ["hello"])]
"""

from .transport import RecordingTransport

__all__ = ["RecordingTransport"]

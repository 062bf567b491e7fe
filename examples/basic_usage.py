"""
Basic usage example for netlog.

Starts a tiny local collector, ships a few records to it and prints what
the collector received.
"""

import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netlog import LogRecord, NetLogWriter  # noqa: E402


class CollectorHandler(BaseHTTPRequestHandler):
    def do_POST(self) -> None:  # noqa: N802
        body = self.rfile.read(int(self.headers.get("Content-Length", "0")))
        fields = parse_qs(body.decode("ascii"))
        print(f"app={fields['app'][0]} logs={fields['logs'][0]}")
        self.send_response(200)
        self.end_headers()

    def log_message(self, format: str, *args: object) -> None:
        return


def main() -> None:
    server = ThreadingHTTPServer(("127.0.0.1", 0), CollectorHandler)
    threading.Thread(target=server.serve_forever, daemon=True).start()
    host, port = server.server_address[:2]

    writer = NetLogWriter(
        "example-app",
        f"http://{host}:{port}/collect",
        send_interval_seconds=1,
    ).set_format("[%D %T] [%L] (%s) %M")

    writer.write(LogRecord(level="INFO", message="Application started", source="basic_usage.py"))
    writer.write(LogRecord(level="WARNING", message="Cache miss ratio high", source="cache.py:88"))
    writer.write(LogRecord(level="ERROR", message="Payment provider timeout", source="billing.py:41"))

    # close() is a no-op by default; stop_and_drain() sends what is left
    writer.stop_and_drain(timeout=5)
    server.shutdown()


if __name__ == "__main__":
    main()

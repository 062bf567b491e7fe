"""
Internal diagnostics for non-fatal netlog errors.

Diagnostics are structured JSON lines written to stderr. They are disabled
unless ``core.internal_logging_enabled`` is set (``NETLOG_CORE__INTERNAL_LOGGING_ENABLED``)
or :func:`configure` is called, so the default writer stays silent on
transport failures.
"""

from __future__ import annotations

import json
import sys
import threading
import time
from typing import Any, TextIO

# Cached on first access; reset to None to force a settings re-read
_internal_logging_enabled: bool | None = None

_RATE_LIMIT_WINDOW_SECONDS = 5.0
_rate_limit_lock = threading.Lock()
_rate_limit_last: dict[str, float] = {}
_stream: TextIO | None = None


def configure(*, enabled: bool | None = None, stream: TextIO | None = None) -> None:
    """Override the diagnostics switch and output stream (tests, embedding apps)."""
    global _internal_logging_enabled, _stream
    if enabled is not None:
        _internal_logging_enabled = bool(enabled)
    _stream = stream


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().core.internal_logging_enabled)
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _allowed(key: str | None) -> bool:
    if key is None:
        return True
    now = time.monotonic()
    with _rate_limit_lock:
        last = _rate_limit_last.get(key)
        if last is not None and now - last < _RATE_LIMIT_WINDOW_SECONDS:
            return False
        _rate_limit_last[key] = now
    return True


def _emit(
    level: str,
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    if not is_enabled() or not _allowed(_rate_limit_key):
        return
    payload = {
        "timestamp": time.time(),
        "level": level,
        "logger": "netlog.diagnostics",
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        line = json.dumps(payload, separators=(",", ":"), default=str)
        stream = _stream or sys.stderr
        stream.write(line + "\n")
        stream.flush()
    except Exception:
        # Diagnostics must never break the caller
        return


def warn(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    _emit("WARN", component, message, _rate_limit_key=_rate_limit_key, **fields)


def debug(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    _emit("DEBUG", component, message, _rate_limit_key=_rate_limit_key, **fields)


def _reset_rate_limits() -> None:
    """Clear rate limit state (for testing only)."""
    with _rate_limit_lock:
        _rate_limit_last.clear()

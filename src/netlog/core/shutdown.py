"""Exit-time draining of netlog writers.

Writers register themselves on construction. When
``core.atexit_drain_enabled`` is set, the atexit handler stops each
registered writer and sends its remaining lines. It is off by default, so
lines cached at exit are lost unless an application opts in.

The handler is best-effort. Each writer posts its last batch with a
blocking client bounded by the writer's HTTP timeout, then waits up to the
configured drain timeout for its scheduler thread.
"""

from __future__ import annotations

import atexit
import weakref
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .writer import NetLogWriter


# Module-level state
_shutdown_in_progress: bool = False
_registered_writers: weakref.WeakSet[Any] = weakref.WeakSet()


def _get_shutdown_settings() -> dict[str, Any]:
    """Get shutdown settings from Settings, with fallback defaults."""
    try:
        from .settings import Settings

        settings = Settings()
        return {
            "atexit_drain_enabled": settings.core.atexit_drain_enabled,
            "atexit_drain_timeout_seconds": settings.core.atexit_drain_timeout_seconds,
        }
    except Exception:  # pragma: no cover - invalid environment
        return {
            "atexit_drain_enabled": False,
            "atexit_drain_timeout_seconds": 2.0,
        }


def register_writer(writer: NetLogWriter) -> None:
    """Register a writer for drain at exit. Uses a WeakSet."""
    _registered_writers.add(writer)


def unregister_writer(writer: NetLogWriter) -> None:
    """Unregister a writer, typically after an explicit stop_and_drain()."""
    _registered_writers.discard(writer)


def registered_writers() -> list[NetLogWriter]:
    return list(_registered_writers)


def _drain_single_writer(writer: Any, timeout: float) -> None:
    try:
        writer.drain_at_exit(timeout=timeout)
    except Exception:
        pass  # Best effort - don't crash on exit


def _atexit_handler() -> None:
    """Best-effort drain of all writers on normal exit. Never raises."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return

    settings = _get_shutdown_settings()

    if not settings["atexit_drain_enabled"]:
        return

    _shutdown_in_progress = True
    timeout = settings["atexit_drain_timeout_seconds"]

    # Snapshot the writers (WeakSet iteration can fail if GC runs)
    try:
        writers = list(_registered_writers)
    except Exception:  # pragma: no cover - rare GC race
        return

    for writer in writers:
        _drain_single_writer(writer, timeout)


def _reset_for_tests() -> None:
    global _shutdown_in_progress
    _shutdown_in_progress = False
    _registered_writers.clear()


atexit.register(_atexit_handler)

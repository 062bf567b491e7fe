"""
Periodic flush scheduler.

A single background task sleeps for the configured interval, drains the
cache and hands the batch to the sender, strictly one batch at a time.
When owned by a writer it runs on a dedicated daemon thread hosting its own
event loop, so ``write`` callers never wait on network I/O.
"""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Callable

from . import diagnostics
from .cache import LineCache

if TYPE_CHECKING:
    from ..sinks.http_form import HttpFormSender, TransmitResult
    from .settings import WriterConfig


class FlushScheduler:
    """Sleep, drain, transmit; repeat until stopped.

    ``config_provider`` is read on every tick so the interval and app name
    follow the writer's current configuration.
    """

    def __init__(
        self,
        *,
        cache: LineCache,
        sender: HttpFormSender,
        config_provider: Callable[[], WriterConfig],
        thread_name: str = "netlog-flush",
    ) -> None:
        self._cache = cache
        self._sender = sender
        self._config_provider = config_provider
        self._thread_name = thread_name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wake: asyncio.Event | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()
        self._stop_requested = False
        self._final_flush = True
        self._ticks = 0
        self._last_result: TransmitResult | None = None

    @property
    def ticks(self) -> int:
        """Number of completed drain+transmit cycles."""
        return self._ticks

    @property
    def last_result(self) -> TransmitResult | None:
        return self._last_result

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # Thread ownership -------------------------------------------------

    def start(self) -> None:
        """Start the loop thread and wait until it is ready to be signalled."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._thread_main, name=self._thread_name, daemon=True
        )
        self._thread.start()
        self._started.wait()

    def _thread_main(self) -> None:
        try:
            asyncio.run(self._serve())
        finally:
            # Unblock start() even if the loop failed to come up
            self._started.set()

    async def _serve(self) -> None:
        await self._sender.start()
        try:
            await self.run(ready=self._started)
        finally:
            await self._sender.stop()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the loop thread to exit. Returns True if it did."""
        if self._thread is None:
            return True
        if self._thread is threading.current_thread():
            return False
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # Loop -------------------------------------------------------------

    async def run(self, *, ready: threading.Event | None = None) -> None:
        """Run the flush loop on the current event loop.

        On stop, one final drain+transmit sends whatever is still cached
        unless the stop request waived it.
        """
        self._loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        if ready is not None:
            ready.set()
        while not self._stop_requested:
            interval = self._config_provider().send_interval_seconds
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()
            if self._stop_requested:
                break
            await self._tick()
        if self._final_flush:
            await self._tick()

    async def _tick(self) -> None:
        try:
            await self.flush_once()
        except Exception as exc:  # noqa: BLE001
            diagnostics.warn(
                "scheduler",
                "flush cycle failed",
                error=f"{type(exc).__name__}: {exc}",
                _rate_limit_key="scheduler-tick",
            )

    async def flush_once(self) -> TransmitResult:
        """Drain the cache and transmit the batch (no request if empty)."""
        batch = self._cache.drain_and_clear()
        result = await self._sender.transmit(self._config_provider().app_name, batch)
        self._ticks += 1
        self._last_result = result
        return result

    # Cross-thread signals --------------------------------------------

    def _signal(self) -> None:
        loop, wake = self._loop, self._wake
        if loop is None or wake is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(wake.set)
        except RuntimeError:
            # Loop shut down between the check and the call
            return

    def request_flush(self) -> None:
        """Wake the loop so it drains and transmits now."""
        self._signal()

    def request_stop(self, *, final_flush: bool = True) -> None:
        """Ask the loop to exit, sending pending lines first by default.

        With ``final_flush=False`` the caller takes over the cache.
        """
        self._final_flush = final_flush
        self._stop_requested = True
        self._signal()


__all__ = ["FlushScheduler"]

"""
Form-encoded HTTP sender for log batches.

Each batch is sent as a single POST whose body carries ``app`` and ``logs``
form fields. Delivery is best effort: every failure drops the batch and is
reported through the returned ``TransmitResult`` only.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Sequence, TextIO

import httpx

from ..core import diagnostics
from ..core.errors import BatchSerializationError, NetlogError, TransportError
from ..core.serialization import FORM_CONTENT_TYPE, build_form_body
from ..metrics.metrics import MetricsCollector
from .fallback import write_batch_to_stderr

__all__ = ["HttpFormSender", "TransmitResult"]


@dataclass(frozen=True)
class TransmitResult:
    """Outcome of one transmit call, consumed by the scheduler."""

    lines: int
    attempted: bool
    delivered: bool = False
    status_code: int | None = None
    error: NetlogError | None = None

    @property
    def dropped(self) -> bool:
        return self.attempted and not self.delivered


class HttpFormSender:
    """POSTs drained batches to the collection endpoint."""

    name = "http-form"

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float | None = 10.0,
        metrics: MetricsCollector | None = None,
        fallback_on_failure: bool = False,
        fallback_stream: TextIO | None = None,
    ) -> None:
        self._url = url
        self._client = client
        self._owns_client = client is None
        self._timeout_seconds = timeout_seconds
        self._metrics = metrics
        self._fallback_on_failure = fallback_on_failure
        self._fallback_stream = fallback_stream
        self._last_status: int | None = None
        self._last_error: str | None = None

    @property
    def url(self) -> str:
        return self._url

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_seconds)
            )
            self._owns_client = True
        return self._client

    async def start(self) -> None:
        self._ensure_client()

    async def stop(self) -> None:
        if self._client is not None and self._owns_client:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def _post(self, body: bytes) -> httpx.Response:
        client = self._ensure_client()
        try:
            # post() reads the full response body before releasing the connection
            return await client.post(
                self._url,
                content=body,
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
        except Exception as exc:
            raise TransportError(
                "POST to log server failed", cause=exc, url=self._url
            ) from exc

    def _post_blocking(self, body: bytes, client: httpx.Client | None) -> httpx.Response:
        owned = client is None
        if client is None:
            client = httpx.Client(timeout=httpx.Timeout(self._timeout_seconds))
        try:
            return client.post(
                self._url,
                content=body,
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
        except Exception as exc:
            raise TransportError(
                "POST to log server failed", cause=exc, url=self._url
            ) from exc
        finally:
            if owned:
                client.close()

    async def transmit(self, app_name: str, batch: Sequence[str]) -> TransmitResult:
        """Send ``batch`` as one request. Never raises for transport errors.

        An empty batch issues no request.
        """
        if not batch:
            return TransmitResult(lines=0, attempted=False)

        start = time.perf_counter()
        try:
            body = build_form_body(app_name, batch)
            resp = await self._post(body)
        except (BatchSerializationError, TransportError) as err:
            result = self._failed(batch, err)
        else:
            result = self._answered(batch, resp)
        latency = time.perf_counter() - start

        if self._metrics is not None:
            if result.delivered:
                await self._metrics.record_batch_sent(
                    len(batch), latency_seconds=latency
                )
            else:
                await self._metrics.record_batch_dropped(
                    len(batch), latency_seconds=latency
                )
        if result.error is not None:
            self._report_drop(app_name, batch, result.error, result.status_code)
        return result

    def transmit_blocking(
        self,
        app_name: str,
        batch: Sequence[str],
        *,
        client: httpx.Client | None = None,
    ) -> TransmitResult:
        """Send ``batch`` from the calling thread with a sync client.

        Used by the exit drain. During interpreter shutdown the scheduler
        loop cannot resolve hostnames (its executor refuses new work), so the
        last batch goes out here instead. Same outcome rules as
        :meth:`transmit`.
        """
        if not batch:
            return TransmitResult(lines=0, attempted=False)

        start = time.perf_counter()
        try:
            body = build_form_body(app_name, batch)
            resp = self._post_blocking(body, client)
        except (BatchSerializationError, TransportError) as err:
            result = self._failed(batch, err)
        else:
            result = self._answered(batch, resp)
        latency = time.perf_counter() - start

        if self._metrics is not None:
            self._metrics.record_batch(
                "sent" if result.delivered else "dropped",
                len(batch),
                latency_seconds=latency,
            )
        if result.error is not None:
            self._report_drop(app_name, batch, result.error, result.status_code)
        return result

    def _failed(self, batch: Sequence[str], err: NetlogError) -> TransmitResult:
        self._last_status = None
        self._last_error = str(err.cause or err)
        return TransmitResult(lines=len(batch), attempted=True, error=err)

    def _answered(self, batch: Sequence[str], resp: httpx.Response) -> TransmitResult:
        self._last_status = resp.status_code
        if resp.status_code >= 400:
            # Not retried; the batch is lost like any other failure
            self._last_error = f"HTTP {resp.status_code}"
            return TransmitResult(
                lines=len(batch),
                attempted=True,
                status_code=resp.status_code,
                error=TransportError(
                    "Log server rejected batch",
                    status_code=resp.status_code,
                    url=self._url,
                ),
            )
        self._last_error = None
        return TransmitResult(
            lines=len(batch),
            attempted=True,
            delivered=True,
            status_code=resp.status_code,
        )

    def _report_drop(
        self,
        app_name: str,
        batch: Sequence[str],
        err: NetlogError,
        status_code: int | None,
    ) -> None:
        if status_code is not None:
            reason = f"http_status_{status_code}"
        else:
            reason = err.category.value
        diagnostics.warn(
            "http-form-sender",
            "dropped batch",
            endpoint=self._url,
            lines=len(batch),
            reason=reason,
            error=err.to_dict(),
            _rate_limit_key=f"http-form-{reason}",
        )
        if self._fallback_on_failure:
            write_batch_to_stderr(
                app_name,
                batch,
                reason=reason,
                stream=self._fallback_stream,
            )

    async def health_check(self) -> bool:
        return (
            self._last_error is None
            and self._last_status is not None
            and self._last_status < 400
        )

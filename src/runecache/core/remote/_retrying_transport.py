"""Retry policy for catalog RPC calls, installed as an httpx transport."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Callable

import httpx

_LOG = logging.getLogger(__name__)

_TRANSIENT_STATUS = frozenset({429, 502, 503, 504})

# Failures raised before the request left this process.
_UNSENT_ERRORS: tuple[type[httpx.TransportError], ...] = (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)


def _always_replayable(request: httpx.Request) -> bool:
    return True


class RetryingTransport(httpx.AsyncBaseTransport):
    """Replays transient RPC failures with capped exponential backoff.

    *replayable* decides per request whether a failure after the server may
    have acted on it can be retried. Non-replayable requests are retried only
    when the request never arrived (connection failures) or was refused with
    HTTP 429. A 429 holds every request on this transport until its
    ``Retry-After`` elapses. A 503 with ``Retry-After`` waits at least that long.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
        max_delay: float = 8.0,
        replayable: Callable[[httpx.Request], bool] = _always_replayable,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._max_delay = max_delay
        self._replayable = replayable

        self._hold_lock = asyncio.Lock()
        self._open = asyncio.Event()
        self._open.set()
        self._held_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        replayable = self._replayable(request)
        attempt = 0
        while True:
            await self._open.wait()
            retries_left = attempt < self._max_retries

            try:
                response = await self._transport.handle_async_request(request)
            except _UNSENT_ERRORS:
                if not retries_left:
                    raise
                await self._sleep_backoff(attempt, request)
                attempt += 1
                continue
            except httpx.TransportError:
                if not (retries_left and replayable):
                    raise
                await self._sleep_backoff(attempt, request)
                attempt += 1
                continue

            status = response.status_code
            if not retries_left or status not in _TRANSIENT_STATUS:
                return response
            if status != 429 and not replayable:
                _LOG.warning("Not replaying %s after HTTP %d", request.url.path, status)
                return response

            retry_after = self.parse_retry_after(response)
            await response.aclose()
            if status == 429:
                await self._hold(1.0 if retry_after is None else retry_after)
            else:
                await self._sleep_backoff(attempt, request, at_least=retry_after or 0.0)
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    @staticmethod
    def parse_retry_after(response: httpx.Response) -> float | None:
        """Seconds from a numeric ``Retry-After`` header, or ``None`` when absent or unparseable."""
        raw = response.headers.get("Retry-After")
        if raw is None:
            return None
        try:
            return max(0.0, float(raw))
        except ValueError:
            return None

    async def _hold(self, seconds: float) -> None:
        async with self._hold_lock:
            until = time.monotonic() + seconds
            if until > self._held_until:
                self._held_until = until
                self._open.clear()
        _LOG.warning("Rate limited by catalog backend; holding requests for %.1fs", seconds)

        await asyncio.sleep(max(0.0, self._held_until - time.monotonic()))

        async with self._hold_lock:
            if time.monotonic() >= self._held_until:
                self._open.set()

    async def _sleep_backoff(self, attempt: int, request: httpx.Request, *, at_least: float = 0.0) -> None:
        seconds = max(at_least, min(self._max_delay, float(2**attempt)) + random.uniform(0.0, 0.25))
        _LOG.warning("Retrying %s (attempt %d) in %.2fs", request.url.path, attempt + 1, seconds)
        await asyncio.sleep(seconds)

from __future__ import annotations

import asyncio
import time

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(connect=10.0, read=30.0, write=20.0, pool=10.0)


def default_limits() -> httpx.Limits:
    return httpx.Limits(max_connections=20, max_keepalive_connections=10)


class HttpClientFactory:
    """Creates shared httpx clients with sane defaults.

    Keep one client per service process; do not create per-request.
    """

    @staticmethod
    def client(
        base_url: str | None = None,
        headers: dict | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url or "",
            headers=headers,
            timeout=default_timeout(),
            limits=default_limits(),
            follow_redirects=True,
            transport=transport,
        )


TransientHttpError = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


def transient_retry(attempts: int = 5, initial: float = 0.5, maximum: float = 10.0):
    return retry(
        reraise=True,
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential_jitter(initial=initial, max=maximum),
        retry=retry_if_exception_type(TransientHttpError),
    )


class RateLimiter:
    """Spaces out calls so at most `per_second` start in any one second.

    Shared by every coroutine using the same client.
    """

    def __init__(self, per_second: float):
        self.min_interval = 1.0 / per_second if per_second > 0 else 0.0
        self._lock = asyncio.Lock()
        self._last = 0.0

    async def wait(self) -> None:
        if not self.min_interval:
            return
        async with self._lock:
            delay = self._last + self.min_interval - time.monotonic()
            if delay > 0:
                await asyncio.sleep(delay)
            self._last = time.monotonic()

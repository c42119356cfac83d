"""httpx transport with per-host throttling and bounded retry."""

from __future__ import annotations

import asyncio
import random

import httpx
import structlog

from animedekho.infrastructure.common.rate_limiter import HostRateLimiter

log = structlog.get_logger(__name__)


def is_retryable_status(status_code: int) -> bool:
    """429 and every 5xx are transient for this site; other errors are final."""
    return status_code == 429 or status_code >= 500


def _parse_retry_after(headers: httpx.Headers) -> float | None:
    """Parse ``Retry-After`` in its integer-seconds form (HTTP-dates ignored)."""
    raw = headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (ValueError, TypeError):
        return None


class RetryTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx transport with throttling and retry.

    Every attempt first waits on the :class:`HostRateLimiter`. Retryable
    statuses (429/5xx) and transport errors (connect errors, timeouts,
    dropped connections) are retried up to *max_retries* times with
    exponential backoff plus jitter; ``Retry-After`` wins when present.
    The last response is returned as-is, the last transport error is
    re-raised.
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        rate_limiter: HostRateLimiter,
        *,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        max_backoff: float = 30.0,
    ) -> None:
        self._wrapped = wrapped
        self._rate_limiter = rate_limiter
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._max_backoff = max_backoff

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        attempt = 0
        while True:
            await self._rate_limiter.acquire(url)
            try:
                response = await self._wrapped.handle_async_request(request)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise
                delay = self._backoff(attempt)
                log.info(
                    "http_retry",
                    url=url,
                    error=type(exc).__name__,
                    attempt=attempt + 1,
                    delay=round(delay, 2),
                )
            else:
                if (
                    not is_retryable_status(response.status_code)
                    or attempt >= self._max_retries
                ):
                    return response
                await response.aread()
                await response.aclose()
                retry_after = _parse_retry_after(response.headers)
                delay = (
                    min(retry_after, self._max_backoff)
                    if retry_after is not None
                    else self._backoff(attempt)
                )
                log.info(
                    "http_retry",
                    url=url,
                    status=response.status_code,
                    attempt=attempt + 1,
                    delay=round(delay, 2),
                )
            await asyncio.sleep(delay)
            attempt += 1

    def _backoff(self, attempt: int) -> float:
        delay = self._backoff_base * (2**attempt)
        jitter = random.uniform(0, self._backoff_base)  # noqa: S311
        return min(delay + jitter, self._max_backoff)

    async def aclose(self) -> None:
        await self._wrapped.aclose()

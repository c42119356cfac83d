"""Per-host token-bucket throttle for outgoing requests.

The scraped site is a single small origin; the throttle keeps the
importer's request rate polite without any coordination between callers.
"""

from __future__ import annotations

import asyncio
import time
from urllib.parse import urlparse

import structlog

log = structlog.get_logger(__name__)


class TokenBucket:
    """Token bucket refilled at *rate* tokens per second up to *burst*.

    A non-positive rate disables throttling entirely.
    """

    def __init__(self, rate: float, burst: int = 1) -> None:
        self._rate = rate
        self._burst = max(1, burst)
        self._tokens = float(self._burst)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def rate(self) -> float:
        return self._rate

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        if self._rate <= 0:
            return

        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                wait = (1.0 - self._tokens) / self._rate
                log.debug("rate_limit_wait", wait=round(wait, 3))
                await asyncio.sleep(wait)
                self._refill()
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._last_refill = now


class HostRateLimiter:
    """Keeps one :class:`TokenBucket` per hostname.

    Args:
        rps: Requests per second per host. 0 = unlimited.
        burst: Requests allowed back-to-back before throttling kicks in.
    """

    def __init__(self, rps: float = 2.0, burst: int = 2) -> None:
        self._rps = rps
        self._burst = burst
        self._buckets: dict[str, TokenBucket] = {}

    @staticmethod
    def _host(url: str) -> str:
        return (urlparse(url).hostname or "").lower()

    async def acquire(self, url: str) -> None:
        """Wait for clearance to hit *url*'s host."""
        if self._rps <= 0:
            return
        host = self._host(url)
        if not host:
            return
        bucket = self._buckets.get(host)
        if bucket is None:
            bucket = self._buckets[host] = TokenBucket(self._rps, self._burst)
        await bucket.acquire()

"""Common infrastructure utilities."""

from __future__ import annotations

from .rate_limiter import HostRateLimiter, TokenBucket
from .retry_transport import RetryTransport, is_retryable_status

__all__ = [
    "HostRateLimiter",
    "RetryTransport",
    "TokenBucket",
    "is_retryable_status",
]

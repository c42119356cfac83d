"""Port for fetching raw page content."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PageFetcherPort(Protocol):
    """Retrieves raw text content for a URL.

    Implementations own their retry/backoff policy and timeouts.
    """

    async def fetch(self, url: str) -> str:
        """Return the page body for *url*.

        Raises ``FetchError`` when the request errors, times out, or the
        remote returns a non-success status after all retries.
        """
        ...

    async def aclose(self) -> None:
        """Release network/browser resources."""
        ...

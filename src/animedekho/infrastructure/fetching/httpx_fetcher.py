"""Plain HTTP page fetcher on httpx."""

from __future__ import annotations

import httpx
import structlog

from animedekho.domain.exceptions import FetchError
from animedekho.infrastructure.common.rate_limiter import HostRateLimiter
from animedekho.infrastructure.common.retry_transport import RetryTransport

log = structlog.get_logger(__name__)

_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


def build_http_client(
    *,
    user_agent: str,
    server_cookie: str = "",
    timeout_seconds: float = 30.0,
    follow_redirects: bool = True,
    max_retries: int = 3,
    backoff_base: float = 1.0,
    max_backoff: float = 30.0,
    rate_limit_rps: float = 2.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared ``AsyncClient`` with throttling and retry wired in.

    *transport* replaces the innermost network transport (tests pass a
    mock transport here).
    """
    headers = {
        "User-Agent": user_agent,
        "Accept": _ACCEPT,
        "Accept-Language": "en-US,en;q=0.5",
    }
    if server_cookie:
        headers["Cookie"] = server_cookie

    retrying = RetryTransport(
        transport or httpx.AsyncHTTPTransport(),
        HostRateLimiter(rps=rate_limit_rps),
        max_retries=max_retries,
        backoff_base=backoff_base,
        max_backoff=max_backoff,
    )
    return httpx.AsyncClient(
        transport=retrying,
        headers=headers,
        timeout=timeout_seconds,
        follow_redirects=follow_redirects,
    )


class HttpxPageFetcher:
    """Fetches page bodies with an ``httpx.AsyncClient``.

    Retries happen inside the client's transport; whatever is left after
    that (non-2xx status, transport error, timeout, a URL httpx refuses)
    becomes a :class:`FetchError`.
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def fetch(self, url: str) -> str:
        try:
            resp = await self._http.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug("page_request_failed", url=url, error=type(exc).__name__)
            raise FetchError(url, type(exc).__name__) from exc

        if not resp.is_success:
            log.debug("page_http_error", url=url, status=resp.status_code)
            raise FetchError(url, status_code=resp.status_code)

        return resp.text

    async def aclose(self) -> None:
        await self._http.aclose()

"""Builds the configured page fetcher."""

from __future__ import annotations

import httpx

from animedekho.domain.ports.page_fetcher import PageFetcherPort
from animedekho.infrastructure.config.schema import AppConfig

from .httpx_fetcher import HttpxPageFetcher, build_http_client


def build_page_fetcher(
    config: AppConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PageFetcherPort:
    if config.fetcher_backend == "playwright":
        # Imported lazily: the browser stack is only needed for this backend.
        from .playwright_fetcher import PlaywrightPageFetcher

        return PlaywrightPageFetcher(
            headless=config.playwright_headless,
            timeout_ms=config.playwright_timeout_ms,
            user_agent=config.http_user_agent,
            server_cookie=config.http_server_cookie,
            site_base=config.site_base_url,
        )

    client = build_http_client(
        user_agent=config.http_user_agent,
        server_cookie=config.http_server_cookie,
        timeout_seconds=config.http_timeout_seconds,
        follow_redirects=config.http_follow_redirects,
        max_retries=config.http_max_retries,
        backoff_base=config.http_backoff_base_seconds,
        max_backoff=config.http_max_backoff_seconds,
        rate_limit_rps=config.http_rate_limit_rps,
        transport=transport,
    )
    return HttpxPageFetcher(client)

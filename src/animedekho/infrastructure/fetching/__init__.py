"""Page fetchers (plain HTTP and browser-rendered)."""

from __future__ import annotations

from .factory import build_page_fetcher
from .httpx_fetcher import HttpxPageFetcher, build_http_client

__all__ = ["HttpxPageFetcher", "build_http_client", "build_page_fetcher"]

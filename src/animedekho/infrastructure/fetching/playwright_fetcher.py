"""Browser-rendered page fetcher on Playwright (headless Chromium).

For pages whose server list is only filled in by client-side scripts.
One browser and one context are started lazily and reused; each fetch
gets its own page that is closed right after.
"""

from __future__ import annotations

import asyncio

import structlog
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    Route,
    async_playwright,
)

from animedekho.domain.exceptions import FetchError

log = structlog.get_logger(__name__)

_BLOCKED_RESOURCE_TYPES = frozenset({"image", "font", "stylesheet", "media"})


async def _block_resources(route: Route) -> None:
    """Abort requests for heavy resource types."""
    if route.request.resource_type in _BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class PlaywrightPageFetcher:
    """Fetches fully rendered page HTML.

    Navigation errors, timeouts and non-2xx main-document responses raise
    :class:`FetchError`. No retries here: a rendered fetch is already slow.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        timeout_ms: int = 30_000,
        user_agent: str | None = None,
        server_cookie: str = "",
        site_base: str = "",
    ) -> None:
        self._headless = headless
        self._timeout_ms = timeout_ms
        self._user_agent = user_agent
        self._server_cookie = server_cookie
        self._site_base = site_base
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._lock = asyncio.Lock()

    async def _ensure_context(self) -> BrowserContext:
        if self._context is not None:
            return self._context
        async with self._lock:
            if self._context is not None:
                return self._context

            # Clean up a half-started browser from an earlier failed launch
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except PlaywrightError:
                    log.debug("browser_stale_stop_error", exc_info=True)
                self._playwright = None
                self._browser = None

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
            )
            context = await self._browser.new_context(
                user_agent=self._user_agent,
            )
            if self._server_cookie and self._site_base:
                name, _, value = self._server_cookie.partition("=")
                await context.add_cookies(
                    [{"name": name, "value": value, "url": self._site_base}]
                )
            await context.route("**/*", _block_resources)
            self._context = context
            log.info("browser_started", headless=self._headless)
            return context

    async def fetch(self, url: str) -> str:
        page: Page | None = None
        try:
            context = await self._ensure_context()
            page = await context.new_page()
            response = await page.goto(
                url, wait_until="domcontentloaded", timeout=self._timeout_ms
            )
            if response is not None and not response.ok:
                raise FetchError(url, status_code=response.status)
            return await page.content()
        except PlaywrightError as exc:
            log.debug("browser_navigation_failed", url=url, error=str(exc))
            raise FetchError(url, "navigation failed") from exc
        finally:
            if page is not None and not page.is_closed():
                await page.close()

    async def aclose(self) -> None:
        """Close context, browser and Playwright; safe to call twice."""
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

"""Shared test fixtures for the animedekho test suite."""

from __future__ import annotations

import base64
from collections.abc import Callable, Mapping

import pytest

from animedekho.domain.exceptions import FetchError
from animedekho.infrastructure.config.defaults import (
    DEFAULT_GENERIC_EMBED_PATTERNS,
    DEFAULT_INTERNAL_INDIRECTION_PATTERNS,
    DEFAULT_PLACEHOLDER_PATTERNS,
    DEFAULT_VIDEO_HOSTS,
)
from animedekho.infrastructure.link_resolution import SourceClassifier

SITE = "https://animedekho.app"


def b64(url: str) -> str:
    """Base64 payload as the site embeds it in ``data-src`` / ``url=``."""
    return base64.b64encode(url.encode("utf-8")).decode("ascii")


class FakePageFetcher:
    """In-memory PageFetcherPort: URL -> body, FetchError for anything else.

    Records every requested URL in ``calls`` (in order).
    """

    def __init__(self, pages: Mapping[str, str] | None = None) -> None:
        self.pages: dict[str, str] = dict(pages or {})
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, status_code=404)
        return self.pages[url]

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Link resolution fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def classifier() -> SourceClassifier:
    """Classifier with the shipped allow/deny lists."""
    return SourceClassifier(
        video_hosts=DEFAULT_VIDEO_HOSTS,
        placeholder_patterns=DEFAULT_PLACEHOLDER_PATTERNS,
        generic_embed_patterns=DEFAULT_GENERIC_EMBED_PATTERNS,
        treat_generic_embeds_as_placeholders=True,
        internal_indirection_patterns=DEFAULT_INTERNAL_INDIRECTION_PATTERNS,
    )


@pytest.fixture()
def make_fetcher() -> Callable[..., FakePageFetcher]:
    def _make(pages: Mapping[str, str] | None = None) -> FakePageFetcher:
        return FakePageFetcher(pages)

    return _make


# ---------------------------------------------------------------------------
# Markup builders
# ---------------------------------------------------------------------------


def encoded_server(url: str) -> str:
    return f'<li><a class="server" data-src="{b64(url)}">Server</a></li>'


def download_link(url: str, site: str = SITE) -> str:
    return f'<a href="{site}/download/dl2.php?url={b64(url)}">Download</a>'


def iframe(src: str) -> str:
    return f'<iframe width="560" src="{src}" allowfullscreen></iframe>'


def page(*parts: str) -> str:
    return "<html><body>" + "\n".join(parts) + "</body></html>"

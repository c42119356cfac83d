"""Composition root: wires fetcher, classifier, resolver, scraper and database."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
import structlog

from animedekho.domain.ports import AnimeRepositoryPort, PageFetcherPort
from animedekho.infrastructure.catalog import AnimeCatalogScraper
from animedekho.infrastructure.config.schema import AppConfig
from animedekho.infrastructure.fetching import build_page_fetcher
from animedekho.infrastructure.link_resolution import (
    EpisodeLinkResolver,
    SourceClassifier,
)
from animedekho.infrastructure.persistence import mysql_repository

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Services:
    config: AppConfig
    fetcher: PageFetcherPort
    classifier: SourceClassifier
    resolver: EpisodeLinkResolver
    catalog: AnimeCatalogScraper

    @property
    def site_name(self) -> str:
        return urlparse(self.config.site_base_url).hostname or self.config.site_base_url


def build_services(
    config: AppConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    fetcher = build_page_fetcher(config, transport=transport)
    classifier = SourceClassifier.from_config(config.links)
    return Services(
        config=config,
        fetcher=fetcher,
        classifier=classifier,
        resolver=EpisodeLinkResolver(fetcher, classifier, config.site_base_url),
        catalog=AnimeCatalogScraper(
            fetcher,
            config.site_base_url,
            page_delay_seconds=config.export.page_delay_seconds,
            max_category_pages=config.export.max_category_pages,
        ),
    )


@asynccontextmanager
async def services_scope(
    config: AppConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Services]:
    """Build services and release the fetcher on exit."""
    services = build_services(config, transport=transport)
    log.debug(
        "services_ready",
        site=config.site_base_url,
        fetcher=config.fetcher_backend,
    )
    try:
        yield services
    finally:
        await services.fetcher.aclose()


@asynccontextmanager
async def repository_scope(config: AppConfig) -> AsyncIterator[AnimeRepositoryPort]:
    """Open the anime database (``database`` section) and close it on exit."""
    async with mysql_repository(config.database) as repository:
        yield repository

"""Bulk SQL export of the whole catalog (or its first *limit* entries)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from animedekho.domain.exceptions import ImporterError
from animedekho.domain.ports import AnimeCatalogPort
from animedekho.infrastructure.sql import SqlExportWriter

from .export_anime import AnimeExporter

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BulkExportSummary:
    anime: int
    episodes: int


class BulkExporter:
    """Crawls the catalog and writes every anime into one SQL script.

    A failure on one anime is logged and the crawl moves on.
    """

    def __init__(
        self,
        catalog: AnimeCatalogPort,
        exporter: AnimeExporter,
        writer: SqlExportWriter,
        *,
        site_name: str,
        anime_delay_seconds: float = 1.0,
    ) -> None:
        self._catalog = catalog
        self._exporter = exporter
        self._writer = writer
        self._site_name = site_name
        self._anime_delay = anime_delay_seconds

    async def export(
        self, limit: int = 50, *, generated_at: datetime | None = None
    ) -> BulkExportSummary:
        """Export the first *limit* anime; ``0`` exports everything."""
        all_anime = await self._catalog.get_all_anime()
        selected = all_anime if limit == 0 else all_anime[:limit]
        log.info("bulk_export_started", found=len(all_anime), exporting=len(selected))

        self._writer.bulk_header(
            len(selected),
            generated_at or datetime.now(timezone.utc),
            self._site_name,
        )

        anime_count = 0
        episode_count = 0
        for index, anime in enumerate(selected, start=1):
            anime_count += 1
            log.info("bulk_export_anime", position=index, total=len(selected), title=anime.title)
            try:
                details = await self._catalog.get_anime_details(anime.slug)
                if not details.title:
                    log.warning("anime_title_missing", slug=anime.slug)
                    continue
                self._writer.bulk_section(details.title)
                self._writer.anime(details.title, details)
                episode_count += await self._exporter.write_episodes(
                    details, eager_seasons=True
                )
            except ImporterError as exc:
                log.error("bulk_export_anime_failed", title=anime.title, error=str(exc))
                continue
            if self._anime_delay > 0:
                await asyncio.sleep(self._anime_delay)

        self._writer.bulk_footer(anime_count, episode_count)
        log.info("bulk_export_done", anime=anime_count, episodes=episode_count)
        return BulkExportSummary(anime=anime_count, episodes=episode_count)

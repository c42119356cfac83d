"""Direct database import of one anime (the ``db-import`` command)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from animedekho.domain.entities.catalog import AnimeDetails, Episode
from animedekho.domain.ports import (
    AnimeCatalogPort,
    AnimeRepositoryPort,
    EpisodeLinkResolverPort,
    LinkClassifierPort,
)
from animedekho.infrastructure.sql import MOVIE_EPISODE_TITLE

from .export_anime import find_anime_slug, season_episodes, usable_episode_link

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    title: str
    anime_id: int
    episodes: int


class AnimeImporter:
    """Writes one anime straight into the database.

    Selection rules match :class:`AnimeExporter`: unusable episodes are
    skipped, a season without usable episodes is not written, and
    ``ep_order`` counts across all seasons.
    """

    def __init__(
        self,
        catalog: AnimeCatalogPort,
        resolver: EpisodeLinkResolverPort,
        classifier: LinkClassifierPort,
        repository: AnimeRepositoryPort,
        *,
        episode_delay_seconds: float = 0.5,
    ) -> None:
        self._catalog = catalog
        self._resolver = resolver
        self._classifier = classifier
        self._repository = repository
        self._episode_delay = episode_delay_seconds

    async def import_anime(self, query_or_slug: str) -> ImportSummary | None:
        slug = await find_anime_slug(self._catalog, query_or_slug)
        if slug is None:
            return None

        details = await self._catalog.get_anime_details(slug)
        if not details.title:
            log.error("anime_title_missing", slug=slug)
            return None

        anime_id = await self._repository.ensure_anime(details.title, details)
        log.info(
            "anime_import_started",
            title=details.title,
            anime_id=anime_id,
            type=details.type,
            seasons=details.total_seasons,
        )
        if details.type == "movie":
            count = await self._import_movie(anime_id, details)
        else:
            count = await self._import_seasons(anime_id, details)
        log.info("anime_import_done", title=details.title, episodes=count)
        return ImportSummary(title=details.title, anime_id=anime_id, episodes=count)

    async def _import_movie(self, anime_id: int, details: AnimeDetails) -> int:
        episodes = await self._catalog.get_episodes(details.slug)
        if not episodes:
            log.warning("movie_skipped", title=details.title, reason="no_video_link")
            return 0
        link = await usable_episode_link(self._resolver, self._classifier, episodes[0])
        if not link:
            return 0
        await self._repository.replace_movie(anime_id, MOVIE_EPISODE_TITLE, link)
        return 1

    async def _import_seasons(self, anime_id: int, details: AnimeDetails) -> int:
        ep_order = 1
        for season in details.seasons:
            episodes = await season_episodes(self._catalog, season)
            usable: list[tuple[Episode, str]] = []
            for episode in episodes:
                if self._episode_delay > 0:
                    await asyncio.sleep(self._episode_delay)
                link = await usable_episode_link(self._resolver, self._classifier, episode)
                if link:
                    usable.append((episode, link))
            if not usable:
                log.info(
                    "season_skipped", season=season.season_number, reason="no_valid_links"
                )
                continue

            season_id = await self._repository.ensure_season(anime_id, season)
            await self._repository.purge_season(season_id)
            for episode, link in usable:
                await self._repository.add_episode(
                    anime_id, season_id, episode.title, link, ep_order
                )
                ep_order += 1
        return ep_order - 1

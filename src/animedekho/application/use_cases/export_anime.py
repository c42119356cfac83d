"""Single-anime SQL export: metadata, seasons and resolved episode links."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from animedekho.domain.entities.catalog import AnimeDetails, Episode, Season
from animedekho.domain.entities.links import ResolutionResult
from animedekho.domain.ports import (
    AnimeCatalogPort,
    EpisodeLinkResolverPort,
    LinkClassifierPort,
)
from animedekho.infrastructure.sql import SqlExportWriter

log = structlog.get_logger(__name__)

# A watch-page URL is only acceptable when it points at an actual player.
_PLAYER_MARKERS = ("cdn", "embed", "video")


def skip_reason(result: ResolutionResult, classifier: LinkClassifierPort) -> str | None:
    """Why a resolved link must not be exported, or ``None`` if it is usable."""
    link = result.url
    if not link:
        return "no_video_link"
    if classifier.is_placeholder_link(link):
        return "placeholder_link"
    if "/epi/" in link and not any(marker in link for marker in _PLAYER_MARKERS):
        return "invalid_link"
    return None


async def find_anime_slug(catalog: AnimeCatalogPort, query_or_slug: str) -> str | None:
    """Slug for a search query, slug or series URL.

    Plain multi-word text (no ``-``, not a URL) is treated as a search
    query; series hits are preferred over movies. ``None`` when the search
    finds nothing.
    """
    value = query_or_slug.strip()
    is_url = value.lower().startswith("http")
    if not is_url and "-" not in value and " " in value:
        results = await catalog.search(value)
        if not results:
            log.error("anime_search_no_results", query=value)
            return None
        best = next((r for r in results if r.type == "series"), results[0])
        log.info("anime_search_match", query=value, title=best.title, slug=best.slug)
        return best.slug
    return value


async def season_episodes(catalog: AnimeCatalogPort, season: Season) -> list[Episode]:
    """Episodes listed on the season page that belong to that season."""
    episodes = await catalog.get_episodes(season.slug)
    selected = [ep for ep in episodes if ep.season == season.season_number]
    log.info("season_episodes_found", season=season.season_number, count=len(selected))
    return selected


async def usable_episode_link(
    resolver: EpisodeLinkResolverPort,
    classifier: LinkClassifierPort,
    episode: Episode,
) -> str | None:
    """Resolve an episode and vet the link; ``None`` (logged) when unusable."""
    result = await resolver.resolve_episode_link(episode.episode_id)
    reason = skip_reason(result, classifier)
    if reason is not None:
        log.info("episode_skipped", episode=episode.label, reason=reason, link=result.url)
        return None
    log.info("episode_link", episode=episode.label, link=result.url, kind=result.kind.value)
    return result.url


@dataclass(frozen=True)
class ExportSummary:
    title: str
    episodes: int


class AnimeExporter:
    """Writes one anime (movie or series) as replayable SQL.

    Episodes without a usable link are logged and left out; a season
    whose episodes are all left out is skipped entirely.
    """

    def __init__(
        self,
        catalog: AnimeCatalogPort,
        resolver: EpisodeLinkResolverPort,
        classifier: LinkClassifierPort,
        writer: SqlExportWriter,
        *,
        episode_delay_seconds: float = 0.5,
    ) -> None:
        self._catalog = catalog
        self._resolver = resolver
        self._classifier = classifier
        self._writer = writer
        self._episode_delay = episode_delay_seconds

    async def export(self, query_or_slug: str) -> ExportSummary | None:
        """Export by search query, slug or series URL (see :func:`find_anime_slug`)."""
        slug = await find_anime_slug(self._catalog, query_or_slug)
        if slug is None:
            return None

        details = await self._catalog.get_anime_details(slug)
        if not details.title:
            log.error("anime_title_missing", slug=slug)
            return None

        log.info(
            "anime_export_started",
            title=details.title,
            type=details.type,
            seasons=details.total_seasons,
            poster=details.poster,
        )
        self._writer.begin_anime(details.title)
        self._writer.anime(details.title, details)
        count = await self.write_episodes(details, eager_seasons=False)
        self._writer.end_anime(details.title)
        log.info("anime_export_done", title=details.title, episodes=count)
        return ExportSummary(title=details.title, episodes=count)

    async def write_episodes(self, details: AnimeDetails, *, eager_seasons: bool) -> int:
        """Write episode statements; returns the number of episodes written.

        With *eager_seasons* the season rows are emitted before its
        episodes are looked up, even if none of them turn out usable.
        """
        if details.type == "movie":
            return await self._write_movie(details)

        ep_order = 1
        for season in details.seasons:
            if eager_seasons:
                self._writer.season(details.title, season)
            episodes = await season_episodes(self._catalog, season)
            if not episodes:
                log.info("season_skipped", season=season.season_number, reason="no_episodes")
                continue

            if eager_seasons:
                self._writer.purge_season(season.season_number)
                for episode in episodes:
                    link = await self._episode_link(episode)
                    if link:
                        self._writer.episode(details.title, episode.title, link, ep_order)
                        ep_order += 1
                continue

            usable: list[tuple[Episode, str]] = []
            for episode in episodes:
                link = await self._episode_link(episode)
                if link:
                    usable.append((episode, link))
            if not usable:
                log.info(
                    "season_skipped", season=season.season_number, reason="no_valid_links"
                )
                continue

            self._writer.season(details.title, season)
            self._writer.purge_season(season.season_number)
            for episode, link in usable:
                self._writer.episode(details.title, episode.title, link, ep_order)
                ep_order += 1

        return ep_order - 1

    async def _write_movie(self, details: AnimeDetails) -> int:
        episodes = await self._catalog.get_episodes(details.slug)
        if not episodes:
            log.warning("movie_skipped", title=details.title, reason="no_video_link")
            return 0
        link = await self._episode_link(episodes[0], delay=False)
        if not link:
            return 0
        self._writer.movie(details.title, link)
        return 1

    async def _episode_link(self, episode: Episode, *, delay: bool = True) -> str | None:
        if delay and self._episode_delay > 0:
            await asyncio.sleep(self._episode_delay)
        return await usable_episode_link(self._resolver, self._classifier, episode)

"""Port for browsing the anime catalog of the scraped site."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from animedekho.domain.entities.catalog import (
    AnimeDetails,
    AnimeSummary,
    Episode,
    ScheduleEntry,
)


@runtime_checkable
class AnimeCatalogPort(Protocol):
    """Search, metadata, episode listing and schedule lookups."""

    async def search(self, query: str) -> list[AnimeSummary]: ...

    async def get_anime_details(self, slug_or_url: str) -> AnimeDetails:
        """Raises ``FetchError`` when the series page cannot be fetched."""
        ...

    async def get_episodes(self, slug: str) -> list[Episode]: ...

    async def get_all_anime(self) -> list[AnimeSummary]: ...

    async def get_schedule(self) -> list[list[ScheduleEntry]]:
        """Raises ``FetchError`` or ``ScheduleParseError``."""
        ...

"""Port for writing anime, seasons and episodes straight into a database."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from animedekho.domain.entities.catalog import AnimeDetails, Season


@runtime_checkable
class AnimeRepositoryPort(Protocol):
    """Idempotent writes keyed by anime title and season number.

    All methods raise ``PersistenceError`` when the database fails.
    """

    async def ensure_anime(self, title: str, details: AnimeDetails) -> int:
        """Insert the anime unless a row with *title* exists; return its id."""
        ...

    async def replace_movie(self, anime_id: int, episode_title: str, link: str) -> None:
        """Replace the anime's season-less movie episode."""
        ...

    async def ensure_season(self, anime_id: int, season: Season) -> int:
        """Insert the season unless it exists; return its id."""
        ...

    async def purge_season(self, season_id: int) -> None: ...

    async def add_episode(
        self,
        anime_id: int,
        season_id: int,
        episode_title: str,
        link: str,
        ep_order: int,
    ) -> None: ...

"""Domain entities for the anime catalog (search hits, details, episodes)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

AnimeType = Literal["movie", "series"]


@dataclass(frozen=True)
class AnimeSummary:
    """A single anime found by search or catalog crawling."""

    title: str
    url: str
    slug: str
    type: AnimeType = "series"


@dataclass(frozen=True)
class Season:
    season_number: int
    slug: str
    title: str


@dataclass(frozen=True)
class AnimeDetails:
    """Metadata scraped from an anime's series page."""

    title: str
    slug: str
    description: str = ""
    poster: str = ""
    type: AnimeType = "series"
    seasons: list[Season] = field(default_factory=list)

    @property
    def total_seasons(self) -> int:
        return len(self.seasons)


@dataclass(frozen=True)
class Episode:
    """An episode entry; ``episode_id`` is the slug of its watch page."""

    episode_id: str
    number: int
    title: str
    season: int
    is_filler: bool = False

    @property
    def label(self) -> str:
        return f"S{self.season}E{self.number}"


@dataclass(frozen=True)
class ScheduleEntry:
    """One anime slot in the weekly release schedule."""

    title: str
    time: str = ""
    extra: dict[str, str] = field(default_factory=dict)

"""Port for resolving an episode to a playable video link."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from animedekho.domain.entities.links import ResolutionResult


@runtime_checkable
class EpisodeLinkResolverPort(Protocol):
    """Maps an episode id or watch-page URL to a resolution result.

    Never raises: failures are reported as an absent result.
    """

    async def resolve_episode_link(self, episode: str) -> ResolutionResult: ...


@runtime_checkable
class LinkClassifierPort(Protocol):
    """Allow/deny-list checks on a single URL."""

    def is_direct_video_link(self, url: str) -> bool: ...

    def is_placeholder_link(self, url: str) -> bool: ...

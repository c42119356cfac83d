"""Episode link resolver: ranks a page's mirror sources and picks one.

The site offers several redundant "servers" per episode. Candidates are
walked in extraction order:

1. placeholders are skipped;
2. a direct video-host link is returned immediately;
3. an internal embed/redirect page is fetched and walked once more
   (``MAX_INDIRECTION_DEPTH`` levels); a direct link found there is
   returned immediately, otherwise its first usable candidate may become
   the fallback;
4. anything else becomes the fallback if none is recorded yet.

When no direct link turns up, the first recorded fallback wins, even if
a later candidate looked "better". A nested direct link still
short-circuits the walk, so a later indirection page can beat an earlier
plain fallback.
"""

from __future__ import annotations

import structlog

from animedekho.domain.entities.links import (
    CandidateSource,
    ExtractionMethod,
    ResolutionResult,
    SourceClass,
)
from animedekho.domain.exceptions import FetchError
from animedekho.domain.ports.page_fetcher import PageFetcherPort

from .classification import SourceClassifier
from .extraction import dedupe_candidates, extract_bare_urls, extract_candidates

log = structlog.get_logger(__name__)

MAX_INDIRECTION_DEPTH = 1


class EpisodeLinkResolver:
    """Resolves an episode id or watch-page URL to a playable link.

    Never raises past :meth:`resolve_episode_link`; every failure ends as
    an absent result.
    """

    def __init__(
        self,
        fetcher: PageFetcherPort,
        classifier: SourceClassifier,
        site_base: str,
        *,
        max_depth: int = MAX_INDIRECTION_DEPTH,
    ) -> None:
        self._fetcher = fetcher
        self._classifier = classifier
        self._site_base = site_base.rstrip("/")
        self._max_depth = max_depth

    def episode_url(self, episode: str) -> str:
        """Watch-page URL for an episode id; URLs pass through unchanged."""
        episode = episode.strip()
        if episode.lower().startswith(("http://", "https://")):
            return episode
        return f"{self._site_base}/epi/{episode.strip('/')}/"

    async def resolve_episode_link(self, episode: str) -> ResolutionResult:
        url = self.episode_url(episode)
        try:
            html = await self._fetcher.fetch(url)
        except FetchError as exc:
            log.warning("episode_page_fetch_failed", url=url, error=str(exc))
            return ResolutionResult.absent()

        result = await self.resolve_page(html)
        log.info(
            "episode_link_resolved",
            episode=episode,
            kind=result.kind.value,
            link=result.url,
        )
        return result

    async def resolve_page(self, html: str) -> ResolutionResult:
        """Run the resolution chain over an already fetched episode page."""
        candidates = extract_candidates(html, self._site_base)
        log.debug("episode_candidates", count=len(candidates))
        return await self._walk(candidates, depth=0)

    async def _walk(
        self, candidates: list[CandidateSource], *, depth: int
    ) -> ResolutionResult:
        fallback: str | None = None

        for candidate in candidates:
            source_class = self._classifier.classify(candidate.url)

            if source_class is SourceClass.PLACEHOLDER:
                log.debug("candidate_placeholder", url=candidate.url, depth=depth)
                continue

            if source_class is SourceClass.DIRECT:
                log.debug(
                    "candidate_direct",
                    url=candidate.url,
                    method=candidate.method.value,
                    depth=depth,
                )
                return ResolutionResult.direct(candidate.url)

            if source_class is SourceClass.INTERNAL:
                if depth >= self._max_depth:
                    # Unresolved routing pages are never playable.
                    continue
                nested = await self._resolve_indirection(candidate.url, depth + 1)
                if nested.is_direct:
                    return nested
                if nested and fallback is None:
                    fallback = nested.url
                continue

            if fallback is None:
                fallback = candidate.url

        if fallback is None:
            return ResolutionResult.absent()
        return ResolutionResult.fallback(fallback)

    async def _resolve_indirection(self, url: str, depth: int) -> ResolutionResult:
        try:
            html = await self._fetcher.fetch(url)
        except FetchError as exc:
            log.debug("indirection_fetch_failed", url=url, error=str(exc))
            return ResolutionResult.absent()

        candidates = extract_candidates(html, self._site_base, base_url=url)
        # Players often build the real source URL in inline scripts.
        scripted = [
            CandidateSource(url=found, method=ExtractionMethod.RAW_EMBED)
            for found in extract_bare_urls(html)
            if self._classifier.is_direct_video_link(found)
        ]
        return await self._walk(dedupe_candidates(candidates + scripted), depth=depth)

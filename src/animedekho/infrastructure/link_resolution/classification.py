"""Allow/deny-list classification of candidate URLs.

The lists are data, injected at construction time (see the ``links``
config section), so a site change never needs a code change.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

from animedekho.domain.entities.links import SourceClass
from animedekho.infrastructure.config.schema import LinkClassificationConfig


def _lowered(patterns: Iterable[str]) -> tuple[str, ...]:
    return tuple(p.lower() for p in patterns if p)


class SourceClassifier:
    """Classifies URLs as placeholder, direct, internal indirection or other.

    All matching is case-insensitive substring matching.

    Args:
        video_hosts: Allow-list of known video-hosting provider markers.
        placeholder_patterns: Deny-list of known tutorial/trailer/ad-skip
            identifiers, matched anywhere in the URL.
        generic_embed_patterns: Markers of generic video-platform embeds.
        treat_generic_embeds_as_placeholders: When set, a generic embed
            without an allow-listed host counts as a placeholder. This is
            a bias of the scraped site (such embeds are "how to watch"
            filler there), not a universal rule.
        internal_indirection_patterns: Markers of the site's own embed /
            redirect pages that need one more fetch.
    """

    def __init__(
        self,
        *,
        video_hosts: Iterable[str],
        placeholder_patterns: Iterable[str],
        generic_embed_patterns: Iterable[str] = (),
        treat_generic_embeds_as_placeholders: bool = True,
        internal_indirection_patterns: Iterable[str] = (),
    ) -> None:
        self._video_hosts = _lowered(video_hosts)
        self._placeholders = _lowered(placeholder_patterns)
        self._generic_embeds = _lowered(generic_embed_patterns)
        self._generic_is_placeholder = treat_generic_embeds_as_placeholders
        self._internal = _lowered(internal_indirection_patterns)

    @classmethod
    def from_config(cls, config: LinkClassificationConfig) -> SourceClassifier:
        return cls(
            video_hosts=config.video_hosts,
            placeholder_patterns=config.placeholder_patterns,
            generic_embed_patterns=config.generic_embed_patterns,
            treat_generic_embeds_as_placeholders=(
                config.treat_generic_embeds_as_placeholders
            ),
            internal_indirection_patterns=config.internal_indirection_patterns,
        )

    def is_direct_video_link(self, url: str) -> bool:
        """True if the URL's host or path names an allow-listed provider."""
        if not url:
            return False
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        host_and_path = f"{parsed.netloc}{parsed.path}".lower()
        return any(host in host_and_path for host in self._video_hosts)

    def is_placeholder_link(self, url: str) -> bool:
        """True for deny-listed URLs and, under the policy, generic embeds."""
        if not url:
            return False
        lowered = url.lower()
        if any(pattern in lowered for pattern in self._placeholders):
            return True
        if self._generic_is_placeholder and any(
            marker in lowered for marker in self._generic_embeds
        ):
            return not self.is_direct_video_link(url)
        return False

    def is_internal_indirection(self, url: str) -> bool:
        lowered = url.lower()
        return any(pattern in lowered for pattern in self._internal)

    def classify(self, url: str) -> SourceClass:
        # Placeholder first: a URL on both lists is excluded.
        if self.is_placeholder_link(url):
            return SourceClass.PLACEHOLDER
        if self.is_direct_video_link(url):
            return SourceClass.DIRECT
        if self.is_internal_indirection(url):
            return SourceClass.INTERNAL
        return SourceClass.OTHER

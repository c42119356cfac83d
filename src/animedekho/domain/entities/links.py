"""Domain entities for episode link resolution.

Pure value objects without I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ExtractionMethod(str, Enum):
    """How a candidate URL was discovered on a page (priority order)."""

    ENCODED_ATTRIBUTE = "encoded_attribute"
    INDIRECTION_PARAM = "indirection_param"
    RAW_EMBED = "raw_embed"


class SourceClass(str, Enum):
    """Classification of a single candidate URL."""

    PLACEHOLDER = "placeholder"
    DIRECT = "direct"
    INTERNAL = "internal"
    OTHER = "other"


class ResolutionKind(str, Enum):
    DIRECT = "direct"
    FALLBACK = "fallback"
    ABSENT = "absent"


@dataclass(frozen=True)
class CandidateSource:
    """A URL discovered on a page, tagged with its extraction method."""

    url: str
    method: ExtractionMethod


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving an episode page to a playable link.

    ``url`` is ``None`` exactly when ``kind`` is ``ABSENT``.
    """

    kind: ResolutionKind
    url: str | None = None

    def __post_init__(self) -> None:
        if (self.kind is ResolutionKind.ABSENT) != (self.url is None):
            raise ValueError("url must be None iff kind is ABSENT")

    @classmethod
    def direct(cls, url: str) -> ResolutionResult:
        return cls(kind=ResolutionKind.DIRECT, url=url)

    @classmethod
    def fallback(cls, url: str) -> ResolutionResult:
        return cls(kind=ResolutionKind.FALLBACK, url=url)

    @classmethod
    def absent(cls) -> ResolutionResult:
        return cls(kind=ResolutionKind.ABSENT)

    @property
    def is_direct(self) -> bool:
        return self.kind is ResolutionKind.DIRECT

    def __bool__(self) -> bool:
        return self.url is not None

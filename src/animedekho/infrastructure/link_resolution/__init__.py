"""Episode link extraction, classification and resolution."""

from __future__ import annotations

from .classification import SourceClassifier
from .extraction import extract_candidates
from .resolver import MAX_INDIRECTION_DEPTH, EpisodeLinkResolver

__all__ = [
    "MAX_INDIRECTION_DEPTH",
    "EpisodeLinkResolver",
    "SourceClassifier",
    "extract_candidates",
]

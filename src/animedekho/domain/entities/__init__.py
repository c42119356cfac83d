from .catalog import (
    AnimeDetails,
    AnimeSummary,
    AnimeType,
    Episode,
    ScheduleEntry,
    Season,
)
from .links import (
    CandidateSource,
    ExtractionMethod,
    ResolutionKind,
    ResolutionResult,
    SourceClass,
)

__all__ = [
    "AnimeDetails",
    "AnimeSummary",
    "AnimeType",
    "CandidateSource",
    "Episode",
    "ExtractionMethod",
    "ResolutionKind",
    "ResolutionResult",
    "ScheduleEntry",
    "Season",
    "SourceClass",
]

"""Importer exceptions."""

from __future__ import annotations


class ImporterError(Exception):
    """Base class for all importer errors."""


class FetchError(ImporterError):
    """Raised when a page cannot be fetched after the fetcher's own retries."""

    def __init__(
        self,
        url: str,
        message: str = "",
        *,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        detail = message or (f"HTTP {status_code}" if status_code else "fetch failed")
        super().__init__(f"{detail}: {url}")


class DecodeError(ImporterError):
    """Raised when an encoded candidate payload cannot be decoded to a URL."""


class ScheduleParseError(ImporterError):
    """Raised when the release schedule script is missing or unparseable."""


class PersistenceError(ImporterError):
    """Raised when the anime database rejects a statement or is unreachable."""

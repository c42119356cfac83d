"""Daily export of the anime on today's release schedule."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from pathlib import Path

import structlog

from animedekho.domain.entities.catalog import AnimeSummary
from animedekho.domain.exceptions import FetchError
from animedekho.domain.ports import AnimeCatalogPort
from animedekho.infrastructure.sql import SqlExportWriter

log = structlog.get_logger(__name__)

MIN_SEARCH_TITLE_LENGTH = 3


def daily_export_filename(day: date) -> str:
    return f"daily_export_{day.isoformat()}.sql"


class DailyExporter:
    """Searches each scheduled title and writes its anime row to a file.

    Schedule titles rarely match the catalog verbatim, so an unmatched
    title is shortened one character at a time and searched again.
    """

    def __init__(
        self,
        catalog: AnimeCatalogPort,
        output_dir: Path,
        *,
        anime_delay_seconds: float = 1.0,
    ) -> None:
        self._catalog = catalog
        self._output_dir = output_dir
        self._anime_delay = anime_delay_seconds

    async def export(
        self, today: date, *, generated_at: datetime | None = None
    ) -> Path | None:
        """Write ``daily_export_<date>.sql``; ``None`` if nothing is scheduled.

        Raises ``FetchError`` or ``ScheduleParseError`` if the schedule
        itself is unavailable.
        """
        schedule = await self._catalog.get_schedule()
        day_index = today.weekday()
        todays = schedule[day_index] if day_index < len(schedule) else []
        log.info("daily_schedule", day=day_index, scheduled=len(todays))
        if not todays:
            log.info("daily_export_nothing_scheduled", day=day_index)
            return None

        path = self._output_dir / daily_export_filename(today)
        stamp = (generated_at or datetime.now(timezone.utc)).isoformat()
        with path.open("w", encoding="utf-8") as fh:
            writer = SqlExportWriter(fh)
            writer.comment(f"Automated Export: {stamp}")
            writer.blank()

            for position, entry in enumerate(todays, start=1):
                log.info(
                    "daily_search", position=position, total=len(todays), title=entry.title
                )
                match = await self._find_match(entry.title)
                if match is None:
                    log.warning("daily_no_match", title=entry.title)
                else:
                    try:
                        details = await self._catalog.get_anime_details(match.url)
                    except FetchError as exc:
                        log.error("daily_details_failed", title=entry.title, error=str(exc))
                    else:
                        writer.comment(f"Data for {details.title}")
                        writer.anime_ignore(details.title, details)
                        log.info("daily_anime_exported", title=details.title)
                if self._anime_delay > 0:
                    await asyncio.sleep(self._anime_delay)

        log.info("daily_export_written", path=str(path))
        return path

    async def _find_match(self, title: str) -> AnimeSummary | None:
        current = title.strip()
        while len(current) >= MIN_SEARCH_TITLE_LENGTH:
            results = await self._catalog.search(current)
            if results:
                return results[0]
            current = current[:-1].strip()
        return None

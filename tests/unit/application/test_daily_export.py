"""Tests for the daily schedule export use case."""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from animedekho.application.use_cases import DailyExporter, daily_export_filename
from animedekho.domain.entities.catalog import AnimeDetails, AnimeSummary, ScheduleEntry
from animedekho.domain.exceptions import ScheduleParseError

SITE = "https://animedekho.app"
MONDAY = date(2026, 10, 19)


def _catalog(schedule: list[list[ScheduleEntry]]) -> AsyncMock:
    catalog = AsyncMock()
    catalog.get_schedule.return_value = schedule

    async def search(query: str) -> list[AnimeSummary]:
        if query == "Naruto Shippuden":
            return [
                AnimeSummary(
                    "Naruto Shippuden", f"{SITE}/serie/naruto-shippuden/", "naruto-shippuden"
                )
            ]
        return []

    catalog.search = AsyncMock(side_effect=search)
    catalog.get_anime_details.return_value = AnimeDetails(
        title="Naruto Shippuden",
        slug="naruto-shippuden",
        description="It's back",
        poster="https://image.tmdb.org/t/p/w500/n.jpg",
    )
    return catalog


class TestDailyExporter:
    def test_filename(self) -> None:
        assert daily_export_filename(MONDAY) == "daily_export_2026-10-19.sql"

    @pytest.mark.asyncio()
    async def test_shrinks_titles_until_match(self, tmp_path: Path) -> None:
        catalog = _catalog(
            [
                [ScheduleEntry("Naruto Shippuden X"), ScheduleEntry("Zzz")],
                [ScheduleEntry("Tuesday Show")],
            ]
        )
        exporter = DailyExporter(catalog, tmp_path, anime_delay_seconds=0)

        path = await exporter.export(
            MONDAY, generated_at=datetime(2026, 10, 19, 6, 0, tzinfo=timezone.utc)
        )

        assert path == tmp_path / "daily_export_2026-10-19.sql"
        searched = [call.args[0] for call in catalog.search.await_args_list]
        assert searched == ["Naruto Shippuden X", "Naruto Shippuden", "Zzz"]
        catalog.get_anime_details.assert_awaited_once_with(
            f"{SITE}/serie/naruto-shippuden/"
        )
        content = path.read_text(encoding="utf-8")
        assert content.startswith("-- Automated Export: 2026-10-19T06:00:00+00:00\n\n")
        assert "-- Data for Naruto Shippuden\n" in content
        assert (
            "INSERT IGNORE INTO anime (title, description, poster_url, type) "
            "VALUES ('Naruto Shippuden', 'It\\'s back', "
            "'https://image.tmdb.org/t/p/w500/n.jpg', 'series');"
        ) in content
        assert "Tuesday Show" not in content

    @pytest.mark.asyncio()
    async def test_nothing_scheduled(self, tmp_path: Path) -> None:
        catalog = _catalog([[], [ScheduleEntry("Tuesday Show")]])
        exporter = DailyExporter(catalog, tmp_path, anime_delay_seconds=0)

        assert await exporter.export(MONDAY) is None
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio()
    async def test_short_schedule(self, tmp_path: Path) -> None:
        catalog = _catalog([[ScheduleEntry("Naruto Shippuden")]])
        exporter = DailyExporter(catalog, tmp_path, anime_delay_seconds=0)

        assert await exporter.export(date(2026, 10, 21)) is None  # Wednesday

    @pytest.mark.asyncio()
    async def test_schedule_errors_propagate(self, tmp_path: Path) -> None:
        catalog = _catalog([])
        catalog.get_schedule.side_effect = ScheduleParseError("no schedule")
        exporter = DailyExporter(catalog, tmp_path, anime_delay_seconds=0)

        with pytest.raises(ScheduleParseError):
            await exporter.export(MONDAY)

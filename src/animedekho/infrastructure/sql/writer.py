"""MySQL statement emitter for exported anime, seasons and episodes.

Statements are idempotent by construction (``WHERE NOT EXISTS`` for anime
and seasons, purge + ``INSERT IGNORE`` for episodes) so an export can be
replayed against a database that already holds older data.
"""

from __future__ import annotations

from datetime import datetime
from typing import TextIO

from animedekho.domain.entities.catalog import AnimeDetails, Season

MOVIE_EPISODE_TITLE = "Watch Full Movie"


def sql_escape(value: str | None) -> str:
    """Escape a value for a single-quoted MySQL string literal."""
    if not value:
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "")
    )


def _anime_id_subquery(title: str) -> str:
    return f"(SELECT id FROM anime WHERE title = '{sql_escape(title)}' LIMIT 1)"


class SqlExportWriter:
    """Writes export statements to a text stream (usually stdout)."""

    def __init__(self, stream: TextIO) -> None:
        self._out = stream

    def _write(self, *lines: str) -> None:
        self._out.write("".join(f"{line}\n" for line in lines))

    def comment(self, text: str) -> None:
        self._write(f"-- {text}")

    def blank(self) -> None:
        self._write("")

    def charset(self) -> None:
        self._write("SET NAMES utf8mb4;", "SET CHARACTER SET utf8mb4;")

    # -- single export framing ----------------------------------------

    def begin_anime(self, title: str) -> None:
        self._write(f"-- START {title} --")
        self.charset()
        self.blank()

    def end_anime(self, title: str) -> None:
        self._write(f"-- END {title} --", "")

    # -- bulk export framing ------------------------------------------

    def bulk_header(self, total: int, generated_at: datetime, site: str) -> None:
        self._write(
            f"-- BULK ANIME EXPORT FROM {site.upper()}",
            f"-- Generated: {generated_at.isoformat()}",
            f"-- Total Anime: {total}",
            "",
        )
        self.charset()
        self._write("SET FOREIGN_KEY_CHECKS = 0;", "")

    def bulk_section(self, title: str) -> None:
        self._write("", f"-- === {title} ===")

    def bulk_footer(self, anime_count: int, episode_count: int) -> None:
        self._write(
            "",
            "SET FOREIGN_KEY_CHECKS = 1;",
            "-- BULK EXPORT COMPLETE --",
            f"-- Total Anime: {anime_count}",
            f"-- Total Episodes: {episode_count}",
        )

    # -- rows -----------------------------------------------------------

    def anime(self, title: str, details: AnimeDetails) -> None:
        """Insert the anime row unless one with the same title exists."""
        t = sql_escape(title)
        self._write(
            "-- Ensure anime exists without duplicates",
            "INSERT INTO anime (title, description, poster_url, type)",
            f"SELECT '{t}', '{sql_escape(details.description)}', "
            f"'{sql_escape(details.poster)}', '{details.type}'",
            "FROM (SELECT 1) AS tmp",
            f"WHERE NOT EXISTS (SELECT 1 FROM anime WHERE title = '{t}');",
            "",
        )

    def anime_ignore(self, title: str, details: AnimeDetails) -> None:
        """Single-statement ``INSERT IGNORE`` variant used by daily exports."""
        self._write(
            "INSERT IGNORE INTO anime (title, description, poster_url, type) "
            f"VALUES ('{sql_escape(title)}', '{sql_escape(details.description)}', "
            f"'{sql_escape(details.poster)}', '{details.type}');",
            "",
        )

    def movie(self, title: str, link: str) -> None:
        """Replace the movie's single season-less episode."""
        t = sql_escape(title)
        self._write(
            "-- Purge existing movie entry to force update",
            f"DELETE FROM episodes WHERE anime_id = {_anime_id_subquery(title)} "
            "AND season_id IS NULL;",
            "INSERT IGNORE INTO episodes (anime_id, season_id, title, dood_id, ep_order)",
            f"SELECT a.id, NULL, '{MOVIE_EPISODE_TITLE}', '{sql_escape(link)}', 1",
            f"FROM anime a WHERE a.title = '{t}';",
        )

    def season(self, title: str, season: Season) -> None:
        """Ensure the season row exists and bind ``@season_id`` to it."""
        t = sql_escape(title)
        n = season.season_number
        self._write(
            "",
            f"-- Season {n}",
            "-- Ensure season exists without duplicates",
            "INSERT INTO seasons (anime_id, title, season_number)",
            f"SELECT id, '{sql_escape(season.title)}', {n}",
            f"FROM anime a WHERE a.title = '{t}'",
            "AND NOT EXISTS (SELECT 1 FROM seasons s WHERE s.anime_id = a.id "
            f"AND s.season_number = {n});",
            "",
            "SET @season_id = (SELECT id FROM seasons WHERE anime_id = "
            f"{_anime_id_subquery(title)} AND season_number = {n} LIMIT 1);",
        )

    def purge_season(self, season_number: int) -> None:
        self._write(
            f"-- Purge existing episodes for Season {season_number} to force update",
            "DELETE FROM episodes WHERE season_id = @season_id;",
        )

    def episode(self, title: str, episode_title: str, link: str, ep_order: int) -> None:
        """Insert one episode into the season bound to ``@season_id``."""
        self._write(
            "INSERT IGNORE INTO episodes (anime_id, season_id, title, dood_id, ep_order)",
            "SELECT",
            "  a.id AS anime_id,",
            "  @season_id AS season_id,",
            f"  '{sql_escape(episode_title)}' AS title,",
            f"  '{sql_escape(link)}' AS dood_id,",
            f"  {ep_order} AS ep_order",
            "FROM anime a",
            f"WHERE a.title = '{sql_escape(title)}';",
        )

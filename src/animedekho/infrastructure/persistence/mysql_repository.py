"""Anime repository backed by MySQL (aiomysql connection pool).

Statements mirror the ones :class:`SqlExportWriter` emits, with bound
parameters instead of escaped literals. The pool runs in autocommit
mode; every statement commits on its own.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiomysql
import structlog

from animedekho.domain.entities.catalog import AnimeDetails, Season
from animedekho.domain.exceptions import PersistenceError
from animedekho.infrastructure.config.schema import DatabaseConfig

log = structlog.get_logger(__name__)

_INSERT_ANIME = (
    "INSERT INTO anime (title, description, poster_url, type) "
    "SELECT %s, %s, %s, %s FROM (SELECT 1) AS tmp "
    "WHERE NOT EXISTS (SELECT 1 FROM anime WHERE title = %s)"
)
_SELECT_ANIME_ID = "SELECT id FROM anime WHERE title = %s LIMIT 1"

_DELETE_MOVIE = "DELETE FROM episodes WHERE anime_id = %s AND season_id IS NULL"
_INSERT_MOVIE = (
    "INSERT IGNORE INTO episodes (anime_id, season_id, title, dood_id, ep_order) "
    "VALUES (%s, NULL, %s, %s, 1)"
)

_INSERT_SEASON = (
    "INSERT INTO seasons (anime_id, title, season_number) "
    "SELECT %s, %s, %s FROM (SELECT 1) AS tmp "
    "WHERE NOT EXISTS "
    "(SELECT 1 FROM seasons WHERE anime_id = %s AND season_number = %s)"
)
_SELECT_SEASON_ID = (
    "SELECT id FROM seasons WHERE anime_id = %s AND season_number = %s LIMIT 1"
)
_DELETE_SEASON_EPISODES = "DELETE FROM episodes WHERE season_id = %s"

_INSERT_EPISODE = (
    "INSERT IGNORE INTO episodes (anime_id, season_id, title, dood_id, ep_order) "
    "VALUES (%s, %s, %s, %s, %s)"
)


async def create_mysql_pool(config: DatabaseConfig) -> aiomysql.Pool:
    """Open a utf8mb4 autocommit pool; connection errors become PersistenceError."""
    try:
        pool = await aiomysql.create_pool(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            db=config.name,
            charset="utf8mb4",
            autocommit=True,
            minsize=1,
            maxsize=config.pool_size,
            connect_timeout=config.connect_timeout_seconds,
        )
    except aiomysql.MySQLError as exc:
        raise PersistenceError(
            f"cannot connect to MySQL at {config.host}:{config.port}: {exc}"
        ) from exc
    log.info("db_pool_opened", host=config.host, port=config.port, db=config.name)
    return pool


@asynccontextmanager
async def mysql_repository(config: DatabaseConfig) -> AsyncIterator[MySqlAnimeRepository]:
    """Repository over a fresh pool that is closed on exit."""
    pool = await create_mysql_pool(config)
    try:
        yield MySqlAnimeRepository(pool)
    finally:
        pool.close()
        await pool.wait_closed()
        log.debug("db_pool_closed", host=config.host)


class MySqlAnimeRepository:
    """Writes anime, seasons and episodes with parameterized statements."""

    def __init__(self, pool: aiomysql.Pool) -> None:
        self._pool = pool

    async def _run(
        self, sql: str, params: tuple[Any, ...], *, fetch: bool = False
    ) -> tuple[Any, ...] | None:
        try:
            async with self._pool.acquire() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(sql, params)
                    if fetch:
                        return await cur.fetchone()
                    return None
        except aiomysql.MySQLError as exc:
            operation = sql.split(maxsplit=1)[0]
            log.error("db_statement_failed", operation=operation, error=str(exc))
            raise PersistenceError(f"{operation} failed: {exc}") from exc

    async def _require_id(self, sql: str, params: tuple[Any, ...], what: str) -> int:
        row = await self._run(sql, params, fetch=True)
        if not row:
            raise PersistenceError(f"{what} not found after insert")
        return int(row[0])

    async def ensure_anime(self, title: str, details: AnimeDetails) -> int:
        await self._run(
            _INSERT_ANIME,
            (title, details.description, details.poster, details.type, title),
        )
        return await self._require_id(_SELECT_ANIME_ID, (title,), f"anime {title!r}")

    async def replace_movie(self, anime_id: int, episode_title: str, link: str) -> None:
        await self._run(_DELETE_MOVIE, (anime_id,))
        await self._run(_INSERT_MOVIE, (anime_id, episode_title, link))

    async def ensure_season(self, anime_id: int, season: Season) -> int:
        n = season.season_number
        await self._run(_INSERT_SEASON, (anime_id, season.title, n, anime_id, n))
        return await self._require_id(
            _SELECT_SEASON_ID, (anime_id, n), f"season {n} of anime {anime_id}"
        )

    async def purge_season(self, season_id: int) -> None:
        await self._run(_DELETE_SEASON_EPISODES, (season_id,))

    async def add_episode(
        self,
        anime_id: int,
        season_id: int,
        episode_title: str,
        link: str,
        ep_order: int,
    ) -> None:
        await self._run(
            _INSERT_EPISODE, (anime_id, season_id, episode_title, link, ep_order)
        )

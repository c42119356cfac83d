from __future__ import annotations

from .writer import MOVIE_EPISODE_TITLE, SqlExportWriter, sql_escape

__all__ = ["MOVIE_EPISODE_TITLE", "SqlExportWriter", "sql_escape"]

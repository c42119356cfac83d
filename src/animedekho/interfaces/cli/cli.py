from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Any, TextIO

import structlog

from animedekho.application.use_cases import (
    AnimeExporter,
    AnimeImporter,
    BulkExporter,
    DailyExporter,
)
from animedekho.domain.exceptions import ImporterError
from animedekho.infrastructure.config import load_config
from animedekho.infrastructure.config.schema import AppConfig
from animedekho.infrastructure.logging.setup import configure_logging
from animedekho.infrastructure.sql import SqlExportWriter
from animedekho.interfaces.composition import Services, repository_scope, services_scope

log = structlog.get_logger(__name__)


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="animedekho",
        description="Scrape anime metadata and episode links and export them as SQL.",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search for anime by title.")
    search.add_argument("query", nargs="+")

    episodes = sub.add_parser("debug-episodes", help="List all episodes with IDs.")
    episodes.add_argument("slug")

    link = sub.add_parser("get-link", help="Resolve the video link of one episode.")
    link.add_argument("episode", help="Episode id or watch-page URL.")

    export = sub.add_parser("db-export", help="Export a single anime to SQL.")
    export.add_argument("query", nargs="+", help="Title, slug or series URL.")

    db_import = sub.add_parser(
        "db-import", help="Import a single anime straight into MySQL."
    )
    db_import.add_argument("query", nargs="+", help="Title, slug or series URL.")

    bulk = sub.add_parser("bulk-export", help="Export all available anime to SQL.")
    bulk.add_argument(
        "limit",
        nargs="?",
        type=int,
        default=50,
        help="Number of anime to export (0 = all).",
    )

    sub.add_parser("schedule", help="Print the weekly release schedule.")

    daily = sub.add_parser(
        "daily-export", help="Export today's scheduled anime to a dated SQL file."
    )
    daily.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the export file (overrides export.output_dir).",
    )

    return parser.parse_args(argv)


async def _search(services: Services, query: str, out: TextIO) -> int:
    results = await services.catalog.search(query)
    if not results:
        out.write("No results found.\n")
        return 0
    for r in results:
        out.write(f"[{r.type}] {r.title} | {r.slug}\n")
    return 0


async def _debug_episodes(services: Services, slug: str, out: TextIO) -> int:
    episodes = await services.catalog.get_episodes(slug)
    if not episodes:
        out.write("No episodes found.\n")
        return 0
    for ep in episodes:
        out.write(f"[{ep.label}] {ep.title} | ID: {ep.episode_id}\n")
    return 0


async def _get_link(services: Services, episode: str, out: TextIO) -> int:
    result = await services.resolver.resolve_episode_link(episode)
    out.write(f"Link: {result.url}\n")
    out.write(f"Kind: {result.kind.value}\n")
    return 0 if result else 1


async def _schedule(services: Services, out: TextIO) -> int:
    days = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
    schedule = await services.catalog.get_schedule()
    for index, entries in enumerate(schedule):
        name = days[index] if index < len(days) else f"Day {index}"
        out.write(f"{name}:\n")
        for entry in entries:
            suffix = f" ({entry.time})" if entry.time else ""
            out.write(f"  - {entry.title}{suffix}\n")
    return 0


async def _db_import(
    services: Services, config: AppConfig, query: str, out: TextIO
) -> int:
    async with repository_scope(config) as repository:
        importer = AnimeImporter(
            services.catalog,
            services.resolver,
            services.classifier,
            repository,
            episode_delay_seconds=config.export.episode_delay_seconds,
        )
        summary = await importer.import_anime(query)
    if summary is None:
        return 1
    out.write(f"Imported {summary.title} ({summary.episodes} episodes)\n")
    return 0


async def _run(args: argparse.Namespace, config: AppConfig, out: TextIO) -> int:
    async with services_scope(config) as services:
        exporter = AnimeExporter(
            services.catalog,
            services.resolver,
            services.classifier,
            SqlExportWriter(out),
            episode_delay_seconds=config.export.episode_delay_seconds,
        )

        if args.command == "search":
            return await _search(services, " ".join(args.query), out)
        if args.command == "debug-episodes":
            return await _debug_episodes(services, args.slug, out)
        if args.command == "get-link":
            return await _get_link(services, args.episode, out)
        if args.command == "schedule":
            return await _schedule(services, out)
        if args.command == "db-export":
            summary = await exporter.export(" ".join(args.query))
            return 0 if summary is not None else 1
        if args.command == "db-import":
            return await _db_import(services, config, " ".join(args.query), out)
        if args.command == "bulk-export":
            bulk = BulkExporter(
                services.catalog,
                exporter,
                SqlExportWriter(out),
                site_name=services.site_name,
                anime_delay_seconds=config.export.anime_delay_seconds,
            )
            await bulk.export(args.limit)
            return 0
        if args.command == "daily-export":
            output_dir = (
                Path(args.output_dir) if args.output_dir else config.export.output_dir
            )
            daily = DailyExporter(
                services.catalog,
                output_dir,
                anime_delay_seconds=config.export.anime_delay_seconds,
            )
            path = await daily.export(date.today())
            if path is not None:
                out.write(f"Generated {path}\n")
            return 0

    raise AssertionError(f"unhandled command: {args.command}")


def start(argv: Iterable[str] | None = None, *, out: TextIO | None = None) -> int:
    """
    Process entrypoint.

    Config is loaded exactly once here. Command output (including SQL)
    goes to *out* (stdout by default); logs go to stderr.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    configure_logging(config)

    try:
        return asyncio.run(_run(args, config, out or sys.stdout))
    except ImporterError as exc:
        log.error("command_failed", command=args.command, error=str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(start())

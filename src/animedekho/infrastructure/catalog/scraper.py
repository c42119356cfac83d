"""Catalog scraper for animedekho.app.

The site is server-rendered WordPress: series pages live at
``/serie/<slug>/``, episodes are listed as ``S1-E1`` markers linking to
``/epi/<slug>-<season>x<episode>/`` watch pages.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote_plus

import structlog
import yaml

from animedekho.domain.entities.catalog import (
    AnimeDetails,
    AnimeSummary,
    Episode,
    ScheduleEntry,
    Season,
)
from animedekho.domain.exceptions import FetchError, ScheduleParseError
from animedekho.domain.ports.page_fetcher import PageFetcherPort
from animedekho.infrastructure.common.html_selectors import (
    first_attr,
    first_text,
    meta_content,
    own_text_after,
    parse_html,
)
from animedekho.infrastructure.common.text import (
    clean_description,
    clean_title,
    decode_entities,
    looks_like_movie,
    normalize_poster_url,
    slug_to_title,
    strip_tags,
)

log = structlog.get_logger(__name__)

# (name, path, paginated)
CATEGORIES: tuple[tuple[str, str, bool], ...] = (
    ("Home", "/home/", False),
    ("Anime", "/category/anime/", True),
    ("Hindi Dub", "/category/hindi-dub/", True),
    ("Tamil", "/category/tamil/", True),
    ("Action", "/category/action/", True),
)

_SEASON_MARKER_RE = re.compile(r"S(\d+)-E\d+", re.IGNORECASE)
_EPISODE_MARKER_RE = re.compile(r"^S(\d+)-E(\d+)$", re.IGNORECASE)
_LOOSE_EPISODE_RE = re.compile(r"S(\d+)-E(\d+)\s+([^<\[\n]+)", re.IGNORECASE)
_TMDB_IMAGE_RE = re.compile(r"https://image\.tmdb\.org/t/p/w\d+/[^\"'\s<>]+")
_SCHEDULE_RE = re.compile(r"const\s+scheduleData\s*=\s*(\[[\s\S]*?\]);")
_JS_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*)\s*:")


class AnimeCatalogScraper:
    """Search, metadata, episode and schedule scraping for one site.

    Args:
        fetcher: Page fetcher (retries are its own business).
        site_base: Site origin, e.g. ``https://animedekho.app``.
        page_delay_seconds: Pause between two catalog pages while crawling.
        max_category_pages: Page cap per paginated category.
    """

    def __init__(
        self,
        fetcher: PageFetcherPort,
        site_base: str,
        *,
        page_delay_seconds: float = 0.3,
        max_category_pages: int = 50,
    ) -> None:
        self._fetcher = fetcher
        self._site_base = site_base.rstrip("/")
        self._page_delay = page_delay_seconds
        self._max_pages = max_category_pages
        host = re.escape(self._site_base.split("://", 1)[-1])
        self._serie_re = re.compile(rf"^https?://{host}/serie/([^/]+)/?$")
        self._epi_prefix_re = re.compile(rf"^https?://{host}/epi/")

    # ------------------------------------------------------------------
    # URLs / slugs
    # ------------------------------------------------------------------

    def serie_url(self, slug: str) -> str:
        return f"{self._site_base}/serie/{slug}/"

    def slug_from(self, slug_or_url: str) -> str:
        """Accept a bare slug or any ``/serie/<slug>/`` URL."""
        value = slug_or_url.strip()
        if value.lower().startswith("http"):
            value = re.sub(r"^https?://[^/]+/serie/", "", value)
        return value.strip("/")

    def _serie_slug(self, href: str) -> str | None:
        match = self._serie_re.match(href.strip())
        return match.group(1) if match else None

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str) -> list[AnimeSummary]:
        """Search the site; falls back to list parsing and the home page."""
        results: list[AnimeSummary] = []
        try:
            search_url = f"{self._site_base}/?s={quote_plus(query)}"
            html = await self._fetcher.fetch(search_url)
            results = self._parse_search_articles(html) or self.parse_anime_list(html)
        except FetchError as exc:
            log.warning("search_failed", query=query, error=str(exc))

        if not results:
            try:
                html = await self._fetcher.fetch(f"{self._site_base}/home/")
                results = self.parse_anime_list(html)
            except FetchError as exc:
                log.warning("search_home_fallback_failed", error=str(exc))

        return _dedupe_by_slug(r for r in results if _matches_query(r, query))

    def _parse_search_articles(self, html: str) -> list[AnimeSummary]:
        soup = parse_html(html)
        results: list[AnimeSummary] = []
        for article in soup.select("article"):
            slug = None
            for link in article.select("a[href]"):
                slug = self._serie_slug(str(link["href"]))
                if slug:
                    break
            if not slug:
                continue
            title = decode_entities(first_text(article, "h2", "h3"))
            results.append(self._summary(title or slug_to_title(slug), slug))
        return _dedupe_by_slug(results)

    def parse_anime_list(self, html: str) -> list[AnimeSummary]:
        """Collect ``/serie/`` links from a listing page (home, category)."""
        soup = parse_html(html)
        results: list[AnimeSummary] = []

        # Plain title links.
        for link in soup.select("a[href]"):
            slug = self._serie_slug(str(link["href"]))
            if not slug:
                continue
            title = clean_title(decode_entities(link.get_text(" ", strip=True)))
            if len(title) <= 2 or "Series" in title:
                continue
            results.append(self._summary(title, slug))

        # "Watch Series" buttons: title is the nearest preceding heading.
        for link in soup.select("a[href]"):
            if link.get_text(strip=True) != "Watch Series":
                continue
            slug = self._serie_slug(str(link["href"]))
            heading = link.find_previous(["h2", "h3"])
            if not slug or heading is None:
                continue
            title = clean_title(decode_entities(heading.get_text(" ", strip=True)))
            results.append(self._summary(title, slug))

        return _dedupe_by_slug(results)

    def _summary(self, title: str, slug: str) -> AnimeSummary:
        return AnimeSummary(
            title=title,
            url=self.serie_url(slug),
            slug=slug,
            type="movie" if looks_like_movie(title, slug) else "series",
        )

    # ------------------------------------------------------------------
    # Details / episodes
    # ------------------------------------------------------------------

    async def get_anime_details(self, slug_or_url: str) -> AnimeDetails:
        """Scrape a series page. Raises ``FetchError`` if it cannot be loaded."""
        slug = self.slug_from(slug_or_url)
        html = await self._fetcher.fetch(self.serie_url(slug))
        return self.parse_anime_details(html, slug)

    def parse_anime_details(self, html: str, slug: str) -> AnimeDetails:
        soup = parse_html(html)

        title = clean_title(decode_entities(meta_content(soup, prop="og:title")))
        description = clean_description(
            meta_content(soup, name="description")
            or meta_content(soup, prop="og:description")
        )

        poster = first_attr(
            soup,
            "src",
            "aside .post-thumbnail img",
            "figure img",
        ) or meta_content(soup, prop="og:image")
        if not poster:
            match = _TMDB_IMAGE_RE.search(html)
            poster = match.group(0) if match else ""
        poster = normalize_poster_url(poster)

        season_numbers = sorted(
            {int(n) for n in _SEASON_MARKER_RE.findall(html) if int(n) > 0}
        ) or [1]
        seasons = [
            Season(season_number=n, slug=slug, title=f"Season {n}")
            for n in season_numbers
        ]

        return AnimeDetails(
            title=title,
            slug=slug,
            description=description,
            poster=poster,
            type="movie" if looks_like_movie(title, slug) else "series",
            seasons=seasons,
        )

    async def get_episodes(self, slug: str) -> list[Episode]:
        """All episodes of a series, sorted by (season, number).

        A page that cannot be fetched yields an empty list.
        """
        try:
            html = await self._fetcher.fetch(self.serie_url(slug))
        except FetchError as exc:
            log.warning("episodes_fetch_failed", slug=slug, error=str(exc))
            return []
        return self.parse_episodes(html, slug)

    def parse_episodes(self, html: str, slug: str) -> list[Episode]:
        episodes: dict[tuple[int, int], Episode] = {}

        for item in parse_html(html).select("li"):
            link = item.select_one('a[href*="/epi/"]')
            if link is None:
                continue
            for marker in item.find_all("span"):
                match = _EPISODE_MARKER_RE.match(marker.get_text(strip=True))
                if match:
                    break
            else:
                continue
            season, number = int(match.group(1)), int(match.group(2))
            episode_id = self._epi_prefix_re.sub("", str(link["href"])).strip("/")
            episodes.setdefault(
                (season, number),
                Episode(
                    episode_id=episode_id,
                    number=number,
                    title=decode_entities(own_text_after(marker))
                    or f"Episode {number}",
                    season=season,
                ),
            )

        if not episodes:
            for s, e, raw_title in _LOOSE_EPISODE_RE.findall(html):
                season, number = int(s), int(e)
                episodes.setdefault(
                    (season, number),
                    Episode(
                        episode_id=f"{slug}-{season}x{number}",
                        number=number,
                        title=decode_entities(strip_tags(raw_title)).strip(),
                        season=season,
                    ),
                )

        return [episodes[key] for key in sorted(episodes)]

    # ------------------------------------------------------------------
    # Catalog crawl / schedule
    # ------------------------------------------------------------------

    async def get_all_anime(self) -> list[AnimeSummary]:
        """Crawl home + category pages until a page brings nothing new."""
        seen: set[str] = set()
        found: list[AnimeSummary] = []

        for name, path, paginated in CATEGORIES:
            category_total = 0
            for page in range(1, self._max_pages + 1):
                page_path = path if page == 1 else f"{path}page/{page}/"
                try:
                    html = await self._fetcher.fetch(f"{self._site_base}{page_path}")
                except FetchError as exc:
                    log.warning(
                        "category_page_failed", category=name, page=page, error=str(exc)
                    )
                    break

                new_in_page = 0
                for anime in self.parse_anime_list(html):
                    if anime.slug not in seen:
                        seen.add(anime.slug)
                        found.append(anime)
                        new_in_page += 1
                category_total += new_in_page
                log.info(
                    "category_page_scraped", category=name, page=page, new=new_in_page
                )

                if new_in_page == 0 or not paginated:
                    break
                await asyncio.sleep(self._page_delay)

            log.info("category_scraped", category=name, new=category_total)

        log.info("catalog_scraped", total=len(found))
        return found

    async def get_schedule(self) -> list[list[ScheduleEntry]]:
        """Weekly release schedule, one bucket per weekday (Monday first)."""
        html = await self._fetcher.fetch(f"{self._site_base}/home/")
        return parse_schedule(html)


def parse_schedule(html: str) -> list[list[ScheduleEntry]]:
    """Parse the ``const scheduleData = [...]`` script literal.

    The literal is a JavaScript array of per-day arrays of objects. Bare
    object keys are quoted first; the result is valid YAML flow syntax
    (single-quoted strings and trailing commas included).
    """
    match = _SCHEDULE_RE.search(html)
    if not match:
        raise ScheduleParseError("schedule data script not found")
    try:
        raw = yaml.safe_load(_JS_BARE_KEY_RE.sub(r'\1"\2": ', match.group(1)))
    except yaml.YAMLError as exc:
        raise ScheduleParseError(f"schedule data is not parseable: {exc}") from exc
    if not isinstance(raw, list):
        raise ScheduleParseError("schedule data is not an array")

    return [
        [_schedule_entry(item) for item in day if isinstance(item, dict)]
        if isinstance(day, list)
        else []
        for day in raw
    ]


def _schedule_entry(item: dict[str, Any]) -> ScheduleEntry:
    return ScheduleEntry(
        title=str(item.get("title") or ""),
        time=str(item.get("time") or ""),
        extra={
            str(k): str(v) for k, v in item.items() if k not in ("title", "time")
        },
    )


def _matches_query(result: AnimeSummary, query: str) -> bool:
    q = query.lower()
    title = result.title.lower()
    return q in title or q in result.slug.lower() or all(w in title for w in q.split())


def _dedupe_by_slug(results: Iterable[AnimeSummary]) -> list[AnimeSummary]:
    seen: set[str] = set()
    unique: list[AnimeSummary] = []
    for result in results:
        if result.slug not in seen:
            seen.add(result.slug)
            unique.append(result)
    return unique

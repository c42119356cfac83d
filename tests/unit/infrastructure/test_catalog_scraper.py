"""Tests for the catalog scraper (search, details, episodes, crawl, schedule)."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, patch

import pytest
from conftest import SITE, FakePageFetcher

from animedekho.domain.entities.catalog import AnimeSummary, Episode
from animedekho.domain.exceptions import FetchError, ScheduleParseError
from animedekho.domain.ports import AnimeCatalogPort
from animedekho.infrastructure.catalog import AnimeCatalogScraper, parse_schedule

MakeFetcher = Callable[..., FakePageFetcher]

SEARCH_HTML = f"""
<html><body>
<article class="post">
  <a href="{SITE}/serie/naruto-shippuden/"><img src="x.jpg"></a>
  <h2>Naruto Shippuden</h2>
</article>
<article class="post">
  <a href="{SITE}/serie/naruto-the-movie/">link</a>
  <h2>Naruto the Movie</h2>
</article>
<article class="post"><h2>No link here</h2></article>
</body></html>
"""

LIST_HTML = f"""
<html><body>
<a href="{SITE}/serie/one-piece/">One Piece - Watch Online</a>
<a href="{SITE}/serie/op/">OP</a>
<a href="{SITE}/serie/one-piece/">One Piece</a>
<h3>Demon Slayer in Hindi Dubbed</h3>
<p>Great show</p>
<a href="{SITE}/serie/demon-slayer/">Watch Series</a>
<a href="https://elsewhere.example/serie/bleach/">Bleach</a>
<a href="{SITE}/category/anime/">Anime</a>
</body></html>
"""

DETAILS_HTML = """
<html><head>
<meta property="og:title" content="Naruto Shippuden in Hindi Dubbed - Watch Online">
<meta name="description" content="Naruto&#039;s &lt;b&gt;journey&lt;/b&gt; continues">
</head><body>
<aside><div class="post-thumbnail"><img src="https://image.tmdb.org/t/p/w185/np.jpg"></div></aside>
<ul>
<li><a href="https://animedekho.app/epi/naruto-shippuden-1x1/"><span>S1-E1</span> Homecoming</a></li>
<li><a href="https://animedekho.app/epi/naruto-shippuden-1x2/"><span>S1-E2</span> </a></li>
<li><a href="https://animedekho.app/epi/naruto-shippuden-2x1/"><span>S2-E1</span> Return</a></li>
</ul>
</body></html>
"""

SCHEDULE_HTML = """
<script>
const scheduleData = [
  [{title: "One Piece", time: "10:00 AM", day: 'Mon'}, {title: 'Naruto'}],
  [],
  [{title: "Bleach: TYBW", time: "8:30"},],
];
</script>
"""


def _scraper(fetcher: FakePageFetcher) -> AnimeCatalogScraper:
    return AnimeCatalogScraper(fetcher, SITE, page_delay_seconds=0, max_category_pages=3)


class TestSlugs:
    def test_slug_from_url(self, make_fetcher: MakeFetcher) -> None:
        scraper = _scraper(make_fetcher())
        assert scraper.slug_from(f"{SITE}/serie/one-piece/") == "one-piece"
        assert scraper.slug_from("one-piece") == "one-piece"

    def test_serie_url(self, make_fetcher: MakeFetcher) -> None:
        assert _scraper(make_fetcher()).serie_url("x") == f"{SITE}/serie/x/"

    def test_satisfies_port(self, make_fetcher: MakeFetcher) -> None:
        assert isinstance(_scraper(make_fetcher()), AnimeCatalogPort)


class TestSearch:
    @pytest.mark.asyncio()
    async def test_search_articles(self, make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({f"{SITE}/?s=naruto": SEARCH_HTML})
        results = await _scraper(fetcher).search("naruto")
        assert [(r.title, r.slug, r.type) for r in results] == [
            ("Naruto Shippuden", "naruto-shippuden", "series"),
            ("Naruto the Movie", "naruto-the-movie", "movie"),
        ]
        assert results[0].url == f"{SITE}/serie/naruto-shippuden/"

    @pytest.mark.asyncio()
    async def test_query_is_url_encoded(self, make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({f"{SITE}/?s=naruto+shippuden": SEARCH_HTML})
        results = await _scraper(fetcher).search("naruto shippuden")
        assert [r.slug for r in results] == ["naruto-shippuden"]

    @pytest.mark.asyncio()
    async def test_falls_back_to_home_page(self, make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({f"{SITE}/home/": LIST_HTML})
        results = await _scraper(fetcher).search("demon")
        assert results == [
            AnimeSummary(
                title="Demon Slayer",
                url=f"{SITE}/serie/demon-slayer/",
                slug="demon-slayer",
            )
        ]
        assert fetcher.calls == [f"{SITE}/?s=demon", f"{SITE}/home/"]

    @pytest.mark.asyncio()
    async def test_nothing_reachable(self, make_fetcher: MakeFetcher) -> None:
        assert await _scraper(make_fetcher()).search("naruto") == []


class TestParseAnimeList:
    def test_links_and_watch_buttons(self, make_fetcher: MakeFetcher) -> None:
        results = _scraper(make_fetcher()).parse_anime_list(LIST_HTML)
        assert [(r.title, r.slug) for r in results] == [
            ("One Piece", "one-piece"),
            ("Demon Slayer", "demon-slayer"),
        ]


class TestDetails:
    @pytest.mark.asyncio()
    async def test_get_anime_details(self, make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({f"{SITE}/serie/naruto-shippuden/": DETAILS_HTML})
        details = await _scraper(fetcher).get_anime_details(
            f"{SITE}/serie/naruto-shippuden/"
        )
        assert details.title == "Naruto Shippuden"
        assert details.slug == "naruto-shippuden"
        assert details.description == "Naruto's journey continues"
        assert details.poster == "https://image.tmdb.org/t/p/w500/np.jpg"
        assert details.type == "series"
        assert [s.season_number for s in details.seasons] == [1, 2]
        assert details.seasons[1].title == "Season 2"

    @pytest.mark.asyncio()
    async def test_details_fetch_error_propagates(self, make_fetcher: MakeFetcher) -> None:
        with pytest.raises(FetchError):
            await _scraper(make_fetcher()).get_anime_details("missing")

    def test_defaults_to_one_season(self, make_fetcher: MakeFetcher) -> None:
        html = '<meta property="og:title" content="Your Name Movie">'
        details = _scraper(make_fetcher()).parse_anime_details(html, "your-name")
        assert details.type == "movie"
        assert [s.season_number for s in details.seasons] == [1]

    def test_poster_from_inline_tmdb_url(self, make_fetcher: MakeFetcher) -> None:
        html = '<div data-bg="https://image.tmdb.org/t/p/w342/a.jpg"></div>'
        details = _scraper(make_fetcher()).parse_anime_details(html, "x")
        assert details.poster == "https://image.tmdb.org/t/p/w500/a.jpg"


class TestEpisodes:
    @pytest.mark.asyncio()
    async def test_get_episodes(self, make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({f"{SITE}/serie/naruto-shippuden/": DETAILS_HTML})
        episodes = await _scraper(fetcher).get_episodes("naruto-shippuden")
        assert episodes == [
            Episode("naruto-shippuden-1x1", 1, "Homecoming", 1),
            Episode("naruto-shippuden-1x2", 2, "Episode 2", 1),
            Episode("naruto-shippuden-2x1", 1, "Return", 2),
        ]

    @pytest.mark.asyncio()
    async def test_fetch_error_yields_empty(self, make_fetcher: MakeFetcher) -> None:
        assert await _scraper(make_fetcher()).get_episodes("missing") == []

    def test_loose_fallback(self, make_fetcher: MakeFetcher) -> None:
        html = "<div>S1-E3 The Third One</div><div>S1-E1 First</div>"
        episodes = _scraper(make_fetcher()).parse_episodes(html, "bleach")
        assert [(e.episode_id, e.number, e.title) for e in episodes] == [
            ("bleach-1x1", 1, "First"),
            ("bleach-1x3", 3, "The Third One"),
        ]

    def test_sorted_by_season_then_number(self, make_fetcher: MakeFetcher) -> None:
        html = (
            f'<li><a href="{SITE}/epi/x-2x1/"><span>S2-E1</span> B</a></li>'
            f'<li><a href="{SITE}/epi/x-1x2/"><span>S1-E2</span> A</a></li>'
        )
        episodes = _scraper(make_fetcher()).parse_episodes(html, "x")
        assert [e.label for e in episodes] == ["S1E2", "S2E1"]


class TestGetAllAnime:
    @pytest.mark.asyncio()
    async def test_crawls_until_no_new_entries(self, make_fetcher: MakeFetcher) -> None:
        page2 = f'<a href="{SITE}/serie/bleach/">Bleach</a>'
        fetcher = make_fetcher(
            {
                f"{SITE}/home/": LIST_HTML,
                f"{SITE}/category/anime/": LIST_HTML + page2,
                f"{SITE}/category/anime/page/2/": page2,
            }
        )
        with patch(
            "animedekho.infrastructure.catalog.scraper.asyncio.sleep",
            new_callable=AsyncMock,
        ):
            found = await _scraper(fetcher).get_all_anime()

        assert [a.slug for a in found] == ["one-piece", "demon-slayer", "bleach"]
        # Page 2 brings nothing new, so page 3 is never requested.
        assert f"{SITE}/category/anime/page/3/" not in fetcher.calls
        # Unreachable categories are skipped.
        assert f"{SITE}/category/hindi-dub/" in fetcher.calls


class TestSchedule:
    def test_parse_schedule(self) -> None:
        days = parse_schedule(SCHEDULE_HTML)
        assert len(days) == 3
        assert [e.title for e in days[0]] == ["One Piece", "Naruto"]
        assert days[0][0].time == "10:00 AM"
        assert days[0][0].extra == {"day": "Mon"}
        assert days[1] == []
        assert days[2][0].title == "Bleach: TYBW"

    def test_missing_script(self) -> None:
        with pytest.raises(ScheduleParseError):
            parse_schedule("<html></html>")

    def test_unparseable_literal(self) -> None:
        with pytest.raises(ScheduleParseError):
            parse_schedule("const scheduleData = [[{title: }}]];")

    @pytest.mark.asyncio()
    async def test_get_schedule_reads_home(self, make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({f"{SITE}/home/": SCHEDULE_HTML})
        days = await _scraper(fetcher).get_schedule()
        assert days[0][1].title == "Naruto"

"""Tests for the animedekho command line entry point."""

from __future__ import annotations

import io

import pytest
import respx
from conftest import SITE, encoded_server, page

from animedekho.interfaces.cli.cli import _parse_args, start

_NO_THROTTLE = ["--log-level", "ERROR"]


@pytest.fixture(autouse=True)
def _fast_http(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANIMEDEKHO_HTTP_RATE_LIMIT_RPS", "0")
    monkeypatch.setenv("ANIMEDEKHO_HTTP_MAX_RETRIES", "0")


class TestParseArgs:
    def test_global_flags_before_command(self) -> None:
        args = _parse_args(["--log-level", "DEBUG", "--config", "c.yaml", "search", "one", "piece"])
        assert args.log_level == "DEBUG"
        assert args.config == "c.yaml"
        assert args.command == "search"
        assert args.query == ["one", "piece"]

    def test_bulk_export_default_limit(self) -> None:
        assert _parse_args(["bulk-export"]).limit == 50
        assert _parse_args(["bulk-export", "0"]).limit == 0

    def test_daily_export_output_dir(self) -> None:
        args = _parse_args(["daily-export", "--output-dir", "/tmp/x"])
        assert args.output_dir == "/tmp/x"

    def test_db_import_query(self) -> None:
        args = _parse_args(["db-import", "one", "piece"])
        assert args.command == "db-import"
        assert args.query == ["one", "piece"]

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args([])

    def test_bad_log_level(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["--log-level", "TRACE", "schedule"])


class TestCommands:
    @respx.mock
    def test_get_link(self) -> None:
        respx.get(f"{SITE}/epi/naruto-1x1/").respond(
            200, text=page(encoded_server("https://as-cdn21.top/v/1"))
        )
        out = io.StringIO()
        code = start([*_NO_THROTTLE, "get-link", "naruto-1x1"], out=out)
        assert code == 0
        assert out.getvalue() == "Link: https://as-cdn21.top/v/1\nKind: direct\n"

    @respx.mock
    def test_get_link_absent_exits_nonzero(self) -> None:
        respx.get(f"{SITE}/epi/naruto-1x1/").respond(404)
        out = io.StringIO()
        code = start([*_NO_THROTTLE, "get-link", "naruto-1x1"], out=out)
        assert code == 1
        assert out.getvalue() == "Link: None\nKind: absent\n"

    @respx.mock
    def test_search(self) -> None:
        respx.get(f"{SITE}/?s=one+piece").respond(
            200,
            text=(
                f'<article><a href="{SITE}/serie/one-piece/">x</a>'
                "<h2>One Piece</h2></article>"
            ),
        )
        out = io.StringIO()
        assert start([*_NO_THROTTLE, "search", "one", "piece"], out=out) == 0
        assert out.getvalue() == "[series] One Piece | one-piece\n"

    @respx.mock
    def test_debug_episodes(self) -> None:
        respx.get(f"{SITE}/serie/one-piece/").respond(
            200,
            text=f'<li><a href="{SITE}/epi/one-piece-1x1/"><span>S1-E1</span> Romance Dawn</a></li>',
        )
        out = io.StringIO()
        assert start([*_NO_THROTTLE, "debug-episodes", "one-piece"], out=out) == 0
        assert out.getvalue() == "[S1E1] Romance Dawn | ID: one-piece-1x1\n"

    @respx.mock
    def test_schedule(self) -> None:
        respx.get(f"{SITE}/home/").respond(
            200,
            text='<script>const scheduleData = [[{title: "One Piece", time: "10:00"}], []];</script>',
        )
        out = io.StringIO()
        assert start([*_NO_THROTTLE, "schedule"], out=out) == 0
        assert out.getvalue() == "Monday:\n  - One Piece (10:00)\nTuesday:\n"

    @respx.mock
    def test_schedule_failure_exits_nonzero(self) -> None:
        respx.get(f"{SITE}/home/").respond(500)
        out = io.StringIO()
        assert start([*_NO_THROTTLE, "schedule"], out=out) == 1
        assert out.getvalue() == ""

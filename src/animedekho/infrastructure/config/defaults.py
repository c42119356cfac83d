"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_VIDEO_HOSTS: list[str] = [
    "as-cdn21.top",
    "play.zephyrflick.top",
    "vidstreaming",
    "dood",
    "stream",
    "vidmoly",
    "gdmirrorbot",
    "short.icu",
    "hubcloud",
    "pixeldrain",
    "streamwish",
]

DEFAULT_PLACEHOLDER_PATTERNS: list[str] = [
    "youtube.com/embed/53ga7MRcQGg",
    "youtube.com/embed/JLD8SyY3o6Q",
    "youtube.com/embed/NNrCwPAj1IY",
    "youtube.com/embed/xV5Wm7qixyQ",
    "youtube.com/embed/KOWcj7XKnfQ",  # "How to Watch" tutorial
    "1122154449",  # Vimeo trailer shown on many pages
    "youtube.com/embed/watch",
    "how to watch",
    "tutorial",
    "skip-ad",
]

DEFAULT_GENERIC_EMBED_PATTERNS: list[str] = [
    "youtube.com/embed/",
    "youtu.be/",
]

DEFAULT_INTERNAL_INDIRECTION_PATTERNS: list[str] = [
    "animedekho.app/embed",
    "animedekho.app/redirect",
]

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "animedekho",
    "environment": "dev",
    "site": {
        "base_url": "https://animedekho.app",
    },
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "server_cookie": "toronites_server=vidstream",
        "max_retries": 3,
        "backoff_base_seconds": 1.0,
        "max_backoff_seconds": 30.0,
        "rate_limit_rps": 2.0,
    },
    "fetcher": {
        "backend": "httpx",
    },
    "playwright": {
        "headless": True,
        "timeout_ms": 30_000,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "links": {
        "video_hosts": DEFAULT_VIDEO_HOSTS,
        "placeholder_patterns": DEFAULT_PLACEHOLDER_PATTERNS,
        "generic_embed_patterns": DEFAULT_GENERIC_EMBED_PATTERNS,
        "treat_generic_embeds_as_placeholders": True,
        "internal_indirection_patterns": DEFAULT_INTERNAL_INDIRECTION_PATTERNS,
    },
    "export": {
        "episode_delay_seconds": 0.5,
        "anime_delay_seconds": 1.0,
        "page_delay_seconds": 0.3,
        "max_category_pages": 50,
        "output_dir": ".",
    },
    "database": {
        "host": "localhost",
        "port": 3306,
        "user": "root",
        "password": "",
        "name": "animedekho",
        "pool_size": 5,
        "connect_timeout_seconds": 10.0,
    },
}

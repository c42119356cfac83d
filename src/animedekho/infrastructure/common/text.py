"""Text clean-up helpers for scraped titles, descriptions and URLs."""

from __future__ import annotations

import re
from html import unescape

_SEO_SUFFIX_RE = re.compile(
    r"\s*[-|]\s*(?:Watch|Free|Streaming|Anime|Online|ToonStream|Episode"
    r"|Hindi Dubbed|All Season Episodes).*$",
    re.IGNORECASE,
)
_WATCH_ONLINE_RE = re.compile(r"Watch\s+Online\s+", re.IGNORECASE)
_HINDI_DUBBED_RE = re.compile(r"\s+in\s+Hindi\s+Dubbed.*$", re.IGNORECASE)
_ALL_SEASONS_RE = re.compile(r"\s+All\s+Season\s+Episodes.*$", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"<[^>]+>")
_TMDB_SIZE_RE = re.compile(r"/w\d+/")
_FILM_RE = re.compile(r"\bfilm\b", re.IGNORECASE)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def decode_entities(text: str | None) -> str:
    """Decode HTML entities (``&#039;``, ``&amp;``, ``&#8211;`` ...)."""
    if not text:
        return ""
    return unescape(text).replace("\xa0", " ")


def strip_tags(text: str) -> str:
    return _TAG_RE.sub(" ", text)


def clean_title(title: str | None) -> str:
    """Remove the site's SEO prefixes/suffixes from an anime title.

    >>> clean_title("Naruto Shippuden in Hindi Dubbed - Watch Online")
    'Naruto Shippuden'
    """
    if not title:
        return ""
    title = _SEO_SUFFIX_RE.sub("", title)
    title = _WATCH_ONLINE_RE.sub("", title, count=1)
    title = _HINDI_DUBBED_RE.sub("", title)
    title = _ALL_SEASONS_RE.sub("", title)
    return collapse_whitespace(title)


def clean_description(text: str | None) -> str:
    """Entity-decode, drop markup and leftover entities, collapse whitespace."""
    text = strip_tags(decode_entities(text))
    text = re.sub(r"&[a-z]+;", "", text, flags=re.IGNORECASE)
    return collapse_whitespace(text)


def normalize_poster_url(url: str) -> str:
    """Upgrade TMDB poster sizes (``/w185/``, ``/w342/``...) to ``/w500/``."""
    if "image.tmdb.org" in url:
        return _TMDB_SIZE_RE.sub("/w500/", url, count=1)
    return url


def slug_to_title(slug: str) -> str:
    """``"one-piece"`` -> ``"One Piece"``."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)


def looks_like_movie(title: str, slug: str) -> bool:
    return (
        "movie" in title.lower()
        or "movie" in slug.lower()
        or bool(_FILM_RE.search(title))
    )

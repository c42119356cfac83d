"""Candidate source extraction from raw episode/embed page markup.

Each stage is a pure function over text so it can be tested on its own:

1. ``extract_encoded_attributes``: base64 ``data-src`` attributes, the
   site's primary server switcher (highest priority).
2. ``extract_indirection_params``: base64 ``url=`` parameter of the
   site's ``/download/dl2.php`` download redirector.
3. ``extract_raw_embeds``: ``<iframe src>`` values (lowest priority,
   most often tutorials or trailers).

``extract_candidates`` chains them, normalizes relative URLs and drops
duplicates while keeping first-seen order.
"""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Iterable, Iterator
from urllib.parse import unquote, urljoin, urlparse, urlsplit

from animedekho.domain.entities.links import CandidateSource, ExtractionMethod
from animedekho.domain.exceptions import DecodeError

_DATA_SRC_RE = re.compile(r"""data-src=["']([A-Za-z0-9+/=]+)["']""", re.IGNORECASE)
_IFRAME_SRC_RE = re.compile(r"""<iframe[^>]*?\ssrc=["']([^"']+)["']""", re.IGNORECASE)
_BARE_URL_RE = re.compile(r"""https?://[^\s"'<>\\]+""", re.IGNORECASE)

_INDIRECTION_PATH = "/download/dl2.php"


def _indirection_re(site_base: str) -> re.Pattern[str]:
    host = urlparse(site_base).hostname or ""
    return re.compile(
        rf"https?://{re.escape(host)}{re.escape(_INDIRECTION_PATH)}"
        r"\?url=([A-Za-z0-9+/=%]+)",
        re.IGNORECASE,
    )


def decode_base64_url(payload: str) -> str:
    """Decode a base64 payload that must contain an ``http(s)`` URL.

    Missing ``=`` padding is tolerated. Raises :class:`DecodeError` for
    invalid base64, non-UTF-8 output, or output that is not a URL.
    """
    data = unquote(payload).strip()
    data += "=" * (-len(data) % 4)
    try:
        decoded = base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(f"invalid base64 payload: {payload[:40]!r}") from exc
    decoded = decoded.strip()
    if not decoded.lower().startswith(("http://", "https://")):
        raise DecodeError(f"decoded payload is not a URL: {decoded[:40]!r}")
    return decoded


def normalize_url(src: str, base_url: str) -> str:
    """Make *src* absolute against *base_url*.

    Protocol-relative URLs get ``https:``; URLs with a scheme are returned
    untouched; anything else (path-absolute or path-relative) is joined
    onto *base_url*. Raises ``ValueError`` for URLs that cannot be parsed.
    """
    src = src.strip()
    if src.startswith("//"):
        return "https:" + src
    if urlsplit(src).scheme:
        return src
    return urljoin(base_url, src)


def is_parseable_url(url: str) -> bool:
    """False for URLs the standard URL parser rejects (e.g. a broken IPv6 host)."""
    try:
        urlsplit(url)
    except ValueError:
        return False
    return True


def _decode_all(payloads: Iterable[str]) -> Iterator[str]:
    for payload in payloads:
        try:
            yield decode_base64_url(payload)
        except DecodeError:
            # Malformed candidates are dropped silently.
            continue


def _normalize_all(sources: Iterable[str], base_url: str) -> Iterator[str]:
    for src in sources:
        if not src.strip():
            continue
        try:
            yield normalize_url(src, base_url)
        except ValueError:
            continue


def extract_encoded_attributes(html: str) -> list[str]:
    """Decoded URLs from base64 ``data-src`` attributes, in page order."""
    return list(_decode_all(_DATA_SRC_RE.findall(html)))


def extract_indirection_params(html: str, site_base: str) -> list[str]:
    """Decoded ``url=`` targets of the site's download redirector links."""
    return list(_decode_all(_indirection_re(site_base).findall(html)))


def extract_raw_embeds(html: str) -> list[str]:
    """``<iframe src>`` values exactly as they appear in the markup."""
    return _IFRAME_SRC_RE.findall(html)


def extract_bare_urls(html: str) -> list[str]:
    """Every absolute URL in the text, including ones inside ``<script>``."""
    return _BARE_URL_RE.findall(html)


def dedupe_candidates(candidates: Iterable[CandidateSource]) -> list[CandidateSource]:
    """Drop candidates whose URL was already seen; first occurrence wins."""
    seen: set[str] = set()
    result: list[CandidateSource] = []
    for candidate in candidates:
        if candidate.url in seen:
            continue
        seen.add(candidate.url)
        result.append(candidate)
    return result


def extract_candidates(
    html: str,
    site_base: str,
    *,
    base_url: str | None = None,
) -> list[CandidateSource]:
    """Run all extraction stages and return candidates in priority order.

    Relative URLs resolve against *base_url* when given (nested embed
    pages), otherwise against *site_base*. URLs that cannot be parsed are
    dropped like undecodable payloads.
    """
    origin = base_url or site_base
    staged: list[CandidateSource] = []
    staged.extend(
        CandidateSource(url=url, method=ExtractionMethod.ENCODED_ATTRIBUTE)
        for url in extract_encoded_attributes(html)
    )
    staged.extend(
        CandidateSource(url=url, method=ExtractionMethod.INDIRECTION_PARAM)
        for url in extract_indirection_params(html, site_base)
    )
    staged.extend(
        CandidateSource(url=url, method=ExtractionMethod.RAW_EMBED)
        for url in _normalize_all(extract_raw_embeds(html), origin)
    )
    return dedupe_candidates(c for c in staged if is_parseable_url(c.url))

"""BeautifulSoup helpers for the catalog pages.

Lookups take a chain of CSS selectors and stop at the first one that
yields a non-empty value, so one renamed wrapper class does not break a
whole scrape.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse markup with the ``lxml`` parser."""
    return BeautifulSoup(html, "lxml")


def first_attr(root: BeautifulSoup | Tag, attr: str, *selectors: str) -> str:
    """Attribute *attr* of the first element matching any selector, in order."""
    for sel in selectors:
        for tag in root.select(sel):
            value = tag.get(attr)
            if value:
                return str(value).strip()
    return ""


def first_text(root: BeautifulSoup | Tag, *selectors: str) -> str:
    """Stripped text of the first element with non-empty text."""
    for sel in selectors:
        for tag in root.select(sel):
            text = tag.get_text(" ", strip=True)
            if text:
                return text
    return ""


def meta_content(soup: BeautifulSoup, *, name: str = "", prop: str = "") -> str:
    """``content`` of ``<meta name=...>`` or ``<meta property=...>``."""
    if prop:
        return first_attr(soup, "content", f'meta[property="{prop}"]')
    return first_attr(soup, "content", f'meta[name="{name}"]')


def own_text_after(tag: Tag) -> str:
    """Text node directly following *tag* (``<span>S1-E2</span> Title``)."""
    sibling = tag.next_sibling
    if sibling is None or isinstance(sibling, Tag):
        return ""
    return str(sibling).strip()

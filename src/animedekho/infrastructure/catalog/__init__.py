"""Catalog scraping (search, series metadata, episodes, schedule)."""

from __future__ import annotations

from .scraper import CATEGORIES, AnimeCatalogScraper, parse_schedule

__all__ = ["CATEGORIES", "AnimeCatalogScraper", "parse_schedule"]

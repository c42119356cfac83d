"""Anime metadata and episode link importer for animedekho.app."""

__version__ = "0.1.0"

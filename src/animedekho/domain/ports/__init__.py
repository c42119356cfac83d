from .anime_repository import AnimeRepositoryPort
from .catalog import AnimeCatalogPort
from .link_resolver import EpisodeLinkResolverPort, LinkClassifierPort
from .page_fetcher import PageFetcherPort

__all__ = [
    "AnimeCatalogPort",
    "AnimeRepositoryPort",
    "EpisodeLinkResolverPort",
    "LinkClassifierPort",
    "PageFetcherPort",
]

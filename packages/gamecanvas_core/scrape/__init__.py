"""Third-party scrape sources normalized to plain JSON-ready values."""

from .base import ImageSource, resolve_count, search_with_fallback
from .http import HttpFetcher, ScrapeError, ScrapeUnavailableError
from .imageboard import BooruApiImages, BooruWebImages
from .images import DuckDuckGoImages, PinterestImages
from .stickers import Sticker, search_stickers
from .wiki import CharacterDetail, WikiCharacter, fetch_character, is_wiki_url, search_characters

__all__ = [
    "ImageSource",
    "resolve_count",
    "search_with_fallback",
    "HttpFetcher",
    "ScrapeError",
    "ScrapeUnavailableError",
    "BooruApiImages",
    "BooruWebImages",
    "DuckDuckGoImages",
    "PinterestImages",
    "Sticker",
    "search_stickers",
    "CharacterDetail",
    "WikiCharacter",
    "fetch_character",
    "is_wiki_url",
    "search_characters",
]

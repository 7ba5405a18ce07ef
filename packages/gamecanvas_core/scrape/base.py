"""Source adapter contract and the ordered fallback policy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence
import logging

from .http import HttpFetcher, ScrapeError

logger = logging.getLogger("gamecanvas_core.scrape")

DEFAULT_COUNT = 10


class ImageSource(ABC):
    name = "source"

    def __init__(self, fetcher: HttpFetcher) -> None:
        self.fetcher = fetcher

    @abstractmethod
    def search(self, query: str, limit: int) -> list[str]:
        """Return up to ``limit`` absolute image URLs for ``query``."""


def dedupe(urls: Iterable[str], limit: int) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for url in urls:
        if not url or url in seen:
            continue
        seen.add(url)
        out.append(url)
        if len(out) >= limit:
            break
    return out


def absolute_url(url: str) -> str:
    url = str(url or "").strip()
    if url.startswith("//"):
        return "https:" + url
    return url


def resolve_count(*candidates: object, default: int = DEFAULT_COUNT, cap: int = 50) -> int:
    """First integer-like candidate, clamped to ``1..cap``."""
    for raw in candidates:
        if raw is None or str(raw).strip() == "":
            continue
        try:
            value = int(str(raw).strip())
        except ValueError:
            continue
        return max(1, min(cap, value))
    return max(1, min(cap, default))


def search_with_fallback(sources: Sequence[ImageSource], query: str, limit: int) -> list[str]:
    """Try each source in order; the first non-empty result wins."""
    for source in sources:
        try:
            found = source.search(query, limit)
        except ScrapeError as exc:
            logger.warning("[SCRAPE] %s failed (%s): %s", source.name, exc.error_code, exc)
            continue
        results = dedupe(found, limit)
        if results:
            logger.info("[SCRAPE] %s returned %d result(s) for '%s'", source.name, len(results), query)
            return results
        logger.info("[SCRAPE] %s returned nothing for '%s'", source.name, query)
    return []

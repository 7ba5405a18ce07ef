"""Scrape endpoints: image search, stickers, wiki lookups and imageboard search."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query

from packages.gamecanvas_core.scrape.base import resolve_count, search_with_fallback
from packages.gamecanvas_core.scrape.http import ScrapeError, ScrapeUnavailableError
from packages.gamecanvas_core.scrape.imageboard import BooruApiImages, BooruWebImages
from packages.gamecanvas_core.scrape.images import DuckDuckGoImages, PinterestImages
from packages.gamecanvas_core.scrape.stickers import search_stickers
from packages.gamecanvas_core.scrape.wiki import fetch_character, is_wiki_url, search_characters

from ..services.registry import get_http_fetcher, get_settings

logger = logging.getLogger("gamecanvas_api.scrape")

router = APIRouter(prefix="/api/scrape", tags=["scrape"])


def _require_query(query: Optional[str]) -> str:
    text = str(query or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Query required")
    return text


def _limit(count: Optional[str], max_results: Optional[str]) -> int:
    return resolve_count(count, max_results, cap=get_settings().scrape_max_results)


@router.get("/images")
@router.get("/pinterest")
def search_images(
    query: Optional[str] = Query(default=None),
    count: Optional[str] = Query(default=None),
    max_results: Optional[str] = Query(default=None, alias="maxResults"),
) -> dict[str, Any]:
    text = _require_query(query)
    limit = _limit(count, max_results)
    fetcher = get_http_fetcher()
    images = search_with_fallback([DuckDuckGoImages(fetcher), PinterestImages(fetcher)], text, limit)
    return {"images": images, "count": len(images)}


@router.get("/stickers")
def stickers(
    query: Optional[str] = Query(default=None),
    count: Optional[str] = Query(default=None),
    max_results: Optional[str] = Query(default=None, alias="maxResults"),
) -> dict[str, Any]:
    text = _require_query(query)
    limit = _limit(count, max_results)
    try:
        found = search_stickers(get_http_fetcher(), get_settings().klipy_api_key, text, limit)
    except ScrapeUnavailableError as exc:
        logger.error("[SCRAPE] Sticker search unavailable: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ScrapeError as exc:
        logger.warning("[SCRAPE] Sticker search failed (%s): %s", exc.error_code, exc)
        found = []
    return {"stickers": [s.to_dict() for s in found], "count": len(found)}


@router.get("/vsbattles/search")
def vsbattles_search(query: Optional[str] = Query(default=None)) -> dict[str, Any]:
    text = _require_query(query)
    try:
        characters = search_characters(get_http_fetcher(), text)
    except ScrapeError as exc:
        logger.warning("[SCRAPE] Wiki search failed (%s): %s", exc.error_code, exc)
        raise HTTPException(status_code=500, detail=f"Wiki search failed: {exc}") from exc
    if not characters:
        raise HTTPException(status_code=404, detail="Character not found")
    return {"characters": [{"name": c.name, "url": c.url} for c in characters]}


@router.get("/vsbattles/detail")
def vsbattles_detail(url: Optional[str] = Query(default=None)) -> dict[str, Any]:
    page_url = str(url or "").strip()
    if not page_url:
        raise HTTPException(status_code=400, detail="URL required")
    if not is_wiki_url(page_url):
        raise HTTPException(status_code=400, detail="URL must point to vsbattles.fandom.com")
    try:
        detail = fetch_character(get_http_fetcher(), page_url)
    except ScrapeError as exc:
        logger.warning("[SCRAPE] Wiki detail failed (%s): %s", exc.error_code, exc)
        raise HTTPException(status_code=500, detail=f"Wiki page fetch failed: {exc}") from exc
    return detail.to_dict()


@router.get("/imageboard")
def search_imageboard(
    query: Optional[str] = Query(default=None),
    count: Optional[str] = Query(default=None),
    max_results: Optional[str] = Query(default=None, alias="maxResults"),
) -> dict[str, Any]:
    text = _require_query(query)
    limit = _limit(count, max_results)
    settings = get_settings()
    fetcher = get_http_fetcher()
    sources = [
        BooruApiImages(fetcher, settings.imageboard_api_url),
        BooruWebImages(fetcher, settings.imageboard_web_url),
    ]
    images = search_with_fallback(sources, text, limit)
    return {"images": images, "count": len(images)}

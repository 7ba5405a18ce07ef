"""Klipy v1 sticker search."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any
from urllib import parse

from .http import HttpFetcher, ScrapeUnavailableError

KLIPY_API_ROOT = "https://api.klipy.com/api/v1"

# Largest rendition first for ``url``, smallest first for ``preview``.
_FULL_SIZES = ("hd", "md", "sm", "xs")
_PREVIEW_SIZES = ("sm", "xs", "md", "hd")
_FORMATS = ("gif", "webp", "png", "mp4")


@dataclass(frozen=True)
class Sticker:
    id: str
    title: str
    url: str
    preview: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _rendition(files: Any, sizes: tuple[str, ...]) -> str:
    if not isinstance(files, dict):
        return ""
    for size in sizes:
        variant = files.get(size)
        if not isinstance(variant, dict):
            continue
        for fmt in _FORMATS:
            entry = variant.get(fmt)
            if isinstance(entry, dict) and entry.get("url"):
                return str(entry["url"])
    return ""


def _items(payload: Any) -> list[dict]:
    # v1 nests the list as {"data": {"data": [...]}}; tolerate a flat list too.
    data = payload.get("data") if isinstance(payload, dict) else payload
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


def parse_stickers(payload: Any, limit: int) -> list[Sticker]:
    stickers = []
    for item in _items(payload):
        files = item.get("file")
        url = _rendition(files, _FULL_SIZES)
        if not url:
            continue
        stickers.append(
            Sticker(
                id=str(item.get("id") or item.get("slug") or ""),
                title=str(item.get("title") or ""),
                url=url,
                preview=_rendition(files, _PREVIEW_SIZES) or url,
            )
        )
        if len(stickers) >= limit:
            break
    return stickers


def search_stickers(fetcher: HttpFetcher, api_key: str | None, query: str, limit: int) -> list[Sticker]:
    if not api_key:
        raise ScrapeUnavailableError(
            "Sticker search is not configured: set GAMECANVAS_KLIPY_API_KEY",
            error_code="missing_api_key",
            source="klipy",
        )
    endpoint = f"{KLIPY_API_ROOT}/{parse.quote(api_key, safe='')}/stickers/search"
    payload = fetcher.get_json(endpoint, params={"q": query, "per_page": limit, "page": 1})
    return parse_stickers(payload, limit)

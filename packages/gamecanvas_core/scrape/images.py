"""General image search: DuckDuckGo's image JSON, falling back to Pinterest markup."""

from __future__ import annotations

from typing import Any
import re

from .base import ImageSource, absolute_url
from .http import ScrapeError

DUCKDUCKGO_URL = "https://duckduckgo.com/"
DUCKDUCKGO_IMAGES_URL = "https://duckduckgo.com/i.js"
PINTEREST_SEARCH_URL = "https://www.pinterest.com/search/pins/"

_VQD_RE = re.compile(r"""vqd=["']?([\d-]+)""")
_PINIMG_RE = re.compile(r"""https://i\.pinimg\.com/[^"'\s\\]+""")
_PIN_SIZES = ("236x", "474x")
PIN_FULL_SIZE = "736x"
PIN_THUMB = "75x75"


def extract_vqd(markup: str) -> str | None:
    match = _VQD_RE.search(markup or "")
    return match.group(1) if match else None


def upgrade_pin_url(url: str) -> str:
    for size in _PIN_SIZES:
        url = url.replace(size, PIN_FULL_SIZE)
    return url


def extract_pin_images(markup: str) -> list[str]:
    images = []
    for match in _PINIMG_RE.findall(markup or ""):
        if PIN_THUMB in match:
            continue
        images.append(upgrade_pin_url(match))
    return images


class DuckDuckGoImages(ImageSource):
    name = "duckduckgo"

    def search(self, query: str, limit: int) -> list[str]:
        landing = self.fetcher.get_text(DUCKDUCKGO_URL, params={"q": query, "iax": "images", "ia": "images"})
        token = extract_vqd(landing)
        if not token:
            raise ScrapeError("DuckDuckGo search token not found", error_code="missing_token", source=self.name)

        payload: Any = self.fetcher.get_json(
            DUCKDUCKGO_IMAGES_URL,
            params={"l": "us-en", "o": "json", "q": query, "vqd": token, "f": ",,,", "p": "1"},
            headers={"Referer": DUCKDUCKGO_URL},
        )
        results = payload.get("results") if isinstance(payload, dict) else None
        images = []
        for item in results or []:
            if not isinstance(item, dict):
                continue
            url = absolute_url(item.get("image") or "")
            if url:
                images.append(url)
            if len(images) >= limit:
                break
        return images


class PinterestImages(ImageSource):
    name = "pinterest"

    def search(self, query: str, limit: int) -> list[str]:
        markup = self.fetcher.get_text(PINTEREST_SEARCH_URL, params={"q": query})
        return extract_pin_images(markup)[: limit * 2]

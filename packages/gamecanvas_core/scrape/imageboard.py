"""Booru-style imageboard search (``page=dapi`` JSON API, then list/post markup)."""

from __future__ import annotations

from typing import Any
import re

from .base import ImageSource, absolute_url
from .http import ScrapeError

API_PAGE_SIZE = 200

_POST_ID_RE = re.compile(r"""<span[^>]*class="thumb"[^>]*>\s*<a[^>]+href="[^"]*?id=(\d+)""", re.IGNORECASE)
_MAIN_IMAGE_RE = re.compile(r"""<img[^>]+id="image"[^>]*>""", re.IGNORECASE)
_SRC_RE = re.compile(r'src="([^"]+)"')


def booru_tags(query: str) -> str:
    return "_".join(str(query or "").split())


def _posts_from_payload(payload: Any) -> list[dict]:
    # Some boorus wrap the list as {"post": [...]}.
    if isinstance(payload, dict):
        payload = payload.get("post") or []
    if not isinstance(payload, list):
        return []
    return [p for p in payload if isinstance(p, dict)]


def post_image_url(post: dict) -> str:
    url = post.get("file_url") or ""
    if not url and post.get("directory") is not None and post.get("image"):
        url = f"/images/{post['directory']}/{post['image']}"
    return absolute_url(url)


def extract_post_ids(markup: str, limit: int) -> list[str]:
    return _POST_ID_RE.findall(markup or "")[:limit]


def extract_main_image(markup: str) -> str:
    tag = _MAIN_IMAGE_RE.search(markup or "")
    if tag is None:
        return ""
    src = _SRC_RE.search(tag.group(0))
    return absolute_url(src.group(1)) if src else ""


class BooruApiImages(ImageSource):
    name = "imageboard-api"

    def __init__(self, fetcher, base_url: str) -> None:
        super().__init__(fetcher)
        self.base_url = base_url

    def search(self, query: str, limit: int) -> list[str]:
        payload = self.fetcher.get_json(
            self.base_url,
            params={
                "page": "dapi",
                "s": "post",
                "q": "index",
                "json": "1",
                "limit": API_PAGE_SIZE,
                "tags": booru_tags(query),
            },
        )
        images = []
        for post in _posts_from_payload(payload):
            url = post_image_url(post)
            if url.startswith("/"):
                url = self._site_root() + url
            if url:
                images.append(url)
            if len(images) >= limit:
                break
        return images

    def _site_root(self) -> str:
        parts = self.base_url.split("/")
        return "/".join(parts[:3])


class BooruWebImages(ImageSource):
    name = "imageboard-web"

    def __init__(self, fetcher, base_url: str) -> None:
        super().__init__(fetcher)
        self.base_url = base_url

    def search(self, query: str, limit: int) -> list[str]:
        listing = self.fetcher.get_text(
            self.base_url,
            params={"page": "post", "s": "list", "tags": booru_tags(query)},
        )
        images = []
        for post_id in extract_post_ids(listing, limit):
            try:
                page = self.fetcher.get_text(self.base_url, params={"page": "post", "s": "view", "id": post_id})
            except ScrapeError:
                continue
            url = extract_main_image(page)
            if url:
                images.append(url)
        return images

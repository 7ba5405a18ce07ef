#!/usr/bin/env python3

from __future__ import annotations

import http.client
import json
import os
import unittest
from unittest import mock

from fastapi.testclient import TestClient

import apps.api.tests.asset_fixtures  # noqa: F401

from apps.api.gamecanvas_api.main import app
from apps.api.gamecanvas_api.services.registry import reset_service_cache_for_tests
from packages.gamecanvas_core.scrape.base import ImageSource, resolve_count, search_with_fallback
from packages.gamecanvas_core.scrape.http import HttpFetcher, ScrapeError, build_url
from packages.gamecanvas_core.scrape.images import PinterestImages, extract_pin_images, extract_vqd
from packages.gamecanvas_core.scrape.wiki import (
    extract_highest_tier,
    extract_peak_value,
    is_wiki_url,
    parse_character_page,
    strip_revision,
)

FETCHER_PATH = "apps.api.gamecanvas_api.routers.scrape.get_http_fetcher"
URLOPEN_PATH = "packages.gamecanvas_core.scrape.http.request.urlopen"

DDG_LANDING = "<script>vqd='4-1234567890';</script>"
PINTEREST_MARKUP = """
<img src="https://i.pinimg.com/236x/aa/one.jpg">
<img src="https://i.pinimg.com/75x75_RS/aa/avatar.jpg">
<img src="https://i.pinimg.com/474x/bb/two.jpg">
<img src="https://i.pinimg.com/236x/aa/one.jpg">
"""
WIKI_SEARCH = """
<ul>
<li><a href="https://vsbattles.fandom.com/wiki/Son_Goku_(Dragon_Ball)" class="unified-search__result__title">Son Goku (Dragon Ball)</a></li>
<li><a href="https://vsbattles.fandom.com/wiki/Special:Random">Random page</a></li>
<li><a href="https://vsbattles.fandom.com/wiki/Category:Characters">Characters</a></li>
<li><a href="/wiki/Vegeta">Vegeta</a></li>
<li><a href="https://vsbattles.fandom.com/wiki/Son_Goku_(Dragon_Ball)">Son Goku (Dragon Ball)</a></li>
</ul>
"""
WIKI_PAGE = """
<h1 id="firstHeading" class="page-header__title">Son Goku (Dragon Ball)</h1>
<img class="pi-image-thumbnail" src="data:image/gif;base64,R0lGOD" data-src="https://static.wikia.nocookie.net/vsbattles/images/a/ab/Goku.png/revision/latest?cb=2024" data-image-width="400" data-image-height="600">
<div class="mw-parser-output"><p>Son Goku is the main protagonist of the Dragon Ball series and a Saiyan raised on Earth.</p>
<p><b>Tier</b>: <b>9-B</b> | <b>High 8-C</b> | At least <b>5-B</b> (with Kaioken)<br>
<b>Attack Potency</b>: <b>Wall level</b> | <b>Planet level</b> [1] (Could destroy the moon)<br>
<b>Speed</b>: <b>Superhuman</b><br>
<b>Durability</b>: <b>Planet level</b><br>
<b>Stamina</b>: Very high<br>
</p></div>
"""


class FakeFetcher:
    """Serves canned bodies by URL substring, in route order; exceptions are raised."""

    def __init__(self, routes: list[tuple[str, object]]) -> None:
        self.routes = routes
        self.requested: list[str] = []

    def get_text(self, url, *, params=None, headers=None) -> str:
        target = build_url(url, params)
        self.requested.append(target)
        for needle, body in self.routes:
            if needle in target:
                if isinstance(body, Exception):
                    raise body
                return body if isinstance(body, str) else json.dumps(body)
        raise ScrapeError(f"no fixture for {target}", error_code="http_404")

    def get_json(self, url, *, params=None, headers=None):
        return json.loads(self.get_text(url, params=params, headers=headers))

    def get_bytes(self, url, *, params=None, headers=None) -> bytes:
        return self.get_text(url, params=params, headers=headers).encode("utf-8")

    def try_get_bytes(self, url):
        try:
            return self.get_bytes(url)
        except ScrapeError:
            return None


def _ddg_results(count: int) -> dict:
    return {"results": [{"image": f"https://img.example/{i}.jpg"} for i in range(count)]}


class ScrapeApiTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_service_cache_for_tests()
        self.client = TestClient(app)

    def tearDown(self) -> None:
        os.environ.pop("GAMECANVAS_KLIPY_API_KEY", None)
        reset_service_cache_for_tests()

    def _get(self, path: str, fetcher: FakeFetcher, **params):
        with mock.patch(FETCHER_PATH, return_value=fetcher):
            return self.client.get(path, params=params)

    def test_missing_query_is_rejected(self) -> None:
        fetcher = FakeFetcher([])
        for path in (
            "/api/scrape/images",
            "/api/scrape/pinterest",
            "/api/scrape/stickers",
            "/api/scrape/vsbattles/search",
            "/api/scrape/imageboard",
        ):
            resp = self._get(path, fetcher)
            self.assertEqual(resp.status_code, 400, path)
        self.assertEqual(fetcher.requested, [])

    def test_images_prefers_primary_source(self) -> None:
        fetcher = FakeFetcher(
            [
                ("duckduckgo.com/i.js", _ddg_results(3)),
                ("duckduckgo.com/?", DDG_LANDING),
                ("pinterest.com", PINTEREST_MARKUP),
            ]
        )
        resp = self._get("/api/scrape/images", fetcher, query="red fox")
        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["count"], 3)
        self.assertEqual(payload["images"][0], "https://img.example/0.jpg")
        self.assertFalse(any("pinterest.com" in url for url in fetcher.requested))
        self.assertTrue(any("vqd=4-1234567890" in url for url in fetcher.requested))

    def test_images_falls_back_to_pinterest(self) -> None:
        fetcher = FakeFetcher(
            [
                ("duckduckgo.com", ScrapeError("blocked", error_code="http_403")),
                ("pinterest.com", PINTEREST_MARKUP),
            ]
        )
        resp = self._get("/api/scrape/pinterest", fetcher, query="red fox")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["images"],
            ["https://i.pinimg.com/736x/aa/one.jpg", "https://i.pinimg.com/736x/bb/two.jpg"],
        )

    def test_images_all_sources_failing_returns_empty(self) -> None:
        fetcher = FakeFetcher([("", ScrapeError("offline", error_code="network_error"))])
        resp = self._get("/api/scrape/images", fetcher, query="red fox")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"images": [], "count": 0})

    def test_result_count_is_capped(self) -> None:
        fetcher = FakeFetcher([("duckduckgo.com/i.js", _ddg_results(80)), ("duckduckgo.com/?", DDG_LANDING)])
        resp = self._get("/api/scrape/images", fetcher, query="fox", count="100")
        self.assertEqual(resp.json()["count"], 50)
        resp = self._get("/api/scrape/images", fetcher, query="fox", maxResults="7")
        self.assertEqual(resp.json()["count"], 7)
        resp = self._get("/api/scrape/images", fetcher, query="fox")
        self.assertEqual(resp.json()["count"], 10)

    def test_stickers_without_key_is_server_error(self) -> None:
        resp = self._get("/api/scrape/stickers", FakeFetcher([]), query="cat")
        self.assertEqual(resp.status_code, 500)
        self.assertIn("GAMECANVAS_KLIPY_API_KEY", resp.json()["detail"])

    def test_stickers_are_normalized(self) -> None:
        os.environ["GAMECANVAS_KLIPY_API_KEY"] = "test-key"
        reset_service_cache_for_tests()
        body = {
            "result": True,
            "data": {
                "data": [
                    {
                        "id": 11,
                        "title": "Happy cat",
                        "file": {
                            "hd": {"gif": {"url": "https://k.example/hd.gif"}},
                            "sm": {"webp": {"url": "https://k.example/sm.webp"}},
                        },
                    },
                    {"id": 12, "title": "No files"},
                ]
            },
        }
        fetcher = FakeFetcher([("api.klipy.com/api/v1/test-key/stickers/search", body)])
        resp = self._get("/api/scrape/stickers", fetcher, query="cat")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {
                "stickers": [
                    {"id": "11", "title": "Happy cat", "url": "https://k.example/hd.gif", "preview": "https://k.example/sm.webp"}
                ],
                "count": 1,
            },
        )

    def test_stickers_upstream_failure_is_empty(self) -> None:
        os.environ["GAMECANVAS_KLIPY_API_KEY"] = "test-key"
        reset_service_cache_for_tests()
        fetcher = FakeFetcher([("klipy", ScrapeError("bad gateway", error_code="http_502"))])
        resp = self._get("/api/scrape/stickers", fetcher, query="cat")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"stickers": [], "count": 0})

    def test_wiki_search(self) -> None:
        fetcher = FakeFetcher([("Special:Search", WIKI_SEARCH)])
        resp = self._get("/api/scrape/vsbattles/search", fetcher, query="goku")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["characters"],
            [
                {"name": "Son Goku (Dragon Ball)", "url": "https://vsbattles.fandom.com/wiki/Son_Goku_(Dragon_Ball)"},
                {"name": "Vegeta", "url": "https://vsbattles.fandom.com/wiki/Vegeta"},
            ],
        )

    def test_wiki_search_not_found(self) -> None:
        resp = self._get("/api/scrape/vsbattles/search", FakeFetcher([("Special:Search", "<p>No results</p>")]), query="zzz")
        self.assertEqual(resp.status_code, 404)

    def test_wiki_search_upstream_failure(self) -> None:
        fetcher = FakeFetcher([("Special:Search", ScrapeError("timeout", error_code="network_error"))])
        resp = self._get("/api/scrape/vsbattles/search", fetcher, query="goku")
        self.assertEqual(resp.status_code, 500)

    def test_wiki_detail_requires_wiki_url(self) -> None:
        fetcher = FakeFetcher([])
        self.assertEqual(self._get("/api/scrape/vsbattles/detail", fetcher).status_code, 400)
        resp = self._get("/api/scrape/vsbattles/detail", fetcher, url="http://169.254.169.254/latest/meta-data")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(fetcher.requested, [])

    def test_wiki_detail(self) -> None:
        url = "https://vsbattles.fandom.com/wiki/Son_Goku_(Dragon_Ball)"
        resp = self._get("/api/scrape/vsbattles/detail", FakeFetcher([("Son_Goku", WIKI_PAGE)]), url=url)
        self.assertEqual(resp.status_code, 200)
        detail = resp.json()
        self.assertEqual(detail["name"], "Son Goku (Dragon Ball)")
        self.assertEqual(detail["imageURL"], "https://static.wikia.nocookie.net/vsbattles/images/a/ab/Goku.png")
        self.assertEqual((detail["imageWidth"], detail["imageHeight"]), (400, 600))
        self.assertEqual(detail["tier"], "5-B")
        self.assertEqual(detail["attackPotency"], "Planet level")
        self.assertEqual(detail["speed"], "Superhuman")
        self.assertEqual(detail["stamina"], "Very high")
        self.assertEqual(detail["range"], "N/A")
        self.assertTrue(detail["summary"].startswith("Son Goku is the main protagonist"))
        self.assertIn("Attack Potency", detail["stats"])

    def test_imageboard_api(self) -> None:
        posts = [
            {"file_url": "https://booru.example/images/1.jpg"},
            {"directory": "ab", "image": "2.png"},
            {"file_url": "//booru.example/images/3.jpg"},
        ]
        fetcher = FakeFetcher([("page=dapi", posts)])
        resp = self._get("/api/scrape/imageboard", fetcher, query="blue sky")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["images"],
            [
                "https://booru.example/images/1.jpg",
                "https://safebooru.org/images/ab/2.png",
                "https://booru.example/images/3.jpg",
            ],
        )
        self.assertTrue(any("tags=blue_sky" in url for url in fetcher.requested))

    def test_imageboard_falls_back_to_web(self) -> None:
        listing = (
            '<span id="s10" class="thumb"><a id="p10" href="index.php?page=post&amp;s=view&amp;id=10"><img></a></span>'
            '<span id="s11" class="thumb"><a id="p11" href="index.php?page=post&amp;s=view&amp;id=11"><img></a></span>'
        )
        fetcher = FakeFetcher(
            [
                ("page=dapi", []),
                ("s=list", listing),
                ("id=10", '<img alt="x" id="image" src="//booru.example/images/10.jpg">'),
                ("id=11", ScrapeError("gone", error_code="http_404")),
            ]
        )
        resp = self._get("/api/scrape/imageboard", fetcher, query="sky", count="5")
        self.assertEqual(resp.json(), {"images": ["https://booru.example/images/10.jpg"], "count": 1})


class _StaticSource(ImageSource):
    def __init__(self, name: str, result) -> None:
        super().__init__(fetcher=None)
        self.name = name
        self.result = result
        self.calls = 0

    def search(self, query: str, limit: int) -> list[str]:
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return list(self.result)


class ScrapeHelperTests(unittest.TestCase):
    def test_fallback_order(self) -> None:
        first = _StaticSource("first", ["a", "a", "b"])
        second = _StaticSource("second", ["c"])
        self.assertEqual(search_with_fallback([first, second], "q", 10), ["a", "b"])
        self.assertEqual(second.calls, 0)

        empty = _StaticSource("empty", [])
        failing = _StaticSource("failing", ScrapeError("down", error_code="network_error"))
        second = _StaticSource("second", ["c", "d", "e"])
        self.assertEqual(search_with_fallback([empty, failing, second], "q", 2), ["c", "d"])

    def test_malformed_upstream_response_falls_back(self) -> None:
        broken_body = mock.MagicMock()
        broken_body.__enter__.return_value.read.side_effect = http.client.IncompleteRead(b"partial")
        failures = (http.client.BadStatusLine("THIS IS NOT HTTP"), http.client.LineTooLong("header line"))
        for failure in failures + (None,):
            side_effect = failure if failure is not None else [broken_body]
            second = _StaticSource("second", ["c"])
            with mock.patch(URLOPEN_PATH, side_effect=side_effect):
                found = search_with_fallback([PinterestImages(HttpFetcher()), second], "q", 5)
            self.assertEqual(found, ["c"])
            self.assertEqual(second.calls, 1)

    def test_malformed_upstream_response_is_network_error(self) -> None:
        with mock.patch(URLOPEN_PATH, side_effect=http.client.BadStatusLine("THIS IS NOT HTTP")):
            with self.assertRaises(ScrapeError) as ctx:
                HttpFetcher().get_text("https://upstream.example/")
            self.assertIsNone(HttpFetcher().try_get_bytes("https://upstream.example/"))
        self.assertEqual(ctx.exception.error_code, "network_error")

    def test_resolve_count(self) -> None:
        self.assertEqual(resolve_count(None, None), 10)
        self.assertEqual(resolve_count("100", None), 50)
        self.assertEqual(resolve_count(None, "7"), 7)
        self.assertEqual(resolve_count("abc", "3"), 3)
        self.assertEqual(resolve_count("0", None), 1)

    def test_peak_value_and_tier(self) -> None:
        self.assertEqual(extract_peak_value("Wall level | Planet level [1] (Could destroy the moon)"), "Planet level")
        self.assertEqual(extract_peak_value(""), "N/A")
        self.assertEqual(extract_peak_value("(only a note)"), "N/A")
        self.assertEqual(extract_highest_tier("9-B | High 8-C | At least 5-B"), "5-B")
        self.assertEqual(extract_highest_tier("Varies"), "Unknown")

    def test_wiki_url_and_revision(self) -> None:
        self.assertTrue(is_wiki_url("https://vsbattles.fandom.com/wiki/Goku"))
        self.assertFalse(is_wiki_url("https://vsbattles.fandom.com.evil.example/wiki/Goku"))
        self.assertFalse(is_wiki_url("file:///etc/passwd"))
        self.assertEqual(strip_revision("https://x/a.png/revision/latest?cb=1"), "https://x/a.png")

    def test_page_without_stats(self) -> None:
        detail = parse_character_page("<html><body>Nothing here</body></html>")
        self.assertEqual(detail.tier, "Unknown")
        self.assertEqual(detail.attack_potency, "N/A")
        self.assertEqual(detail.stats, {})

    def test_markup_extractors(self) -> None:
        self.assertEqual(extract_vqd('vqd="4-99"'), "4-99")
        self.assertIsNone(extract_vqd("<html></html>"))
        self.assertEqual(
            extract_pin_images(PINTEREST_MARKUP),
            [
                "https://i.pinimg.com/736x/aa/one.jpg",
                "https://i.pinimg.com/736x/bb/two.jpg",
                "https://i.pinimg.com/736x/aa/one.jpg",
            ],
        )


if __name__ == "__main__":
    unittest.main()

"""Process-wide services shared by every request.

Settings are read from the environment once; the asset store and HTTP fetcher
are built from them lazily and live for the life of the process.
"""

from __future__ import annotations

from functools import lru_cache

from packages.gamecanvas_core.render.assets import AssetStore
from packages.gamecanvas_core.scrape.http import HttpFetcher
from packages.gamecanvas_core.settings import ServiceSettings


@lru_cache(maxsize=1)
def get_settings() -> ServiceSettings:
    return ServiceSettings.from_env()


@lru_cache(maxsize=1)
def get_asset_store() -> AssetStore:
    return AssetStore.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_http_fetcher() -> HttpFetcher:
    return HttpFetcher(timeout_seconds=get_settings().scrape_timeout_seconds)


def reset_service_cache_for_tests() -> None:
    get_settings.cache_clear()
    get_asset_store.cache_clear()
    get_http_fetcher.cache_clear()

"""Outbound HTTP for scrape sources.

One small urllib wrapper so every source shares the same User-Agent, timeout
and error translation. Failures surface as ``ScrapeError`` with an
``error_code`` the fallback policy and the routers can act on.
"""

from __future__ import annotations

from http import client as http_client
from typing import Any, Mapping
from urllib import error, parse, request
import json
import logging

logger = logging.getLogger("gamecanvas_core.scrape.http")

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
MAX_BODY_BYTES = 16 * 1024 * 1024


class ScrapeError(RuntimeError):
    def __init__(self, message: str, *, error_code: str, source: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.source = source


class ScrapeUnavailableError(ScrapeError):
    """The source cannot be used at all, e.g. it is not configured."""


def build_url(base: str, params: Mapping[str, Any] | None = None) -> str:
    if not params:
        return base
    query = parse.urlencode({k: v for k, v in params.items() if v is not None})
    joiner = "&" if "?" in base else "?"
    return f"{base}{joiner}{query}"


class HttpFetcher:
    def __init__(self, *, timeout_seconds: float = 20.0, user_agent: str = BROWSER_USER_AGENT) -> None:
        self.timeout_seconds = max(0.5, float(timeout_seconds))
        self.user_agent = user_agent

    def get_bytes(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> bytes:
        target = build_url(url, params)
        req = request.Request(target, method="GET", headers={"User-Agent": self.user_agent})
        for key, value in (headers or {}).items():
            req.add_header(key, value)
        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                return response.read(MAX_BODY_BYTES)
        except error.HTTPError as exc:
            raise ScrapeError(
                f"Upstream HTTP error {exc.code} for {url}",
                error_code=f"http_{exc.code}",
            ) from exc
        except (error.URLError, http_client.HTTPException, OSError, ValueError) as exc:
            raise ScrapeError(f"Network error for {url}: {exc}", error_code="network_error") from exc

    def get_text(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str:
        return self.get_bytes(url, params=params, headers=headers).decode("utf-8", errors="replace")

    def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        raw = self.get_text(url, params=params, headers={"Accept": "application/json", **(headers or {})})
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ScrapeError(f"Non-JSON response from {url}", error_code="invalid_json") from exc

    def try_get_bytes(self, url: str) -> bytes | None:
        """``get_bytes`` for best-effort callers: failures are logged and yield ``None``."""
        try:
            return self.get_bytes(url)
        except ScrapeError as exc:
            logger.info("[SCRAPE] Download failed (%s): %s", exc.error_code, exc)
            return None

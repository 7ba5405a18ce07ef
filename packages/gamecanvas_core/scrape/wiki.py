"""VS Battles wiki: character search and stat-block extraction.

Stat values on the wiki list every key form separated by ``|``; the detail
view keeps only the last (peak) one and the highest tier mentioned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib import parse
import html
import re

from .http import HttpFetcher

WIKI_HOST = "vsbattles.fandom.com"
WIKI_ROOT = f"https://{WIKI_HOST}"
SEARCH_URL = f"{WIKI_ROOT}/wiki/Special:Search"
MIN_IMAGE_SIDE = 100
MIN_SUMMARY_LEN = 50

STAT_FIELDS = {
    "Tier": "tier",
    "Attack Potency": "attack_potency",
    "Speed": "speed",
    "Durability": "durability",
    "Stamina": "stamina",
    "Range": "range",
}

_LINK_RE = re.compile(r"""<a[^>]+href="((?:https://vsbattles\.fandom\.com)?/wiki/[^"#?]+)"[^>]*>([^<]+)</a>""")
_TAG_RE = re.compile(r"<[^>]+>")
_BRACKETS_RE = re.compile(r"\[.*?\]")
_PARENS_RE = re.compile(r"\(.*?\)")
_TIER_RE = re.compile(r"\b([0-9]+-[A-Z])\b")
_TITLE_RE = re.compile(r"""<h1[^>]*class="[^"]*page-header__title[^"]*"[^>]*>(.*?)</h1>""", re.DOTALL)
_SUMMARY_RE = re.compile(
    r"""<div[^>]*class="[^"]*mw-parser-output[^"]*"[^>]*>.*?<p>(.{50,}?)</p>""",
    re.DOTALL,
)
_THUMB_RE = re.compile(r"""<img[^>]*class="[^"]*pi-image-thumbnail[^"]*"[^>]*>""")
_ATTR_RE = re.compile(r'([\w-]+)="([^"]*)"')
_SKIPPED_NAMESPACES = ("Special:", "Category:", "File:", "Template:", "User:", "Talk:")


@dataclass
class WikiCharacter:
    name: str
    url: str


@dataclass
class CharacterDetail:
    name: str = ""
    image_url: str = ""
    image_width: int = 0
    image_height: int = 0
    summary: str = ""
    tier: str = ""
    attack_potency: str = ""
    speed: str = ""
    durability: str = ""
    stamina: str = ""
    range: str = ""
    stats: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "imageURL": self.image_url,
            "imageWidth": self.image_width,
            "imageHeight": self.image_height,
            "summary": self.summary,
            "tier": self.tier,
            "attackPotency": self.attack_potency,
            "speed": self.speed,
            "durability": self.durability,
            "stamina": self.stamina,
            "range": self.range,
            "stats": dict(self.stats),
        }


def strip_html(text: str) -> str:
    return html.unescape(_TAG_RE.sub("", text or ""))


def clean_text(text: str) -> str:
    """Drop ``[...]`` references and ``(...)`` qualifiers."""
    text = _BRACKETS_RE.sub("", (text or "").strip())
    text = _PARENS_RE.sub("", text)
    return " ".join(text.split())


def extract_peak_value(text: str) -> str:
    if not text:
        return "N/A"
    peak = clean_text(text.split("|")[-1])
    return peak or "N/A"


def extract_highest_tier(text: str) -> str:
    tiers = _TIER_RE.findall(text or "")
    return tiers[-1] if tiers else "Unknown"


def strip_revision(url: str) -> str:
    return url.split("/revision/", 1)[0] if url else url


def is_wiki_url(url: str) -> bool:
    parsed = parse.urlparse(str(url or "").strip())
    return parsed.scheme in ("http", "https") and (parsed.hostname or "").lower() == WIKI_HOST


def parse_search_results(markup: str) -> list[WikiCharacter]:
    seen: set[str] = set()
    results = []
    for href, label in _LINK_RE.findall(markup or ""):
        url = href if href.startswith("http") else WIKI_ROOT + href
        if any(ns in url for ns in _SKIPPED_NAMESPACES) or url.rstrip("/").endswith("/wiki/Main_Page"):
            continue
        if url in seen:
            continue
        seen.add(url)
        name = html.unescape(label).strip().replace("_", " ")
        if name:
            results.append(WikiCharacter(name=name, url=url))
    return results


def _int_attr(attrs: dict[str, str], name: str) -> int:
    try:
        return int(attrs.get(name) or 0)
    except ValueError:
        return 0


def _extract_image(detail: CharacterDetail, markup: str) -> None:
    for tag in _THUMB_RE.findall(markup):
        attrs = dict(_ATTR_RE.findall(tag))
        url = attrs.get("data-src") or attrs.get("src") or ""
        width = _int_attr(attrs, "data-image-width")
        height = _int_attr(attrs, "data-image-height")
        if not url or url.startswith("data:"):
            continue
        if width and height and (width < MIN_IMAGE_SIDE or height < MIN_IMAGE_SIDE):
            continue
        detail.image_url = strip_revision(html.unescape(url))
        detail.image_width = width
        detail.image_height = height
        return


def _stat_pattern(label: str) -> re.Pattern[str]:
    # The label is usually bolded, so the colon may follow a closing tag.
    return re.compile(
        rf"\b{re.escape(label)}\s*(?:</[^>]+>\s*)*:\s*(.*?)(?:<br|</div|</p|\n|$)",
        re.IGNORECASE,
    )


def parse_character_page(markup: str) -> CharacterDetail:
    detail = CharacterDetail()
    title = _TITLE_RE.search(markup)
    if title:
        detail.name = strip_html(title.group(1)).strip()

    summary = _SUMMARY_RE.search(markup)
    if summary:
        text = " ".join(strip_html(summary.group(1)).split())
        if ":" not in text and len(text) > MIN_SUMMARY_LEN:
            detail.summary = text

    _extract_image(detail, markup)

    for label, attr in STAT_FIELDS.items():
        match = _stat_pattern(label).search(markup)
        if not match:
            continue
        value = clean_text(strip_html(match.group(1)))
        detail.stats[label] = value
        setattr(detail, attr, value)

    detail.attack_potency = extract_peak_value(detail.attack_potency)
    detail.speed = extract_peak_value(detail.speed)
    detail.durability = extract_peak_value(detail.durability)
    detail.stamina = extract_peak_value(detail.stamina)
    detail.range = extract_peak_value(detail.range)
    detail.tier = extract_highest_tier(detail.tier)
    return detail


def search_characters(fetcher: HttpFetcher, query: str) -> list[WikiCharacter]:
    markup = fetcher.get_text(SEARCH_URL, params={"query": query})
    return parse_search_results(markup)


def fetch_character(fetcher: HttpFetcher, url: str) -> CharacterDetail:
    return parse_character_page(fetcher.get_text(url))

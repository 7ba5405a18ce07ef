"""Tic-Tac-Toe leaderboard card."""

from __future__ import annotations

from dataclasses import dataclass

from .assets import AssetStore
from .canvas import WHITE, Canvas, parse_hex_color

CARD_W = 800
CARD_H = 1000
FALLBACK_BACKGROUND = parse_hex_color("#1a1a2e")
TITLE = "LEADERBOARD"
TITLE_FONT_SIZE = 60
TITLE_Y = 100
ROW_FONT_SIZE = 40
ROW_START_Y = 250
ROW_STEP = 70
RANK_X = 100
NAME_X = 200
SCORE_X = 700
MAX_ROWS = 10

MEDALS = ("\U0001F947", "\U0001F948", "\U0001F949")
PLACEHOLDER_NAMES = {"", "User", "Player"}


@dataclass
class LeaderboardEntry:
    name: str = ""
    jid: str = ""
    score: int = 0


def rank_label(position: int) -> str:
    """Medal for the podium (0-based ``position`` 0..2), ``"N."`` below it."""
    if 0 <= position < len(MEDALS):
        return MEDALS[position]
    return f"{position + 1}."


def display_name(entry: LeaderboardEntry) -> str:
    if entry.name not in PLACEHOLDER_NAMES:
        return entry.name
    name = entry.jid
    if "@" in name:
        name = "@" + name[: name.index("@")]
    return name


def compose_leaderboard(entries: list[LeaderboardEntry], assets: AssetStore) -> Canvas:
    canvas = Canvas(CARD_W, CARD_H, FALLBACK_BACKGROUND)
    background = assets.load_image(assets.asset("Ldatabase", "scores.png"))
    if background is not None:
        canvas.cover(background)

    canvas.text(TITLE, CARD_W / 2, TITLE_Y, assets.display_font(TITLE_FONT_SIZE), WHITE, anchor="mm")

    font = assets.display_font(ROW_FONT_SIZE)
    for i, entry in enumerate(entries[:MAX_ROWS]):
        y = ROW_START_Y + i * ROW_STEP
        canvas.text(rank_label(i), RANK_X, y, font, WHITE, anchor="ls")
        canvas.text(display_name(entry), NAME_X, y, font, WHITE, anchor="ls")
        canvas.text(f"{entry.score} pts", SCORE_X, y, font, WHITE, anchor="rs")
    return canvas


def render_leaderboard(entries: list[LeaderboardEntry], assets: AssetStore) -> bytes:
    return compose_leaderboard(entries, assets).to_png_bytes()

"""Synthetic asset pack shared by the API test suites.

Importing this module builds the pack once in a temporary directory and points
``GAMECANVAS_ASSETS_DIR`` at it, so it must be imported before the app.
Every sprite is a solid color, which lets tests identify what was drawn where
by sampling single pixels.
"""

from __future__ import annotations

import os
import struct
import tempfile
import zlib
from io import BytesIO
from pathlib import Path

from PIL import Image

ENVIRONMENTS = {
    "cave.png": (90, 90, 90),
    "forest.png": (30, 120, 60),
}
HP_COLORS = {n: (40 * n, 10, 10) for n in range(1, 6)}
MANA_COLORS = {n: (10, 10, 40 * n) for n in range(1, 6)}
ENEMY_COLOR = (0, 200, 0)
NEAR_ENEMY_COLOR = (230, 140, 0)
PLAYER_COLOR = (20, 60, 220)
AVATAR_COLOR = (255, 0, 255)
CHROME_FILES = ("player_state.png", "heart.png", "mana.png", "Options_menu.png", "banner.png")


def _solid(path: Path, size: tuple[int, int], color: tuple[int, int, int]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color + (255,)).save(path, format="PNG")


def solid_png_bytes(color: tuple[int, int, int], size: tuple[int, int] = (64, 64)) -> bytes:
    buf = BytesIO()
    Image.new("RGBA", size, color + (255,)).save(buf, format="PNG")
    return buf.getvalue()


def oversized_png_bytes(width: int, height: int) -> bytes:
    """A tiny PNG whose header claims ``width`` x ``height`` pixels."""
    data = bytearray(solid_png_bytes(AVATAR_COLOR, (1, 1)))
    # Signature (8), then the IHDR length (4) and type (4) precede width and height.
    struct.pack_into(">II", data, 16, width, height)
    struct.pack_into(">I", data, 29, zlib.crc32(bytes(data[12:29])))
    return bytes(data)


def build_asset_tree(root: Path) -> Path:
    ui = root / "rpgasset" / "ui"
    for name, color in ENVIRONMENTS.items():
        _solid(root / "rpgasset" / "environment" / name, (320, 240), color)
    for n in range(1, 6):
        _solid(ui / f"hp{n}.png", (24, 8), HP_COLORS[n])
        _solid(ui / f"mana{n}.png", (24, 8), MANA_COLORS[n])
    for i, name in enumerate(CHROME_FILES):
        _solid(ui / name, (32, 16), (200, 180, 140 + i))
    _solid(root / "rpgasset" / "characters" / "Fighter1.png", (60, 150), PLAYER_COLOR)
    _solid(root / "rpgasset" / "enemies" / "fire (5).png", (80, 80), ENEMY_COLOR)
    _solid(root / "rpgasset" / "enemies" / "fire (6).png", (80, 80), NEAR_ENEMY_COLOR)
    _solid(root / "avatars" / "player.png", (200, 200), AVATAR_COLOR)
    return root


ASSETS_DIR = tempfile.TemporaryDirectory()
ASSETS_ROOT = build_asset_tree(Path(ASSETS_DIR.name))

os.environ["GAMECANVAS_ASSETS_DIR"] = str(ASSETS_ROOT)
os.environ["GAMECANVAS_BACKGROUND_MODE"] = "first"
os.environ["GAMECANVAS_FETCH_AVATARS"] = "false"
os.environ.pop("GAMECANVAS_KLIPY_API_KEY", None)
os.environ.pop("KLIPY_API_KEY", None)

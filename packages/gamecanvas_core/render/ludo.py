"""Ludo board compositor: a 15x15 cell grid on a 900px board."""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Callable, Optional
import logging
import math

from PIL import Image

from .assets import AssetStore, decode_image
from .canvas import BLACK, WHITE, Canvas, Color, circular_crop, resize_exact, with_alpha

logger = logging.getLogger("gamecanvas_core.render.ludo")

BOARD_SIZE = 900
CELL_SIZE = 60
GRID_CELLS = 15
QUADRANT_CELLS = 6
INSET_RATIO = 0.7

RED: Color = (255, 77, 77, 255)
GREEN: Color = (46, 204, 113, 255)
YELLOW: Color = (241, 196, 15, 255)
BLUE: Color = (52, 152, 219, 255)
LIGHT_GRAY: Color = (240, 242, 245, 255)
DARK_GRAY: Color = (51, 51, 51, 255)

PLAYER_COLORS: dict[str, Color] = {
    "red": RED,
    "green": GREEN,
    "yellow": YELLOW,
    "blue": BLUE,
}

Cell = tuple[int, int]

MAIN_TRACK: tuple[Cell, ...] = (
    (6, 1), (6, 2), (6, 3), (6, 4), (6, 5),
    (5, 6), (4, 6), (3, 6), (2, 6), (1, 6), (0, 6),
    (0, 7), (0, 8),
    (1, 8), (2, 8), (3, 8), (4, 8), (5, 8),
    (6, 9), (6, 10), (6, 11), (6, 12), (6, 13), (6, 14),
    (7, 14), (8, 14),
    (8, 13), (8, 12), (8, 11), (8, 10), (8, 9),
    (9, 8), (10, 8), (11, 8), (12, 8), (13, 8), (14, 8),
    (14, 7), (14, 6),
    (13, 6), (12, 6), (11, 6), (10, 6), (9, 6),
    (8, 5), (8, 4), (8, 3), (8, 2), (8, 1), (8, 0),
    (7, 0), (6, 0),
)

HOME_PATHS: dict[str, tuple[Cell, ...]] = {
    "red": ((7, 1), (7, 2), (7, 3), (7, 4), (7, 5), (7, 6)),
    "green": ((1, 7), (2, 7), (3, 7), (4, 7), (5, 7), (6, 7)),
    "yellow": ((7, 13), (7, 12), (7, 11), (7, 10), (7, 9), (7, 8)),
    "blue": ((13, 7), (12, 7), (11, 7), (10, 7), (9, 7), (8, 7)),
}

BASES: dict[str, tuple[Cell, ...]] = {
    "red": ((2, 2), (2, 4), (4, 2), (4, 4)),
    "green": ((2, 10), (2, 12), (4, 10), (4, 12)),
    "yellow": ((10, 10), (10, 12), (12, 10), (12, 12)),
    "blue": ((10, 2), (10, 4), (12, 2), (12, 4)),
}

SAFE_SQUARES: tuple[int, ...] = (0, 13, 26, 39)

AVATAR_ANCHORS: dict[str, tuple[float, float]] = {
    "red": (90.0, 90.0),
    "green": (810.0, 90.0),
    "yellow": (810.0, 810.0),
    "blue": (90.0, 810.0),
}

# Drawing order keeps the red quadrant and triangle first, as on a physical board.
QUADRANT_TINTS: tuple[tuple[str, int, int, float], ...] = (
    ("red", 0, 0, 0.35),
    ("green", 1, 0, 0.15),
    ("yellow", 1, 1, 0.15),
    ("blue", 0, 1, 0.15),
)

PIECE_RADIUS = 18
BASE_RING_RADIUS = 22
STAR_SIZE = 15
AVATAR_SIZE = 120
AVATAR_RING = 6
DIE_SIZE = 60
PIP_SPACING = 14
PIP_RADIUS = 5
LABEL_FONT_SIZE = 20

_S = PIP_SPACING
DIE_PIPS: dict[int, tuple[tuple[int, int], ...]] = {
    1: ((0, 0),),
    2: ((-_S, -_S), (_S, _S)),
    3: ((-_S, -_S), (0, 0), (_S, _S)),
    4: ((-_S, -_S), (-_S, _S), (_S, -_S), (_S, _S)),
    5: ((-_S, -_S), (-_S, _S), (0, 0), (_S, -_S), (_S, _S)),
    6: ((-_S, -_S), (-_S, 0), (-_S, _S), (_S, -_S), (_S, 0), (_S, _S)),
}

# Returns the response body, or None when the download failed.
Downloader = Callable[[str], Optional[bytes]]


@dataclass
class LudoPiece:
    id: int = 1
    position: int = 0
    in_base: bool = False
    in_home: bool = False
    on_home_path: bool = False
    home_path_index: int = 0


@dataclass
class LudoPlayer:
    jid: str = ""
    color: str = ""
    pfp_url: str = ""
    pieces: list[LudoPiece] = field(default_factory=list)


@dataclass
class LudoScene:
    players: list[LudoPlayer] = field(default_factory=list)
    last_roll: int = 0


def _table_lookup(table: tuple[Cell, ...], index: int) -> Optional[Cell]:
    if 0 <= index < len(table):
        return table[index]
    return None


def piece_cell(color: str, piece: LudoPiece) -> Optional[Cell]:
    """Board cell ``(row, col)`` for ``piece``, or ``None`` when it is not drawn."""
    if piece.in_home:
        return None
    key = str(color or "").lower()
    if piece.in_base:
        cell = _table_lookup(BASES.get(key, ()), piece.id - 1)
    elif piece.on_home_path:
        cell = _table_lookup(HOME_PATHS.get(key, ()), piece.home_path_index)
    else:
        cell = _table_lookup(MAIN_TRACK, piece.position)
    if cell is None:
        logger.warning(
            "[LUDO] Cannot place piece %s for color '%s' (position=%s, home_path_index=%s)",
            piece.id,
            color,
            piece.position,
            piece.home_path_index,
        )
    return cell


def cell_center(cell: Cell) -> tuple[float, float]:
    row, col = cell
    return col * CELL_SIZE + CELL_SIZE / 2, row * CELL_SIZE + CELL_SIZE / 2


def star_points(cx: float, cy: float, size: float) -> list[tuple[float, float]]:
    points = []
    for i in range(5):
        angle = i * 2 * math.pi / 5 - math.pi / 2
        points.append((cx + math.cos(angle) * size, cy + math.sin(angle) * size))
        angle += math.pi / 5
        points.append((cx + math.cos(angle) * size / 2, cy + math.sin(angle) * size / 2))
    return points


def _draw_quadrants(canvas: Canvas) -> None:
    side = QUADRANT_CELLS * CELL_SIZE
    far = BOARD_SIZE - side
    for color_name, qx, qy, alpha in QUADRANT_TINTS:
        canvas.fill_rect(qx * far, qy * far, side, side, with_alpha(PLAYER_COLORS[color_name], alpha))
    inner = side * INSET_RATIO
    pad = (side - inner) / 2
    for _, qx, qy, _ in QUADRANT_TINTS:
        canvas.fill_rect(qx * far + pad, qy * far + pad, inner, inner, WHITE)


def _draw_track(canvas: Canvas) -> None:
    for color_name, path in HOME_PATHS.items():
        tint = with_alpha(PLAYER_COLORS[color_name], 0.4)
        for row, col in path:
            canvas.fill_rect(col * CELL_SIZE + 2, row * CELL_SIZE + 2, CELL_SIZE - 4, CELL_SIZE - 4, tint)

    for i in range(GRID_CELLS + 1):
        offset = i * CELL_SIZE
        canvas.line(offset, 0, offset, BOARD_SIZE, DARK_GRAY, 5)
        canvas.line(0, offset, BOARD_SIZE, offset, DARK_GRAY, 5)

    for index in SAFE_SQUARES:
        cx, cy = cell_center(MAIN_TRACK[index])
        canvas.stroke_polygon(star_points(cx, cy, STAR_SIZE), YELLOW)

    center = 7.5 * CELL_SIZE
    reach = CELL_SIZE * 1.5
    canvas.fill_polygon([(center, center), (center - reach, center), (center, center - reach)], RED)
    canvas.fill_polygon([(center, center), (center, center - reach), (center + reach, center)], GREEN)
    canvas.fill_polygon([(center, center), (center + reach, center), (center, center + reach)], YELLOW)
    canvas.fill_polygon([(center, center), (center, center + reach), (center - reach, center)], BLUE)

    for color_name, slots in BASES.items():
        for slot in slots:
            cx, cy = cell_center(slot)
            canvas.stroke_circle(cx, cy, BASE_RING_RADIUS, PLAYER_COLORS[color_name], 3)


def _draw_pieces(canvas: Canvas, scene: LudoScene, assets: AssetStore) -> None:
    font = assets.display_font(LABEL_FONT_SIZE)
    for player in scene.players:
        color = PLAYER_COLORS.get(str(player.color or "").lower(), BLACK)
        for piece in player.pieces:
            cell = piece_cell(player.color, piece)
            if cell is None:
                continue
            cx, cy = cell_center(cell)
            canvas.fill_circle(cx, cy, PIECE_RADIUS, color)
            canvas.stroke_circle(cx, cy, PIECE_RADIUS, WHITE, 2)
            canvas.text(str(piece.id), cx, cy, font, BLACK, anchor="mm")


def load_avatar(source: str, assets: AssetStore, download: Optional[Downloader]) -> Optional[Image.Image]:
    """Fetch a profile picture from a URL or an asset-relative path."""
    source = str(source or "").strip()
    if not source:
        return None
    if source.startswith(("http://", "https://")):
        if download is None:
            return None
        payload = download(source)
        if not payload:
            return None
        return decode_image(BytesIO(payload), source)
    return assets.load_local_image(source)


def _draw_placeholder(canvas: Canvas, cx: float, cy: float, color: Color) -> None:
    radius = AVATAR_SIZE / 2
    canvas.fill_circle(cx, cy, radius, with_alpha(color, 0.3))
    canvas.stroke_circle(cx, cy, radius, color, AVATAR_RING)
    silhouette = with_alpha(color, 0.6)
    canvas.fill_circle(cx, cy - 10, 15, silhouette)
    canvas.fill_circle(cx, cy + 20, 25, silhouette)


def _draw_avatars(canvas: Canvas, scene: LudoScene, assets: AssetStore, download: Optional[Downloader]) -> None:
    for player in scene.players:
        if not player.pfp_url:
            continue
        key = str(player.color or "").lower()
        anchor = AVATAR_ANCHORS.get(key)
        if anchor is None:
            continue
        cx, cy = anchor
        color = PLAYER_COLORS[key]
        avatar = load_avatar(player.pfp_url, assets, download)
        if avatar is None:
            _draw_placeholder(canvas, cx, cy, color)
            continue
        round_avatar = circular_crop(resize_exact(avatar, AVATAR_SIZE, AVATAR_SIZE))
        canvas.stroke_circle(cx, cy, AVATAR_SIZE / 2 + AVATAR_RING / 2, color, AVATAR_RING)
        canvas.blit(round_avatar, cx - AVATAR_SIZE / 2, cy - AVATAR_SIZE / 2)


def _draw_die(canvas: Canvas, value: int) -> None:
    pips = DIE_PIPS.get(value)
    if pips is None:
        return
    center = 7.5 * CELL_SIZE
    half = DIE_SIZE / 2
    canvas.fill_rect(center - half, center - half, DIE_SIZE, DIE_SIZE, WHITE)
    canvas.stroke_rect(center - half, center - half, DIE_SIZE, DIE_SIZE, BLACK, 2)
    for dx, dy in pips:
        canvas.fill_circle(center + dx, center + dy, PIP_RADIUS, BLACK)


def compose_ludo_board(
    scene: LudoScene,
    assets: AssetStore,
    download: Optional[Downloader] = None,
) -> Canvas:
    canvas = Canvas(BOARD_SIZE, BOARD_SIZE, LIGHT_GRAY)
    _draw_quadrants(canvas)
    _draw_track(canvas)
    _draw_pieces(canvas, scene, assets)
    _draw_avatars(canvas, scene, assets, download)
    _draw_die(canvas, scene.last_roll)
    return canvas


def render_ludo_board(
    scene: LudoScene,
    assets: AssetStore,
    download: Optional[Downloader] = None,
) -> bytes:
    return compose_ludo_board(scene, assets, download).to_png_bytes()

"""Tic-Tac-Toe board compositor for any square grid size."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .assets import AssetStore
from .canvas import Canvas, parse_hex_color

BOARD_PX = 600

BACKGROUND = parse_hex_color("#ECF0F1")
GRID_COLOR = parse_hex_color("#34495E")
X_COLOR = parse_hex_color("#E74C3C")
O_COLOR = parse_hex_color("#3498DB")
HIGHLIGHT = parse_hex_color("#F39C12")
WIN_FILL = HIGHLIGHT[:3] + (50,)
INDEX_COLOR = (0, 0, 0, 100)

GRID_LINE_WIDTH = 4
LAST_MOVE_WIDTH = 3
LAST_MOVE_INSET = 10
WIN_INSET = 2
MARK_RATIO = 0.35

HIGHLIGHT_WIN = "win"
HIGHLIGHT_LAST = "last"


@dataclass
class TicTacToeScene:
    board: list[str] = field(default_factory=list)
    grid_size: int = 3
    last_move_index: int = -1
    win_pattern: list[int] = field(default_factory=list)


def cell_rc(index: int, grid_size: int) -> tuple[int, int]:
    return index // grid_size, index % grid_size


def cell_highlight(scene: TicTacToeScene, index: int) -> Optional[str]:
    """The winning-line fill takes precedence over the last-move outline."""
    if index in scene.win_pattern:
        return HIGHLIGHT_WIN
    if index == scene.last_move_index:
        return HIGHLIGHT_LAST
    return None


def mark_stroke_width(grid_size: int) -> int:
    if grid_size <= 3:
        return 10
    if grid_size <= 8:
        return 5
    return 3


def index_font_size(grid_size: int) -> int:
    if grid_size <= 3:
        return 40
    if grid_size <= 8:
        return 20
    return 12


def compose_tictactoe_board(scene: TicTacToeScene, assets: AssetStore) -> Canvas:
    canvas = Canvas(BOARD_PX, BOARD_PX, BACKGROUND)
    grid = max(1, int(scene.grid_size))
    cell = BOARD_PX / grid
    stroke = mark_stroke_width(grid)
    font = assets.display_font(index_font_size(grid))

    for index, value in enumerate(scene.board):
        row, col = cell_rc(index, grid)
        x, y = col * cell, row * cell

        highlight = cell_highlight(scene, index)
        if highlight == HIGHLIGHT_WIN:
            canvas.fill_rect(x + WIN_INSET, y + WIN_INSET, cell - 2 * WIN_INSET, cell - 2 * WIN_INSET, WIN_FILL)
        elif highlight == HIGHLIGHT_LAST:
            canvas.stroke_rect(
                x + LAST_MOVE_INSET,
                y + LAST_MOVE_INSET,
                cell - 2 * LAST_MOVE_INSET,
                cell - 2 * LAST_MOVE_INSET,
                HIGHLIGHT,
                LAST_MOVE_WIDTH,
            )

        cx, cy = x + cell / 2, y + cell / 2
        radius = cell * MARK_RATIO
        if value == "X":
            canvas.line(cx - radius, cy - radius, cx + radius, cy + radius, X_COLOR, stroke)
            canvas.line(cx + radius, cy - radius, cx - radius, cy + radius, X_COLOR, stroke)
        elif value == "O":
            canvas.stroke_circle(cx, cy, radius, O_COLOR, stroke)
        elif value == "":
            canvas.text(str(index), cx, cy, font, INDEX_COLOR, anchor="mm")

    for i in range(1, grid):
        offset = i * cell
        canvas.line(offset, 0, offset, BOARD_PX, GRID_COLOR, GRID_LINE_WIDTH)
        canvas.line(0, offset, BOARD_PX, offset, GRID_COLOR, GRID_LINE_WIDTH)
    return canvas


def render_tictactoe_board(scene: TicTacToeScene, assets: AssetStore) -> bytes:
    return compose_tictactoe_board(scene, assets).to_png_bytes()

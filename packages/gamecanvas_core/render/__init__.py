"""Scene compositors that turn game state into PNG images."""

from .assets import AssetStore
from .canvas import Canvas, RenderEncodeError
from .combat import CombatScene, Enemy, Player, render_combat_scene, render_end_screen
from .leaderboard import LeaderboardEntry, render_leaderboard
from .ludo import LudoPiece, LudoPlayer, LudoScene, render_ludo_board
from .tictactoe import TicTacToeScene, render_tictactoe_board

__all__ = [
    "AssetStore",
    "Canvas",
    "CombatScene",
    "Enemy",
    "LeaderboardEntry",
    "LudoPiece",
    "LudoPlayer",
    "LudoScene",
    "Player",
    "RenderEncodeError",
    "TicTacToeScene",
    "render_combat_scene",
    "render_end_screen",
    "render_leaderboard",
    "render_ludo_board",
    "render_tictactoe_board",
]

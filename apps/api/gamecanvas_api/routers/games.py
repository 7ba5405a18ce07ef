"""Board game rendering endpoints: Ludo, Tic-Tac-Toe and its leaderboard."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from packages.gamecanvas_core.render.leaderboard import LeaderboardEntry, render_leaderboard
from packages.gamecanvas_core.render.ludo import LudoPiece, LudoPlayer, LudoScene, render_ludo_board
from packages.gamecanvas_core.render.tictactoe import TicTacToeScene, render_tictactoe_board

from ..services.registry import get_asset_store, get_http_fetcher, get_settings

logger = logging.getLogger("gamecanvas_api.games")

router = APIRouter(prefix="/api", tags=["games"])

PNG_MEDIA_TYPE = "image/png"


class LudoPiecePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = 1
    position: int = 0
    in_base: bool = Field(default=False, alias="inBase")
    in_home: bool = Field(default=False, alias="inHome")
    on_home_path: bool = Field(default=False, alias="onHomePath")
    home_path_index: int = Field(default=0, alias="homePathIndex")


class LudoPlayerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    jid: str = ""
    color: str = ""
    pfp_url: str = Field(default="", alias="pfpUrl", description="http(s) URL or asset-relative path")
    pieces: list[LudoPiecePayload] = Field(default_factory=list)


class LudoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    players: list[LudoPlayerPayload] = Field(default_factory=list)
    last_roll: int = Field(default=0, alias="lastRoll")

    def to_scene(self) -> LudoScene:
        return LudoScene(
            players=[
                LudoPlayer(
                    jid=p.jid,
                    color=p.color,
                    pfp_url=p.pfp_url,
                    pieces=[LudoPiece(**piece.model_dump()) for piece in p.pieces],
                )
                for p in self.players
            ],
            last_roll=self.last_roll,
        )


class TicTacToeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    board: list[str] = Field(default_factory=list)
    grid_size: int = Field(default=3, alias="gridSize", ge=1)
    last_move_index: int = Field(default=-1, alias="lastMoveIndex")
    win_pattern: Optional[list[int]] = Field(default=None, alias="winPattern")

    def to_scene(self) -> TicTacToeScene:
        return TicTacToeScene(
            board=list(self.board),
            grid_size=self.grid_size,
            last_move_index=self.last_move_index,
            win_pattern=list(self.win_pattern or []),
        )


class ScoreEntryPayload(BaseModel):
    name: str = ""
    score: int = 0
    jid: str = ""


class LeaderboardRequest(BaseModel):
    scores: list[ScoreEntryPayload] = Field(default_factory=list)


def _avatar_downloader():
    if not get_settings().fetch_avatars:
        return None
    return get_http_fetcher().try_get_bytes


@router.post("/ludo", response_class=Response)
def ludo_board(req: LudoRequest) -> Response:
    scene = req.to_scene()
    logger.info("[LUDO] Rendering board: players=%d last_roll=%d", len(scene.players), scene.last_roll)
    png = render_ludo_board(scene, get_asset_store(), _avatar_downloader())
    return Response(content=png, media_type=PNG_MEDIA_TYPE)


@router.post("/ttt", response_class=Response)
def tictactoe_board(req: TicTacToeRequest) -> Response:
    expected = req.grid_size * req.grid_size
    if len(req.board) != expected:
        raise HTTPException(
            status_code=400,
            detail=f"board must have gridSize^2 = {expected} cells, got {len(req.board)}",
        )
    png = render_tictactoe_board(req.to_scene(), get_asset_store())
    return Response(content=png, media_type=PNG_MEDIA_TYPE)


@router.post("/ttt/leaderboard", response_class=Response)
def tictactoe_leaderboard(req: LeaderboardRequest) -> Response:
    entries = [LeaderboardEntry(name=s.name, jid=s.jid, score=s.score) for s in req.scores]
    png = render_leaderboard(entries, get_asset_store())
    return Response(content=png, media_type=PNG_MEDIA_TYPE)

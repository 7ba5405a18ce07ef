#!/usr/bin/env python3
"""Render a scene JSON file to PNG without running the API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.api.gamecanvas_api.routers.combat import CombatRequest, EndScreenRequest
from apps.api.gamecanvas_api.routers.games import LeaderboardRequest, LudoRequest, TicTacToeRequest
from packages.gamecanvas_core.render.assets import AssetStore
from packages.gamecanvas_core.render.combat import render_combat_scene, render_end_screen
from packages.gamecanvas_core.render.leaderboard import LeaderboardEntry, render_leaderboard
from packages.gamecanvas_core.render.ludo import render_ludo_board
from packages.gamecanvas_core.render.tictactoe import render_tictactoe_board
from packages.gamecanvas_core.scrape.http import HttpFetcher
from packages.gamecanvas_core.settings import ServiceSettings

KINDS = ("combat", "endscreen", "ludo", "ttt", "leaderboard")


def render(kind: str, payload: dict, assets: AssetStore) -> bytes:
    if kind == "combat":
        return render_combat_scene(CombatRequest.model_validate(payload).to_scene(), assets)
    if kind == "endscreen":
        return render_end_screen(EndScreenRequest.model_validate(payload).text, assets)
    if kind == "ludo":
        fetcher = HttpFetcher()
        return render_ludo_board(LudoRequest.model_validate(payload).to_scene(), assets, fetcher.try_get_bytes)
    if kind == "ttt":
        req = TicTacToeRequest.model_validate(payload)
        if len(req.board) != req.grid_size * req.grid_size:
            raise ValueError(f"board must have {req.grid_size * req.grid_size} cells, got {len(req.board)}")
        return render_tictactoe_board(req.to_scene(), assets)
    if kind == "leaderboard":
        req = LeaderboardRequest.model_validate(payload)
        entries = [LeaderboardEntry(name=s.name, jid=s.jid, score=s.score) for s in req.scores]
        return render_leaderboard(entries, assets)
    raise ValueError(f"Unknown scene kind: {kind}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Render a game scene JSON file to PNG")
    parser.add_argument("kind", choices=KINDS)
    parser.add_argument("scene_path", type=Path)
    parser.add_argument("--out", type=Path, required=True, help="Output PNG path")
    parser.add_argument("--assets", type=Path, default=None, help="Asset root (defaults to settings)")
    args = parser.parse_args()

    settings = ServiceSettings.from_env()
    assets = AssetStore(
        args.assets or settings.assets_dir,
        background_mode=settings.background_mode,
        background_seed=settings.background_seed,
    )

    try:
        payload = json.loads(args.scene_path.read_text(encoding="utf-8"))
        png = render(args.kind, payload, assets)
    except (OSError, ValueError) as exc:
        print(f"Invalid scene: {exc}", file=sys.stderr)
        return 1

    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_bytes(png)
    print(f"Rendered {args.kind} scene: {args.out} ({len(png)} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

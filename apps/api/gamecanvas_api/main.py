"""FastAPI entrypoint for the game canvas service."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packages.gamecanvas_core.render.canvas import RenderEncodeError

from .routers.combat import router as combat_router
from .routers.games import router as games_router
from .routers.scrape import router as scrape_router
from .services.registry import get_asset_store, get_settings

SERVICE_NAME = "Game Canvas Service"
SERVICE_VERSION = "2.2.0"
SERVICE_FEATURES = [
    "Combat scene and end screen rendering",
    "Ludo and Tic-Tac-Toe boards",
    "Tic-Tac-Toe leaderboard cards",
    "DuckDuckGo image search with Pinterest fallback",
    "Klipy v1 sticker search",
    "VS Battles wiki extraction",
    "Imageboard API with web fallback",
]

logging.basicConfig(
    level=getattr(logging, os.environ.get("GAMECANVAS_LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("gamecanvas_api")

app = FastAPI(title="Game Canvas API", version=SERVICE_VERSION)

_cors_origins = list(get_settings().cors_origins)
_cors_allow_credentials = "*" not in _cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(combat_router)
app.include_router(games_router)
app.include_router(scrape_router)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("[REQUEST] Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(RenderEncodeError)
async def _render_encode_error_handler(request: Request, exc: RenderEncodeError):
    logger.error("[RENDER] %s failed to encode (%s): %s", request.url.path, exc.error_code, exc)
    return JSONResponse(status_code=500, content={"detail": "Failed to encode image"})


@app.on_event("startup")
def startup() -> None:
    settings = get_settings()
    logger.info("[STARTUP] Game canvas API starting up at %s", datetime.now(timezone.utc).isoformat())
    assets = get_asset_store()
    if not assets.root.is_dir():
        logger.warning("[STARTUP] Asset directory %s does not exist; renders will use fallbacks", assets.root)
    else:
        logger.info(
            "[STARTUP] Assets at %s (%d backgrounds, mode=%s)",
            assets.root,
            len(assets.list_environments()),
            settings.background_mode,
        )
    if not settings.klipy_api_key:
        logger.warning("[STARTUP] No sticker API key configured; /api/scrape/stickers will answer 500")
    logger.info("[STARTUP] Game canvas API startup complete")


@app.get("/")
def root() -> dict:
    return {
        "status": "online",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "features": SERVICE_FEATURES,
    }


@app.get("/health")
@app.get("/healthz")
def healthz() -> dict[str, str]:
    logger.debug("[HEALTH] Health check requested")
    return {"status": "ok"}

"""Process-wide service settings read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os


WORKSPACE_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ASSETS_DIR = WORKSPACE_ROOT / "assets"
DEFAULT_IMAGEBOARD_URL = "https://safebooru.org/index.php"
BACKGROUND_MODES = {"first", "random"}


def _truthy_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def _int_env(name: str, default: int, *, minimum: int = 1) -> int:
    raw = _first_non_empty(os.environ.get(name))
    if raw is None:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        return default


def _float_env(name: str, default: float, *, minimum: float = 0.5) -> float:
    raw = _first_non_empty(os.environ.get(name))
    if raw is None:
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class ServiceSettings:
    assets_dir: Path
    background_mode: str = "first"
    background_seed: str | None = None
    scrape_timeout_seconds: float = 20.0
    scrape_max_results: int = 50
    klipy_api_key: str | None = None
    imageboard_api_url: str = DEFAULT_IMAGEBOARD_URL
    imageboard_web_url: str = DEFAULT_IMAGEBOARD_URL
    fetch_avatars: bool = True
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        assets_dir = _first_non_empty(os.environ.get("GAMECANVAS_ASSETS_DIR"))
        mode = (_first_non_empty(os.environ.get("GAMECANVAS_BACKGROUND_MODE")) or "first").lower()
        if mode not in BACKGROUND_MODES:
            mode = "first"
        origins = os.environ.get("GAMECANVAS_CORS_ORIGINS", "*")
        return cls(
            assets_dir=Path(assets_dir).resolve() if assets_dir else DEFAULT_ASSETS_DIR,
            background_mode=mode,
            background_seed=_first_non_empty(os.environ.get("GAMECANVAS_BACKGROUND_SEED")),
            scrape_timeout_seconds=_float_env("GAMECANVAS_SCRAPE_TIMEOUT_SECONDS", 20.0),
            scrape_max_results=_int_env("GAMECANVAS_SCRAPE_MAX_RESULTS", 50),
            klipy_api_key=_first_non_empty(
                os.environ.get("GAMECANVAS_KLIPY_API_KEY"),
                os.environ.get("KLIPY_API_KEY"),
            ),
            imageboard_api_url=_first_non_empty(os.environ.get("GAMECANVAS_IMAGEBOARD_API_URL"))
            or DEFAULT_IMAGEBOARD_URL,
            imageboard_web_url=_first_non_empty(os.environ.get("GAMECANVAS_IMAGEBOARD_WEB_URL"))
            or DEFAULT_IMAGEBOARD_URL,
            fetch_avatars=_truthy_env("GAMECANVAS_FETCH_AVATARS", True),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        )

"""Asset resolution and a read-through cache for decoded images and fonts.

Assets are build-time static, so nothing is ever invalidated. Cached images are
shared between requests and must be treated as read-only: every transform in
the renderers returns a new image.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging
import random
import threading

from PIL import Image, ImageFont, UnidentifiedImageError

from ..settings import ServiceSettings
from .sprites import character_sprite_file, enemy_sprite_file

logger = logging.getLogger("gamecanvas_core.render.assets")

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")
MAX_DECODED_PIXELS = 4096 * 4096
DISPLAY_FONT = "fantesy.ttf"

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


def decode_image(source: Union[Path, BinaryIO], label: str) -> Optional[Image.Image]:
    """Decode ``source`` as RGBA, or ``None`` when it is unreadable or too large.

    Only the header is read before the dimension check, so an oversized image
    is rejected without decoding its pixels.
    """
    try:
        with Image.open(source) as raw:
            width, height = raw.size
            if width * height > MAX_DECODED_PIXELS:
                logger.warning("[ASSETS] Refusing to decode %s: %dx%d exceeds pixel limit", label, width, height)
                return None
            return raw.convert("RGBA")
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
        logger.warning("[ASSETS] Failed to decode image %s: %s", label, exc)
        return None


class AssetStore:
    def __init__(
        self,
        root: Path,
        *,
        background_mode: str = "first",
        background_seed: Optional[str] = None,
    ) -> None:
        self.root = Path(root)
        self.background_mode = background_mode
        self._images: dict[Path, Image.Image] = {}
        self._fonts: dict[tuple[str, int], Font] = {}
        self._lock = threading.Lock()
        self._rng = random.Random(background_seed)
        self._rng_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ServiceSettings) -> "AssetStore":
        return cls(
            settings.assets_dir,
            background_mode=settings.background_mode,
            background_seed=settings.background_seed,
        )

    # -- resolution ---------------------------------------------------------

    def asset(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def ui(self, name: str) -> Path:
        return self.asset("rpgasset", "ui", name)

    def font_path(self, name: str = DISPLAY_FONT) -> Path:
        return self.ui(name)

    def character_sprite(self, class_key: str, index: int) -> Path:
        return self.asset("rpgasset", "characters", character_sprite_file(class_key, index))

    def enemy_sprite(self, level: int, index: int, is_boss: bool) -> Path:
        return self.asset("rpgasset", "enemies", enemy_sprite_file(level, index, is_boss))

    def list_environments(self) -> list[Path]:
        env_dir = self.asset("rpgasset", "environment")
        if not env_dir.is_dir():
            return []
        return sorted(
            p for p in env_dir.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES
        )

    def environment(self, name: str = "") -> Optional[Path]:
        """Resolve a background by name, falling back to a default one.

        Only the basename of ``name`` is honoured so callers cannot reach outside
        the environment directory. The default is the first file in sorted order,
        or a seeded random pick when the store runs in ``random`` mode.
        """
        requested = Path(str(name or "").strip()).name
        if requested:
            candidate = self.asset("rpgasset", "environment", requested)
            if candidate.is_file():
                return candidate
            logger.debug("[ASSETS] Background '%s' not found, using default", requested)

        options = self.list_environments()
        if not options:
            return None
        if self.background_mode == "random":
            with self._rng_lock:
                return self._rng.choice(options)
        return options[0]

    def contains(self, path: Path) -> bool:
        root = self.root.resolve()
        resolved = path.resolve()
        return resolved == root or root in resolved.parents

    # -- loading ------------------------------------------------------------

    def load_image(self, path: Optional[Path]) -> Optional[Image.Image]:
        """Decode ``path`` once as RGBA; ``None`` when missing or unreadable."""
        if path is None:
            return None
        key = Path(path)
        with self._lock:
            cached = self._images.get(key)
        if cached is not None:
            return cached
        if not key.is_file():
            logger.debug("[ASSETS] Missing image: %s", key)
            return None
        decoded = decode_image(key, str(key))
        if decoded is None:
            return None
        with self._lock:
            return self._images.setdefault(key, decoded)

    def load_local_image(self, relative: str) -> Optional[Image.Image]:
        candidate = Path(relative)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        if not self.contains(candidate):
            logger.warning("[ASSETS] Refusing to load image outside asset root: %s", relative)
            return None
        return self.load_image(candidate)

    def load_font(self, path: Path, size: int) -> Font:
        key = (str(path), int(size))
        with self._lock:
            cached = self._fonts.get(key)
        if cached is not None:
            return cached
        try:
            font: Font = ImageFont.truetype(str(path), int(size))
        except OSError:
            logger.debug("[ASSETS] Font %s unavailable, using built-in default", path)
            font = ImageFont.load_default(size=int(size))
        with self._lock:
            return self._fonts.setdefault(key, font)

    def display_font(self, size: int) -> Font:
        return self.load_font(self.font_path(), size)

"""Thin drawing adapter over a Pillow image.

The canvas is an opaque RGB surface drawn through an ``RGBA`` ``ImageDraw`` so
translucent colors blend into what is already there, the same way layered
overlays work in the scene renderers.
"""

from __future__ import annotations

from io import BytesIO
from typing import Optional, Sequence
import math

from PIL import Image, ImageDraw, ImageOps

from .assets import Font

Color = tuple[int, int, int, int]
Point = tuple[float, float]

BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)


class RenderEncodeError(RuntimeError):
    def __init__(self, message: str, *, error_code: str = "encode_failed") -> None:
        super().__init__(message)
        self.error_code = error_code


def parse_hex_color(value: str) -> Color:
    """Parse ``#RRGGBB`` or ``#RRGGBBAA``; anything else is opaque black."""
    text = str(value or "").strip().lstrip("#")
    if len(text) not in (6, 8):
        return BLACK
    try:
        channels = [int(text[i : i + 2], 16) for i in range(0, len(text), 2)]
    except ValueError:
        return BLACK
    if len(channels) == 3:
        channels.append(255)
    return (channels[0], channels[1], channels[2], channels[3])


def with_alpha(color: Color, alpha: float) -> Color:
    return (color[0], color[1], color[2], int(alpha * 255))


def resize_to_width(image: Image.Image, width: int) -> Image.Image:
    """Resize to ``width`` keeping the aspect ratio (Lanczos)."""
    width = max(1, int(width))
    height = max(1, int(width * image.height / image.width + 0.5))
    return image.resize((width, height), Image.LANCZOS)


def resize_exact(image: Image.Image, width: int, height: int, *, smooth: bool = True) -> Image.Image:
    resample = Image.LANCZOS if smooth else Image.NEAREST
    return image.resize((max(1, int(width)), max(1, int(height))), resample)


def tint(image: Image.Image, color: Color) -> Image.Image:
    """Blend every pixel toward ``color`` by its alpha, keeping transparency."""
    rgba = image.convert("RGBA")
    overlay = Image.new("RGB", rgba.size, color[:3])
    blended = Image.blend(rgba.convert("RGB"), overlay, color[3] / 255.0)
    blended.putalpha(rgba.getchannel("A"))
    return blended


def circular_crop(image: Image.Image) -> Image.Image:
    """Keep only pixels within the inscribed circle of a square image."""
    size = image.width
    radius = size / 2
    mask = Image.new("L", (size, size), 0)
    mask.putdata(
        [
            255 if math.hypot(x - radius, y - radius) <= radius else 0
            for y in range(size)
            for x in range(size)
        ]
    )
    source = image.convert("RGBA")
    alpha = Image.composite(source.getchannel("A"), mask, mask)
    out = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    out.paste(source, (0, 0), alpha)
    return out


class Canvas:
    def __init__(self, width: int, height: int, background: Color = BLACK) -> None:
        self.image = Image.new("RGB", (int(width), int(height)), background[:3])
        self.draw = ImageDraw.Draw(self.image, "RGBA")

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def clear(self, color: Color) -> None:
        self.image.paste(color[:3], (0, 0, self.width, self.height))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        if w <= 0 or h <= 0:
            return
        self.draw.rectangle((x, y, x + max(w - 1, 0), y + max(h - 1, 0)), fill=color)

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: Color, width: int = 1) -> None:
        if w <= 0 or h <= 0:
            return
        half = width / 2
        self.draw.rectangle(
            (x - half, y - half, x + w + half, y + h + half),
            outline=color,
            width=int(width),
        )

    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        self.draw.ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=color)

    def stroke_circle(self, cx: float, cy: float, radius: float, color: Color, width: int = 1) -> None:
        # Pillow strokes inward from the bounding box; widen it so the stroke straddles the radius.
        outer = radius + width / 2
        self.draw.ellipse(
            (cx - outer, cy - outer, cx + outer, cy + outer),
            outline=color,
            width=int(width),
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, color: Color, width: int = 1) -> None:
        self.draw.line((x1, y1, x2, y2), fill=color, width=int(width))

    def fill_polygon(self, points: Sequence[Point], color: Color) -> None:
        self.draw.polygon(list(points), fill=color)

    def stroke_polygon(self, points: Sequence[Point], color: Color, width: int = 1) -> None:
        closed = list(points) + [points[0]]
        self.draw.line(closed, fill=color, width=int(width), joint="curve")

    def text(
        self,
        value: str,
        x: float,
        y: float,
        font: Font,
        color: Color,
        *,
        anchor: str = "la",
    ) -> None:
        if not value:
            return
        self.draw.text((x, y), value, font=font, fill=color, anchor=anchor)

    def blit(self, image: Optional[Image.Image], x: float, y: float) -> None:
        """Alpha-composite ``image`` with its top-left at ``(x, y)``; clipped to the canvas."""
        if image is None:
            return
        mask = image if image.mode == "RGBA" else None
        self.image.paste(image, (int(x), int(y)), mask)

    def cover(self, image: Image.Image) -> None:
        """Fill the whole canvas with ``image``, center-cropping the overflow."""
        fitted = ImageOps.fit(image, (self.width, self.height), Image.LANCZOS, centering=(0.5, 0.5))
        self.blit(fitted, 0, 0)

    def radial_shadow(self, cx: float, cy: float, radius: float, alpha: float) -> None:
        """Soft black disc fading from ``alpha`` at the center to clear at ``radius``."""
        diameter = int(radius * 2)
        if diameter < 1:
            return
        gradient = Image.radial_gradient("L")
        rim = gradient.getpixel((gradient.width // 2, 0)) or 255
        mask = gradient.resize((diameter, diameter), Image.BILINEAR).point(
            lambda v: int(max(0.0, 1.0 - v / rim) * 255 * alpha)
        )
        self.image.paste((0, 0, 0), (int(cx - radius), int(cy - radius)), mask)

    def overlay(self, color: Color) -> None:
        self.fill_rect(0, 0, self.width, self.height, color)

    def to_png_bytes(self) -> bytes:
        buf = BytesIO()
        try:
            self.image.save(buf, format="PNG")
        except (OSError, ValueError) as exc:
            raise RenderEncodeError(f"Failed to encode image: {exc}") from exc
        return buf.getvalue()

"""Combat scene compositor.

Layers are drawn strictly back to front: background, enemies (depth sorted),
static UI chrome, the main player's segmented bars, the player portrait and
field sprite, then the rank banner text. Chrome and portrait coordinates are
authored relative to a fixed origin and translated by ``OFFSET_X/OFFSET_Y``.
Any missing asset drops only the element that needed it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import logging
import math

from PIL import Image

from .assets import AssetStore
from .canvas import (
    BLACK,
    WHITE,
    Canvas,
    Color,
    parse_hex_color,
    resize_exact,
    resize_to_width,
    tint,
)

logger = logging.getLogger("gamecanvas_core.render.combat")

CANVAS_W = 1024
CANVAS_H = 687
OFFSET_X = 694
OFFSET_Y = 356

FALLBACK_BACKGROUND = parse_hex_color("#1a1a1a")
DARKEN_OVERLAY: Color = (0, 0, 0, 102)
DEFEAT_TINT: Color = (255, 0, 0, 100)
SHADOW_ALPHA = 0.6

ENEMY_SPRITE_WIDTH = 190
BOSS_SCALE = 1.5
ENEMY_ORIGIN = (780.0, 160.0)
ENEMY_STEP_X = 130.0
ENEMY_STEP_Y = 110.0
ENEMY_GROUP_SIZE = 4
ENEMY_GROUP_SHIFT_X = -250.0
ENEMY_SHADOW_LIFT = 10
ENEMY_SHADOW_RATIO = 0.4
ENEMY_HP_BAR_FILE = "hp5.png"
ENEMY_HP_BAR_WIDTH = 100
ENEMY_HP_BAR_HEIGHT = 12
ENEMY_HP_BAR_LIFT = 15

BAR_SEGMENTS = 3
BAR_SPRITE_STEPS = 5

PORTRAIT_WIDTH = 314
PORTRAIT_CROP_RATIO = 0.3
PORTRAIT_ANCHOR = (-660, 191)
FIELD_SPRITE_WIDTH = 122
FIELD_SPRITE_SHIFT = (-500, 10)
FIELD_SHADOW_RADIUS = 150

BANNER_BOX = (-496, -339, 573, 118)
BANNER_FONT_SIZE = 70
# Display font metrics sit low; lift the centered label to look centered in the banner art.
BANNER_TEXT_NUDGE_Y = 30
DEFAULT_RANK = "F"
PVP_BANNER = "PVP MATCH"

END_SCREEN_FONT_SIZE = 120


@dataclass(frozen=True)
class UiElement:
    name: str
    x: int
    y: int
    width: int
    height: int


UI_CHROME: tuple[UiElement, ...] = (
    UiElement("player_state.png", -716, 113, 453, 244),
    UiElement("heart.png", -678, 209, 38, 47),
    UiElement("mana.png", -673, 256, 29, 44),
    UiElement("Options_menu.png", -97, 99, 443, 258),
    UiElement("banner.png", -496, -339, 573, 118),
)


@dataclass(frozen=True)
class BarLayout:
    prefix: str
    xs: tuple[int, ...]
    y: int
    width: int
    height: int


HP_BAR = BarLayout("hp", (-640, -550, -459), 209, 121, 47)
ENERGY_BAR = BarLayout("mana", (-644, -555, -465), 256, 119, 42)


@dataclass
class Player:
    name: str = ""
    class_key: str = "FIGHTER"
    level: int = 0
    current_hp: int = 0
    max_hp: int = 0
    energy: int = 0
    max_energy: int = 0
    sprite_index: int = 0
    adventurer_rank: str = ""


@dataclass
class Enemy:
    """One enemy slot in the scene.

    ``sprite_index`` is carried for wire compatibility only; the sprite and the
    slot are both chosen from the enemy's position in ``CombatScene.enemies``.
    """

    name: str = ""
    current_hp: int = 0
    max_hp: int = 0
    is_boss: bool = False
    just_died: bool = False
    sprite_index: int = 0

    @property
    def visible(self) -> bool:
        return self.current_hp > 0 or self.just_died

    def hp_fraction(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return self.current_hp / self.max_hp


@dataclass
class CombatScene:
    players: list[Player] = field(default_factory=list)
    enemies: list[Enemy] = field(default_factory=list)
    combat_type: str = "PVE"
    rank: str = ""
    background: str = ""

    @property
    def is_pvp(self) -> bool:
        return str(self.combat_type or "").strip().upper() == "PVP"


@dataclass(frozen=True)
class PlacedSprite:
    """An enemy sprite with its final screen position; ``y`` is the depth key."""

    index: int
    image: Image.Image
    x: float
    y: float
    hp_fraction: float


def to_screen(x: float, y: float) -> tuple[int, int]:
    return int(x + OFFSET_X), int(y + OFFSET_Y)


def average_level(players: list[Player]) -> int:
    if not players:
        return 1
    return sum(int(p.level) for p in players) // len(players)


def enemy_slot(index: int) -> tuple[float, float]:
    """Screen position of the enemy at ``index`` in the staggered 2x2 grid."""
    x, y = ENEMY_ORIGIN
    sub = index % ENEMY_GROUP_SIZE
    if sub in (1, 2):
        x -= ENEMY_STEP_X
    elif sub == 3:
        x -= ENEMY_STEP_X * 2
    if sub in (1, 3):
        y += ENEMY_STEP_Y
    x += (index // ENEMY_GROUP_SIZE) * ENEMY_GROUP_SHIFT_X
    return x, y


def layout_enemies(scene: CombatScene, assets: AssetStore) -> list[PlacedSprite]:
    """Resolve, scale and position every drawable enemy, in input order."""
    level = average_level(scene.players)
    placed: list[PlacedSprite] = []
    for index, enemy in enumerate(scene.enemies):
        if not enemy.visible:
            continue
        sprite = assets.load_image(assets.enemy_sprite(level, index, enemy.is_boss))
        if sprite is None:
            logger.debug("[COMBAT] Enemy %d sprite unavailable, skipping", index)
            continue
        width = ENEMY_SPRITE_WIDTH * BOSS_SCALE if enemy.is_boss else ENEMY_SPRITE_WIDTH
        sprite = resize_to_width(sprite, int(width))
        if enemy.current_hp <= 0:
            sprite = tint(sprite, DEFEAT_TINT)
        x, y = enemy_slot(index)
        placed.append(PlacedSprite(index, sprite, x, y, enemy.hp_fraction()))
    return placed


def depth_sorted(items: list[PlacedSprite]) -> list[PlacedSprite]:
    """Painter's order: smaller y is further back and is drawn first."""
    return sorted(items, key=lambda item: item.y)


def segment_fills(current: float, maximum: float, segments: int = BAR_SEGMENTS) -> list[float]:
    capacity = maximum / segments
    return [max(0.0, min(capacity, current - i * capacity)) for i in range(segments)]


def segment_sprite_number(fill: float, capacity: float) -> int:
    """Map a segment's fill to one of the ``1..5`` pip sprites (half rounds up)."""
    if capacity <= 0:
        capacity = 1.0
    percent = fill / capacity
    step = math.floor(percent * (BAR_SPRITE_STEPS - 1) + 0.5) + 1
    return int(min(BAR_SPRITE_STEPS, max(1, step)))


def banner_text(scene: CombatScene) -> Optional[str]:
    if not scene.rank and not scene.players:
        return None
    if scene.is_pvp:
        return PVP_BANNER
    rank = scene.rank or (scene.players[0].adventurer_rank if scene.players else "") or DEFAULT_RANK
    return f"{rank} RANK"


def _draw_background(canvas: Canvas, scene: CombatScene, assets: AssetStore) -> None:
    background = assets.load_image(assets.environment(scene.background))
    if background is not None:
        canvas.cover(background)
    else:
        canvas.clear(FALLBACK_BACKGROUND)
    canvas.overlay(DARKEN_OVERLAY)


def _draw_enemies(canvas: Canvas, scene: CombatScene, assets: AssetStore) -> None:
    hp_bar = assets.load_image(assets.ui(ENEMY_HP_BAR_FILE))
    for mob in depth_sorted(layout_enemies(scene, assets)):
        w, h = mob.image.size
        canvas.radial_shadow(mob.x + w / 2, mob.y + h - ENEMY_SHADOW_LIFT, w * ENEMY_SHADOW_RATIO, SHADOW_ALPHA)
        canvas.blit(mob.image, mob.x, mob.y)
        if mob.hp_fraction <= 0 or hp_bar is None:
            continue
        bar_width = max(1, int(ENEMY_HP_BAR_WIDTH * mob.hp_fraction))
        bar = resize_exact(hp_bar, bar_width, ENEMY_HP_BAR_HEIGHT, smooth=False)
        canvas.blit(bar, mob.x + (w - ENEMY_HP_BAR_WIDTH) / 2, mob.y - ENEMY_HP_BAR_LIFT)


def _draw_chrome(canvas: Canvas, assets: AssetStore) -> None:
    for element in UI_CHROME:
        image = assets.load_image(assets.ui(element.name))
        if image is None:
            continue
        canvas.blit(resize_exact(image, element.width, element.height), *to_screen(element.x, element.y))


def _draw_bar(canvas: Canvas, assets: AssetStore, layout: BarLayout, current: int, maximum: int) -> None:
    capacity = maximum / BAR_SEGMENTS
    for i, fill in enumerate(segment_fills(current, maximum)):
        number = segment_sprite_number(fill, capacity)
        image = assets.load_image(assets.ui(f"{layout.prefix}{number}.png"))
        if image is None:
            continue
        segment = resize_exact(image, layout.width, layout.height, smooth=False)
        canvas.blit(segment, *to_screen(layout.xs[i], layout.y))


def _draw_player(canvas: Canvas, scene: CombatScene, player: Player, assets: AssetStore) -> None:
    sprite = assets.load_image(assets.character_sprite(player.class_key, player.sprite_index))
    if sprite is None:
        logger.debug("[COMBAT] Player sprite for class '%s' unavailable", player.class_key)
        return
    if player.current_hp <= 0:
        sprite = tint(sprite, DEFEAT_TINT)
    sprite = resize_to_width(sprite, PORTRAIT_WIDTH)

    crop_h = int(sprite.height * PORTRAIT_CROP_RATIO)
    if crop_h > 0:
        bust = sprite.crop((0, 0, sprite.width, crop_h))
        x, y = to_screen(*PORTRAIT_ANCHOR)
        canvas.blit(bust, x, y - crop_h)

    if scene.is_pvp:
        return
    small = resize_to_width(sprite, FIELD_SPRITE_WIDTH)
    sx = int(ENEMY_ORIGIN[0] + FIELD_SPRITE_SHIFT[0])
    sy = int(ENEMY_ORIGIN[1] + FIELD_SPRITE_SHIFT[1])
    canvas.radial_shadow(sx + FIELD_SPRITE_WIDTH / 2, sy + small.height, FIELD_SHADOW_RADIUS, SHADOW_ALPHA)
    canvas.blit(small, sx, sy)


def _draw_banner(canvas: Canvas, scene: CombatScene, assets: AssetStore) -> None:
    text = banner_text(scene)
    if text is None:
        return
    bx, by = to_screen(BANNER_BOX[0], BANNER_BOX[1])
    bw, bh = BANNER_BOX[2], BANNER_BOX[3]
    font = assets.display_font(BANNER_FONT_SIZE)
    canvas.text(text, bx + bw / 2, by + bh / 2 - BANNER_TEXT_NUDGE_Y, font, BLACK, anchor="mm")


def compose_combat_scene(scene: CombatScene, assets: AssetStore) -> Canvas:
    canvas = Canvas(CANVAS_W, CANVAS_H, FALLBACK_BACKGROUND)
    _draw_background(canvas, scene, assets)
    _draw_enemies(canvas, scene, assets)
    _draw_chrome(canvas, assets)
    if scene.players:
        player = scene.players[0]
        _draw_bar(canvas, assets, HP_BAR, player.current_hp, player.max_hp)
        _draw_bar(canvas, assets, ENERGY_BAR, player.energy, player.max_energy)
        _draw_player(canvas, scene, player, assets)
    _draw_banner(canvas, scene, assets)
    return canvas


def render_combat_scene(scene: CombatScene, assets: AssetStore) -> bytes:
    return compose_combat_scene(scene, assets).to_png_bytes()


def compose_end_screen(text: str, assets: AssetStore) -> Canvas:
    canvas = Canvas(CANVAS_W, CANVAS_H, WHITE)
    font = assets.display_font(END_SCREEN_FONT_SIZE)
    canvas.text(text, CANVAS_W / 2, CANVAS_H / 2, font, BLACK, anchor="mm")
    return canvas


def render_end_screen(text: str, assets: AssetStore) -> bytes:
    return compose_end_screen(text, assets).to_png_bytes()

"""Static sprite tables for the combat renderer.

Filenames match the shipped asset pack verbatim, typos included.
"""

from __future__ import annotations

DEFAULT_CHARACTER_CLASS = "FIGHTER"
DEFAULT_ENEMY_FILE = "fire (5).png"


def _numbered(stem: str, first: int, last: int) -> tuple[str, ...]:
    return tuple(f"{stem} ({n}).png" for n in range(first, last + 1))


CHARACTER_SPRITES: dict[str, tuple[str, ...]] = {
    "FIGHTER": ("Fighter1.png", "fighter2.png", "fighter3.png"),
    "SCOUT": ("scout1.png", "scout2.png", "scout3.png", "sout4.png"),
    "APPRENTICE": ("apprentice1.png", "apprentice2.png", "apprentice3.png", "apprentice4.png"),
    "ACOLYTE": ("acolyte.png",),
    "WARRIOR": ("warrior1.png", "warrior2.png", "warrior3.png", "warrior4.png"),
    "WARLORD": ("Warlord1.png", "warlord2.png", "warlord3.png"),
    "BERSERKER": ("Berserker1.png", "Berserker2.png", "Berserker3.png"),
    "DOOMSLAYER": ("DoomSlayer1.png", "DoomSlayer2.png"),
    "PALADIN": _numbered("Paladin", 1, 8),
    "TEMPLAR": _numbered("Templar", 1, 9),
    "ROGUE": _numbered("Rogue", 1, 4),
    "NIGHTBLADE": _numbered("Nightblade", 1, 6),
    "MONK": ("Monk.png",),
    "ZENMASTER": ("zenmaster.png",),
    "NINJA": _numbered("ninja", 1, 5),
    "MAGE": _numbered("archmage", 1, 5),
    "ARCHMAGE": _numbered("archmage", 6, 12),
    "WARLOCK": _numbered("voidwalker", 1, 4),
    "VOIDWALKER": _numbered("voidwalker", 5, 9),
    "ELEMENTALIST": _numbered("elementalist", 1, 4),
    "CLERIC": _numbered("cleric", 1, 6),
    "SAINT": _numbered("saint", 1, 4),
    "DRUID": _numbered("druid", 1, 6),
    "ARCHDRUID": _numbered("archdruid", 1, 9),
    "NECROMANCER": ("necromancer.png",),
    "LICH": ("lich.png",),
    "MERCHANT": ("merchant.png",),
    "TYCOON": ("tycoon.png",),
    "CHRONOMANCER": _numbered("timelord", 1, 5),
    "TIMELORD": _numbered("timelord", 1, 5),
    "SAMURAI": _numbered("samuri", 1, 11),
    "GOD_HAND": _numbered("God_hand", 1, 2),
    "DRAGONSLAYER": ("warrior1.png", "warrior2.png", "warrior3.png", "warrior4.png"),
    "REAPER": ("necromancer.png",),
    "BARD": ("acolyte.png",),
    "ARTIFICER": ("apprentice1.png", "apprentice2.png", "apprentice3.png", "apprentice4.png"),
    "AVATAR": _numbered("elementalist", 1, 4),
}

ENEMY_SPRITES: dict[str, tuple[str, ...]] = {
    "FIRE_LOW": ("fire (5).png", "fire (6).png"),
    "WATER_LOW": ("water (4).png", "water (6).png"),
    "EARTH_MID": _numbered("earth", 1, 3),
    "ICE_MID": _numbered("ice", 1, 3),
    "FIRE_HIGH": ("fire (7).png", "fire (8).png"),
    "WATER_HIGH": ("water (7).png",),
    "EARTH_HIGH": ("earth (4).png", "earth (5).png"),
    "MUTATED": _numbered("mutated", 1, 7),
    "HYBRID": _numbered("hybrides", 1, 7),
    "FIRE_ELITE": ("fire (11).png",),
}

BOSS_SPRITES: dict[str, tuple[str, ...]] = {
    "MID_BOSSES": _numbered("midlevelbosses", 1, 7),
    "HIGH_BOSSES": _numbered("highlevelbosses", 7, 13),
    "CALAMITY": _numbered("calamaties", 1, 6),
}

# (inclusive upper level bound, group); levels above the last bound use the fallthrough group.
ENEMY_LEVEL_BANDS: tuple[tuple[int, str], ...] = (
    (10, "FIRE_LOW"),
    (20, "WATER_LOW"),
    (30, "EARTH_MID"),
    (40, "ICE_MID"),
    (50, "FIRE_HIGH"),
    (60, "WATER_HIGH"),
    (70, "EARTH_HIGH"),
    (80, "MUTATED"),
    (90, "HYBRID"),
)
ENEMY_TOP_GROUP = "FIRE_ELITE"

BOSS_LEVEL_BANDS: tuple[tuple[int, str], ...] = (
    (60, "MID_BOSSES"),
    (90, "HIGH_BOSSES"),
)
BOSS_TOP_GROUP = "CALAMITY"


def _banded_group(level: int, bands: tuple[tuple[int, str], ...], top: str) -> str:
    for upper, group in bands:
        if level <= upper:
            return group
    return top


def pick(candidates: tuple[str, ...], index: int) -> str:
    """Rotate through ``candidates`` by ``index``; always in bounds."""
    if not candidates:
        return ""
    return candidates[int(index) % len(candidates)]


def character_sprite_file(class_key: str, index: int) -> str:
    key = str(class_key or "").strip().upper()
    candidates = CHARACTER_SPRITES.get(key) or CHARACTER_SPRITES[DEFAULT_CHARACTER_CLASS]
    return pick(candidates, index)


def enemy_sprite_file(level: int, index: int, is_boss: bool) -> str:
    if is_boss:
        group = BOSS_SPRITES.get(_banded_group(level, BOSS_LEVEL_BANDS, BOSS_TOP_GROUP), ())
    else:
        group = ENEMY_SPRITES.get(_banded_group(level, ENEMY_LEVEL_BANDS, ENEMY_TOP_GROUP), ())
    return pick(group, index) or DEFAULT_ENEMY_FILE

"""Combat scene and end screen rendering endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel, ConfigDict, Field

from packages.gamecanvas_core.render.combat import (
    CombatScene,
    Enemy,
    Player,
    render_combat_scene,
    render_end_screen,
)

from ..services.registry import get_asset_store

logger = logging.getLogger("gamecanvas_api.combat")

router = APIRouter(prefix="/api/combat", tags=["combat"])

PNG_MEDIA_TYPE = "image/png"


class PlayerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    class_key: str = Field(default="FIGHTER", alias="class")
    level: int = 0
    hp: int = 0
    current_hp: Optional[int] = Field(default=None, alias="currentHP")
    max_hp: int = Field(default=0, alias="maxHp")
    energy: int = 0
    max_energy: int = Field(default=0, alias="maxEnergy")
    adventurer_rank: str = Field(default="", alias="adventurerRank")
    sprite_index: int = Field(default=0, alias="spriteIndex")

    def to_player(self) -> Player:
        return Player(
            name=self.name,
            class_key=self.class_key,
            level=max(0, self.level),
            current_hp=self.current_hp if self.current_hp is not None else self.hp,
            max_hp=self.max_hp,
            energy=self.energy,
            max_energy=self.max_energy,
            sprite_index=self.sprite_index,
            adventurer_rank=self.adventurer_rank,
        )


class EnemyPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    current_hp: int = Field(default=0, alias="currentHP")
    max_hp: int = Field(default=0, alias="maxHp")
    is_boss: bool = Field(default=False, alias="isBoss")
    just_died: bool = Field(default=False, alias="justDied")
    sprite_index: int = Field(default=0, alias="spriteIndex")

    def to_enemy(self) -> Enemy:
        return Enemy(
            name=self.name,
            current_hp=self.current_hp,
            max_hp=self.max_hp,
            is_boss=self.is_boss,
            just_died=self.just_died,
            sprite_index=self.sprite_index,
        )


class CombatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    players: list[PlayerPayload] = Field(default_factory=list)
    enemies: list[EnemyPayload] = Field(default_factory=list)
    combat_type: str = Field(default="PVE", alias="combatType")
    rank: str = ""
    background: str = Field(default="", description="Environment file name, basename only")

    def to_scene(self) -> CombatScene:
        return CombatScene(
            players=[p.to_player() for p in self.players],
            enemies=[e.to_enemy() for e in self.enemies],
            combat_type=self.combat_type,
            rank=self.rank,
            background=self.background,
        )


class EndScreenRequest(BaseModel):
    text: str = ""


@router.post("", response_class=Response)
def combat_image(req: CombatRequest) -> Response:
    scene = req.to_scene()
    logger.info(
        "[COMBAT] Rendering %s scene: players=%d enemies=%d",
        "PVP" if scene.is_pvp else "PVE",
        len(scene.players),
        len(scene.enemies),
    )
    return Response(content=render_combat_scene(scene, get_asset_store()), media_type=PNG_MEDIA_TYPE)


@router.post("/endscreen", response_class=Response)
def combat_end_screen(req: EndScreenRequest) -> Response:
    return Response(content=render_end_screen(req.text, get_asset_store()), media_type=PNG_MEDIA_TYPE)

"""Component data attached to entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


def entity_ref(**kwargs):
    """Dataclass field holding another entity's id (remapped on load)."""
    return field(metadata={"entity_ref": True}, **kwargs)


class EquipmentSlot(str, Enum):
    MELEE = "melee"
    SHIELD = "shield"


@dataclass
class Position:
    x: int
    y: int


@dataclass
class Renderable:
    glyph: str
    fg: str = "white"
    bg: str = "black"
    render_order: int = 1


@dataclass
class Player:
    pass


@dataclass
class Monster:
    pass


@dataclass
class Name:
    name: str


@dataclass
class Viewshed:
    range: int
    visible_tiles: list[tuple[int, int]] = field(default_factory=list)
    dirty: bool = True


@dataclass
class BlocksTile:
    pass


@dataclass
class CombatStats:
    max_hp: int
    hp: int
    defense: int
    power: int


@dataclass
class Item:
    pass


@dataclass
class Consumable:
    pass


@dataclass
class ProvidesHealing:
    heal_amount: int


@dataclass
class Ranged:
    range: int


@dataclass
class InflictsDamage:
    damage: int


@dataclass
class AreaOfEffect:
    radius: int


@dataclass
class Equippable:
    slot: EquipmentSlot


@dataclass
class Equipped:
    owner: int = entity_ref()
    slot: EquipmentSlot = EquipmentSlot.MELEE


@dataclass
class InBackpack:
    owner: int = entity_ref()


@dataclass
class MeleePowerBonus:
    power: int


@dataclass
class DefenseBonus:
    defense: int


@dataclass
class SufferDamage:
    amounts: list[int] = field(default_factory=list)


# Intents: written by input/AI, consumed and removed by the system pipeline.


@dataclass
class WantsToMelee:
    target: int = entity_ref()


@dataclass
class WantsToPickupItem:
    collected_by: int = entity_ref()
    item: int = entity_ref()


@dataclass
class WantsToUseItem:
    item: int = entity_ref()
    target: tuple[int, int] | None = None


@dataclass
class WantsToDropItem:
    item: int = entity_ref()


@dataclass
class WantsToRemoveItem:
    item: int = entity_ref()


SERIALIZABLE_COMPONENTS: tuple[type, ...] = (
    AreaOfEffect,
    BlocksTile,
    CombatStats,
    Consumable,
    DefenseBonus,
    Equippable,
    Equipped,
    InBackpack,
    InflictsDamage,
    Item,
    MeleePowerBonus,
    Monster,
    Name,
    Player,
    Position,
    ProvidesHealing,
    Ranged,
    Renderable,
    SufferDamage,
    Viewshed,
    WantsToDropItem,
    WantsToMelee,
    WantsToPickupItem,
    WantsToRemoveItem,
    WantsToUseItem,
)


def add_damage(existing: SufferDamage | None, amount: int) -> SufferDamage:
    if existing is None:
        return SufferDamage(amounts=[amount])
    existing.amounts.append(amount)
    return existing

"""Depth-scaled spawn tables and entity factories."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from delve.sim.components import (
    AreaOfEffect,
    BlocksTile,
    CombatStats,
    Consumable,
    DefenseBonus,
    Equippable,
    EquipmentSlot,
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
    Viewshed,
)
from delve.sim.world import World

PLAYER_VIEW_RANGE = 8
MONSTER_VIEW_RANGE = 8
MAX_SPAWNS_PER_AREA = 4


@dataclass(frozen=True)
class SpawnPlan:
    """Where the builder wants things spawned; read-only once built."""

    start: tuple[int, int]
    stairs: tuple[int, int]
    spawns: Mapping[tuple[int, int], str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "spawns", MappingProxyType(dict(self.spawns)))


@dataclass
class RandomTable:
    entries: list[tuple[str, int]] = field(default_factory=list)

    def add(self, name: str, weight: int) -> "RandomTable":
        if weight > 0:
            self.entries.append((name, weight))
        return self

    @property
    def total_weight(self) -> int:
        return sum(weight for _, weight in self.entries)

    def roll(self, rng: random.Random) -> str | None:
        total = self.total_weight
        if total == 0:
            return None
        roll = rng.randint(0, total - 1)
        for name, weight in self.entries:
            if roll < weight:
                return name
            roll -= weight
        return None


def spawn_table(depth: int) -> RandomTable:
    return (
        RandomTable()
        .add("Goblin", 10)
        .add("Orc", 1 + depth)
        .add("Health Potion", 7)
        .add("Fireball Scroll", 2 + depth)
        .add("Magic Missile Scroll", 4)
        .add("Dagger", 3)
        .add("Shield", 3)
        .add("Longsword", depth - 5)
        .add("Tower Shield", depth - 5)
    )


def spawn_count(rng: random.Random, depth: int) -> int:
    return rng.randint(1, MAX_SPAWNS_PER_AREA + 3) + (depth - 1) - 3


def plan_area_spawns(
    area: list[tuple[int, int]],
    depth: int,
    rng: random.Random,
    *,
    reserved: set[tuple[int, int]],
    plan: dict[tuple[int, int], str],
) -> None:
    """Assign spawn-table draws to random free tiles of ``area``, in place."""
    candidates = [point for point in area if point not in reserved and point not in plan]
    if not candidates:
        return
    table = spawn_table(depth)
    for _ in range(spawn_count(rng, depth)):
        for _attempt in range(20):
            point = rng.choice(candidates)
            if point not in plan:
                name = table.roll(rng)
                if name is not None:
                    plan[point] = name
                break


def spawn_player(world: World, x: int, y: int) -> int:
    return world.create_entity(
        Position(x=x, y=y),
        Renderable(glyph="@", fg="yellow", render_order=0),
        Player(),
        Viewshed(range=PLAYER_VIEW_RANGE),
        Name(name="Player"),
        CombatStats(max_hp=30, hp=30, defense=2, power=5),
    )


def spawn_entities(world: World, plan: SpawnPlan) -> list[int]:
    for point in (plan.start, plan.stairs):
        if point in plan.spawns:
            raise ValueError(f"Spawn plan targets reserved tile {point}")
    created = []
    for (x, y), name in sorted(plan.spawns.items()):
        factory = SPAWN_FACTORIES.get(name)
        if factory is None:
            raise KeyError(f"No spawn factory named {name!r}")
        created.append(factory(world, x, y))
    return created


def goblin(world: World, x: int, y: int) -> int:
    return _monster(world, x, y, glyph="g", name="Goblin", hp=8, defense=1, power=3)


def orc(world: World, x: int, y: int) -> int:
    return _monster(world, x, y, glyph="o", name="Orc", hp=16, defense=1, power=4)


def health_potion(world: World, x: int, y: int) -> int:
    return _item(world, x, y, "!", "magenta", "Health Potion", Consumable(), ProvidesHealing(heal_amount=8))


def magic_missile_scroll(world: World, x: int, y: int) -> int:
    return _item(
        world, x, y, ")", "cyan", "Magic Missile Scroll",
        Consumable(), Ranged(range=6), InflictsDamage(damage=8),
    )


def fireball_scroll(world: World, x: int, y: int) -> int:
    return _item(
        world, x, y, ")", "orange1", "Fireball Scroll",
        Consumable(), Ranged(range=6), InflictsDamage(damage=20), AreaOfEffect(radius=3),
    )


def dagger(world: World, x: int, y: int) -> int:
    return _item(
        world, x, y, "/", "cyan", "Dagger",
        Equippable(slot=EquipmentSlot.MELEE), MeleePowerBonus(power=2),
    )


def longsword(world: World, x: int, y: int) -> int:
    return _item(
        world, x, y, "/", "yellow", "Longsword",
        Equippable(slot=EquipmentSlot.MELEE), MeleePowerBonus(power=4),
    )


def shield(world: World, x: int, y: int) -> int:
    return _item(
        world, x, y, "(", "cyan", "Shield",
        Equippable(slot=EquipmentSlot.SHIELD), DefenseBonus(defense=1),
    )


def tower_shield(world: World, x: int, y: int) -> int:
    return _item(
        world, x, y, "(", "yellow", "Tower Shield",
        Equippable(slot=EquipmentSlot.SHIELD), DefenseBonus(defense=3),
    )


SPAWN_FACTORIES: dict[str, Callable[[World, int, int], int]] = {
    "Goblin": goblin,
    "Orc": orc,
    "Health Potion": health_potion,
    "Fireball Scroll": fireball_scroll,
    "Magic Missile Scroll": magic_missile_scroll,
    "Dagger": dagger,
    "Shield": shield,
    "Longsword": longsword,
    "Tower Shield": tower_shield,
}


def _monster(
    world: World, x: int, y: int, *, glyph: str, name: str, hp: int, defense: int, power: int
) -> int:
    return world.create_entity(
        Position(x=x, y=y),
        Renderable(glyph=glyph, fg="red", render_order=1),
        Viewshed(range=MONSTER_VIEW_RANGE),
        Monster(),
        Name(name=name),
        BlocksTile(),
        CombatStats(max_hp=hp, hp=hp, defense=defense, power=power),
    )


def _item(world: World, x: int, y: int, glyph: str, fg: str, name: str, *extra) -> int:
    return world.create_entity(
        Position(x=x, y=y),
        Renderable(glyph=glyph, fg=fg, render_order=2),
        Name(name=name),
        Item(),
        *extra,
    )

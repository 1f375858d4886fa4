"""Per-turn systems, run in a fixed order by ``run_systems``."""

from __future__ import annotations

import logging

from delve.sim.components import (
    AreaOfEffect,
    BlocksTile,
    CombatStats,
    Consumable,
    DefenseBonus,
    Equippable,
    Equipped,
    InBackpack,
    InflictsDamage,
    MeleePowerBonus,
    Monster,
    Name,
    Player,
    Position,
    ProvidesHealing,
    SufferDamage,
    Viewshed,
    WantsToDropItem,
    WantsToMelee,
    WantsToPickupItem,
    WantsToRemoveItem,
    WantsToUseItem,
    add_damage,
)
from delve.sim.context import GameContext
from delve.sim.grid_map import GridMap, TileStatus
from delve.sim.pathfinding import PathFinder
from delve.sim.run_state import StateKind

logger = logging.getLogger(__name__)

Coord = tuple[int, int]


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> list[Coord]:
    """Points from (x0, y0) to (x1, y1) inclusive."""
    points: list[Coord] = []
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    x, y = x0, y0
    while True:
        points.append((x, y))
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy
    return points


def has_line_of_sight(grid: GridMap, origin: Coord, target: Coord) -> bool:
    # The target itself may be opaque so wall faces are seen.
    line = bresenham_line(*origin, *target)
    return all(not grid.is_opaque(grid.idx(x, y)) for x, y in line[1:-1])


def compute_fov(grid: GridMap, origin: Coord, radius: int) -> set[Coord]:
    """Tiles within Chebyshev ``radius`` of ``origin`` with a clear line to it."""
    ox, oy = origin
    if not grid.in_bounds(ox, oy):
        raise IndexError(f"FOV origin {origin} outside the map")
    visible = {origin}
    for y in range(max(0, oy - radius), min(grid.height - 1, oy + radius) + 1):
        for x in range(max(0, ox - radius), min(grid.width - 1, ox + radius) + 1):
            if (x, y) != origin and has_line_of_sight(grid, origin, (x, y)):
                visible.add((x, y))
    return visible


def chebyshev(a: Coord, b: Coord) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def visibility_system(ctx: GameContext) -> None:
    world, grid = ctx.world, ctx.map
    for entity, pos, viewshed in world.query(Position, Viewshed):
        if not viewshed.dirty:
            continue
        viewshed.dirty = False
        viewshed.visible_tiles = sorted(compute_fov(grid, (pos.x, pos.y), viewshed.range))
        if world.has(entity, Player):
            grid.clear_visibility()
            for x, y in viewshed.visible_tiles:
                idx = grid.idx(x, y)
                grid.set_status(idx, TileStatus.VISIBLE | TileStatus.REVEALED)


def monster_ai_system(ctx: GameContext) -> None:
    if ctx.run_state.kind != StateKind.MONSTER_TURN:
        return
    world, grid = ctx.world, ctx.map
    player = ctx.player
    player_pos = ctx.player_pos
    pathfinder = PathFinder(grid)
    for entity, pos, viewshed, _monster in world.query(Position, Viewshed, Monster):
        if player_pos not in viewshed.visible_tiles:
            continue
        if chebyshev((pos.x, pos.y), player_pos) <= 1:
            world.insert(entity, WantsToMelee(target=player))
            continue
        path = pathfinder.find_path((pos.x, pos.y), player_pos)
        if len(path) < 2:
            continue
        next_x, next_y = path[0]
        grid.clear_status(grid.idx(pos.x, pos.y), TileStatus.BLOCKED)
        pos.x, pos.y = next_x, next_y
        grid.set_status(grid.idx(next_x, next_y), TileStatus.BLOCKED)
        viewshed.dirty = True


def map_indexing_system(ctx: GameContext) -> None:
    world, grid = ctx.world, ctx.map
    grid.populate_blocked()
    grid.clear_content_index()
    for entity, pos in world.query(Position):
        idx = grid.idx(pos.x, pos.y)
        if world.has(entity, BlocksTile):
            grid.set_status(idx, TileStatus.BLOCKED)
        grid.tile_content[idx].append(entity)


def melee_combat_system(ctx: GameContext) -> None:
    world = ctx.world
    for entity, intent, stats in world.query(WantsToMelee, CombatStats):
        if stats.hp <= 0 or not world.is_alive(intent.target):
            continue
        target_stats = world.get(intent.target, CombatStats)
        if target_stats is None or target_stats.hp <= 0:
            continue
        power = stats.power + equipped_bonus(ctx, entity, MeleePowerBonus, "power")
        defense = target_stats.defense + equipped_bonus(ctx, intent.target, DefenseBonus, "defense")
        damage = max(0, power - defense)
        attacker, target = entity_name(ctx, entity), entity_name(ctx, intent.target)
        if damage == 0:
            ctx.log.push(f"{attacker} is unable to hurt {target}.")
        else:
            ctx.log.push(f"{attacker} hits {target}, for {damage} hp.")
            world.insert(intent.target, add_damage(world.get(intent.target, SufferDamage), damage))
    world.clear_storage(WantsToMelee)


def damage_system(ctx: GameContext) -> None:
    world = ctx.world
    for _entity, damage, stats in world.query(SufferDamage, CombatStats):
        stats.hp -= sum(damage.amounts)
    world.clear_storage(SufferDamage)


def item_collection_system(ctx: GameContext) -> None:
    world = ctx.world
    for _entity, intent in world.query(WantsToPickupItem):
        world.remove(intent.item, Position)
        world.insert(intent.item, InBackpack(owner=intent.collected_by))
        if intent.collected_by == ctx.player_entity:
            ctx.log.push(f"You pick up the {entity_name(ctx, intent.item)}.")
    world.clear_storage(WantsToPickupItem)


def item_use_system(ctx: GameContext) -> None:
    world = ctx.world
    for entity, intent in world.query(WantsToUseItem):
        item = intent.item
        if not world.is_alive(item):
            continue
        item_name = entity_name(ctx, item)
        targets = _item_targets(ctx, entity, intent)
        used = False

        equippable = world.get(item, Equippable)
        if equippable is not None and targets:
            wearer = targets[0]
            for other, equipped in list(world.query(Equipped)):
                if equipped.owner == wearer and equipped.slot == equippable.slot:
                    world.remove(other, Equipped)
                    world.insert(other, InBackpack(owner=wearer))
                    if wearer == ctx.player_entity:
                        ctx.log.push(f"You unequip {entity_name(ctx, other)}.")
            world.remove(item, InBackpack)
            world.insert(item, Equipped(owner=wearer, slot=equippable.slot))
            if wearer == ctx.player_entity:
                ctx.log.push(f"You equip {item_name}.")

        healing = world.get(item, ProvidesHealing)
        if healing is not None:
            for target in targets:
                stats = world.get(target, CombatStats)
                if stats is None:
                    continue
                stats.hp = min(stats.max_hp, stats.hp + healing.heal_amount)
                used = True
                if entity == ctx.player_entity:
                    ctx.log.push(f"You use the {item_name}, healing {healing.heal_amount} hp.")

        inflicts = world.get(item, InflictsDamage)
        if inflicts is not None:
            for target in targets:
                if world.get(target, CombatStats) is None:
                    continue
                world.insert(target, add_damage(world.get(target, SufferDamage), inflicts.damage))
                used = True
                if entity == ctx.player_entity:
                    ctx.log.push(
                        f"You use {item_name} on {entity_name(ctx, target)}, "
                        f"inflicting {inflicts.damage} hp."
                    )

        if used and world.has(item, Consumable):
            world.delete_entity(item)
    world.clear_storage(WantsToUseItem)


def _item_targets(ctx: GameContext, user: int, intent: WantsToUseItem) -> list[int]:
    world, grid = ctx.world, ctx.map
    if intent.target is None:
        return [user]
    tx, ty = intent.target
    if not grid.in_bounds(tx, ty):
        return []
    area = world.get(intent.item, AreaOfEffect)
    if area is None:
        return list(grid.tile_content[grid.idx(tx, ty)])
    targets: list[int] = []
    for x, y in sorted(compute_fov(grid, (tx, ty), area.radius)):
        targets.extend(grid.tile_content[grid.idx(x, y)])
    return targets


def item_drop_system(ctx: GameContext) -> None:
    world = ctx.world
    for entity, intent in world.query(WantsToDropItem):
        pos = world.get(entity, Position)
        if pos is None:
            continue
        world.remove(intent.item, InBackpack)
        world.insert(intent.item, Position(x=pos.x, y=pos.y))
        if entity == ctx.player_entity:
            ctx.log.push(f"You drop the {entity_name(ctx, intent.item)}.")
    world.clear_storage(WantsToDropItem)


def item_remove_system(ctx: GameContext) -> None:
    world = ctx.world
    for entity, intent in world.query(WantsToRemoveItem):
        if world.remove(intent.item, Equipped) is None:
            continue
        world.insert(intent.item, InBackpack(owner=entity))
        if entity == ctx.player_entity:
            ctx.log.push(f"You unequip {entity_name(ctx, intent.item)}.")
    world.clear_storage(WantsToRemoveItem)


def cull_dead(ctx: GameContext) -> bool:
    """Delete every non-player entity at 0 hp or less; report player death."""
    world, grid = ctx.world, ctx.map
    player_dead = False
    for entity, stats in list(world.query(CombatStats)):
        if stats.hp >= 1:
            continue
        if entity == ctx.player_entity:
            player_dead = True
            continue
        ctx.log.push(f"{entity_name(ctx, entity)} is dead.")
        pos = world.get(entity, Position)
        if pos is not None and grid.in_bounds(pos.x, pos.y):
            idx = grid.idx(pos.x, pos.y)
            if entity in grid.tile_content[idx]:
                grid.tile_content[idx].remove(entity)
            if world.has(entity, BlocksTile):
                grid.clear_status(idx, TileStatus.BLOCKED)
        for item, equipped in list(world.query(Equipped)):
            if equipped.owner == entity:
                world.delete_entity(item)
        for item, backpack in list(world.query(InBackpack)):
            if backpack.owner == entity:
                world.delete_entity(item)
        world.delete_entity(entity)
        logger.debug("Removed dead entity %d", entity)
    return player_dead


def run_systems(ctx: GameContext) -> bool:
    """Run the whole pipeline once. Returns True if the player died."""
    visibility_system(ctx)
    monster_ai_system(ctx)
    map_indexing_system(ctx)
    melee_combat_system(ctx)
    damage_system(ctx)
    item_collection_system(ctx)
    item_use_system(ctx)
    item_drop_system(ctx)
    item_remove_system(ctx)
    return cull_dead(ctx)


def equipped_bonus(ctx: GameContext, owner: int, bonus_type: type, attr: str) -> int:
    total = 0
    for item, equipped, bonus in ctx.world.query(Equipped, bonus_type):
        if equipped.owner == owner:
            total += getattr(bonus, attr)
    return total


def entity_name(ctx: GameContext, entity: int) -> str:
    name = ctx.world.get(entity, Name)
    return name.name if name is not None else f"#{entity}"

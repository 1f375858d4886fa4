"""Level transitions and full resets of the simulation context."""

from __future__ import annotations

import logging

from delve.mapgen import BuiltLevel, build_level
from delve.sim.components import CombatStats, Equipped, InBackpack, Position, Viewshed
from delve.sim.context import GameContext
from delve.sim.spawner import spawn_entities, spawn_player

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to Delve! Find the stairs and keep going down."
DESCEND_MESSAGE = "You descend to the next level."


def entities_to_remove_on_level_change(ctx: GameContext) -> list[int]:
    """Every entity except the player and what the player carries or wears."""
    world = ctx.world
    player = ctx.player
    retained = {player}
    for entity, backpack in world.query(InBackpack):
        if backpack.owner == player:
            retained.add(entity)
    for entity, equipped in world.query(Equipped):
        if equipped.owner == player:
            retained.add(entity)
    return [entity for entity in world.entities() if entity not in retained]


def goto_next_level(ctx: GameContext) -> BuiltLevel:
    to_delete = entities_to_remove_on_level_change(ctx)
    for entity in to_delete:
        ctx.world.delete_entity(entity)

    level = generate_world_map(ctx, ctx.map.depth + 1)

    ctx.log.push(DESCEND_MESSAGE)
    stats = ctx.world.get(ctx.player, CombatStats)
    if stats is not None:
        stats.hp = max(stats.hp, stats.max_hp // 2)
    logger.info("Descended to depth %d (removed %d entities)", level.map.depth, len(to_delete))
    return level


def game_over_cleanup(ctx: GameContext) -> BuiltLevel:
    ctx.world.delete_all()
    ctx.log.clear()
    ctx.log.push(WELCOME_MESSAGE)

    ctx.player_entity = spawn_player(ctx.world, 0, 0)
    ctx.player_pos = (0, 0)

    level = generate_world_map(ctx, 1)
    logger.info("Started a new run")
    return level


def generate_world_map(ctx: GameContext, depth: int) -> BuiltLevel:
    """Build ``depth``, install it and move the player to its start."""
    config = ctx.config
    level = build_level(
        config.map_width,
        config.map_height,
        depth,
        ctx.rng,
        preference=config.builder,
    )
    ctx.map = level.map
    spawn_entities(ctx.world, level.plan)

    x, y = level.start
    ctx.player_pos = (x, y)
    player = ctx.player
    pos = ctx.world.get(player, Position)
    if pos is None:
        ctx.world.insert(player, Position(x=x, y=y))
    else:
        pos.x, pos.y = x, y
    viewshed = ctx.world.get(player, Viewshed)
    if viewshed is not None:
        viewshed.dirty = True
    return level

"""Player actions triggered by key presses."""

from __future__ import annotations

from delve.sim.components import CombatStats, Item, Position, Viewshed, WantsToMelee, WantsToPickupItem
from delve.sim.context import GameContext
from delve.sim.grid_map import TileKind
from delve.sim.run_state import RunState, StateKind

MOVE_KEYS: dict[str, tuple[int, int]] = {
    "LEFT": (-1, 0),
    "RIGHT": (1, 0),
    "UP": (0, -1),
    "DOWN": (0, 1),
    "h": (-1, 0),
    "l": (1, 0),
    "k": (0, -1),
    "j": (0, 1),
    "y": (-1, -1),
    "u": (1, -1),
    "b": (-1, 1),
    "n": (1, 1),
    "4": (-1, 0),
    "6": (1, 0),
    "8": (0, -1),
    "2": (0, 1),
    "7": (-1, -1),
    "9": (1, -1),
    "1": (-1, 1),
    "3": (1, 1),
}
WAIT_KEYS = {".", "5"}
MENU_KEYS: dict[str, StateKind] = {
    "i": StateKind.SHOW_INVENTORY,
    "d": StateKind.SHOW_DROP_ITEM,
    "r": StateKind.SHOW_REMOVE_ITEM,
    "ESC": StateKind.SAVE_GAME,
}


def respond_to_key(ctx: GameContext, key: str | None) -> RunState:
    """Translate one key into the run state the player asked for."""
    awaiting = RunState.of(StateKind.AWAITING_INPUT)
    if key is None:
        return awaiting
    if key in MOVE_KEYS:
        dx, dy = MOVE_KEYS[key]
        return RunState.of(StateKind.PLAYER_TURN) if try_move_player(ctx, dx, dy) else awaiting
    if key in WAIT_KEYS:
        return RunState.of(StateKind.PLAYER_TURN)
    if key == "g":
        return RunState.of(StateKind.PLAYER_TURN) if get_item(ctx) else awaiting
    if key == ">":
        return RunState.of(StateKind.NEXT_LEVEL) if try_next_level(ctx) else awaiting
    if key in MENU_KEYS:
        return RunState.of(MENU_KEYS[key])
    return awaiting


def try_move_player(ctx: GameContext, dx: int, dy: int) -> bool:
    """Step or bump-attack. Returns False when the move was impossible."""
    world, grid = ctx.world, ctx.map
    player = ctx.player
    pos = world.get(player, Position)
    if pos is None:
        return False
    dest_x, dest_y = pos.x + dx, pos.y + dy
    if not grid.in_bounds(dest_x, dest_y):
        return False
    dest = grid.idx(dest_x, dest_y)

    for target in grid.tile_content[dest]:
        if target != player and world.has(target, CombatStats):
            world.insert(player, WantsToMelee(target=target))
            return True

    if not grid.is_walkable(dest):
        return False
    pos.x, pos.y = dest_x, dest_y
    ctx.player_pos = (dest_x, dest_y)
    viewshed = world.get(player, Viewshed)
    if viewshed is not None:
        viewshed.dirty = True
    return True


def get_item(ctx: GameContext) -> bool:
    world = ctx.world
    for entity, _item, pos in world.query(Item, Position):
        if (pos.x, pos.y) == ctx.player_pos:
            world.insert(ctx.player, WantsToPickupItem(collected_by=ctx.player, item=entity))
            return True
    ctx.log.push("There is nothing here to pick up.")
    return False


def try_next_level(ctx: GameContext) -> bool:
    grid = ctx.map
    if grid.tiles[grid.idx(*ctx.player_pos)] == TileKind.DOWN_STAIRS:
        return True
    ctx.log.push("There is no way down from here.")
    return False

import random

from delve.config import GameConfig
from delve.render.menus import TerminalFrontend, inventory_items
from delve.render.textual_app import normalize_key
from delve.sim.components import Equipped, EquipmentSlot, InBackpack, Position, WantsToPickupItem
from delve.sim.context import GameContext
from delve.sim.grid_map import GridMap, TileKind
from delve.sim.player import respond_to_key
from delve.sim.run_state import MainMenuSelection, RunState, StateKind
from delve.sim.scheduler import InventoryMode, MenuResult, MenuResultKind
from delve.sim.spawner import dagger, health_potion, spawn_player
from delve.sim.systems import visibility_system


def test_main_menu_navigation() -> None:
    ctx = _arena()
    frontend = TerminalFrontend()
    for key in ("DOWN", "ENTER", "UP"):
        frontend.push_key(key)

    assert frontend.show_main_menu(ctx, MainMenuSelection.NEW_GAME) == (
        MenuResult.no_selection(MainMenuSelection.LOAD_GAME)
    )
    assert frontend.show_main_menu(ctx, MainMenuSelection.LOAD_GAME) == (
        MenuResult.selected(MainMenuSelection.LOAD_GAME)
    )
    assert frontend.show_main_menu(ctx, MainMenuSelection.NEW_GAME) == (
        MenuResult.no_selection(MainMenuSelection.QUIT)
    )
    assert frontend.show_main_menu(ctx, MainMenuSelection.QUIT).kind == (
        MenuResultKind.NO_SELECTION
    )


def test_inventory_letters_pick_items() -> None:
    ctx = _arena()
    potion = _held(ctx, health_potion, InBackpack(owner=ctx.player))
    blade = _held(ctx, dagger, Equipped(owner=ctx.player, slot=EquipmentSlot.MELEE))
    frontend = TerminalFrontend()

    assert inventory_items(ctx, InventoryMode.USE) == [potion]
    assert inventory_items(ctx, InventoryMode.REMOVE) == [blade]

    for key in ("z", "a", "ESC"):
        frontend.push_key(key)
    assert frontend.show_inventory(ctx, InventoryMode.USE).kind == MenuResultKind.NO_SELECTION
    assert frontend.show_inventory(ctx, InventoryMode.DROP) == MenuResult.selected(potion)
    assert frontend.show_inventory(ctx, InventoryMode.USE) == MenuResult.cancel()
    assert frontend.show_inventory(ctx, InventoryMode.USE) == MenuResult.no_selection()


def test_targeting_cursor() -> None:
    ctx = _arena()
    visibility_system(ctx)
    frontend = TerminalFrontend()
    for key in ("RIGHT", "RIGHT", "ENTER"):
        frontend.push_key(key)

    assert frontend.show_targeting(ctx, 6).kind == MenuResultKind.NO_SELECTION
    assert frontend.cursor == (3, 3)
    frontend.show_targeting(ctx, 6)
    assert frontend.show_targeting(ctx, 6) == MenuResult.selected((4, 3))
    assert frontend.cursor is None

    frontend.push_key("ESC")
    assert frontend.show_targeting(ctx, 6) == MenuResult.cancel()


def test_targeting_cursor_stays_in_range() -> None:
    ctx = _arena()
    frontend = TerminalFrontend()
    for _ in range(3):
        frontend.push_key("RIGHT")
        frontend.show_targeting(ctx, 1)

    assert frontend.cursor == (3, 3)


def test_overlay_follows_run_state() -> None:
    ctx = _arena()
    frontend = TerminalFrontend()

    ctx.run_state = RunState.of(StateKind.AWAITING_INPUT)
    assert frontend.overlay(ctx) is None
    ctx.run_state = RunState.of(StateKind.SHOW_INVENTORY)
    assert frontend.overlay(ctx) is not None
    ctx.run_state = RunState.of(StateKind.GAME_OVER)
    assert frontend.overlay(ctx) is not None


def test_player_keys() -> None:
    ctx = _arena()
    potion = health_potion(ctx.world, 2, 3)

    assert respond_to_key(ctx, None) == RunState.of(StateKind.AWAITING_INPUT)
    assert respond_to_key(ctx, "i") == RunState.of(StateKind.SHOW_INVENTORY)
    assert respond_to_key(ctx, "r") == RunState.of(StateKind.SHOW_REMOVE_ITEM)
    assert respond_to_key(ctx, "ESC") == RunState.of(StateKind.SAVE_GAME)
    assert respond_to_key(ctx, "5") == RunState.of(StateKind.PLAYER_TURN)
    assert respond_to_key(ctx, "?") == RunState.of(StateKind.AWAITING_INPUT)

    assert respond_to_key(ctx, "g") == RunState.of(StateKind.PLAYER_TURN)
    assert ctx.world.get(ctx.player, WantsToPickupItem) == WantsToPickupItem(
        collected_by=ctx.player, item=potion
    )

    assert respond_to_key(ctx, ">") == RunState.of(StateKind.AWAITING_INPUT)
    assert ctx.log.entries[-1] == "There is no way down from here."
    ctx.map.tiles[ctx.map.idx(2, 3)] = TileKind.DOWN_STAIRS
    assert respond_to_key(ctx, ">") == RunState.of(StateKind.NEXT_LEVEL)


def test_diagonal_move_updates_player_position() -> None:
    ctx = _arena()

    assert respond_to_key(ctx, "u") == RunState.of(StateKind.PLAYER_TURN)

    assert ctx.player_pos == (3, 2)
    assert ctx.world.get(ctx.player, Position) == Position(x=3, y=2)


def test_normalize_key() -> None:
    assert normalize_key("up", None) == "UP"
    assert normalize_key("escape", None) == "ESC"
    assert normalize_key("greater_than_sign", ">") == ">"
    assert normalize_key("ctrl+c", None) is None


def _arena(width: int = 10, height: int = 7) -> GameContext:
    ctx = GameContext.create(GameConfig(), rng=random.Random(1))
    grid = GridMap.new(width, height, 1)
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            grid.tiles[grid.idx(x, y)] = TileKind.FLOOR
    ctx.map = grid
    ctx.player_entity = spawn_player(ctx.world, 2, 3)
    ctx.player_pos = (2, 3)
    return ctx


def _held(ctx: GameContext, factory, holder) -> int:
    item = factory(ctx.world, 0, 0)
    ctx.world.remove(item, Position)
    ctx.world.insert(item, holder)
    return item

import random
from collections import deque

import pytest

from delve.config import GameConfig
from delve.errors import InvalidTransitionError
from delve.mapgen import build_level
from delve.sim.components import (
    CombatStats,
    Equipped,
    EquipmentSlot,
    InBackpack,
    Position,
    WantsToUseItem,
)
from delve.sim.context import GameContext
from delve.sim.grid_map import GridMap, TileKind
from delve.sim.player import respond_to_key
from delve.sim.run_state import MainMenuSelection, RunState, StateKind
from delve.sim.scheduler import Game, InventoryMode, MenuResult
from delve.sim.spawner import dagger, goblin, health_potion, magic_missile_scroll, orc, spawn_player


def test_new_game_runs_pre_run_then_waits_for_input() -> None:
    ctx = GameContext.create(GameConfig(), rng=random.Random(5))
    menus = FakeMenus(main=[MenuResult.selected(MainMenuSelection.NEW_GAME)])
    game = _game(ctx, menus=menus)

    assert game.tick()
    assert ctx.run_state.kind == StateKind.PRE_RUN
    assert ctx.player_pos == build_level(64, 64, 1, random.Random(5)).start

    assert game.tick()
    assert ctx.run_state.kind == StateKind.AWAITING_INPUT
    stats = ctx.world.get(ctx.player, CombatStats)
    assert stats.hp == stats.max_hp
    assert ctx.map.depth == 1


def test_main_menu_browse_and_quit() -> None:
    ctx = GameContext.create(GameConfig(), rng=random.Random(1))
    menus = FakeMenus(
        main=[
            MenuResult.no_selection(MainMenuSelection.QUIT),
            MenuResult.no_selection(),
            MenuResult.selected(MainMenuSelection.QUIT),
        ]
    )
    game = _game(ctx, menus=menus)

    assert game.tick()
    assert ctx.run_state == RunState.main_menu(MainMenuSelection.QUIT)
    assert game.tick()
    assert ctx.run_state == RunState.main_menu(MainMenuSelection.QUIT)
    assert game.tick() is False


def test_main_menu_rejects_an_unknown_choice() -> None:
    ctx = GameContext.create(GameConfig(), rng=random.Random(1))
    game = _game(ctx, menus=FakeMenus(main=[MenuResult.selected("SETTINGS")]))

    with pytest.raises(InvalidTransitionError):
        game.tick()
    assert ctx.run_state == RunState.main_menu(MainMenuSelection.NEW_GAME)


def test_load_game_outcomes() -> None:
    ctx = GameContext.create(GameConfig(), rng=random.Random(1))
    store = FakeSaveStore(exists=False)
    menus = FakeMenus(main=[MenuResult.selected(MainMenuSelection.LOAD_GAME)] * 2)
    game = _game(ctx, menus=menus, store=store)

    game.tick()
    assert ctx.run_state == RunState.main_menu(MainMenuSelection.LOAD_GAME)
    assert store.loads == 0

    store.has_save = True
    game.tick()
    assert ctx.run_state.kind == StateKind.AWAITING_INPUT
    assert store.loads == 1
    assert store.deleted


def test_save_game_returns_to_main_menu() -> None:
    ctx = _arena()
    ctx.run_state = RunState.of(StateKind.SAVE_GAME)
    store = FakeSaveStore()
    game = _game(ctx, store=store)

    game.tick()

    assert store.saves == 1
    assert ctx.run_state == RunState.main_menu(MainMenuSelection.LOAD_GAME)


def test_bump_attack_kills_and_unindexes_monster() -> None:
    ctx = _arena()
    monster = goblin(ctx.world, 3, 3)
    ctx.world.get(monster, CombatStats).hp = 1
    ctx.run_state = RunState.of(StateKind.PRE_RUN)
    game = _game(ctx, keys=["RIGHT"])

    game.tick()
    assert ctx.map.tile_content[ctx.map.idx(3, 3)] == [monster]

    game.tick()
    assert ctx.run_state.kind == StateKind.PLAYER_TURN

    game.tick()
    assert ctx.run_state.kind == StateKind.MONSTER_TURN
    assert not ctx.world.is_alive(monster)
    assert monster not in ctx.map.tile_content[ctx.map.idx(3, 3)]
    assert "Goblin is dead." in ctx.log.entries

    game.tick()
    assert ctx.run_state.kind == StateKind.AWAITING_INPUT


def test_walking_into_a_wall_waits_for_more_input() -> None:
    ctx = _arena()
    ctx.run_state = RunState.of(StateKind.AWAITING_INPUT)
    game = _game(ctx, keys=["LEFT", "LEFT"])

    game.tick()
    assert ctx.player_pos == (1, 3)
    assert ctx.run_state.kind == StateKind.PLAYER_TURN

    ctx.run_state = RunState.of(StateKind.AWAITING_INPUT)
    game.tick()
    assert ctx.player_pos == (1, 3)
    assert ctx.run_state.kind == StateKind.AWAITING_INPUT


def test_monster_kills_player_and_game_over_resets() -> None:
    ctx = _arena()
    ctx.world.get(ctx.player, CombatStats).hp = 1
    orc(ctx.world, 3, 3)
    ctx.run_state = RunState.of(StateKind.MONSTER_TURN)
    menus = FakeMenus(game_over=[MenuResult.no_selection(), MenuResult.selected()])
    game = _game(ctx, menus=menus)

    game.tick()
    assert ctx.run_state.kind == StateKind.GAME_OVER
    assert "You are dead." in ctx.log.entries
    assert ctx.world.is_alive(ctx.player)

    game.tick()
    assert ctx.run_state.kind == StateKind.GAME_OVER

    old_player = ctx.player
    game.tick()
    assert ctx.run_state == RunState.main_menu(MainMenuSelection.NEW_GAME)
    assert not ctx.world.is_alive(old_player)
    assert ctx.world.get(ctx.player, CombatStats).hp == 30
    assert ctx.map.depth == 1


def test_inventory_use_heals_and_consumes() -> None:
    ctx = _arena()
    ctx.world.get(ctx.player, CombatStats).hp = 10
    potion = _carried(ctx, health_potion)
    ctx.run_state = RunState.of(StateKind.SHOW_INVENTORY)
    menus = FakeMenus(inventory=[MenuResult.no_selection(), MenuResult.selected(potion)])
    game = _game(ctx, menus=menus)

    game.tick()
    assert ctx.run_state.kind == StateKind.SHOW_INVENTORY
    game.tick()
    assert ctx.run_state.kind == StateKind.PLAYER_TURN
    assert ctx.world.get(ctx.player, WantsToUseItem) == WantsToUseItem(item=potion)
    assert menus.modes == [InventoryMode.USE, InventoryMode.USE]

    game.tick()
    assert ctx.world.get(ctx.player, CombatStats).hp == 18
    assert not ctx.world.is_alive(potion)


def test_inventory_cancel_returns_to_input() -> None:
    ctx = _arena()
    ctx.run_state = RunState.of(StateKind.SHOW_DROP_ITEM)
    game = _game(ctx, menus=FakeMenus(inventory=[MenuResult.cancel()]))

    game.tick()

    assert ctx.run_state.kind == StateKind.AWAITING_INPUT


def test_ranged_item_goes_through_targeting() -> None:
    ctx = _arena()
    scroll = _carried(ctx, magic_missile_scroll)
    target = goblin(ctx.world, 5, 3)
    ctx.run_state = RunState.of(StateKind.PRE_RUN)
    menus = FakeMenus(
        inventory=[MenuResult.selected(scroll)],
        targeting=[MenuResult.selected((5, 3))],
    )
    game = _game(ctx, menus=menus)
    game.tick()

    ctx.run_state = RunState.of(StateKind.SHOW_INVENTORY)
    game.tick()
    assert ctx.run_state == RunState.targeting(6, scroll)

    game.tick()
    assert ctx.run_state.kind == StateKind.PLAYER_TURN
    assert menus.ranges == [6]
    assert ctx.world.get(ctx.player, WantsToUseItem) == WantsToUseItem(item=scroll, target=(5, 3))

    game.tick()
    game.tick()
    assert not ctx.world.is_alive(scroll)
    assert not ctx.world.is_alive(target)


def test_drop_and_remove_items() -> None:
    ctx = _arena()
    potion = _carried(ctx, health_potion)
    blade = dagger(ctx.world, 0, 0)
    ctx.world.remove(blade, Position)
    ctx.world.insert(blade, Equipped(owner=ctx.player, slot=EquipmentSlot.MELEE))
    menus = FakeMenus(inventory=[MenuResult.selected(potion), MenuResult.selected(blade)])
    game = _game(ctx, menus=menus)

    ctx.run_state = RunState.of(StateKind.SHOW_DROP_ITEM)
    game.tick()
    game.tick()
    assert ctx.world.get(potion, Position) == Position(x=2, y=3)
    assert not ctx.world.has(potion, InBackpack)

    ctx.run_state = RunState.of(StateKind.SHOW_REMOVE_ITEM)
    game.tick()
    game.tick()
    assert not ctx.world.has(blade, Equipped)
    assert ctx.world.get(blade, InBackpack) == InBackpack(owner=ctx.player)
    assert menus.modes == [InventoryMode.DROP, InventoryMode.REMOVE]


def test_next_level_keeps_carried_items() -> None:
    ctx = GameContext.create(GameConfig(map_width=40, map_height=30), rng=random.Random(8))
    menus = FakeMenus(main=[MenuResult.selected(MainMenuSelection.NEW_GAME)])
    game = _game(ctx, menus=menus)
    game.tick()
    potion = _carried(ctx, health_potion)
    ctx.world.get(ctx.player, CombatStats).hp = 1
    ctx.run_state = RunState.of(StateKind.NEXT_LEVEL)

    game.tick()

    assert ctx.run_state.kind == StateKind.PRE_RUN
    assert ctx.map.depth == 2
    assert ctx.world.is_alive(potion)
    assert ctx.world.get(ctx.player, CombatStats).hp == 15
    assert ctx.world.get(ctx.player, Position) == Position(*ctx.player_pos)


class FakeInput:
    def __init__(self, keys: list[str]) -> None:
        self.keys = deque(keys)

    def respond_to_input(self, ctx: GameContext, state: RunState) -> RunState:
        return respond_to_key(ctx, self.keys.popleft() if self.keys else None)


class FakeMenus:
    def __init__(
        self,
        *,
        main: list[MenuResult] | None = None,
        inventory: list[MenuResult] | None = None,
        targeting: list[MenuResult] | None = None,
        game_over: list[MenuResult] | None = None,
    ) -> None:
        self.main = deque(main or [])
        self.inventory = deque(inventory or [])
        self.targeting = deque(targeting or [])
        self.game_over = deque(game_over or [])
        self.modes: list[InventoryMode] = []
        self.ranges: list[int] = []

    def show_main_menu(self, ctx: GameContext, selection: MainMenuSelection) -> MenuResult:
        return self.main.popleft() if self.main else MenuResult.no_selection(selection)

    def show_inventory(self, ctx: GameContext, mode: InventoryMode) -> MenuResult:
        self.modes.append(mode)
        return self.inventory.popleft() if self.inventory else MenuResult.no_selection()

    def show_targeting(self, ctx: GameContext, target_range: int) -> MenuResult:
        self.ranges.append(target_range)
        return self.targeting.popleft() if self.targeting else MenuResult.no_selection()

    def show_game_over(self, ctx: GameContext) -> MenuResult:
        return self.game_over.popleft() if self.game_over else MenuResult.no_selection()


class FakeSaveStore:
    def __init__(self, *, exists: bool = True) -> None:
        self.has_save = exists
        self.saves = 0
        self.loads = 0
        self.deleted = False

    def save(self, ctx: GameContext) -> None:
        self.saves += 1

    def load(self, ctx: GameContext) -> bool:
        self.loads += 1
        return True

    def exists(self) -> bool:
        return self.has_save

    def delete(self) -> None:
        self.deleted = True


def _game(
    ctx: GameContext,
    *,
    keys: list[str] | None = None,
    menus: FakeMenus | None = None,
    store: FakeSaveStore | None = None,
) -> Game:
    return Game(
        ctx,
        input_handler=FakeInput(keys or []),
        menus=menus or FakeMenus(),
        save_store=store or FakeSaveStore(),
    )


def _arena(width: int = 10, height: int = 7) -> GameContext:
    ctx = GameContext.create(GameConfig(map_width=40, map_height=30), rng=random.Random(1))
    grid = GridMap.new(width, height, 1)
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            grid.tiles[grid.idx(x, y)] = TileKind.FLOOR
    ctx.map = grid
    ctx.player_entity = spawn_player(ctx.world, 2, 3)
    ctx.player_pos = (2, 3)
    return ctx


def _carried(ctx: GameContext, factory) -> int:
    item = factory(ctx.world, 0, 0)
    ctx.world.remove(item, Position)
    ctx.world.insert(item, InBackpack(owner=ctx.player))
    return item

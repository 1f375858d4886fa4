"""Keyboard-driven input handler and menus for the terminal front end."""

from __future__ import annotations

from collections import deque

from rich.console import RenderableType

from delve.render.viewer import render_game_over, render_item_menu
from delve.sim.components import Equipped, InBackpack, Viewshed
from delve.sim.context import GameContext
from delve.sim.player import MOVE_KEYS, respond_to_key
from delve.sim.run_state import MainMenuSelection, RunState, StateKind
from delve.sim.scheduler import InventoryMode, MenuResult
from delve.sim.systems import chebyshev, entity_name

MAIN_MENU_ORDER = [
    MainMenuSelection.NEW_GAME,
    MainMenuSelection.LOAD_GAME,
    MainMenuSelection.QUIT,
]
MENU_TITLES = {
    InventoryMode.USE: "Inventory",
    InventoryMode.DROP: "Drop Which Item?",
    InventoryMode.REMOVE: "Remove Which Item?",
}


def inventory_items(ctx: GameContext, mode: InventoryMode) -> list[int]:
    """Items the player can pick from in ``mode``, ordered by entity id."""
    storage = Equipped if mode == InventoryMode.REMOVE else InBackpack
    return [
        entity
        for entity, holder in ctx.world.query(storage)
        if holder.owner == ctx.player_entity
    ]


class TerminalFrontend:
    """Feeds queued key presses to the scheduler, one key per request."""

    def __init__(self) -> None:
        self._keys: deque[str] = deque()
        self.cursor: tuple[int, int] | None = None

    def push_key(self, key: str) -> None:
        self._keys.append(key)

    def _next_key(self) -> str | None:
        return self._keys.popleft() if self._keys else None

    def respond_to_input(self, ctx: GameContext, state: RunState) -> RunState:
        return respond_to_key(ctx, self._next_key())

    def show_main_menu(self, ctx: GameContext, selection: MainMenuSelection) -> MenuResult:
        key = self._next_key()
        if key == "ENTER":
            return MenuResult.selected(selection)
        if key in {"UP", "DOWN"}:
            step = -1 if key == "UP" else 1
            index = MAIN_MENU_ORDER.index(selection)
            return MenuResult.no_selection(MAIN_MENU_ORDER[(index + step) % len(MAIN_MENU_ORDER)])
        return MenuResult.no_selection(selection)

    def show_inventory(self, ctx: GameContext, mode: InventoryMode) -> MenuResult:
        key = self._next_key()
        if key is None:
            return MenuResult.no_selection()
        if key == "ESC":
            return MenuResult.cancel()
        items = inventory_items(ctx, mode)
        if len(key) == 1 and "a" <= key <= "z":
            offset = ord(key) - ord("a")
            if offset < len(items):
                return MenuResult.selected(items[offset])
        return MenuResult.no_selection()

    def show_targeting(self, ctx: GameContext, target_range: int) -> MenuResult:
        if self.cursor is None:
            self.cursor = ctx.player_pos
        key = self._next_key()
        if key is None:
            return MenuResult.no_selection()
        if key == "ESC":
            self.cursor = None
            return MenuResult.cancel()
        if key == "ENTER":
            target = self.cursor
            if target in _valid_targets(ctx, target_range):
                self.cursor = None
                return MenuResult.selected(target)
            ctx.log.push("That target is out of range.")
            return MenuResult.no_selection()
        if key in MOVE_KEYS:
            dx, dy = MOVE_KEYS[key]
            moved = (self.cursor[0] + dx, self.cursor[1] + dy)
            if ctx.map.in_bounds(*moved) and chebyshev(moved, ctx.player_pos) <= target_range:
                self.cursor = moved
        return MenuResult.no_selection()

    def show_game_over(self, ctx: GameContext) -> MenuResult:
        if self._next_key() is None:
            return MenuResult.no_selection()
        return MenuResult.selected()

    def overlay(self, ctx: GameContext) -> RenderableType | None:
        kind = ctx.run_state.kind
        if kind == StateKind.SHOW_INVENTORY:
            return self._item_overlay(ctx, InventoryMode.USE)
        if kind == StateKind.SHOW_DROP_ITEM:
            return self._item_overlay(ctx, InventoryMode.DROP)
        if kind == StateKind.SHOW_REMOVE_ITEM:
            return self._item_overlay(ctx, InventoryMode.REMOVE)
        if kind == StateKind.GAME_OVER:
            return render_game_over()
        return None

    def _item_overlay(self, ctx: GameContext, mode: InventoryMode) -> RenderableType:
        names = [entity_name(ctx, item) for item in inventory_items(ctx, mode)]
        return render_item_menu(MENU_TITLES[mode], names)


def _valid_targets(ctx: GameContext, target_range: int) -> set[tuple[int, int]]:
    viewshed = ctx.world.get(ctx.player, Viewshed)
    if viewshed is None:
        return set()
    return {
        tile
        for tile in viewshed.visible_tiles
        if chebyshev(tile, ctx.player_pos) <= target_range
    }

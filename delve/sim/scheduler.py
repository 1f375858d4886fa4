"""Per-frame turn scheduler driving systems, menus and level lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from delve.errors import InvalidTransitionError
from delve.sim.components import Ranged, WantsToDropItem, WantsToRemoveItem, WantsToUseItem
from delve.sim.context import GameContext
from delve.sim.lifecycle import game_over_cleanup, goto_next_level
from delve.sim.run_state import (
    PIPELINE_STATES,
    MainMenuSelection,
    RunState,
    Signal,
    StateKind,
    transition,
)
from delve.sim.systems import run_systems

logger = logging.getLogger(__name__)


class MenuResultKind(str, Enum):
    NO_SELECTION = "NO_SELECTION"
    SELECTED = "SELECTED"
    CANCEL = "CANCEL"


@dataclass(frozen=True)
class MenuResult:
    kind: MenuResultKind
    value: Any = None

    @classmethod
    def no_selection(cls, value: Any = None) -> "MenuResult":
        return cls(MenuResultKind.NO_SELECTION, value)

    @classmethod
    def selected(cls, value: Any = None) -> "MenuResult":
        return cls(MenuResultKind.SELECTED, value)

    @classmethod
    def cancel(cls) -> "MenuResult":
        return cls(MenuResultKind.CANCEL)


class InventoryMode(str, Enum):
    USE = "use"
    DROP = "drop"
    REMOVE = "remove"


class InputHandler(Protocol):
    def respond_to_input(self, ctx: GameContext, state: RunState) -> RunState: ...


class MenuProvider(Protocol):
    def show_main_menu(self, ctx: GameContext, selection: MainMenuSelection) -> MenuResult: ...

    def show_inventory(self, ctx: GameContext, mode: InventoryMode) -> MenuResult: ...

    def show_targeting(self, ctx: GameContext, target_range: int) -> MenuResult: ...

    def show_game_over(self, ctx: GameContext) -> MenuResult: ...


class SaveStore(Protocol):
    def save(self, ctx: GameContext) -> None: ...

    def load(self, ctx: GameContext) -> bool: ...

    def exists(self) -> bool: ...

    def delete(self) -> None: ...


_MENU_SIGNALS = {
    MenuResultKind.NO_SELECTION: Signal.MENU_NO_RESPONSE,
    MenuResultKind.CANCEL: Signal.MENU_CANCEL,
    MenuResultKind.SELECTED: Signal.MENU_CONFIRM,
}


class Game:
    """Advances the run state by one step per ``tick``.

    Each tick performs exactly the action of the current state and then
    publishes the successor chosen by ``transition``. Returns False once the
    player quits from the main menu.
    """

    def __init__(
        self,
        ctx: GameContext,
        *,
        input_handler: InputHandler,
        menus: MenuProvider,
        save_store: SaveStore,
    ) -> None:
        self.ctx = ctx
        self.input_handler = input_handler
        self.menus = menus
        self.save_store = save_store

    def tick(self) -> bool:
        state = self.ctx.run_state
        next_state = self._step(state)
        if next_state is None:
            logger.info("Quit requested from %s", state.kind.value)
            return False
        if next_state != state:
            logger.debug("Run state %s -> %s", state.kind.value, next_state.kind.value)
        self.ctx.run_state = next_state
        return True

    def _step(self, state: RunState) -> RunState | None:
        ctx = self.ctx
        kind = state.kind

        if kind in PIPELINE_STATES:
            player_dead = run_systems(ctx)
            if player_dead and kind != StateKind.PRE_RUN:
                ctx.log.push("You are dead.")
                return transition(state, Signal.PLAYER_DIED)
            return transition(state, Signal.PIPELINE_DONE)

        if kind == StateKind.AWAITING_INPUT:
            requested = self.input_handler.respond_to_input(ctx, state)
            return transition(state, Signal.INPUT, requested=requested)

        if kind == StateKind.SHOW_INVENTORY:
            result = self.menus.show_inventory(ctx, InventoryMode.USE)
            if result.kind == MenuResultKind.SELECTED:
                item = result.value
                ranged = ctx.world.get(item, Ranged)
                if ranged is not None:
                    return transition(
                        state, Signal.ITEM_NEEDS_TARGET, target_range=ranged.range, item=item
                    )
                ctx.world.insert(ctx.player, WantsToUseItem(item=item))
            return transition(state, _MENU_SIGNALS[result.kind])

        if kind == StateKind.SHOW_DROP_ITEM:
            result = self.menus.show_inventory(ctx, InventoryMode.DROP)
            if result.kind == MenuResultKind.SELECTED:
                ctx.world.insert(ctx.player, WantsToDropItem(item=result.value))
            return transition(state, _MENU_SIGNALS[result.kind])

        if kind == StateKind.SHOW_REMOVE_ITEM:
            result = self.menus.show_inventory(ctx, InventoryMode.REMOVE)
            if result.kind == MenuResultKind.SELECTED:
                ctx.world.insert(ctx.player, WantsToRemoveItem(item=result.value))
            return transition(state, _MENU_SIGNALS[result.kind])

        if kind == StateKind.SHOW_TARGETING:
            result = self.menus.show_targeting(ctx, state.target_range)
            if result.kind == MenuResultKind.SELECTED:
                ctx.world.insert(
                    ctx.player,
                    WantsToUseItem(item=state.target_item, target=tuple(result.value)),
                )
            return transition(state, _MENU_SIGNALS[result.kind])

        if kind == StateKind.NEXT_LEVEL:
            goto_next_level(ctx)
            return transition(state, Signal.LEVEL_READY)

        if kind == StateKind.SAVE_GAME:
            self.save_store.save(ctx)
            return transition(state, Signal.GAME_SAVED)

        if kind == StateKind.GAME_OVER:
            result = self.menus.show_game_over(ctx)
            if result.kind != MenuResultKind.SELECTED:
                return transition(state, Signal.MENU_NO_RESPONSE)
            game_over_cleanup(ctx)
            return transition(state, Signal.GAME_OVER_DISMISSED)

        return self._main_menu(state)

    def _main_menu(self, state: RunState) -> RunState | None:
        ctx = self.ctx
        result = self.menus.show_main_menu(ctx, state.menu_selection)
        if result.kind != MenuResultKind.SELECTED:
            return transition(
                state, Signal.MENU_BROWSE, selection=result.value or state.menu_selection
            )

        choice = result.value
        if choice == MainMenuSelection.NEW_GAME:
            game_over_cleanup(ctx)
            return transition(state, Signal.NEW_GAME)
        if choice == MainMenuSelection.LOAD_GAME:
            if self.save_store.exists() and self.save_store.load(ctx):
                self.save_store.delete()
                return transition(state, Signal.LOAD_OK)
            return transition(state, Signal.LOAD_FAILED)
        if choice == MainMenuSelection.QUIT:
            return transition(state, Signal.QUIT)
        raise InvalidTransitionError(f"Main menu returned unknown choice {choice!r}")

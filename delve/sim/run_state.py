"""Run-state values and the central transition table."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from delve.errors import InvalidTransitionError


class StateKind(str, Enum):
    PRE_RUN = "PRE_RUN"
    AWAITING_INPUT = "AWAITING_INPUT"
    PLAYER_TURN = "PLAYER_TURN"
    MONSTER_TURN = "MONSTER_TURN"
    NEXT_LEVEL = "NEXT_LEVEL"
    SAVE_GAME = "SAVE_GAME"
    GAME_OVER = "GAME_OVER"
    MAIN_MENU = "MAIN_MENU"
    SHOW_INVENTORY = "SHOW_INVENTORY"
    SHOW_DROP_ITEM = "SHOW_DROP_ITEM"
    SHOW_REMOVE_ITEM = "SHOW_REMOVE_ITEM"
    SHOW_TARGETING = "SHOW_TARGETING"


class MainMenuSelection(str, Enum):
    NEW_GAME = "NEW_GAME"
    LOAD_GAME = "LOAD_GAME"
    QUIT = "QUIT"


class Signal(str, Enum):
    PIPELINE_DONE = "PIPELINE_DONE"
    PLAYER_DIED = "PLAYER_DIED"
    INPUT = "INPUT"
    MENU_NO_RESPONSE = "MENU_NO_RESPONSE"
    MENU_CANCEL = "MENU_CANCEL"
    MENU_CONFIRM = "MENU_CONFIRM"
    ITEM_NEEDS_TARGET = "ITEM_NEEDS_TARGET"
    LEVEL_READY = "LEVEL_READY"
    GAME_SAVED = "GAME_SAVED"
    GAME_OVER_DISMISSED = "GAME_OVER_DISMISSED"
    MENU_BROWSE = "MENU_BROWSE"
    NEW_GAME = "NEW_GAME"
    LOAD_OK = "LOAD_OK"
    LOAD_FAILED = "LOAD_FAILED"
    QUIT = "QUIT"


class RunState(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: StateKind
    menu_selection: MainMenuSelection | None = None
    target_range: int | None = None
    target_item: int | None = None

    @model_validator(mode="after")
    def validate_payload(self) -> "RunState":
        if self.kind == StateKind.MAIN_MENU:
            if self.menu_selection is None:
                raise ValueError("MAIN_MENU requires a menu selection")
            if self.target_range is not None or self.target_item is not None:
                raise ValueError("MAIN_MENU cannot include targeting args")
        elif self.kind == StateKind.SHOW_TARGETING:
            if self.target_range is None or self.target_item is None:
                raise ValueError("SHOW_TARGETING requires range and item")
            if self.menu_selection is not None:
                raise ValueError("SHOW_TARGETING cannot include a menu selection")
        elif (
            self.menu_selection is not None
            or self.target_range is not None
            or self.target_item is not None
        ):
            raise ValueError(f"{self.kind.value} cannot include args")
        return self

    @classmethod
    def of(cls, kind: StateKind) -> "RunState":
        return cls(kind=kind)

    @classmethod
    def main_menu(cls, selection: MainMenuSelection) -> "RunState":
        return cls(kind=StateKind.MAIN_MENU, menu_selection=selection)

    @classmethod
    def targeting(cls, target_range: int, item: int) -> "RunState":
        return cls(kind=StateKind.SHOW_TARGETING, target_range=target_range, target_item=item)


PIPELINE_STATES = {StateKind.PRE_RUN, StateKind.PLAYER_TURN, StateKind.MONSTER_TURN}
ITEM_MENU_STATES = {
    StateKind.SHOW_INVENTORY,
    StateKind.SHOW_DROP_ITEM,
    StateKind.SHOW_REMOVE_ITEM,
    StateKind.SHOW_TARGETING,
}
INPUT_TARGETS = {
    StateKind.AWAITING_INPUT,
    StateKind.PLAYER_TURN,
    StateKind.SHOW_INVENTORY,
    StateKind.SHOW_DROP_ITEM,
    StateKind.SHOW_REMOVE_ITEM,
    StateKind.SAVE_GAME,
    StateKind.NEXT_LEVEL,
}

_AFTER_PIPELINE = {
    StateKind.PRE_RUN: StateKind.AWAITING_INPUT,
    StateKind.PLAYER_TURN: StateKind.MONSTER_TURN,
    StateKind.MONSTER_TURN: StateKind.AWAITING_INPUT,
}


def transition(
    state: RunState,
    signal: Signal,
    *,
    requested: RunState | None = None,
    selection: MainMenuSelection | None = None,
    target_range: int | None = None,
    item: int | None = None,
) -> RunState | None:
    """Return the state that follows ``state`` on ``signal``.

    ``None`` means the process should exit. Pairs missing from the table
    raise ``InvalidTransitionError``.
    """
    kind = state.kind

    if kind in PIPELINE_STATES:
        if signal == Signal.PIPELINE_DONE:
            return RunState.of(_AFTER_PIPELINE[kind])
        if signal == Signal.PLAYER_DIED and kind != StateKind.PRE_RUN:
            return RunState.of(StateKind.GAME_OVER)

    elif kind == StateKind.AWAITING_INPUT:
        if signal == Signal.INPUT and requested is not None:
            if requested.kind not in INPUT_TARGETS:
                raise InvalidTransitionError(
                    f"Input cannot request {requested.kind.value} from {kind.value}"
                )
            return requested

    elif kind in ITEM_MENU_STATES:
        if signal == Signal.MENU_NO_RESPONSE:
            return state
        if signal == Signal.MENU_CANCEL:
            return RunState.of(StateKind.AWAITING_INPUT)
        if signal == Signal.MENU_CONFIRM:
            return RunState.of(StateKind.PLAYER_TURN)
        if (
            signal == Signal.ITEM_NEEDS_TARGET
            and kind == StateKind.SHOW_INVENTORY
            and target_range is not None
            and item is not None
        ):
            return RunState.targeting(target_range, item)

    elif kind == StateKind.NEXT_LEVEL:
        if signal == Signal.LEVEL_READY:
            return RunState.of(StateKind.PRE_RUN)

    elif kind == StateKind.SAVE_GAME:
        if signal == Signal.GAME_SAVED:
            return RunState.main_menu(MainMenuSelection.LOAD_GAME)

    elif kind == StateKind.GAME_OVER:
        if signal == Signal.MENU_NO_RESPONSE:
            return state
        if signal == Signal.GAME_OVER_DISMISSED:
            return RunState.main_menu(MainMenuSelection.NEW_GAME)

    elif kind == StateKind.MAIN_MENU:
        if signal == Signal.MENU_BROWSE and selection is not None:
            return RunState.main_menu(selection)
        if signal == Signal.NEW_GAME:
            return RunState.of(StateKind.PRE_RUN)
        if signal == Signal.LOAD_OK:
            return RunState.of(StateKind.AWAITING_INPUT)
        if signal == Signal.LOAD_FAILED:
            return RunState.main_menu(MainMenuSelection.LOAD_GAME)
        if signal == Signal.QUIT:
            return None

    raise InvalidTransitionError(f"No transition from {kind.value} on {signal.value}")

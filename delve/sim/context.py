"""Simulation context shared by systems, menus and the lifecycle manager."""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field

from delve.config import GameConfig
from delve.errors import MissingResourceError
from delve.sim.grid_map import GridMap
from delve.sim.run_state import MainMenuSelection, RunState
from delve.sim.world import World


@dataclass
class GameLog:
    capacity: int = 50
    _lines: deque[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._lines = deque(maxlen=self.capacity)

    @property
    def entries(self) -> list[str]:
        return list(self._lines)

    def push(self, text: str) -> None:
        self._lines.append(text)

    def clear(self) -> None:
        self._lines.clear()

    def tail(self, n: int) -> list[str]:
        return self.entries[-n:] if n > 0 else []


@dataclass
class GameContext:
    config: GameConfig
    rng: random.Random
    world: World = field(default_factory=World)
    map: GridMap = field(default_factory=lambda: GridMap.new(1, 1, 1))
    run_state: RunState = field(
        default_factory=lambda: RunState.main_menu(MainMenuSelection.NEW_GAME)
    )
    log: GameLog = field(default_factory=GameLog)
    player_entity: int | None = None
    player_pos: tuple[int, int] = (0, 0)

    @classmethod
    def create(cls, config: GameConfig, *, rng: random.Random | None = None) -> "GameContext":
        return cls(config=config, rng=rng or random.Random(config.seed))

    @property
    def player(self) -> int:
        if self.player_entity is None:
            raise MissingResourceError("No player entity has been spawned")
        return self.player_entity

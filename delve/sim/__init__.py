"""Simulation core: entity world, grid map, run states and systems."""

from delve.sim.context import GameContext, GameLog
from delve.sim.grid_map import GridMap, Rect, TileKind, TileStatus
from delve.sim.run_state import MainMenuSelection, RunState, Signal, StateKind, transition
from delve.sim.spawner import SpawnPlan, spawn_entities, spawn_player
from delve.sim.world import World

__all__ = [
    "GameContext",
    "GameLog",
    "GridMap",
    "MainMenuSelection",
    "Rect",
    "RunState",
    "Signal",
    "SpawnPlan",
    "StateKind",
    "TileKind",
    "TileStatus",
    "World",
    "spawn_entities",
    "spawn_player",
    "transition",
]

"""Level construction: pick a strategy, carve, cull, then plan spawns."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from delve.mapgen.cellular import carve_cellular
from delve.mapgen.common import (
    MAX_STEPS,
    cull_and_set_exit,
    fill_interior,
    gen_voronoi_regions,
    nearest_floor,
)
from delve.mapgen.rooms import RELAXED_MAX_SIZE, RELAXED_MIN_SIZE, carve_rooms_and_corridors
from delve.sim.grid_map import GridMap, Rect, TileKind
from delve.sim.spawner import SpawnPlan, plan_area_spawns

logger = logging.getLogger(__name__)

MIN_DIMENSION = 5


class BuilderKind(str, Enum):
    ROOMS_AND_CORRIDORS = "rooms"
    CELLULAR_VORONOI = "cellular"
    OPEN_FLOOR = "open"


def select_builder(depth: int, preference: str = "auto") -> BuilderKind:
    """Resolve the strategy for one level.

    An explicit preference always wins. ``auto`` alternates, starting with
    rooms on depth 1.
    """
    if preference == "rooms":
        return BuilderKind.ROOMS_AND_CORRIDORS
    if preference == "cellular":
        return BuilderKind.CELLULAR_VORONOI
    if preference != "auto":
        raise ValueError(f"Unknown builder preference: {preference!r}")
    if depth % 2 == 1:
        return BuilderKind.ROOMS_AND_CORRIDORS
    return BuilderKind.CELLULAR_VORONOI


@dataclass
class BuiltLevel:
    map: GridMap
    plan: SpawnPlan
    kind: BuilderKind
    rooms: list[Rect] = field(default_factory=list)

    @property
    def start(self) -> tuple[int, int]:
        return self.plan.start

    @property
    def stairs(self) -> tuple[int, int]:
        return self.plan.stairs


def build_level(
    width: int,
    height: int,
    depth: int,
    rng: random.Random,
    kind: BuilderKind | None = None,
    *,
    preference: str = "auto",
    max_steps: float = MAX_STEPS,
) -> BuiltLevel:
    """Build a connected level with exactly one down staircase.

    The result depends only on the arguments and the state of ``rng``.
    """
    if width < MIN_DIMENSION or height < MIN_DIMENSION:
        raise ValueError(
            f"Levels must be at least {MIN_DIMENSION}x{MIN_DIMENSION}, got {width}x{height}"
        )
    if depth < 1:
        raise ValueError(f"Depth must be at least 1, got {depth}")

    kind = kind or select_builder(depth, preference)
    level: BuiltLevel | None = None
    if kind == BuilderKind.ROOMS_AND_CORRIDORS:
        level = _build_rooms(width, height, depth, rng, max_steps)
    elif kind == BuilderKind.CELLULAR_VORONOI:
        level = _build_cellular(width, height, depth, rng, max_steps)

    if level is None:
        if kind != BuilderKind.OPEN_FLOOR:
            logger.warning(
                "Builder %s produced no usable level at depth %d; using open floor",
                kind.value,
                depth,
            )
        level = _build_open(width, height, depth, rng, max_steps)

    logger.info(
        "Built depth %d with %s: %d rooms, %d walkable tiles, %d spawns",
        depth,
        level.kind.value,
        len(level.rooms),
        len(level.map.floor_indices()),
        len(level.plan.spawns),
    )
    return level


def _build_rooms(
    width: int, height: int, depth: int, rng: random.Random, max_steps: float
) -> BuiltLevel | None:
    grid = GridMap.new(width, height, depth)
    rooms = carve_rooms_and_corridors(grid, rng)
    if not rooms:
        logger.debug("No rooms placed at depth %d; retrying with small rooms", depth)
        grid = GridMap.new(width, height, depth)
        rooms = carve_rooms_and_corridors(
            grid, rng, min_size=RELAXED_MIN_SIZE, max_size=RELAXED_MAX_SIZE
        )
    if not rooms:
        return None

    start = rooms[0].center()
    stairs_idx = cull_and_set_exit(grid, grid.idx(*start), max_steps=max_steps)
    if stairs_idx is None:
        return None
    stairs = grid.xy(stairs_idx)

    spawns: dict[tuple[int, int], str] = {}
    for room in rooms[1:]:
        area = [
            point
            for point in room.interior()
            if grid.tiles[grid.idx(*point)] == TileKind.FLOOR
        ]
        plan_area_spawns(area, depth, rng, reserved={start, stairs}, plan=spawns)
    return BuiltLevel(
        map=grid,
        plan=SpawnPlan(start=start, stairs=stairs, spawns=spawns),
        kind=BuilderKind.ROOMS_AND_CORRIDORS,
        rooms=rooms,
    )


def _build_cellular(
    width: int, height: int, depth: int, rng: random.Random, max_steps: float
) -> BuiltLevel | None:
    grid = GridMap.new(width, height, depth)
    carve_cellular(grid, rng)
    start = nearest_floor(grid, width // 2, height // 2)
    if start is None:
        return None
    return _finish_regions(grid, start, depth, rng, max_steps, BuilderKind.CELLULAR_VORONOI)


def _build_open(
    width: int, height: int, depth: int, rng: random.Random, max_steps: float
) -> BuiltLevel:
    grid = GridMap.new(width, height, depth)
    fill_interior(grid)
    start = nearest_floor(grid, width // 2, height // 2)
    level = None
    if start is not None:
        level = _finish_regions(grid, start, depth, rng, max_steps, BuilderKind.OPEN_FLOOR)
    if level is None:
        raise RuntimeError(f"Open floor fallback failed for a {width}x{height} level")
    return level


def _finish_regions(
    grid: GridMap,
    start: tuple[int, int],
    depth: int,
    rng: random.Random,
    max_steps: float,
    kind: BuilderKind,
) -> BuiltLevel | None:
    stairs_idx = cull_and_set_exit(grid, grid.idx(*start), max_steps=max_steps)
    if stairs_idx is None:
        return None
    stairs = grid.xy(stairs_idx)

    spawns: dict[tuple[int, int], str] = {}
    regions = gen_voronoi_regions(grid, rng)
    for region_id in sorted(regions):
        plan_area_spawns(regions[region_id], depth, rng, reserved={start, stairs}, plan=spawns)
    return BuiltLevel(
        map=grid,
        plan=SpawnPlan(start=start, stairs=stairs, spawns=spawns),
        kind=kind,
    )

"""Carving helpers and the shared reachability pass."""

from __future__ import annotations

import logging
import math
import random

from delve.sim.grid_map import GridMap, Rect, TileKind
from delve.sim.pathfinding import dijkstra_map

logger = logging.getLogger(__name__)

MAX_STEPS = 200.0
VORONOI_FREQUENCY = 0.08


def apply_room_to_map(grid: GridMap, room: Rect) -> None:
    """Fill the inside of ``room`` with floor, leaving its edge as wall."""
    for x, y in room.interior():
        grid.tiles[grid.idx(x, y)] = TileKind.FLOOR


def apply_horizontal_tunnel(grid: GridMap, x1: int, x2: int, y: int) -> None:
    for x in range(min(x1, x2), max(x1, x2) + 1):
        grid.tiles[grid.idx(x, y)] = TileKind.FLOOR


def apply_vertical_tunnel(grid: GridMap, y1: int, y2: int, x: int) -> None:
    for y in range(min(y1, y2), max(y1, y2) + 1):
        grid.tiles[grid.idx(x, y)] = TileKind.FLOOR


def fill_interior(grid: GridMap) -> None:
    for y in range(1, grid.height - 1):
        for x in range(1, grid.width - 1):
            grid.tiles[grid.idx(x, y)] = TileKind.FLOOR


def nearest_floor(grid: GridMap, x: int, y: int) -> tuple[int, int] | None:
    best: tuple[int, int] | None = None
    best_key: tuple[int, int] | None = None
    for idx, kind in enumerate(grid.tiles):
        if kind != TileKind.FLOOR:
            continue
        fx, fy = grid.xy(idx)
        key = (abs(fx - x) + abs(fy - y), idx)
        if best_key is None or key < best_key:
            best_key = key
            best = (fx, fy)
    return best


def gen_voronoi_regions(
    grid: GridMap, rng: random.Random, *, frequency: float = VORONOI_FREQUENCY
) -> dict[int, list[tuple[int, int]]]:
    """Group floor tiles by their nearest seed point (Manhattan distance).

    Seed density follows the cellular frequency: roughly one seed per
    ``1 / frequency`` tiles in each direction.
    """
    seed_count = max(1, round(grid.width * grid.height * frequency * frequency))
    seeds = [
        (rng.randint(1, max(1, grid.width - 2)), rng.randint(1, max(1, grid.height - 2)))
        for _ in range(seed_count)
    ]
    regions: dict[int, list[tuple[int, int]]] = {}
    for y in range(1, grid.height - 1):
        for x in range(1, grid.width - 1):
            if grid.tiles[grid.idx(x, y)] != TileKind.FLOOR:
                continue
            region = min(
                range(len(seeds)),
                key=lambda i: (abs(seeds[i][0] - x) + abs(seeds[i][1] - y), i),
            )
            regions.setdefault(region, []).append((x, y))
    return regions


def cull_and_set_exit(
    grid: GridMap, start_idx: int, *, max_steps: float = MAX_STEPS
) -> int | None:
    """Wall off unreachable floor and put the stairs on the farthest tile.

    Distance is walking distance from ``start_idx``; ties keep the lowest
    index. Returns the stairs index, or None when nothing but the start is
    reachable (the map is left culled and without stairs in that case).
    """
    distances = dijkstra_map(grid, [start_idx], max_steps)
    exit_idx: int | None = None
    exit_distance = 0.0
    culled = 0
    for idx, kind in enumerate(grid.tiles):
        if kind != TileKind.FLOOR:
            continue
        distance = distances[idx]
        if distance == math.inf:
            grid.tiles[idx] = TileKind.WALL
            culled += 1
        elif distance > exit_distance:
            exit_idx = idx
            exit_distance = distance
    if culled:
        logger.debug("Culled %d unreachable floor tiles", culled)
    if exit_idx is not None:
        grid.tiles[exit_idx] = TileKind.DOWN_STAIRS
    return exit_idx

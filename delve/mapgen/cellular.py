"""Cave-like levels from a smoothed noise field."""

from __future__ import annotations

import random

from delve.sim.grid_map import GridMap, TileKind

FLOOR_ROLL_THRESHOLD = 55
SMOOTHING_ITERATIONS = 15


def carve_cellular(
    grid: GridMap, rng: random.Random, *, iterations: int = SMOOTHING_ITERATIONS
) -> None:
    for y in range(1, grid.height - 1):
        for x in range(1, grid.width - 1):
            roll = rng.randint(1, 100)
            grid.tiles[grid.idx(x, y)] = (
                TileKind.FLOOR if roll > FLOOR_ROLL_THRESHOLD else TileKind.WALL
            )

    for _ in range(iterations):
        smoothed = list(grid.tiles)
        for y in range(1, grid.height - 1):
            for x in range(1, grid.width - 1):
                walls = _wall_neighbors(grid, x, y)
                smoothed[grid.idx(x, y)] = (
                    TileKind.WALL if walls > 4 or walls == 0 else TileKind.FLOOR
                )
        grid.tiles = smoothed


def _wall_neighbors(grid: GridMap, x: int, y: int) -> int:
    count = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            if grid.tiles[grid.idx(x + dx, y + dy)] == TileKind.WALL:
                count += 1
    return count

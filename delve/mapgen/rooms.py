"""Rectangular rooms joined by L-shaped corridors."""

from __future__ import annotations

import random

from delve.mapgen.common import apply_horizontal_tunnel, apply_room_to_map, apply_vertical_tunnel
from delve.sim.grid_map import GridMap, Rect

MAX_ROOMS = 30
MIN_SIZE = 6
MAX_SIZE = 10
RELAXED_MIN_SIZE = 3
RELAXED_MAX_SIZE = 5


def carve_rooms_and_corridors(
    grid: GridMap,
    rng: random.Random,
    *,
    min_size: int = MIN_SIZE,
    max_size: int = MAX_SIZE,
    max_rooms: int = MAX_ROOMS,
) -> list[Rect]:
    """Carve rooms into ``grid`` and return them in placement order."""
    max_size = min(max_size, grid.width - 3, grid.height - 3)
    if max_size < min_size:
        return []

    rooms: list[Rect] = []
    for _ in range(max_rooms):
        w = rng.randint(min_size, max_size)
        h = rng.randint(min_size, max_size)
        x = rng.randint(1, grid.width - w - 2)
        y = rng.randint(1, grid.height - h - 2)
        new_room = Rect.from_size(x, y, w, h)
        if any(new_room.intersects(other) for other in rooms):
            continue

        apply_room_to_map(grid, new_room)
        if rooms:
            new_x, new_y = new_room.center()
            prev_x, prev_y = rooms[-1].center()
            if rng.randint(0, 1) == 1:
                apply_horizontal_tunnel(grid, prev_x, new_x, prev_y)
                apply_vertical_tunnel(grid, prev_y, new_y, new_x)
            else:
                apply_vertical_tunnel(grid, prev_y, new_y, prev_x)
                apply_horizontal_tunnel(grid, prev_x, new_x, new_y)
        rooms.append(new_room)
    return rooms

"""Grid distance fields (uniform cost) and A* paths."""

from __future__ import annotations

import heapq
import math

from delve.sim.grid_map import GridMap


def dijkstra_map(grid: GridMap, starts: list[int], max_steps: float) -> list[float]:
    """Distance from the nearest start to every tile, walls impassable.

    Tiles farther than ``max_steps`` are left at ``math.inf`` and count as
    unreachable.
    """
    distances = [math.inf] * grid.size
    open_set: list[tuple[float, int]] = []
    for start in starts:
        distances[start] = 0.0
        heapq.heappush(open_set, (0.0, start))

    while open_set:
        distance, current = heapq.heappop(open_set)
        if distance > distances[current]:
            continue
        tentative = distance + 1.0
        if tentative > max_steps:
            continue
        for neighbor in grid.passable_neighbors(current):
            if tentative < distances[neighbor]:
                distances[neighbor] = tentative
                heapq.heappush(open_set, (tentative, neighbor))
    return distances


class PathFinder:
    def __init__(self, grid: GridMap) -> None:
        self._grid = grid

    def find_path(self, start: tuple[int, int], goal: tuple[int, int]) -> list[tuple[int, int]]:
        """Shortest 4-directional path excluding ``start``, including ``goal``.

        Blocked tiles are avoided except for the goal itself, which is usually
        occupied by the entity being chased.
        """
        if start == goal:
            return []
        grid = self._grid
        if not grid.in_bounds(*start) or not grid.in_bounds(*goal):
            return []

        open_set: list[tuple[int, tuple[int, int]]] = []
        heapq.heappush(open_set, (0, start))
        came_from: dict[tuple[int, int], tuple[int, int] | None] = {start: None}
        g_score: dict[tuple[int, int], int] = {start: 0}

        while open_set:
            _, current = heapq.heappop(open_set)
            if current == goal:
                return self._reconstruct_path(came_from, current)

            for neighbor in self._neighbors(current, goal):
                tentative = g_score[current] + 1
                if tentative < g_score.get(neighbor, 1_000_000):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative
                    f_score = tentative + self._heuristic(neighbor, goal)
                    heapq.heappush(open_set, (f_score, neighbor))

        return []

    def _neighbors(
        self, current: tuple[int, int], goal: tuple[int, int]
    ) -> list[tuple[int, int]]:
        x, y = current
        candidates = [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]
        grid = self._grid
        return [
            pos
            for pos in candidates
            if grid.in_bounds(*pos)
            and (pos == goal or grid.is_walkable(grid.idx(*pos)))
        ]

    @staticmethod
    def _heuristic(a: tuple[int, int], b: tuple[int, int]) -> int:
        return abs(a[0] - b[0]) + abs(a[1] - b[1])

    @staticmethod
    def _reconstruct_path(
        came_from: dict[tuple[int, int], tuple[int, int] | None],
        current: tuple[int, int],
    ) -> list[tuple[int, int]]:
        path = []
        while current in came_from and came_from[current] is not None:
            path.append(current)
            current = came_from[current]
        path.reverse()
        return path

import math
import random

import pytest

from delve.mapgen import BuilderKind, MAX_STEPS, build_level, cull_and_set_exit, select_builder
from delve.mapgen.common import gen_voronoi_regions
from delve.sim.grid_map import GridMap, TileKind
from delve.sim.pathfinding import dijkstra_map


def test_select_builder_alternates_and_honours_preference() -> None:
    assert select_builder(1) == BuilderKind.ROOMS_AND_CORRIDORS
    assert select_builder(2) == BuilderKind.CELLULAR_VORONOI
    assert select_builder(3) == BuilderKind.ROOMS_AND_CORRIDORS
    assert select_builder(1, "cellular") == BuilderKind.CELLULAR_VORONOI
    assert select_builder(2, "rooms") == BuilderKind.ROOMS_AND_CORRIDORS
    with pytest.raises(ValueError):
        select_builder(1, "maze")


def test_rooms_level_is_connected_with_one_far_staircase() -> None:
    level = build_level(64, 64, 1, random.Random(7))

    assert level.kind == BuilderKind.ROOMS_AND_CORRIDORS
    assert level.rooms
    assert level.start == level.rooms[0].center()
    _assert_connected_with_far_stairs(level.map, level.start, level.stairs)


def test_cellular_level_is_connected_with_one_far_staircase() -> None:
    level = build_level(48, 48, 2, random.Random(3))

    assert level.kind in {BuilderKind.CELLULAR_VORONOI, BuilderKind.OPEN_FLOOR}
    assert level.rooms == []
    _assert_connected_with_far_stairs(level.map, level.start, level.stairs)


@pytest.mark.parametrize("size", [(5, 5), (8, 6), (20, 14), (40, 30)])
@pytest.mark.parametrize("preference", ["auto", "rooms", "cellular"])
def test_every_level_is_connected_with_one_far_staircase(
    size: tuple[int, int], preference: str
) -> None:
    width, height = size
    for seed in range(10):
        for depth in (1, 2, 3, 7):
            level = build_level(width, height, depth, random.Random(seed), preference=preference)
            assert level.map.in_bounds(*level.start)
            _assert_connected_with_far_stairs(level.map, level.start, level.stairs)


def test_spawns_avoid_start_and_stairs() -> None:
    for seed in range(5):
        for depth in (1, 2, 6):
            level = build_level(50, 40, depth, random.Random(seed))
            grid = level.map
            assert level.start not in level.plan.spawns
            assert level.stairs not in level.plan.spawns
            for (x, y) in level.plan.spawns:
                assert grid.tiles[grid.idx(x, y)] == TileKind.FLOOR


def test_same_seed_builds_the_same_level() -> None:
    first = build_level(40, 30, 2, random.Random(99))
    second = build_level(40, 30, 2, random.Random(99))

    assert first.map.tiles == second.map.tiles
    assert dict(first.plan.spawns) == dict(second.plan.spawns)
    assert first.start == second.start


def test_tiny_map_falls_back_to_open_floor() -> None:
    level = build_level(5, 5, 1, random.Random(1))

    assert level.kind == BuilderKind.OPEN_FLOOR
    assert level.start == (2, 2)
    # Four corners tie at distance 2; the lowest index wins.
    assert level.stairs == (1, 1)
    assert level.map.stairs_indices() == [level.map.idx(1, 1)]


def test_impossible_dimensions_raise() -> None:
    with pytest.raises(ValueError):
        build_level(4, 10, 1, random.Random(0))
    with pytest.raises(ValueError):
        build_level(10, 10, 0, random.Random(0))


def test_spawn_plan_is_read_only() -> None:
    level = build_level(40, 30, 1, random.Random(4))

    with pytest.raises(TypeError):
        level.plan.spawns[(1, 1)] = "Goblin"


def test_cull_walls_off_unreachable_floor() -> None:
    grid = GridMap.new(9, 3, 1)
    for x in (1, 2, 3, 5, 6, 7):
        grid.tiles[grid.idx(x, 1)] = TileKind.FLOOR

    stairs = cull_and_set_exit(grid, grid.idx(1, 1))

    assert stairs == grid.idx(3, 1)
    assert grid.tiles[stairs] == TileKind.DOWN_STAIRS
    assert all(grid.tiles[grid.idx(x, 1)] == TileKind.WALL for x in (5, 6, 7))


def test_cull_uses_path_distance_not_straight_line() -> None:
    # A U-shaped corridor: (3, 1) is close in a straight line but far to walk.
    grid = GridMap.new(5, 6, 1)
    for x, y in [(1, 1), (1, 2), (1, 3), (1, 4), (2, 4), (3, 4), (3, 3), (3, 2), (3, 1)]:
        grid.tiles[grid.idx(x, y)] = TileKind.FLOOR

    stairs = cull_and_set_exit(grid, grid.idx(1, 1))

    assert grid.xy(stairs) == (3, 1)


def test_cull_respects_the_step_cap() -> None:
    grid = GridMap.new(12, 3, 1)
    for x in range(1, 11):
        grid.tiles[grid.idx(x, 1)] = TileKind.FLOOR

    stairs = cull_and_set_exit(grid, grid.idx(1, 1), max_steps=3)

    assert grid.xy(stairs) == (4, 1)
    assert grid.tiles[grid.idx(5, 1)] == TileKind.WALL


def test_cull_reports_a_lone_start() -> None:
    grid = GridMap.new(5, 5, 1)
    grid.tiles[grid.idx(2, 2)] = TileKind.FLOOR

    assert cull_and_set_exit(grid, grid.idx(2, 2)) is None
    assert grid.stairs_indices() == []


def test_voronoi_regions_cover_every_floor_tile_once() -> None:
    grid = GridMap.new(30, 20, 1)
    for y in range(1, 19):
        for x in range(1, 29):
            grid.tiles[grid.idx(x, y)] = TileKind.FLOOR

    regions = gen_voronoi_regions(grid, random.Random(2))
    covered = [point for points in regions.values() for point in points]

    assert len(covered) == len(set(covered)) == 28 * 18


def _assert_connected_with_far_stairs(
    grid: GridMap, start: tuple[int, int], stairs: tuple[int, int]
) -> None:
    distances = dijkstra_map(grid, [grid.idx(*start)], MAX_STEPS)
    walkable = grid.floor_indices()

    assert grid.stairs_indices() == [grid.idx(*stairs)]
    assert all(distances[idx] != math.inf for idx in walkable)
    assert distances[grid.idx(*stairs)] == max(distances[idx] for idx in walkable)

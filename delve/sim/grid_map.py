"""Dense tile grid for a single dungeon level."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag


class TileKind(str, Enum):
    WALL = "wall"
    FLOOR = "floor"
    DOWN_STAIRS = "down_stairs"


class TileStatus(IntFlag):
    NONE = 0
    VISIBLE = 1
    REVEALED = 2
    BLOCKED = 4


WALKABLE_KINDS: frozenset[TileKind] = frozenset({TileKind.FLOOR, TileKind.DOWN_STAIRS})


@dataclass(frozen=True)
class Rect:
    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_size(cls, x: int, y: int, width: int, height: int) -> "Rect":
        return cls(x1=x, y1=y, x2=x + width, y2=y + height)

    def intersects(self, other: "Rect") -> bool:
        """Overlap test widened by one tile so accepted rooms never touch."""
        return (
            self.x1 <= other.x2 + 1
            and self.x2 + 1 >= other.x1
            and self.y1 <= other.y2 + 1
            and self.y2 + 1 >= other.y1
        )

    def center(self) -> tuple[int, int]:
        return (self.x1 + self.x2) // 2, (self.y1 + self.y2) // 2

    def interior(self) -> list[tuple[int, int]]:
        return [
            (x, y)
            for y in range(self.y1 + 1, self.y2)
            for x in range(self.x1 + 1, self.x2)
        ]


@dataclass
class GridMap:
    width: int
    height: int
    depth: int
    tiles: list[TileKind] = field(default_factory=list)
    status: list[TileStatus] = field(default_factory=list)
    tile_content: list[list[int]] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Map dimensions must be positive: {self.width}x{self.height}")
        size = self.width * self.height
        if not self.tiles:
            self.tiles = [TileKind.WALL] * size
        if not self.status:
            self.status = [TileStatus.NONE] * size
        if not self.tile_content:
            self.tile_content = [[] for _ in range(size)]
        if not (len(self.tiles) == len(self.status) == len(self.tile_content) == size):
            raise ValueError("Tile arrays must all have width * height entries.")

    @classmethod
    def new(cls, width: int, height: int, depth: int) -> "GridMap":
        return cls(width=width, height=height, depth=depth)

    @property
    def size(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def idx(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile ({x}, {y}) outside {self.width}x{self.height} map")
        return y * self.width + x

    def xy(self, idx: int) -> tuple[int, int]:
        if not 0 <= idx < self.size:
            raise IndexError(f"Tile index {idx} outside map of {self.size} tiles")
        return idx % self.width, idx // self.width

    def is_walkable(self, idx: int) -> bool:
        return self.tiles[idx] in WALKABLE_KINDS and not (
            self.status[idx] & TileStatus.BLOCKED
        )

    def is_opaque(self, idx: int) -> bool:
        return self.tiles[idx] == TileKind.WALL

    def has_status(self, idx: int, flag: TileStatus) -> bool:
        return bool(self.status[idx] & flag)

    def set_status(self, idx: int, flag: TileStatus) -> None:
        self.status[idx] |= flag

    def clear_status(self, idx: int, flag: TileStatus) -> None:
        self.status[idx] &= ~flag

    def clear_visibility(self) -> None:
        for idx in range(self.size):
            self.clear_status(idx, TileStatus.VISIBLE)

    def populate_blocked(self) -> None:
        for idx, kind in enumerate(self.tiles):
            if kind == TileKind.WALL:
                self.set_status(idx, TileStatus.BLOCKED)
            else:
                self.clear_status(idx, TileStatus.BLOCKED)

    def clear_content_index(self) -> None:
        for content in self.tile_content:
            content.clear()

    def floor_indices(self) -> list[int]:
        return [idx for idx, kind in enumerate(self.tiles) if kind in WALKABLE_KINDS]

    def stairs_indices(self) -> list[int]:
        return [idx for idx, kind in enumerate(self.tiles) if kind == TileKind.DOWN_STAIRS]

    def passable_neighbors(self, idx: int) -> list[int]:
        """4-directional neighbours that are not walls (ignores BLOCKED)."""
        x, y = self.xy(idx)
        candidates = [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]
        return [
            self.idx(nx, ny)
            for nx, ny in candidates
            if self.in_bounds(nx, ny) and self.tiles[ny * self.width + nx] != TileKind.WALL
        ]

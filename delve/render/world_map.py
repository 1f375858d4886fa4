"""Camera viewport and map line rendering."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from delve.sim.components import Position, Renderable
from delve.sim.context import GameContext
from delve.sim.grid_map import GridMap, TileKind, TileStatus

TILE_GLYPHS = {
    TileKind.WALL: "#",
    TileKind.FLOOR: ".",
    TileKind.DOWN_STAIRS: ">",
}
VISIBLE_STYLES = {
    TileKind.WALL: "bright_green",
    TileKind.FLOOR: "grey70",
    TileKind.DOWN_STAIRS: "bold cyan",
}
REVEALED_STYLE = "grey35"
CURSOR_STYLE = "reverse"


@dataclass(frozen=True)
class Viewport:
    x: int
    y: int
    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


def compute_viewport(
    world_width: int,
    world_height: int,
    view_width: int,
    view_height: int,
    *,
    center: tuple[int, int] | None = None,
) -> Viewport:
    view_width = max(1, min(world_width, view_width))
    view_height = max(1, min(world_height, view_height))

    if center is not None:
        origin_x = center[0] - view_width // 2
        origin_y = center[1] - view_height // 2
    else:
        origin_x, origin_y = 0, 0

    origin_x = _clamp(origin_x, 0, max(0, world_width - view_width))
    origin_y = _clamp(origin_y, 0, max(0, world_height - view_height))

    return Viewport(x=origin_x, y=origin_y, width=view_width, height=view_height)


def render_map_lines(
    ctx: GameContext,
    viewport: Viewport,
    *,
    cursor: tuple[int, int] | None = None,
    reveal_all: bool = False,
) -> list[Text]:
    """Tiles the player has seen plus entities standing in view.

    Entities are painted in descending ``render_order`` so the lowest value
    ends up on top of its tile.
    """
    grid = ctx.map
    glyphs: dict[tuple[int, int], tuple[str, str]] = {}
    drawables = sorted(
        ctx.world.query(Position, Renderable),
        key=lambda row: (-row[2].render_order, row[0]),
    )
    for _entity, pos, renderable in drawables:
        if not viewport.contains(pos.x, pos.y) or not grid.in_bounds(pos.x, pos.y):
            continue
        if reveal_all or grid.has_status(grid.idx(pos.x, pos.y), TileStatus.VISIBLE):
            glyphs[(pos.x, pos.y)] = (renderable.glyph, renderable.fg)

    lines: list[Text] = []
    for y in range(viewport.y, viewport.y + viewport.height):
        line = Text()
        for x in range(viewport.x, viewport.x + viewport.width):
            glyph, style = _tile_cell(grid, x, y, reveal_all=reveal_all)
            if (x, y) in glyphs:
                glyph, style = glyphs[(x, y)]
            if cursor == (x, y):
                style = f"{style} {CURSOR_STYLE}".strip()
            line.append(glyph, style=style)
        lines.append(line)
    return lines


def render_grid_lines(grid: GridMap) -> list[Text]:
    """Plain full-map rendering with no visibility rules."""
    lines = []
    for y in range(grid.height):
        line = Text()
        for x in range(grid.width):
            kind = grid.tiles[grid.idx(x, y)]
            line.append(TILE_GLYPHS[kind], style=VISIBLE_STYLES[kind])
        lines.append(line)
    return lines


def _tile_cell(grid: GridMap, x: int, y: int, *, reveal_all: bool) -> tuple[str, str]:
    idx = grid.idx(x, y)
    kind = grid.tiles[idx]
    if reveal_all or grid.has_status(idx, TileStatus.VISIBLE):
        return TILE_GLYPHS[kind], VISIBLE_STYLES[kind]
    if grid.has_status(idx, TileStatus.REVEALED):
        return TILE_GLYPHS[kind], REVEALED_STYLE
    return " ", ""


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))

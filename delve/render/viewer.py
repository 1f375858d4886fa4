"""Rich rendering of one game frame."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from delve.render.world_map import compute_viewport, render_map_lines
from delve.sim.components import CombatStats
from delve.sim.context import GameContext
from delve.sim.run_state import MainMenuSelection, StateKind

DEFAULT_VIEW_WIDTH = 80
DEFAULT_VIEW_HEIGHT = 40
HUD_LOG_LINES = 5
HP_BAR_WIDTH = 20

MAIN_MENU_LABELS = {
    MainMenuSelection.NEW_GAME: "Begin New Game",
    MainMenuSelection.LOAD_GAME: "Load Game",
    MainMenuSelection.QUIT: "Quit",
}


def render_frame(
    ctx: GameContext,
    overlay: RenderableType | None = None,
    *,
    view_width: int = DEFAULT_VIEW_WIDTH,
    view_height: int = DEFAULT_VIEW_HEIGHT,
    cursor: tuple[int, int] | None = None,
) -> RenderableType:
    if ctx.run_state.kind == StateKind.MAIN_MENU:
        return render_main_menu(ctx.run_state.menu_selection)

    viewport = compute_viewport(
        ctx.map.width, ctx.map.height, view_width, view_height, center=ctx.player_pos
    )
    map_panel = Panel(
        Group(*render_map_lines(ctx, viewport, cursor=cursor)),
        title=f"Depth {ctx.map.depth}",
        padding=(0, 0),
    )
    parts: list[RenderableType] = [map_panel, render_hud(ctx)]
    if overlay is not None:
        parts.append(overlay)
    return Group(*parts)


def render_hud(ctx: GameContext) -> RenderableType:
    table = Table(show_header=False, box=None, expand=True)
    table.add_column("Field", style="bold", width=8)
    table.add_column("Value")
    stats = (
        ctx.world.get(ctx.player_entity, CombatStats)
        if ctx.player_entity is not None
        else None
    )
    if stats is not None:
        table.add_row("HP", _hp_bar(stats.hp, stats.max_hp))
    table.add_row("Depth", str(ctx.map.depth))
    for entry in ctx.log.tail(HUD_LOG_LINES):
        table.add_row("", Text(entry))
    return Panel(table, title="Status", padding=(0, 1))


def render_main_menu(selection: MainMenuSelection | None) -> RenderableType:
    lines = [Text("Delve", style="bold yellow"), Text("")]
    for option, label in MAIN_MENU_LABELS.items():
        style = "bold magenta" if option == selection else "white"
        lines.append(Text(label, style=style))
    return Panel(Group(*lines), title="Main Menu", padding=(1, 4))


def render_item_menu(title: str, names: list[str]) -> RenderableType:
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold yellow")
    table.add_column("Item")
    for offset, name in enumerate(names):
        table.add_row(f"({chr(ord('a') + offset)})", name)
    if not names:
        table.add_row("", "Nothing here.")
    return Panel(table, title=title, subtitle="ESCAPE to cancel")


def render_game_over() -> RenderableType:
    return Panel(
        Group(
            Text("Your journey has ended!", style="bold yellow"),
            Text("Press any key to return to the menu.", style="magenta"),
        ),
        title="Game Over",
    )


def _hp_bar(hp: int, max_hp: int) -> Text:
    filled = 0 if max_hp <= 0 else max(0, min(HP_BAR_WIDTH, HP_BAR_WIDTH * hp // max_hp))
    bar = Text(f"{hp} / {max_hp} ", style="yellow")
    bar.append("█" * filled, style="red")
    bar.append("░" * (HP_BAR_WIDTH - filled), style="grey35")
    return bar

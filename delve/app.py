"""Application entry: logging setup, game wiring and headless previews."""

from __future__ import annotations

import logging
import random

from rich.console import Group, RenderableType
from rich.logging import RichHandler
from rich.panel import Panel

from delve.config import GameConfig
from delve.db.save_game import JsonSaveStore
from delve.mapgen import build_level
from delve.render.menus import TerminalFrontend
from delve.render.textual_app import run_textual_game
from delve.render.world_map import render_grid_lines
from delve.sim.context import GameContext
from delve.sim.scheduler import Game

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Route all ``delve`` loggers through a rich handler at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    logger.debug("Logging configured at %s", level.upper())


def build_game(
    config: GameConfig, *, rng: random.Random | None = None
) -> tuple[Game, TerminalFrontend]:
    ctx = GameContext.create(config, rng=rng)
    frontend = TerminalFrontend()
    game = Game(
        ctx,
        input_handler=frontend,
        menus=frontend,
        save_store=JsonSaveStore(config.save_path),
    )
    return game, frontend


def run_game(config: GameConfig) -> None:
    game, frontend = build_game(config)
    logger.info("Starting game (seed=%s, builder=%s)", config.seed, config.builder)
    run_textual_game(game, frontend, tick_interval=config.tick_interval)


def preview_level(config: GameConfig, depth: int) -> RenderableType:
    """Build one level without a game loop and render the whole map."""
    level = build_level(
        config.map_width,
        config.map_height,
        depth,
        random.Random(config.seed),
        preference=config.builder,
    )
    title = (
        f"Depth {depth} ({level.kind.value}): start {level.start}, "
        f"stairs {level.stairs}, {len(level.plan.spawns)} spawns"
    )
    return Panel(Group(*render_grid_lines(level.map)), title=title, padding=(0, 0))

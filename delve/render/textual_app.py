"""Textual app that drives the game loop from a timer."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Static

from delve.render.menus import TerminalFrontend
from delve.render.viewer import render_frame
from delve.sim.run_state import StateKind
from delve.sim.scheduler import Game

TEXTUAL_KEYS = {
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "escape": "ESC",
    "enter": "ENTER",
}


def normalize_key(key: str, character: str | None) -> str | None:
    if key in TEXTUAL_KEYS:
        return TEXTUAL_KEYS[key]
    if character and character.isprintable():
        return character
    return None


class DelveApp(App):
    """Run a single screen in a minimal Textual app."""

    def __init__(self, screen: Screen, *, title: str = "Delve") -> None:
        super().__init__()
        self._initial_screen = screen
        self.title = title

    def on_mount(self) -> None:
        self.push_screen(self._initial_screen)


class GameScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #frame {
        height: 1fr;
    }
    """

    def __init__(self, game: Game, frontend: TerminalFrontend, *, tick_interval: float) -> None:
        super().__init__()
        self._game = game
        self._frontend = frontend
        self._tick_interval = tick_interval
        self._view: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            yield Static(id="frame")

    def on_mount(self) -> None:
        self._view = self.query_one("#frame", Static)
        self.set_interval(self._tick_interval, self._on_tick)

    def on_key(self, event: Key) -> None:
        key = normalize_key(event.key, event.character)
        if key is not None:
            self._frontend.push_key(key)
            event.stop()

    def _on_tick(self) -> None:
        if not self._game.tick():
            self.app.exit()
            return
        if self._view is None:
            return
        ctx = self._game.ctx
        cursor = (
            self._frontend.cursor
            if ctx.run_state.kind == StateKind.SHOW_TARGETING
            else None
        )
        width = max(10, self.size.width - 2)
        height = max(5, self.size.height - 12)
        self._view.update(
            render_frame(
                ctx,
                self._frontend.overlay(ctx),
                view_width=width,
                view_height=height,
                cursor=cursor,
            )
        )


def run_textual_game(game: Game, frontend: TerminalFrontend, *, tick_interval: float) -> None:
    app = DelveApp(GameScreen(game, frontend, tick_interval=tick_interval))
    app.run()

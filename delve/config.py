"""Runtime configuration for the game loop and level generation."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

DEFAULT_MAP_WIDTH = 64
DEFAULT_MAP_HEIGHT = 64
DEFAULT_BUILDER = "auto"
DEFAULT_SAVE_PATH = Path("saves/savegame.json")
DEFAULT_LOG_LEVEL = "WARNING"

BUILDER_CHOICES = ("auto", "rooms", "cellular")


@dataclass(frozen=True)
class GameConfig:
    map_width: int = DEFAULT_MAP_WIDTH
    map_height: int = DEFAULT_MAP_HEIGHT
    seed: int | None = None
    builder: str = DEFAULT_BUILDER
    save_path: Path = DEFAULT_SAVE_PATH
    tick_interval: float = 1 / 30
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if self.builder not in BUILDER_CHOICES:
            raise ValueError(
                f"Unknown builder {self.builder!r}; expected one of {BUILDER_CHOICES}."
            )


def load_config(**overrides: object) -> GameConfig:
    """Build a config from DELVE_* environment variables plus explicit overrides.

    Overrides whose value is None are ignored so argparse namespaces can be
    passed through unchanged.
    """
    config = GameConfig(
        map_width=_env_int("DELVE_MAP_WIDTH") or DEFAULT_MAP_WIDTH,
        map_height=_env_int("DELVE_MAP_HEIGHT") or DEFAULT_MAP_HEIGHT,
        seed=_env_int("DELVE_SEED"),
        builder=(os.getenv("DELVE_BUILDER") or DEFAULT_BUILDER).lower(),
        save_path=Path(os.getenv("DELVE_SAVE_PATH") or DEFAULT_SAVE_PATH),
        log_level=(os.getenv("DELVE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
    known = {item.name for item in fields(GameConfig)}
    updates = {
        key: value
        for key, value in overrides.items()
        if key in known and value is not None
    }
    if "save_path" in updates:
        updates["save_path"] = Path(updates["save_path"])
    return replace(config, **updates)


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc

"""Module entry point for `python -m delve`."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console

from delve.app import configure_logging, preview_level, run_game
from delve.config import BUILDER_CHOICES, load_config


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Delve, a turn-based dungeon crawl.")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random number generator (random when omitted).",
    )
    parser.add_argument(
        "--builder",
        choices=BUILDER_CHOICES,
        default=None,
        help="Level builder: auto alternates rooms and caves by depth.",
    )
    parser.add_argument("--width", type=int, default=None, help="Map width in tiles.")
    parser.add_argument("--height", type=int, default=None, help="Map height in tiles.")
    parser.add_argument(
        "--save-path",
        type=Path,
        default=None,
        help="Where the single save slot is written.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    parser.add_argument(
        "--preview-depth",
        type=int,
        default=None,
        help="Build one level at this depth, print it and exit.",
    )
    args = parser.parse_args()

    config = load_config(
        seed=args.seed,
        builder=args.builder,
        map_width=args.width,
        map_height=args.height,
        save_path=args.save_path,
        log_level=args.log_level.upper() if args.log_level else None,
    )
    configure_logging(config.log_level)

    if args.preview_depth is not None:
        Console().print(preview_level(config, args.preview_depth))
        return

    run_game(config)


if __name__ == "__main__":
    main()

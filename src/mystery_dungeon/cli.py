from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional, TextIO

from . import __version__
from .config import GenerationSettings, load_generation_settings
from .dungeon.factory import DungeonFactory
from .errors import MysteryDungeonError
from .logging_config import configure_logging
from .map.position import Direction
from .rng import RNGManager
from .session import Session

logger = logging.getLogger(__name__)

VIEWER_MIN = 1
VIEWER_MAX = 500


def _verbosity_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mystery-dungeon",
        description="Mystery Dungeon - cavern generator and headless turn runner",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--config", default=None, help="YAML generation settings (defaults to the bundled file)")
    parser.add_argument("--seed", type=int, default=None, help="Master seed for reproducible runs")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--cavern-count", type=int, default=None)
    parser.add_argument("--cavern-dist", type=int, default=None, help="Minimum spacing between cavern centers")
    parser.add_argument("--walk-count", type=int, default=None)
    parser.add_argument("--walk-len", type=int, default=None)

    sub = parser.add_subparsers(dest="command")
    render = sub.add_parser("render", help="Generate a map and print it as ASCII")
    render.add_argument("--json", action="store_true", help="Print a JSON summary instead of the map")
    play = sub.add_parser("play", help="Play headless: read w/a/s/d lines from stdin")
    play.add_argument("--max-turns", type=int, default=None, help="Stop after N accepted moves")
    play.add_argument("--no-fog", action="store_true", help="Print the whole map instead of the fogged view")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> GenerationSettings:
    """Merge bundled/file settings, MD_* environment and command-line overrides.

    Cavern parameters given on the command line are clamped to the debug
    viewer's 1..500 range.
    """
    settings = GenerationSettings.from_env(load_generation_settings(args.config))
    if args.seed is not None:
        settings = replace(settings, seed=args.seed)
    if args.width is not None:
        settings = replace(settings, width=max(VIEWER_MIN, args.width))
    if args.height is not None:
        settings = replace(settings, height=max(VIEWER_MIN, args.height))

    overrides = {
        "cavern_count": args.cavern_count,
        "max_cavern_dist": args.cavern_dist,
        "walk_count": args.walk_count,
        "walk_len": args.walk_len,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = settings.with_cavern(**overrides)
        settings = replace(settings, cavern=settings.cavern.clamped(VIEWER_MIN, VIEWER_MAX))
    return settings


def render_map(settings: GenerationSettings, out: TextIO, as_json: bool = False) -> None:
    rng = RNGManager(settings.seed).context_rng("cavern_layout", 1)
    dungeon = DungeonFactory.generate(settings, rng=rng)
    if as_json:
        data = {
            "width": dungeon.grid.width,
            "height": dungeon.grid.height,
            "floor_tiles": len(dungeon.grid.passable_cells()),
            "player_spawns": [list(p) for p in dungeon.player_spawns],
            "enemy_spawns": [list(p) for p in dungeon.enemy_spawns],
        }
        out.write(json.dumps(data, indent=2, sort_keys=True) + "\n")
        return
    rows = [list(line) for line in dungeon.grid.to_lines()]
    for x, y in dungeon.enemy_spawns:
        rows[y][x] = "e"
    for x, y in dungeon.player_spawns:
        rows[y][x] = "@"
    out.write("\n".join("".join(r) for r in rows) + "\n")


def play(settings: GenerationSettings, inp: TextIO, out: TextIO, max_turns: Optional[int] = None, fog: bool = True) -> int:
    session = Session(settings)
    out.write("\n".join(session.render_lines(fog=fog)) + "\n")
    turns = 0
    for line in inp:
        key = line.strip()
        if key in ("q", "quit"):
            break
        direction = Direction.from_key(key)
        if direction is None:
            out.write(f"unknown input: {key!r} (use w/a/s/d, q to quit)\n")
            continue
        report = session.step(direction)
        if not report.accepted:
            out.write(f"blocked: {direction.name.lower()}\n")
            continue
        turns += 1
        out.write("\n".join(session.render_lines(fog=fog)) + "\n")
        if max_turns is not None and turns >= max_turns:
            break
    return turns


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(_verbosity_level(args.verbose))

    try:
        settings = build_settings(args)
        if args.command == "play":
            play(settings, sys.stdin, sys.stdout, max_turns=args.max_turns, fog=not args.no_fog)
        else:
            render_map(settings, sys.stdout, as_json=getattr(args, "json", False))
    except MysteryDungeonError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

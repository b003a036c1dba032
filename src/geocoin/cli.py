from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

from .config import load_gameplay_config
from .controller import Direction, GameController
from .errors import ConfigError, SnapshotError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

HELP = (
    "commands: north | south | east | west | reset | look | inventory | "
    "collect I J | deposit I J | save [PATH] | load PATH | quit"
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="geocoin",
        description="geocoin - collect and deposit coins in caches around you",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to a gameplay YAML file overriding the defaults.",
    )
    parser.add_argument(
        "--seed",
        default=None,
        help="Seed for the luck oracle (overrides the config).",
    )
    parser.add_argument(
        "--load",
        dest="load_path",
        type=Path,
        default=None,
        help="Start from a saved snapshot file.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    return parser.parse_args(argv)


class CommandLoop:
    """Text front end: one command per line, one response per command."""

    def __init__(self, controller: GameController, out: TextIO) -> None:
        self.controller = controller
        self.out = out
        self._commands: Dict[str, Callable[[List[str]], bool]] = {
            "north": self._mover(Direction.NORTH),
            "south": self._mover(Direction.SOUTH),
            "east": self._mover(Direction.EAST),
            "west": self._mover(Direction.WEST),
            "reset": self._reset,
            "look": self.look,
            "inventory": self._inventory,
            "collect": self._collect,
            "deposit": self._deposit,
            "save": self._save,
            "load": self._load,
            "quit": lambda args: False,
            "help": self._help,
        }

    def run(self, lines) -> None:
        for line in lines:
            parts = line.split()
            if not parts:
                continue
            handler = self._commands.get(parts[0].lower())
            if handler is None:
                self._say(f"unknown command {parts[0]!r}; {HELP}")
                continue
            if not handler(parts[1:]):
                break

    def _say(self, text: str) -> None:
        print(text, file=self.out)

    def _mover(self, direction: Direction) -> Callable[[List[str]], bool]:
        def handler(args: List[str]) -> bool:
            self.controller.move(direction)
            return self.look(args)

        return handler

    def _reset(self, args: List[str]) -> bool:
        self.controller.reset()
        return self.look(args)

    def _help(self, args: List[str]) -> bool:
        self._say(HELP)
        return True

    def look(self, args: List[str]) -> bool:
        pos = self.controller.position
        cell = self.controller.player_cell
        self._say(f"at {pos.lat:.6f},{pos.lng:.6f} (cell {cell.key}); {self.controller.player_coins} coins")
        for cache in self.controller.visible_caches():
            self._say(f"  cache {cache.i},{cache.j}: {cache.count}")
        return True

    def _inventory(self, args: List[str]) -> bool:
        ids = ", ".join(t.id for t in self.controller.inventory) or "empty"
        self._say(f"inventory ({self.controller.player_coins}): {ids}")
        return True

    def _cell_args(self, args: List[str]) -> Optional[tuple]:
        try:
            i, j = (int(a) for a in args)
        except ValueError:
            self._say("expected two integer cell coordinates")
            return None
        return i, j

    def _collect(self, args: List[str]) -> bool:
        cell = self._cell_args(args)
        if cell is not None:
            token = self.controller.collect(*cell)
            self._say(f"collected {token.id}" if token else "nothing to collect")
        return True

    def _deposit(self, args: List[str]) -> bool:
        cell = self._cell_args(args)
        if cell is not None:
            token = self.controller.deposit(*cell)
            self._say(f"deposited {token.id}" if token else "nothing to deposit")
        return True

    def _save(self, args: List[str]) -> bool:
        state = self.controller.save_state()
        if args:
            try:
                Path(args[0]).write_text(state, encoding="utf-8")
            except OSError as e:
                self._say(f"save failed: {e}")
                return True
            self._say(f"saved to {args[0]}")
        else:
            self._say(state)
        return True

    def _load(self, args: List[str]) -> bool:
        if len(args) != 1:
            self._say("usage: load PATH")
            return True
        try:
            self.controller.restore_state(Path(args[0]).read_text(encoding="utf-8"))
        except (OSError, SnapshotError) as e:
            self._say(f"load failed: {e}")
            return True
        return self.look([])


def main(argv=None, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    args = parse_args(argv)
    configure_logging(debug=args.debug)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    try:
        config = load_gameplay_config(str(args.config_path) if args.config_path else None)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    if args.seed is not None:
        config = replace(config, seed=args.seed)

    controller = GameController(config)
    if args.load_path is not None:
        logger.info("Loading snapshot from %s", args.load_path)
        try:
            controller.restore_state(args.load_path.read_text(encoding="utf-8"))
        except (OSError, SnapshotError) as e:
            print(f"error: cannot load {args.load_path}: {e}", file=sys.stderr)
            return 2

    loop = CommandLoop(controller, stdout)
    loop.look([])
    loop.run(stdin)
    return 0

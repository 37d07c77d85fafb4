"""Battlesnake API shapes: request parsing and the info response."""
from __future__ import annotations

import time
from typing import Dict, List, Optional

from snakemind import __version__
from snakemind.board import Board, Coord, GameState, Ruleset, Snake
from snakemind.config import DEFAULT_HAZARD_DAMAGE, DEFAULT_TIMEOUT_MS

INFO = {
    "apiversion": "1",
    "author": "snakemind",
    "color": "#6434eb",
    "head": "smart-caterpillar",
    "tail": "pixel",
}


class PayloadError(ValueError):
    """The request body is not a usable game state."""


def info() -> Dict:
    return dict(INFO, version=__version__)


# ---------------------------------
# Parsing (supports Battlesnake API variations)
# ---------------------------------

def _coord(p: Dict) -> Coord:
    return (int(p["x"]), int(p["y"]))


def _body(s: Dict) -> List[Coord]:
    raw = s.get("body")
    if isinstance(raw, dict) and "data" in raw:
        raw = raw["data"]
    return [_coord(p) for p in raw]


def _ruleset(game: Dict) -> Ruleset:
    ruleset = game.get("ruleset") or {}
    settings = ruleset.get("settings") or {}
    damage = settings.get("hazardDamagePerTurn")
    return Ruleset(
        name=str(ruleset.get("name") or "standard").lower(),
        hazard_damage=DEFAULT_HAZARD_DAMAGE if damage is None else int(damage),
    )


def parse_game_state(payload: Dict, received_at: Optional[float] = None) -> GameState:
    """Build a GameState from a /start, /move or /end request body."""
    if received_at is None:
        received_at = time.perf_counter()
    if not isinstance(payload, dict):
        raise PayloadError("payload must be a JSON object")
    try:
        game = payload.get("game") or {}
        b = payload["board"]
        width, height = int(b["width"]), int(b["height"])
        if width <= 0 or height <= 0:
            raise PayloadError(f"bad board size {width}x{height}")
        you_id = payload["you"]["id"]

        snakes = []
        for s in b.get("snakes", []):
            body = _body(s)
            if not body:
                raise PayloadError(f"snake {s.get('id')!r} has an empty body")
            snakes.append(Snake(id=s["id"], health=int(s["health"]), body=tuple(body)))
        if not any(s.id == you_id for s in snakes):
            # Some hosts leave "you" out of board.snakes
            you_raw = payload["you"]
            you_body = _body(you_raw)
            if not you_body:
                raise PayloadError(f"snake {you_id!r} has an empty body")
            snakes.insert(0, Snake(id=you_id, health=int(you_raw["health"]), body=tuple(you_body)))

        board = Board(
            width=width,
            height=height,
            snakes=tuple(snakes),
            food=frozenset(_coord(f) for f in b.get("food", [])),
            hazards=frozenset(_coord(h) for h in b.get("hazards", [])),
            turn=int(payload.get("turn", 0)),
            rules=_ruleset(game),
        )
        timeout = game.get("timeout")
        return GameState(
            board=board,
            you=you_id,
            timeout_ms=DEFAULT_TIMEOUT_MS if timeout is None else int(timeout),
            game_id=str(game.get("id", "")),
            received_at=received_at,
        )
    except (KeyError, TypeError, ValueError) as exc:
        if isinstance(exc, PayloadError):
            raise
        raise PayloadError(f"malformed game state: {exc!r}") from exc

"""Immutable board snapshot: coordinates, moves, snakes, rulesets."""
from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from snakemind.config import DEFAULT_HAZARD_DAMAGE, MAX_HEALTH

Coord = Tuple[int, int]


class Move(str, enum.Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# Priority order doubles as the deterministic tie-break.
MOVES: Tuple[Move, ...] = (Move.UP, Move.DOWN, Move.LEFT, Move.RIGHT)

DIRS: Dict[Move, Coord] = {
    Move.UP: (0, 1),
    Move.DOWN: (0, -1),
    Move.LEFT: (-1, 0),
    Move.RIGHT: (1, 0),
}


def add(a: Coord, b: Coord) -> Coord:
    return (a[0] + b[0], a[1] + b[1])


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@functools.lru_cache(maxsize=4096)
def neighbor_list(w: int, h: int, c: Coord, wrapped: bool = False) -> Tuple[Coord, ...]:
    res = []
    for dx, dy in DIRS.values():
        n = (c[0] + dx, c[1] + dy)
        if wrapped:
            res.append((n[0] % w, n[1] % h))
        elif 0 <= n[0] < w and 0 <= n[1] < h:
            res.append(n)
    return tuple(res)


# ---------------------------------
# Rules
# ---------------------------------

@dataclass(frozen=True)
class Ruleset:
    name: str = "standard"
    hazard_damage: int = DEFAULT_HAZARD_DAMAGE

    @property
    def wrapped(self) -> bool:
        return self.name == "wrapped"

    @property
    def constrictor(self) -> bool:
        return self.name == "constrictor"


STANDARD = Ruleset()


# ---------------------------------
# Data models
# ---------------------------------

@dataclass(frozen=True)
class Snake:
    id: str
    health: int
    body: Tuple[Coord, ...]  # head first
    alive: bool = True
    eliminated_cause: str = ""

    @property
    def head(self) -> Coord:
        return self.body[0]

    @property
    def length(self) -> int:
        return len(self.body)

    @property
    def tail(self) -> Coord:
        return self.body[-1]

    @property
    def tail_stacked(self) -> bool:
        """True right after eating: the tail will not move next tick."""
        return len(self.body) > 1 and self.body[-1] == self.body[-2]


@dataclass(frozen=True)
class Board:
    width: int
    height: int
    snakes: Tuple[Snake, ...]
    food: FrozenSet[Coord] = frozenset()
    hazards: FrozenSet[Coord] = frozenset()
    turn: int = 0
    rules: Ruleset = STANDARD

    # -- queries --------------------------------------------------------

    def is_inside(self, pos: Coord) -> bool:
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height

    def is_food(self, pos: Coord) -> bool:
        return pos in self.food

    def is_hazard(self, pos: Coord) -> bool:
        return pos in self.hazards

    def is_occupied_by_body(self, pos: Coord) -> bool:
        return pos in self.occupied

    def snake(self, snake_id: str) -> Snake:
        for s in self.snakes:
            if s.id == snake_id:
                return s
        raise KeyError(snake_id)

    def get(self, snake_id: str) -> Optional[Snake]:
        for s in self.snakes:
            if s.id == snake_id:
                return s
        return None

    @property
    def alive_snakes(self) -> Tuple[Snake, ...]:
        return tuple(s for s in self.snakes if s.alive)

    def opponents(self, snake_id: str, alive_only: bool = True) -> List[Snake]:
        return [s for s in self.snakes if s.id != snake_id and (s.alive or not alive_only)]

    def step(self, pos: Coord, move: Move) -> Coord:
        n = add(pos, DIRS[move])
        if self.rules.wrapped:
            return (n[0] % self.width, n[1] % self.height)
        return n

    def neighbors(self, pos: Coord) -> Tuple[Coord, ...]:
        return neighbor_list(self.width, self.height, pos, self.rules.wrapped)

    def distance(self, a: Coord, b: Coord) -> int:
        """Fewest moves between two cells, ignoring obstacles."""
        if not self.rules.wrapped:
            return manhattan(a, b)
        dx = abs(a[0] - b[0]) % self.width
        dy = abs(a[1] - b[1]) % self.height
        return min(dx, self.width - dx) + min(dy, self.height - dy)

    # -- derived sets (computed once per snapshot) ----------------------

    @functools.cached_property
    def occupied(self) -> FrozenSet[Coord]:
        """Every cell covered by a live snake, tails included."""
        cells = set()
        for s in self.snakes:
            if s.alive:
                cells.update(s.body)
        return frozenset(cells)

    @functools.cached_property
    def obstacles(self) -> FrozenSet[Coord]:
        """Cells that stay blocked next tick whatever anyone plays.

        A tail leaves its cell on the next move unless it is stacked.
        """
        cells = set()
        for s in self.snakes:
            if not s.alive:
                continue
            if s.tail_stacked:
                cells.update(s.body)
            else:
                cells.update(s.body[:-1])
        return frozenset(cells)

    @functools.cached_property
    def fingerprint(self) -> int:
        return hash((
            self.turn,
            tuple((s.id, s.health, s.alive, s.body) for s in self.snakes),
            self.food,
            self.hazards,
        ))

    # -- construction helpers -------------------------------------------

    def replace_snakes(self, snakes: Iterable[Snake], **changes) -> "Board":
        return Board(
            width=self.width,
            height=self.height,
            snakes=tuple(snakes),
            food=changes.get("food", self.food),
            hazards=changes.get("hazards", self.hazards),
            turn=changes.get("turn", self.turn),
            rules=self.rules,
        )

    @classmethod
    def from_text(
        cls,
        text: str,
        health: Optional[Mapping[str, int]] = None,
        turn: int = 0,
        rules: Ruleset = STANDARD,
    ) -> "Board":
        """Build a board from an ASCII grid, top row first.

        Cells are ``|..|`` separated: blank, ``F`` food, ``H`` hazard,
        ``Z`` food on a hazard, or a snake letter followed by the segment
        index (``Y0`` is Y's head). ``Y2,3`` puts segments 2 and 3 on the
        same cell, i.e. a stacked tail.
        """
        health = health or {}
        rows = [r.strip() for r in text.strip("\n").splitlines()]
        rows = [r for r in rows if r.startswith("|")]
        height = len(rows)
        width = 0
        food, hazards = set(), set()
        segments: Dict[str, List[Tuple[int, Coord]]] = {}
        for row_index, row in enumerate(rows):
            y = height - 1 - row_index
            cells = row.strip("|").split("|")
            width = max(width, len(cells))
            for x, raw in enumerate(cells):
                cell = raw.strip()
                if not cell:
                    continue
                kind = cell[0]
                if kind == "F":
                    food.add((x, y))
                elif kind == "H":
                    hazards.add((x, y))
                elif kind == "Z":
                    food.add((x, y))
                    hazards.add((x, y))
                else:
                    for part in cell[1:].split(","):
                        segments.setdefault(kind, []).append((int(part), (x, y)))
        snakes = []
        for sid in sorted(segments):
            body = tuple(c for _, c in sorted(segments[sid], key=lambda p: p[0]))
            snakes.append(Snake(id=sid, health=health.get(sid, MAX_HEALTH), body=body))
        return cls(
            width=width,
            height=height,
            snakes=tuple(snakes),
            food=frozenset(food),
            hazards=frozenset(hazards),
            turn=turn,
            rules=rules,
        )


@dataclass(frozen=True)
class GameState:
    board: Board
    you: str
    timeout_ms: int
    game_id: str = ""
    received_at: Optional[float] = field(default=None, compare=False)

    @property
    def me(self) -> Snake:
        return self.board.snake(self.you)

"""Static evaluation of a board from one snake's point of view.

The score is dominated by reachable space (running out of room is how most
games are lost), followed by length advantage, health, and a pull towards
food that only switches on when hungry. With opponents on the board a second
breadth-first pass from every head at once splits the cells between the
snakes, and the margin of controlled cells over the strongest rival counts
too. Both passes are linear in the number of cells; evaluation runs at every
leaf of the search.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from snakemind.board import Board, Coord
from snakemind.config import LOSE_SCORE, MAX_HEALTH, WIN_SCORE, EngineConfig

DEFAULT_CONFIG = EngineConfig()

# Scores beyond this magnitude are decided games, not heuristics.
TERMINAL_THRESHOLD = WIN_SCORE / 2


@dataclass(frozen=True)
class Analysis:
    space: int
    food_distance: Optional[int]


def reachable(board: Board, start: Coord, blocked: Optional[FrozenSet[Coord]] = None) -> Analysis:
    """Flood fill from ``start`` over free, non-hazard cells.

    ``start`` itself is not counted. Live snake bodies are treated as fixed
    obstacles. Food on a hazard still reports its distance but the fill does
    not continue through it.
    """
    if blocked is None:
        blocked = board.occupied
    food = board.food
    hazards = board.hazards
    seen = {start}
    q = deque([(start, 0)])
    space = 0
    food_distance = None
    while q:
        c, d = q.popleft()
        for n in board.neighbors(c):
            if n in seen or n in blocked:
                continue
            seen.add(n)
            if n in food and food_distance is None:
                food_distance = d + 1
            if n in hazards:
                continue
            space += 1
            q.append((n, d + 1))
    return Analysis(space=space, food_distance=food_distance)


@dataclass(frozen=True)
class Territory:
    cells: int
    food: int
    tails: int
    own_tail: bool


def territory(board: Board) -> Dict[str, Territory]:
    """Split the board between live snakes by who gets there first.

    A breadth-first search runs from every live head at once. A cell reached
    at the same distance by two snakes belongs to nobody, and so does
    whatever is only reached through it. Hazards are not expanded, as in
    ``reachable``. Tails that move away next tick count as free, so each
    snake also learns whether its own tail lies in its territory.
    """
    live = board.alive_snakes
    blocked = board.obstacles
    tails = {s.tail: s.id for s in live if not s.tail_stacked}
    owner: Dict[Coord, Optional[str]] = {}
    dist: Dict[Coord, int] = {}
    q = deque()
    for s in live:
        if s.head in owner:
            owner[s.head] = None
            continue
        owner[s.head] = s.id
        dist[s.head] = 0
        q.append(s.head)
    while q:
        c = q.popleft()
        o = owner[c]
        d = dist[c] + 1
        for n in board.neighbors(c):
            if n in blocked:
                continue
            if n not in dist:
                dist[n] = d
                owner[n] = o
                if n not in board.hazards:
                    q.append(n)
            elif dist[n] == d and owner[n] != o:
                owner[n] = None

    cells = {s.id: 0 for s in live}
    food = {s.id: 0 for s in live}
    tail_count = {s.id: 0 for s in live}
    own_tail = {s.id: False for s in live}
    for c, o in owner.items():
        if o is None or dist[c] == 0:
            continue
        cells[o] += 1
        if c in board.food:
            food[o] += 1
        if c in tails:
            tail_count[o] += 1
            if tails[c] == o:
                own_tail[o] = True
    return {
        sid: Territory(cells=cells[sid], food=food[sid], tails=tail_count[sid], own_tail=own_tail[sid])
        for sid in cells
    }


def analyze(board: Board, snake_id: str) -> Analysis:
    me = board.snake(snake_id)
    if not me.alive:
        return Analysis(space=0, food_distance=None)
    return reachable(board, me.head)


def is_terminal(score: float) -> bool:
    return abs(score) >= TERMINAL_THRESHOLD


def evaluate(board: Board, snake_id: str, config: Optional[EngineConfig] = None) -> float:
    cfg = config or DEFAULT_CONFIG
    me = board.get(snake_id)
    if me is None or not me.alive:
        return LOSE_SCORE
    opponents = board.opponents(snake_id, alive_only=False)
    live = [o for o in opponents if o.alive]
    if opponents and not live:
        return WIN_SCORE

    info = reachable(board, me.head)

    score = cfg.weight("space") * info.space
    if info.space < me.length:
        score += cfg.weight("trapped")

    longest = max((o.length for o in live), default=me.length)
    score += cfg.weight("length") * (me.length - longest)

    score += cfg.weight("health") * max(0, me.health - cfg.hunger_threshold)
    if me.health <= cfg.critical_health:
        score += cfg.weight("starving")

    if me.health < cfg.hunger_threshold and info.food_distance is not None:
        need = (MAX_HEALTH - me.health) / MAX_HEALTH
        score += cfg.weight("food") * need / (1 + info.food_distance)

    if live:
        land = territory(board)
        mine = land[snake_id]
        rival = max(land[o.id].cells for o in live)
        score += cfg.weight("territory") * (mine.cells - rival)
        score += cfg.weight("territory_food") * mine.food
        if mine.own_tail:
            score += cfg.weight("own_tail")

    if me.head in board.hazards:
        score += cfg.weight("hazard")
    return score

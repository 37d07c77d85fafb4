"""One-tick game rules: movement, feeding, health and eliminations."""
from __future__ import annotations

from typing import Dict, List, Mapping

from snakemind.board import Board, Coord, Move, Ruleset, Snake
from snakemind.config import MAX_HEALTH

STARVATION = "starvation"
WALL = "wall"
BODY_COLLISION = "body-collision"
HEAD_COLLISION = "head-collision"


def future_health(h: int, ate: bool, in_hazard: bool, rules: Ruleset) -> int:
    if ate or rules.constrictor:
        return MAX_HEALTH
    h -= 1
    if in_hazard:
        h -= rules.hazard_damage
    return h


def advance(board: Board, moves: Mapping[str, Move]) -> Board:
    """Apply one simultaneous tick. ``moves`` must name every live snake."""
    missing = [s.id for s in board.snakes if s.alive and s.id not in moves]
    if missing:
        raise ValueError(f"no move given for snake(s): {', '.join(missing)}")
    return _tick(board, moves)


def project(board: Board, snake_id: str, move: Move) -> Board:
    """Advance ``snake_id`` alone; every other snake holds still.

    The frozen snakes act as static obstacles, their full bodies included,
    which is the worst case for the moving snake.
    """
    return _tick(board, {snake_id: move})


def _tick(board: Board, moves: Mapping[str, Move]) -> Board:
    rules = board.rules

    # Move heads, shift bodies, feed
    moved: Dict[str, Snake] = {}
    eaten = set()
    for s in board.snakes:
        if not s.alive or s.id not in moves:
            continue
        head = board.step(s.head, moves[s.id])
        body = (head,) + s.body[:-1]
        ate = head in board.food
        if ate:
            eaten.add(head)
        if ate or rules.constrictor:
            body = body + (body[-1],)
        health = future_health(s.health, ate, head in board.hazards, rules)
        moved[s.id] = Snake(id=s.id, health=health, body=body)

    # Starvation and walls first; those snakes never block anyone
    causes: Dict[str, str] = {}
    for sid, s in moved.items():
        if s.health <= 0:
            causes[sid] = STARVATION
        elif not board.is_inside(s.head):
            causes[sid] = WALL

    survivors = [s for s in moved.values() if s.id not in causes]
    blocked = set()
    for s in survivors:
        blocked.update(s.body[1:])
    for s in board.snakes:
        if s.alive and s.id not in moves:
            blocked.update(s.body)

    heads: Dict[Coord, List[Snake]] = {}
    for s in survivors:
        heads.setdefault(s.head, []).append(s)

    for s in survivors:
        if s.head in blocked:
            causes[s.id] = BODY_COLLISION
        elif any(o.id != s.id and o.length >= s.length for o in heads[s.head]):
            causes[s.id] = HEAD_COLLISION

    snakes = []
    for s in board.snakes:
        nxt = moved.get(s.id)
        if nxt is None:
            snakes.append(s)
        elif nxt.id in causes:
            snakes.append(Snake(
                id=nxt.id,
                health=max(nxt.health, 0),
                body=nxt.body,
                alive=False,
                eliminated_cause=causes[nxt.id],
            ))
        else:
            snakes.append(nxt)

    return board.replace_snakes(snakes, food=board.food - eaten, turn=board.turn + 1)

"""Cheap root pruning: drop moves that are fatal no matter what others do."""
from __future__ import annotations

from typing import List

from snakemind.board import MOVES, Board, Coord, Move, Snake
from snakemind.simulator import future_health


def is_certainly_fatal(board: Board, snake: Snake, target: Coord) -> bool:
    if not board.is_inside(target):
        return True
    # Other snakes can only vacate their tails, and a tail only moves when
    # it is not stacked, so ``obstacles`` stays blocked whatever they play.
    if target in board.obstacles:
        return True
    ate = target in board.food
    return future_health(snake.health, ate, target in board.hazards, board.rules) <= 0


def safe_moves(board: Board, snake_id: str) -> List[Move]:
    """Moves for ``snake_id`` that are not certainly fatal next tick.

    Head-to-head outcomes depend on the other snakes' choices and are left
    to the search. When every move is fatal all four are returned so a move
    can still be chosen.
    """
    snake = board.snake(snake_id)
    if not snake.alive:
        return list(MOVES)
    safe = [m for m in MOVES if not is_certainly_fatal(board, snake, board.step(snake.head, m))]
    return safe or list(MOVES)

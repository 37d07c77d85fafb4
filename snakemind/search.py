"""Deadline-bounded paranoid max-n search.

A tick is expanded as a sequence of plies: our snake picks first
(maximizing), then every live opponent in board order (minimizing our
score), and once everybody has picked the simulator advances the board.
Alpha-beta bounds are threaded through all plies. Depth is counted in ticks
and grown by iterative deepening until the deadline; a depth that runs out
of time is thrown away and the last completed one is used.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from snakemind.board import MOVES, Board, Move
from snakemind.config import EngineConfig
from snakemind.evaluator import TERMINAL_THRESHOLD, Analysis, analyze, evaluate, is_terminal
from snakemind.safety import safe_moves
from snakemind.simulator import advance, project

logger = logging.getLogger(__name__)

TIE_EPSILON = 1e-9

Pending = Tuple[Tuple[str, Move], ...]


class SearchTimeout(Exception):
    """The deadline passed while a depth was being searched."""


class Deadline:
    def __init__(self, at: float, clock: Callable[[], float] = time.perf_counter):
        self.at = at
        self.clock = clock

    @classmethod
    def after_ms(cls, ms: float, clock: Callable[[], float] = time.perf_counter,
                 start: Optional[float] = None) -> "Deadline":
        begin = clock() if start is None else start
        return cls(begin + ms / 1000.0, clock)

    def expired(self) -> bool:
        return self.clock() >= self.at


# ---------------------------------
# Transposition table
# ---------------------------------
EXACT, LOWER, UPPER = 0, 1, 2


class TranspositionTable:
    """Scores of already searched nodes, for one decision only.

    When full it is simply emptied.
    """

    def __init__(self, max_entries: int):
        self.max_entries = max_entries
        self._entries: Dict[tuple, Tuple[float, int]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: tuple) -> Optional[Tuple[float, int]]:
        return self._entries.get(key)

    def put(self, key: tuple, score: float, flag: int) -> None:
        if self.max_entries <= 0:
            return
        if len(self._entries) >= self.max_entries:
            self._entries.clear()
        self._entries[key] = (score, flag)


# ---------------------------------
# Opponent models
# ---------------------------------

class ParanoidOpponents:
    """Every opponent picks whichever of its moves hurts us most."""

    name = "paranoid"

    def replies(self, board: Board, snake_id: str, config: EngineConfig) -> List[Move]:
        return safe_moves(board, snake_id)


class GreedyOpponents:
    """Every opponent plays the move that looks best for itself one ply ahead."""

    name = "greedy"

    def replies(self, board: Board, snake_id: str, config: EngineConfig) -> List[Move]:
        candidates = safe_moves(board, snake_id)
        best = max(candidates, key=lambda m: evaluate(project(board, snake_id, m), snake_id, config))
        return [best]


OPPONENT_MODELS = {
    ParanoidOpponents.name: ParanoidOpponents,
    GreedyOpponents.name: GreedyOpponents,
}


def get_opponent_model(name: str):
    try:
        return OPPONENT_MODELS[name]()
    except KeyError:
        raise ValueError(
            f"unknown opponent model {name!r}, expected one of {sorted(OPPONENT_MODELS)}"
        ) from None


# ---------------------------------
# Search
# ---------------------------------

@dataclass(frozen=True)
class SearchResult:
    move: Move
    score: float
    depth: int
    nodes: int
    # Exact for the best move; bounds for the others.
    scores: Dict[Move, float] = field(default_factory=dict)


class SearchEngine:
    def __init__(
        self,
        you: str,
        deadline: Deadline,
        config: Optional[EngineConfig] = None,
        opponent_model=None,
    ):
        self.you = you
        self.deadline = deadline
        self.config = config or EngineConfig()
        self.opponents = opponent_model or get_opponent_model(self.config.opponent_model)
        self.table = TranspositionTable(self.config.tt_max_entries)
        self.nodes = 0
        self._root_turn = 0

    def search(self, board: Board, root_moves: Sequence[Move]) -> Optional[SearchResult]:
        """Iterative deepening; ``None`` when not even depth 1 completed."""
        self._root_turn = board.turn
        order = list(root_moves)
        best: Optional[SearchResult] = None
        if not order:
            return None
        for depth in range(1, self.config.max_depth + 1):
            if self.deadline.expired():
                break
            try:
                result = self._search_root(board, order, depth)
            except SearchTimeout:
                logger.debug("depth %d abandoned after %d nodes", depth, self.nodes)
                break
            best = result
            logger.debug(
                "depth %d done: %s score=%.1f nodes=%d tt=%d",
                depth, result.move.value, result.score, self.nodes, len(self.table),
            )
            if is_terminal(result.score):
                break
            order = [result.move] + [m for m in order if m != result.move]
        return best

    # -- internals ------------------------------------------------------

    def _poll(self) -> None:
        self.nodes += 1
        if self.nodes % self.config.poll_interval == 0 and self.deadline.expired():
            raise SearchTimeout()

    def _turn_order(self, board: Board) -> Tuple[str, ...]:
        return (self.you,) + tuple(s.id for s in board.snakes if s.alive and s.id != self.you)

    def _search_root(self, board: Board, root_moves: Sequence[Move], depth: int) -> SearchResult:
        order = self._turn_order(board)
        scores: Dict[Move, float] = {}
        best = -math.inf
        alpha = -math.inf
        for move in root_moves:
            value = self._child(board, depth, order, 0, ((self.you, move),),
                                alpha - TIE_EPSILON, math.inf)
            scores[move] = value
            if value > best:
                best = value
            alpha = max(alpha, best)
        tied = [m for m in root_moves if scores[m] >= best - TIE_EPSILON]
        move = tied[0] if len(tied) == 1 else self._break_tie(board, tied)
        return SearchResult(move=move, score=best, depth=depth, nodes=self.nodes, scores=scores)

    def _break_tie(self, board: Board, moves: Sequence[Move]) -> Move:
        hungry = board.snake(self.you).health < self.config.hunger_threshold
        cells = board.width * board.height

        def key(move: Move):
            info: Analysis = analyze(project(board, self.you, move), self.you)
            food = 0
            if hungry:
                food = -(info.food_distance if info.food_distance is not None else cells)
            return (info.space, food, -MOVES.index(move))

        return max(moves, key=key)

    def _node(self, board: Board, depth: int, alpha: float, beta: float) -> float:
        """Value of ``board`` at the start of a tick."""
        self._poll()
        me = board.get(self.you)
        if depth == 0 or me is None or not me.alive:
            return self._leaf(board)
        opponents = board.opponents(self.you, alive_only=False)
        if opponents and not any(o.alive for o in opponents):
            return self._leaf(board)
        return self._ply(board, depth, self._turn_order(board), 0, (), alpha, beta)

    def _replies(self, board: Board, mover: str, depth: int) -> List[Move]:
        """Opponent replies worth branching on with ``depth`` ticks left.

        Two heads close the gap by at most two cells per tick, so a snake
        further away than that cannot meet us before the horizon and only
        plays its first reply.
        """
        replies = self.opponents.replies(board, mover, self.config)
        me = board.snake(self.you)
        if board.distance(board.snake(mover).head, me.head) > 2 * depth:
            return replies[:1]
        return replies

    def _leaf(self, board: Board) -> float:
        score = evaluate(board, self.you, self.config)
        ticks = board.turn - self._root_turn
        # Losing later and winning sooner are better.
        if score <= -TERMINAL_THRESHOLD:
            return score + ticks
        if score >= TERMINAL_THRESHOLD:
            return score - ticks
        return score

    def _child(self, board: Board, depth: int, order: Tuple[str, ...], index: int,
               pending: Pending, alpha: float, beta: float) -> float:
        if index + 1 < len(order):
            return self._ply(board, depth, order, index + 1, pending, alpha, beta)
        nxt = advance(board, dict(pending))
        return self._node(nxt, depth - 1, alpha, beta)

    def _ply(self, board: Board, depth: int, order: Tuple[str, ...], index: int,
             pending: Pending, alpha: float, beta: float) -> float:
        mover = order[index]
        maximizing = mover == self.you
        key = (board.fingerprint, depth, mover, pending)
        alpha0, beta0 = alpha, beta
        entry = self.table.get(key)
        if entry is not None:
            score, flag = entry
            if flag == EXACT:
                return score
            if flag == LOWER:
                alpha = max(alpha, score)
            elif flag == UPPER:
                beta = min(beta, score)
            if alpha >= beta:
                return score

        if maximizing:
            candidates = safe_moves(board, mover)
            best = -math.inf
        else:
            candidates = self._replies(board, mover, depth)
            best = math.inf

        for move in candidates:
            self._poll()
            value = self._child(board, depth, order, index, pending + ((mover, move),), alpha, beta)
            if maximizing:
                best = max(best, value)
                alpha = max(alpha, best)
            else:
                best = min(best, value)
                beta = min(beta, best)
            if beta <= alpha:
                break

        if best <= alpha0:
            flag = UPPER
        elif best >= beta0:
            flag = LOWER
        else:
            flag = EXACT
        self.table.put(key, best, flag)
        return best

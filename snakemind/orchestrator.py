"""Entry point of the engine: one GameState in, exactly one Move out."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from snakemind.board import MOVES, Board, GameState, Move
from snakemind.config import EngineConfig
from snakemind.evaluator import analyze, evaluate
from snakemind.safety import safe_moves
from snakemind.search import Deadline, SearchEngine
from snakemind.simulator import project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    move: Move
    score: Optional[float]
    depth: int
    nodes: int
    elapsed_ms: float
    fallback: bool = False

    @property
    def shout(self) -> str:
        if self.fallback:
            return f"MOVE: {self.move.value} | FALLBACK"
        score = "-" if self.score is None else f"{self.score:.0f}"
        return f"MOVE: {self.move.value} | SCORE: {score} | DEPTH: {self.depth}"


def fallback_move(board: Board, you: str, config: Optional[EngineConfig] = None,
                  candidates: Optional[Sequence[Move]] = None) -> Move:
    """Best move by a one-ply look with everybody else standing still."""
    me = board.get(you)
    if me is None or not me.alive:
        return MOVES[0]
    moves = list(candidates) if candidates else safe_moves(board, you)

    def key(move: Move):
        nxt = project(board, you, move)
        return (evaluate(nxt, you, config), analyze(nxt, you).space, -MOVES.index(move))

    return max(moves, key=key)


def decide(game_state: GameState, config: Optional[EngineConfig] = None,
           clock: Callable[[], float] = time.perf_counter) -> Decision:
    cfg = config or EngineConfig()
    start = game_state.received_at if game_state.received_at is not None else clock()
    deadline = Deadline.after_ms(cfg.search_budget_ms(game_state.timeout_ms), clock, start)
    board = game_state.board

    def elapsed() -> float:
        return (clock() - start) * 1000.0

    decision = None
    root: Sequence[Move] = ()
    try:
        root = safe_moves(board, game_state.you)
        if len(root) == 1:
            decision = Decision(move=root[0], score=None, depth=0, nodes=0, elapsed_ms=elapsed())
        else:
            engine = SearchEngine(game_state.you, deadline, cfg)
            result = engine.search(board, root)
            if result is not None:
                decision = Decision(
                    move=result.move,
                    score=result.score,
                    depth=result.depth,
                    nodes=result.nodes,
                    elapsed_ms=elapsed(),
                )
            else:
                logger.warning(
                    "turn %d: no search depth completed within %dms, using one-ply fallback",
                    board.turn, game_state.timeout_ms,
                )
    except Exception:
        logger.exception("turn %d: search failed, using one-ply fallback", board.turn)

    if decision is None:
        try:
            move = fallback_move(board, game_state.you, cfg, root)
        except Exception:
            logger.exception("turn %d: fallback failed, using first safe move", board.turn)
            move = root[0] if root else MOVES[0]
        decision = Decision(
            move=move,
            score=None,
            depth=0,
            nodes=0,
            elapsed_ms=elapsed(),
            fallback=True,
        )

    logger.info(
        "turn %d | %s: %s score=%s depth=%d nodes=%d %.1fms%s",
        board.turn, game_state.you, decision.move.value, decision.score, decision.depth,
        decision.nodes, decision.elapsed_ms, " (fallback)" if decision.fallback else "",
    )
    return decision


def choose_move(game_state: GameState, config: Optional[EngineConfig] = None) -> Move:
    return decide(game_state, config).move

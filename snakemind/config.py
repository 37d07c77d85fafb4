"""Tunables for the move engine.

Weights and thresholds live at module level so they can be tweaked in one
place; ``EngineConfig`` bundles them per decision and can be overridden from
the environment (``SNAKEMIND_*`` variables).
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional

# ---------------------------------
# Game constants
# ---------------------------------
MAX_HEALTH = 100
DEFAULT_HAZARD_DAMAGE = 15  # stacks on top of the regular 1 per tick
DEFAULT_TIMEOUT_MS = 500

# ---------------------------------
# Evaluation
# ---------------------------------
WIN_SCORE = 1_000_000.0
LOSE_SCORE = -1_000_000.0

EVAL_WEIGHTS: Dict[str, float] = {
    "space": 10.0,      # per reachable cell
    "trapped": -500.0,  # reachable space smaller than own length
    "length": 25.0,     # per segment over the longest opponent
    "health": 0.5,      # per health point above the hunger threshold
    "starving": -400.0,
    "food": 120.0,      # scaled by hunger and 1 / (1 + distance)
    "hazard": -30.0,    # head resting on a hazard
    "territory": 4.0,   # per cell controlled over the strongest rival
    "territory_food": 15.0,
    "own_tail": 40.0,   # own tail inside own territory
}

HUNGER_THRESHOLD = 40
CRITICAL_HEALTH = 10

# ---------------------------------
# Search / timing
# ---------------------------------
SAFETY_BUFFER_MS = 50   # stop searching this long before the deadline
LATENCY_MS = 100        # reserved for the round trip to the game host
MAX_DEPTH = 24          # ticks
POLL_INTERVAL = 8       # nodes between deadline checks
TT_MAX_ENTRIES = 200_000
OPPONENT_MODEL = "paranoid"


@dataclass(frozen=True)
class EngineConfig:
    safety_buffer_ms: int = SAFETY_BUFFER_MS
    latency_ms: int = LATENCY_MS
    max_depth: int = MAX_DEPTH
    poll_interval: int = POLL_INTERVAL
    tt_max_entries: int = TT_MAX_ENTRIES
    opponent_model: str = OPPONENT_MODEL
    hunger_threshold: int = HUNGER_THRESHOLD
    critical_health: int = CRITICAL_HEALTH
    weights: Mapping[str, float] = field(default_factory=lambda: dict(EVAL_WEIGHTS))

    def weight(self, name: str) -> float:
        return self.weights.get(name, EVAL_WEIGHTS[name])

    def search_budget_ms(self, timeout_ms: int) -> float:
        """Milliseconds the search may run for a request with ``timeout_ms``."""
        return max(0.0, timeout_ms - self.latency_ms - self.safety_buffer_ms)

    def with_overrides(self, **changes) -> "EngineConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if environ is None else environ

        def as_int(key: str, default: int) -> int:
            raw = env.get(key)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{key} must be an integer, got {raw!r}") from None

        return cls(
            safety_buffer_ms=as_int("SNAKEMIND_SAFETY_BUFFER_MS", SAFETY_BUFFER_MS),
            latency_ms=as_int("SNAKEMIND_LATENCY_MS", LATENCY_MS),
            max_depth=as_int("SNAKEMIND_MAX_DEPTH", MAX_DEPTH),
            poll_interval=max(1, as_int("SNAKEMIND_POLL_INTERVAL", POLL_INTERVAL)),
            tt_max_entries=as_int("SNAKEMIND_TT_MAX_ENTRIES", TT_MAX_ENTRIES),
            opponent_model=env.get("SNAKEMIND_OPPONENT_MODEL", OPPONENT_MODEL) or OPPONENT_MODEL,
            hunger_threshold=as_int("SNAKEMIND_HUNGER_THRESHOLD", HUNGER_THRESHOLD),
            critical_health=as_int("SNAKEMIND_CRITICAL_HEALTH", CRITICAL_HEALTH),
        )

"""Shared fixtures: boards drawn as text and Battlesnake request payloads."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from snakemind.board import Board


def snake_payload(snake_id: str, body: List[tuple], health: int = 100) -> Dict:
    return {
        "id": snake_id,
        "name": snake_id,
        "health": health,
        "body": [{"x": x, "y": y} for x, y in body],
        "head": {"x": body[0][0], "y": body[0][1]},
        "length": len(body),
        "latency": "100",
        "shout": "",
    }


def make_payload(
    you: Dict,
    others: Optional[List[Dict]] = None,
    width: int = 11,
    height: int = 11,
    food: Optional[List[tuple]] = None,
    hazards: Optional[List[tuple]] = None,
    timeout: int = 500,
    turn: int = 3,
    ruleset: str = "standard",
) -> Dict:
    return {
        "game": {
            "id": "game-1",
            "ruleset": {"name": ruleset, "version": "v1.2.3", "settings": {"hazardDamagePerTurn": 14}},
            "map": "standard",
            "timeout": timeout,
            "source": "custom",
        },
        "turn": turn,
        "board": {
            "width": width,
            "height": height,
            "food": [{"x": x, "y": y} for x, y in (food or [])],
            "hazards": [{"x": x, "y": y} for x, y in (hazards or [])],
            "snakes": [you] + list(others or []),
        },
        "you": you,
    }


@pytest.fixture
def head_to_head_board() -> Board:
    # Y (length 3) can go up, or right into the reach of the longer A.
    return Board.from_text(
        """
        |  |  |  |  |  |
        |  |  |  |  |  |
        |Y0|  |A0|A1|A2|
        |Y1|  |  |  |A3|
        |Y2|  |  |  |  |
        """
    )


@pytest.fixture
def doomed_opponent_board() -> Board:
    # A is boxed into the corner by its own body and Y's.
    return Board.from_text(
        """
        |  |  |  |  |  |
        |  |  |  |  |  |
        |Y3|Y0|  |  |  |
        |Y2|Y1|  |  |  |
        |A0|A1|A2|  |  |
        """
    )


@pytest.fixture
def wall_board() -> Board:
    # Only "down" keeps Y alive.
    return Board.from_text(
        """
        |Y0|Y1|  |
        |  |Y2|  |
        |  |  |  |
        """
    )


@pytest.fixture
def snake():
    return snake_payload


@pytest.fixture
def payload():
    return make_payload

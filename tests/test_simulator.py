"""Tests for snakemind.simulator."""

from __future__ import annotations

import pytest

from snakemind.board import Board, Move, Ruleset
from snakemind.simulator import (
    BODY_COLLISION,
    HEAD_COLLISION,
    STARVATION,
    WALL,
    advance,
    project,
)

DUEL = """
|  |  |  |  |H |
|  |Y0|  |A2|  |
|  |Y1|  |A1|  |
|  |Y2|  |A0|  |
|  |  |F |F |  |
"""

SOLO = """
|  |  |  |  |  |
|H |Y0|Y1|Y2|  |
|  |  |  |  |  |
|  |  |  |  |  |
|  |  |  |  |  |
"""


class TestMovement:
    def test_bodies_shift_forward(self) -> None:
        board = Board.from_text(DUEL)
        nxt = advance(board, {"Y": Move.UP, "A": Move.RIGHT})
        assert nxt.snake("Y").body == ((1, 4), (1, 3), (1, 2))
        assert nxt.snake("A").body == ((4, 1), (3, 1), (3, 2))
        assert nxt.turn == board.turn + 1

    def test_input_board_untouched(self) -> None:
        board = Board.from_text(DUEL)
        before = board.snakes
        advance(board, {"Y": Move.UP, "A": Move.RIGHT})
        assert board.snakes == before

    def test_deterministic(self) -> None:
        board = Board.from_text(DUEL)
        moves = {"Y": Move.LEFT, "A": Move.DOWN}
        assert advance(board, moves) == advance(board, moves)

    def test_missing_move_rejected(self) -> None:
        board = Board.from_text(DUEL)
        with pytest.raises(ValueError, match="A"):
            advance(board, {"Y": Move.UP})

    def test_chasing_own_tail_is_safe(self) -> None:
        board = Board.from_text(
            """
            |  |Y7|Y6|  |  |
            |  |Y0|Y5|  |  |
            |  |Y1|Y4|  |  |
            |  |Y2|Y3|  |  |
            |  |  |  |  |  |
            """
        )
        nxt = advance(board, {"Y": Move.UP})
        you = nxt.snake("Y")
        assert you.alive
        assert you.head == (1, 4)
        assert you.body[7] == (2, 4)


class TestFood:
    def test_eating_grows_and_restores_health(self) -> None:
        board = Board.from_text(DUEL, health={"A": 40})
        nxt = advance(board, {"Y": Move.UP, "A": Move.DOWN})
        other = nxt.snake("A")
        assert other.health == 100
        assert other.length == 4
        assert other.body[2] == other.body[3] == (3, 2)
        assert (3, 0) not in nxt.food
        assert (2, 0) in nxt.food

    def test_stacked_tail_holds_for_one_tick(self) -> None:
        board = Board.from_text(DUEL)
        nxt = advance(board, {"Y": Move.UP, "A": Move.DOWN})
        after = advance(nxt, {"Y": Move.RIGHT, "A": Move.RIGHT})
        assert after.snake("A").body == ((4, 0), (3, 0), (3, 1), (3, 2))


class TestHealth:
    def test_health_drops_by_one(self) -> None:
        board = Board.from_text(DUEL, health={"Y": 60})
        nxt = advance(board, {"Y": Move.UP, "A": Move.RIGHT})
        assert nxt.snake("Y").health == 59

    def test_starvation_eliminates(self) -> None:
        board = Board.from_text(DUEL, health={"Y": 1})
        nxt = advance(board, {"Y": Move.UP, "A": Move.RIGHT})
        you = nxt.snake("Y")
        assert not you.alive
        assert you.eliminated_cause == STARVATION
        assert you.health == 0

    def test_food_saves_a_starving_snake(self) -> None:
        board = Board.from_text(DUEL, health={"A": 1})
        nxt = advance(board, {"Y": Move.UP, "A": Move.DOWN})
        assert nxt.snake("A").alive
        assert nxt.snake("A").health == 100

    def test_hazard_damage_stacks(self) -> None:
        board = Board.from_text(SOLO)
        nxt = advance(board, {"Y": Move.LEFT})
        assert nxt.snake("Y").health == 100 - 1 - 15

    def test_hazard_damage_from_ruleset(self) -> None:
        board = Board.from_text(SOLO, rules=Ruleset(hazard_damage=14))
        nxt = advance(board, {"Y": Move.LEFT})
        assert nxt.snake("Y").health == 85

    def test_food_on_hazard_heals(self) -> None:
        board = Board.from_text(SOLO.replace("H ", "Z "))
        nxt = advance(board, {"Y": Move.LEFT})
        assert nxt.snake("Y").health == 100

    def test_hazard_can_kill(self) -> None:
        board = Board.from_text(SOLO, health={"Y": 16})
        nxt = advance(board, {"Y": Move.LEFT})
        assert nxt.snake("Y").eliminated_cause == STARVATION


class TestCollisions:
    def test_wall(self) -> None:
        board = Board.from_text(SOLO)
        nxt = advance(board, {"Y": Move.UP})
        nxt = advance(nxt, {"Y": Move.UP})
        assert nxt.snake("Y").eliminated_cause == WALL

    def test_own_body(self) -> None:
        board = Board.from_text(
            """
            |Y8|Y7|Y6|  |  |
            |  |Y0|Y5|  |  |
            |  |Y1|Y4|  |  |
            |  |Y2|Y3|  |  |
            |  |  |  |  |  |
            """
        )
        nxt = advance(board, {"Y": Move.UP})
        assert nxt.snake("Y").eliminated_cause == BODY_COLLISION
        assert nxt.alive_snakes == ()

    def test_other_body(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |  |  |
            |  |Y0|Y1|Y2|  |
            |A2|A1|A0|  |  |
            |  |  |  |  |  |
            |  |  |  |  |  |
            """
        )
        nxt = advance(board, {"Y": Move.DOWN, "A": Move.RIGHT})
        assert nxt.snake("Y").eliminated_cause == BODY_COLLISION
        assert [s.id for s in nxt.alive_snakes] == ["A"]

    def test_head_to_head_equal_length_kills_both(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |  |  |
            |  |Y0|Y1|Y2|  |
            |  |  |  |  |  |
            |  |A0|A1|A2|  |
            |  |  |  |  |  |
            """
        )
        nxt = advance(board, {"Y": Move.DOWN, "A": Move.UP})
        assert nxt.alive_snakes == ()
        assert {s.eliminated_cause for s in nxt.snakes} == {HEAD_COLLISION}

    def test_head_to_head_longer_survives(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |  |  |
            |  |Y0|Y1|Y2|Y3|
            |  |  |  |  |  |
            |  |A0|A1|A2|  |
            |  |  |  |  |  |
            """
        )
        nxt = advance(board, {"Y": Move.DOWN, "A": Move.UP})
        assert nxt.snake("Y").alive
        assert nxt.snake("A").eliminated_cause == HEAD_COLLISION

    def test_dead_snakes_stay_on_record(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |  |  |
            |  |Y0|Y1|Y2|Y3|
            |  |  |  |  |  |
            |  |A0|A1|A2|  |
            |  |  |  |  |  |
            """
        )
        nxt = advance(board, {"Y": Move.DOWN, "A": Move.UP})
        later = advance(nxt, {"Y": Move.DOWN})
        assert [s.id for s in later.snakes] == ["A", "Y"]
        assert not later.snake("A").alive
        assert later.snake("A").body == nxt.snake("A").body


class TestRulesets:
    def test_wrapped(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |  |  |
            |  |Y0|  |  |  |
            |  |Y1|  |  |  |
            |  |Y2|  |  |  |
            |  |  |  |  |  |
            """,
            rules=Ruleset(name="wrapped"),
        )
        for _ in range(2):
            board = advance(board, {"Y": Move.UP})
        you = board.snake("Y")
        assert you.alive
        assert you.head == (1, 0)
        assert you.tail == (1, 3)

    def test_constrictor_grows_every_tick(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |  |  |
            |  |Y0|  |  |  |
            |  |Y1|  |  |  |
            |  |Y2|  |  |  |
            |  |  |  |  |  |
            """,
            health={"Y": 50},
            rules=Ruleset(name="constrictor"),
        )
        for move in (Move.UP, Move.RIGHT, Move.RIGHT):
            board = advance(board, {"Y": move})
        you = board.snake("Y")
        assert you.health == 100
        assert you.length == 6
        assert you.tail == (1, 2)


class TestProject:
    def test_others_hold_still(self) -> None:
        board = Board.from_text(DUEL)
        nxt = project(board, "Y", Move.LEFT)
        assert nxt.snake("Y").head == (0, 3)
        assert nxt.snake("A").body == board.snake("A").body
        assert nxt.snake("A").health == board.snake("A").health

    def test_static_tail_blocks(self) -> None:
        board = Board.from_text(
            """
            |  |  |  |
            |Y0|A2|  |
            |Y1|A1|A0|
            """
        )
        assert not project(board, "Y", Move.RIGHT).snake("Y").alive
        assert advance(board, {"Y": Move.RIGHT, "A": Move.UP}).snake("Y").alive

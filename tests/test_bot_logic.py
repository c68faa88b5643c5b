"""Targeting strategies, driven against real boards."""

from __future__ import annotations

import random

import numpy as np
import pytest

from salvo.battleship import AttackResult, Board, Ship, ShipType
from salvo.bot_logic import (
    AIDifficulty,
    HuntMode,
    HuntTargetAI,
    ProbabilityAI,
    RandomAI,
    create_ai,
    placement_density,
)
from salvo.coord_utils import Coordinate, Orientation
from salvo.history import MoveHistory


def _fire(ai, board: Board, coord: Coordinate) -> AttackResult:
    result = board.receive_attack(coord).unwrap()
    ai.record_result(result, coord)
    return result


def _play_out(ai, board: Board, limit: int = 100) -> int:
    """Let *ai* shoot at *board* until every ship is sunk; returns shots taken."""
    shots = set()
    for n in range(1, limit + 1):
        target = ai.choose_target(board.public_view(), MoveHistory())
        assert target is not None
        assert target not in shots
        shots.add(target)
        _fire(ai, board, target)
        if board.all_ships_sunk:
            return n
    raise AssertionError("fleet not sunk")


@pytest.mark.parametrize("difficulty", list(AIDifficulty))
def test_factory_and_descriptions(difficulty: AIDifficulty) -> None:
    ai = create_ai(difficulty, rng=random.Random(0))
    assert ai.difficulty is difficulty
    assert difficulty.description


@pytest.mark.parametrize("difficulty", list(AIDifficulty))
def test_every_ai_sinks_a_random_fleet(difficulty: AIDifficulty) -> None:
    rng = random.Random(42)
    ai = create_ai(difficulty, rng=rng)
    board = Board()
    for ship in ai.generate_ship_placements():
        assert board.place_ship(ship).ok
    assert board.is_fleet_complete
    _play_out(ai, board)


@pytest.mark.parametrize("difficulty", list(AIDifficulty))
def test_no_target_on_exhausted_board(difficulty: AIDifficulty) -> None:
    ai = create_ai(difficulty, rng=random.Random(0))
    board = Board()
    for coord in Coordinate.all():
        _fire(ai, board, coord)
    assert ai.choose_target(board.public_view(), MoveHistory()) is None


def test_random_ai_picks_open_cells() -> None:
    ai = RandomAI(rng=random.Random(5))
    board = Board()
    for coord in Coordinate.all()[:99]:
        board.receive_attack(coord)
    assert ai.choose_target(board.public_view(), MoveHistory()) == Coordinate(9, 9)


# ---------------------------------------------------------------------------
# HuntTargetAI
# ---------------------------------------------------------------------------
def test_hunt_prefers_even_parity() -> None:
    ai = HuntTargetAI(rng=random.Random(1))
    board = Board()
    for _ in range(50):
        target = ai.choose_target(board.public_view(), MoveHistory())
        assert (target.row + target.column) % 2 == 0
        _fire(ai, board, target)
    target = ai.choose_target(board.public_view(), MoveHistory())
    assert (target.row + target.column) % 2 == 1


def test_first_hit_switches_to_targeting_neighbours() -> None:
    ai = HuntTargetAI(rng=random.Random(1))
    board = Board()
    board.place_ship(Ship(ShipType.BATTLESHIP, Coordinate(4, 3), Orientation.HORIZONTAL))
    _fire(ai, board, Coordinate(4, 4))
    assert ai.mode is HuntMode.TARGETING
    assert ai.direction is None
    target = ai.choose_target(board.public_view(), MoveHistory())
    assert target.is_adjacent(Coordinate(4, 4))


def test_two_hits_extend_the_line() -> None:
    ai = HuntTargetAI(rng=random.Random(1))
    board = Board()
    board.place_ship(Ship(ShipType.CARRIER, Coordinate(4, 2), Orientation.HORIZONTAL))
    _fire(ai, board, Coordinate(4, 4))
    _fire(ai, board, Coordinate(4, 5))
    assert ai.choose_target(board.public_view(), MoveHistory()) == Coordinate(4, 6)
    _fire(ai, board, Coordinate(4, 6))
    # Line ends at column 6; the miss drops the heading back to the first hit
    assert _fire(ai, board, Coordinate(4, 7)) == AttackResult.MISS
    assert ai.last_hit == Coordinate(4, 4)
    assert ai.direction is None


def test_blocked_line_turns_back_past_first_hit() -> None:
    ai = HuntTargetAI(rng=random.Random(1))
    board = Board()
    board.place_ship(Ship(ShipType.CRUISER, Coordinate(2, 7), Orientation.HORIZONTAL))
    _fire(ai, board, Coordinate(2, 8))
    _fire(ai, board, Coordinate(2, 9))
    # Right of (2, 9) is off the board
    assert ai.choose_target(board.public_view(), MoveHistory()) == Coordinate(2, 7)


def test_sinking_returns_to_hunting() -> None:
    ai = HuntTargetAI(rng=random.Random(1))
    board = Board()
    board.place_ship(Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.VERTICAL))
    _fire(ai, board, Coordinate(0, 0))
    assert _fire(ai, board, Coordinate(1, 0)) == AttackResult.sunk(ShipType.DESTROYER)
    assert ai.mode is HuntMode.HUNTING
    assert ai.hits == []
    assert ai.last_hit is None


def test_hunt_target_reset() -> None:
    ai = HuntTargetAI(rng=random.Random(1))
    ai.record_result(AttackResult.HIT, Coordinate(3, 3))
    ai.reset()
    assert ai.mode is HuntMode.HUNTING
    assert ai.attacked == set()


@pytest.mark.parametrize("seed", range(5))
def test_boxed_in_hit_falls_back_to_parity_hunt(seed: int) -> None:
    ai = HuntTargetAI(rng=random.Random(seed))
    board = Board()
    hit = Coordinate(4, 4)
    board.receive_attack(hit).unwrap()
    ai.record_result(AttackResult.HIT, hit)
    for neighbour in (Coordinate(3, 4), Coordinate(5, 4), Coordinate(4, 3), Coordinate(4, 5)):
        _fire(ai, board, neighbour)
    assert ai.mode is HuntMode.TARGETING

    target = ai.choose_target(board.public_view(), MoveHistory())
    assert target is not None
    assert target != hit
    assert not target.is_adjacent(hit)
    assert (target.row + target.column) % 2 == 0
    assert ai.mode is HuntMode.TARGETING


# ---------------------------------------------------------------------------
# ProbabilityAI
# ---------------------------------------------------------------------------
def test_density_on_open_board() -> None:
    density = placement_density([2], np.zeros((10, 10), dtype=bool))
    # Corner: one horizontal and one vertical placement; centre: two of each
    assert density[0, 0] == 2
    assert density[5, 5] == 4
    assert density.sum() == 2 * 2 * 90


def test_density_respects_blocked_cells() -> None:
    blocked = np.zeros((10, 10), dtype=bool)
    blocked[0, 1] = True
    blocked[1, 0] = True
    density = placement_density([3], blocked)
    assert density[0, 0] == 0
    assert density[0, 1] == 0


def test_opening_shot_is_a_max_density_cell() -> None:
    ai = ProbabilityAI(rng=random.Random(9))
    density = ai.density()
    target = ai.choose_target(Board().public_view(), MoveHistory())
    assert density[target.row, target.column] == density.max()


@pytest.mark.parametrize("seed", range(5))
def test_hit_is_followed_by_a_neighbour(seed: int) -> None:
    ai = ProbabilityAI(rng=random.Random(seed))
    board = Board()
    board.place_ship(Ship(ShipType.BATTLESHIP, Coordinate(6, 2), Orientation.VERTICAL))
    # A few misses first so the density is not symmetric
    for coord in (Coordinate(0, 0), Coordinate(5, 5), Coordinate(7, 3)):
        _fire(ai, board, coord)
    assert _fire(ai, board, Coordinate(7, 2)) == AttackResult.HIT
    target = ai.choose_target(board.public_view(), MoveHistory())
    assert target.is_adjacent(Coordinate(7, 2))
    assert board.public_view().is_valid_target(target)


def test_miss_and_sink_bookkeeping() -> None:
    ai = ProbabilityAI(rng=random.Random(0))
    ai.record_result(AttackResult.HIT, Coordinate(1, 1))
    ai.record_result(AttackResult.MISS, Coordinate(1, 2))
    assert ai.hits == [Coordinate(1, 1)]
    ai.record_result(AttackResult.sunk(ShipType.CRUISER), Coordinate(1, 0))
    assert ai.remaining_sizes == [5, 4, 3, 2]
    ai.record_result(AttackResult.sunk(ShipType.SUBMARINE), Coordinate(5, 5))
    assert ai.remaining_sizes == [5, 4, 2]


def test_any_sink_clears_every_live_hit() -> None:
    # Hits on two different ships are all forgotten when either one sinks
    ai = ProbabilityAI(rng=random.Random(0))
    ai.record_result(AttackResult.HIT, Coordinate(0, 0))
    ai.record_result(AttackResult.HIT, Coordinate(8, 8))
    ai.record_result(AttackResult.sunk(ShipType.DESTROYER), Coordinate(0, 1))
    assert ai.hits == []
    assert 2 not in ai.remaining_sizes


def test_probability_ai_reset() -> None:
    ai = ProbabilityAI(rng=random.Random(0))
    ai.record_result(AttackResult.sunk(ShipType.CARRIER), Coordinate(0, 0))
    ai.reset()
    assert ai.remaining_sizes == [5, 4, 3, 3, 2]
    assert ai.attacked == set()

"""Unit tests for cells, ships and board rules."""

from __future__ import annotations

import uuid

import pytest

from conftest import standard_fleet
from salvo.battleship import (
    AttackOutcome,
    AttackResult,
    Board,
    BoardError,
    Cell,
    CellError,
    CellState,
    Ship,
    ShipError,
    ShipType,
)
from salvo.coord_utils import Coordinate, Orientation


# ---------------------------------------------------------------------------
# Cell
# ---------------------------------------------------------------------------
def test_cell_states() -> None:
    cell = Cell(Coordinate(0, 0))
    assert cell.state is CellState.EMPTY
    assert cell.place_ship(uuid.uuid4()).ok
    assert cell.state is CellState.SHIP
    assert cell.receive_attack().value is AttackOutcome.HIT
    assert cell.state is CellState.HIT
    assert not cell.is_valid_target

    water = Cell(Coordinate(0, 1))
    assert water.receive_attack().value is AttackOutcome.MISS
    assert water.state is CellState.MISS


def test_cell_rejects_double_occupation_and_double_attack() -> None:
    cell = Cell(Coordinate(0, 0))
    cell.place_ship(uuid.uuid4())
    assert cell.place_ship(uuid.uuid4()).error is CellError.ALREADY_OCCUPIED
    cell.receive_attack()
    assert cell.receive_attack().error is CellError.ALREADY_ATTACKED


def test_cell_remove_ship_keeps_attack_flag() -> None:
    cell = Cell(Coordinate(0, 0))
    cell.place_ship(uuid.uuid4())
    cell.receive_attack()
    cell.remove_ship()
    assert cell.ship_id is None
    assert cell.is_attacked


# ---------------------------------------------------------------------------
# Ship
# ---------------------------------------------------------------------------
def test_ship_coordinates_follow_orientation() -> None:
    horizontal = Ship(ShipType.CRUISER, Coordinate(2, 3), Orientation.HORIZONTAL)
    vertical = Ship(ShipType.CRUISER, Coordinate(2, 3), Orientation.VERTICAL)
    assert horizontal.coordinates == [Coordinate(2, 3), Coordinate(2, 4), Coordinate(2, 5)]
    assert vertical.coordinates == [Coordinate(2, 3), Coordinate(3, 3), Coordinate(4, 3)]


def test_ship_truncates_at_edge() -> None:
    ship = Ship(ShipType.CARRIER, Coordinate(0, 6), Orientation.HORIZONTAL)
    assert len(ship.coordinates) == 4
    assert not ship.is_valid_placement()


def test_sinking_law() -> None:
    ship = Ship(ShipType.SUBMARINE, Coordinate(5, 5), Orientation.VERTICAL)
    for i, coord in enumerate(ship.coordinates):
        assert not ship.is_sunk
        assert ship.record_hit(coord).ok
        assert ship.hit_count == i + 1
    assert ship.is_sunk
    assert ship.remaining_health == 0


def test_ship_hit_errors() -> None:
    ship = Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
    assert ship.record_hit(Coordinate(5, 5)).error is ShipError.COORDINATE_NOT_ON_SHIP
    ship.record_hit(Coordinate(0, 0))
    assert ship.record_hit(Coordinate(0, 0)).error is ShipError.ALREADY_HIT
    assert ship.hit_count == 1


def test_ship_copy_is_independent() -> None:
    ship = Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
    clone = ship.copy()
    clone.record_hit(Coordinate(0, 0))
    assert clone.id == ship.id
    assert ship.hit_count == 0


# ---------------------------------------------------------------------------
# AttackResult
# ---------------------------------------------------------------------------
def test_attack_result_equality() -> None:
    assert AttackResult.sunk(ShipType.CRUISER) == AttackResult.sunk(ShipType.CRUISER)
    assert AttackResult.sunk(ShipType.CRUISER) != AttackResult.sunk(ShipType.SUBMARINE)
    assert AttackResult.sunk(ShipType.CRUISER) != AttackResult.HIT
    assert AttackResult.sunk(ShipType.CRUISER).is_hit
    assert not AttackResult.MISS.is_hit
    assert str(AttackResult.sunk(ShipType.DESTROYER)) == "sunk(Destroyer)"


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------
def test_fresh_board() -> None:
    board = Board()
    assert all(board.state_at(c) is CellState.EMPTY for c in Coordinate.all())
    assert board.ships == ()
    assert len(board.valid_targets) == 100
    assert not board.all_ships_sunk


def test_out_of_bounds_placement_rejected() -> None:
    board = Board()
    outcome = board.place_ship(Ship(ShipType.CARRIER, Coordinate(0, 6), Orientation.HORIZONTAL))
    assert outcome.error is BoardError.SHIP_OUT_OF_BOUNDS
    assert board.ships == ()
    assert all(board.state_at(c) is CellState.EMPTY for c in Coordinate.all())


@pytest.mark.parametrize(
    "ship_type, origin, orientation",
    [
        (ShipType.DESTROYER, Coordinate(-1, 5), Orientation.VERTICAL),
        (ShipType.CARRIER, Coordinate(-1, 0), Orientation.VERTICAL),
        (ShipType.CRUISER, Coordinate(0, -1), Orientation.HORIZONTAL),
    ],
)
def test_negative_origin_placement_rejected(ship_type, origin, orientation) -> None:
    ship = Ship(ship_type, origin, orientation)
    assert ship.coordinates == []
    assert not ship.is_valid_placement()

    board = Board()
    outcome = board.place_ship(ship)
    assert outcome.error is BoardError.SHIP_OUT_OF_BOUNDS
    assert board.ships == ()
    # Negative indices must not wrap onto the far edge
    assert all(board.state_at(c) is CellState.EMPTY for c in Coordinate.all())


def test_off_board_lookups_rejected() -> None:
    board = Board()
    with pytest.raises(ValueError):
        board.state_at(Coordinate(-1, 5))
    with pytest.raises(ValueError):
        board.cell_at(Coordinate(10, 0))
    view = board.public_view()
    assert not view.is_valid_target(Coordinate(-1, 5))
    assert not view.is_valid_target(Coordinate(3, 10))
    with pytest.raises(ValueError):
        view.state_at(Coordinate(0, -1))


def test_overlap_rejected_without_partial_mutation() -> None:
    board = Board()
    assert board.place_ship(Ship(ShipType.CRUISER, Coordinate(2, 2), Orientation.HORIZONTAL)).ok
    clash = Ship(ShipType.BATTLESHIP, Coordinate(0, 3), Orientation.VERTICAL)
    outcome = board.place_ship(clash)
    assert outcome.error is BoardError.SHIP_OVERLAP
    assert outcome.cause is ShipError.OVERLAPPING
    assert len(board.ships) == 1
    assert board.state_at(Coordinate(0, 3)) is CellState.EMPTY
    assert board.state_at(Coordinate(1, 3)) is CellState.EMPTY


def test_placed_ship_is_a_copy() -> None:
    board = Board()
    ship = Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
    board.place_ship(ship)
    ship.record_hit(Coordinate(0, 0))
    assert board.ship_with_id(ship.id).hit_count == 0


def test_remove_and_clear() -> None:
    board = Board()
    ships = standard_fleet()
    for ship in ships:
        board.place_ship(ship)
    removed = board.remove_ship(ships[0].id)
    assert removed.value.id == ships[0].id
    assert board.state_at(Coordinate(0, 0)) is CellState.EMPTY
    assert board.remove_ship(ships[0].id).error is BoardError.SHIP_NOT_FOUND

    board.clear_all_ships()
    assert board.ships == ()
    assert all(board.state_at(c) is CellState.EMPTY for c in Coordinate.all())


def test_end_to_end_destroyer() -> None:
    board = Board()
    board.place_ship(Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL))
    assert board.receive_attack(Coordinate(0, 0)).value == AttackResult.HIT
    assert board.receive_attack(Coordinate(0, 1)).value == AttackResult.sunk(ShipType.DESTROYER)
    assert board.all_ships_sunk
    assert board.ships_sunk == 1
    assert board.ships_remaining == 0


def test_double_attack_rejected_and_state_unchanged() -> None:
    board = Board()
    board.place_ship(Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL))
    assert board.receive_attack(Coordinate(5, 5)).value == AttackResult.MISS
    outcome = board.receive_attack(Coordinate(5, 5))
    assert outcome.error is BoardError.ALREADY_ATTACKED
    assert outcome.cause is CellError.ALREADY_ATTACKED
    assert board.state_at(Coordinate(5, 5)) is CellState.MISS
    assert board.total_misses == 1


def test_off_board_attack_rejected() -> None:
    board = Board()
    assert board.receive_attack(Coordinate(10, 0)).error is BoardError.INVALID_ATTACK
    assert board.receive_attack(Coordinate(-1, 0)).error is BoardError.INVALID_ATTACK
    assert len(board.valid_targets) == 100


def test_last_cell_reports_sunk_not_hit() -> None:
    board = Board()
    board.place_ship(Ship(ShipType.CARRIER, Coordinate(3, 0), Orientation.HORIZONTAL))
    results = [board.receive_attack(Coordinate(3, c)).value for c in range(5)]
    assert results[:4] == [AttackResult.HIT] * 4
    assert results[4] == AttackResult.sunk(ShipType.CARRIER)


def test_fleet_complete_law() -> None:
    board = Board()
    for ship in standard_fleet():
        board.place_ship(ship)
    assert board.is_fleet_complete

    dupes = Board()
    dupes.place_ship(Ship(ShipType.CARRIER, Coordinate(0, 0), Orientation.HORIZONTAL))
    dupes.place_ship(Ship(ShipType.BATTLESHIP, Coordinate(1, 0), Orientation.HORIZONTAL))
    dupes.place_ship(Ship(ShipType.CRUISER, Coordinate(2, 0), Orientation.HORIZONTAL))
    dupes.place_ship(Ship(ShipType.CRUISER, Coordinate(3, 0), Orientation.HORIZONTAL))
    dupes.place_ship(Ship(ShipType.DESTROYER, Coordinate(4, 0), Orientation.HORIZONTAL))
    assert len(dupes.ships) == 5
    assert not dupes.is_fleet_complete


def test_counters() -> None:
    board = Board()
    for ship in standard_fleet():
        board.place_ship(ship)
    board.receive_attack(Coordinate(0, 0))
    board.receive_attack(Coordinate(9, 9))
    board.receive_attack(Coordinate(8, 9))
    assert board.total_hits == 1
    assert board.total_misses == 2
    assert len(board.valid_targets) == 97


def test_public_view_hides_ships() -> None:
    board = Board()
    board.place_ship(Ship(ShipType.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL))
    board.receive_attack(Coordinate(0, 0))
    board.receive_attack(Coordinate(5, 5))
    view = board.public_view()
    assert view.state_at(Coordinate(0, 1)) is CellState.EMPTY
    assert view.state_at(Coordinate(0, 0)) is CellState.HIT
    assert view.state_at(Coordinate(5, 5)) is CellState.MISS
    assert view.is_valid_target(Coordinate(0, 1))
    assert not view.is_valid_target(Coordinate(0, 0))
    assert "S" not in "".join(view.render())
    assert "S" in "".join(board.render(reveal=True))

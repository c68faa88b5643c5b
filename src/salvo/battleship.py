"""
battleship.py

Core data structures for one player's waters:
 - Cell: a single grid square (empty / ship / hit / miss)
 - ShipType, Ship: the five standard classes and a placed hull that tracks its hits
 - AttackResult: miss, hit, or sunk(<type>)
 - Board: the 10x10 grid plus the ordered list of placed ships
 - BoardView: the read-only, fog-of-war projection handed to opponents and AI players

Every fallible mutation returns a :class:`~salvo.results.Result`; nothing here
raises for a rule violation.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from typing_extensions import Self

from .config import BOARD_SIZE
from .coord_utils import Coordinate, Orientation, in_bounds
from .results import Result, failure, success

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------
class CellState(Enum):
    EMPTY = auto()  # no ship, not attacked
    SHIP = auto()  # ship, not attacked
    HIT = auto()  # attacked, ship
    MISS = auto()  # attacked, water


class AttackOutcome(Enum):
    """Immediate cell-level result of an attack."""

    HIT = auto()
    MISS = auto()


class CellError(Enum):
    ALREADY_OCCUPIED = auto()
    ALREADY_ATTACKED = auto()


class Cell:
    """One grid square. Its coordinate never changes after construction."""

    __slots__ = ("coordinate", "_ship_id", "_attacked")

    def __init__(self, coordinate: Coordinate) -> None:
        self.coordinate = coordinate
        self._ship_id: Optional[uuid.UUID] = None
        self._attacked = False

    @property
    def ship_id(self) -> Optional[uuid.UUID]:
        return self._ship_id

    @property
    def is_attacked(self) -> bool:
        return self._attacked

    @property
    def has_ship(self) -> bool:
        return self._ship_id is not None

    @property
    def is_valid_target(self) -> bool:
        return not self._attacked

    @property
    def state(self) -> CellState:
        if self._attacked:
            return CellState.HIT if self.has_ship else CellState.MISS
        return CellState.SHIP if self.has_ship else CellState.EMPTY

    def place_ship(self, ship_id: uuid.UUID) -> Result[None, CellError]:
        if self._ship_id is not None:
            return failure(CellError.ALREADY_OCCUPIED)
        self._ship_id = ship_id
        return success()

    def receive_attack(self) -> Result[AttackOutcome, CellError]:
        if self._attacked:
            return failure(CellError.ALREADY_ATTACKED)
        self._attacked = True
        return success(AttackOutcome.HIT if self.has_ship else AttackOutcome.MISS)

    def remove_ship(self) -> None:
        """Clear the occupant (setup-phase un-placing). The attacked flag is kept."""
        self._ship_id = None

    def __repr__(self) -> str:
        return f"Cell({self.coordinate}, {self.state.name})"


# ---------------------------------------------------------------------------
# Ships
# ---------------------------------------------------------------------------
class ShipType(Enum):
    """The five standard classes, valued by display name."""

    CARRIER = "Carrier"
    BATTLESHIP = "Battleship"
    CRUISER = "Cruiser"
    SUBMARINE = "Submarine"
    DESTROYER = "Destroyer"

    @property
    def size(self) -> int:
        return SHIP_SIZES[self]

    @property
    def display_name(self) -> str:
        return self.value


SHIP_SIZES: Dict[ShipType, int] = {
    ShipType.CARRIER: 5,
    ShipType.BATTLESHIP: 4,
    ShipType.CRUISER: 3,
    ShipType.SUBMARINE: 3,
    ShipType.DESTROYER: 2,
}

# Standard fleet: every type exactly once, in this order.
STANDARD_FLEET: Tuple[ShipType, ...] = (
    ShipType.CARRIER,
    ShipType.BATTLESHIP,
    ShipType.CRUISER,
    ShipType.SUBMARINE,
    ShipType.DESTROYER,
)
FLEET_SHIP_COUNT = len(STANDARD_FLEET)
FLEET_TOTAL_CELLS = sum(t.size for t in STANDARD_FLEET)


class ShipError(Enum):
    COORDINATE_NOT_ON_SHIP = auto()
    ALREADY_HIT = auto()
    OUT_OF_BOUNDS = auto()
    OVERLAPPING = auto()


@dataclass
class Ship:
    """A hull of *ship_type* laid from *origin* in *orientation*.

    ``coordinates`` silently drops steps that leave the board, so a placement
    is in bounds exactly when the list is as long as the ship.
    """

    ship_type: ShipType
    origin: Coordinate
    orientation: Orientation
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    _hits: Set[Coordinate] = field(default_factory=set, init=False, repr=False)

    @property
    def size(self) -> int:
        return self.ship_type.size

    @property
    def coordinates(self) -> List[Coordinate]:
        coords: List[Coordinate] = []
        current: Optional[Coordinate] = Coordinate.of(self.origin.row, self.origin.column)
        step = self.orientation.direction
        for _ in range(self.size):
            if current is None:
                break
            coords.append(current)
            current = current.adjacent(step)
        return coords

    @property
    def hits(self) -> FrozenSet[Coordinate]:
        return frozenset(self._hits)

    @property
    def hit_count(self) -> int:
        return len(self._hits)

    @property
    def remaining_health(self) -> int:
        return self.size - len(self._hits)

    @property
    def is_sunk(self) -> bool:
        return len(self._hits) >= self.size

    def occupies(self, coordinate: Coordinate) -> bool:
        return coordinate in self.coordinates

    def is_valid_placement(self) -> bool:
        return len(self.coordinates) == self.size

    def overlaps(self, other: "Ship") -> bool:
        return not set(self.coordinates).isdisjoint(other.coordinates)

    def record_hit(self, coordinate: Coordinate) -> Result[None, ShipError]:
        if coordinate not in self.coordinates:
            return failure(ShipError.COORDINATE_NOT_ON_SHIP)
        if coordinate in self._hits:
            return failure(ShipError.ALREADY_HIT)
        self._hits.add(coordinate)
        return success()

    def copy(self) -> "Ship":
        clone = Ship(self.ship_type, self.origin, self.orientation, self.id)
        clone._hits = set(self._hits)
        return clone


# ---------------------------------------------------------------------------
# Attack results
# ---------------------------------------------------------------------------
class AttackKind(Enum):
    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"


@dataclass(frozen=True, slots=True)
class AttackResult:
    """Outcome of an attack on a board: miss, hit, or sunk(ship_type).

    Use the ``AttackResult.MISS`` / ``AttackResult.HIT`` constants and
    ``AttackResult.sunk(ShipType.X)``. Two sunk results are equal only when
    they name the same ship type.
    """

    kind: AttackKind
    ship_type: Optional[ShipType] = None

    @classmethod
    def sunk(cls, ship_type: ShipType) -> Self:
        return cls(AttackKind.SUNK, ship_type)

    @property
    def is_hit(self) -> bool:
        """True for a hit *or* a sinking shot."""
        return self.kind is not AttackKind.MISS

    @property
    def is_sunk(self) -> bool:
        return self.kind is AttackKind.SUNK

    def to_dict(self) -> Dict[str, str]:
        data = {"type": self.kind.value}
        if self.ship_type is not None:
            data["ship_type"] = self.ship_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        kind = AttackKind(data["type"])
        if kind is AttackKind.SUNK:
            return cls(kind, ShipType(data["ship_type"]))
        return cls(kind)

    def __str__(self) -> str:
        if self.ship_type is not None:
            return f"sunk({self.ship_type.value})"
        return self.kind.value


AttackResult.MISS = AttackResult(AttackKind.MISS)  # type: ignore[misc]
AttackResult.HIT = AttackResult(AttackKind.HIT)  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------
class BoardError(Enum):
    SHIP_OUT_OF_BOUNDS = auto()
    SHIP_OVERLAP = auto()
    CELL_OCCUPIED = auto()
    ALREADY_ATTACKED = auto()
    SHIP_NOT_FOUND = auto()
    INVALID_ATTACK = auto()


class Board:
    """
    A single player's waters.

    We store:
      - self._grid: BOARD_SIZE rows of Cell objects, each seeded with its coordinate
      - self._ships: placed Ship objects in insertion order

    Invariants: no two ships share a coordinate, and every occupied cell names
    exactly one ship in the list. All mutation goes through place_ship /
    remove_ship / clear_all_ships / receive_attack.
    """

    def __init__(self) -> None:
        self.size = BOARD_SIZE
        self._grid: List[List[Cell]] = [
            [Cell(Coordinate.unchecked(r, c)) for c in range(BOARD_SIZE)] for r in range(BOARD_SIZE)
        ]
        self._ships: List[Ship] = []

    def _cell(self, coordinate: Coordinate) -> Cell:
        if not in_bounds(coordinate.row, coordinate.column):
            raise ValueError(f"Coordinate off the board: {coordinate.row}, {coordinate.column}")
        return self._grid[coordinate.row][coordinate.column]

    # ------------------------------------------------------------------ #
    # Placement
    # ------------------------------------------------------------------ #
    def place_ship(self, ship: Ship) -> Result[None, BoardError]:
        """Validate bounds, then overlap, then per-cell occupancy; all-or-nothing."""
        if not ship.is_valid_placement():
            return failure(BoardError.SHIP_OUT_OF_BOUNDS, cause=ShipError.OUT_OF_BOUNDS)

        for existing in self._ships:
            if ship.overlaps(existing):
                return failure(BoardError.SHIP_OVERLAP, cause=ShipError.OVERLAPPING)

        claimed: List[Cell] = []
        for coordinate in ship.coordinates:
            cell = self._cell(coordinate)
            outcome = cell.place_ship(ship.id)
            if not outcome.ok:
                for done in claimed:
                    done.remove_ship()
                return failure(BoardError.CELL_OCCUPIED, cause=outcome.error)
            claimed.append(cell)

        self._ships.append(ship.copy())
        logger.debug("placed %s at %s %s", ship.ship_type.value, ship.origin, ship.orientation.value)
        return success()

    def remove_ship(self, ship_id: uuid.UUID) -> Result[Ship, BoardError]:
        for index, ship in enumerate(self._ships):
            if ship.id == ship_id:
                break
        else:
            return failure(BoardError.SHIP_NOT_FOUND)

        for coordinate in ship.coordinates:
            self._cell(coordinate).remove_ship()
        del self._ships[index]
        return success(ship.copy())

    def clear_all_ships(self) -> None:
        for ship in self._ships:
            for coordinate in ship.coordinates:
                self._cell(coordinate).remove_ship()
        self._ships.clear()

    # ------------------------------------------------------------------ #
    # Attacks
    # ------------------------------------------------------------------ #
    def receive_attack(self, coordinate: Coordinate) -> Result[AttackResult, BoardError]:
        if not in_bounds(coordinate.row, coordinate.column):
            return failure(BoardError.INVALID_ATTACK)
        outcome = self._cell(coordinate).receive_attack()
        if not outcome.ok:
            if outcome.error is CellError.ALREADY_ATTACKED:
                return failure(BoardError.ALREADY_ATTACKED, cause=outcome.error)
            return failure(BoardError.INVALID_ATTACK, cause=outcome.error)

        if outcome.value is AttackOutcome.MISS:
            return success(AttackResult.MISS)

        ship = self._ship_at(coordinate)
        if ship is None:
            return success(AttackResult.HIT)
        ship.record_hit(coordinate)
        if ship.is_sunk:
            logger.debug("%s sunk by shot at %s", ship.ship_type.value, coordinate)
            return success(AttackResult.sunk(ship.ship_type))
        return success(AttackResult.HIT)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def _ship_at(self, coordinate: Coordinate) -> Optional[Ship]:
        for ship in self._ships:
            if ship.occupies(coordinate):
                return ship
        return None

    def cell_at(self, coordinate: Coordinate) -> Cell:
        """A copy of the cell; mutating it does not touch the board."""
        return copy.copy(self._cell(coordinate))

    def state_at(self, coordinate: Coordinate) -> CellState:
        return self._cell(coordinate).state

    @property
    def ships(self) -> Tuple[Ship, ...]:
        return tuple(s.copy() for s in self._ships)

    def ship_at(self, coordinate: Coordinate) -> Optional[Ship]:
        ship = self._ship_at(coordinate)
        return ship.copy() if ship is not None else None

    def ship_with_id(self, ship_id: uuid.UUID) -> Optional[Ship]:
        for ship in self._ships:
            if ship.id == ship_id:
                return ship.copy()
        return None

    @property
    def valid_targets(self) -> List[Coordinate]:
        """Unattacked coordinates in row-major order."""
        return [cell.coordinate for row in self._grid for cell in row if cell.is_valid_target]

    @property
    def is_fleet_complete(self) -> bool:
        types = [s.ship_type for s in self._ships]
        return len(types) == FLEET_SHIP_COUNT and set(types) == set(STANDARD_FLEET)

    @property
    def all_ships_sunk(self) -> bool:
        """True once every placed ship is sunk (an empty board never is)."""
        return bool(self._ships) and all(s.is_sunk for s in self._ships)

    @property
    def ships_remaining(self) -> int:
        return sum(1 for s in self._ships if not s.is_sunk)

    @property
    def ships_sunk(self) -> int:
        return sum(1 for s in self._ships if s.is_sunk)

    @property
    def total_hits(self) -> int:
        return sum(s.hit_count for s in self._ships)

    @property
    def total_misses(self) -> int:
        return sum(1 for row in self._grid for cell in row if cell.state is CellState.MISS)

    def public_view(self) -> "BoardView":
        return BoardView(self)

    def render(self, *, reveal: bool = False) -> List[str]:
        """Text rows for logs: '.' water, 'S' ship (reveal only), 'X' hit, 'o' miss."""
        symbols = {CellState.EMPTY: ".", CellState.SHIP: "S" if reveal else ".", CellState.HIT: "X", CellState.MISS: "o"}
        return [" ".join(symbols[cell.state] for cell in row) for row in self._grid]


class BoardView:
    """Read-only fog-of-war projection of a Board.

    This is the only board surface an opponent (human UI or AI strategy) is
    given: it reports which cells were attacked and how those shots landed,
    but an unattacked ship cell reads exactly like open water.
    """

    __slots__ = ("_board",)

    def __init__(self, board: Board) -> None:
        self._board = board

    @property
    def size(self) -> int:
        return self._board.size

    @property
    def valid_targets(self) -> List[Coordinate]:
        return self._board.valid_targets

    def is_valid_target(self, coordinate: Coordinate) -> bool:
        if not in_bounds(coordinate.row, coordinate.column):
            return False
        return self._board.state_at(coordinate) in (CellState.EMPTY, CellState.SHIP)

    def state_at(self, coordinate: Coordinate) -> CellState:
        state = self._board.state_at(coordinate)
        return CellState.EMPTY if state is CellState.SHIP else state

    @property
    def ships_sunk(self) -> int:
        return self._board.ships_sunk

    def render(self) -> List[str]:
        return self._board.render(reveal=False)

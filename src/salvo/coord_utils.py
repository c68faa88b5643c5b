"""Grid primitives: bounds-checked coordinates, directions and orientations."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from typing_extensions import Self

from .config import BOARD_SIZE

# Regex for valid coordinates A1–J10 (column letter, 1-based row)
COORD_RE = re.compile(r"^[A-J](10|[1-9])$")


class Direction(Enum):
    """Cardinal directions used for neighbour lookup and ship extension."""

    UP = (-1, 0)
    DOWN = (1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)

    @property
    def row_delta(self) -> int:
        return self.value[0]

    @property
    def column_delta(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def between(cls, start: "Coordinate", end: "Coordinate") -> Optional["Direction"]:
        """Direction of a single step from *start* to *end*, or None if not neighbours."""
        delta = (end.row - start.row, end.column - start.column)
        for direction in cls:
            if direction.value == delta:
                return direction
        return None


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class Orientation(Enum):
    """Ship placement orientation."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def direction(self) -> Direction:
        """Direction a ship extends from its origin."""
        return Direction.RIGHT if self is Orientation.HORIZONTAL else Direction.DOWN


def in_bounds(row: int, column: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= column < BOARD_SIZE


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A (row, column) position on the board.

    The plain constructor does not validate; use :meth:`of` for untrusted
    input and reserve the constructor (or :meth:`unchecked`) for call sites
    that already know the values are on the board.
    """

    row: int
    column: int

    @classmethod
    def of(cls, row: int, column: int) -> Optional[Self]:
        """Checked constructor: ``None`` when either index is outside ``[0, 10)``."""
        if not in_bounds(row, column):
            return None
        return cls(row, column)

    @classmethod
    def unchecked(cls, row: int, column: int) -> Self:
        return cls(row, column)

    @classmethod
    def all(cls) -> List[Self]:
        """Every board coordinate in row-major order."""
        return [cls(r, c) for r in range(BOARD_SIZE) for c in range(BOARD_SIZE)]

    def adjacent(self, direction: Direction) -> Optional["Coordinate"]:
        return Coordinate.of(self.row + direction.row_delta, self.column + direction.column_delta)

    def all_adjacent(self) -> List["Coordinate"]:
        """2–4 on-board neighbours in up, down, left, right order."""
        neighbours = (self.adjacent(d) for d in Direction)
        return [n for n in neighbours if n is not None]

    def is_adjacent(self, other: "Coordinate") -> bool:
        return abs(self.row - other.row) + abs(self.column - other.column) == 1

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "column": self.column}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        coord = cls.of(int(data["row"]), int(data["column"]))
        if coord is None:
            raise ValueError(f"Coordinate out of range: {data!r}")
        return coord

    def __str__(self) -> str:
        return format_coord(self.row, self.column)


def format_coord(row: int, column: int) -> str:
    """
    Convert zero-based (row, column) to a label like 'A1' (column letter, 1-based row).
    """
    return f"{chr(ord('A') + column)}{row + 1}"


def parse_coordinate(label: str) -> Coordinate:
    """Translate a label like 'J3' into ``Coordinate(row=2, column=9)``."""
    text = label.strip().upper()
    if not COORD_RE.match(text):
        raise ValueError(f"Invalid coordinate: {label!r}")
    column = ord(text[0]) - ord("A")
    row = int(text[1:]) - 1
    return Coordinate(row, column)

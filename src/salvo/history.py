"""Immutable move records and the append-only per-game move log."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from typing_extensions import Self

from .battleship import AttackResult, ShipType
from .coord_utils import Coordinate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Move:
    """A single attack and its outcome."""

    player_id: uuid.UUID
    coordinate: Coordinate
    result: AttackResult
    was_timeout: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    timestamp: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        player_id: uuid.UUID,
        coordinate: Coordinate,
        result: AttackResult,
        *,
        was_timeout: bool = False,
    ) -> Self:
        """Record a move made now, with a fresh id."""
        return cls(player_id, coordinate, result, was_timeout)

    @property
    def is_hit(self) -> bool:
        return self.result.is_hit

    @property
    def did_sink(self) -> bool:
        return self.result.is_sunk

    @property
    def sunk_ship_type(self) -> Optional[ShipType]:
        return self.result.ship_type if self.result.is_sunk else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "player_id": str(self.player_id),
            "coordinate": self.coordinate.to_dict(),
            "result": self.result.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "was_timeout": self.was_timeout,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        return cls(
            player_id=uuid.UUID(data["player_id"]),
            coordinate=Coordinate.from_dict(data["coordinate"]),
            result=AttackResult.from_dict(data["result"]),
            was_timeout=bool(data["was_timeout"]),
            id=uuid.UUID(data["id"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


class MoveHistory:
    """Append-only, chronologically ordered sequence of moves."""

    def __init__(self, moves: Iterable[Move] = ()) -> None:
        self._moves: List[Move] = list(moves)

    def add(self, move: Move) -> None:
        self._moves.append(move)

    @property
    def moves(self) -> Tuple[Move, ...]:
        return tuple(self._moves)

    def __len__(self) -> int:
        return len(self._moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(tuple(self._moves))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MoveHistory):
            return NotImplemented
        return self._moves == other._moves

    def copy(self) -> "MoveHistory":
        return MoveHistory(self._moves)

    @property
    def is_empty(self) -> bool:
        return not self._moves

    @property
    def last_move(self) -> Optional[Move]:
        return self._moves[-1] if self._moves else None

    # ------------------------------------------------------------------ #
    # Per-player queries
    # ------------------------------------------------------------------ #
    def moves_by(self, player_id: uuid.UUID) -> List[Move]:
        return [m for m in self._moves if m.player_id == player_id]

    def hits_by(self, player_id: uuid.UUID) -> int:
        return sum(1 for m in self.moves_by(player_id) if m.is_hit)

    def misses_by(self, player_id: uuid.UUID) -> int:
        return sum(1 for m in self.moves_by(player_id) if not m.is_hit)

    def ships_sunk_by(self, player_id: uuid.UUID) -> int:
        return sum(1 for m in self.moves_by(player_id) if m.did_sink)

    def consecutive_misses_by(self, player_id: uuid.UUID) -> int:
        """Misses counted back from the player's latest move, stopping at the first hit."""
        count = 0
        for move in reversed(self.moves_by(player_id)):
            if move.is_hit:
                break
            count += 1
        return count

    @property
    def attacked_coordinates(self) -> Set[Coordinate]:
        return {m.coordinate for m in self._moves}

    # ------------------------------------------------------------------ #
    # Plain-data conversion
    # ------------------------------------------------------------------ #
    def to_list(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self._moves]

    @classmethod
    def from_list(cls, items: Iterable[Dict[str, Any]]) -> "MoveHistory":
        return cls(Move.from_dict(item) for item in items)

    def dumps(self) -> str:
        return json.dumps(self.to_list(), separators=(",", ":"))

    @classmethod
    def loads(cls, text: str) -> "MoveHistory":
        return cls.from_list(json.loads(text))

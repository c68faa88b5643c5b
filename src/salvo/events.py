"""Engine notification surface.

The engine pushes six kinds of notification to exactly one registered
observer, synchronously and in emission order. Subclass
:class:`EngineObserver` and override what you need; the base methods do
nothing. For fan-out to several listeners, or to work with plain event
records instead of callbacks, register a :class:`salvo.router.EventRouter`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict

from .battleship import AttackResult
from .coord_utils import Coordinate


class Category(Enum):
    """High-level event categories."""

    TURN = auto()  # per-turn lifecycle (begin, end, timer tick, timeout)
    ATTACK = auto()  # shot resolved
    GAME = auto()  # game over


@dataclass(frozen=True, slots=True)
class Event:
    """Immutable record of one engine notification."""

    category: Category
    type: str  # finer-grained identifier, e.g. "begin", "executed", "ended"
    payload: Dict[str, Any]


class EngineObserver:
    """No-op base for engine observers."""

    def turn_began(self, player_id: uuid.UUID) -> None:
        pass

    def turn_ended(self, player_id: uuid.UUID) -> None:
        pass

    def attack_executed(self, result: AttackResult, coordinate: Coordinate, player_id: uuid.UUID) -> None:
        pass

    def game_ended(self, winner_id: uuid.UUID) -> None:
        pass

    def turn_timer_updated(self, remaining_seconds: int) -> None:
        pass

    def turn_timed_out(self, player_id: uuid.UUID) -> None:
        pass

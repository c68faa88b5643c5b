"""Authoritative two-player game snapshot and its validated transitions.

A GameState owns both boards, the phase, the turn owner and the move log.
The engine is the normal caller, but every method re-checks its own
preconditions so a caller that bypasses the engine still cannot break a rule.
"""

from __future__ import annotations

import copy
import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Optional

from typing_extensions import Self

from .battleship import AttackResult, Board, BoardError, BoardView, Ship
from .coord_utils import Coordinate
from .history import Move, MoveHistory
from .results import Result, failure, success

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Profile:
    """Opaque player identity (human or AI)."""

    name: str
    is_ai: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def ai(cls, name: str) -> Self:
        return cls(name, is_ai=True)


class GamePhase(Enum):
    SETUP = "setup"
    BATTLE = "battle"
    FINISHED = "finished"


class GameError(Enum):
    INVALID_PHASE = auto()
    PLAYER_NOT_FOUND = auto()
    SHIP_PLACEMENT_FAILED = auto()
    FLEET_INCOMPLETE = auto()
    NOT_YOUR_TURN = auto()
    ALREADY_ATTACKED = auto()
    INVALID_ATTACK = auto()
    GAME_ALREADY_FINISHED = auto()


class GameState:
    """Complete state of one game; phases only move SETUP → BATTLE → FINISHED."""

    def __init__(
        self,
        player1: Profile,
        player2: Profile,
        first_player_id: Optional[uuid.UUID] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        if player1.id == player2.id:
            raise ValueError("players must have distinct ids")
        self.id = uuid.uuid4()
        self.player1 = player1
        self.player2 = player2
        self._boards = {player1.id: Board(), player2.id: Board()}

        if first_player_id is None:
            first_player_id = (rng or random).choice((player1.id, player2.id))
        elif first_player_id not in self._boards:
            raise ValueError(f"first player {first_player_id} is not in this game")
        self._current_player_id: uuid.UUID = first_player_id

        self._phase = GamePhase.SETUP
        self._history = MoveHistory()
        self.created_at = datetime.now(timezone.utc)
        self._ended_at: Optional[datetime] = None
        self._winner_id: Optional[uuid.UUID] = None

    # ------------------------------------------------------------------ #
    # Read-only state
    # ------------------------------------------------------------------ #
    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def current_player_id(self) -> uuid.UUID:
        return self._current_player_id

    @property
    def winner_id(self) -> Optional[uuid.UUID]:
        return self._winner_id

    @property
    def ended_at(self) -> Optional[datetime]:
        return self._ended_at

    @property
    def history(self) -> MoveHistory:
        return self._history.copy()

    @property
    def is_in_progress(self) -> bool:
        return self._phase is not GamePhase.FINISHED

    @property
    def is_setup_phase(self) -> bool:
        return self._phase is GamePhase.SETUP

    @property
    def is_battle_phase(self) -> bool:
        return self._phase is GamePhase.BATTLE

    @property
    def is_finished(self) -> bool:
        return self._phase is GamePhase.FINISHED

    @property
    def total_turns(self) -> int:
        return len(self._history)

    # ------------------------------------------------------------------ #
    # Player / board lookup
    # ------------------------------------------------------------------ #
    def has_player(self, player_id: uuid.UUID) -> bool:
        return player_id in self._boards

    def player_with_id(self, player_id: uuid.UUID) -> Optional[Profile]:
        if player_id == self.player1.id:
            return self.player1
        if player_id == self.player2.id:
            return self.player2
        return None

    def opponent_of(self, player_id: uuid.UUID) -> Optional[Profile]:
        if player_id == self.player1.id:
            return self.player2
        if player_id == self.player2.id:
            return self.player1
        return None

    @property
    def current_player(self) -> Profile:
        return self.player1 if self._current_player_id == self.player1.id else self.player2

    @property
    def opponent_player(self) -> Profile:
        return self.player2 if self._current_player_id == self.player1.id else self.player1

    @property
    def winner(self) -> Optional[Profile]:
        return self.player_with_id(self._winner_id) if self._winner_id else None

    @property
    def loser(self) -> Optional[Profile]:
        return self.opponent_of(self._winner_id) if self._winner_id else None

    def board_for(self, player_id: uuid.UUID) -> Optional[Board]:
        """Snapshot of *player_id*'s own board (ships revealed)."""
        board = self._boards.get(player_id)
        return copy.deepcopy(board) if board is not None else None

    def opponent_board_for(self, player_id: uuid.UUID) -> Optional[Board]:
        opponent = self.opponent_of(player_id)
        return self.board_for(opponent.id) if opponent else None

    def public_view_of(self, player_id: uuid.UUID) -> Optional[BoardView]:
        """Fog-of-war view of *player_id*'s board, as their opponent sees it."""
        board = self._boards.get(player_id)
        return board.public_view() if board is not None else None

    # ------------------------------------------------------------------ #
    # Setup
    # ------------------------------------------------------------------ #
    def place_ship(self, ship: Ship, player_id: uuid.UUID) -> Result[None, GameError]:
        if self._phase is not GamePhase.SETUP:
            return failure(GameError.INVALID_PHASE)
        board = self._boards.get(player_id)
        if board is None:
            return failure(GameError.PLAYER_NOT_FOUND)
        outcome = board.place_ship(ship)
        if not outcome.ok:
            return failure(GameError.SHIP_PLACEMENT_FAILED, cause=outcome.error)
        return success()

    def remove_ship(self, ship_id: uuid.UUID, player_id: uuid.UUID) -> Result[Ship, GameError]:
        if self._phase is not GamePhase.SETUP:
            return failure(GameError.INVALID_PHASE)
        board = self._boards.get(player_id)
        if board is None:
            return failure(GameError.PLAYER_NOT_FOUND)
        outcome = board.remove_ship(ship_id)
        if not outcome.ok:
            return failure(GameError.SHIP_PLACEMENT_FAILED, cause=outcome.error)
        return success(outcome.value)

    def clear_ships(self, player_id: uuid.UUID) -> Result[None, GameError]:
        if self._phase is not GamePhase.SETUP:
            return failure(GameError.INVALID_PHASE)
        board = self._boards.get(player_id)
        if board is None:
            return failure(GameError.PLAYER_NOT_FOUND)
        board.clear_all_ships()
        return success()

    @property
    def can_start_battle(self) -> bool:
        return self._phase is GamePhase.SETUP and all(b.is_fleet_complete for b in self._boards.values())

    def start_battle(self) -> Result[None, GameError]:
        if self._phase is not GamePhase.SETUP:
            return failure(GameError.INVALID_PHASE)
        if not self.can_start_battle:
            return failure(GameError.FLEET_INCOMPLETE)
        self._phase = GamePhase.BATTLE
        logger.debug("game %s: battle started, %s to move", self.id, self.current_player.name)
        return success()

    # ------------------------------------------------------------------ #
    # Battle
    # ------------------------------------------------------------------ #
    def execute_attack(
        self,
        coordinate: Coordinate,
        player_id: uuid.UUID,
        *,
        was_timeout: bool = False,
    ) -> Result[AttackResult, GameError]:
        """Fire at the opponent of *player_id*; records the move and advances the turn."""
        if self._phase is not GamePhase.BATTLE:
            return failure(GameError.INVALID_PHASE)
        opponent = self.opponent_of(player_id)
        if opponent is None:
            return failure(GameError.PLAYER_NOT_FOUND)
        if player_id != self._current_player_id:
            return failure(GameError.NOT_YOUR_TURN)

        target = self._boards[opponent.id]
        outcome = target.receive_attack(coordinate)
        if not outcome.ok:
            if outcome.error is BoardError.ALREADY_ATTACKED:
                return failure(GameError.ALREADY_ATTACKED, cause=outcome.error)
            return failure(GameError.INVALID_ATTACK, cause=outcome.error)

        result: AttackResult = outcome.value  # type: ignore[assignment]
        self._history.add(Move.create(player_id, coordinate, result, was_timeout=was_timeout))

        if target.all_ships_sunk:
            self._finish(winner_id=player_id)
        else:
            self._current_player_id = opponent.id
        return success(result)

    def forfeit(self, player_id: uuid.UUID) -> Result[None, GameError]:
        if not self.is_in_progress:
            return failure(GameError.GAME_ALREADY_FINISHED)
        opponent = self.opponent_of(player_id)
        if opponent is None:
            return failure(GameError.PLAYER_NOT_FOUND)
        self._finish(winner_id=opponent.id)
        return success()

    def _finish(self, *, winner_id: uuid.UUID) -> None:
        self._phase = GamePhase.FINISHED
        self._winner_id = winner_id
        self._ended_at = datetime.now(timezone.utc)
        logger.debug("game %s finished, winner %s", self.id, winner_id)

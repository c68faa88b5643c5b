"""GameEngine: drives a GameState through setup, battle and game over.

The engine owns the turn clock, the optional AI seat and the single observer.
It never blocks: delays (turn transition, AI "thinking" time, timer ticks) are
handed to a :class:`~salvo.scheduling.Scheduler`, so the same engine runs on an
asyncio loop or on a :class:`~salvo.scheduling.ManualScheduler` in tests.

Turn flow
---------
start_battle → _start_turn → (human attack | AI move | timeout) →
_perform_attack → game over, or _start_turn again after the transition delay.
"""

from __future__ import annotations

import copy
import logging
import random
import uuid
from enum import Enum, auto
from typing import Any, Callable, List, Optional

from typing_extensions import Self

from . import config as _cfg
from .battleship import AttackResult, BoardView, Ship
from .bot_logic import AIPlayer
from .coord_utils import Coordinate
from .events import EngineObserver
from .game import GamePhase, GameState, Profile
from .history import MoveHistory
from .placement import ShipPlacer
from .results import Result, failure, success
from .scheduling import Handle, ManualScheduler, Scheduler
from .turn_manager import TurnManager

logger = logging.getLogger(__name__)


class EngineError(Enum):
    GAME_NOT_STARTED = auto()
    GAME_ALREADY_STARTED = auto()
    GAME_ALREADY_FINISHED = auto()
    NOT_YOUR_TURN = auto()
    INVALID_ATTACK = auto()
    FLEET_NOT_COMPLETE = auto()
    INVALID_PLAYER = auto()


class GameEngine:
    """Orchestrates one two-player game."""

    def __init__(
        self,
        player1: Profile,
        player2: Profile,
        *,
        turn_duration: Optional[float] = _cfg.TURN_DURATION,
        ai_player: Optional[AIPlayer] = None,
        ai_player_id: Optional[uuid.UUID] = None,
        scheduler: Optional[Scheduler] = None,
        observer: Optional[EngineObserver] = None,
        first_player_id: Optional[uuid.UUID] = None,
        rng: Optional[random.Random] = None,
        turn_transition_delay: float = _cfg.TURN_TRANSITION_DELAY,
        ai_move_delay: float = _cfg.AI_MOVE_DELAY,
    ):
        self._rng = rng or random.Random()
        self._state = GameState(player1, player2, first_player_id, rng=self._rng)

        if ai_player_id is None:
            ai_player_id = player2.id
        elif not self._state.has_player(ai_player_id):
            raise ValueError(f"AI seat {ai_player_id} is not in this game")
        self._ai = ai_player
        self._ai_player_id = ai_player_id

        self.turn_duration = turn_duration
        self.turn_transition_delay = turn_transition_delay
        self.ai_move_delay = ai_move_delay
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self._observer = observer

        self._timer: Optional[TurnManager] = None
        self._pending: List[Handle] = []

    @classmethod
    def resume(cls, state: GameState, **kwargs: Any) -> Self:
        """Wrap an existing GameState; a game already in battle starts its turn."""
        if "first_player_id" in kwargs:
            raise ValueError("resume() takes the turn owner from the state, not first_player_id")
        engine = cls(state.player1, state.player2, first_player_id=state.current_player_id, **kwargs)
        engine._state = state
        if state.is_battle_phase:
            engine._start_turn()
        return engine

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #
    @property
    def observer(self) -> Optional[EngineObserver]:
        return self._observer

    @observer.setter
    def observer(self, value: Optional[EngineObserver]) -> None:
        self._observer = value

    @property
    def ai_player(self) -> Optional[AIPlayer]:
        return self._ai

    @property
    def ai_player_id(self) -> uuid.UUID:
        return self._ai_player_id

    @property
    def player1(self) -> Profile:
        return self._state.player1

    @property
    def player2(self) -> Profile:
        return self._state.player2

    @property
    def state(self) -> GameState:
        """Deep snapshot; mutating it does not affect the running game."""
        return copy.deepcopy(self._state)

    @property
    def history(self) -> MoveHistory:
        return self._state.history

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def current_player_id(self) -> uuid.UUID:
        return self._state.current_player_id

    @property
    def is_started(self) -> bool:
        return not self._state.is_setup_phase

    @property
    def is_finished(self) -> bool:
        return self._state.is_finished

    @property
    def winner_id(self) -> Optional[uuid.UUID]:
        return self._state.winner_id

    @property
    def remaining_seconds(self) -> Optional[int]:
        """Seconds left on the running turn clock (None when no clock runs)."""
        return self._timer.remaining_seconds if self._timer is not None else None

    @property
    def can_start_battle(self) -> bool:
        return self._state.can_start_battle

    def public_view_of(self, player_id: uuid.UUID) -> Optional[BoardView]:
        return self._state.public_view_of(player_id)

    # ------------------------------------------------------------------ #
    # Setup
    # ------------------------------------------------------------------ #
    def _check_setup(self, player_id: uuid.UUID) -> Optional[EngineError]:
        if self._state.is_finished:
            return EngineError.GAME_ALREADY_FINISHED
        if not self._state.is_setup_phase:
            return EngineError.GAME_ALREADY_STARTED
        if not self._state.has_player(player_id):
            return EngineError.INVALID_PLAYER
        return None

    def place_ship(self, ship: Ship, player_id: uuid.UUID) -> Result[None, EngineError]:
        error = self._check_setup(player_id)
        if error is not None:
            return failure(error)
        outcome = self._state.place_ship(ship, player_id)
        if not outcome.ok:
            return failure(EngineError.INVALID_ATTACK, cause=outcome.error)
        return success()

    def remove_ship(self, ship_id: uuid.UUID, player_id: uuid.UUID) -> Result[Ship, EngineError]:
        error = self._check_setup(player_id)
        if error is not None:
            return failure(error)
        outcome = self._state.remove_ship(ship_id, player_id)
        if not outcome.ok:
            return failure(EngineError.INVALID_ATTACK, cause=outcome.error)
        return success(outcome.value)

    def auto_place_fleet(self, player_id: uuid.UUID) -> Result[List[Ship], EngineError]:
        """Replace *player_id*'s ships with a random standard fleet."""
        error = self._check_setup(player_id)
        if error is not None:
            return failure(error)
        self._state.clear_ships(player_id)
        ships = ShipPlacer(rng=self._rng).generate()
        for ship in ships:
            outcome = self._state.place_ship(ship, player_id)
            if not outcome.ok:
                return failure(EngineError.INVALID_ATTACK, cause=outcome.error)
        return success(ships)

    def start_battle(self) -> Result[None, EngineError]:
        if self._state.is_finished:
            return failure(EngineError.GAME_ALREADY_FINISHED)
        if self._state.is_battle_phase:
            return failure(EngineError.GAME_ALREADY_STARTED)
        outcome = self._state.start_battle()
        if not outcome.ok:
            return failure(EngineError.FLEET_NOT_COMPLETE, cause=outcome.error)
        logger.info("battle started: %s vs %s", self._state.player1.name, self._state.player2.name)
        self._start_turn()
        return success()

    # ------------------------------------------------------------------ #
    # Battle
    # ------------------------------------------------------------------ #
    def execute_attack(self, coordinate: Coordinate, player_id: uuid.UUID) -> Result[AttackResult, EngineError]:
        if self._state.is_setup_phase:
            return failure(EngineError.GAME_NOT_STARTED)
        if self._state.is_finished:
            return failure(EngineError.GAME_ALREADY_FINISHED)
        if not self._state.has_player(player_id):
            return failure(EngineError.INVALID_PLAYER)
        if player_id != self._state.current_player_id:
            return failure(EngineError.NOT_YOUR_TURN)
        return self._perform_attack(coordinate, player_id)

    def forfeit(self, player_id: uuid.UUID) -> Result[None, EngineError]:
        if self._state.is_finished:
            return failure(EngineError.GAME_ALREADY_FINISHED)
        if not self._state.has_player(player_id):
            return failure(EngineError.INVALID_PLAYER)
        outcome = self._state.forfeit(player_id)
        if not outcome.ok:
            return failure(EngineError.INVALID_PLAYER, cause=outcome.error)
        logger.info("%s forfeited", self._state.player_with_id(player_id).name)  # type: ignore[union-attr]
        self._stop_timer()
        self._cancel_pending()
        self._end_game()
        return success()

    def _perform_attack(
        self,
        coordinate: Coordinate,
        player_id: uuid.UUID,
        *,
        was_timeout: bool = False,
    ) -> Result[AttackResult, EngineError]:
        outcome = self._state.execute_attack(coordinate, player_id, was_timeout=was_timeout)
        if not outcome.ok:
            return failure(EngineError.INVALID_ATTACK, cause=outcome.error)
        result: AttackResult = outcome.value  # type: ignore[assignment]

        self._stop_timer()
        self._cancel_pending()
        if self._ai is not None and player_id == self._ai_player_id:
            self._ai.record_result(result, coordinate)

        logger.debug("%s -> %s: %s%s", player_id, coordinate, result, " (timeout)" if was_timeout else "")
        self._notify("attack_executed", result, coordinate, player_id)
        self._notify("turn_ended", player_id)

        if self._state.is_finished:
            self._end_game()
        else:
            self._schedule(self.turn_transition_delay, self._start_turn)
        return success(result)

    # ------------------------------------------------------------------ #
    # Turn lifecycle
    # ------------------------------------------------------------------ #
    def _start_turn(self) -> None:
        if not self._state.is_battle_phase:
            return
        player_id = self._state.current_player_id
        self._notify("turn_began", player_id)
        # The observer may already have played this turn
        if not self._state.is_battle_phase or self._state.current_player_id != player_id:
            return

        if self.turn_duration is not None:
            self._timer = TurnManager(self.turn_duration, self.scheduler, self._on_timer_update, self._on_timeout)
            self._timer.start()
        if self._ai is not None and player_id == self._ai_player_id:
            self._schedule(self.ai_move_delay, self._make_ai_move)

    def _make_ai_move(self) -> None:
        ai_id = self._ai_player_id
        if self._ai is None or not self._state.is_battle_phase or self._state.current_player_id != ai_id:
            return
        defender = self._state.opponent_of(ai_id)
        view = self._state.public_view_of(defender.id)  # type: ignore[union-attr]
        target = self._ai.choose_target(view, self._state.history)  # type: ignore[arg-type]
        if target is None:
            logger.warning("AI %s found no target", self._ai.difficulty.value)
            return
        outcome = self._perform_attack(target, ai_id)
        if not outcome.ok:
            logger.warning("AI shot at %s rejected: %s", target, outcome.error)

    def _on_timer_update(self, remaining: int) -> None:
        self._notify("turn_timer_updated", remaining)

    def _on_timeout(self) -> None:
        if not self._state.is_battle_phase:
            return
        player_id = self._state.current_player_id
        logger.info("turn timed out for %s", self._state.current_player.name)
        self._notify("turn_timed_out", player_id)

        defender = self._state.opponent_player
        targets = self._state.public_view_of(defender.id).valid_targets  # type: ignore[union-attr]
        if not targets:
            return
        self._perform_attack(self._rng.choice(targets), player_id, was_timeout=True)

    def _end_game(self) -> None:
        self._stop_timer()
        winner = self._state.winner
        logger.info("game over, %s wins after %d moves", winner.name if winner else "nobody", self._state.total_turns)
        self._notify("game_ended", self._state.winner_id)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _notify(self, name: str, *args: Any) -> None:
        if self._observer is not None:
            getattr(self._observer, name)(*args)

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        self._pending.append(self.scheduler.call_later(delay, callback))

    def _cancel_pending(self) -> None:
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

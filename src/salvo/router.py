"""Translate engine observer callbacks into `Event` records and fan them out.

The router lives *outside* GameEngine so that any number of listeners (a UI
adapter, a logger, a test recorder) can share the engine's single observer
slot. It is also straight-forward to unit-test by feeding synthetic calls.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, List

from .battleship import AttackResult
from .coord_utils import Coordinate
from .events import Category, EngineObserver, Event

logger = logging.getLogger(__name__)

Subscriber = Callable[[Event], None]


class EventRouter(EngineObserver):
    """Engine observer that converts each callback to an `Event` and re-emits it."""

    def __init__(self) -> None:
        self._subs: List[Subscriber] = []

    def subscribe(self, cb: Subscriber) -> None:
        self._subs.append(cb)

    def unsubscribe(self, cb: Subscriber) -> None:
        self._subs.remove(cb)

    def emit(self, ev: Event) -> None:
        for cb in tuple(self._subs):
            try:
                cb(ev)
            except Exception:  # noqa: BLE001
                # A misbehaving subscriber must not break the game flow
                logger.exception("Event subscriber failed for %s", ev)

    # ------------------------------------------------------------------
    # EngineObserver
    # ------------------------------------------------------------------
    def turn_began(self, player_id: uuid.UUID) -> None:
        self.emit(Event(Category.TURN, "begin", {"player": player_id}))

    def turn_ended(self, player_id: uuid.UUID) -> None:
        self.emit(Event(Category.TURN, "end", {"player": player_id}))

    def turn_timer_updated(self, remaining_seconds: int) -> None:
        self.emit(Event(Category.TURN, "tick", {"remaining": remaining_seconds}))

    def turn_timed_out(self, player_id: uuid.UUID) -> None:
        self.emit(Event(Category.TURN, "timeout", {"player": player_id}))

    def attack_executed(self, result: AttackResult, coordinate: Coordinate, player_id: uuid.UUID) -> None:
        self.emit(Event(Category.ATTACK, "executed", {"player": player_id, "coord": coordinate, "result": result}))

    def game_ended(self, winner_id: uuid.UUID) -> None:
        self.emit(Event(Category.GAME, "ended", {"winner": winner_id}))


def log_event(ev: Event) -> None:
    """Subscriber that writes one log line per event (timer ticks at DEBUG)."""
    if ev.category is Category.ATTACK:
        logger.info("%s fired at %s: %s", ev.payload["player"], ev.payload["coord"], ev.payload["result"])
    elif ev.category is Category.GAME:
        logger.info("game over, winner %s", ev.payload["winner"])
    elif ev.type == "tick":
        logger.debug("turn clock: %ss left", ev.payload["remaining"])
    elif ev.type == "timeout":
        logger.warning("turn timed out for %s", ev.payload["player"])
    else:
        logger.debug("turn %s for %s", ev.type, ev.payload["player"])

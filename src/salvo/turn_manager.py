"""TurnManager: per-turn countdown driven by scheduler callbacks (no polling)."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, ClassVar, Optional

from .scheduling import Handle, Scheduler

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class TimerState(Enum):
    IDLE = auto()
    RUNNING = auto()
    PAUSED = auto()


class TurnManager:
    """
    Counts a turn down one second at a time.

    ``on_update(remaining)`` fires once immediately on start and then after
    every tick that leaves time on the clock; ``on_timeout()`` fires instead
    on the tick that reaches zero, after the timer has already stopped itself.
    """

    def __init__(
        self,
        duration: float,
        scheduler: Scheduler,
        on_update: Callable[[int], None],
        on_timeout: Callable[[], None],
    ):
        self.duration = duration
        self.scheduler = scheduler
        self.on_update = on_update
        self.on_timeout = on_timeout
        self.remaining_seconds: int = int(duration)
        self.state = TimerState.IDLE
        self._handle: Optional[Handle] = None

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    def start(self) -> None:
        """Reset to the full duration and begin ticking; ignored unless idle."""
        if self.state is not TimerState.IDLE:
            return
        self.remaining_seconds = int(self.duration)
        self.state = TimerState.RUNNING
        self.on_update(self.remaining_seconds)
        self._arm()

    def stop(self) -> None:
        self._disarm()
        self.state = TimerState.IDLE

    def pause(self) -> None:
        if self.state is not TimerState.RUNNING:
            return
        self._disarm()
        self.state = TimerState.PAUSED

    def resume(self) -> None:
        if self.state is not TimerState.PAUSED:
            return
        self.state = TimerState.RUNNING
        self._arm()

    def _arm(self) -> None:
        self._handle = self.scheduler.call_later(TICK_SECONDS, self._tick)

    def _disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if self.state is not TimerState.RUNNING:
            return
        self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            self.stop()
            logger.debug("turn timer expired")
            self.on_timeout()
        else:
            self.on_update(self.remaining_seconds)
            self._arm()


@dataclass(frozen=True)
class TurnConfiguration:
    """Turn-length presets. ``duration=None`` means no time limit."""

    duration: Optional[float]

    STANDARD: ClassVar["TurnConfiguration"]
    RELAXED: ClassVar["TurnConfiguration"]
    UNTIMED: ClassVar["TurnConfiguration"]

    @property
    def has_time_limit(self) -> bool:
        return self.duration is not None and math.isfinite(self.duration)


TurnConfiguration.STANDARD = TurnConfiguration(20)
TurnConfiguration.RELAXED = TurnConfiguration(30)
TurnConfiguration.UNTIMED = TurnConfiguration(None)

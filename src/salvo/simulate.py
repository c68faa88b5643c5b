"""Headless AI-vs-AI matches on a virtual clock.

Seat 2 is played by the engine's own AI hook; seat 1 is played from outside
through the public API, by an EventRouter subscriber that answers each
turn-begin event the way a UI would. All presentation delays are zero and
time only moves when nothing is runnable, so a full game finishes in
milliseconds.

    salvo-simulate --p1 commander --p2 admiral --games 50 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import random
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import config as _cfg
from .bot_logic import AIDifficulty, AIPlayer, create_ai
from .engine import GameEngine
from .events import Category, Event
from .game import Profile
from .router import EventRouter, log_event
from .scheduling import ManualScheduler

logger = logging.getLogger(__name__)

MAX_STEPS = 10_000


@dataclass(frozen=True)
class MatchSummary:
    winner_seat: int
    moves: Tuple[int, int]
    timeouts: int

    @property
    def total_moves(self) -> int:
        return sum(self.moves)


class SeatDriver:
    """Event subscriber that plays one seat with an AIPlayer via ``execute_attack``."""

    def __init__(self, engine: GameEngine, ai: AIPlayer, player_id: uuid.UUID, opponent_id: uuid.UUID):
        self.engine = engine
        self.ai = ai
        self.player_id = player_id
        self.opponent_id = opponent_id

    def __call__(self, ev: Event) -> None:
        if ev.payload.get("player") != self.player_id:
            return
        if ev.category is Category.TURN and ev.type == "begin":
            self.engine.scheduler.call_later(0, self._fire)
        elif ev.category is Category.ATTACK:
            self.ai.record_result(ev.payload["result"], ev.payload["coord"])

    def _fire(self) -> None:
        if self.engine.is_finished or self.engine.current_player_id != self.player_id:
            return
        view = self.engine.public_view_of(self.opponent_id)
        target = self.ai.choose_target(view, self.engine.history)  # type: ignore[arg-type]
        if target is None:
            return
        outcome = self.engine.execute_attack(target, self.player_id)
        if not outcome.ok:
            logger.warning("seat shot at %s rejected: %s", target, outcome.error)


def run_match(
    p1: AIDifficulty,
    p2: AIDifficulty,
    *,
    rng: Optional[random.Random] = None,
    turn_duration: Optional[float] = None,
    verbose: bool = False,
) -> MatchSummary:
    rng = rng or random.Random()
    scheduler = ManualScheduler()
    seat1 = Profile.ai(f"{p1.value} (seat 1)")
    seat2 = Profile.ai(f"{p2.value} (seat 2)")
    ai1 = create_ai(p1, rng=rng)
    ai2 = create_ai(p2, rng=rng)

    engine = GameEngine(
        seat1,
        seat2,
        turn_duration=turn_duration,
        ai_player=ai2,
        ai_player_id=seat2.id,
        scheduler=scheduler,
        rng=rng,
        turn_transition_delay=0.0,
        ai_move_delay=0.0,
    )
    router = EventRouter()
    router.subscribe(SeatDriver(engine, ai1, seat1.id, seat2.id))
    if verbose:
        router.subscribe(log_event)
    engine.observer = router

    for seat, ai in ((seat1, ai1), (seat2, ai2)):
        for ship in ai.generate_ship_placements():
            engine.place_ship(ship, seat.id).unwrap()
    engine.start_battle().unwrap()

    for _ in range(MAX_STEPS):
        if engine.is_finished:
            break
        if scheduler.run_pending() == 0:
            scheduler.advance(1.0)
    if not engine.is_finished:
        raise RuntimeError(f"match did not finish within {MAX_STEPS} scheduler steps")

    history = engine.history
    return MatchSummary(
        winner_seat=1 if engine.winner_id == seat1.id else 2,
        moves=(len(history.moves_by(seat1.id)), len(history.moves_by(seat2.id))),
        timeouts=sum(1 for m in history if m.was_timeout),
    )


# ----------------------------- main -------------------------------


def main(argv: Optional[List[str]] = None) -> None:
    """Run a batch of AI-vs-AI games and log the tally."""
    levels = [d.name.lower() for d in AIDifficulty]
    parser = argparse.ArgumentParser(description="Headless AI vs AI matches")
    parser.add_argument("--p1", choices=levels, default="commander", help="Seat 1 difficulty")
    parser.add_argument("--p2", choices=levels, default="admiral", help="Seat 2 difficulty")
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--seed", type=int, default=_cfg.SEED)
    parser.add_argument(
        "--turn-duration",
        type=float,
        default=None,
        help="Seconds per turn (default: untimed)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug or _cfg.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    p1 = AIDifficulty[args.p1.upper()]
    p2 = AIDifficulty[args.p2.upper()]
    rng = random.Random(args.seed)
    wins: Counter[int] = Counter()
    moves = 0
    for game in range(1, args.games + 1):
        summary = run_match(p1, p2, rng=rng, turn_duration=args.turn_duration, verbose=args.debug)
        wins[summary.winner_seat] += 1
        moves += summary.total_moves
        logger.info(
            "game %d: seat %d wins (%d/%d shots, %d timeouts)",
            game,
            summary.winner_seat,
            *summary.moves,
            summary.timeouts,
        )

    logger.info(
        "%s %d - %d %s over %d games, %.1f shots per game",
        p1.value,
        wins[1],
        wins[2],
        p2.value,
        args.games,
        moves / args.games if args.games else 0.0,
    )


if __name__ == "__main__":  # pragma: no cover
    main()

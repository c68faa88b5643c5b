import logging
import random
import sys
from pathlib import Path
from typing import Any, List, Tuple

import pytest

# Ensure local `src` directory is importable before project is installed.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from salvo.battleship import STANDARD_FLEET, Ship  # noqa: E402
from salvo.coord_utils import Coordinate, Orientation  # noqa: E402
from salvo.events import EngineObserver  # noqa: E402
from salvo.game import Profile  # noqa: E402
from salvo.scheduling import ManualScheduler  # noqa: E402

# Keep engine INFO chatter out of the test output
logging.basicConfig(level=logging.WARNING)


def standard_fleet() -> List[Ship]:
    """One ship of each type, laid horizontally from column 0 on rows 0-4."""
    return [Ship(t, Coordinate(row, 0), Orientation.HORIZONTAL) for row, t in enumerate(STANDARD_FLEET)]


def fleet_cells() -> List[Coordinate]:
    return [c for ship in standard_fleet() for c in ship.coordinates]


class RecordingObserver(EngineObserver):
    """Keeps every engine callback as a (name, args) tuple."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def turn_began(self, player_id):
        self.calls.append(("turn_began", (player_id,)))

    def turn_ended(self, player_id):
        self.calls.append(("turn_ended", (player_id,)))

    def attack_executed(self, result, coordinate, player_id):
        self.calls.append(("attack_executed", (result, coordinate, player_id)))

    def game_ended(self, winner_id):
        self.calls.append(("game_ended", (winner_id,)))

    def turn_timer_updated(self, remaining_seconds):
        self.calls.append(("turn_timer_updated", (remaining_seconds,)))

    def turn_timed_out(self, player_id):
        self.calls.append(("turn_timed_out", (player_id,)))


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def players() -> Tuple[Profile, Profile]:
    return Profile("Alice"), Profile("Bob")


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)

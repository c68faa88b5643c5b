"""Random fleet layout shared by the AI players and the auto-place feature."""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from . import config as _cfg
from .battleship import STANDARD_FLEET, Board, Ship
from .coord_utils import Coordinate, Orientation

logger = logging.getLogger(__name__)


class ShipPlacer:
    """
    Rejection sampler for a full standard fleet.

    Each ship type gets up to *max_attempts* random (origin, orientation)
    draws on a scratch board. If a type runs out of draws the partial layout
    is thrown away and the whole fleet starts over, so a crowded board can
    never dead-end the generator.
    """

    def __init__(self, *, rng: Optional[random.Random] = None, max_attempts: int = _cfg.PLACEMENT_ATTEMPTS) -> None:
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

    def generate(self) -> List[Ship]:
        restarts = 0
        while True:
            fleet = self._try_fleet()
            if fleet is not None:
                if restarts:
                    logger.debug("fleet generated after %d restart(s)", restarts)
                return fleet
            restarts += 1

    def _try_fleet(self) -> Optional[List[Ship]]:
        board = Board()
        ships: List[Ship] = []
        for ship_type in STANDARD_FLEET:
            for _ in range(self.max_attempts):
                origin = Coordinate(self.rng.randrange(board.size), self.rng.randrange(board.size))
                orientation = self.rng.choice((Orientation.HORIZONTAL, Orientation.VERTICAL))
                ship = Ship(ship_type, origin, orientation)
                if board.place_ship(ship).ok:
                    ships.append(ship)
                    break
            else:
                return None
        return ships


def generate_random_placements(rng: Optional[random.Random] = None) -> List[Ship]:
    """Five non-overlapping, in-bounds ships, one of each standard type."""
    return ShipPlacer(rng=rng).generate()

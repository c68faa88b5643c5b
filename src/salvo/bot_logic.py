from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import ClassVar, Dict, Iterable, List, Optional, Set, Type

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .battleship import STANDARD_FLEET, AttackResult, BoardView, Ship
from .config import BOARD_SIZE
from .coord_utils import Coordinate, Direction
from .history import MoveHistory
from .placement import ShipPlacer

logger = logging.getLogger(__name__)


class AIDifficulty(Enum):
    ENSIGN = "Ensign"
    COMMANDER = "Commander"
    ADMIRAL = "Admiral"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    AIDifficulty.ENSIGN: "Random targeting. Good for beginners.",
    AIDifficulty.COMMANDER: "Hunt and target strategy. Fair challenge.",
    AIDifficulty.ADMIRAL: "Probability-based targeting. Expert level.",
}


class AIPlayer(ABC):
    """
    Targeting strategy for a computer-controlled seat.

    Strategies only ever see the opponent through a :class:`BoardView`
    (attacked cells and how they landed) plus the public move history; they
    never learn where unrevealed ships are.
    """

    difficulty: ClassVar[AIDifficulty]

    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    @abstractmethod
    def choose_target(self, board: BoardView, history: MoveHistory) -> Optional[Coordinate]:
        """Pick the next shot, or None when nothing is left to fire at."""

    @abstractmethod
    def record_result(self, result: AttackResult, coordinate: Coordinate) -> None:
        """Learn the outcome of a shot this strategy chose."""

    @abstractmethod
    def reset(self) -> None:
        """Forget everything ahead of a new game."""

    def generate_ship_placements(self) -> List[Ship]:
        return ShipPlacer(rng=self.rng).generate()


# ---------------------------------------------------------------------- #
# Ensign
# ---------------------------------------------------------------------- #
class RandomAI(AIPlayer):
    """Uniformly random among unattacked cells. Stateless."""

    difficulty = AIDifficulty.ENSIGN

    def choose_target(self, board: BoardView, history: MoveHistory) -> Optional[Coordinate]:
        targets = board.valid_targets
        return self.rng.choice(targets) if targets else None

    def record_result(self, result: AttackResult, coordinate: Coordinate) -> None:
        pass

    def reset(self) -> None:
        pass


# ---------------------------------------------------------------------- #
# Commander
# ---------------------------------------------------------------------- #
class HuntMode(Enum):
    HUNTING = auto()
    TARGETING = auto()


class HuntTargetAI(AIPlayer):
    """
    Hunt / target
    -------------
    1. Hunting: fire at random on the (row + column) even parity squares; every
       ship of length >= 2 covers at least one of them. Odd squares are only
       used once the even ones run out.
    2. Targeting: after a hit, try the cells around it. Once a second hit lines up,
       commit to that direction and keep extending the line; on a miss drop the
       commitment and work outward from the first hit again.
    3. A sinking shot discards the whole cluster and returns to hunting.
    """

    difficulty = AIDifficulty.COMMANDER

    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        super().__init__(rng=rng)
        self.reset()

    def reset(self) -> None:
        self.mode = HuntMode.HUNTING
        self.last_hit: Optional[Coordinate] = None
        self.direction: Optional[Direction] = None
        self.hits: List[Coordinate] = []
        self.attacked: Set[Coordinate] = set()

    # ------------------------------------------------------------------ #
    # Shot selection
    # ------------------------------------------------------------------ #
    def choose_target(self, board: BoardView, history: MoveHistory) -> Optional[Coordinate]:
        valid = [c for c in board.valid_targets if c not in self.attacked]
        if not valid:
            return None

        if self.mode is HuntMode.TARGETING:
            target = self._follow_up(set(valid))
            if target is not None:
                return target
        return self._hunt(valid)

    def _hunt(self, valid: List[Coordinate]) -> Coordinate:
        parity = [c for c in valid if (c.row + c.column) % 2 == 0]
        return self.rng.choice(parity or valid)

    def _follow_up(self, valid: Set[Coordinate]) -> Optional[Coordinate]:
        if self.direction is not None and self.last_hit is not None:
            # Keep extending the line ...
            ahead = self.last_hit.adjacent(self.direction)
            if ahead in valid:
                return ahead
            # ... or, with that end closed, work back past the first hit
            behind = self.hits[0].adjacent(self.direction.opposite)
            if behind in valid:
                return behind

        for hit in self.hits:
            for direction in Direction:
                candidate = hit.adjacent(direction)
                if candidate in valid:
                    return candidate
        return None

    # ------------------------------------------------------------------ #
    # Result handling
    # ------------------------------------------------------------------ #
    def record_result(self, result: AttackResult, coordinate: Coordinate) -> None:
        self.attacked.add(coordinate)
        if result.is_sunk:
            self._reset_cluster_state()
        elif result.is_hit:
            self._on_hit(coordinate)
        elif self.mode is HuntMode.TARGETING and self.direction is not None:
            # Missed off the end of the line: restart from the first hit
            self.last_hit = self.hits[0]
            self.direction = None

    def _on_hit(self, coordinate: Coordinate) -> None:
        if self.mode is HuntMode.HUNTING:
            self.mode = HuntMode.TARGETING
            self.last_hit = coordinate
            self.direction = None
            self.hits = [coordinate]
            return
        self.hits.append(coordinate)
        if self.last_hit is not None:
            self.direction = Direction.between(self.last_hit, coordinate)
        self.last_hit = coordinate
        logger.debug("hunt/target: %d hits, heading %s", len(self.hits), self.direction)

    def _reset_cluster_state(self) -> None:
        self.mode = HuntMode.HUNTING
        self.last_hit = None
        self.direction = None
        self.hits = []


# ---------------------------------------------------------------------- #
# Admiral
# ---------------------------------------------------------------------- #
def placement_density(sizes: Iterable[int], blocked: np.ndarray) -> np.ndarray:
    """
    For every cell, count the ship placements that would cover it.

    A placement counts when it lies fully on the board and avoids every
    *blocked* cell, summed over each ship size in *sizes* and both
    orientations.
    """
    n = blocked.shape[0]
    density = np.zeros((n, n), dtype=np.int32)
    for size in sizes:
        if size > n:
            continue
        span = n - size + 1
        # Horizontal: row r, columns c .. c+size-1
        free = ~sliding_window_view(blocked, size, axis=1).any(axis=-1)
        for offset in range(size):
            density[:, offset : offset + span] += free
        # Vertical: column c, rows r .. r+size-1
        free = ~sliding_window_view(blocked, size, axis=0).any(axis=-1)
        for offset in range(size):
            density[offset : offset + span, :] += free
    return density


class ProbabilityAI(AIPlayer):
    """
    Probability density
    -------------------
    Scores each open cell by how many placements of the ships still afloat
    could cover it. Misses block placements; unsunk hits do not.
    While any hit is live, only cells next to a live hit are considered.

    On any sinking shot every live hit is forgotten, not just the ones on the
    ship that went down. That is only exact while a single damaged ship is
    being chased at a time, which the adjacent-first rule makes the usual case.
    """

    difficulty = AIDifficulty.ADMIRAL

    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        super().__init__(rng=rng)
        self.reset()

    def reset(self) -> None:
        self.attacked: Set[Coordinate] = set()
        self.hits: List[Coordinate] = []
        self.remaining_sizes: List[int] = [t.size for t in STANDARD_FLEET]

    def choose_target(self, board: BoardView, history: MoveHistory) -> Optional[Coordinate]:
        valid = [c for c in board.valid_targets if c not in self.attacked]
        if not valid:
            return None

        density = self.density()
        if self.hits:
            open_cells = set(valid)
            adjacent = sorted(
                {n for hit in self.hits for n in hit.all_adjacent() if n in open_cells},
                key=lambda c: (c.row, c.column),
            )
            if adjacent:
                return self._best(adjacent, density)
        return self._best(valid, density)

    def density(self) -> np.ndarray:
        blocked = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=bool)
        live = set(self.hits)
        for c in self.attacked:
            if c not in live:
                blocked[c.row, c.column] = True
        return placement_density(self.remaining_sizes, blocked)

    def _best(self, candidates: List[Coordinate], density: np.ndarray) -> Coordinate:
        scores = [int(density[c.row, c.column]) for c in candidates]
        top = max(scores)
        return self.rng.choice([c for c, s in zip(candidates, scores) if s == top])

    def record_result(self, result: AttackResult, coordinate: Coordinate) -> None:
        self.attacked.add(coordinate)
        if result.is_sunk:
            size = result.ship_type.size  # type: ignore[union-attr]
            if size in self.remaining_sizes:
                self.remaining_sizes.remove(size)
            self.hits.clear()
        elif result.is_hit:
            self.hits.append(coordinate)
        elif coordinate in self.hits:
            self.hits.remove(coordinate)


# ---------------------------------------------------------------------- #
# Factory
# ---------------------------------------------------------------------- #
_STRATEGIES: Dict[AIDifficulty, Type[AIPlayer]] = {
    AIDifficulty.ENSIGN: RandomAI,
    AIDifficulty.COMMANDER: HuntTargetAI,
    AIDifficulty.ADMIRAL: ProbabilityAI,
}


def create_ai(difficulty: AIDifficulty, *, rng: Optional[random.Random] = None) -> AIPlayer:
    return _STRATEGIES[difficulty](rng=rng)

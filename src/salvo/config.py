"""Central configuration for runtime-tunable parameters.

All timing constants can be overridden via environment variables so that an
interactive front-end gets the full presentation pauses by default, while the
automated test-suite and the headless simulator can collapse them to zero.
"""

from __future__ import annotations

import os

# ===========================================================================
# Board Geometry
# ===========================================================================
# The grid is always 10x10; coordinates, fleet layout and the AI scoring all
# assume it. Not overridable.
BOARD_SIZE: int = 10


# ===========================================================================
# Turn Timing
# ===========================================================================
# SALVO_TURN_DURATION: seconds a player has to fire before a random shot is
#   forced on their behalf.
#   Defaults to 20 seconds.
#   Example: export SALVO_TURN_DURATION=30
TURN_DURATION: int = int(os.getenv("SALVO_TURN_DURATION", "20"))

# SALVO_TURN_TRANSITION_DELAY: pause (seconds) between an attack and the start
#   of the next turn. Purely cosmetic, it leaves the UI time to animate.
#   Defaults to 3.0. Set to 0 for headless play.
#   Example: export SALVO_TURN_TRANSITION_DELAY=0
TURN_TRANSITION_DELAY: float = float(os.getenv("SALVO_TURN_TRANSITION_DELAY", "3.0"))

# SALVO_AI_MOVE_DELAY: pause (seconds) before the AI seat fires its shot.
#   Defaults to 0.5.
#   Example: export SALVO_AI_MOVE_DELAY=0
AI_MOVE_DELAY: float = float(os.getenv("SALVO_AI_MOVE_DELAY", "0.5"))


# ===========================================================================
# Fleet Generation
# ===========================================================================
# SALVO_PLACEMENT_ATTEMPTS: random (origin, orientation) draws tried for each
#   ship type before the whole fleet layout is thrown away and restarted.
#   Defaults to 100.
#   Example: export SALVO_PLACEMENT_ATTEMPTS=250
PLACEMENT_ATTEMPTS: int = int(os.getenv("SALVO_PLACEMENT_ATTEMPTS", "100"))


# ===========================================================================
# Debugging and Logging
# ===========================================================================
# SALVO_DEBUG: If "1", the simulator CLI logs at DEBUG level.
#   Defaults to "0" (INFO).
#   Example: export SALVO_DEBUG=1
DEBUG: bool = os.getenv("SALVO_DEBUG", "0") == "1"

# SALVO_SEED: default RNG seed for the simulator CLI. Unset means a fresh
#   random seed per run.
#   Example: export SALVO_SEED=1234
SEED: int | None = int(os.environ["SALVO_SEED"]) if os.getenv("SALVO_SEED") else None

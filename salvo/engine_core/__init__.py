"""
Engine Core - Deterministic lockstep simulation.

The core is the runtime that:
1. Seeds each side's body from a 32-bit seed
2. Integrates bodies under bounded thrust
3. Records moves in append-only logs
4. Replays logs to reconstruct trajectories and resolve shots
5. Gates moves with the turn state machine
"""

from .errors import SalvoError, InvalidMoveError, InvalidConfigError, PeerExhaustedError
from .rng import SeededRandom, generate_seed
from .vector import Vector2
from .body import Body, Side
from .move import Move, MoveKind
from .move_log import MoveLog
from .replay import Shot, ReplayResult, compute_shots, reconstruct_trajectory, trajectory_digest
from .state_machine import TurnState, TurnStateMachine, ALLOWED_TRANSITIONS

__all__ = [
    "SalvoError",
    "InvalidMoveError",
    "InvalidConfigError",
    "PeerExhaustedError",
    "SeededRandom",
    "generate_seed",
    "Vector2",
    "Body",
    "Side",
    "Move",
    "MoveKind",
    "MoveLog",
    "Shot",
    "ReplayResult",
    "compute_shots",
    "reconstruct_trajectory",
    "trajectory_digest",
    "TurnState",
    "TurnStateMachine",
    "ALLOWED_TRANSITIONS",
]

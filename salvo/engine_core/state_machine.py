"""
Turn State Machine - Gates which move a side may submit and when a
synchronization (replay) step happens.

The machine is a partial function: an action not allowed in the current
state is silently ignored. GAME_OVER is reachable from every state and
nothing leaves it.
"""

from __future__ import annotations
from enum import Enum
import logging

from .move import MoveKind

logger = logging.getLogger(__name__)


class TurnState(Enum):
    """Turn phases for one session."""
    PROMPT = "prompt"  # Waiting for the side to pick a move kind
    ACCELERATE = "accelerate"  # Collecting a thrust direction
    SHOOT = "shoot"  # Collecting a target point
    ANALYZE = "analyze"  # Measuring the arena, no move pending
    SYNC = "sync"  # Exchanging moves and replaying
    GAME_OVER = "gameover"


ALLOWED_TRANSITIONS: dict[TurnState, frozenset[TurnState]] = {
    TurnState.PROMPT: frozenset({TurnState.SHOOT, TurnState.ACCELERATE, TurnState.ANALYZE}),
    TurnState.ACCELERATE: frozenset({TurnState.SHOOT, TurnState.SYNC, TurnState.ANALYZE}),
    TurnState.SHOOT: frozenset({TurnState.ACCELERATE, TurnState.SYNC, TurnState.ANALYZE}),
    TurnState.ANALYZE: frozenset({TurnState.SHOOT, TurnState.ACCELERATE}),
    TurnState.SYNC: frozenset({TurnState.PROMPT}),
    TurnState.GAME_OVER: frozenset(),
}

# Extra spellings accepted from input controllers
ACTION_ALIASES: dict[str, TurnState] = {
    "confirm": TurnState.SYNC,
    "game_over": TurnState.GAME_OVER,
}

MOVE_STATES: dict[TurnState, MoveKind] = {
    TurnState.ACCELERATE: MoveKind.ACCELERATE,
    TurnState.SHOOT: MoveKind.SHOOT,
}


def parse_action(action: TurnState | str) -> TurnState | None:
    """Resolve an action to a TurnState, or None if it names nothing."""
    if isinstance(action, TurnState):
        return action
    if not isinstance(action, str):
        return None
    key = action.strip().lower()
    if key in ACTION_ALIASES:
        return ACTION_ALIASES[key]
    try:
        return TurnState(key)
    except ValueError:
        return None


class TurnStateMachine:
    """
    Usage:
        machine = TurnStateMachine()
        machine.transition(TurnState.SHOOT)
        machine.transition("sync")
        machine.state  # TurnState.SYNC
    """

    def __init__(self, initial: TurnState = TurnState.PROMPT):
        if not isinstance(initial, TurnState):
            initial = TurnState.PROMPT
        self.state = initial
        self.previous: TurnState | None = None

    def allowed_actions(self) -> frozenset[TurnState]:
        if self.state == TurnState.GAME_OVER:
            return frozenset()
        return ALLOWED_TRANSITIONS[self.state] | {TurnState.GAME_OVER}

    def can_transition(self, action: TurnState | str) -> bool:
        target = parse_action(action)
        return target is not None and target in self.allowed_actions()

    def transition(self, action: TurnState | str) -> bool:
        """
        Move to `action` if it is allowed from the current state.

        Returns True if the state changed. Disallowed or unknown
        actions leave the state untouched.
        """
        target = parse_action(action)
        if target is None or target not in self.allowed_actions():
            logger.debug("Ignoring transition %r from %s", action, self.state.value)
            return False

        self.previous = self.state
        self.state = target
        return True

    @property
    def pending_move_kind(self) -> MoveKind | None:
        """
        The move kind the local side may submit right now.

        While collecting input this is the current state's kind; during
        SYNC it is the kind of the state that was confirmed.
        """
        if self.state in MOVE_STATES:
            return MOVE_STATES[self.state]
        if self.state == TurnState.SYNC and self.previous in MOVE_STATES:
            return MOVE_STATES[self.previous]
        return None

    @property
    def is_over(self) -> bool:
        return self.state == TurnState.GAME_OVER

    def __repr__(self) -> str:
        return f"TurnStateMachine(state={self.state.value})"

"""
Game Session - Orchestrates one duel between a local side and a peer.

The turn:
1. Local side picks a move kind (PROMPT -> ACCELERATE / SHOOT)
2. Local side confirms a move (-> SYNC)
3. Local move and one peer move are appended to the logs
4. Both perspectives are replayed from scratch
5. Bodies and shots are republished from the replay
6. Winner checked (-> PROMPT or GAME_OVER)

Bodies held here are a cache of the last replay, never independent
state. Once a winner is set the session is frozen.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import time
import uuid

from ..config import ArenaConfig, DEFAULT_CONFIG
from ..bots import PeerMoveSource, PeerHistory
from ..engine_core.body import Body, Side
from ..engine_core.move import Move
from ..engine_core.move_log import MoveLog
from ..engine_core.replay import Shot, ReplayResult, compute_shots
from ..engine_core.rng import SeededRandom
from ..engine_core.state_machine import TurnState, TurnStateMachine

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1


@dataclass
class SyncResult:
    """
    Result of a synchronization step.

    accepted is False when the step was rejected (wrong state or wrong
    move kind); nothing changed in that case.
    """
    accepted: bool
    state: TurnState
    winner: Side | None = None
    local_move: Move | None = None
    peer_move: Move | None = None
    shots: dict[Side, list[Shot]] = field(default_factory=dict)
    reason: str | None = None

    @classmethod
    def rejected(cls, state: TurnState, reason: str) -> SyncResult:
        return cls(accepted=False, state=state, reason=reason)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view handed to a renderer after every change."""
    session_id: str
    state: TurnState
    turn: int
    bodies: dict[Side, Body]
    shots: dict[Side, tuple[Shot, ...]]
    winner: Side | None
    digests: dict[Side, str]
    config: ArenaConfig


class GameSession:
    """
    One duel. The local side is always Side.A; the peer is Side.B.

    Usage:
        session = GameSession.create(seed_a, seed_b, peer=PseudoOpponentPolicy(7))
        session.transition(TurnState.SHOOT)
        result = session.confirm(Move.shoot(400, 300))
        result.winner
    """

    local_side = Side.A
    peer_side = Side.B

    def __init__(
        self,
        seed_a: int,
        seed_b: int,
        peer: PeerMoveSource | None = None,
        config: ArenaConfig = DEFAULT_CONFIG,
        session_id: str | None = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = time.time()
        self.config = config
        self.peer = peer

        self.logs: dict[Side, MoveLog] = {
            Side.A: MoveLog.start(seed_a),
            Side.B: MoveLog.start(seed_b),
        }
        # No history yet: spawn straight from the seeds
        self.bodies: dict[Side, Body] = {
            side: Body.spawn(SeededRandom(log.seed), side, config)
            for side, log in self.logs.items()
        }
        self.shots: dict[Side, list[Shot]] = {Side.A: [], Side.B: []}
        self.digests: dict[Side, str] = {}
        self.machine = TurnStateMachine(TurnState.PROMPT)
        self._winner: Side | None = None

    @classmethod
    def create(
        cls,
        seed_a: int,
        seed_b: int,
        peer: PeerMoveSource | None = None,
        config: ArenaConfig = DEFAULT_CONFIG,
    ) -> GameSession:
        session = cls(seed_a, seed_b, peer=peer, config=config)
        logger.info(
            "Session %s created (seed_a=%d, seed_b=%d, peer=%s)",
            session.session_id,
            session.logs[Side.A].seed,
            session.logs[Side.B].seed,
            peer.get_name() if peer else None,
        )
        return session

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> TurnState:
        return self.machine.state

    @property
    def winner(self) -> Side | None:
        return self._winner

    @property
    def turn(self) -> int:
        """Number of completed synchronizations."""
        return min(len(log) for log in self.logs.values()) - 1

    @property
    def is_over(self) -> bool:
        return self._winner is not None or self.machine.is_over

    def seed(self, side: Side) -> int:
        return self.logs[side].seed

    def transition(self, action: TurnState | str) -> bool:
        """Forward an input-controller transition to the state machine."""
        return self.machine.transition(action)

    # =========================================================================
    # Moves
    # =========================================================================

    def _accepts(self, move: Move) -> bool:
        return (
            self.state == TurnState.SYNC
            and move.kind == self.machine.pending_move_kind
        )

    def submit_move(self, move: Move) -> bool:
        """
        Append a local move. Only accepted during SYNC, and only a move
        of the kind that was being collected before the confirm.
        """
        if not self._accepts(move):
            logger.warning(
                "Session %s rejected %s move in state %s",
                self.session_id, move.kind.value, self.state.value,
            )
            return False
        return self.logs[self.local_side].append(move)

    def receive_or_generate_peer_move(self) -> Move:
        """Append exactly one move from the peer source to the remote log."""
        if self.peer is None:
            raise ValueError("Session has no peer move source")

        history = PeerHistory(
            own_log=self.logs[self.peer_side],
            own_shots=tuple(self.shots[self.peer_side]),
            config=self.config,
        )
        move = self.peer.produce_next_move(history)
        self.logs[self.peer_side].append(move)
        return move

    def update(self, move: Move) -> SyncResult:
        """
        Run one synchronization step. Does nothing unless in SYNC.

        The peer move is fetched before the local move is appended, so a
        failing transport leaves both logs untouched.
        """
        if self.state != TurnState.SYNC:
            return SyncResult.rejected(self.state, f"not in sync state ({self.state.value})")
        if not self._accepts(move):
            expected = self.machine.pending_move_kind
            return SyncResult.rejected(
                self.state,
                f"expected a {expected.value if expected else 'different'} move, got {move.kind.value}",
            )

        peer_move = self.receive_or_generate_peer_move()
        self.submit_move(move)
        self._resolve()

        if self._winner is None:
            self.machine.transition(TurnState.PROMPT)
        else:
            self.machine.transition(TurnState.GAME_OVER)

        return SyncResult(
            accepted=True,
            state=self.state,
            winner=self._winner,
            local_move=move,
            peer_move=peer_move,
            shots={side: list(shots) for side, shots in self.shots.items()},
        )

    def confirm(self, move: Move) -> SyncResult:
        """
        Confirm the move being collected and synchronize.

        Only valid from ACCELERATE or SHOOT with a move of that kind.
        """
        if move.kind != self.machine.pending_move_kind or self.state == TurnState.SYNC:
            return SyncResult.rejected(self.state, "no matching move is being collected")
        self.machine.transition(TurnState.SYNC)
        return self.update(move)

    # =========================================================================
    # Replay
    # =========================================================================

    def replay(self) -> dict[Side, ReplayResult]:
        """Replay both perspectives without touching session state."""
        return {
            Side.A: compute_shots(self.logs[Side.A], self.logs[Side.B], Side.A, self.config),
            Side.B: compute_shots(self.logs[Side.B], self.logs[Side.A], Side.B, self.config),
        }

    def _resolve(self):
        """Replay both perspectives and publish the results."""
        results = self.replay()

        for perspective, result in results.items():
            # Each perspective reconstructs the *other* side
            self.bodies[perspective.opponent] = result.opponent_body
            self.digests[perspective.opponent] = result.digest
            self.shots[perspective] = list(result.shots)

        if self._winner is None:
            for perspective in (Side.A, Side.B):
                if results[perspective].winner is not None:
                    self._winner = perspective
                    logger.info(
                        "Session %s won by side %s on turn %d",
                        self.session_id, perspective.name, self.turn,
                    )
                    break

    def verify_digest(self, side: Side, digest: str) -> bool:
        """
        Compare a trajectory digest computed elsewhere with ours.

        A mismatch means the two sides no longer agree on history.
        """
        local = self.digests.get(side)
        if local is None:
            local = compute_shots(
                self.logs[side.opponent], self.logs[side], side.opponent, self.config
            ).digest
        if local != digest:
            logger.warning(
                "Session %s trajectory digest mismatch for side %s: local=%s remote=%s",
                self.session_id, side.name, local, digest,
            )
            return False
        return True

    # =========================================================================
    # Views and export
    # =========================================================================

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            state=self.state,
            turn=self.turn,
            bodies={side: body.copy() for side, body in self.bodies.items()},
            shots={side: tuple(shots) for side, shots in self.shots.items()},
            winner=self._winner,
            digests=dict(self.digests),
            config=self.config,
        )

    def export(self) -> dict[str, Any]:
        """The match as {config, sides: {a: {seed, moves}, b: {...}}}."""
        return {
            "version": EXPORT_VERSION,
            "config": self.config.to_dict(),
            "sides": {side.value: log.to_dict() for side, log in self.logs.items()},
            "winner": self._winner.value if self._winner else None,
        }

    @classmethod
    def from_export(
        cls,
        data: dict[str, Any],
        peer: PeerMoveSource | None = None,
    ) -> GameSession:
        """
        Rebuild a session by replaying exported logs.

        The recorded winner is ignored; it is recomputed.
        """
        config = ArenaConfig.from_dict(data.get("config"))
        sides = data["sides"]
        logs = {side: MoveLog.from_dict(sides[side.value]) for side in Side}

        session = cls(logs[Side.A].seed, logs[Side.B].seed, peer=peer, config=config)
        session.logs = logs
        if any(len(log) > 1 for log in logs.values()):
            session._resolve()
        if session._winner is not None:
            session.machine.transition(TurnState.GAME_OVER)
        return session

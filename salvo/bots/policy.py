"""
Peer Move Sources - Where the remote side's moves come from.

A PeerMoveSource takes the peer's own history and returns its next move.
The session does not care whether that move was produced locally by a
policy or received over a transport, so swapping one for the other
needs no change to the core.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, TYPE_CHECKING

from ..config import ArenaConfig, DEFAULT_CONFIG
from ..engine_core.errors import PeerExhaustedError
from ..engine_core.move import Move
from ..engine_core.rng import SeededRandom

if TYPE_CHECKING:
    from ..engine_core.move_log import MoveLog
    from ..engine_core.replay import Shot


@dataclass(frozen=True)
class PeerHistory:
    """
    Read-only view of the peer's side of the match.

    Contains:
    - The peer's own move log
    - The peer's shots as resolved at the last synchronization
    - The arena config
    """
    own_log: MoveLog
    own_shots: tuple[Shot, ...] = field(default_factory=tuple)
    config: ArenaConfig = DEFAULT_CONFIG

    @property
    def last_shot(self) -> Shot | None:
        return self.own_shots[-1] if self.own_shots else None


class PeerMoveSource(ABC):
    """
    Abstract source of remote moves.

    Implementations range from local policies to a network client
    that blocks until the real peer's move arrives.
    """

    @abstractmethod
    def produce_next_move(self, history: PeerHistory) -> Move:
        """
        Produce the peer's next move.

        Args:
            history: The peer's own log and resolved shots

        Returns:
            An ACCELERATE or SHOOT move
        """
        pass

    def get_name(self) -> str:
        """Get the source's name/identifier."""
        return self.__class__.__name__


class PseudoOpponentPolicy(PeerMoveSource):
    """
    Local stand-in for a remote player.

    Each turn it flips between thrusting toward a random vector and
    firing. A shot is aimed at a random point on the impact circle of
    its previous shot, or anywhere in the arena for its first shot.
    """

    def __init__(self, seed: int):
        self.seed = seed
        self.rng = SeededRandom(seed)

    def produce_next_move(self, history: PeerHistory) -> Move:
        config = history.config
        rng = self.rng

        if rng.next_int(0, 2):
            return Move.accelerate(
                rng.next_int(-config.width, config.width),
                rng.next_int(-config.height, config.height),
            )

        last_shot = history.last_shot
        if last_shot is not None:
            target = last_shot.random_point_in_bounds(rng, config)
            return Move.shoot(target.x, target.y)

        return Move.shoot(
            rng.next_int(0, config.width),
            rng.next_int(0, config.height),
        )


class ScriptedPeer(PeerMoveSource):
    """
    Replays a fixed sequence of moves in order.

    Used for:
    - Deterministic testing
    - Feeding a log received from a real peer
    """

    def __init__(self, moves: Iterable[Move] = ()):
        self._moves = list(moves)
        self._cursor = 0

    def push(self, move: Move):
        """Queue a move received from the transport."""
        self._moves.append(move)

    @property
    def remaining(self) -> int:
        return len(self._moves) - self._cursor

    def produce_next_move(self, history: PeerHistory) -> Move:
        if self._cursor >= len(self._moves):
            raise PeerExhaustedError("Scripted peer has no more moves")
        move = self._moves[self._cursor]
        self._cursor += 1
        return move

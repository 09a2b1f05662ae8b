"""
Replay - Reconstruct a trajectory from a seed and a move log, then
resolve shots against it.

Neither side ever receives the other's position. Each side rebuilds
the opponent's full trajectory from the opponent's INIT seed and move
log, and judges its own shots against the position the opponent held
at the same log index. Both sides run exactly the same arithmetic in
exactly the same order, so they agree on every hit.

The whole pass is recomputed on every synchronization; the result is a
pure function of the two logs and the arena config.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence
import hashlib
import logging
import math
import struct

from ..config import ArenaConfig, DEFAULT_CONFIG
from .body import Body, Side
from .move import MoveKind
from .move_log import MoveLog
from .rng import SeededRandom
from .vector import Vector2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Shot:
    """
    A resolved shot. Derived on replay, never logged.

    impact_radius is the distance from the fired-at point to the
    opponent's reconstructed position at the moment of firing.
    """
    center: Vector2
    impact_radius: float
    move_index: int = 0

    def is_hit(self, threshold: float = DEFAULT_CONFIG.hit_threshold) -> bool:
        return self.impact_radius <= threshold

    def random_point(self, rng: SeededRandom) -> Vector2:
        """A point on this shot's impact circle at a random angle."""
        angle = rng.next() * math.pi * 2
        return Vector2(
            self.center.x + math.cos(angle) * self.impact_radius,
            self.center.y + math.sin(angle) * self.impact_radius,
        )

    def random_point_in_bounds(
        self,
        rng: SeededRandom,
        config: ArenaConfig = DEFAULT_CONFIG,
    ) -> Vector2:
        """Like random_point, clamped to the arena rectangle."""
        point = self.random_point(rng)
        return Vector2(
            max(0, min(point.x, config.width)),
            max(0, min(point.y, config.height)),
        )

    def to_dict(self) -> dict:
        return {
            "center": self.center.as_dict(),
            "impact_radius": self.impact_radius,
            "move_index": self.move_index,
        }


@dataclass
class ReplayResult:
    """
    Output of one perspective's replay.

    - shots: own shots in log order, each resolved against the opponent
    - positions: opponent positions, index-aligned with the opponent log
    - opponent_body: final reconstructed opponent body
    - winner: the perspective if any shot hit, else None
    - digest: hash of positions, for cross-side consistency checks
    """
    perspective: Side
    shots: list[Shot] = field(default_factory=list)
    positions: list[Vector2] = field(default_factory=list)
    opponent_body: Body | None = None
    winner: Side | None = None
    digest: str = ""

    @property
    def hit(self) -> bool:
        return self.winner is not None


def trajectory_digest(positions: Sequence[Vector2]) -> str:
    """
    SHA-256 over the big-endian IEEE-754 doubles of every position.

    Two sides that replayed the same logs produce the same digest;
    any divergence in float arithmetic changes it.
    """
    hasher = hashlib.sha256()
    for p in positions:
        hasher.update(struct.pack(">dd", p.x, p.y))
    return hasher.hexdigest()


def reconstruct_trajectory(
    log: MoveLog,
    side: Side,
    config: ArenaConfig = DEFAULT_CONFIG,
) -> tuple[list[Vector2], Body]:
    """
    Replay a side's log from its seed.

    Returns (positions, final_body) where positions[i] is the body's
    position after log[i] was applied.
    """
    rng = SeededRandom(log.seed)
    body: Body | None = None
    positions: list[Vector2] = []

    for move in log:
        if move.kind == MoveKind.INIT:
            body = Body.spawn(rng, side, config)
        elif move.kind == MoveKind.SHOOT:
            # Firing costs a step with no thrust
            body.update(Vector2(), config)
        elif move.kind == MoveKind.ACCELERATE:
            body.update(move.as_vector(), config)
        positions.append(body.position)

    return positions, body


def compute_shots(
    own_log: MoveLog,
    opponent_log: MoveLog,
    perspective: Side,
    config: ArenaConfig = DEFAULT_CONFIG,
) -> ReplayResult:
    """
    Resolve every shot in own_log against the opponent's trajectory.

    Steps:
    1. Reconstruct the opponent from its own seed and log
    2. For each SHOOT at index i, measure the distance from the target
       to the opponent's position i
    3. The first shot within hit_threshold makes `perspective` the winner
    """
    positions, opponent_body = reconstruct_trajectory(
        opponent_log, perspective.opponent, config
    )

    result = ReplayResult(
        perspective=perspective,
        positions=positions,
        opponent_body=opponent_body.copy(),
        digest=trajectory_digest(positions),
    )

    for i, move in enumerate(own_log):
        if move.kind != MoveKind.SHOOT:
            continue
        if i >= len(positions):
            logger.debug(
                "Shot %d by %s has no aligned opponent position yet", i, perspective.name
            )
            continue

        target = move.as_vector()
        shot = Shot(
            center=target,
            impact_radius=target.distance_to(positions[i]),
            move_index=i,
        )
        result.shots.append(shot)

        if result.winner is None and shot.is_hit(config.hit_threshold):
            result.winner = perspective
            logger.debug(
                "Shot %d by %s hit at radius %.4f", i, perspective.name, shot.impact_radius
            )

    return result

"""
Body - A side's circular body and its bounded kinematic integrator.

The integrator is the one piece of arithmetic both sides must evaluate
identically, so it is kept to plain float operations in a fixed order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import ArenaConfig, DEFAULT_CONFIG
from .rng import SeededRandom
from .vector import Vector2


class Side(Enum):
    """The two sides of a duel."""
    A = "a"
    B = "b"

    @property
    def opponent(self) -> Side:
        return Side.B if self is Side.A else Side.A


@dataclass
class Body:
    """
    Position/velocity state for one side.

    After every update the body lies fully inside the arena:
    radius <= x <= width - radius, radius <= y <= height - radius.
    """
    position: Vector2
    velocity: Vector2 = field(default_factory=Vector2)
    radius: float = DEFAULT_CONFIG.body_radius
    side: Side = Side.A

    @classmethod
    def spawn(
        cls,
        rng: SeededRandom,
        side: Side,
        config: ArenaConfig = DEFAULT_CONFIG,
    ) -> Body:
        """
        Create a body from four RNG draws: x, y, vx, vy (in that order).

        Replay must reproduce this draw order exactly.
        """
        margin = config.spawn_margin
        x = rng.next_int(margin, config.width - margin)
        y = rng.next_int(margin, config.height - margin)
        vx = rng.next_int(0, config.max_vel + 1)
        vy = rng.next_int(0, config.max_vel + 1)
        return cls(
            position=Vector2(x, y),
            velocity=Vector2(vx, vy),
            radius=config.body_radius,
            side=side,
        )

    def update(self, acceleration: Vector2, config: ArenaConfig = DEFAULT_CONFIG) -> Body:
        """
        Advance one unit time step.

        The thrust direction is free but its magnitude is always max_acc
        (a zero input stays zero). Walls stop the body inelastically.
        """
        acc = acceleration.normalized().scaled(config.max_acc)

        self.position = self.position + self.velocity + acc * 0.5
        self.velocity = self.velocity + acc

        r = self.radius
        if self.position.x + r >= config.width:
            self.position = self.position.with_x(config.width - r)
            self.velocity = self.velocity.with_x(0.0)

        if self.position.x - r <= 0:
            self.position = self.position.with_x(r)
            self.velocity = self.velocity.with_x(0.0)

        if self.position.y + r >= config.height:
            self.position = self.position.with_y(config.height - r)
            self.velocity = self.velocity.with_y(0.0)

        if self.position.y - r <= 0:
            self.position = self.position.with_y(r)
            self.velocity = self.velocity.with_y(0.0)

        return self

    def copy(self) -> Body:
        return Body(
            position=self.position,
            velocity=self.velocity,
            radius=self.radius,
            side=self.side,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "side": self.side.value,
            "position": self.position.as_dict(),
            "velocity": self.velocity.as_dict(),
            "radius": self.radius,
        }

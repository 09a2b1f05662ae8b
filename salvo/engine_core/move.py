"""
Moves - The discrete, logged inputs of a duel.

A move is the only thing a side ever transmits. Moves are immutable
once created and are replayed in log order to rebuild a trajectory.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
import math

from .errors import InvalidMoveError
from .vector import Vector2


class MoveKind(Enum):
    """Kinds of moves in a log."""
    INIT = "init"
    ACCELERATE = "accelerate"
    SHOOT = "shoot"


# Payload keys each kind requires
PAYLOAD_FIELDS: dict[MoveKind, tuple[str, ...]] = {
    MoveKind.INIT: ("seed",),
    MoveKind.ACCELERATE: ("dx", "dy"),
    MoveKind.SHOOT: ("x", "y"),
}


def _freeze(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(payload))


@dataclass(frozen=True)
class Move:
    """
    A single logged move.

    Payload shapes:
    - INIT: {seed}
    - ACCELERATE: {dx, dy} desired thrust, before normalization
    - SHOOT: {x, y} absolute target point in arena coordinates
    """
    kind: MoveKind
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "payload", _freeze(self.payload))

    def __eq__(self, other):
        if not isinstance(other, Move):
            return NotImplemented
        return self.kind == other.kind and dict(self.payload) == dict(other.payload)

    def __hash__(self):
        return hash((self.kind, tuple(sorted(self.payload.items()))))

    @classmethod
    def init(cls, seed: int) -> Move:
        """Factory for the seeding move that opens every log."""
        return cls(kind=MoveKind.INIT, payload={"seed": int(seed)})

    @classmethod
    def accelerate(cls, dx: float, dy: float) -> Move:
        """Factory for a thrust move."""
        return cls(kind=MoveKind.ACCELERATE, payload={"dx": dx, "dy": dy})

    @classmethod
    def shoot(cls, x: float, y: float) -> Move:
        """Factory for a shot at an absolute arena point."""
        return cls(kind=MoveKind.SHOOT, payload={"x": x, "y": y})

    @property
    def seed(self) -> int | None:
        return self.payload.get("seed") if self.kind == MoveKind.INIT else None

    def as_vector(self) -> Vector2:
        """Thrust for ACCELERATE, target for SHOOT, zero for INIT."""
        if self.kind == MoveKind.ACCELERATE:
            return Vector2(self.payload["dx"], self.payload["dy"])
        if self.kind == MoveKind.SHOOT:
            return Vector2(self.payload["x"], self.payload["y"])
        return Vector2()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "payload": dict(self.payload)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Move:
        """
        Decode a move from untrusted data.

        Raises InvalidMoveError if the kind is unknown, the payload
        is missing a field its kind requires, or a coordinate is not
        a finite number.
        """
        try:
            kind = MoveKind(data["kind"])
        except (KeyError, ValueError, TypeError):
            raise InvalidMoveError(f"Unknown move kind: {data.get('kind')!r}")

        payload = data.get("payload") or {}
        missing = [k for k in PAYLOAD_FIELDS[kind] if k not in payload]
        if missing:
            raise InvalidMoveError(
                f"{kind.value} move is missing payload field(s): {', '.join(missing)}"
            )

        try:
            if kind == MoveKind.INIT:
                return cls.init(int(payload["seed"]))
            a, b = (float(payload[k]) for k in PAYLOAD_FIELDS[kind])
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidMoveError(f"Malformed {kind.value} payload: {e}")

        if not (math.isfinite(a) and math.isfinite(b)):
            raise InvalidMoveError(f"{kind.value} payload must be finite, got ({a}, {b})")
        if kind == MoveKind.ACCELERATE:
            return cls.accelerate(a, b)
        return cls.shoot(a, b)

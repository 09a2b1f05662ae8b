"""
Vector2 - Immutable 2D vector value.

All operations return a new vector, so a position handed to a caller
can never be mutated behind the body's back.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import math


@dataclass(frozen=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalized(self) -> Vector2:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length == 0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / length, self.y / length)

    def scaled(self, scalar: float) -> Vector2:
        return self * scalar

    def distance_to(self, other: Vector2) -> float:
        return (self - other).length()

    def with_x(self, x: float) -> Vector2:
        return Vector2(x, self.y)

    def with_y(self, y: float) -> Vector2:
        return Vector2(self.x, y)

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vector2:
        return cls(float(data["x"]), float(data["y"]))

"""
Seeded Random - Reproducible 32-bit linear congruential generator.

Every random value that affects the simulation comes from here.
Two generators built from the same seed produce the same infinite
sequence, so call order across a replay must match exactly.
"""

from __future__ import annotations
import math
import secrets

MODULUS = 2 ** 32
MULTIPLIER = 1664525
INCREMENT = 1013904223


def generate_seed() -> int:
    """Draw a fresh 32-bit session seed from a non-deterministic source."""
    return secrets.randbits(32)


class SeededRandom:
    """
    LCG: state' = (a * state + c) mod 2**32.

    Only next() steps the state; next_int() is built on it.
    """

    def __init__(self, seed: int):
        self.seed = seed % MODULUS
        self._state = self.seed

    def next(self) -> float:
        """Advance the state and return it scaled to [0, 1)."""
        self._state = (MULTIPLIER * self._state + INCREMENT) % MODULUS
        return self._state / MODULUS

    def next_int(self, low: int, high: int) -> int:
        """Return an integer in [low, high)."""
        return math.floor(self.next() * (high - low)) + low

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed})"

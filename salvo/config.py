"""
Arena configuration.

Both sides of a match must replay with the same constants, so the config
travels with the session (and with exported match files).
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, fields
from typing import Any
import math
import os


@dataclass(frozen=True)
class ArenaConfig:
    """Fixed constants for the arena and the kinematics."""
    width: int = 800
    height: int = 600
    max_acc: float = 25
    max_vel: int = 50
    body_radius: float = 10
    hit_threshold: float = 10
    spawn_margin: int = 10

    @classmethod
    def from_env(cls) -> ArenaConfig:
        """Build a config, overriding dimensions and limits from the environment."""
        defaults = cls()
        return cls(
            width=int(os.getenv("SALVO_ARENA_WIDTH", defaults.width)),
            height=int(os.getenv("SALVO_ARENA_HEIGHT", defaults.height)),
            max_acc=float(os.getenv("SALVO_MAX_ACC", defaults.max_acc)),
            max_vel=int(os.getenv("SALVO_MAX_VEL", defaults.max_vel)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ArenaConfig:
        """
        Decode a config from untrusted data.

        Unknown keys are ignored and missing keys take their defaults.
        Raises InvalidConfigError if a value has the wrong type, is not
        finite, or leaves no room to spawn a body.
        """
        from .engine_core.errors import InvalidConfigError

        if not data:
            return cls()

        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            convert = int if f.type == "int" else float
            if isinstance(raw, bool):
                raise InvalidConfigError(f"{f.name} must be a number, got {raw!r}")
            try:
                value = convert(raw)
            except (TypeError, ValueError, OverflowError):
                raise InvalidConfigError(f"{f.name} must be a number, got {raw!r}")
            if not math.isfinite(value) or value < 0:
                raise InvalidConfigError(f"{f.name} must be finite and non-negative, got {raw!r}")
            values[f.name] = value

        config = cls(**values)
        if config.width <= 2 * config.spawn_margin or config.height <= 2 * config.spawn_margin:
            raise InvalidConfigError(
                f"Arena {config.width}x{config.height} leaves no room inside "
                f"a spawn margin of {config.spawn_margin}"
            )
        return config


DEFAULT_CONFIG = ArenaConfig()

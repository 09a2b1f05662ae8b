"""
Move Log - Append-only ordered record of one side's moves.

Index order is replay order. A log opens with exactly one INIT move
carrying the side's seed, and nothing is ever reordered or removed.
"""

from __future__ import annotations
from typing import Any, Iterator

from .errors import InvalidMoveError
from .move import Move, MoveKind


class MoveLog:
    """
    Usage:
        log = MoveLog.start(seed)
        log.append(Move.shoot(120, 80))
        for move in log: ...
    """

    def __init__(self, init_move: Move):
        if init_move.kind != MoveKind.INIT:
            raise InvalidMoveError("A move log must open with an init move")
        self._moves: list[Move] = [init_move]

    @classmethod
    def start(cls, seed: int) -> MoveLog:
        return cls(Move.init(seed))

    @property
    def seed(self) -> int:
        return self._moves[0].seed

    @property
    def moves(self) -> tuple[Move, ...]:
        """Snapshot of the log; callers cannot mutate it."""
        return tuple(self._moves)

    def append(self, move: Move) -> bool:
        """Append a move. A second INIT is rejected (returns False)."""
        if move.kind == MoveKind.INIT:
            return False
        self._moves.append(move)
        return True

    def last(self, kind: MoveKind | None = None) -> Move | None:
        """Most recent move, optionally of a given kind."""
        for move in reversed(self._moves):
            if kind is None or move.kind == kind:
                return move
        return None

    def count(self, kind: MoveKind) -> int:
        return sum(1 for m in self._moves if m.kind == kind)

    def __len__(self) -> int:
        return len(self._moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(tuple(self._moves))

    def __getitem__(self, index: int) -> Move:
        return self._moves[index]

    def __eq__(self, other):
        if not isinstance(other, MoveLog):
            return NotImplemented
        return self._moves == other._moves

    def __repr__(self) -> str:
        return f"MoveLog(seed={self.seed}, moves={len(self._moves)})"

    def to_dict(self) -> dict[str, Any]:
        """The minimal serializable unit: {seed, moves}."""
        return {
            "seed": self.seed,
            "moves": [m.to_dict() for m in self._moves[1:]],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MoveLog:
        """
        Rebuild a log from {seed, moves}.

        The INIT move may be included in `moves` or implied by `seed`.
        """
        if "seed" not in data:
            raise InvalidMoveError("Side record is missing its seed")
        log = cls.start(int(data["seed"]))
        for raw in data.get("moves", []):
            move = Move.from_dict(raw)
            if move.kind == MoveKind.INIT:
                if move.seed != log.seed:
                    raise InvalidMoveError("Init move seed does not match side seed")
                continue
            log.append(move)
        return log

"""
Boundary errors.

The deterministic core never raises for protocol violations; a move
submitted in the wrong state or a disallowed transition is a no-op.
These exceptions are only raised when decoding untrusted input
(API payloads, match files) or when a peer source runs dry.
"""


class SalvoError(Exception):
    """Base class for all Salvo errors."""


class InvalidMoveError(SalvoError):
    """A move payload does not match the shape its kind requires."""


class PeerExhaustedError(SalvoError):
    """A peer move source has no more moves to supply."""


class InvalidConfigError(SalvoError):
    """An arena config has a field of the wrong type or out of range."""

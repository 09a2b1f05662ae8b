"""
Session Module - Orchestrates duels.

A session represents one duel:
- Created from two bootstrap seeds
- Holds both move logs, both bodies and the turn state machine
- Replays both perspectives on every synchronization
- Frozen once a side hits

Sessions are in-memory only.
"""

from .game_session import GameSession, SyncResult, SessionSnapshot
from .manager import SessionManager

__all__ = [
    "GameSession",
    "SyncResult",
    "SessionSnapshot",
    "SessionManager",
]

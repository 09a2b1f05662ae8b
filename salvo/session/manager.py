"""
Session Manager - Creates and tracks duel sessions.

LIFECYCLE:
1. Bootstrap: two 32-bit seeds (supplied, or drawn from a
   non-deterministic source)
2. Session created in memory with a peer move source
3. Turns are played until one side hits
4. Session ended -> removed from memory

PERSISTENCE RULES:
- Sessions are in-memory only
- A match can be exported as {seed, moves} per side and replayed,
  which is the only durable form it has
"""

from __future__ import annotations
import logging
import time

from ..config import ArenaConfig, DEFAULT_CONFIG
from ..bots import PeerMoveSource, PseudoOpponentPolicy
from ..engine_core.rng import generate_seed
from .game_session import GameSession

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Manages duel sessions.

    Responsibilities:
    - Create sessions with bootstrap seeds
    - Track active sessions
    - Clean up finished and stale sessions
    """

    def __init__(self, config: ArenaConfig = DEFAULT_CONFIG):
        self.config = config
        self._sessions: dict[str, GameSession] = {}

    def create_session(
        self,
        seed_a: int | None = None,
        seed_b: int | None = None,
        peer_seed: int | None = None,
        peer: PeerMoveSource | None = None,
        config: ArenaConfig | None = None,
    ) -> GameSession:
        """
        Create a new session.

        Args:
            seed_a: Local side seed (generated if omitted)
            seed_b: Peer side seed (generated if omitted)
            peer_seed: Seed for the default pseudo-opponent
            peer: Explicit peer move source; overrides peer_seed
            config: Arena config (manager default if omitted)

        Returns:
            New GameSession in PROMPT state
        """
        if peer is None:
            peer = PseudoOpponentPolicy(peer_seed if peer_seed is not None else generate_seed())

        session = GameSession.create(
            seed_a if seed_a is not None else generate_seed(),
            seed_b if seed_b is not None else generate_seed(),
            peer=peer,
            config=config or self.config,
        )
        self._sessions[session.session_id] = session
        return session

    def add_session(self, session: GameSession) -> GameSession:
        """Register an externally built session (e.g. from an export)."""
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """End a session and drop it from memory."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions that are still being played."""
        return [
            sid for sid, session in self._sessions.items()
            if not session.is_over
        ]

    def list_sessions(self) -> list[str]:
        return list(self._sessions.keys())

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop finished sessions older than max_age.

        Returns the number removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and session.is_over
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)

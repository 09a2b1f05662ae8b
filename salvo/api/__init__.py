"""
API Module - HTTP interface to duel sessions.

Clients:
1. Create a session (optionally with fixed seeds)
2. Request transitions and confirm moves
3. Read snapshots for rendering
4. Export logs and compare trajectory digests

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    TransitionRequest,
    MoveRequest,
    DigestCheckRequest,
    ImportMatchRequest,
    # Responses
    SessionResponse,
    SnapshotResponse,
    SyncResponse,
    TransitionResponse,
    MatchLogResponse,
    DigestCheckResponse,
    ErrorResponse,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "TransitionRequest",
    "MoveRequest",
    "DigestCheckRequest",
    "ImportMatchRequest",
    # Responses
    "SessionResponse",
    "SnapshotResponse",
    "SyncResponse",
    "TransitionResponse",
    "MatchLogResponse",
    "DigestCheckResponse",
    "ErrorResponse",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]

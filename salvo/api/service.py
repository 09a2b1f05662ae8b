"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Translates requests into session calls
2. Manages sessions through the SessionManager
3. Converts engine types into response schemas
4. Turns boundary errors into ErrorResponse models

This layer is framework-agnostic (usable from FastAPI, a CLI, or tests).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Union
import logging

from .. import __version__
from ..engine_core.body import Body, Side
from ..engine_core.errors import InvalidConfigError, InvalidMoveError, PeerExhaustedError
from ..engine_core.move import Move
from ..engine_core.replay import Shot
from ..engine_core.state_machine import TurnState
from ..session import GameSession, SessionManager, SyncResult
from .schemas import (
    ArenaInfo,
    BodyInfo,
    CreateSessionRequest,
    DigestCheckRequest,
    DigestCheckResponse,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    ImportMatchRequest,
    MatchLogResponse,
    MoveModel,
    MoveRequest,
    SessionListResponse,
    SessionResponse,
    ShotInfo,
    SnapshotResponse,
    SyncResponse,
    TransitionRequest,
    TransitionResponse,
    VectorInfo,
)

logger = logging.getLogger(__name__)


def _error(code: ErrorCode, message: str, **details: Any) -> ErrorResponse:
    return ErrorResponse(error=message, error_code=code, details=details or None)


def _not_found(session_id: str) -> ErrorResponse:
    return _error(ErrorCode.SESSION_NOT_FOUND, f"Session not found: {session_id}")


def _body_info(body: Body) -> BodyInfo:
    return BodyInfo(
        side=body.side.value,
        position=VectorInfo(**body.position.as_dict()),
        velocity=VectorInfo(**body.velocity.as_dict()),
        radius=body.radius,
    )


def _shot_info(shot: Shot, threshold: float) -> ShotInfo:
    return ShotInfo(
        center=VectorInfo(**shot.center.as_dict()),
        impact_radius=shot.impact_radius,
        move_index=shot.move_index,
        hit=shot.is_hit(threshold),
    )


def _move_model(move: Move | None) -> MoveModel | None:
    if move is None:
        return None
    return MoveModel(**move.to_dict())


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()
        session = service.create_session(CreateSessionRequest(seed_a=1, seed_b=2))
        service.transition(session.session_id, TransitionRequest(action="shoot"))
        result = service.submit_move(session.session_id, MoveRequest(kind="shoot", payload={"x": 1, "y": 2}))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        session = self.session_manager.create_session(
            seed_a=request.seed_a,
            seed_b=request.seed_b,
            peer_seed=request.peer_seed,
        )
        return self._session_response(session)

    def import_match(self, request: ImportMatchRequest) -> Union[SessionResponse, ErrorResponse]:
        """Rebuild a session by replaying an exported match."""
        data = {
            "config": request.config.model_dump() if request.config else None,
            "sides": {
                side.value: record.model_dump(mode="json")
                for side, record in request.sides.items()
            },
        }
        if set(data["sides"]) != {s.value for s in Side}:
            return _error(ErrorCode.VALIDATION_ERROR, "An import needs both sides a and b")

        try:
            session = GameSession.from_export(data)
        except InvalidConfigError as e:
            return _error(ErrorCode.VALIDATION_ERROR, str(e))
        except InvalidMoveError as e:
            return _error(ErrorCode.INVALID_MOVE, str(e))

        self.session_manager.add_session(session)
        return self._session_response(session)

    def get_session(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return _not_found(session_id)
        return self._session_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> EndSessionResponse:
        success = self.session_manager.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    def list_sessions(self) -> SessionListResponse:
        sessions = self.session_manager.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    def health(self) -> HealthResponse:
        return HealthResponse(
            version=__version__,
            active_sessions=len(self.session_manager.list_active_sessions()),
        )

    # =========================================================================
    # Turn flow
    # =========================================================================

    def transition(
        self, session_id: str, request: TransitionRequest
    ) -> Union[TransitionResponse, ErrorResponse]:
        """
        Request a state transition.

        A disallowed transition is not an error: it comes back with
        changed=False and the unchanged state.
        """
        session = self.session_manager.get_session(session_id)
        if session is None:
            return _not_found(session_id)

        changed = session.transition(request.action)
        return TransitionResponse(
            session_id=session_id,
            changed=changed,
            state=session.state.value,
            allowed_actions=self._allowed(session),
        )

    def submit_move(
        self, session_id: str, request: MoveRequest
    ) -> Union[SyncResponse, ErrorResponse]:
        """
        Confirm a move and synchronize.

        Works both from ACCELERATE/SHOOT (confirm) and from SYNC
        (the transition to sync was already requested).
        """
        session = self.session_manager.get_session(session_id)
        if session is None:
            return _not_found(session_id)
        if session.is_over:
            return _error(
                ErrorCode.GAME_OVER,
                "Session is over",
                winner=session.winner.value if session.winner else None,
            )

        try:
            move = Move.from_dict(request.model_dump(mode="json"))
        except InvalidMoveError as e:
            return _error(ErrorCode.INVALID_MOVE, str(e))

        try:
            if session.state == TurnState.SYNC:
                result = session.update(move)
            else:
                result = session.confirm(move)
        except PeerExhaustedError as e:
            logger.warning("Session %s peer unavailable: %s", session_id, e)
            return _error(ErrorCode.PEER_UNAVAILABLE, str(e))

        if not result.accepted:
            return _error(
                ErrorCode.MOVE_REJECTED,
                result.reason or "Move not allowed now",
                state=session.state.value,
            )
        return self._sync_response(session, result)

    # =========================================================================
    # Views
    # =========================================================================

    def get_snapshot(self, session_id: str) -> Union[SnapshotResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return _not_found(session_id)

        snapshot = session.snapshot()
        threshold = snapshot.config.hit_threshold
        return SnapshotResponse(
            session_id=snapshot.session_id,
            state=snapshot.state.value,
            turn=snapshot.turn,
            bodies={side.value: _body_info(body) for side, body in snapshot.bodies.items()},
            shots={
                side.value: [_shot_info(s, threshold) for s in shots]
                for side, shots in snapshot.shots.items()
            },
            winner=snapshot.winner.value if snapshot.winner else None,
            digests={side.value: d for side, d in snapshot.digests.items()},
            arena=ArenaInfo(
                width=snapshot.config.width,
                height=snapshot.config.height,
                max_acc=snapshot.config.max_acc,
                max_vel=snapshot.config.max_vel,
                body_radius=snapshot.config.body_radius,
                hit_threshold=snapshot.config.hit_threshold,
            ),
        )

    def export_log(self, session_id: str) -> Union[MatchLogResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return _not_found(session_id)

        data = session.export()
        return MatchLogResponse(session_id=session_id, **data)

    def check_digest(
        self, session_id: str, request: DigestCheckRequest
    ) -> Union[DigestCheckResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if session is None:
            return _not_found(session_id)

        side = Side(request.side.value)
        consistent = session.verify_digest(side, request.digest)
        return DigestCheckResponse(
            session_id=session_id,
            side=request.side,
            consistent=consistent,
            local_digest=session.digests.get(side),
        )

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _allowed(self, session: GameSession) -> list[str]:
        return sorted(s.value for s in session.machine.allowed_actions())

    def _session_response(self, session: GameSession) -> SessionResponse:
        pending = session.machine.pending_move_kind
        return SessionResponse(
            session_id=session.session_id,
            state=session.state.value,
            turn=session.turn,
            allowed_actions=self._allowed(session),
            pending_move_kind=pending.value if pending else None,
            winner=session.winner.value if session.winner else None,
            seeds={side.value: session.seed(side) for side in Side},
            created_at=session.created_at,
        )

    def _sync_response(self, session: GameSession, result: SyncResult) -> SyncResponse:
        threshold = session.config.hit_threshold
        return SyncResponse(
            session_id=session.session_id,
            accepted=result.accepted,
            state=result.state.value,
            turn=session.turn,
            local_move=_move_model(result.local_move),
            peer_move=_move_model(result.peer_move),
            shots={
                side.value: [_shot_info(s, threshold) for s in shots]
                for side, shots in result.shots.items()
            },
            winner=result.winner.value if result.winner else None,
            reason=result.reason,
        )

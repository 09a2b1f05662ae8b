"""
FastAPI Application - REST API for renderers, input controllers and peers.

Endpoints:
    POST   /api/v1/sessions                     Create a duel session
    POST   /api/v1/sessions/import              Rebuild a session from an exported match
    GET    /api/v1/sessions                     List sessions
    GET    /api/v1/sessions/{id}                Get session status
    DELETE /api/v1/sessions/{id}                End session
    POST   /api/v1/sessions/{id}/transition     Request a turn state transition
    POST   /api/v1/sessions/{id}/moves          Confirm a move and synchronize
    GET    /api/v1/sessions/{id}/snapshot       Read-only snapshot for rendering
    GET    /api/v1/sessions/{id}/log            Export {seed, moves} per side
    POST   /api/v1/sessions/{id}/digest         Compare a peer's trajectory digest
    GET    /api/v1/health                       Health check

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import logging
import os

# Environment configuration
SALVO_ENV = os.getenv("SALVO_ENV", "development")
SALVO_LOG_LEVEL = os.getenv("SALVO_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)

# HTTP status per error code
ERROR_STATUS = {
    "SESSION_NOT_FOUND": 404,
    "INVALID_MOVE": 400,
    "VALIDATION_ERROR": 400,
    "MOVE_REJECTED": 409,
    "GAME_OVER": 409,
    "PEER_UNAVAILABLE": 503,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    logging.basicConfig(
        level=getattr(logging, SALVO_LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from .. import __version__
    from ..config import ArenaConfig
    from ..session import SessionManager
    from .service import APIService
    from .schemas import (
        CreateSessionRequest,
        DigestCheckRequest,
        DigestCheckResponse,
        EndSessionResponse,
        ErrorResponse,
        HealthResponse,
        ImportMatchRequest,
        MatchLogResponse,
        MoveRequest,
        SessionListResponse,
        SessionResponse,
        SnapshotResponse,
        SyncResponse,
        TransitionRequest,
        TransitionResponse,
    )

    app = FastAPI(
        title="Salvo Engine API",
        description="""
Deterministic lockstep artillery duel.

## Turn Flow

1. `POST /transition` with `shoot` or `accelerate`
2. `POST /moves` with the confirmed move
3. The peer's move is appended, both perspectives are replayed,
   and the response carries the resolved shots and any winner

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_MOVE` | Move payload does not match its kind |
| `MOVE_REJECTED` | Move not allowed in the current state |
| `GAME_OVER` | Session already has a winner |
| `PEER_UNAVAILABLE` | Peer could not supply a move |
| `VALIDATION_ERROR` | Imported match or arena config is malformed |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        session_manager=SessionManager(config=ArenaConfig.from_env())
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Render an ErrorResponse with the status its code maps to."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code.value, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new duel session",
    )
    async def create_session(request: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """Create a session. Omitted seeds are drawn from a non-deterministic source."""
        return api_service.create_session(request or CreateSessionRequest())

    @app.post(
        "/api/v1/sessions/import",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Rebuild a session from an exported match",
    )
    async def import_match(request: ImportMatchRequest) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.import_match(request))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        return api_service.list_sessions()

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndSessionResponse:
        return api_service.end_session(session_id, reason)

    # =========================================================================
    # Turn Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/transition",
        response_model=TransitionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Turn"],
        summary="Request a turn state transition",
    )
    async def transition(
        session_id: str, request: TransitionRequest
    ) -> Union[TransitionResponse, JSONResponse]:
        """Disallowed transitions are ignored and reported with `changed=false`."""
        return respond(api_service.transition(session_id, request))

    @app.post(
        "/api/v1/sessions/{session_id}/moves",
        response_model=SyncResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Malformed move"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Move not allowed now"},
        },
        tags=["Turn"],
        summary="Confirm a move and synchronize",
    )
    async def submit_move(
        session_id: str, request: MoveRequest
    ) -> Union[SyncResponse, JSONResponse]:
        return respond(api_service.submit_move(session_id, request))

    # =========================================================================
    # View Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/snapshot",
        response_model=SnapshotResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Views"],
        summary="Snapshot of bodies, shots and winner",
    )
    async def get_snapshot(session_id: str) -> Union[SnapshotResponse, JSONResponse]:
        return respond(api_service.get_snapshot(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/log",
        response_model=MatchLogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Views"],
        summary="Export both move logs",
    )
    async def export_log(session_id: str) -> Union[MatchLogResponse, JSONResponse]:
        return respond(api_service.export_log(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/digest",
        response_model=DigestCheckResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Views"],
        summary="Compare a trajectory digest from the other side",
    )
    async def check_digest(
        session_id: str, request: DigestCheckRequest
    ) -> Union[DigestCheckResponse, JSONResponse]:
        return respond(api_service.check_digest(session_id, request))

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return api_service.health()

    logger.info("Salvo API created (env=%s)", SALVO_ENV)
    return app

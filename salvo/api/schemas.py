"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client (renderer, input
controller, or a remote peer relaying moves) and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_MOVE: Move payload does not match its kind
- MOVE_REJECTED: Move or transition not allowed in the current state
- GAME_OVER: Session already has a winner
- PEER_UNAVAILABLE: The peer move source could not supply a move
- VALIDATION_ERROR: An imported match or its arena config is malformed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field, FiniteFloat


# =============================================================================
# Enums
# =============================================================================

class SideName(str, Enum):
    A = "a"
    B = "b"


class TurnStateName(str, Enum):
    PROMPT = "prompt"
    ACCELERATE = "accelerate"
    SHOOT = "shoot"
    ANALYZE = "analyze"
    SYNC = "sync"
    GAME_OVER = "gameover"


class MoveKindName(str, Enum):
    INIT = "init"
    ACCELERATE = "accelerate"
    SHOOT = "shoot"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_MOVE = "INVALID_MOVE"
    MOVE_REJECTED = "MOVE_REJECTED"
    GAME_OVER = "GAME_OVER"
    PEER_UNAVAILABLE = "PEER_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class VectorInfo(BaseModel):
    x: float
    y: float


class BodyInfo(BaseModel):
    """A side's body as last reconstructed."""
    side: SideName
    position: VectorInfo
    velocity: VectorInfo
    radius: float


class ShotInfo(BaseModel):
    """A resolved shot."""
    center: VectorInfo
    impact_radius: float = Field(ge=0.0)
    move_index: int
    hit: bool = False


class MoveModel(BaseModel):
    """A logged move."""
    kind: MoveKindName
    payload: dict[str, FiniteFloat] = Field(default_factory=dict)


class SideRecordModel(BaseModel):
    """The minimal serializable unit of one side: seed plus ordered moves."""
    seed: int = Field(ge=0, lt=2 ** 32)
    moves: list[MoveModel] = Field(default_factory=list)


class ArenaInfo(BaseModel):
    width: int
    height: int
    max_acc: float
    max_vel: int
    body_radius: float
    hit_threshold: float


class ArenaConfigModel(BaseModel):
    """Arena constants carried by an exported match."""
    width: int = Field(800, gt=0)
    height: int = Field(600, gt=0)
    max_acc: FiniteFloat = Field(25, ge=0)
    max_vel: int = Field(50, ge=0)
    body_radius: FiniteFloat = Field(10, ge=0)
    hit_threshold: FiniteFloat = Field(10, ge=0)
    spawn_margin: int = Field(10, ge=0)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new duel session."""
    seed_a: Optional[int] = Field(None, ge=0, lt=2 ** 32, description="Local side seed")
    seed_b: Optional[int] = Field(None, ge=0, lt=2 ** 32, description="Peer side seed")
    peer_seed: Optional[int] = Field(None, ge=0, lt=2 ** 32, description="Pseudo-opponent seed")


class TransitionRequest(BaseModel):
    """Request a turn state transition."""
    action: str = Field(..., description="Requested next state, e.g. shoot, accelerate, sync")


class MoveRequest(BaseModel):
    """Confirm the move currently being collected."""
    kind: MoveKindName
    payload: dict[str, FiniteFloat] = Field(..., description="{dx, dy} or {x, y}")


class DigestCheckRequest(BaseModel):
    """A trajectory digest computed by the other side."""
    side: SideName
    digest: str = Field(..., min_length=64, max_length=64)


class ImportMatchRequest(BaseModel):
    """Rebuild a session from an exported match."""
    config: Optional[ArenaConfigModel] = None
    sides: dict[SideName, SideRecordModel]


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    state: TurnStateName
    turn: int
    allowed_actions: list[TurnStateName] = Field(default_factory=list)
    pending_move_kind: Optional[MoveKindName] = None
    winner: Optional[SideName] = None
    seeds: dict[SideName, int]
    created_at: float
    api_version: str = "v1"


class SnapshotResponse(BaseModel):
    """Read-only snapshot for a renderer."""
    session_id: str
    state: TurnStateName
    turn: int
    bodies: dict[SideName, BodyInfo]
    shots: dict[SideName, list[ShotInfo]]
    winner: Optional[SideName] = None
    digests: dict[SideName, str] = Field(default_factory=dict)
    arena: ArenaInfo
    api_version: str = "v1"


class TransitionResponse(BaseModel):
    session_id: str
    changed: bool
    state: TurnStateName
    allowed_actions: list[TurnStateName] = Field(default_factory=list)


class SyncResponse(BaseModel):
    """Outcome of a confirmed move and the synchronization it triggered."""
    session_id: str
    accepted: bool
    state: TurnStateName
    turn: int
    local_move: Optional[MoveModel] = None
    peer_move: Optional[MoveModel] = None
    shots: dict[SideName, list[ShotInfo]] = Field(default_factory=dict)
    winner: Optional[SideName] = None
    reason: Optional[str] = None


class MatchLogResponse(BaseModel):
    """Exported match."""
    session_id: str
    version: int
    config: ArenaConfigModel
    sides: dict[SideName, SideRecordModel]
    winner: Optional[SideName] = None


class DigestCheckResponse(BaseModel):
    session_id: str
    side: SideName
    consistent: bool
    local_digest: Optional[str] = None


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    active_sessions: int = 0

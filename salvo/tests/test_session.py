"""
Tests for session orchestration.

Tests:
- Turn flow and move gating
- Bodies and shots republished from replay
- Winner permanence and game over
- Two independent sessions agree (lockstep)
- Export/import and digest checks
"""

import pytest

from ..bots import ScriptedPeer, PseudoOpponentPolicy
from ..engine_core.body import Body, Side
from ..engine_core.errors import PeerExhaustedError
from ..engine_core.move import Move, MoveKind
from ..engine_core.rng import SeededRandom
from ..engine_core.state_machine import TurnState
from ..engine_core.vector import Vector2
from ..session import GameSession, SessionManager


class TestSessionCreation:
    """Tests for a freshly created session."""

    def test_initial_state(self, config):
        session = GameSession.create(1, 2, peer=ScriptedPeer())

        assert session.state == TurnState.PROMPT
        assert session.winner is None
        assert session.turn == 0
        assert len(session.logs[Side.A]) == 1
        assert session.logs[Side.A][0] == Move.init(1)
        assert session.logs[Side.B][0] == Move.init(2)

    def test_bodies_spawned_from_seeds(self, config):
        """Seeds (1, 2), no moves: bodies sit at their seeded positions."""
        session = GameSession.create(1, 2, peer=ScriptedPeer())

        assert session.bodies[Side.A].position == Body.spawn(SeededRandom(1), Side.A).position
        assert session.bodies[Side.B].position == Body.spawn(SeededRandom(2), Side.B).position
        assert session.shots == {Side.A: [], Side.B: []}


class TestTurnFlow:
    """Tests for gating and synchronization."""

    def test_confirm_runs_sync(self, scripted_session):
        session = scripted_session
        session.transition("accelerate")
        result = session.confirm(Move.accelerate(100, -30))

        assert result.accepted
        assert result.peer_move == Move.shoot(0, 0)
        assert session.state == TurnState.PROMPT
        assert session.turn == 1
        assert len(session.logs[Side.A]) == len(session.logs[Side.B]) == 2

    def test_update_outside_sync_is_noop(self, scripted_session):
        session = scripted_session
        result = session.update(Move.shoot(1, 1))

        assert not result.accepted
        assert session.turn == 0
        assert session.state == TurnState.PROMPT

    def test_submit_move_outside_sync_rejected(self, scripted_session):
        session = scripted_session
        session.transition("shoot")
        assert not session.submit_move(Move.shoot(1, 1))
        assert len(session.logs[Side.A]) == 1

    def test_wrong_move_kind_rejected(self, scripted_session):
        """A thrust cannot be confirmed while a shot is being collected."""
        session = scripted_session
        session.transition("shoot")
        result = session.confirm(Move.accelerate(1, 0))

        assert not result.accepted
        assert session.state == TurnState.SHOOT
        assert len(session.logs[Side.A]) == 1

    def test_update_after_explicit_sync(self, scripted_session):
        session = scripted_session
        session.transition("shoot")
        session.transition("sync")

        rejected = session.update(Move.accelerate(1, 0))
        assert not rejected.accepted
        assert session.state == TurnState.SYNC

        result = session.update(Move.shoot(0, 0))
        assert result.accepted
        assert session.state == TurnState.PROMPT

    def test_confirm_from_prompt_rejected(self, scripted_session):
        result = scripted_session.confirm(Move.shoot(0, 0))
        assert not result.accepted

    def test_analyze_blocks_confirm(self, scripted_session):
        session = scripted_session
        session.transition("shoot")
        session.transition("analyze")
        assert not session.confirm(Move.shoot(0, 0)).accepted
        session.transition("shoot")
        assert session.confirm(Move.shoot(0, 0)).accepted

    def test_peer_failure_leaves_logs_untouched(self):
        session = GameSession.create(1, 2, peer=ScriptedPeer())
        session.transition("shoot")

        with pytest.raises(PeerExhaustedError):
            session.confirm(Move.shoot(0, 0))

        assert len(session.logs[Side.A]) == 1
        assert len(session.logs[Side.B]) == 1

    def test_bodies_come_from_replay(self, scripted_session, play, moves_a):
        session = scripted_session
        play(session, moves_a)

        replays = session.replay()
        assert session.bodies[Side.B].position == replays[Side.A].opponent_body.position
        assert session.bodies[Side.A].position == replays[Side.B].opponent_body.position

    def test_shots_recomputed_every_sync(self, scripted_session, play, moves_a):
        session = scripted_session
        play(session, moves_a)
        assert [s.move_index for s in session.shots[Side.A]] == [2, 4]
        assert [s.move_index for s in session.shots[Side.B]] == [1, 4]


class TestWinner:
    """Tests for hits and game over."""

    def test_direct_hit_ends_game(self):
        """A shoots at B's step-1 position while B idles: A wins."""
        b_position = Body.spawn(SeededRandom(2), Side.B).update(Vector2()).position
        session = GameSession.create(1, 2, peer=ScriptedPeer([Move.accelerate(0, 0)]))

        session.transition("shoot")
        result = session.confirm(Move.shoot(b_position.x, b_position.y))

        assert result.winner == Side.A
        assert session.winner == Side.A
        assert session.state == TurnState.GAME_OVER

    def test_peer_hit(self):
        a_position = Body.spawn(SeededRandom(1), Side.A).update(Vector2()).position
        peer = ScriptedPeer([Move.shoot(a_position.x, a_position.y)])
        session = GameSession.create(1, 2, peer=peer)

        session.transition("shoot")
        session.confirm(Move.shoot(0, 0))

        assert session.winner == Side.B

    def test_session_frozen_after_winner(self):
        b_position = Body.spawn(SeededRandom(2), Side.B).update(Vector2()).position
        peer = ScriptedPeer([Move.accelerate(0, 0), Move.accelerate(0, 0)])
        session = GameSession.create(1, 2, peer=peer)
        session.transition("shoot")
        session.confirm(Move.shoot(b_position.x, b_position.y))

        assert not session.transition("prompt")
        assert not session.transition("shoot")
        assert not session.update(Move.shoot(0, 0)).accepted
        assert session.turn == 1
        assert session.winner == Side.A

    def test_simultaneous_hits_favor_local_side(self):
        """When both sides hit on one sync, the first replayed perspective wins."""
        a_position = Body.spawn(SeededRandom(1), Side.A).update(Vector2()).position
        b_position = Body.spawn(SeededRandom(2), Side.B).update(Vector2()).position
        peer = ScriptedPeer([Move.shoot(a_position.x, a_position.y)])
        session = GameSession.create(1, 2, peer=peer)

        session.transition("shoot")
        session.confirm(Move.shoot(b_position.x, b_position.y))

        assert session.winner == Side.A
        assert all(s.is_hit() for s in session.shots[Side.B])


class TestLockstep:
    """Two sides, each replaying independently, must agree."""

    def test_mirrored_sessions_agree(self, play, moves_a, moves_b):
        side_a = GameSession.create(11, 22, peer=ScriptedPeer(moves_b))
        side_b = GameSession.create(22, 11, peer=ScriptedPeer(moves_a))

        play(side_a, moves_a)
        play(side_b, moves_b)

        assert side_a.digests[Side.A] == side_b.digests[Side.B]
        assert side_a.digests[Side.B] == side_b.digests[Side.A]
        assert side_a.bodies[Side.A].position == side_b.bodies[Side.B].position
        assert side_a.bodies[Side.B].position == side_b.bodies[Side.A].position
        assert side_a.shots[Side.A] == side_b.shots[Side.B]
        assert side_a.winner is None and side_b.winner is None

    def test_digest_exchange(self, play, moves_a, moves_b):
        side_a = GameSession.create(11, 22, peer=ScriptedPeer(moves_b))
        side_b = GameSession.create(22, 11, peer=ScriptedPeer(moves_a))
        play(side_a, moves_a)
        play(side_b, moves_b)

        # Side B's own trajectory, as B computed it, checked on A
        assert side_a.verify_digest(Side.B, side_b.digests[Side.A])
        assert not side_a.verify_digest(Side.B, "0" * 64)

    def test_verify_digest_before_first_sync(self):
        session = GameSession.create(1, 2, peer=ScriptedPeer())
        other = GameSession.create(2, 1, peer=ScriptedPeer())
        digest = other.replay()[Side.B].digest
        assert session.verify_digest(Side.B, digest)


class TestExport:
    """Tests for the {seed, moves} match format."""

    def test_export_shape(self, scripted_session, play, moves_a):
        play(scripted_session, moves_a)
        data = scripted_session.export()

        assert data["sides"]["a"]["seed"] == 11
        assert data["sides"]["b"]["seed"] == 22
        assert len(data["sides"]["a"]["moves"]) == len(moves_a)
        assert data["sides"]["a"]["moves"][0] == {
            "kind": "accelerate",
            "payload": {"dx": 100, "dy": -30},
        }

    def test_import_reproduces_session(self, scripted_session, play, moves_a):
        play(scripted_session, moves_a)
        rebuilt = GameSession.from_export(scripted_session.export())

        assert rebuilt.digests == scripted_session.digests
        assert rebuilt.shots == scripted_session.shots
        assert rebuilt.winner == scripted_session.winner
        assert rebuilt.state == TurnState.PROMPT

    def test_import_recomputes_winner(self):
        b_position = Body.spawn(SeededRandom(2), Side.B).update(Vector2()).position
        session = GameSession.create(1, 2, peer=ScriptedPeer([Move.accelerate(0, 0)]))
        session.transition("shoot")
        session.confirm(Move.shoot(b_position.x, b_position.y))

        data = session.export()
        data["winner"] = None
        rebuilt = GameSession.from_export(data)

        assert rebuilt.winner == Side.A
        assert rebuilt.state == TurnState.GAME_OVER

    def test_snapshot_is_a_copy(self, scripted_session):
        snapshot = scripted_session.snapshot()
        snapshot.bodies[Side.A].update(Vector2(1, 0))
        assert scripted_session.bodies[Side.A].position != snapshot.bodies[Side.A].position


class TestSessionManager:
    """Tests for the in-memory registry."""

    def test_create_and_get(self):
        manager = SessionManager()
        session = manager.create_session(seed_a=1, seed_b=2, peer_seed=3)

        assert manager.get_session(session.session_id) is session
        assert session.seed(Side.A) == 1
        assert isinstance(session.peer, PseudoOpponentPolicy)

    def test_generated_seeds(self):
        session = SessionManager().create_session()
        assert 0 <= session.seed(Side.A) < 2 ** 32
        assert 0 <= session.seed(Side.B) < 2 ** 32

    def test_end_session(self):
        manager = SessionManager()
        session = manager.create_session(seed_a=1, seed_b=2)

        assert manager.end_session(session.session_id)
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_active_excludes_finished(self):
        manager = SessionManager()
        session = manager.create_session(seed_a=1, seed_b=2)
        assert session.session_id in manager.list_active_sessions()

        session.transition("gameover")
        assert session.session_id not in manager.list_active_sessions()
        assert manager.cleanup_stale_sessions(max_age_seconds=-1) == 1
        assert manager.list_sessions() == []

    def test_pseudo_opponent_full_game(self):
        """A pseudo-opponent match runs without errors and keeps logs aligned."""
        manager = SessionManager()
        session = manager.create_session(seed_a=5, seed_b=6, peer_seed=7)
        local = PseudoOpponentPolicy(8)

        from ..bots import PeerHistory
        for _ in range(30):
            if session.is_over:
                break
            move = local.produce_next_move(
                PeerHistory(own_log=session.logs[Side.A], own_shots=tuple(session.shots[Side.A]))
            )
            session.transition(move.kind.value)
            assert session.confirm(move).accepted
            assert len(session.logs[Side.A]) == len(session.logs[Side.B])

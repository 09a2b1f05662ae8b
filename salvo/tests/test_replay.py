"""
Tests for trajectory reconstruction and shot resolution.

Tests:
- Replay is deterministic
- Shots are judged against the index-aligned opponent position
- Hit threshold boundary
- Winner rules
"""

import pytest

from ..engine_core.body import Body, Side
from ..engine_core.move import Move
from ..engine_core.move_log import MoveLog
from ..engine_core.replay import Shot, compute_shots, reconstruct_trajectory, trajectory_digest
from ..engine_core.rng import SeededRandom
from ..engine_core.vector import Vector2


def make_log(seed, moves):
    log = MoveLog.start(seed)
    for move in moves:
        log.append(move)
    return log


def position_after_idle(seed, config, steps=1):
    body = Body.spawn(SeededRandom(seed), Side.B, config)
    for _ in range(steps):
        body.update(Vector2(), config)
    return body.position


class TestReconstruction:
    """Tests for reconstruct_trajectory."""

    def test_init_only(self, config):
        positions, body = reconstruct_trajectory(MoveLog.start(2), Side.B, config)
        spawned = Body.spawn(SeededRandom(2), Side.B, config)
        assert positions == [spawned.position]
        assert body.position == spawned.position
        assert body.side == Side.B

    def test_positions_aligned_with_log(self, config, moves_b):
        log = make_log(22, moves_b)
        positions, _ = reconstruct_trajectory(log, Side.B, config)
        assert len(positions) == len(log)

    def test_shoot_step_is_unpowered(self, config):
        """A SHOOT move advances the body exactly like zero thrust."""
        shoot_log = make_log(9, [Move.shoot(1, 1)])
        idle_log = make_log(9, [Move.accelerate(0, 0)])
        assert (
            reconstruct_trajectory(shoot_log, Side.A, config)[0]
            == reconstruct_trajectory(idle_log, Side.A, config)[0]
        )

    def test_matches_direct_integration(self, config, moves_b):
        log = make_log(22, moves_b)
        positions, _ = reconstruct_trajectory(log, Side.B, config)

        body = Body.spawn(SeededRandom(22), Side.B, config)
        expected = [body.position]
        for move in moves_b:
            thrust = move.as_vector() if move.kind.value == "accelerate" else Vector2()
            body.update(thrust, config)
            expected.append(body.position)
        assert positions == expected


class TestComputeShots:
    """Tests for compute_shots."""

    def test_scenario_no_moves(self, config):
        """Seeds (1, 2) with only INIT moves: no shots, no winner."""
        own = MoveLog.start(1)
        opponent = MoveLog.start(2)
        result = compute_shots(own, opponent, Side.A, config)

        assert result.shots == []
        assert result.winner is None
        assert result.opponent_body.position == Body.spawn(SeededRandom(2), Side.B, config).position

    def test_scenario_direct_hit(self, config):
        """A shot at B's step-1 position hits and makes A the winner."""
        target = position_after_idle(2, config)
        own = make_log(1, [Move.shoot(target.x, target.y)])
        opponent = make_log(2, [Move.accelerate(0, 0)])

        result = compute_shots(own, opponent, Side.A, config)

        assert len(result.shots) == 1
        assert result.shots[0].impact_radius == 0
        assert result.shots[0].move_index == 1
        assert result.winner == Side.A

    def test_hit_at_exact_threshold(self, config):
        """Distance exactly equal to the threshold counts as a hit."""
        target = position_after_idle(2, config)
        own = make_log(1, [Move.shoot(target.x, target.y + 10)])
        opponent = make_log(2, [Move.accelerate(0, 0)])

        result = compute_shots(own, opponent, Side.A, config)
        assert result.shots[0].impact_radius == 10
        assert result.winner == Side.A

    def test_miss_just_beyond_threshold(self, config):
        target = position_after_idle(2, config)
        own = make_log(1, [Move.shoot(target.x + 10.0001, target.y)])
        opponent = make_log(2, [Move.accelerate(0, 0)])

        result = compute_shots(own, opponent, Side.A, config)
        assert result.shots[0].impact_radius > 10
        assert result.winner is None

    def test_shot_judged_at_its_own_index(self, config):
        """A shot aimed at where B *will* be later does not count now."""
        later = position_after_idle(2, config, steps=2)
        now = position_after_idle(2, config, steps=1)
        if later.distance_to(now) <= config.hit_threshold:
            pytest.skip("seed 2 body barely moves")

        own = make_log(1, [Move.shoot(later.x, later.y), Move.accelerate(1, 0)])
        opponent = make_log(2, [Move.accelerate(0, 0), Move.accelerate(0, 0)])

        result = compute_shots(own, opponent, Side.A, config)
        assert result.winner is None

    def test_non_shoot_moves_contribute_nothing(self, config, moves_a, moves_b):
        own = make_log(11, moves_a)
        opponent = make_log(22, moves_b)
        result = compute_shots(own, opponent, Side.A, config)
        assert [s.move_index for s in result.shots] == [2, 4]

    def test_unaligned_shots_are_skipped(self, config):
        """Own shots beyond the opponent log have nothing to hit yet."""
        own = make_log(1, [Move.shoot(0, 0), Move.shoot(0, 0)])
        opponent = make_log(2, [Move.accelerate(0, 0)])
        result = compute_shots(own, opponent, Side.A, config)
        assert [s.move_index for s in result.shots] == [1]

    def test_first_hit_sets_winner_once(self, config):
        p1 = position_after_idle(2, config, steps=1)
        p2 = position_after_idle(2, config, steps=2)
        own = make_log(1, [Move.shoot(p1.x, p1.y), Move.shoot(p2.x, p2.y)])
        opponent = make_log(2, [Move.accelerate(0, 0), Move.accelerate(0, 0)])

        result = compute_shots(own, opponent, Side.B, config)
        assert all(s.is_hit() for s in result.shots)
        assert result.winner == Side.B


class TestDeterminism:
    """Replay equivalence: same inputs, same outputs."""

    def test_replay_twice_identical(self, config, moves_a, moves_b):
        own = make_log(11, moves_a)
        opponent = make_log(22, moves_b)

        first = compute_shots(own, opponent, Side.A, config)
        second = compute_shots(own, opponent, Side.A, config)

        assert first.positions == second.positions
        assert first.shots == second.shots
        assert first.winner == second.winner
        assert first.digest == second.digest

    def test_replay_from_deserialized_logs(self, config, moves_a, moves_b):
        """Logs that crossed a serialization boundary replay identically."""
        own = make_log(11, moves_a)
        opponent = make_log(22, moves_b)
        copied_own = MoveLog.from_dict(own.to_dict())
        copied_opponent = MoveLog.from_dict(opponent.to_dict())

        assert (
            compute_shots(own, opponent, Side.A, config).digest
            == compute_shots(copied_own, copied_opponent, Side.A, config).digest
        )

    def test_replay_does_not_mutate_logs(self, config, moves_a, moves_b):
        own = make_log(11, moves_a)
        opponent = make_log(22, moves_b)
        before = (own.to_dict(), opponent.to_dict())
        compute_shots(own, opponent, Side.A, config)
        assert (own.to_dict(), opponent.to_dict()) == before


class TestDigest:
    """Tests for trajectory digests."""

    def test_digest_is_sha256_hex(self):
        digest = trajectory_digest([Vector2(1, 2)])
        assert len(digest) == 64
        int(digest, 16)

    def test_digest_detects_tiny_divergence(self):
        a = trajectory_digest([Vector2(1.0, 2.0)])
        b = trajectory_digest([Vector2(1.0, 2.0 + 1e-12)])
        assert a != b

    def test_int_and_float_positions_agree(self):
        assert trajectory_digest([Vector2(3, 4)]) == trajectory_digest([Vector2(3.0, 4.0)])


class TestShot:
    """Tests for Shot helpers."""

    def test_random_point_on_circle(self):
        shot = Shot(center=Vector2(100, 100), impact_radius=30)
        point = shot.random_point(SeededRandom(4))
        assert point.distance_to(shot.center) == pytest.approx(30)

    def test_random_point_in_bounds_clamped(self, config):
        shot = Shot(center=Vector2(0, 0), impact_radius=500)
        rng = SeededRandom(8)
        for _ in range(50):
            point = shot.random_point_in_bounds(rng, config)
            assert 0 <= point.x <= config.width
            assert 0 <= point.y <= config.height

"""
Salvo CLI - Command-line interface for the engine.

Usage:
    salvo play [--turns N] [--seed-a S] [--seed-b S] [--export FILE]
    salvo replay <match_file>
    salvo serve [--host HOST] [--port PORT]
"""

import argparse
import json
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Salvo - Deterministic Lockstep Artillery Duel",
        prog="salvo",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("SALVO_LOG_LEVEL", "WARNING"),
        help="Logging level (default: WARNING or $SALVO_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a local bot-vs-bot duel")
    play_parser.add_argument("--turns", type=int, default=50, help="Maximum number of turns")
    play_parser.add_argument("--seed-a", type=int, help="Seed for side A")
    play_parser.add_argument("--seed-b", type=int, help="Seed for side B")
    play_parser.add_argument("--peer-seed", type=int, help="Seed for side B's policy")
    play_parser.add_argument("--local-seed", type=int, help="Seed for side A's policy")
    play_parser.add_argument("--export", "-o", help="Write the match to a JSON file")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Replay an exported match")
    replay_parser.add_argument("match_file", help="Path to exported match JSON")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        return cmd_play(args)
    elif args.command == "replay":
        return cmd_replay(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _format_body(body) -> str:
    return (
        f"side {body.side.name}: pos=({body.position.x:.2f}, {body.position.y:.2f}) "
        f"vel=({body.velocity.x:.2f}, {body.velocity.y:.2f})"
    )


def _print_outcome(session):
    for body in session.bodies.values():
        print(f"  {_format_body(body)}")
    for side, shots in session.shots.items():
        for shot in shots:
            mark = "HIT" if shot.is_hit(session.config.hit_threshold) else "miss"
            print(
                f"  shot {side.name}#{shot.move_index} at "
                f"({shot.center.x:.1f}, {shot.center.y:.1f}) radius={shot.impact_radius:.2f} {mark}"
            )
    for side, digest in sorted(session.digests.items(), key=lambda kv: kv[0].value):
        print(f"  digest {side.name}: {digest}")
    print(f"Winner: {session.winner.name if session.winner else 'none'}")


def cmd_play(args):
    """
    Play a local duel. Side A is driven by a second pseudo-opponent
    policy standing in for the input controller.
    """
    from .bots import PeerHistory, PseudoOpponentPolicy
    from .engine_core import Side, TurnState, generate_seed
    from .session import SessionManager

    manager = SessionManager()
    session = manager.create_session(
        seed_a=args.seed_a,
        seed_b=args.seed_b,
        peer_seed=args.peer_seed,
    )
    local_policy = PseudoOpponentPolicy(
        args.local_seed if args.local_seed is not None else generate_seed()
    )

    print(f"Session {session.session_id}")
    print(f"Seeds: A={session.seed(Side.A)} B={session.seed(Side.B)}")

    for _ in range(args.turns):
        history = PeerHistory(
            own_log=session.logs[Side.A],
            own_shots=tuple(session.shots[Side.A]),
            config=session.config,
        )
        move = local_policy.produce_next_move(history)
        session.transition(TurnState(move.kind.value))
        result = session.confirm(move)

        print(
            f"Turn {session.turn}: A {move.kind.value} {dict(move.payload)} | "
            f"B {result.peer_move.kind.value} {dict(result.peer_move.payload)}"
        )
        if result.winner is not None:
            break

    _print_outcome(session)

    if args.export:
        with open(args.export, "w", encoding="utf-8") as f:
            json.dump(session.export(), f, indent=2)
        print(f"Match written to {args.export}")
    return 0


def cmd_replay(args):
    """Replay an exported match from its seeds and logs."""
    from .engine_core import SalvoError
    from .session import GameSession

    try:
        with open(args.match_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {args.match_file}")
        sys.exit(1)

    try:
        session = GameSession.from_export(data)
    except (SalvoError, KeyError) as e:
        print(f"Error: Invalid match file: {e}")
        sys.exit(1)

    print(f"Replayed {session.turn} turn(s)")
    _print_outcome(session)

    recorded = data.get("winner")
    replayed = session.winner.value if session.winner else None
    if recorded != replayed:
        print(f"Warning: recorded winner {recorded!r} differs from replayed {replayed!r}")
        sys.exit(2)
    return 0


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    main()

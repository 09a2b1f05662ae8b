"""
Salvo - Deterministic Lockstep Artillery Duel

Two sides take turns accelerating a circular body or firing a targeted shot.
Neither side ever sees the other's live state. Each side keeps only:
- Both initial seeds
- Both append-only move logs

and reconstructs the opponent's whole trajectory by replaying those logs.
Both sides must reach bit-identical positions to agree on hits.
"""

__version__ = "0.1.0"

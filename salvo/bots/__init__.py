"""
Bots module - Sources of the remote side's moves.

Provides:
- PeerMoveSource: Interface for anything that supplies peer moves
- PeerHistory: What a source may see of its own side
- PseudoOpponentPolicy: Random local opponent
- ScriptedPeer: Pre-recorded or transport-fed moves
"""

from .policy import PeerMoveSource, PeerHistory, PseudoOpponentPolicy, ScriptedPeer

__all__ = [
    "PeerMoveSource",
    "PeerHistory",
    "PseudoOpponentPolicy",
    "ScriptedPeer",
]

"""
Session Module - Public entry points over game snapshots.

The engine holds no game between calls: every entry point takes a
snapshot and returns the next one inside a TurnResult. Automated
players are driven after each accepted human input.
"""

from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "GameLoop",
    "LoopState",
    "TurnResult",
]

"""
Engine errors.

Illegal calls are raised inside reducer handlers and turned into
failed CommandResults by Reducer.apply. They never escape the engine.
"""

from __future__ import annotations
from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable reasons a command was rejected."""
    GAME_OVER = "GAME_OVER"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    PHASE_ACTIVE = "PHASE_ACTIVE"
    WRONG_PHASE = "WRONG_PHASE"
    PLAYER_ELIMINATED = "PLAYER_ELIMINATED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    MUST_COUP = "MUST_COUP"
    INVALID_TARGET = "INVALID_TARGET"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    ALREADY_RESPONDED = "ALREADY_RESPONDED"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    INVALID_SELECTION = "INVALID_SELECTION"
    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"


class CoupError(Exception):
    """Base class for engine errors."""


class IllegalCallError(CoupError):
    """An entry point was invoked with input the current snapshot does not allow."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN_COMMAND):
        super().__init__(message)
        self.code = code

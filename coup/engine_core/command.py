"""
Command System - Entry-point inputs and results.

Commands represent one call into the engine:
1. Declaring a turn action
2. Answering a pending claim (allow, challenge, block)
3. Choosing cards to keep after an exchange
4. Choosing which influence to reveal

All state changes flow through commands.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import CardType
from .catalog import ActionType, Response


class CommandType(Enum):
    """Types of commands the reducer accepts."""
    DECLARE_ACTION = "declare_action"
    SUBMIT_RESPONSE = "submit_response"
    SELECT_EXCHANGE = "select_exchange"
    FORCED_REVEAL = "forced_reveal"


@dataclass
class CommandPayload:
    """
    Payload for a command.

    Different command types use different fields.
    Validation happens in the reducer.
    """
    player_id: str | None = None
    action: ActionType | None = None
    target_id: str | None = None
    response: Response | None = None
    cards: list[CardType] | None = None
    card: CardType | None = None


@dataclass
class Command:
    """
    A complete command to be applied to the game state.

    Commands are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    command_type: CommandType
    payload: CommandPayload

    @property
    def player_id(self) -> str | None:
        return self.payload.player_id

    @classmethod
    def declare(
        cls,
        player_id: str,
        action: ActionType,
        target_id: str | None = None,
    ) -> Command:
        """Factory for declaring a turn action."""
        return cls(
            command_type=CommandType.DECLARE_ACTION,
            payload=CommandPayload(player_id=player_id, action=action, target_id=target_id),
        )

    @classmethod
    def respond(cls, player_id: str, response: Response) -> Command:
        """Factory for answering a pending claim."""
        return cls(
            command_type=CommandType.SUBMIT_RESPONSE,
            payload=CommandPayload(player_id=player_id, response=response),
        )

    @classmethod
    def select_exchange(cls, player_id: str, cards: list[CardType]) -> Command:
        """Factory for an exchange selection."""
        return cls(
            command_type=CommandType.SELECT_EXCHANGE,
            payload=CommandPayload(player_id=player_id, cards=list(cards)),
        )

    @classmethod
    def reveal(cls, player_id: str, card: CardType | None = None) -> Command:
        """Factory for a forced reveal."""
        return cls(
            command_type=CommandType.FORCED_REVEAL,
            payload=CommandPayload(player_id=player_id, card=card),
        )

    def describe(self) -> str:
        """Short human-readable form, used in logs and bot traces."""
        p = self.payload
        if self.command_type == CommandType.DECLARE_ACTION:
            target = f" -> {p.target_id}" if p.target_id else ""
            return f"{p.player_id}: {p.action}{target}"
        if self.command_type == CommandType.SUBMIT_RESPONSE:
            return f"{p.player_id}: {p.response}"
        if self.command_type == CommandType.SELECT_EXCHANGE:
            return f"{p.player_id}: keep {', '.join(str(c) for c in p.cards or [])}"
        return f"{p.player_id}: reveal {p.card or 'any'}"


@dataclass
class CommandResult:
    """
    Result of applying a command.

    new_state is always a valid snapshot: the next state on success,
    the input plus a diagnostic log line on failure.
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes, for callers that want a trace
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        state: Any | None = None,
    ) -> CommandResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> CommandResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )

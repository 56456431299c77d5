"""
Engine Core - Deterministic game state management and claim resolution.

The engine is the runtime that:
1. Sets up the GameState
2. Generates legal commands
3. Applies commands via the reducer
4. Resolves challenges, blocks, reveals and turn advancement
"""

from .cards import CardType, build_deck, draw, shuffle, return_and_shuffle, parse_card
from .catalog import (
    ActionType,
    Response,
    ActionDefinition,
    BlockDefinition,
    ACTION_CATALOG,
    BLOCK_CATALOG,
    TOTAL_COINS,
    get_action_definition,
    action_for_block,
    block_for_action,
    cards_for_claim,
    parse_action,
    parse_response,
)
from .state import (
    GameState,
    GamePhase,
    PlayerState,
    InfluenceSlot,
    InteractionStage,
    PendingAction,
    PendingResponse,
    PendingExchange,
    PendingReveal,
)
from .game_log import GameLog, MAX_LOG_ENTRIES
from .command import Command, CommandType, CommandPayload, CommandResult
from .errors import CoupError, IllegalCallError, ErrorCode
from .reducer import Reducer, apply_command
from .action_generator import ActionGenerator, available_actions, awaiting_players, legal_actions, is_legal
from .setup import setup_game

__all__ = [
    "CardType",
    "build_deck",
    "draw",
    "shuffle",
    "return_and_shuffle",
    "parse_card",
    "ActionType",
    "Response",
    "ActionDefinition",
    "BlockDefinition",
    "ACTION_CATALOG",
    "BLOCK_CATALOG",
    "TOTAL_COINS",
    "get_action_definition",
    "action_for_block",
    "block_for_action",
    "cards_for_claim",
    "parse_action",
    "parse_response",
    "GameState",
    "GamePhase",
    "PlayerState",
    "InfluenceSlot",
    "InteractionStage",
    "PendingAction",
    "PendingResponse",
    "PendingExchange",
    "PendingReveal",
    "GameLog",
    "MAX_LOG_ENTRIES",
    "Command",
    "CommandType",
    "CommandPayload",
    "CommandResult",
    "CoupError",
    "IllegalCallError",
    "ErrorCode",
    "Reducer",
    "apply_command",
    "ActionGenerator",
    "available_actions",
    "awaiting_players",
    "legal_actions",
    "is_legal",
    "setup_game",
]

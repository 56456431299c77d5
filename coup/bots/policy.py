"""
Bot Policy - Interface for automated player decision-making.

A BotPolicy takes a game state and the legal commands for one player
and returns a decision. Decisions cover:
- Which action to declare on the player's turn
- How to answer a pending claim (allow, challenge, block)
- Which cards to keep after an exchange, or which card to reveal
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import random
from typing import Any

from ..engine_core.cards import CardType
from ..engine_core.catalog import ActionType, Response, MUST_COUP_THRESHOLD
from ..engine_core.command import Command
from ..engine_core.state import GameState

# Cards an automated player would rather keep, best first.
CARD_PREFERENCE = [
    CardType.DUKE,
    CardType.CONTESSA,
    CardType.ASSASSIN,
    CardType.CAPTAIN,
    CardType.AMBASSADOR,
]


def preferred_cards(pool: list[CardType], count: int) -> list[CardType]:
    """The count most preferred cards from pool."""
    ranked = sorted(pool, key=CARD_PREFERENCE.index)
    return ranked[:count]


def least_preferred(cards: list[CardType]) -> CardType | None:
    if not cards:
        return None
    return max(cards, key=CARD_PREFERENCE.index)


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The command to apply
    - Explanation (for logs/debugging)
    - The oracle's rationale, written to the game log when present
    - Why a safe default replaced the bot's own choice, if it did
    """
    command: Command
    explanation: str = ""
    confidence: float = 1.0
    rationale: str = ""
    fallback_reason: str | None = None

    # Evaluation details (for debugging)
    evaluated_actions: int = 0
    evaluation_details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None


def safe_default(state: GameState, player_id: str) -> Command:
    """
    Deterministic command that is always legal for the awaited player.

    - Reveal: give up the least preferred hidden card
    - Exchange: keep the cards already held
    - Response: Allow
    - Turn: Income, or Coup on the first opponent when forced to Coup
    """
    player = state.get_player(player_id)

    if state.pending_reveal:
        return Command.reveal(player_id, least_preferred(player.unrevealed_cards))

    if state.pending_exchange:
        return Command.select_exchange(player_id, player.unrevealed_cards)

    if state.pending_response:
        return Command.respond(player_id, Response.ALLOW)

    opponents = state.opponents_of(player_id)
    if player.money >= MUST_COUP_THRESHOLD and opponents:
        return Command.declare(player_id, ActionType.COUP, opponents[0].player_id)
    return Command.declare(player_id, ActionType.INCOME)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how an automated player decides.
    Implementations can range from simple baselines
    to oracle-backed reasoning.
    """

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        player_id: str,
        legal_actions: list[Command],
    ) -> BotDecision:
        """
        Select a turn action from the legal declarations.

        Args:
            state: Current game state
            player_id: The automated player whose turn it is
            legal_actions: Legal declare commands

        Returns:
            BotDecision with the selected command
        """
        pass

    @abstractmethod
    def select_response(
        self,
        state: GameState,
        player_id: str,
        legal_responses: list[Command],
    ) -> BotDecision:
        """Answer the pending claim."""
        pass

    @abstractmethod
    def select_choice(
        self,
        state: GameState,
        player_id: str,
        legal_choices: list[Command],
    ) -> BotDecision:
        """Pick exchange cards to keep, or a card to reveal."""
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects commands uniformly at random.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def _pick(self, legal: list[Command], what: str) -> BotDecision:
        if not legal:
            raise ValueError(f"No legal {what} available")
        return BotDecision(
            command=self.rng.choice(legal),
            explanation="Selected randomly",
            confidence=1.0 / len(legal),
            evaluated_actions=len(legal),
        )

    def select_action(self, state, player_id, legal_actions):
        return self._pick(legal_actions, "actions")

    def select_response(self, state, player_id, legal_responses):
        return self._pick(legal_responses, "responses")

    def select_choice(self, state, player_id, legal_choices):
        return self._pick(legal_choices, "choices")


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal command.

    Used for deterministic testing. Declarations are generated in
    catalog order, so this bot takes Income whenever it can; responses
    start with Allow.
    """

    def _first(self, legal: list[Command], what: str) -> BotDecision:
        if not legal:
            raise ValueError(f"No legal {what} available")
        return BotDecision(
            command=legal[0],
            explanation="Selected first legal command",
            evaluated_actions=1,
        )

    def select_action(self, state, player_id, legal_actions):
        return self._first(legal_actions, "actions")

    def select_response(self, state, player_id, legal_responses):
        return self._first(legal_responses, "responses")

    def select_choice(self, state, player_id, legal_choices):
        return self._first(legal_choices, "choices")

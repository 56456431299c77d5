"""
Game State - The snapshot passed between engine calls.

Design principles:
- Immutable-friendly: all mutations return new state
- Serializable: plain dataclasses, enums and lists
- At most one transient phase (response, exchange, reveal) is open at a time
"""

from __future__ import annotations
from collections import Counter
from copy import deepcopy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .cards import CardType
from .catalog import ActionType, Claim, Response
from .game_log import GameLog

# Newest applied commands kept on a snapshot
MAX_COMMAND_HISTORY = 100


class GamePhase(Enum):
    """High-level game phases."""
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class InteractionStage(Enum):
    """Which claim a response phase is collecting answers for."""
    ACTION = "action"  # The declared action
    BLOCK = "block"  # A block against the declared action


@dataclass(frozen=True)
class InfluenceSlot:
    """One face-down (or revealed) influence card."""
    card: CardType
    revealed: bool = False

    def reveal(self) -> InfluenceSlot:
        return InfluenceSlot(card=self.card, revealed=True)


@dataclass
class PlayerState:
    """
    State for a single player.

    A player always has exactly two influence slots. Elimination is
    derived from the slots, never stored.
    """
    player_id: str
    name: str
    is_automated: bool = False
    money: int = 0
    influence: list[InfluenceSlot] = field(default_factory=list)

    @property
    def unrevealed_cards(self) -> list[CardType]:
        return [slot.card for slot in self.influence if not slot.revealed]

    @property
    def revealed_cards(self) -> list[CardType]:
        return [slot.card for slot in self.influence if slot.revealed]

    @property
    def influence_count(self) -> int:
        """Number of unrevealed influence cards."""
        return len(self.unrevealed_cards)

    @property
    def is_eliminated(self) -> bool:
        return all(slot.revealed for slot in self.influence)

    def holds(self, card: CardType) -> bool:
        """Whether an unrevealed slot holds this card."""
        return card in self.unrevealed_cards

    def find_unrevealed(self, cards: tuple[CardType, ...] | list[CardType]) -> int | None:
        """Index of the first unrevealed slot holding one of cards, checked in cards order."""
        for card in cards:
            for index, slot in enumerate(self.influence):
                if not slot.revealed and slot.card == card:
                    return index
        return None

    def with_money(self, money: int) -> PlayerState:
        return replace(self, money=money)

    def with_slot(self, index: int, slot: InfluenceSlot) -> PlayerState:
        """Return new player state with one influence slot replaced."""
        influence = list(self.influence)
        influence[index] = slot
        return replace(self, influence=influence)


@dataclass(frozen=True)
class PendingAction:
    """An action that has been declared and paid for but not yet applied."""
    actor_id: str
    action: ActionType
    target_id: str | None = None


@dataclass(frozen=True)
class RecordedResponse:
    player_id: str
    response: Response


@dataclass
class PendingResponse:
    """
    A claim waiting for Allow / Challenge / Block answers.

    During the ACTION stage the claimant is the actor and the claim is
    the declared action. During the BLOCK stage the claimant is the
    blocker, the claim is the block, and only the actor may answer.
    """
    claimant_id: str
    claim: Claim
    pending_action: PendingAction
    stage: InteractionStage = InteractionStage.ACTION
    eligible: list[str] = field(default_factory=list)
    responses: list[RecordedResponse] = field(default_factory=list)

    @property
    def responded(self) -> list[str]:
        return [r.player_id for r in self.responses]

    @property
    def pending_responders(self) -> list[str]:
        """Eligible players who have not answered yet, in seating order."""
        answered = set(self.responded)
        return [pid for pid in self.eligible if pid not in answered]

    def with_response(self, player_id: str, response: Response) -> PendingResponse:
        return replace(
            self,
            responses=self.responses + [RecordedResponse(player_id, response)],
        )


@dataclass
class PendingExchange:
    """A player choosing which cards to keep after an Exchange."""
    player_id: str
    pool: list[CardType]
    drawn: list[CardType]
    keep_count: int


@dataclass
class PendingReveal:
    """
    A player who must reveal one influence before play continues.

    resume is the action to apply once the reveal completes; None means
    the turn settles after the reveal.
    """
    player_id: str
    reason: str = ""
    resume: PendingAction | None = None


@dataclass
class GameState:
    """
    Complete game snapshot at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    game_id: str

    # Game phase
    phase: GamePhase = GamePhase.SETUP
    turn_number: int = 0
    current_player_idx: int = 0

    # Players, in seating order
    players: list[PlayerState] = field(default_factory=list)

    # Shared pools
    deck: list[CardType] = field(default_factory=list)
    treasury: int = 0

    # Transient phases (at most one is set)
    pending_response: PendingResponse | None = None
    pending_exchange: PendingExchange | None = None
    pending_reveal: PendingReveal | None = None

    winner_id: str | None = None
    log: GameLog = field(default_factory=GameLog)

    # Newest applied commands, at most MAX_COMMAND_HISTORY
    command_history: list[Any] = field(default_factory=list)

    # Metadata
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def current_player(self) -> PlayerState:
        """Get the current player."""
        return self.players[self.current_player_idx]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def active_players(self) -> list[PlayerState]:
        """Players who are not eliminated, in seating order."""
        return [p for p in self.players if not p.is_eliminated]

    @property
    def winner(self) -> PlayerState | None:
        return self.get_player(self.winner_id) if self.winner_id else None

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def active_phase(self) -> PendingResponse | PendingExchange | PendingReveal | None:
        """The open transient phase, if any."""
        return self.pending_response or self.pending_exchange or self.pending_reveal

    @property
    def has_pending_phase(self) -> bool:
        return self.active_phase is not None

    def get_player(self, player_id: str | None) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def opponents_of(self, player_id: str) -> list[PlayerState]:
        """Non-eliminated players other than player_id."""
        return [p for p in self.active_players if p.player_id != player_id]

    def total_coins(self) -> int:
        """Coins held by players plus the treasury."""
        return sum(p.money for p in self.players) + self.treasury

    def card_census(self) -> Counter:
        """
        Count every card in play by type.

        Covers the deck, all influence slots and cards drawn for an
        exchange that has not been settled yet.
        """
        census: Counter = Counter(self.deck)
        for player in self.players:
            census.update(slot.card for slot in player.influence)
        if self.pending_exchange:
            census.update(self.pending_exchange.drawn)
        return census

    def with_player(self, player: PlayerState) -> GameState:
        """Return new state with updated player."""
        new_players = [
            player if p.player_id == player.player_id else p
            for p in self.players
        ]
        return self._copy_with(players=new_players)

    def with_log(self, *messages: str) -> GameState:
        """Return new state with messages appended to the game log."""
        return self._copy_with(log=self.log.append(*messages))

    def clear_phases(self) -> GameState:
        return self._copy_with(
            pending_response=None,
            pending_exchange=None,
            pending_reveal=None,
        )

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)

"""
Action Catalog - Static rules table for actions and blocks.

One row per action and one per block type. The reducer, the action
generator and the bots all read rules from here instead of comparing
action names.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .cards import CardType


TOTAL_COINS = 50
STARTING_COINS = 2
INFLUENCE_PER_PLAYER = 2
COUP_COST = 7
ASSASSINATE_COST = 3
MUST_COUP_THRESHOLD = 10


class ActionType(Enum):
    """Turn actions a player may declare."""
    INCOME = "Income"
    FOREIGN_AID = "Foreign Aid"
    COUP = "Coup"
    TAX = "Tax"
    ASSASSINATE = "Assassinate"
    STEAL = "Steal"
    EXCHANGE = "Exchange"

    def __str__(self) -> str:
        return self.value


class Response(Enum):
    """Answers available to a responder during a response phase."""
    ALLOW = "Allow"
    CHALLENGE = "Challenge"
    BLOCK_FOREIGN_AID = "Block Foreign Aid"
    BLOCK_STEALING = "Block Stealing"
    BLOCK_ASSASSINATION = "Block Assassination"

    @property
    def is_block(self) -> bool:
        return self in BLOCK_CATALOG

    def __str__(self) -> str:
        return self.value


# A claim is either a declared action or a block.
Claim = Union[ActionType, Response]


@dataclass(frozen=True)
class ActionDefinition:
    """One row of the action table."""
    action: ActionType
    cost: int = 0
    claimed_card: CardType | None = None
    needs_target: bool = False
    block: Response | None = None
    target_only_block: bool = False
    description: str = ""

    @property
    def challengeable(self) -> bool:
        return self.claimed_card is not None

    @property
    def opens_response_phase(self) -> bool:
        """Income and Coup resolve immediately; everything else can be answered."""
        return self.challengeable or self.block is not None


@dataclass(frozen=True)
class BlockDefinition:
    """One row of the block table."""
    block: Response
    counters: ActionType
    cards: tuple[CardType, ...]
    description: str = ""


ACTION_CATALOG: dict[ActionType, ActionDefinition] = {
    ActionType.INCOME: ActionDefinition(
        action=ActionType.INCOME,
        description="Take 1 coin from the treasury.",
    ),
    ActionType.FOREIGN_AID: ActionDefinition(
        action=ActionType.FOREIGN_AID,
        block=Response.BLOCK_FOREIGN_AID,
        description="Take 2 coins from the treasury. Blockable by Duke.",
    ),
    ActionType.COUP: ActionDefinition(
        action=ActionType.COUP,
        cost=COUP_COST,
        needs_target=True,
        description="Pay 7 coins; target loses one influence.",
    ),
    ActionType.TAX: ActionDefinition(
        action=ActionType.TAX,
        claimed_card=CardType.DUKE,
        description="Claim Duke; take 3 coins from the treasury.",
    ),
    ActionType.ASSASSINATE: ActionDefinition(
        action=ActionType.ASSASSINATE,
        cost=ASSASSINATE_COST,
        claimed_card=CardType.ASSASSIN,
        needs_target=True,
        block=Response.BLOCK_ASSASSINATION,
        target_only_block=True,
        description="Claim Assassin; pay 3 coins; target loses one influence. Blockable by Contessa.",
    ),
    ActionType.STEAL: ActionDefinition(
        action=ActionType.STEAL,
        claimed_card=CardType.CAPTAIN,
        needs_target=True,
        block=Response.BLOCK_STEALING,
        target_only_block=True,
        description="Claim Captain; take up to 2 coins from the target. Blockable by Captain or Ambassador.",
    ),
    ActionType.EXCHANGE: ActionDefinition(
        action=ActionType.EXCHANGE,
        claimed_card=CardType.AMBASSADOR,
        description="Claim Ambassador; draw 2 cards, keep as many as you hold, return the rest.",
    ),
}


BLOCK_CATALOG: dict[Response, BlockDefinition] = {
    Response.BLOCK_FOREIGN_AID: BlockDefinition(
        block=Response.BLOCK_FOREIGN_AID,
        counters=ActionType.FOREIGN_AID,
        cards=(CardType.DUKE,),
        description="Claim Duke to stop Foreign Aid.",
    ),
    Response.BLOCK_STEALING: BlockDefinition(
        block=Response.BLOCK_STEALING,
        counters=ActionType.STEAL,
        cards=(CardType.CAPTAIN, CardType.AMBASSADOR),
        description="Claim Captain or Ambassador to stop a steal.",
    ),
    Response.BLOCK_ASSASSINATION: BlockDefinition(
        block=Response.BLOCK_ASSASSINATION,
        counters=ActionType.ASSASSINATE,
        cards=(CardType.CONTESSA,),
        description="Claim Contessa to stop an assassination.",
    ),
}


# Payout taken from the treasury on success (capped by what the treasury holds).
PAYOUTS: dict[ActionType, int] = {
    ActionType.INCOME: 1,
    ActionType.FOREIGN_AID: 2,
    ActionType.TAX: 3,
}

STEAL_AMOUNT = 2


def get_action_definition(action: ActionType) -> ActionDefinition:
    return ACTION_CATALOG[action]


def block_for_action(action: ActionType) -> Response | None:
    """Block variant that counters an action, if any."""
    return ACTION_CATALOG[action].block


def action_for_block(block: Response) -> ActionType:
    """The action a block counters."""
    definition = BLOCK_CATALOG.get(block)
    if definition is None:
        raise ValueError(f"{block} is not a block")
    return definition.counters


def cards_for_claim(claim: Claim) -> tuple[CardType, ...]:
    """
    Cards that prove a claim, in the order they are checked.

    Non-claim actions (Income, Foreign Aid, Coup) return ().
    """
    if isinstance(claim, ActionType):
        card = ACTION_CATALOG[claim].claimed_card
        return (card,) if card is not None else ()
    definition = BLOCK_CATALOG.get(claim)
    return definition.cards if definition else ()


def is_challengeable(claim: Claim) -> bool:
    return bool(cards_for_claim(claim))


def parse_action(value: str | ActionType) -> ActionType:
    """Parse an action name such as 'Foreign Aid' or 'foreign_aid'."""
    if isinstance(value, ActionType):
        return value
    normalized = str(value).strip().lower().replace("_", " ")
    for action in ActionType:
        if action.value.lower() == normalized:
            return action
    raise ValueError(f"Unknown action: {value}")


def parse_response(value: str | Response) -> Response:
    """Parse a response name such as 'Challenge' or 'Block Stealing'."""
    if isinstance(value, Response):
        return value
    normalized = str(value).strip().lower().replace("_", " ")
    for response in Response:
        if response.value.lower() == normalized:
            return response
    raise ValueError(f"Unknown response: {value}")

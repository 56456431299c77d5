"""
Cards - Character types and the court deck.

The court deck holds 3 copies of each of the 5 characters.
Deck operations are pure: they take a card list and return new lists,
never mutating their input.

The draw end of the deck is the end of the list.
"""

from __future__ import annotations
from enum import Enum
import random


class CardType(Enum):
    """The five court characters."""
    DUKE = "Duke"
    ASSASSIN = "Assassin"
    CAPTAIN = "Captain"
    AMBASSADOR = "Ambassador"
    CONTESSA = "Contessa"

    def __str__(self) -> str:
        return self.value


COPIES_PER_CARD = 3
DECK_SIZE = COPIES_PER_CARD * len(CardType)


def build_deck() -> list[CardType]:
    """Create an unshuffled court deck."""
    return [card for card in CardType for _ in range(COPIES_PER_CARD)]


def shuffle(cards: list[CardType], rng: random.Random) -> list[CardType]:
    """Return a uniformly shuffled copy of cards."""
    shuffled = list(cards)
    rng.shuffle(shuffled)
    return shuffled


def draw(deck: list[CardType]) -> tuple[CardType | None, list[CardType]]:
    """
    Draw the top card.

    Returns (card, remaining deck). An empty deck yields (None, []).
    """
    if not deck:
        return None, []
    return deck[-1], deck[:-1]


def return_and_shuffle(
    deck: list[CardType],
    cards: list[CardType] | CardType,
    rng: random.Random,
) -> list[CardType]:
    """Put card(s) back into the deck and reshuffle the whole deck."""
    if isinstance(cards, CardType):
        cards = [cards]
    return shuffle(list(deck) + list(cards), rng)


def parse_card(value: str | CardType) -> CardType:
    """
    Parse a card name (case-insensitive) into a CardType.

    Raises ValueError for unknown names.
    """
    if isinstance(value, CardType):
        return value
    for card in CardType:
        if card.value.lower() == str(value).strip().lower():
            return card
    raise ValueError(f"Unknown card: {value}")

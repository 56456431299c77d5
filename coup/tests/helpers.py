"""
Snapshot builders and invariant checks shared by the tests.
"""

from collections import Counter

from ..engine_core.cards import CardType, COPIES_PER_CARD, DECK_SIZE, build_deck
from ..engine_core.catalog import TOTAL_COINS
from ..engine_core.game_log import GameLog
from ..engine_core.state import GameState, GamePhase, InfluenceSlot, PlayerState


def make_player(player_id, name, cards, money=2, revealed=(), automated=False):
    """Player with the given cards; indexes in revealed start face up."""
    return PlayerState(
        player_id=player_id,
        name=name,
        is_automated=automated,
        money=money,
        influence=[
            InfluenceSlot(card=card, revealed=index in revealed)
            for index, card in enumerate(cards)
        ],
    )


def remaining_deck(players):
    """The court deck minus every dealt card, sorted by name (Dukes drawn first)."""
    deck = Counter(build_deck())
    for player in players:
        deck.subtract(slot.card for slot in player.influence)
    return sorted(deck.elements(), key=lambda card: card.value)


def make_state(players, current=0, deck=None, treasury=None, game_id="test_game"):
    """In-play snapshot; by default the deck and treasury complete the census."""
    if deck is None:
        deck = remaining_deck(players)
    if treasury is None:
        treasury = TOTAL_COINS - sum(p.money for p in players)
    return GameState(
        game_id=game_id,
        phase=GamePhase.PLAYING,
        turn_number=1,
        current_player_idx=current,
        players=players,
        deck=deck,
        treasury=treasury,
        log=GameLog().append("Game started!"),
    )


def assert_invariants(state):
    """Coin and card conservation, derived elimination, one phase at a time."""
    assert state.total_coins() == TOTAL_COINS

    census = state.card_census()
    assert sum(census.values()) == DECK_SIZE
    assert all(census[card] == COPIES_PER_CARD for card in CardType)

    for player in state.players:
        assert len(player.influence) == 2
        assert player.is_eliminated == all(slot.revealed for slot in player.influence)

    open_phases = [
        phase
        for phase in (state.pending_response, state.pending_exchange, state.pending_reveal)
        if phase is not None
    ]
    assert len(open_phases) <= 1

    if state.is_over:
        assert state.winner is not None and not state.winner.is_eliminated
        assert len(state.active_players) == 1
    else:
        assert not state.current_player.is_eliminated
        if state.pending_response:
            for player_id in state.pending_response.eligible:
                assert not state.get_player(player_id).is_eliminated

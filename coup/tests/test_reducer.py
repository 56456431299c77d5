"""
Tests for the reducer (state transitions).

Tests:
- Declarations and immediate effects
- Response collection, challenges and blocks
- Forced reveals, elimination and winning
- Exchange
- Validation and rejection
"""

from collections import Counter

import pytest

from ..engine_core.cards import CardType
from ..engine_core.catalog import ActionType, Response
from ..engine_core.command import Command, CommandPayload, CommandType
from ..engine_core.errors import ErrorCode
from ..engine_core.reducer import apply_command
from ..engine_core.state import MAX_COMMAND_HISTORY, GamePhase, InteractionStage
from .helpers import assert_invariants, make_player, make_state


def apply_all(reducer, state, *commands):
    """Apply commands in order, failing the test on any rejection."""
    for command in commands:
        result = reducer.apply(state, command)
        assert result.success, result.error
        state = result.new_state
        assert_invariants(state)
    return state


class TestImmediateActions:
    """Income and Coup resolve without a response phase."""

    def test_income(self, reducer, two_player_state):
        """Income takes one coin from the treasury and passes the turn."""
        state = apply_all(reducer, two_player_state, Command.declare("p1", ActionType.INCOME))

        assert state.get_player("p1").money == 3
        assert state.treasury == two_player_state.treasury - 1
        assert state.current_player.player_id == "p2"
        assert state.turn_number == 2
        assert state.log.last == "--- Bob's turn ---"

    def test_coup_scenario(self, reducer):
        """Coup on a two-card target: one reveal, 7 coins paid, turn passes."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA], money=7)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        state = make_state([alice, bob])
        treasury = state.treasury

        state = apply_all(reducer, state, Command.declare("p1", ActionType.COUP, "p2"))
        assert state.pending_response is None
        assert state.pending_reveal.player_id == "p2"
        assert state.get_player("p1").money == 0
        assert state.treasury == treasury + 7

        state = apply_all(reducer, state, Command.reveal("p2", CardType.ASSASSIN))
        bob = state.get_player("p2")
        assert bob.unrevealed_cards == [CardType.CAPTAIN]
        assert bob.revealed_cards == [CardType.ASSASSIN]
        assert state.current_player.player_id == "p2"

    def test_coup_on_last_influence_reveals_at_once(self, reducer):
        """A one-card target has no choice, so no reveal phase opens."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA], money=7)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        carol = make_player("p3", "Carol", [CardType.DUKE, CardType.CAPTAIN], revealed=(0,))
        state = make_state([alice, bob, carol])

        state = apply_all(reducer, state, Command.declare("p1", ActionType.COUP, "p3"))

        assert state.pending_reveal is None
        assert state.get_player("p3").is_eliminated
        assert "Carol has been eliminated!" in list(state.log)
        assert state.current_player.player_id == "p2"

    def test_turn_skips_eliminated_players(self, reducer):
        """The next turn goes to the next player still in the game."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA])
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN], revealed=(0, 1))
        carol = make_player("p3", "Carol", [CardType.AMBASSADOR, CardType.CAPTAIN])
        state = make_state([alice, bob, carol])

        state = apply_all(reducer, state, Command.declare("p1", ActionType.INCOME))

        assert state.current_player.player_id == "p3"

    def test_turn_wraps_around(self, reducer, two_player_state):
        """After the last seat the turn returns to the first."""
        state = two_player_state._copy_with(current_player_idx=1)
        state = apply_all(reducer, state, Command.declare("p2", ActionType.INCOME))
        assert state.current_player.player_id == "p1"


class TestResponsePhase:
    """Claims wait for every eligible responder."""

    def test_claim_opens_response_phase(self, reducer, three_player_state):
        """Tax lists every other active player as eligible."""
        state = apply_all(reducer, three_player_state, Command.declare("p1", ActionType.TAX))

        pending = state.pending_response
        assert pending.claimant_id == "p1"
        assert pending.claim == ActionType.TAX
        assert pending.stage == InteractionStage.ACTION
        assert pending.eligible == ["p2", "p3"]
        assert state.get_player("p1").money == 2

    def test_eliminated_players_are_not_eligible(self, reducer):
        """Eliminated players never join a response phase."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA])
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN], revealed=(0, 1))
        carol = make_player("p3", "Carol", [CardType.AMBASSADOR, CardType.CAPTAIN])
        state = make_state([alice, bob, carol])

        state = apply_all(reducer, state, Command.declare("p1", ActionType.TAX))

        assert state.pending_response.eligible == ["p3"]

    def test_all_allow_applies_effect(self, reducer, three_player_state):
        """The effect waits for the last Allow."""
        state = apply_all(
            reducer,
            three_player_state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.ALLOW),
        )
        assert state.pending_response.pending_responders == ["p3"]
        assert state.get_player("p1").money == 2

        state = apply_all(reducer, state, Command.respond("p3", Response.ALLOW))
        assert state.pending_response is None
        assert state.get_player("p1").money == 5
        assert state.current_player.player_id == "p2"

    def test_assassinate_cost_is_paid_on_declaration(self, reducer):
        """The 3 coins are gone even if the assassination is blocked."""
        alice = make_player("p1", "Alice", [CardType.ASSASSIN, CardType.DUKE], money=3)
        bob = make_player("p2", "Bob", [CardType.CONTESSA, CardType.CAPTAIN])
        state = make_state([alice, bob])

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.ASSASSINATE, "p2"),
            Command.respond("p2", Response.BLOCK_ASSASSINATION),
            Command.respond("p1", Response.ALLOW),
        )

        assert state.get_player("p1").money == 0
        assert state.get_player("p2").influence_count == 2
        assert state.current_player.player_id == "p2"

    @pytest.mark.parametrize("target_money,taken", [(0, 0), (1, 1), (5, 2)])
    def test_steal_takes_up_to_two(self, reducer, target_money, taken):
        """Steal moves min(2, target's money)."""
        alice = make_player("p1", "Alice", [CardType.CAPTAIN, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.CONTESSA, CardType.ASSASSIN], money=target_money)
        state = make_state([alice, bob])

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.STEAL, "p2"),
            Command.respond("p2", Response.ALLOW),
        )

        assert state.get_player("p1").money == 2 + taken
        assert state.get_player("p2").money == target_money - taken

    def test_treasury_short_pays_remainder(self, reducer):
        """A payout never exceeds what the treasury holds."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA], money=9)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN], money=40)
        state = make_state([alice, bob])
        assert state.treasury == 1

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.ALLOW),
        )

        assert state.get_player("p1").money == 10
        assert state.treasury == 0
        assert any("treasury is short" in line for line in state.log)

    def test_empty_treasury_income(self, reducer):
        """Income from an empty treasury pays nothing and still ends the turn."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA], money=8)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN], money=42)
        state = make_state([alice, bob])

        state = apply_all(reducer, state, Command.declare("p1", ActionType.INCOME))

        assert state.get_player("p1").money == 8
        assert state.current_player.player_id == "p2"


class TestChallenges:
    """Challenge adjudication."""

    def test_failed_challenge_on_tax(self, reducer, two_player_state):
        """Alice proves Duke: Bob loses influence, Duke is replaced, Tax pays."""
        census = two_player_state.card_census()
        state = apply_all(
            reducer,
            two_player_state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.CHALLENGE),
        )

        assert state.pending_reveal.player_id == "p2"
        assert state.get_player("p1").money == 2
        assert "Alice shuffles Duke back into the deck and draws a replacement." in list(state.log)
        assert len(state.deck) == len(two_player_state.deck)

        state = apply_all(reducer, state, Command.reveal("p2", CardType.CAPTAIN))

        assert state.get_player("p1").money == 5
        assert state.get_player("p1").influence_count == 2
        assert state.get_player("p2").influence_count == 1
        assert state.card_census() == census
        assert state.current_player.player_id == "p2"

    def test_successful_challenge_cancels_claim(self, reducer, two_player_state):
        """Bob bluffs Tax, gets caught, loses influence and no coins."""
        state = two_player_state._copy_with(current_player_idx=1)
        state = apply_all(
            reducer,
            state,
            Command.declare("p2", ActionType.TAX),
            Command.respond("p1", Response.CHALLENGE),
        )

        assert state.pending_reveal.player_id == "p2"
        assert state.pending_reveal.resume is None
        assert "Bob's Tax is cancelled." in list(state.log)

        state = apply_all(reducer, state, Command.reveal("p2", CardType.ASSASSIN))

        assert state.get_player("p2").money == 2
        assert state.get_player("p2").influence_count == 1
        assert state.current_player.player_id == "p1"

    def test_challenger_eliminated_ends_game_before_effect(self, reducer):
        """Losing a challenge with the last card ends the game; the claim never pays."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA])
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN], revealed=(1,))
        state = make_state([alice, bob])

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.CHALLENGE),
        )

        assert state.is_over
        assert state.winner_id == "p1"
        assert state.get_player("p1").money == 2

    def test_first_challenge_wins(self, reducer, three_player_state):
        """Once Bob challenges, Carol is no longer asked."""
        state = apply_all(
            reducer,
            three_player_state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.CHALLENGE),
        )

        assert state.pending_response is None
        result = reducer.apply(state, Command.respond("p3", Response.CHALLENGE))
        assert not result.success
        assert result.error_code == ErrorCode.WRONG_PHASE.value

    def test_proven_claim_with_empty_deck(self, reducer):
        """With no deck the proven card goes back and is drawn again; nothing fails."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA])
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        state = make_state([alice, bob], deck=[])
        census = state.card_census()

        state = apply_all_loose(
            reducer,
            state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.CHALLENGE),
        )

        assert state.deck == []
        assert state.get_player("p1").unrevealed_cards == [CardType.DUKE, CardType.CONTESSA]
        assert state.pending_reveal.player_id == "p2"
        assert state.card_census() == census


def apply_all_loose(reducer, state, *commands):
    """Like apply_all, without the full-deck invariants."""
    for command in commands:
        result = reducer.apply(state, command)
        assert result.success, result.error
        state = result.new_state
    return state


class TestBlocks:
    """Blocks open a second response phase for the actor."""

    def test_foreign_aid_blocked(self, reducer, two_player_state):
        """An unchallenged Duke block cancels Foreign Aid."""
        state = apply_all(
            reducer,
            two_player_state,
            Command.declare("p1", ActionType.FOREIGN_AID),
            Command.respond("p2", Response.BLOCK_FOREIGN_AID),
        )

        pending = state.pending_response
        assert pending.stage == InteractionStage.BLOCK
        assert pending.claimant_id == "p2"
        assert pending.claim == Response.BLOCK_FOREIGN_AID
        assert pending.eligible == ["p1"]

        state = apply_all(reducer, state, Command.respond("p1", Response.ALLOW))

        assert state.get_player("p1").money == 2
        assert state.treasury == two_player_state.treasury
        assert state.current_player.player_id == "p2"

    def test_any_player_may_block_foreign_aid(self, reducer, three_player_state):
        """Foreign Aid blocks are not limited to a target."""
        state = apply_all(
            reducer,
            three_player_state,
            Command.declare("p1", ActionType.FOREIGN_AID),
            Command.respond("p2", Response.ALLOW),
            Command.respond("p3", Response.BLOCK_FOREIGN_AID),
        )
        assert state.pending_response.claimant_id == "p3"

    def test_bluffed_block_caught(self, reducer, two_player_state):
        """Bob blocks without Duke, is challenged, and Foreign Aid goes ahead."""
        state = apply_all(
            reducer,
            two_player_state,
            Command.declare("p1", ActionType.FOREIGN_AID),
            Command.respond("p2", Response.BLOCK_FOREIGN_AID),
            Command.respond("p1", Response.CHALLENGE),
        )

        assert state.pending_reveal.player_id == "p2"
        assert state.pending_reveal.resume.action == ActionType.FOREIGN_AID

        state = apply_all(reducer, state, Command.reveal("p2", CardType.CAPTAIN))

        assert state.get_player("p1").money == 4
        assert state.get_player("p2").influence_count == 1
        assert state.current_player.player_id == "p2"

    def test_proven_block_with_alternate_card(self, reducer):
        """Ambassador proves Block Stealing; the thief loses influence and coins stay put."""
        alice = make_player("p1", "Alice", [CardType.CAPTAIN, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.AMBASSADOR, CardType.CONTESSA])
        state = make_state([alice, bob])

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.STEAL, "p2"),
            Command.respond("p2", Response.BLOCK_STEALING),
            Command.respond("p1", Response.CHALLENGE),
        )

        assert state.pending_reveal.player_id == "p1"
        assert state.pending_reveal.resume is None
        assert "Bob's block holds. Alice's Steal is cancelled." in list(state.log)
        assert "Bob shuffles Ambassador back into the deck and draws a replacement." in list(state.log)

        state = apply_all(reducer, state, Command.reveal("p1", CardType.DUKE))

        assert state.get_player("p1").money == 2
        assert state.get_player("p2").money == 2
        assert state.get_player("p1").influence_count == 1
        assert state.current_player.player_id == "p2"

    def test_assassination_can_cost_two_influence(self, reducer):
        """A caught Contessa bluff and the assassination each cost one card."""
        alice = make_player("p1", "Alice", [CardType.ASSASSIN, CardType.DUKE], money=3)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.DUKE])
        state = make_state([alice, bob])

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.ASSASSINATE, "p2"),
            Command.respond("p2", Response.BLOCK_ASSASSINATION),
            Command.respond("p1", Response.CHALLENGE),
            Command.reveal("p2", CardType.CAPTAIN),
        )

        assert state.get_player("p2").is_eliminated
        assert state.is_over
        assert state.winner_id == "p1"
        assert state.phase == GamePhase.GAME_OVER


class TestRevealsAndWinning:
    """Forced reveals, elimination and the end of the game."""

    def test_assassinating_last_influence_wins(self, reducer):
        """The target allows, reveals the last card and the assassin wins."""
        alice = make_player("p1", "Alice", [CardType.ASSASSIN, CardType.DUKE], money=3)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.DUKE], revealed=(0,))
        state = make_state([alice, bob])

        state = apply_all(
            reducer,
            state,
            Command.declare("p1", ActionType.ASSASSINATE, "p2"),
            Command.respond("p2", Response.ALLOW),
        )

        assert state.get_player("p2").is_eliminated
        assert state.winner_id == "p1"
        assert not state.has_pending_phase
        assert state.log.last == "Alice has won the game!"

    def test_no_transitions_after_game_over(self, reducer):
        """A finished game rejects every command."""
        alice = make_player("p1", "Alice", [CardType.ASSASSIN, CardType.DUKE], money=3)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.DUKE], revealed=(0,))
        state = apply_all(
            reducer,
            make_state([alice, bob]),
            Command.declare("p1", ActionType.ASSASSINATE, "p2"),
            Command.respond("p2", Response.ALLOW),
        )

        result = reducer.apply(state, Command.declare("p1", ActionType.INCOME))

        assert not result.success
        assert result.error_code == ErrorCode.GAME_OVER.value
        assert result.new_state.winner_id == "p1"

    def test_reveal_of_unheld_card_reveals_first_hidden(self, reducer):
        """Naming a card the player does not hold reveals their first hidden card."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA], money=7)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        state = apply_all(
            reducer,
            make_state([alice, bob]),
            Command.declare("p1", ActionType.COUP, "p2"),
            Command.reveal("p2", CardType.DUKE),
        )

        assert state.get_player("p2").revealed_cards == [CardType.CAPTAIN]

    def test_only_the_pending_player_reveals(self, reducer):
        """Another player's reveal is rejected."""
        alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA], money=7)
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        state = apply_all(
            reducer,
            make_state([alice, bob]),
            Command.declare("p1", ActionType.COUP, "p2"),
        )

        result = reducer.apply(state, Command.reveal("p1", CardType.DUKE))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_ELIGIBLE.value


class TestExchange:
    """Exchange draws two and keeps as many as the player holds."""

    @pytest.fixture
    def exchange_state(self):
        alice = make_player("p1", "Alice", [CardType.AMBASSADOR, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        return make_state([alice, bob])

    def test_exchange_offers_pool(self, reducer, exchange_state):
        """The pool is the hidden cards plus up to two drawn cards."""
        state = apply_all(
            reducer,
            exchange_state,
            Command.declare("p1", ActionType.EXCHANGE),
            Command.respond("p2", Response.ALLOW),
        )

        pending = state.pending_exchange
        assert pending.player_id == "p1"
        assert pending.drawn == [CardType.DUKE, CardType.DUKE]
        assert Counter(pending.pool) == Counter(
            [CardType.AMBASSADOR, CardType.DUKE, CardType.DUKE, CardType.DUKE]
        )
        assert pending.keep_count == 2
        assert len(state.deck) == len(exchange_state.deck) - 2

    def test_exchange_selection(self, reducer, exchange_state):
        """Kept cards fill the hidden slots; the rest go back to the deck."""
        state = apply_all(
            reducer,
            exchange_state,
            Command.declare("p1", ActionType.EXCHANGE),
            Command.respond("p2", Response.ALLOW),
            Command.select_exchange("p1", [CardType.DUKE, CardType.DUKE]),
        )

        alice = state.get_player("p1")
        assert alice.unrevealed_cards == [CardType.DUKE, CardType.DUKE]
        assert alice.influence_count == 2
        assert len(state.deck) == len(exchange_state.deck)
        assert state.pending_exchange is None
        assert state.current_player.player_id == "p2"

    def test_exchange_keeps_revealed_slot(self, reducer):
        """With one card left, one card is kept and the revealed slot is untouched."""
        alice = make_player("p1", "Alice", [CardType.AMBASSADOR, CardType.CONTESSA], revealed=(1,))
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        state = apply_all(
            reducer,
            make_state([alice, bob]),
            Command.declare("p1", ActionType.EXCHANGE),
            Command.respond("p2", Response.ALLOW),
        )
        assert state.pending_exchange.keep_count == 1

        state = apply_all(reducer, state, Command.select_exchange("p1", [CardType.DUKE]))

        alice = state.get_player("p1")
        assert alice.unrevealed_cards == [CardType.DUKE]
        assert alice.revealed_cards == [CardType.CONTESSA]

    @pytest.mark.parametrize("cards", [
        [CardType.DUKE],
        [CardType.DUKE, CardType.DUKE, CardType.DUKE],
        [CardType.CONTESSA, CardType.DUKE],
        [CardType.AMBASSADOR, CardType.AMBASSADOR],
    ])
    def test_invalid_selection_rejected(self, reducer, exchange_state, cards):
        """Wrong count or cards outside the pool are rejected."""
        state = apply_all(
            reducer,
            exchange_state,
            Command.declare("p1", ActionType.EXCHANGE),
            Command.respond("p2", Response.ALLOW),
        )

        result = reducer.apply(state, Command.select_exchange("p1", cards))

        assert not result.success
        assert result.error_code == ErrorCode.INVALID_SELECTION.value
        assert result.new_state.pending_exchange == state.pending_exchange

    def test_exchange_with_empty_deck(self, reducer):
        """Nothing to draw: the exchange is a no-op and the turn ends."""
        alice = make_player("p1", "Alice", [CardType.AMBASSADOR, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
        state = apply_all_loose(
            reducer,
            make_state([alice, bob], deck=[]),
            Command.declare("p1", ActionType.EXCHANGE),
            Command.respond("p2", Response.ALLOW),
        )

        assert state.pending_exchange is None
        assert state.get_player("p1").unrevealed_cards == [CardType.AMBASSADOR, CardType.DUKE]
        assert state.current_player.player_id == "p2"


class TestRejections:
    """Illegal calls leave the snapshot unchanged apart from one log line."""

    def assert_rejected(self, reducer, state, command, code):
        result = reducer.apply(state, command)

        assert not result.success
        assert result.error_code == code.value
        new_state = result.new_state
        assert new_state.log.total == state.log.total + 1
        assert new_state.log.last.startswith("Rejected:")
        assert new_state.players == state.players
        assert new_state.deck == state.deck
        assert new_state.treasury == state.treasury
        assert new_state.active_phase == state.active_phase
        assert new_state.current_player_idx == state.current_player_idx
        return result

    def test_not_your_turn(self, reducer, two_player_state):
        """Only the current player may declare."""
        self.assert_rejected(
            reducer, two_player_state, Command.declare("p2", ActionType.INCOME), ErrorCode.NOT_YOUR_TURN
        )

    def test_must_coup(self, reducer, two_player_state):
        """Ten coins leaves Coup as the only action."""
        state = two_player_state.with_player(two_player_state.get_player("p1").with_money(10))
        state = state._copy_with(treasury=state.treasury - 8)
        self.assert_rejected(reducer, state, Command.declare("p1", ActionType.INCOME), ErrorCode.MUST_COUP)

    def test_insufficient_funds(self, reducer, two_player_state):
        """Coup needs 7 coins."""
        self.assert_rejected(
            reducer,
            two_player_state,
            Command.declare("p1", ActionType.COUP, "p2"),
            ErrorCode.INSUFFICIENT_FUNDS,
        )

    @pytest.mark.parametrize("target", [None, "p1", "ghost"])
    def test_invalid_target(self, reducer, two_player_state, target):
        """Missing, self or unknown targets are rejected."""
        self.assert_rejected(
            reducer,
            two_player_state,
            Command.declare("p1", ActionType.STEAL, target),
            ErrorCode.INVALID_TARGET,
        )

    def test_eliminated_target(self, reducer):
        """Eliminated players cannot be targeted."""
        alice = make_player("p1", "Alice", [CardType.CAPTAIN, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.CONTESSA, CardType.ASSASSIN], revealed=(0, 1))
        carol = make_player("p3", "Carol", [CardType.AMBASSADOR, CardType.CAPTAIN])
        state = make_state([alice, bob, carol])
        self.assert_rejected(
            reducer, state, Command.declare("p1", ActionType.STEAL, "p2"), ErrorCode.INVALID_TARGET
        )

    def test_eliminated_player_cannot_act(self, reducer):
        """Commands from an eliminated player are rejected."""
        alice = make_player("p1", "Alice", [CardType.CAPTAIN, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.CONTESSA, CardType.ASSASSIN], revealed=(0, 1))
        carol = make_player("p3", "Carol", [CardType.AMBASSADOR, CardType.CAPTAIN])
        state = make_state([alice, bob, carol])
        self.assert_rejected(
            reducer, state, Command.declare("p2", ActionType.INCOME), ErrorCode.PLAYER_ELIMINATED
        )

    def test_unknown_player(self, reducer, two_player_state):
        self.assert_rejected(
            reducer, two_player_state, Command.declare("ghost", ActionType.INCOME), ErrorCode.UNKNOWN_PLAYER
        )

    def test_missing_action(self, reducer, two_player_state):
        """A declaration without an action is structurally invalid."""
        command = Command(CommandType.DECLARE_ACTION, CommandPayload(player_id="p1"))
        self.assert_rejected(reducer, two_player_state, command, ErrorCode.UNKNOWN_COMMAND)

    def test_setup_phase(self, reducer, two_player_state):
        state = two_player_state._copy_with(phase=GamePhase.SETUP)
        self.assert_rejected(reducer, state, Command.declare("p1", ActionType.INCOME), ErrorCode.WRONG_PHASE)

    def test_declare_during_response_phase(self, reducer, two_player_state):
        """No new declaration while a claim is open."""
        state = apply_all(reducer, two_player_state, Command.declare("p1", ActionType.TAX))
        self.assert_rejected(reducer, state, Command.declare("p1", ActionType.INCOME), ErrorCode.PHASE_ACTIVE)

    def test_claimant_cannot_respond(self, reducer, two_player_state):
        state = apply_all(reducer, two_player_state, Command.declare("p1", ActionType.TAX))
        self.assert_rejected(reducer, state, Command.respond("p1", Response.ALLOW), ErrorCode.NOT_ELIGIBLE)

    def test_already_responded(self, reducer, three_player_state):
        state = apply_all(
            reducer,
            three_player_state,
            Command.declare("p1", ActionType.TAX),
            Command.respond("p2", Response.ALLOW),
        )
        self.assert_rejected(reducer, state, Command.respond("p2", Response.ALLOW), ErrorCode.ALREADY_RESPONDED)

    def test_foreign_aid_not_challengeable(self, reducer, two_player_state):
        state = apply_all(reducer, two_player_state, Command.declare("p1", ActionType.FOREIGN_AID))
        self.assert_rejected(reducer, state, Command.respond("p2", Response.CHALLENGE), ErrorCode.INVALID_RESPONSE)

    def test_block_must_match_action(self, reducer, two_player_state):
        state = apply_all(reducer, two_player_state, Command.declare("p1", ActionType.FOREIGN_AID))
        self.assert_rejected(
            reducer, state, Command.respond("p2", Response.BLOCK_STEALING), ErrorCode.INVALID_RESPONSE
        )

    def test_only_target_blocks_steal(self, reducer):
        """Carol cannot block a steal aimed at Bob."""
        alice = make_player("p1", "Alice", [CardType.CAPTAIN, CardType.DUKE])
        bob = make_player("p2", "Bob", [CardType.CONTESSA, CardType.ASSASSIN])
        carol = make_player("p3", "Carol", [CardType.AMBASSADOR, CardType.CAPTAIN])
        state = apply_all(
            reducer,
            make_state([alice, bob, carol]),
            Command.declare("p1", ActionType.STEAL, "p2"),
        )
        self.assert_rejected(
            reducer, state, Command.respond("p3", Response.BLOCK_STEALING), ErrorCode.INVALID_RESPONSE
        )

    def test_block_cannot_be_blocked(self, reducer, two_player_state):
        state = apply_all(
            reducer,
            two_player_state,
            Command.declare("p1", ActionType.FOREIGN_AID),
            Command.respond("p2", Response.BLOCK_FOREIGN_AID),
        )
        self.assert_rejected(
            reducer, state, Command.respond("p1", Response.BLOCK_FOREIGN_AID), ErrorCode.INVALID_RESPONSE
        )

    @pytest.mark.parametrize("command", [
        Command.respond("p2", Response.ALLOW),
        Command.select_exchange("p1", [CardType.DUKE, CardType.CONTESSA]),
        Command.reveal("p1"),
    ])
    def test_no_open_phase(self, reducer, two_player_state, command):
        """Phase commands need their phase to be open."""
        self.assert_rejected(reducer, two_player_state, command, ErrorCode.WRONG_PHASE)


class TestPurity:
    """The reducer never mutates its input."""

    def test_input_snapshot_unchanged(self, reducer, two_player_state):
        """Every transition leaves the snapshot it was given untouched."""
        before = two_player_state.clone()

        result = reducer.apply(two_player_state, Command.declare("p1", ActionType.TAX))
        assert two_player_state == before

        pending = result.new_state
        pending_before = pending.clone()
        reducer.apply(pending, Command.respond("p2", Response.CHALLENGE))
        assert pending == pending_before

    def test_rejection_does_not_touch_input(self, reducer, two_player_state):
        before = two_player_state.clone()
        reducer.apply(two_player_state, Command.declare("p2", ActionType.INCOME))
        assert two_player_state == before

    def test_history_and_changes(self, reducer, two_player_state):
        """Accepted commands are recorded; state_changes lists the new log lines."""
        command = Command.declare("p1", ActionType.INCOME)
        result = reducer.apply(two_player_state, command)

        assert result.new_state.command_history == [command]
        assert result.state_changes == [
            "Alice declares Income.",
            "Alice takes 1 coin(s) with Income.",
            "--- Bob's turn ---",
        ]

    def test_history_is_bounded(self, reducer, two_player_state):
        """Only the newest commands are kept; the oldest drops off."""
        older = [Command.declare("p2", ActionType.TAX)] + [
            Command.declare("p2", ActionType.INCOME)
        ] * (MAX_COMMAND_HISTORY - 1)
        state = two_player_state._copy_with(command_history=older)
        command = Command.declare("p1", ActionType.INCOME)

        history = reducer.apply(state, command).new_state.command_history

        assert len(history) == MAX_COMMAND_HISTORY
        assert history[-1] == command
        assert Command.declare("p2", ActionType.TAX) not in history
        assert state.command_history == older

    def test_apply_command_convenience(self, two_player_state):
        result = apply_command(two_player_state, Command.declare("p1", ActionType.INCOME))
        assert result.success

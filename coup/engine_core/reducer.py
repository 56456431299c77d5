"""
Reducer - Applies commands to game state.

The reducer is the single point of state mutation.
All state changes must go through Reducer.apply().

Design principles:
- Pure function: (state, command) -> new_state; the input is never mutated
- Validates before applying
- Returns CommandResult with success/failure
- A rejected command yields the input plus one diagnostic log line

A turn episode runs: declare -> response phase (allow / challenge /
block) -> adjudication -> effect -> mandatory reveals -> turn advance.
Any step that needs a player's input parks the snapshot in a transient
phase (pending response, exchange or reveal) and returns.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
import logging
import random

from .cards import CardType, draw, return_and_shuffle
from .catalog import (
    ActionType,
    Response,
    PAYOUTS,
    STEAL_AMOUNT,
    MUST_COUP_THRESHOLD,
    cards_for_claim,
    get_action_definition,
    is_challengeable,
)
from .command import Command, CommandType, CommandResult
from .errors import ErrorCode, IllegalCallError
from .state import (
    MAX_COMMAND_HISTORY,
    GameState,
    GamePhase,
    InfluenceSlot,
    InteractionStage,
    PendingAction,
    PendingExchange,
    PendingResponse,
    PendingReveal,
    PlayerState,
)

logger = logging.getLogger(__name__)

EXCHANGE_DRAW = 2


@dataclass
class Reducer:
    """
    Reducer applies commands to game state.

    Stateless apart from the random source used for deck shuffles.
    """
    rng: random.Random = field(default_factory=random.Random)

    def apply(self, state: GameState, command: Command) -> CommandResult:
        """
        Apply a command to the game state.

        Returns CommandResult with the new state or an error. The
        result always carries a usable snapshot.
        """
        validation_error = self._validate_command(state, command)
        if validation_error:
            message, code = validation_error
            return self._reject(state, command, message, code)

        handler = self._get_handler(command.command_type)
        if not handler:
            return self._reject(
                state,
                command,
                f"No handler for command type: {command.command_type}",
                ErrorCode.UNKNOWN_COMMAND,
            )

        try:
            new_state = handler(state, command)
        except IllegalCallError as e:
            return self._reject(state, command, str(e), e.code)

        new_state = self._settle_if_idle(new_state)
        new_state = new_state._copy_with(
            command_history=(state.command_history + [command])[-MAX_COMMAND_HISTORY:],
        )
        logger.debug("applied %s", command.describe())
        return CommandResult.success_with_state(
            new_state,
            changes=new_state.log.since(state.log.total),
        )

    def _reject(
        self,
        state: GameState,
        command: Command,
        message: str,
        code: ErrorCode,
    ) -> CommandResult:
        logger.info("rejected %s: %s", command.describe(), message)
        return CommandResult.failure(
            message,
            error_code=code.value,
            state=state.with_log(f"Rejected: {message}"),
        )

    def _validate_command(
        self, state: GameState, command: Command
    ) -> tuple[str, ErrorCode] | None:
        """
        Checks shared by every command.

        Returns (message, code) if invalid, None if valid.
        """
        if state.phase == GamePhase.GAME_OVER:
            return "Game is over - no actions allowed", ErrorCode.GAME_OVER

        if state.phase == GamePhase.SETUP:
            return "Game not started", ErrorCode.WRONG_PHASE

        player = state.get_player(command.player_id)
        if player is None:
            return f"Player {command.player_id} not found", ErrorCode.UNKNOWN_PLAYER

        if player.is_eliminated:
            return f"{player.name} is eliminated", ErrorCode.PLAYER_ELIMINATED

        return None

    def _get_handler(self, command_type: CommandType):
        """Get the handler function for a command type."""
        handlers = {
            CommandType.DECLARE_ACTION: self._handle_declare,
            CommandType.SUBMIT_RESPONSE: self._handle_response,
            CommandType.SELECT_EXCHANGE: self._handle_exchange_selection,
            CommandType.FORCED_REVEAL: self._handle_forced_reveal,
        }
        return handlers.get(command_type)

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def _handle_declare(self, state: GameState, command: Command) -> GameState:
        """Handle a turn action declaration."""
        payload = command.payload
        player = state.get_player(payload.player_id)

        if state.has_pending_phase:
            raise IllegalCallError(
                "Cannot declare an action while another decision is pending",
                ErrorCode.PHASE_ACTIVE,
            )
        if player.player_id != state.current_player.player_id:
            raise IllegalCallError(f"Not {player.name}'s turn", ErrorCode.NOT_YOUR_TURN)
        if payload.action is None:
            raise IllegalCallError("No action given", ErrorCode.UNKNOWN_COMMAND)

        action = payload.action
        definition = get_action_definition(action)

        if player.money >= MUST_COUP_THRESHOLD and action != ActionType.COUP:
            raise IllegalCallError(
                f"{player.name} has {player.money} coins and must Coup",
                ErrorCode.MUST_COUP,
            )
        if player.money < definition.cost:
            raise IllegalCallError(
                f"{action} costs {definition.cost} coins; {player.name} has {player.money}",
                ErrorCode.INSUFFICIENT_FUNDS,
            )

        target = None
        if definition.needs_target:
            target = self._validate_target(state, player, payload.target_id, action)

        message = f"{player.name} declares {action}"
        if target:
            message += f" targeting {target.name}"
        if definition.cost:
            message += f" (pays {definition.cost} coins)"
        state = state.with_log(message + ".")

        if definition.cost:
            state = self._pay(state, player.player_id, definition.cost)

        pending = PendingAction(
            actor_id=player.player_id,
            action=action,
            target_id=target.player_id if target else None,
        )

        if not definition.opens_response_phase:
            return self._apply_effect(state, pending)

        eligible = [p.player_id for p in state.opponents_of(player.player_id)]
        if not eligible:
            return self._apply_effect(state, pending)

        return state._copy_with(
            pending_response=PendingResponse(
                claimant_id=player.player_id,
                claim=action,
                pending_action=pending,
                stage=InteractionStage.ACTION,
                eligible=eligible,
            )
        )

    def _validate_target(
        self,
        state: GameState,
        player: PlayerState,
        target_id: str | None,
        action: ActionType,
    ) -> PlayerState:
        if not target_id:
            raise IllegalCallError(f"{action} needs a target", ErrorCode.INVALID_TARGET)
        target = state.get_player(target_id)
        if target is None:
            raise IllegalCallError(f"Target {target_id} not found", ErrorCode.INVALID_TARGET)
        if target.player_id == player.player_id:
            raise IllegalCallError(f"{player.name} cannot target themselves", ErrorCode.INVALID_TARGET)
        if target.is_eliminated:
            raise IllegalCallError(f"{target.name} is already eliminated", ErrorCode.INVALID_TARGET)
        return target

    # ------------------------------------------------------------------
    # Response collection
    # ------------------------------------------------------------------

    def _handle_response(self, state: GameState, command: Command) -> GameState:
        """Handle Allow / Challenge / Block from an eligible responder."""
        pending = state.pending_response
        responder = state.get_player(command.player_id)
        response = command.payload.response

        if pending is None:
            raise IllegalCallError("No claim is awaiting responses", ErrorCode.WRONG_PHASE)
        if responder.player_id not in pending.eligible:
            raise IllegalCallError(
                f"{responder.name} cannot respond to this claim", ErrorCode.NOT_ELIGIBLE
            )
        if responder.player_id in pending.responded:
            raise IllegalCallError(
                f"{responder.name} has already responded", ErrorCode.ALREADY_RESPONDED
            )
        if response is None:
            raise IllegalCallError("No response given", ErrorCode.INVALID_RESPONSE)

        self._check_response_allowed(pending, responder, response)

        pending = pending.with_response(responder.player_id, response)
        state = state._copy_with(pending_response=pending)

        if response == Response.CHALLENGE:
            return self._resolve_challenge(state, pending, responder)
        if response.is_block:
            return self._open_block(state, pending, responder, response)

        state = state.with_log(f"{responder.name} allows {pending.claim}.")
        if pending.pending_responders:
            return state

        # Everyone allowed
        state = state._copy_with(pending_response=None)
        action = pending.pending_action
        actor = state.get_player(action.actor_id)
        if pending.stage == InteractionStage.ACTION:
            return self._apply_effect(state, action)

        blocker = state.get_player(pending.claimant_id)
        state = state.with_log(
            f"{blocker.name}'s block stands. {actor.name}'s {action.action} is cancelled."
        )
        return state

    def _check_response_allowed(
        self,
        pending: PendingResponse,
        responder: PlayerState,
        response: Response,
    ) -> None:
        if response == Response.ALLOW:
            return

        if response == Response.CHALLENGE:
            if not is_challengeable(pending.claim):
                raise IllegalCallError(
                    f"{pending.claim} cannot be challenged", ErrorCode.INVALID_RESPONSE
                )
            return

        if pending.stage == InteractionStage.BLOCK:
            raise IllegalCallError("A block cannot be blocked", ErrorCode.INVALID_RESPONSE)

        action = pending.pending_action
        definition = get_action_definition(action.action)
        if definition.block != response:
            raise IllegalCallError(
                f"{response} does not counter {action.action}", ErrorCode.INVALID_RESPONSE
            )
        if definition.target_only_block and responder.player_id != action.target_id:
            raise IllegalCallError(
                f"Only the target can block {action.action}", ErrorCode.INVALID_RESPONSE
            )

    def _open_block(
        self,
        state: GameState,
        pending: PendingResponse,
        blocker: PlayerState,
        block: Response,
    ) -> GameState:
        """A block opens a new response phase where only the actor may answer."""
        action = pending.pending_action
        claimed = " or ".join(str(card) for card in cards_for_claim(block))
        state = state.with_log(f"{blocker.name} blocks with {block} (claims {claimed}).")
        return state._copy_with(
            pending_response=PendingResponse(
                claimant_id=blocker.player_id,
                claim=block,
                pending_action=action,
                stage=InteractionStage.BLOCK,
                eligible=[action.actor_id],
            )
        )

    # ------------------------------------------------------------------
    # Challenge adjudication
    # ------------------------------------------------------------------

    def _resolve_challenge(
        self,
        state: GameState,
        pending: PendingResponse,
        challenger: PlayerState,
    ) -> GameState:
        """
        Resolve a challenge against the pending claim.

        The first challenge is the only one acted on. A proven claim
        costs the challenger one influence; a bluff costs the claimant one.
        """
        claimant = state.get_player(pending.claimant_id)
        action = pending.pending_action
        actor = state.get_player(action.actor_id)
        cards = cards_for_claim(pending.claim)
        is_block = pending.stage == InteractionStage.BLOCK

        state = state._copy_with(pending_response=None).with_log(
            f"{challenger.name} challenges {claimant.name}'s {pending.claim}."
        )

        index = claimant.find_unrevealed(cards)
        if index is not None:
            state = self._prove_claim(state, claimant, index)
            if is_block:
                state = state.with_log(
                    f"{claimant.name}'s block holds. {actor.name}'s {action.action} is cancelled."
                )
                resume = None
            else:
                resume = action
            state = state.with_log(f"{challenger.name} loses the challenge.")
            return self._begin_reveal(
                state, challenger.player_id, reason="lost a challenge", resume=resume
            )

        claimed = " or ".join(str(card) for card in cards)
        state = state.with_log(f"{claimant.name} cannot show {claimed} and loses the challenge.")
        if is_block:
            state = state.with_log(
                f"{claimant.name}'s block fails. {actor.name}'s {action.action} goes ahead."
            )
            resume = action
        else:
            state = state.with_log(f"{claimant.name}'s {action.action} is cancelled.")
            resume = None
        return self._begin_reveal(
            state, claimant.player_id, reason="was caught bluffing", resume=resume
        )

    def _prove_claim(self, state: GameState, claimant: PlayerState, index: int) -> GameState:
        """Show the card, shuffle it back and draw a replacement into the same slot."""
        card = claimant.influence[index].card
        state = state.with_log(f"{claimant.name} reveals {card} to prove the claim.")

        deck = return_and_shuffle(state.deck, card, self.rng)
        replacement, deck = draw(deck)
        if replacement is None:
            return state.with_log(f"{claimant.name} keeps {card}; there is no card to draw.")

        claimant = claimant.with_slot(index, InfluenceSlot(card=replacement))
        state = state.with_player(claimant)._copy_with(deck=deck)
        return state.with_log(
            f"{claimant.name} shuffles {card} back into the deck and draws a replacement."
        )

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def _apply_effect(self, state: GameState, pending: PendingAction) -> GameState:
        """Apply an action's effect. May open an exchange or reveal phase."""
        actor = state.get_player(pending.actor_id)
        target = state.get_player(pending.target_id)
        action = pending.action

        if actor is None or actor.is_eliminated:
            return state.with_log(f"{action} has no effect.")

        if action in PAYOUTS:
            return self._pay_out(state, actor, PAYOUTS[action], action)

        if action in (ActionType.COUP, ActionType.ASSASSINATE):
            if target.is_eliminated:
                return state.with_log(f"{target.name} is already eliminated; {action} has no effect.")
            state = state.with_log(f"{actor.name}'s {action} against {target.name} succeeds.")
            return self._begin_reveal(state, target.player_id, reason=f"{action} by {actor.name}")

        if action == ActionType.STEAL:
            if target.is_eliminated:
                return state.with_log(f"{target.name} is already eliminated; {action} has no effect.")
            amount = min(STEAL_AMOUNT, target.money)
            state = state.with_player(target.with_money(target.money - amount))
            state = state.with_player(actor.with_money(actor.money + amount))
            return state.with_log(f"{actor.name} steals {amount} coin(s) from {target.name}.")

        if action == ActionType.EXCHANGE:
            return self._begin_exchange(state, actor)

        raise IllegalCallError(f"Unhandled action: {action}", ErrorCode.UNKNOWN_COMMAND)

    def _pay(self, state: GameState, player_id: str, amount: int) -> GameState:
        """Move coins from a player to the treasury."""
        player = state.get_player(player_id)
        state = state.with_player(player.with_money(player.money - amount))
        return state._copy_with(treasury=state.treasury + amount)

    def _pay_out(
        self,
        state: GameState,
        player: PlayerState,
        amount: int,
        action: ActionType,
    ) -> GameState:
        """Move up to amount coins from the treasury to a player."""
        paid = min(amount, state.treasury)
        state = state.with_player(player.with_money(player.money + paid))
        state = state._copy_with(treasury=state.treasury - paid)
        message = f"{player.name} takes {paid} coin(s) with {action}."
        if paid < amount:
            message += " The treasury is short."
        return state.with_log(message)

    # ------------------------------------------------------------------
    # Exchange
    # ------------------------------------------------------------------

    def _begin_exchange(self, state: GameState, player: PlayerState) -> GameState:
        deck = state.deck
        drawn: list[CardType] = []
        for _ in range(EXCHANGE_DRAW):
            card, deck = draw(deck)
            if card is None:
                break
            drawn.append(card)

        if not drawn:
            return state.with_log(f"The deck is empty; {player.name} has nothing to exchange.")

        state = state._copy_with(
            deck=deck,
            pending_exchange=PendingExchange(
                player_id=player.player_id,
                pool=player.unrevealed_cards + drawn,
                drawn=drawn,
                keep_count=player.influence_count,
            ),
        )
        return state.with_log(f"{player.name} draws {len(drawn)} card(s) to exchange.")

    def _handle_exchange_selection(self, state: GameState, command: Command) -> GameState:
        """Handle the cards a player keeps after an exchange."""
        pending = state.pending_exchange
        player = state.get_player(command.player_id)
        selection = list(command.payload.cards or [])

        if pending is None:
            raise IllegalCallError("No exchange is pending", ErrorCode.WRONG_PHASE)
        if pending.player_id != player.player_id:
            raise IllegalCallError(f"{player.name} is not exchanging", ErrorCode.NOT_ELIGIBLE)
        if len(selection) != pending.keep_count:
            raise IllegalCallError(
                f"Must keep exactly {pending.keep_count} card(s), got {len(selection)}",
                ErrorCode.INVALID_SELECTION,
            )

        offered = Counter(pending.pool)
        chosen = Counter(selection)
        if any(chosen[card] > offered[card] for card in chosen):
            raise IllegalCallError(
                "Selection is not part of the offered cards", ErrorCode.INVALID_SELECTION
            )

        returned = list((offered - chosen).elements())
        kept = iter(selection)
        for index, slot in enumerate(player.influence):
            if not slot.revealed:
                player = player.with_slot(index, InfluenceSlot(card=next(kept)))

        state = state.with_player(player)._copy_with(
            deck=return_and_shuffle(state.deck, returned, self.rng),
            pending_exchange=None,
        )
        state = state.with_log(
            f"{player.name} completes the exchange and returns {len(returned)} card(s) to the deck."
        )
        return state

    # ------------------------------------------------------------------
    # Reveals and elimination
    # ------------------------------------------------------------------

    def _begin_reveal(
        self,
        state: GameState,
        player_id: str,
        reason: str = "",
        resume: PendingAction | None = None,
    ) -> GameState:
        """
        Make a player lose one influence.

        A player with a single card left has no choice, so the reveal
        happens at once. Otherwise a reveal phase waits for their pick.
        """
        player = state.get_player(player_id)
        if player.is_eliminated:
            return self._after_reveal(state, resume)

        if player.influence_count == 1:
            state = self._reveal(state, player_id)
            return self._after_reveal(state, resume)

        state = state._copy_with(
            pending_reveal=PendingReveal(player_id=player_id, reason=reason, resume=resume)
        )
        return state.with_log(f"{player.name} must reveal an influence card.")

    def _handle_forced_reveal(self, state: GameState, command: Command) -> GameState:
        """Handle a player's choice of which influence to reveal."""
        pending = state.pending_reveal
        player = state.get_player(command.player_id)

        if pending is None:
            raise IllegalCallError("No reveal is pending", ErrorCode.WRONG_PHASE)
        if pending.player_id != player.player_id:
            raise IllegalCallError(f"{player.name} does not have to reveal", ErrorCode.NOT_ELIGIBLE)

        state = state._copy_with(pending_reveal=None)
        state = self._reveal(state, player.player_id, command.payload.card)
        return self._after_reveal(state, pending.resume)

    def _reveal(
        self,
        state: GameState,
        player_id: str,
        card: CardType | None = None,
    ) -> GameState:
        """Reveal the chosen card if still hidden, else the first hidden one."""
        player = state.get_player(player_id)
        index = player.find_unrevealed((card,)) if card is not None else None
        if index is None:
            index = next(i for i, slot in enumerate(player.influence) if not slot.revealed)

        slot = player.influence[index]
        player = player.with_slot(index, slot.reveal())
        state = state.with_player(player).with_log(f"{player.name} reveals {slot.card}.")
        if player.is_eliminated:
            state = state.with_log(f"{player.name} has been eliminated!")
        return self._check_winner(state)

    def _after_reveal(self, state: GameState, resume: PendingAction | None) -> GameState:
        if state.is_over:
            return state
        if resume is not None:
            return self._apply_effect(state, resume)
        return state

    # ------------------------------------------------------------------
    # Turn advancement
    # ------------------------------------------------------------------

    def _check_winner(self, state: GameState) -> GameState:
        """End the game when exactly one player is left standing."""
        if state.is_over:
            return state
        active = state.active_players
        if len(active) != 1:
            return state
        winner = active[0]
        logger.info("game %s won by %s", state.game_id, winner.player_id)
        state = state.clear_phases()._copy_with(
            phase=GamePhase.GAME_OVER,
            winner_id=winner.player_id,
        )
        return state.with_log(f"{winner.name} has won the game!")

    def _settle_if_idle(self, state: GameState) -> GameState:
        """Advance the turn once nothing is left pending. Runs once per applied command."""
        if state.is_over or state.has_pending_phase:
            return state
        state = self._check_winner(state)
        if state.is_over:
            return state
        return self._advance_turn(state)

    def _advance_turn(self, state: GameState) -> GameState:
        """Pass the turn to the next non-eliminated player in seating order."""
        count = state.num_players
        next_idx = state.current_player_idx
        for step in range(1, count + 1):
            candidate = (state.current_player_idx + step) % count
            if not state.players[candidate].is_eliminated:
                next_idx = candidate
                break

        next_player = state.players[next_idx]
        state = state._copy_with(
            current_player_idx=next_idx,
            turn_number=state.turn_number + 1,
        )
        return state.with_log(f"--- {next_player.name}'s turn ---")


def apply_command(
    state: GameState,
    command: Command,
    rng: random.Random | None = None,
) -> CommandResult:
    """
    Convenience function to apply a command.

    Creates a Reducer and applies the command.
    """
    reducer = Reducer(rng=rng or random.Random())
    return reducer.apply(state, command)

"""
Action Generator - Generates all legal commands from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. UIs to show available actions
3. Validation (is this command in the legal set?)

Design: Generates Command objects, not just action types.
This ensures all generated commands are fully specified.
"""

from __future__ import annotations
from dataclasses import dataclass
from itertools import combinations

from .catalog import (
    ActionType,
    Response,
    MUST_COUP_THRESHOLD,
    get_action_definition,
    is_challengeable,
)
from .command import Command, CommandType
from .state import GameState, InteractionStage


def available_actions(state: GameState, player_id: str) -> list[ActionType]:
    """
    Actions a player may declare right now, in catalog order.

    Empty unless it is the player's turn with nothing pending.
    """
    if state.is_over or state.has_pending_phase:
        return []
    player = state.get_player(player_id)
    if player is None or player.is_eliminated:
        return []
    if state.current_player.player_id != player_id:
        return []

    has_opponents = bool(state.opponents_of(player_id))
    if player.money >= MUST_COUP_THRESHOLD and has_opponents:
        return [ActionType.COUP]

    actions = []
    for action in ActionType:
        definition = get_action_definition(action)
        if definition.cost > player.money:
            continue
        if definition.needs_target and not has_opponents:
            continue
        actions.append(action)
    return actions


def awaiting_players(state: GameState) -> list[str]:
    """Players whose input the snapshot is waiting for, in seating order."""
    if state.is_over:
        return []
    if state.pending_reveal:
        return [state.pending_reveal.player_id]
    if state.pending_exchange:
        return [state.pending_exchange.player_id]
    if state.pending_response:
        return state.pending_response.pending_responders
    return [state.current_player.player_id]


@dataclass
class ActionGenerator:
    """
    Generates legal commands for the current game state.

    Uses the action catalog to determine what is available
    and validates preconditions.
    """

    def generate(self, state: GameState) -> list[Command]:
        """Generate legal commands for every player the snapshot is waiting on."""
        commands: list[Command] = []
        for player_id in awaiting_players(state):
            commands.extend(self.generate_for_player(state, player_id))
        return commands

    def generate_for_player(self, state: GameState, player_id: str) -> list[Command]:
        """Generate legal commands for one player."""
        if state.is_over:
            return []
        if state.pending_reveal:
            return self.reveals(state, player_id)
        if state.pending_exchange:
            return self.exchange_selections(state, player_id)
        if state.pending_response:
            return [Command.respond(player_id, r) for r in self.responses(state, player_id)]
        return self.declarations(state, player_id)

    def declarations(self, state: GameState, player_id: str) -> list[Command]:
        """One command per available action and legal target."""
        commands = []
        opponents = state.opponents_of(player_id)
        for action in available_actions(state, player_id):
            if get_action_definition(action).needs_target:
                commands.extend(
                    Command.declare(player_id, action, target.player_id)
                    for target in opponents
                )
            else:
                commands.append(Command.declare(player_id, action))
        return commands

    def responses(self, state: GameState, player_id: str) -> list[Response]:
        """Responses a player may give to the pending claim."""
        pending = state.pending_response
        if pending is None or player_id not in pending.pending_responders:
            return []

        options = [Response.ALLOW]
        if is_challengeable(pending.claim):
            options.append(Response.CHALLENGE)

        if pending.stage == InteractionStage.ACTION:
            action = pending.pending_action
            definition = get_action_definition(action.action)
            if definition.block is not None:
                if not definition.target_only_block or action.target_id == player_id:
                    options.append(definition.block)
        return options

    def exchange_selections(self, state: GameState, player_id: str) -> list[Command]:
        """Every distinct set of cards the exchanging player may keep."""
        pending = state.pending_exchange
        if pending is None or pending.player_id != player_id:
            return []
        picks = sorted(
            {tuple(sorted(combo, key=lambda c: c.value))
             for combo in combinations(pending.pool, pending.keep_count)},
            key=lambda combo: [c.value for c in combo],
        )
        return [Command.select_exchange(player_id, list(combo)) for combo in picks]

    def reveals(self, state: GameState, player_id: str) -> list[Command]:
        """One reveal command per distinct hidden card."""
        pending = state.pending_reveal
        if pending is None or pending.player_id != player_id:
            return []
        player = state.get_player(player_id)
        cards = list(dict.fromkeys(player.unrevealed_cards))
        return [Command.reveal(player_id, card) for card in cards]


def legal_actions(state: GameState, player_id: str | None = None) -> list[Command]:
    """
    Convenience function to get legal commands.

    With player_id, only that player's commands are returned.
    """
    generator = ActionGenerator()
    if player_id is None:
        return generator.generate(state)
    if player_id not in awaiting_players(state):
        return []
    return generator.generate_for_player(state, player_id)


def is_legal(state: GameState, command: Command) -> bool:
    """Check if a command is among the generated legal commands."""
    legal = legal_actions(state, command.player_id)
    for candidate in legal:
        if candidate.command_type != command.command_type:
            continue
        if command.command_type == CommandType.SELECT_EXCHANGE:
            if sorted(c.value for c in candidate.payload.cards) == sorted(
                c.value for c in command.payload.cards or []
            ):
                return True
        elif candidate.payload == command.payload:
            return True
    return False

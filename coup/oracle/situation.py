"""
Situation Builder - Turns a snapshot into oracle input.

Only public information is exposed about opponents: money, number of
hidden cards and revealed cards. The asking player also sees their
own hidden cards.
"""

from __future__ import annotations

from ..engine_core.catalog import ActionType, Response
from ..engine_core.state import GameState, InteractionStage
from .contract import DecisionKind, OpponentView, OracleSituation

RECENT_LOG_LINES = 5


def opponent_views(state: GameState, player_id: str) -> list[OpponentView]:
    """Public info for every non-eliminated opponent, in seating order."""
    return [
        OpponentView(
            player_id=p.player_id,
            name=p.name,
            money=p.money,
            influence_count=p.influence_count,
            revealed_cards=[str(c) for c in p.revealed_cards],
            is_automated=p.is_automated,
        )
        for p in state.opponents_of(player_id)
    ]


def describe_state(state: GameState, viewer_id: str | None = None) -> str:
    """Plain-text summary of the snapshot from one player's point of view."""
    lines = ["Current Game State:"]

    viewer = state.get_player(viewer_id)
    if viewer:
        hidden = ", ".join(str(c) for c in viewer.unrevealed_cards) or "None"
        shown = ", ".join(str(c) for c in viewer.revealed_cards) or "None"
        lines.append(
            f"You are {viewer.name}. Money: {viewer.money}. "
            f"Unrevealed Influence: [{hidden}]. Revealed Influence: [{shown}]."
        )

    lines.append("All Players Status:")
    for p in state.players:
        influence = ", ".join(
            f"Revealed {slot.card}" if slot.revealed else "Hidden" for slot in p.influence
        )
        status = "Eliminated" if p.is_eliminated else "Active"
        kind = "AI" if p.is_automated else "Human"
        lines.append(f"- {p.name} ({kind}) ({status}): {p.money} coins, Influence: [{influence}]")

    lines.append(f"Deck has {len(state.deck)} cards left.")
    lines.append(f"Treasury has {state.treasury} coins.")
    lines.extend(_describe_phase(state))

    recent = state.log.recent(RECENT_LOG_LINES)
    lines.append(f"Recent Action Log ({len(recent)} entries):")
    lines.extend(f"  - {entry}" for entry in recent)

    if state.winner:
        lines.append(f"{state.winner.name} has won the game.")
    else:
        lines.append(f"It is currently {state.current_player.name}'s turn.")
    return "\n".join(lines)


def _describe_phase(state: GameState) -> list[str]:
    pending = state.pending_response
    if pending:
        action = pending.pending_action
        actor = state.get_player(action.actor_id)
        target = state.get_player(action.target_id)
        claimant = state.get_player(pending.claimant_id)
        waiting = ", ".join(state.get_player(pid).name for pid in pending.pending_responders)
        answered = "; ".join(
            f"{state.get_player(r.player_id).name}: {r.response}" for r in pending.responses
        ) or "None"
        targeting = f" targeting {target.name}" if target else ""
        lines = [f"Pending Action: {actor.name} performs {action.action}{targeting}."]
        if pending.stage == InteractionStage.BLOCK:
            lines.append(f"{claimant.name} claims {pending.claim} against it.")
        lines.append(f"Waiting for responses from: {waiting}. Current responses: {answered}.")
        return lines

    if state.pending_exchange:
        player = state.get_player(state.pending_exchange.player_id)
        return [f"Pending Exchange: {player.name} is choosing cards."]

    if state.pending_reveal:
        player = state.get_player(state.pending_reveal.player_id)
        return [f"Pending Reveal: {player.name} must reveal an influence card."]

    return []


def _base_fields(state: GameState, player_id: str) -> dict:
    player = state.get_player(player_id)
    return dict(
        player_id=player.player_id,
        player_name=player.name,
        money=player.money,
        cards=[str(c) for c in player.unrevealed_cards],
        treasury=state.treasury,
        opponents=opponent_views(state, player_id),
        summary=describe_state(state, player_id),
    )


def action_situation(
    state: GameState,
    player_id: str,
    options: list[ActionType],
) -> OracleSituation:
    """Situation for choosing a turn action."""
    return OracleSituation(
        kind=DecisionKind.ACTION,
        legal_options=[str(a) for a in options],
        **_base_fields(state, player_id),
    )


def response_situation(
    state: GameState,
    player_id: str,
    kind: DecisionKind,
    response: Response,
) -> OracleSituation:
    """
    Situation for a yes/no decision on the pending claim.

    The legal options are the response itself and Allow.
    """
    pending = state.pending_response
    action = pending.pending_action
    claimant = state.get_player(pending.claimant_id)
    target = state.get_player(action.target_id)
    return OracleSituation(
        kind=kind,
        legal_options=[str(response), str(Response.ALLOW)],
        claim=str(pending.claim),
        claimant_id=claimant.player_id,
        claimant_name=claimant.name,
        claimant_money=claimant.money,
        claimant_influence_count=claimant.influence_count,
        action=str(action.action),
        target_id=target.player_id if target else None,
        target_name=target.name if target else None,
        **_base_fields(state, player_id),
    )

"""
Pydantic Schemas - Serializable views of the game snapshot.

These models define what a client (a terminal UI, a web front end, a
test harness) may see of a snapshot. Built with for_viewer(), a view
hides the unrevealed cards of every player except the viewer; built
with from_state(), it shows everything.

Error Codes:
- GAME_OVER: The game has ended; no further input is accepted
- NOT_YOUR_TURN / NOT_ELIGIBLE: The caller may not act right now
- PHASE_ACTIVE / WRONG_PHASE: The input does not match the open phase
- INSUFFICIENT_FUNDS / MUST_COUP / INVALID_TARGET: Declaration rules
- INVALID_RESPONSE / ALREADY_RESPONDED: Response rules
- INVALID_SELECTION: Exchange or reveal choice is not allowed
"""

from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field

from ..engine_core.errors import ErrorCode
from ..engine_core.state import GameState, PlayerState
from ..session.game_loop import TurnResult

__all__ = [
    "ErrorCode",
    "PlayerView",
    "PhaseView",
    "SnapshotView",
    "TurnResultView",
    "ErrorResponse",
]


# =============================================================================
# Shared Models
# =============================================================================

class PlayerView(BaseModel):
    """One player as seen by the viewer."""
    player_id: str
    name: str
    is_automated: bool
    money: int = Field(..., ge=0)
    influence_count: int = Field(..., ge=0, le=2)
    revealed_cards: list[str] = Field(default_factory=list)
    hidden_cards: Optional[list[str]] = Field(
        None, description="Unrevealed cards; only set for the viewer"
    )
    is_eliminated: bool = False
    is_current_turn: bool = False

    @classmethod
    def from_player(
        cls,
        player: PlayerState,
        show_hidden: bool,
        is_current_turn: bool = False,
    ) -> PlayerView:
        return cls(
            player_id=player.player_id,
            name=player.name,
            is_automated=player.is_automated,
            money=player.money,
            influence_count=player.influence_count,
            revealed_cards=[str(c) for c in player.revealed_cards],
            hidden_cards=[str(c) for c in player.unrevealed_cards] if show_hidden else None,
            is_eliminated=player.is_eliminated,
            is_current_turn=is_current_turn,
        )


class PhaseView(BaseModel):
    """The open transient phase."""
    kind: str = Field(description="response, exchange or reveal")
    awaiting: list[str] = Field(default_factory=list, description="Player ids whose input is due")

    # Response phase
    stage: Optional[str] = Field(None, description="action or block")
    claim: Optional[str] = None
    claimant_id: Optional[str] = None
    action: Optional[str] = None
    actor_id: Optional[str] = None
    target_id: Optional[str] = None
    responses: dict[str, str] = Field(default_factory=dict)

    # Exchange phase
    keep_count: Optional[int] = None
    offered: Optional[list[str]] = Field(None, description="Only set for the exchanging player")

    # Reveal phase
    reason: Optional[str] = None

    @classmethod
    def from_state(cls, state: GameState, viewer_id: Optional[str] = None) -> Optional[PhaseView]:
        if state.pending_response:
            pending = state.pending_response
            action = pending.pending_action
            return cls(
                kind="response",
                awaiting=pending.pending_responders,
                stage=pending.stage.value,
                claim=str(pending.claim),
                claimant_id=pending.claimant_id,
                action=str(action.action),
                actor_id=action.actor_id,
                target_id=action.target_id,
                responses={r.player_id: str(r.response) for r in pending.responses},
            )

        if state.pending_exchange:
            pending = state.pending_exchange
            sees_cards = viewer_id is None or viewer_id == pending.player_id
            return cls(
                kind="exchange",
                awaiting=[pending.player_id],
                keep_count=pending.keep_count,
                offered=[str(c) for c in pending.pool] if sees_cards else None,
            )

        if state.pending_reveal:
            pending = state.pending_reveal
            return cls(
                kind="reveal",
                awaiting=[pending.player_id],
                reason=pending.reason,
            )

        return None


# =============================================================================
# Snapshot Models
# =============================================================================

class SnapshotView(BaseModel):
    """Observable game snapshot."""
    game_id: str
    phase: str
    turn_number: int
    current_player_id: Optional[str] = None
    players: list[PlayerView] = Field(default_factory=list)
    deck_size: int = Field(..., ge=0)
    treasury: int = Field(..., ge=0)
    pending: Optional[PhaseView] = None
    winner_id: Optional[str] = None
    log: list[str] = Field(default_factory=list)
    viewer_id: Optional[str] = None

    @classmethod
    def from_state(cls, state: GameState) -> SnapshotView:
        """Full view, every card shown."""
        return cls._build(state, viewer_id=None)

    @classmethod
    def for_viewer(cls, state: GameState, viewer_id: str) -> SnapshotView:
        """View for one player: other players' hidden cards are withheld."""
        return cls._build(state, viewer_id=viewer_id)

    @classmethod
    def _build(cls, state: GameState, viewer_id: Optional[str]) -> SnapshotView:
        current = None if state.is_over else state.current_player.player_id
        return cls(
            game_id=state.game_id,
            phase=state.phase.value,
            turn_number=state.turn_number,
            current_player_id=current,
            players=[
                PlayerView.from_player(
                    p,
                    show_hidden=viewer_id is None or p.player_id == viewer_id,
                    is_current_turn=p.player_id == current,
                )
                for p in state.players
            ],
            deck_size=len(state.deck),
            treasury=state.treasury,
            pending=PhaseView.from_state(state, viewer_id),
            winner_id=state.winner_id,
            log=list(state.log),
            viewer_id=viewer_id,
        )


class TurnResultView(BaseModel):
    """Outcome of one entry-point call."""
    success: bool
    loop_state: str
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    automated_actions: list[str] = Field(default_factory=list)
    winner_id: Optional[str] = None
    snapshot: SnapshotView

    @classmethod
    def from_result(cls, result: TurnResult, viewer_id: Optional[str] = None) -> TurnResultView:
        snapshot = (
            SnapshotView.for_viewer(result.state, viewer_id)
            if viewer_id
            else SnapshotView.from_state(result.state)
        )
        return cls(
            success=result.success,
            loop_state=result.loop_state.value,
            error=result.error,
            error_code=result.error_code,
            automated_actions=result.automated_actions,
            winner_id=result.winner,
            snapshot=snapshot,
        )


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")

"""
Automated Player Driver - Plays automated seats until a human must act.

After every accepted command the driver looks for an automated player
the snapshot is waiting on, asks that player's policy for a decision
and applies it through the reducer. It stops when the game is over,
when only humans are awaited, or at the step limit.

A policy that raises, or returns a command the reducer rejects, is
replaced by the deterministic safe default so the game never stalls.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..engine_core.action_generator import ActionGenerator, awaiting_players
from ..engine_core.command import Command, CommandType
from ..engine_core.errors import CoupError
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, PlayerState
from .oracle_bot import OracleBot
from .policy import BotDecision, BotPolicy, safe_default

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 500


class DriverStuckError(CoupError):
    """Even the safe default was rejected for an automated player."""


@dataclass
class DriveResult:
    """Outcome of one driving run."""
    state: GameState
    decisions: list[str] = field(default_factory=list)
    steps: int = 0
    halted: bool = False  # Stopped at the step limit with automated input still due


def describe_choice(state: GameState, command: Command, public: bool = False) -> str:
    """
    What a command does, in game-log words.

    With public=True the kept cards of an exchange stay hidden, so the
    text can be shown to every player.
    """
    p = command.payload
    if command.command_type == CommandType.DECLARE_ACTION:
        target = state.get_player(p.target_id)
        return f"{p.action} on {target.name}" if target else str(p.action)
    if command.command_type == CommandType.SUBMIT_RESPONSE:
        return str(p.response)
    if command.command_type == CommandType.SELECT_EXCHANGE:
        if public:
            return "finishing the exchange"
        return f"keeping {', '.join(str(c) for c in p.cards or [])}"
    return f"revealing {p.card}" if p.card else "revealing a card"


class AutomatedPlayerDriver:
    """
    Drives automated players through the reducer.

    Usage:
        driver = AutomatedPlayerDriver(reducer, default_policy=OracleBot())
        result = driver.run(state)
        state = result.state
    """

    def __init__(
        self,
        reducer: Reducer | None = None,
        policies: dict[str, BotPolicy] | None = None,
        default_policy: BotPolicy | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        self.reducer = reducer or Reducer()
        self.policies = dict(policies or {})
        self.default_policy = default_policy or OracleBot()
        self.max_steps = max_steps
        self.generator = ActionGenerator()

    def policy_for(self, player_id: str) -> BotPolicy:
        return self.policies.get(player_id, self.default_policy)

    def next_automated_player(self, state: GameState) -> PlayerState | None:
        """First automated player, in seating order, whose input is awaited."""
        for player_id in awaiting_players(state):
            player = state.get_player(player_id)
            if player.is_automated:
                return player
        return None

    def run(self, state: GameState) -> DriveResult:
        """Apply automated decisions until a human must act or the game ends."""
        decisions: list[str] = []
        steps = 0

        while steps < self.max_steps:
            player = self.next_automated_player(state)
            if player is None:
                return DriveResult(state=state, decisions=decisions, steps=steps)
            state, description = self._step(state, player)
            decisions.append(description)
            steps += 1

        halted = self.next_automated_player(state) is not None
        if halted:
            logger.warning("driver stopped after %d steps in game %s", steps, state.game_id)
        return DriveResult(state=state, decisions=decisions, steps=steps, halted=halted)

    def step(self, state: GameState) -> GameState:
        """Apply one automated decision, if any automated player is awaited."""
        player = self.next_automated_player(state)
        if player is None:
            return state
        state, _ = self._step(state, player)
        return state

    def decide(self, state: GameState, player: PlayerState) -> BotDecision:
        """Ask the player's policy for a decision; fall back if it raises."""
        policy = self.policy_for(player.player_id)
        legal = self.generator.generate_for_player(state, player.player_id)
        try:
            if state.pending_reveal or state.pending_exchange:
                return policy.select_choice(state, player.player_id, legal)
            if state.pending_response:
                return policy.select_response(state, player.player_id, legal)
            return policy.select_action(state, player.player_id, legal)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.warning("policy %s failed for %s: %s", policy.get_name(), player.player_id, reason)
            return BotDecision(
                command=safe_default(state, player.player_id),
                explanation="Safe default",
                confidence=0.0,
                fallback_reason=reason,
            )

    def _step(self, state: GameState, player: PlayerState) -> tuple[GameState, str]:
        decision = self.decide(state, player)
        command = decision.command

        if decision.is_fallback:
            state = state.with_log(
                f"{player.name} falls back to {describe_choice(state, command, public=True)}: "
                f"{decision.fallback_reason}"
            )
        elif decision.rationale:
            logger.debug("%s reasoning: %s", player.player_id, decision.rationale)
            state = state.with_log(f"{player.name} reasons: {decision.rationale}")

        result = self.reducer.apply(state, command)
        if not result.success:
            logger.warning(
                "%s chose %s, which was rejected: %s",
                player.player_id, command.describe(), result.error,
            )
            state = result.new_state
            command = safe_default(state, player.player_id)
            state = state.with_log(
                f"{player.name} falls back to "
                f"{describe_choice(state, command, public=True)}: {result.error}"
            )
            result = self.reducer.apply(state, command)
            if not result.success:
                raise DriverStuckError(
                    f"Safe default {command.describe()} rejected: {result.error}"
                )

        logger.debug("%s: %s", player.player_id, command.describe())
        return result.new_state, f"{player.name}: {describe_choice(state, command, public=True)}"

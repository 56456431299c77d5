"""
Oracle Bot - Automated player backed by an advisory oracle.

Oracle output is treated as untrusted input. Every recommendation is
checked against the legal commands before use; anything malformed,
out of set, or a failed oracle call is replaced by the deterministic
safe default and the reason recorded on the decision.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..engine_core.catalog import (
    Response,
    get_action_definition,
    is_challengeable,
    parse_action,
    parse_response,
)
from ..engine_core.command import Command
from ..engine_core.state import GameState
from ..oracle.contract import (
    AdvisoryOracle,
    DecisionKind,
    OracleError,
    OracleRecommendation,
    OracleSituation,
    parse_recommendation,
)
from ..oracle.situation import action_situation, response_situation
from .heuristic_oracle import HeuristicOracle
from .policy import BotDecision, BotPolicy, least_preferred, preferred_cards, safe_default

logger = logging.getLogger(__name__)


class InvalidRecommendation(OracleError):
    """The oracle's choice or target is not legal here."""


@dataclass
class OracleBot(BotPolicy):
    """
    Bot that consults an AdvisoryOracle for actions, challenges and blocks.

    Exchange and reveal choices are made locally by card preference.

    Usage:
        bot = OracleBot(oracle=HeuristicOracle(seed=3))
        decision = bot.select_action(state, "ai-0", legal)
    """
    oracle: AdvisoryOracle = field(default_factory=HeuristicOracle)

    def get_name(self) -> str:
        return f"OracleBot({self.oracle.get_name()})"

    # ------------------------------------------------------------------
    # Turn actions
    # ------------------------------------------------------------------

    def select_action(
        self,
        state: GameState,
        player_id: str,
        legal_actions: list[Command],
    ) -> BotDecision:
        options = list(dict.fromkeys(c.payload.action for c in legal_actions))
        try:
            situation = action_situation(state, player_id, options)
            recommendation = self._consult(situation)
            command = self._action_command(situation, recommendation, legal_actions)
        except Exception as e:
            return self._fallback(state, player_id, e, len(legal_actions))

        return BotDecision(
            command=command,
            explanation=recommendation.rationale,
            rationale=recommendation.rationale,
            evaluated_actions=len(legal_actions),
            evaluation_details={"oracle": self.oracle.get_name()},
        )

    def _action_command(
        self,
        situation: OracleSituation,
        recommendation: OracleRecommendation,
        legal_actions: list[Command],
    ) -> Command:
        try:
            action = parse_action(recommendation.choice)
        except ValueError:
            raise InvalidRecommendation(f"unknown action {recommendation.choice!r}") from None

        candidates = [c for c in legal_actions if c.payload.action == action]
        if not candidates:
            raise InvalidRecommendation(f"{action} is not a legal option")

        if not get_action_definition(action).needs_target:
            return candidates[0]

        target_id = self._resolve_target(situation, recommendation.target)
        for command in candidates:
            if command.payload.target_id == target_id:
                return command
        raise InvalidRecommendation(f"{recommendation.target!r} is not a legal target for {action}")

    def _resolve_target(self, situation: OracleSituation, target: str | None) -> str:
        """Match a target given as player id or display name to a visible opponent."""
        if not target:
            raise InvalidRecommendation("no target given")
        wanted = target.strip().lower()
        for opponent in situation.opponents:
            if wanted in (opponent.player_id.lower(), opponent.name.lower()):
                return opponent.player_id
        raise InvalidRecommendation(f"{target!r} is not a visible opponent")

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def select_response(
        self,
        state: GameState,
        player_id: str,
        legal_responses: list[Command],
    ) -> BotDecision:
        """
        Challenge if the claim can be challenged and the oracle says so;
        otherwise block if a block is legal and the oracle says so;
        otherwise Allow.
        """
        legal = [c.payload.response for c in legal_responses]
        pending = state.pending_response
        allow = Command.respond(player_id, Response.ALLOW)
        rationale = ""

        try:
            if Response.CHALLENGE in legal and is_challengeable(pending.claim):
                situation = response_situation(state, player_id, DecisionKind.CHALLENGE, Response.CHALLENGE)
                recommendation = self._consult(situation)
                rationale = recommendation.rationale
                if self._says(recommendation, Response.CHALLENGE, situation):
                    return BotDecision(
                        command=Command.respond(player_id, Response.CHALLENGE),
                        explanation=recommendation.rationale,
                        rationale=recommendation.rationale,
                    )

            blocks = [r for r in legal if r.is_block]
            if blocks:
                situation = response_situation(state, player_id, DecisionKind.BLOCK, blocks[0])
                recommendation = self._consult(situation)
                rationale = recommendation.rationale
                if self._says(recommendation, blocks[0], situation):
                    return BotDecision(
                        command=Command.respond(player_id, blocks[0]),
                        explanation=recommendation.rationale,
                        rationale=recommendation.rationale,
                    )
        except Exception as e:
            return self._fallback(state, player_id, e, len(legal_responses))

        return BotDecision(command=allow, explanation="Allowing the claim", rationale=rationale)

    def _says(
        self,
        recommendation: OracleRecommendation,
        response: Response,
        situation: OracleSituation,
    ) -> bool:
        """True if the oracle picked response, False for Allow, error otherwise."""
        try:
            choice = parse_response(recommendation.choice)
        except ValueError:
            choice = None
        if choice not in (response, Response.ALLOW):
            raise InvalidRecommendation(f"{recommendation.choice!r} is not one of {situation.legal_options}")
        return choice == response

    # ------------------------------------------------------------------
    # Exchange and reveal
    # ------------------------------------------------------------------

    def select_choice(
        self,
        state: GameState,
        player_id: str,
        legal_choices: list[Command],
    ) -> BotDecision:
        if state.pending_exchange:
            pending = state.pending_exchange
            keep = preferred_cards(pending.pool, pending.keep_count)
            return BotDecision(
                command=Command.select_exchange(player_id, keep),
                explanation=f"Keeping {', '.join(str(c) for c in keep)}",
            )

        player = state.get_player(player_id)
        card = least_preferred(player.unrevealed_cards)
        return BotDecision(
            command=Command.reveal(player_id, card),
            explanation=f"Giving up {card}",
        )

    # ------------------------------------------------------------------
    # Oracle boundary
    # ------------------------------------------------------------------

    def _consult(self, situation: OracleSituation) -> OracleRecommendation:
        raw = self.oracle.advise(situation)
        if raw is None:
            raise OracleError("oracle returned nothing")
        return parse_recommendation(raw)

    def _fallback(
        self,
        state: GameState,
        player_id: str,
        error: Exception,
        evaluated: int,
    ) -> BotDecision:
        command = safe_default(state, player_id)
        reason = str(error) or type(error).__name__
        logger.warning(
            "oracle %s failed for %s (%s); using %s",
            self.oracle.get_name(), player_id, reason, command.describe(),
        )
        return BotDecision(
            command=command,
            explanation="Safe default",
            confidence=0.0,
            fallback_reason=reason,
            evaluated_actions=evaluated,
        )

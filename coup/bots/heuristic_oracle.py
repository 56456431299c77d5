"""
Heuristic Oracle - A local, rule-based advisory oracle.

Scores each option from what the situation tells it (its own hidden
cards, opponents' public info, the table's revealed cards) and a
Personality. It needs no external service, so it is the default
oracle for automated players and for simulations.
"""

from __future__ import annotations
import random

from ..engine_core.cards import CardType, COPIES_PER_CARD
from ..engine_core.catalog import (
    ActionType,
    PAYOUTS,
    Response,
    cards_for_claim,
    get_action_definition,
    parse_action,
    parse_response,
)
from ..oracle.contract import (
    AdvisoryOracle,
    DecisionKind,
    OpponentView,
    OracleRecommendation,
    OracleSituation,
)
from .personality import Personality, BALANCED


# Base scores for honest play, roughly the odds the action pays off.
BASE_SCORES: dict[ActionType, float] = {
    ActionType.INCOME: 40.0,
    ActionType.FOREIGN_AID: 60.0,
    ActionType.COUP: 70.0,
    ActionType.TAX: 90.0,
    ActionType.ASSASSINATE: 75.0,
    ActionType.STEAL: 80.0,
    ActionType.EXCHANGE: 55.0,
}

BLUFF_SCORES: dict[ActionType, float] = {
    ActionType.TAX: 55.0,
    ActionType.ASSASSINATE: 45.0,
    ActionType.STEAL: 50.0,
    ActionType.EXCHANGE: 35.0,
}


class HeuristicOracle(AdvisoryOracle):
    """
    Rule-based oracle.

    Usage:
        oracle = HeuristicOracle(personality=PERSONALITIES["aggressive"], seed=7)
        recommendation = oracle.advise(situation)
    """

    def __init__(
        self,
        personality: Personality = BALANCED,
        seed: int | None = None,
        rng: random.Random | None = None,
    ):
        self.personality = personality
        self.rng = rng or random.Random(seed)

    def get_name(self) -> str:
        return f"HeuristicOracle({self.personality.name})"

    def advise(self, situation: OracleSituation) -> OracleRecommendation:
        if situation.kind == DecisionKind.ACTION:
            return self._advise_action(situation)
        if situation.kind == DecisionKind.CHALLENGE:
            return self._advise_challenge(situation)
        return self._advise_block(situation)

    # ------------------------------------------------------------------
    # Turn actions
    # ------------------------------------------------------------------

    def _advise_action(self, situation: OracleSituation) -> OracleRecommendation:
        options = [parse_action(o) for o in situation.legal_options]

        if options == [ActionType.COUP]:
            target = self._attack_target(situation.opponents)
            return OracleRecommendation(
                choice=str(ActionType.COUP),
                target=target.player_id if target else None,
                rationale=f"Holding {situation.money} coins forces a Coup.",
            )

        scores = {action: self._score_action(action, situation) for action in options}
        best = max(scores, key=scores.get)

        target = None
        if get_action_definition(best).needs_target:
            if best == ActionType.STEAL:
                target = self._steal_target(situation.opponents)
            else:
                target = self._attack_target(situation.opponents)

        rationale = f"Choosing {best}"
        if target:
            rationale += f" against {target.name}"
        return OracleRecommendation(
            choice=str(best),
            target=target.player_id if target else None,
            rationale=rationale + ".",
        )

    def _score_action(self, action: ActionType, situation: OracleSituation) -> float:
        opponents = situation.opponents
        vulnerable = any(o.influence_count == 1 for o in opponents)

        if self._is_bluff(action, situation):
            score = BLUFF_SCORES.get(action, 0.0) * (0.5 + self.personality.bluff_rate)
        else:
            score = BASE_SCORES[action]

        if action in PAYOUTS and situation.treasury is not None and situation.treasury < PAYOUTS[action]:
            score *= situation.treasury / PAYOUTS[action]
        if action == ActionType.FOREIGN_AID and self._table_shows(CardType.DUKE, situation):
            score -= 15.0
        if action == ActionType.STEAL:
            richest = self._steal_target(opponents)
            if richest is None or richest.money == 0:
                return 0.0
            if richest.money > situation.money:
                score += 10.0
        if action in (ActionType.COUP, ActionType.ASSASSINATE) and vulnerable:
            score += 20.0 * (0.5 + self.personality.aggression)

        score *= self.personality.preference(str(action))
        jitter = self.personality.randomness * 100.0
        if jitter:
            score += self.rng.uniform(-jitter, jitter)
        return score

    def _is_bluff(self, action: ActionType, situation: OracleSituation) -> bool:
        card = get_action_definition(action).claimed_card
        return card is not None and str(card) not in situation.cards

    def _attack_target(self, opponents: list[OpponentView]) -> OpponentView | None:
        """Finish off a one-card opponent first, else the strongest."""
        if not opponents:
            return None
        vulnerable = [o for o in opponents if o.influence_count == 1]
        if vulnerable:
            return max(vulnerable, key=lambda o: o.money)
        return max(opponents, key=lambda o: (o.influence_count, o.money))

    def _steal_target(self, opponents: list[OpponentView]) -> OpponentView | None:
        if not opponents:
            return None
        return max(opponents, key=lambda o: o.money)

    # ------------------------------------------------------------------
    # Challenges and blocks
    # ------------------------------------------------------------------

    def _advise_challenge(self, situation: OracleSituation) -> OracleRecommendation:
        claim = self._parse_claim(situation.claim)
        cards = cards_for_claim(claim) if claim else ()
        my_influence = len(situation.cards)

        # Every copy accounted for: the claim cannot be true.
        if cards and all(self._accounted_for(card, situation) >= COPIES_PER_CARD for card in cards):
            return self._say(Response.CHALLENGE, f"Doubting the {situation.claim} claim.")

        targeted_by_assassin = (
            situation.claim == str(ActionType.ASSASSINATE)
            and situation.target_id == situation.player_id
        )
        if targeted_by_assassin and my_influence == 1:
            if str(CardType.CONTESSA) in situation.cards:
                return self._say(Response.ALLOW, f"Letting the {situation.claim} claim stand.")
            return self._say(Response.CHALLENGE, f"Doubting the {situation.claim} claim.")

        probability = self.personality.challenge_rate
        if situation.claimant_influence_count == 1:
            probability += 0.15
        if my_influence == 1:
            probability -= 0.1
        known = sum(self._accounted_for(card, situation) for card in cards)
        probability += 0.1 * known

        if self.rng.random() < probability:
            return self._say(Response.CHALLENGE, f"Doubting the {situation.claim} claim.")
        return self._say(Response.ALLOW, f"Letting the {situation.claim} claim stand.")

    def _advise_block(self, situation: OracleSituation) -> OracleRecommendation:
        block = parse_response(situation.legal_options[0])
        block_cards = [str(card) for card in cards_for_claim(block)]

        held = [card for card in block_cards if card in situation.cards]
        if held:
            return self._say(block, "Blocking the action.")

        if block == Response.BLOCK_ASSASSINATION and len(situation.cards) == 1:
            # Losing the last card either way; a bluffed Contessa may survive.
            return self._say(block, "Blocking the action.")

        if len(situation.cards) > 1 and self.rng.random() < self.personality.block_bluff_rate:
            return self._say(block, "Blocking the action.")
        return self._say(Response.ALLOW, "Letting the action through.")

    def _parse_claim(self, claim: str | None) -> ActionType | Response | None:
        if not claim:
            return None
        try:
            return parse_action(claim)
        except ValueError:
            return parse_response(claim)

    def _accounted_for(self, card: CardType, situation: OracleSituation) -> int:
        """Copies of card this player can see: own hand plus revealed cards."""
        return situation.cards.count(str(card)) + self._table_shows(card, situation)

    def _table_shows(self, card: CardType, situation: OracleSituation) -> int:
        return sum(o.revealed_cards.count(str(card)) for o in situation.opponents)

    def _say(self, response: Response, rationale: str) -> OracleRecommendation:
        return OracleRecommendation(choice=str(response), rationale=rationale)

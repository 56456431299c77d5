"""
Oracle module - The advisory decision boundary for automated players.

Provides:
- OracleSituation / OracleRecommendation: the structured contract
- AdvisoryOracle: interface any decision service implements
- CallableOracle: adapter for plain callables (e.g. an LLM client)
- Situation builders and the textual state summary
"""

from .contract import (
    AdvisoryOracle,
    CallableOracle,
    DecisionKind,
    OpponentView,
    OracleError,
    OracleRecommendation,
    OracleSituation,
    parse_recommendation,
)
from .situation import action_situation, describe_state, opponent_views, response_situation

__all__ = [
    "AdvisoryOracle",
    "CallableOracle",
    "DecisionKind",
    "OpponentView",
    "OracleError",
    "OracleRecommendation",
    "OracleSituation",
    "parse_recommendation",
    "action_situation",
    "describe_state",
    "opponent_views",
    "response_situation",
]

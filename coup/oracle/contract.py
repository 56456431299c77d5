"""
Advisory Oracle Contract - What the engine sends and accepts.

The oracle is an external decision service (an LLM, a scripted
opponent, a remote player model). It receives an OracleSituation and
returns a recommendation. Output is untrusted: it is parsed into an
OracleRecommendation here and validated against the legal options by
the bot that asked.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator


class DecisionKind(str, Enum):
    """The question being put to the oracle."""
    ACTION = "action"
    CHALLENGE = "challenge"
    BLOCK = "block"


class OpponentView(BaseModel):
    """Public information about one opponent."""
    player_id: str
    name: str
    money: int = Field(..., ge=0)
    influence_count: int = Field(..., ge=0, description="Unrevealed influence cards")
    revealed_cards: list[str] = Field(default_factory=list)
    is_automated: bool = False


class OracleSituation(BaseModel):
    """
    Everything the oracle is told about one decision.

    Action decisions list the available actions as legal_options.
    Challenge and block decisions list the response (e.g. "Challenge"
    or "Block Stealing") and "Allow".
    """
    kind: DecisionKind
    player_id: str
    player_name: str
    money: int = Field(..., ge=0)
    cards: list[str] = Field(..., description="The player's unrevealed cards")
    treasury: int | None = Field(None, ge=0, description="Coins left in the treasury")
    opponents: list[OpponentView] = Field(default_factory=list)
    legal_options: list[str]
    summary: str = Field("", description="Textual state summary")

    # For challenge / block decisions
    claim: str | None = None
    claimant_id: str | None = None
    claimant_name: str | None = None
    claimant_money: int | None = None
    claimant_influence_count: int | None = None
    action: str | None = None
    target_id: str | None = None
    target_name: str | None = None

    model_config = {"frozen": True}

    @property
    def visible_targets(self) -> list[str]:
        return [o.player_id for o in self.opponents]


class OracleRecommendation(BaseModel):
    """
    Structured oracle output.

    Accepts "action" for "choice" and "reasoning" for "rationale" as
    well, the key names older prompt formats asked for.
    """
    choice: str = Field(..., min_length=1, validation_alias=AliasChoices("choice", "action"))
    target: str | None = None
    rationale: str = Field("", validation_alias=AliasChoices("rationale", "reasoning"))

    @field_validator("choice", "target", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class OracleError(Exception):
    """The oracle returned something that cannot be parsed."""


def parse_recommendation(raw: Any) -> OracleRecommendation:
    """
    Parse raw oracle output into an OracleRecommendation.

    Accepts a recommendation, a dict, or a JSON string.
    Raises OracleError for anything else or anything invalid.
    """
    if isinstance(raw, OracleRecommendation):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            return OracleRecommendation.model_validate_json(raw)
        if isinstance(raw, dict):
            return OracleRecommendation.model_validate(raw)
    except ValidationError as e:
        raise OracleError(f"Malformed oracle output: {e.error_count()} validation error(s)") from e
    raise OracleError(f"Unsupported oracle output type: {type(raw).__name__}")


class AdvisoryOracle(ABC):
    """
    Abstract base class for advisory oracles.

    advise() may return an OracleRecommendation, a dict or a JSON
    string, and may raise. Callers must validate what comes back.
    """

    @abstractmethod
    def advise(self, situation: OracleSituation) -> OracleRecommendation | dict | str:
        """Recommend a choice for the situation."""
        pass

    def get_name(self) -> str:
        """Get the oracle's name/identifier."""
        return self.__class__.__name__


class CallableOracle(AdvisoryOracle):
    """
    Wraps any callable as an oracle.

    Usage:
        oracle = CallableOracle(lambda situation: my_llm(situation.model_dump_json()))
    """

    def __init__(self, func: Callable[[OracleSituation], Any], name: str | None = None):
        self.func = func
        self.name = name

    def advise(self, situation: OracleSituation) -> Any:
        return self.func(situation)

    def get_name(self) -> str:
        return self.name or super().get_name()

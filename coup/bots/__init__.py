"""
Bots module - Automated player implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- OracleBot: Policy that consults an advisory oracle
- HeuristicOracle: Local rule-based oracle
- Personality: Configurable play styles
- AutomatedPlayerDriver: Plays automated seats between human inputs
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy, safe_default
from .personality import Personality, PERSONALITIES, get_personality, create_random_personality
from .heuristic_oracle import HeuristicOracle
from .oracle_bot import OracleBot, InvalidRecommendation
from .driver import AutomatedPlayerDriver, DriveResult, DriverStuckError

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "safe_default",
    "Personality",
    "PERSONALITIES",
    "get_personality",
    "create_random_personality",
    "HeuristicOracle",
    "OracleBot",
    "InvalidRecommendation",
    "AutomatedPlayerDriver",
    "DriveResult",
    "DriverStuckError",
]

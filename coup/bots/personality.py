"""
Bot Personalities - Configurable play styles.

Personalities adjust:
- How often the bot bluffs claims it cannot back
- How readily it challenges other players' claims
- Aggression (attack opponents vs build coins)
- Randomness (for unpredictability)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random
from typing import Any


@dataclass
class Personality:
    """
    A bot personality that defines play style.

    All rates are probabilities in [0, 1].
    """
    name: str
    description: str = ""

    bluff_rate: float = 0.2  # Claim a card we do not hold
    block_bluff_rate: float = 0.1  # Block without the blocking card
    challenge_rate: float = 0.2  # Challenge when nothing proves a bluff
    aggression: float = 0.5  # 0 = passive, 1 = aggressive
    randomness: float = 0.05  # Jitter added to action scores

    # Action preferences (multipliers on action scores)
    action_preferences: dict[str, float] = field(default_factory=dict)

    # Metadata
    metadata: dict[str, Any] = field(default_factory=dict)

    def preference(self, action: str) -> float:
        return self.action_preferences.get(action, 1.0)


# ============================================================================
# Predefined Personalities
# ============================================================================

BALANCED = Personality(
    name="Balanced",
    description="Plays its cards honestly, bluffs and challenges now and then",
)


AGGRESSIVE = Personality(
    name="Aggressive",
    description="Goes after opponents' influence and coins",
    bluff_rate=0.35,
    block_bluff_rate=0.15,
    challenge_rate=0.3,
    aggression=0.85,
    action_preferences={
        "Assassinate": 1.3,
        "Steal": 1.2,
        "Coup": 1.2,
        "Income": 0.8,
    },
)


CAUTIOUS = Personality(
    name="Cautious",
    description="Rarely bluffs or challenges, builds coins safely",
    bluff_rate=0.05,
    block_bluff_rate=0.0,
    challenge_rate=0.05,
    aggression=0.2,
    action_preferences={
        "Income": 1.3,
        "Foreign Aid": 1.1,
        "Assassinate": 0.8,
    },
)


BLUFFER = Personality(
    name="Bluffer",
    description="Claims whatever suits it and dares others to call",
    bluff_rate=0.6,
    block_bluff_rate=0.4,
    challenge_rate=0.15,
    aggression=0.6,
    randomness=0.1,
    action_preferences={
        "Tax": 1.3,
        "Steal": 1.1,
    },
)


PERSONALITIES: dict[str, Personality] = {
    "balanced": BALANCED,
    "aggressive": AGGRESSIVE,
    "cautious": CAUTIOUS,
    "bluffer": BLUFFER,
}


def get_personality(name: str) -> Personality:
    """Look up a predefined personality by name (case-insensitive)."""
    try:
        return PERSONALITIES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown personality: {name}. Choose from {', '.join(PERSONALITIES)}"
        ) from None


def create_random_personality(name: str = "Random", seed: int | None = None) -> Personality:
    """Create a personality with random rates."""
    rng = random.Random(seed)
    return Personality(
        name=name,
        description="Randomly generated play style",
        bluff_rate=round(rng.uniform(0.0, 0.6), 2),
        block_bluff_rate=round(rng.uniform(0.0, 0.4), 2),
        challenge_rate=round(rng.uniform(0.0, 0.4), 2),
        aggression=round(rng.uniform(0.1, 0.9), 2),
        randomness=round(rng.uniform(0.0, 0.15), 2),
    )

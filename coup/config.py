"""
Engine configuration, read from COUP_* environment variables.

    COUP_MAX_LOG_ENTRIES       game log bound (50)
    COUP_MAX_AUTOMATED_STEPS   automated decisions per drive (500)
    COUP_SEED                  seed for shuffles and bots (unset = random)
    COUP_LOG_LEVEL             process log level (INFO)
    COUP_PERSONALITY           default bot personality (balanced)
"""

from __future__ import annotations
from dataclasses import dataclass
import os
from typing import Mapping

from .engine_core.game_log import MAX_LOG_ENTRIES
from .bots.driver import DEFAULT_MAX_STEPS


def _int_env(env: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class EngineConfig:
    max_log_entries: int = MAX_LOG_ENTRIES
    max_automated_steps: int = DEFAULT_MAX_STEPS
    seed: int | None = None
    log_level: str = "INFO"
    personality: str = "balanced"

    def __post_init__(self):
        if self.max_log_entries < 1:
            raise ValueError("max_log_entries must be at least 1")
        if self.max_automated_steps < 1:
            raise ValueError("max_automated_steps must be at least 1")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from the environment (or the given mapping)."""
        env = os.environ if environ is None else environ
        return cls(
            max_log_entries=_int_env(env, "COUP_MAX_LOG_ENTRIES", MAX_LOG_ENTRIES),
            max_automated_steps=_int_env(env, "COUP_MAX_AUTOMATED_STEPS", DEFAULT_MAX_STEPS),
            seed=_int_env(env, "COUP_SEED", None),
            log_level=env.get("COUP_LOG_LEVEL", "INFO").upper(),
            personality=env.get("COUP_PERSONALITY", "balanced").lower(),
        )

"""
API Module - Serializable views for clients.

The engine itself exchanges dataclass snapshots. Clients that need
JSON (the CLI's --json output, a web front end) use these pydantic
views, which withhold other players' hidden cards.
"""

from .schemas import (
    ErrorCode,
    ErrorResponse,
    PhaseView,
    PlayerView,
    SnapshotView,
    TurnResultView,
)

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "PhaseView",
    "PlayerView",
    "SnapshotView",
    "TurnResultView",
]

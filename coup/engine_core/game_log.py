"""
Game Log - Bounded narrative trail of state transitions.

Entries are plain strings, newest last. The log is shown to players
and summarized for the advisory oracle. Only the newest
MAX_LOG_ENTRIES lines are kept.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 50


@dataclass(frozen=True)
class GameLog:
    """Append-only, bounded log. Appending returns a new log."""
    entries: tuple[str, ...] = field(default_factory=tuple)
    max_entries: int = MAX_LOG_ENTRIES
    total: int = 0  # Entries ever appended, including trimmed ones

    def append(self, *messages: str) -> GameLog:
        """Return a new log with messages appended, trimmed to max_entries."""
        for message in messages:
            logger.debug("game log: %s", message)
        entries = (self.entries + tuple(messages))[-self.max_entries:]
        return GameLog(
            entries=entries,
            max_entries=self.max_entries,
            total=self.total + len(messages),
        )

    def recent(self, count: int = 5) -> list[str]:
        """Get the newest count entries, oldest first."""
        if count <= 0:
            return []
        return list(self.entries[-count:])

    def since(self, total: int) -> list[str]:
        """Entries appended after the log had seen total entries, as far as they are still kept."""
        return self.recent(min(self.total - total, len(self.entries)))

    @property
    def last(self) -> str | None:
        return self.entries[-1] if self.entries else None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

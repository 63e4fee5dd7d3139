from __future__ import annotations

import logging
from typing import List, Sequence

from pydantic import ValidationError

from schemas.progress import HistoryEntry

logger = logging.getLogger("math-practice.progress")

HISTORY_LIMIT = 50


def push_entry(
    entries: Sequence[HistoryEntry], entry: HistoryEntry, limit: int = HISTORY_LIMIT
) -> List[HistoryEntry]:
    """Newest first; anything past ``limit`` falls off the tail."""
    return [entry, *entries][:limit]


class HistoryLog:
    """Bounded recent-history log kept in a progress storage under one key."""

    KEY = "history"

    def __init__(self, storage, limit: int = HISTORY_LIMIT):
        self._storage = storage
        self.limit = limit

    def list(self) -> List[HistoryEntry]:
        raw = self._storage.get(self.KEY)
        if raw is None:
            return []
        try:
            if not isinstance(raw, list):
                raise TypeError(f"expected a list, got {type(raw).__name__}")
            return [HistoryEntry.model_validate(item) for item in raw]
        except (TypeError, ValidationError) as e:
            # Treat a broken log as empty
            logger.warning("discarding unreadable history: %s", e)
            return []

    def append(self, entry: HistoryEntry) -> List[HistoryEntry]:
        entries = push_entry(self.list(), entry, self.limit)
        self._storage.put(self.KEY, [e.model_dump(mode="json") for e in entries])
        return entries

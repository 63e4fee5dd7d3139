from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import List, Optional

from pydantic import ValidationError

import achievements as ach
from history import HistoryLog
from schemas.progress import Achievement, HistoryEntry, UserSession, UserStats
from stats import update_stats
from storage import ProgressStorage

logger = logging.getLogger("math-practice.progress")


def new_user_id() -> str:
    return f"user_{uuid.uuid4().hex[:16]}"


@dataclass
class ProgressUpdate:
    stats: UserStats
    achievements: List[Achievement]
    new_achievements: List[str]
    history: List[HistoryEntry]


class UserProgressStore:
    """Stats, achievements, history and session identity for one user.

    All state goes through the injected storage, so the same store works on
    the database (one row per key) and in memory.
    """

    SESSION_KEY = "session"
    STATS_KEY = "stats"
    ACHIEVEMENTS_KEY = "achievements"

    def __init__(self, storage: ProgressStorage, user_id: str):
        self.storage = storage
        self.user_id = user_id
        self.history_log = HistoryLog(storage)

    # --- session identity ---------------------------------------------------

    def touch_session(self, now: Optional[datetime] = None) -> UserSession:
        now = now or datetime.now(UTC)
        raw = self.storage.get(self.SESSION_KEY)
        session = None
        if raw is not None:
            try:
                session = UserSession.model_validate(raw)
            except ValidationError as e:
                logger.warning("resetting unreadable session for %s: %s", self.user_id, e)
        if session is None or session.session_id != self.user_id:
            session = UserSession(session_id=self.user_id, created_at=now, last_active_at=now)
        else:
            session = session.model_copy(update={"last_active_at": now})
        self.storage.put(self.SESSION_KEY, session.model_dump(mode="json"))
        return session

    # --- reads -------------------------------------------------------------

    def stats(self) -> UserStats:
        raw = self.storage.get(self.STATS_KEY)
        if raw is None:
            return UserStats()
        try:
            return UserStats.model_validate(raw)
        except ValidationError as e:
            logger.warning("resetting unreadable stats for %s: %s", self.user_id, e)
            return UserStats()

    def achievements(self) -> List[Achievement]:
        raw = self.storage.get(self.ACHIEVEMENTS_KEY)
        if raw is None:
            return ach.default_achievements()
        try:
            stored = [Achievement.model_validate(item) for item in raw]
        except (TypeError, ValidationError) as e:
            logger.warning("resetting unreadable achievements for %s: %s", self.user_id, e)
            return ach.default_achievements()
        # fill in ids added to the catalogue after this user's record was written
        by_id = {a.id: a for a in stored}
        return [by_id.get(aid, Achievement(id=aid)) for aid in ach.ACHIEVEMENT_IDS]

    def history(self) -> List[HistoryEntry]:
        return self.history_log.list()

    # --- writes ------------------------------------------------------------

    def record(
        self, is_correct: bool, entry: HistoryEntry, now: Optional[datetime] = None
    ) -> ProgressUpdate:
        """Apply one submission: stats, then achievements, then history."""
        stats = update_stats(self.stats(), is_correct)
        self.storage.put(self.STATS_KEY, stats.model_dump())

        prior = self.achievements()
        updated = ach.evaluate(stats, prior, now=now)
        self.storage.put(self.ACHIEVEMENTS_KEY, [a.model_dump(mode="json") for a in updated])

        history = self.history_log.append(entry)
        return ProgressUpdate(
            stats=stats,
            achievements=updated,
            new_achievements=ach.newly_unlocked(prior, updated),
            history=history,
        )

    def clear(self) -> None:
        self.storage.clear()

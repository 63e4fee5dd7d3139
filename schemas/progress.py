# schemas/progress.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------- Stats ----------


class UserStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    correct: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "UserStats":
        if self.correct > self.total:
            raise ValueError("correct cannot exceed total")
        if self.streak > self.total:
            raise ValueError("streak cannot exceed total")
        return self


# ---------- Achievements ----------


class Achievement(BaseModel):
    id: str
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None


class AchievementOut(Achievement):
    title: str
    description: str


# ---------- History ----------


class HistoryEntry(BaseModel):
    """Submission joined with its problem, frozen at the moment of answering."""

    id: int
    session_id: str
    problem_text: str
    user_answer: float
    correct_answer: float
    is_correct: bool
    difficulty: str
    problem_type: str
    hints_used: int = 0
    total_hints: int = 0
    created_at: datetime


# ---------- Session identity ----------


class UserSession(BaseModel):
    session_id: str
    created_at: datetime
    last_active_at: datetime


class ProgressOut(BaseModel):
    ok: bool = True
    session: UserSession
    stats: UserStats
    achievements: List[AchievementOut]

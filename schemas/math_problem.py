# schemas/math_problem.py
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Difficulty = Literal["easy", "medium", "hard"]
ProblemType = Literal["addition", "subtraction", "multiplication", "division", "mixed"]

HINT_COUNT = 3

UserId = Annotated[str, Field(min_length=1, max_length=64)]

# ---------- Problem ----------


class ProblemOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    problem_text: str
    final_answer: float
    difficulty: Difficulty
    problem_type: ProblemType
    steps: List[str] = Field(default_factory=list)
    hints: List[str] = Field(default_factory=list)


# ---------- Actions ----------
# The client posts camelCase keys (sessionId, userAnswer, ...).


class _Action(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateAction(_Action):
    action: Literal["generate"]
    difficulty: Difficulty = "easy"
    problem_type: ProblemType = "mixed"
    user_id: Optional[UserId] = None


class SubmitAction(_Action):
    action: Literal["submit"]
    session_id: str = Field(min_length=1, max_length=36)
    user_answer: float = Field(allow_inf_nan=False)
    hints_used: int = Field(default=0, ge=0, le=HINT_COUNT)
    user_id: UserId


class HistoryAction(_Action):
    action: Literal["getHistory"]
    user_id: UserId


class HintAction(_Action):
    action: Literal["getHint"]
    session_id: str = Field(min_length=1, max_length=36)
    hint_index: int = Field(default=0, ge=0)


MathProblemAction = Union[GenerateAction, SubmitAction, HistoryAction, HintAction]

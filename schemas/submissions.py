from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: datetime | None
    session_id: str
    user_id: str | None = None
    user_answer: float
    is_correct: bool
    hints_used: int
    difficulty: str
    problem_type: str
    # usually excluded in list views
    feedback_text: str | None = None

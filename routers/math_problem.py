# routers/math_problem.py
#
# Single action endpoint used by the practice UI:
#   generate | submit | getHistory | getHint

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

import achievements as ach
from ai import TextGenerator
from db import get_db
from deps.ai import get_text_generator
from deps.progress import get_progress_factory
from schemas.math_problem import (
    GenerateAction,
    HintAction,
    HistoryAction,
    MathProblemAction,
    SubmitAction,
)
from schemas.progress import Achievement, UserStats
from sessions import ProblemSessionService, ProgressFactory
from stats import accuracy

router = APIRouter(prefix="/api", tags=["math-problem"])


def _score(stats: UserStats) -> Dict[str, Any]:
    return {**stats.model_dump(), "accuracy": accuracy(stats)}


def _achievements(items: List[Achievement]) -> List[Dict[str, Any]]:
    return [a.model_dump(mode="json") for a in ach.describe(items)]


def get_service(
    db: Session = Depends(get_db),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
    progress_for: ProgressFactory = Depends(get_progress_factory),
) -> ProblemSessionService:
    return ProblemSessionService(db, generator, progress_for)


@router.post("/math-problem")
def math_problem(
    req: Annotated[MathProblemAction, Body(discriminator="action")],
    service: ProblemSessionService = Depends(get_service),
):
    if isinstance(req, GenerateAction):
        return _generate(service, req)
    if isinstance(req, SubmitAction):
        return _submit(service, req)
    if isinstance(req, HistoryAction):
        return _history(service, req)
    return _hint(service, req)


def _generate(service: ProblemSessionService, req: GenerateAction) -> Dict[str, Any]:
    generated = service.generate(req.difficulty, req.problem_type, req.user_id)
    return {
        "success": True,
        "problem": generated.problem.model_dump(),
        "sessionId": generated.session_id,
    }


def _submit(service: ProblemSessionService, req: SubmitAction) -> Dict[str, Any]:
    result = service.submit_answer(req.session_id, req.user_answer, req.hints_used, req.user_id)
    return {
        "success": True,
        "isCorrect": result.is_correct,
        "feedback": result.feedback,
        "submissionId": result.submission_id,
        "score": _score(result.progress.stats),
        "achievements": _achievements(result.progress.achievements),
        "newAchievements": result.progress.new_achievements,
    }


def _history(service: ProblemSessionService, req: HistoryAction) -> Dict[str, Any]:
    store = service.progress(req.user_id)
    return {
        "success": True,
        "score": _score(store.stats()),
        "history": [e.model_dump(mode="json") for e in store.history()],
        "achievements": _achievements(store.achievements()),
    }


def _hint(service: ProblemSessionService, req: HintAction) -> Dict[str, Any]:
    hint = service.get_hint(req.session_id, req.hint_index)
    return {
        "success": True,
        "hint": hint.hint,
        "hintNumber": hint.hint_number,
        "totalHints": hint.total_hints,
        "contextual": hint.contextual,
    }

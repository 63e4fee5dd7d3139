from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import tutor
from ai import TextGenerator
from errors import (
    GenerationError,
    NoMoreHints,
    PersistenceError,
    ProblemAlreadySolved,
    ProblemNotFound,
)
from models import ProblemSession, Submission
from problems import FALLBACK_PROBLEM, build_problem_prompt, parse_problem_reply
from progress import ProgressUpdate, UserProgressStore
from schemas.math_problem import Difficulty, ProblemOut, ProblemType
from schemas.progress import HistoryEntry

logger = logging.getLogger("math-practice.sessions")

ProgressFactory = Callable[[Session, str], UserProgressStore]


@dataclass
class GeneratedProblem:
    session_id: str
    problem: ProblemOut


@dataclass
class SubmitResult:
    is_correct: bool
    feedback: str
    progress: ProgressUpdate
    submission_id: int


@dataclass
class HintResult:
    hint: str
    hint_number: int
    total_hints: int
    contextual: bool


class ProblemSessionService:
    """Generate problems, check answers and hand out hints.

    Persistence and the AI collaborator are both injected; the service owns
    transaction boundaries (one commit per operation, rollback on failure).
    """

    def __init__(
        self,
        db: Session,
        generator: Optional[TextGenerator],
        progress_for: ProgressFactory,
    ):
        self.db = db
        self.generator = generator
        self.progress_for = progress_for

    def progress(self, user_id: str) -> UserProgressStore:
        return self.progress_for(self.db, user_id)

    # --- generate -----------------------------------------------------------------

    def generate(
        self,
        difficulty: Difficulty = "easy",
        problem_type: ProblemType = "mixed",
        user_id: Optional[str] = None,
    ) -> GeneratedProblem:
        problem = self._ask_for_problem(difficulty, problem_type)

        row = ProblemSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            problem_text=problem.problem_text,
            correct_answer=problem.final_answer,
            difficulty=problem.difficulty,
            problem_type=problem.problem_type,
            steps=list(problem.steps),
            hints=list(problem.hints),
        )
        self._commit(row, "Failed to save problem")
        logger.info("generated problem %s (%s/%s)", row.id, row.difficulty, row.problem_type)
        return GeneratedProblem(session_id=row.id, problem=problem)

    def _ask_for_problem(self, difficulty: Difficulty, problem_type: ProblemType) -> ProblemOut:
        if self.generator is None:
            return FALLBACK_PROBLEM
        prompt = build_problem_prompt(difficulty, problem_type)
        try:
            text = self.generator.generate_text(prompt)
        except GenerationError as e:
            logger.warning("problem generation failed, using fallback problem: %s", e)
            return FALLBACK_PROBLEM
        return parse_problem_reply(text, difficulty, problem_type)

    # --- submit -------------------------------------------------------------------

    def submit_answer(
        self, session_id: str, user_answer: float, hints_used: int, user_id: str
    ) -> SubmitResult:
        session = self._get_session(session_id)
        if self._is_solved(session_id):
            raise ProblemAlreadySolved()

        # exact comparison; 28.0000001 is not 28
        is_correct = float(user_answer) == float(session.correct_answer)
        feedback = tutor.answer_feedback(
            self.generator, session.problem_text, session.correct_answer, user_answer, is_correct
        )

        submission = Submission(
            created_at=datetime.now(UTC),
            session_id=session.id,
            user_id=user_id,
            user_answer=user_answer,
            is_correct=is_correct,
            feedback_text=feedback,
            hints_used=hints_used,
            difficulty=session.difficulty,
            problem_type=session.problem_type,
        )
        try:
            self.db.add(submission)
            self.db.flush()
            entry = HistoryEntry(
                id=submission.id,
                session_id=session.id,
                problem_text=session.problem_text,
                user_answer=user_answer,
                correct_answer=session.correct_answer,
                is_correct=is_correct,
                difficulty=session.difficulty,
                problem_type=session.problem_type,
                hints_used=hints_used,
                total_hints=len(session.hints or []),
                created_at=submission.created_at,
            )
            progress = self.progress(user_id).record(is_correct, entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("saving submission for %s failed", session_id)
            raise PersistenceError("Failed to save submission") from e

        logger.info(
            "submission %s on %s: correct=%s streak=%d",
            submission.id,
            session_id,
            is_correct,
            progress.stats.streak,
        )
        return SubmitResult(
            is_correct=is_correct,
            feedback=feedback,
            progress=progress,
            submission_id=submission.id,
        )

    # --- hints --------------------------------------------------------------------

    def get_hint(self, session_id: str, hint_index: int) -> HintResult:
        session = self._get_session(session_id)
        if self._is_solved(session_id):
            raise ProblemAlreadySolved()

        hints: List[str] = list(session.hints or [])
        if hint_index < 0 or hint_index >= len(hints):
            raise NoMoreHints()
        stored = hints[hint_index]

        wrong = self._latest_wrong_answer(session_id)
        text = None
        if wrong is not None:
            text = tutor.contextual_hint(
                self.generator,
                session.problem_text,
                session.correct_answer,
                wrong,
                stored,
                hint_index + 1,
            )
        return HintResult(
            hint=text or stored,
            hint_number=hint_index + 1,
            total_hints=len(hints),
            contextual=text is not None,
        )

    # --- helpers ------------------------------------------------------------------

    def _get_session(self, session_id: str) -> ProblemSession:
        try:
            session = self.db.get(ProblemSession, session_id)
        except SQLAlchemyError as e:
            logger.exception("loading problem %s failed", session_id)
            raise PersistenceError("Failed to load problem") from e
        if session is None:
            raise ProblemNotFound()
        return session

    def _is_solved(self, session_id: str) -> bool:
        stmt = (
            select(Submission.id)
            .where(Submission.session_id == session_id, Submission.is_correct.is_(True))
            .limit(1)
        )
        return self.db.execute(stmt).first() is not None

    def _latest_wrong_answer(self, session_id: str) -> Optional[float]:
        stmt = (
            select(Submission.user_answer)
            .where(Submission.session_id == session_id, Submission.is_correct.is_(False))
            .order_by(Submission.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def _commit(self, row, failure_message: str) -> None:
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("database write failed")
            raise PersistenceError(failure_message) from e


from __future__ import annotations

import logging
import math
import re
from typing import Optional

from ai import TextGenerator
from errors import GenerationError

logger = logging.getLogger("math-practice.tutor")

_FEEDBACK_MAX_CHARS = 1200


def format_number(x: float) -> str:
    if math.isfinite(x) and abs(x - round(x)) < 1e-12:
        return str(int(round(x)))
    return str(x)


def canned_feedback(is_correct: bool, user_answer: float, correct_answer: float) -> str:
    ans = format_number(user_answer)
    exp = format_number(correct_answer)
    if is_correct:
        return (
            f"Great job! {ans} is exactly right. "
            "You worked through the problem carefully. Keep practicing to build your streak!"
        )
    return (
        f"Not quite. You answered {ans}, but the correct answer is {exp}. "
        "Read the problem again, check which operation it needs, and try the steps one at a time. "
        "You'll get the next one!"
    )


def build_feedback_prompt(
    problem_text: str, correct_answer: float, user_answer: float, is_correct: bool
) -> str:
    return f"""You are a helpful math tutor for Primary 5 students. Generate personalized feedback for this math problem:

Problem: "{problem_text}"
Correct Answer: {format_number(correct_answer)}
Student's Answer: {format_number(user_answer)}
Is Correct: {"true" if is_correct else "false"}

Provide encouraging, educational feedback that:
1. Congratulates them if correct, or gently explains the mistake if wrong
2. Explains the solution step-by-step in simple terms
3. Encourages them to keep practicing
4. Is age-appropriate and supportive

Keep the feedback concise but helpful (2-3 sentences)."""


def build_hint_prompt(
    problem_text: str, wrong_answer: float, guide_hint: str, hint_number: int
) -> str:
    return f"""You are a patient math tutor for Primary 5 students (ages 10-11).

Problem: "{problem_text}"
The student answered {format_number(wrong_answer)}, which is not correct.
Hint {hint_number} we planned to give: "{guide_hint}"

Write hint {hint_number} for this student in 1-2 short sentences. Refer to their answer of
{format_number(wrong_answer)} and help them see where their thinking may have gone wrong.
Do NOT state the final answer or any number that equals it."""


def reveals_answer(text: str, correct_answer: float) -> bool:
    """True if ``text`` mentions the correct answer as a standalone number."""
    target = re.escape(format_number(correct_answer))
    return re.search(rf"(?<![\d.]){target}(?!\.?\d)", text) is not None


def _generate(generator: Optional[TextGenerator], prompt: str) -> Optional[str]:
    if generator is None:
        return None
    try:
        text = generator.generate_text(prompt)
    except GenerationError as e:
        logger.warning("AI text unavailable, using canned text: %s", e)
        return None
    text = (text or "").strip()
    return text[:_FEEDBACK_MAX_CHARS] or None


def answer_feedback(
    generator: Optional[TextGenerator],
    problem_text: str,
    correct_answer: float,
    user_answer: float,
    is_correct: bool,
) -> str:
    prompt = build_feedback_prompt(problem_text, correct_answer, user_answer, is_correct)
    text = _generate(generator, prompt)
    return text or canned_feedback(is_correct, user_answer, correct_answer)


def contextual_hint(
    generator: Optional[TextGenerator],
    problem_text: str,
    correct_answer: float,
    wrong_answer: float,
    guide_hint: str,
    hint_number: int,
) -> Optional[str]:
    """AI hint that builds on the student's wrong answer, or None to use ``guide_hint``."""
    prompt = build_hint_prompt(problem_text, wrong_answer, guide_hint, hint_number)
    text = _generate(generator, prompt)
    if text is None:
        return None
    if reveals_answer(text, correct_answer):
        logger.warning("AI hint gave away the answer; using stored hint")
        return None
    return text

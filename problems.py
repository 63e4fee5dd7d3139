# Word-problem prompts and parsing of the model's reply.
#
# The model is asked for a JSON object but may wrap it in prose or code fences,
# truncate it, or get the shape wrong. parse_problem_reply() never raises: any
# reply that doesn't pass ProblemPayload validation becomes FALLBACK_PROBLEM.

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from schemas.math_problem import HINT_COUNT, Difficulty, ProblemOut, ProblemType

logger = logging.getLogger("math-practice.problems")

NUMBER_RANGES: Dict[str, tuple[int, int]] = {
    "easy": (1, 20),
    "medium": (1, 100),
    "hard": (1, 1000),
}

_OPERATION_GUIDANCE = {
    "addition": "The problem must be solved using addition only.",
    "subtraction": "The problem must be solved using subtraction only.",
    "multiplication": "The problem must be solved using multiplication only.",
    "division": "The problem must be solved using division only, with a whole-number result.",
    "mixed": (
        "The problem may combine addition, subtraction, multiplication and division "
        "(use at least two different operations)."
    ),
}

FALLBACK_PROBLEM = ProblemOut(
    problem_text=(
        "A teacher has 30 pencils. She gives 12 pencils to her students. "
        "How many pencils does she have left?"
    ),
    final_answer=18,
    difficulty="easy",
    problem_type="subtraction",
    steps=[
        "The teacher starts with 30 pencils.",
        "She gives away 12 pencils, so we subtract: 30 - 12.",
        "30 - 12 = 18, so she has 18 pencils left.",
    ],
    hints=[
        "Think about whether the teacher ends up with more or fewer pencils.",
        "Giving pencils away means taking them away from what she had.",
        "Work out 30 - 12.",
    ],
)


# --- Prompt -----------------------------------------------------------------------


def build_problem_prompt(difficulty: Difficulty, problem_type: ProblemType) -> str:
    low, high = NUMBER_RANGES[difficulty]
    return f"""Generate a math word problem suitable for Primary 5 students (ages 10-11).
Difficulty: {difficulty}. Use whole numbers between {low} and {high}.
{_OPERATION_GUIDANCE[problem_type]}
Make it engaging and relatable to children, with a single correct numeric answer.

Return ONLY a JSON object with exactly this format:
{{
  "problem_text": "The word problem text here",
  "final_answer": <numeric answer only>,
  "steps": ["Step 1 ...", "Step 2 ..."],
  "hints": ["gentle nudge", "more specific hint", "almost gives the method away"]
}}

The "hints" list must contain exactly {HINT_COUNT} hints, each revealing a bit more than the
one before, and none of them may state the final answer."""


# --- Parsing ----------------------------------------------------------------------


def extract_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of ``text``, or None.

    Braces inside JSON string literals (including escaped quotes) are ignored.
    """
    if not isinstance(text, str):
        return None
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    # truncated: the first object never closes
    return None


class ProblemPayload(BaseModel):
    problem_text: str = Field(min_length=1)
    final_answer: float
    steps: List[str] = Field(min_length=1)
    hints: List[str] = Field(min_length=HINT_COUNT, max_length=HINT_COUNT)

    @field_validator("problem_text")
    @classmethod
    def _text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("problem_text is blank")
        return v

    @field_validator("final_answer", mode="before")
    @classmethod
    def _answer_is_number(cls, v: Any) -> Any:
        # "28" or true would be coerced by pydantic; only real JSON numbers count
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("final_answer must be a number")
        try:
            f = float(v)
        except OverflowError:
            raise ValueError("final_answer is too large") from None
        if not math.isfinite(f):
            raise ValueError("final_answer must be finite")
        return f

    @field_validator("steps", "hints")
    @classmethod
    def _items_not_blank(cls, v: List[str]) -> List[str]:
        items = [s.strip() for s in v]
        if any(not s for s in items):
            raise ValueError("blank entry")
        return items


def validate_problem_payload(
    data: Any, difficulty: Difficulty, problem_type: ProblemType
) -> ProblemOut:
    """Strict shape check; raises ValidationError on anything off."""
    payload = ProblemPayload.model_validate(data)
    return ProblemOut(
        problem_text=payload.problem_text,
        final_answer=payload.final_answer,
        difficulty=difficulty,
        problem_type=problem_type,
        steps=payload.steps,
        hints=payload.hints,
    )


def parse_problem_reply(
    text: Optional[str], difficulty: Difficulty, problem_type: ProblemType
) -> ProblemOut:
    raw = extract_json_object(text or "")
    if raw is None:
        logger.warning("no JSON object in AI reply; using fallback problem")
        return FALLBACK_PROBLEM
    try:
        return validate_problem_payload(json.loads(raw), difficulty, problem_type)
    except ValidationError as e:
        logger.warning(
            "AI reply has the wrong shape (%d errors); using fallback problem", e.error_count()
        )
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, oversized integer literals, pathological nesting
        logger.warning("AI reply is not usable JSON (%s); using fallback problem", e)
    return FALLBACK_PROBLEM

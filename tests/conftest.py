# Shared fixtures: a throwaway SQLite database and a scripted text generator.
import os
import tempfile
import uuid

# must be set before db/ai are imported anywhere
_DB_DIR = tempfile.mkdtemp(prefix="math-practice-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["AI_API_KEY"] = ""
os.environ["PROGRESS_STORAGE"] = "db"

import pytest  # noqa: E402

from db import create_schema  # noqa: E402
from errors import GenerationError  # noqa: E402

create_schema()

GOOD_PROBLEM_REPLY = """Here is your problem!
```json
{
  "problem_text": "Tom has 20 apples. He buys 8 more at the market. How many apples does he have now?",
  "final_answer": 28,
  "steps": ["Tom starts with 20 apples.", "He buys 8 more, so add: 20 + 8 = 28."],
  "hints": [
    "Does Tom end up with more apples or fewer?",
    "Buying more means you should add.",
    "Work out 20 + 8."
  ]
}
```"""


class ScriptedGenerator:
    """Answers by prompt kind; an Exception value is raised instead of returned."""

    def __init__(self, problem=GOOD_PROBLEM_REPLY, feedback="Well reasoned!", hint="Look again."):
        self.replies = {"problem": problem, "feedback": feedback, "hint": hint}
        self.prompts = []
        self.configured = True
        self.model = "scripted"

    def generate_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if "Generate a math word problem" in prompt:
            reply = self.replies["problem"]
        elif "personalized feedback" in prompt:
            reply = self.replies["feedback"]
        else:
            reply = self.replies["hint"]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def generator():
    from deps.ai import get_text_generator
    from main import app

    gen = ScriptedGenerator()
    app.dependency_overrides[get_text_generator] = lambda: gen
    yield gen
    app.dependency_overrides.pop(get_text_generator, None)


@pytest.fixture
def offline_ai():
    """Generator that is always down."""
    from deps.ai import get_text_generator
    from main import app

    down = GenerationError("connection refused")
    gen = ScriptedGenerator(problem=down, feedback=down, hint=down)
    app.dependency_overrides[get_text_generator] = lambda: gen
    yield gen
    app.dependency_overrides.pop(get_text_generator, None)


@pytest.fixture
def user_id():
    return f"user_{uuid.uuid4().hex[:12]}"

import json

import pytest
from pydantic import ValidationError

from problems import (
    FALLBACK_PROBLEM,
    build_problem_prompt,
    extract_json_object,
    parse_problem_reply,
    validate_problem_payload,
)

PAYLOAD = {
    "problem_text": "Mia bakes 6 trays of 4 cookies. How many cookies does she bake?",
    "final_answer": 24,
    "steps": ["6 trays with 4 cookies each is 6 x 4.", "6 x 4 = 24."],
    "hints": ["Each tray has the same number.", "Think about groups.", "Multiply 6 by 4."],
}

# too many digits for int() and too deep for the JSON scanner
OVERSIZED_ANSWER = (
    '{"problem_text": "Big", "final_answer": 1'
    + "0" * 5000
    + ', "steps": ["a"], "hints": ["a", "b", "c"]}'
)
DEEPLY_NESTED = '{"problem_text": ' + "[" * 100_000 + "]" * 100_000 + "}"


def test_prompt_carries_range_and_operation():
    p = build_problem_prompt("hard", "division")
    assert "between 1 and 1000" in p
    assert "division only" in p
    assert "exactly 3 hints" in p

    assert "between 1 and 20" in build_problem_prompt("easy", "mixed")
    assert "between 1 and 100" in build_problem_prompt("medium", "addition")


def test_extract_first_balanced_object_from_prose():
    text = 'Sure! {"a": {"b": 1}} and also {"c": 2}'
    assert extract_json_object(text) == '{"a": {"b": 1}}'


def test_extract_ignores_braces_inside_strings():
    text = 'x {"problem_text": "use {curly} and \\"quotes\\" }", "n": 1} y'
    raw = extract_json_object(text)
    assert json.loads(raw)["n"] == 1


def test_extract_returns_none_for_truncated_or_missing_json():
    assert extract_json_object('{"problem_text": "cut off') is None
    assert extract_json_object("no json here") is None
    assert extract_json_object("") is None


def test_parse_valid_reply():
    reply = "```json\n" + json.dumps(PAYLOAD) + "\n```"
    p = parse_problem_reply(reply, "medium", "multiplication")
    assert p.final_answer == 24
    assert p.difficulty == "medium"
    assert p.problem_type == "multiplication"
    assert len(p.hints) == 3


@pytest.mark.parametrize(
    "reply",
    [
        '{"problem_text": "Sarah has 24 stickers", "final_answer": ',
        "I'm sorry, I can't help with that.",
        "{not json at all}",
        None,
        pytest.param(OVERSIZED_ANSWER, id="oversized-answer"),
        pytest.param(DEEPLY_NESTED, id="deeply-nested"),
    ],
)
def test_malformed_reply_falls_back(reply):
    p = parse_problem_reply(reply, "hard", "division")
    assert p == FALLBACK_PROBLEM
    assert p.final_answer == 18


@pytest.mark.parametrize(
    "change",
    [
        {"hints": ["only one"]},
        {"hints": ["a", "b", "c", "d"]},
        {"final_answer": "24"},
        {"final_answer": True},
        {"final_answer": 10**400},
        {"steps": []},
        {"problem_text": "   "},
    ],
)
def test_wrong_shape_falls_back(change):
    reply = json.dumps({**PAYLOAD, **change})
    assert parse_problem_reply(reply, "easy", "mixed") == FALLBACK_PROBLEM


def test_validator_raises_on_missing_fields():
    with pytest.raises(ValidationError):
        validate_problem_payload({"problem_text": "x"}, "easy", "mixed")


def test_fallback_problem_is_complete():
    assert FALLBACK_PROBLEM.final_answer == 18
    assert len(FALLBACK_PROBLEM.hints) == 3
    assert FALLBACK_PROBLEM.steps
    assert not any("18" in h for h in FALLBACK_PROBLEM.hints)

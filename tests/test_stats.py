import pytest
from pydantic import ValidationError

from schemas.progress import UserStats
from stats import accuracy, update_stats


def test_correct_answer_bumps_all_counters():
    s = update_stats(UserStats(correct=2, total=3, streak=1), True)
    assert s == UserStats(correct=3, total=4, streak=2)


def test_incorrect_answer_resets_streak_to_zero():
    s = update_stats(UserStats(correct=9, total=9, streak=9), False)
    assert s.streak == 0
    assert s.correct == 9 and s.total == 10


def test_correct_never_exceeds_total_over_a_sequence():
    s = UserStats()
    for outcome in [True, False, True, True, False, False, True, True, True]:
        s = update_stats(s, outcome)
        assert s.correct <= s.total
        assert s.streak <= s.total
    assert (s.correct, s.total, s.streak) == (6, 9, 3)


def test_stats_reject_impossible_counters():
    with pytest.raises(ValidationError):
        UserStats(correct=3, total=2, streak=0)
    with pytest.raises(ValidationError):
        UserStats(correct=0, total=1, streak=2)
    with pytest.raises(ValidationError):
        UserStats(correct=-1, total=0, streak=0)


def test_accuracy():
    assert accuracy(UserStats()) == 0.0
    assert accuracy(UserStats(correct=2, total=3, streak=0)) == 66.7

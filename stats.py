from __future__ import annotations

from schemas.progress import UserStats


def update_stats(prior: UserStats, is_correct: bool) -> UserStats:
    """Fold one submission into the running counters. Pure; the caller persists."""
    return UserStats(
        correct=prior.correct + (1 if is_correct else 0),
        total=prior.total + 1,
        streak=prior.streak + 1 if is_correct else 0,
    )


def accuracy(stats: UserStats) -> float:
    if stats.total == 0:
        return 0.0
    return round(stats.correct / stats.total * 100, 1)

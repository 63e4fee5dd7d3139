# Achievement catalogue and unlock rules.
#
# Every rule looks at the cumulative stats only (never deltas), and an
# achievement that is already unlocked is left untouched, so evaluation is
# idempotent and unlocks are permanent.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable, Dict, Iterable, List, Optional

from schemas.progress import Achievement, AchievementOut, UserStats

_Rule = Callable[[UserStats], bool]

# id -> (title, description, rule); order is the display order
CATALOGUE: Dict[str, tuple[str, str, _Rule]] = {
    "first-problem": (
        "First Problem",
        "Answer your first problem.",
        lambda s: s.total >= 1,
    ),
    "quick-learner": (
        "Quick Learner",
        "Get 5 problems right.",
        lambda s: s.correct >= 5,
    ),
    "hot-streak": (
        "Hot Streak",
        "Answer 3 problems in a row correctly.",
        lambda s: s.streak >= 3,
    ),
    "math-master": (
        "Math Master",
        "Answer 10 problems.",
        lambda s: s.total >= 10,
    ),
    "perfect-score": (
        "Perfect Score",
        "Answer at least 5 problems without a single mistake.",
        lambda s: s.total >= 5 and s.correct == s.total,
    ),
    # Named for hints but only counts problems; see DESIGN.md.
    "hint-master": (
        "Hint Master",
        "Answer 3 problems.",
        lambda s: s.total >= 3,
    ),
    "speed-demon": (
        "Speed Demon",
        "Answer 5 problems in a row correctly.",
        lambda s: s.streak >= 5,
    ),
    "problem-solver": (
        "Problem Solver",
        "Answer 20 problems.",
        lambda s: s.total >= 20,
    ),
}

ACHIEVEMENT_IDS = tuple(CATALOGUE)


def default_achievements() -> List[Achievement]:
    return [Achievement(id=aid) for aid in ACHIEVEMENT_IDS]


def evaluate(
    stats: UserStats,
    prior: Iterable[Achievement],
    now: Optional[datetime] = None,
) -> List[Achievement]:
    """Return the full achievement list after applying ``stats``.

    ``prior`` may be partial or contain unknown ids: missing ids count as
    locked, unknown ones are dropped. Unlocked entries are copied through
    unchanged, including their timestamp. Newly unlocked entries get ``now``.
    """
    now = now or datetime.now(UTC)
    by_id = {a.id: a for a in prior if a.id in CATALOGUE}

    result: List[Achievement] = []
    for aid, (_, _, rule) in CATALOGUE.items():
        current = by_id.get(aid)
        if current is not None and current.unlocked:
            result.append(current)
        elif rule(stats):
            result.append(Achievement(id=aid, unlocked=True, unlocked_at=now))
        else:
            result.append(Achievement(id=aid))
    return result


def newly_unlocked(prior: Iterable[Achievement], updated: Iterable[Achievement]) -> List[str]:
    was_unlocked = {a.id for a in prior if a.unlocked}
    return [a.id for a in updated if a.unlocked and a.id not in was_unlocked]


def describe(achievements: Iterable[Achievement]) -> List[AchievementOut]:
    """Attach display title/description for the stats view."""
    out = []
    for a in achievements:
        title, description, _ = CATALOGUE[a.id]
        out.append(AchievementOut(**a.model_dump(), title=title, description=description))
    return out

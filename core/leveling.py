"""Level calculation from cumulative points."""

from __future__ import annotations

from bisect import bisect_right

from core.models import UserLevel


LEVEL_THRESHOLDS = (0, 100, 300, 600, 1000, 1500, 2200, 3000, 4000, 5200)

# Levels past the table grow by a fixed step.
OPEN_LEVEL_STEP = 1000

LEVEL_TITLES = {
    1: "Beginner",
    2: "Novice",
    3: "Apprentice",
    4: "Practitioner",
    5: "Self-disciplined",
    6: "Focused",
    7: "Conqueror",
    8: "Master",
    9: "Legend",
    10: "Awakened",
}


def calculate_level(total_points: int, thresholds: tuple[int, ...] = LEVEL_THRESHOLDS) -> UserLevel:
    """Map lifetime points to a level.

    Past the last threshold every OPEN_LEVEL_STEP points is one more level.
    Negative totals are treated as 0.
    """
    total_points = max(0, int(total_points))
    level = max(1, bisect_right(thresholds, total_points))
    current_threshold = thresholds[level - 1]
    if level < len(thresholds):
        next_threshold = thresholds[level]
    else:
        extra = (total_points - current_threshold) // OPEN_LEVEL_STEP
        level += extra
        current_threshold += extra * OPEN_LEVEL_STEP
        next_threshold = current_threshold + OPEN_LEVEL_STEP
    return UserLevel(
        level=level,
        total_points=total_points,
        current_points=total_points - current_threshold,
        points_to_next_level=next_threshold - total_points,
    )


def level_title(level: int) -> str:
    return LEVEL_TITLES.get(level, "Unknown")


def level_progress(user_level: UserLevel) -> int:
    """Percent of the way through the current level (0-100)."""
    span = user_level.current_points + user_level.points_to_next_level
    if span == 0:
        return 0
    return round(user_level.current_points / span * 100)

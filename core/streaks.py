"""Habit streak computation from completion logs.

A streak counts consecutive *scheduled* days with a completed log. Days a
habit is not scheduled (weekends for "weekdays", days outside custom_days
for "custom") neither extend nor break it. Today only counts against the
streak once it is over, so an unfinished today leaves yesterday's streak
intact. There is no grace period: one missed scheduled day resets it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable


@dataclass(frozen=True)
class StreakResult:
    current: int = 0
    longest: int = 0


def is_scheduled(frequency: str, custom_days: Iterable[int], day: date) -> bool:
    """Whether a habit is due on *day*. custom_days uses 0=Monday .. 6=Sunday."""
    if frequency == "daily":
        return True
    if frequency == "weekdays":
        return day.weekday() < 5
    if frequency == "custom":
        return day.weekday() in set(custom_days)
    raise ValueError(f"Unknown habit frequency: {frequency!r}")


def _previous_scheduled(day: date, frequency: str, custom_days: list[int]) -> date | None:
    for _ in range(7):
        day -= timedelta(days=1)
        if is_scheduled(frequency, custom_days, day):
            return day
    return None


def recompute_streak(
    completed_days: Iterable[str | date],
    today: date,
    frequency: str = "daily",
    custom_days: Iterable[int] = (),
) -> StreakResult:
    """Compute current and longest streak from the days a habit was completed.

    Completions on unscheduled days and after *today* are ignored.
    """
    custom = list(custom_days)
    days = set()
    for d in completed_days:
        day = date.fromisoformat(d) if isinstance(d, str) else d
        if day <= today and is_scheduled(frequency, custom, day):
            days.add(day)
    if not days:
        return StreakResult()

    # Longest run over the whole history.
    longest = 0
    run = 0
    prev: date | None = None
    for day in sorted(days):
        if prev is not None and _previous_scheduled(day, frequency, custom) == prev:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        prev = day

    # Current run, walking back from today (or the last scheduled day before it).
    cursor: date | None = today
    if today not in days:
        cursor = _previous_scheduled(today, frequency, custom)
    current = 0
    while cursor is not None and cursor in days:
        current += 1
        cursor = _previous_scheduled(cursor, frequency, custom)

    return StreakResult(current=current, longest=max(longest, current))

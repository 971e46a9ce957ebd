"""Read-only projections of engine state for display."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.leveling import level_progress, level_title

if TYPE_CHECKING:
    from core.engine import Engine


def build_dashboard(engine: Engine) -> dict[str, Any]:
    """Everything a home screen shows, computed fresh from the stores."""
    today = engine.clock.today_str()
    level = engine.level
    board = engine.tasks.tasks_by_quadrant(today)
    timer = engine.timer

    return {
        "date": today,
        "tasks": engine.tasks.today_stats(),
        "quadrants": {q: [t.to_dict() for t in tasks] for q, tasks in board.items()},
        "habits": [
            {
                "id": h.id,
                "name": h.name,
                "icon": h.icon,
                "currentStreak": h.current_streak,
                "longestStreak": h.longest_streak,
                "doneToday": engine.habits.is_completed(h.id, today),
            }
            for h in engine.habits.get_active_habits()
        ],
        "level": {
            **level.to_dict(),
            "title": level_title(level.level),
            "progressPct": level_progress(level),
        },
        "points": {
            "total": engine.points.total_points,
            "spendable": engine.points.current_points,
        },
        "timer": {
            "mode": timer.mode,
            "display": timer.display,
            "running": timer.is_running,
            "progress": round(timer.progress, 3),
            "focusSessionsToday": timer.completed_focus_sessions_today,
        },
    }

"""Habit store: definitions, completion log, and streak bookkeeping."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from core.models import HABIT_FREQUENCIES, Habit, HabitLog, new_id
from core.storage import PersistentStore, persists, records
from core.streaks import StreakResult, recompute_streak

logger = logging.getLogger(__name__)


PATCHABLE_FIELDS = {
    "name",
    "description",
    "icon",
    "target_value",
    "unit",
    "frequency",
    "custom_days",
    "points_reward",
    "current_streak",
    "longest_streak",
    "is_active",
}


def _valid_day(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """Coerce patch values to the stored types. Bad values raise ValueError."""
    clean: dict[str, Any] = {}
    for name, value in patch.items():
        try:
            if name in ("points_reward", "current_streak", "longest_streak"):
                value = max(0, int(value))
            elif name == "target_value":
                value = float(value)
            elif name == "custom_days":
                value = sorted({int(d) for d in value})
            elif name == "is_active":
                value = bool(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {name}: {value!r}") from e
        clean[name] = value
    return clean


def _check_frequency(frequency: str, custom_days: list[int] | None) -> None:
    if frequency not in HABIT_FREQUENCIES:
        raise ValueError(f"Invalid frequency: {frequency!r}")
    if custom_days and any(not 0 <= d <= 6 for d in custom_days):
        raise ValueError("custom_days must be weekday numbers 0 (Mon) to 6 (Sun)")


class HabitStore(PersistentStore):
    """Owns habits and their daily logs.

    Every write path keeps longest_streak >= current_streak, raising
    longest_streak when a write would break it.
    """

    key = "habits"

    def restore(self, data: dict[str, Any]) -> None:
        self.habits = [Habit.from_dict(h) for h in records(data, "habits")]
        logs = [HabitLog.from_dict(entry) for entry in records(data, "logs")]
        self.logs = [entry for entry in logs if _valid_day(entry.date)]
        if len(self.logs) != len(logs):
            logger.warning("Dropped %d habit log(s) with an unreadable date", len(logs) - len(self.logs))

    def snapshot(self) -> dict[str, Any]:
        return {
            "habits": [h.to_dict() for h in self.habits],
            "logs": [entry.to_dict() for entry in self.logs],
        }

    # ── Reads ─────────────────────────────────────────────────

    def get_habit(self, habit_id: str) -> Habit | None:
        for h in self.habits:
            if h.id == habit_id:
                return h
        return None

    def get_active_habits(self) -> list[Habit]:
        return [h for h in self.habits if h.is_active]

    def logs_for(self, habit_id: str) -> list[HabitLog]:
        return sorted((entry for entry in self.logs if entry.habit_id == habit_id), key=lambda e: e.date)

    def get_log(self, habit_id: str, day: str) -> HabitLog | None:
        for entry in self.logs:
            if entry.habit_id == habit_id and entry.date == day:
                return entry
        return None

    def is_completed(self, habit_id: str, day: str | None = None) -> bool:
        entry = self.get_log(habit_id, day or self.clock.today_str())
        return entry is not None and entry.completed

    def compute_streak(self, habit: Habit, today: date | None = None) -> StreakResult:
        done_days = [entry.date for entry in self.logs if entry.habit_id == habit.id and entry.completed]
        return recompute_streak(done_days, today or self.clock.today(), habit.frequency, habit.custom_days)

    # ── Mutations ─────────────────────────────────────────────

    @staticmethod
    def _keep_invariant(habit: Habit) -> None:
        habit.current_streak = max(0, int(habit.current_streak))
        habit.longest_streak = max(int(habit.longest_streak), habit.current_streak)

    @persists
    def add_habit(
        self,
        name: str,
        icon: str = "",
        target_value: float = 1,
        unit: str = "",
        frequency: str = "daily",
        custom_days: list[int] | None = None,
        points_reward: int = 0,
        description: str = "",
    ) -> Habit:
        _check_frequency(frequency, custom_days)
        now = self._now()
        habit = Habit(
            id=new_id(),
            name=name,
            description=description,
            icon=icon,
            target_value=target_value,
            unit=unit,
            frequency=frequency,
            custom_days=sorted(set(custom_days or [])),
            points_reward=max(0, int(points_reward)),
            current_streak=0,
            longest_streak=0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.habits.append(habit)
        return habit

    @persists
    def update_habit(self, habit_id: str, patch: dict[str, Any]) -> Habit | None:
        """Apply a partial patch of snake_case fields. Missing id is a no-op."""
        habit = self.get_habit(habit_id)
        if habit is None:
            return None
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch habit field(s): {', '.join(sorted(unknown))}")
        patch = _normalize_patch(patch)
        if "frequency" in patch or "custom_days" in patch:
            _check_frequency(patch.get("frequency", habit.frequency), patch.get("custom_days"))
        for name, value in patch.items():
            setattr(habit, name, value)
        self._keep_invariant(habit)
        habit.updated_at = self._now()
        return habit

    @persists
    def deactivate_habit(self, habit_id: str) -> Habit | None:
        """Logical delete: the habit and its logs stay on record."""
        habit = self.get_habit(habit_id)
        if habit is None:
            return None
        habit.is_active = False
        habit.updated_at = self._now()
        return habit

    @persists
    def remove_habit(self, habit_id: str) -> bool:
        """Hard delete a habit together with its logs."""
        before = len(self.habits)
        self.habits = [h for h in self.habits if h.id != habit_id]
        if len(self.habits) == before:
            return False
        self.logs = [entry for entry in self.logs if entry.habit_id != habit_id]
        return True

    @persists
    def log_completion(
        self,
        habit_id: str,
        day: str | None = None,
        value: float | None = None,
        note: str = "",
        completed: bool = True,
    ) -> HabitLog | None:
        """Record (or overwrite) the log for one day and refresh the habit's streak.

        Unknown habits and future days are ignored.
        """
        habit = self.get_habit(habit_id)
        if habit is None:
            return None
        today = self.clock.today()
        day = day or today.isoformat()
        if date.fromisoformat(day) > today:
            return None

        now = self._now()
        entry = self.get_log(habit_id, day)
        if entry is None:
            entry = HabitLog(id=new_id(), habit_id=habit_id, date=day, created_at=now)
            self.logs.append(entry)
        entry.completed = completed
        entry.value = value
        entry.note = note

        self._apply_streak(habit, self.compute_streak(habit, today))
        habit.updated_at = now
        return entry

    def _apply_streak(self, habit: Habit, result: StreakResult) -> None:
        habit.current_streak = result.current
        habit.longest_streak = max(habit.longest_streak, result.longest)
        self._keep_invariant(habit)

    @persists
    def refresh_streaks(self, today: date | None = None) -> list[str]:
        """Recompute every active habit's streak for *today*.

        Returns the ids of habits whose running streak was broken by a miss.
        """
        today = today or self.clock.today()
        now = self._now()
        broken = []
        for habit in self.get_active_habits():
            result = self.compute_streak(habit, today)
            if result.current != habit.current_streak:
                if result.current == 0 and habit.current_streak > 0:
                    broken.append(habit.id)
                self._apply_streak(habit, result)
                habit.updated_at = now
        return broken

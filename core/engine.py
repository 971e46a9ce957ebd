"""Composition root: owns the stores, clock, config, and storage backend.

Collaborators (the TUI, scripts, an AI planning assistant) get an Engine and
call the same store operations; nothing here is a module-level singleton.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.config import load_config
from core.habits import HabitStore
from core.hooks import run_hooks
from core.models import AppConfig, HabitLog, Task, UserLevel
from core.points import PointsLedger
from core.storage import JsonFileBackend, StorageBackend, WriteBehindBackend
from core.tasks import TaskStore
from core.timer import FocusTimer
from core.workspace import Clock, SystemClock, data_dir, workspace_root

logger = logging.getLogger(__name__)


def _clock_for(config: AppConfig) -> SystemClock:
    try:
        return SystemClock(ZoneInfo(config.timezone))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in config, using UTC", config.timezone)
        return SystemClock(ZoneInfo("UTC"))


class Engine:
    def __init__(
        self,
        root: Path | None = None,
        backend: StorageBackend | None = None,
        clock: Clock | None = None,
        config: AppConfig | None = None,
        hooks_enabled: bool = False,
    ) -> None:
        self.root = root or workspace_root()
        self.config = config or load_config(self.root)
        self.clock = clock or _clock_for(self.config)
        self.backend = backend or WriteBehindBackend(JsonFileBackend(data_dir(self.root)))
        self.hooks_enabled = hooks_enabled
        self._rolled_over_on: str | None = None

        self.tasks = TaskStore(self.backend, self.clock)
        self.habits = HabitStore(self.backend, self.clock)
        self.points = PointsLedger(self.backend, self.clock)
        self.timer = FocusTimer(self.config.pomodoro, self.clock)
        self.timer.add_completion_listener(self._on_timer_complete)

    # ── Lifecycle ─────────────────────────────────────────────

    def flush(self) -> None:
        self.backend.flush()

    def close(self) -> None:
        self.backend.close()

    def _fire(self, hook_point: str, context: dict[str, Any]) -> None:
        if self.hooks_enabled:
            run_hooks(hook_point, context, self.root)

    # ── Points ────────────────────────────────────────────────

    @property
    def level(self) -> UserLevel:
        return self.points.get_user_level()

    def award(self, amount: int, tx_type: str, source_id: str | None, description: str) -> UserLevel:
        """Add points and fire on_level_up if the level changed."""
        before = self.points.get_user_level().level
        self.points.add_points(amount, tx_type, source_id, description)
        after = self.points.get_user_level()
        if after.level > before:
            logger.info("Level up: %d -> %d", before, after.level)
            self._fire("on_level_up", {"level": after.level, "totalPoints": after.total_points})
        return after

    def _already_awarded(self, tx_type: str, source_id: str) -> bool:
        return any(t.type == tx_type and t.source_id == source_id for t in self.points.transactions)

    def redeem_reward(self, reward_id: str) -> bool:
        ok = self.points.redeem_reward(reward_id)
        if ok:
            reward = self.points.get_reward(reward_id)
            self._fire("on_reward_redeem", {"reward": reward.to_dict() if reward else {"id": reward_id}})
        return ok

    # ── Tasks ─────────────────────────────────────────────────

    def complete_task(self, task_id: str) -> Task | None:
        """Mark a task done and pay its reward the first time it is completed."""
        task = self.tasks.get_task(task_id)
        if task is None:
            return None
        was_done = task.status == "done"
        self.tasks.set_status(task_id, "done")
        if not was_done:
            if task.points_reward > 0 and not self._already_awarded("task_complete", task.id):
                self.award(task.points_reward, "task_complete", task.id, task.title)
            self._fire("on_task_complete", {"task": task.to_dict()})
        return task

    def reopen_task(self, task_id: str) -> Task | None:
        return self.tasks.set_status(task_id, "todo")

    # ── Habits ────────────────────────────────────────────────

    def complete_habit(self, habit_id: str, day: str | None = None, value: float | None = None) -> HabitLog | None:
        """Log a habit as done for a day and pay its reward once per day.

        A new day is rolled over first, so a streak the log is about to
        restart still counts as broken.
        """
        self.rollover_if_new_day()
        entry = self.habits.log_completion(habit_id, day, value=value)
        if entry is None:
            return None
        habit = self.habits.get_habit(habit_id)
        source = f"{habit_id}:{entry.date}"
        if habit.points_reward > 0 and not self._already_awarded("habit_complete", source):
            self.award(habit.points_reward, "habit_complete", source, habit.name)
        self._fire("on_habit_complete", {"habit": habit.to_dict(), "date": entry.date})
        return entry

    def rollover_day(self) -> list[str]:
        """Recompute streaks for today and apply active streak_broken punishments.

        Returns the ids of habits whose streak broke.
        """
        self._rolled_over_on = self.clock.today_str()
        broken = self.habits.refresh_streaks()
        penalties = [p for p in self.points.punishments if p.is_active and p.trigger_condition == "streak_broken"]
        for _ in broken:
            for punishment in penalties:
                self.points.apply_punishment(punishment.id)
        return broken

    def rollover_if_new_day(self) -> list[str] | None:
        """Run rollover_day() once per local day. None when already done today."""
        if self._rolled_over_on == self.clock.today_str():
            return None
        return self.rollover_day()

    # ── Focus timer ───────────────────────────────────────────

    def focus_on(self, task_id: str | None) -> None:
        """Point the timer at a task (or none) and rewind a fresh focus session."""
        self.timer.set_current_task(task_id)
        self.timer.switch_mode("focus")

    def _on_timer_complete(self, mode: str, timer: FocusTimer) -> None:
        if mode == "focus":
            task = self.tasks.log_pomodoro(timer.state.current_task_id)
            self._fire(
                "on_focus_complete",
                {
                    "taskId": task.id if task else None,
                    "completedToday": timer.completed_focus_sessions_today,
                },
            )
        if self.config.pomodoro.auto_start_next:
            timer.switch_mode(timer.suggest_next_mode())
            timer.start()

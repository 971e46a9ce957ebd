"""Typed dataclasses for the discipline engine data model.

All persisted models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any


QUADRANTS = (
    "urgent-important",
    "not-urgent-important",
    "urgent-not-important",
    "not-urgent-not-important",
)
TASK_STATUSES = ("todo", "in_progress", "done", "cancelled")
HABIT_FREQUENCIES = ("daily", "weekdays", "custom")
TIMER_MODES = ("focus", "short_break", "long_break")
TRIGGER_CONDITIONS = ("task_incomplete", "habit_missed", "streak_broken")
TRANSACTION_TYPES = (
    "task_complete",
    "habit_complete",
    "streak_bonus",
    "reward_redeem",
    "punishment",
    "manual",
)


def new_id() -> str:
    """Short URL-safe random identifier."""
    return secrets.token_urlsafe(12)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    id: str = ""
    title: str = ""
    description: str = ""
    quadrant: str = "not-urgent-important"
    status: str = "todo"
    goal_id: str | None = None
    date: str = ""  # ISO local calendar day
    estimated_pomodoros: int = 0
    completed_pomodoros: int = 0
    points_reward: int = 0
    due_time: str | None = None
    tags: list[str] = field(default_factory=list)
    order: float = 0.0
    completed_at: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        quadrant = str(d.get("quadrant", "not-urgent-important"))
        status = str(d.get("status", "todo"))
        return cls(
            id=str(d.get("id", "")),
            title=str(d.get("title", "")),
            description=str(d.get("description", "") or ""),
            quadrant=quadrant if quadrant in QUADRANTS else "not-urgent-important",
            status=status if status in TASK_STATUSES else "todo",
            goal_id=d.get("goalId"),
            date=str(d.get("date", "")),
            estimated_pomodoros=max(0, _int(d.get("estimatedPomodoros"))),
            completed_pomodoros=max(0, _int(d.get("completedPomodoros"))),
            points_reward=max(0, _int(d.get("pointsReward"))),
            due_time=d.get("dueTime"),
            tags=[str(t) for t in _list(d.get("tags"))],
            order=_float(d.get("order")),
            completed_at=d.get("completedAt"),
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "quadrant": self.quadrant,
            "status": self.status,
            "date": self.date,
            "estimatedPomodoros": self.estimated_pomodoros,
            "completedPomodoros": self.completed_pomodoros,
            "pointsReward": self.points_reward,
            "tags": list(self.tags),
            "order": self.order,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description:
            d["description"] = self.description
        if self.goal_id:
            d["goalId"] = self.goal_id
        if self.due_time:
            d["dueTime"] = self.due_time
        if self.completed_at:
            d["completedAt"] = self.completed_at
        return d


# ── Habits ────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    description: str = ""
    icon: str = ""
    target_value: float = 1
    unit: str = ""
    frequency: str = "daily"  # daily, weekdays, custom
    custom_days: list[int] = field(default_factory=list)  # 0=Mon .. 6=Sun
    points_reward: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    is_active: bool = True
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        frequency = str(d.get("frequency", "daily"))
        current = max(0, _int(d.get("currentStreak")))
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            description=str(d.get("description", "") or ""),
            icon=str(d.get("icon", "")),
            target_value=_float(d.get("targetValue"), 1),
            unit=str(d.get("unit", "")),
            frequency=frequency if frequency in HABIT_FREQUENCIES else "daily",
            custom_days=[_int(x) for x in _list(d.get("customDays")) if 0 <= _int(x, -1) <= 6],
            points_reward=max(0, _int(d.get("pointsReward"))),
            current_streak=current,
            longest_streak=max(current, _int(d.get("longestStreak"))),
            is_active=bool(d.get("isActive", True)),
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "targetValue": self.target_value,
            "unit": self.unit,
            "frequency": self.frequency,
            "pointsReward": self.points_reward,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description:
            d["description"] = self.description
        if self.frequency == "custom":
            d["customDays"] = list(self.custom_days)
        return d


@dataclass
class HabitLog:
    id: str = ""
    habit_id: str = ""
    date: str = ""
    completed: bool = True
    value: float | None = None
    note: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitLog:
        value = d.get("value")
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            date=str(d.get("date", "")),
            completed=bool(d.get("completed", True)),
            value=_float(value) if value is not None else None,
            note=str(d.get("note", "") or ""),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "habitId": self.habit_id,
            "date": self.date,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.value is not None:
            d["value"] = self.value
        if self.note:
            d["note"] = self.note
        return d


# ── Points ────────────────────────────────────────────────────


@dataclass
class Reward:
    id: str = ""
    name: str = ""
    description: str = ""
    icon: str = ""
    cost: int = 0
    category: str = ""
    times_redeemed: int = 0
    is_active: bool = True
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Reward:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            description=str(d.get("description", "") or ""),
            icon=str(d.get("icon", "")),
            cost=max(0, _int(d.get("cost"))),
            category=str(d.get("category", "")),
            times_redeemed=max(0, _int(d.get("timesRedeemed"))),
            is_active=bool(d.get("isActive", True)),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "cost": self.cost,
            "category": self.category,
            "timesRedeemed": self.times_redeemed,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }


@dataclass
class Punishment:
    id: str = ""
    name: str = ""
    description: str = ""
    icon: str = ""
    trigger_condition: str = "task_incomplete"
    points_penalty: int = 0
    is_active: bool = True
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Punishment:
        trigger = str(d.get("triggerCondition", "task_incomplete"))
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            description=str(d.get("description", "") or ""),
            icon=str(d.get("icon", "")),
            trigger_condition=trigger if trigger in TRIGGER_CONDITIONS else "task_incomplete",
            points_penalty=max(0, _int(d.get("pointsPenalty"))),
            is_active=bool(d.get("isActive", True)),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "triggerCondition": self.trigger_condition,
            "pointsPenalty": self.points_penalty,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }


@dataclass
class PointsTransaction:
    id: str = ""
    amount: int = 0  # signed: earn > 0, spend/penalty < 0
    type: str = "manual"
    source_id: str | None = None
    description: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PointsTransaction:
        tx_type = str(d.get("type", "manual"))
        return cls(
            id=str(d.get("id", "")),
            amount=_int(d.get("amount")),
            type=tx_type if tx_type in TRANSACTION_TYPES else "manual",
            source_id=d.get("sourceId"),
            description=str(d.get("description", "") or ""),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "amount": self.amount,
            "type": self.type,
            "description": self.description,
            "createdAt": self.created_at,
        }
        if self.source_id:
            d["sourceId"] = self.source_id
        return d


@dataclass
class UserLevel:
    """Derived from total points; never persisted."""

    level: int = 1
    total_points: int = 0
    current_points: int = 0
    points_to_next_level: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "totalPoints": self.total_points,
            "currentPoints": self.current_points,
            "pointsToNextLevel": self.points_to_next_level,
        }


# ── Focus timer ───────────────────────────────────────────────


@dataclass
class TimerState:
    """Process-lifetime timer state; never persisted."""

    mode: str = "focus"
    is_running: bool = False
    time_remaining: int = 25 * 60
    total_duration: int = 25 * 60
    current_task_id: str | None = None
    completed_focus_sessions_today: int = 0
    sessions_day: str = ""


# ── Configuration ─────────────────────────────────────────────


@dataclass
class PomodoroConfig:
    """Timer durations in minutes."""

    focus_duration: float = 25
    short_break_duration: float = 5
    long_break_duration: float = 15
    long_break_interval: int = 4
    auto_start_next: bool = False
    sound_enabled: bool = True
    notification_enabled: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PomodoroConfig:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            focus_duration=max(0.0, _float(d.get("focus_duration"), 25)),
            short_break_duration=max(0.0, _float(d.get("short_break_duration"), 5)),
            long_break_duration=max(0.0, _float(d.get("long_break_duration"), 15)),
            long_break_interval=max(1, _int(d.get("long_break_interval"), 4)),
            auto_start_next=bool(d.get("auto_start_next", False)),
            sound_enabled=bool(d.get("sound_enabled", True)),
            notification_enabled=bool(d.get("notification_enabled", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "focus_duration": self.focus_duration,
            "short_break_duration": self.short_break_duration,
            "long_break_duration": self.long_break_duration,
            "long_break_interval": self.long_break_interval,
            "auto_start_next": self.auto_start_next,
            "sound_enabled": self.sound_enabled,
            "notification_enabled": self.notification_enabled,
        }

    def duration_seconds(self, mode: str) -> int:
        minutes = {
            "focus": self.focus_duration,
            "short_break": self.short_break_duration,
            "long_break": self.long_break_duration,
        }.get(mode)
        if minutes is None:
            raise ValueError(f"Unknown timer mode: {mode!r}")
        return int(round(minutes * 60))


@dataclass
class AppConfig:
    timezone: str = "UTC"
    user_name: str = ""
    identity_statement: str = ""
    pomodoro: PomodoroConfig = field(default_factory=PomodoroConfig)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AppConfig:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            user_name=str(d.get("user_name", "") or ""),
            identity_statement=str(d.get("identity_statement", "") or ""),
            pomodoro=PomodoroConfig.from_dict(d.get("pomodoro") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "user_name": self.user_name,
            "identity_statement": self.identity_statement,
            "pomodoro": self.pomodoro.to_dict(),
        }

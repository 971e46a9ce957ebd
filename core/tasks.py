"""Task store: lifecycle, quadrant placement, ordering, and today's board.

Status transitions are deliberately permissive: any status may follow any
other (including cancelled -> done). Workflow rules belong to the caller.
The one rule the store enforces is that completed_at is set exactly when
status is "done".
"""

from __future__ import annotations

from typing import Any

from core.models import QUADRANTS, TASK_STATUSES, Task, new_id
from core.storage import PersistentStore, persists, records


# ── Validation ────────────────────────────────────────────────


def validate_task(task: dict[str, Any]) -> list[str]:
    """Validate user-entered task fields and return list of errors (empty if valid)."""
    errors = []
    if not str(task.get("title", "")).strip():
        errors.append("Missing required field: title")
    if "quadrant" in task and task["quadrant"] not in QUADRANTS:
        errors.append(f"Invalid quadrant: {task['quadrant']}")
    if "status" in task and task["status"] not in TASK_STATUSES:
        errors.append(f"Invalid status: {task['status']}")
    for name in ("estimated_pomodoros", "points_reward"):
        if name in task:
            value = task[name]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"{name} must be a non-negative integer")
    return errors


def _check_quadrant(quadrant: str) -> None:
    if quadrant not in QUADRANTS:
        raise ValueError(f"Invalid quadrant: {quadrant!r}")


def _check_status(status: str) -> None:
    if status not in TASK_STATUSES:
        raise ValueError(f"Invalid status: {status!r}")


def sort_key(task: Task) -> tuple[float, str]:
    return (task.order, task.created_at)


PATCHABLE_FIELDS = {
    "title",
    "description",
    "quadrant",
    "status",
    "goal_id",
    "date",
    "estimated_pomodoros",
    "completed_pomodoros",
    "points_reward",
    "due_time",
    "tags",
    "order",
}

COUNT_FIELDS = ("estimated_pomodoros", "completed_pomodoros", "points_reward")


def _normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """Coerce patch values to the stored types. Bad values raise ValueError."""
    clean: dict[str, Any] = {}
    for name, value in patch.items():
        try:
            if name in COUNT_FIELDS:
                value = max(0, int(value))
            elif name == "order":
                value = float(value)
            elif name == "tags":
                if isinstance(value, str):
                    raise TypeError("tags must be a list")
                value = [str(t) for t in value]
            elif name in ("title", "description", "date"):
                value = str(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {name}: {value!r}") from e
        clean[name] = value
    return clean


class TaskStore(PersistentStore):
    key = "tasks"

    def restore(self, data: dict[str, Any]) -> None:
        self.tasks = [Task.from_dict(t) for t in records(data, "tasks")]
        for task in self.tasks:
            self._stamp_completion(task, task.completed_at or task.updated_at or task.created_at)

    def snapshot(self) -> dict[str, Any]:
        return {"tasks": [t.to_dict() for t in self.tasks]}

    @staticmethod
    def _stamp_completion(task: Task, when: str) -> None:
        task.completed_at = (task.completed_at or when) if task.status == "done" else None

    def _next_order(self) -> float:
        # Milliseconds since epoch, bumped past the current maximum.
        order = float(int(self.clock.now().timestamp() * 1000))
        if self.tasks:
            order = max(order, max(t.order for t in self.tasks) + 1)
        return order

    # ── Reads ─────────────────────────────────────────────────

    def get_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def all_tasks(self) -> list[Task]:
        return sorted(self.tasks, key=sort_key)

    def tasks_for_day(self, day: str) -> list[Task]:
        return [t for t in self.all_tasks() if t.date == day]

    def today_tasks(self) -> list[Task]:
        """Tasks dated today, where today is read from the clock on every call."""
        return self.tasks_for_day(self.clock.today_str())

    def tasks_by_quadrant(self, day: str | None = None) -> dict[str, list[Task]]:
        tasks = self.all_tasks() if day is None else self.tasks_for_day(day)
        board: dict[str, list[Task]] = {q: [] for q in QUADRANTS}
        for t in tasks:
            board[t.quadrant].append(t)
        return board

    def today_stats(self) -> dict[str, Any]:
        today = self.today_tasks()
        done = sum(1 for t in today if t.status == "done")
        total = len(today)
        return {
            "total": total,
            "done": done,
            "progress_pct": round(done / total * 100, 1) if total else 0.0,
        }

    # ── Mutations ─────────────────────────────────────────────

    @persists
    def add_task(
        self,
        title: str,
        quadrant: str = "not-urgent-important",
        date: str | None = None,
        estimated_pomodoros: int = 1,
        points_reward: int = 0,
        description: str = "",
        goal_id: str | None = None,
        due_time: str | None = None,
        tags: list[str] | None = None,
        order: float | None = None,
    ) -> Task:
        """Create a task. Status always starts as "todo"."""
        _check_quadrant(quadrant)
        now = self._now()
        task = Task(
            id=new_id(),
            title=title,
            description=description,
            quadrant=quadrant,
            status="todo",
            goal_id=goal_id,
            date=date or self.clock.today_str(),
            estimated_pomodoros=max(0, int(estimated_pomodoros)),
            completed_pomodoros=0,
            points_reward=max(0, int(points_reward)),
            due_time=due_time,
            tags=list(tags or []),
            order=self._next_order() if order is None else float(order),
            created_at=now,
            updated_at=now,
        )
        self.tasks.append(task)
        return task

    @persists
    def update_task(self, task_id: str, patch: dict[str, Any]) -> Task | None:
        """Apply a partial patch of snake_case fields. Missing id is a no-op."""
        task = self.get_task(task_id)
        if task is None:
            return None
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch task field(s): {', '.join(sorted(unknown))}")
        if "quadrant" in patch:
            _check_quadrant(patch["quadrant"])
        if "status" in patch:
            _check_status(patch["status"])
        patch = _normalize_patch(patch)
        now = self._now()
        previous_status = task.status
        for name, value in patch.items():
            setattr(task, name, value)
        if task.status != previous_status:
            task.completed_at = None
        self._stamp_completion(task, now)
        task.updated_at = now
        return task

    @persists
    def remove_task(self, task_id: str) -> bool:
        """Permanently delete a task."""
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.id != task_id]
        return len(self.tasks) != before

    @persists
    def set_status(self, task_id: str, status: str) -> Task | None:
        """Set status; "done" stamps a fresh completed_at, anything else clears it."""
        _check_status(status)
        task = self.get_task(task_id)
        if task is None:
            return None
        now = self._now()
        task.status = status
        task.completed_at = now if status == "done" else None
        task.updated_at = now
        return task

    @persists
    def move_task(self, task_id: str, quadrant: str) -> Task | None:
        _check_quadrant(quadrant)
        task = self.get_task(task_id)
        if task is None:
            return None
        task.quadrant = quadrant
        task.updated_at = self._now()
        return task

    @persists
    def reorder_task(self, task_id: str, new_order: float) -> Task | None:
        """Give one task a new sort key. Sibling keys are left alone."""
        task = self.get_task(task_id)
        if task is None:
            return None
        task.order = float(new_order)
        task.updated_at = self._now()
        return task

    @persists
    def log_pomodoro(self, task_id: str | None) -> Task | None:
        """Count one finished focus session against a task, if it still exists."""
        task = self.get_task(task_id) if task_id else None
        if task is None:
            return None
        task.completed_pomodoros += 1
        task.updated_at = self._now()
        return task

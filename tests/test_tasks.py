"""Tests for core/tasks.py: lifecycle, placement, ordering, today's board."""

import json
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from core.models import QUADRANTS
from core.tasks import TaskStore, validate_task
from core.workspace import FixedClock


@pytest.fixture
def store(backend, clock):
    return TaskStore(backend, clock)


def test_validate_task_valid():
    assert validate_task({"title": "Write report", "quadrant": "urgent-important"}) == []


def test_validate_task_empty_title():
    errors = validate_task({"title": "   "})
    assert any("title" in e for e in errors)


def test_validate_task_bad_fields():
    errors = validate_task({"title": "x", "quadrant": "someday", "status": "maybe", "points_reward": -1})
    assert any("quadrant" in e for e in errors)
    assert any("status" in e for e in errors)
    assert any("points_reward" in e for e in errors)


def test_add_task_defaults(store, clock):
    task = store.add_task("Write report", quadrant="urgent-important", points_reward=10)
    assert task.status == "todo"
    assert task.completed_pomodoros == 0
    assert task.completed_at is None
    assert task.date == "2026-02-11"
    assert task.created_at == task.updated_at == clock.timestamp()
    assert store.get_task(task.id) is task


def test_add_task_rejects_unknown_quadrant(store):
    with pytest.raises(ValueError, match="quadrant"):
        store.add_task("x", quadrant="later")


def test_done_stamps_completed_at_and_other_status_clears(store, clock):
    task = store.add_task("A")
    store.set_status(task.id, "done")
    assert task.completed_at == clock.timestamp()

    for status in ("todo", "in_progress", "cancelled"):
        store.set_status(task.id, status)
        assert task.completed_at is None


def test_done_todo_done_gives_fresh_completed_at(store, clock):
    task = store.add_task("A")
    store.set_status(task.id, "done")
    first = task.completed_at
    clock.advance(minutes=5)
    store.set_status(task.id, "todo")
    store.set_status(task.id, "done")
    assert task.completed_at is not None
    assert task.completed_at > first


def test_transitions_are_permissive(store):
    task = store.add_task("A")
    store.set_status(task.id, "cancelled")
    store.set_status(task.id, "done")
    assert task.status == "done"
    store.set_status(task.id, "in_progress")
    assert task.status == "in_progress"


def test_set_status_unknown_value_raises(store):
    task = store.add_task("A")
    with pytest.raises(ValueError):
        store.set_status(task.id, "archived")


def test_missing_id_writes_are_noops(store):
    assert store.set_status("ghost", "done") is None
    assert store.move_task("ghost", "urgent-important") is None
    assert store.reorder_task("ghost", 1) is None
    assert store.update_task("ghost", {"title": "x"}) is None
    assert store.log_pomodoro("ghost") is None
    assert store.log_pomodoro(None) is None
    assert store.remove_task("ghost") is False
    assert store.get_task("ghost") is None


def test_move_task_keeps_completion(store):
    task = store.add_task("A", quadrant="urgent-important")
    store.set_status(task.id, "done")
    stamp = task.completed_at
    store.move_task(task.id, "not-urgent-not-important")
    assert task.quadrant == "not-urgent-not-important"
    assert task.status == "done"
    assert task.completed_at == stamp


def test_update_task_patch_and_status_rule(store, clock):
    task = store.add_task("A")
    clock.advance(seconds=30)
    store.update_task(task.id, {"title": "B", "status": "done"})
    assert task.title == "B"
    assert task.completed_at == clock.timestamp()
    assert task.updated_at == clock.timestamp()
    store.update_task(task.id, {"status": "todo"})
    assert task.completed_at is None


def test_update_task_rejects_unknown_field(store):
    task = store.add_task("A")
    with pytest.raises(ValueError, match="completed_at"):
        store.update_task(task.id, {"completed_at": "2026-01-01"})


def test_reorder_leaves_siblings_and_ties_break_by_created_at(store, clock):
    a = store.add_task("A", order=10)
    clock.advance(seconds=1)
    b = store.add_task("B", order=20)
    clock.advance(seconds=1)
    c = store.add_task("C", order=30)

    store.reorder_task(c.id, 10)
    assert (a.order, b.order, c.order) == (10, 20, 10)
    assert [t.title for t in store.all_tasks()] == ["A", "C", "B"]


def test_default_order_is_increasing(store):
    first = store.add_task("A")
    second = store.add_task("B")
    assert second.order > first.order


def test_remove_task_is_permanent(store, backend, clock):
    task = store.add_task("A")
    assert store.remove_task(task.id) is True
    assert store.get_task(task.id) is None
    assert TaskStore(backend, clock).get_task(task.id) is None


def test_log_pomodoro(store):
    task = store.add_task("A", estimated_pomodoros=3)
    store.log_pomodoro(task.id)
    store.log_pomodoro(task.id)
    assert task.completed_pomodoros == 2


def test_tasks_by_quadrant(store):
    store.add_task("A", quadrant="urgent-important")
    store.add_task("B", quadrant="urgent-important")
    store.add_task("C", quadrant="not-urgent-not-important", date="2026-02-12")
    board = store.tasks_by_quadrant("2026-02-11")
    assert list(board) == list(QUADRANTS)
    assert [t.title for t in board["urgent-important"]] == ["A", "B"]
    assert board["not-urgent-not-important"] == []


def test_today_done_count_changes_at_local_midnight(backend):
    clock = FixedClock(datetime(2026, 2, 11, 23, 59, 30, tzinfo=ZoneInfo("Asia/Shanghai")))
    store = TaskStore(backend, clock)
    task = store.add_task("Late task")
    store.set_status(task.id, "done")
    assert store.today_stats()["done"] == 1
    assert [t.id for t in store.today_tasks()] == [task.id]

    clock.advance(seconds=60)
    assert clock.today_str() == "2026-02-12"
    assert store.today_tasks() == []
    assert store.today_stats() == {"total": 0, "done": 0, "progress_pct": 0.0}
    assert store.get_task(task.id).date == "2026-02-11"


def test_today_uses_local_not_utc_day(backend):
    # 01:00 in Shanghai is still the previous day in UTC.
    clock = FixedClock(datetime(2026, 2, 12, 1, 0, tzinfo=ZoneInfo("Asia/Shanghai")))
    store = TaskStore(backend, clock)
    task = store.add_task("Early")
    assert task.date == "2026-02-12"


def test_snapshot_restores_and_repairs_completed_at(backend, clock):
    backend.write(
        "tasks",
        json.dumps(
            {
                "tasks": [
                    {"id": "a", "title": "done w/o stamp", "status": "done", "updatedAt": "2026-02-10T10:00:00"},
                    {"id": "b", "title": "todo with stamp", "status": "todo", "completedAt": "2026-02-10T10:00:00"},
                    "not-a-task",
                    {"id": "c", "title": "future field", "priority": 3, "quadrant": "bogus"},
                ]
            }
        ),
    )
    store = TaskStore(backend, clock)
    assert [t.id for t in store.tasks] == ["a", "b", "c"]
    assert store.get_task("a").completed_at == "2026-02-10T10:00:00"
    assert store.get_task("b").completed_at is None
    assert store.get_task("c").quadrant == "not-urgent-important"


def test_update_task_normalizes_values(store):
    task = store.add_task("A")
    store.update_task(
        task.id,
        {"completed_pomodoros": -3, "estimated_pomodoros": "4", "points_reward": -10, "order": "7", "tags": ("x", 1)},
    )
    assert task.completed_pomodoros == 0
    assert task.estimated_pomodoros == 4
    assert task.points_reward == 0
    assert task.order == 7.0
    assert task.tags == ["x", "1"]


def test_update_task_bad_value_leaves_task_untouched(store):
    task = store.add_task("A", order=5)
    with pytest.raises(ValueError, match="order"):
        store.update_task(task.id, {"title": "B", "order": "soon"})
    with pytest.raises(ValueError, match="tags"):
        store.update_task(task.id, {"tags": "work"})
    assert task.title == "A"
    assert task.order == 5.0
    assert [t.id for t in store.all_tasks()] == [task.id]

"""Tests for core/timer.py: focus timer state machine."""

import pytest

from core.models import PomodoroConfig
from core.timer import FocusTimer


@pytest.fixture
def timer(clock):
    return FocusTimer(PomodoroConfig(focus_duration=25, short_break_duration=5, long_break_duration=15), clock)


def test_initial_state(timer):
    assert timer.mode == "focus"
    assert timer.time_remaining == 25 * 60
    assert timer.is_running is False
    assert timer.display == "25:00"
    assert timer.progress == 0


def test_durations_come_from_config(clock):
    t = FocusTimer(PomodoroConfig(focus_duration=50, short_break_duration=10, long_break_duration=0.5), clock)
    assert t.duration_for("focus") == 3000
    assert t.duration_for("short_break") == 600
    assert t.duration_for("long_break") == 30
    with pytest.raises(ValueError):
        t.duration_for("nap")


@pytest.mark.parametrize("running", [True, False])
def test_reset_always_stops_and_rewinds(timer, running):
    timer.start()
    for _ in range(10):
        timer.tick()
    if not running:
        timer.pause()
    timer.reset(90)
    assert timer.time_remaining == 90
    assert timer.is_running is False
    assert timer.progress == 0


def test_set_mode_does_not_reset_clock(timer):
    timer.start()
    timer.tick()
    timer.set_mode("short_break")
    assert timer.mode == "short_break"
    assert timer.time_remaining == 25 * 60 - 1
    assert timer.is_running is True


def test_set_mode_then_reset_twice_is_idempotent(timer):
    timer.set_mode("long_break")
    timer.reset(timer.duration_for("long_break"))
    timer.reset(timer.duration_for("long_break"))
    assert timer.time_remaining == 15 * 60
    assert timer.mode == "long_break"


def test_switch_mode_resets_to_mode_length(timer):
    timer.switch_mode("short_break")
    assert timer.mode == "short_break"
    assert timer.time_remaining == 300


def test_set_mode_rejects_unknown(timer):
    with pytest.raises(ValueError):
        timer.set_mode("nap")


def test_tick_only_while_running(timer):
    assert timer.tick() is False
    assert timer.time_remaining == 25 * 60
    timer.start()
    timer.tick()
    assert timer.time_remaining == 25 * 60 - 1


def test_last_focus_tick_completes_session(timer):
    timer.reset(1)
    timer.start()
    assert timer.tick() is True
    assert timer.time_remaining == 0
    assert timer.is_running is False
    assert timer.completed_focus_sessions_today == 1


def test_break_completion_does_not_count(timer):
    timer.switch_mode("short_break")
    timer.reset(1)
    timer.start()
    assert timer.tick() is True
    assert timer.completed_focus_sessions_today == 0


def test_tick_after_finish_or_reset_is_noop(timer):
    timer.reset(1)
    timer.start()
    timer.tick()
    assert timer.tick() is False
    assert timer.completed_focus_sessions_today == 1

    timer.reset(5)
    assert timer.tick() is False
    assert timer.time_remaining == 5


def test_start_at_zero_refuses(timer):
    timer.reset(0)
    assert timer.start() is False
    assert timer.is_running is False
    assert timer.progress == 0


def test_progress_and_display(timer):
    timer.reset(120)
    timer.start()
    for _ in range(30):
        timer.tick()
    assert timer.progress == pytest.approx(0.25)
    assert timer.display == "01:30"


def test_toggle(timer):
    assert timer.toggle() is True
    assert timer.is_running
    assert timer.toggle() is False
    assert not timer.is_running


def test_listeners_get_finished_mode(timer):
    seen = []
    timer.add_completion_listener(lambda mode, t: seen.append((mode, t.time_remaining)))
    timer.reset(2)
    timer.start()
    timer.tick()
    timer.tick()
    assert seen == [("focus", 0)]


def test_suggest_next_mode(clock):
    t = FocusTimer(PomodoroConfig(long_break_interval=2), clock)
    assert t.suggest_next_mode() == "short_break"
    t.state.completed_focus_sessions_today = 1
    assert t.suggest_next_mode() == "short_break"
    t.state.completed_focus_sessions_today = 2
    assert t.suggest_next_mode() == "long_break"
    t.set_mode("long_break")
    assert t.suggest_next_mode() == "focus"


def test_session_counter_rolls_over_at_midnight(timer, clock):
    timer.reset(1)
    timer.start()
    timer.tick()
    assert timer.completed_focus_sessions_today == 1

    clock.advance(days=1)
    assert timer.completed_focus_sessions_today == 0
    timer.reset(1)
    timer.start()
    timer.tick()
    assert timer.completed_focus_sessions_today == 1


def test_current_task_is_weak_reference(timer):
    timer.set_current_task("deleted-task")
    timer.reset(1)
    timer.start()
    timer.tick()
    assert timer.state.current_task_id == "deleted-task"


def test_reading_session_count_does_not_change_state(timer, clock):
    timer.reset(1)
    timer.start()
    timer.tick()
    clock.advance(days=1)
    assert timer.completed_focus_sessions_today == 0
    assert timer.state.completed_focus_sessions_today == 1
    assert timer.state.sessions_day == "2026-02-11"


def test_suggest_next_mode_ignores_yesterdays_sessions(clock):
    t = FocusTimer(PomodoroConfig(long_break_interval=2), clock)
    t.state.completed_focus_sessions_today = 2
    assert t.suggest_next_mode() == "long_break"
    clock.advance(days=1)
    assert t.suggest_next_mode() == "short_break"

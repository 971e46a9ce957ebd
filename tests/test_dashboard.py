"""Tests for core/dashboard.py: home screen projection."""

from core.dashboard import build_dashboard


def test_empty_dashboard(engine):
    dash = build_dashboard(engine)
    assert dash["date"] == "2026-02-11"
    assert dash["tasks"] == {"total": 0, "done": 0, "progress_pct": 0.0}
    assert set(dash["quadrants"]) == {
        "urgent-important",
        "not-urgent-important",
        "urgent-not-important",
        "not-urgent-not-important",
    }
    assert dash["habits"] == []
    assert dash["level"]["level"] == 1
    assert dash["level"]["title"] == "Beginner"
    assert dash["points"] == {"total": 0, "spendable": 0}
    assert dash["timer"]["display"] == "25:00"
    assert dash["timer"]["running"] is False


def test_dashboard_reflects_state(engine, clock):
    a = engine.tasks.add_task("Ship it", quadrant="urgent-important", points_reward=350)
    engine.tasks.add_task("Later")
    engine.tasks.add_task("Tomorrow", date="2026-02-12")
    engine.complete_task(a.id)
    habit = engine.habits.add_habit("Read", icon="📖")
    engine.habits.log_completion(habit.id)
    engine.points.add_reward("Coffee", 100)
    engine.redeem_reward(engine.points.rewards[0].id)

    dash = build_dashboard(engine)
    assert dash["tasks"] == {"total": 2, "done": 1, "progress_pct": 50.0}
    assert [t["title"] for t in dash["quadrants"]["urgent-important"]] == ["Ship it"]
    assert [t["title"] for t in dash["quadrants"]["not-urgent-important"]] == ["Later"]
    assert dash["habits"][0]["doneToday"] is True
    assert dash["habits"][0]["currentStreak"] == 1
    assert dash["level"]["level"] == 3
    assert dash["level"]["title"] == "Apprentice"
    assert dash["level"]["progressPct"] == 17
    assert dash["points"] == {"total": 350, "spendable": 250}


def test_dashboard_follows_clock_across_midnight(engine, clock):
    engine.tasks.add_task("Today only")
    clock.advance(days=1)
    dash = build_dashboard(engine)
    assert dash["date"] == "2026-02-12"
    assert dash["tasks"]["total"] == 0

"""Tests for core/leveling.py."""

from core.leveling import LEVEL_THRESHOLDS, calculate_level, level_progress, level_title


def _span(level: int) -> int:
    if level < len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level] - LEVEL_THRESHOLDS[level - 1]
    return 1000


def test_zero_points_is_level_one():
    lvl = calculate_level(0)
    assert lvl.level == 1
    assert lvl.current_points == 0
    assert lvl.points_to_next_level == 100


def test_exact_threshold_enters_next_level():
    lvl = calculate_level(100)
    assert lvl.level == 2
    assert lvl.current_points == 0
    assert lvl.points_to_next_level == 200


def test_mid_level():
    lvl = calculate_level(350)
    assert lvl.level == 3
    assert lvl.current_points == 50
    assert lvl.points_to_next_level == 250


def test_past_table_grows_by_fixed_step():
    lvl = calculate_level(5200)
    assert lvl.level == 10
    assert lvl.current_points == 0
    assert lvl.points_to_next_level == 1000

    lvl = calculate_level(9000)
    assert lvl.level == 13
    assert lvl.current_points == 800
    assert lvl.points_to_next_level == 200


def test_negative_points_clamped():
    lvl = calculate_level(-50)
    assert lvl.level == 1
    assert lvl.total_points == 0
    assert lvl.current_points == 0


def test_level_span_and_monotonic():
    previous = 0
    for p in range(0, 6500, 7):
        lvl = calculate_level(p)
        assert lvl.level >= previous
        previous = lvl.level
        assert lvl.current_points + lvl.points_to_next_level == _span(lvl.level)
        assert lvl.points_to_next_level > 0


def test_level_title():
    assert level_title(1) == "Beginner"
    assert level_title(10) == "Awakened"
    assert level_title(11) == "Unknown"


def test_level_progress():
    assert level_progress(calculate_level(0)) == 0
    assert level_progress(calculate_level(200)) == 50
    assert level_progress(calculate_level(350)) == 17

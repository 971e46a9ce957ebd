"""Shared test fixtures for discipline engine tests."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

from core.models import AppConfig, PomodoroConfig
from core.storage import MemoryBackend
from core.workspace import FixedClock


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary data root with a config.yaml."""
    root = tmp_path / "discipline"
    (root / "data").mkdir(parents=True)

    config = {
        "timezone": "UTC",
        "user_name": "Sam",
        "pomodoro": {
            "focus_duration": 25,
            "short_break_duration": 5,
            "long_break_duration": 15,
            "long_break_interval": 4,
            "auto_start_next": False,
            "sound_enabled": True,
        },
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    os.environ["DISCIPLINE_ROOT"] = str(root)
    yield root
    if "DISCIPLINE_ROOT" in os.environ:
        del os.environ["DISCIPLINE_ROOT"]


@pytest.fixture
def clock() -> FixedClock:
    """Wednesday 2026-02-11, 09:00 UTC."""
    return FixedClock(datetime(2026, 2, 11, 9, 0, tzinfo=ZoneInfo("UTC")))


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(pomodoro=PomodoroConfig(focus_duration=25, short_break_duration=5, long_break_duration=15))


@pytest.fixture
def engine(workspace, backend, clock, config):
    from core.engine import Engine

    eng = Engine(root=workspace, backend=backend, clock=clock, config=config)
    yield eng
    eng.close()
